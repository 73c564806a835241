"""
Chat Models - Assistant conversation contexts and their messages.
"""

from typing import Optional
from pydantic import BaseModel, Field

from .tracking import StoredRecord, _CaseInsensitiveEnum


class Sender(_CaseInsensitiveEnum):
    USER = "user"
    ASSISTANT = "assistant"


class ChatContextCreate(BaseModel):
    """A named conversation thread. The client may propose its own id."""
    name: str = Field(..., min_length=1, max_length=200)
    id: Optional[str] = None


class ChatContext(StoredRecord):
    name: str


class ChatMessageCreate(BaseModel):
    sender: Sender
    text: str = Field(..., min_length=1)


class ChatMessage(StoredRecord):
    context_id: str
    sender: Sender
    text: str


class AssistantQuery(BaseModel):
    """Question for the assistant; with a context_id the exchange is stored there."""
    query: str = Field(..., min_length=1)
    context_id: Optional[str] = None


class AssistantReply(BaseModel):
    response: str
    context_id: Optional[str] = None
