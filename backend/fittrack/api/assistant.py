"""
Assistant API endpoints - chat contexts, messages and LLM queries.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Response, status

from .deps import get_assistant_service, to_http_exception
from ..core.assistant import AssistantService
from ..core.errors import FitTrackError, UpstreamError
from ..models import (
    AssistantQuery, AssistantReply, ChatContext, ChatContextCreate, ChatMessage, ChatMessageCreate,
)
from ..utils.auth import get_current_user_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/assistant", tags=["assistant"])


@router.get("/contexts", response_model=List[ChatContext])
async def list_contexts(
    user_id: str = Depends(get_current_user_id),
    assistant: AssistantService = Depends(get_assistant_service),
):
    try:
        return await assistant.list_contexts(user_id)
    except FitTrackError as e:
        raise to_http_exception(e) from e


@router.post("/contexts", response_model=ChatContext, status_code=status.HTTP_201_CREATED)
async def create_context(
    context: ChatContextCreate,
    user_id: str = Depends(get_current_user_id),
    assistant: AssistantService = Depends(get_assistant_service),
):
    try:
        return await assistant.create_context(user_id, context)
    except FitTrackError as e:
        raise to_http_exception(e) from e


@router.delete("/contexts/{context_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_context(
    context_id: str,
    user_id: str = Depends(get_current_user_id),
    assistant: AssistantService = Depends(get_assistant_service),
):
    """Delete a context together with its messages."""
    try:
        await assistant.delete_context(user_id, context_id)
    except FitTrackError as e:
        raise to_http_exception(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/contexts/{context_id}/messages", response_model=List[ChatMessage])
async def list_messages(
    context_id: str,
    user_id: str = Depends(get_current_user_id),
    assistant: AssistantService = Depends(get_assistant_service),
):
    try:
        return await assistant.list_messages(user_id, context_id)
    except FitTrackError as e:
        raise to_http_exception(e) from e


@router.post("/contexts/{context_id}/messages", response_model=ChatMessage, status_code=status.HTTP_201_CREATED)
async def add_message(
    context_id: str,
    message: ChatMessageCreate,
    user_id: str = Depends(get_current_user_id),
    assistant: AssistantService = Depends(get_assistant_service),
):
    try:
        return await assistant.add_message(user_id, context_id, message)
    except FitTrackError as e:
        raise to_http_exception(e) from e


@router.post("/query", response_model=AssistantReply)
async def query_assistant(
    request: AssistantQuery,
    user_id: str = Depends(get_current_user_id),
    assistant: AssistantService = Depends(get_assistant_service),
):
    """
    Ask the assistant a question.

    The prompt carries the user's profile, recent logs, medical history and,
    when context_id is given, the recent conversation of that context. On
    success the question and the reply are appended to the context.

    Raises:
        HTTPException: 404 for an unknown context, 502/504 when the LLM fails
    """
    try:
        return await assistant.ask(user_id, request.query, request.context_id)
    except UpstreamError as e:
        logger.error(
            f"Assistant query failed: {e}",
            extra={"extra_fields": {
                "user_id": user_id,
                "context_id": request.context_id,
                "error_type": type(e).__name__,
            }}
        )
        raise to_http_exception(e) from e
    except FitTrackError as e:
        raise to_http_exception(e) from e
