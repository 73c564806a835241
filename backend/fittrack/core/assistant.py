"""
Assistant - chat contexts, prompt building and the LLM round trip.

The prompt is a single text block: profile, the last few rows of each log,
medical history, recent conversation (oldest first) and the new query.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from .errors import InvalidArgument, NotFound, UpstreamError
from ..llm.base import LLMProvider
from ..models.chat import ChatContext, ChatContextCreate, ChatMessage, ChatMessageCreate, AssistantReply, Sender
from ..storage.record_store import RecordStore
from ..storage.user_storage import UserStorage

logger = logging.getLogger(__name__)

DEFAULT_LOG_ROWS = 5
DEFAULT_HISTORY_MESSAGES = 10
DEFAULT_MAX_PROMPT_CHARS = 12000

LOG_TABLES = ("calories", "sleep", "weight", "nutrition")

PROFILE_LABELS = [
    ("full_name", "Name"),
    ("gender", "Gender"),
    ("dob", "Date of birth"),
    ("height_cm", "Height (cm)"),
    ("weight_kg", "Weight (kg)"),
    ("target_weight_kg", "Target weight (kg)"),
    ("activity_level", "Activity level"),
    ("sleep_hours", "Usual sleep (hours)"),
]

SYSTEM_PREAMBLE = (
    "You are a personal health and fitness assistant. "
    "Use the user's profile, logs and medical history below to answer."
)

RESPONSE_GUIDANCE = (
    "Please ensure your response is precise and concise, "
    "medium size answers in bullet points are preferred."
)

TRUNCATION_MARKER = "... (truncated)"


def _format_row(table: str, row: Any) -> str:
    if table == "calories":
        return (f"- {row.date}: consumed {row.calories_consumed} kcal, "
                f"burned {row.calories_burned} kcal (net {row.net})")
    if table == "sleep":
        return f"- {row.date}: {row.duration_hours} h ({row.quality.value})"
    if table == "weight":
        return f"- {row.date}: {row.weight} kg"
    if table == "nutrition":
        return (f"- {row.date} {row.meal.value}: {', '.join(row.food_items)} "
                f"({row.calories:g} kcal, protein {row.protein:g}g, carbs {row.carbs:g}g, "
                f"fat {row.fat:g}g, fiber {row.fiber:g}g)")
    if table == "medical":
        details = [f"diagnosed {row.diagnosis_date}"]
        if row.treatment:
            details.append(f"treatment: {row.treatment}")
        if row.medications:
            details.append(f"medications: {row.medications}")
        return f"- {row.condition} ({'; '.join(details)})"
    return f"- {row}"


def format_profile(profile: Optional[Dict[str, Any]]) -> str:
    lines = ["## User Profile"]
    for key, label in PROFILE_LABELS:
        value = (profile or {}).get(key)
        if value not in (None, ""):
            lines.append(f"- {label}: {value}")
    if len(lines) == 1:
        lines.append("- (no profile information)")
    return "\n".join(lines)


def format_logs(logs: Dict[str, Sequence[Any]], log_rows: int = DEFAULT_LOG_ROWS) -> str:
    """Last `log_rows` rows of each log table, then the full medical history."""
    titles = {
        "calories": "Recent Calorie Logs",
        "sleep": "Recent Sleep Logs",
        "weight": "Recent Weight Logs",
        "nutrition": "Recent Nutrition Logs",
    }
    blocks = []
    for table in LOG_TABLES:
        rows = list(logs.get(table) or [])[-log_rows:] if log_rows > 0 else []
        body = "\n".join(_format_row(table, row) for row in rows) or "- (none)"
        blocks.append(f"## {titles[table]}\n{body}")

    medical = list(logs.get("medical") or [])
    body = "\n".join(_format_row("medical", row) for row in medical) or "- (none)"
    blocks.append(f"## Medical History\n{body}")
    return "\n\n".join(blocks)


def format_history(history: Sequence[ChatMessage], limit: int = DEFAULT_HISTORY_MESSAGES) -> List[str]:
    """Last `limit` messages, oldest first, one line each."""
    recent = sorted(history, key=lambda m: m.created_at)[-limit:] if limit > 0 else []
    return [
        f"{'User' if m.sender == Sender.USER else 'Assistant'}: {m.text}"
        for m in recent
    ]


def build_prompt(
    profile: Optional[Dict[str, Any]],
    logs: Dict[str, Sequence[Any]],
    history: Sequence[ChatMessage],
    query: str,
    log_rows: int = DEFAULT_LOG_ROWS,
    history_messages: int = DEFAULT_HISTORY_MESSAGES,
    max_chars: Optional[int] = DEFAULT_MAX_PROMPT_CHARS,
) -> str:
    """
    Compose the assistant prompt.

    When the prompt exceeds max_chars, the oldest conversation lines are
    dropped first; if that is not enough the log section is cut from the
    end. The preamble, profile and query are never shortened.

    Args:
        profile: User account/profile dict
        logs: Rows per table ("calories", "sleep", "weight", "nutrition", "medical"), oldest first
        history: Chat messages of the current context
        query: The user's new question
        log_rows: Rows kept per log table
        history_messages: Messages kept from history
        max_chars: Length bound, None for unbounded

    Returns:
        str: Prompt text
    """
    head = f"{SYSTEM_PREAMBLE}\n\n{format_profile(profile)}"
    context = format_logs(logs, log_rows)
    history_lines = format_history(history, history_messages)
    tail = f"## Query\n{query}\n\n{RESPONSE_GUIDANCE}"

    def render() -> str:
        parts = [head, context]
        if history_lines:
            parts.append("## Conversation History\n" + "\n".join(history_lines))
        parts.append(tail)
        return "\n\n".join(parts)

    prompt = render()
    if max_chars is None or len(prompt) <= max_chars:
        return prompt

    while history_lines and len(prompt) > max_chars:
        history_lines.pop(0)
        prompt = render()

    if len(prompt) > max_chars:
        overflow = len(prompt) - max_chars + len(TRUNCATION_MARKER)
        keep = max(len(context) - overflow, 0)
        context = context[:keep] + TRUNCATION_MARKER
        prompt = render()

    logger.info(
        "Assistant prompt truncated",
        extra={"extra_fields": {"max_chars": max_chars, "length": len(prompt)}}
    )
    return prompt


class AssistantService:
    """Chat contexts and assistant queries for one store / provider pair."""

    def __init__(
        self,
        store: RecordStore,
        users: UserStorage,
        llm_provider: Optional[LLMProvider],
        log_rows: int = DEFAULT_LOG_ROWS,
        history_messages: int = DEFAULT_HISTORY_MESSAGES,
        max_prompt_chars: Optional[int] = DEFAULT_MAX_PROMPT_CHARS,
    ):
        self.store = store
        self.users = users
        self.llm_provider = llm_provider
        self.log_rows = log_rows
        self.history_messages = history_messages
        self.max_prompt_chars = max_prompt_chars

    # Contexts

    async def list_contexts(self, user_id: str) -> List[ChatContext]:
        return await self.store.list("chat_contexts", user_id)

    async def create_context(self, user_id: str, context: ChatContextCreate) -> ChatContext:
        if context.id:
            try:
                await self.store.get("chat_contexts", user_id, context.id)
            except NotFound:
                pass
            else:
                raise InvalidArgument(f"Context {context.id} already exists")
        return await self.store.insert("chat_contexts", user_id, context.model_dump(exclude_none=True))

    async def delete_context(self, user_id: str, context_id: str) -> None:
        """Delete a context and all of its messages."""
        await self.store.delete("chat_contexts", user_id, context_id)
        removed = await self.store.delete_where("chat_messages", user_id, context_id=context_id)
        logger.info(f"Deleted context {context_id} with {removed} message(s)")

    # Messages

    async def list_messages(self, user_id: str, context_id: str) -> List[ChatMessage]:
        """Messages of a context, oldest first. NotFound for foreign contexts."""
        await self.store.get("chat_contexts", user_id, context_id)
        messages = await self.store.list("chat_messages", user_id, context_id=context_id)
        return sorted(messages, key=lambda m: m.created_at)

    async def add_message(self, user_id: str, context_id: str, message: ChatMessageCreate) -> ChatMessage:
        await self.store.get("chat_contexts", user_id, context_id)
        return await self.store.insert("chat_messages", user_id, {
            "context_id": context_id,
            "sender": message.sender,
            "text": message.text,
        })

    # Queries

    async def gather_logs(self, user_id: str) -> Dict[str, List[Any]]:
        logs = {table: await self.store.list(table, user_id) for table in LOG_TABLES}
        logs["medical"] = await self.store.list("medical", user_id)
        return logs

    async def send_query(self, prompt: str) -> str:
        """
        Forward a prompt to the LLM and return its raw text.

        Raises:
            UpstreamError: No provider configured or the call failed
            UpstreamTimeoutError: The call timed out
        """
        if self.llm_provider is None:
            raise UpstreamError("LLM provider not configured")
        return await self.llm_provider.generate(prompt)

    async def ask(self, user_id: str, query: str, context_id: Optional[str] = None) -> AssistantReply:
        """
        Build the prompt for user_id, query the LLM and, with a context,
        store both the question and the reply.
        """
        history: List[ChatMessage] = []
        if context_id:
            history = await self.list_messages(user_id, context_id)

        profile = await self.users.get_user(user_id)
        prompt = build_prompt(
            profile,
            await self.gather_logs(user_id),
            history,
            query,
            log_rows=self.log_rows,
            history_messages=self.history_messages,
            max_chars=self.max_prompt_chars,
        )

        response = await self.send_query(prompt)

        if context_id:
            await self.add_message(user_id, context_id, ChatMessageCreate(sender=Sender.USER, text=query))
            await self.add_message(user_id, context_id, ChatMessageCreate(sender=Sender.ASSISTANT, text=response))

        return AssistantReply(response=response, context_id=context_id)
