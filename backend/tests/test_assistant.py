"""
Tests for the assistant: prompt composition, truncation, contexts and queries.
"""

from datetime import datetime, timedelta, timezone

import pytest

from fittrack.core.assistant import (
    AssistantService, TRUNCATION_MARKER, build_prompt, format_history,
)
from fittrack.core.errors import InvalidArgument, NotFound, UpstreamError, UpstreamTimeoutError
from fittrack.models import (
    CalorieEntry, ChatContextCreate, ChatMessage, ChatMessageCreate, MedicalCondition, WeightEntry,
)

from conftest import FakeLLMProvider

USER = "user-1"
T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)

PROFILE = {"full_name": "Alex Doe", "gender": "female", "height_cm": 168, "weight_kg": 61.5}


def messages(count):
    return [
        ChatMessage(
            user_id=USER, context_id="ctx", sender="user" if i % 2 == 0 else "assistant",
            text=f"message {i}", created_at=T0 + timedelta(minutes=i),
        )
        for i in range(count)
    ]


def calorie_rows(count):
    return [
        CalorieEntry(user_id=USER, date=(T0 + timedelta(days=i)).date(), calories_consumed=1000 + i, calories_burned=100)
        for i in range(count)
    ]


class TestBuildPrompt:

    def test_contains_profile_logs_history_and_query(self):
        logs = {
            "calories": calorie_rows(2),
            "weight": [WeightEntry(user_id=USER, date="2024-01-02", weight=61.5)],
            "medical": [MedicalCondition(user_id=USER, condition="Asthma", diagnosis_date="2019-04-01", medications="Albuterol")],
        }
        prompt = build_prompt(PROFILE, logs, messages(2), "How am I doing?")
        assert "Alex Doe" in prompt
        assert "Height (cm): 168" in prompt
        assert "consumed 1001 kcal" in prompt
        assert "61.5 kg" in prompt
        assert "Asthma" in prompt and "Albuterol" in prompt
        assert "User: message 0" in prompt
        assert "Assistant: message 1" in prompt
        assert prompt.rstrip().endswith("bullet points are preferred.")
        assert "How am I doing?" in prompt

    def test_only_last_five_rows_per_log(self):
        prompt = build_prompt(PROFILE, {"calories": calorie_rows(8)}, [], "q")
        assert "consumed 1002 kcal" not in prompt
        for i in range(3, 8):
            assert f"consumed {1000 + i} kcal" in prompt

    def test_history_limited_to_last_ten_oldest_first(self):
        lines = format_history(list(reversed(messages(15))))
        assert len(lines) == 10
        assert lines[0] == "Assistant: message 5"
        assert lines[-1] == "User: message 14"

    def test_missing_profile_and_logs(self):
        prompt = build_prompt(None, {}, [], "hello")
        assert "(no profile information)" in prompt
        assert "## Medical History\n- (none)" in prompt

    def test_drops_oldest_history_first_when_too_long(self):
        history = [
            ChatMessage(user_id=USER, context_id="ctx", sender="user", text=f"{i}-" + "x" * 200,
                        created_at=T0 + timedelta(minutes=i))
            for i in range(10)
        ]
        unbounded = build_prompt(PROFILE, {}, history, "query", max_chars=None)
        prompt = build_prompt(PROFILE, {}, history, "query", max_chars=len(unbounded) - 300)
        assert len(prompt) <= len(unbounded) - 300
        assert "0-xxx" not in prompt
        assert "9-xxx" in prompt
        assert "Alex Doe" in prompt
        assert "query" in prompt

    def test_cuts_logs_when_history_is_not_enough(self):
        logs = {"medical": [
            MedicalCondition(user_id=USER, condition=f"Condition {i} " + "y" * 300, diagnosis_date="2020-01-01")
            for i in range(20)
        ]}
        prompt = build_prompt(PROFILE, logs, messages(3), "my question", max_chars=2000)
        assert len(prompt) <= 2000
        assert TRUNCATION_MARKER in prompt
        assert "Alex Doe" in prompt
        assert "my question" in prompt
        assert "User: message 0" not in prompt


class TestAssistantService:
    """Tests for contexts, messages and the query round trip."""

    @pytest.fixture
    def service(self, store, users, fake_llm):
        return AssistantService(store, users, fake_llm)

    @pytest.mark.asyncio
    async def test_context_lifecycle(self, service, store):
        context = await service.create_context(USER, ChatContextCreate(name="Training"))
        await service.add_message(USER, context.id, ChatMessageCreate(sender="user", text="hi"))
        assert [c.name for c in await service.list_contexts(USER)] == ["Training"]

        await service.delete_context(USER, context.id)
        assert await service.list_contexts(USER) == []
        assert await store.list("chat_messages", USER) == []

    @pytest.mark.asyncio
    async def test_client_supplied_context_id(self, service):
        context = await service.create_context(USER, ChatContextCreate(name="Diet", id="ctx-42"))
        assert context.id == "ctx-42"
        with pytest.raises(InvalidArgument):
            await service.create_context(USER, ChatContextCreate(name="Again", id="ctx-42"))

    @pytest.mark.asyncio
    async def test_foreign_context_is_not_found(self, service):
        context = await service.create_context(USER, ChatContextCreate(name="Mine"))
        with pytest.raises(NotFound):
            await service.list_messages("intruder", context.id)
        with pytest.raises(NotFound):
            await service.add_message("intruder", context.id, ChatMessageCreate(sender="user", text="hey"))

    @pytest.mark.asyncio
    async def test_ask_stores_exchange(self, service, fake_llm, users, store):
        await users.create_user(USER, "alex", "hash", full_name="Alex Doe")
        await store.insert("weight", USER, {"date": "2024-01-01", "weight": 61.5})
        context = await service.create_context(USER, ChatContextCreate(name="Chat"))
        fake_llm.replies = ["- Keep it up"]

        reply = await service.ask(USER, "How is my weight?", context.id)

        assert reply.response == "- Keep it up"
        assert reply.context_id == context.id
        assert "Alex Doe" in fake_llm.prompts[0]
        assert "61.5 kg" in fake_llm.prompts[0]
        stored = await service.list_messages(USER, context.id)
        assert [(m.sender.value, m.text) for m in stored] == [
            ("user", "How is my weight?"),
            ("assistant", "- Keep it up"),
        ]

    @pytest.mark.asyncio
    async def test_ask_includes_previous_messages(self, service, fake_llm):
        context = await service.create_context(USER, ChatContextCreate(name="Chat"))
        fake_llm.replies = ["first answer", "second answer"]
        await service.ask(USER, "first question", context.id)
        await service.ask(USER, "second question", context.id)
        assert "User: first question" in fake_llm.prompts[1]
        assert "Assistant: first answer" in fake_llm.prompts[1]

    @pytest.mark.asyncio
    async def test_failed_query_stores_nothing(self, service, fake_llm):
        context = await service.create_context(USER, ChatContextCreate(name="Chat"))
        fake_llm.replies = [UpstreamTimeoutError("timed out")]
        with pytest.raises(UpstreamTimeoutError):
            await service.ask(USER, "hello?", context.id)
        assert await service.list_messages(USER, context.id) == []

    @pytest.mark.asyncio
    async def test_send_query_without_provider(self, store, users):
        with pytest.raises(UpstreamError):
            await AssistantService(store, users, None).send_query("prompt")

    @pytest.mark.asyncio
    async def test_send_query_returns_raw_text(self, store, users):
        llm = FakeLLMProvider(["raw reply"])
        assert await AssistantService(store, users, llm).send_query("prompt") == "raw reply"
        assert llm.prompts == ["prompt"]


class TestAssistantAPI:

    def test_query_flow(self, client, auth_headers, fake_llm):
        context = client.post("/assistant/contexts", json={"name": "Coach"}, headers=auth_headers).json()
        fake_llm.replies = ["- Drink water"]

        response = client.post("/assistant/query", json={"context_id": context["id"], "query": "Tips?"}, headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == {"response": "- Drink water", "context_id": context["id"]}

        history = client.get(f"/assistant/contexts/{context['id']}/messages", headers=auth_headers).json()
        assert [m["sender"] for m in history] == ["user", "assistant"]

    def test_query_without_context(self, client, auth_headers, fake_llm):
        fake_llm.replies = ["answer"]
        response = client.post("/assistant/query", json={"query": "Hi"}, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["context_id"] is None

    def test_upstream_timeout_is_504(self, client, auth_headers, fake_llm):
        fake_llm.replies = [UpstreamTimeoutError("timed out")]
        response = client.post("/assistant/query", json={"query": "Hi"}, headers=auth_headers)
        assert response.status_code == 504

    def test_upstream_failure_is_502(self, client, auth_headers, fake_llm):
        fake_llm.replies = [UpstreamError("gemini returned HTTP 500")]
        response = client.post("/assistant/query", json={"query": "Hi"}, headers=auth_headers)
        assert response.status_code == 502

    def test_messages_and_delete(self, client, auth_headers, other_auth_headers):
        context = client.post("/assistant/contexts", json={"name": "Log"}, headers=auth_headers).json()
        path = f"/assistant/contexts/{context['id']}/messages"

        response = client.post(path, json={"sender": "user", "text": "note"}, headers=auth_headers)
        assert response.status_code == 201
        assert client.get(path, headers=other_auth_headers).status_code == 404
        assert client.delete(f"/assistant/contexts/{context['id']}", headers=other_auth_headers).status_code == 404

        assert client.delete(f"/assistant/contexts/{context['id']}", headers=auth_headers).status_code == 204
        assert client.get("/assistant/contexts", headers=auth_headers).json() == []
        assert client.get(path, headers=auth_headers).status_code == 404

    def test_unknown_context_is_404(self, client, auth_headers):
        response = client.post("/assistant/query", json={"context_id": "missing", "query": "Hi"}, headers=auth_headers)
        assert response.status_code == 404
