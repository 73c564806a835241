"""
Shared test fixtures and configuration.
"""

import pytest
import os
from typing import List, Optional

# Set test environment variables before importing app modules
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("LOCAL_STORAGE_PATH", "/tmp/fittrack_test_data")
os.environ.setdefault("LOG_FILE_ENABLED", "false")
os.environ.setdefault("LLM_API_KEY", "")
os.environ.setdefault("GEMINI_API_KEY", "")
os.environ.setdefault("GNEWS_API_KEY", "")

from fastapi.testclient import TestClient

from fittrack.config import Settings
from fittrack.llm.base import LLMMessage, LLMProvider, LLMResponse
from fittrack.main import create_app
from fittrack.storage import LocalStorage, RecordStore, UserStorage


class FakeLLMProvider(LLMProvider):
    """Scripted provider: returns queued replies (or raises queued errors) in order."""

    name = "fake"

    def __init__(self, replies: Optional[List] = None):
        super().__init__(api_key="test-key", model="fake-model")
        self.replies = list(replies or [])
        self.prompts: List[str] = []

    async def chat_completion(self, messages: List[LLMMessage], temperature=None, max_tokens=None, **kwargs) -> LLMResponse:
        self.prompts.append(messages[-1].content)
        reply = self.replies.pop(0) if self.replies else "OK"
        if isinstance(reply, Exception):
            raise reply
        return LLMResponse(content=reply, model=self.model)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(str(tmp_path / "data"))


@pytest.fixture
def store(storage):
    return RecordStore(storage)


@pytest.fixture
def users(storage):
    return UserStorage(storage)


@pytest.fixture
def fake_llm():
    return FakeLLMProvider()


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        local_storage_path=str(tmp_path / "data"),
        log_file_enabled=False,
        log_api_requests=False,
    )


@pytest.fixture
def app(test_settings, storage, fake_llm):
    return create_app(settings=test_settings, storage=storage, llm_provider=fake_llm, news_client=None)


@pytest.fixture
def client(app):
    return TestClient(app)


def register_and_login(client, username: str, password: str = "testpass123") -> dict:
    """Register a user through the API and return bearer auth headers."""
    response = client.post("/auth/register", json={"username": username, "password": password})
    assert response.status_code == 201, response.text
    response = client.post("/auth/login", data={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def auth_headers(client):
    return register_and_login(client, "testuser")


@pytest.fixture
def other_auth_headers(client):
    return register_and_login(client, "otheruser")


@pytest.fixture
def login(client):
    """Factory fixture: login("name") registers a user and returns auth headers."""
    return lambda username: register_and_login(client, username)
