"""Pytest configuration and fixtures."""

import asyncio
import os
import tempfile
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from constitution_chat.db.database import close_database, init_database
from constitution_chat.llm.chat import manager as manager_module
from constitution_chat.llm.chat.manager import ChatSessionManager
from constitution_chat.llm.chat.models import ConversationTurn
from constitution_chat.llm.chat.rate_limiter import RateLimiter
from constitution_chat.main import app


class FakeReplyClient:
    """Stands in for GeminiClient and records every request."""

    def __init__(
        self,
        replies: list[str] | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
        gate: asyncio.Event | None = None,
    ):
        self.replies = list(replies or [])
        self.error = error
        self.delay = delay
        self.gate = gate
        self.calls: list[list[ConversationTurn]] = []
        self.system_instructions: list[str] = []

    async def generate_reply(
        self,
        system_instruction: str,
        turns: list[ConversationTurn],
    ) -> str:
        self.system_instructions.append(system_instruction)
        self.calls.append(list(turns))
        if self.gate is not None:
            await self.gate.wait()
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if self.replies:
            return self.replies.pop(0)
        return f"Answer {len(self.calls)}"


class FakeClock:
    """Manually advanced clock for RateLimiter."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
async def setup_test_db():
    """Set up a test database for each test."""
    # Create a temporary database file
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = f.name

    # Initialize the database
    await init_database(db_path)

    yield

    # Clean up
    await close_database()
    os.unlink(db_path)


@pytest.fixture(autouse=True)
def no_api_key(monkeypatch):
    """Keep tests from picking up a real credential."""
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)


@pytest.fixture
def fake_client() -> FakeReplyClient:
    return FakeReplyClient()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rate_limiter(clock) -> RateLimiter:
    return RateLimiter(clock=clock)


@pytest.fixture
def session_manager(monkeypatch, fake_client, rate_limiter) -> ChatSessionManager:
    """Install a session manager backed by the fake client."""
    manager = ChatSessionManager(client=fake_client, rate_limiter=rate_limiter)
    monkeypatch.setattr(manager_module, "_manager", manager)
    return manager


@pytest.fixture
async def client(session_manager) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


@pytest.fixture
def make_client():
    """Factory for fake clients with custom behaviour."""
    return FakeReplyClient
