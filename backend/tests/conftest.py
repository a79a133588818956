"""
EchoNote Backend — Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets its own SQLite file database (aiosqlite), an app built
       by ``create_app()`` around a canned LLM provider, and an httpx
       AsyncClient that talks to the app in-process.

Fixture Hierarchy (all function-scoped):
    ├── settings:      Settings pointing at tmp_path/test.db, fast bcrypt
    ├── fake_llm:      FakeLLM recording prompts, returning canned text
    ├── app:           FastAPI app with tables created
    ├── context:       the app's AppContext (services, token signer)
    ├── db_session:    AsyncSession on the same database, for service tests
    ├── test_client:   HTTPX AsyncClient over ASGITransport
    └── auth_headers:  Bearer header for a freshly signed-up user
"""

import os
from typing import AsyncGenerator, Dict, List, Optional, Tuple

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# echonote.main builds a module-level app from the environment on import
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret-not-real")
os.environ["GEMINI_API_KEY"] = ""
os.environ["LOG_LEVEL"] = "WARNING"

from echonote.config import Settings  # noqa: E402
from echonote.exceptions import AIServiceUnavailableError  # noqa: E402
from echonote.main import create_app  # noqa: E402
from echonote.services.llm_base import LLMService  # noqa: E402

TEST_PASSWORD = "correct horse battery staple"


class FakeLLM(LLMService):
    """
    Canned LLMService.

    ``reply`` is returned for every call; set ``error`` to make the next
    calls raise it. Prompts and audio payloads are recorded for assertions.
    """

    def __init__(self, configured: bool = True, reply: str = "canned model reply"):
        self.configured = configured
        self.reply = reply
        self.error: Optional[Exception] = None
        self.prompts: List[str] = []
        self.audio: List[Tuple[bytes, str, str]] = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    def _check(self) -> None:
        if not self.configured:
            raise AIServiceUnavailableError()
        if self.error is not None:
            raise self.error

    async def generate_text(self, prompt: str) -> str:
        self._check()
        self.prompts.append(prompt)
        return self.reply

    async def transcribe_audio(self, audio: bytes, mime_type: str, prompt: str) -> str:
        self._check()
        self.audio.append((audio, mime_type, prompt))
        return self.reply

    async def health_check(self) -> bool:
        return self.configured


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def settings(tmp_path) -> Settings:
    """Explicit settings; ``_env_file=None`` keeps a developer's .env out of tests."""
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        jwt_secret="test-secret-not-real",
        password_hash_rounds=4,
        gemini_api_key="",
        log_level="WARNING",
    )


@pytest.fixture
def fake_llm() -> FakeLLM:
    return FakeLLM()


@pytest_asyncio.fixture
async def app(settings, fake_llm):
    """
    Application under test with its tables created.

    ASGITransport does not run the lifespan, so the schema is created here.
    """
    application = create_app(settings, llm_service=fake_llm)
    database = application.state.context.database
    await database.create_all()
    yield application
    await database.dispose()


@pytest.fixture
def context(app):
    return app.state.context


@pytest_asyncio.fixture
async def db_session(context) -> AsyncGenerator:
    """A session on the test database that commits when the test body succeeds."""
    async with context.database.session() as session:
        yield session


@pytest_asyncio.fixture
async def test_client(app) -> AsyncGenerator[AsyncClient, None]:
    """
    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ══════════════════════════════════════════════════════════════════════════
# Account helpers
# ══════════════════════════════════════════════════════════════════════════

async def signup(client: AsyncClient, email: str, name: str = "Test User", password: str = TEST_PASSWORD):
    return await client.post("/api/signup", json={"name": name, "email": email, "password": password})


async def login_headers(client: AsyncClient, email: str, password: str = TEST_PASSWORD) -> Dict[str, str]:
    response = await client.post("/api/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


async def register(client: AsyncClient, email: str, name: str = "Test User") -> Dict[str, str]:
    """Signs up ``email`` and returns its bearer header."""
    response = await signup(client, email, name=name)
    assert response.status_code == 201, response.text
    return await login_headers(client, email)


@pytest_asyncio.fixture
async def auth_headers(test_client) -> Dict[str, str]:
    return await register(test_client, "alice@echonote.io", name="Alice")


@pytest_asyncio.fixture
async def other_headers(test_client) -> Dict[str, str]:
    return await register(test_client, "bob@echonote.io", name="Bob")


async def create_note(client: AsyncClient, headers: Dict[str, str], **body) -> dict:
    body.setdefault("title", "Untitled")
    response = await client.post("/api/notes", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()
