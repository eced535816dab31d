"""Shared test fixtures and configuration for the test suite."""

import sys
from pathlib import Path
from typing import Callable, Dict, Generator
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest
from fastapi.testclient import TestClient

# Add the parent directory to the path for imports
sys.path.append(str(Path(__file__).parent.parent))

from taskmate.config import Settings
from taskmate.deps import get_suggestion_service
from taskmate.main import create_app
from taskmate.services.auth_service import AuthService
from taskmate.services.suggestion_service import SuggestionService
from taskmate.services.task_service import TaskService
from taskmate.storage import TaskStore, UserStore

TEST_SECRET = "test-secret-key-that-is-long-enough-for-hs256"


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings without file logging."""
    return Settings(
        jwt_secret=TEST_SECRET,
        openai_api_key="test-api-key",
        model_name="gpt-4o-mini",
        log_level="DEBUG",
        log_dir=None,
        environment="test",
    )


@pytest.fixture
def user_store() -> UserStore:
    return UserStore()


@pytest.fixture
def task_store() -> TaskStore:
    return TaskStore()


@pytest.fixture
def auth_service(test_settings, user_store) -> AuthService:
    """Create an auth service instance for testing."""
    return AuthService(test_settings, user_store)


@pytest.fixture
def task_service(task_store) -> TaskService:
    """Create a task service instance for testing."""
    return TaskService(task_store)


@pytest.fixture
def mock_llm() -> MagicMock:
    """Chat model double whose ``ainvoke`` returns a JSON array reply."""
    llm = MagicMock()
    llm.ainvoke = AsyncMock(return_value=MagicMock(content='["Step 1", "Step 2", "Step 3"]'))
    return llm


@pytest.fixture
def suggestion_service(test_settings, mock_llm) -> SuggestionService:
    """Create a suggestion service bound to the mocked chat model."""
    return SuggestionService(test_settings, llm=mock_llm)


def make_rate_limit_error() -> openai.RateLimitError:
    """Build the error the OpenAI client raises on HTTP 429."""
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    response = httpx.Response(429, request=request)
    return openai.RateLimitError("Rate limit reached", response=response, body=None)


@pytest.fixture
def client(test_settings) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI app."""
    app = create_app(test_settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def suggestion_client(client, suggestion_service) -> TestClient:
    """Test client whose suggestion endpoint uses the mocked chat model."""
    client.app.dependency_overrides[get_suggestion_service] = lambda: suggestion_service
    yield client
    client.app.dependency_overrides.pop(get_suggestion_service, None)


@pytest.fixture
def register_user(client) -> Callable[..., Dict[str, str]]:
    """Register a user through the API and return its auth payload."""
    def _register(username: str = "alice", email: str = None, password: str = "pw123") -> Dict[str, str]:
        response = client.post("/api/auth/register", json={
            "username": username,
            "email": email or f"{username}@x.com",
            "password": password,
        })
        assert response.status_code == 200, response.text
        return response.json()

    return _register


@pytest.fixture
def auth_headers(register_user) -> Dict[str, str]:
    """Headers authenticating as a freshly registered user."""
    return {"x-auth-token": register_user()["token"]}


# Test data fixtures
@pytest.fixture
def sample_task_data():
    """Sample task data for testing."""
    return {"title": "Test Task", "description": "This is a test task description"}
