"""Pytest configuration and fixtures."""

import os
from unittest.mock import patch

import pytest

from app.core.auth_middleware import AuthContext, require_auth
from app.core.config import get_settings
from app.main import app
from tests.fakes.fake_db import FakeHypothesisStore
from tests.fixtures_hypotheses import TEST_USER_ID, make_project


@pytest.fixture(scope="session", autouse=True)
def setup_test_env():
    """Set up test environment variables."""
    os.environ["SUPABASE_URL"] = "https://test.supabase.co"
    os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "test-key"
    os.environ["HYPOTHESIS_TRACKER_ENV"] = "test"
    os.environ.pop("LLM_API_KEY", None)
    get_settings.cache_clear()


@pytest.fixture
def fake_store():
    """In-memory hypothesis store enforcing the version uniqueness constraint."""
    return FakeHypothesisStore()


@pytest.fixture
def authed_app():
    """The FastAPI app with authentication resolved to a fixed test user."""
    app.dependency_overrides[require_auth] = lambda: AuthContext(
        user_id=TEST_USER_ID, token="test-token", email="tester@example.com"
    )
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def owned_project():
    """Every project looked up by the access checks belongs to the test user."""
    with patch(
        "app.api.access.get_project",
        side_effect=lambda project_id: make_project(id=str(project_id)),
    ) as mock_get:
        yield mock_get

