"""
Shared fixtures for OAuth service tests.
"""

import pytest
from pydantic import BaseModel

from shared.config import OAuthSettings
from shared.test_helpers import FakeClock, FakeIssuer, TEST_ISSUER


class UserProperties(BaseModel):
    user_id: str
    email: str


@pytest.fixture
def clock():
    """Controllable clock shared by store and storage."""
    return FakeClock()


@pytest.fixture
def fake_issuer():
    """In-process issuer serving discovery, JWKS and token endpoints."""
    return FakeIssuer()


@pytest.fixture
def settings(monkeypatch):
    """Settings isolated from the developer's environment."""
    monkeypatch.delenv("OAUTH_ISSUER", raising=False)
    return OAuthSettings(_env_file=None, issuer=TEST_ISSUER)


@pytest.fixture
def subjects():
    """Subject schemas accepted by verify."""
    return {"user": UserProperties}
