"""
Unit tests for OAuthTokenStore.
"""

import pytest

from service_oauth.app.storage.keys import SEPARATOR, join_key
from service_oauth.app.storage.memory import MemoryStorage
from service_oauth.app.storage.oauth import (
    AuthorizationCode,
    OAuthTokenStore,
    PKCE,
    RefreshTokenProperties,
)
from shared.errors import PersistenceError


class TestOAuthTokenStore:
    """Test cases for authorization code and refresh token storage."""

    @pytest.fixture
    def storage(self, clock):
        return MemoryStorage(clock=clock)

    @pytest.fixture
    def store(self, storage, clock):
        return OAuthTokenStore(storage, clock=clock)

    @pytest.fixture
    def code_properties(self):
        return AuthorizationCode(
            type="user",
            properties={"user_id": "user1"},
            redirect_uri="https://app.example.com/callback",
            client_id="web-app",
            pkce=PKCE(challenge="abc123"),
        )

    @pytest.fixture
    def refresh_properties(self):
        return RefreshTokenProperties(type="user", properties={"user_id": "user1"}, client_id="web-app")

    @pytest.mark.asyncio
    async def test_authorization_code_round_trip(self, store, code_properties):
        await store.set_authorization_code("code-1", code_properties, ttl=60)

        result = await store.get_oauth_code("code-1")

        assert result == code_properties
        assert result.pkce.method == "S256"

    @pytest.mark.asyncio
    async def test_authorization_code_key_shape(self, store, storage, code_properties):
        await store.set_authorization_code("code-1", code_properties, ttl=60)

        assert storage.keys() == [join_key(["oauth:code", "code-1"])]

    @pytest.mark.asyncio
    async def test_get_does_not_consume_code(self, store, code_properties):
        await store.set_authorization_code("code-1", code_properties, ttl=60)

        assert await store.get_oauth_code("code-1") is not None
        assert await store.get_oauth_code("code-1") is not None

    @pytest.mark.asyncio
    async def test_authorization_code_expires_after_ttl(self, store, clock, code_properties):
        await store.set_authorization_code("code-1", code_properties, ttl=60)
        clock.advance(60)

        assert await store.get_oauth_code("code-1") is None

    @pytest.mark.asyncio
    async def test_invalidate_oauth_code(self, store, code_properties):
        await store.set_authorization_code("code-1", code_properties, ttl=60)
        await store.invalidate_oauth_code("code-1")

        assert await store.get_oauth_code("code-1") is None

    @pytest.mark.asyncio
    async def test_code_containing_separator_is_sanitized(self, store, storage, code_properties):
        await store.set_authorization_code(f"co{SEPARATOR}de", code_properties, ttl=60)

        assert storage.keys() == [join_key(["oauth:code", "code"])]
        assert await store.get_oauth_code(f"co{SEPARATOR}de") == code_properties

    @pytest.mark.asyncio
    async def test_refresh_token_round_trip(self, store, refresh_properties):
        await store.set_refresh_token("alice", "tok-1", refresh_properties, ttl=3600)

        assert await store.get_refresh_token("alice", "tok-1") == refresh_properties
        assert await store.get_refresh_token("bob", "tok-1") is None

    @pytest.mark.asyncio
    async def test_multiple_refresh_tokens_per_subject(self, store, refresh_properties):
        await store.set_refresh_token("alice", "laptop", refresh_properties, ttl=3600)
        await store.set_refresh_token("alice", "phone", refresh_properties, ttl=3600)

        assert await store.get_refresh_token("alice", "laptop") is not None
        assert await store.get_refresh_token("alice", "phone") is not None

    @pytest.mark.asyncio
    async def test_invalidate_keys_only_touches_subject(self, store, refresh_properties):
        await store.set_refresh_token("alice", "tok", refresh_properties, ttl=3600)
        await store.set_refresh_token("alice", "tok-b", refresh_properties, ttl=3600)
        await store.set_refresh_token("alicex", "tok", refresh_properties, ttl=3600)
        await store.set_refresh_token("bob", "tok2", refresh_properties, ttl=3600)

        removed = await store.invalidate_keys("alice")

        assert removed == 2
        assert await store.get_refresh_token("alice", "tok") is None
        assert await store.get_refresh_token("alice", "tok-b") is None
        assert await store.get_refresh_token("alicex", "tok") is not None
        assert await store.get_refresh_token("bob", "tok2") is not None

    @pytest.mark.asyncio
    async def test_invalidate_keys_leaves_codes_alone(self, store, code_properties, refresh_properties):
        await store.set_authorization_code("alice", code_properties, ttl=60)
        await store.set_refresh_token("alice", "tok", refresh_properties, ttl=3600)

        await store.invalidate_keys("alice")

        assert await store.get_oauth_code("alice") is not None

    @pytest.mark.asyncio
    async def test_invalidate_keys_is_idempotent(self, store, refresh_properties):
        await store.set_refresh_token("alice", "tok", refresh_properties, ttl=3600)

        assert await store.invalidate_keys("alice") == 1
        assert await store.invalidate_keys("alice") == 0

    @pytest.mark.asyncio
    async def test_partial_invalidation_can_be_resumed(self, store, storage, refresh_properties):
        for token in ["t1", "t2", "t3"]:
            await store.set_refresh_token("alice", token, refresh_properties, ttl=3600)

        real_remove = storage.remove
        calls = 0

        async def flaky_remove(key):
            nonlocal calls
            calls += 1
            if calls == 2:
                raise PersistenceError("disk full")
            await real_remove(key)

        storage.remove = flaky_remove
        with pytest.raises(PersistenceError):
            await store.invalidate_keys("alice")

        assert len(storage) == 2

        storage.remove = real_remove
        assert await store.invalidate_keys("alice") == 2
        assert len(storage) == 0

    @pytest.mark.asyncio
    async def test_persisted_tokens_survive_restart(self, tmp_path, clock, refresh_properties):
        path = tmp_path / "oauth.json"
        store = OAuthTokenStore(MemoryStorage(persist=path, clock=clock), clock=clock)
        await store.set_refresh_token("alice", "tok", refresh_properties, ttl=3600)

        restarted = OAuthTokenStore(MemoryStorage(persist=path, clock=clock), clock=clock)

        assert await restarted.get_refresh_token("alice", "tok") == refresh_properties
