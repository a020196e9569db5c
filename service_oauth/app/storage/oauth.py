"""
OAuth token store.

Maps authorization codes and refresh tokens onto a generic key-value
adapter. The store itself is stateless; it only knows the key shapes:

- ``["oauth:code", <code>]`` for authorization codes
- ``["oauth:refresh", <subject>, <token>]`` for refresh tokens
"""

import time
from datetime import datetime, timezone
from typing import Any, Callable, Literal, Optional

from pydantic import BaseModel

from shared.logging import get_logger
from .keys import encode_key

CODE_PREFIX = "oauth:code"
REFRESH_PREFIX = "oauth:refresh"


class PKCE(BaseModel):
    """PKCE challenge bound to an authorization code."""
    challenge: str
    method: Literal["S256"] = "S256"


class AuthorizationCode(BaseModel):
    """Properties stored under an authorization code."""
    type: str
    properties: Any = None
    redirect_uri: str
    client_id: str
    pkce: Optional[PKCE] = None


class RefreshTokenProperties(BaseModel):
    """Properties stored under a refresh token."""
    type: str
    properties: Any = None
    client_id: str


class OAuthTokenStore:
    """Authorization code and refresh token storage over a KV adapter.

    The adapter must provide async ``get``, ``set``, ``remove`` and
    ``scan`` with the semantics of ``MemoryStorage``.
    """

    def __init__(self, adapter, clock: Callable[[], float] = time.time):
        self.adapter = adapter
        self.clock = clock
        self.logger = get_logger("oauth.storage.tokens")

    async def get_oauth_code(self, code: str) -> Optional[AuthorizationCode]:
        """Read an authorization code without consuming it."""
        value = await self.adapter.get(encode_key([CODE_PREFIX, code]))
        if value is None:
            return None
        return AuthorizationCode.model_validate(value)

    async def set_authorization_code(self, code: str, properties: AuthorizationCode, ttl: int) -> None:
        """Store an authorization code that expires ``ttl`` seconds from now."""
        await self.adapter.set(
            encode_key([CODE_PREFIX, code]),
            properties.model_dump(mode="json"),
            self._expiry(ttl),
        )

    async def invalidate_oauth_code(self, code: str) -> None:
        await self.adapter.remove(encode_key([CODE_PREFIX, code]))

    async def get_refresh_token(self, subject: str, refresh_token: str) -> Optional[RefreshTokenProperties]:
        value = await self.adapter.get(encode_key([REFRESH_PREFIX, subject, refresh_token]))
        if value is None:
            return None
        return RefreshTokenProperties.model_validate(value)

    async def set_refresh_token(
        self,
        subject: str,
        refresh_token: str,
        properties: RefreshTokenProperties,
        ttl: int,
    ) -> None:
        await self.adapter.set(
            encode_key([REFRESH_PREFIX, subject, refresh_token]),
            properties.model_dump(mode="json"),
            self._expiry(ttl),
        )

    async def invalidate_keys(self, subject: str) -> int:
        """Remove every refresh token held by ``subject``.

        Removal is one key at a time. If a removal fails the tokens removed
        so far stay removed; calling again finishes the job.
        """
        removed = 0
        async for key, _ in self.adapter.scan(encode_key([REFRESH_PREFIX, subject])):
            await self.adapter.remove(key)
            removed += 1

        self.logger.info("Refresh tokens invalidated", subject=subject, count=removed)
        return removed

    def _expiry(self, ttl: int) -> datetime:
        return datetime.fromtimestamp(self.clock() + ttl, tz=timezone.utc)
