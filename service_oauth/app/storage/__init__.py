"""
Storage package.

Generic ordered key-value storage keyed by segment lists, plus the
OAuth-specific key shapes layered on top of it:

- keys: Flat key codec (segment join/split and sanitization).
- memory: In-process sorted store with TTL expiry and optional JSON
  file persistence.
- oauth: Authorization code and refresh token store built on any
  adapter exposing get/set/remove/scan.
"""

from .keys import SEPARATOR, encode_key, join_key, split_key
from .memory import MemoryStorage, SearchResult
from .oauth import (
    AuthorizationCode,
    OAuthTokenStore,
    PKCE,
    RefreshTokenProperties,
)

__all__ = [
    "SEPARATOR",
    "encode_key",
    "join_key",
    "split_key",
    "MemoryStorage",
    "SearchResult",
    "AuthorizationCode",
    "OAuthTokenStore",
    "PKCE",
    "RefreshTokenProperties",
]
