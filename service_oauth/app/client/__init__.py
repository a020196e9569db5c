"""
OAuth client package.

Consumes a remote issuer's endpoints:

- client: Authorize URL construction, code exchange, refresh, and access
  token verification with a single transparent refresh on expiry.
- models: Result containers and token endpoint wire models.
- pkce: Verifier and S256 challenge generation and checking.
"""

from .client import MAX_REFRESH_ATTEMPTS, OAuthClient
from .models import (
    ExchangeResult,
    RefreshResult,
    Subject,
    SubjectSchemas,
    TokenResponse,
    Tokens,
    VerifyResult,
)
from .pkce import PKCEChallenge, generate_pkce, s256_challenge, validate_pkce

__all__ = [
    "MAX_REFRESH_ATTEMPTS",
    "OAuthClient",
    "ExchangeResult",
    "RefreshResult",
    "Subject",
    "SubjectSchemas",
    "TokenResponse",
    "Tokens",
    "VerifyResult",
    "PKCEChallenge",
    "generate_pkce",
    "s256_challenge",
    "validate_pkce",
]
