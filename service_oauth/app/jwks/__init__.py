"""
JWKS package.

Issuer discovery and signing key set caching used to verify access tokens
minted by a remote issuer.

Key points:
- The cache is owned by whoever constructs it; there is no module state.
- Each issuer is fetched at most once per cache; concurrent first lookups
  share a single in-flight request.
- There is no TTL. Call ``IssuerCache.clear`` to pick up rotated keys.
"""

from .cache import IssuerCache, IssuerMetadata
from .keyset import KeySet

__all__ = ["IssuerCache", "IssuerMetadata", "KeySet"]
