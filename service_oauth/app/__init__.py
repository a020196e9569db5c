"""
OAuth Service package.

This package holds the credential-lifecycle core shared by the
authorization server and by resource servers that consume its tokens:

- app.storage: Ordered key-value store with expiry and the OAuth
  namespacing layer for authorization codes and refresh tokens.
- app.jwks: Issuer metadata discovery and signing key set caching.
- app.client: Token exchange, refresh and verification against an issuer.

Design notes:
- Keep the package import side-effects minimal; module import must not
  perform network calls or touch the filesystem.
- Use the shared/ utilities for logging, configuration, and errors.
"""
