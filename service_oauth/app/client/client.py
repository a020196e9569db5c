"""
OAuth client for a remote issuer.

Builds authorize URLs, exchanges authorization codes, refreshes tokens and
verifies access tokens against the issuer's published keys.
"""

import time
from typing import Any, Callable, Dict, Optional, Tuple

import httpx
from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTError
from pydantic import ValidationError

from shared.config import OAuthSettings, get_settings
from shared.errors import (
    ConfigurationError,
    InvalidAccessTokenError,
    InvalidAuthorizationCodeError,
    InvalidRefreshTokenError,
    InvalidSubjectError,
)
from shared.logging import get_logger
from ..jwks.cache import IssuerCache
from .models import (
    ExchangeResult,
    RefreshResult,
    Subject,
    SubjectSchemas,
    TokenResponse,
    Tokens,
    VerifyResult,
)
from .pkce import generate_pkce

# An expired access token is refreshed and re-verified at most this many times per verify call
MAX_REFRESH_ATTEMPTS = 1


class OAuthClient:
    """Client bound to one issuer and one client id."""

    def __init__(
        self,
        client_id: str,
        issuer: Optional[str] = None,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        cache: Optional[IssuerCache] = None,
        settings: Optional[OAuthSettings] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.settings = settings or get_settings()
        self.issuer = issuer or self.settings.issuer
        if not self.issuer:
            raise ConfigurationError(
                "No issuer configured",
                details={"env": "OAUTH_ISSUER"}
            )

        self.client_id = client_id
        self.cache = cache if cache is not None else IssuerCache()
        self.clock = clock
        self.logger = get_logger("oauth.client")

        self._owns_http_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=self.settings.http_timeout)

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http_client:
            await self._http.aclose()

    async def __aenter__(self) -> "OAuthClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def authorize(self, redirect_uri: str, response_type: str = "code", provider: Optional[str] = None) -> str:
        """Build the issuer authorize URL."""
        return str(self._authorize_url(redirect_uri, response_type, provider))

    def pkce(self, redirect_uri: str, provider: Optional[str] = None) -> Tuple[str, str]:
        """Build a PKCE authorize URL.

        Returns ``(verifier, url)``; keep the verifier for ``exchange``.
        """
        challenge = generate_pkce()
        url = self._authorize_url(
            redirect_uri,
            "code",
            provider,
            code_challenge_method=challenge.method,
            code_challenge=challenge.challenge,
        )
        return challenge.verifier, str(url)

    async def exchange(self, code: str, redirect_uri: str, verifier: Optional[str] = None) -> ExchangeResult:
        """Exchange an authorization code for a token pair."""
        try:
            tokens = await self._request_tokens({
                "code": code,
                "redirect_uri": redirect_uri,
                "grant_type": "authorization_code",
                "client_id": self.client_id,
                "code_verifier": verifier or "",
            })
        except (httpx.HTTPError, ValueError) as e:
            self.logger.warning("Authorization code exchange failed", client_id=self.client_id, error=str(e))
            return ExchangeResult(err=InvalidAuthorizationCodeError(details={"error": str(e)}))

        return ExchangeResult(tokens=tokens)

    async def refresh(self, refresh_token: str, access: Optional[str] = None) -> RefreshResult:
        """Refresh a token pair.

        When ``access`` is given and stays valid beyond the refresh margin,
        nothing is requested and an empty result is returned.
        """
        if access:
            try:
                claims = jwt.get_unverified_claims(access)
            except JWTError as e:
                return RefreshResult(err=InvalidAccessTokenError(details={"error": str(e)}))

            exp = claims.get("exp")
            if not isinstance(exp, (int, float)):
                exp = 0
            if exp > self.clock() + self.settings.refresh_margin_seconds:
                return RefreshResult()

        try:
            tokens = await self._request_tokens({
                "grant_type": "refresh_token",
                "refresh_token": refresh_token,
            })
        except (httpx.HTTPError, ValueError) as e:
            self.logger.warning("Token refresh failed", client_id=self.client_id, error=str(e))
            return RefreshResult(err=InvalidRefreshTokenError(details={"error": str(e)}))

        self.logger.info("Tokens refreshed", client_id=self.client_id)
        return RefreshResult(tokens=tokens)

    async def verify(
        self,
        subjects: SubjectSchemas,
        token: str,
        refresh: Optional[str] = None,
        audience: Optional[str] = None,
    ) -> VerifyResult:
        """Verify an access token and decode its subject.

        If the token has expired and ``refresh`` is given, the pair is
        refreshed once and the new access token verified instead.
        """
        tokens: Optional[Tokens] = None
        attempts = 0

        while True:
            try:
                key_set = await self.cache.resolve_key_set(self.issuer, self._http)
                claims = key_set.verify(token, issuer=self.issuer, audience=audience)
            except ExpiredSignatureError:
                if refresh is None:
                    return VerifyResult(err=InvalidAccessTokenError("Access token expired"))
                if attempts >= MAX_REFRESH_ATTEMPTS:
                    self.logger.warning("Refreshed access token already expired", issuer=self.issuer)
                    return VerifyResult(err=InvalidAccessTokenError("Refreshed access token already expired"))

                attempts += 1
                refreshed = await self.refresh(refresh)
                if refreshed.err is not None:
                    return VerifyResult(err=refreshed.err)

                tokens = refreshed.tokens
                token, refresh = tokens.access, tokens.refresh
                continue
            except JWTError as e:
                self.logger.info("Access token rejected", error=str(e))
                return VerifyResult(err=InvalidAccessTokenError(details={"error": str(e)}))
            except Exception as e:
                self.logger.error("Unexpected error during token verification", issuer=self.issuer, error=str(e))
                return VerifyResult(err=InvalidAccessTokenError(
                    "Token verification failed",
                    details={"error": str(e)}
                ))

            return self._validate_subject(subjects, claims, tokens)

    def _validate_subject(
        self,
        subjects: SubjectSchemas,
        claims: Dict[str, Any],
        tokens: Optional[Tokens],
    ) -> VerifyResult:
        subject_type = claims.get("type")
        schema = subjects.get(subject_type) if isinstance(subject_type, str) else None
        if schema is None:
            return VerifyResult(err=InvalidSubjectError(
                "Unknown subject type",
                details={"type": subject_type}
            ))

        try:
            properties = schema.model_validate(claims.get("properties"))
        except ValidationError as e:
            return VerifyResult(err=InvalidSubjectError(
                "Subject properties failed validation",
                details={"issues": e.errors(include_url=False)}
            ))

        if claims.get("mode") != "access":
            return VerifyResult(err=InvalidSubjectError(
                "Token is not an access token",
                details={"mode": claims.get("mode")}
            ))

        return VerifyResult(subject=Subject(type=subject_type, properties=properties), tokens=tokens)

    def _authorize_url(
        self,
        redirect_uri: str,
        response_type: str,
        provider: Optional[str] = None,
        **extra: str,
    ) -> httpx.URL:
        params: Dict[str, str] = {}
        if provider:
            params["provider"] = provider
        params["client_id"] = self.client_id
        params["redirect_uri"] = redirect_uri
        params["response_type"] = response_type
        params.update(extra)
        return httpx.URL(f"{self.issuer}/authorize", params=params)

    async def _request_tokens(self, form: Dict[str, str]) -> Tokens:
        """POST a grant to the token endpoint and parse the token pair."""
        response = await self._http.post(f"{self.issuer}/token", data=form)
        response.raise_for_status()
        payload = TokenResponse.model_validate(response.json())
        return Tokens(access=payload.access_token, refresh=payload.refresh_token)
