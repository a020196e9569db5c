"""
Result and wire models for the OAuth client.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Type

from pydantic import BaseModel

from shared.errors import OAuthError

# Subject type name -> pydantic model validating that subject's properties
SubjectSchemas = Dict[str, Type[BaseModel]]


class TokenResponse(BaseModel):
    """Successful token endpoint response body."""
    access_token: str
    refresh_token: str


@dataclass(frozen=True)
class Tokens:
    """Access and refresh token pair."""
    access: str
    refresh: str


@dataclass(frozen=True)
class Subject:
    """Authenticated principal decoded from an access token."""
    type: str
    properties: Any


@dataclass
class ExchangeResult:
    tokens: Optional[Tokens] = None
    err: Optional[OAuthError] = None


@dataclass
class RefreshResult:
    """Outcome of a refresh.

    ``tokens`` and ``err`` are both None when the supplied access token
    was still valid and no refresh was needed.
    """
    tokens: Optional[Tokens] = None
    err: Optional[OAuthError] = None


@dataclass
class VerifyResult:
    """Outcome of a verification.

    ``tokens`` is set only when the access token was refreshed during the
    call; callers should store the new pair.
    """
    subject: Optional[Subject] = None
    tokens: Optional[Tokens] = None
    err: Optional[OAuthError] = None

    @property
    def ok(self) -> bool:
        return self.err is None
