"""
Shared error handling for the OAuth credential core.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format."""

    code: str
    message: str
    details: Dict[str, Any] = {}


class OAuthError(Exception):
    """Base exception for OAuth core components."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            details=self.details
        )


class InvalidAuthorizationCodeError(OAuthError):
    """Token endpoint rejected an authorization code exchange."""

    def __init__(self, message: str = "Invalid authorization code", details: Optional[Dict[str, Any]] = None):
        super().__init__("INVALID_AUTHORIZATION_CODE", message, details)


class InvalidRefreshTokenError(OAuthError):
    """Token endpoint rejected a refresh, or the refresh call failed."""

    def __init__(self, message: str = "Invalid refresh token", details: Optional[Dict[str, Any]] = None):
        super().__init__("INVALID_REFRESH_TOKEN", message, details)


class InvalidAccessTokenError(OAuthError):
    """Access token could not be decoded or verified."""

    def __init__(self, message: str = "Invalid access token", details: Optional[Dict[str, Any]] = None):
        super().__init__("INVALID_ACCESS_TOKEN", message, details)


class InvalidSubjectError(OAuthError):
    """Token payload failed subject validation."""

    def __init__(self, message: str = "Invalid subject", details: Optional[Dict[str, Any]] = None):
        super().__init__("INVALID_SUBJECT", message, details)


class PersistenceError(OAuthError):
    """Storage persistence I/O failed."""

    def __init__(self, message: str = "Persistence failure", details: Optional[Dict[str, Any]] = None):
        super().__init__("PERSISTENCE_ERROR", message, details)


class ConfigurationError(OAuthError):
    """Required configuration is missing or invalid."""

    def __init__(self, message: str = "Configuration error", details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIGURATION_ERROR", message, details)
