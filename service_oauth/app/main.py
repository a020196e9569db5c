"""
OAuth service wiring.

Builds the token store and, when a client id is known, the issuer client
from one settings object.
"""

from typing import Optional

from shared.config import OAuthSettings, get_settings
from shared.logging import configure_logging, get_logger
from .client.client import OAuthClient
from .jwks.cache import IssuerCache
from .storage.memory import MemoryStorage
from .storage.oauth import OAuthTokenStore


class OAuthService:
    """Container for the storage and client halves of the OAuth core."""

    def __init__(
        self,
        client_id: Optional[str] = None,
        settings: Optional[OAuthSettings] = None,
        cache: Optional[IssuerCache] = None,
    ):
        self.service_name = "oauth"
        self.settings = settings or get_settings()

        configure_logging(self.service_name, self.settings.log_level)
        self.logger = get_logger(f"{self.service_name}.service")

        self.storage = MemoryStorage(persist=self.settings.storage_path)
        self.token_store = OAuthTokenStore(self.storage)

        self.client: Optional[OAuthClient] = None
        if client_id:
            self.client = OAuthClient(client_id, settings=self.settings, cache=cache)

        self.logger.info(
            "OAuth service initialized",
            persistent=self.settings.storage_path is not None,
            issuer=self.client.issuer if self.client else None,
        )

    async def close(self) -> None:
        if self.client is not None:
            await self.client.close()


def create_service(client_id: Optional[str] = None, **overrides) -> OAuthService:
    """Create the OAuth service from environment settings plus overrides."""
    return OAuthService(client_id=client_id, settings=get_settings(**overrides))
