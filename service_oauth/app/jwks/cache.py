"""
Issuer metadata and key set cache.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, Tuple

import httpx
from pydantic import BaseModel

from shared.logging import get_logger
from .keyset import KeySet

WELL_KNOWN_PATH = "/.well-known/oauth-authorization-server"


class IssuerMetadata(BaseModel):
    """Endpoints advertised by an authorization server."""
    jwks_uri: str
    token_endpoint: str
    authorization_endpoint: str


class IssuerCache:
    """Per-issuer discovery metadata and verification keys.

    Entries are populated once and kept for the lifetime of the cache.
    Concurrent first lookups for the same issuer await one shared fetch;
    a failed fetch is not cached.
    """

    def __init__(self):
        self.logger = get_logger("oauth.jwks.cache")

        self._metadata: Dict[str, IssuerMetadata] = {}
        self._key_sets: Dict[str, KeySet] = {}
        self._pending: Dict[Tuple[str, str], asyncio.Future] = {}
        self._generation = 0

    async def resolve_metadata(self, issuer: str, http_client: httpx.AsyncClient) -> IssuerMetadata:
        """Return discovery metadata for ``issuer``, fetching it on first use."""
        async def _load() -> IssuerMetadata:
            payload = await self._fetch_json(http_client, f"{issuer}{WELL_KNOWN_PATH}")
            metadata = IssuerMetadata.model_validate(payload)
            self.logger.info("Issuer metadata discovered", issuer=issuer, jwks_uri=metadata.jwks_uri)
            return metadata

        return await self._single_flight("metadata", issuer, self._metadata, _load)

    async def resolve_key_set(self, issuer: str, http_client: httpx.AsyncClient) -> KeySet:
        """Return the verification key set for ``issuer``, fetching it on first use."""
        async def _load() -> KeySet:
            metadata = await self.resolve_metadata(issuer, http_client)
            key_set = KeySet(await self._fetch_json(http_client, metadata.jwks_uri))
            self.logger.info("JWKS loaded", issuer=issuer, keys_count=len(key_set))
            return key_set

        return await self._single_flight("jwks", issuer, self._key_sets, _load)

    def clear(self) -> None:
        """Drop all cached metadata and keys.

        Fetches already in flight still resolve for the callers awaiting
        them, but their results are not written back into the cache.
        """
        self._metadata.clear()
        self._key_sets.clear()
        self._pending.clear()
        self._generation += 1
        self.logger.info("Issuer cache cleared")

    async def _single_flight(
        self,
        kind: str,
        issuer: str,
        cache: Dict[str, Any],
        loader: Callable[[], Awaitable[Any]],
    ) -> Any:
        if issuer in cache:
            return cache[issuer]

        key = (kind, issuer)
        task = self._pending.get(key)
        if task is None:
            task = asyncio.ensure_future(self._load_once(key, self._generation, cache, issuer, loader))
            self._pending[key] = task
        else:
            self.logger.debug("Joining in-flight fetch", kind=kind, issuer=issuer)

        # Shielded so one cancelled caller does not cancel the shared fetch
        return await asyncio.shield(task)

    async def _load_once(
        self,
        key: Tuple[str, str],
        generation: int,
        cache: Dict[str, Any],
        issuer: str,
        loader: Callable[[], Awaitable[Any]],
    ) -> Any:
        try:
            value = await loader()
            if generation == self._generation:
                cache[issuer] = value
            return value
        finally:
            if generation == self._generation:
                self._pending.pop(key, None)

    @staticmethod
    async def _fetch_json(http_client: httpx.AsyncClient, url: str) -> Any:
        response = await http_client.get(url)
        response.raise_for_status()
        return response.json()
