"""ENS name resolution through a public HTTP resolver API."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from ..services.address import checksum_address, is_valid_evm_address
from .base import NameResolutionError, NameResolver

logger = logging.getLogger(__name__)


class HttpNameResolver(NameResolver):
    """Resolves names with ``GET <base>/<name>`` returning ``{"address": "0x..."}``."""

    name = "http_name_resolver"

    def __init__(
        self,
        api_url: str,
        client: Optional[httpx.AsyncClient] = None,
        timeout_s: int = 10,
    ):
        self.api_url = api_url.rstrip("/")
        self.timeout_s = timeout_s
        self._client = client or httpx.AsyncClient(timeout=timeout_s)

    async def ready(self) -> bool:
        return bool(self.api_url)

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {"status": "unavailable", "reason": "No resolver API URL configured"}
        return {"status": "healthy", "api_url": self.api_url}

    async def aclose(self) -> None:
        await self._client.aclose()

    async def resolve(self, name: str) -> str:
        url = f"{self.api_url}/{quote(name.lower())}"
        try:
            response = await self._client.get(url)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(f"Name resolution for {name} failed: {exc}")
            raise NameResolutionError(f"Could not resolve {name}") from exc

        address = data.get("address") if isinstance(data, dict) else None
        if not address or not is_valid_evm_address(address):
            raise NameResolutionError(f"No address registered for {name}")

        logger.debug(f"Resolved {name} to {address}")
        return checksum_address(address)


__all__ = ["HttpNameResolver"]
