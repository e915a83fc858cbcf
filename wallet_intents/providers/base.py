from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict

if TYPE_CHECKING:
    from ..core.assets.models import ContractData


class Provider(ABC):
    """Base provider interface"""

    name: str
    timeout_s: int = 10

    @abstractmethod
    async def ready(self) -> bool:
        """Check if provider is ready to serve requests"""
        pass

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """Return provider health status"""
        pass


class ContractMetadataProvider(Provider):
    """Provider for on-chain contract metadata (name, symbol, decimals, standard)"""

    @abstractmethod
    async def fetch(self, address: str, chain_id: int) -> ContractData:
        """Fetch metadata for a contract; exactly one outcome per call"""
        pass


class NameResolutionError(Exception):
    """A human-readable name could not be resolved to an address."""


class NameResolver(Provider):
    """Provider resolving human-readable names (ENS) to addresses"""

    @abstractmethod
    async def resolve(self, name: str) -> str:
        """Return the address for ``name`` or raise NameResolutionError"""
        pass
