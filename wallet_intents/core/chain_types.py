"""
Chain identification types and the registry of configured chains.

Every resolution call receives its chain id explicitly; the registry only
answers whether a chain is configured and how to reach it.
"""

from __future__ import annotations

from typing import Dict, List, Mapping, Optional

from ..config import ChainConfig

ChainId = int

# Contract address used for a chain's native currency in the token store
NATIVE_PLACEHOLDER = "0x0000000000000000000000000000000000000000"


def is_native_placeholder(address: str) -> bool:
    return address.lower() == NATIVE_PLACEHOLDER


def parse_chain_id(value: str | int | None) -> Optional[ChainId]:
    """Parse a decimal or 0x-prefixed hex chain id.

    Returns ``None`` when the value is empty or not an integer.
    """
    if value is None:
        return None
    if isinstance(value, int):
        return value if value > 0 else None

    text = value.strip().lower()
    if not text:
        return None
    try:
        parsed = int(text, 16) if text.startswith("0x") else int(text, 10)
    except ValueError:
        return None
    return parsed if parsed > 0 else None


class ChainRegistry:
    """Lookup over the configured chains."""

    def __init__(self, chains: Mapping[ChainId, ChainConfig]):
        self._chains: Dict[ChainId, ChainConfig] = dict(chains)

    @classmethod
    def from_settings(cls, settings) -> "ChainRegistry":
        return cls(settings.chains)

    def get(self, chain_id: ChainId) -> Optional[ChainConfig]:
        return self._chains.get(chain_id)

    def is_configured(self, chain_id: ChainId) -> bool:
        return chain_id in self._chains

    def rpc_url(self, chain_id: ChainId) -> Optional[str]:
        chain = self._chains.get(chain_id)
        return chain.rpc_url if chain else None

    def get_chain_name(self, chain_id: ChainId) -> str:
        chain = self._chains.get(chain_id)
        return chain.name if chain else f"Chain {chain_id}"

    def explorer_address_url(self, chain_id: ChainId, address: str) -> Optional[str]:
        chain = self._chains.get(chain_id)
        if not chain or not chain.explorer_url:
            return None
        return f"{chain.explorer_url.rstrip('/')}/address/{address}"

    @property
    def chain_ids(self) -> List[ChainId]:
        return sorted(self._chains.keys())


__all__ = [
    "ChainId",
    "ChainRegistry",
    "NATIVE_PLACEHOLDER",
    "is_native_placeholder",
    "parse_chain_id",
]
