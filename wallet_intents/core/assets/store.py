"""
Token store interface and the in-memory implementation.

Persistent storage is owned elsewhere; resolution only needs lookup and an
idempotent upsert, plus the hidden/delegate/dead bookkeeping used when a
token is imported.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Protocol, Set

from ..chain_types import ChainId
from .models import Asset, AssetKey

logger = logging.getLogger(__name__)


class TokenStore(Protocol):
    """Key-value view over the wallet's known assets."""

    def lookup(self, contract_address: str, chain_id: ChainId) -> Optional[Asset]:
        """Return the asset for (contract, chain) or None."""
        ...

    def register(self, asset: Asset) -> Asset:
        """Insert or overwrite; returns the single stored entry for the key."""
        ...

    def delete_hidden(self, key: AssetKey) -> None:
        """Forget that a contract was hidden by the user."""
        ...

    def is_hidden(self, key: AssetKey) -> bool:
        ...

    def add_delegate_contract(self, key: AssetKey) -> None:
        ...

    def add_dead_contract(self, key: AssetKey) -> None:
        ...


class InMemoryTokenStore:
    """Dict-backed TokenStore.

    ``register`` is an upsert: a second registration for the same key
    overwrites the stored fields in place and returns the same entry, so
    there is never more than one asset per key (last write wins).
    """

    def __init__(self, assets: Optional[List[Asset]] = None):
        self._assets: Dict[AssetKey, Asset] = {}
        self._hidden: Set[AssetKey] = set()
        self._delegates: Set[AssetKey] = set()
        self._dead: Set[AssetKey] = set()
        for asset in assets or []:
            self.register(asset)

    def lookup(self, contract_address: str, chain_id: ChainId) -> Optional[Asset]:
        return self._assets.get(AssetKey(contract_address, chain_id))

    def register(self, asset: Asset) -> Asset:
        key = asset.key
        existing = self._assets.get(key)
        if existing is None:
            self._assets[key] = asset
            logger.debug(f"Registered asset {key.canonical_id} ({asset.symbol})")
            return asset

        existing.name = asset.name
        existing.symbol = asset.symbol
        existing.decimals = asset.decimals
        existing.token_type = asset.token_type
        existing.balance = list(asset.balance)
        logger.debug(f"Overwrote asset {key.canonical_id} ({asset.symbol})")
        return existing

    def assets(self, chain_id: Optional[ChainId] = None) -> List[Asset]:
        if chain_id is None:
            return list(self._assets.values())
        return [a for a in self._assets.values() if a.chain_id == chain_id]

    def hide(self, key: AssetKey) -> None:
        self._hidden.add(key)

    def delete_hidden(self, key: AssetKey) -> None:
        self._hidden.discard(key)

    def is_hidden(self, key: AssetKey) -> bool:
        return key in self._hidden

    def add_delegate_contract(self, key: AssetKey) -> None:
        self._delegates.add(key)

    def add_dead_contract(self, key: AssetKey) -> None:
        self._dead.add(key)

    @property
    def delegate_contracts(self) -> Set[AssetKey]:
        return set(self._delegates)

    @property
    def dead_contracts(self) -> Set[AssetKey]:
        return set(self._dead)

    def __len__(self) -> int:
        return len(self._assets)


__all__ = ["InMemoryTokenStore", "TokenStore"]
