"""
Token import service.

Adds a contract the user chose to import (the "add custom token" action) to
the token store, based on what its on-chain metadata turns out to be:

- fungible: registered as ERC20, keeping any balance already on record
- non-fungible: registered with its balance; skipped when ``only_if_balance``
  is set and it holds nothing
- delegate: recorded as a delegate contract, no asset
- failed while the network was reachable: recorded as a dead contract
"""

from __future__ import annotations

import logging
from typing import List, Optional

from ..core.assets.models import (
    Asset,
    AssetKey,
    DelegateComplete,
    Failed,
    FungibleComplete,
    NonFungibleComplete,
    TokenType,
)
from ..core.assets.store import TokenStore
from ..core.chain_types import ChainId
from ..providers.base import ContractMetadataProvider

logger = logging.getLogger(__name__)


class TokenImportError(Exception):
    """The contract could not be imported as a token."""

    def __init__(self, message: str, *, contract_address: str, chain_id: ChainId):
        super().__init__(message)
        self.message = message
        self.contract_address = contract_address
        self.chain_id = chain_id


def _has_balance(balance: List[str]) -> bool:
    return any(value not in ("", "0") for value in balance)


class TokenImportService:
    def __init__(self, store: TokenStore, metadata_provider: ContractMetadataProvider):
        self._store = store
        self._metadata = metadata_provider

    async def add_imported_token(
        self,
        contract_address: str,
        chain_id: ChainId,
        *,
        only_if_balance: bool = False,
    ) -> Asset:
        """Un-hide and import a contract; raises TokenImportError when no asset results."""
        self._store.delete_hidden(AssetKey(contract_address, chain_id))

        asset = await self.add_token(contract_address, chain_id, only_if_balance=only_if_balance)
        if asset is None:
            raise TokenImportError(
                f"{contract_address} on chain {chain_id} could not be imported as a token",
                contract_address=contract_address,
                chain_id=chain_id,
            )
        return asset

    async def add_token(
        self,
        contract_address: str,
        chain_id: ChainId,
        *,
        only_if_balance: bool = False,
    ) -> Optional[Asset]:
        key = AssetKey(contract_address, chain_id)
        data = await self._metadata.fetch(contract_address, chain_id)

        if isinstance(data, FungibleComplete):
            existing = self._store.lookup(contract_address, chain_id)
            balance = list(existing.balance) if existing else ["0"]
            if only_if_balance and not _has_balance(balance):
                return None
            return self._store.register(Asset(
                contract_address=contract_address,
                chain_id=chain_id,
                name=data.name,
                symbol=data.symbol,
                decimals=data.decimals,
                token_type=TokenType.ERC20,
                balance=balance,
            ))

        elif isinstance(data, NonFungibleComplete):
            if only_if_balance and not _has_balance(data.balance):
                return None
            return self._store.register(Asset(
                contract_address=contract_address,
                chain_id=chain_id,
                name=data.name,
                symbol=data.symbol,
                decimals=0,
                token_type=data.token_type,
                balance=list(data.balance),
            ))

        elif isinstance(data, DelegateComplete):
            logger.info(f"{key.canonical_id} is a delegate contract")
            self._store.add_delegate_contract(key)

        elif isinstance(data, Failed):
            if data.network_reachable:
                logger.info(f"{key.canonical_id} did not answer as a token, marking dead")
                self._store.add_dead_contract(key)

        else:
            logger.debug(f"Incomplete metadata for {key.canonical_id}: {type(data).__name__}")

        return None


__all__ = ["TokenImportError", "TokenImportService"]
