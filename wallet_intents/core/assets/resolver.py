"""
Asset Resolver

Turns a validated payment request into a TransferIntent:

1. Look the (contract, chain) pair up in the local token store
2. Known asset: convert the amount with its decimals and return (no network)
3. Unknown asset: fetch contract metadata; only a complete fungible token is
   usable for a payment request, anything else is ContractInvalid
4. Register the fetched asset (idempotent upsert) and continue as in step 2

Concurrent resolutions of the same key are not deduplicated; each caller
fetches on its own and the last registration wins.
"""

from __future__ import annotations

import logging
from decimal import Decimal, localcontext
from typing import Optional, Tuple

from ...providers.base import ContractMetadataProvider
from ..chain_types import NATIVE_PLACEHOLDER, ChainRegistry
from ..payloads.eip681 import Eip681Request
from ..payloads.errors import ContractInvalidError, MissingChainEndpointError
from .models import Asset, FungibleComplete, TokenType, TransferIntent
from .store import TokenStore

logger = logging.getLogger(__name__)

_AMOUNT_PRECISION = 100


def to_transfer_amount(amount: Optional[str], decimals: int) -> Tuple[Optional[str], Optional[int]]:
    """Split a smallest-unit amount into (whole-unit decimal string, raw int).

    Returns ``(None, None)`` when there is no amount or when the amount is a
    fraction of the smallest unit, which cannot be transferred.
    """
    if amount is None:
        return None, None

    with localcontext() as ctx:
        ctx.prec = _AMOUNT_PRECISION
        value = Decimal(amount)
        if value != value.to_integral_value():
            logger.warning(f"Dropping fractional smallest-unit amount {amount}")
            return None, None

        raw = int(value)
        whole_units = Decimal(raw).scaleb(-decimals).normalize()
        return format(whole_units, "f"), raw


class AssetResolver:
    """Resolves payment requests against the token store and contract metadata."""

    def __init__(
        self,
        store: TokenStore,
        metadata_provider: ContractMetadataProvider,
        chains: ChainRegistry,
    ):
        self._store = store
        self._metadata = metadata_provider
        self._chains = chains

    def lookup(self, request: Eip681Request) -> Optional[Asset]:
        return self._store.lookup(request.contract_address, request.chain_id)

    async def resolve(self, request: Eip681Request) -> TransferIntent:
        asset = self.lookup(request)
        if asset is not None:
            return self._build_intent(asset, request)

        if request.is_native:
            asset = self._store.register(self._native_asset(request.chain_id))
            return self._build_intent(asset, request)

        logger.info(
            f"Asset {request.contract_address} unknown on chain {request.chain_id}, fetching metadata"
        )
        data = await self._metadata.fetch(request.contract_address, request.chain_id)

        if not isinstance(data, FungibleComplete):
            logger.info(
                f"Contract {request.contract_address} on chain {request.chain_id} "
                f"is not a fungible token: {type(data).__name__}"
            )
            raise ContractInvalidError(
                f"{request.contract_address} is not a fungible token",
                chain_id=request.chain_id,
            )

        asset = self._store.register(Asset(
            contract_address=request.contract_address,
            chain_id=request.chain_id,
            name=data.name,
            symbol=data.symbol,
            decimals=data.decimals,
            token_type=TokenType.ERC20,
            balance=["0"],
        ))
        return self._build_intent(asset, request)

    def _native_asset(self, chain_id: int) -> Asset:
        chain = self._chains.get(chain_id)
        if chain is None:
            raise MissingChainEndpointError(f"No configured chain for chain id {chain_id}", chain_id=chain_id)
        return Asset(
            contract_address=NATIVE_PLACEHOLDER,
            chain_id=chain_id,
            name=chain.name,
            symbol=chain.native_symbol,
            decimals=chain.native_decimals,
            token_type=TokenType.NATIVE,
        )

    @staticmethod
    def _build_intent(asset: Asset, request: Eip681Request) -> TransferIntent:
        amount, raw_amount = to_transfer_amount(request.amount, asset.decimals)
        return TransferIntent(
            asset=asset.key,
            recipient=request.recipient,
            amount=amount,
            raw_amount=raw_amount,
        )


__all__ = ["AssetResolver", "to_transfer_amount"]
