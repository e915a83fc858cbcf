"""
Asset models.

Assets are keyed by (contract address, chain id). The same contract address
on two chains is two different assets.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from ..chain_types import NATIVE_PLACEHOLDER, ChainId
from ..payloads.models import AddressOrName


class TokenType(str, Enum):
    NATIVE = "native"
    ERC20 = "erc20"
    ERC721 = "erc721"
    ERC875 = "erc875"
    ERC1155 = "erc1155"

    @property
    def is_fungible(self) -> bool:
        return self in (TokenType.NATIVE, TokenType.ERC20)


@dataclass(frozen=True)
class AssetKey:
    """Identity of an asset within one chain."""

    contract_address: str
    chain_id: ChainId

    def __post_init__(self) -> None:
        # Addresses compare case-insensitively
        object.__setattr__(self, "contract_address", self.contract_address.lower())

    @property
    def canonical_id(self) -> str:
        return f"{self.chain_id}:{self.contract_address}"


@dataclass
class Asset:
    """A token known to the local token store."""

    contract_address: str
    chain_id: ChainId
    name: str
    symbol: str
    decimals: int
    token_type: TokenType = TokenType.ERC20
    balance: List[str] = field(default_factory=lambda: ["0"])

    @property
    def key(self) -> AssetKey:
        return AssetKey(self.contract_address, self.chain_id)

    @property
    def is_native(self) -> bool:
        return self.contract_address.lower() == NATIVE_PLACEHOLDER

    def to_dict(self) -> Dict[str, Any]:
        return {
            "contract_address": self.contract_address,
            "chain_id": self.chain_id,
            "name": self.name,
            "symbol": self.symbol,
            "decimals": self.decimals,
            "token_type": self.token_type.value,
            "balance": list(self.balance),
            "canonical_id": self.key.canonical_id,
        }


@dataclass(frozen=True)
class TransferIntent:
    """A fully parametrized "send this asset to this recipient" intent."""

    asset: AssetKey
    recipient: AddressOrName
    amount: Optional[str] = None      # Decimal string in whole-asset units
    raw_amount: Optional[int] = None  # Same amount in the asset's smallest unit

    @property
    def amount_decimal(self) -> Optional[Decimal]:
        return Decimal(self.amount) if self.amount is not None else None


# -----------------------------------------------------------------------------
# Contract metadata fetch outcomes
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class NameOnly:
    name: str


@dataclass(frozen=True)
class SymbolOnly:
    symbol: str


@dataclass(frozen=True)
class BalanceOnly:
    balance: List[str]


@dataclass(frozen=True)
class DecimalsOnly:
    decimals: int


@dataclass(frozen=True)
class FungibleComplete:
    name: str
    symbol: str
    decimals: int


@dataclass(frozen=True)
class NonFungibleComplete:
    name: str
    symbol: str
    balance: List[str]
    token_type: TokenType = TokenType.ERC721


@dataclass(frozen=True)
class DelegateComplete:
    pass


@dataclass(frozen=True)
class Failed:
    network_reachable: Optional[bool] = None


ContractData = Union[
    NameOnly,
    SymbolOnly,
    BalanceOnly,
    DecimalsOnly,
    FungibleComplete,
    NonFungibleComplete,
    DelegateComplete,
    Failed,
]


__all__ = [
    "Asset",
    "AssetKey",
    "BalanceOnly",
    "ContractData",
    "DecimalsOnly",
    "DelegateComplete",
    "Failed",
    "FungibleComplete",
    "NameOnly",
    "NonFungibleComplete",
    "SymbolOnly",
    "TokenType",
    "TransferIntent",
]
