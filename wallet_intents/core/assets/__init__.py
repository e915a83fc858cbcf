"""
Asset resolution: token store, metadata outcomes, payment resolution and the
follow-up actions offered for scanned addresses.
"""

from .models import (
    Asset,
    AssetKey,
    BalanceOnly,
    ContractData,
    DecimalsOnly,
    DelegateComplete,
    Failed,
    FungibleComplete,
    NameOnly,
    NonFungibleComplete,
    SymbolOnly,
    TokenType,
    TransferIntent,
)
from .store import InMemoryTokenStore, TokenStore
from .actions import ALL_ACTIONS, FALLBACK_ACTION, ScanAction, available_actions, explorer_url

__all__ = [
    "ALL_ACTIONS",
    "Asset",
    "AssetKey",
    "BalanceOnly",
    "ContractData",
    "DecimalsOnly",
    "DelegateComplete",
    "FALLBACK_ACTION",
    "Failed",
    "FungibleComplete",
    "InMemoryTokenStore",
    "NameOnly",
    "NonFungibleComplete",
    "ScanAction",
    "SymbolOnly",
    "TokenStore",
    "TokenType",
    "TransferIntent",
    "available_actions",
    "explorer_url",
]
