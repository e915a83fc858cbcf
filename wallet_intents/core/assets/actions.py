"""Follow-up actions offered after scanning a plain address."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from ..chain_types import ChainId, ChainRegistry


class ScanAction(str, Enum):
    SEND_TO_ADDRESS = "send_to_address"
    ADD_CUSTOM_TOKEN = "add_custom_token"
    WATCH_WALLET = "watch_wallet"
    OPEN_IN_EXPLORER = "open_in_explorer"


ALL_ACTIONS: List[ScanAction] = [
    ScanAction.SEND_TO_ADDRESS,
    ScanAction.ADD_CUSTOM_TOKEN,
    ScanAction.WATCH_WALLET,
    ScanAction.OPEN_IN_EXPLORER,
]

# Used by callers when no chain context is available
FALLBACK_ACTION = ScanAction.WATCH_WALLET


def available_actions(contract_address: str, known_asset: Optional[bool]) -> List[ScanAction]:
    """Return the permissible actions for a scanned address, in display order.

    ``known_asset`` is None when there is no chain context at all; the result
    is then empty and the caller must fall back to ``FALLBACK_ACTION``.
    """
    if known_asset is None:
        return []
    if known_asset:
        return [a for a in ALL_ACTIONS if a is not ScanAction.ADD_CUSTOM_TOKEN]
    return list(ALL_ACTIONS)


def explorer_url(chains: ChainRegistry, chain_id: ChainId, address: str) -> Optional[str]:
    """Target for OPEN_IN_EXPLORER, or None when the chain has no explorer."""
    return chains.explorer_address_url(chain_id, address)


__all__ = ["ALL_ACTIONS", "FALLBACK_ACTION", "ScanAction", "available_actions", "explorer_url"]
