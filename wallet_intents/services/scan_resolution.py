"""
Scan resolution service.

Classifies a scanned string and drives it to an outcome:

- address: offer the follow-up actions (WATCH_WALLET when there is no chain
  context), optionally importing the token or building the explorer link
- payment request: parse, then resolve into a TransferIntent
- URL: ask before opening
- anything else: handed back as classified

Only one scan is resolved at a time. A scan arriving while another is being
resolved is ignored; the latch is released when the outcome (success,
cancellation or error) is produced.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Protocol

from ..core.assets.actions import FALLBACK_ACTION, ScanAction, available_actions, explorer_url
from ..core.assets.models import Asset, TransferIntent
from ..core.assets.resolver import AssetResolver
from ..core.assets.store import TokenStore
from ..core.chain_types import ChainId, ChainRegistry
from ..core.payloads.classifier import PAYMENT_REQUEST_SCHEMES, classify
from ..core.payloads.eip681 import Eip681Parser
from ..core.payloads.models import AddressPayload, GenericURL, PaymentRequest, ScannedPayload
from .token_import import TokenImportService

logger = logging.getLogger(__name__)


class ChoicePrompt(Protocol):
    async def choose_action(self, address: str, actions: List[ScanAction]) -> Optional[ScanAction]:
        """Return the chosen action, or None when the user cancels."""
        ...

    async def confirm_open_url(self, url: str) -> bool:
        ...


@dataclass(frozen=True)
class ScanOutcome:
    """What a resolved scan produced."""

    payload: ScannedPayload
    action: Optional[ScanAction] = None
    transfer: Optional[TransferIntent] = None
    imported_asset: Optional[Asset] = None
    explorer_url: Optional[str] = None
    cancelled: bool = False


class ScanResolutionService:
    def __init__(
        self,
        parser: Eip681Parser,
        resolver: AssetResolver,
        store: TokenStore,
        chains: ChainRegistry,
        prompt: ChoicePrompt,
        *,
        active_chain_id: ChainId,
        token_importer: Optional[TokenImportService] = None,
        payment_schemes: Iterable[str] = PAYMENT_REQUEST_SCHEMES,
    ):
        self._parser = parser
        self._resolver = resolver
        self._store = store
        self._chains = chains
        self._prompt = prompt
        self._token_importer = token_importer
        self._payment_schemes = frozenset(s.lower() for s in payment_schemes)
        self.active_chain_id = active_chain_id
        self._in_flight = False

    @property
    def is_busy(self) -> bool:
        return self._in_flight

    async def handle_scan(self, raw: str) -> Optional[ScanOutcome]:
        """Resolve one scan; returns None when another scan is still in flight."""
        if self._in_flight:
            logger.debug("Ignoring scan while another is being resolved")
            return None

        self._in_flight = True
        try:
            payload = classify(raw, payment_schemes=self._payment_schemes)
            logger.info(f"Scanned payload classified as {payload.kind.value}")
            return await self._route(payload)
        finally:
            self._in_flight = False

    async def _route(self, payload: ScannedPayload) -> ScanOutcome:
        if isinstance(payload, AddressPayload):
            return await self._resolve_address(payload)
        elif isinstance(payload, PaymentRequest):
            request = await self._parser.parse(payload, active_chain_id=self.active_chain_id)
            transfer = await self._resolver.resolve(request)
            return ScanOutcome(payload=payload, transfer=transfer)
        elif isinstance(payload, GenericURL):
            confirmed = await self._prompt.confirm_open_url(payload.url)
            return ScanOutcome(payload=payload, cancelled=not confirmed)
        return ScanOutcome(payload=payload)

    def known_asset(self, address: str) -> Optional[bool]:
        """Whether the address is a known asset on the active chain; None without chain context."""
        if not self._chains.is_configured(self.active_chain_id):
            return None
        return self._store.lookup(address, self.active_chain_id) is not None

    async def _resolve_address(self, payload: AddressPayload) -> ScanOutcome:
        actions = available_actions(payload.address, self.known_asset(payload.address))
        if not actions:
            return ScanOutcome(payload=payload, action=FALLBACK_ACTION)

        action = await self._prompt.choose_action(payload.address, actions)
        if action is None:
            return ScanOutcome(payload=payload, cancelled=True)

        if action == ScanAction.OPEN_IN_EXPLORER:
            url = explorer_url(self._chains, self.active_chain_id, payload.address)
            return ScanOutcome(payload=payload, action=action, explorer_url=url)

        if action == ScanAction.ADD_CUSTOM_TOKEN and self._token_importer is not None:
            asset = await self._token_importer.add_imported_token(payload.address, self.active_chain_id)
            return ScanOutcome(payload=payload, action=action, imported_asset=asset)

        return ScanOutcome(payload=payload, action=action)


__all__ = ["ChoicePrompt", "ScanOutcome", "ScanResolutionService"]
