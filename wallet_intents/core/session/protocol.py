"""Collaborator interfaces for remote sessions.

The session core never renders UI, holds keys or speaks the session wire
protocol itself; it reaches those through the protocols below:
- ConfirmationUI: asks the user to approve, sign or acknowledge
- TransactionBroadcaster: forwards a signed raw transaction to the network
- SessionTransport: handshake, reconnect and the per-request reply channel
- ConnectionApprover: lets the user pick a chain for a new session, or decline
- SessionStateStore: persists the last session descriptor

Confirmation calls may wait indefinitely; cancellation is signalled by
raising UserCancelledError.
"""

from __future__ import annotations

from typing import List, Optional, Protocol

from .models import (
    ConfirmResult,
    ConfirmType,
    PeerMetadata,
    Rejection,
    ResponseEnvelope,
    Session,
    SessionDescriptor,
    SessionProposal,
    SignableMessage,
    UnconfirmedTransaction,
)


class ConfirmationUI(Protocol):
    async def confirm_transaction(
        self,
        session: Session,
        transaction: UnconfirmedTransaction,
        confirm_type: ConfirmType,
    ) -> ConfirmResult:
        """Show the itemized confirmation; sign, and also send for SIGN_THEN_SEND."""
        ...

    async def sign_message(self, session: Session, message: SignableMessage) -> bytes:
        """Show the message and return its signature."""
        ...

    async def approve_raw_transaction(self, raw_transaction: str) -> bool:
        """Textual prompt to forward a raw payload; False when declined."""
        ...

    async def show_success_feedback(self) -> None:
        ...

    async def show_transaction_in_progress(self) -> None:
        ...

    async def display_error(self, error: BaseException) -> None:
        ...


class TransactionBroadcaster(Protocol):
    async def send_raw_transaction(self, session: Session, raw_transaction: str) -> str:
        """Broadcast and return the transaction id; raise BroadcastFailedError on failure."""
        ...


class SessionTransport(Protocol):
    async def connect(self, uri: str) -> SessionProposal:
        ...

    async def approve(self, proposal: SessionProposal, chain_id: int, account_address: str) -> None:
        ...

    async def reject_proposal(self, proposal: SessionProposal) -> None:
        ...

    async def reconnect(self, descriptor: SessionDescriptor) -> PeerMetadata:
        ...

    async def disconnect(self, session_id: str) -> None:
        ...

    async def fulfill(self, session_id: str, response: ResponseEnvelope) -> None:
        ...

    async def reject(self, session_id: str, rejection: Rejection) -> None:
        ...


class ConnectionApprover(Protocol):
    async def choose_chain(self, peer: PeerMetadata, chain_ids: List[int]) -> Optional[int]:
        """Return the chain to connect on, or None to decline."""
        ...


class SessionStateStore(Protocol):
    def load(self) -> Optional[SessionDescriptor]:
        ...

    def save(self, descriptor: SessionDescriptor) -> None:
        ...

    def clear(self) -> None:
        ...


__all__ = [
    "ConfirmationUI",
    "ConnectionApprover",
    "SessionStateStore",
    "SessionTransport",
    "TransactionBroadcaster",
]
