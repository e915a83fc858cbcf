"""
Session Lifecycle Manager

Owns the single remote session of one wallet:

    DISCONNECTED -> CONNECTING -> CONNECTED -> DISCONNECTED

connect() always tears down the current session before the new handshake,
so two sessions never coexist. Lifecycle operations are serialized by a
per-wallet lock. The chain approval prompt and request dispatch run outside
the lock, so a pending prompt or confirmation never blocks a disconnect; a
connect whose prompt is overtaken by disconnect() or a newer connect() is
abandoned and its proposal rejected.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from ...services.address import same_address
from ..chain_types import ChainRegistry
from .dispatcher import SessionRequestDispatcher
from .errors import DispatchErrorKind, SessionConnectionError
from .models import (
    DispatchOutcome,
    Rejection,
    ResponseEnvelope,
    RpcAction,
    Session,
    SessionProposal,
    SessionState,
    WalletAccount,
)
from .protocol import ConnectionApprover, SessionStateStore, SessionTransport

logger = logging.getLogger(__name__)

DispatcherFactory = Callable[[Session], SessionRequestDispatcher]


class SessionLifecycleManager:
    """Connect, reconnect and disconnect the wallet's remote session."""

    def __init__(
        self,
        wallet: WalletAccount,
        transport: SessionTransport,
        approver: ConnectionApprover,
        store: SessionStateStore,
        chains: ChainRegistry,
        dispatcher_factory: DispatcherFactory,
    ):
        self.wallet = wallet
        self._transport = transport
        self._approver = approver
        self._store = store
        self._chains = chains
        self._dispatcher_factory = dispatcher_factory

        self._lock = asyncio.Lock()
        self._state = SessionState.DISCONNECTED
        self._session: Optional[Session] = None
        self._dispatcher: Optional[SessionRequestDispatcher] = None
        self._reconnect_attempted = False
        # Bumped by connect(), reconnect_persisted() and disconnect(); a pending
        # connect only completes if it is still the latest attempt
        self._attempt = 0

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def is_connected(self) -> bool:
        return self._state == SessionState.CONNECTED and self._session is not None

    async def connect(self, uri: str) -> Optional[Session]:
        """Replace any current session with one created from ``uri``.

        Returns None when the user declines the connection, or when a
        disconnect or another connect happens while the user is choosing.
        """
        async with self._lock:
            await self._teardown()
            self._attempt += 1
            attempt = self._attempt
            self._state = SessionState.CONNECTING

            try:
                proposal = await self._transport.connect(uri)
            except Exception as exc:
                self._state = SessionState.DISCONNECTED
                logger.warning(f"Session handshake failed: {exc}")
                raise SessionConnectionError(f"Handshake failed: {exc}", uri=uri) from exc

        # The user prompt runs unlocked so disconnect() or a newer connect() can supersede it
        try:
            chain_id = await self._approver.choose_chain(proposal.peer, self._chains.chain_ids)
        except Exception:
            async with self._lock:
                if attempt == self._attempt:
                    self._state = SessionState.DISCONNECTED
            raise

        async with self._lock:
            if attempt != self._attempt:
                logger.info(f"Connection to {proposal.peer.name} superseded while awaiting approval")
                await self._reject_proposal(proposal)
                return None

            if chain_id is None:
                logger.info(f"Connection to {proposal.peer.name} declined")
                await self._reject_proposal(proposal)
                self._state = SessionState.DISCONNECTED
                return None

            if not self._chains.is_configured(chain_id):
                self._state = SessionState.DISCONNECTED
                raise SessionConnectionError(f"Chain {chain_id} is not configured", uri=uri)

            try:
                await self._transport.approve(proposal, chain_id, self.wallet.address)
            except Exception as exc:
                self._state = SessionState.DISCONNECTED
                logger.warning(f"Session approval failed: {exc}")
                raise SessionConnectionError(f"Approval failed: {exc}", uri=uri) from exc

            session = Session(
                id=proposal.session_id,
                peer=proposal.peer,
                chain_id=chain_id,
                account=self.wallet,
                uri=uri,
            )
            self._activate(session)
            self._store.save(session.to_descriptor())
            logger.info(
                f"Session {session.id} connected to {session.peer.name} on "
                f"{self._chains.get_chain_name(chain_id)}"
            )
            return session

    async def reconnect_persisted(self) -> Optional[Session]:
        """Replay the last persisted session, once per manager.

        Failures are logged and ignored.
        """
        async with self._lock:
            if self._reconnect_attempted or self._session is not None:
                return self._session
            self._reconnect_attempted = True

            descriptor = self._store.load()
            if descriptor is None:
                return None
            if not same_address(descriptor.account_address, self.wallet.address):
                logger.info(f"Persisted session {descriptor.session_id} belongs to another account")
                return None

            self._attempt += 1
            self._state = SessionState.CONNECTING
            try:
                peer = await self._transport.reconnect(descriptor)
            except Exception as exc:
                self._state = SessionState.DISCONNECTED
                logger.warning(f"Reconnect of session {descriptor.session_id} failed: {exc}")
                return None

            session = Session(
                id=descriptor.session_id,
                peer=peer,
                chain_id=descriptor.chain_id,
                account=self.wallet,
                uri=descriptor.uri,
            )
            self._activate(session)
            logger.info(f"Session {session.id} reconnected")
            return session

    async def disconnect(self) -> None:
        """Tear down the current session, if any, and forget the persisted one."""
        async with self._lock:
            self._attempt += 1
            await self._teardown()
            self._store.clear()

    async def handle_request(self, action: RpcAction) -> DispatchOutcome:
        """Dispatch an inbound action on the current session and deliver the outcome."""
        session, dispatcher = self._session, self._dispatcher
        if session is None or dispatcher is None:
            logger.info(f"Rejecting request {action.request_id}: no connected session")
            return Rejection(
                request_id=action.request_id,
                origin=action.origin,
                reason=DispatchErrorKind.UNSUPPORTED_ACTION,
                detail="No connected session",
            )

        outcome = await dispatcher.dispatch(action)

        try:
            if isinstance(outcome, ResponseEnvelope):
                await self._transport.fulfill(session.id, outcome)
            else:
                await self._transport.reject(session.id, outcome)
        except Exception as exc:
            logger.warning(f"Failed to deliver response for request {action.request_id}: {exc}")
        return outcome

    def _activate(self, session: Session) -> None:
        self._session = session
        self._dispatcher = self._dispatcher_factory(session)
        self._state = SessionState.CONNECTED

    async def _teardown(self) -> None:
        session = self._session
        self._session = None
        self._dispatcher = None
        self._state = SessionState.DISCONNECTED
        if session is None:
            return

        # The persisted record only ever describes a live session
        self._store.clear()
        try:
            await self._transport.disconnect(session.id)
        except Exception as exc:
            logger.warning(f"Error disconnecting session {session.id}: {exc}")
        logger.info(f"Session {session.id} disconnected")

    async def _reject_proposal(self, proposal: SessionProposal) -> None:
        try:
            await self._transport.reject_proposal(proposal)
        except Exception as exc:
            logger.warning(f"Failed to reject session proposal: {exc}")


__all__ = ["DispatcherFactory", "SessionLifecycleManager"]
