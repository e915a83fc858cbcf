"""Builds a SessionLifecycleManager wired from settings."""

from __future__ import annotations

from typing import Optional

from ...config import Settings, settings as default_settings
from ..chain_types import ChainRegistry
from .dispatcher import SessionRequestDispatcher
from .lifecycle import SessionLifecycleManager
from .models import Session, WalletAccount
from .persistence import FileSessionStateStore
from .protocol import (
    ConfirmationUI,
    ConnectionApprover,
    SessionStateStore,
    SessionTransport,
    TransactionBroadcaster,
)


def build_session_manager(
    wallet: WalletAccount,
    transport: SessionTransport,
    approver: ConnectionApprover,
    ui: ConfirmationUI,
    broadcaster: TransactionBroadcaster,
    *,
    config: Optional[Settings] = None,
    store: Optional[SessionStateStore] = None,
) -> SessionLifecycleManager:
    """Create the lifecycle manager for ``wallet``.

    The chain registry, the persisted-session file and the
    eth_getTransactionCount placeholder come from ``config`` (the global
    settings by default). Pass ``store`` to keep session state elsewhere.
    """
    config = config or default_settings
    placeholder = config.transaction_count_placeholder

    def make_dispatcher(session: Session) -> SessionRequestDispatcher:
        return SessionRequestDispatcher(
            session,
            ui,
            broadcaster,
            transaction_count_placeholder=placeholder,
        )

    return SessionLifecycleManager(
        wallet=wallet,
        transport=transport,
        approver=approver,
        store=store if store is not None else FileSessionStateStore(config.session_state_path),
        chains=ChainRegistry.from_settings(config),
        dispatcher_factory=make_dispatcher,
    )


__all__ = ["build_session_manager"]
