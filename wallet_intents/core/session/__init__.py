"""
Remote sessions: request dispatch with the capability gate, and the
lifecycle of the single session a wallet may hold.
"""

from .errors import (
    BroadcastFailedError,
    DispatchError,
    DispatchErrorKind,
    SessionConnectionError,
    UserCancelledError,
)
from .models import (
    AccountCapability,
    ConfirmType,
    DispatchOutcome,
    GetTransactionCount,
    PeerMetadata,
    Rejection,
    ResponseEnvelope,
    ResponseKind,
    RpcAction,
    SendRawTransaction,
    SendTransaction,
    SentTransaction,
    Session,
    SessionDescriptor,
    SessionProposal,
    SessionState,
    SignableMessage,
    SignedTransaction,
    SignMessage,
    SignPersonalMessage,
    SignTransaction,
    SignTypedMessage,
    UnconfirmedTransaction,
    UnknownAction,
    WalletAccount,
)
from .persistence import FileSessionStateStore, InMemorySessionStateStore
from .dispatcher import SessionRequestDispatcher
from .lifecycle import SessionLifecycleManager
from .factory import build_session_manager

__all__ = [
    "AccountCapability",
    "BroadcastFailedError",
    "ConfirmType",
    "DispatchError",
    "DispatchErrorKind",
    "DispatchOutcome",
    "FileSessionStateStore",
    "GetTransactionCount",
    "InMemorySessionStateStore",
    "PeerMetadata",
    "Rejection",
    "ResponseEnvelope",
    "ResponseKind",
    "RpcAction",
    "SendRawTransaction",
    "SendTransaction",
    "SentTransaction",
    "Session",
    "SessionConnectionError",
    "SessionDescriptor",
    "SessionLifecycleManager",
    "SessionProposal",
    "SessionRequestDispatcher",
    "SessionState",
    "SignMessage",
    "SignPersonalMessage",
    "SignTransaction",
    "SignTypedMessage",
    "SignableMessage",
    "SignedTransaction",
    "UnconfirmedTransaction",
    "UnknownAction",
    "UserCancelledError",
    "WalletAccount",
    "build_session_manager",
]
