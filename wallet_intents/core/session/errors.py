"""
Session errors.

Dispatch errors terminate exactly one request with a rejection; they never
close the session. Connection errors come from failed handshakes.
"""

from enum import Enum
from typing import Optional


class DispatchErrorKind(str, Enum):
    CAPABILITY_DENIED = "capability_denied"
    USER_CANCELLED = "user_cancelled"
    BROADCAST_FAILED = "broadcast_failed"
    UNSUPPORTED_ACTION = "unsupported_action"
    SIGNING_FAILED = "signing_failed"


class DispatchError(Exception):
    """Raised inside a request handler; converted to a Rejection by the dispatcher."""

    def __init__(self, kind: DispatchErrorKind, message: str = "", cause: Optional[BaseException] = None):
        super().__init__(message or kind.value)
        self.kind = kind
        self.message = message or kind.value
        self.cause = cause


class UserCancelledError(Exception):
    """Signalled by a confirmation collaborator when the user backs out."""


class BroadcastFailedError(Exception):
    """Signalled by a broadcaster when the network rejects a transaction."""


class SessionConnectionError(Exception):
    """A session handshake could not be completed."""

    def __init__(self, message: str, uri: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.uri = uri


__all__ = [
    "BroadcastFailedError",
    "DispatchError",
    "DispatchErrorKind",
    "SessionConnectionError",
    "UserCancelledError",
]
