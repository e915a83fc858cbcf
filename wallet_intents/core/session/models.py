"""
Remote session models.

Sessions, the inbound RPC actions a connected peer can send, and the
response shapes returned to it. Every action carries an opaque request id
and the session-scoped origin URL; both are echoed back on the response.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Tuple, Union

from eth_utils import decode_hex, is_hex
from pydantic import BaseModel, ConfigDict, Field

from .errors import DispatchErrorKind

RequestId = Union[int, str]

PERSONAL_MESSAGE_PREFIX = b"\x19Ethereum Signed Message:\n"


class AccountCapability(str, Enum):
    """What the account bound to a session may do."""
    SIGNING = "signing"
    WATCH_ONLY = "watch_only"


class SessionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


@dataclass(frozen=True)
class WalletAccount:
    address: str
    capability: AccountCapability = AccountCapability.SIGNING


@dataclass(frozen=True)
class PeerMetadata:
    """Self-description of the remote application."""
    name: str
    url: str
    description: str = ""
    icons: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SessionProposal:
    """Handshake result awaiting the wallet's approval."""
    session_id: str
    uri: str
    peer: PeerMetadata


@dataclass
class Session:
    """An established connection between the wallet and a remote peer."""
    id: str
    peer: PeerMetadata
    chain_id: int
    account: WalletAccount
    uri: str = ""
    connected_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def capability(self) -> AccountCapability:
        return self.account.capability

    @property
    def is_watch_only(self) -> bool:
        return self.account.capability == AccountCapability.WATCH_ONLY

    def to_descriptor(self) -> "SessionDescriptor":
        return SessionDescriptor(
            session_id=self.id,
            uri=self.uri,
            chain_id=self.chain_id,
            account_address=self.account.address,
            peer_name=self.peer.name,
            peer_url=self.peer.url,
        )


class SessionDescriptor(BaseModel):
    """The minimal record persisted to reconnect the last session."""

    session_id: str = Field(description="Identifier replayed on reconnect")
    uri: str = Field(default="", description="Handshake URI the session was created from")
    chain_id: int = Field(description="Chain the session was approved for")
    account_address: str = Field(description="Wallet account bound to the session")
    peer_name: str = Field(default="", description="Remote application name")
    peer_url: str = Field(default="", description="Remote application URL")


# ---------------------------------------------------------------------------
# Inbound actions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class UnconfirmedTransaction:
    """A transaction proposed by the peer, not yet confirmed by the user."""
    to: Optional[str]
    value: str = "0x0"
    data: str = "0x"
    gas: Optional[str] = None
    gas_price: Optional[str] = None
    nonce: Optional[str] = None


@dataclass(frozen=True)
class RpcAction:
    """Base for inbound session requests."""
    request_id: RequestId
    origin: str

    method: ClassVar[str] = ""


@dataclass(frozen=True)
class SignTransaction(RpcAction):
    transaction: UnconfirmedTransaction
    method: ClassVar[str] = "eth_signTransaction"


@dataclass(frozen=True)
class SendTransaction(RpcAction):
    transaction: UnconfirmedTransaction
    method: ClassVar[str] = "eth_sendTransaction"


@dataclass(frozen=True)
class SignMessage(RpcAction):
    message: str  # hex
    method: ClassVar[str] = "eth_sign"


@dataclass(frozen=True)
class SignPersonalMessage(RpcAction):
    message: str  # hex
    method: ClassVar[str] = "personal_sign"


@dataclass(frozen=True)
class SignTypedMessage(RpcAction):
    typed_data: Dict[str, Any]
    method: ClassVar[str] = "eth_signTypedData"


@dataclass(frozen=True)
class SendRawTransaction(RpcAction):
    raw_transaction: str  # hex
    method: ClassVar[str] = "eth_sendRawTransaction"


@dataclass(frozen=True)
class GetTransactionCount(RpcAction):
    method: ClassVar[str] = "eth_getTransactionCount"


@dataclass(frozen=True)
class UnknownAction(RpcAction):
    requested_method: str = ""


# ---------------------------------------------------------------------------
# Message signing
# ---------------------------------------------------------------------------


class MessageKind(str, Enum):
    MESSAGE = "message"
    PERSONAL_MESSAGE = "personal_message"
    TYPED_DATA = "typed_data"


def message_bytes(message: str) -> bytes:
    """Decode a hex message; text that is not hex is taken as UTF-8."""
    if message.startswith(("0x", "0X")) and is_hex(message) and len(message) % 2 == 0:
        return decode_hex(message)
    return message.encode("utf-8")


@dataclass(frozen=True)
class SignableMessage:
    """A message to sign, framed according to its kind."""

    kind: MessageKind
    data: bytes = b""
    typed_data: Optional[Dict[str, Any]] = None

    @classmethod
    def from_action(cls, action: RpcAction) -> "SignableMessage":
        if isinstance(action, SignMessage):
            return cls(MessageKind.MESSAGE, message_bytes(action.message))
        elif isinstance(action, SignPersonalMessage):
            return cls(MessageKind.PERSONAL_MESSAGE, message_bytes(action.message))
        elif isinstance(action, SignTypedMessage):
            return cls(MessageKind.TYPED_DATA, typed_data=action.typed_data)
        raise TypeError(f"{type(action).__name__} is not a message-signing action")

    @property
    def framed(self) -> bytes:
        """Bytes handed to the signer."""
        if self.kind == MessageKind.PERSONAL_MESSAGE:
            return PERSONAL_MESSAGE_PREFIX + str(len(self.data)).encode("ascii") + self.data
        if self.kind == MessageKind.TYPED_DATA:
            return json.dumps(self.typed_data or {}, sort_keys=True, separators=(",", ":")).encode("utf-8")
        return self.data

    @property
    def display_text(self) -> str:
        """What the user is shown before approving."""
        if self.kind == MessageKind.TYPED_DATA:
            return json.dumps(self.typed_data or {}, indent=2, sort_keys=True)
        try:
            return self.data.decode("utf-8")
        except UnicodeDecodeError:
            return "0x" + self.data.hex()


# ---------------------------------------------------------------------------
# Confirmation results
# ---------------------------------------------------------------------------


class ConfirmType(str, Enum):
    SIGN = "sign"
    SIGN_THEN_SEND = "sign_then_send"


@dataclass(frozen=True)
class SignedTransaction:
    data: bytes


@dataclass(frozen=True)
class SentTransaction:
    transaction_id: str


ConfirmResult = Union[SignedTransaction, SentTransaction]


# ---------------------------------------------------------------------------
# Outbound responses
# ---------------------------------------------------------------------------


class ResponseKind(str, Enum):
    SIGNED_TRANSACTION = "signed_transaction"
    SENT_TRANSACTION = "sent_transaction"
    SIGNED_MESSAGE = "signed_message"
    SIGNED_PERSONAL_MESSAGE = "signed_personal_message"
    SIGNED_TYPED_MESSAGE = "signed_typed_message"
    TRANSACTION_COUNT = "transaction_count"


class ResponseEnvelope(BaseModel):
    """Successful result for one request, echoing its id and origin."""

    model_config = ConfigDict(frozen=True)

    request_id: RequestId = Field(description="Id of the request being answered")
    origin: str = Field(description="Session-scoped URL the request arrived on")
    kind: ResponseKind = Field(description="Which success shape the value carries")
    value: str = Field(description="0x-prefixed hex result")

    def to_wire(self) -> Dict[str, Any]:
        return {"jsonrpc": "2.0", "id": self.request_id, "result": self.value}


class Rejection(BaseModel):
    """Failed request. The reason stays local; the peer only sees a rejection."""

    model_config = ConfigDict(frozen=True)

    request_id: RequestId = Field(description="Id of the request being answered")
    origin: str = Field(description="Session-scoped URL the request arrived on")
    reason: DispatchErrorKind = Field(description="Local diagnostic reason")
    detail: Optional[str] = Field(default=None, description="Local diagnostic detail")

    def to_wire(self) -> Dict[str, Any]:
        return {
            "jsonrpc": "2.0",
            "id": self.request_id,
            "error": {"code": -32000, "message": "rejected"},
        }


DispatchOutcome = Union[ResponseEnvelope, Rejection]


__all__ = [
    "AccountCapability",
    "ConfirmResult",
    "ConfirmType",
    "DispatchOutcome",
    "GetTransactionCount",
    "MessageKind",
    "PERSONAL_MESSAGE_PREFIX",
    "PeerMetadata",
    "Rejection",
    "RequestId",
    "ResponseEnvelope",
    "ResponseKind",
    "RpcAction",
    "SendRawTransaction",
    "SendTransaction",
    "SentTransaction",
    "Session",
    "SessionDescriptor",
    "SessionProposal",
    "SessionState",
    "SignMessage",
    "SignPersonalMessage",
    "SignTransaction",
    "SignTypedMessage",
    "SignableMessage",
    "SignedTransaction",
    "UnconfirmedTransaction",
    "UnknownAction",
    "WalletAccount",
    "message_bytes",
]
