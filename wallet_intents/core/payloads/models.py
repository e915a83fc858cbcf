"""
Scanned payload models.

A scanned or pasted string classifies into exactly one of these variants.
Every variant carries a ``kind`` tag so callers can branch on the enum or on
the class.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Dict, Optional, Tuple, Union


class PayloadKind(str, Enum):
    """Mutually exclusive payload types, in classification precedence order."""

    ADDRESS = "address"
    PAYMENT_REQUEST = "payment_request"
    REMOTE_SESSION_URI = "remote_session_uri"
    URL = "url"
    JSON = "json"
    PRIVATE_KEY = "private_key"
    SEED_PHRASE = "seed_phrase"
    PLAIN_TEXT = "plain_text"


@dataclass(frozen=True)
class Name:
    """A human-readable name (e.g. ``alice.eth``) that still needs resolving."""

    value: str

    def __str__(self) -> str:
        return self.value


# Checksummed address string, or a name awaiting resolution
AddressOrName = Union[str, Name]


class ScannedPayload:
    """Base class for classified payloads."""

    kind: ClassVar[PayloadKind]


@dataclass(frozen=True)
class AddressPayload(ScannedPayload):
    kind: ClassVar[PayloadKind] = PayloadKind.ADDRESS

    address: str


@dataclass(frozen=True)
class PaymentRequest(ScannedPayload):
    """A payment-request URI split into its parts, not yet validated."""

    kind: ClassVar[PayloadKind] = PayloadKind.PAYMENT_REQUEST

    protocol_name: str
    target: AddressOrName
    function_name: Optional[str] = None
    params: Dict[str, str] = field(default_factory=dict)
    chain_id: Optional[str] = None  # "@<chain>" suffix of the target, unparsed

    @property
    def target_is_name(self) -> bool:
        return isinstance(self.target, Name)


@dataclass(frozen=True)
class RemoteSessionURI(ScannedPayload):
    """Handshake URI for a remote signing session (``wc:`` scheme)."""

    kind: ClassVar[PayloadKind] = PayloadKind.REMOTE_SESSION_URI

    uri: str
    topic: str
    version: int
    bridge: Optional[str] = None
    key: Optional[str] = None
    relay_protocol: Optional[str] = None
    sym_key: Optional[str] = None


@dataclass(frozen=True)
class GenericURL(ScannedPayload):
    kind: ClassVar[PayloadKind] = PayloadKind.URL

    url: str


@dataclass(frozen=True)
class JsonPayload(ScannedPayload):
    kind: ClassVar[PayloadKind] = PayloadKind.JSON

    text: str


@dataclass(frozen=True)
class PrivateKey(ScannedPayload):
    kind: ClassVar[PayloadKind] = PayloadKind.PRIVATE_KEY

    text: str

    def __repr__(self) -> str:
        return "PrivateKey(<redacted>)"


@dataclass(frozen=True)
class SeedPhrase(ScannedPayload):
    kind: ClassVar[PayloadKind] = PayloadKind.SEED_PHRASE

    words: Tuple[str, ...]

    def __repr__(self) -> str:
        return f"SeedPhrase(<{len(self.words)} words>)"


@dataclass(frozen=True)
class PlainText(ScannedPayload):
    kind: ClassVar[PayloadKind] = PayloadKind.PLAIN_TEXT

    text: str


__all__ = [
    "AddressOrName",
    "AddressPayload",
    "GenericURL",
    "JsonPayload",
    "Name",
    "PayloadKind",
    "PaymentRequest",
    "PlainText",
    "PrivateKey",
    "RemoteSessionURI",
    "ScannedPayload",
    "SeedPhrase",
]
