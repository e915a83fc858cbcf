"""
Payload Classifier

Turns an arbitrary scanned or pasted string into exactly one ScannedPayload.
Checks run in a fixed precedence order and the first match wins:

1. Bare address, else payment-request URI
2. Remote-session handshake URI
3. Generic URL covering the whole string
4. JSON object or array
5. Private key
6. Seed phrase (2+ space-separated words) or plain text
"""

from __future__ import annotations

import json
import re
from typing import Dict, Iterable, Optional
from urllib.parse import parse_qsl, urlsplit

from ...services.address import (
    checksum_address,
    is_private_key,
    is_valid_evm_address,
    looks_like_ens_name,
)
from .models import (
    AddressOrName,
    AddressPayload,
    GenericURL,
    JsonPayload,
    Name,
    PaymentRequest,
    PlainText,
    PrivateKey,
    RemoteSessionURI,
    ScannedPayload,
    SeedPhrase,
)

PAYMENT_REQUEST_SCHEMES = frozenset({"ethereum", "pay"})
REMOTE_SESSION_SCHEME = "wc"

_PAY_PREFIX = "pay-"
_WHITESPACE_RE = re.compile(r"\s")


def classify(
    raw: str,
    *,
    payment_schemes: Iterable[str] = PAYMENT_REQUEST_SCHEMES,
) -> ScannedPayload:
    """Classify ``raw`` into a payload variant. Never raises."""

    text = raw.strip()

    value = parse_address_or_payment_request(text, payment_schemes=payment_schemes)
    if value is not None:
        return value

    session_uri = parse_remote_session_uri(text)
    if session_uri is not None:
        return session_uri

    if _is_whole_string_url(text):
        return GenericURL(url=text)

    if _is_json_document(text):
        return JsonPayload(text=text)

    if is_private_key(text):
        return PrivateKey(text=text)

    words = text.split(" ")
    if len(words) <= 1:
        return PlainText(text=text)
    return SeedPhrase(words=tuple(words))


def parse_address_or_payment_request(
    text: str,
    *,
    payment_schemes: Iterable[str] = PAYMENT_REQUEST_SCHEMES,
) -> Optional[ScannedPayload]:
    """Parse a bare address or a ``<scheme>:<target>[/<fn>][?<query>]`` URI."""

    if is_valid_evm_address(text):
        return AddressPayload(address=checksum_address(text))

    scheme, sep, rest = text.partition(":")
    if not sep or scheme.lower() not in {s.lower() for s in payment_schemes}:
        return None

    path, _, query = rest.partition("?")
    target_part, _, function_name = path.partition("/")

    if target_part.lower().startswith(_PAY_PREFIX):
        target_part = target_part[len(_PAY_PREFIX):]
    target_text, at, chain_part = target_part.partition("@")

    target = _parse_target(target_text)
    if target is None:
        return None
    if at and not chain_part:
        return None

    return PaymentRequest(
        protocol_name=scheme.lower(),
        target=target,
        function_name=function_name or None,
        params=_parse_query(query),
        chain_id=chain_part or None,
    )


def parse_remote_session_uri(text: str) -> Optional[RemoteSessionURI]:
    """Parse ``wc:<topic>@<version>?<params>`` handshake URIs (v1 and v2)."""

    scheme, sep, rest = text.partition(":")
    if not sep or scheme.lower() != REMOTE_SESSION_SCHEME:
        return None
    if rest.startswith("//"):
        rest = rest[2:]

    path, _, query = rest.partition("?")
    topic, at, version_text = path.partition("@")
    if not topic or not at or not _is_version_number(version_text):
        return None

    version = int(version_text)
    params = _parse_query(query)

    if version == 1:
        bridge = params.get("bridge")
        key = params.get("key")
        if not bridge or not key:
            return None
        return RemoteSessionURI(uri=text, topic=topic, version=version, bridge=bridge, key=key)

    if version == 2:
        sym_key = params.get("symKey")
        if not sym_key:
            return None
        return RemoteSessionURI(
            uri=text,
            topic=topic,
            version=version,
            relay_protocol=params.get("relay-protocol"),
            sym_key=sym_key,
        )

    return None


def _parse_target(value: str) -> Optional[AddressOrName]:
    if is_valid_evm_address(value):
        return checksum_address(value)
    if looks_like_ens_name(value):
        return Name(value.lower())
    return None


def _parse_query(query: str) -> Dict[str, str]:
    if not query:
        return {}
    return dict(parse_qsl(query, keep_blank_values=True))


def _is_whole_string_url(text: str) -> bool:
    # A link only counts when nothing but the link is present
    if not text or _WHITESPACE_RE.search(text):
        return False
    try:
        parts = urlsplit(text)
    except ValueError:
        return False
    return bool(parts.scheme) and bool(parts.netloc)


def _is_json_document(text: str) -> bool:
    try:
        parsed = json.loads(text)
    except (ValueError, RecursionError):
        return False
    return isinstance(parsed, (dict, list))


def _is_version_number(value: str) -> bool:
    # ASCII digits only; str.isdigit() also accepts superscripts and other scripts
    return 0 < len(value) <= 3 and value.isascii() and value.isdigit()


__all__ = [
    "PAYMENT_REQUEST_SCHEMES",
    "REMOTE_SESSION_SCHEME",
    "classify",
    "parse_address_or_payment_request",
    "parse_remote_session_uri",
]
