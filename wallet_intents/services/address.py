"""Helpers for validating wallet addresses, names and key material."""

from __future__ import annotations

import re
from functools import lru_cache

from eth_utils import to_checksum_address

_EVM_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")
_PRIVATE_KEY_RE = re.compile(r"^(?:0x)?[a-fA-F0-9]{64}$")
_ENS_NAME_RE = re.compile(
    r"^(?:[a-z0-9](?:[a-z0-9_-]*[a-z0-9])?\.)+[a-z][a-z0-9-]*[a-z0-9]$",
    re.IGNORECASE,
)


def is_valid_evm_address(address: str) -> bool:
    if not address:
        return False
    return bool(_EVM_ADDRESS_RE.fullmatch(address))


@lru_cache(maxsize=512)
def checksum_address(address: str) -> str:
    """Return the EIP-55 checksum form of a valid EVM address."""

    if not is_valid_evm_address(address):
        raise ValueError(f"Not an EVM address: {address!r}")
    return to_checksum_address(address)


def same_address(a: str, b: str) -> bool:
    return a.lower() == b.lower()


def looks_like_ens_name(value: str) -> bool:
    """Return True for dotted, human-readable names such as ``vitalik.eth``."""

    if not value or len(value) > 255:
        return False
    return bool(_ENS_NAME_RE.fullmatch(value))


def is_private_key(value: str) -> bool:
    return bool(_PRIVATE_KEY_RE.fullmatch(value))


__all__ = [
    "checksum_address",
    "is_private_key",
    "is_valid_evm_address",
    "looks_like_ens_name",
    "same_address",
]
