"""
Payment request errors.

Raised while parsing or resolving one payment request. Each error ends that
resolution attempt only; classification itself never raises.
"""

from enum import Enum
from typing import Optional


class ParseErrorKind(str, Enum):
    """Why a payment request could not be turned into a transfer."""

    CONFIGURATION_INVALID = "configuration_invalid"  # Malformed URI shape
    CONTRACT_INVALID = "contract_invalid"            # Not a usable fungible asset
    PARAMETER_INVALID = "parameter_invalid"          # Bad amount, chain id, or name
    MISSING_CHAIN_ENDPOINT = "missing_chain_endpoint"  # No configured chain matches


class PaymentRequestError(Exception):
    """Base exception for payment request parsing and resolution."""

    kind: ParseErrorKind = ParseErrorKind.CONFIGURATION_INVALID

    def __init__(self, message: str, *, chain_id: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.chain_id = chain_id


class ConfigurationInvalidError(PaymentRequestError):
    kind = ParseErrorKind.CONFIGURATION_INVALID


class ContractInvalidError(PaymentRequestError):
    kind = ParseErrorKind.CONTRACT_INVALID


class ParameterInvalidError(PaymentRequestError):
    kind = ParseErrorKind.PARAMETER_INVALID


class MissingChainEndpointError(PaymentRequestError):
    kind = ParseErrorKind.MISSING_CHAIN_ENDPOINT


__all__ = [
    "ConfigurationInvalidError",
    "ContractInvalidError",
    "MissingChainEndpointError",
    "ParameterInvalidError",
    "ParseErrorKind",
    "PaymentRequestError",
]
