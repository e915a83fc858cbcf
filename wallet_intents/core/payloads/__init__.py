"""
Scanned payloads: classification of raw text and EIP-681 payment requests.
"""

from .models import (
    AddressOrName,
    AddressPayload,
    GenericURL,
    JsonPayload,
    Name,
    PayloadKind,
    PaymentRequest,
    PlainText,
    PrivateKey,
    RemoteSessionURI,
    ScannedPayload,
    SeedPhrase,
)
from .errors import (
    ConfigurationInvalidError,
    ContractInvalidError,
    MissingChainEndpointError,
    ParameterInvalidError,
    ParseErrorKind,
    PaymentRequestError,
)
from .classifier import classify
from .eip681 import Eip681Parser, Eip681Request, normalize_amount

__all__ = [
    "AddressOrName",
    "AddressPayload",
    "ConfigurationInvalidError",
    "ContractInvalidError",
    "Eip681Parser",
    "Eip681Request",
    "GenericURL",
    "JsonPayload",
    "MissingChainEndpointError",
    "Name",
    "ParameterInvalidError",
    "ParseErrorKind",
    "PayloadKind",
    "PaymentRequest",
    "PaymentRequestError",
    "PlainText",
    "PrivateKey",
    "RemoteSessionURI",
    "ScannedPayload",
    "SeedPhrase",
    "classify",
    "normalize_amount",
]
