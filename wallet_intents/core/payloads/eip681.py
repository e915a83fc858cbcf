"""
EIP-681 payment request parsing.

Validates the parts split out by the classifier and produces a fully typed
request: which contract, on which chain, to whom, and how much.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, localcontext
from typing import Optional

from ...providers.base import NameResolutionError, NameResolver
from ...services.address import checksum_address, is_valid_evm_address, looks_like_ens_name
from ..chain_types import NATIVE_PLACEHOLDER, ChainId, ChainRegistry, parse_chain_id
from .errors import (
    ConfigurationInvalidError,
    MissingChainEndpointError,
    ParameterInvalidError,
)
from .models import AddressOrName, Name, PaymentRequest

logger = logging.getLogger(__name__)

TRANSFER_FUNCTION = "transfer"
CHAIN_ID_PARAM = "chainId"
RECIPIENT_PARAM = "address"
TOKEN_AMOUNT_PARAM = "uint256"
NATIVE_AMOUNT_PARAM = "value"

# uint256 needs 78 significant digits
_AMOUNT_PRECISION = 100
MAX_UINT256 = 2**256 - 1


@dataclass(frozen=True)
class Eip681Request:
    """A validated payment request, ready for asset resolution."""

    contract_address: str
    chain_id: ChainId
    recipient: AddressOrName
    amount: Optional[str] = None  # Plain decimal string, in the asset's smallest unit

    @property
    def is_native(self) -> bool:
        return self.contract_address == NATIVE_PLACEHOLDER


def normalize_amount(value: str) -> str:
    """Normalize a possibly scientific-notation amount to a plain decimal string.

    >>> normalize_amount("1.5e2")
    '150'
    """
    with localcontext() as ctx:
        ctx.prec = _AMOUNT_PRECISION
        try:
            amount = Decimal(value.strip())
        except (ArithmeticError, AttributeError):
            raise ParameterInvalidError(f"Amount {value!r} is not a decimal number")

        if not amount.is_finite() or amount < 0:
            raise ParameterInvalidError(f"Amount {value!r} is not a non-negative number")
        if amount > MAX_UINT256:
            raise ParameterInvalidError(f"Amount {value!r} does not fit in a uint256")

        try:
            normalized = format(amount.normalize(), "f")
        except ArithmeticError:
            raise ParameterInvalidError(f"Amount {value!r} is out of range")

    return normalized


class Eip681Parser:
    """Turns a classified PaymentRequest into an Eip681Request.

    Supports native-currency sends (no function) and token ``transfer`` calls.
    A contract given by name is resolved through the NameResolver; the chain
    comes from the ``chainId`` parameter, then the ``@chain`` suffix, then the
    caller's active chain.
    """

    def __init__(
        self,
        chains: ChainRegistry,
        name_resolver: Optional[NameResolver] = None,
    ):
        self._chains = chains
        self._name_resolver = name_resolver

    async def parse(self, request: PaymentRequest, *, active_chain_id: ChainId) -> Eip681Request:
        function_name = request.function_name
        params = request.params

        if function_name is not None and function_name.lower() != TRANSFER_FUNCTION:
            raise ConfigurationInvalidError(f"Unsupported payment function {function_name!r}")

        chain_id = self._select_chain(request, active_chain_id)

        if function_name is None:
            contract = NATIVE_PLACEHOLDER
            recipient = request.target
            raw_amount = params.get(NATIVE_AMOUNT_PARAM)
        else:
            contract = await self._resolve_contract(request.target)
            recipient = self._parse_recipient(params.get(RECIPIENT_PARAM))
            raw_amount = params.get(TOKEN_AMOUNT_PARAM)

        amount = normalize_amount(raw_amount) if raw_amount else None

        return Eip681Request(
            contract_address=contract,
            chain_id=chain_id,
            recipient=recipient,
            amount=amount,
        )

    def _select_chain(self, request: PaymentRequest, active_chain_id: ChainId) -> ChainId:
        requested = request.params.get(CHAIN_ID_PARAM) or request.chain_id
        if requested is None:
            chain_id = active_chain_id
        else:
            chain_id = parse_chain_id(requested)
            if chain_id is None:
                raise ParameterInvalidError(f"Chain id {requested!r} is not an integer")

        if not self._chains.is_configured(chain_id):
            raise MissingChainEndpointError(
                f"No configured chain for chain id {chain_id}",
                chain_id=chain_id,
            )
        return chain_id

    async def _resolve_contract(self, target: AddressOrName) -> str:
        if not isinstance(target, Name):
            return target

        if self._name_resolver is None:
            raise ParameterInvalidError(f"Cannot resolve {target.value!r}: no name resolver")

        try:
            address = await self._name_resolver.resolve(target.value)
        except NameResolutionError as exc:
            logger.info(f"Name resolution failed for {target.value}: {exc}")
            raise ParameterInvalidError(f"Could not resolve {target.value!r}") from exc

        if not is_valid_evm_address(address):
            raise ParameterInvalidError(f"{target.value!r} resolved to invalid address {address!r}")
        return checksum_address(address)

    @staticmethod
    def _parse_recipient(value: Optional[str]) -> AddressOrName:
        if not value:
            raise ParameterInvalidError("Token transfer is missing the recipient address")
        if is_valid_evm_address(value):
            return checksum_address(value)
        if looks_like_ens_name(value):
            return Name(value.lower())
        raise ParameterInvalidError(f"Recipient {value!r} is neither an address nor a name")


__all__ = [
    "Eip681Parser",
    "Eip681Request",
    "normalize_amount",
]
