"""
Tests for EIP-681 payment request parsing.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from wallet_intents.config import ChainConfig
from wallet_intents.core.chain_types import NATIVE_PLACEHOLDER, ChainRegistry
from wallet_intents.core.payloads.classifier import classify
from wallet_intents.core.payloads.eip681 import Eip681Parser, normalize_amount
from wallet_intents.core.payloads.errors import (
    ConfigurationInvalidError,
    MissingChainEndpointError,
    ParameterInvalidError,
    ParseErrorKind,
)
from wallet_intents.core.payloads.models import Name, PaymentRequest
from wallet_intents.providers.base import NameResolutionError

VITALIK = "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"
USDC = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"


@pytest.fixture
def chains():
    return ChainRegistry({
        1: ChainConfig(name="Ethereum", rpc_url="https://rpc.example/1", explorer_url="https://etherscan.io"),
        137: ChainConfig(name="Polygon", rpc_url="https://rpc.example/137", native_symbol="MATIC"),
    })


@pytest.fixture
def name_resolver():
    resolver = MagicMock()
    resolver.resolve = AsyncMock(return_value=USDC.lower())
    return resolver


@pytest.fixture
def parser(chains, name_resolver):
    return Eip681Parser(chains, name_resolver)


def payment(text: str) -> PaymentRequest:
    payload = classify(text)
    assert isinstance(payload, PaymentRequest)
    return payload


# =============================================================================
# Amount normalization
# =============================================================================

class TestNormalizeAmount:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("1.5e2", "150"),
            ("150", "150"),
            ("100", "100"),
            ("1.50", "1.5"),
            ("0", "0"),
            ("1e18", "1000000000000000000"),
            ("2.014e18", "2014000000000000000"),
        ],
    )
    def test_plain_decimal_output(self, raw, expected):
        assert normalize_amount(raw) == expected

    @pytest.mark.parametrize(
        "raw",
        ["abc", "", "1.2.3", "NaN", "Infinity", "-1", "1e50000000", str(2**256), "1.2e78"],
    )
    def test_rejects_non_amounts(self, raw):
        with pytest.raises(ParameterInvalidError) as exc_info:
            normalize_amount(raw)
        assert exc_info.value.kind == ParseErrorKind.PARAMETER_INVALID


# =============================================================================
# Parsing
# =============================================================================

class TestNativeTransfers:
    @pytest.mark.asyncio
    async def test_native_send(self, parser):
        request = await parser.parse(payment(f"ethereum:{VITALIK}?value=1.5e18"), active_chain_id=1)

        assert request.contract_address == NATIVE_PLACEHOLDER
        assert request.is_native
        assert request.chain_id == 1
        assert request.recipient == VITALIK
        assert request.amount == "1500000000000000000"

    @pytest.mark.asyncio
    async def test_out_of_range_amount(self, parser):
        with pytest.raises(ParameterInvalidError):
            await parser.parse(payment(f"ethereum:{VITALIK}?value=1e50000000"), active_chain_id=1)

    @pytest.mark.asyncio
    async def test_amount_is_optional(self, parser):
        request = await parser.parse(payment(f"ethereum:{VITALIK}"), active_chain_id=1)
        assert request.amount is None

    @pytest.mark.asyncio
    async def test_name_recipient_is_kept_as_name(self, parser, name_resolver):
        request = await parser.parse(payment("ethereum:alice.eth?value=1"), active_chain_id=1)

        assert request.recipient == Name("alice.eth")
        name_resolver.resolve.assert_not_awaited()


class TestTokenTransfers:
    @pytest.mark.asyncio
    async def test_transfer(self, parser):
        request = await parser.parse(
            payment(f"pay:{USDC}/transfer?address={VITALIK}&uint256=1.5e2"),
            active_chain_id=1,
        )

        assert request.contract_address == USDC
        assert request.recipient == VITALIK
        assert request.amount == "150"
        assert not request.is_native

    @pytest.mark.asyncio
    async def test_contract_name_is_resolved(self, parser, name_resolver):
        request = await parser.parse(
            payment(f"ethereum:usdc.tokens.eth/transfer?address={VITALIK}"),
            active_chain_id=1,
        )

        name_resolver.resolve.assert_awaited_once_with("usdc.tokens.eth")
        assert request.contract_address == USDC

    @pytest.mark.asyncio
    async def test_name_resolution_failure(self, parser, name_resolver):
        name_resolver.resolve.side_effect = NameResolutionError("not found")

        with pytest.raises(ParameterInvalidError):
            await parser.parse(
                payment(f"ethereum:usdc.tokens.eth/transfer?address={VITALIK}"),
                active_chain_id=1,
            )

    @pytest.mark.asyncio
    async def test_name_without_resolver(self, chains):
        parser = Eip681Parser(chains)

        with pytest.raises(ParameterInvalidError):
            await parser.parse(
                payment(f"ethereum:usdc.tokens.eth/transfer?address={VITALIK}"),
                active_chain_id=1,
            )

    @pytest.mark.asyncio
    async def test_recipient_name(self, parser):
        request = await parser.parse(
            payment(f"ethereum:{USDC}/transfer?address=Bob.eth&uint256=1"),
            active_chain_id=1,
        )
        assert request.recipient == Name("bob.eth")

    @pytest.mark.asyncio
    async def test_missing_recipient(self, parser):
        with pytest.raises(ParameterInvalidError):
            await parser.parse(payment(f"ethereum:{USDC}/transfer?uint256=1"), active_chain_id=1)

    @pytest.mark.asyncio
    async def test_invalid_recipient(self, parser):
        with pytest.raises(ParameterInvalidError):
            await parser.parse(
                payment(f"ethereum:{USDC}/transfer?address=nobody&uint256=1"),
                active_chain_id=1,
            )

    @pytest.mark.asyncio
    async def test_invalid_amount(self, parser):
        with pytest.raises(ParameterInvalidError):
            await parser.parse(
                payment(f"ethereum:{USDC}/transfer?address={VITALIK}&uint256=lots"),
                active_chain_id=1,
            )

    @pytest.mark.asyncio
    async def test_unsupported_function(self, parser):
        with pytest.raises(ConfigurationInvalidError) as exc_info:
            await parser.parse(payment(f"ethereum:{USDC}/approve?address={VITALIK}"), active_chain_id=1)
        assert exc_info.value.kind == ParseErrorKind.CONFIGURATION_INVALID


class TestChainSelection:
    @pytest.mark.asyncio
    async def test_active_chain_by_default(self, parser):
        request = await parser.parse(payment(f"ethereum:{VITALIK}"), active_chain_id=137)
        assert request.chain_id == 137

    @pytest.mark.asyncio
    async def test_chain_id_param_overrides_active_chain(self, parser):
        request = await parser.parse(payment(f"ethereum:{VITALIK}?chainId=137"), active_chain_id=1)
        assert request.chain_id == 137

    @pytest.mark.asyncio
    async def test_chain_suffix(self, parser):
        request = await parser.parse(payment(f"ethereum:{VITALIK}@137"), active_chain_id=1)
        assert request.chain_id == 137

    @pytest.mark.asyncio
    async def test_hex_chain_id(self, parser):
        request = await parser.parse(payment(f"ethereum:{VITALIK}?chainId=0x89"), active_chain_id=1)
        assert request.chain_id == 137

    @pytest.mark.asyncio
    async def test_non_integer_chain_id(self, parser):
        with pytest.raises(ParameterInvalidError):
            await parser.parse(payment(f"ethereum:{VITALIK}?chainId=mainnet"), active_chain_id=1)

    @pytest.mark.asyncio
    async def test_unconfigured_chain(self, parser):
        with pytest.raises(MissingChainEndpointError) as exc_info:
            await parser.parse(payment(f"ethereum:{VITALIK}?chainId=56"), active_chain_id=1)

        assert exc_info.value.chain_id == 56
        assert exc_info.value.kind == ParseErrorKind.MISSING_CHAIN_ENDPOINT

    @pytest.mark.asyncio
    async def test_unconfigured_active_chain(self, parser):
        with pytest.raises(MissingChainEndpointError):
            await parser.parse(payment(f"ethereum:{VITALIK}"), active_chain_id=56)
