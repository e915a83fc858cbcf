"""
Contract metadata over JSON-RPC.

Probes a contract with ``eth_call`` for the ERC-165 interfaces of
non-fungible standards, then ``name()``, ``symbol()`` and ``decimals()``,
and condenses the answers into a single ContractData outcome.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx
from eth_abi import decode as decode_abi
from eth_abi.exceptions import DecodingError
from eth_utils import function_signature_to_4byte_selector

from ..core.assets.models import (
    ContractData,
    DecimalsOnly,
    Failed,
    FungibleComplete,
    NameOnly,
    NonFungibleComplete,
    SymbolOnly,
    TokenType,
)
from ..core.chain_types import ChainRegistry
from .base import ContractMetadataProvider

logger = logging.getLogger(__name__)

ERC721_INTERFACE_ID = bytes.fromhex("80ac58cd")
ERC1155_INTERFACE_ID = bytes.fromhex("d9b67a26")

_NAME_SELECTOR = function_signature_to_4byte_selector("name()")
_SYMBOL_SELECTOR = function_signature_to_4byte_selector("symbol()")
_DECIMALS_SELECTOR = function_signature_to_4byte_selector("decimals()")
_SUPPORTS_INTERFACE_SELECTOR = function_signature_to_4byte_selector("supportsInterface(bytes4)")


class ContractCallError(Exception):
    """The node answered, but the call reverted, returned nothing or returned garbage."""


class RpcContractMetadataProvider(ContractMetadataProvider):
    """Fetches token metadata directly from a chain's JSON-RPC endpoint."""

    name = "rpc_contract_metadata"
    timeout_s = 15

    def __init__(
        self,
        chains: ChainRegistry,
        client: Optional[httpx.AsyncClient] = None,
        timeout_s: Optional[int] = None,
    ):
        self._chains = chains
        if timeout_s is not None:
            self.timeout_s = timeout_s
        self._client = client or httpx.AsyncClient(timeout=self.timeout_s)

    async def ready(self) -> bool:
        return bool(self._chains.chain_ids)

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {"status": "unavailable", "reason": "No chains configured"}
        return {"status": "healthy", "chains": self._chains.chain_ids}

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch(self, address: str, chain_id: int) -> ContractData:
        rpc_url = self._chains.rpc_url(chain_id)
        if not rpc_url:
            logger.warning(f"No RPC URL configured for chain {chain_id}")
            return Failed(network_reachable=None)

        try:
            return await self._fetch(rpc_url, address)
        except httpx.HTTPError as exc:
            logger.warning(f"Metadata fetch for {address} on chain {chain_id} failed: {exc}")
            return Failed(network_reachable=False)

    async def _fetch(self, rpc_url: str, address: str) -> ContractData:
        token_type = await self._non_fungible_type(rpc_url, address)

        name = await self._call_text(rpc_url, address, _NAME_SELECTOR)
        symbol = await self._call_text(rpc_url, address, _SYMBOL_SELECTOR)

        if token_type is not None:
            return NonFungibleComplete(
                name=name or "",
                symbol=symbol or "",
                balance=[],
                token_type=token_type,
            )

        decimals = await self._call_uint(rpc_url, address, _DECIMALS_SELECTOR)

        if name is not None and symbol is not None and decimals is not None:
            return FungibleComplete(name=name, symbol=symbol, decimals=decimals)
        if name is not None:
            return NameOnly(name=name)
        if symbol is not None:
            return SymbolOnly(symbol=symbol)
        if decimals is not None:
            return DecimalsOnly(decimals=decimals)
        return Failed(network_reachable=True)

    async def _non_fungible_type(self, rpc_url: str, address: str) -> Optional[TokenType]:
        for interface_id, token_type in (
            (ERC721_INTERFACE_ID, TokenType.ERC721),
            (ERC1155_INTERFACE_ID, TokenType.ERC1155),
        ):
            data = _SUPPORTS_INTERFACE_SELECTOR + interface_id.ljust(32, b"\x00")
            supported = await self._call_uint(rpc_url, address, data)
            if supported == 1:
                return token_type
        return None

    async def _call_text(self, rpc_url: str, address: str, data: bytes) -> Optional[str]:
        try:
            raw = await self._eth_call(rpc_url, address, data)
        except ContractCallError:
            return None

        try:
            (value,) = decode_abi(["string"], raw)
        except (DecodingError, ValueError, OverflowError):
            # Some older tokens return bytes32 instead of string
            if len(raw) != 32:
                return None
            value = raw.rstrip(b"\x00").decode("utf-8", errors="ignore")
        return value.strip() or None

    async def _call_uint(self, rpc_url: str, address: str, data: bytes) -> Optional[int]:
        try:
            raw = await self._eth_call(rpc_url, address, data)
            (value,) = decode_abi(["uint256"], raw)
        except (ContractCallError, DecodingError, ValueError):
            return None
        return int(value)

    async def _eth_call(self, rpc_url: str, address: str, data: bytes) -> bytes:
        payload = {
            "jsonrpc": "2.0",
            "method": "eth_call",
            "params": [{"to": address, "data": "0x" + data.hex()}, "latest"],
            "id": 1,
        }

        response = await self._client.post(rpc_url, json=payload)
        response.raise_for_status()
        try:
            result = response.json()
        except ValueError as exc:
            raise ContractCallError(f"Malformed RPC reply: {exc}") from exc

        if not isinstance(result, dict):
            raise ContractCallError(f"Malformed RPC reply: {type(result).__name__}")
        if "error" in result:
            raise ContractCallError(f"RPC error: {result['error']}")

        hex_result = result.get("result") or "0x"
        if not isinstance(hex_result, str):
            raise ContractCallError(f"Malformed eth_call result: {hex_result!r}")
        try:
            raw = bytes.fromhex(hex_result[2:] if hex_result.startswith("0x") else hex_result)
        except ValueError as exc:
            raise ContractCallError(f"Malformed eth_call result: {hex_result[:20]!r}") from exc
        if not raw:
            raise ContractCallError(f"Empty result from {address}")
        return raw


__all__ = ["RpcContractMetadataProvider", "ERC721_INTERFACE_ID", "ERC1155_INTERFACE_ID"]
