#!/usr/bin/env python3
"""Simple CLI for trying payload classification and payment resolution locally"""

import argparse
import asyncio
import sys
from dataclasses import asdict, is_dataclass
from typing import Optional

from wallet_intents.config import settings
from wallet_intents.logging_config import setup_logging
from wallet_intents.core.assets.resolver import AssetResolver
from wallet_intents.core.assets.store import InMemoryTokenStore
from wallet_intents.core.chain_types import ChainRegistry
from wallet_intents.core.payloads import (
    Eip681Parser,
    PaymentRequest,
    PaymentRequestError,
    classify,
)
from wallet_intents.providers.contract_metadata import RpcContractMetadataProvider
from wallet_intents.providers.name_resolution import HttpNameResolver


def print_payload(payload) -> None:
    """Pretty print a classified payload"""
    print(f"\nKind: {payload.kind.value}")
    print("-" * 40)
    fields = asdict(payload) if is_dataclass(payload) else {}
    for key, value in fields.items():
        if payload.kind.value in ("private_key", "seed_phrase"):
            value = "<redacted>"
        print(f"{key:>14}: {value}")


def cli_classify(text: str) -> None:
    payload = classify(text, payment_schemes=settings.payment_request_schemes)
    print_payload(payload)


async def cli_resolve(text: str, chain_id: Optional[int]) -> int:
    payload = classify(text, payment_schemes=settings.payment_request_schemes)
    if not isinstance(payload, PaymentRequest):
        print(f"❌ Not a payment request (classified as {payload.kind.value})")
        return 1

    chains = ChainRegistry.from_settings(settings)
    metadata = RpcContractMetadataProvider(chains, timeout_s=settings.request_timeout_seconds)
    names = HttpNameResolver(settings.ens_api_url, timeout_s=settings.request_timeout_seconds)
    parser = Eip681Parser(chains, names)
    resolver = AssetResolver(InMemoryTokenStore(), metadata, chains)

    active_chain = chain_id or settings.default_chain_id
    print(f"🔍 Resolving payment request on {chains.get_chain_name(active_chain)}...")

    try:
        request = await parser.parse(payload, active_chain_id=active_chain)
        intent = await resolver.resolve(request)
    except PaymentRequestError as e:
        print(f"❌ {e.kind.value}: {e.message}")
        return 1
    finally:
        await metadata.aclose()
        await names.aclose()

    asset = resolver.lookup(request)
    print("\nTransfer")
    print("=" * 40)
    print(f"Chain:     {chains.get_chain_name(intent.asset.chain_id)} ({intent.asset.chain_id})")
    if asset is not None:
        print(f"Asset:     {asset.name} ({asset.symbol}, {asset.decimals} decimals)")
    print(f"Contract:  {request.contract_address}")
    print(f"Recipient: {intent.recipient}")
    if intent.amount is not None:
        print(f"Amount:    {intent.amount} (raw {intent.raw_amount})")
    else:
        print("Amount:    not specified")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Wallet intents CLI")
    subparsers = parser.add_subparsers(dest="command")

    classify_parser = subparsers.add_parser("classify", help="Classify scanned text")
    classify_parser.add_argument("text", help="Scanned or pasted text")

    resolve_parser = subparsers.add_parser("resolve", help="Resolve a payment request URI")
    resolve_parser.add_argument("text", help="Payment request URI")
    resolve_parser.add_argument("--chain", type=int, help="Active chain id (default from settings)")

    return parser


async def main() -> int:
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 0

    setup_logging()
    command = args.command.lower()

    if command == "classify":
        cli_classify(args.text)
        return 0

    elif command == "resolve":
        return await cli_resolve(args.text, args.chain)

    print(f"❌ Unknown command: {command}")
    parser.print_help()
    return 1


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
