#!/usr/bin/env python3
"""
Command-line inspection of the resolved environment configuration.

Usage:
    attestkit-config show
    attestkit-config contract AccountRegistryLogic --network rinkeby
    attestkit-config provider --network mainnet
"""

import argparse
import asyncio
import logging
import os
import sys
from typing import List, Optional

from ..utils.json_helpers import dumps
from .base import ConfigError, configure_logging, load_env_file
from .manager import ConfigProvider
from .networks import Network, contract_address_for, provider_for

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Inspect the attestkit environment configuration")
    parser.add_argument("--env-file", help="Path to a .env file to load first")
    subparsers = parser.add_subparsers(dest="command", required=True)

    show = subparsers.add_parser("show", help="Print the resolved configuration as JSON")
    show.add_argument("--no-redact", action="store_true", help="Print secret values as well")

    contract = subparsers.add_parser("contract", help="Print the address of a contract")
    contract.add_argument("name", help="Contract name as configured in CONTRACTS")
    contract.add_argument("--network", default=Network.MAINNET.value)

    provider = subparsers.add_parser("provider", help="Print the provider endpoint of a network")
    provider.add_argument("--network", default=Network.MAINNET.value)

    return parser


async def run(args: argparse.Namespace, provider: ConfigProvider) -> str:
    """Resolve the configuration and render the requested output."""
    config = await provider.get()
    if args.command == "contract":
        return contract_address_for(config, args.name, args.network)
    if args.command == "provider":
        return provider_for(config, args.network)
    return dumps(config.to_document(redact=not args.no_redact), indent=2, sort_keys=True)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    load_env_file(args.env_file)
    configure_logging(os.environ.get("LOG_LEVEL"))

    try:
        output = asyncio.run(run(args, ConfigProvider()))
    except ConfigError as e:
        logger.error(f"❌ {e}")
        return 1

    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
