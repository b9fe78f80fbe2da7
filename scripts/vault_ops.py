#!/usr/bin/env python3
"""
Drive the vault Move module from the command line.

Usage:
    python scripts/vault_ops.py state
    python scripts/vault_ops.py balance --address 0x...
    python scripts/vault_ops.py deposit --amount 1000
    python scripts/vault_ops.py rebalance --hedge 3000 --farm 7000 --dry-run
"""
import argparse
import asyncio
import json
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from plexi.onchain.client import VaultChainClient, octas_to_apt
from plexi.onchain.errors import ConfigurationError, TransactionError, ViewCallError
from plexi.onchain.operations import VaultOperations


def print_header(title: str) -> None:
    print("=" * 60)
    print(f"  {title}")
    print("=" * 60)
    print()


async def show_state(client: VaultChainClient, address: str = None) -> None:
    ops = VaultOperations(client)
    state = await client.get_vault_state()
    shares = await client.get_user_shares(address)
    print(f"Vault: {client.get_config().vault_address}")
    print(f"  Initialized:  {state.is_initialized}")
    print(f"  Asset token:  {state.asset_token}")
    print(f"  Total assets: {state.total_assets}")
    print(f"  Total shares: {state.total_shares}")
    print(f"  Share price:  {state.share_price:.6f}")
    print()
    print(f"Account: {address or client.address}")
    print(f"  Shares:       {shares}")
    print(f"  Assets value: {await ops.convert_to_assets(shares)}")


async def show_balance(client: VaultChainClient, address: str = None) -> None:
    octas = await client.get_account_balance(address)
    print(f"Account: {address or client.address}")
    print(f"  Balance: {octas_to_apt(octas):,.8f} APT ({octas} octas)")


async def run_transaction(client: VaultChainClient, args: argparse.Namespace) -> bool:
    ops = VaultOperations(client)
    if args.command == "init":
        call = ("init_vault", [args.asset_token, args.cooldown])
        submit = lambda: ops.init_vault(args.asset_token, args.cooldown)
    elif args.command == "deposit":
        call = ("deposit", [args.amount, args.receiver or client.address])
        submit = lambda: ops.deposit(args.amount, args.receiver)
    elif args.command == "withdraw":
        receiver = args.receiver or client.address
        call = ("withdraw", [args.amount, receiver, client.address])
        submit = lambda: ops.withdraw(args.amount, args.receiver)
    else:
        call = ("trigger_rebalance", [args.hedge, args.farm])
        submit = lambda: ops.trigger_rebalance(args.hedge, args.farm)

    entry_point, call_args = call
    payload = client.build_payload(entry_point, call_args)
    print(f"Function: {payload.value.module}::{payload.value.function}")
    print(f"Arguments: {json.dumps(call_args)}")
    print(f"Signer: {client.address}")
    print()

    if args.dry_run:
        print_header("DRY RUN - Transaction NOT submitted")
        return True

    result = await submit()
    print(f"✅ Transaction finalized: {result.tx_hash}")
    print(f"   Gas used: {result.gas_used}")
    print(f"   VM status: {result.vm_status}")
    return True


async def main(args: argparse.Namespace) -> int:
    try:
        client = VaultChainClient()
    except ConfigurationError as exc:
        print(f"❌ ERROR: {exc}")
        return 1

    async with client:
        print_header(f"PLEXI VAULT {args.command.upper()}")
        try:
            if args.command == "state":
                await show_state(client, args.address)
            elif args.command == "balance":
                await show_balance(client, args.address)
            elif args.command == "shares":
                print(f"Shares: {await client.get_user_shares(args.address)}")
            else:
                await run_transaction(client, args)
        except (TransactionError, ViewCallError, ValueError) as exc:
            print(f"❌ ERROR: {exc}")
            return 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Plexi vault operations")
    sub = parser.add_subparsers(dest="command", required=True)

    for name in ("state", "balance", "shares"):
        query = sub.add_parser(name)
        query.add_argument("--address", default=None, help="Account address (defaults to signer)")

    init = sub.add_parser("init")
    init.add_argument("--asset-token", default="USDC")
    init.add_argument("--cooldown", type=int, default=3600)

    deposit = sub.add_parser("deposit")
    deposit.add_argument("--amount", type=int, required=True)
    deposit.add_argument("--receiver", default=None)

    withdraw = sub.add_parser("withdraw")
    withdraw.add_argument("--amount", type=int, required=True)
    withdraw.add_argument("--receiver", default=None)

    rebalance = sub.add_parser("rebalance")
    rebalance.add_argument("--hedge", type=int, required=True, help="Hedge allocation (bps)")
    rebalance.add_argument("--farm", type=int, required=True, help="Farm allocation (bps)")

    for tx_parser in (init, deposit, withdraw, rebalance):
        tx_parser.add_argument("--dry-run", action="store_true", help="Print the call without submitting")

    return parser


if __name__ == "__main__":
    sys.exit(asyncio.run(main(build_parser().parse_args())))
