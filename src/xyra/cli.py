"""Command-line front end.

Usage:
    xyra chains
    xyra user-id --chain sepolia --address 0x...
    xyra supply --chain sepolia --asset ETH --amount 0.1
    xyra borrow --chain sepolia --asset ETH --amount 0.01 --counter-asset USDC@base_sepolia
    xyra repay --chain zeta_testnet --asset ETH.SEPOLIA --amount 0.001
    xyra withdraw --chain sepolia --asset ETH --amount 0.001 --counter-asset ETH@sepolia
    xyra position --chain sepolia --address 0x... --asset ETH
    xyra status 0x<inbound tx hash> [--wait]
"""

import argparse
import asyncio
import json
import logging
import sys
from decimal import Decimal, InvalidOperation
from typing import Optional, Sequence

import httpx

from xyra.chains import (
    ChainDescriptor,
    TokenDescriptor,
    from_base_units,
    get_all_chains,
    get_chain,
    get_settlement_chain,
    to_base_units,
)
from xyra.config import get_settings
from xyra.errors import XyraError
from xyra.identity import UniversalIdentity, is_evm_address
from xyra.lending import ActionKind, ActionRequest, ExecutionRouter, SettlementClient
from xyra.tracking import CctxTracker
from xyra.wallet import get_wallet_factory

logger = logging.getLogger(__name__)

ACTIONS = [kind.value for kind in ActionKind]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="xyra", description="Cross-chain lending actions")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("chains", help="List supported chains and assets")

    user_id = sub.add_parser("user-id", help="Derive the universal account key")
    user_id.add_argument("--chain", required=True, help="Origin chain key")
    user_id.add_argument("--address", required=True, help="Hex or base58 address")

    for action in ACTIONS:
        p = sub.add_parser(action, help=f"{action.capitalize()} an asset")
        p.add_argument("--chain", required=True, help="Chain the wallet is connected to")
        p.add_argument("--asset", required=True, help="Asset symbol on the connected chain")
        p.add_argument("--amount", required=True, help="Human amount, e.g. 0.1")
        p.add_argument("--beneficiary", help="Account to act for (default: the wallet)")
        p.add_argument("--beneficiary-chain", help="Beneficiary's chain key (default: --chain)")
        p.add_argument(
            "--counter-asset",
            help="Destination asset for borrow/withdraw as SYMBOL@CHAIN or a ZRC-20 address",
        )
        p.add_argument("--solana-address", help="Solana wallet address (SVM chains)")

    position = sub.add_parser("position", help="Read a position from the lending pool")
    position.add_argument("--chain", required=True, help="Origin chain key of the account")
    position.add_argument("--address", required=True, help="Account address")
    position.add_argument("--asset", required=True, help="Asset symbol on --chain")

    status = sub.add_parser("status", help="Cross-chain status of a relayed action")
    status.add_argument("tx_hash", help="Inbound (origin chain) transaction hash")
    status.add_argument("--wait", action="store_true", help="Poll until final")

    return parser


def resolve_token(chain: ChainDescriptor, symbol: str) -> TokenDescriptor:
    token = chain.get_token(symbol)
    if token is None:
        available = ", ".join(t.symbol for t in chain.tokens)
        raise ValueError(f"{symbol} is not supported on {chain.label} (available: {available})")
    return token


def resolve_counter_asset(value: Optional[str]) -> Optional[str]:
    """SYMBOL@CHAIN -> that token's ZRC-20; a raw address passes through."""
    if not value:
        return None
    if is_evm_address(value):
        return value
    if "@" not in value:
        raise ValueError(f"Counter asset must be SYMBOL@CHAIN or an address, got {value!r}")
    symbol, chain_key = value.rsplit("@", 1)
    return resolve_token(get_chain(chain_key), symbol).settlement_asset_address


def parse_amount(value: str) -> Decimal:
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {value!r}")
    if amount <= 0:
        raise ValueError("Amount must be positive")
    return amount


def print_json(data: dict) -> None:
    print(json.dumps(data, indent=2, default=str))


def cmd_chains() -> int:
    for chain in get_all_chains():
        marker = " (settlement)" if chain.is_settlement else ""
        print(f"{chain.key:<14} {chain.numeric_id:>9}  {chain.vm_kind.value}  {chain.label}{marker}")
        for token in chain.tokens:
            print(f"    {token.symbol:<18} {token.decimals:>2}  -> {token.settlement_asset_address}")
    return 0


def cmd_user_id(args: argparse.Namespace) -> int:
    chain = get_chain(args.chain)
    identity = UniversalIdentity.from_address(chain.numeric_id, args.address)
    print_json({
        "chain_id": identity.origin_chain_id,
        "identity": identity.identity_hex,
        "user_id": identity.user_id_hex,
    })
    return 0


async def cmd_action(args: argparse.Namespace) -> int:
    kind = ActionKind(args.command)
    chain = get_chain(args.chain)
    token = resolve_token(chain, args.asset)
    amount = to_base_units(parse_amount(args.amount), token.decimals)
    counter_asset = resolve_counter_asset(args.counter_asset)

    wallet = get_wallet_factory().connect(chain.key, solana_address=args.solana_address)

    beneficiary_chain = get_chain(args.beneficiary_chain or chain.key)
    beneficiary = UniversalIdentity.from_address(
        beneficiary_chain.numeric_id, args.beneficiary or wallet.address
    )

    request_kwargs = {}
    if counter_asset:
        request_kwargs["counter_asset"] = counter_asset
    request = ActionRequest(
        kind=kind,
        beneficiary=beneficiary,
        settlement_asset=token.settlement_asset_address,
        amount=amount,
        **request_kwargs,
    )

    router = ExecutionRouter()
    result = await router.dispatch(request, wallet)
    print_json(result.to_dict())

    if not result.success:
        print(f"{result.error.kind}: {result.error.message}", file=sys.stderr)
        if result.error.remedy:
            print(f"Hint: {result.error.remedy}", file=sys.stderr)
        return 1
    return 0


async def cmd_position(args: argparse.Namespace) -> int:
    settings = get_settings()
    chain = get_chain(args.chain)
    token = resolve_token(chain, args.asset)
    identity = UniversalIdentity.from_address(chain.numeric_id, args.address)

    provider = get_wallet_factory().read_only_provider(get_settlement_chain().key)
    pool = SettlementClient(provider, settings.lending_pool_address)
    asset = token.settlement_asset_address

    balance = await pool.get_underlying_balance(identity, asset)
    print_json({
        "user_id": identity.user_id_hex,
        "asset": asset,
        "shares": await pool.get_user_shares(identity, asset),
        "underlying_balance": str(from_base_units(balance, token.decimals)),
        "max_withdrawable": await pool.get_max_withdrawable(identity, asset),
        "total_collateral_usd": await pool.get_total_collateral_usd(identity),
        "total_debt_usd": await pool.get_total_debt_usd(identity),
        "health_factor": await pool.get_health_factor(identity),
    })
    return 0


async def cmd_status(args: argparse.Namespace) -> int:
    tracker = CctxTracker(poll_interval=get_settings().confirmation_poll_interval)
    if args.wait:
        cctxs = await tracker.wait_for_final(args.tx_hash)
    else:
        cctxs = await tracker.get_cctxs(args.tx_hash)

    if not cctxs:
        print(f"No cross-chain transaction indexed for {args.tx_hash} yet")
        return 0

    for cctx in cctxs:
        print_json({
            "index": cctx.index,
            "status": cctx.status,
            "message": cctx.status_message,
            "outbound": cctx.outbound_hashes,
        })
    return 0 if all(c.succeeded for c in cctxs if c.is_final) else 1


async def run(args: argparse.Namespace) -> int:
    if args.command == "chains":
        return cmd_chains()
    if args.command == "user-id":
        return cmd_user_id(args)
    if args.command == "position":
        return await cmd_position(args)
    if args.command == "status":
        return await cmd_status(args)
    return await cmd_action(args)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    settings = get_settings()
    log_level = logging.DEBUG if (settings.debug or args.verbose) else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        return asyncio.run(run(args))
    except XyraError as e:
        print(f"{e.kind}: {e.message}", file=sys.stderr)
        if e.remedy:
            print(f"Hint: {e.remedy}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    except httpx.HTTPError as e:
        print(f"error: status query failed: {e}", file=sys.stderr)
        return 1
