"""Command-line interface for the lending controller."""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from .config import load_config
from .errors import ControllerError
from .exponential import to_mantissa
from .logging_setup import configure_logging
from .oracles import PythOracle
from .services import Inspector, build_environment, build_oracle, build_pools

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="lending-controller",
        description="Risk engine for a pooled lending protocol",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    sub.add_parser("markets", help="List markets and their risk parameters")
    sub.add_parser("summary", help="Surplus / shortfall of every account with a position")

    liquidity_parser = sub.add_parser("liquidity", help="Account surplus / shortfall")
    liquidity_parser.add_argument("account", help="Account to inspect")

    data_parser = sub.add_parser(
        "account-data", help="Collateral, debt and health factor for a withdrawal pool"
    )
    data_parser.add_argument("account", help="Account to inspect")
    data_parser.add_argument("pool", help="Pool the account would withdraw from")

    seize_parser = sub.add_parser("seize", help="Quote collateral seized for a repayment")
    seize_parser.add_argument("pool_borrowed", help="Pool whose debt is repaid")
    seize_parser.add_argument("pool_collateral", help="Pool whose shares are seized")
    seize_parser.add_argument("repay", help="Repay amount in whole tokens, e.g. 100.5")

    return parser


async def _run(args: argparse.Namespace) -> str:
    """Execute the selected command and return its report."""
    configure_logging(args.log_level)
    config = load_config(args.config)

    pools = build_pools(config)
    oracle = build_oracle(config.price_oracle, pools)
    if isinstance(oracle, PythOracle):
        await oracle.refresh()

    env = build_environment(config, pools, oracle)
    inspector = Inspector(env.controller, env.pools)

    if args.command == "markets":
        return inspector.markets_report()
    if args.command == "summary":
        return inspector.summary_report(env.pools.accounts())
    if args.command == "liquidity":
        return inspector.liquidity_report(args.account)
    if args.command == "account-data":
        return inspector.account_data_report(args.account, args.pool)
    if args.command == "seize":
        repay = to_mantissa(args.repay, env.pools.token_decimals(args.pool_borrowed))
        return inspector.seize_report(args.pool_borrowed, args.pool_collateral, repay)
    raise ValueError(f"Unknown command: {args.command}")


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        report = asyncio.run(_run(args))
    except ControllerError as e:
        logger.error("%s: %s", type(e).__name__, e.message)
        sys.exit(2)
    print(report)
