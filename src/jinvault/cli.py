"""
Command-line interface for the fee distributor.
"""

import argparse
import asyncio
import json
import sys
from dataclasses import asdict, is_dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from jinvault.config_loader import load_config, print_config_summary
from jinvault.core.pubkeys import LAMPORTS_PER_SOL, TOKEN_DECIMALS
from jinvault.distribution.scheduler import DistributionScheduler
from jinvault.interfaces.core import ChainClient
from jinvault.service import create_chain_client, create_session_manager
from jinvault.utils.logger import get_logger, setup_file_logging

if sys.platform != "win32":
    import uvloop

logger = get_logger(__name__)

DEFAULT_CONFIG = "config/distributor.yaml"
DEFAULT_SCHEDULE_INTERVAL = 3600


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        description="Claim creator fees and distribute rewards to token holders."
    )
    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG,
        help=f"Path to the YAML configuration (default: {DEFAULT_CONFIG})",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("status", help="Show wallet address and balances")
    subparsers.add_parser("claim", help="Claim creator fees only")
    subparsers.add_parser("holders", help="List major and medium holders")
    subparsers.add_parser("distribute", help="Run one full distribution cycle")

    buyback = subparsers.add_parser("buyback", help="Buy the protocol token with SOL")
    buyback.add_argument("--sol", type=float, required=True, help="Amount of SOL to spend")

    sell = subparsers.add_parser("sell", help="Sell the protocol token for SOL")
    sell.add_argument("--amount", type=float, required=True, help="Amount of tokens to sell")

    schedule = subparsers.add_parser("schedule", help="Run distribution cycles periodically")
    schedule.add_argument(
        "--interval",
        type=float,
        help="Seconds between cycles (default: schedule.interval from config)",
    )
    schedule.add_argument("--cycles", type=int, help="Stop after this many cycles")

    return parser.parse_args(argv)


def setup_logging(name: str) -> None:
    """Log to a timestamped file under logs/ in addition to stdout."""
    log_dir = Path("logs")
    log_dir.mkdir(exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    setup_file_logging(str(log_dir / f"{name}_{timestamp}.log"))


def _json_default(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return str(value)


def print_result(result: Any) -> None:
    if hasattr(result, "to_dict"):
        payload = result.to_dict()
    elif is_dataclass(result):
        payload = asdict(result)
    else:
        payload = result
    print(json.dumps(payload, indent=2, default=_json_default))


async def run_command(args: argparse.Namespace, cfg: dict, chain: ChainClient) -> int:
    """Execute one CLI command.

    Returns:
        Process exit code
    """
    if args.command == "status":
        init = await chain.initialize()
        print_result(
            {
                "ready": init.ready,
                "error": init.error,
                "wallet": chain.get_wallet_address(),
                "sol_balance": await chain.get_sol_balance() / LAMPORTS_PER_SOL,
                "token_balance": await chain.get_token_balance() / 10**TOKEN_DECIMALS,
                "admin_login": create_session_manager(cfg).enabled,
            }
        )
        return 0 if init.ready else 1

    if args.command == "holders":
        print_result(await chain.get_holders_by_tier())
        return 0

    if args.command == "claim":
        result = await chain.claim_fees()
    elif args.command == "distribute":
        result = await chain.execute_distribution()
    elif args.command == "buyback":
        result = await chain.buyback(int(args.sol * LAMPORTS_PER_SOL))
    elif args.command == "sell":
        result = await chain.sell_token(int(args.amount * 10**TOKEN_DECIMALS))
    elif args.command == "schedule":
        interval = args.interval or cfg.get("schedule", {}).get(
            "interval", DEFAULT_SCHEDULE_INTERVAL
        )
        scheduler = DistributionScheduler(
            chain.execute_distribution, interval, on_result=print_result
        )
        await scheduler.start(max_cycles=args.cycles)
        return 0
    else:
        logger.error(f"Unknown command: {args.command}")
        return 2

    print_result(result)
    return 0 if result.success else 1


async def main(args: argparse.Namespace) -> int:
    """Main entry point for the CLI."""
    try:
        cfg = load_config(args.config)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load configuration: {e!s}")
        return 2

    setup_logging(cfg.get("name", "jinvault"))
    print_config_summary(cfg)

    chain = create_chain_client(cfg)
    try:
        return await run_command(args, cfg, chain)
    except KeyboardInterrupt:
        logger.info("Stopped by user")
        return 130
    finally:
        await chain.close()


def run() -> None:
    args = parse_args()
    if sys.platform == "win32":
        sys.exit(asyncio.run(main(args)))
    sys.exit(uvloop.run(main(args)))


if __name__ == "__main__":
    run()
