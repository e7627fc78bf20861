"""Command-line interface for read-only Margin queries."""
from __future__ import annotations

import argparse
import asyncio
import dataclasses
import sys

from .config import load_config
from .helpers import get_position_id
from .logging_setup import configure_logging
from .protocols.margin import Margin


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="margin-client",
        description="Query positions and loans on the Margin contract",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in the working directory)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )

    sub = parser.add_subparsers(dest="command")

    id_parser = sub.add_parser("position-id", help="Derive a position id locally")
    id_parser.add_argument("trader", help="Trader address")
    id_parser.add_argument("nonce", type=int, help="Position nonce")

    position_parser = sub.add_parser("position", help="Show a position")
    position_parser.add_argument("position_id")

    status_parser = sub.add_parser("status", help="Show position flags and balances")
    status_parser.add_argument("position_id")

    events_parser = sub.add_parser("events", help="List position events")
    events_parser.add_argument("position_id")
    events_parser.add_argument(
        "--closed",
        action="store_true",
        help="List PositionClosed events instead of PositionOpened",
    )

    loan_parser = sub.add_parser("loan", help="Show loan offering amounts")
    loan_parser.add_argument("loan_hash")

    return parser


async def _run(args: argparse.Namespace) -> None:
    """Execute the selected command."""
    margin = Margin.from_config(load_config(args.config))

    if args.command == "position":
        position = await margin.get_position(args.position_id)
        for key, value in dataclasses.asdict(position).items():
            print(f"{key}: {value}")

    elif args.command == "status":
        position_id = args.position_id
        print(f"exists: {await margin.contains_position(position_id)}")
        print(f"called: {await margin.is_position_called(position_id)}")
        print(f"closed: {await margin.is_position_closed(position_id)}")
        print(f"balance: {await margin.get_position_balance(position_id)}")
        print(f"owed: {await margin.get_position_owed_amount(position_id)}")
        print(
            "repaid to lender: "
            f"{await margin.get_total_owed_token_repaid_to_lender(position_id)}"
        )

    elif args.command == "events":
        if args.closed:
            closed = await margin.get_all_position_closed_events(args.position_id)
            for event in closed:
                print(f"{event.timestamp}: {event.args}")
        else:
            opened = await margin.get_all_position_opened_events(args.position_id)
            for event in opened:
                print(f"block {event.block_number}: {event.args}")

    elif args.command == "loan":
        loan_hash = args.loan_hash
        print(f"approved: {await margin.is_loan_approved(loan_hash)}")
        print(f"filled: {await margin.get_loan_filled_amount(loan_hash)}")
        print(f"canceled: {await margin.get_loan_canceled_amount(loan_hash)}")
        print(f"unavailable: {await margin.get_loan_unavailable_amount(loan_hash)}")
        print(f"positions opened: {await margin.get_loan_number(loan_hash)}")


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    configure_logging(args.log_level)

    if args.command == "position-id":
        print(get_position_id(args.trader, args.nonce))
        return

    asyncio.run(_run(args))
