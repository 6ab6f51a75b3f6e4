#!/usr/bin/env python3

# ruff: noqa: T201

from __future__ import annotations

import argparse
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING
from uuid import UUID

from dotenv import load_dotenv

from seatledger import app
from seatledger.config.logging import configure_logging

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from seatledger.domain.results import AllSyncResult, SyncResult


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="seatledger",
        description="Reconcile TicketVault POS listings, sales and invoices",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("listings", help="Sync active listings from the POS")
    subparsers.add_parser("sales", help="Sync the sales queue and re-link orphaned sales")
    subparsers.add_parser("invoices", help="Sync invoices from the POS")
    subparsers.add_parser("all", help="Sync invoices, then sales")
    subparsers.add_parser("stats", help="Print sales and invoice statistics")
    price = subparsers.add_parser("price", help="Update the price of one listing")
    price.add_argument("listing_id", type=UUID, help="Local listing id")
    price.add_argument("price", type=float, help="New market price")
    return parser.parse_args(list(argv))


def _print_sync(label: str, result: SyncResult) -> None:
    if not result.success:
        print(f"{label}: failed: {result.error}", file=sys.stderr)
        return
    print(
        f"{label}: synced={result.synced} created={result.created} "
        f"updated={result.updated} linked={result.linked} failed={result.failed}"
    )


def _print_all(result: AllSyncResult) -> None:
    _print_sync("invoices", result.invoices)
    _print_sync("sales", result.sales)


def _print_stats() -> None:
    sales = app.get_sales_stats()
    invoices = app.get_invoice_stats()
    print(
        f"sales: total={sales.total_sales} pending={sales.pending_sales} "
        f"completed={sales.completed_sales}"
    )
    print(
        f"revenue={sales.total_revenue:.2f} cost={sales.total_cost:.2f} "
        f"profit={sales.total_profit:.2f} per_day={sales.avg_profit_per_day:.2f}"
    )
    print(
        f"invoices: total={invoices.total_invoices} paid={invoices.paid_invoices} "
        f"unpaid={invoices.unpaid_invoices} unpaid_amount={invoices.total_unpaid:.2f}"
    )


def _run(args: argparse.Namespace) -> bool:
    match args.command:
        case "listings":
            result = app.sync_listings_from_pos()
            _print_sync("listings", result)
            return result.success
        case "sales":
            result = app.sync_sales_from_pos()
            _print_sync("sales", result)
            return result.success
        case "invoices":
            result = app.sync_invoices_from_pos()
            _print_sync("invoices", result)
            return result.success
        case "all":
            all_result = app.sync_all_from_pos()
            _print_all(all_result)
            return all_result.success
        case "stats":
            _print_stats()
            return True
        case "price":
            price_result = app.update_listing_price(args.listing_id, args.price)
            if not price_result.success:
                print(f"price: failed: {price_result.error}", file=sys.stderr)
                return False
            print(f"price: listing {args.listing_id} set to {args.price:.2f}")
            return True
        case _:
            raise ValueError(f"Unknown command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    parsed_args = _parse_args(sys.argv[1:] if argv is None else argv)
    configure_logging()

    try:
        succeeded = _run(parsed_args)
    except Exception as e:  # noqa: BLE001
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    if not succeeded:
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    print("\nClosed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
