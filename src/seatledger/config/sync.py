"""Synchronization defaults for reconciliation passes."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_int

DEFAULT_LISTING_BATCH_SIZE = 500
DEFAULT_SALES_BATCH_SIZE = 500
DEFAULT_INVOICE_BATCH_SIZE = 500
DEFAULT_LISTING_PAGE_SIZE = 50


@dataclass(frozen=True, slots=True)
class SyncConfig:
    listing_batch_size: int = DEFAULT_LISTING_BATCH_SIZE
    sales_batch_size: int = DEFAULT_SALES_BATCH_SIZE
    invoice_batch_size: int = DEFAULT_INVOICE_BATCH_SIZE
    listing_page_size: int = DEFAULT_LISTING_PAGE_SIZE


def get_sync_config() -> SyncConfig:
    return SyncConfig(
        listing_batch_size=optional_env_int(
            "SEATLEDGER_LISTING_BATCH_SIZE", DEFAULT_LISTING_BATCH_SIZE
        ),
        sales_batch_size=optional_env_int("SEATLEDGER_SALES_BATCH_SIZE", DEFAULT_SALES_BATCH_SIZE),
        invoice_batch_size=optional_env_int(
            "SEATLEDGER_INVOICE_BATCH_SIZE", DEFAULT_INVOICE_BATCH_SIZE
        ),
        listing_page_size=optional_env_int(
            "SEATLEDGER_LISTING_PAGE_SIZE", DEFAULT_LISTING_PAGE_SIZE
        ),
    )
