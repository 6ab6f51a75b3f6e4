"""Flat, already-validated records delivered by the POS platform port."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator
    from datetime import datetime


@dataclass(frozen=True, slots=True, kw_only=True)
class ListingSnapshot:
    ticket_group_id: int
    event_name: str
    section: str
    row: str
    start_seat: int
    end_seat: int
    quantity: int
    cost: float = 0.0
    price: float = 0.0
    production_id: int | None = None
    purchase_order_id: int | None = None
    venue_name: str | None = None
    venue_city: str | None = None
    event_datetime: datetime | None = None
    account_email: str | None = None
    internal_note: str | None = None
    ext_po_number: str | None = None
    is_matched: bool = False
    barcodes_count: int = 0
    links_count: int = 0
    pdf_status: str | None = None
    status_type_id: int | None = None
    po_vendor: str | None = None
    vivid_event_id: int | None = None
    stubhub_event_id: int | None = None
    seatgeek_event_id: int | None = None
    tm_event_id: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class SaleSnapshot:
    ticket_group_id: int
    order_id: int = 0
    quantity: int = 1
    sale_price: float = 0.0
    cost: float | None = None
    invoice_number: int | None = None
    event_name: str | None = None
    event_datetime: datetime | None = None
    venue_name: str | None = None
    section: str | None = None
    row: str | None = None
    seats: str | None = None
    buyer_email: str | None = None
    buyer_name: str | None = None
    status: int = 0
    status_name: str | None = None
    delivery_type: str | None = None
    transfer_type: str | None = None
    is_complete: bool = False
    needs_shipping: bool = False
    mobile_info_needed: bool = False
    pdf_bc_missing: bool = False
    ext_order_number: str | None = None
    ext_po_number: str | None = None
    sale_date: datetime | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class InvoiceSnapshot:
    invoice_number: int
    total_amount: float = 0.0
    total_quantity: int = 0
    fees: float = 0.0
    total_cost: float = 0.0
    client_id: int | None = None
    client_name: str | None = None
    client_email: str | None = None
    event_name: str | None = None
    event_datetime: datetime | None = None
    is_paid: bool = False
    payout_status: str | None = None
    remittance_status: str | None = None
    remittance_date: datetime | None = None
    is_cancelled: bool = False
    ext_po_number: str | None = None
    invoice_date: datetime | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class SeasonSiteSnapshot:
    """One connected seller account as reported by the POS settings endpoint."""

    season_site_id: int
    username: str | None = None
    is_deleted: bool = False
    last_checked_at: datetime | None = None
    processing_status: str = "Unknown"
    last_error: str | None = None
    tickets_found: int = 0
    tickets_updated: int = 0


@dataclass(slots=True)
class FetchedBatch[TRecord]:
    """Records from one platform read plus the source ids of rows that failed validation."""

    records: list[TRecord] = field(default_factory=list["TRecord"])
    rejected: list[str] = field(default_factory=list[str])

    def __iter__(self) -> Iterator[TRecord]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)
