"""Ticketing aggregates: canonical events, purchases and the POS-side records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from .entity import Entity
from .enums import PENDING_SALE_STATUSES, SaleStatus, TicketStatus

if TYPE_CHECKING:
    from uuid import UUID


def utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(eq=False, kw_only=True)
class Event(Entity):
    """Canonical real-world happening, ideally keyed by a durable external id."""

    event_name: str
    artist_name: str | None = None
    venue: str | None = None
    event_date: datetime | None = None
    pos_production_id: int | None = None
    pos_venue_id: int | None = None
    tm_event_id: str | None = None


@dataclass(eq=False, kw_only=True)
class Purchase(Entity):
    """An internal acquisition of one or more seats at a known cost."""

    section: str
    row: str
    seats: str
    quantity: int
    total_price: float
    dashboard_po_number: str | None = None
    event_id: UUID | None = None
    account_email: str | None = None

    @property
    def cost_per_ticket(self) -> float | None:
        if not self.total_price or self.quantity <= 0:
            return None
        return self.total_price / self.quantity


@dataclass(eq=False, kw_only=True)
class Listing(Entity):
    """Locally cached POS ticket group currently offered for sale."""

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
    pdfs_count: int = 0
    links_count: int = 0
    pdf_status: str | None = None
    status_type_id: int | None = None
    po_vendor: str | None = None
    vivid_event_id: int | None = None
    stubhub_event_id: int | None = None
    seatgeek_event_id: int | None = None
    tm_event_id: str | None = None
    last_synced_at: datetime = field(default_factory=utcnow)
    purchase_id: UUID | None = None
    event_id: UUID | None = None


@dataclass(eq=False, kw_only=True)
class Sale(Entity):
    """A POS sale of some quantity out of a ticket group."""

    ticket_group_id: int
    order_id: int
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
    last_synced_at: datetime = field(default_factory=utcnow)
    listing_id: UUID | None = None
    event_id: UUID | None = None

    @property
    def is_pending(self) -> bool:
        return self.status in PENDING_SALE_STATUSES

    @property
    def is_completed(self) -> bool:
        return self.status == SaleStatus.COMPLETE or self.is_complete


@dataclass(eq=False, kw_only=True)
class Invoice(Entity):
    """POS settlement record; ``total_amount`` is the net payout after platform fees."""

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
    last_synced_at: datetime = field(default_factory=utcnow)


@dataclass(eq=False, kw_only=True)
class Ticket(Entity):
    """One physical seat, owned by exactly one purchase."""

    purchase_id: UUID
    event_id: UUID
    section: str
    row: str
    seat_number: int
    cost: float = 0.0
    status: TicketStatus = TicketStatus.PURCHASED
    listing_id: UUID | None = None
    sale_id: UUID | None = None


@dataclass(eq=False, kw_only=True)
class Account(Entity):
    """Seller account; carries the POS season-site metadata refreshed after listing syncs."""

    email: str
    pos_season_site_id: int | None = None
    pos_last_checked_at: datetime | None = None
    pos_sync_status: str | None = None
    pos_last_error: str | None = None
    pos_tickets_found: int = 0
    pos_tickets_updated: int = 0
