"""Domain model package."""

from __future__ import annotations

from .entity import Entity, new_id
from .enums import PENDING_SALE_STATUSES, MatchType, SaleStatus, TicketStatus
from .snapshots import (
    FetchedBatch,
    InvoiceSnapshot,
    ListingSnapshot,
    SaleSnapshot,
    SeasonSiteSnapshot,
)
from .ticketing import Account, Event, Invoice, Listing, Purchase, Sale, Ticket, utcnow

__all__ = [
    "PENDING_SALE_STATUSES",
    "Account",
    "Entity",
    "Event",
    "FetchedBatch",
    "Invoice",
    "InvoiceSnapshot",
    "Listing",
    "ListingSnapshot",
    "MatchType",
    "Purchase",
    "Sale",
    "SaleSnapshot",
    "SaleStatus",
    "SeasonSiteSnapshot",
    "Ticket",
    "TicketStatus",
    "new_id",
    "utcnow",
]
