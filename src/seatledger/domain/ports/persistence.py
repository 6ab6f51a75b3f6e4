"""Ports for persisting reconciliation aggregates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from seatledger.domain.model import (
    Account,
    Event,
    Invoice,
    Listing,
    Purchase,
    Sale,
    Ticket,
)

if TYPE_CHECKING:
    from collections.abc import Collection, Mapping
    from datetime import datetime
    from uuid import UUID


@dataclass(frozen=True, slots=True, kw_only=True)
class ListingsFilters:
    """Listing search criteria; ``None`` leaves a filter unapplied."""

    is_matched: bool | None = None
    has_ext_po: bool | None = None
    search: str | None = None
    event_name: str | None = None
    page: int = 1
    limit: int = 50


@dataclass(frozen=True, slots=True)
class ListingStats:
    total: int = 0
    matched: int = 0
    unmatched: int = 0
    ours: int = 0
    total_value: float = 0.0
    total_cost: float = 0.0


@dataclass(frozen=True, slots=True)
class SaleCostRow:
    """A sale with the purchase reachable through its listing, if any."""

    sale_id: UUID
    quantity: int
    ext_po_number: str | None
    purchase_total_price: float | None
    purchase_quantity: int | None


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...

    def get(self, entity_id: UUID) -> TEntity | None: ...


@runtime_checkable
class EventRepository(Repository[Event], Protocol):
    def get_by_pos_production_id(self, pos_production_id: int) -> Event | None: ...

    def get_by_tm_event_id(self, tm_event_id: str) -> Event | None: ...

    def between(self, start: datetime, end: datetime) -> list[Event]: ...

    def search_by_name(self, term: str, *, limit: int) -> list[Event]: ...


@runtime_checkable
class PurchaseRepository(Repository[Purchase], Protocol):
    def by_po_number(self) -> dict[str, Purchase]: ...

    def find_by_po_numbers(self, po_numbers: Collection[str]) -> dict[str, Purchase]: ...

    def find_by_section_row(self, section: str, row: str) -> list[Purchase]: ...


@runtime_checkable
class ListingRepository(Repository[Listing], Protocol):
    def get_by_ticket_group_id(self, ticket_group_id: int) -> Listing | None: ...

    def search(self, filters: ListingsFilters) -> tuple[list[Listing], int]: ...

    def stats(self, filters: ListingsFilters) -> ListingStats: ...

    def event_names(self) -> list[str]: ...


@runtime_checkable
class SaleRepository(Repository[Sale], Protocol):
    def get_by_key(self, ticket_group_id: int, order_id: int) -> Sale | None: ...

    def without_listing(self) -> list[Sale]: ...

    def list_all(self) -> list[Sale]: ...

    def cost_rows(self) -> list[SaleCostRow]: ...


@runtime_checkable
class InvoiceRepository(Repository[Invoice], Protocol):
    def get_by_number(self, invoice_number: int) -> Invoice | None: ...

    def exists(self, invoice_number: int) -> bool: ...

    def list_active(self) -> list[Invoice]: ...


@runtime_checkable
class TicketRepository(Protocol):
    """Seat rows; every write is a single statement so claims stay first-writer-wins."""

    def insert_if_absent(self, ticket: Ticket) -> bool: ...

    def find(self, event_id: UUID, section: str, row: str, seat_number: int) -> Ticket | None: ...

    def find_many(
        self, event_id: UUID, section: str, row: str, seat_numbers: Collection[int]
    ) -> list[Ticket]: ...

    def claim_for_listing(
        self, listing_id: UUID, event_id: UUID, section: str, row: str, seat_number: int
    ) -> bool: ...

    def claim_for_sale(
        self, sale_id: UUID, event_id: UUID, section: str, row: str, seat_number: int
    ) -> bool: ...

    def refresh_cost(self, ticket_id: UUID, purchase_id: UUID, cost: float) -> bool: ...

    def for_purchase(self, purchase_id: UUID) -> list[Ticket]: ...

    def for_sale(self, sale_id: UUID) -> list[Ticket]: ...


@runtime_checkable
class AccountRepository(Repository[Account], Protocol):
    def find_by_emails(self, emails: Collection[str]) -> Mapping[str, Account]: ...
