"""Builders and fakes for reconciliation tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from seatledger.domain.errors import ExternalWriteFailure
from seatledger.domain.model import (
    Event,
    FetchedBatch,
    InvoiceSnapshot,
    ListingSnapshot,
    Purchase,
    SaleSnapshot,
    SeasonSiteSnapshot,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from seatledger.adapters.sqlalchemy.unit_of_work import SqlAlchemyReconciliationUnitOfWork

EVENT_DATE = datetime(2026, 11, 14, 23, 0, tzinfo=UTC)
EVENT_NAME = "Taylor Swift | The Eras Tour"
VENUE = "MetLife Stadium"


def make_event(name: str = EVENT_NAME, **overrides: Any) -> Event:
    values: dict[str, Any] = {"event_date": EVENT_DATE, "venue": VENUE}
    values.update(overrides)
    return Event(event_name=name, **values)


def make_purchase(event: Event | None, **overrides: Any) -> Purchase:
    values: dict[str, Any] = {
        "section": "101",
        "row": "A",
        "seats": "1-4",
        "quantity": 4,
        "total_price": 400.0,
        "dashboard_po_number": "PO-1",
        "event_id": event.id if event is not None else None,
    }
    values.update(overrides)
    return Purchase(**values)


def listing_snapshot(**overrides: Any) -> ListingSnapshot:
    values: dict[str, Any] = {
        "ticket_group_id": 1001,
        "event_name": EVENT_NAME,
        "section": "101",
        "row": "A",
        "start_seat": 1,
        "end_seat": 4,
        "quantity": 4,
        "cost": 100.0,
        "price": 150.0,
        "production_id": 555,
        "venue_name": VENUE,
        "event_datetime": EVENT_DATE,
        "account_email": "seller@example.com",
        "ext_po_number": "PO-1",
    }
    values.update(overrides)
    return ListingSnapshot(**values)


def sale_snapshot(**overrides: Any) -> SaleSnapshot:
    values: dict[str, Any] = {
        "ticket_group_id": 1001,
        "order_id": 9001,
        "quantity": 2,
        "sale_price": 300.0,
        "event_name": EVENT_NAME,
        "event_datetime": EVENT_DATE,
        "venue_name": VENUE,
        "section": "101",
        "row": "A",
        "seats": "1-2",
        "status": 20,
        "sale_date": datetime(2026, 10, 1, 15, 30, tzinfo=UTC),
    }
    values.update(overrides)
    return SaleSnapshot(**values)


def invoice_snapshot(**overrides: Any) -> InvoiceSnapshot:
    values: dict[str, Any] = {
        "invoice_number": 7001,
        "total_amount": 500.0,
        "total_quantity": 2,
        "fees": 50.0,
        "event_name": EVENT_NAME,
    }
    values.update(overrides)
    return InvoiceSnapshot(**values)


def season_site(username: str | None, **overrides: Any) -> SeasonSiteSnapshot:
    values: dict[str, Any] = {
        "season_site_id": 42,
        "username": username,
        "processing_status": "Completed",
        "tickets_found": 12,
        "tickets_updated": 3,
    }
    values.update(overrides)
    return SeasonSiteSnapshot(**values)


def persist(
    unit_of_work_factory: Callable[[], SqlAlchemyReconciliationUnitOfWork], *entities: object
) -> None:
    with unit_of_work_factory() as uow:
        uow.session.add_all(entities)
        uow.commit()


@dataclass
class FakePosPlatform:
    """In-memory implementation of the POS platform port for testing."""

    listings: list[ListingSnapshot] = field(default_factory=list["ListingSnapshot"])
    sales: list[SaleSnapshot] = field(default_factory=list["SaleSnapshot"])
    invoices: list[InvoiceSnapshot] = field(default_factory=list["InvoiceSnapshot"])
    season_sites: list[SeasonSiteSnapshot] = field(default_factory=list["SeasonSiteSnapshot"])
    rejected: list[str] = field(default_factory=list[str])
    fetch_error: Exception | None = None
    season_sites_error: Exception | None = None
    reject_price_updates: bool = False
    price_error: Exception | None = None
    price_updates: list[tuple[int, float, int | None]] = field(
        default_factory=list["tuple[int, float, int | None]"]
    )
    calls: list[str] = field(default_factory=list[str])

    def fetch_listings(self, *, take: int) -> FetchedBatch[ListingSnapshot]:
        self._record("listings")
        return FetchedBatch(self.listings[:take], list(self.rejected))

    def fetch_sales(self, *, limit: int) -> FetchedBatch[SaleSnapshot]:
        self._record("sales")
        return FetchedBatch(self.sales[:limit], list(self.rejected))

    def fetch_invoices(self, *, take: int) -> FetchedBatch[InvoiceSnapshot]:
        self._record("invoices")
        return FetchedBatch(self.invoices[:take], list(self.rejected))

    def fetch_season_sites(self) -> list[SeasonSiteSnapshot]:
        self.calls.append("season_sites")
        if self.season_sites_error is not None:
            raise self.season_sites_error
        return list(self.season_sites)

    def update_listing_price(
        self, *, ticket_group_id: int, price: float, production_id: int | None
    ) -> None:
        self.calls.append("price")
        if self.price_error is not None:
            raise self.price_error
        if self.reject_price_updates:
            raise ExternalWriteFailure(f"price rejected for {ticket_group_id}")
        self.price_updates.append((ticket_group_id, price, production_id))

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if self.fetch_error is not None:
            raise self.fetch_error
