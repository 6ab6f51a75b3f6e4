from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

import pytest
from sqlalchemy.exc import IntegrityError

from seatledger.adapters.sqlalchemy.repositories import (
    SqlAlchemyEventRepository,
    SqlAlchemyInvoiceRepository,
    SqlAlchemyPurchaseRepository,
    SqlAlchemySaleRepository,
    SqlAlchemyTicketRepository,
)
from seatledger.domain.model import Invoice, Listing, Sale, Ticket, TicketStatus
from tests.helpers.ticketing import EVENT_DATE, make_event, make_purchase

if TYPE_CHECKING:
    from sqlalchemy.orm import Session


def test_event_round_trip_keeps_utc(sqlite_session: Session) -> None:
    event = make_event(pos_production_id=555, tm_event_id="TM-1")
    repository = SqlAlchemyEventRepository(sqlite_session)
    repository.add(event)
    sqlite_session.commit()
    sqlite_session.expunge_all()

    stored = repository.get_by_pos_production_id(555)

    assert stored is not None
    assert stored.id == event.id
    assert stored.event_date == EVENT_DATE
    assert stored.event_date is not None
    assert stored.event_date.tzinfo is not None
    assert repository.get_by_tm_event_id("TM-1") is not None
    assert repository.get_by_tm_event_id("TM-2") is None


def test_event_search_by_window_and_name(sqlite_session: Session) -> None:
    repository = SqlAlchemyEventRepository(sqlite_session)
    repository.add(make_event("Coldplay: Music of the Spheres"))
    repository.add(make_event("Next Week Show", event_date=EVENT_DATE + timedelta(days=7)))
    sqlite_session.commit()

    window = repository.between(EVENT_DATE - timedelta(hours=1), EVENT_DATE + timedelta(hours=1))
    by_name = repository.search_by_name("COLDPLAY", limit=5)
    wildcard = repository.search_by_name("%", limit=5)

    assert [event.event_name for event in window] == ["Coldplay: Music of the Spheres"]
    assert [event.event_name for event in by_name] == ["Coldplay: Music of the Spheres"]
    assert wildcard == []


def test_purchase_lookups(sqlite_session: Session) -> None:
    repository = SqlAlchemyPurchaseRepository(sqlite_session)
    first = make_purchase(None)
    second = make_purchase(None, dashboard_po_number="PO-2", section="GA", row="1")
    untracked = make_purchase(None, dashboard_po_number=None)
    for purchase in (first, second, untracked):
        repository.add(purchase)
    sqlite_session.commit()

    assert set(repository.by_po_number()) == {"PO-1", "PO-2"}
    assert set(repository.find_by_po_numbers(["PO-2", "PO-9"])) == {"PO-2"}
    assert repository.find_by_po_numbers([]) == {}
    assert {purchase.id for purchase in repository.find_by_section_row("101", "A")} == {
        first.id,
        untracked.id,
    }


def test_sale_key_is_unique(sqlite_session: Session) -> None:
    repository = SqlAlchemySaleRepository(sqlite_session)
    repository.add(Sale(ticket_group_id=1, order_id=1))
    sqlite_session.commit()

    repository.add(Sale(ticket_group_id=1, order_id=1))
    with pytest.raises(IntegrityError):
        sqlite_session.commit()
    sqlite_session.rollback()

    assert repository.get_by_key(1, 1) is not None
    assert repository.get_by_key(1, 2) is None


def test_sale_cost_rows_follow_listing_purchase(sqlite_session: Session) -> None:
    purchase = make_purchase(None, total_price=200.0)
    listing = Listing(
        ticket_group_id=1,
        event_name="Show",
        section="101",
        row="A",
        start_seat=1,
        end_seat=4,
        quantity=4,
        purchase_id=purchase.id,
    )
    linked = Sale(ticket_group_id=1, order_id=1, quantity=2, listing_id=listing.id)
    orphan = Sale(ticket_group_id=2, order_id=1, ext_po_number="PO-7")
    sqlite_session.add_all([purchase, listing, linked, orphan])
    sqlite_session.commit()

    rows = {row.sale_id: row for row in SqlAlchemySaleRepository(sqlite_session).cost_rows()}

    assert rows[linked.id].purchase_total_price == 200.0
    assert rows[linked.id].purchase_quantity == 4
    assert rows[orphan.id].purchase_total_price is None
    assert rows[orphan.id].ext_po_number == "PO-7"
    assert [sale.id for sale in SqlAlchemySaleRepository(sqlite_session).without_listing()] == [
        orphan.id
    ]


def test_invoice_queries_skip_cancelled(sqlite_session: Session) -> None:
    repository = SqlAlchemyInvoiceRepository(sqlite_session)
    repository.add(Invoice(invoice_number=1, total_amount=10.0))
    repository.add(Invoice(invoice_number=2, total_amount=20.0, is_cancelled=True))
    sqlite_session.commit()

    assert repository.exists(2) is True
    assert repository.exists(3) is False
    assert [invoice.invoice_number for invoice in repository.list_active()] == [1]


def test_ticket_insert_if_absent_and_claims(sqlite_session: Session) -> None:
    event = make_event()
    purchase = make_purchase(event)
    listing = Listing(
        ticket_group_id=1, event_name="Show", section="101", row="A", start_seat=1, end_seat=1,
        quantity=1,
    )
    sqlite_session.add_all([event, purchase, listing])
    sqlite_session.commit()
    tickets = SqlAlchemyTicketRepository(sqlite_session)

    def seat_one() -> Ticket:
        return Ticket(
            purchase_id=purchase.id, event_id=event.id, section="101", row="A", seat_number=1
        )

    assert tickets.insert_if_absent(seat_one()) is True
    assert tickets.insert_if_absent(seat_one()) is False
    assert tickets.claim_for_listing(listing.id, event.id, "101", "A", 1) is True
    assert tickets.claim_for_listing(listing.id, event.id, "101", "A", 1) is False
    assert tickets.claim_for_listing(listing.id, event.id, "101", "A", 2) is False
    sqlite_session.commit()

    stored = tickets.find(event.id, "101", "A", 1)
    assert stored is not None
    assert stored.listing_id == listing.id
    assert stored.status is TicketStatus.LISTED
    assert tickets.refresh_cost(stored.id, purchase.id, 42.0) is True
    assert tickets.refresh_cost(stored.id, event.id, 1.0) is False
    refreshed = tickets.find(event.id, "101", "A", 1)
    assert refreshed is not None
    assert refreshed.cost == 42.0
