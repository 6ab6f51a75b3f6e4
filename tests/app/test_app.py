from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from seatledger import app
from seatledger.config.sync import SyncConfig
from seatledger.domain.model import MatchType
from tests.helpers.ticketing import (
    EVENT_DATE,
    EVENT_NAME,
    FakePosPlatform,
    invoice_snapshot,
    listing_snapshot,
    make_event,
    make_purchase,
    persist,
    sale_snapshot,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from seatledger.adapters.sqlalchemy.unit_of_work import SqlAlchemyReconciliationUnitOfWork

    UowFactory = Callable[[], SqlAlchemyReconciliationUnitOfWork]


def test_sync_listings_respects_batch_size(
    unit_of_work_factory: UowFactory, platform: FakePosPlatform
) -> None:
    platform.listings = [
        listing_snapshot(ticket_group_id=1),
        listing_snapshot(ticket_group_id=2),
        listing_snapshot(ticket_group_id=3),
    ]

    result = app.sync_listings_from_pos(
        platform=platform,
        unit_of_work_factory=unit_of_work_factory,
        sync_config=SyncConfig(listing_batch_size=2),
    )

    assert result.synced == 2


@pytest.mark.integration
def test_end_to_end_reconciliation(
    unit_of_work_factory: UowFactory, platform: FakePosPlatform
) -> None:
    event = make_event()
    persist(unit_of_work_factory, event, make_purchase(event, total_price=200.0))
    platform.listings = [listing_snapshot()]
    platform.invoices = [invoice_snapshot()]
    platform.sales = [sale_snapshot(invoice_number=7001)]

    listings = app.sync_listings_from_pos(
        platform=platform, unit_of_work_factory=unit_of_work_factory
    )
    everything = app.sync_all_from_pos(platform=platform, unit_of_work_factory=unit_of_work_factory)
    stats = app.get_sales_stats(platform=platform, unit_of_work_factory=unit_of_work_factory)
    invoices = app.get_invoice_stats(platform=platform, unit_of_work_factory=unit_of_work_factory)
    page = app.get_listings(
        platform=platform,
        unit_of_work_factory=unit_of_work_factory,
        sync_config=SyncConfig(listing_page_size=10),
    )

    assert listings.linked == 1
    assert everything.success is True
    assert platform.calls[-2:] == ["invoices", "sales"]
    assert stats.total_profit == 400.0
    assert invoices.total_invoices == 1
    assert page.pagination.limit == 10
    assert [row.listing.ticket_group_id for row in page.listings] == [1001]


def test_sync_sales_and_invoices_separately(
    unit_of_work_factory: UowFactory, platform: FakePosPlatform
) -> None:
    platform.invoices = [invoice_snapshot()]
    platform.sales = [sale_snapshot()]

    invoices = app.sync_invoices_from_pos(
        platform=platform, unit_of_work_factory=unit_of_work_factory
    )
    sales = app.sync_sales_from_pos(platform=platform, unit_of_work_factory=unit_of_work_factory)

    assert (invoices.created, sales.created) == (1, 1)


def test_update_listing_price_through_app(
    unit_of_work_factory: UowFactory, platform: FakePosPlatform
) -> None:
    platform.listings = [listing_snapshot(ext_po_number=None)]
    app.sync_listings_from_pos(platform=platform, unit_of_work_factory=unit_of_work_factory)
    page = app.get_listings(platform=platform, unit_of_work_factory=unit_of_work_factory)
    listing_id = page.listings[0].listing.id

    result = app.update_listing_price(
        listing_id, 210.0, platform=platform, unit_of_work_factory=unit_of_work_factory
    )

    assert result.success is True
    assert platform.price_updates == [(1001, 210.0, 555)]


def test_find_or_create_event_commits_new_events(unit_of_work_factory: UowFactory) -> None:
    data = app.EventMatchInput(event_name="New Act", tm_event_id="TM-7", event_date=EVENT_DATE)

    created = app.find_or_create_event(data, unit_of_work_factory=unit_of_work_factory)
    found = app.find_or_create_event(data, unit_of_work_factory=unit_of_work_factory)

    assert created.match_type is MatchType.CREATED
    assert found.match_type is MatchType.TM_EVENT_ID
    assert created.event is not None
    assert found.event is not None
    assert found.event.id == created.event.id


def test_get_listing_events_lists_distinct_names(
    unit_of_work_factory: UowFactory, platform: FakePosPlatform
) -> None:
    platform.listings = [
        listing_snapshot(ticket_group_id=1, ext_po_number=None),
        listing_snapshot(ticket_group_id=2, ext_po_number=None),
        listing_snapshot(ticket_group_id=3, ext_po_number=None, event_name="Another Act"),
    ]
    app.sync_listings_from_pos(platform=platform, unit_of_work_factory=unit_of_work_factory)

    names = app.get_listing_events(platform=platform, unit_of_work_factory=unit_of_work_factory)

    assert names == sorted({EVENT_NAME, "Another Act"})
