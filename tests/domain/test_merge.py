from __future__ import annotations

from uuid import uuid4

from seatledger.domain.merge import (
    backfill_pos_production_id,
    merge_sale_cost,
    resolve_listing_event_id,
    resolve_sale_event_id,
    resolve_sale_ext_po,
)
from tests.helpers.ticketing import make_event


def test_merge_sale_cost_keeps_existing_when_incoming_missing() -> None:
    assert merge_sale_cost(75.0, None) == 75.0
    assert merge_sale_cost(75.0, 80.0) == 80.0
    assert merge_sale_cost(None, None) is None


def test_backfill_only_fills_missing_ids() -> None:
    event = make_event(pos_production_id=None)

    assert backfill_pos_production_id(event, 555, 12) is True
    assert event.pos_production_id == 555
    assert event.pos_venue_id == 12

    assert backfill_pos_production_id(event, 999, 13) is False
    assert event.pos_production_id == 555
    assert event.pos_venue_id == 12


def test_backfill_ignores_missing_incoming_id() -> None:
    event = make_event()

    assert backfill_pos_production_id(event, None) is False
    assert event.pos_production_id is None


def test_listing_event_prefers_purchase_event() -> None:
    purchase_event, matched_event = uuid4(), uuid4()

    assert resolve_listing_event_id(purchase_event, matched_event) == purchase_event
    assert resolve_listing_event_id(None, matched_event) == matched_event


def test_sale_event_resolution_order() -> None:
    via_purchase, via_listing, via_fallback = uuid4(), uuid4(), uuid4()

    assert resolve_sale_event_id(via_purchase, via_listing, via_fallback) == via_purchase
    assert resolve_sale_event_id(None, via_listing, via_fallback) == via_listing
    assert resolve_sale_event_id(None, None, via_fallback) == via_fallback
    assert resolve_sale_event_id(None, None, None) is None


def test_sale_ext_po_takes_first_non_empty_source() -> None:
    assert resolve_sale_ext_po("POS-PO", "L-PO", "P-PO", "F-PO") == "POS-PO"
    assert resolve_sale_ext_po("", None, "P-PO", "F-PO") == "P-PO"
    assert resolve_sale_ext_po(None, None, None, None) is None
