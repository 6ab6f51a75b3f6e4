from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from seatledger.adapters.ticketvault import (
    parse_invoice,
    parse_listing,
    parse_sale,
    parse_season_site,
)
from seatledger.adapters.ticketvault.schema import SalesQueueItem


@pytest.fixture
def ticket_group_payload() -> dict[str, object]:
    return {
        "TicketGroupID": 1001,
        "ProductionID": 555,
        "PrimaryEventName": "Taylor Swift | The Eras Tour",
        "VenueName": "MetLife Stadium",
        "VenueCity": "East Rutherford",
        "EventDateTime": "2026-11-14T19:00:00",
        "Section": 101,
        "Row": "A",
        "StartSeat": 1,
        "EndSeat": 4,
        "Quantity": 4,
        "Cost": 100.0,
        "Price": 0,
        "MarketPrice": 150.0,
        "AccountEmail": "  ",
        "InternalNote": "seller@example.com",
        "HtmlExtPOIDMultiLineTooltip": None,
        "HtmlExtPOIDEllipsis": "PO-1",
        "IsFullyMapped": True,
        "BarcodesCount": 0,
        "LinksCount": 2,
        "Pdf": "3/4",
        "POVendor": "Ticketmaster",
        "VividEventID": 0,
        "TMEventID": None,
        "SomethingNew": "ignored",
    }


def test_parse_listing_maps_operations_row(ticket_group_payload: dict[str, object]) -> None:
    listing = parse_listing(ticket_group_payload)

    assert listing.ticket_group_id == 1001
    assert listing.production_id == 555
    assert listing.section == "101"
    assert listing.price == 150.0
    assert listing.account_email is None
    assert listing.internal_note == "seller@example.com"
    assert listing.ext_po_number == "PO-1"
    assert listing.is_matched is True
    assert listing.pdf_status == "3/4"
    assert listing.vivid_event_id is None
    assert listing.tm_event_id is None
    assert listing.event_datetime == datetime(2026, 11, 14, 19, 0, tzinfo=UTC)


def test_parse_listing_prefers_tooltip_po(ticket_group_payload: dict[str, object]) -> None:
    ticket_group_payload["HtmlExtPOIDMultiLineTooltip"] = "PO-FULL-1"

    assert parse_listing(ticket_group_payload).ext_po_number == "PO-FULL-1"


def test_parse_listing_defaults_missing_fields() -> None:
    listing = parse_listing({"TicketGroupID": 7})

    assert listing.event_name == ""
    assert (listing.start_seat, listing.end_seat, listing.quantity) == (0, 0, 0)
    assert listing.cost == 0.0
    assert listing.event_datetime is None


def test_parse_listing_requires_ticket_group_id() -> None:
    with pytest.raises(ValidationError):
        parse_listing({"ProductionID": 1})


def test_parse_sale_accepts_alternate_spellings() -> None:
    sale = parse_sale(
        {
            "TicketGroupId": 1001,
            "OrderID": None,
            "SaleRequestId": 9001,
            "Quantity": 2,
            "SalePrice": 300.0,
            "Cost": 0,
            "InvoiceId": 7001,
            "PrimaryEventName": "Eras Tour",
            "EventDateTime": "0001-01-01T00:00:00",
            "Seats": 12,
            "BuyerFirstName": "Ada",
            "BuyerLastName": "Lovelace",
            "BuyerName": "ignored",
            "Status": 20,
            "DeliveryType": "Mobile",
            "SaleDate": "2026-10-01T15:30:00Z",
        }
    )

    assert sale.order_id == 9001
    assert sale.quantity == 2
    assert sale.sale_price == 300.0
    assert sale.cost is None
    assert sale.invoice_number == 7001
    assert sale.event_name == "Eras Tour"
    assert sale.event_datetime is None
    assert sale.seats == "12"
    assert sale.buyer_name == "Ada Lovelace"
    assert sale.delivery_type == "Mobile"
    assert sale.sale_date == datetime(2026, 10, 1, 15, 30, tzinfo=UTC)


def test_sale_buyer_name_falls_back_to_client_name() -> None:
    item = SalesQueueItem.model_validate({"TicketGroupID": 1, "ClientName": "Acme Tickets"})

    assert item.full_buyer_name == "Acme Tickets"
    assert parse_sale(item).quantity == 1


def test_parse_invoice_uses_payout_as_revenue() -> None:
    invoice = parse_invoice(
        {
            "InvoiceNumber": 7001,
            "Payout": 450.0,
            "TotalAmount": 500.0,
            "Qty": 2,
            "TVFee": 50.0,
            "Paid": True,
            "InvoiceStatus": "Paid",
            "RemittancePayments": 1,
            "Created": "2026-10-02T08:00:00+02:00",
            "IsCancelled": False,
        }
    )

    assert invoice.total_amount == 450.0
    assert invoice.total_quantity == 2
    assert invoice.fees == 50.0
    assert invoice.is_paid is True
    assert invoice.remittance_status == "1"
    assert invoice.invoice_date == datetime(2026, 10, 2, 6, 0, tzinfo=UTC)


def test_parse_season_site_defaults_status() -> None:
    site = parse_season_site(
        {
            "CompanySeasonSiteID": 42,
            "UserName": "seller@example.com",
            "ProcessingStatus": "",
            "TotalCountForPaginator": 12,
            "LastCheckedDateTimeUTC": "2026-10-17T12:00:00",
        }
    )

    assert site.season_site_id == 42
    assert site.processing_status == "Unknown"
    assert site.tickets_found == 12
    assert site.tickets_updated == 0
    assert site.last_checked_at == datetime(2026, 10, 17, 12, 0, tzinfo=UTC)
