"""Translate TicketVault payloads into domain snapshots."""

from __future__ import annotations

from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from seatledger.domain.model import (
    InvoiceSnapshot,
    ListingSnapshot,
    SaleSnapshot,
    SeasonSiteSnapshot,
)

from .schema import InvoiceItem, OperationsTicketGroup, SalesQueueItem, SeasonSite

if TYPE_CHECKING:
    from collections.abc import Mapping

log = getLogger(__name__)

type PayloadInput = Mapping[str, object]


def _as_utc(value: datetime | None) -> datetime | None:
    # The POS omits offsets; naive timestamps are stored as UTC.
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _ensure[TModel: (OperationsTicketGroup, SalesQueueItem, InvoiceItem, SeasonSite)](
    model: type[TModel], payload: TModel | PayloadInput
) -> TModel:
    if isinstance(payload, model):
        return payload
    return model.model_validate(payload)


def parse_listing(payload: OperationsTicketGroup | PayloadInput) -> ListingSnapshot:
    group = _ensure(OperationsTicketGroup, payload)
    return ListingSnapshot(
        ticket_group_id=group.ticket_group_id,
        production_id=group.production_id,
        purchase_order_id=group.purchase_order_id or None,
        event_name=group.primary_event_name or "",
        venue_name=group.venue_name,
        venue_city=group.venue_city,
        event_datetime=_as_utc(group.event_datetime),
        section=group.section or "",
        row=group.row or "",
        start_seat=group.start_seat or 0,
        end_seat=group.end_seat or 0,
        quantity=group.quantity or 0,
        cost=group.cost or 0.0,
        price=group.market_price or 0.0,
        account_email=group.account_email,
        internal_note=group.internal_note,
        ext_po_number=group.ext_po_tooltip or group.ext_po_ellipsis,
        is_matched=group.is_fully_mapped,
        barcodes_count=group.barcodes_count or 0,
        links_count=group.links_count or 0,
        pdf_status=group.pdf,
        status_type_id=group.status_type_id,
        po_vendor=group.po_vendor,
        vivid_event_id=group.vivid_event_id or None,
        stubhub_event_id=group.stubhub_event_id or None,
        seatgeek_event_id=group.seatgeek_event_id or None,
        tm_event_id=group.tm_event_id,
    )


def parse_sale(payload: SalesQueueItem | PayloadInput) -> SaleSnapshot:
    item = _ensure(SalesQueueItem, payload)
    return SaleSnapshot(
        ticket_group_id=item.ticket_group_id,
        order_id=item.order_id or 0,
        quantity=item.quantity or 1,
        sale_price=item.sale_price or 0.0,
        # A zero cost from the POS means "unknown", never "free".
        cost=item.cost or None,
        invoice_number=item.invoice_number or None,
        event_name=item.event_name,
        event_datetime=_as_utc(item.event_datetime),
        venue_name=item.venue_name,
        section=item.section,
        row=item.row,
        seats=item.seats,
        buyer_email=item.buyer_email,
        buyer_name=item.full_buyer_name,
        status=item.status or 0,
        status_name=item.status_name,
        delivery_type=item.delivery_type,
        transfer_type=item.transfer_type,
        is_complete=item.is_complete,
        needs_shipping=item.needs_shipping,
        mobile_info_needed=item.mobile_info_needed,
        pdf_bc_missing=item.pdf_bc_missing,
        ext_order_number=item.ext_order_number,
        ext_po_number=item.ext_po_number,
        sale_date=_as_utc(item.received_date),
    )


def parse_invoice(payload: InvoiceItem | PayloadInput) -> InvoiceSnapshot:
    item = _ensure(InvoiceItem, payload)
    return InvoiceSnapshot(
        invoice_number=item.invoice_number,
        total_amount=item.total_amount or 0.0,
        total_quantity=item.total_quantity or 0,
        fees=item.fees or 0.0,
        total_cost=item.total_cost or 0.0,
        client_id=item.client_id,
        client_name=item.client_name,
        client_email=item.client_email,
        event_name=item.event_name,
        event_datetime=_as_utc(item.event_datetime),
        is_paid=item.is_paid,
        payout_status=item.payout_status,
        remittance_status=item.remittance_status,
        remittance_date=_as_utc(item.remittance_date),
        is_cancelled=item.is_cancelled,
        ext_po_number=item.ext_po_number,
        invoice_date=_as_utc(item.created),
    )


def parse_season_site(payload: SeasonSite | PayloadInput) -> SeasonSiteSnapshot:
    site = _ensure(SeasonSite, payload)
    return SeasonSiteSnapshot(
        season_site_id=site.company_season_site_id,
        username=site.user_name,
        is_deleted=site.is_deleted,
        last_checked_at=_as_utc(site.last_checked_at),
        processing_status=site.processing_status or "Unknown",
        last_error=site.last_error,
        tickets_found=site.total_count or 0,
        tickets_updated=site.total_updated or 0,
    )


__all__ = ["parse_invoice", "parse_listing", "parse_sale", "parse_season_site"]
