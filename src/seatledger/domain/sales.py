"""Sales and invoice reconciliation, the re-link pass and profit statistics.

Revenue comes from invoices (net payout). Cost never comes from the POS: it is
the purchase's per-ticket cost times the quantity sold, reached through the
sale's listing or, failing that, through its PO number.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from seatledger.domain.errors import ReconciliationError
from seatledger.domain.event_matcher import EventMatcher, EventMatchInput
from seatledger.domain.merge import merge_sale_cost, resolve_sale_event_id, resolve_sale_ext_po
from seatledger.domain.model import Invoice, Sale, utcnow
from seatledger.domain.results import AllSyncResult, InvoiceStats, SalesStats, SyncResult
from seatledger.domain.seats import seat_bounds
from seatledger.domain.tickets import TicketLinker

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from seatledger.domain.model import InvoiceSnapshot, Listing, Purchase, SaleSnapshot
    from seatledger.domain.ports import (
        PosPlatform,
        ReconciliationRepositories,
        ReconciliationUnitOfWorkFactory,
        SaleCostRow,
    )

log = logging.getLogger(__name__)

DEFAULT_SALES_BATCH_SIZE: Final = 500
DEFAULT_INVOICE_BATCH_SIZE: Final = 500


def find_containing_purchase(purchases: Iterable[Purchase], seats: str | None) -> Purchase | None:
    """First purchase whose seat range covers every seat in ``seats`` (inclusive bounds)."""

    wanted = seat_bounds(seats)
    if wanted is None:
        return None
    for purchase in purchases:
        owned = seat_bounds(purchase.seats)
        if owned is not None and owned[0] <= wanted[0] and wanted[1] <= owned[1]:
            return purchase
    return None


def sale_cost(
    quantity: int, total_price: float | None, purchase_quantity: int | None
) -> float | None:
    if not total_price or not purchase_quantity or purchase_quantity <= 0:
        return None
    return total_price / purchase_quantity * quantity


def compute_profit(
    cost_rows: Iterable[SaleCostRow],
    revenue: float,
    purchases_by_po: Mapping[str, Purchase],
) -> tuple[float, float]:
    """Return ``(total_cost, total_profit)``.

    Each sale is costed through its listing's purchase when that purchase has a
    usable price, else through the purchase carrying the sale's PO number.
    """

    total_cost = 0.0
    for row in cost_rows:
        cost = sale_cost(row.quantity, row.purchase_total_price, row.purchase_quantity)
        if cost is None and row.ext_po_number:
            purchase = purchases_by_po.get(row.ext_po_number)
            if purchase is not None:
                cost = sale_cost(row.quantity, purchase.total_price, purchase.quantity)
        total_cost += cost or 0.0
    return total_cost, revenue - total_cost


def unresolved_po_numbers(cost_rows: Iterable[SaleCostRow]) -> set[str]:
    return {
        row.ext_po_number
        for row in cost_rows
        if row.ext_po_number
        and sale_cost(row.quantity, row.purchase_total_price, row.purchase_quantity) is None
    }


@dataclass(frozen=True, slots=True)
class _SaleOutcome:
    created: bool
    linked: bool


class SalesReconciler:
    def __init__(
        self,
        platform: PosPlatform,
        unit_of_work_factory: ReconciliationUnitOfWorkFactory,
        *,
        batch_size: int = DEFAULT_SALES_BATCH_SIZE,
        invoice_batch_size: int = DEFAULT_INVOICE_BATCH_SIZE,
    ) -> None:
        self.platform = platform
        self.unit_of_work_factory = unit_of_work_factory
        self.batch_size = batch_size
        self.invoice_batch_size = invoice_batch_size

    # Sales -------------------------------------------------------------------

    def sync_sales_from_pos(self) -> SyncResult:
        try:
            snapshots = self.platform.fetch_sales(limit=self.batch_size)
        except ReconciliationError as exc:
            log.error("Sales sync aborted: %s", exc)  # noqa: TRY400
            return SyncResult.failure(str(exc))
        except Exception as exc:
            log.exception("Sales sync aborted while fetching from the POS")
            return SyncResult.failure(str(exc))

        result = SyncResult(failed=len(snapshots.rejected))
        try:
            with self.unit_of_work_factory() as uow:
                for snapshot in snapshots:
                    try:
                        outcome = self._sync_sale(uow.repositories, snapshot)
                        uow.commit()
                    except Exception:
                        uow.rollback()
                        log.exception(
                            "Failed to sync sale %s/%s",
                            snapshot.ticket_group_id,
                            snapshot.order_id,
                        )
                        result.failed += 1
                        continue
                    result.synced += 1
                    if outcome.created:
                        result.created += 1
                    else:
                        result.updated += 1
                    if outcome.linked:
                        result.linked += 1
        except Exception as exc:
            log.exception("Sales sync aborted after %d records", result.synced)
            return SyncResult.failure(str(exc))

        result.linked += self.relink_unlinked_sales()
        log.info(
            "Sales sync: %d synced, %d created, %d updated, %d linked, %d failed",
            result.synced,
            result.created,
            result.updated,
            result.linked,
            result.failed,
        )
        return result

    def _sync_sale(
        self, repositories: ReconciliationRepositories, snapshot: SaleSnapshot
    ) -> _SaleOutcome:
        listing = repositories.listings.get_by_ticket_group_id(snapshot.ticket_group_id)
        listing_purchase: Purchase | None = None
        if listing is not None and listing.purchase_id is not None:
            listing_purchase = repositories.purchases.get(listing.purchase_id)

        fallback_purchase: Purchase | None = None
        if listing is None and snapshot.section and snapshot.row and snapshot.seats:
            fallback_purchase = find_containing_purchase(
                repositories.purchases.find_by_section_row(snapshot.section, snapshot.row),
                snapshot.seats,
            )

        event_id = resolve_sale_event_id(
            listing_purchase.event_id if listing_purchase else None,
            listing.event_id if listing else None,
            fallback_purchase.event_id if fallback_purchase else None,
        )
        if event_id is None and snapshot.event_name and snapshot.event_datetime:
            match = EventMatcher(repositories.events).find_or_create_event(
                EventMatchInput(
                    event_name=snapshot.event_name,
                    venue=snapshot.venue_name,
                    event_date=snapshot.event_datetime,
                )
            )
            event_id = match.event.id if match.event is not None else None

        ext_po = resolve_sale_ext_po(
            snapshot.ext_po_number,
            listing.ext_po_number if listing else None,
            listing_purchase.dashboard_po_number if listing_purchase else None,
            fallback_purchase.dashboard_po_number if fallback_purchase else None,
        )

        invoice_number: int | None = None
        if snapshot.invoice_number and repositories.invoices.exists(snapshot.invoice_number):
            invoice_number = snapshot.invoice_number

        sale = repositories.sales.get_by_key(snapshot.ticket_group_id, snapshot.order_id)
        created = sale is None
        if sale is None:
            sale = Sale(ticket_group_id=snapshot.ticket_group_id, order_id=snapshot.order_id)
            repositories.sales.add(sale)
        apply_sale_snapshot(sale, snapshot)
        sale.cost = merge_sale_cost(sale.cost, snapshot.cost)
        sale.ext_po_number = ext_po
        if invoice_number is not None:
            sale.invoice_number = invoice_number
        if listing is not None:
            sale.listing_id = listing.id
        if event_id is not None:
            sale.event_id = event_id

        if created and event_id and snapshot.section and snapshot.row and snapshot.seats:
            link = TicketLinker(repositories.tickets).link_tickets_to_sale(
                sale.id, event_id, snapshot.section, snapshot.row, snapshot.seats
            )
            if not link.success:
                log.warning(
                    "Sale %s/%s seats not linked: %s",
                    snapshot.ticket_group_id,
                    snapshot.order_id,
                    link.error,
                )
        return _SaleOutcome(created=created, linked=sale.listing_id is not None)

    def relink_unlinked_sales(self) -> int:
        """Attach sales that arrived before their listing. Returns how many were fixed."""

        fixed = 0
        try:
            with self.unit_of_work_factory() as uow:
                for sale in uow.repositories.sales.without_listing():
                    listing = uow.repositories.listings.get_by_ticket_group_id(
                        sale.ticket_group_id
                    )
                    if listing is None:
                        continue
                    try:
                        relink_sale(sale, listing)
                        uow.commit()
                    except Exception:
                        uow.rollback()
                        log.exception(
                            "Failed to relink sale %s/%s", sale.ticket_group_id, sale.order_id
                        )
                        continue
                    fixed += 1
        except Exception:
            log.exception("Sale relink pass aborted after %d sales", fixed)
        if fixed:
            log.info("Relinked %d sales to their listings", fixed)
        return fixed

    # Invoices ----------------------------------------------------------------

    def sync_invoices_from_pos(self) -> SyncResult:
        try:
            snapshots = self.platform.fetch_invoices(take=self.invoice_batch_size)
        except ReconciliationError as exc:
            log.error("Invoice sync aborted: %s", exc)  # noqa: TRY400
            return SyncResult.failure(str(exc))
        except Exception as exc:
            log.exception("Invoice sync aborted while fetching from the POS")
            return SyncResult.failure(str(exc))

        result = SyncResult(failed=len(snapshots.rejected))
        try:
            with self.unit_of_work_factory() as uow:
                for snapshot in snapshots:
                    try:
                        invoice = uow.repositories.invoices.get_by_number(snapshot.invoice_number)
                        created = invoice is None
                        if invoice is None:
                            invoice = Invoice(invoice_number=snapshot.invoice_number)
                            uow.repositories.invoices.add(invoice)
                        apply_invoice_snapshot(invoice, snapshot)
                        uow.commit()
                    except Exception:
                        uow.rollback()
                        log.exception("Failed to sync invoice %s", snapshot.invoice_number)
                        result.failed += 1
                        continue
                    result.synced += 1
                    if created:
                        result.created += 1
                    else:
                        result.updated += 1
        except Exception as exc:
            log.exception("Invoice sync aborted after %d records", result.synced)
            return SyncResult.failure(str(exc))

        log.info(
            "Invoice sync: %d synced, %d created, %d updated, %d failed",
            result.synced,
            result.created,
            result.updated,
            result.failed,
        )
        return result

    def sync_all_from_pos(self) -> AllSyncResult:
        """Invoices first, so sales in the same run can reference them."""

        invoices = self.sync_invoices_from_pos()
        sales = self.sync_sales_from_pos()
        return AllSyncResult(invoices=invoices, sales=sales)

    # Statistics --------------------------------------------------------------

    def get_sales_stats(self) -> SalesStats:
        with self.unit_of_work_factory() as uow:
            sales = uow.repositories.sales.list_all()
            invoices = uow.repositories.invoices.list_active()
            cost_rows = uow.repositories.sales.cost_rows()
            po_numbers = unresolved_po_numbers(cost_rows)
            purchases_by_po = (
                uow.repositories.purchases.find_by_po_numbers(po_numbers) if po_numbers else {}
            )

        revenue = sum(invoice.total_amount for invoice in invoices)
        total_cost, total_profit = compute_profit(cost_rows, revenue, purchases_by_po)
        sale_days = {sale.sale_date.date().isoformat() for sale in sales if sale.sale_date}
        days_with_sales = max(1, len(sale_days))
        return SalesStats(
            total_sales=len(sales),
            pending_sales=sum(1 for sale in sales if sale.is_pending),
            completed_sales=sum(1 for sale in sales if sale.is_completed),
            total_revenue=revenue,
            total_cost=total_cost,
            total_profit=total_profit,
            avg_profit_per_day=total_profit / days_with_sales,
            days_with_sales=days_with_sales,
        )

    def get_invoice_stats(self) -> InvoiceStats:
        with self.unit_of_work_factory() as uow:
            invoices = uow.repositories.invoices.list_active()
        paid = [invoice for invoice in invoices if invoice.is_paid]
        unpaid = [invoice for invoice in invoices if not invoice.is_paid]
        return InvoiceStats(
            total_invoices=len(invoices),
            paid_invoices=len(paid),
            unpaid_invoices=len(unpaid),
            total_revenue=sum(invoice.total_amount for invoice in invoices),
            total_unpaid=sum(invoice.total_amount for invoice in unpaid),
        )


def relink_sale(sale: Sale, listing: Listing) -> None:
    sale.listing_id = listing.id
    if sale.event_id is None:
        sale.event_id = listing.event_id
    if not sale.ext_po_number:
        sale.ext_po_number = listing.ext_po_number


def apply_sale_snapshot(sale: Sale, snapshot: SaleSnapshot) -> None:
    sale.quantity = snapshot.quantity
    sale.sale_price = snapshot.sale_price
    sale.event_name = snapshot.event_name
    sale.event_datetime = snapshot.event_datetime
    sale.venue_name = snapshot.venue_name
    sale.section = snapshot.section
    sale.row = snapshot.row
    sale.seats = snapshot.seats
    sale.buyer_email = snapshot.buyer_email
    sale.buyer_name = snapshot.buyer_name
    sale.status = snapshot.status
    sale.status_name = snapshot.status_name
    sale.delivery_type = snapshot.delivery_type
    sale.transfer_type = snapshot.transfer_type
    sale.is_complete = snapshot.is_complete
    sale.needs_shipping = snapshot.needs_shipping
    sale.mobile_info_needed = snapshot.mobile_info_needed
    sale.pdf_bc_missing = snapshot.pdf_bc_missing
    sale.ext_order_number = snapshot.ext_order_number
    sale.sale_date = snapshot.sale_date
    sale.last_synced_at = utcnow()


def apply_invoice_snapshot(invoice: Invoice, snapshot: InvoiceSnapshot) -> None:
    invoice.total_amount = snapshot.total_amount
    invoice.total_quantity = snapshot.total_quantity
    invoice.fees = snapshot.fees
    invoice.total_cost = snapshot.total_cost
    invoice.client_id = snapshot.client_id
    invoice.client_name = snapshot.client_name
    invoice.client_email = snapshot.client_email
    invoice.event_name = snapshot.event_name
    invoice.event_datetime = snapshot.event_datetime
    invoice.is_paid = snapshot.is_paid
    invoice.payout_status = snapshot.payout_status
    invoice.remittance_status = snapshot.remittance_status
    invoice.remittance_date = snapshot.remittance_date
    invoice.is_cancelled = snapshot.is_cancelled
    invoice.ext_po_number = snapshot.ext_po_number
    invoice.invoice_date = snapshot.invoice_date
    invoice.last_synced_at = utcnow()


__all__ = [
    "SalesReconciler",
    "compute_profit",
    "find_containing_purchase",
    "sale_cost",
]

