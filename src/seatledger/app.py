"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from seatledger.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyReconciliationUnitOfWork,
    is_started,
    startup,
)
from seatledger.adapters.ticketvault import TicketVaultClient
from seatledger.config.sync import SyncConfig, get_sync_config
from seatledger.domain.event_matcher import EventMatcher, EventMatchInput, EventMatchResult
from seatledger.domain.listings import ListingReconciler, ListingsPage
from seatledger.domain.ports import ListingsFilters
from seatledger.domain.sales import SalesReconciler

if TYPE_CHECKING:
    from uuid import UUID

    from seatledger.domain.ports import PosPlatform, ReconciliationUnitOfWorkFactory
    from seatledger.domain.results import (
        AllSyncResult,
        InvoiceStats,
        PriceUpdateResult,
        SalesStats,
        SyncResult,
    )


log = getLogger(__name__)


def _ensure_started() -> None:
    if not is_started():
        startup()


def _resolve(
    platform: PosPlatform | None,
    unit_of_work_factory: ReconciliationUnitOfWorkFactory | None,
) -> tuple[PosPlatform, ReconciliationUnitOfWorkFactory]:
    if unit_of_work_factory is None:
        _ensure_started()
        unit_of_work_factory = SqlAlchemyReconciliationUnitOfWork
    return platform or TicketVaultClient(), unit_of_work_factory


def _listing_reconciler(
    platform: PosPlatform | None,
    unit_of_work_factory: ReconciliationUnitOfWorkFactory | None,
    sync_config: SyncConfig | None,
) -> ListingReconciler:
    effective_platform, effective_uow = _resolve(platform, unit_of_work_factory)
    config = sync_config or get_sync_config()
    return ListingReconciler(
        effective_platform, effective_uow, batch_size=config.listing_batch_size
    )


def _sales_reconciler(
    platform: PosPlatform | None,
    unit_of_work_factory: ReconciliationUnitOfWorkFactory | None,
    sync_config: SyncConfig | None,
) -> SalesReconciler:
    effective_platform, effective_uow = _resolve(platform, unit_of_work_factory)
    config = sync_config or get_sync_config()
    return SalesReconciler(
        effective_platform,
        effective_uow,
        batch_size=config.sales_batch_size,
        invoice_batch_size=config.invoice_batch_size,
    )


def sync_listings_from_pos(
    *,
    platform: PosPlatform | None = None,
    unit_of_work_factory: ReconciliationUnitOfWorkFactory | None = None,
    sync_config: SyncConfig | None = None,
) -> SyncResult:
    """Pull active listings from the POS and reconcile them locally."""

    log.info("Starting listing sync")
    result = _listing_reconciler(
        platform, unit_of_work_factory, sync_config
    ).sync_listings_from_pos()
    log.info(
        f"Finished listing sync: synced={result.synced}, created={result.created}, "
        f"updated={result.updated}, linked={result.linked}, success={result.success}"
    )
    return result


def sync_sales_from_pos(
    *,
    platform: PosPlatform | None = None,
    unit_of_work_factory: ReconciliationUnitOfWorkFactory | None = None,
    sync_config: SyncConfig | None = None,
) -> SyncResult:
    log.info("Starting sales sync")
    result = _sales_reconciler(platform, unit_of_work_factory, sync_config).sync_sales_from_pos()
    log.info(
        f"Finished sales sync: synced={result.synced}, created={result.created}, "
        f"updated={result.updated}, linked={result.linked}, success={result.success}"
    )
    return result


def sync_invoices_from_pos(
    *,
    platform: PosPlatform | None = None,
    unit_of_work_factory: ReconciliationUnitOfWorkFactory | None = None,
    sync_config: SyncConfig | None = None,
) -> SyncResult:
    log.info("Starting invoice sync")
    result = _sales_reconciler(
        platform, unit_of_work_factory, sync_config
    ).sync_invoices_from_pos()
    log.info(
        f"Finished invoice sync: synced={result.synced}, created={result.created}, "
        f"updated={result.updated}, success={result.success}"
    )
    return result


def sync_all_from_pos(
    *,
    platform: PosPlatform | None = None,
    unit_of_work_factory: ReconciliationUnitOfWorkFactory | None = None,
    sync_config: SyncConfig | None = None,
) -> AllSyncResult:
    """Invoices first so that sales can reference them, then sales."""

    return _sales_reconciler(platform, unit_of_work_factory, sync_config).sync_all_from_pos()


def get_listings(
    filters: ListingsFilters | None = None,
    *,
    platform: PosPlatform | None = None,
    unit_of_work_factory: ReconciliationUnitOfWorkFactory | None = None,
    sync_config: SyncConfig | None = None,
) -> ListingsPage:
    config = sync_config or get_sync_config()
    effective_filters = filters or ListingsFilters(limit=config.listing_page_size)
    return _listing_reconciler(platform, unit_of_work_factory, config).get_listings(
        effective_filters
    )


def get_listing_events(
    *,
    platform: PosPlatform | None = None,
    unit_of_work_factory: ReconciliationUnitOfWorkFactory | None = None,
) -> list[str]:
    return _listing_reconciler(platform, unit_of_work_factory, None).get_listing_events()


def get_sales_stats(
    *,
    platform: PosPlatform | None = None,
    unit_of_work_factory: ReconciliationUnitOfWorkFactory | None = None,
) -> SalesStats:
    return _sales_reconciler(platform, unit_of_work_factory, None).get_sales_stats()


def get_invoice_stats(
    *,
    platform: PosPlatform | None = None,
    unit_of_work_factory: ReconciliationUnitOfWorkFactory | None = None,
) -> InvoiceStats:
    return _sales_reconciler(platform, unit_of_work_factory, None).get_invoice_stats()


def update_listing_price(
    listing_id: UUID,
    new_price: float,
    *,
    platform: PosPlatform | None = None,
    unit_of_work_factory: ReconciliationUnitOfWorkFactory | None = None,
) -> PriceUpdateResult:
    """Push a new price to the POS, then record it locally."""

    return _listing_reconciler(platform, unit_of_work_factory, None).update_listing_price(
        listing_id, new_price
    )


def find_or_create_event(
    data: EventMatchInput,
    *,
    create_if_not_found: bool = True,
    unit_of_work_factory: ReconciliationUnitOfWorkFactory | None = None,
) -> EventMatchResult:
    if unit_of_work_factory is None:
        _ensure_started()
        unit_of_work_factory = SqlAlchemyReconciliationUnitOfWork
    with unit_of_work_factory() as uow:
        matcher = EventMatcher(uow.repositories.events)
        result = matcher.find_or_create_event(data, create_if_not_found=create_if_not_found)
        uow.commit()
    return result


__all__ = [
    "EventMatchInput",
    "find_or_create_event",
    "get_invoice_stats",
    "get_listing_events",
    "get_listings",
    "get_sales_stats",
    "sync_all_from_pos",
    "sync_invoices_from_pos",
    "sync_listings_from_pos",
    "sync_sales_from_pos",
    "update_listing_price",
]
