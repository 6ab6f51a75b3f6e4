"""Listing reconciliation against POS ticket groups, plus the listing query surface."""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from seatledger.domain.accounts import AccountMetadataRefresher
from seatledger.domain.errors import ExternalWriteFailure, ReconciliationError
from seatledger.domain.event_matcher import EventMatcher, EventMatchInput
from seatledger.domain.merge import backfill_pos_production_id, resolve_listing_event_id
from seatledger.domain.model import Listing, utcnow
from seatledger.domain.ports import ListingsFilters
from seatledger.domain.results import PriceUpdateResult, SyncResult
from seatledger.domain.tickets import TicketLinker

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from seatledger.domain.model import ListingSnapshot, Purchase
    from seatledger.domain.ports import (
        ListingStats,
        PosPlatform,
        ReconciliationRepositories,
        ReconciliationUnitOfWorkFactory,
    )

log = logging.getLogger(__name__)

DEFAULT_LISTING_BATCH_SIZE: Final = 500
_EMAIL: Final = re.compile(r"[\w.-]+@[\w.-]+\.\w+")
_UPLOAD_STATUS: Final = re.compile(r"^\s*(\d+)\s*/\s*(\d+)\s*$")


def parse_upload_count(status: str | None) -> int:
    """Uploaded count from an ``"uploaded/total"`` status string."""

    if not status:
        return 0
    match = _UPLOAD_STATUS.match(status)
    return int(match.group(1)) if match else 0


def extract_email(text: str | None) -> str | None:
    if not text:
        return None
    match = _EMAIL.search(text)
    return match.group(0) if match else None


def resolve_account_email(account_email: str | None, internal_note: str | None) -> str | None:
    if account_email and account_email.strip():
        return account_email.strip()
    return extract_email(internal_note)


@dataclass(frozen=True, slots=True)
class Pagination:
    page: int
    limit: int
    total: int
    pages: int


@dataclass(frozen=True, slots=True)
class ListingRow:
    """A listing enriched with its seller account's POS sync state."""

    listing: Listing
    pos_last_checked_at: datetime | None = None
    pos_sync_status: str | None = None


@dataclass(frozen=True, slots=True)
class ListingsPage:
    listings: list[ListingRow]
    stats: ListingStats
    pagination: Pagination


@dataclass(frozen=True, slots=True)
class _ListingOutcome:
    created: bool
    linked: bool


class ListingReconciler:
    def __init__(
        self,
        platform: PosPlatform,
        unit_of_work_factory: ReconciliationUnitOfWorkFactory,
        *,
        batch_size: int = DEFAULT_LISTING_BATCH_SIZE,
        account_refresher: AccountMetadataRefresher | None = None,
    ) -> None:
        self.platform = platform
        self.unit_of_work_factory = unit_of_work_factory
        self.batch_size = batch_size
        self.account_refresher = account_refresher or AccountMetadataRefresher(
            platform, unit_of_work_factory
        )

    # Sync --------------------------------------------------------------------

    def sync_listings_from_pos(self) -> SyncResult:
        try:
            snapshots = self.platform.fetch_listings(take=self.batch_size)
        except ReconciliationError as exc:
            log.error("Listing sync aborted: %s", exc)  # noqa: TRY400
            return SyncResult.failure(str(exc))
        except Exception as exc:
            log.exception("Listing sync aborted while fetching from the POS")
            return SyncResult.failure(str(exc))

        result = SyncResult(failed=len(snapshots.rejected))
        try:
            with self.unit_of_work_factory() as uow:
                purchases_by_po = uow.repositories.purchases.by_po_number()
                for snapshot in snapshots:
                    try:
                        outcome = self._sync_listing(uow.repositories, snapshot, purchases_by_po)
                        uow.commit()
                    except Exception:
                        uow.rollback()
                        log.exception("Failed to sync listing %s", snapshot.ticket_group_id)
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
            log.exception("Listing sync aborted after %d records", result.synced)
            return SyncResult.failure(str(exc))

        account_result = self.account_refresher.sync_account_metadata_from_pos()
        if not account_result.success:
            log.warning("Listing sync finished without account refresh: %s", account_result.error)

        log.info(
            "Listing sync: %d synced, %d created, %d updated, %d linked, %d failed",
            result.synced,
            result.created,
            result.updated,
            result.linked,
            result.failed,
        )
        return result

    def _sync_listing(
        self,
        repositories: ReconciliationRepositories,
        snapshot: ListingSnapshot,
        purchases_by_po: dict[str, Purchase],
    ) -> _ListingOutcome:
        account_email = resolve_account_email(snapshot.account_email, snapshot.internal_note)
        ext_po = snapshot.ext_po_number or None
        purchase = purchases_by_po.get(ext_po) if ext_po else None

        matched_event_id: UUID | None = None
        if snapshot.event_datetime or snapshot.event_name:
            match = EventMatcher(repositories.events).find_or_create_event(
                EventMatchInput(
                    event_name=snapshot.event_name,
                    pos_production_id=snapshot.production_id,
                    venue=snapshot.venue_name,
                    event_date=snapshot.event_datetime,
                )
            )
            if match.event is not None:
                backfill_pos_production_id(match.event, snapshot.production_id)
                matched_event_id = match.event.id
        event_id = resolve_listing_event_id(
            purchase.event_id if purchase else None, matched_event_id
        )

        listing = repositories.listings.get_by_ticket_group_id(snapshot.ticket_group_id)
        created = listing is None
        if listing is None:
            listing = Listing(
                ticket_group_id=snapshot.ticket_group_id,
                event_name=snapshot.event_name,
                section=snapshot.section,
                row=snapshot.row,
                start_seat=snapshot.start_seat,
                end_seat=snapshot.end_seat,
                quantity=snapshot.quantity,
            )
            repositories.listings.add(listing)
        had_purchase = listing.purchase_id is not None
        apply_listing_snapshot(listing, snapshot, account_email=account_email)
        if purchase is not None:
            listing.purchase_id = purchase.id
        if event_id is not None:
            listing.event_id = event_id

        if listing.event_id is not None and purchase is not None:
            tickets = TicketLinker(repositories.tickets).create_tickets_from_listing(
                purchase.id,
                listing.id,
                listing.event_id,
                listing.section,
                listing.row,
                listing.start_seat,
                listing.end_seat,
                purchase.cost_per_ticket or 0.0,
            )
            if not tickets.success:
                log.warning(
                    "Listing %s seats not linked: %s", snapshot.ticket_group_id, tickets.error
                )

        return _ListingOutcome(created=created, linked=not had_purchase and purchase is not None)

    # Queries -----------------------------------------------------------------

    def get_listings(self, filters: ListingsFilters | None = None) -> ListingsPage:
        filters = filters or ListingsFilters()
        with self.unit_of_work_factory() as uow:
            listings, total = uow.repositories.listings.search(filters)
            stats = uow.repositories.listings.stats(filters)
            emails = {listing.account_email for listing in listings if listing.account_email}
            accounts = uow.repositories.accounts.find_by_emails(list(emails))

        rows: list[ListingRow] = []
        for listing in listings:
            account = accounts.get(listing.account_email.lower()) if listing.account_email else None
            rows.append(
                ListingRow(
                    listing=listing,
                    pos_last_checked_at=account.pos_last_checked_at if account else None,
                    pos_sync_status=account.pos_sync_status if account else None,
                )
            )
        limit = max(filters.limit, 1)
        pagination = Pagination(
            page=max(filters.page, 1), limit=limit, total=total, pages=math.ceil(total / limit)
        )
        return ListingsPage(listings=rows, stats=stats, pagination=pagination)

    def get_listing_events(self) -> list[str]:
        with self.unit_of_work_factory() as uow:
            return uow.repositories.listings.event_names()

    def update_listing_price(self, listing_id: UUID, new_price: float) -> PriceUpdateResult:
        """Write the platform first; the local cache only follows a successful write."""

        with self.unit_of_work_factory() as uow:
            listing = uow.repositories.listings.get(listing_id)
            if listing is None:
                return PriceUpdateResult(success=False, error="Listing not found")
            try:
                self.platform.update_listing_price(
                    ticket_group_id=listing.ticket_group_id,
                    price=new_price,
                    production_id=listing.production_id,
                )
            except ExternalWriteFailure as exc:
                log.warning(
                    "Price update for listing %s rejected: %s", listing.ticket_group_id, exc
                )
                return PriceUpdateResult(success=False, error=str(exc))
            except Exception as exc:
                log.exception("Price update for listing %s failed", listing.ticket_group_id)
                return PriceUpdateResult(success=False, error=str(exc))
            listing.price = new_price
            listing.last_synced_at = utcnow()
            uow.commit()
        return PriceUpdateResult(success=True)


def apply_listing_snapshot(
    listing: Listing, snapshot: ListingSnapshot, *, account_email: str | None
) -> None:
    listing.production_id = snapshot.production_id
    listing.purchase_order_id = snapshot.purchase_order_id
    listing.event_name = snapshot.event_name
    listing.venue_name = snapshot.venue_name
    listing.venue_city = snapshot.venue_city
    listing.event_datetime = snapshot.event_datetime
    listing.section = snapshot.section
    listing.row = snapshot.row
    listing.start_seat = snapshot.start_seat
    listing.end_seat = snapshot.end_seat
    listing.quantity = snapshot.quantity
    listing.cost = snapshot.cost
    listing.price = snapshot.price
    listing.account_email = account_email
    listing.internal_note = snapshot.internal_note
    listing.ext_po_number = snapshot.ext_po_number or None
    listing.is_matched = snapshot.is_matched
    listing.barcodes_count = snapshot.barcodes_count
    listing.pdfs_count = parse_upload_count(snapshot.pdf_status)
    listing.links_count = snapshot.links_count
    listing.pdf_status = snapshot.pdf_status
    listing.status_type_id = snapshot.status_type_id
    listing.po_vendor = snapshot.po_vendor
    listing.vivid_event_id = snapshot.vivid_event_id
    listing.stubhub_event_id = snapshot.stubhub_event_id
    listing.seatgeek_event_id = snapshot.seatgeek_event_id
    listing.tm_event_id = snapshot.tm_event_id
    listing.last_synced_at = utcnow()
