"""Refresh seller-account metadata from the POS season-site list."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from seatledger.domain.results import AccountSyncResult

if TYPE_CHECKING:
    from seatledger.domain.model import Account, SeasonSiteSnapshot
    from seatledger.domain.ports import PosPlatform, ReconciliationUnitOfWorkFactory

log = logging.getLogger(__name__)


def active_sites_by_email(sites: list[SeasonSiteSnapshot]) -> dict[str, SeasonSiteSnapshot]:
    """Live season sites keyed by lower-cased login email."""

    by_email: dict[str, SeasonSiteSnapshot] = {}
    for site in sites:
        if site.is_deleted or not site.username or not site.username.strip():
            continue
        by_email[site.username.strip().lower()] = site
    return by_email


def apply_season_site(account: Account, site: SeasonSiteSnapshot) -> None:
    account.pos_season_site_id = site.season_site_id
    account.pos_last_checked_at = site.last_checked_at
    account.pos_sync_status = site.processing_status
    account.pos_last_error = site.last_error
    account.pos_tickets_found = site.tickets_found
    account.pos_tickets_updated = site.tickets_updated


class AccountMetadataRefresher:
    def __init__(
        self,
        platform: PosPlatform,
        unit_of_work_factory: ReconciliationUnitOfWorkFactory,
    ) -> None:
        self.platform = platform
        self.unit_of_work_factory = unit_of_work_factory

    def sync_account_metadata_from_pos(self) -> AccountSyncResult:
        """Best effort; every failure is reported in the result, never raised."""

        try:
            sites = active_sites_by_email(self.platform.fetch_season_sites())
            if not sites:
                return AccountSyncResult()
            with self.unit_of_work_factory() as uow:
                accounts = uow.repositories.accounts.find_by_emails(list(sites))
                for email, account in accounts.items():
                    apply_season_site(account, sites[email])
                uow.commit()
        except Exception as exc:  # noqa: BLE001
            log.warning("Account metadata refresh failed: %s", exc)
            return AccountSyncResult(success=False, error=str(exc))
        log.info("Refreshed POS metadata for %d accounts", len(accounts))
        return AccountSyncResult(updated=len(accounts))
