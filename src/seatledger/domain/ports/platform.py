"""Port for the external point-of-sale platform."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from seatledger.domain.model import (
        FetchedBatch,
        InvoiceSnapshot,
        ListingSnapshot,
        SaleSnapshot,
        SeasonSiteSnapshot,
    )


@runtime_checkable
class PosPlatform(Protocol):
    """Batched snapshot reads plus the single price write.

    Fetches raise ``SyncTransportFailure`` when the platform is unusable as a
    whole; rows that fail validation on their own are left out of the batch and
    listed in ``FetchedBatch.rejected``. ``update_listing_price`` raises
    ``ExternalWriteFailure`` when the write is rejected.
    """

    def fetch_listings(self, *, take: int) -> FetchedBatch[ListingSnapshot]: ...

    def fetch_sales(self, *, limit: int) -> FetchedBatch[SaleSnapshot]: ...

    def fetch_invoices(self, *, take: int) -> FetchedBatch[InvoiceSnapshot]: ...

    def fetch_season_sites(self) -> list[SeasonSiteSnapshot]: ...

    def update_listing_price(
        self, *, ticket_group_id: int, price: float, production_id: int | None
    ) -> None: ...


__all__ = ["PosPlatform"]
