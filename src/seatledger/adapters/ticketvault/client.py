"""HTTP client for the TicketVault POS API."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import date
from logging import getLogger
from typing import TYPE_CHECKING, cast

import httpx
from pydantic import ValidationError

from seatledger.adapters.http_resilience import ResilienceConfig, ResilientClient
from seatledger.config.errors import ConfigurationError
from seatledger.config.pos import PosConfig, get_pos_config
from seatledger.domain.errors import ExternalWriteFailure, SyncTransportFailure
from seatledger.domain.model import FetchedBatch

from .auth import TicketVaultAuthError, TicketVaultCredentials
from .schema import OperationsTicketGroup
from .translator import parse_invoice, parse_listing, parse_sale, parse_season_site

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

    from seatledger.domain.model import (
        InvoiceSnapshot,
        ListingSnapshot,
        SaleSnapshot,
        SeasonSiteSnapshot,
    )
    from seatledger.domain.ports import PosPlatform

log = getLogger(__name__)

OPERATIONS_PATH = "/api/GetOperationsInfo"
PRICE_PATH = "/api/ticketGroup/price"
SEASON_SITES_PATH = "/api/settings/seasonsiteslist"
SALES_QUEUE_PATH = "/api/salesQueue"
INVOICES_PATH = "/api/Invoices"

ACTIVE_TICKET_GROUP_STATUSES = (1, 4)
SALES_QUEUE_STATUSES = (40, 20)
LISTING_HORIZON_YEARS = 2
SEASON_SITES_TAKE = 500


@dataclass(frozen=True, slots=True)
class _RowKind:
    label: str
    envelope_keys: tuple[str, ...]
    id_keys: tuple[str, ...]

    def source_id(self, row: object, index: int) -> str:
        """The row's own id for log lines, or its position when it has none."""

        if isinstance(row, dict):
            mapping = cast(dict[str, object], row)
            for key in self.id_keys:
                value = mapping.get(key)
                if value is not None:
                    return str(value)
        return f"#{index}"


_LISTINGS = _RowKind("listing", ("Result",), ("TicketGroupID",))
_SALES = _RowKind(
    "sale", ("SaleRequests", "Result", "Sales"), ("OrderID", "OrderId", "SaleRequestId")
)
_INVOICES = _RowKind("invoice", ("Result", "Invoices"), ("InvoiceNumber",))
_SEASON_SITES = _RowKind("season site", ("CompanySeasonSites",), ("CompanySeasonSiteID",))


class TicketVaultAPIError(RuntimeError):
    """Raised when TicketVault answers with an error status or an unusable body."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def format_api_date(value: date) -> str:
    """Render a date the way the POS web client does, e.g. ``Wed Oct 07 2026``."""

    return value.strftime("%a %b %d %Y")


def _add_years(value: date, years: int) -> date:
    try:
        return value.replace(year=value.year + years)
    except ValueError:
        # 29 February
        return value.replace(year=value.year + years, day=28)


def extract_rows(payload: object, envelope_keys: Sequence[str]) -> list[Mapping[str, object]]:
    """Rows from a bare list or from the first list-valued envelope key."""

    if isinstance(payload, list):
        return cast(list["Mapping[str, object]"], payload)
    if isinstance(payload, dict):
        mapping = cast(dict[str, object], payload)
        for key in envelope_keys:
            rows = mapping.get(key)
            if isinstance(rows, list):
                return cast(list["Mapping[str, object]"], rows)
        raise TicketVaultAPIError(
            f"Unexpected TicketVault response structure: {sorted(mapping)}"
        )
    raise TicketVaultAPIError("Unexpected TicketVault response payload")


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class TicketVaultClient:
    """``PosPlatform`` implementation backed by the TicketVault web API."""

    config: PosConfig | None = None
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )
    today: Callable[[], date] = field(default=date.today)
    _credentials: TicketVaultCredentials | None = field(default=None, init=False, repr=False)

    @property
    def pos_config(self) -> PosConfig:
        # Loaded on first request so read-only callers need no credentials.
        if self.config is None:
            self.config = get_pos_config()
        return self.config

    @property
    def credentials(self) -> TicketVaultCredentials:
        if self._credentials is None:
            config = self.pos_config
            self._credentials = TicketVaultCredentials(
                username=config.username,
                password=config.password,
                ui_timezone=config.ui_timezone,
            )
        return self._credentials

    # Port methods --------------------------------------------------------

    def fetch_listings(self, *, take: int) -> FetchedBatch[ListingSnapshot]:
        payload = self._run_fetch(OPERATIONS_PATH, lambda: self._operations_body(take))
        listings = self._parse_rows(payload, _LISTINGS, parse_listing)
        log.info(f"Fetched {len(listings)} listings from TicketVault")
        return listings

    def fetch_sales(self, *, limit: int) -> FetchedBatch[SaleSnapshot]:
        payload = self._run_fetch(SALES_QUEUE_PATH, lambda: self._sales_body(limit))
        sales = self._parse_rows(payload, _SALES, parse_sale)
        log.info(f"Fetched {len(sales)} sales from TicketVault")
        return sales

    def fetch_invoices(self, *, take: int) -> FetchedBatch[InvoiceSnapshot]:
        payload = self._run_fetch(INVOICES_PATH, lambda: self._invoices_body(take))
        invoices = self._parse_rows(payload, _INVOICES, parse_invoice)
        log.info(f"Fetched {len(invoices)} invoices from TicketVault")
        return invoices

    def fetch_season_sites(self) -> list[SeasonSiteSnapshot]:
        payload = self._run_fetch(SEASON_SITES_PATH, self._season_sites_body)
        sites = self._parse_rows(payload, _SEASON_SITES, parse_season_site).records
        log.info(f"Fetched {len(sites)} season sites from TicketVault")
        return sites

    def update_listing_price(
        self, *, ticket_group_id: int, price: float, production_id: int | None
    ) -> None:
        try:
            asyncio.run(self._update_price_async(ticket_group_id, price, production_id))
        except (
            httpx.HTTPError,
            TicketVaultAPIError,
            TicketVaultAuthError,
            ConfigurationError,
            ValueError,
        ) as exc:
            log.error(f"Price update for ticket group {ticket_group_id} failed: {exc}")
            raise ExternalWriteFailure(
                f"TicketVault price update failed for ticket group {ticket_group_id}: {exc}"
            ) from exc
        log.info(f"Updated price for ticket group {ticket_group_id} to {price:.2f}")

    # Request bodies ------------------------------------------------------

    def _operations_body(self, take: int) -> dict[str, object]:
        start = self.today()
        end = _add_years(start, LISTING_HORIZON_YEARS)
        return {
            "EventStartDate": format_api_date(start),
            "EventEndDate": format_api_date(end),
            "EventId": None,
            "SecondaryEventId": None,
            "VenueId": None,
            "VendorId": None,
            "TicketGroupStatuses": list(ACTIVE_TICKET_GROUP_STATUSES),
            "TicketGroupNetworkTypes": [],
            "IncludeAvailable": False,
            "IncludeExpired": False,
            "IncludeCancelled": False,
            "IncludePOVendor": True,
            "FilterCompanies": [self.pos_config.company_id],
            "DeliveryTypeIds": None,
            "TransferTypeIds": None,
            "TicketGroupIds": None,
            "Row": None,
            "Section": None,
            "ProductionID": None,
            "Skip": 0,
            "Take": take,
            "VisibleOperationsColumnIDs": [],
            "ExtPONumber": None,
            "AccountEmail": None,
            "IsRowExactMatch": False,
            "IsSectionExactMatch": False,
            "PerformerTypeIDs": [],
            "IncludedTagsIDs": [],
            "ExcludedTagsIDs": [],
            "RegularEventsOnly": False,
            "ParkingOnly": False,
            "UiTimeZone": self.pos_config.ui_timezone,
        }

    def _sales_body(self, limit: int) -> dict[str, object]:
        return {
            "ClientId": None,
            "VenueId": None,
            "DeliveryTypeIds": [],
            "TransferTypeIds": [],
            "ExtOrderNumber": None,
            "InvoiceNumber": None,
            "SelectTop": limit,
            "Status": list(SALES_QUEUE_STATUSES),
            "InternalFulfillmentStatus": [],
            "IsCompleteStatus": True,
            "IsNeedToShipStatus": True,
            "IsMobileInfoNeededStatus": True,
            "IsPdfBcMissingStatus": True,
            "LostAndFoundStatus": False,
            "FilterCompanies": [self.pos_config.company_id],
            "POAccountEmail": None,
            "PerformerTypeIDs": [],
            "Section": None,
            "Row": None,
            "UiTimeZone": self.pos_config.ui_timezone,
        }

    def _invoices_body(self, take: int) -> dict[str, object]:
        return {
            "ClientId": None,
            "VendorId": None,
            "EventID": None,
            "VenueId": None,
            "IncludeCancelled": False,
            "UnpaidOnly": False,
            "CancelledOnly": False,
            "FilterCompanies": [self.pos_config.company_id],
            "AccountEmail": None,
            "ExtPONumber": None,
            "Take": take,
            "Skip": 0,
            "PerformerTypeIDs": [],
            "IsRowExactMatch": False,
            "IsSectionExactMatch": False,
            "Row": None,
            "Section": None,
            "IncludedTagsIDs": [],
            "ExcludedTagsIDs": [],
            "UiTimeZone": self.pos_config.ui_timezone,
        }

    def _season_sites_body(self) -> dict[str, object]:
        return {
            "FilterCompanies": [self.pos_config.company_id],
            "SeasonSiteIds": [],
            "SeasonSiteTypeIDs": None,
            "UserName": "",
            "Skip": 0,
            "Take": SEASON_SITES_TAKE,
            "UiTimeZone": self.pos_config.ui_timezone,
        }

    # Transport -----------------------------------------------------------

    def _run_fetch(self, path: str, build_body: Callable[[], Mapping[str, object]]) -> object:
        try:
            return asyncio.run(self._post_json(path, build_body()))
        except (httpx.HTTPError, TicketVaultAPIError, TicketVaultAuthError) as exc:
            log.error(f"TicketVault request failed: {exc}")
            raise SyncTransportFailure(str(exc)) from exc
        except ConfigurationError as exc:
            log.error(f"TicketVault is not configured: {exc}")
            raise SyncTransportFailure(str(exc)) from exc
        except ValueError as exc:
            raise SyncTransportFailure(f"Unusable TicketVault payload: {exc}") from exc

    @staticmethod
    def _parse_rows[TSnapshot](
        payload: object,
        kind: _RowKind,
        parse: Callable[[Mapping[str, object]], TSnapshot],
    ) -> FetchedBatch[TSnapshot]:
        try:
            rows = extract_rows(payload, kind.envelope_keys)
        except TicketVaultAPIError as exc:
            raise SyncTransportFailure(str(exc)) from exc
        batch: FetchedBatch[TSnapshot] = FetchedBatch()
        for index, row in enumerate(rows):
            try:
                batch.records.append(parse(row))
            except ValidationError as exc:
                source_id = kind.source_id(row, index)
                log.warning(
                    f"Skipping {kind.label} row {source_id}: "
                    f"{exc.error_count()} validation error(s)"
                )
                batch.rejected.append(source_id)
        return batch

    async def _post_json(self, path: str, body: Mapping[str, object]) -> object:
        async with self.client_factory(self.pos_config.resilience) as client:
            response = await self._authorized_post(client, path, body)
            return response.json()

    async def _authorized_post(
        self, client: ResilientClient, path: str, body: Mapping[str, object]
    ) -> httpx.Response:
        headers = await self.credentials.authorization_header(client)
        response = await client.post(path, json=body, headers=headers)
        if response.status_code == httpx.codes.UNAUTHORIZED:
            log.info("TicketVault token rejected; logging in again")
            self.credentials.invalidate()
            headers = await self.credentials.authorization_header(client)
            response = await client.post(path, json=body, headers=headers)
        if response.status_code >= httpx.codes.BAD_REQUEST:
            raise TicketVaultAPIError(
                f"TicketVault {path} failed: {response.status_code} - {response.text[:200]}",
                status_code=response.status_code,
            )
        return response

    async def _update_price_async(
        self, ticket_group_id: int, price: float, production_id: int | None
    ) -> None:
        async with self.client_factory(self.pos_config.resilience) as client:
            if production_id is None:
                production_id = await self._lookup_production_id(client, ticket_group_id)
            await self._authorized_post(
                client,
                PRICE_PATH,
                {
                    "TicketGroupID": ticket_group_id,
                    "MarketPrice": price,
                    "ProductionID": production_id,
                    "UiTimeZone": self.pos_config.ui_timezone,
                },
            )

    async def _lookup_production_id(self, client: ResilientClient, ticket_group_id: int) -> int:
        response = await self._authorized_post(
            client, OPERATIONS_PATH, self._operations_body(SEASON_SITES_TAKE)
        )
        for row in extract_rows(response.json(), _LISTINGS.envelope_keys):
            if _LISTINGS.source_id(row, -1) != str(ticket_group_id):
                continue
            try:
                group = OperationsTicketGroup.model_validate(row)
            except ValidationError as exc:
                raise TicketVaultAPIError(
                    f"Unusable ticket group {ticket_group_id}: {exc}"
                ) from exc
            if group.production_id is not None:
                return group.production_id
        raise TicketVaultAPIError(f"Ticket group {ticket_group_id} not found")


if TYPE_CHECKING:
    _platform_check: PosPlatform = TicketVaultClient()
