"""Pydantic models describing the TicketVault POS API payloads.

The POS spells the same concept several ways depending on endpoint and
version, so most fields accept a list of aliases. Null-valued keys are
dropped before validation; the first alias carrying a value wins.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime  # noqa: TC003
from typing import cast

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

_EMPTY_DATE_PREFIX = "0001-01-01"


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _number_to_str(value: object) -> object:
    if isinstance(value, bool):
        return value
    if isinstance(value, int | float):
        return str(value)
    return _blank_to_none(value)


def _empty_date_to_none(value: object) -> object:
    if isinstance(value, str) and (not value.strip() or value.startswith(_EMPTY_DATE_PREFIX)):
        return None
    return value


def _aliases(*names: str) -> AliasChoices:
    return AliasChoices(*names)


class TicketVaultBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _drop_null_keys(cls, value: object) -> object:
        if isinstance(value, Mapping):
            mapping_value = cast(Mapping[str, object], value)
            return {key: item for key, item in mapping_value.items() if item is not None}
        return value


class LoginResponse(TicketVaultBaseModel):
    token: str = Field(alias="Token")
    user_name: str | None = Field(default=None, alias="UserName")
    company_name: str | None = Field(default=None, alias="CompanyName")


class OperationsTicketGroup(TicketVaultBaseModel):
    """One row of ``/api/GetOperationsInfo``: a ticket group currently for sale."""

    ticket_group_id: int = Field(alias="TicketGroupID")
    production_id: int | None = Field(default=None, alias="ProductionID")
    primary_event_name: str | None = Field(default=None, alias="PrimaryEventName")
    venue_name: str | None = Field(default=None, alias="VenueName")
    venue_city: str | None = Field(default=None, alias="VenueCity")
    event_datetime: datetime | None = Field(default=None, alias="EventDateTime")
    section: str | None = Field(default=None, alias="Section")
    row: str | None = Field(default=None, alias="Row")
    start_seat: int | None = Field(default=None, alias="StartSeat")
    end_seat: int | None = Field(default=None, alias="EndSeat")
    quantity: int | None = Field(default=None, alias="Quantity")
    cost: float | None = Field(default=None, alias="Cost")
    # ``Price`` is always zero; the listed price lives in ``MarketPrice``.
    market_price: float | None = Field(default=None, alias="MarketPrice")
    account_email: str | None = Field(default=None, alias="AccountEmail")
    internal_note: str | None = Field(default=None, alias="InternalNote")
    ext_po_tooltip: str | None = Field(default=None, alias="HtmlExtPOIDMultiLineTooltip")
    ext_po_ellipsis: str | None = Field(default=None, alias="HtmlExtPOIDEllipsis")
    is_fully_mapped: bool = Field(default=False, alias="IsFullyMapped")
    barcodes_count: int | None = Field(default=None, alias="BarcodesCount")
    links_count: int | None = Field(default=None, alias="LinksCount")
    pdf: str | None = Field(default=None, alias="Pdf")
    status_type_id: int | None = Field(default=None, alias="StatusTypeId")
    po_vendor: str | None = Field(default=None, alias="POVendor")
    purchase_order_id: int | None = Field(default=None, alias="PurchaseOrderID")
    vivid_event_id: int | None = Field(default=None, alias="VividEventID")
    stubhub_event_id: int | None = Field(default=None, alias="StubhubEventID")
    seatgeek_event_id: int | None = Field(default=None, alias="SeatGeekEventID")
    tm_event_id: str | None = Field(default=None, alias="TMEventID")

    _normalize_strings = field_validator(
        "primary_event_name",
        "venue_name",
        "venue_city",
        "account_email",
        "internal_note",
        "ext_po_tooltip",
        "ext_po_ellipsis",
        "pdf",
        "po_vendor",
        mode="before",
    )(_blank_to_none)
    _normalize_labels = field_validator("section", "row", "tm_event_id", mode="before")(
        _number_to_str
    )
    _normalize_dates = field_validator("event_datetime", mode="before")(_empty_date_to_none)


class SalesQueueItem(TicketVaultBaseModel):
    """One sale from ``/api/salesQueue``."""

    ticket_group_id: int = Field(validation_alias=_aliases("TicketGroupID", "TicketGroupId"))
    order_id: int | None = Field(
        default=None, validation_alias=_aliases("OrderID", "OrderId", "SaleRequestId")
    )
    quantity: int | None = Field(
        default=None, validation_alias=_aliases("Qty", "Quantity", "TicketCount")
    )
    sale_price: float | None = Field(
        default=None, validation_alias=_aliases("Total", "SalePrice", "Price")
    )
    cost: float | None = Field(default=None, validation_alias=_aliases("Cost"))
    invoice_number: int | None = Field(
        default=None, validation_alias=_aliases("InvoiceNumber", "InvoiceId")
    )
    event_name: str | None = Field(
        default=None, validation_alias=_aliases("Performer", "PrimaryEventName", "EventName")
    )
    venue_name: str | None = Field(default=None, validation_alias=_aliases("Venue", "VenueName"))
    event_datetime: datetime | None = Field(
        default=None, validation_alias=_aliases("EventDate", "EventDateTime")
    )
    section: str | None = Field(default=None, validation_alias=_aliases("Section"))
    row: str | None = Field(default=None, validation_alias=_aliases("Row"))
    seats: str | None = Field(default=None, validation_alias=_aliases("Seats"))
    buyer_first_name: str | None = Field(default=None, validation_alias=_aliases("BuyerFirstName"))
    buyer_last_name: str | None = Field(default=None, validation_alias=_aliases("BuyerLastName"))
    buyer_name: str | None = Field(
        default=None, validation_alias=_aliases("BuyerName", "ClientName")
    )
    buyer_email: str | None = Field(
        default=None, validation_alias=_aliases("BuyerEmail", "ClientEmail")
    )
    status: int | None = Field(default=None, validation_alias=_aliases("Status"))
    status_name: str | None = Field(default=None, validation_alias=_aliases("StatusName"))
    delivery_type: str | None = Field(
        default=None, validation_alias=_aliases("DeliveryTypeName", "DeliveryType")
    )
    transfer_type: str | None = Field(
        default=None, validation_alias=_aliases("TransferTypeName", "TransferType")
    )
    is_complete: bool = Field(default=False, validation_alias=_aliases("IsComplete", "IsDelivered"))
    needs_shipping: bool = Field(
        default=False, validation_alias=_aliases("NeedsShipping", "IsNeedToShip")
    )
    mobile_info_needed: bool = Field(
        default=False, validation_alias=_aliases("IsMobileInfoNeeded")
    )
    pdf_bc_missing: bool = Field(default=False, validation_alias=_aliases("IsPdfBcMissing"))
    ext_order_number: str | None = Field(
        default=None, validation_alias=_aliases("ExtOrderNumber")
    )
    ext_po_number: str | None = Field(
        default=None, validation_alias=_aliases("ExtPONumber", "PONumber")
    )
    received_date: datetime | None = Field(
        default=None, validation_alias=_aliases("ReceivedDate", "SaleDate")
    )

    _normalize_strings = field_validator(
        "event_name",
        "venue_name",
        "buyer_first_name",
        "buyer_last_name",
        "buyer_name",
        "buyer_email",
        "status_name",
        "delivery_type",
        "transfer_type",
        mode="before",
    )(_blank_to_none)
    _normalize_labels = field_validator(
        "section", "row", "seats", "ext_order_number", "ext_po_number", mode="before"
    )(_number_to_str)
    _normalize_dates = field_validator("event_datetime", "received_date", mode="before")(
        _empty_date_to_none
    )

    @property
    def full_buyer_name(self) -> str | None:
        parts = [part for part in (self.buyer_first_name, self.buyer_last_name) if part]
        if parts:
            return " ".join(parts)
        return self.buyer_name


class InvoiceItem(TicketVaultBaseModel):
    """One invoice from ``/api/Invoices``; the payout is net of platform fees."""

    invoice_number: int = Field(validation_alias=_aliases("InvoiceNumber"))
    total_amount: float | None = Field(
        default=None, validation_alias=_aliases("Payout", "TotalAmount", "Total")
    )
    total_quantity: int | None = Field(default=None, validation_alias=_aliases("Quantity", "Qty"))
    event_name: str | None = Field(
        default=None, validation_alias=_aliases("PrimaryEventName", "EventName")
    )
    client_id: int | None = Field(default=None, validation_alias=_aliases("ClientId", "ClientID"))
    client_name: str | None = Field(default=None, validation_alias=_aliases("Client", "ClientName"))
    client_email: str | None = Field(
        default=None, validation_alias=_aliases("AccountEmail", "ClientEmail")
    )
    event_datetime: datetime | None = Field(
        default=None, validation_alias=_aliases("EventDateTime", "EventDate")
    )
    fees: float | None = Field(default=None, validation_alias=_aliases("TVFee", "Fees"))
    total_cost: float | None = Field(default=None, validation_alias=_aliases("TotalCost", "Cost"))
    is_paid: bool = Field(default=False, validation_alias=_aliases("Paid", "IsPaid"))
    payout_status: str | None = Field(
        default=None, validation_alias=_aliases("InvoiceStatus", "PayoutStatus")
    )
    remittance_status: str | None = Field(
        default=None, validation_alias=_aliases("RemittancePayments", "RemittanceStatus")
    )
    remittance_date: datetime | None = Field(
        default=None, validation_alias=_aliases("MaxRemittanceDate", "RemittanceDate")
    )
    is_cancelled: bool = Field(default=False, validation_alias=_aliases("IsCancelled"))
    ext_po_number: str | None = Field(default=None, validation_alias=_aliases("ExtPONumber"))
    created: datetime | None = Field(
        default=None, validation_alias=_aliases("Created", "InvoiceDate")
    )

    _normalize_strings = field_validator(
        "event_name", "client_name", "client_email", "payout_status", mode="before"
    )(_blank_to_none)
    _normalize_labels = field_validator("remittance_status", "ext_po_number", mode="before")(
        _number_to_str
    )
    _normalize_dates = field_validator(
        "event_datetime", "remittance_date", "created", mode="before"
    )(_empty_date_to_none)


class SeasonSite(TicketVaultBaseModel):
    company_season_site_id: int = Field(alias="CompanySeasonSiteID")
    user_name: str | None = Field(default=None, alias="UserName")
    is_deleted: bool = Field(default=False, alias="IsDeleted")
    last_checked_at: datetime | None = Field(default=None, alias="LastCheckedDateTimeUTC")
    processing_status: str | None = Field(default=None, alias="ProcessingStatus")
    last_error: str | None = Field(default=None, alias="LastError")
    total_count: int | None = Field(default=None, alias="TotalCountForPaginator")
    total_updated: int | None = Field(default=None, alias="TotalUpdatedAfterLastSync")

    _normalize_strings = field_validator(
        "user_name", "processing_status", "last_error", mode="before"
    )(_blank_to_none)
    _normalize_dates = field_validator("last_checked_at", mode="before")(_empty_date_to_none)
