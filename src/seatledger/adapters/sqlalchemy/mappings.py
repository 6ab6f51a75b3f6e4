"""SQLAlchemy mapping metadata for the reconciliation model."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Table,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers

from seatledger.domain.model import (
    Account,
    Event,
    Invoice,
    Listing,
    Purchase,
    Sale,
    Ticket,
    TicketStatus,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]
MoneyColumnType = Numeric(12, 2, asdecimal=False)


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

event_table = Table(
    "event",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("event_name", String, nullable=False),
    Column("artist_name", String, nullable=True),
    Column("venue", String, nullable=True),
    Column("event_date", UTCDateTime(), nullable=True, index=True),
    Column("pos_production_id", Integer, nullable=True, unique=True),
    Column("pos_venue_id", Integer, nullable=True),
    Column("tm_event_id", String, nullable=True, unique=True),
)

purchase_table = Table(
    "purchase",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("dashboard_po_number", String, nullable=True, unique=True),
    Column("event_id", UUIDColumnType, ForeignKey("event.id"), nullable=True),
    Column("section", String, nullable=False),
    Column("row", String, nullable=False),
    Column("seats", String, nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("total_price", MoneyColumnType, nullable=False),
    Column("account_email", String, nullable=True),
    Index("ix_purchase_section_row", "section", "row"),
)

listing_table = Table(
    "listing",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("ticket_group_id", Integer, nullable=False, unique=True),
    Column("production_id", Integer, nullable=True),
    Column("purchase_order_id", Integer, nullable=True),
    Column("event_name", String, nullable=False),
    Column("venue_name", String, nullable=True),
    Column("venue_city", String, nullable=True),
    Column("event_datetime", UTCDateTime(), nullable=True),
    Column("section", String, nullable=False),
    Column("row", String, nullable=False),
    Column("start_seat", Integer, nullable=False),
    Column("end_seat", Integer, nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("cost", MoneyColumnType, nullable=False, default=0),
    Column("price", MoneyColumnType, nullable=False, default=0),
    Column("account_email", String, nullable=True),
    Column("internal_note", String, nullable=True),
    Column("ext_po_number", String, nullable=True, index=True),
    Column("is_matched", Boolean, nullable=False, default=False),
    Column("barcodes_count", Integer, nullable=False, default=0),
    Column("pdfs_count", Integer, nullable=False, default=0),
    Column("links_count", Integer, nullable=False, default=0),
    Column("pdf_status", String, nullable=True),
    Column("status_type_id", Integer, nullable=True),
    Column("po_vendor", String, nullable=True),
    Column("vivid_event_id", Integer, nullable=True),
    Column("stubhub_event_id", Integer, nullable=True),
    Column("seatgeek_event_id", Integer, nullable=True),
    Column("tm_event_id", String, nullable=True),
    Column("last_synced_at", UTCDateTime(), nullable=False),
    Column("purchase_id", UUIDColumnType, ForeignKey("purchase.id"), nullable=True),
    Column("event_id", UUIDColumnType, ForeignKey("event.id"), nullable=True),
)

invoice_table = Table(
    "invoice",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("invoice_number", Integer, nullable=False, unique=True),
    Column("client_id", Integer, nullable=True),
    Column("client_name", String, nullable=True),
    Column("client_email", String, nullable=True),
    Column("event_name", String, nullable=True),
    Column("event_datetime", UTCDateTime(), nullable=True),
    Column("total_quantity", Integer, nullable=False, default=0),
    Column("total_amount", MoneyColumnType, nullable=False, default=0),
    Column("fees", MoneyColumnType, nullable=False, default=0),
    Column("total_cost", MoneyColumnType, nullable=False, default=0),
    Column("is_paid", Boolean, nullable=False, default=False),
    Column("payout_status", String, nullable=True),
    Column("remittance_status", String, nullable=True),
    Column("remittance_date", UTCDateTime(), nullable=True),
    Column("is_cancelled", Boolean, nullable=False, default=False),
    Column("ext_po_number", String, nullable=True),
    Column("invoice_date", UTCDateTime(), nullable=True),
    Column("last_synced_at", UTCDateTime(), nullable=False),
)

sale_table = Table(
    "sale",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("ticket_group_id", Integer, nullable=False),
    Column("order_id", Integer, nullable=False),
    Column(
        "invoice_number",
        Integer,
        ForeignKey("invoice.invoice_number"),
        nullable=True,
    ),
    Column("event_name", String, nullable=True),
    Column("event_datetime", UTCDateTime(), nullable=True),
    Column("venue_name", String, nullable=True),
    Column("section", String, nullable=True),
    Column("row", String, nullable=True),
    Column("seats", String, nullable=True),
    Column("quantity", Integer, nullable=False, default=1),
    Column("sale_price", MoneyColumnType, nullable=False, default=0),
    Column("cost", MoneyColumnType, nullable=True),
    Column("buyer_email", String, nullable=True),
    Column("buyer_name", String, nullable=True),
    Column("status", Integer, nullable=False, default=0),
    Column("status_name", String, nullable=True),
    Column("delivery_type", String, nullable=True),
    Column("transfer_type", String, nullable=True),
    Column("is_complete", Boolean, nullable=False, default=False),
    Column("needs_shipping", Boolean, nullable=False, default=False),
    Column("mobile_info_needed", Boolean, nullable=False, default=False),
    Column("pdf_bc_missing", Boolean, nullable=False, default=False),
    Column("ext_order_number", String, nullable=True),
    Column("ext_po_number", String, nullable=True, index=True),
    Column("sale_date", UTCDateTime(), nullable=True),
    Column("last_synced_at", UTCDateTime(), nullable=False),
    Column("listing_id", UUIDColumnType, ForeignKey("listing.id"), nullable=True),
    Column("event_id", UUIDColumnType, ForeignKey("event.id"), nullable=True),
    UniqueConstraint("ticket_group_id", "order_id"),
)

ticket_table = Table(
    "ticket",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("purchase_id", UUIDColumnType, ForeignKey("purchase.id"), nullable=False),
    Column("event_id", UUIDColumnType, ForeignKey("event.id"), nullable=False),
    Column("section", String, nullable=False),
    Column("row", String, nullable=False),
    Column("seat_number", Integer, nullable=False),
    Column("cost", MoneyColumnType, nullable=False, default=0),
    Column(
        "status",
        Enum(TicketStatus, native_enum=False),
        nullable=False,
        default=TicketStatus.PURCHASED,
    ),
    Column("listing_id", UUIDColumnType, ForeignKey("listing.id"), nullable=True, index=True),
    Column("sale_id", UUIDColumnType, ForeignKey("sale.id"), nullable=True, index=True),
    UniqueConstraint("event_id", "section", "row", "seat_number"),
)

account_table = Table(
    "account",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("email", String, nullable=False, unique=True),
    Column("pos_season_site_id", Integer, nullable=True),
    Column("pos_last_checked_at", UTCDateTime(), nullable=True),
    Column("pos_sync_status", String, nullable=True),
    Column("pos_last_error", String, nullable=True),
    Column("pos_tickets_found", Integer, nullable=False, default=0),
    Column("pos_tickets_updated", Integer, nullable=False, default=0),
)

TICKET_SEAT_KEY = (
    ticket_table.c.event_id,
    ticket_table.c.section,
    ticket_table.c.row,
    ticket_table.c.seat_number,
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(Event, event_table)
    mapper_registry.map_imperatively(Purchase, purchase_table)
    mapper_registry.map_imperatively(Listing, listing_table)
    mapper_registry.map_imperatively(Invoice, invoice_table)
    mapper_registry.map_imperatively(Sale, sale_table)
    mapper_registry.map_imperatively(Ticket, ticket_table)
    mapper_registry.map_imperatively(Account, account_table)

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
