"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import and_, case, distinct, func, or_, select, update
from sqlalchemy.dialects import postgresql, sqlite

from seatledger.adapters.sqlalchemy.mappings import (
    TICKET_SEAT_KEY,
    account_table,
    event_table,
    invoice_table,
    listing_table,
    purchase_table,
    sale_table,
    ticket_table,
)
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
from seatledger.domain.ports import ListingStats, SaleCostRow

if TYPE_CHECKING:
    import uuid
    from collections.abc import Collection
    from datetime import datetime

    from sqlalchemy import ColumnElement, CursorResult
    from sqlalchemy.orm import Session

    from seatledger.domain.ports import ListingsFilters


class UnsupportedDialectError(RuntimeError):
    """Raised when conflict-free ticket inserts are unavailable for a database."""


class SqlAlchemyRepository[TEntity]:
    """Shared ``add``/``get`` over one mapped aggregate."""

    def __init__(self, session: Session, entity_cls: type[TEntity]) -> None:
        self.session = session
        self._entity_cls = entity_cls

    def add(self, entity: TEntity) -> None:
        self.session.add(entity)

    def get(self, entity_id: uuid.UUID) -> TEntity | None:
        return self.session.get(self._entity_cls, entity_id)


class SqlAlchemyEventRepository(SqlAlchemyRepository[Event]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Event)

    def get_by_pos_production_id(self, pos_production_id: int) -> Event | None:
        stmt = select(Event).where(event_table.c.pos_production_id == pos_production_id)
        return self.session.execute(stmt).scalar_one_or_none()

    def get_by_tm_event_id(self, tm_event_id: str) -> Event | None:
        stmt = select(Event).where(event_table.c.tm_event_id == tm_event_id)
        return self.session.execute(stmt).scalar_one_or_none()

    def between(self, start: datetime, end: datetime) -> list[Event]:
        stmt = select(Event).where(event_table.c.event_date.between(start, end))
        return list(self.session.execute(stmt).scalars())

    def search_by_name(self, term: str, *, limit: int) -> list[Event]:
        needle = term.lower()
        stmt = (
            select(Event)
            .where(
                or_(
                    func.lower(event_table.c.event_name).contains(needle, autoescape=True),
                    func.lower(event_table.c.artist_name).contains(needle, autoescape=True),
                )
            )
            .limit(limit)
        )
        return list(self.session.execute(stmt).scalars())


class SqlAlchemyPurchaseRepository(SqlAlchemyRepository[Purchase]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Purchase)

    def by_po_number(self) -> dict[str, Purchase]:
        stmt = select(Purchase).where(purchase_table.c.dashboard_po_number.is_not(None))
        return {
            purchase.dashboard_po_number: purchase
            for purchase in self.session.execute(stmt).scalars()
            if purchase.dashboard_po_number
        }

    def find_by_po_numbers(self, po_numbers: Collection[str]) -> dict[str, Purchase]:
        if not po_numbers:
            return {}
        stmt = select(Purchase).where(purchase_table.c.dashboard_po_number.in_(list(po_numbers)))
        return {
            purchase.dashboard_po_number: purchase
            for purchase in self.session.execute(stmt).scalars()
            if purchase.dashboard_po_number
        }

    def find_by_section_row(self, section: str, row: str) -> list[Purchase]:
        stmt = (
            select(Purchase)
            .where(purchase_table.c.section == section)
            .where(purchase_table.c.row == row)
        )
        return list(self.session.execute(stmt).scalars())


def _listing_conditions(filters: ListingsFilters) -> list[ColumnElement[bool]]:
    conditions: list[ColumnElement[bool]] = []
    if filters.is_matched is not None:
        conditions.append(listing_table.c.is_matched == filters.is_matched)
    if filters.has_ext_po is True:
        conditions.append(listing_table.c.ext_po_number.is_not(None))
    elif filters.has_ext_po is False:
        conditions.append(listing_table.c.ext_po_number.is_(None))
    if filters.search:
        needle = filters.search.strip().lower()
        conditions.append(
            or_(
                *(
                    func.lower(column).contains(needle, autoescape=True)
                    for column in (
                        listing_table.c.section,
                        listing_table.c.row,
                        listing_table.c.account_email,
                        listing_table.c.ext_po_number,
                        listing_table.c.event_name,
                    )
                )
            )
        )
    if filters.event_name:
        conditions.append(listing_table.c.event_name == filters.event_name)
    return conditions


class SqlAlchemyListingRepository(SqlAlchemyRepository[Listing]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Listing)

    def get_by_ticket_group_id(self, ticket_group_id: int) -> Listing | None:
        stmt = select(Listing).where(listing_table.c.ticket_group_id == ticket_group_id)
        return self.session.execute(stmt).scalar_one_or_none()

    def search(self, filters: ListingsFilters) -> tuple[list[Listing], int]:
        conditions = _listing_conditions(filters)
        count_stmt = select(func.count()).select_from(listing_table).where(*conditions)
        total = self.session.execute(count_stmt).scalar_one()
        page = max(filters.page, 1)
        limit = max(filters.limit, 1)
        stmt = (
            select(Listing)
            .where(*conditions)
            .order_by(listing_table.c.event_datetime.asc(), listing_table.c.ticket_group_id)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(self.session.execute(stmt).scalars()), total

    def stats(self, filters: ListingsFilters) -> ListingStats:
        matched = case((listing_table.c.is_matched.is_(True), 1), else_=0)
        ours = case((listing_table.c.ext_po_number.is_not(None), 1), else_=0)
        stmt = select(
            func.count(),
            func.coalesce(func.sum(matched), 0),
            func.coalesce(func.sum(ours), 0),
            func.coalesce(func.sum(listing_table.c.price), 0),
        )
        stmt = stmt.select_from(listing_table).where(*_listing_conditions(filters))
        total, matched_count, ours_count, total_value = self.session.execute(stmt).one()
        return ListingStats(
            total=total,
            matched=matched_count,
            unmatched=total - matched_count,
            ours=ours_count,
            total_value=float(total_value),
            total_cost=self.total_cost_of_ours(),
        )

    def total_cost_of_ours(self) -> float:
        stmt = select(
            func.coalesce(func.sum(listing_table.c.cost * listing_table.c.quantity), 0)
        ).where(listing_table.c.ext_po_number.is_not(None))
        return float(self.session.execute(stmt).scalar_one())

    def event_names(self) -> list[str]:
        stmt = select(distinct(listing_table.c.event_name)).order_by(listing_table.c.event_name)
        return list(self.session.execute(stmt).scalars())


class SqlAlchemySaleRepository(SqlAlchemyRepository[Sale]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Sale)

    def get_by_key(self, ticket_group_id: int, order_id: int) -> Sale | None:
        stmt = (
            select(Sale)
            .where(sale_table.c.ticket_group_id == ticket_group_id)
            .where(sale_table.c.order_id == order_id)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def without_listing(self) -> list[Sale]:
        stmt = select(Sale).where(sale_table.c.listing_id.is_(None))
        return list(self.session.execute(stmt).scalars())

    def list_all(self) -> list[Sale]:
        return list(self.session.execute(select(Sale)).scalars())

    def cost_rows(self) -> list[SaleCostRow]:
        stmt = select(
            sale_table.c.id,
            sale_table.c.quantity,
            sale_table.c.ext_po_number,
            purchase_table.c.total_price,
            purchase_table.c.quantity.label("purchase_quantity"),
        ).select_from(
            sale_table.outerjoin(
                listing_table, sale_table.c.listing_id == listing_table.c.id
            ).outerjoin(purchase_table, listing_table.c.purchase_id == purchase_table.c.id)
        )
        return [
            SaleCostRow(
                sale_id=row.id,
                quantity=row.quantity,
                ext_po_number=row.ext_po_number,
                purchase_total_price=row.total_price,
                purchase_quantity=row.purchase_quantity,
            )
            for row in self.session.execute(stmt)
        ]


class SqlAlchemyInvoiceRepository(SqlAlchemyRepository[Invoice]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Invoice)

    def get_by_number(self, invoice_number: int) -> Invoice | None:
        stmt = select(Invoice).where(invoice_table.c.invoice_number == invoice_number)
        return self.session.execute(stmt).scalar_one_or_none()

    def exists(self, invoice_number: int) -> bool:
        stmt = select(invoice_table.c.id).where(invoice_table.c.invoice_number == invoice_number)
        return self.session.execute(stmt.limit(1)).first() is not None

    def list_active(self) -> list[Invoice]:
        stmt = select(Invoice).where(invoice_table.c.is_cancelled.is_(False))
        return list(self.session.execute(stmt).scalars())


class SqlAlchemyTicketRepository:
    """Ticket writes are single statements; reads always refresh from the database."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def insert_if_absent(self, ticket: Ticket) -> bool:
        self.session.flush()
        stmt = (
            self._insert()
            .values(
                id=ticket.id,
                purchase_id=ticket.purchase_id,
                event_id=ticket.event_id,
                section=ticket.section,
                row=ticket.row,
                seat_number=ticket.seat_number,
                cost=ticket.cost,
                status=ticket.status,
                listing_id=ticket.listing_id,
                sale_id=ticket.sale_id,
            )
            .on_conflict_do_nothing(index_elements=list(TICKET_SEAT_KEY))
        )
        return self._rowcount(self.session.execute(stmt)) == 1

    def find(self, event_id: uuid.UUID, section: str, row: str, seat_number: int) -> Ticket | None:
        stmt = (
            select(Ticket)
            .where(self._seat(event_id, section, row, seat_number))
            .execution_options(populate_existing=True)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def find_many(
        self, event_id: uuid.UUID, section: str, row: str, seat_numbers: Collection[int]
    ) -> list[Ticket]:
        if not seat_numbers:
            return []
        stmt = (
            select(Ticket)
            .where(ticket_table.c.event_id == event_id)
            .where(ticket_table.c.section == section)
            .where(ticket_table.c.row == row)
            .where(ticket_table.c.seat_number.in_(list(seat_numbers)))
            .order_by(ticket_table.c.seat_number)
            .execution_options(populate_existing=True)
        )
        return list(self.session.execute(stmt).scalars())

    def claim_for_listing(
        self, listing_id: uuid.UUID, event_id: uuid.UUID, section: str, row: str, seat_number: int
    ) -> bool:
        self.session.flush()
        stmt = (
            update(ticket_table)
            .where(self._seat(event_id, section, row, seat_number))
            .where(ticket_table.c.listing_id.is_(None))
            .values(listing_id=listing_id, status=TicketStatus.LISTED)
        )
        return self._rowcount(self.session.execute(stmt)) == 1

    def claim_for_sale(
        self, sale_id: uuid.UUID, event_id: uuid.UUID, section: str, row: str, seat_number: int
    ) -> bool:
        self.session.flush()
        stmt = (
            update(ticket_table)
            .where(self._seat(event_id, section, row, seat_number))
            .where(ticket_table.c.sale_id.is_(None))
            .values(sale_id=sale_id, status=TicketStatus.SOLD)
        )
        return self._rowcount(self.session.execute(stmt)) == 1

    def refresh_cost(self, ticket_id: uuid.UUID, purchase_id: uuid.UUID, cost: float) -> bool:
        stmt = (
            update(ticket_table)
            .where(ticket_table.c.id == ticket_id)
            .where(ticket_table.c.purchase_id == purchase_id)
            .values(cost=cost)
        )
        return self._rowcount(self.session.execute(stmt)) == 1

    def for_purchase(self, purchase_id: uuid.UUID) -> list[Ticket]:
        stmt = (
            select(Ticket)
            .where(ticket_table.c.purchase_id == purchase_id)
            .order_by(ticket_table.c.section, ticket_table.c.row, ticket_table.c.seat_number)
            .execution_options(populate_existing=True)
        )
        return list(self.session.execute(stmt).scalars())

    def for_sale(self, sale_id: uuid.UUID) -> list[Ticket]:
        stmt = (
            select(Ticket)
            .where(ticket_table.c.sale_id == sale_id)
            .order_by(ticket_table.c.seat_number)
            .execution_options(populate_existing=True)
        )
        return list(self.session.execute(stmt).scalars())

    def _insert(self) -> Any:
        dialect = self.session.get_bind().dialect.name
        if dialect == "sqlite":
            return sqlite.insert(ticket_table)
        if dialect == "postgresql":
            return postgresql.insert(ticket_table)
        raise UnsupportedDialectError(f"Ticket inserts are not supported on {dialect!r}")

    @staticmethod
    def _seat(
        event_id: uuid.UUID, section: str, row: str, seat_number: int
    ) -> ColumnElement[bool]:
        return and_(
            ticket_table.c.event_id == event_id,
            ticket_table.c.section == section,
            ticket_table.c.row == row,
            ticket_table.c.seat_number == seat_number,
        )

    @staticmethod
    def _rowcount(result: object) -> int:
        return cast("CursorResult[Any]", result).rowcount


class SqlAlchemyAccountRepository(SqlAlchemyRepository[Account]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Account)

    def find_by_emails(self, emails: Collection[str]) -> dict[str, Account]:
        """Accounts keyed by lower-cased email."""

        lowered = {email.strip().lower() for email in emails if email and email.strip()}
        if not lowered:
            return {}
        stmt = select(Account).where(func.lower(account_table.c.email).in_(sorted(lowered)))
        return {account.email.lower(): account for account in self.session.execute(stmt).scalars()}


if TYPE_CHECKING:
    from seatledger.domain.ports import (
        AccountRepository,
        EventRepository,
        InvoiceRepository,
        ListingRepository,
        PurchaseRepository,
        SaleRepository,
        TicketRepository,
    )

    _session_stub = cast("Session", object())
    _event_repo: EventRepository = SqlAlchemyEventRepository(_session_stub)
    _purchase_repo: PurchaseRepository = SqlAlchemyPurchaseRepository(_session_stub)
    _listing_repo: ListingRepository = SqlAlchemyListingRepository(_session_stub)
    _sale_repo: SaleRepository = SqlAlchemySaleRepository(_session_stub)
    _invoice_repo: InvoiceRepository = SqlAlchemyInvoiceRepository(_session_stub)
    _ticket_repo: TicketRepository = SqlAlchemyTicketRepository(_session_stub)
    _account_repo: AccountRepository = SqlAlchemyAccountRepository(_session_stub)
