"""SQLAlchemy adapter package for seatledger."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyAccountRepository,
    SqlAlchemyEventRepository,
    SqlAlchemyInvoiceRepository,
    SqlAlchemyListingRepository,
    SqlAlchemyPurchaseRepository,
    SqlAlchemySaleRepository,
    SqlAlchemyTicketRepository,
)
from .unit_of_work import SqlAlchemyReconciliationUnitOfWork, shutdown, startup

__all__ = [
    "SqlAlchemyAccountRepository",
    "SqlAlchemyEventRepository",
    "SqlAlchemyInvoiceRepository",
    "SqlAlchemyListingRepository",
    "SqlAlchemyPurchaseRepository",
    "SqlAlchemyReconciliationUnitOfWork",
    "SqlAlchemySaleRepository",
    "SqlAlchemyTicketRepository",
    "create_all_tables",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
