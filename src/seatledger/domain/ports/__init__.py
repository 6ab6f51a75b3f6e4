"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import (
    AccountRepository,
    EventRepository,
    InvoiceRepository,
    ListingRepository,
    ListingsFilters,
    ListingStats,
    PurchaseRepository,
    Repository,
    SaleCostRow,
    SaleRepository,
    TicketRepository,
)
from .platform import PosPlatform
from .unit_of_work import (
    ReconciliationRepositories,
    ReconciliationUnitOfWork,
    ReconciliationUnitOfWorkFactory,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "AccountRepository",
    "EventRepository",
    "InvoiceRepository",
    "ListingRepository",
    "ListingStats",
    "ListingsFilters",
    "PosPlatform",
    "PurchaseRepository",
    "ReconciliationRepositories",
    "ReconciliationUnitOfWork",
    "ReconciliationUnitOfWorkFactory",
    "Repository",
    "RepositoryCollection",
    "SaleCostRow",
    "SaleRepository",
    "TicketRepository",
    "UnitOfWork",
]
