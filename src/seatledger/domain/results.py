"""Structured results returned by the public reconciliation operations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from seatledger.domain.model import Ticket


@dataclass(slots=True)
class SyncResult:
    """Outcome of one listing, sales or invoice pass."""

    success: bool = True
    synced: int = 0
    created: int = 0
    updated: int = 0
    linked: int = 0
    failed: int = 0
    error: str | None = None

    @classmethod
    def failure(cls, error: str) -> SyncResult:
        return cls(success=False, error=error)


@dataclass(slots=True)
class AllSyncResult:
    invoices: SyncResult
    sales: SyncResult

    @property
    def success(self) -> bool:
        return self.invoices.success and self.sales.success


@dataclass(slots=True)
class TicketCreationResult:
    success: bool = True
    created: int = 0
    skipped: int = 0
    refreshed: int = 0
    linked: int = 0
    error: str | None = None
    tickets: list[Ticket] = field(default_factory=list)


@dataclass(slots=True)
class LinkResult:
    """Seat claims: ``linked`` newly attached, ``not_found`` missing or already claimed."""

    linked: int = 0
    not_found: int = 0
    success: bool = True
    error: str | None = None


@dataclass(slots=True)
class PriceUpdateResult:
    success: bool
    error: str | None = None


@dataclass(slots=True)
class AccountSyncResult:
    success: bool = True
    updated: int = 0
    error: str | None = None


@dataclass(frozen=True, slots=True)
class SalesStats:
    total_sales: int
    pending_sales: int
    completed_sales: int
    total_revenue: float
    total_cost: float
    total_profit: float
    avg_profit_per_day: float
    days_with_sales: int


@dataclass(frozen=True, slots=True)
class InvoiceStats:
    total_invoices: int
    paid_invoices: int
    unpaid_invoices: int
    total_revenue: float
    total_unpaid: float
