"""Public interface for the TicketVault POS adapter."""

from __future__ import annotations

from .auth import TicketVaultAuthError, TicketVaultCredentials
from .client import TicketVaultAPIError, TicketVaultClient
from .translator import parse_invoice, parse_listing, parse_sale, parse_season_site

__all__ = [
    "TicketVaultAPIError",
    "TicketVaultAuthError",
    "TicketVaultClient",
    "TicketVaultCredentials",
    "parse_invoice",
    "parse_listing",
    "parse_sale",
    "parse_season_site",
]
