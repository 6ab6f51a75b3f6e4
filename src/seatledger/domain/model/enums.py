"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import IntEnum, StrEnum


class TicketStatus(StrEnum):
    PURCHASED = "purchased"
    LISTED = "listed"
    SOLD = "sold"


class MatchType(StrEnum):
    """How an incoming event description was resolved to a canonical Event."""

    POS_PRODUCTION_ID = "pos_production_id"
    TM_EVENT_ID = "tm_event_id"
    NAME_DATE = "name_date"
    FUZZY_NAME = "fuzzy_name"
    CREATED = "created"
    NONE = "none"


class SaleStatus(IntEnum):
    """Sales-queue status codes reported by the POS."""

    COMPLETE = 1
    PENDING = 20
    ALERT = 40


PENDING_SALE_STATUSES: frozenset[int] = frozenset({SaleStatus.PENDING, SaleStatus.ALERT})
