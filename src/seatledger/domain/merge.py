"""Keep-existing-unless-better merges applied when re-syncing POS records.

Each function takes what is already stored and what just arrived and
returns the value to persist.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uuid import UUID

    from seatledger.domain.model import Event


def merge_sale_cost(existing: float | None, incoming: float | None) -> float | None:
    """An incoming cost wins; a missing one never erases a stored cost."""

    if incoming is not None:
        return incoming
    return existing


def backfill_pos_production_id(
    event: Event,
    pos_production_id: int | None,
    pos_venue_id: int | None = None,
) -> bool:
    """Fill POS ids the event lacks. Returns whether the event changed."""

    changed = False
    if event.pos_production_id is None and pos_production_id is not None:
        event.pos_production_id = pos_production_id
        changed = True
    if event.pos_venue_id is None and pos_venue_id is not None:
        event.pos_venue_id = pos_venue_id
        changed = True
    return changed


def resolve_listing_event_id(
    purchase_event_id: UUID | None,
    matched_event_id: UUID | None,
) -> UUID | None:
    """The linked purchase's event outranks whatever the matcher inferred."""

    return purchase_event_id or matched_event_id


def resolve_sale_event_id(
    listing_purchase_event_id: UUID | None,
    listing_event_id: UUID | None,
    fallback_purchase_event_id: UUID | None,
) -> UUID | None:
    return listing_purchase_event_id or listing_event_id or fallback_purchase_event_id


def resolve_sale_ext_po(
    pos_value: str | None,
    listing_ext_po: str | None,
    listing_purchase_po: str | None,
    fallback_purchase_po: str | None,
) -> str | None:
    for candidate in (pos_value, listing_ext_po, listing_purchase_po, fallback_purchase_po):
        if candidate:
            return candidate
    return None
