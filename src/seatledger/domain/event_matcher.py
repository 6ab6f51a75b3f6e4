"""Resolve incoming event descriptions to canonical events.

Strategies run cheapest and most certain first; the first one that yields a
candidate wins. A new event is only created when the description carries a
durable marketplace id, so POS-only sightings never spawn duplicates.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, time, timedelta
from typing import TYPE_CHECKING, Final

from seatledger.domain.merge import backfill_pos_production_id
from seatledger.domain.model import Event, MatchType
from seatledger.domain.similarity import extract_core_name, normalize, string_similarity

if TYPE_CHECKING:
    from collections.abc import Callable
    from uuid import UUID

    from seatledger.domain.ports import EventRepository

log = logging.getLogger(__name__)

NAME_DATE_ACCEPT: Final = 0.7
NAME_WEIGHT: Final = 0.6
VENUE_WEIGHT: Final = 0.4
FUZZY_CANDIDATE_ACCEPT: Final = 0.6
FUZZY_ACCEPT: Final = 0.8
FUZZY_POOL_SIZE: Final = 20


@dataclass(frozen=True, slots=True, kw_only=True)
class EventMatchInput:
    event_name: str
    pos_production_id: int | None = None
    pos_venue_id: int | None = None
    tm_event_id: str | None = None
    venue: str | None = None
    event_date: datetime | None = None
    artist_name: str | None = None


@dataclass(frozen=True, slots=True)
class EventCandidate:
    event: Event
    match_type: MatchType
    confidence: float


@dataclass(frozen=True, slots=True)
class EventMatchResult:
    """``found`` is only true for pre-existing events; created ones report ``False``."""

    found: bool
    event: Event | None
    match_type: MatchType
    confidence: float

    @classmethod
    def none(cls) -> EventMatchResult:
        return cls(found=False, event=None, match_type=MatchType.NONE, confidence=0.0)


type MatchStrategy = Callable[[EventMatchInput, EventRepository], EventCandidate | None]


def match_by_pos_production_id(
    data: EventMatchInput, events: EventRepository
) -> EventCandidate | None:
    if data.pos_production_id is None:
        return None
    event = events.get_by_pos_production_id(data.pos_production_id)
    if event is None:
        return None
    return EventCandidate(event, MatchType.POS_PRODUCTION_ID, 1.0)


def match_by_tm_event_id(data: EventMatchInput, events: EventRepository) -> EventCandidate | None:
    if not data.tm_event_id:
        return None
    event = events.get_by_tm_event_id(data.tm_event_id)
    if event is None:
        return None
    return EventCandidate(event, MatchType.TM_EVENT_ID, 1.0)


def day_bounds(moment: datetime) -> tuple[datetime, datetime]:
    """Inclusive bounds of the calendar day ``moment`` falls on."""

    tz = moment.tzinfo or UTC
    start = datetime.combine(moment.date(), time.min, tzinfo=tz)
    return start, start + timedelta(days=1) - timedelta(microseconds=1)


def name_date_score(data: EventMatchInput, event: Event) -> float:
    name_score = max(
        string_similarity(data.event_name, event.event_name),
        string_similarity(extract_core_name(data.event_name), extract_core_name(event.event_name)),
    )
    venue_score = 1.0
    if data.venue and event.venue:
        venue_score = string_similarity(data.venue, event.venue)
    return name_score * NAME_WEIGHT + venue_score * VENUE_WEIGHT


def match_by_name_and_date(
    data: EventMatchInput, events: EventRepository
) -> EventCandidate | None:
    if data.event_date is None or not data.event_name:
        return None
    start, end = day_bounds(data.event_date)
    best: EventCandidate | None = None
    for event in events.between(start, end):
        score = name_date_score(data, event)
        if score > NAME_DATE_ACCEPT and (best is None or score > best.confidence):
            best = EventCandidate(event, MatchType.NAME_DATE, score)
    return best


def fuzzy_name_candidate(data: EventMatchInput, events: EventRepository) -> EventCandidate | None:
    """Best of a bounded substring-search pool, accepted above the loose threshold."""

    term = normalize(data.artist_name) if data.artist_name else extract_core_name(data.event_name)
    if not term:
        return None
    best: EventCandidate | None = None
    for event in events.search_by_name(term, limit=FUZZY_POOL_SIZE):
        score = string_similarity(data.event_name, event.event_name)
        if data.artist_name and event.artist_name:
            score = max(score, string_similarity(data.artist_name, event.artist_name))
        if score > FUZZY_CANDIDATE_ACCEPT and (best is None or score > best.confidence):
            best = EventCandidate(event, MatchType.FUZZY_NAME, score)
    return best


def match_by_fuzzy_name(data: EventMatchInput, events: EventRepository) -> EventCandidate | None:
    candidate = fuzzy_name_candidate(data, events)
    if candidate is None or candidate.confidence <= FUZZY_ACCEPT:
        return None
    return candidate


DEFAULT_STRATEGIES: Final[tuple[MatchStrategy, ...]] = (
    match_by_pos_production_id,
    match_by_tm_event_id,
    match_by_name_and_date,
    match_by_fuzzy_name,
)


class EventMatcher:
    """Canonical event resolution over an event repository."""

    def __init__(
        self,
        events: EventRepository,
        strategies: tuple[MatchStrategy, ...] = DEFAULT_STRATEGIES,
    ) -> None:
        self.events = events
        self.strategies = strategies

    def match(self, data: EventMatchInput) -> EventCandidate | None:
        for strategy in self.strategies:
            candidate = strategy(data, self.events)
            if candidate is not None:
                return candidate
        return None

    def find_or_create_event(
        self, data: EventMatchInput, *, create_if_not_found: bool = True
    ) -> EventMatchResult:
        candidate = self.match(data)
        if candidate is not None:
            if candidate.match_type is MatchType.NAME_DATE:
                backfill_pos_production_id(
                    candidate.event, data.pos_production_id, data.pos_venue_id
                )
            log.debug(
                "Matched %r to event %s via %s (%.2f)",
                data.event_name,
                candidate.event.id,
                candidate.match_type,
                candidate.confidence,
            )
            return EventMatchResult(
                found=True,
                event=candidate.event,
                match_type=candidate.match_type,
                confidence=candidate.confidence,
            )

        if not create_if_not_found:
            return EventMatchResult.none()
        if not data.tm_event_id:
            log.warning(
                "No match for %r and no marketplace event id; not creating an event",
                data.event_name,
            )
            return EventMatchResult.none()

        event = Event(
            event_name=data.event_name,
            artist_name=data.artist_name or extract_core_name(data.event_name) or None,
            venue=data.venue,
            event_date=data.event_date,
            pos_production_id=data.pos_production_id,
            pos_venue_id=data.pos_venue_id,
            tm_event_id=data.tm_event_id,
        )
        self.events.add(event)
        log.info("Created event %s for %r (tm %s)", event.id, event.event_name, event.tm_event_id)
        return EventMatchResult(
            found=False, event=event, match_type=MatchType.CREATED, confidence=1.0
        )

    def update_event_with_pos_data(
        self,
        event_id: UUID,
        pos_production_id: int | None,
        pos_venue_id: int | None = None,
    ) -> bool:
        event = self.events.get(event_id)
        if event is None:
            return False
        return backfill_pos_production_id(event, pos_production_id, pos_venue_id)
