from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import func, select

from seatledger.adapters.sqlalchemy.mappings import event_table
from seatledger.domain.event_matcher import (
    EventMatcher,
    EventMatchInput,
    day_bounds,
    fuzzy_name_candidate,
    name_date_score,
)
from seatledger.domain.model import MatchType
from tests.helpers.ticketing import EVENT_DATE, EVENT_NAME, VENUE, make_event, persist

if TYPE_CHECKING:
    from collections.abc import Callable

    from seatledger.adapters.sqlalchemy.unit_of_work import SqlAlchemyReconciliationUnitOfWork

    UowFactory = Callable[[], SqlAlchemyReconciliationUnitOfWork]


def _event_count(unit_of_work_factory: UowFactory) -> int:
    with unit_of_work_factory() as uow:
        return uow.session.execute(select(func.count()).select_from(event_table)).scalar_one()


def test_day_bounds_cover_the_calendar_day() -> None:
    start, end = day_bounds(EVENT_DATE)

    assert start == EVENT_DATE.replace(hour=0, minute=0)
    assert end == start + timedelta(days=1) - timedelta(microseconds=1)


def test_name_date_score_weights_name_and_venue() -> None:
    event = make_event(venue="Somewhere Else Entirely")
    data = EventMatchInput(event_name=EVENT_NAME, venue=VENUE, event_date=EVENT_DATE)

    score = name_date_score(data, event)

    assert 0.6 <= score < 1.0


def test_match_by_pos_production_id(unit_of_work_factory: UowFactory) -> None:
    event = make_event(pos_production_id=555)
    persist(unit_of_work_factory, event)

    with unit_of_work_factory() as uow:
        result = EventMatcher(uow.repositories.events).find_or_create_event(
            EventMatchInput(event_name="Something Unrelated", pos_production_id=555)
        )

    assert result.found is True
    assert result.match_type is MatchType.POS_PRODUCTION_ID
    assert result.event is not None
    assert result.event.id == event.id


def test_match_by_tm_event_id(unit_of_work_factory: UowFactory) -> None:
    event = make_event(tm_event_id="TM-1")
    persist(unit_of_work_factory, event)

    with unit_of_work_factory() as uow:
        result = EventMatcher(uow.repositories.events).find_or_create_event(
            EventMatchInput(event_name="Different Name", tm_event_id="TM-1")
        )

    assert result.match_type is MatchType.TM_EVENT_ID
    assert result.confidence == 1.0


def test_name_and_date_match_backfills_pos_ids(unit_of_work_factory: UowFactory) -> None:
    event = make_event()
    persist(unit_of_work_factory, event)

    with unit_of_work_factory() as uow:
        result = EventMatcher(uow.repositories.events).find_or_create_event(
            EventMatchInput(
                event_name=EVENT_NAME,
                pos_production_id=777,
                pos_venue_id=31,
                venue=VENUE,
                event_date=EVENT_DATE + timedelta(minutes=30),
            )
        )
        uow.commit()

    assert result.match_type is MatchType.NAME_DATE
    assert result.confidence > 0.7
    with unit_of_work_factory() as uow:
        stored = uow.repositories.events.get(event.id)
        assert stored is not None
        assert stored.pos_production_id == 777
        assert stored.pos_venue_id == 31


def test_fuzzy_name_match_without_date(unit_of_work_factory: UowFactory) -> None:
    event = make_event()
    persist(unit_of_work_factory, event)

    with unit_of_work_factory() as uow:
        result = EventMatcher(uow.repositories.events).find_or_create_event(
            EventMatchInput(event_name="Taylor Swift - The Eras Tour")
        )

    assert result.match_type is MatchType.FUZZY_NAME
    assert result.event is not None
    assert result.event.id == event.id


def test_refuses_to_create_without_durable_id(unit_of_work_factory: UowFactory) -> None:
    with unit_of_work_factory() as uow:
        result = EventMatcher(uow.repositories.events).find_or_create_event(
            EventMatchInput(event_name="Unknown Band", event_date=EVENT_DATE, venue=VENUE)
        )
        uow.commit()

    assert result.found is False
    assert result.event is None
    assert result.match_type is MatchType.NONE
    assert _event_count(unit_of_work_factory) == 0


def test_creates_event_with_marketplace_id_once(unit_of_work_factory: UowFactory) -> None:
    data = EventMatchInput(
        event_name="BTS World Tour 2026 - Night 2",
        tm_event_id="TM-42",
        event_date=EVENT_DATE,
        venue="SoFi Stadium",
    )

    with unit_of_work_factory() as uow:
        first = EventMatcher(uow.repositories.events).find_or_create_event(data)
        uow.commit()
    with unit_of_work_factory() as uow:
        second = EventMatcher(uow.repositories.events).find_or_create_event(data)
        uow.commit()

    assert first.found is False
    assert first.match_type is MatchType.CREATED
    assert first.event is not None
    assert first.event.artist_name == "bts"
    assert second.found is True
    assert second.match_type is MatchType.TM_EVENT_ID
    assert second.event is not None
    assert second.event.id == first.event.id
    assert _event_count(unit_of_work_factory) == 1


def test_create_if_not_found_false_never_creates(unit_of_work_factory: UowFactory) -> None:
    with unit_of_work_factory() as uow:
        result = EventMatcher(uow.repositories.events).find_or_create_event(
            EventMatchInput(event_name="Brand New Act", tm_event_id="TM-9"),
            create_if_not_found=False,
        )
        uow.commit()

    assert result.found is False
    assert _event_count(unit_of_work_factory) == 0


def test_update_event_with_pos_data(unit_of_work_factory: UowFactory) -> None:
    event = make_event()
    persist(unit_of_work_factory, event)

    with unit_of_work_factory() as uow:
        matcher = EventMatcher(uow.repositories.events)
        assert matcher.update_event_with_pos_data(event.id, 321) is True
        assert matcher.update_event_with_pos_data(event.id, 999) is False
        uow.commit()

    with unit_of_work_factory() as uow:
        stored = uow.repositories.events.get(event.id)
        assert stored is not None
        assert stored.pos_production_id == 321


@pytest.mark.parametrize("venue", [None, VENUE])
def test_name_date_match_tolerates_missing_venue(
    unit_of_work_factory: UowFactory, venue: str | None
) -> None:
    persist(unit_of_work_factory, make_event(venue=venue))

    with unit_of_work_factory() as uow:
        result = EventMatcher(uow.repositories.events).find_or_create_event(
            EventMatchInput(event_name=EVENT_NAME, event_date=EVENT_DATE)
        )

    assert result.match_type is MatchType.NAME_DATE


def test_loose_fuzzy_candidate_is_not_accepted_as_a_match(
    unit_of_work_factory: UowFactory,
) -> None:
    persist(unit_of_work_factory, make_event("Hamilton", artist_name=None))
    # "hamilton" inside "hamilton nyc" scores 8/12: above the pool cut, below acceptance.
    data = EventMatchInput(event_name="Hamilton NYC", artist_name="Hamilton")

    with unit_of_work_factory() as uow:
        candidate = fuzzy_name_candidate(data, uow.repositories.events)
        result = EventMatcher(uow.repositories.events).find_or_create_event(data)

    assert candidate is not None
    assert candidate.match_type is MatchType.FUZZY_NAME
    assert candidate.confidence == pytest.approx(8 / 12)
    assert result.found is False
    assert result.match_type is MatchType.NONE
    assert _event_count(unit_of_work_factory) == 1
