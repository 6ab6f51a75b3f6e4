from __future__ import annotations

import pytest

from seatledger.domain.errors import SeatParseError
from seatledger.domain.seats import (
    generate_seat_numbers,
    parse_seat_range,
    require_seats,
    seat_bounds,
)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("1-4", [1, 2, 3, 4]),
        ("7", [7]),
        ("1-3,5,7-9", [1, 2, 3, 5, 7, 8, 9]),
        (" 3 - 5 , 10 ", [3, 4, 5, 10]),
        ("5,1-3,2", [1, 2, 3, 5]),
        ("1-2,GA,4", [1, 2, 4]),
    ],
)
def test_parse_seat_range(text: str, expected: list[int]) -> None:
    assert parse_seat_range(text) == expected


@pytest.mark.parametrize("text", [None, "", "GA", "a-b", ",,", "9-3"])
def test_parse_seat_range_unusable_descriptors_are_empty(text: str | None) -> None:
    assert parse_seat_range(text) == []


def test_generate_seat_numbers_is_inclusive() -> None:
    assert generate_seat_numbers(11, 14) == [11, 12, 13, 14]
    assert generate_seat_numbers(5, 5) == [5]
    assert generate_seat_numbers(6, 5) == []


def test_seat_bounds() -> None:
    assert seat_bounds("4,1-2") == (1, 4)
    assert seat_bounds("GA") is None


def test_require_seats_raises_on_unparsable_text() -> None:
    with pytest.raises(SeatParseError) as exc:
        require_seats("general admission")

    assert exc.value.text == "general admission"
    assert isinstance(exc.value, ValueError)
