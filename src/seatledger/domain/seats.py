"""Seat descriptor parsing.

A descriptor is a comma-separated mix of bare seats and inclusive ranges,
e.g. ``"1-3,5,7-9"``. Tokens that do not parse are dropped; an empty result
is the caller's signal that the whole descriptor is unusable.
"""

from __future__ import annotations

import re
from typing import Final

from seatledger.domain.errors import SeatParseError

_SEAT: Final = re.compile(r"^\d+$")
_RANGE: Final = re.compile(r"^(\d+)\s*-\s*(\d+)$")


def generate_seat_numbers(start: int, end: int) -> list[int]:
    """Return the inclusive run ``start..end`` (empty when ``end < start``)."""

    if end < start:
        return []
    return list(range(start, end + 1))


def parse_seat_range(text: str | None) -> list[int]:
    """Return the sorted, de-duplicated seats denoted by ``text``."""

    if not text:
        return []
    seats: set[int] = set()
    for raw_token in text.split(","):
        token = raw_token.strip()
        if not token:
            continue
        if _SEAT.match(token):
            seats.add(int(token))
            continue
        match = _RANGE.match(token)
        if match is None:
            continue
        seats.update(generate_seat_numbers(int(match.group(1)), int(match.group(2))))
    return sorted(seats)


def seat_bounds(text: str | None) -> tuple[int, int] | None:
    seats = parse_seat_range(text)
    if not seats:
        return None
    return seats[0], seats[-1]


def require_seats(text: str | None) -> list[int]:
    seats = parse_seat_range(text)
    if not seats:
        raise SeatParseError(text)
    return seats
