"""String similarity tuned to ticketing event names."""

from __future__ import annotations

import re
from typing import Final

_NON_WORD: Final = re.compile(r"[^\w\s]")
_WHITESPACE: Final = re.compile(r"\s+")

# Tour and year tokens that decorate an artist name in event titles.
CORE_NAME_NOISE: Final[tuple[str, ...]] = (
    "world tour",
    "in concert",
    "presents",
    "concert",
    "tour",
    "live",
    "the",
    "2024",
    "2025",
    "2026",
    "2027",
)
_NOISE_BY_LENGTH: Final = tuple(sorted(CORE_NAME_NOISE, key=len, reverse=True))


def normalize(text: str | None) -> str:
    """Lowercase, drop punctuation, collapse whitespace."""

    if not text:
        return ""
    lowered = _NON_WORD.sub("", text.lower())
    return _WHITESPACE.sub(" ", lowered).strip()


def _strip_noise(words: list[str]) -> list[str]:
    changed = True
    while changed and words:
        changed = False
        for phrase in _NOISE_BY_LENGTH:
            tokens = phrase.split()
            size = len(tokens)
            if len(words) > size and words[:size] == tokens:
                words = words[size:]
                changed = True
            if len(words) > size and words[-size:] == tokens:
                words = words[:-size]
                changed = True
    return words


def extract_core_name(event_name: str | None) -> str:
    """Strip tour/year decoration so ``"BTS World Tour 2026"`` becomes ``"bts"``."""

    if not event_name:
        return ""
    head = event_name.split(" - ", 1)[0]
    words = normalize(head).split()
    return " ".join(_strip_noise(words))


def levenshtein_distance(left: str, right: str) -> int:
    if left == right:
        return 0
    if not left:
        return len(right)
    if not right:
        return len(left)
    previous = list(range(len(right) + 1))
    for i, left_char in enumerate(left, start=1):
        current = [i]
        for j, right_char in enumerate(right, start=1):
            cost = 0 if left_char == right_char else 1
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]


def string_similarity(left: str | None, right: str | None) -> float:
    """Score two names in ``[0, 1]`` after normalisation."""

    a = normalize(left)
    b = normalize(right)
    if not a or not b:
        return 0.0
    if a == b:
        return 1.0
    if a in b or b in a:
        shorter, longer = sorted((len(a), len(b)))
        return shorter / longer
    return 1.0 - levenshtein_distance(a, b) / max(len(a), len(b))
