"""Error taxonomy for reconciliation passes."""

from __future__ import annotations


class ReconciliationError(RuntimeError):
    """Base class for failures raised by the reconciliation core."""


class SeatParseError(ReconciliationError, ValueError):
    """Seat text did not denote a single seat."""

    def __init__(self, text: str | None) -> None:
        super().__init__(f"could not parse seats: {text!r}")
        self.text = text


class ExternalWriteFailure(ReconciliationError):  # noqa: N818
    """The external platform rejected a write; local state must stay untouched."""


class SyncTransportFailure(ReconciliationError):  # noqa: N818
    """The external platform could not be reached or returned an unusable payload."""
