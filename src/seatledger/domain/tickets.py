"""Per-seat ticket ownership and its links to listings and sales.

Tickets are created once, keyed by (event, section, row, seat), and owned by
the first purchase that creates them. Listing and sale links are claimed
through conditional writes, so a seat that is already attached is reported
rather than re-linked.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from seatledger.domain.model import Ticket, TicketStatus
from seatledger.domain.results import LinkResult, TicketCreationResult
from seatledger.domain.seats import generate_seat_numbers, parse_seat_range

if TYPE_CHECKING:
    from uuid import UUID

    from seatledger.domain.model import Purchase
    from seatledger.domain.ports import PurchaseRepository, TicketRepository

log = logging.getLogger(__name__)


class TicketLinker:
    def __init__(
        self,
        tickets: TicketRepository,
        purchases: PurchaseRepository | None = None,
    ) -> None:
        self.tickets = tickets
        self.purchases = purchases

    def create_tickets_from_purchase(
        self,
        purchase_id: UUID,
        event_id: UUID,
        section: str,
        row: str,
        seats_text: str | None,
        cost_per_ticket: float,
    ) -> TicketCreationResult:
        seats = parse_seat_range(seats_text)
        if not seats:
            return TicketCreationResult(
                success=False, error=f"could not parse seats: {seats_text!r}"
            )

        result = TicketCreationResult()
        for seat in seats:
            try:
                ticket = Ticket(
                    purchase_id=purchase_id,
                    event_id=event_id,
                    section=section,
                    row=row,
                    seat_number=seat,
                    cost=cost_per_ticket,
                )
                if self.tickets.insert_if_absent(ticket):
                    result.created += 1
                    result.tickets.append(ticket)
                    continue
                existing = self.tickets.find(event_id, section, row, seat)
                if existing is not None and existing.purchase_id == purchase_id:
                    self.tickets.refresh_cost(existing.id, purchase_id, cost_per_ticket)
                    existing.cost = cost_per_ticket
                    result.refreshed += 1
                    result.tickets.append(existing)
                else:
                    result.skipped += 1
            except Exception:
                log.exception(
                    "Failed to create ticket %s/%s seat %s for purchase %s",
                    section,
                    row,
                    seat,
                    purchase_id,
                )
                result.skipped += 1
        log.debug(
            "Purchase %s tickets: %d created, %d refreshed, %d skipped",
            purchase_id,
            result.created,
            result.refreshed,
            result.skipped,
        )
        return result

    def create_tickets_from_listing(  # noqa: PLR0913
        self,
        purchase_id: UUID,
        listing_id: UUID,
        event_id: UUID,
        section: str,
        row: str,
        start_seat: int,
        end_seat: int,
        cost_per_ticket: float,
    ) -> TicketCreationResult:
        """Create missing seats as listed, and attach the listing to existing ones."""

        seats = generate_seat_numbers(start_seat, end_seat)
        if not seats:
            return TicketCreationResult(
                success=False, error=f"could not parse seats: {start_seat}-{end_seat}"
            )

        result = TicketCreationResult()
        for seat in seats:
            try:
                ticket = Ticket(
                    purchase_id=purchase_id,
                    event_id=event_id,
                    section=section,
                    row=row,
                    seat_number=seat,
                    cost=cost_per_ticket,
                    status=TicketStatus.LISTED,
                    listing_id=listing_id,
                )
                if self.tickets.insert_if_absent(ticket):
                    result.created += 1
                    result.tickets.append(ticket)
                    continue
                existing = self.tickets.find(event_id, section, row, seat)
                if existing is None or existing.purchase_id != purchase_id:
                    result.skipped += 1
                    continue
                if self.tickets.claim_for_listing(listing_id, event_id, section, row, seat):
                    result.linked += 1
                result.tickets.append(existing)
            except Exception:
                log.exception(
                    "Failed to create ticket %s/%s seat %s for listing %s",
                    section,
                    row,
                    seat,
                    listing_id,
                )
                result.skipped += 1
        return result

    def link_tickets_to_listing(  # noqa: PLR0913
        self,
        listing_id: UUID,
        event_id: UUID,
        section: str,
        row: str,
        start_seat: int,
        end_seat: int,
    ) -> LinkResult:
        result = LinkResult()
        for seat in generate_seat_numbers(start_seat, end_seat):
            try:
                claimed = self.tickets.claim_for_listing(listing_id, event_id, section, row, seat)
            except Exception:
                log.exception(
                    "Failed to link seat %s/%s/%s to listing %s", section, row, seat, listing_id
                )
                claimed = False
            if claimed:
                result.linked += 1
            else:
                result.not_found += 1
        return result

    def link_tickets_to_sale(
        self,
        sale_id: UUID,
        event_id: UUID,
        section: str,
        row: str,
        seats_text: str | None,
    ) -> LinkResult:
        seats = parse_seat_range(seats_text)
        if not seats:
            return LinkResult(success=False, error=f"could not parse seats: {seats_text!r}")

        result = LinkResult()
        for seat in seats:
            try:
                claimed = self.tickets.claim_for_sale(sale_id, event_id, section, row, seat)
            except Exception:
                log.exception(
                    "Failed to link seat %s/%s/%s to sale %s", section, row, seat, sale_id
                )
                claimed = False
            if claimed:
                result.linked += 1
            else:
                result.not_found += 1
        return result

    def find_tickets(
        self, event_id: UUID, section: str, row: str, seat_numbers: list[int]
    ) -> list[Ticket]:
        return self.tickets.find_many(event_id, section, row, seat_numbers)

    def tickets_for_purchase(self, purchase_id: UUID) -> list[Ticket]:
        return self.tickets.for_purchase(purchase_id)

    def purchase_for_sale(self, sale_id: UUID) -> Purchase | None:
        """Trace a sale back to the purchase that owns its seats."""

        if self.purchases is None:
            return None
        for ticket in self.tickets.for_sale(sale_id):
            purchase = self.purchases.get(ticket.purchase_id)
            if purchase is not None:
                return purchase
        return None
