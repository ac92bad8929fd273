"""Room availability for a requested stay."""
from __future__ import annotations

from datetime import date

from .errors import NotFound, ValidationError
from .store import BookingStore


def intervals_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """Half-open overlap test: [a_start, a_end) and [b_start, b_end)."""

    return a_start < b_end and b_start < a_end


def validate_stay(check_in: date, check_out: date) -> None:
    if check_out <= check_in:
        raise ValidationError("check_out must be after check_in")


class AvailabilityChecker:
    def __init__(self, store: BookingStore) -> None:
        self.store = store

    def is_available(self, room_id: int, check_in: date, check_out: date) -> bool:
        """Return True when no booked or checked-in stay on the room overlaps the request.

        A check-out on the same day as the requested check-in is not a conflict.
        """

        validate_stay(check_in, check_out)
        if self.store.get_room(room_id) is None:
            raise NotFound(f"Room {room_id} not found")
        return self.store.find_conflict(room_id, check_in, check_out) is None
