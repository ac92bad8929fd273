"""Booking creation and status transitions."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, FrozenSet, Union

from .availability import validate_stay
from .errors import InvalidTransition, NotFound, RoomUnavailable, ValidationError
from .models import Booking, BookingStatus
from .store import BookingStore

logger = logging.getLogger(__name__)

TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.BOOKED: frozenset({BookingStatus.CHECKED_IN, BookingStatus.CANCELLED}),
    BookingStatus.CHECKED_IN: frozenset({BookingStatus.CHECKED_OUT, BookingStatus.CANCELLED}),
    BookingStatus.CHECKED_OUT: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}


@dataclass(frozen=True)
class Customer:
    name: str
    email: str


def parse_status(value: Union[str, BookingStatus]) -> BookingStatus:
    try:
        return BookingStatus(value)
    except ValueError as exc:
        raise ValidationError(f"Invalid status: {value}") from exc


def can_transition(current: BookingStatus, target: BookingStatus) -> bool:
    return target in TRANSITIONS[current]


def is_terminal(status: BookingStatus) -> bool:
    return not TRANSITIONS[status]


class BookingLifecycle:
    """Creates bookings and moves them through booked/checked-in/checked-out/cancelled."""

    def __init__(self, store: BookingStore) -> None:
        self.store = store

    def create_booking(self, room_id: int, customer: Customer, check_in: date, check_out: date) -> Booking:
        validate_stay(check_in, check_out)
        with self.store.atomic():
            # Locking the room row serializes creators for the same room.
            if self.store.get_room(room_id, for_update=True) is None:
                raise NotFound(f"Room {room_id} not found")
            if self.store.find_conflict(room_id, check_in, check_out, for_update=True) is not None:
                raise RoomUnavailable(room_id)
            booking = self.store.add(
                Booking(
                    room_id=room_id,
                    customer_name=customer.name,
                    customer_email=customer.email,
                    check_in=check_in,
                    check_out=check_out,
                    status=BookingStatus.BOOKED,
                )
            )
        logger.info(
            "booking %s created | room=%s | stay=%s..%s", booking.id, room_id, check_in.isoformat(), check_out.isoformat()
        )
        return booking

    def update_status(self, booking_id: int, new_status: Union[str, BookingStatus]) -> Booking:
        target = parse_status(new_status)
        with self.store.atomic():
            booking = self.store.get_booking(booking_id, for_update=True)
            if booking is None:
                raise NotFound("Booking not found")
            current = booking.status
            if not can_transition(current, target):
                raise InvalidTransition(current.value, target.value, terminal=is_terminal(current))
            booking.status = target
            booking.updated_at = datetime.utcnow()
        logger.info("booking %s status %s -> %s", booking_id, current.value, target.value)
        return booking
