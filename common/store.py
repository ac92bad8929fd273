"""Session-backed booking record store."""
from __future__ import annotations

from contextlib import contextmanager
from datetime import date
from typing import Iterator, List, Optional

from sqlalchemy.orm import Session, joinedload

from .database import BEGIN_IMMEDIATE
from .models import ACTIVE_STATUSES, Booking, Room


class BookingStore:
    """Reads and writes booking records through one SQLAlchemy session.

    The store does not own the session; callers open and close it.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_room(self, room_id: int, for_update: bool = False) -> Optional[Room]:
        query = self.session.query(Room).filter(Room.id == room_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    def get_booking(self, booking_id: int, for_update: bool = False) -> Optional[Booking]:
        query = self.session.query(Booking).filter(Booking.id == booking_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    def find_conflict(
        self,
        room_id: int,
        check_in: date,
        check_out: date,
        exclude_id: Optional[int] = None,
        for_update: bool = False,
    ) -> Optional[Booking]:
        """Return an active booking on the room overlapping [check_in, check_out)."""

        query = self.session.query(Booking).filter(
            Booking.room_id == room_id,
            Booking.status.in_(ACTIVE_STATUSES),
            Booking.check_in < check_out,
            Booking.check_out > check_in,
        )
        if exclude_id is not None:
            query = query.filter(Booking.id != exclude_id)
        if for_update:
            query = query.with_for_update()
        return query.order_by(Booking.check_in).first()

    def list_bookings(self) -> List[Booking]:
        return self.session.query(Booking).options(joinedload(Booking.room)).order_by(Booking.id).all()

    def add(self, booking: Booking) -> Booking:
        self.session.add(booking)
        self.session.flush()
        return booking

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """Commit the enclosed work as one unit, rolling back on any error.

        A read transaction left open on the session (for example by the auth
        lookup) is closed first, so the unit starts a fresh write transaction.
        """

        if self.session.in_transaction():
            self.session.commit()
        try:
            self.session.connection(execution_options={BEGIN_IMMEDIATE: True})
            yield
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
