"""Default room inventory for a fresh database."""
import logging
from decimal import Decimal
from itertools import cycle
from typing import Dict, List

from sqlalchemy.orm import Session

from .models import Room, RoomType

logger = logging.getLogger(__name__)

BASE_TARIFF: Dict[RoomType, Decimal] = {
    RoomType.STANDARD: Decimal("2000"),
    RoomType.DELUXE: Decimal("3500"),
    RoomType.SUITE: Decimal("6000"),
    RoomType.EXECUTIVE: Decimal("4500"),
    RoomType.FAMILY_ROOM: Decimal("3000"),
    RoomType.TWIN_ROOM: Decimal("2500"),
    RoomType.KING_ROOM: Decimal("4000"),
    RoomType.PRESIDENTIAL_SUITE: Decimal("10000"),
    RoomType.STUDIO: Decimal("2800"),
}

FLOORS = 15


def default_rooms() -> List[Room]:
    """Odd floors hold 7 rooms, even floors 8; numbers are <floor><2-digit index>."""

    types = cycle(RoomType)
    rooms: List[Room] = []
    for floor in range(1, FLOORS + 1):
        rooms_on_floor = 8 if floor % 2 == 0 else 7
        for index in range(1, rooms_on_floor + 1):
            room_type = next(types)
            rooms.append(Room(room_number=f"{floor}{index:02d}", type=room_type, tariff=BASE_TARIFF[room_type]))
    return rooms


def seed_rooms(db: Session) -> int:
    if db.query(Room).first() is not None:
        logger.info("rooms already exist, skipping seeding")
        return 0
    rooms = default_rooms()
    db.add_all(rooms)
    db.commit()
    logger.info("seeded %d rooms", len(rooms))
    return len(rooms)
