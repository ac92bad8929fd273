from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from common.config import get_settings
from common.database import Base, SessionLocal, dispose_engine, engine, get_db
from common.dependencies import require
from common.errors import NotFound, RoomInUse, ValidationError, apply_error_handlers
from common.logging_middleware import add_audit_middleware
from common.models import Booking, Room, RoomType, User
from common.permissions import Capability
from common.rate_limit import apply_rate_limiter, limiter
from common.schemas import RoomCreate, RoomRead, RoomUpdate
from common.seed import seed_rooms

settings = get_settings()


@asynccontextmanager
async def lifespan(_: FastAPI):
    if settings.run_db_migrations:
        Base.metadata.create_all(bind=engine)
    if settings.seed_rooms_on_startup:
        with SessionLocal() as db:
            seed_rooms(db)
    yield
    dispose_engine()


def create_app() -> FastAPI:
    fastapi_app = FastAPI(title="Rooms Service", version="1.0.0", lifespan=lifespan)
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    apply_rate_limiter(fastapi_app)
    apply_error_handlers(fastapi_app)
    add_audit_middleware(fastapi_app, "rooms")
    return fastapi_app


app = create_app()


def _get_room_or_404(db: Session, room_id: int) -> Room:
    room = db.query(Room).filter(Room.id == room_id).first()
    if not room:
        raise NotFound("Room not found")
    return room


def _ensure_unique_number(db: Session, room_number: str, exclude_id: Optional[int] = None) -> None:
    query = db.query(Room).filter(Room.room_number == room_number)
    if exclude_id is not None:
        query = query.filter(Room.id != exclude_id)
    if query.first():
        raise ValidationError(f"Room number {room_number} already exists")


def _commit_room(db: Session, room: Room) -> Room:
    # Racing writers can both pass _ensure_unique_number; the unique index decides.
    room_number = room.room_number
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ValidationError(f"Room number {room_number} already exists") from exc
    db.refresh(room)
    return room


@app.get("/health", tags=["health"])
def health() -> dict[str, str]:
    return {"status": "ok", "service": "rooms"}


@app.get("/api/rooms", response_model=List[RoomRead])
@limiter.limit("60/minute")
def list_rooms(request: Request, type: Optional[RoomType] = None, db: Session = Depends(get_db)) -> List[Room]:
    query = db.query(Room)
    if type is not None:
        query = query.filter(Room.type == type)
    return query.order_by(Room.id).all()


@app.get("/api/rooms/{room_id}", response_model=RoomRead)
@limiter.limit("60/minute")
def get_room(request: Request, room_id: int, db: Session = Depends(get_db)) -> Room:
    return _get_room_or_404(db, room_id)


@app.post("/api/rooms", response_model=RoomRead, status_code=status.HTTP_201_CREATED)
@limiter.limit("10/minute")
def add_room(
    request: Request,
    room_in: RoomCreate,
    _: User = Depends(require(Capability.ROOM_WRITE)),
    db: Session = Depends(get_db),
) -> Room:
    _ensure_unique_number(db, room_in.room_number)
    room = Room(**room_in.model_dump())
    db.add(room)
    return _commit_room(db, room)


@app.put("/api/rooms/{room_id}", response_model=RoomRead)
@limiter.limit("15/minute")
def update_room(
    request: Request,
    room_id: int,
    room_update: RoomUpdate,
    _: User = Depends(require(Capability.ROOM_WRITE)),
    db: Session = Depends(get_db),
) -> Room:
    room = _get_room_or_404(db, room_id)
    update_data = room_update.model_dump(exclude_unset=True, exclude_none=True)
    if "room_number" in update_data:
        _ensure_unique_number(db, update_data["room_number"], exclude_id=room.id)
    for key, value in update_data.items():
        setattr(room, key, value)
    return _commit_room(db, room)


@app.delete("/api/rooms/{room_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit("15/minute")
def delete_room(
    request: Request,
    room_id: int,
    _: User = Depends(require(Capability.ROOM_WRITE)),
    db: Session = Depends(get_db),
) -> None:
    room = _get_room_or_404(db, room_id)
    # Bookings keep referencing their room for invoices and revenue.
    if db.query(Booking.id).filter(Booking.room_id == room_id).first():
        raise RoomInUse("Room has bookings and cannot be deleted")
    db.delete(room)
    db.commit()
