from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from common.config import get_settings
from common.database import Base, dispose_engine, engine, get_db
from common.dependencies import require
from common.errors import apply_error_handlers
from common.logging_middleware import add_audit_middleware
from common.models import Booking, BookingStatus, Room, User
from common.permissions import Capability
from common.rate_limit import apply_rate_limiter, limiter
from common.reports import total_revenue
from common.schemas import DashboardStats, SummaryStats

settings = get_settings()


@asynccontextmanager
async def lifespan(_: FastAPI):
    if settings.run_db_migrations:
        Base.metadata.create_all(bind=engine)
    yield
    dispose_engine()


def create_app() -> FastAPI:
    fastapi_app = FastAPI(title="Admin Service", version="1.0.0", lifespan=lifespan)
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    apply_rate_limiter(fastapi_app)
    apply_error_handlers(fastapi_app)
    add_audit_middleware(fastapi_app, "admin")
    return fastapi_app


app = create_app()


@app.get("/health", tags=["health"])
def health() -> dict[str, str]:
    return {"status": "ok", "service": "admin"}


@app.get("/api/admin/stats", response_model=DashboardStats)
@limiter.limit("30/minute")
def dashboard_stats(
    request: Request,
    _: User = Depends(require(Capability.DASHBOARD_READ)),
    db: Session = Depends(get_db),
) -> DashboardStats:
    total_rooms = db.query(func.count(Room.id)).scalar() or 0
    occupied_rooms = db.query(func.count(Booking.id)).filter(Booking.status == BookingStatus.CHECKED_IN).scalar() or 0
    completed = (
        db.query(Booking)
        .options(joinedload(Booking.room))
        .filter(Booking.status == BookingStatus.CHECKED_OUT)
        .all()
    )
    return DashboardStats(
        total_rooms=total_rooms,
        occupied_rooms=occupied_rooms,
        available_rooms=total_rooms - occupied_rooms,
        total_bookings=db.query(func.count(Booking.id)).scalar() or 0,
        total_revenue=total_revenue(completed),
    )


@app.get("/stats", response_model=SummaryStats)
@limiter.limit("30/minute")
def summary_stats(request: Request, db: Session = Depends(get_db)) -> SummaryStats:
    return SummaryStats(
        total_users=db.query(func.count(User.id)).scalar() or 0,
        total_rooms=db.query(func.count(Room.id)).scalar() or 0,
        total_bookings=db.query(func.count(Booking.id)).scalar() or 0,
    )
