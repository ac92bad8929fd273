from contextlib import asynccontextmanager
from datetime import date
from typing import List

from fastapi import Depends, FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware

from common.availability import AvailabilityChecker
from common.config import get_settings
from common.database import Base, dispose_engine, engine
from common.dependencies import get_availability_checker, get_lifecycle, get_store, require
from common.errors import NotFound, apply_error_handlers
from common.lifecycle import BookingLifecycle, Customer
from common.logging_middleware import add_audit_middleware
from common.models import Booking, User
from common.permissions import Capability
from common.rate_limit import apply_rate_limiter, limiter
from common.reports import build_bookings_workbook, build_invoice_pdf
from common.schemas import (
    AvailabilityCheck,
    AvailabilityResult,
    BookingCreate,
    BookingRead,
    BookingStatusUpdate,
    BookingWithRoom,
)
from common.store import BookingStore

settings = get_settings()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@asynccontextmanager
async def lifespan(_: FastAPI):
    if settings.run_db_migrations:
        Base.metadata.create_all(bind=engine)
    yield
    dispose_engine()


def create_app() -> FastAPI:
    fastapi_app = FastAPI(title="Bookings Service", version="1.0.0", lifespan=lifespan)
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    apply_rate_limiter(fastapi_app)
    apply_error_handlers(fastapi_app)
    add_audit_middleware(fastapi_app, "bookings")
    return fastapi_app


app = create_app()


def _attachment(content: bytes, media_type: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@app.get("/health", tags=["health"])
def health() -> dict[str, str]:
    return {"status": "ok", "service": "bookings"}


@app.post("/api/bookings/check", response_model=AvailabilityResult, response_model_exclude_none=True)
@limiter.limit("40/minute")
def check_availability(
    request: Request,
    payload: AvailabilityCheck,
    checker: AvailabilityChecker = Depends(get_availability_checker),
) -> AvailabilityResult:
    if checker.is_available(payload.room_id, payload.check_in, payload.check_out):
        return AvailabilityResult(available=True)
    return AvailabilityResult(available=False, message="Room already booked for these dates")


@app.post("/api/bookings", response_model=BookingRead, status_code=status.HTTP_201_CREATED)
@limiter.limit("20/minute")
def create_booking(
    request: Request,
    booking_in: BookingCreate,
    _: User = Depends(require(Capability.BOOKING_CREATE)),
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
) -> Booking:
    return lifecycle.create_booking(
        booking_in.room_id,
        Customer(name=booking_in.customer_name, email=booking_in.customer_email),
        booking_in.check_in,
        booking_in.check_out,
    )


@app.get("/api/bookings", response_model=List[BookingWithRoom])
@limiter.limit("30/minute")
def list_bookings(
    request: Request,
    _: User = Depends(require(Capability.BOOKING_LIST)),
    store: BookingStore = Depends(get_store),
) -> List[Booking]:
    return store.list_bookings()


@app.put("/api/bookings/{booking_id}/status", response_model=BookingRead)
@limiter.limit("20/minute")
def update_booking_status(
    request: Request,
    booking_id: int,
    status_update: BookingStatusUpdate,
    _: User = Depends(require(Capability.BOOKING_STATUS)),
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
) -> Booking:
    return lifecycle.update_status(booking_id, status_update.status)


@app.get("/api/bookings/export/excel")
@limiter.limit("10/minute")
def export_bookings_excel(
    request: Request,
    _: User = Depends(require(Capability.BOOKING_EXPORT)),
    store: BookingStore = Depends(get_store),
) -> Response:
    content = build_bookings_workbook(store.list_bookings())
    return _attachment(content, XLSX_MEDIA_TYPE, "bookings.xlsx")


@app.get("/api/invoices/{booking_id}/invoice")
@limiter.limit("20/minute")
def booking_invoice(
    request: Request,
    booking_id: int,
    _: User = Depends(require(Capability.INVOICE_READ)),
    store: BookingStore = Depends(get_store),
) -> Response:
    booking = store.get_booking(booking_id)
    if booking is None:
        raise NotFound("Booking not found")
    content = build_invoice_pdf(booking, settings, issued_on=date.today())
    return _attachment(content, "application/pdf", f"invoice_{booking.id}.pdf")
