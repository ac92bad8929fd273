"""Pydantic schemas shared across the services."""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from .models import BookingStatus, RoleEnum, RoomType

Money = Annotated[
    Decimal,
    Field(ge=0, max_digits=10, decimal_places=2),
    PlainSerializer(float, return_type=float, when_used="json"),
]

Amount = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    role: RoleEnum = RoleEnum.STAFF


class UserCreate(UserBase):
    password: str = Field(..., min_length=8)


class UserRead(UserBase):
    id: int
    created_at: datetime

    model_config = {"from_attributes": True}


class RoomBase(BaseModel):
    room_number: str = Field(..., min_length=1, max_length=20)
    type: RoomType
    tariff: Money


class RoomCreate(RoomBase):
    pass


class RoomUpdate(BaseModel):
    room_number: Optional[str] = Field(None, min_length=1, max_length=20)
    type: Optional[RoomType] = None
    tariff: Optional[Money] = None


class RoomRead(RoomBase):
    id: int

    model_config = {"from_attributes": True}


class StayRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    room_id: int = Field(..., alias="roomId", gt=0)
    check_in: date
    check_out: date


class AvailabilityCheck(StayRequest):
    pass


class AvailabilityResult(BaseModel):
    available: bool
    message: Optional[str] = None


class BookingCreate(StayRequest):
    customer_name: str = Field(..., min_length=1, max_length=100)
    customer_email: EmailStr


class BookingStatusUpdate(BaseModel):
    status: BookingStatus


class BookingRead(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    room_id: int = Field(..., alias="roomId")
    customer_name: str
    customer_email: str
    check_in: date
    check_out: date
    status: BookingStatus
    created_at: datetime
    updated_at: Optional[datetime] = None


class BookingWithRoom(BookingRead):
    room: RoomRead


class DashboardStats(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_rooms: int
    occupied_rooms: int
    available_rooms: int
    total_bookings: int
    total_revenue: Amount


class SummaryStats(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_users: int
    total_rooms: int
    total_bookings: int
