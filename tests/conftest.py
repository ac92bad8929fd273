import os
from decimal import Decimal
from typing import Callable, Generator

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("RATE_LIMITING_ENABLED", "false")
os.environ.setdefault("LOG_DIR", "logs/test")

from common.config import reset_settings_cache  # noqa: E402

reset_settings_cache()

from common.database import Base, SessionLocal, engine  # noqa: E402
from common.models import RoleEnum, Room, RoomType  # noqa: E402
from services.admin.app import app as admin_app  # noqa: E402
from services.bookings.app import app as bookings_app  # noqa: E402
from services.rooms.app import app as rooms_app  # noqa: E402
from services.users.app import app as users_app  # noqa: E402

PASSWORD = "Passw0rd!"

ADMIN_PAYLOAD = {
    "name": "Admin",
    "email": "admin@grandhotel.com",
    "password": PASSWORD,
    "role": RoleEnum.ADMIN.value,
}

STAFF_PAYLOAD = {
    "name": "Front Desk",
    "email": "desk@grandhotel.com",
    "password": PASSWORD,
    "role": RoleEnum.STAFF.value,
}


def auth_header(users_client: TestClient, email: str, password: str = PASSWORD) -> dict[str, str]:
    response = users_client.post(
        "/api/auth/login",
        data={"username": email, "password": password},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    token = response.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(autouse=True, scope="function")
def _create_test_database() -> Generator[None, None, None]:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db_session() -> Generator:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def make_room() -> Callable[..., int]:
    """Insert a room in its own committed session and return its id."""

    def factory(room_number: str = "101", room_type: RoomType = RoomType.DELUXE, tariff: str = "3500") -> int:
        with SessionLocal() as session:
            room = Room(room_number=room_number, type=room_type, tariff=Decimal(tariff))
            session.add(room)
            session.commit()
            return room.id

    return factory


@pytest.fixture()
def users_client() -> Generator[TestClient, None, None]:
    with TestClient(users_app) as client:
        yield client


@pytest.fixture()
def rooms_client() -> Generator[TestClient, None, None]:
    with TestClient(rooms_app) as client:
        yield client


@pytest.fixture()
def bookings_client() -> Generator[TestClient, None, None]:
    with TestClient(bookings_app) as client:
        yield client


@pytest.fixture()
def admin_client() -> Generator[TestClient, None, None]:
    with TestClient(admin_app) as client:
        yield client


@pytest.fixture()
def admin_headers(users_client: TestClient) -> dict[str, str]:
    users_client.post("/api/auth/register", json=ADMIN_PAYLOAD)
    return auth_header(users_client, ADMIN_PAYLOAD["email"])


@pytest.fixture()
def staff_headers(users_client: TestClient) -> dict[str, str]:
    users_client.post("/api/auth/register", json=STAFF_PAYLOAD)
    return auth_header(users_client, STAFF_PAYLOAD["email"])
