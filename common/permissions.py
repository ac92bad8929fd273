"""Capabilities and the roles allowed to invoke them."""
from enum import Enum
from typing import Dict, FrozenSet

from .models import RoleEnum


class Capability(str, Enum):
    ROOM_WRITE = "room:write"
    BOOKING_CREATE = "booking:create"
    BOOKING_LIST = "booking:list"
    BOOKING_STATUS = "booking:status"
    BOOKING_EXPORT = "booking:export"
    INVOICE_READ = "invoice:read"
    DASHBOARD_READ = "dashboard:read"


_ADMIN_ONLY = frozenset({RoleEnum.ADMIN})
_FRONT_DESK = frozenset({RoleEnum.ADMIN, RoleEnum.STAFF})

CAPABILITY_ROLES: Dict[Capability, FrozenSet[RoleEnum]] = {
    Capability.ROOM_WRITE: _ADMIN_ONLY,
    Capability.BOOKING_CREATE: _FRONT_DESK,
    Capability.BOOKING_LIST: _ADMIN_ONLY,
    Capability.BOOKING_STATUS: _FRONT_DESK,
    Capability.BOOKING_EXPORT: _ADMIN_ONLY,
    Capability.INVOICE_READ: _FRONT_DESK,
    Capability.DASHBOARD_READ: _FRONT_DESK,
}


def is_authorized(role: RoleEnum, capability: Capability) -> bool:
    return role in CAPABILITY_ROLES.get(capability, frozenset())
