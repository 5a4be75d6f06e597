# venue_booking/domain/roles.py

from enum import Enum


class Role(str, Enum):
    CUSTOMER = "customer"
    ORGANIZER = "organizer"
    ADMIN = "admin"


STAFF_ROLES = frozenset({Role.ORGANIZER, Role.ADMIN})
