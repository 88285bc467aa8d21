from app.schemas.registry import (
    CarCreate,
    CarRecord,
    PersonCreate,
    PersonRecord,
    PersonUpdate,
    StoreCreate,
    StoreRecord,
    StoreUpdate,
)
from app.schemas.user import LoginEvent, UserCredentials, UserRecord, UserRegistration

__all__ = [
    "CarCreate",
    "CarRecord",
    "PersonCreate",
    "PersonRecord",
    "PersonUpdate",
    "StoreCreate",
    "StoreRecord",
    "StoreUpdate",
    "LoginEvent",
    "UserCredentials",
    "UserRecord",
    "UserRegistration",
]
