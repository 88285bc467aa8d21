"""
Data Access Module contract.

Route handlers talk to people, cars and stores only through a DataService.
Every operation is a coroutine returning a Result; nothing is raised to the
caller. Three backends implement it: a relational one (SQLAlchemy), a
document one (MongoDB through pymongo) and a flat-file one (JSON files held
in memory).

The backends differ on empty results: the relational store returns an empty
list, the document and flat-file stores fail with a NOT_FOUND reason.
"""

import functools
from abc import ABC, abstractmethod
from typing import Any, Callable, List

from starlette.concurrency import run_in_threadpool

from app.core.config import Settings
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
from app.services.result import ErrorKind, Result

NOT_INITIALIZED = "data service not initialized"


def threaded(func: Callable[..., Result]) -> Callable[..., Any]:
    """Run a blocking store method in the thread pool, once the store is open."""

    @functools.wraps(func)
    async def wrapper(self: "DataService", *args, **kwargs) -> Result:
        if not self.initialized:
            return Result.failure(NOT_INITIALIZED, ErrorKind.STORE)
        return await run_in_threadpool(func, self, *args, **kwargs)

    return wrapper


class DataService(ABC):

    @property
    @abstractmethod
    def initialized(self) -> bool:
        ...

    @abstractmethod
    async def initialize(self) -> Result[str]:
        """Open the store. Must succeed before any other call."""

    async def close(self) -> None:
        """Release store resources. Safe to call more than once."""

    # People
    @abstractmethod
    async def add_person(self, person: PersonCreate) -> Result[PersonRecord]: ...

    @abstractmethod
    async def get_all_people(self) -> Result[List[PersonRecord]]: ...

    @abstractmethod
    async def get_people_by_vin(self, vin: str) -> Result[List[PersonRecord]]: ...

    @abstractmethod
    async def get_people_by_city(self, city: str) -> Result[List[PersonRecord]]: ...

    @abstractmethod
    async def get_people_by_id(self, person_id: int) -> Result[List[PersonRecord]]: ...

    @abstractmethod
    async def update_person(self, person: PersonUpdate) -> Result[PersonRecord]: ...

    @abstractmethod
    async def delete_person_by_id(self, person_id: int) -> Result[None]: ...

    # Cars
    @abstractmethod
    async def add_car(self, car: CarCreate) -> Result[CarRecord]: ...

    @abstractmethod
    async def get_cars(self) -> Result[List[CarRecord]]: ...

    @abstractmethod
    async def get_cars_by_vin(self, vin: str) -> Result[List[CarRecord]]: ...

    @abstractmethod
    async def get_cars_by_make(self, make: str) -> Result[List[CarRecord]]: ...

    @abstractmethod
    async def get_cars_by_year(self, year: str) -> Result[List[CarRecord]]: ...

    @abstractmethod
    async def update_car(self, car: CarCreate) -> Result[CarRecord]: ...

    @abstractmethod
    async def delete_car_by_vin(self, vin: str) -> Result[None]: ...

    # Stores
    @abstractmethod
    async def add_store(self, store: StoreCreate) -> Result[StoreRecord]: ...

    @abstractmethod
    async def get_stores(self) -> Result[List[StoreRecord]]: ...

    @abstractmethod
    async def get_stores_by_retailer(self, retailer: str) -> Result[List[StoreRecord]]: ...

    @abstractmethod
    async def get_store_by_id(self, store_id: int) -> Result[List[StoreRecord]]: ...

    @abstractmethod
    async def update_store(self, store: StoreUpdate) -> Result[StoreRecord]: ...

    @abstractmethod
    async def delete_store_by_id(self, store_id: int) -> Result[None]: ...


def build_data_service(settings: Settings) -> DataService:
    """Pick the backend named by DATA_BACKEND."""
    if settings.DATA_BACKEND == "flatfile":
        from app.services.flatfile_store import FlatFileDataService
        return FlatFileDataService(settings.DATA_DIR)

    if settings.DATA_BACKEND == "document":
        from app.services.document_store import DocumentDataService
        return DocumentDataService(settings.MONGODB_URL, settings.MONGODB_DB)

    from app.services.relational_store import RelationalDataService
    return RelationalDataService(settings.SQLALCHEMY_DATABASE_URI)
