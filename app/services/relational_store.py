"""
Relational Data Access Module backed by SQLAlchemy.

The instance owns its engine and session factory. ORM work is blocking, so
each operation runs its body in Starlette's thread pool and the event loop
only waits on the result.
"""

import logging
from typing import List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from starlette.concurrency import run_in_threadpool

from app.db.init_db import init_db
from app.db.session import create_db_engine, create_session_factory
from app.models.registry import Car, Person, Store
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
from app.services.data_service import DataService, threaded
from app.services.result import ErrorKind, Result

logger = logging.getLogger(__name__)

NO_RESULTS = "no results returned"


class RelationalDataService(DataService):

    def __init__(self, database_url: str):
        self.database_url = database_url
        self._engine: Optional[Engine] = None
        self._sessions: Optional[sessionmaker] = None

    @property
    def initialized(self) -> bool:
        return self._sessions is not None

    async def initialize(self) -> Result[str]:
        return await run_in_threadpool(self._initialize)

    def _initialize(self) -> Result[str]:
        try:
            engine = create_db_engine(self.database_url)
            # Make sure we can actually reach the database before syncing
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, ImportError) as e:
            logger.error(f"Database authentication failed: {e}")
            return Result.failure("unable to authenticate with the database", ErrorKind.STORE)

        try:
            init_db(engine)
        except SQLAlchemyError:
            engine.dispose()
            return Result.failure("unable to sync the database", ErrorKind.STORE)

        self._engine = engine
        self._sessions = create_session_factory(engine)
        logger.info("Relational data service initialized")
        return Result.success("success")

    async def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
        self._engine = None
        self._sessions = None

    def _session(self) -> Session:
        return self._sessions()

    def _insert(self, row, record_type, reason: str) -> Result:
        with self._session() as session:
            try:
                session.add(row)
                session.commit()
                session.refresh(row)
                return Result.success(record_type.model_validate(row))
            except IntegrityError as e:
                session.rollback()
                logger.warning(f"{reason}: {e.orig}")
                return Result.failure(reason, ErrorKind.STORE)
            except SQLAlchemyError as e:
                session.rollback()
                logger.error(f"{reason}: {e}")
                return Result.failure(reason, ErrorKind.STORE)

    def _select(self, model, record_type, *criteria) -> Result:
        with self._session() as session:
            try:
                rows = session.query(model).filter(*criteria).all()
            except SQLAlchemyError as e:
                logger.error(f"Query on {model.__tablename__} failed: {e}")
                return Result.failure(NO_RESULTS, ErrorKind.STORE)
            return Result.success([record_type.model_validate(row) for row in rows])

    def _replace(self, model, key, values: dict, record_type, missing: str, reason: str) -> Result:
        with self._session() as session:
            try:
                row = session.get(model, key)
                if row is None:
                    return Result.failure(missing, ErrorKind.NOT_FOUND)
                for field, value in values.items():
                    setattr(row, field, value)
                session.commit()
                session.refresh(row)
                return Result.success(record_type.model_validate(row))
            except SQLAlchemyError as e:
                session.rollback()
                logger.error(f"{reason}: {e}")
                return Result.failure(reason, ErrorKind.STORE)

    def _delete(self, model, *criteria) -> Result[None]:
        with self._session() as session:
            try:
                deleted = session.query(model).filter(*criteria).delete(synchronize_session=False)
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                logger.error(f"Delete on {model.__tablename__} failed: {e}")
                return Result.failure(NO_RESULTS, ErrorKind.STORE)
            if deleted == 0:
                return Result.failure(NO_RESULTS, ErrorKind.NOT_FOUND)
            return Result.success()

    # People
    @threaded
    def add_person(self, person: PersonCreate) -> Result[PersonRecord]:
        return self._insert(Person(**person.model_dump()), PersonRecord, "unable to create the person")

    @threaded
    def get_all_people(self) -> Result[List[PersonRecord]]:
        return self._select(Person, PersonRecord)

    @threaded
    def get_people_by_vin(self, vin: str) -> Result[List[PersonRecord]]:
        return self._select(Person, PersonRecord, Person.vin == vin)

    @threaded
    def get_people_by_city(self, city: str) -> Result[List[PersonRecord]]:
        return self._select(Person, PersonRecord, Person.city == city)

    @threaded
    def get_people_by_id(self, person_id: int) -> Result[List[PersonRecord]]:
        return self._select(Person, PersonRecord, Person.id == person_id)

    @threaded
    def update_person(self, person: PersonUpdate) -> Result[PersonRecord]:
        return self._replace(
            Person, person.id, person.model_dump(exclude={"id"}), PersonRecord,
            "No such person", "unable to update person",
        )

    @threaded
    def delete_person_by_id(self, person_id: int) -> Result[None]:
        return self._delete(Person, Person.id == person_id)

    # Cars
    @threaded
    def add_car(self, car: CarCreate) -> Result[CarRecord]:
        return self._insert(Car(**car.model_dump()), CarRecord, "unable to create car")

    @threaded
    def get_cars(self) -> Result[List[CarRecord]]:
        return self._select(Car, CarRecord)

    @threaded
    def get_cars_by_vin(self, vin: str) -> Result[List[CarRecord]]:
        return self._select(Car, CarRecord, Car.vin == vin)

    @threaded
    def get_cars_by_make(self, make: str) -> Result[List[CarRecord]]:
        return self._select(Car, CarRecord, Car.make == make)

    @threaded
    def get_cars_by_year(self, year: str) -> Result[List[CarRecord]]:
        return self._select(Car, CarRecord, Car.year == str(year))

    @threaded
    def update_car(self, car: CarCreate) -> Result[CarRecord]:
        return self._replace(
            Car, car.vin, car.model_dump(exclude={"vin"}), CarRecord,
            "No such car", "unable to update car",
        )

    @threaded
    def delete_car_by_vin(self, vin: str) -> Result[None]:
        return self._delete(Car, Car.vin == vin)

    # Stores
    @threaded
    def add_store(self, store: StoreCreate) -> Result[StoreRecord]:
        return self._insert(Store(**store.model_dump()), StoreRecord, "unable to create store")

    @threaded
    def get_stores(self) -> Result[List[StoreRecord]]:
        return self._select(Store, StoreRecord)

    @threaded
    def get_stores_by_retailer(self, retailer: str) -> Result[List[StoreRecord]]:
        return self._select(Store, StoreRecord, Store.retailer == retailer)

    @threaded
    def get_store_by_id(self, store_id: int) -> Result[List[StoreRecord]]:
        return self._select(Store, StoreRecord, Store.id == store_id)

    @threaded
    def update_store(self, store: StoreUpdate) -> Result[StoreRecord]:
        return self._replace(
            Store, store.id, store.model_dump(exclude={"id"}), StoreRecord,
            "No such store", "unable to update store",
        )

    @threaded
    def delete_store_by_id(self, store_id: int) -> Result[None]:
        return self._delete(Store, Store.id == store_id)
