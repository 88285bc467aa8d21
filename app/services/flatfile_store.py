"""
Flat-file Data Access Module.

people.json, cars.json and stores.json are read once into memory by
initialize(); every successful add / update / delete writes the affected
collection back to its file. Writers are not serialized against each other.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Callable, Dict, List, Optional, Type

from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

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
from app.services.data_service import NOT_INITIALIZED, DataService
from app.services.result import ErrorKind, Result

logger = logging.getLogger(__name__)

COLLECTION_FILES: Dict[str, str] = {
    "people": "people.json",
    "cars": "cars.json",
    "stores": "stores.json",
}

RECORD_TYPES: Dict[str, Type[BaseModel]] = {
    "people": PersonRecord,
    "cars": CarRecord,
    "stores": StoreRecord,
}


class FlatFileDataService(DataService):

    def __init__(self, data_dir, persist: bool = True):
        self.data_dir = Path(data_dir)
        self.persist = persist
        self._collections: Optional[Dict[str, list]] = None

    @property
    def initialized(self) -> bool:
        return self._collections is not None

    @property
    def people(self) -> List[PersonRecord]:
        return self._collections["people"]

    @property
    def cars(self) -> List[CarRecord]:
        return self._collections["cars"]

    @property
    def stores(self) -> List[StoreRecord]:
        return self._collections["stores"]

    async def initialize(self) -> Result[str]:
        collections = {}
        for name, filename in COLLECTION_FILES.items():
            try:
                raw = await run_in_threadpool(self._read, self.data_dir / filename)
                collections[name] = [RECORD_TYPES[name].model_validate(item) for item in raw]
            except (OSError, ValueError) as e:
                logger.error(f"Unable to read {filename}: {e}")
                return Result.failure("unable to read file", ErrorKind.STORE)

        self._collections = collections
        logger.info(
            f"Flat-file data service loaded {len(self.people)} people, "
            f"{len(self.cars)} cars, {len(self.stores)} stores from {self.data_dir}"
        )
        return Result.success("success")

    async def close(self) -> None:
        self._collections = None

    @staticmethod
    def _read(path: Path) -> list:
        with open(path, encoding="utf-8") as fh:
            data = json.load(fh)
        if not isinstance(data, list):
            raise ValueError(f"{path.name} must hold a JSON array")
        return data

    @staticmethod
    def _write(path: Path, records: list) -> None:
        """Write to a sibling temp file, then rename it over the target."""
        payload = [record.model_dump() for record in records]
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(payload, fh, indent=2)
            os.replace(tmp_name, path)
        except Exception:
            os.unlink(tmp_name)
            raise

    async def _commit(self, name: str, records: list) -> Result[None]:
        """Save the new collection, then swap it in."""
        if self.persist:
            filename = COLLECTION_FILES[name]
            try:
                await run_in_threadpool(self._write, self.data_dir / filename, records)
            except OSError as e:
                logger.error(f"Unable to write {filename}: {e}")
                return Result.failure(f"unable to save {filename}", ErrorKind.STORE)
        self._collections[name] = records
        return Result.success()

    def _all(self, name: str, empty_reason: str) -> Result[list]:
        if not self.initialized:
            return Result.failure(NOT_INITIALIZED, ErrorKind.STORE)
        records = self._collections[name]
        if not records:
            return Result.failure(empty_reason, ErrorKind.NOT_FOUND)
        return Result.success(list(records))

    def _filter(self, name: str, match: Callable[[BaseModel], bool], empty_reason: str) -> Result[list]:
        if not self.initialized:
            return Result.failure(NOT_INITIALIZED, ErrorKind.STORE)
        found = [record for record in self._collections[name] if match(record)]
        if not found:
            return Result.failure(empty_reason, ErrorKind.NOT_FOUND)
        return Result.success(found)

    async def _replace(self, name: str, key: str, record: BaseModel, missing: str) -> Result:
        if not self.initialized:
            return Result.failure(NOT_INITIALIZED, ErrorKind.STORE)
        records = list(self._collections[name])
        for i, existing in enumerate(records):
            if getattr(existing, key) == getattr(record, key):
                records[i] = record
                saved = await self._commit(name, records)
                return Result.success(record) if saved.ok else saved
        return Result.failure(missing, ErrorKind.NOT_FOUND)

    async def _remove(self, name: str, key: str, value, missing: str) -> Result[None]:
        if not self.initialized:
            return Result.failure(NOT_INITIALIZED, ErrorKind.STORE)
        records = [record for record in self._collections[name] if getattr(record, key) != value]
        if len(records) == len(self._collections[name]):
            return Result.failure(missing, ErrorKind.NOT_FOUND)
        return await self._commit(name, records)

    async def _append(self, name: str, record: BaseModel) -> Result:
        saved = await self._commit(name, self._collections[name] + [record])
        return Result.success(record) if saved.ok else saved

    def _next_id(self, name: str) -> int:
        return max((record.id for record in self._collections[name]), default=0) + 1

    # People
    async def add_person(self, person: PersonCreate) -> Result[PersonRecord]:
        if not self.initialized:
            return Result.failure(NOT_INITIALIZED, ErrorKind.STORE)
        record = PersonRecord(id=self._next_id("people"), **person.model_dump())
        return await self._append("people", record)

    async def get_all_people(self) -> Result[List[PersonRecord]]:
        return self._all("people", "No people available")

    async def get_people_by_vin(self, vin: str) -> Result[List[PersonRecord]]:
        return self._filter("people", lambda p: p.vin == vin, "No person owns a car with this vin")

    async def get_people_by_city(self, city: str) -> Result[List[PersonRecord]]:
        return self._filter("people", lambda p: p.city == city, "No people live in this city")

    async def get_people_by_id(self, person_id: int) -> Result[List[PersonRecord]]:
        return self._filter("people", lambda p: p.id == int(person_id), "No such person")

    async def update_person(self, person: PersonUpdate) -> Result[PersonRecord]:
        return await self._replace("people", "id", PersonRecord(**person.model_dump()), "No such person")

    async def delete_person_by_id(self, person_id: int) -> Result[None]:
        return await self._remove("people", "id", int(person_id), "No such person")

    # Cars
    async def add_car(self, car: CarCreate) -> Result[CarRecord]:
        if not self.initialized:
            return Result.failure(NOT_INITIALIZED, ErrorKind.STORE)
        if any(existing.vin == car.vin for existing in self.cars):
            return Result.failure("unable to create car", ErrorKind.STORE)
        return await self._append("cars", CarRecord(**car.model_dump()))

    async def get_cars(self) -> Result[List[CarRecord]]:
        return self._all("cars", "No cars available")

    async def get_cars_by_vin(self, vin: str) -> Result[List[CarRecord]]:
        return self._filter("cars", lambda c: c.vin == vin, "No cars match the chosen vin")

    async def get_cars_by_make(self, make: str) -> Result[List[CarRecord]]:
        return self._filter("cars", lambda c: c.make == make, "No cars match the chosen make")

    async def get_cars_by_year(self, year: str) -> Result[List[CarRecord]]:
        return self._filter("cars", lambda c: c.year == str(year), "No cars match the chosen year")

    async def update_car(self, car: CarCreate) -> Result[CarRecord]:
        return await self._replace("cars", "vin", CarRecord(**car.model_dump()), "No such car")

    async def delete_car_by_vin(self, vin: str) -> Result[None]:
        # People keep whatever vin they had; there is no reference to null here
        return await self._remove("cars", "vin", vin, "No such car")

    # Stores
    async def add_store(self, store: StoreCreate) -> Result[StoreRecord]:
        if not self.initialized:
            return Result.failure(NOT_INITIALIZED, ErrorKind.STORE)
        record = StoreRecord(id=self._next_id("stores"), **store.model_dump())
        return await self._append("stores", record)

    async def get_stores(self) -> Result[List[StoreRecord]]:
        return self._all("stores", "No stores available")

    async def get_stores_by_retailer(self, retailer: str) -> Result[List[StoreRecord]]:
        return self._filter("stores", lambda s: s.retailer == retailer, "No stores match the chosen retailer")

    async def get_store_by_id(self, store_id: int) -> Result[List[StoreRecord]]:
        return self._filter("stores", lambda s: s.id == int(store_id), "No such store")

    async def update_store(self, store: StoreUpdate) -> Result[StoreRecord]:
        return await self._replace("stores", "id", StoreRecord(**store.model_dump()), "No such store")

    async def delete_store_by_id(self, store_id: int) -> Result[None]:
        return await self._remove("stores", "id", int(store_id), "No such store")
