"""
Document Data Access Module backed by MongoDB through pymongo.

Cars are keyed by vin. People and stores carry an integer ``id`` drawn from
a ``counters`` collection, so records look the same as in the other
backends. A lookup that matches nothing fails with NOT_FOUND.
"""

import logging
from typing import List, Optional

from pymongo import ASCENDING, MongoClient, ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError
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
from app.services.data_service import DataService, threaded
from app.services.result import ErrorKind, Result

logger = logging.getLogger(__name__)

# Collection name -> (key field, empty-result reason, query-error reason)
COLLECTIONS = {
    "people": ("id", "No People", "Error getting People"),
    "cars": ("vin", "No Cars", "Error getting Cars"),
    "stores": ("id", "No Stores", "Error getting Stores"),
}


class DocumentDataService(DataService):

    def __init__(self, mongo_url: str, database: str, client: Optional[MongoClient] = None):
        self.mongo_url = mongo_url
        self.database_name = database
        self._client = client
        self._owns_client = client is None
        self._db: Optional[Database] = None

    @property
    def initialized(self) -> bool:
        return self._db is not None

    async def initialize(self) -> Result[str]:
        return await run_in_threadpool(self._initialize)

    def _initialize(self) -> Result[str]:
        try:
            client = self._client or MongoClient(self.mongo_url, serverSelectionTimeoutMS=5000)
            db = client[self.database_name]
            db.command("ping")
        except PyMongoError as e:
            logger.error(f"Document store connection failed: {e}")
            return Result.failure("unable to connect to the document store", ErrorKind.STORE)

        try:
            for name, (key, _, _) in COLLECTIONS.items():
                db[name].create_index([(key, ASCENDING)], unique=True)
        except PyMongoError as e:
            logger.error(f"Creating indexes failed: {e}")
            if self._owns_client:
                client.close()
            return Result.failure("unable to sync the document store", ErrorKind.STORE)

        self._client = client
        self._db = db
        logger.info(f"Document data service initialized ({self.database_name})")
        return Result.success("success")

    async def close(self) -> None:
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None
        self._db = None

    def _next_id(self, name: str) -> int:
        counter = self._db.counters.find_one_and_update(
            {"_id": name},
            {"$inc": {"seq": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return counter["seq"]

    def _insert(self, name: str, document: dict, record_type, reason: str) -> Result:
        try:
            if COLLECTIONS[name][0] == "id":
                document["id"] = self._next_id(name)
            # insert_one adds _id to the dict it is given
            self._db[name].insert_one(dict(document))
        except DuplicateKeyError as e:
            logger.warning(f"{reason}: {e}")
            return Result.failure(reason, ErrorKind.STORE)
        except PyMongoError as e:
            logger.error(f"{reason}: {e}")
            return Result.failure(reason, ErrorKind.STORE)
        return Result.success(record_type.model_validate(document))

    def _find(self, name: str, record_type, query: Optional[dict] = None) -> Result:
        key, empty, error = COLLECTIONS[name]
        try:
            docs = list(self._db[name].find(query or {}, {"_id": 0}).sort(key, ASCENDING))
        except PyMongoError as e:
            logger.error(f"Query on {name} failed: {e}")
            return Result.failure(error, ErrorKind.STORE)
        if not docs:
            return Result.failure(empty, ErrorKind.NOT_FOUND)
        return Result.success([record_type.model_validate(doc) for doc in docs])

    def _replace(self, name: str, key, values: dict, record_type, missing: str, reason: str) -> Result:
        try:
            doc = self._db[name].find_one_and_update(
                {COLLECTIONS[name][0]: key},
                {"$set": values},
                projection={"_id": 0},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            logger.error(f"{reason}: {e}")
            return Result.failure(reason, ErrorKind.STORE)
        if doc is None:
            return Result.failure(missing, ErrorKind.NOT_FOUND)
        return Result.success(record_type.model_validate(doc))

    def _delete(self, name: str, key, missing: str) -> Result[None]:
        try:
            result = self._db[name].delete_one({COLLECTIONS[name][0]: key})
        except PyMongoError as e:
            logger.error(f"Delete on {name} failed: {e}")
            return Result.failure(COLLECTIONS[name][2], ErrorKind.STORE)
        if result.deleted_count == 0:
            return Result.failure(missing, ErrorKind.NOT_FOUND)
        return Result.success()

    # People
    @threaded
    def add_person(self, person: PersonCreate) -> Result[PersonRecord]:
        return self._insert("people", person.model_dump(), PersonRecord, "unable to create the person")

    @threaded
    def get_all_people(self) -> Result[List[PersonRecord]]:
        return self._find("people", PersonRecord)

    @threaded
    def get_people_by_vin(self, vin: str) -> Result[List[PersonRecord]]:
        return self._find("people", PersonRecord, {"vin": vin})

    @threaded
    def get_people_by_city(self, city: str) -> Result[List[PersonRecord]]:
        return self._find("people", PersonRecord, {"city": city})

    @threaded
    def get_people_by_id(self, person_id: int) -> Result[List[PersonRecord]]:
        return self._find("people", PersonRecord, {"id": person_id})

    @threaded
    def update_person(self, person: PersonUpdate) -> Result[PersonRecord]:
        return self._replace(
            "people", person.id, person.model_dump(exclude={"id"}), PersonRecord,
            "No such person", "unable to update person",
        )

    @threaded
    def delete_person_by_id(self, person_id: int) -> Result[None]:
        return self._delete("people", person_id, "No such person")

    # Cars
    @threaded
    def add_car(self, car: CarCreate) -> Result[CarRecord]:
        return self._insert("cars", car.model_dump(), CarRecord, "unable to create car")

    @threaded
    def get_cars(self) -> Result[List[CarRecord]]:
        return self._find("cars", CarRecord)

    @threaded
    def get_cars_by_vin(self, vin: str) -> Result[List[CarRecord]]:
        return self._find("cars", CarRecord, {"vin": vin})

    @threaded
    def get_cars_by_make(self, make: str) -> Result[List[CarRecord]]:
        return self._find("cars", CarRecord, {"make": make})

    @threaded
    def get_cars_by_year(self, year: str) -> Result[List[CarRecord]]:
        return self._find("cars", CarRecord, {"year": str(year)})

    @threaded
    def update_car(self, car: CarCreate) -> Result[CarRecord]:
        return self._replace(
            "cars", car.vin, car.model_dump(exclude={"vin"}), CarRecord,
            "No such car", "unable to update car",
        )

    @threaded
    def delete_car_by_vin(self, vin: str) -> Result[None]:
        return self._delete("cars", vin, "No such car")

    # Stores
    @threaded
    def add_store(self, store: StoreCreate) -> Result[StoreRecord]:
        return self._insert("stores", store.model_dump(), StoreRecord, "unable to create store")

    @threaded
    def get_stores(self) -> Result[List[StoreRecord]]:
        return self._find("stores", StoreRecord)

    @threaded
    def get_stores_by_retailer(self, retailer: str) -> Result[List[StoreRecord]]:
        return self._find("stores", StoreRecord, {"retailer": retailer})

    @threaded
    def get_store_by_id(self, store_id: int) -> Result[List[StoreRecord]]:
        return self._find("stores", StoreRecord, {"id": store_id})

    @threaded
    def update_store(self, store: StoreUpdate) -> Result[StoreRecord]:
        return self._replace(
            "stores", store.id, store.model_dump(exclude={"id"}), StoreRecord,
            "No such store", "unable to update store",
        )

    @threaded
    def delete_store_by_id(self, store_id: int) -> Result[None]:
        return self._delete("stores", store_id, "No such store")
