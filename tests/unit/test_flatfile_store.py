import json

from app.schemas.registry import CarCreate, PersonCreate, PersonUpdate, StoreCreate, StoreUpdate
from app.services.flatfile_store import FlatFileDataService
from app.services.result import ErrorKind


async def test_initialize_fails_when_a_file_is_missing(tmp_path):
    (tmp_path / "people.json").write_text("[]")
    store = FlatFileDataService(tmp_path)
    result = await store.initialize()
    assert not result.ok
    assert result.reason == "unable to read file"
    assert not store.initialized


async def test_initialize_rejects_malformed_json(empty_data_dir):
    (empty_data_dir / "cars.json").write_text("{not json")
    result = await FlatFileDataService(empty_data_dir).initialize()
    assert not result.ok


async def test_loads_sample_files(flatfile_store):
    people = await flatfile_store.get_all_people()
    assert people.ok
    assert len(people.value) == 3
    assert len((await flatfile_store.get_cars()).value) == 3
    assert len((await flatfile_store.get_stores()).value) == 2


async def test_empty_collections_fail_with_not_found(empty_data_dir):
    store = FlatFileDataService(empty_data_dir)
    assert (await store.initialize()).ok

    people = await store.get_all_people()
    assert not people.ok
    assert people.kind is ErrorKind.NOT_FOUND
    assert people.reason == "No people available"
    assert (await store.get_cars()).reason == "No cars available"
    assert (await store.get_stores()).reason == "No stores available"


async def test_car_scenario_add_lookup_delete(empty_data_dir):
    store = FlatFileDataService(empty_data_dir)
    await store.initialize()

    assert (await store.add_car(CarCreate(vin="1A", make="Ford", model="F150", year="2020"))).ok

    found = await store.get_cars_by_vin("1A")
    assert found.ok
    assert [c.model_dump() for c in found.value] == [
        {"vin": "1A", "make": "Ford", "model": "F150", "year": "2020"}
    ]

    assert (await store.delete_car_by_vin("1A")).ok
    after = await store.get_cars_by_vin("1A")
    assert not after.ok
    assert after.kind is ErrorKind.NOT_FOUND
    assert after.reason == "No cars match the chosen vin"


async def test_add_person_round_trip_and_persists(flatfile_store, data_dir):
    added = await flatfile_store.add_person(PersonCreate(first_name="Sam", city="Ottawa", phone=""))
    assert added.ok
    person = added.value
    assert person.id == 4
    assert person.phone is None

    found = await flatfile_store.get_people_by_id(person.id)
    assert found.value == [person]

    saved = json.loads((data_dir / "people.json").read_text())
    assert saved[-1]["first_name"] == "Sam"
    assert saved[-1]["phone"] is None


async def test_new_ids_do_not_reuse_after_delete(flatfile_store):
    assert (await flatfile_store.delete_person_by_id(1)).ok
    added = await flatfile_store.add_person(PersonCreate(first_name="Sam"))
    assert added.value.id == 4


async def test_missing_keys_are_not_found(flatfile_store):
    update = await flatfile_store.update_person(PersonUpdate(id=99, first_name="Nobody"))
    assert update.kind is ErrorKind.NOT_FOUND
    assert update.reason == "No such person"

    delete = await flatfile_store.delete_person_by_id(99)
    assert delete.kind is ErrorKind.NOT_FOUND

    assert (await flatfile_store.update_car(CarCreate(vin="nope"))).kind is ErrorKind.NOT_FOUND
    assert (await flatfile_store.delete_car_by_vin("nope")).kind is ErrorKind.NOT_FOUND
    assert (await flatfile_store.update_store(StoreUpdate(id=99))).kind is ErrorKind.NOT_FOUND
    assert (await flatfile_store.delete_store_by_id(99)).kind is ErrorKind.NOT_FOUND


async def test_filters(flatfile_store):
    toronto = await flatfile_store.get_people_by_city("Toronto")
    assert [p.id for p in toronto.value] == [1, 3]

    owners = await flatfile_store.get_people_by_vin("JTDKB20U093482311")
    assert [p.id for p in owners.value] == [2]

    assert [c.vin for c in (await flatfile_store.get_cars_by_make("Honda")).value] == ["2HGFG12878H500138"]
    assert [c.vin for c in (await flatfile_store.get_cars_by_year(2009)).value] == ["JTDKB20U093482311"]
    assert (await flatfile_store.get_cars_by_make("Tesla")).reason == "No cars match the chosen make"
    assert (await flatfile_store.get_stores_by_retailer("Costco")).value[0].id == 2


async def test_deleting_car_leaves_owner_vin(flatfile_store):
    assert (await flatfile_store.delete_car_by_vin("1FTFW1ET5DFC10312")).ok
    owner = (await flatfile_store.get_people_by_id(1)).value[0]
    assert owner.vin == "1FTFW1ET5DFC10312"


async def test_duplicate_vin_rejected(flatfile_store):
    result = await flatfile_store.add_car(CarCreate(vin="1FTFW1ET5DFC10312", make="Ford"))
    assert not result.ok
    assert result.kind is ErrorKind.STORE


async def test_update_store_replaces_record(flatfile_store, data_dir):
    result = await flatfile_store.update_store(StoreUpdate(id=1, retailer="Home Depot", city="Toronto"))
    assert result.ok
    stored = (await flatfile_store.get_store_by_id(1)).value[0]
    assert stored.retailer == "Home Depot"
    assert stored.phone is None

    saved = json.loads((data_dir / "stores.json").read_text())
    assert saved[0]["retailer"] == "Home Depot"


async def test_add_store_assigns_next_id(flatfile_store):
    added = await flatfile_store.add_store(StoreCreate(retailer="IKEA"))
    assert added.value.id == 3


async def test_operations_before_initialize_fail(data_dir):
    store = FlatFileDataService(data_dir)
    assert (await store.get_all_people()).kind is ErrorKind.STORE
    assert (await store.add_car(CarCreate(vin="1A"))).kind is ErrorKind.STORE


async def test_failed_write_keeps_file_and_memory(flatfile_store, data_dir, monkeypatch):
    before = (data_dir / "stores.json").read_text()

    def broken_dump(obj, fh, **kwargs):
        fh.write("[")
        raise OSError("disk full")

    monkeypatch.setattr(json, "dump", broken_dump)
    result = await flatfile_store.add_store(StoreCreate(retailer="IKEA"))
    monkeypatch.undo()

    assert not result.ok
    assert result.kind is ErrorKind.STORE
    assert result.reason == "unable to save stores.json"
    assert len((await flatfile_store.get_stores()).value) == 2

    assert (data_dir / "stores.json").read_text() == before
    assert not list(data_dir.glob("*.tmp"))
    assert (await FlatFileDataService(data_dir).initialize()).ok
