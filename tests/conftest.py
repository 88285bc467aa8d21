import asyncio
import json
import shutil
from pathlib import Path

import mongomock
import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.services.auth_service import AuthService
from app.services.document_store import DocumentDataService
from app.services.flatfile_store import FlatFileDataService
from app.services.picture_service import PictureService
from app.services.relational_store import RelationalDataService

SAMPLE_DATA = Path(__file__).resolve().parent.parent / "data"

# Lowest bcrypt cost keeps the auth tests fast
TEST_ROUNDS = 4


@pytest.fixture
async def relational_store():
    store = RelationalDataService("sqlite://")
    result = await store.initialize()
    assert result.ok, result.reason
    try:
        yield store
    finally:
        await store.close()


@pytest.fixture
async def document_store():
    store = DocumentDataService("mongodb://localhost:27017", "car_registry_test", client=mongomock.MongoClient())
    result = await store.initialize()
    assert result.ok, result.reason
    try:
        yield store
    finally:
        await store.close()


@pytest.fixture
def data_dir(tmp_path):
    target = tmp_path / "data"
    shutil.copytree(SAMPLE_DATA, target)
    return target


@pytest.fixture
def empty_data_dir(tmp_path):
    target = tmp_path / "empty"
    target.mkdir()
    for name in ("people.json", "cars.json", "stores.json"):
        (target / name).write_text(json.dumps([]))
    return target


@pytest.fixture
async def flatfile_store(data_dir):
    store = FlatFileDataService(data_dir)
    result = await store.initialize()
    assert result.ok, result.reason
    return store


@pytest.fixture
async def auth_service():
    service = AuthService("sqlite://", bcrypt_rounds=TEST_ROUNDS)
    result = await service.initialize()
    assert result.ok, result.reason
    try:
        yield service
    finally:
        await service.close()


def _install_services(data_service, auth_service, picture_service):
    app.state.data_service = data_service
    app.state.auth_service = auth_service
    app.state.picture_service = picture_service


def _remove_services():
    for name in ("data_service", "auth_service", "picture_service"):
        if hasattr(app.state, name):
            delattr(app.state, name)


@pytest.fixture
def client(tmp_path):
    """TestClient over a fresh relational store and user store (startup is bypassed)."""
    data_service = RelationalDataService("sqlite://")
    auth = AuthService("sqlite://", bcrypt_rounds=TEST_ROUNDS)
    assert asyncio.run(data_service.initialize()).ok
    assert asyncio.run(auth.initialize()).ok
    pictures = PictureService(tmp_path / "uploads")
    pictures.ensure_directory()

    _install_services(data_service, auth, pictures)
    try:
        yield TestClient(app)
    finally:
        asyncio.run(data_service.close())
        asyncio.run(auth.close())
        _remove_services()


@pytest.fixture
def logged_in_client(client):
    resp = client.post("/register", data={
        "username": "alice", "password": "s3cret", "password2": "s3cret", "email": "alice@example.com",
    })
    assert "User created" in resp.text
    resp = client.post("/login", data={"username": "alice", "password": "s3cret"}, follow_redirects=False)
    assert resp.status_code == 303
    return client


@pytest.fixture
def restore_app_state():
    yield
    _remove_services()
