"""
Page routes exercised through the FastAPI test client over SQLite stores.
"""

import asyncio

from app.core.config import settings
from app.core.security import read_session_token
from app.main import app
from app.schemas.registry import CarCreate
from app.schemas.user import UserCredentials
from app.services.picture_service import PictureService


def test_home_and_about_are_public(client):
    assert client.get("/").status_code == 200
    resp = client.get("/about")
    assert resp.status_code == 200
    assert "About" in resp.text


def test_unknown_path_is_plain_404(client):
    resp = client.get("/no/such/page")
    assert resp.status_code == 404
    assert resp.text == "Page Not Found"


def test_data_pages_redirect_anonymous_users(client):
    for path in ("/people", "/cars", "/stores", "/pictures", "/userHistory", "/person/1"):
        resp = client.get(path, follow_redirects=False)
        assert resp.status_code == 302, path
        assert resp.headers["location"] == "/login"


def test_register_with_mismatched_passwords(client):
    resp = client.post("/register", data={
        "username": "bob", "password": "one", "password2": "two", "email": "",
    })
    assert resp.status_code == 200
    assert "Passwords do not match" in resp.text


def test_login_failures_are_rendered(client):
    resp = client.post("/login", data={"username": "ghost", "password": "x"})
    assert "Unable to find user: ghost" in resp.text
    assert "session" not in client.cookies


def test_login_sets_session_and_history(logged_in_client):
    assert "session" in logged_in_client.cookies
    resp = logged_in_client.get("/userHistory", headers={"User-Agent": "pytest-browser"})
    assert resp.status_code == 200
    assert "alice" in resp.text


def test_logout_clears_session(logged_in_client):
    resp = logged_in_client.get("/logout", follow_redirects=False)
    assert resp.status_code == 302
    assert resp.headers["location"] == "/"
    assert "session" not in logged_in_client.cookies
    assert logged_in_client.get("/people", follow_redirects=False).status_code == 302


def test_car_pages(logged_in_client):
    resp = logged_in_client.post(
        "/car/add", data={"vin": "1A", "make": "Ford", "model": "F150", "year": "2020"}, follow_redirects=False
    )
    assert resp.status_code == 303
    assert resp.headers["location"] == "/cars"

    listing = logged_in_client.get("/cars?vin=1A")
    assert "F150" in listing.text

    empty = logged_in_client.get("/cars?make=Tesla")
    assert "no results" in empty.text

    detail = logged_in_client.get("/car/1A")
    assert detail.status_code == 200
    assert 'value="Ford"' in detail.text

    duplicate = logged_in_client.post("/car/add", data={"vin": "1A", "make": "Ford"})
    assert duplicate.status_code == 500
    assert "Unable to Add the Car" in duplicate.text

    assert logged_in_client.get("/cars/delete/1A", follow_redirects=False).status_code == 302
    assert logged_in_client.get("/car/1A").status_code == 404


def test_car_add_without_vin_is_rejected(logged_in_client):
    resp = logged_in_client.post("/car/add", data={"vin": "", "make": "Ford"})
    assert resp.status_code == 400


def test_person_pages(logged_in_client):
    asyncio.run(app.state.data_service.add_car(CarCreate(vin="1A", make="Ford", model="F150")))

    form = logged_in_client.get("/people/add")
    assert "1A" in form.text

    resp = logged_in_client.post("/people/add", data={
        "first_name": "Ana", "last_name": "Moreau", "phone": "", "address": "", "city": "Toronto", "vin": "1A",
    }, follow_redirects=False)
    assert resp.status_code == 303

    people = asyncio.run(app.state.data_service.get_people_by_vin("1A")).value
    assert len(people) == 1
    person_id = people[0].id

    detail = logged_in_client.get(f"/person/{person_id}")
    assert "selected" in detail.text

    update = logged_in_client.post("/person/update", data={
        "id": str(person_id), "first_name": "Anna", "last_name": "Moreau", "city": "Ottawa", "vin": "",
    }, follow_redirects=False)
    assert update.status_code == 303

    by_city = logged_in_client.get("/people?city=Ottawa")
    assert "Anna" in by_city.text

    assert logged_in_client.get(f"/people/delete/{person_id}", follow_redirects=False).status_code == 302
    assert logged_in_client.get(f"/person/{person_id}").status_code == 404
    assert logged_in_client.get(f"/people/delete/{person_id}").status_code == 404


def test_update_missing_person_is_not_found(logged_in_client):
    resp = logged_in_client.post("/person/update", data={"id": "999", "first_name": "Nobody"})
    assert resp.status_code == 404
    assert "Unable to Update the Person" in resp.text


def test_store_pages(logged_in_client):
    resp = logged_in_client.post("/stores/add", data={
        "retailer": "Costco", "phone": "", "address": "100 Bay St", "city": "Hamilton",
    }, follow_redirects=False)
    assert resp.status_code == 303

    listing = logged_in_client.get("/stores?retailer=Costco")
    assert "100 Bay St" in listing.text

    store_id = asyncio.run(app.state.data_service.get_stores_by_retailer("Costco")).value[0].id
    assert logged_in_client.get(f"/store/{store_id}").status_code == 200

    update = logged_in_client.post("/store/update", data={
        "id": str(store_id), "retailer": "Costco Wholesale", "city": "Hamilton",
    }, follow_redirects=False)
    assert update.status_code == 303
    assert "Costco Wholesale" in logged_in_client.get("/stores").text

    assert logged_in_client.get(f"/stores/delete/{store_id}", follow_redirects=False).status_code == 302
    assert logged_in_client.get(f"/store/{store_id}").status_code == 404


def test_picture_upload_and_listing(logged_in_client):
    empty = logged_in_client.get("/pictures")
    assert "No Images Available, Add Some!" in empty.text

    resp = logged_in_client.post(
        "/pictures/add",
        files={"pictureFile": ("cat.png", b"\x89PNG fake", "image/png")},
        follow_redirects=False,
    )
    assert resp.status_code == 303

    listing = logged_in_client.get("/pictures")
    assert ".png" in listing.text


def test_json_echo(client):
    resp = client.post("/test/person", json={"fName": "Ana", "lName": "Moreau"})
    assert resp.status_code == 200
    assert resp.json() == {"message": "add the user: Ana Moreau"}


def test_health_reports_both_stores(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "healthy"
    assert body["data_store"] == "online"
    assert body["user_store"] == "online"


def test_store_failures_on_list_pages_are_server_errors(logged_in_client):
    asyncio.run(app.state.data_service.close())

    for path in ("/cars", "/people", "/stores?retailer=Costco"):
        resp = logged_in_client.get(path)
        assert resp.status_code == 500, path
        assert "data service not initialized" in resp.text

    assert logged_in_client.get("/car/1A").status_code == 500
    assert logged_in_client.get("/person/1").status_code == 500


def test_unreadable_picture_directory_is_a_server_error(logged_in_client, tmp_path):
    app.state.picture_service = PictureService(tmp_path / "missing")
    resp = logged_in_client.get("/pictures")
    assert resp.status_code == 500
    assert "Oops looks like there is an error on our side" in resp.text


def test_incomplete_login_form_is_rejected(client):
    resp = client.post("/login", data={"username": "alice", "password": ""})
    assert resp.status_code == 400
    assert "User name and password are required" in resp.text


def test_failed_registration_keeps_username(client):
    client.post("/register", data={"username": "bob", "password": "pw", "password2": "pw"})
    resp = client.post("/register", data={"username": "bob", "password": "pw", "password2": "pw"})
    assert "User Name already taken" in resp.text
    assert 'value="bob"' in resp.text


def test_session_cookie_keeps_only_recent_logins(logged_in_client):
    for _ in range(settings.SESSION_HISTORY_LIMIT + 2):
        resp = logged_in_client.post("/login", data={"username": "alice", "password": "s3cret"},
                                     follow_redirects=False)
        assert resp.status_code == 303

    session = read_session_token(logged_in_client.cookies["session"])
    assert len(session.user.login_history) == settings.SESSION_HISTORY_LIMIT

    stored = asyncio.run(app.state.auth_service.check_user(
        UserCredentials(username="alice", password="s3cret")
    ))
    assert len(stored.value.login_history) == settings.SESSION_HISTORY_LIMIT + 4


def test_health_path_has_no_trailing_slash(client):
    resp = client.get("/health", follow_redirects=False)
    assert resp.status_code == 200
