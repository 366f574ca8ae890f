# tests/conftest.py

from datetime import date, timedelta
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from salonbook.auth import hash_password
from salonbook.db import create_db_and_tables, get_session, make_engine
from salonbook.main import app
from salonbook.models import User

PASSWORD = "secret-pass-1"

WEEK_HOURS = {
    day: {"open": "09:00", "close": "17:00", "is_open": True}
    for day in ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
}


def next_monday() -> date:
    today = date.today()
    return today + timedelta(days=(7 - today.weekday()) or 7)


@pytest.fixture
def engine(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'test.db'}")
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine):
    # no lifespan: tables already exist on the test engine
    def get_test_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = get_test_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def login(client):
    def _login(email, password=PASSWORD):
        r = client.post("/auth/login", data={"username": email, "password": password})
        assert r.status_code == 200, r.text
        return {"Authorization": f"Bearer {r.json()['access_token']}"}

    return _login


@pytest.fixture
def register(client, login):
    def _register(email, role, name="", phone=None):
        r = client.post("/users", json={
            "email": email, "password": PASSWORD, "role": role, "name": name, "phone": phone,
        })
        assert r.status_code == 201, r.text
        return r.json()["id"], login(email)

    return _register


@pytest.fixture
def admin_headers(engine, login):
    with Session(engine) as session:
        session.add(User(email="admin@example.com", name="Admin",
                         password_hash=hash_password(PASSWORD), role="admin"))
        session.commit()
    return login("admin@example.com")


@pytest.fixture
def salon(client, register, admin_headers):
    """An approved salon open 09:00-17:00 every day, one stylist, one 45 minute service."""
    owner_id, owner = register("owner@example.com", "salon", name="Olga")
    staff_user_id, staff = register("stylist@example.com", "staff", name="Sam")
    client_id, client_headers = register("client@example.com", "client", name="Cleo", phone="+3611111")

    r = client.post("/salons", headers=owner, json={"name": "Cut & Co", "working_hours": WEEK_HOURS})
    assert r.status_code == 201, r.text
    salon_id = r.json()["id"]
    r = client.patch(f"/salons/{salon_id}/status", headers=admin_headers, json={"status": "approved"})
    assert r.status_code == 200, r.text

    r = client.post(f"/salons/{salon_id}/staff", headers=owner, json={"name": "Sam", "user_id": staff_user_id})
    assert r.status_code == 201, r.text
    staff_id = r.json()["id"]

    r = client.post(f"/salons/{salon_id}/services", headers=owner,
                    json={"name": "Haircut", "duration": 45, "price": 30.0, "staff_ids": [staff_id]})
    assert r.status_code == 201, r.text
    service_id = r.json()["id"]

    return SimpleNamespace(
        id=salon_id,
        staff_id=staff_id,
        service_id=service_id,
        owner=owner,
        owner_id=owner_id,
        staff=staff,
        client=client_headers,
        client_id=client_id,
        admin=admin_headers,
        day=next_monday(),
    )


@pytest.fixture
def book(client, salon):
    def _book(start, headers=None, day=None, **extra):
        body = {
            "salon_id": salon.id,
            "staff_id": salon.staff_id,
            "service_id": salon.service_id,
            "date": (day or salon.day).isoformat(),
            "time": start,
            **extra,
        }
        return client.post("/appointments", headers=headers or salon.client, json=body)

    return _book
