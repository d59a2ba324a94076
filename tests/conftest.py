"""
Shared pytest fixtures.

Uses a throwaway SQLite file so no real tracker data is touched. The store is
wiped before every test because origin date and streak are singletons.
"""
import base64
import os

os.environ["DATABASE_URL"] = "sqlite:///./test_pushups.db"
os.environ["USERNAME"] = "admin"
os.environ["PASSWORD"] = "admin"

import pytest
from fastapi.testclient import TestClient

from app.db.base import Base, SessionLocal, engine, get_db
from app.main import app
from app.models.record import KVRecord

AUTH_HEADERS = {
    "Authorization": "Basic " + base64.b64encode(b"admin:admin").decode("ascii"),
}


def override_get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session", autouse=True)
def create_tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def clean_store(create_tables):
    db = SessionLocal()
    try:
        db.query(KVRecord).delete()
        db.commit()
    finally:
        db.close()


@pytest.fixture()
def db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(db):
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app, headers=AUTH_HEADERS) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def anon_client():
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
