# Shared fixtures: an in-memory MongoDB (mongomock) behind the real app.

import copy
from typing import Dict

import mongomock
import pytest
from fastapi.testclient import TestClient

from config import Settings
from main import create_app

SAMPLE_SALE = {
    "items": [
        {"name": "notepad", "tags": ["school", "work"], "price": 1.0, "quantity": 2},
        {"name": "mouse", "tags": ["school", "work", "home"], "price": 2.0, "quantity": 3},
    ],
    "storeLocation": "Singapore",
    "customer": {"gender": "M", "age": 40, "email": "roger@roger.com", "satisfaction": 5},
    "couponUsed": True,
    "purchaseMethod": "Online",
}


@pytest.fixture
def settings() -> Settings:
    return Settings(mongo_uri="mongodb://unused", mongo_dbname="sample_supplies", token_secret="test-secret")


@pytest.fixture
def mongo_client():
    return mongomock.MongoClient()


@pytest.fixture
def app(settings, mongo_client):
    return create_app(settings=settings, client=mongo_client)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db(client, app):
    return app.state.store.db


@pytest.fixture
def sale_payload() -> Dict:
    return copy.deepcopy(SAMPLE_SALE)


@pytest.fixture
def create_sale(client):
    def _create(**overrides) -> str:
        payload = copy.deepcopy(SAMPLE_SALE)
        payload.update(overrides)
        response = client.post("/new", json=payload)
        assert response.status_code == 201, response.text
        return response.json()["id"]

    return _create


@pytest.fixture
def auth_headers(client) -> Dict[str, str]:
    credentials = {"email": "roger@roger.com", "password": "s3cret"}
    assert client.post("/users", json=credentials).status_code == 201
    token = client.post("/login", json=credentials).json()["access_token"]
    return {"Authorization": f"Bearer {token}"}
