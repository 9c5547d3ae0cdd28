# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.database import ProductStore, SEED_PRODUCTS
from app.main import create_app

API_KEY = "test-key"


@pytest.fixture
def store():
    return ProductStore(seed=SEED_PRODUCTS)


@pytest.fixture
def app(store):
    return create_app(Settings(api_key=API_KEY), store=store)


@pytest.fixture
def client(app):
    # every request carries the key; auth tests build their own clients
    return TestClient(app, headers={"x-api-key": API_KEY})


@pytest.fixture
def anon_client(app):
    return TestClient(app)
