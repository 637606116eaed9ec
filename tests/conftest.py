"""Shared test fixtures."""

import pytest
from fastapi.testclient import TestClient

from config import Settings
from database import InMemoryStore
from main import create_app

PASSWORD = "correct-horse"


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, add_programs=False, use_in_memory_store=True)


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def client(settings: Settings, store: InMemoryStore):
    with TestClient(create_app(settings=settings, store=store)) as test_client:
        yield test_client


@pytest.fixture
def registered(client: TestClient) -> dict:
    """Register `alice` and return the registration response body."""
    response = client.post("/register", json={"username": "alice", "password": PASSWORD})
    assert response.status_code == 201
    return response.json()["response"]
