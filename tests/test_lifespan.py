"""Tests for the store lifecycle managed by the app."""

import pytest
from fastapi.testclient import TestClient

import main
from config import Settings
from database import InMemoryStore
from errors import StoreError
from main import create_app


class ClosingStore(InMemoryStore):
    def __init__(self):
        super().__init__()
        self.closed = False

    def close(self):
        self.closed = True


class FailingProgramStore(ClosingStore):
    def insert_program(self, program):
        raise StoreError(f"Could not save program {program.category!r}")


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, use_in_memory_store=True, **overrides)


def test_opens_store_from_settings_and_clears_it_at_shutdown():
    app = create_app(settings=_settings())

    with TestClient(app) as client:
        assert isinstance(app.state.store, InMemoryStore)
        response = client.post("/register", json={"username": "alice", "password": "correct-horse"})
        assert response.status_code == 201

    assert app.state.store is None


def test_owned_store_is_closed_at_shutdown(monkeypatch):
    opened = []

    def open_recording_store(settings):
        opened.append(ClosingStore())
        return opened[-1]

    monkeypatch.setattr(main, "open_store", open_recording_store)
    app = create_app(settings=_settings())

    with TestClient(app):
        assert app.state.store is opened[0]
        assert opened[0].closed is False

    assert opened[0].closed is True


def test_owned_store_is_closed_when_program_load_fails(monkeypatch):
    store = FailingProgramStore()
    monkeypatch.setattr(main, "open_store", lambda settings: store)
    app = create_app(settings=_settings(add_programs=True))

    with pytest.raises(StoreError):
        with TestClient(app):
            pass

    assert store.closed is True


def test_injected_store_is_left_open():
    store = ClosingStore()

    with TestClient(create_app(settings=_settings(), store=store)):
        pass

    assert store.closed is False
