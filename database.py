"""
Document store access for users and programs.

MongoStore talks to MongoDB through pymongo; InMemoryStore keeps the same
interface in plain dicts for development and tests. The store in use is
created once per process by open_store() and handed to routes via get_store.
"""
from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Protocol

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import Request
from pymongo import MongoClient, ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from config import Settings
from errors import ConflictError, StoreError
from schemas import ActiveProgram, Program, User

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_NAME = "hobit-backend"


class Store(Protocol):
    """Interface the routes and services rely on."""

    def insert_user(self, user: User) -> User:
        ...

    def find_user_by_username(self, username: str) -> Optional[User]:
        ...

    def find_user_by_token(self, access_token: str) -> Optional[User]:
        ...

    def get_user(self, user_id: str) -> Optional[User]:
        ...

    def set_active_program(self, username: str, active: ActiveProgram) -> Optional[User]:
        ...

    def push_completed_program(self, username: str, program_name: str) -> Optional[User]:
        ...

    def delete_programs(self) -> int:
        ...

    def insert_program(self, program: Program) -> str:
        ...

    def list_programs(self) -> List[Program]:
        ...

    def close(self) -> None:
        ...


@contextmanager
def _store_errors(action: str, conflict: Optional[str] = None) -> Iterator[None]:
    """Duplicate keys become a ConflictError only when `conflict` is given."""
    try:
        yield
    except PyMongoError as exc:
        if conflict is not None and isinstance(exc, DuplicateKeyError):
            raise ConflictError(conflict) from exc
        logger.exception("Store failure while trying to %s", action)
        raise StoreError(f"Could not {action}: {exc}") from exc


def _user_from_doc(doc: Optional[dict]) -> Optional[User]:
    if doc is None:
        return None
    doc = dict(doc)
    doc["id"] = str(doc.pop("_id"))
    return User.model_validate(doc)


class MongoStore:
    def __init__(self, url: str, client: Optional[MongoClient] = None):
        self.client = client if client is not None else MongoClient(url)
        self.db = self.client.get_default_database(DEFAULT_DATABASE_NAME)
        self.users = self.db["users"]
        self.programs = self.db["programs"]

    def ensure_indexes(self) -> None:
        with _store_errors("create indexes"):
            self.users.create_index("username", unique=True)
            self.users.create_index("accessToken")

    def insert_user(self, user: User) -> User:
        doc = user.model_dump(by_alias=True, exclude={"id"})
        with _store_errors("save user", conflict="Username already exists"):
            result = self.users.insert_one(doc)
        return user.model_copy(update={"id": str(result.inserted_id)})

    def find_user_by_username(self, username: str) -> Optional[User]:
        with _store_errors("look up user"):
            return _user_from_doc(self.users.find_one({"username": username}))

    def find_user_by_token(self, access_token: str) -> Optional[User]:
        with _store_errors("look up access token"):
            return _user_from_doc(self.users.find_one({"accessToken": access_token}))

    def get_user(self, user_id: str) -> Optional[User]:
        try:
            oid = ObjectId(user_id)
        except (InvalidId, TypeError):
            return None
        with _store_errors("look up user"):
            return _user_from_doc(self.users.find_one({"_id": oid}))

    def set_active_program(self, username: str, active: ActiveProgram) -> Optional[User]:
        with _store_errors("update active program"):
            doc = self.users.find_one_and_update(
                {"username": username},
                {"$set": {"programs.activeProgram": active.model_dump(by_alias=True)}},
                return_document=ReturnDocument.AFTER,
            )
        return _user_from_doc(doc)

    def push_completed_program(self, username: str, program_name: str) -> Optional[User]:
        with _store_errors("add completed program"):
            doc = self.users.find_one_and_update(
                {"username": username},
                {"$push": {"programs.completedPrograms": program_name}},
                return_document=ReturnDocument.AFTER,
            )
        return _user_from_doc(doc)

    def delete_programs(self) -> int:
        with _store_errors("delete programs"):
            return self.programs.delete_many({}).deleted_count

    def insert_program(self, program: Program) -> str:
        with _store_errors(f"save program {program.category!r}"):
            result = self.programs.insert_one(program.model_dump())
        return str(result.inserted_id)

    def list_programs(self) -> List[Program]:
        with _store_errors("list programs"):
            docs = list(self.programs.find({}, {"_id": 0}).sort("_id", 1))
        return [Program.model_validate(doc) for doc in docs]

    def close(self) -> None:
        self.client.close()


class InMemoryStore:
    """Simple in-memory store for development and tests."""

    def __init__(self):
        self.users: Dict[str, User] = {}
        self.programs: Dict[str, Program] = {}

    def _by(self, field: str, value) -> Optional[User]:
        # Routes run in a threadpool, snapshot before iterating
        for user in list(self.users.values()):
            if getattr(user, field) == value:
                return user
        return None

    def insert_user(self, user: User) -> User:
        if self._by("username", user.username) is not None:
            raise ConflictError("Username already exists")
        stored = user.model_copy(update={"id": uuid.uuid4().hex}, deep=True)
        self.users[stored.id] = stored
        return stored.model_copy(deep=True)

    def find_user_by_username(self, username: str) -> Optional[User]:
        user = self._by("username", username)
        return user.model_copy(deep=True) if user else None

    def find_user_by_token(self, access_token: str) -> Optional[User]:
        user = self._by("access_token", access_token)
        return user.model_copy(deep=True) if user else None

    def get_user(self, user_id: str) -> Optional[User]:
        user = self.users.get(user_id)
        return user.model_copy(deep=True) if user else None

    def set_active_program(self, username: str, active: ActiveProgram) -> Optional[User]:
        user = self._by("username", username)
        if user is None:
            return None
        user.programs.active_program = active.model_copy()
        return user.model_copy(deep=True)

    def push_completed_program(self, username: str, program_name: str) -> Optional[User]:
        user = self._by("username", username)
        if user is None:
            return None
        user.programs.completed_programs.append(program_name)
        return user.model_copy(deep=True)

    def delete_programs(self) -> int:
        count = len(self.programs)
        self.programs.clear()
        return count

    def insert_program(self, program: Program) -> str:
        program_id = uuid.uuid4().hex
        self.programs[program_id] = program.model_copy(deep=True)
        return program_id

    def list_programs(self) -> List[Program]:
        return [program.model_copy(deep=True) for program in list(self.programs.values())]

    def close(self) -> None:
        pass


def open_store(settings: Settings) -> Store:
    if settings.use_in_memory_store:
        logger.info("Using in-memory store")
        return InMemoryStore()
    store = MongoStore(settings.mongo_url)
    store.ensure_indexes()
    logger.info("Connected to MongoDB database %s", store.db.name)
    return store


def get_store(request: Request) -> Store:
    return request.app.state.store
