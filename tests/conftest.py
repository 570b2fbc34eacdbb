"""
Shared fixtures.

Services talk to motor collections; tests hand them an in-memory stand-in
that implements only the calls the services make.
"""

import copy
from dataclasses import dataclass
from datetime import datetime, timezone

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from tradinta.app import app
from tradinta.auth.helpers import create_access_token, hash_password
from tradinta.config import get_database


@dataclass
class InsertOneResult:
    inserted_id: ObjectId


@dataclass
class UpdateResult:
    matched_count: int
    modified_count: int


def _matches(doc: dict, filters: dict) -> bool:
    for key, cond in filters.items():
        value = doc.get(key)
        if isinstance(cond, dict) and cond and all(k.startswith("$") for k in cond):
            for op, arg in cond.items():
                if op == "$ne":
                    if value == arg:
                        return False
                else:
                    raise NotImplementedError(op)
        elif value != cond:
            return False
    return True


class FakeCursor:
    def __init__(self, docs: list[dict]):
        self._docs = docs
        self._skip = 0
        self._limit = 0
        self._sort: tuple[str, int] | None = None

    def skip(self, n: int):
        self._skip = n
        return self

    def limit(self, n: int):
        self._limit = n
        return self

    def sort(self, key: str, direction: int = 1):
        self._sort = (key, direction)
        return self

    async def __aiter__(self):
        docs = list(self._docs)
        if self._sort:
            # Insertion order breaks ties, newest first when descending.
            key, direction = self._sort
            ranked = sorted(
                enumerate(docs),
                key=lambda pair: (pair[1].get(key), pair[0]),
                reverse=direction < 0,
            )
            docs = [doc for _, doc in ranked]
        docs = docs[self._skip:]
        if self._limit:
            docs = docs[: self._limit]
        for doc in docs:
            yield copy.deepcopy(doc)


class FakeCollection:
    def __init__(self):
        self.docs: list[dict] = []

    async def insert_one(self, doc: dict) -> InsertOneResult:
        stored = copy.deepcopy(doc)
        stored.setdefault("_id", ObjectId())
        self.docs.append(stored)
        return InsertOneResult(stored["_id"])

    async def find_one(self, filters: dict) -> dict | None:
        for doc in self.docs:
            if _matches(doc, filters):
                return copy.deepcopy(doc)
        return None

    def find(self, filters: dict | None = None) -> FakeCursor:
        return FakeCursor([d for d in self.docs if _matches(d, filters or {})])

    async def count_documents(self, filters: dict) -> int:
        return sum(1 for d in self.docs if _matches(d, filters))

    async def update_one(self, filters: dict, update: dict) -> UpdateResult:
        for doc in self.docs:
            if _matches(doc, filters):
                doc.update(copy.deepcopy(update.get("$set", {})))
                return UpdateResult(1, 1)
        return UpdateResult(0, 0)

    async def find_one_and_update(
        self, filters: dict, update: dict, return_document: bool = False
    ) -> dict | None:
        for doc in self.docs:
            if _matches(doc, filters):
                before = copy.deepcopy(doc)
                doc.update(copy.deepcopy(update.get("$set", {})))
                return copy.deepcopy(doc) if return_document else before
        return None


class BrokenCollection(FakeCollection):
    async def insert_one(self, doc: dict) -> InsertOneResult:
        raise ConnectionError("write refused")


class FakeDatabase:
    def __init__(self):
        self.collections: dict[str, FakeCollection] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        return self.collections.setdefault(name, FakeCollection())


@pytest.fixture
def db() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def broken_db(db) -> FakeDatabase:
    """A database whose activity_logs collection refuses every write."""
    db.collections["activity_logs"] = BrokenCollection()
    return db


@pytest.fixture
def make_user(db):
    """Insert a user document and return it (with its ObjectId)."""

    async def _make_user(
        role: str | None = "buyer",
        restricted: list[str] | None = None,
        email: str = "jane@example.com",
        password: str | None = None,
        **extra,
    ) -> dict:
        now = datetime.now(timezone.utc)
        doc = {
            "email": email,
            "name": extra.pop("name", "Jane Wanjiru"),
            "role": role,
            "restricted_permissions": restricted or [],
            "is_active": extra.pop("is_active", True),
            "created_at": now,
            "updated_at": now,
            **extra,
        }
        if password is not None:
            doc["password"] = hash_password(password)
        result = await db["users"].insert_one(doc)
        doc["_id"] = result.inserted_id
        return doc

    return _make_user


@pytest.fixture
def client(db):
    app.dependency_overrides[get_database] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def bearer():
    """Bearer headers carrying only the user's identity."""

    def _bearer(user: dict) -> dict:
        token = create_access_token(str(user["_id"]), email=user.get("email"))
        return {"Authorization": f"Bearer {token}"}

    return _bearer


@pytest.fixture
def auth_headers(db, bearer):
    """Store a user holding `role` (minus `restricted`) and return their headers."""

    def _headers(role: str, restricted: list[str] | None = None, email: str | None = None):
        user = {
            "_id": ObjectId(),
            "email": email or f"{role}@tradinta.com",
            "role": role,
            "restricted_permissions": restricted or [],
            "is_active": True,
        }
        db["users"].docs.append(user)
        return bearer(user)

    return _headers
