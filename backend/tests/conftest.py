import copy
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from pymongo import ReturnDocument

from users_api.database import get_users_collection
from users_api.main import app
from users_api.users.repository import UserRepository

_MISSING = object()


def _lookup(document, path):
    value = document
    for part in path.split("."):
        if not isinstance(value, dict) or part not in value:
            return _MISSING
        value = value[part]
    return value


def _matches(document, query):
    return all(_lookup(document, path) == value for path, value in query.items())


def _project(document, projection):
    projected = copy.deepcopy(document)
    if projection is None:
        return projected
    for path, include in projection.items():
        assert not include, "only exclusion projections are supported"
        *parents, leaf = path.split(".")
        target = projected
        for part in parents:
            target = target.get(part)
            if not isinstance(target, dict):
                break
        else:
            target.pop(leaf, None)
    return projected


def _set(document, path, value):
    *parents, leaf = path.split(".")
    target = document
    for part in parents:
        target = target.setdefault(part, {})
    target[leaf] = value


class FakeCursor:
    def __init__(self, documents):
        self._documents = documents

    async def to_list(self, length=None):
        if length is None:
            return list(self._documents)
        return self._documents[:length]


class FakeCollection:
    """In-memory stand-in for an AsyncCollection.

    Supports equality filters on dotted paths, exclusion projections and
    ``$set`` updates, which is all the repository issues.
    """

    full_name = "users_api.users"

    def __init__(self):
        self.documents = []

    def find(self, query, projection=None):
        return FakeCursor(
            [_project(d, projection) for d in self.documents if _matches(d, query)]
        )

    async def find_one(self, query, projection=None):
        for document in self.documents:
            if _matches(document, query):
                return _project(document, projection)
        return None

    async def insert_one(self, document):
        document.setdefault("_id", ObjectId())
        self.documents.append(copy.deepcopy(document))
        return SimpleNamespace(inserted_id=document["_id"])

    async def find_one_and_delete(self, query, projection=None):
        for index, document in enumerate(self.documents):
            if _matches(document, query):
                del self.documents[index]
                return _project(document, projection)
        return None

    async def find_one_and_update(
        self, query, update, projection=None, return_document=ReturnDocument.BEFORE
    ):
        for document in self.documents:
            if _matches(document, query):
                before = _project(document, projection)
                for path, value in update["$set"].items():
                    _set(document, path, copy.deepcopy(value))
                if return_document == ReturnDocument.AFTER:
                    return _project(document, projection)
                return before
        return None


@pytest.fixture
def fake_collection():
    return FakeCollection()


@pytest.fixture
def mock_collection():
    """Create a mock users collection."""
    collection = MagicMock()
    collection.find_one = AsyncMock()
    collection.insert_one = AsyncMock()
    collection.find_one_and_delete = AsyncMock()
    collection.find_one_and_update = AsyncMock()
    collection.create_index = AsyncMock()
    return collection


@pytest.fixture
def repo(fake_collection):
    return UserRepository(fake_collection)


@pytest.fixture
def client(fake_collection):
    """Create a test client backed by the in-memory collection."""
    app.dependency_overrides[get_users_collection] = lambda: fake_collection
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()

