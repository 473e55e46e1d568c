import pytest

from app.core.config import settings
from app.db import indexes
from app.services import session_service
from app.services.session_service import MemorySessionStore, MongoSessionStore
from tests.conftest import run


class FakeSessionsCollection:
    """In-memory stand-in for the motor 'sessions' collection."""

    def __init__(self):
        self.docs = []
        self.indexes = []

    def _find(self, query):
        for doc in self.docs:
            if all(doc.get(field) == value for field, value in query.items()):
                return doc
        return None

    async def find_one(self, query):
        doc = self._find(query)
        return dict(doc) if doc else None

    async def update_one(self, query, update, upsert=False):
        doc = self._find(query)
        if doc is None:
            if not upsert:
                return
            doc = dict(query)
            doc.update(update.get("$setOnInsert", {}))
            self.docs.append(doc)
        doc.update(update.get("$set", {}))

    async def delete_one(self, query):
        doc = self._find(query)
        if doc is not None:
            self.docs.remove(doc)

    async def create_index(self, keys, **options):
        self.indexes.append((keys, options))
        return options.get("name")


@pytest.fixture
def collection(monkeypatch):
    fake = FakeSessionsCollection()
    monkeypatch.setattr(session_service, "get_sessions_collection", lambda: fake)
    monkeypatch.setattr(indexes, "get_sessions_collection", lambda: fake)
    return fake


def test_mongo_store_keeps_one_document_per_session(collection):
    store = MongoSessionStore()

    run(store.set("s1", "user", {"id": "u1", "enrolledCourses": [101]}))
    run(store.set("s1", "token", "tok"))

    assert len(collection.docs) == 1
    doc = collection.docs[0]
    assert doc["session_id"] == "s1"
    assert set(doc) == {"session_id", "user", "token", "created_at", "updated_at"}
    assert run(store.get("s1", "user")) == {"id": "u1", "enrolledCourses": [101]}
    assert run(store.get("s1", "token")) == "tok"


def test_mongo_store_overwrites_value(collection):
    store = MongoSessionStore()
    run(store.set("s1", "user", {"id": "u1", "enrolledCourses": []}))
    created_at = collection.docs[0]["created_at"]

    run(store.set("s1", "user", {"id": "u1", "enrolledCourses": [101]}))

    assert run(store.get("s1", "user"))["enrolledCourses"] == [101]
    assert collection.docs[0]["created_at"] == created_at


def test_mongo_store_unknown_session(collection):
    assert run(MongoSessionStore().get("nobody", "user")) is None


def test_mongo_store_clear(collection):
    store = MongoSessionStore()
    run(store.set("s1", "token", "tok"))
    run(store.set("s2", "token", "other"))

    run(store.clear("s1"))

    assert run(store.get("s1", "token")) is None
    assert run(store.get("s2", "token")) == "other"


@pytest.mark.parametrize("store_class", [MemorySessionStore, MongoSessionStore])
def test_only_user_and_token_keys(collection, store_class):
    store = store_class()
    with pytest.raises(KeyError):
        run(store.set("s1", "cart", []))
    with pytest.raises(KeyError):
        run(store.get("s1", "cart"))
    assert collection.docs == []


def test_create_indexes(collection, monkeypatch):
    monkeypatch.setattr(settings, "SESSION_TTL_DAYS", 7)

    run(indexes.create_indexes())

    assert collection.indexes == [
        ("session_id", {"unique": True, "name": "session_id_unique"}),
        ("updated_at", {"expireAfterSeconds": 7 * 24 * 3600, "name": "session_ttl_idx"}),
    ]


def test_create_indexes_without_database(monkeypatch):
    def not_connected():
        raise RuntimeError("Database not initialized. Call connect_to_mongo() during startup.")

    monkeypatch.setattr(indexes, "get_sessions_collection", not_connected)

    with pytest.raises(RuntimeError):
        run(indexes.create_indexes())
