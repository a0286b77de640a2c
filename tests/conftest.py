import copy

import pytest

import firebase_store


class FakeSnapshot:
    def __init__(self, doc_id, data):
        self.id = doc_id
        self._data = data

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return copy.deepcopy(self._data)


class FakeDocument:
    def __init__(self, docs, doc_id):
        self._docs = docs
        self.id = doc_id

    def get(self):
        return FakeSnapshot(self.id, self._docs.get(self.id))

    def set(self, data, merge=False):
        if merge and self.id in self._docs:
            self._docs[self.id].update(copy.deepcopy(data))
        else:
            self._docs[self.id] = copy.deepcopy(data)

    def delete(self):
        self._docs.pop(self.id, None)


class FakeCollection:
    def __init__(self, docs):
        self._docs = docs

    def document(self, doc_id):
        return FakeDocument(self._docs, doc_id)


class FakeFirestore:
    """In-memory stand-in for the handful of Firestore calls the store makes."""

    def __init__(self):
        self.collections = {}

    def collection(self, name):
        return FakeCollection(self.collections.setdefault(name, {}))


@pytest.fixture
def fake_db(monkeypatch):
    db = FakeFirestore()
    monkeypatch.setattr(firebase_store, "get_db", lambda: db)
    return db


@pytest.fixture
def client(fake_db):
    from fastapi.testclient import TestClient

    from main import app

    return TestClient(app)
