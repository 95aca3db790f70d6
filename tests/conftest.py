import copy
import uuid

import pytest
from fastapi.testclient import TestClient

import src.api.main as m
from src.data.store import StoredFile
from src.interview.capture import CaptureRegistry
from src.services.speech import RecognitionError


class FakeStore:
    """Mesma interface do MongoStore, em memória."""

    def __init__(self):
        self.collections = {}

    def _col(self, name):
        return self.collections.setdefault(name, {})

    def ping(self):
        return True

    def insert(self, collection, doc):
        doc = copy.deepcopy(doc)
        doc.setdefault("_id", uuid.uuid4().hex)
        self._col(collection)[doc["_id"]] = doc
        return doc["_id"]

    def get(self, collection, doc_id):
        doc = self._col(collection).get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    def find(self, collection, filter=None, sort=None):
        filter = filter or {}
        out = [
            copy.deepcopy(d)
            for d in self._col(collection).values()
            if all(d.get(k) == v for k, v in filter.items())
        ]
        for key, direction in reversed(sort or []):
            out.sort(key=lambda d: d.get(key), reverse=direction < 0)
        return out

    def update(self, collection, doc_id, fields):
        doc = self._col(collection).get(doc_id)
        if doc is None:
            return False
        doc.update(copy.deepcopy(fields))
        return True

    def upsert(self, collection, doc_id, doc):
        body = {k: v for k, v in copy.deepcopy(doc).items() if k != "_id"}
        body["_id"] = doc_id
        self._col(collection)[doc_id] = body

    def increment(self, collection, doc_id, field, by=1):
        doc = self._col(collection).get(doc_id)
        if doc is None:
            return False
        if by < 0 and doc.get(field, 0) < -by:
            return False
        doc[field] = doc.get(field, 0) + by
        return True

    def delete(self, collection, doc_id):
        return self._col(collection).pop(doc_id, None) is not None


class FakeBlobs:
    def __init__(self):
        self.files = {}

    def put(self, path, data, content_type):
        file_id = uuid.uuid4().hex[:24]
        self.files[file_id] = StoredFile(data=data, filename=path, content_type=content_type)
        return file_id

    def get(self, file_id):
        return self.files.get(file_id)


class FakeGenerator:
    def __init__(self, reply="Resumen generado."):
        self.reply = reply
        self.calls = []

    def generate(self, prompt, text=None):
        self.calls.append((prompt, text))
        return self.reply


class FakeRecognizer:
    """Devolve os textos da fila; ``None`` simula falha de reconhecimento."""

    def __init__(self, results=None):
        self.results = list(results or [])
        self.calls = 0

    def recognize_once(self, audio):
        self.calls += 1
        text = self.results.pop(0) if self.results else None
        if text is None:
            raise RecognitionError("no speech could be recognized")
        return text


@pytest.fixture()
def store():
    return FakeStore()


@pytest.fixture()
def blobs():
    return FakeBlobs()


@pytest.fixture()
def generator():
    return FakeGenerator()


@pytest.fixture()
def recognizer():
    return FakeRecognizer()


@pytest.fixture()
def client(monkeypatch, store, blobs, generator, recognizer):
    monkeypatch.setattr(m, "_store", store, raising=True)
    monkeypatch.setattr(m, "_blobs", blobs, raising=True)
    monkeypatch.setattr(m, "_generator", generator, raising=True)
    monkeypatch.setattr(m, "_recognizer", recognizer, raising=True)
    monkeypatch.setattr(m, "_captures", CaptureRegistry(), raising=True)
    return TestClient(m.app)
