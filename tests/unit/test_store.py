from datetime import datetime, timedelta, timezone

import mongomock
import pytest
from bson import ObjectId
from mongomock.gridfs import enable_gridfs_integration

import src.data.store as store_mod
from src.data.store import MongoStore, GridFSBlobStore, VACANCIES, INTERVIEWS

enable_gridfs_integration()


@pytest.fixture()
def db():
    return mongomock.MongoClient()["reclutamiento_test"]


def test_from_url_uses_named_database(monkeypatch):
    monkeypatch.setattr(store_mod, "MongoClient", mongomock.MongoClient)
    s = MongoStore.from_url("mongodb://localhost:27017", "rh")
    assert s.db.name == "rh"


def test_insert_get_update_delete(db):
    s = MongoStore(db)
    vid = s.insert(VACANCIES, {"puesto": "Backend"})
    assert isinstance(vid, str)
    assert s.get(VACANCIES, vid)["puesto"] == "Backend"

    assert s.update(VACANCIES, vid, {"puesto": "Backend Sr"}) is True
    assert s.get(VACANCIES, vid)["puesto"] == "Backend Sr"
    assert s.update(VACANCIES, "nope", {"puesto": "x"}) is False

    assert s.delete(VACANCIES, vid) is True
    assert s.get(VACANCIES, vid) is None
    assert s.delete(VACANCIES, vid) is False


def test_find_sorts_newest_first_and_by_several_keys(db):
    s = MongoStore(db)
    t0 = datetime(2025, 1, 1, tzinfo=timezone.utc)
    for i, puesto in enumerate(["A", "B", "C"]):
        s.insert(VACANCIES, {"puesto": puesto, "estado": "Abierta", "fechaCreacion": t0 + timedelta(days=i)})
    s.insert(VACANCIES, {"puesto": "D", "estado": "Cerrada", "fechaCreacion": t0})

    docs = s.find(VACANCIES, {"estado": "Abierta"}, sort=[("fechaCreacion", -1)])
    assert [d["puesto"] for d in docs] == ["C", "B", "A"]

    s.insert("candidates", {"apellido": "Ruiz", "nombre": "Luis"})
    s.insert("candidates", {"apellido": "García", "nombre": "Marta"})
    s.insert("candidates", {"apellido": "García", "nombre": "Ana"})
    names = [d["nombre"] for d in s.find("candidates", sort=[("apellido", 1), ("nombre", 1)])]
    assert names == ["Ana", "Marta", "Luis"]


def test_increment_never_goes_below_zero(db):
    s = MongoStore(db)
    vid = s.insert(VACANCIES, {"candidatos": 0})
    assert s.increment(VACANCIES, vid, "candidatos", -1) is False
    assert s.get(VACANCIES, vid)["candidatos"] == 0

    assert s.increment(VACANCIES, vid, "candidatos", 1) is True
    assert s.increment(VACANCIES, vid, "candidatos", -1) is True
    assert s.get(VACANCIES, vid)["candidatos"] == 0
    assert s.increment(VACANCIES, "nope", "candidatos", 1) is False


def test_upsert_replaces_whole_document(db):
    s = MongoStore(db)
    s.upsert(INTERVIEWS, "v:c:0", {"_id": "ignored", "id": 0, "question": "q", "response": ""})
    s.upsert(INTERVIEWS, "v:c:0", {"id": 0, "question": "q", "response": "r"})
    docs = s.find(INTERVIEWS)
    assert len(docs) == 1
    assert docs[0]["_id"] == "v:c:0"
    assert docs[0]["response"] == "r"


def test_gridfs_put_and_get(db):
    blobs = GridFSBlobStore(db)
    file_id = blobs.put("cvs/v1/1_ana.pdf", b"%PDF-1.4 data", "application/pdf")
    out = blobs.get(file_id)
    assert out.data == b"%PDF-1.4 data"
    assert out.filename == "cvs/v1/1_ana.pdf"
    assert out.content_type == "application/pdf"


def test_gridfs_get_invalid_or_missing_id(db):
    blobs = GridFSBlobStore(db)
    assert blobs.get("no-es-un-objectid") is None
    assert blobs.get(str(ObjectId())) is None
