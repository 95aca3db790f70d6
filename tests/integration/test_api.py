from fastapi.testclient import TestClient

import src.api.main as m


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ok"
    assert body["store_connected"] is True


def test_config_and_metrics(client):
    r = client.get("/config")
    assert r.status_code == 200
    data = r.json()
    assert data["speech_language"] == "es-ES"
    assert "gemini_model" in data and "min_cv_text_len" in data

    client.get("/api/vacancies")
    mtr = client.get("/metrics")
    assert mtr.status_code == 200
    assert "text/plain" in mtr.headers.get("content-type", "")
    assert "rm_api_requests_total" in mtr.text
    assert "rm_vendor_calls_total" in mtr.text


def test_store_unavailable_returns_503(monkeypatch):
    monkeypatch.setattr(m, "_store", None, raising=True)
    r = TestClient(m.app).get("/api/vacancies")
    assert r.status_code == 503
    assert "detail" in r.json()


def test_init_services_survives_mongo_failure(monkeypatch):
    def boom(url, name):
        raise RuntimeError("no mongo")

    monkeypatch.setattr(m, "_store", None, raising=True)
    monkeypatch.setattr(m, "_blobs", None, raising=True)
    monkeypatch.setattr(m, "_generator", None, raising=True)
    monkeypatch.setattr(m, "_recognizer", None, raising=True)
    monkeypatch.setattr(m.MongoStore, "from_url", staticmethod(boom))
    m.init_services()
    assert m._store is None
    assert m._generator is not None
    assert m._recognizer is not None
