import logging
from datetime import datetime

import pytest
from fastapi.testclient import TestClient

import storage
from db import SessionLocal, engine
from lookups import SqlLookups, StoreError
from main import app
from models import Attraction, Park, ParkCamera, ParkPathPrefix, Photo


@pytest.fixture()
def client(setup_database):
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def sample_park(setup_database):
    session = SessionLocal()
    park = Park(slug="plose", name="Plose")
    session.add(park)
    session.commit()
    attraction = Attraction(park_id=park.id, slug="plosebob", name="Plosebob")
    session.add(attraction)
    session.commit()
    session.add(ParkPathPrefix(park_id=park.id, path_prefix="plose-plosebob"))
    session.add(ParkCamera(park_id=park.id, customer_code="1234", camera_name="Kurve 3", attraction_id=attraction.id))
    session.commit()
    ids = {"park": park.id, "attraction": attraction.id}
    session.close()
    return ids


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_preview_parse(client, sample_park):
    resp = client.get("/admin/preview-parse", params={"path": "plose-plosebob/1963186224002020.jpg"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["ok"] is True
    data = body["data"]
    assert data["prefix"] == "plose-plosebob"
    assert data["customer_code"] == "1234"
    assert data["legacy_customer_code"] == "1963"
    assert data["time_code"] == "18622400"
    assert data["file_code"] == "2020"
    assert data["speed_kmh"] == 0
    assert data["matched_park_id"] == sample_park["park"]
    assert data["matched_park_name"] == "Plose"
    assert data["matched_customer_code"] == "1234"
    assert data["matched_attraction_id"] == sample_park["attraction"]
    assert data["matched_attraction_name"] == "Plosebob"


def test_preview_parse_unknown_prefix(client, sample_park):
    resp = client.get("/admin/preview-parse", params={"path": "nowhere/foo_S0500.jpg"})

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["speed_kmh"] == pytest.approx(5.0)
    assert data["matched_park_id"] is None
    assert data["matched_attraction_id"] is None


@pytest.mark.parametrize("params", [{}, {"path": ""}, {"path": "   "}])
def test_preview_parse_requires_path(client, params):
    resp = client.get("/admin/preview-parse", params=params)

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Missing ?path="


def test_preview_parse_store_failure(client, monkeypatch, caplog):
    def broken(self, prefix):
        raise StoreError("database is down")

    monkeypatch.setattr(SqlLookups, "find_active_prefix", broken)

    with caplog.at_level(logging.WARNING, logger="parkphoto"):
        resp = client.get("/admin/preview-parse", params={"path": "plose-plosebob/1963186224002020.jpg"})

    assert resp.status_code == 503
    failures = [r for r in caplog.records if "database is down" in r.getMessage()]
    assert len(failures) == 1
    assert failures[0].levelno == logging.WARNING
    assert failures[0].exc_info is None


def test_camera_photos_with_urls(client, sample_park, monkeypatch):
    park_id = sample_park["park"]
    session = SessionLocal()
    session.add_all(
        [
            Photo(park_id=park_id, camera_code="1234", captured_at=datetime(2024, 5, 1, 10, 0),
                  storage_bucket="private", storage_path="plose/a.jpg"),
            Photo(park_id=park_id, camera_code="1234", captured_at=datetime(2024, 5, 1, 11, 0),
                  storage_bucket="public", storage_path="plose/b.jpg"),
        ]
    )
    session.commit()
    session.close()

    sign_calls = []

    def fake_signed(bucket, paths, ttl_seconds):
        sign_calls.append((bucket, list(paths), ttl_seconds))
        if bucket == "private":
            return {path: f"https://signed/{path}" for path in paths}
        return {path: None for path in paths}

    monkeypatch.setattr(storage, "create_signed_urls", fake_signed)
    monkeypatch.setattr(storage, "get_public_url", lambda bucket, path: f"https://public/{bucket}/{path}")

    resp = client.get(f"/parks/{park_id}/cameras/1234/photos")

    assert resp.status_code == 200
    rows = resp.json()
    assert [r["storage_path"] for r in rows] == ["plose/b.jpg", "plose/a.jpg"]
    assert rows[0]["image_url"] == "https://public/public/plose/b.jpg"
    assert rows[1]["image_url"] == "https://signed/plose/a.jpg"
    assert rows[0]["captured_at"].startswith("2024-05-01T11:00")
    assert sorted(sign_calls) == [
        ("private", ["plose/a.jpg"], 1800),
        ("public", ["plose/b.jpg"], 1800),
    ]


def test_camera_photos_empty(client, sample_park):
    resp = client.get(f"/parks/{sample_park['park']}/cameras/9999/photos")

    assert resp.status_code == 200
    assert resp.json() == []


def test_camera_photos_store_failure(client, sample_park):
    Photo.__table__.drop(bind=engine)

    resp = client.get(f"/parks/{sample_park['park']}/cameras/1234/photos")

    assert resp.status_code == 503
