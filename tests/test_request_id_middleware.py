from __future__ import annotations

import logging

from fastapi.testclient import TestClient

from mailgate.core.middleware import resolve_request_id
from mailgate.main import app


client = TestClient(app)


def test_preserves_incoming_request_id_header():
    incoming_id = "test-request-id-123"
    resp = client.get("/health", headers={"X-Request-ID": incoming_id})

    assert resp.status_code == 200
    assert resp.headers.get("X-Request-ID") == incoming_id


def test_generates_request_id_when_missing():
    resp = client.get("/health")

    assert resp.status_code == 200
    generated = resp.headers.get("X-Request-ID")
    assert generated
    assert isinstance(generated, str)
    assert len(generated) > 0

    duration = resp.headers.get("X-Request-Duration-ms")
    assert duration is not None


def test_request_id_on_redirects():
    resp = client.get("/dashboard", follow_redirects=False)

    assert resp.status_code == 303
    assert resp.headers.get("X-Request-ID")


def test_malformed_request_id_is_replaced():
    bad_id = "not valid id with spaces"
    resp = client.get("/health", headers={"X-Request-ID": bad_id})

    assert resp.status_code == 200
    returned = resp.headers.get("X-Request-ID")
    assert returned
    assert returned != bad_id


def test_overlong_request_id_is_replaced():
    resp = client.get("/health", headers={"X-Request-ID": "a" * 200})

    assert resp.headers.get("X-Request-ID") != "a" * 200


def test_resolve_request_id():
    assert resolve_request_id("req-1.2:3_x") == "req-1.2:3_x"
    assert resolve_request_id(None) != resolve_request_id(None)
    assert resolve_request_id("") != ""


def test_access_line_logged(caplog):
    with caplog.at_level(logging.INFO, logger="mailgate.core.middleware"):
        resp = client.get("/login", headers={"X-Request-ID": "access-log-1"})

    assert resp.status_code == 200
    record = next(r for r in caplog.records if r.getMessage() == "http.request")
    assert record.method == "GET"
    assert record.path == "/login"
    assert record.status_code == 200
    assert record.duration_ms >= 0
