import logging

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

import foodshare.dashboard as dashboard_module
from foodshare.config import settings
from foodshare.main import log_async_error, log_uncaught_exception


@pytest.mark.asyncio
async def test_read_root(client):
    response = await client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "Food Redistribution API"}


@pytest.mark.asyncio
async def test_health(client):
    r = await client.get("/api/health")
    assert r.status_code == 200
    assert r.json()["status"] == "OK"
    assert r.json()["timestamp"].endswith("Z")


@pytest.mark.asyncio
async def test_db_test(client):
    r = await client.get("/api/db-test")
    assert r.status_code == 200
    assert r.json()["message"] == "Database connection successful"


@pytest.mark.asyncio
async def test_db_test_reports_failure(client, monkeypatch):
    async def _broken(self, *args, **kwargs):
        raise ConnectionError("db unreachable")

    monkeypatch.setattr(AsyncSession, "execute", _broken)
    r = await client.get("/api/db-test")
    assert r.status_code == 500
    assert r.json()["status"] == "ERROR"


@pytest.mark.asyncio
async def test_request_id_is_echoed(client):
    r = await client.get("/api/health", headers={"X-Request-Id": "abc-123"})
    assert r.headers["X-Request-Id"] == "abc-123"

    r = await client.get("/api/health")
    assert r.headers["X-Request-Id"]


@pytest.mark.asyncio
async def test_unexpected_error_is_500_with_stack(api, client, monkeypatch):
    async def _explode(db):
        raise RuntimeError("aggregation blew up")

    monkeypatch.setattr(dashboard_module, "platform_overview", _explode)
    token = (await api.register("volunteer"))["token"]

    r = await client.get("/api/dashboard/overview", headers={**api.auth(token), "X-Request-Id": "req-500"})
    assert r.status_code == 500
    assert r.headers["X-Request-Id"] == "req-500"
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    body = r.json()
    assert body["detail"] == "Internal server error"
    assert body["error"] == "aggregation blew up"
    assert any("RuntimeError" in line for line in body["stack"])


@pytest.mark.asyncio
async def test_unexpected_error_hides_stack_in_production(api, client, monkeypatch):
    async def _explode(db):
        raise RuntimeError("secret detail")

    monkeypatch.setattr(dashboard_module, "platform_overview", _explode)
    monkeypatch.setattr(settings, "ENVIRONMENT", "production")
    token = (await api.register("volunteer"))["token"]

    r = await client.get("/api/dashboard/overview", headers=api.auth(token))
    assert r.status_code == 500
    assert r.json() == {"detail": "Internal server error"}


@pytest.mark.asyncio
async def test_security_headers(client):
    r = await client.get("/api/health")
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert r.headers["X-Frame-Options"] == "SAMEORIGIN"
    assert r.headers["Referrer-Policy"] == "no-referrer"
    assert "max-age" in r.headers["Strict-Transport-Security"]

    r = await client.get("/api/food-listings/424242")
    assert r.status_code == 404
    assert r.headers["X-Content-Type-Options"] == "nosniff"


def test_async_errors_are_logged(caplog):
    with caplog.at_level(logging.ERROR, logger="foodshare.main"):
        log_async_error(None, {"message": "Task exception was never retrieved", "exception": ValueError("lost")})
        log_async_error(None, {"message": "Unclosed client session"})

    assert "Task exception was never retrieved" in caplog.records[0].getMessage()
    assert caplog.records[0].exc_info[0] is ValueError
    assert caplog.records[1].exc_info is None


def test_uncaught_exceptions_are_logged(caplog):
    try:
        raise RuntimeError("worker died")
    except RuntimeError as e:
        exc_info = (type(e), e, e.__traceback__)

    with caplog.at_level(logging.CRITICAL, logger="foodshare.main"):
        log_uncaught_exception(*exc_info)

    assert caplog.records[0].levelno == logging.CRITICAL
    assert caplog.records[0].exc_info[1].args == ("worker died",)
