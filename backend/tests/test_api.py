import json

import pytest
from httpx import ASGITransport, AsyncClient

from consultation_system.main import app


def _client() -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.mark.asyncio
async def test_health():
    async with _client() as ac:
        r = await ac.get("/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "OK"
    assert body["service"] == "consultation-system"
    assert body["timestamp"]


@pytest.mark.asyncio
async def test_submit_valid_consultation(app_overrides, data_dir, telegram_stub):
    async with _client() as ac:
        r = await ac.post(
            "/api/consultation",
            json={
                "name": "Ann Lee",
                "email": "ann@example.com",
                "projectDescription": "Need a consulting engagement for migration",
                "serviceType": "advisory",
            },
        )

    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["data"]["status"] == "new"
    assert body["data"]["id"].startswith("cons_")
    assert body["data"]["projectDescription"] == "Need a consulting engagement for migration"
    assert body["message"]

    day_files = list(data_dir.glob("consultations_*.json"))
    assert len(day_files) == 1
    stored = json.loads(day_files[0].read_text(encoding="utf-8"))
    assert len(stored) == 1
    assert stored[0]["email"] == "ann@example.com"
    assert len(telegram_stub.requests) == 1


@pytest.mark.asyncio
async def test_submit_invalid_consultation(app_overrides, data_dir):
    async with _client() as ac:
        r = await ac.post(
            "/api/consultation",
            json={"name": "A", "email": "bad", "projectDescription": "x", "serviceType": ""},
        )

    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert len(set(body["error"].split("; "))) >= 3
    assert "data" not in body
    assert not data_dir.exists()


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [[1, 2, 3], {"name": 42}, "just a string"])
async def test_malformed_body_is_rejected(app_overrides, payload):
    async with _client() as ac:
        r = await ac.post("/api/consultation", json=payload)
    assert r.status_code == 400
    assert r.json()["success"] is False


@pytest.mark.asyncio
async def test_submit_succeeds_when_telegram_is_down(app_overrides, telegram_stub):
    telegram_stub.status_code = 500
    async with _client() as ac:
        r = await ac.post(
            "/api/consultation",
            json={
                "name": "Ann Lee",
                "email": "ann@example.com",
                "projectDescription": "Need a consulting engagement for migration",
                "serviceType": "advisory",
            },
        )
    assert r.status_code == 200
    assert r.json()["success"] is True


@pytest.mark.asyncio
async def test_stats_and_by_date(app_overrides):
    form = {
        "name": "Ann Lee",
        "email": "ann@example.com",
        "projectDescription": "Need a consulting engagement for migration",
        "serviceType": "advisory",
        "company": "ACME",
    }
    async with _client() as ac:
        created = (await ac.post("/api/consultation", json=form)).json()["data"]
        stats = await ac.get("/api/consultation/stats")
        day = created["createdAt"][:10]
        listed = await ac.get(f"/api/consultation/by-date/{day}")
        empty = await ac.get("/api/consultation/by-date/2001-01-01")

    assert stats.status_code == 200
    assert stats.json() == {
        "success": True,
        "data": {"total": 1, "today": 1, "thisWeek": 1, "thisMonth": 1},
    }

    assert listed.status_code == 200
    assert listed.json()["data"] == [created]

    assert empty.status_code == 200
    assert empty.json() == {"success": True, "data": []}


@pytest.mark.asyncio
@pytest.mark.parametrize("day", ["19-10-2026", "2026-13-01", "2026-1-5", "latest"])
async def test_by_date_rejects_bad_dates(app_overrides, day):
    async with _client() as ac:
        r = await ac.get(f"/api/consultation/by-date/{day}")
    assert r.status_code == 400
    assert r.json()["success"] is False


@pytest.mark.asyncio
async def test_telegram_check(app_overrides, telegram_stub):
    async with _client() as ac:
        ok = await ac.post("/api/test-telegram")
        telegram_stub.status_code = 403
        failed = await ac.post("/api/test-telegram")

    assert ok.status_code == 200
    assert ok.json()["success"] is True
    assert failed.status_code == 500
    assert failed.json()["success"] is False
