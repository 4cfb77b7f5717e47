"""
Tests for the HTTP and scheduled triggers
"""

import asyncio
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient

from pricesync import main as runner
from pricesync.api.app import FAILURE_MESSAGE, SUCCESS_MESSAGE, app
from pricesync.core.errors import ConfigError, SheetError
from pricesync.core.settings import Settings
from pricesync.scheduler.cron import JOB_ID, build_scheduler, build_trigger, crontab_day_of_week
from pricesync.scheduler.jobs import scheduled_price_update

COLOMBO = ZoneInfo("Asia/Colombo")

client = TestClient(app)


@pytest.fixture
def update_calls(monkeypatch):
    calls = []

    async def fake_update(*args, **kwargs):
        calls.append(1)

    monkeypatch.setattr(runner, "run_price_update", fake_update)
    return calls


@pytest.fixture
def failing_update(monkeypatch):
    async def fake_update(*args, **kwargs):
        raise SheetError("Failed to read Sheet1!B2:B", range_name="Sheet1!B2:B", operation="read")

    monkeypatch.setattr(runner, "run_price_update", fake_update)


def test_http_trigger_success(update_calls):
    response = client.post("/update-prices")

    assert response.status_code == 200
    assert response.text == SUCCESS_MESSAGE
    assert update_calls == [1]


def test_http_trigger_accepts_get(update_calls):
    assert client.get("/update-prices").status_code == 200


def test_http_trigger_failure_returns_500(failing_update):
    response = client.post("/update-prices")

    assert response.status_code == 500
    assert response.text == FAILURE_MESSAGE


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_scheduled_job_runs_update(update_calls, monkeypatch):
    class Result:
        succeeded = 1
        total = 1

    async def fake_update(*args, **kwargs):
        update_calls.append(1)
        return Result()

    monkeypatch.setattr(runner, "run_price_update", fake_update)

    asyncio.run(scheduled_price_update())
    assert update_calls == [1]


def test_scheduled_job_swallows_failures(failing_update):
    assert asyncio.run(scheduled_price_update()) is None


def test_crontab_weekdays_become_names():
    assert crontab_day_of_week("1-5") == "mon-fri"
    assert crontab_day_of_week("0,6") == "sun,sat"
    assert crontab_day_of_week("7") == "sun"
    assert crontab_day_of_week("*") == "*"
    assert crontab_day_of_week("1-5/2") == "mon-fri/2"
    assert crontab_day_of_week("mon-fri") == "mon-fri"


def test_weekday_trigger_fires_on_weekdays_only():
    trigger = build_trigger("45 14 * * 1-5", "Asia/Colombo")

    friday_morning = datetime(2026, 10, 16, 10, 0, tzinfo=COLOMBO)
    saturday = datetime(2026, 10, 17, 15, 0, tzinfo=COLOMBO)

    assert trigger.get_next_fire_time(None, friday_morning) == datetime(2026, 10, 16, 14, 45, tzinfo=COLOMBO)
    assert trigger.get_next_fire_time(None, saturday) == datetime(2026, 10, 19, 14, 45, tzinfo=COLOMBO)


def test_invalid_cron_is_a_config_error():
    with pytest.raises(ConfigError):
        build_trigger("45 14 * *", "Asia/Colombo")
    with pytest.raises(ConfigError):
        build_trigger("99 14 * * 1-5", "Asia/Colombo")


def test_build_scheduler_registers_single_job(monkeypatch):
    monkeypatch.setenv("UPDATE_CRON", "0 9 * * 1")
    monkeypatch.setenv("UPDATE_TIMEZONE", "UTC")

    scheduler = build_scheduler(Settings())
    job = scheduler.get_job(JOB_ID)

    assert job is not None
    assert job.func is scheduled_price_update
    assert job.max_instances == 1
    assert job.coalesce is True
    assert len(scheduler.get_jobs()) == 1


def test_api_starts_with_invalid_settings(monkeypatch):
    monkeypatch.setenv("SCHEDULER_ENABLED", "true")
    monkeypatch.setenv("MAX_CONCURRENCY", "four")

    with TestClient(app) as started:
        assert started.get("/health").status_code == 200

    assert getattr(app.state, "scheduler", None) is None
