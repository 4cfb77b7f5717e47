"""
Standalone scheduler process for the weekday price update.

Usage:
    python -m pricesync.scheduler.cron         # Wait for the cron schedule
    python -m pricesync.scheduler.cron --now   # Also run once immediately
"""

import asyncio
import re
import sys
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from pricesync.core.errors import ConfigError
from pricesync.core.settings import Settings, get_settings
from pricesync.scheduler.jobs import scheduled_price_update
from pricesync.utils.logger import get_logger, setup_logging

log = get_logger(__name__)

JOB_ID = "update_stock_prices_daily"


_CRONTAB_WEEKDAYS = {"0": "sun", "1": "mon", "2": "tue", "3": "wed", "4": "thu", "5": "fri", "6": "sat", "7": "sun"}


def crontab_day_of_week(field: str) -> str:
    """Crontab counts weekdays from Sunday=0, APScheduler from Monday=0; use names instead."""
    return re.sub(r"(?<![/\d])\d(?!\d)", lambda m: _CRONTAB_WEEKDAYS[m.group(0)], field)


def build_trigger(cron: str, timezone: str) -> CronTrigger:
    fields = cron.split()
    if len(fields) != 5:
        raise ConfigError(f"Expected 5 cron fields, got {cron!r}", key="cron", section="schedule")
    minute, hour, day, month, day_of_week = fields
    try:
        return CronTrigger(
            minute=minute,
            hour=hour,
            day=day,
            month=month,
            day_of_week=crontab_day_of_week(day_of_week),
            timezone=timezone,
        )
    except (ValueError, LookupError) as exc:
        raise ConfigError(f"Invalid schedule {cron!r} in {timezone}: {exc}", key="cron", section="schedule") from exc


def build_scheduler(settings: Optional[Settings] = None) -> AsyncIOScheduler:
    """Scheduler with the price update job registered but not yet started."""
    settings = settings or get_settings()
    trigger = build_trigger(settings.update_cron, settings.timezone)
    scheduler = AsyncIOScheduler(timezone=settings.timezone)
    scheduler.add_job(
        scheduled_price_update,
        trigger=trigger,
        id=JOB_ID,
        name="Update stock prices",
        max_instances=1,
        coalesce=True,
        misfire_grace_time=settings.misfire_grace_seconds,
        replace_existing=True,
    )
    return scheduler


async def main():
    setup_logging()
    settings = get_settings()

    scheduler = build_scheduler(settings)
    scheduler.start()
    log.info(f"Scheduler started. Price update runs on '{settings.update_cron}' ({settings.timezone}).")

    if "--now" in sys.argv:
        log.info("Running job immediately (--now flag detected)")
        await scheduled_price_update()

    try:
        while True:
            await asyncio.sleep(3600)
    except (KeyboardInterrupt, SystemExit, asyncio.CancelledError):
        log.info("Scheduler shutting down...")
        scheduler.shutdown(wait=False)


if __name__ == "__main__":
    asyncio.run(main())
