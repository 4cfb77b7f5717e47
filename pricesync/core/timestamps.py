"""Run timestamp shared by every successfully priced row of one update."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pricesync.core.errors import ConfigError


# CLDR 42+ en-US puts a narrow no-break space between the time and AM/PM
MERIDIEM_SEPARATOR = "\u202f"


def format_run_timestamp(moment: datetime) -> str:
    """Render ``moment`` the way an en-US locale prints it: ``10/19/2026, 2:45:07 PM``."""
    hour = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    return (
        f"{moment.month}/{moment.day}/{moment.year}, "
        f"{hour}:{moment.minute:02d}:{moment.second:02d}{MERIDIEM_SEPARATOR}{meridiem}"
    )


def run_timestamp(timezone: str, now: Optional[datetime] = None) -> str:
    """Current local time in ``timezone`` (or ``now`` converted to it), formatted."""
    try:
        tz = ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigError(f"Unknown timezone: {timezone}", key="timezone", section="schedule") from exc

    moment = now.astimezone(tz) if now is not None else datetime.now(tz)
    return format_run_timestamp(moment)


__all__ = ["format_run_timestamp", "run_timestamp", "MERIDIEM_SEPARATOR"]
