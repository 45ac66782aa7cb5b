from __future__ import annotations

from datetime import date, datetime

from ..core.constants import YEAR_START_DAY, YEAR_START_MONTH


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO timestamp into a naive local datetime.

    A bare date means midnight. Values carrying an offset are converted to
    local time first.
    """
    value = value.strip()
    if len(value) == 10:
        return datetime.combine(parse_iso_date(value), datetime.min.time())
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def default_year_start(today: date) -> date:
    """Most recent June 1 on or before ``today``."""
    start = date(today.year, YEAR_START_MONTH, YEAR_START_DAY)
    if today < start:
        start = start.replace(year=today.year - 1)
    return start


def today_local() -> date:
    """Current local date.

    Note: Wrapped so tests can patch/mock easier.
    """
    return date.today()
