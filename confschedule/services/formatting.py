"""Human-readable rendering of talk times for API consumers and the assistant."""

from __future__ import annotations

from datetime import datetime, tzinfo

from dateutil import tz

from confschedule.config import settings


def conference_tz() -> tzinfo:
    zone = tz.gettz(settings.conference_timezone)
    if zone is None:
        raise ValueError(f"Unknown timezone {settings.conference_timezone!r}")
    return zone


def _local(value: datetime, zone: tzinfo | None) -> datetime:
    return value.astimezone(zone or conference_tz())


def format_time(value: datetime, zone: tzinfo | None = None) -> str:
    """Render *value* as a 12-hour clock time, e.g. ``9:05 AM``."""
    local = _local(value, zone)
    hour = local.hour % 12 or 12
    suffix = "AM" if local.hour < 12 else "PM"
    return f"{hour}:{local.minute:02d} {suffix}"


def format_duration(start: datetime, end: datetime) -> str:
    """Render the span between *start* and *end* as ``25m``, ``1h`` or ``1h 30m``."""
    minutes = round((end - start).total_seconds() / 60)
    if minutes >= 60:
        hours, remaining = divmod(minutes, 60)
        return f"{hours}h {remaining}m" if remaining else f"{hours}h"
    return f"{minutes}m"


def format_date(value: datetime, zone: tzinfo | None = None) -> str:
    """Render *value* as e.g. ``Wednesday, October 22, 2025``."""
    local = _local(value, zone)
    return f"{local:%A}, {local:%B} {local.day}, {local.year}"
