"""Duration parsing for the mixed formats providers report."""

from __future__ import annotations

import math
import re
from typing import Any

_ISO_DURATION = re.compile(
    r"^P(?:(?P<days>\d+(?:\.\d+)?)D)?"
    r"(?:T(?:(?P<hours>\d+(?:\.\d+)?)H)?(?:(?P<minutes>\d+(?:\.\d+)?)M)?(?:(?P<seconds>\d+(?:\.\d+)?)S)?)?$",
    re.IGNORECASE,
)
_DAYS = re.compile(r"(\d+(?:\.\d+)?)\s*(?:days|day|d)(?![a-z])", re.IGNORECASE)
_HOURS = re.compile(r"(\d+(?:\.\d+)?)\s*(?:hours|hour|hrs|hr|h)(?![a-z])", re.IGNORECASE)
_MINUTES = re.compile(r"(\d+(?:\.\d+)?)\s*(?:minutes|minute|mins|min|m)(?![a-z])", re.IGNORECASE)
_CLOCK = re.compile(r"^(\d{1,3}):([0-5]\d)$")
_NUMBER = re.compile(r"^\d+(?:\.\d+)?$")


def _whole_minutes(total: float) -> int:
    if not math.isfinite(total):
        return 0
    return max(0, int(round(total)))


def parse_duration_minutes(value: Any) -> int:
    """
    Parse a provider duration into whole minutes.

    Accepts integer/float minutes, numeric strings, "2h 30m", "150 minutes",
    "1 day 2 hours", "02:30" and ISO-8601 durations such as "PT2H30M" or
    "P1DT2H". Anything else parses to 0.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(0, value)
    if isinstance(value, float):
        return _whole_minutes(value)

    text = str(value).strip()
    if not text:
        return 0

    if _NUMBER.match(text):
        return _whole_minutes(float(text))

    clock = _CLOCK.match(text)
    if clock:
        return int(clock.group(1)) * 60 + int(clock.group(2))

    iso = _ISO_DURATION.match(text)
    if iso and any(iso.groupdict().values()):
        parts = {k: float(v) if v else 0.0 for k, v in iso.groupdict().items()}
        total = parts["days"] * 1440 + parts["hours"] * 60 + parts["minutes"] + parts["seconds"] / 60
        return _whole_minutes(total)

    days = _DAYS.search(text)
    hours = _HOURS.search(text)
    minutes = _MINUTES.search(text)
    if not (days or hours or minutes):
        return 0
    total = 0.0
    if days:
        total += float(days.group(1)) * 1440
    if hours:
        total += float(hours.group(1)) * 60
    if minutes:
        total += float(minutes.group(1))
    return _whole_minutes(total)


__all__ = ["parse_duration_minutes"]
