# src/contributor_health/utils/helpers.py

import logging
import math
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List

from rich.logging import RichHandler


def parse_datetime(dt_str: str | None) -> datetime | None:
    """Parses an ISO datetime string, handling 'Z' suffix for UTC."""
    if not dt_str:
        return None
    try:
        parsed = datetime.fromisoformat(dt_str.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def now_utc() -> datetime:
    """Returns the current time in UTC."""
    return datetime.now(timezone.utc)


def today_utc() -> date:
    """Returns the current calendar day in UTC."""
    return now_utc().date()


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    """Clamps a value into the closed range [low, high]."""
    return float(max(low, min(high, value)))


def round_half_up(value: float) -> int:
    """Rounds to the nearest integer, with .5 always rounding up."""
    return int(math.floor(value + 0.5))


def trailing_days(end: date, days: int) -> List[date]:
    """Returns the `days` calendar days ending at `end` (inclusive), oldest first."""
    if days <= 0:
        return []
    start = end - timedelta(days=days - 1)
    return [start + timedelta(days=offset) for offset in range(days)]


def group_by_day(items: List[Dict[str, Any]]) -> Dict[date, List[Dict[str, Any]]]:
    """Groups a list of items by their creation day."""
    from collections import defaultdict

    buckets = defaultdict(list)
    for item in items:
        created = parse_datetime(item.get("createdAt"))
        if created:
            buckets[created.date()].append(item)
    return buckets


def configure_logging(level: str = "INFO") -> None:
    """Routes the root logger through rich so CLI output stays readable."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )
