"""
Helpers for polling triggers.

A polling trigger asks the remote API for records created (or changed)
after the host-supplied ``lastRun`` and then re-checks each record's own
timestamp locally, since several APIs only filter by day or ignore the
filter entirely. Records whose timestamp is missing or cannot be parsed
are skipped.

Delivery is at-least-once: the only state is what the host persists in
trigger metadata, so a poll whose metadata write is lost will repeat
records on the next run.
"""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import Any, Callable, Iterable, TypeVar

T = TypeVar("T")

# Epoch values above this are treated as milliseconds.
_MILLIS_THRESHOLD = 10_000_000_000

_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%d",
)


def _from_epoch(value: float) -> datetime:
    if abs(value) >= _MILLIS_THRESHOLD:
        value = value / 1000
    return datetime.fromtimestamp(value, UTC)


def parse_timestamp(value: Any) -> datetime | None:
    """
    Parse a remote timestamp into an aware UTC datetime.

    Accepts datetimes, dates, epoch seconds or milliseconds (numbers or
    numeric strings), ISO-8601/RFC 3339 strings (``Z`` suffix included) and
    the space-separated ``YYYY-MM-DD HH:MM[:SS]`` form. Naive values are
    assumed to be UTC.

    Returns:
        The parsed datetime, or None if the value is missing or malformed
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=UTC)
    if isinstance(value, int | float):
        try:
            return _from_epoch(float(value))
        except (OverflowError, OSError, ValueError):
            return None
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    if text.lstrip("-").isdigit():
        try:
            return _from_epoch(float(text))
        except (OverflowError, OSError, ValueError):
            return None

    parsed: datetime | None = None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        for fmt in _FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
    if parsed is None:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def _resolve(record: Any, key: str) -> Any:
    """Read a dotted path (``fields.created``) from nested dicts."""
    current = record
    for part in key.split("."):
        if not isinstance(current, dict):
            return None
        current = current.get(part)
    return current


def filter_since(
    records: Iterable[T],
    last_run: datetime | None,
    key: str | Callable[[T], Any],
) -> list[T]:
    """
    Keep records whose timestamp is strictly after ``last_run``.

    Args:
        records: Records returned by the remote API
        last_run: Previous poll time; None keeps everything
        key: Dotted field path or callable returning the record's timestamp

    Returns:
        Records in their original order
    """
    items = list(records)
    if last_run is None:
        return items

    getter = key if callable(key) else (lambda record: _resolve(record, key))
    cutoff = parse_timestamp(last_run)
    kept: list[T] = []
    for record in items:
        stamp = parse_timestamp(getter(record))
        if stamp is None:
            continue
        if stamp > cutoff:
            kept.append(record)
    return kept


def newest_timestamp(
    records: Iterable[Any],
    key: str | Callable[[Any], Any],
) -> datetime | None:
    """Return the latest parseable timestamp among records."""
    getter = key if callable(key) else (lambda record: _resolve(record, key))
    stamps = [s for s in (parse_timestamp(getter(r)) for r in records) if s is not None]
    return max(stamps) if stamps else None


def rfc3339(value: datetime) -> str:
    """Format as RFC 3339 in UTC with a ``Z`` suffix and second precision."""
    return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


def unix_millis(value: datetime) -> int:
    return int(value.timestamp() * 1000)


def utc_now() -> datetime:
    """Get current UTC time with timezone awareness."""
    return datetime.now(UTC)
