from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence, Union
import logging

logger = logging.getLogger(__name__)

TimestampLike = Union[str, datetime, None]


def id_hash(record_id: str) -> int:
    """Sum of character codes of the record id."""
    return sum(ord(ch) for ch in (record_id or ""))


def parse_timestamp(value: TimestampLike) -> Optional[datetime]:
    """Parse an ISO-8601 string (or datetime) into an aware UTC datetime, None if invalid."""
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if not text:
            return None
        if text.endswith("Z") or text.endswith("z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except (ValueError, OverflowError):
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    # Offsets can push dates at the edge of the calendar out of range
    try:
        return parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        return None


def format_timestamp(value: datetime) -> str:
    """Canonical form: UTC with millisecond precision and a Z suffix."""
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def fallback_timestamp(record_id: str, strict: bool = False, now: Optional[datetime] = None) -> datetime:
    """Deterministic stand-in time for a record with no usable date.

    The clock is truncated to the minute so the same id maps to the same value
    for every call within that minute.
    """
    base = (now or datetime.now(timezone.utc)).astimezone(timezone.utc).replace(second=0, microsecond=0)
    h = id_hash(record_id)
    if strict:
        offset = timedelta(hours=h % 24, minutes=h % 60)
    else:
        offset = timedelta(minutes=h % 1000)
    return base - offset


def resolve_timestamp(
    candidates: Sequence[TimestampLike],
    record_id: str,
    strict: bool = False,
    now: Optional[datetime] = None,
) -> str:
    """Return the first candidate that parses, else the id-derived fallback. Never raises."""
    for candidate in candidates or []:
        parsed = parse_timestamp(candidate)
        if parsed is not None:
            return format_timestamp(parsed)
    resolved = fallback_timestamp(record_id, strict=strict, now=now)
    logger.debug(f"No valid timestamp for {record_id}; using fallback {format_timestamp(resolved)}")
    return format_timestamp(resolved)
