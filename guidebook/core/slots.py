# guidebook/core/slots.py
"""
Slot parsing and formatting.

A slot is a point-in-time appointment start published by a guide. Slots
travel as RFC3339 strings with a mandatory offset or ``Z`` designator and
are compared by absolute instant, never by their text:
``2024-01-01T10:00:00Z`` and ``2024-01-01T11:00:00+01:00`` are the same slot.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import logging
import re
from typing import Any, Iterable, Iterator, List, Optional, Tuple

from .exceptions import InvalidSlotFormat

logger = logging.getLogger(__name__)

RFC3339_PATTERN = re.compile(
    r"^(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})"
    r"T(?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2})"
    r"(?:\.(?P<fraction>\d{1,9}))?"
    r"(?P<offset>Z|[+-]\d{2}:\d{2})$"
)


def _parse_offset(raw: str) -> timezone:
    if raw == "Z":
        return timezone.utc
    sign = -1 if raw[0] == "-" else 1
    hours, minutes = int(raw[1:3]), int(raw[4:6])
    if hours > 23 or minutes > 59:
        raise ValueError(f"offset out of range: {raw}")
    return timezone(sign * timedelta(hours=hours, minutes=minutes))


def parse_slot(value: Any) -> datetime:
    """
    Parse an RFC3339 timestamp into an aware UTC datetime.

    Raises:
        InvalidSlotFormat: If the value is not a string, lacks an offset,
            or does not describe a real calendar instant.
    """
    if not isinstance(value, str):
        raise InvalidSlotFormat(value)

    match = RFC3339_PATTERN.match(value.strip())
    if match is None:
        raise InvalidSlotFormat(value)

    fraction = (match.group("fraction") or "").ljust(6, "0")[:6]
    try:
        parsed = datetime(
            int(match.group("year")),
            int(match.group("month")),
            int(match.group("day")),
            int(match.group("hour")),
            int(match.group("minute")),
            int(match.group("second")),
            int(fraction),
            tzinfo=_parse_offset(match.group("offset")),
        )
    except ValueError as exc:
        raise InvalidSlotFormat(value) from exc

    return parsed.astimezone(timezone.utc)


def try_parse_slot(value: Any) -> Optional[datetime]:
    """Lenient variant of parse_slot for stored data: returns None on bad input."""
    try:
        return parse_slot(value)
    except InvalidSlotFormat:
        return None


def ensure_utc(instant: datetime) -> datetime:
    """Normalize an instant to aware UTC; naive values are assumed to be UTC already."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def same_instant(left: datetime, right: datetime) -> bool:
    return ensure_utc(left) == ensure_utc(right)


def format_slot(instant: datetime) -> str:
    """Render an instant in canonical UTC form, e.g. ``2024-01-01T10:00:00Z``."""
    utc = ensure_utc(instant)
    if utc.microsecond:
        return utc.strftime("%Y-%m-%dT%H:%M:%S.%f").rstrip("0") + "Z"
    return utc.strftime("%Y-%m-%dT%H:%M:%SZ")


def iter_valid_slots(raw_slots: Optional[Iterable[Any]]) -> Iterator[Tuple[str, datetime]]:
    """
    Yield ``(raw, instant)`` for each usable stored slot, in stored order.

    Malformed entries are skipped, as are later entries naming an instant
    already seen.
    """
    seen = set()
    for raw in raw_slots or ():
        instant = try_parse_slot(raw)
        if instant is None:
            logger.debug("Skipping malformed slot entry: %r", raw)
            continue
        if instant in seen:
            continue
        seen.add(instant)
        yield raw, instant


def parse_valid_slots(raw_slots: Optional[Iterable[Any]]) -> List[datetime]:
    return [instant for _, instant in iter_valid_slots(raw_slots)]


def canonicalize_slots(raw_slots: Optional[Iterable[Any]]) -> List[str]:
    """Canonical UTC strings for every usable stored slot."""
    return [format_slot(instant) for instant in parse_valid_slots(raw_slots)]
