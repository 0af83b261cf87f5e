from __future__ import annotations

from datetime import UTC, datetime

WIRE_DATETIME_FORMATS = ("%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M")


def now_utc_iso() -> str:
    return datetime.now(UTC).isoformat()


def parse_wire_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    candidate = value.strip()
    # Backend timestamps sometimes carry fractional seconds.
    if "." in candidate and "T" in candidate:
        candidate = candidate.split(".", 1)[0]
    for fmt in WIRE_DATETIME_FORMATS:
        try:
            return datetime.strptime(candidate, fmt)
        except ValueError:
            continue
    return None


def days_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / (24 * 60 * 60)
