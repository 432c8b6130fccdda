from __future__ import annotations

import uuid
from collections.abc import Callable
from datetime import datetime, timezone
from typing import TypeAlias

Clock: TypeAlias = Callable[[], datetime]
IdFactory: TypeAlias = Callable[[], str]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def generate_note_id() -> str:
    return uuid.uuid4().hex


def format_timestamp(dt: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a Z suffix."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    """
    Inverse of format_timestamp; also accepts "+00:00" offsets and naive
    values (read as UTC). Raises ValueError on garbage, including offsets
    that push the instant outside the representable date range.
    """
    text = (value or "").strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    try:
        return dt.astimezone(timezone.utc)
    except OverflowError as exc:
        raise ValueError(f"Timestamp out of range: {value!r}") from exc
