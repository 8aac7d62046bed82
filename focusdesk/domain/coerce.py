from __future__ import annotations

import datetime as dt
import re
import uuid

from ..errors import ValidationError

UTC = dt.timezone.utc

# fromisoformat stops at microseconds; other writers may store nanoseconds
_FRACTION = re.compile(r"(\.\d{6})\d+")


def new_id() -> str:
    return str(uuid.uuid4())


def utc_now() -> dt.datetime:
    return dt.datetime.now(UTC)


def to_rfc3339(value: dt.datetime) -> str:
    """Fixed-width UTC form so that string order equals time order."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="microseconds")


def parse_timestamp(text: str) -> dt.datetime:
    """Parse an ISO-8601 / RFC 3339 string; naive values are taken as UTC. Raises ValueError."""
    s = text.strip()
    if s.endswith(("Z", "z")):
        s = s[:-1] + "+00:00"
    s = _FRACTION.sub(r"\1", s, count=1)
    value = dt.datetime.fromisoformat(s)
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def bind_timestamp(value) -> str | None:
    """Binder for nullable timestamp columns. Empty string clears the column."""
    if isinstance(value, dt.datetime):
        return to_rfc3339(value)
    if isinstance(value, str):
        if not value.strip():
            return None
        try:
            return to_rfc3339(parse_timestamp(value))
        except ValueError:
            raise ValidationError(f"invalid timestamp: {value!r}") from None
    raise ValidationError(f"invalid timestamp: {value!r}")


def bind_bool(value) -> int:
    if isinstance(value, bool):
        return 1 if value else 0
    if isinstance(value, int) and value in (0, 1):
        return value
    raise ValidationError(f"invalid boolean: {value!r}")


def bind_int(value) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"invalid integer: {value!r}")
    return value


def bind_text(value) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"invalid text: {value!r}")
    return value


def bind_optional_ref(value) -> str | None:
    """Binder for nullable id references. Empty string clears the reference."""
    if not isinstance(value, str):
        raise ValidationError(f"invalid id: {value!r}")
    return value or None


def read_bool(value) -> bool:
    return int(value or 0) != 0
