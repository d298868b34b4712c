"""Encode and decode recurrence rules at the storage boundary.

Rules are stored in a compact tagged form::

    {"type": "none"}
    {"type": "hourly"}
    {"type": "daily"}
    {"type": "weekly", "weekday": 3}
    {"type": "monthly", "day": 31}
"""

import json
from datetime import datetime
from typing import Any, Dict, Tuple

from memoss.engine.rules import (
    DAILY,
    HOURLY,
    NONE,
    Daily,
    Hourly,
    Monthly,
    NoRecurrence,
    RecurrenceRule,
    Weekly,
)

# Payload defaults used when a stored rule omits its field
DEFAULT_WEEKDAY = 2  # Monday
DEFAULT_DAY = 1


class RecurrenceDecodeError(ValueError):
    """Raised when a stored rule cannot be decoded."""


def encode_rule(rule: RecurrenceRule) -> Dict[str, Any]:
    """Encode a rule into its tagged dict form."""
    if isinstance(rule, NoRecurrence):
        return {"type": "none"}
    if isinstance(rule, Hourly):
        return {"type": "hourly"}
    if isinstance(rule, Daily):
        return {"type": "daily"}
    if isinstance(rule, Weekly):
        return {"type": "weekly", "weekday": rule.weekday}
    if isinstance(rule, Monthly):
        return {"type": "monthly", "day": rule.day}
    raise TypeError(f"Cannot encode recurrence rule: {rule!r}")


def _int_field(data: Dict[str, Any], key: str, default: int) -> int:
    value = data.get(key)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int):
        raise RecurrenceDecodeError(f"Field '{key}' must be an integer, got {value!r}")
    return value


def decode_rule(data: Any) -> RecurrenceRule:
    """Decode a tagged dict back into a rule.

    Raises:
        RecurrenceDecodeError: If the payload is not a mapping, the type is
            unknown, or a payload field is not an integer
    """
    if not isinstance(data, dict):
        raise RecurrenceDecodeError(f"Expected a mapping, got {type(data).__name__}")

    rule_type = data.get("type")

    if rule_type == "none":
        return NONE
    elif rule_type == "hourly":
        return HOURLY
    elif rule_type == "daily":
        return DAILY
    elif rule_type == "weekly":
        return Weekly(weekday=_int_field(data, "weekday", DEFAULT_WEEKDAY))
    elif rule_type == "monthly":
        return Monthly(day=_int_field(data, "day", DEFAULT_DAY))

    raise RecurrenceDecodeError(f"Unknown recurrence type: {rule_type!r}")


def dumps_rule(rule: RecurrenceRule) -> str:
    """Serialize a rule to JSON text."""
    return json.dumps(encode_rule(rule), sort_keys=True)


def loads_rule(text: str) -> RecurrenceRule:
    """Deserialize a rule from JSON text."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise RecurrenceDecodeError(f"Invalid recurrence JSON: {e}") from e
    return decode_rule(data)


def encode_recurrence(
    rule: RecurrenceRule, end_date: datetime | None = None
) -> Dict[str, Any] | None:
    """Encode a rule plus its series end date, as exchanged with a sync server.

    A non-recurring rule has no remote representation and encodes as None.
    """
    if isinstance(rule, NoRecurrence):
        return None

    payload = encode_rule(rule)
    payload["end_date"] = end_date.isoformat() if end_date else None
    return payload


def decode_recurrence(payload: Dict[str, Any] | None) -> Tuple[RecurrenceRule, datetime | None]:
    """Decode a rule plus series end date from its remote form."""
    if payload is None:
        return NONE, None

    rule = decode_rule(payload)

    end_value = payload.get("end_date")
    if end_value is None:
        return rule, None

    try:
        end_date = datetime.fromisoformat(end_value)
    except (TypeError, ValueError) as e:
        raise RecurrenceDecodeError(f"Invalid end_date: {end_value!r}") from e

    return rule, end_date
