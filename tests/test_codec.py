"""Tests for the recurrence storage codec."""

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from memoss.db.codec import (
    RecurrenceDecodeError,
    decode_recurrence,
    decode_rule,
    dumps_rule,
    encode_recurrence,
    encode_rule,
    loads_rule,
)
from memoss.engine.rules import DAILY, HOURLY, NONE, Monthly, Weekly


def test_encode_rule():
    """Test the tagged storage form of each rule."""
    assert encode_rule(NONE) == {"type": "none"}
    assert encode_rule(HOURLY) == {"type": "hourly"}
    assert encode_rule(DAILY) == {"type": "daily"}
    assert encode_rule(Weekly(weekday=3)) == {"type": "weekly", "weekday": 3}
    assert encode_rule(Monthly(day=31)) == {"type": "monthly", "day": 31}


def test_json_round_trip():
    """Test rules survive the JSON text stored in the database."""
    for rule in (NONE, HOURLY, DAILY, Weekly(weekday=7), Monthly(day=29)):
        assert loads_rule(dumps_rule(rule)) == rule


def test_decode_missing_payload_uses_defaults():
    """Test missing weekday and day fall back to Monday and the 1st."""
    assert decode_rule({"type": "weekly"}) == Weekly(weekday=2)
    assert decode_rule({"type": "monthly"}) == Monthly(day=1)


def test_decode_rejects_bad_payloads():
    """Test malformed payloads raise RecurrenceDecodeError."""
    with pytest.raises(RecurrenceDecodeError):
        decode_rule({"type": "yearly"})

    with pytest.raises(RecurrenceDecodeError):
        decode_rule(["daily"])

    with pytest.raises(RecurrenceDecodeError):
        decode_rule({"type": "weekly", "weekday": "3"})

    with pytest.raises(RecurrenceDecodeError):
        decode_rule({"type": "monthly", "day": True})

    with pytest.raises(RecurrenceDecodeError):
        loads_rule("{not json")


def test_decode_error_is_value_error():
    """Test callers can catch decode failures as ValueError."""
    with pytest.raises(ValueError):
        decode_rule({})


def test_encode_recurrence_with_end_date():
    """Test the remote form carries the series end date."""
    end = datetime(2026, 6, 30, 23, 59, tzinfo=ZoneInfo("UTC"))

    payload = encode_recurrence(Weekly(weekday=2), end)
    assert payload == {"type": "weekly", "weekday": 2, "end_date": "2026-06-30T23:59:00+00:00"}

    assert decode_recurrence(payload) == (Weekly(weekday=2), end)


def test_encode_recurrence_none():
    """Test a one-shot reminder has no remote recurrence."""
    assert encode_recurrence(NONE) is None
    assert decode_recurrence(None) == (NONE, None)
    assert decode_recurrence({"type": "daily"}) == (DAILY, None)


def test_decode_recurrence_bad_end_date():
    """Test an unparseable end date is a decode error."""
    with pytest.raises(RecurrenceDecodeError):
        decode_recurrence({"type": "daily", "end_date": "someday"})
