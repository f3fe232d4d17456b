"""Tests for the application timezone helpers."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from app.utils import app_time_before, ensure_app_naive_datetime, ensure_app_timezone


def test_naive_values_are_read_as_app_time():
    stored = datetime(2026, 10, 1, 12, 0)

    assert ensure_app_timezone(stored).replace(tzinfo=None) == stored
    assert ensure_app_naive_datetime(ensure_app_timezone(stored)) == stored


def test_app_time_before_uses_the_reference_instant():
    reference = datetime(2026, 10, 31, 9, 30, tzinfo=timezone.utc)

    cutoff = app_time_before(timedelta(days=30), now=reference)

    assert cutoff == reference - timedelta(days=30)
    assert cutoff.tzinfo is not None


def test_app_time_before_defaults_to_now():
    before = datetime.now(timezone.utc)

    cutoff = app_time_before(timedelta(hours=1))

    assert before - timedelta(hours=1) <= cutoff <= datetime.now(timezone.utc)
