"""Event Rules tests - scheduling, location, tags and duplication checks.

Tests cover:
    - check_schedule: ordering, 30-day cap, past start
    - check_location: presential vs virtual requirements
    - check_tags / check_age_range / check_duplicate_dates
    - can_change_participation: completed and cancelled are final
"""

from datetime import datetime, timedelta, timezone

from tradeconnect.core import messages
from tradeconnect.core.event_rules import (
    MAX_EVENT_DURATION_DAYS,
    can_change_participation,
    check_age_range,
    check_duplicate_dates,
    check_location,
    check_schedule,
    check_tags,
)

NOW = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


# --- check_schedule ------------------------------------------------------------

class TestCheckSchedule:
    def test_valid_schedule(self):
        start = NOW + timedelta(days=1)
        assert check_schedule(start, start + timedelta(hours=3), NOW) == []

    def test_end_equal_to_start_rejected(self):
        start = NOW + timedelta(days=1)
        errors = check_schedule(start, start, NOW)
        assert errors == [{
            "field": "endDate",
            "message": messages.END_AFTER_START,
            "type": "value_error",
        }]

    def test_duration_cap(self):
        start = NOW + timedelta(days=1)
        end = start + timedelta(days=MAX_EVENT_DURATION_DAYS, seconds=1)
        errors = check_schedule(start, end, NOW)
        assert errors[0]["field"] == "endDate"
        assert "30 días" in errors[0]["message"]

    def test_exactly_thirty_days_allowed(self):
        start = NOW + timedelta(days=1)
        end = start + timedelta(days=MAX_EVENT_DURATION_DAYS)
        assert check_schedule(start, end, NOW) == []

    def test_past_start(self):
        start = NOW - timedelta(hours=1)
        errors = check_schedule(start, NOW + timedelta(hours=1), NOW)
        assert [e["field"] for e in errors] == ["startDate"]

    def test_past_start_ignored_without_now(self):
        start = NOW - timedelta(days=5)
        assert check_schedule(start, start + timedelta(hours=1)) == []

    def test_naive_datetimes_treated_as_utc(self):
        start = datetime(2026, 3, 2, 9, 0)
        assert check_schedule(start, start + timedelta(hours=1), NOW) == []

    def test_missing_dates_skipped(self):
        assert check_schedule(None, NOW, NOW) == []


# --- check_location --------------------------------------------------------------

class TestCheckLocation:
    def test_presential_requires_location(self):
        errors = check_location(False, None, None)
        assert errors[0]["message"] == messages.LOCATION_REQUIRED

    def test_presential_location_too_short(self):
        assert check_location(False, "Zona", None)[0]["field"] == "location"

    def test_virtual_requires_https_link(self):
        errors = check_location(True, None, "http://meet.example.com/x")
        assert errors[0]["message"] == messages.VIRTUAL_LOCATION_INVALID

    def test_virtual_ok(self):
        assert check_location(True, None, "https://meet.example.com/abc") == []

    def test_virtual_missing_link(self):
        errors = check_location(True, "Guatemala", "  ")
        assert errors[0]["field"] == "virtualLocation"


# --- tags, ages, duplication -----------------------------------------------------

def test_too_many_tags():
    assert check_tags([f"t{i}" for i in range(11)])[0]["field"] == "tags"


def test_tag_too_long():
    assert check_tags(["x" * 21])[0]["message"] == messages.TAG_TOO_LONG


def test_tags_ok():
    assert check_tags(["comercio", "exportación"]) == []
    assert check_tags(None) == []


def test_age_range():
    assert check_age_range(18, 17)[0]["field"] == "maxAge"
    assert check_age_range(18, 18) == []
    assert check_age_range(None, 10) == []


def test_duplicate_dates_must_come_together():
    assert check_duplicate_dates(NOW, None)[0]["field"] == "endDate"
    assert check_duplicate_dates(None, NOW)[0]["field"] == "startDate"
    assert check_duplicate_dates(NOW, NOW + timedelta(hours=1)) == []
    assert check_duplicate_dates(None, None) == []


# --- Participation status ------------------------------------------------------

def test_open_participations_can_change():
    assert can_change_participation("tentative")
    assert can_change_participation("confirmed")


def test_final_participations_are_locked():
    assert not can_change_participation("completed")
    assert not can_change_participation("cancelled")
