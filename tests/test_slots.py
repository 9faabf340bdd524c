"""Tests for slot key construction, parsing, grouping and formatting."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from src.app.meetings.slots import (
    format_date,
    format_time,
    group_times_by_date,
    make_slot_key,
    parse_slot_key,
    slot_date,
    slot_time,
)


class TestSlotKeys:
    def test_naive_datetime(self):
        assert make_slot_key(datetime(2024, 12, 10, 9, 0)) == "2024-12-10-09:00"

    def test_aware_datetime_normalised_to_utc(self):
        when = datetime(2024, 12, 10, 23, 30, tzinfo=timezone(timedelta(hours=-2)))
        assert make_slot_key(when) == "2024-12-11-01:30"

    def test_seconds_dropped(self):
        assert make_slot_key(datetime(2024, 1, 1, 9, 5, 59)) == "2024-01-01-09:05"

    def test_parse(self):
        assert parse_slot_key("2024-12-10-15:45") == datetime(2024, 12, 10, 15, 45)

    @pytest.mark.parametrize("bad", ["2024-12-10", "2024-12-10T09:00", "garbage", ""])
    def test_parse_rejects_malformed(self, bad):
        with pytest.raises(ValueError):
            parse_slot_key(bad)

    def test_components(self):
        assert slot_date("2024-12-10-15:45") == "2024-12-10"
        assert slot_time("2024-12-10-15:45") == "15:45"

    def test_lexicographic_order_is_chronological(self):
        moments = [
            datetime(2024, 12, 10, 15, 0),
            datetime(2023, 1, 2, 8, 0),
            datetime(2024, 12, 10, 9, 0),
            datetime(2024, 2, 29, 23, 59),
        ]
        keys = [make_slot_key(m) for m in moments]
        assert sorted(keys) == [make_slot_key(m) for m in sorted(moments)]


class TestGrouping:
    def test_dates_and_slots_ordered(self):
        times = {
            "2024-12-11-14:00": ["Carol"],
            "2024-12-10-15:00": ["Alice", "Bob"],
            "2024-12-10-09:00": [],
        }

        groups = group_times_by_date(times)

        assert [date for date, _ in groups] == ["2024-12-10", "2024-12-11"]
        first_day = groups[0][1]
        assert [slot.time for slot in first_day] == ["09:00", "15:00"]
        assert first_day[1].attendees == ["Alice", "Bob"]
        assert [slot.key for slot in groups[1][1]] == ["2024-12-11-14:00"]

    def test_empty(self):
        assert group_times_by_date({}) == []

    def test_attendee_lists_are_copies(self):
        times = {"2024-12-10-09:00": ["Alice"]}
        groups = group_times_by_date(times)
        groups[0][1][0].attendees.append("Mallory")
        assert times["2024-12-10-09:00"] == ["Alice"]


class TestFormatting:
    def test_format_date(self):
        assert format_date("2024-12-10") == "Tuesday, December 10, 2024"

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("00:00", "12:00 AM"),
            ("09:05", "9:05 AM"),
            ("12:30", "12:30 PM"),
            ("23:59", "11:59 PM"),
        ],
    )
    def test_format_time(self, raw, expected):
        assert format_time(raw) == expected
