"""Tests for iCalendar rendering."""

import re
from datetime import date, datetime, time, timezone
from unittest.mock import patch

import pytest

from traincal.core.errors import NoRangeError
from traincal.core.ics import count_events, escape_text, render_ics
from traincal.core.program import ProgramState
from traincal.core.schedule import CalendarEvent, TimeRange, Weekday

NOW = datetime(2024, 1, 1, 12, 30, 5, tzinfo=timezone.utc)
TZID = "Europe/Madrid"


def fixed_uid(prefix: str) -> str:
    return f"{prefix}-test"


@pytest.fixture
def state():
    s = ProgramState()
    s.set_range(date(2024, 1, 1), date(2024, 1, 7))
    s.set_training_day(Weekday.MONDAY, True)
    s.set_training_day(Weekday.WEDNESDAY, True)
    s.set_schedule(Weekday.MONDAY, TimeRange(time(18, 0), time(19, 0)))
    return s


def render(state: ProgramState) -> str:
    return render_ics(state, TZID, now=NOW, uid_factory=fixed_uid)


def blocks(ics: str) -> list[list[str]]:
    """Split rendered text into VEVENT line lists."""
    out, current = [], None
    for line in ics.split("\r\n"):
        if line == "BEGIN:VEVENT":
            current = []
        elif line == "END:VEVENT":
            out.append(current)
            current = None
        elif current is not None:
            current.append(line)
    return out


class TestEscape:
    def test_reserved_characters(self):
        assert escape_text("a\\b;c,d") == "a\\\\b\\;c\\,d"

    def test_none(self):
        assert escape_text(None) == ""

    def test_line_breaks(self):
        assert escape_text("one\ntwo\r\nthree\rfour") == "one\\ntwo\\nthree\\nfour"


class TestRenderIcs:
    def test_no_range_raises(self):
        with pytest.raises(NoRangeError):
            render_ics(ProgramState(), TZID)

    def test_calendar_envelope(self, state):
        ics = render(state)
        lines = ics.split("\r\n")
        assert lines[:5] == [
            "BEGIN:VCALENDAR",
            "PRODID:-//CalendarioEntrenamiento//1.0//ES",
            "VERSION:2.0",
            "CALSCALE:GREGORIAN",
            "METHOD:PUBLISH",
        ]
        assert ics.endswith("END:VCALENDAR\r\n")
        assert "\n" not in ics.replace("\r\n", "")

    def test_only_scheduled_selected_days(self, state):
        # Wednesday is selected but has no schedule
        ics = render(state)
        assert count_events(ics) == 1
        (event,) = blocks(ics)
        assert event == [
            "UID:20240101-test",
            "SUMMARY:Entrenamiento (lun)",
            "DTSTAMP:20240101T123005Z",
            "DTSTART;TZID=Europe/Madrid:20240101T180000",
            "DTEND;TZID=Europe/Madrid:20240101T190000",
        ]

    def test_overrides_respected(self, state):
        state.force_off(date(2024, 1, 1))
        state.force_on(date(2024, 1, 15))  # Monday outside the range
        ics = render(state)
        assert count_events(ics) == 0

    def test_midnight_crossing_rolls_end_date(self, state):
        state.set_schedule(Weekday.MONDAY, TimeRange(time(23, 0), time(0, 30)))
        (event,) = blocks(render(state))
        assert "DTSTART;TZID=Europe/Madrid:20240101T230000" in event
        assert "DTEND;TZID=Europe/Madrid:20240102T003000" in event

    def test_custom_event_with_reminder(self, state):
        state.add_event(
            date(2024, 3, 9),
            CalendarEvent(
                title="Race, 10K",
                description="Bib; pick up",
                location="Park",
                time=TimeRange(time(9, 0), time(10, 30)),
                reminder=True,
            ),
        )
        ics = render(state)
        assert ics.count("BEGIN:VALARM") == 1
        event = blocks(ics)[-1]
        assert event[0] == "UID:20240309-evt-test"
        assert "SUMMARY:Race\\, 10K" in event
        assert "DESCRIPTION:Bib\\; pick up" in event
        assert "LOCATION:Park" in event
        assert "DTSTART;TZID=Europe/Madrid:20240309T090000" in event
        alarm = event[event.index("BEGIN:VALARM"):]
        assert alarm == [
            "BEGIN:VALARM",
            "TRIGGER:-PT10M",
            "ACTION:DISPLAY",
            "DESCRIPTION:Race\\, 10K",
            "END:VALARM",
        ]

    def test_custom_event_without_extras(self, state):
        state.add_event(date(2024, 1, 2), CalendarEvent(title="Stretch", time=TimeRange(time(7, 0), time(7, 20))))
        event = blocks(render(state))[-1]
        assert not any(line.startswith(("DESCRIPTION", "LOCATION")) for line in event)
        assert "BEGIN:VALARM" not in event

    def test_multiline_description_stays_on_one_content_line(self, state):
        state.add_event(
            date(2024, 1, 2),
            CalendarEvent(
                title="Gym",
                description="Squats\nLunges",
                location="Hall B\nFloor 2",
                time=TimeRange(time(7, 0), time(8, 0)),
            ),
        )
        event = blocks(render(state))[-1]
        assert "DESCRIPTION:Squats\\nLunges" in event
        assert "LOCATION:Hall B\\nFloor 2" in event
        assert event[-1].startswith("DTEND")

    def test_events_exported_regardless_of_selection(self, state):
        state.force_off(date(2024, 1, 2))
        state.add_event(date(2024, 1, 2), CalendarEvent(title="A", time=TimeRange(time(7, 0), time(8, 0))))
        state.add_event(date(2025, 6, 1), CalendarEvent(title="B", time=TimeRange(time(7, 0), time(8, 0))))
        assert count_events(render(state)) == 3

    def test_random_uids_are_unique(self, state):
        state.set_schedule(Weekday.WEDNESDAY, TimeRange(time(18, 0), time(19, 0)))
        ics = render_ics(state, TZID, now=NOW)
        uids = re.findall(r"^UID:(.+)$", ics, flags=re.MULTILINE)
        assert len(uids) == 2
        assert len(set(uids)) == 2
        assert uids[0].startswith("20240101-")

    def test_dtstamp_defaults_to_now(self, state):
        with patch("traincal.core.ics.datetime") as mock_dt:
            mock_dt.now.return_value = NOW
            ics = render_ics(state, TZID, uid_factory=fixed_uid)
        assert "DTSTAMP:20240101T123005Z" in ics
