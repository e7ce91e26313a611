"""iCalendar rendering of a training program - no I/O dependencies."""

import uuid
from datetime import date, datetime, timezone
from typing import Callable

from .errors import NoRangeError
from .program import ProgramState
from .schedule import CalendarEvent, TimeRange, Weekday

DEFAULT_PROD_ID = "-//CalendarioEntrenamiento//1.0//ES"
ALARM_TRIGGER = "-PT10M"


def escape_text(text: str | None) -> str:
    """Backslash-escape the characters iCalendar reserves in text values."""
    if text is None:
        return ""
    text = text.replace("\\", "\\\\").replace(";", "\\;").replace(",", "\\,")
    return text.replace("\r\n", "\\n").replace("\r", "\\n").replace("\n", "\\n")


def format_local(dt: datetime) -> str:
    return dt.strftime("%Y%m%dT%H%M%S")


def format_utc(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def _random_uid(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4()}"


def _timed_lines(d: date, tr: TimeRange, tzid: str, stamp: str) -> list[str]:
    start, end = tr.bounds_on(d)
    return [
        f"DTSTAMP:{stamp}",
        f"DTSTART;TZID={tzid}:{format_local(start)}",
        f"DTEND;TZID={tzid}:{format_local(end)}",
    ]


def _session_block(d: date, tr: TimeRange, tzid: str, stamp: str, uid: str) -> list[str]:
    summary = f"Entrenamiento ({Weekday.of(d).short_es})"
    return [
        "BEGIN:VEVENT",
        f"UID:{uid}",
        f"SUMMARY:{escape_text(summary)}",
        *_timed_lines(d, tr, tzid, stamp),
        "END:VEVENT",
    ]


def _event_block(d: date, ev: CalendarEvent, tzid: str, stamp: str, uid: str) -> list[str]:
    lines = [
        "BEGIN:VEVENT",
        f"UID:{uid}",
        f"SUMMARY:{escape_text(ev.title)}",
    ]
    if ev.description and ev.description.strip():
        lines.append(f"DESCRIPTION:{escape_text(ev.description)}")
    if ev.location and ev.location.strip():
        lines.append(f"LOCATION:{escape_text(ev.location)}")
    lines.extend(_timed_lines(d, ev.time, tzid, stamp))
    if ev.reminder:
        lines.extend(
            [
                "BEGIN:VALARM",
                f"TRIGGER:{ALARM_TRIGGER}",
                "ACTION:DISPLAY",
                f"DESCRIPTION:{escape_text(ev.title)}",
                "END:VALARM",
            ]
        )
    lines.append("END:VEVENT")
    return lines


def render_ics(
    state: ProgramState,
    tzid: str,
    *,
    prod_id: str = DEFAULT_PROD_ID,
    now: datetime | None = None,
    uid_factory: Callable[[str], str] | None = None,
) -> str:
    """
    Render the program as a VCALENDAR document with CRLF line endings.

    One VEVENT per selected date whose weekday has a schedule, then one per
    custom event regardless of range or selection. Every event is a single
    discrete occurrence.

    Raises:
        NoRangeError: If the state has no range.
    """
    if state is None or not state.has_range():
        raise NoRangeError("No date range defined; nothing to export.")

    now = now or datetime.now(timezone.utc)
    stamp = format_utc(now)
    make_uid = uid_factory or _random_uid

    lines = [
        "BEGIN:VCALENDAR",
        f"PRODID:{prod_id}",
        "VERSION:2.0",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
    ]

    for d in state.dates_in_range():
        if not state.is_selected(d):
            continue
        tr = state.schedule_for(Weekday.of(d))
        if tr is None:
            continue
        uid = make_uid(d.strftime("%Y%m%d"))
        lines.extend(_session_block(d, tr, tzid, stamp, uid))

    for d in state.event_dates():
        for ev in state.events_on(d):
            uid = make_uid(f"{d.strftime('%Y%m%d')}-evt")
            lines.extend(_event_block(d, ev, tzid, stamp, uid))

    lines.append("END:VCALENDAR")
    return "\r\n".join(lines) + "\r\n"


def count_events(ics: str) -> int:
    """Number of VEVENT blocks in rendered iCalendar text."""
    return sum(1 for line in ics.splitlines() if line == "BEGIN:VEVENT")
