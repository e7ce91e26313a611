"""Functional core - pure business logic with no I/O."""

from .errors import NoRangeError, ProgramFormatError, TraincalError
from .schedule import CalendarEvent, TimeRange, Weekday
from .program import OutsidePin, ProgramState
from .summary import ProgramSummary, calculate, format_summary, summary_rows
from .codec import from_document, to_document, render_csv
from .ics import render_ics

__all__ = [
    # Errors
    "TraincalError",
    "NoRangeError",
    "ProgramFormatError",
    # Schedule
    "CalendarEvent",
    "TimeRange",
    "Weekday",
    # Program
    "OutsidePin",
    "ProgramState",
    # Summary
    "ProgramSummary",
    "calculate",
    "format_summary",
    "summary_rows",
    # Codec
    "from_document",
    "to_document",
    "render_csv",
    # iCalendar
    "render_ics",
]
