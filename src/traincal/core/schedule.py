"""Pure schedule value types - no I/O dependencies."""

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum


class Weekday(Enum):
    """Day of the week, valued like date.weekday()."""

    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @classmethod
    def of(cls, d: date) -> "Weekday":
        return cls(d.weekday())

    @classmethod
    def parse(cls, token: str) -> "Weekday":
        """
        Parse a weekday name such as "MONDAY" (case-insensitive).

        Raises:
            ValueError: If the token is not a weekday name.
        """
        if not isinstance(token, str):
            raise ValueError(f"Invalid weekday: {token!r}")
        try:
            return cls[token.strip().upper()]
        except KeyError:
            raise ValueError(f"Invalid weekday: {token!r}") from None

    @property
    def short_es(self) -> str:
        return _SHORT_ES[self.value]

    @property
    def full_es(self) -> str:
        return _FULL_ES[self.value]


_SHORT_ES = ["lun", "mar", "mié", "jue", "vie", "sáb", "dom"]
_FULL_ES = ["lunes", "martes", "miércoles", "jueves", "viernes", "sábado", "domingo"]

_TIME_RE = re.compile(r"[0-9]{2}:[0-9]{2}(:[0-9]{2})?")


@dataclass(frozen=True)
class TimeRange:
    """A time-of-day window. An end before the start runs past midnight."""

    start: time
    end: time

    @property
    def crosses_midnight(self) -> bool:
        return self.end < self.start

    def minutes(self) -> int:
        """Duration in minutes, never negative. Equal times yield 0."""
        anchor = date.min
        start = datetime.combine(anchor, self.start)
        end = datetime.combine(anchor, self.end)
        if self.crosses_midnight:
            end += timedelta(days=1)
        return max(0, int((end - start).total_seconds() // 60))

    def bounds_on(self, d: date) -> tuple[datetime, datetime]:
        """Start and end datetimes for a session held on the given date."""
        end_date = d + timedelta(days=1) if self.crosses_midnight else d
        return datetime.combine(d, self.start), datetime.combine(end_date, self.end)

    def format(self) -> str:
        return f"{self.start.strftime('%H:%M')} - {self.end.strftime('%H:%M')}"

    @classmethod
    def parse(cls, start: str, end: str) -> "TimeRange":
        """Build from "HH:MM[:SS]" strings. Raises ValueError on bad input."""
        return cls(parse_time(start), parse_time(end))


def parse_time(value: str) -> time:
    """Parse "HH:MM" or "HH:MM:SS". Offsets and fractional seconds are rejected."""
    if not isinstance(value, str) or not _TIME_RE.fullmatch(value.strip()):
        raise ValueError(f"Invalid time: {value!r} (expected HH:MM or HH:MM:SS)")
    return time.fromisoformat(value.strip())


def format_time(t: time) -> str:
    """Render as HH:MM, keeping seconds only when present."""
    if t.second:
        return t.strftime("%H:%M:%S")
    return t.strftime("%H:%M")


@dataclass(frozen=True)
class CalendarEvent:
    """A free-form event filed under a single date."""

    title: str
    time: TimeRange
    description: str = ""
    location: str = ""
    reminder: bool = False

    def format_line(self) -> str:
        location = f" @ {self.location}" if self.location.strip() else ""
        return f"{self.title}  ({self.time.format()}){location}"
