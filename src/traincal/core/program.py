"""Training program state - the date selection state machine.

Pure domain logic, no I/O. ProgramState is the single source of truth for
whether a date is selected. Collections are kept private; callers read them
through copies and change them only through the named operations below, so
force_on and force_off never share a date.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterator

from .schedule import CalendarEvent, TimeRange, Weekday

logger = logging.getLogger(__name__)


@dataclass
class OutsidePin:
    """The single out-of-range date a session has pinned with a plain click.

    Session-scoped: owned by the caller, never persisted.
    """

    pinned: date | None = None


class ProgramState:
    """Range, weekday filter, schedules, per-date overrides and events."""

    def __init__(self) -> None:
        self._start: date | None = None
        self._end: date | None = None
        self._training_days: set[Weekday] = set()
        self._time_by_day: dict[Weekday, TimeRange] = {}
        self._force_on: set[date] = set()
        self._force_off: set[date] = set()
        self._events: dict[date, list[CalendarEvent]] = {}

    def __repr__(self) -> str:
        return f"ProgramState(start={self._start}, end={self._end})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ProgramState):
            return NotImplemented
        return (
            self._start == other._start
            and self._end == other._end
            and self._training_days == other._training_days
            and self._time_by_day == other._time_by_day
            and self._force_on == other._force_on
            and self._force_off == other._force_off
            and self._events == other._events
        )

    # ============== Read access ==============

    @property
    def start(self) -> date | None:
        return self._start

    @property
    def end(self) -> date | None:
        return self._end

    @property
    def training_days(self) -> frozenset[Weekday]:
        return frozenset(self._training_days)

    @property
    def time_by_day(self) -> dict[Weekday, TimeRange]:
        return dict(self._time_by_day)

    @property
    def forced_on(self) -> frozenset[date]:
        return frozenset(self._force_on)

    @property
    def forced_off(self) -> frozenset[date]:
        return frozenset(self._force_off)

    def schedule_for(self, weekday: Weekday) -> TimeRange | None:
        return self._time_by_day.get(weekday)

    def events_on(self, d: date) -> tuple[CalendarEvent, ...]:
        return tuple(self._events.get(d, ()))

    def event_dates(self) -> list[date]:
        return sorted(self._events)

    # ============== Range ==============

    def has_range(self) -> bool:
        return self._start is not None and self._end is not None

    def min_date(self) -> date | None:
        if not self.has_range():
            return None
        return min(self._start, self._end)

    def max_date(self) -> date | None:
        if not self.has_range():
            return None
        return max(self._start, self._end)

    def is_inside_range(self, d: date) -> bool:
        if not self.has_range():
            return False
        return self.min_date() <= d <= self.max_date()

    def dates_in_range(self) -> Iterator[date]:
        """Every date from min_date() to max_date() inclusive."""
        if not self.has_range():
            return
        d, last = self.min_date(), self.max_date()
        while d <= last:
            yield d
            d += timedelta(days=1)

    def is_selected(self, d: date) -> bool:
        """
        Effective selection for a date.

        Priority: force_on, then force_off, then range and weekday filter.
        An empty weekday filter selects every day in range.
        """
        if d in self._force_on:
            return True
        if d in self._force_off:
            return False
        if not self.is_inside_range(d):
            return False
        if not self._training_days:
            return True
        return Weekday.of(d) in self._training_days

    def set_range(self, a: date | None, z: date | None) -> None:
        """Overwrite both anchors as given; ordering is normalized on read."""
        self._start = a
        self._end = z

    def set_start(self, d: date) -> None:
        """Begin a new range at d, dropping the old end anchor."""
        self._start = d
        self._end = None

    def set_end(self, d: date | None) -> None:
        self._end = d

    def close_range_at(self, d: date) -> None:
        """
        Second click of a two-click range pick.

        With no start yet, d becomes the start. A d before the start swaps
        roles so the old start becomes the end.
        """
        if self._start is None:
            self.set_start(d)
            return
        if d < self._start:
            self._end = self._start
            self._start = d
        else:
            self._end = d

    def adjust_range_with(self, d: date) -> None:
        """Shift-click: start, close, or re-anchor the range around d."""
        if self._start is None:
            self.set_start(d)
            return
        if self._end is None:
            self.close_range_at(d)
            return
        if d < self._start:
            self._end = self._start
            self._start = d
        else:
            self._end = d

    # ============== Overrides ==============

    def force_on(self, d: date) -> None:
        self._force_off.discard(d)
        self._force_on.add(d)

    def force_off(self, d: date) -> None:
        self._force_on.discard(d)
        self._force_off.add(d)

    def toggle_exception(self, d: date) -> None:
        """Flip the effective selection of d with a per-date override."""
        if self.is_selected(d):
            self.force_off(d)
        else:
            self.force_on(d)
        logger.debug(f"Toggled exception for {d}: selected={self.is_selected(d)}")

    def toggle_outside_selection(self, d: date, pin: OutsidePin) -> None:
        """
        Toggle a single pinned selection outside the range.

        Clicking a second outside date is meant to release the previous pin
        unless that date is held in force_on by other means.
        """
        if self.is_inside_range(d):
            return

        previous = pin.pinned
        # The discard below only runs for a date absent from force_on, so it
        # has no effect and earlier pins stay selected.
        if previous is not None and previous != d and previous not in self._force_on:
            self._force_on.discard(previous)

        if d in self._force_on:
            self._force_on.discard(d)
            if pin.pinned == d:
                pin.pinned = None
        else:
            self.force_on(d)
            pin.pinned = d

    # ============== Weekday filter and schedules ==============

    def set_training_day(self, weekday: Weekday, enabled: bool) -> None:
        """Add or remove a weekday from the filter. Removing also drops its schedule."""
        if enabled:
            self._training_days.add(weekday)
        else:
            self._training_days.discard(weekday)
            self._time_by_day.pop(weekday, None)

    def set_schedule(self, weekday: Weekday, time_range: TimeRange) -> None:
        self._time_by_day[weekday] = time_range

    def clear_schedule(self, weekday: Weekday) -> None:
        self._time_by_day.pop(weekday, None)

    # ============== Events ==============

    def add_event(
        self,
        d: date,
        event: CalendarEvent,
        replacing: CalendarEvent | None = None,
    ) -> None:
        """File an event under d, optionally replacing an existing one.

        The date's list stays sorted by start time.
        """
        events = self._events.setdefault(d, [])
        if replacing is not None and replacing in events:
            events.remove(replacing)
        events.append(event)
        events.sort(key=lambda e: e.time.start)

    def remove_event(self, d: date, event: CalendarEvent) -> None:
        """Remove an event from d. Raises KeyError if it is not there."""
        events = self._events.get(d)
        if not events or event not in events:
            raise KeyError(f"No such event on {d}: {event.title!r}")
        events.remove(event)
        if not events:
            del self._events[d]

    def clear_events(self, d: date) -> None:
        self._events.pop(d, None)

    # ============== Whole-state copy ==============

    def copy_from(self, other: "ProgramState") -> None:
        """Replace every field with an independent copy of other's."""
        self._start = other._start
        self._end = other._end
        self._training_days = set(other._training_days)
        self._time_by_day = dict(other._time_by_day)
        self._force_on = set(other._force_on)
        self._force_off = set(other._force_off)
        self._events = {d: list(evs) for d, evs in other._events.items()}
