"""traincal CLI - Training program calendar."""

import json
import logging
import sys
from contextlib import contextmanager
from datetime import date
from pathlib import Path

import click

from .config import load_config
from .core.codec import to_document
from .core.errors import TraincalError
from .core.schedule import CalendarEvent, TimeRange, Weekday, format_time
from .core.summary import format_hhmm, format_summary
from .session import Click, Session


def _parse_dates(ctx, param, value):
    """Click callback: ISO date strings -> date objects."""
    if value is None:
        return None
    try:
        if isinstance(value, tuple):
            return tuple(date.fromisoformat(v) for v in value)
        return date.fromisoformat(value)
    except ValueError as e:
        raise click.BadParameter(f"expected YYYY-MM-DD ({e})")


def _parse_weekdays(ctx, param, value):
    """Click callback: weekday names -> Weekday members."""
    try:
        if isinstance(value, tuple):
            return tuple(Weekday.parse(v) for v in value)
        return Weekday.parse(value)
    except ValueError as e:
        raise click.BadParameter(str(e))


@contextmanager
def _session(ctx: click.Context, save: bool = True):
    """Load the program file, yield a Session, then save it back."""
    path: Path = ctx.obj["program_file"]
    session = Session.from_config(ctx.obj["config"])
    try:
        session.load_or_new(path)
        yield session
        if save:
            session.save(path)
    except (TraincalError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@click.group()
@click.option("--file", "-f", "program_file", type=click.Path(path_type=Path), default=None,
              help="Program file (defaults to PROGRAM_FILE from traincal.conf)")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.version_option()
@click.pass_context
def main(ctx, program_file: Path | None, debug: bool):
    """traincal - Training program calendar."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )
    config = load_config()
    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["program_file"] = program_file or config.program_file


# ============== Inspection ==============


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def show(ctx, as_json: bool):
    """Show the current program."""
    with _session(ctx, save=False) as session:
        state = session.state

        if as_json:
            click.echo(json.dumps(to_document(state), indent=2, ensure_ascii=False))
            return

        if state.has_range():
            click.echo(f"Range: {state.min_date()} to {state.max_date()}")
        elif state.start is not None:
            click.echo(f"Range: starts {state.start} (no end yet)")
        else:
            click.echo("Range: not set")

        days = sorted(state.training_days, key=lambda w: w.value)
        click.echo(f"Training days: {', '.join(w.name for w in days) or 'every day'}")

        schedules = state.time_by_day
        if schedules:
            click.echo("Schedules:")
            for w in sorted(schedules, key=lambda w: w.value):
                tr = schedules[w]
                click.echo(f"  {w.name:9} {tr.format()} ({tr.minutes()} min)")

        if state.forced_on:
            click.echo(f"Forced on: {', '.join(str(d) for d in sorted(state.forced_on))}")
        if state.forced_off:
            click.echo(f"Forced off: {', '.join(str(d) for d in sorted(state.forced_off))}")

        for d in state.event_dates():
            click.echo(f"\n### {d.strftime('%A, %B %d %Y')}")
            for ev in state.events_on(d):
                click.echo(f"  • {ev.format_line()}")


@main.command()
@click.argument("day", callback=_parse_dates)
@click.pass_context
def check(ctx, day: date):
    """Tell whether DAY is selected."""
    with _session(ctx, save=False) as session:
        state = session.state
        selected = state.is_selected(day)
        where = "inside" if state.is_inside_range(day) else "outside"
        click.echo(f"{day}: {'selected' if selected else 'not selected'} ({where} range)")


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def summary(ctx, as_json: bool):
    """Show program totals by month and by program week."""
    with _session(ctx, save=False) as session:
        s = session.summary()

        if not as_json:
            click.echo(format_summary(s))
            return

        if s is None:
            click.echo("null")
            return
        click.echo(
            json.dumps(
                {
                    "start": s.start.isoformat(),
                    "end": s.end.isoformat(),
                    "selected_days": s.selected_days,
                    "total_minutes": s.total_minutes,
                    "total_hours": format_hhmm(s.total_minutes),
                    "weeks_in_range": s.weeks_in_range,
                    "weeks_with_training": s.weeks_with_training,
                    "minutes_by_month": {
                        f"{y:04d}-{m:02d}": mins for (y, m), mins in s.minutes_by_month.items()
                    },
                    "minutes_by_week": {str(w): mins for w, mins in s.minutes_by_week.items()},
                },
                indent=2,
            )
        )


# ============== Range ==============


@main.group("range")
def range_():
    """Define the program date range."""


@range_.command("set")
@click.argument("first", callback=_parse_dates)
@click.argument("last", callback=_parse_dates)
@click.pass_context
def range_set(ctx, first: date, last: date):
    """Set both anchors at once (in either order)."""
    with _session(ctx) as session:
        session.state.set_range(first, last)
        click.echo(f"Range: {session.state.min_date()} to {session.state.max_date()}")


@range_.command("start")
@click.argument("day", callback=_parse_dates)
@click.pass_context
def range_start(ctx, day: date):
    """Begin a new range at DAY."""
    with _session(ctx) as session:
        session.state.set_start(day)
        click.echo(f"Range starts {day}")


@range_.command("close")
@click.argument("day", callback=_parse_dates)
@click.pass_context
def range_close(ctx, day: date):
    """Close the range at DAY."""
    with _session(ctx) as session:
        session.state.close_range_at(day)
        _echo_range(session)


@range_.command("adjust")
@click.argument("day", callback=_parse_dates)
@click.pass_context
def range_adjust(ctx, day: date):
    """Extend or re-anchor the range to DAY (shift-click)."""
    with _session(ctx) as session:
        session.state.adjust_range_with(day)
        _echo_range(session)


def _echo_range(session: Session) -> None:
    state = session.state
    if state.has_range():
        click.echo(f"Range: {state.min_date()} to {state.max_date()}")
    else:
        click.echo(f"Range starts {state.start}")


@main.command("click")
@click.argument("days", nargs=-1, required=True, callback=_parse_dates)
@click.option("--ctrl", is_flag=True, help="Toggle a per-date exception")
@click.option("--shift", is_flag=True, help="Adjust the range")
@click.pass_context
def click_days(ctx, days: tuple[date, ...], ctrl: bool, shift: bool):
    """Replay day clicks in order, as on the month grid.

    A plain click only toggles days outside the range, and the pinned
    outside day lasts for this run only.
    """
    if ctrl and shift:
        raise click.UsageError("--ctrl and --shift are mutually exclusive")
    g = Click.CTRL if ctrl else Click.SHIFT if shift else Click.PLAIN
    with _session(ctx) as session:
        for d in days:
            session.click(d, g)
        for d in days:
            click.echo(f"{d}: {'selected' if session.state.is_selected(d) else 'not selected'}")


# ============== Overrides ==============


@main.group()
def force():
    """Force a date on or off regardless of range and weekdays."""


@force.command("on")
@click.argument("day", callback=_parse_dates)
@click.pass_context
def force_on(ctx, day: date):
    """Select DAY."""
    with _session(ctx) as session:
        session.state.force_on(day)
        click.echo(f"{day}: selected")


@force.command("off")
@click.argument("day", callback=_parse_dates)
@click.pass_context
def force_off(ctx, day: date):
    """Deselect DAY."""
    with _session(ctx) as session:
        session.state.force_off(day)
        click.echo(f"{day}: not selected")


@main.command()
@click.argument("day", callback=_parse_dates)
@click.pass_context
def toggle(ctx, day: date):
    """Flip DAY's selection with an exception (ctrl-click)."""
    with _session(ctx) as session:
        session.state.toggle_exception(day)
        click.echo(f"{day}: {'selected' if session.state.is_selected(day) else 'not selected'}")


# ============== Weekdays and schedules ==============


@main.group()
def days():
    """Edit the weekday filter."""


@days.command("add")
@click.argument("weekdays", nargs=-1, required=True, callback=_parse_weekdays)
@click.pass_context
def days_add(ctx, weekdays: tuple[Weekday, ...]):
    """Add WEEKDAYS (e.g. MONDAY) to the filter."""
    with _session(ctx) as session:
        for w in weekdays:
            session.state.set_training_day(w, True)
        click.echo(f"Training days: {_days_str(session)}")


@days.command("remove")
@click.argument("weekdays", nargs=-1, required=True, callback=_parse_weekdays)
@click.pass_context
def days_remove(ctx, weekdays: tuple[Weekday, ...]):
    """Remove WEEKDAYS from the filter, dropping their schedules."""
    with _session(ctx) as session:
        for w in weekdays:
            session.state.set_training_day(w, False)
        click.echo(f"Training days: {_days_str(session)}")


def _days_str(session: Session) -> str:
    days = sorted(session.state.training_days, key=lambda w: w.value)
    return ", ".join(w.name for w in days) or "every day"


@main.group()
def schedule():
    """Edit per-weekday session times."""


@schedule.command("set")
@click.argument("weekday", callback=_parse_weekdays)
@click.option("--start", "start_time", default=None, help="Start time HH:MM")
@click.option("--end", "end_time", default=None, help="End time HH:MM (before start = past midnight)")
@click.pass_context
def schedule_set(ctx, weekday: Weekday, start_time: str | None, end_time: str | None):
    """Set WEEKDAY's session time."""
    config = ctx.obj["config"]
    try:
        tr = TimeRange.parse(
            start_time or config.default_start_time,
            end_time or config.default_end_time,
        )
    except ValueError as e:
        raise click.BadParameter(str(e))
    with _session(ctx) as session:
        session.state.set_schedule(weekday, tr)
        click.echo(f"{weekday.name}: {tr.format()} ({tr.minutes()} min)")


@schedule.command("clear")
@click.argument("weekday", callback=_parse_weekdays)
@click.pass_context
def schedule_clear(ctx, weekday: Weekday):
    """Remove WEEKDAY's session time."""
    with _session(ctx) as session:
        session.state.clear_schedule(weekday)
        click.echo(f"{weekday.name}: no schedule")


# ============== Events ==============


@main.group()
def event():
    """Manage custom events on specific dates."""


@event.command("add")
@click.argument("day", callback=_parse_dates)
@click.argument("title")
@click.option("--start", "start_time", required=True, help="Start time HH:MM")
@click.option("--end", "end_time", required=True, help="End time HH:MM")
@click.option("--description", default="", help="Event description")
@click.option("--location", default="", help="Event location")
@click.option("--reminder", is_flag=True, help="Add a 10-minute alarm on export")
@click.pass_context
def event_add(ctx, day: date, title: str, start_time: str, end_time: str,
              description: str, location: str, reminder: bool):
    """Add an event titled TITLE on DAY."""
    title = title.strip()
    if not title:
        raise click.BadParameter("title must not be empty", param_hint="TITLE")
    try:
        tr = TimeRange.parse(start_time, end_time)
    except ValueError as e:
        raise click.BadParameter(str(e))
    ev = CalendarEvent(
        title=title,
        description=description.strip(),
        location=location.strip(),
        time=tr,
        reminder=reminder,
    )
    with _session(ctx) as session:
        session.state.add_event(day, ev)
        click.echo(f"Added on {day}: {ev.format_line()}")


@event.command("list")
@click.argument("day", callback=_parse_dates)
@click.pass_context
def event_list(ctx, day: date):
    """List events on DAY with their index."""
    with _session(ctx, save=False) as session:
        events = session.state.events_on(day)
        if not events:
            click.echo(f"No events on {day}.")
            return
        for i, ev in enumerate(events, 1):
            alarm = " [reminder]" if ev.reminder else ""
            click.echo(f"{i}. {ev.format_line()}{alarm}")


@event.command("remove")
@click.argument("day", callback=_parse_dates)
@click.argument("index", type=click.IntRange(min=1))
@click.pass_context
def event_remove(ctx, day: date, index: int):
    """Remove the INDEX-th event (from 'event list') on DAY."""
    with _session(ctx) as session:
        events = session.state.events_on(day)
        if index > len(events):
            click.echo(f"Error: no event #{index} on {day}", err=True)
            sys.exit(1)
        ev = events[index - 1]
        session.state.remove_event(day, ev)
        click.echo(f"Removed from {day}: {ev.title}")


@event.command("edit")
@click.argument("day", callback=_parse_dates)
@click.argument("index", type=click.IntRange(min=1))
@click.option("--title", default=None, help="New title")
@click.option("--start", "start_time", default=None, help="New start time HH:MM")
@click.option("--end", "end_time", default=None, help="New end time HH:MM")
@click.option("--description", default=None, help="New description")
@click.option("--location", default=None, help="New location")
@click.option("--reminder/--no-reminder", default=None, help="Turn the 10-minute alarm on or off")
@click.pass_context
def event_edit(ctx, day: date, index: int, title: str | None, start_time: str | None,
               end_time: str | None, description: str | None, location: str | None,
               reminder: bool | None):
    """Change the INDEX-th event (from 'event list') on DAY.

    Options left out keep their current value.
    """
    if title is not None and not title.strip():
        raise click.BadParameter("title must not be empty", param_hint="--title")
    with _session(ctx) as session:
        events = session.state.events_on(day)
        if index > len(events):
            click.echo(f"Error: no event #{index} on {day}", err=True)
            sys.exit(1)
        old = events[index - 1]
        try:
            tr = TimeRange.parse(
                start_time or format_time(old.time.start),
                end_time or format_time(old.time.end),
            )
        except ValueError as e:
            raise click.BadParameter(str(e))
        new = CalendarEvent(
            title=title.strip() if title is not None else old.title,
            description=description.strip() if description is not None else old.description,
            location=location.strip() if location is not None else old.location,
            time=tr,
            reminder=old.reminder if reminder is None else reminder,
        )
        session.state.add_event(day, new, replacing=old)
        click.echo(f"Updated on {day}: {new.format_line()}")


@event.command("clear")
@click.argument("day", callback=_parse_dates)
@click.pass_context
def event_clear(ctx, day: date):
    """Remove every event on DAY."""
    with _session(ctx) as session:
        session.state.clear_events(day)
        click.echo(f"Cleared events on {day}")


# ============== Export ==============


@main.group()
def export():
    """Export the program."""


@export.command("csv")
@click.argument("out", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_context
def export_csv(ctx, out: Path):
    """Write selected dates and totals to OUT as CSV."""
    with _session(ctx, save=False) as session:
        session.export_csv(out)
        click.echo(f"✓ CSV saved to {out}")


@export.command("ics")
@click.argument("out", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--tzid", default=None, help="Time zone identifier (defaults to TIMEZONE)")
@click.pass_context
def export_ics(ctx, out: Path, tzid: str | None):
    """Write an iCalendar file to OUT."""
    tzid = tzid or ctx.obj["config"].timezone
    with _session(ctx, save=False) as session:
        count = session.export_ics(out, tzid)
        click.echo(f"✓ {count} events exported to {out}")


if __name__ == "__main__":
    main()
