"""Program document codec (JSON) and flat summary table (CSV).

Pure text transforms - callers do the file I/O.
"""

import csv
import io
import json
import logging
from datetime import date

from .errors import NoRangeError, ProgramFormatError
from .program import ProgramState
from .schedule import CalendarEvent, TimeRange, Weekday, format_time
from .summary import ProgramSummary, calculate, minutes_on

logger = logging.getLogger(__name__)

CSV_HEADER = ["fecha", "dow", "minutos"]


# ============== Save ==============


def _time_range_doc(tr: TimeRange) -> dict:
    return {"start": format_time(tr.start), "end": format_time(tr.end)}


def _event_doc(ev: CalendarEvent) -> dict:
    return {
        "title": ev.title,
        "description": ev.description,
        "location": ev.location,
        "time": _time_range_doc(ev.time),
        "reminder": ev.reminder,
    }


def _totals_doc(summary: ProgramSummary) -> dict:
    return {
        "start": summary.start.isoformat(),
        "end": summary.end.isoformat(),
        "weeksInRange": summary.weeks_in_range,
        "weeksWithTraining": summary.weeks_with_training,
        "selectedDays": summary.selected_days,
        "totalMinutes": summary.total_minutes,
    }


def to_document(state: ProgramState, summary: ProgramSummary | None = None) -> dict:
    """Build the save document. Sets are written sorted so output is stable."""
    by_day = state.time_by_day
    doc = {
        "start": state.start.isoformat() if state.start else None,
        "end": state.end.isoformat() if state.end else None,
        "trainingDays": [w.name for w in sorted(state.training_days, key=lambda w: w.value)],
        "timeByDay": {
            w.name: _time_range_doc(by_day[w]) for w in sorted(by_day, key=lambda w: w.value)
        },
        "forceOn": [d.isoformat() for d in sorted(state.forced_on)],
        "forceOff": [d.isoformat() for d in sorted(state.forced_off)],
        "events": {
            d.isoformat(): [_event_doc(ev) for ev in state.events_on(d)]
            for d in state.event_dates()
        },
    }
    if summary is not None:
        doc["totals"] = _totals_doc(summary)
    return doc


def dumps(state: ProgramState, summary: ProgramSummary | None = None) -> str:
    return json.dumps(to_document(state, summary), indent=2, ensure_ascii=False)


# ============== Load ==============


def _parse_date(value, what: str) -> date | None:
    """Parse an ISO date, logging and returning None on failure."""
    try:
        if not isinstance(value, str):
            raise ValueError(f"expected a string, got {value!r}")
        return date.fromisoformat(value)
    except ValueError as e:
        logger.warning(f"Skipping invalid {what} date {value!r}: {e}")
        return None


def _parse_time_range(value) -> TimeRange:
    if not isinstance(value, dict):
        raise ValueError(f"expected an object, got {value!r}")
    return TimeRange.parse(value.get("start"), value.get("end"))


def _text_field(value: dict, key: str) -> str:
    text = value.get(key)
    if text is None:
        return ""
    if not isinstance(text, str):
        raise ValueError(f"{key} must be a string, got {text!r}")
    return text


def _parse_event(value) -> CalendarEvent:
    if not isinstance(value, dict):
        raise ValueError(f"expected an object, got {value!r}")
    raw_time = value.get("time")
    time_range = TimeRange.parse("00:00", "00:00") if raw_time is None else _parse_time_range(raw_time)
    reminder = value.get("reminder", False)
    if reminder is None:
        reminder = False
    if not isinstance(reminder, bool):
        raise ValueError(f"reminder must be true or false, got {reminder!r}")
    return CalendarEvent(
        title=_text_field(value, "title"),
        description=_text_field(value, "description"),
        location=_text_field(value, "location"),
        time=time_range,
        reminder=reminder,
    )


def _list_field(doc: dict, key: str) -> list:
    value = doc.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        logger.warning(f"Ignoring {key}: expected a list, got {type(value).__name__}")
        return []
    return value


def _dict_field(doc: dict, key: str) -> dict:
    value = doc.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        logger.warning(f"Ignoring {key}: expected an object, got {type(value).__name__}")
        return {}
    return value


def from_document(doc: dict) -> ProgramState:
    """
    Build a ProgramState from a save document.

    Bad weekday, date, time and event entries are logged and skipped; only
    a document that is not an object at all raises ProgramFormatError.
    The informational "totals" block is ignored.
    """
    if not isinstance(doc, dict):
        raise ProgramFormatError(f"Program document must be an object, got {type(doc).__name__}")

    state = ProgramState()

    start = _parse_date(doc["start"], "start") if doc.get("start") is not None else None
    end = _parse_date(doc["end"], "end") if doc.get("end") is not None else None
    state.set_range(start, end)

    for token in _list_field(doc, "trainingDays"):
        try:
            state.set_training_day(Weekday.parse(token), True)
        except ValueError as e:
            logger.warning(f"Skipping training day: {e}")

    for token, raw in _dict_field(doc, "timeByDay").items():
        try:
            state.set_schedule(Weekday.parse(token), _parse_time_range(raw))
        except (ValueError, TypeError) as e:
            logger.warning(f"Skipping schedule for {token!r}: {e}")

    # force_on is applied last so a date listed in both keeps winning, as it
    # does in is_selected().
    for raw in _list_field(doc, "forceOff"):
        d = _parse_date(raw, "forceOff")
        if d is not None:
            state.force_off(d)
    for raw in _list_field(doc, "forceOn"):
        d = _parse_date(raw, "forceOn")
        if d is not None:
            state.force_on(d)

    for raw_date, raw_events in _dict_field(doc, "events").items():
        d = _parse_date(raw_date, "event")
        if d is None:
            continue
        if not isinstance(raw_events, list):
            logger.warning(f"Skipping events on {raw_date}: expected a list")
            continue
        for raw in raw_events:
            try:
                event = _parse_event(raw)
            except (ValueError, TypeError) as e:
                logger.warning(f"Skipping event on {raw_date}: {e}")
                continue
            state.add_event(d, event)

    return state


def loads(text: str) -> ProgramState:
    try:
        doc = json.loads(text)
    except json.JSONDecodeError as e:
        raise ProgramFormatError(f"Invalid program JSON: {e}") from e
    return from_document(doc)


# ============== CSV ==============


def render_csv(state: ProgramState) -> str:
    """
    Selected dates with their minutes, then the summary totals.

    Raises:
        NoRangeError: If the state has no range.
    """
    summary = calculate(state)
    if summary is None:
        raise NoRangeError("No date range defined; nothing to export as CSV.")

    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for d in state.dates_in_range():
        if not state.is_selected(d):
            continue
        writer.writerow([d.isoformat(), Weekday.of(d).name, minutes_on(state, d)])

    buf.write("\n")
    writer.writerow(["resumen", "valor"])
    writer.writerow(["semanas_del_rango", summary.weeks_in_range])
    writer.writerow(["semanas_con_entrenamiento", summary.weeks_with_training])
    writer.writerow(["dias_seleccionados", summary.selected_days])
    writer.writerow(["minutos_totales", summary.total_minutes])
    return buf.getvalue()
