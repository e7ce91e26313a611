"""Pure summary aggregation and formatting - no I/O dependencies."""

from dataclasses import dataclass, field
from datetime import date

from .program import ProgramState
from .schedule import Weekday

MONTHS_ES = [
    "Enero",
    "Febrero",
    "Marzo",
    "Abril",
    "Mayo",
    "Junio",
    "Julio",
    "Agosto",
    "Septiembre",
    "Octubre",
    "Noviembre",
    "Diciembre",
]

NO_MINUTES = "Sin minutos asignados."


@dataclass(frozen=True)
class ProgramSummary:
    """Totals derived from a ProgramState over its normalized range."""

    start: date
    end: date
    selected_days: int
    total_minutes: int
    weeks_in_range: int
    weeks_with_training: int
    minutes_by_month: dict[tuple[int, int], int] = field(default_factory=dict)
    minutes_by_week: dict[int, int] = field(default_factory=dict)


def program_week(start: date, d: date) -> int:
    """1-based week of the program, counted from its first day."""
    return (d - start).days // 7 + 1


def minutes_on(state: ProgramState, d: date) -> int:
    """Scheduled minutes for the weekday of d, or 0 with no schedule."""
    tr = state.schedule_for(Weekday.of(d))
    return tr.minutes() if tr else 0


def calculate(state: ProgramState) -> ProgramSummary | None:
    """
    Replay the selection over the whole range and total it up.

    Pure function - no I/O. Returns None when the state has no range.
    """
    if state is None or not state.has_range():
        return None

    start = state.min_date()
    end = state.max_date()

    by_month: dict[tuple[int, int], int] = {}
    by_week: dict[int, int] = {}
    weeks_with_any: set[int] = set()
    selected_days = 0
    total_minutes = 0

    for d in state.dates_in_range():
        if not state.is_selected(d):
            continue

        selected_days += 1
        mins = minutes_on(state, d)
        total_minutes += mins

        key = (d.year, d.month)
        by_month[key] = by_month.get(key, 0) + mins

        week = program_week(start, d)
        weeks_with_any.add(week)
        by_week[week] = by_week.get(week, 0) + mins

    days_in_range = (end - start).days + 1

    return ProgramSummary(
        start=start,
        end=end,
        selected_days=selected_days,
        total_minutes=total_minutes,
        weeks_in_range=(days_in_range + 6) // 7,
        weeks_with_training=len(weeks_with_any),
        minutes_by_month=by_month,
        minutes_by_week=by_week,
    )


def format_hhmm(minutes: int) -> str:
    """120 -> "02:00"."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def format_hm(minutes: int) -> str:
    """90 -> "1 h 30 m", 120 -> "2 h", 45 -> "45 m"."""
    h, m = divmod(minutes, 60)
    if h == 0:
        return f"{m} m"
    if m == 0:
        return f"{h} h"
    return f"{h} h {m} m"


def _duration(minutes: int) -> str:
    return f"{format_hhmm(minutes)}  ({format_hm(minutes)})"


def summary_rows(summary: ProgramSummary) -> dict[str, list[tuple[str, str]]]:
    """
    Label/value rows for displaying a summary.

    Returns dict with keys: totals, months, weeks
    """
    totals = [
        ("Semanas del programa", str(summary.weeks_in_range)),
        ("Semanas con entrenamiento", str(summary.weeks_with_training)),
        ("Días seleccionados", str(summary.selected_days)),
        ("Total minutos", str(summary.total_minutes)),
        (
            "Total horas",
            f"{format_hhmm(summary.total_minutes)}  ({summary.total_minutes / 60:.2f} h)",
        ),
    ]

    months = [
        (f"{MONTHS_ES[month - 1]} {year}", _duration(mins))
        for (year, month), mins in summary.minutes_by_month.items()
    ] or [(NO_MINUTES, "")]

    weeks = [
        (f"Semana {week}", _duration(mins))
        for week, mins in summary.minutes_by_week.items()
    ] or [(NO_MINUTES, "")]

    return {"totals": totals, "months": months, "weeks": weeks}


def format_summary(summary: ProgramSummary | None) -> str:
    """Render summary rows as plain text sections."""
    if summary is None:
        return "Selecciona un rango, días y horarios para ver el resumen."

    rows = summary_rows(summary)
    titles = {
        "totals": "Resumen del programa",
        "months": "Tiempo por mes",
        "weeks": "Tiempo por semana del programa",
    }

    sections = []
    for key, title in titles.items():
        width = max(len(label) for label, _ in rows[key])
        lines = [f"### {title}"]
        lines.extend(f"{label:<{width}}  {value}".rstrip() for label, value in rows[key])
        sections.append("\n".join(lines))
    return "\n\n".join(sections)
