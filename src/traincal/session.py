"""Session layer between the CLI and the program core.

A Session owns one ProgramState plus the transient outside-range pin, and
turns month-grid clicks into state operations. Loading parses into a fresh
state first so a failed load leaves the current program untouched.
"""

import logging
from datetime import date
from enum import Enum
from pathlib import Path

from .adapters.file_store import FileProgramStore
from .config import Config
from .core.program import OutsidePin, ProgramState
from .core.summary import ProgramSummary, calculate
from .ports.program_store import ProgramStore

logger = logging.getLogger(__name__)


class Click(Enum):
    """Mouse gesture on a day cell."""

    PLAIN = "plain"
    CTRL = "ctrl"
    SHIFT = "shift"


class Session:
    """One interactive editing session over a program."""

    def __init__(self, store: ProgramStore | None = None, state: ProgramState | None = None):
        self.store = store or FileProgramStore()
        self.state = state or ProgramState()
        self.pin = OutsidePin()

    @classmethod
    def from_config(cls, config: Config) -> "Session":
        return cls(store=FileProgramStore(prod_id=config.prod_id))

    def click(self, d: date, gesture: Click = Click.PLAIN) -> None:
        """
        Apply a day-cell click.

        Ctrl toggles a per-date exception, shift adjusts the range, and a
        plain click only acts outside the range where it toggles the pin.
        """
        match gesture:
            case Click.CTRL:
                self.state.toggle_exception(d)
            case Click.SHIFT:
                self.state.adjust_range_with(d)
            case Click.PLAIN:
                if self.state.is_inside_range(d):
                    return
                self.state.toggle_outside_selection(d, self.pin)
        logger.debug(f"{gesture.value} click on {d}: selected={self.state.is_selected(d)}")

    def summary(self) -> ProgramSummary | None:
        return calculate(self.state)

    def copy_from(self, other: "Session") -> None:
        """Become a value-independent duplicate of other, pin included."""
        self.state.copy_from(other.state)
        self.pin = OutsidePin(other.pin.pinned)

    def load(self, path: Path) -> None:
        """Replace the program with the one saved at path. Resets the pin."""
        loaded = self.store.load(path)
        self.state.copy_from(loaded)
        self.pin = OutsidePin()

    def load_or_new(self, path: Path) -> None:
        """Load path if it exists, otherwise keep the empty program."""
        if self.store.exists(path):
            self.load(path)
        else:
            logger.info(f"No program at {path}, starting empty")

    def save(self, path: Path) -> None:
        self.store.save(self.state, path)

    def export_csv(self, path: Path) -> None:
        self.store.export_csv(self.state, path)

    def export_ics(self, path: Path, tzid: str) -> int:
        return self.store.export_ics(self.state, path, tzid)
