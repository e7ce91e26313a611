"""Program storage interface."""

from pathlib import Path
from typing import Protocol

from traincal.core.program import ProgramState


class ProgramStore(Protocol):
    """Interface for persisting a program and writing its exports."""

    def exists(self, path: Path) -> bool:
        """Check if a saved program exists at path."""
        ...

    def load(self, path: Path) -> ProgramState:
        """Load a program. Raises ProgramFormatError on a malformed document."""
        ...

    def save(self, state: ProgramState, path: Path) -> None:
        """Save a program, including computed totals when it has a range."""
        ...

    def export_csv(self, state: ProgramState, path: Path) -> None:
        """Write the flat summary table. Raises NoRangeError without a range."""
        ...

    def export_ics(self, state: ProgramState, path: Path, tzid: str) -> int:
        """Write an iCalendar file. Returns the number of events written."""
        ...
