"""File-based program storage adapter."""

import logging
from pathlib import Path

from traincal.core.codec import dumps, loads, render_csv
from traincal.core.ics import DEFAULT_PROD_ID, count_events, render_ics
from traincal.core.program import ProgramState
from traincal.core.summary import calculate

logger = logging.getLogger(__name__)


class FileProgramStore:
    """
    File-based program storage.

    Implements ProgramStore protocol. Every write renders the full text
    first and then writes it in one go, so a failed render leaves no file.
    OSError from the filesystem propagates unchanged.
    """

    def __init__(self, prod_id: str = DEFAULT_PROD_ID, encoding: str = "utf-8"):
        self.prod_id = prod_id
        self.encoding = encoding

    def _write(self, path: Path, text: str, newline: str | None = None) -> None:
        path = Path(path).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding=self.encoding, newline=newline) as f:
            f.write(text)

    def exists(self, path: Path) -> bool:
        return Path(path).expanduser().exists()

    def load(self, path: Path) -> ProgramState:
        """Load a program. Raises ProgramFormatError on a malformed document."""
        path = Path(path).expanduser()
        state = loads(path.read_text(encoding=self.encoding))
        logger.info(f"Loaded program from {path}")
        return state

    def save(self, state: ProgramState, path: Path) -> None:
        """Save a program, including computed totals when it has a range."""
        text = dumps(state, calculate(state))
        self._write(path, text + "\n")
        logger.info(f"Saved program to {path}")

    def export_csv(self, state: ProgramState, path: Path) -> None:
        """Write the flat summary table. Raises NoRangeError without a range."""
        text = render_csv(state)
        self._write(path, text, newline="")
        logger.info(f"Exported CSV to {path}")

    def export_ics(self, state: ProgramState, path: Path, tzid: str) -> int:
        """Write an iCalendar file. Returns the number of events written."""
        text = render_ics(state, tzid, prod_id=self.prod_id)
        # newline="" keeps the CRLF terminators exactly as rendered
        self._write(path, text, newline="")
        count = count_events(text)
        logger.info(f"Exported {count} events to {path}")
        return count
