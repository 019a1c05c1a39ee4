"""
Daily note lookup. A note is the file named after its date inside the vault.
"""
import logging
from datetime import date
from pathlib import Path
from typing import Protocol

from .errors import NoteLookupError

logger = logging.getLogger(__name__)

DEFAULT_NOTE_FORMAT = "%Y-%m-%d.md"


class NoteLookup(Protocol):
    def read(self, day: date) -> str | None:
        """Return the note text for `day`, or None if there is no note."""
        ...


class VaultNoteLookup:
    def __init__(self, root: str | Path, name_format: str = DEFAULT_NOTE_FORMAT):
        self.root = Path(root)
        self.name_format = name_format

    def note_name(self, day: date) -> str:
        return day.strftime(self.name_format)

    def read(self, day: date) -> str | None:
        path = self.root / self.note_name(day)
        try:
            if not self.root.is_dir():
                raise NoteLookupError(f"Vault directory not available: {self.root}")
            # Stray non-UTF-8 bytes still leave the words countable.
            return path.read_text(encoding="utf-8", errors="replace")
        except FileNotFoundError:
            logger.info("No daily note at %s", path)
            return None
        except IsADirectoryError:
            # A folder with the note's name is not a note.
            logger.info("Daily note path %s is a directory", path)
            return None
        except OSError as e:
            raise NoteLookupError(f"Could not read {path}: {e}") from e
