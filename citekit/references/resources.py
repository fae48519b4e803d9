"""Opening the files, links, notes and entries behind citation keys."""

import logging
import webbrowser
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence

from ..exceptions import TargetNotFoundError
from .bibtex_manager import BibEntry, BibTeXManager

logger = logging.getLogger(__name__)

NOTE_EXTENSIONS = (".org", ".md", ".txt")


class ResourceOpener:
    """Finds and opens resources associated with bibliography entries.

    Opening is delegated to ``open_url`` (links) and ``open_path`` (files,
    notes); ``show_entry`` receives entries to display.
    """

    ACTIONS = ("dwim", "entry", "files", "links", "notes")

    def __init__(
        self,
        bibliography: BibTeXManager,
        notes_paths: Optional[Iterable[Path]] = None,
        library_paths: Optional[Iterable[Path]] = None,
        open_url: Callable[[str], object] = webbrowser.open,
        open_path: Optional[Callable[[Path], object]] = None,
        show_entry: Optional[Callable[[BibEntry], object]] = None,
    ):
        self.bibliography = bibliography
        self.notes_paths = [Path(p).expanduser() for p in notes_paths or []]
        self.library_paths = [Path(p).expanduser() for p in library_paths or []]
        self.open_url = open_url
        self.open_path = open_path or (lambda path: webbrowser.open(path.resolve().as_uri()))
        self.show_entry = show_entry or (lambda entry: logger.info(f"{entry.key}: {entry.title}"))

    def _entries(self, keys: Sequence[str]) -> List[BibEntry]:
        entries = []
        for key in keys:
            entry = self.bibliography.get_entry(key)
            if entry is None:
                logger.warning(f"Citation key '{key}' not found in bibliography")
                continue
            entries.append(entry)
        return entries

    def files_for(self, entry: BibEntry) -> List[Path]:
        """Existing files from the entry's file field or the library paths."""
        found = []
        for name in entry.files:
            # JabRef-style "description:path:type"
            parts = name.split(":")
            path = Path(parts[1] if len(parts) == 3 else name).expanduser()
            if not path.is_absolute() and entry.source_file:
                path = entry.source_file.parent / path
            if path.exists():
                found.append(path)
        for directory in self.library_paths:
            found.extend(sorted(directory.glob(f"{entry.key}.*")))
        return found

    def notes_for(self, entry: BibEntry) -> List[Path]:
        found = []
        for directory in self.notes_paths:
            for extension in NOTE_EXTENSIONS:
                path = directory / f"{entry.key}{extension}"
                if path.exists():
                    found.append(path)
        return found

    def open_entry(self, keys: Sequence[str]) -> List[BibEntry]:
        entries = self._entries(keys)
        for entry in entries:
            self.show_entry(entry)
        return entries

    def open_files(self, keys: Sequence[str]) -> List[Path]:
        opened = []
        for entry in self._entries(keys):
            for path in self.files_for(entry):
                self.open_path(path)
                opened.append(path)
        return opened

    def open_links(self, keys: Sequence[str]) -> List[str]:
        opened = []
        for entry in self._entries(keys):
            for link in entry.links:
                self.open_url(link)
                opened.append(link)
        return opened

    def open_notes(self, keys: Sequence[str]) -> List[Path]:
        opened = []
        for entry in self._entries(keys):
            for path in self.notes_for(entry):
                self.open_path(path)
                opened.append(path)
        return opened

    def open(self, keys: Sequence[str]) -> list:
        """Open the first resource available per key: files, links, notes, entry."""
        opened: list = []
        for key in keys:
            for action in (self.open_files, self.open_links, self.open_notes, self.open_entry):
                result = action([key])
                if result:
                    opened.extend(result)
                    break
        return opened

    def run(self, action: str, keys: Sequence[str]) -> list:
        """Dispatch one of ACTIONS on the keys."""
        if not keys:
            raise TargetNotFoundError("No citation keys to open")
        handlers = {
            "dwim": self.open,
            "entry": self.open_entry,
            "files": self.open_files,
            "links": self.open_links,
            "notes": self.open_notes,
        }
        if action not in handlers:
            raise ValueError(f"Unknown action '{action}', expected one of {', '.join(self.ACTIONS)}")
        logger.debug(f"Running '{action}' on {', '.join(keys)}")
        return handlers[action](keys)
