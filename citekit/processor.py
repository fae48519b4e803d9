"""The citation processor: insert, follow and select-style callbacks plus
the commands that edit the citation at the cursor.

Every command validates before it mutates, so a raised CitationError leaves
the document as it was.
"""

import logging
import os
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Protocol, Tuple, Union

from .document.model import (
    Citation,
    CitationReference,
    DocumentPort,
    citation_of,
)
from .exceptions import TargetNotFoundError
from .references.bibtex_manager import BibTeXManager
from .references.reorder import Direction, shift_reference
from .references.resources import ResourceOpener
from .styles.catalog import StyleCatalog, normalize_selection

logger = logging.getLogger(__name__)

# (candidates, annotate, group) -> chosen candidate or None
StyleChooser = Callable[
    [List[str], Callable[[str], str], Callable[[str, bool], str]], Optional[str]
]


class ReferenceSelector(Protocol):
    """Bibliography-entry selection offered to the user."""

    def refresh_index(self) -> None: ...

    def select_references(self) -> List[str]: ...


class ProcessorCache:
    """Loaded bibliography per set of bibliography files.

    The cached index is rebuilt when the file set changes or any file has
    been modified since it was loaded.
    """

    def __init__(
        self,
        project_root: Path,
        factory: Optional[Callable[[Path, List[Path]], BibTeXManager]] = None,
    ):
        self.project_root = Path(project_root)
        self.factory = factory or self._load
        self._signature: Optional[Tuple] = None
        self._processor: Optional[BibTeXManager] = None

    @staticmethod
    def _load(project_root: Path, files: List[Path]) -> BibTeXManager:
        manager = BibTeXManager(project_root, files)
        manager.load_bibliography()
        return manager

    @staticmethod
    def _signature_of(files: List[Path]) -> Tuple:
        return tuple(
            (str(path), os.path.getmtime(path) if path.exists() else None)
            for path in files
        )

    def get_or_create(self, bibliography_files: Iterable[Union[str, Path]]) -> BibTeXManager:
        files = [Path(f) for f in bibliography_files]
        signature = self._signature_of(files)
        if self._processor is None or signature != self._signature:
            logger.debug(f"Loading bibliography from {len(files)} file(s)")
            self._processor = self.factory(self.project_root, files)
            self._signature = signature
        return self._processor

    def invalidate(self) -> None:
        self._processor = None
        self._signature = None


class CitationProcessor:
    """Citation processor registered with the document citation subsystem."""

    name = "citekit"

    def __init__(
        self,
        catalog: StyleCatalog,
        selector: Optional[ReferenceSelector] = None,
        multiple: bool = True,
    ):
        self.catalog = catalog
        self.selector = selector
        self.multiple = multiple

    # Callbacks

    def select_keys(self, multiple: Optional[bool] = None) -> Union[List[str], str, None]:
        """Refresh the index and let the user pick bibliography keys.

        Returns every chosen key in multiple-selection mode, otherwise only
        the first one. None when nothing was chosen.
        """
        if self.selector is None:
            raise RuntimeError("No reference selector configured")
        multiple = self.multiple if multiple is None else multiple
        self.selector.refresh_index()
        keys = list(self.selector.select_references())
        if not keys:
            return None
        return keys if multiple else keys[0]

    def insert(
        self,
        document: DocumentPort,
        keys: Union[List[str], str, None] = None,
        style: Optional[str] = None,
    ) -> List[str]:
        """Insert keys at the cursor.

        Inside a citation the keys join it, after the reference at the
        cursor; elsewhere a new citation is written. Returns the keys added.
        """
        if keys is None:
            keys = self.select_keys()
        if not keys:
            return []
        if isinstance(keys, str):
            keys = [keys]

        datum = document.parse_context_at_cursor()
        citation = citation_of(datum)
        if citation is None:
            document.insert_text(document.format_citation(keys, style))
            logger.info(f"Inserted citation for {', '.join(keys)}")
            return list(keys)

        references = document.get_references(citation)
        existing = {ref.key for ref in references}
        added = [key for key in dict.fromkeys(keys) if key not in existing]
        if not added:
            logger.info("All keys are already cited here")
            return []

        new_refs = [CitationReference(key=key, begin=0, end=0) for key in added]
        position = len(references)
        if isinstance(datum, CitationReference):
            position = references.index(datum) + 1
        updated = references[:position] + new_refs + references[position:]

        begin, end = citation.contents_begin, citation.contents_end
        text = document.serialize(updated)
        document.replace_text_span(begin, end, text)
        document.move_cursor(begin + len(document.serialize(updated[: position + len(added)])))
        logger.info(f"Added {', '.join(added)} to citation")
        return added

    def follow(
        self,
        document: DocumentPort,
        opener: ResourceOpener,
        action: str = "dwim",
    ) -> list:
        """Open resources for the reference, or all references, at the cursor."""
        keys = self.keys_at_point(document)
        return opener.run(action, keys)

    def select_style(
        self, chooser: StyleChooser, targets: Optional[List[str]] = None
    ) -> Optional[str]:
        """Ask for a style; None stands for the default style.

        ``targets`` restricts the candidates to styles those export targets
        support, instead of the catalog's own targets.
        """
        taxonomy = self.catalog.taxonomy_source(targets) if targets else None
        candidates = sorted(self.catalog.build(taxonomy))
        choice = chooser(candidates, self.catalog.annotate, self.catalog.group_display)
        return normalize_selection(choice)

    # Commands

    def keys_at_point(self, document: DocumentPort) -> List[str]:
        datum = document.parse_context_at_cursor()
        if isinstance(datum, CitationReference):
            return [datum.key]
        if isinstance(datum, Citation):
            return [ref.key for ref in document.get_references(datum)]
        raise TargetNotFoundError("Not on a citation")

    def _citation_at_point(self, document: DocumentPort):
        datum = document.parse_context_at_cursor()
        citation = citation_of(datum)
        if citation is None:
            raise TargetNotFoundError("Not on a citation")
        return datum, citation

    def _remove(self, document: DocumentPort, begin: int, end: int) -> str:
        removed = document.get_text(begin, end)
        # No dangling space before whitespace, punctuation or end of text.
        following = document.get_text(end, end + 1)
        if document.get_text(begin - 1, begin) == " " and (
            not following or following.isspace() or following in ".,;:!?)"
        ):
            begin -= 1
        document.replace_text_span(begin, end, "")
        document.move_cursor(begin)
        return removed

    def delete_citation(self, document: DocumentPort) -> str:
        """Delete the reference at the cursor, or the whole citation.

        A reference that is the only one in its citation takes the citation
        with it. Returns the deleted text.
        """
        datum, citation = self._citation_at_point(document)
        references = document.get_references(citation)

        if isinstance(datum, CitationReference) and len(references) > 1:
            index = references.index(datum)
            if index < len(references) - 1:
                begin, end = datum.begin, references[index + 1].begin
            else:
                begin, end = references[index - 1].end, datum.end
            removed = document.get_text(begin, end)
            document.replace_text_span(begin, end, "")
            document.move_cursor(begin)
            logger.info(f"Deleted reference '{datum.key}'")
            return removed

        begin, end = document.get_text_span(citation)
        removed = self._remove(document, begin, end)
        logger.info(f"Deleted citation {removed}")
        return removed

    def kill_citation(self, document: DocumentPort) -> str:
        """Remove the whole citation at the cursor and return its text."""
        _, citation = self._citation_at_point(document)
        begin, end = document.get_text_span(citation)
        killed = self._remove(document, begin, end)
        logger.info(f"Killed citation {killed}")
        return killed

    def shift_reference(self, document: DocumentPort, direction: Union[Direction, str]) -> int:
        """Swap the reference at the cursor with its neighbour.

        The cursor ends up on the moved key. Returns its new index.
        """
        datum, citation = self._citation_at_point(document)
        references = document.get_references(citation)
        target = datum if isinstance(datum, CitationReference) else None

        shifted, index = shift_reference(references, target, direction)

        begin, end = references[0].begin, references[-1].end
        document.replace_text_span(begin, end, document.serialize(shifted))
        leading = document.serialize(shifted[:index])
        offset = begin + len(leading) + (1 if index else 0)
        document.move_cursor(offset + len(shifted[index].prefix) + 1)
        logger.info(f"Moved reference '{shifted[index].key}' {Direction(direction).value}")
        return index

    def shift_reference_left(self, document: DocumentPort) -> int:
        return self.shift_reference(document, Direction.LEFT)

    def shift_reference_right(self, document: DocumentPort) -> int:
        return self.shift_reference(document, Direction.RIGHT)

    def update_affixes(
        self, document: DocumentPort, prefix: str = "", suffix: str = ""
    ) -> CitationReference:
        """Replace the prefix and suffix of the reference at the cursor."""
        datum = document.parse_context_at_cursor()
        if not isinstance(datum, CitationReference):
            raise TargetNotFoundError()

        prefix = prefix.strip()
        suffix = suffix.strip()
        updated = CitationReference(
            key=datum.key,
            begin=datum.begin,
            end=datum.end,
            prefix=f"{prefix} " if prefix else "",
            suffix=f" {suffix}" if suffix else "",
            parent=datum.parent,
        )
        text = document.serialize([updated])
        document.replace_text_span(datum.begin, datum.end, text)
        updated.end = datum.begin + len(text)
        document.move_cursor(datum.begin + len(updated.prefix) + 1)
        logger.info(f"Updated prefix/suffix of '{datum.key}'")
        return updated

    def activate(self) -> Dict[str, Callable]:
        """Callbacks handed to the citation subsystem."""
        return {
            "insert": self.insert,
            "follow": self.follow,
            "select-style": self.select_style,
        }
