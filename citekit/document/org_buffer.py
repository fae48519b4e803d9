"""In-memory org document with a cursor, read and written as org-cite text.

Citations look like ``[cite/style:global prefix;prefix @key suffix;@key2]``.
Segments are separated by semicolons; a leading or trailing segment without
a key is the global prefix or suffix of the citation.
"""

import logging
import re
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple

from .model import Citation, CitationReference, Datum, OtherDatum

logger = logging.getLogger(__name__)

CITATION_PATTERN = re.compile(
    r"\[cite(?:/(?P<style>[^:\]\s]*))?:(?P<body>[^\]]*)\]"
)
KEY_PATTERN = re.compile(r"@(?P<key>[-\w.:?!`'/*@+|(){}<>&^$#%~]+)")
BIBLIOGRAPHY_PATTERN = re.compile(
    r"^[ \t]*#\+bibliography:[ \t]*(?P<files>.+?)[ \t]*$",
    re.IGNORECASE | re.MULTILINE,
)


def _segments(body: str, offset: int) -> Iterator[Tuple[int, str]]:
    """Yield (start offset, text) for each semicolon-separated segment."""
    start = 0
    for part in body.split(";"):
        yield offset + start, part
        start += len(part) + 1


def parse_citation(match: "re.Match") -> Citation:
    """Build a Citation from a match of CITATION_PATTERN."""
    style = match.group("style") or None
    citation = Citation(begin=match.start(), end=match.end(), style=style)

    segments = list(_segments(match.group("body"), match.start("body")))
    for position, (start, text) in enumerate(segments):
        key_match = KEY_PATTERN.search(text)
        if key_match is None:
            if position == 0:
                citation.prefix = text
            elif position == len(segments) - 1:
                citation.suffix = text
            continue
        citation.references.append(
            CitationReference(
                key=key_match.group("key"),
                begin=start,
                end=start + len(text),
                prefix=text[: key_match.start()],
                suffix=text[key_match.end():],
                parent=citation,
            )
        )
    return citation


def serialize_reference(reference: CitationReference) -> str:
    return f"{reference.prefix}@{reference.key}{reference.suffix}"


def format_citation(keys: Sequence[str], style: Optional[str] = None) -> str:
    """Render a new citation object for the given keys."""
    style_part = f"/{style}" if style else ""
    return f"[cite{style_part}:" + ";".join(f"@{key}" for key in keys) + "]"


class OrgCiteBuffer:
    """Text of an org document plus a cursor offset."""

    def __init__(self, text: str = "", cursor: int = 0, path: Optional[Path] = None):
        self.text = text
        self.path = Path(path) if path else None
        self._cursor = 0
        self.move_cursor(cursor)

    @classmethod
    def from_file(cls, path: Path, cursor: int = 0) -> "OrgCiteBuffer":
        path = Path(path)
        return cls(path.read_text(encoding="utf-8"), cursor=cursor, path=path)

    def save(self, path: Optional[Path] = None) -> Path:
        """Write the text back to its file, or to ``path``."""
        target = Path(path) if path else self.path
        if target is None:
            raise ValueError("Buffer has no file to save to")
        target.write_text(self.text, encoding="utf-8")
        logger.debug(f"Saved {target}")
        return target

    @property
    def cursor(self) -> int:
        return self._cursor

    def move_cursor(self, offset: int) -> None:
        self._cursor = max(0, min(offset, len(self.text)))

    def citations(self) -> List[Citation]:
        """All citations in document order."""
        return [parse_citation(m) for m in CITATION_PATTERN.finditer(self.text)]

    def citation_at(self, offset: int) -> Optional[Citation]:
        for citation in self.citations():
            if citation.begin <= offset < citation.end:
                return citation
        return None

    def parse_context_at_cursor(self) -> Optional[Datum]:
        """Return the reference, citation or other text under the cursor.

        Returns None when the document is empty.
        """
        citation = self.citation_at(self.cursor)
        if citation is not None:
            for reference in citation.references:
                if reference.begin <= self.cursor < reference.end:
                    return reference
            return citation
        if not self.text:
            return None
        return OtherDatum(begin=self.cursor, end=min(self.cursor + 1, len(self.text)))

    def get_references(self, citation: Citation) -> List[CitationReference]:
        return list(citation.references)

    def get_text_span(self, datum: Datum) -> Tuple[int, int]:
        return datum.begin, datum.end

    def get_text(self, begin: int, end: int) -> str:
        return self.text[max(begin, 0) : max(end, 0)]

    def replace_text_span(self, begin: int, end: int, new_text: str) -> None:
        """Replace text between two offsets, keeping the cursor in place."""
        if not 0 <= begin <= end <= len(self.text):
            raise ValueError(f"Invalid span {begin}-{end}")
        self.text = self.text[:begin] + new_text + self.text[end:]
        if self._cursor >= end:
            self._cursor += len(new_text) - (end - begin)
        elif self._cursor > begin:
            self._cursor = min(self._cursor, begin + len(new_text))

    def serialize(self, references: Sequence[CitationReference]) -> str:
        return ";".join(serialize_reference(ref) for ref in references)

    def format_citation(self, keys: Sequence[str], style: Optional[str] = None) -> str:
        return format_citation(keys, style)

    def insert_text(self, text: str) -> None:
        """Insert text at the cursor and move past it."""
        position = self._cursor
        self.text = self.text[:position] + text + self.text[position:]
        self._cursor = position + len(text)

    def find_key(self, key: str, start: int = 0) -> Optional[int]:
        """Offset of the first reference to ``key`` at or after ``start``."""
        for citation in self.citations():
            for reference in citation.references:
                if reference.key == key and reference.begin >= start:
                    return key_offset(reference)
        return None

    def bibliography_files(self) -> List[Path]:
        """Files named by ``#+bibliography:`` keywords."""
        base = self.path.parent if self.path else Path.cwd()
        files = []
        for match in BIBLIOGRAPHY_PATTERN.finditer(self.text):
            name = match.group("files").strip().strip('"')
            path = Path(name).expanduser()
            files.append(path if path.is_absolute() else base / path)
        return files


def key_offset(reference: CitationReference) -> int:
    """Offset of the key text (just after ``@``) of a reference."""
    return reference.begin + len(reference.prefix) + 1
