"""BibTeX bibliography loading."""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import bibtexparser
from bibtexparser.bparser import BibTexParser
from bibtexparser.customization import convert_to_unicode

logger = logging.getLogger(__name__)

# Fields left out of LaTeX-to-unicode conversion.
VERBATIM_FIELDS = ("author", "editor", "url", "doi", "file")


@dataclass
class BibEntry:
    """A single bibliography entry."""

    key: str
    entry_type: str
    title: str = ""
    authors: List[str] = field(default_factory=list)
    year: str = ""
    journal: str = ""
    volume: str = ""
    pages: str = ""
    url: str = ""
    doi: str = ""
    files: List[str] = field(default_factory=list)
    raw_entry: Dict[str, str] = field(default_factory=dict)
    source_file: Optional[Path] = None

    @property
    def links(self) -> List[str]:
        """URLs for the entry: its url field, then its DOI resolver link."""
        links = []
        if self.url:
            links.append(self.url)
        if self.doi:
            doi = self.doi
            links.append(doi if doi.startswith("http") else f"https://doi.org/{doi}")
        return links


def _customize(record: Dict[str, str]) -> Dict[str, str]:
    verbatim = {name: record[name] for name in VERBATIM_FIELDS if name in record}
    record = convert_to_unicode(record)
    record.update(verbatim)
    return record


def _make_parser() -> BibTexParser:
    parser = BibTexParser(common_strings=True, ignore_nonstandard_types=False)
    parser.customization = _customize
    return parser


def _clean(value: str) -> str:
    """Strip protective braces and collapse whitespace."""
    return " ".join(value.replace("{", "").replace("}", "").split())


def parse_authors(value: str) -> List[str]:
    """Split an author field on top-level ``and``.

    Brace-protected corporate names such as ``{Ministry of Housing,
    Communities and Local Government}`` stay whole.
    """
    authors = []
    depth = 0
    current = []
    tokens = re.split(r"(\s+and\s+|[{}])", value)
    for token in tokens:
        if token == "{":
            depth += 1
        elif token == "}":
            depth -= 1
        elif depth == 0 and re.fullmatch(r"\s+and\s+", token or ""):
            authors.append("".join(current))
            current = []
            continue
        current.append(token)
    authors.append("".join(current))
    return [_clean(author) for author in authors if _clean(author)]


def parse_bibtex(text: str, source_file: Optional[Path] = None) -> List[BibEntry]:
    """Parse all entries of a BibTeX string.

    ``@comment``, ``@preamble`` and ``@string`` blocks are not entries;
    string macros and ``#`` concatenation are expanded.
    """
    try:
        database = bibtexparser.loads(text, parser=_make_parser())
    except Exception as e:
        raise ValueError(f"BibTeX parsing error: {e}") from e

    entries = []
    for record in database.entries:
        record = dict(record)
        key = record.pop("ID")
        entry_type = record.pop("ENTRYTYPE").lower()
        fields = {name.lower(): str(value) for name, value in record.items()}
        entries.append(
            BibEntry(
                key=key,
                entry_type=entry_type,
                title=_clean(fields.get("title", "")),
                authors=parse_authors(fields.get("author", fields.get("editor", ""))),
                year=_clean(fields.get("year", fields.get("date", "")))[:4],
                journal=_clean(fields.get("journal", fields.get("journaltitle", ""))),
                volume=_clean(fields.get("volume", "")),
                pages=_clean(fields.get("pages", "")),
                url=_clean(fields.get("url", "")),
                doi=_clean(fields.get("doi", "")),
                files=[f.strip() for f in fields.get("file", "").split(";") if f.strip()],
                raw_entry={name: _clean(value) for name, value in fields.items()},
                source_file=source_file,
            )
        )
    return entries


class BibTeXManager:
    """Loads BibTeX files and indexes their entries by key."""

    def __init__(self, project_root: Path, bib_files: Optional[Iterable[Path]] = None):
        """Initialize manager.

        Args:
            project_root: Directory searched for .bib files when none are given
            bib_files: Explicit bibliography files
        """
        self.project_root = Path(project_root)
        self.bib_files: List[Path] = [Path(f) for f in bib_files] if bib_files else []
        self.entries: Dict[str, BibEntry] = {}

    def discover_files(self) -> List[Path]:
        """Bibliography files to load: explicit ones, else *.bib in the root."""
        if self.bib_files:
            return list(self.bib_files)
        return sorted(self.project_root.glob("*.bib"))

    def load_bibliography(self, bib_file: Optional[Path] = None) -> Dict[str, BibEntry]:
        """Load entries from one file, or from every discovered file.

        Later files override earlier ones for duplicate keys.
        """
        files = [Path(bib_file)] if bib_file else self.discover_files()
        for path in files:
            if not path.exists():
                logger.warning(f"Bibliography file not found: {path}")
                continue
            entries = parse_bibtex(path.read_text(encoding="utf-8"), source_file=path)
            for entry in entries:
                if entry.key in self.entries:
                    logger.debug(f"Duplicate key '{entry.key}' in {path.name}")
                self.entries[entry.key] = entry
            logger.info(f"Loaded {len(entries)} entries from {path.name}")
        return self.entries

    def refresh(self) -> Dict[str, BibEntry]:
        """Drop the index and load every file again."""
        self.entries = {}
        return self.load_bibliography()

    def get_entry(self, key: str) -> Optional[BibEntry]:
        return self.entries.get(key)

    def get_all_keys(self) -> List[str]:
        return list(self.entries)
