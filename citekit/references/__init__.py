"""Bibliography loading, reference reordering and resource lookup."""

from .bibtex_manager import BibEntry, BibTeXManager, parse_authors, parse_bibtex
from .reorder import Direction, reference_key, shift_reference
from .resources import ResourceOpener

__all__ = [
    "BibEntry",
    "BibTeXManager",
    "Direction",
    "ResourceOpener",
    "parse_authors",
    "parse_bibtex",
    "reference_key",
    "shift_reference",
]
