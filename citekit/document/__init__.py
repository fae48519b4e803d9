"""Document model and the org-cite buffer implementation."""

from .model import (
    Citation,
    CitationReference,
    Datum,
    DocumentPort,
    OtherDatum,
    citation_of,
)
from .org_buffer import OrgCiteBuffer, format_citation, key_offset

__all__ = [
    "Citation",
    "CitationReference",
    "Datum",
    "DocumentPort",
    "OtherDatum",
    "OrgCiteBuffer",
    "citation_of",
    "format_citation",
    "key_offset",
]
