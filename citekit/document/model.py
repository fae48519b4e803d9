"""Document objects seen by citation commands and the port they act through."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Protocol, Sequence, Tuple, Union


@dataclass(eq=False)
class CitationReference:
    """One ``prefix @key suffix`` reference inside a citation.

    References compare equal by key, regardless of position.
    """

    key: str
    begin: int
    end: int
    prefix: str = ""
    suffix: str = ""
    parent: Optional["Citation"] = field(default=None, repr=False)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CitationReference):
            return self.key == other.key
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.key)


@dataclass
class Citation:
    """A citation object and the references it holds."""

    begin: int
    end: int
    style: Optional[str] = None
    references: List[CitationReference] = field(default_factory=list)
    prefix: str = ""
    suffix: str = ""

    @property
    def keys(self) -> List[str]:
        return [ref.key for ref in self.references]

    @property
    def contents_begin(self) -> int:
        """Offset where the first reference starts."""
        return self.references[0].begin if self.references else self.end - 1

    @property
    def contents_end(self) -> int:
        """Offset where the last reference ends."""
        return self.references[-1].end if self.references else self.end - 1


@dataclass
class OtherDatum:
    """Any other text under the cursor."""

    begin: int
    end: int


Datum = Union[Citation, CitationReference, OtherDatum]


def citation_of(datum: Optional[Datum]) -> Optional[Citation]:
    """Return the citation a datum is or belongs to."""
    if isinstance(datum, Citation):
        return datum
    if isinstance(datum, CitationReference):
        return datum.parent
    return None


class DocumentPort(Protocol):
    """Operations citation commands need from a document."""

    @property
    def cursor(self) -> int: ...

    def parse_context_at_cursor(self) -> Optional[Datum]: ...

    def get_references(self, citation: Citation) -> List[CitationReference]: ...

    def get_text_span(self, datum: Datum) -> Tuple[int, int]: ...

    def get_text(self, begin: int, end: int) -> str: ...

    def replace_text_span(self, begin: int, end: int, new_text: str) -> None: ...

    def serialize(self, references: Sequence[CitationReference]) -> str: ...

    def format_citation(self, keys: Sequence[str], style: Optional[str] = None) -> str: ...

    def move_cursor(self, offset: int) -> None: ...

    def insert_text(self, text: str) -> None: ...

    def bibliography_files(self) -> List[Path]: ...
