"""citekit - org-cite citation processor backed by BibTeX bibliographies."""

__version__ = "0.1.0"

from .config import CitekitConfig
from .document import Citation, CitationReference, OrgCiteBuffer
from .exceptions import (
    BoundaryError,
    CitationError,
    CitekitError,
    SingleReferenceError,
    TargetNotFoundError,
)
from .extension import CitekitCore, ExtensionHost, register_extension
from .processor import CitationProcessor, ProcessorCache
from .references import BibTeXManager, Direction, shift_reference
from .styles import StyleCatalog, StyleGroup

__all__ = [
    "__version__",
    "BibTeXManager",
    "BoundaryError",
    "Citation",
    "CitationError",
    "CitationProcessor",
    "CitationReference",
    "CitekitConfig",
    "CitekitCore",
    "CitekitError",
    "Direction",
    "ExtensionHost",
    "OrgCiteBuffer",
    "ProcessorCache",
    "SingleReferenceError",
    "StyleCatalog",
    "StyleGroup",
    "TargetNotFoundError",
    "register_extension",
    "shift_reference",
]
