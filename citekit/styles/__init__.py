"""Citation styles: supported taxonomy and the selection catalog."""

from .catalog import (
    STYLE_PREVIEWS,
    StyleCatalog,
    StyleGroup,
    build_candidates,
    group_of,
    normalize_selection,
    truncate_to_width,
)
from .taxonomy import SUPPORTED_TARGETS, StyleName, supported_styles

__all__ = [
    # Catalog
    "StyleCatalog",
    "StyleGroup",
    "STYLE_PREVIEWS",
    "build_candidates",
    "group_of",
    "normalize_selection",
    "truncate_to_width",
    # Taxonomy
    "StyleName",
    "SUPPORTED_TARGETS",
    "supported_styles",
]
