"""Style candidates, previews and groups for the style selection prompt."""

import logging
import re
from enum import Enum
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from rich.cells import get_character_cell_size

from .taxonomy import StyleName, StyleTaxonomy, supported_styles

logger = logging.getLogger(__name__)

PREVIEW_WIDTH = 50
GROUP_DISPLAY_WIDTH = 20

DEFAULT_STYLE_PATTERN = re.compile(r"^/[bcf]*")

# Example renderings of each style for the same three-author reference.
STYLE_PREVIEWS: Dict[str, str] = {
    # default style
    "/": "(de Villiers et al, 2019)",
    "/b": "de Villiers et al, 2019",
    "/c": "(De Villiers et al, 2019)",
    "/bc": "de Villiers et al, 2019",
    # "text" style
    "text": "de Villiers et al (2019)",
    "text/c": "De Villiers et al (2019)",
    "text/f": "de Villiers, Smith, Doa, and Jones (2019)",
    "text/cf": "De Villiers, Smith, Doa, and Jones (2019)",
    # "author" style
    "author": "de Villiers et al",
    "author/c": "De Villiers et al",
    "author/f": "de Villiers, Smith, Doa, and Jones",
    "author/cf": "De Villiers, Smith, Doa, and Jones",
    # "locators" style
    "locators": "(p23)",
    "locators/b": "p23",
    # "noauthor" style
    "noauthor": "(2019)",
    "noauthor/b": "2019",
    # "year" style
    "year": "(2019)",
    "year/b": "2019",
}


class StyleGroup(str, Enum):
    """Groups shown as headings in the style selection prompt."""

    DEFAULT = "Default"
    AUTHOR_ONLY = "Author-Only"
    LOCATORS_ONLY = "Locators-Only"
    TEXTUAL = "Textual/Narrative"
    NO_CITE = "No Cite"
    YEAR_ONLY = "Year-Only"
    SUPPRESS_AUTHOR = "Suppress Author"
    UNKNOWN = "Unknown"


BASE_GROUPS: Dict[str, StyleGroup] = {
    "author": StyleGroup.AUTHOR_ONLY,
    "a": StyleGroup.AUTHOR_ONLY,
    "locators": StyleGroup.LOCATORS_ONLY,
    "l": StyleGroup.LOCATORS_ONLY,
    "text": StyleGroup.TEXTUAL,
    "t": StyleGroup.TEXTUAL,
    "nocite": StyleGroup.NO_CITE,
    "n": StyleGroup.NO_CITE,
    "year": StyleGroup.YEAR_ONLY,
    "y": StyleGroup.YEAR_ONLY,
    "noauthor": StyleGroup.SUPPRESS_AUTHOR,
    "na": StyleGroup.SUPPRESS_AUTHOR,
}


def truncate_to_width(text: str, width: int, padding: str = " ") -> str:
    """Fit text to exactly ``width`` terminal cells.

    Longer text is truncated; a wide character that would straddle the
    limit is dropped. Shorter text is filled up with ``padding``.
    """
    kept = []
    used = 0
    for char in text:
        size = get_character_cell_size(char)
        if used + size > width:
            break
        kept.append(char)
        used += size
    return "".join(kept) + padding * (width - used)


def _flatten(taxonomy: Mapping, base_format: str, variant_format: str) -> List[str]:
    candidates: List[str] = []
    for base, variants in taxonomy.items():
        base_name = StyleName.coerce(base)
        style = "" if base_name.is_default else base_name.choose(base_format)
        candidates.append(style or "/")
        for variant in variants:
            variant_name = StyleName.coerce(variant).choose(variant_format)
            candidates.append(f"{style}/{variant_name}")
    return candidates


def build_candidates(taxonomy: Mapping, name_format: str = "long") -> List[str]:
    """Flatten a style taxonomy into ``style`` and ``style/variant`` strings.

    Args:
        taxonomy: Mapping of base style to its variant descriptors
        name_format: "long" or "short" names

    Returns:
        Candidates in taxonomy order, each base before its variants
    """
    return _flatten(taxonomy, name_format, name_format)


def group_of(candidate: str) -> StyleGroup:
    """Return the selection group of a style candidate."""
    style = candidate.strip()
    if DEFAULT_STYLE_PATTERN.match(style):
        return StyleGroup.DEFAULT
    short_style = style.split("/")[0]
    return BASE_GROUPS.get(short_style, StyleGroup.UNKNOWN)


def normalize_selection(candidate: Optional[str]) -> Optional[str]:
    """Turn a selected candidate into the style written in the document.

    Returns None for the default style.
    """
    if candidate is None:
        return None
    style = candidate.strip()
    if style in ("", "/"):
        return None
    return style


class StyleCatalog:
    """Builds style candidates and supplies the prompt callbacks."""

    def __init__(
        self,
        name_format: str = "long",
        targets: Optional[Sequence[str]] = None,
        previews: Optional[Mapping[str, str]] = None,
        taxonomy_source: Callable[[Optional[Iterable[str]]], StyleTaxonomy] = supported_styles,
    ):
        """Initialize catalog.

        Args:
            name_format: "long" or "short" style names in candidates
            targets: Export targets to restrict styles to, all when None
            previews: Extra or replacement entries for the preview table
            taxonomy_source: Style-taxonomy provider, called with targets
        """
        if name_format not in ("long", "short"):
            raise ValueError(f"name_format must be 'long' or 'short', not {name_format!r}")
        self.name_format = name_format
        self.targets = list(targets) if targets else None
        self.previews = dict(STYLE_PREVIEWS)
        if previews:
            self.previews.update(previews)
        self.taxonomy_source = taxonomy_source
        # Preview table keys use the long base name and the short variant.
        self._preview_keys: Dict[str, str] = {}

    def build(self, taxonomy: Optional[Mapping] = None) -> List[str]:
        """Build unsorted candidates from a taxonomy or the style source."""
        if taxonomy is None:
            taxonomy = self.taxonomy_source(self.targets)
        candidates = build_candidates(taxonomy, self.name_format)
        self._preview_keys.update(zip(candidates, _flatten(taxonomy, "long", "short")))
        return candidates

    def candidates(self) -> List[Tuple[str, str]]:
        """Sorted candidates paired with their previews."""
        candidates = sorted(self.build())
        logger.debug(f"Built {len(candidates)} style candidates")
        return [(candidate, self.preview_for(candidate)) for candidate in candidates]

    def preview_for(self, candidate: str) -> str:
        """Example rendering of a style, or an empty string if unknown."""
        preview = self.previews.get(candidate)
        if preview is None:
            preview = self.previews.get(self._preview_keys.get(candidate, ""), "")
        return truncate_to_width(preview, PREVIEW_WIDTH)

    def annotate(self, candidate: str) -> str:
        """Annotation callback for the completion prompt."""
        return self.preview_for(candidate)

    def group_display(self, candidate: str, transform: bool = False) -> str:
        """Group callback for the completion prompt.

        With ``transform`` the candidate is returned as displayed under its
        group heading, otherwise the heading itself.
        """
        if transform:
            return "  " + truncate_to_width(candidate, GROUP_DISPLAY_WIDTH)
        return group_of(candidate).value
