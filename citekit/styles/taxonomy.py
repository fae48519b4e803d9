"""Citation styles supported by the org-cite export backends.

Each backend declares base styles and the variants it understands. A base
whose long name is empty is the default style, written ``[cite:...]`` or
``[cite//b:...]`` in a document.
"""

import logging
from typing import Dict, Iterable, List, NamedTuple, Optional, Tuple, Union

from ..exceptions import UnknownTargetError

logger = logging.getLogger(__name__)


class StyleName(NamedTuple):
    """Short and long name of a base style or a variant."""

    short: str
    long: str

    def choose(self, name_format: str = "long") -> str:
        """Return the long or short name."""
        if name_format == "short":
            return self.short or self.long
        return self.long or self.short

    @property
    def is_default(self) -> bool:
        return not self.long and not self.short

    @classmethod
    def coerce(cls, value: Union["StyleName", Tuple[str, str], str, None]) -> "StyleName":
        """Build a StyleName from a (short, long) pair or a bare name."""
        if isinstance(value, cls):
            return value
        if value is None or value == "nil":
            return cls("", "")
        if isinstance(value, str):
            return cls(value, value)
        short, long = value
        return cls(short or "", long or "")


StyleTaxonomy = Dict[StyleName, List[StyleName]]

DEFAULT = StyleName("", "")

# (base, variants) per export backend, in declaration order.
TARGET_STYLES: Dict[str, List[Tuple[StyleName, List[StyleName]]]] = {
    "basic": [
        (StyleName("a", "author"), [StyleName("c", "caps")]),
        (StyleName("na", "noauthor"), [StyleName("b", "bare")]),
        (StyleName("n", "nocite"), []),
        (
            StyleName("ft", "note"),
            [StyleName("bc", "bare-caps"), StyleName("c", "caps")],
        ),
        (StyleName("nb", "numeric"), []),
        (StyleName("t", "text"), [StyleName("c", "caps")]),
        (
            DEFAULT,
            [StyleName("b", "bare"), StyleName("bc", "bare-caps"), StyleName("c", "caps")],
        ),
    ],
    "csl": [
        (
            StyleName("a", "author"),
            [
                StyleName("b", "bare"),
                StyleName("c", "caps"),
                StyleName("f", "full"),
                StyleName("bc", "bare-caps"),
                StyleName("cf", "caps-full"),
                StyleName("bcf", "bare-caps-full"),
            ],
        ),
        (
            StyleName("na", "noauthor"),
            [StyleName("b", "bare"), StyleName("c", "caps"), StyleName("bc", "bare-caps")],
        ),
        (
            StyleName("y", "year"),
            [StyleName("b", "bare"), StyleName("c", "caps"), StyleName("bc", "bare-caps")],
        ),
        (
            StyleName("t", "text"),
            [
                StyleName("c", "caps"),
                StyleName("f", "full"),
                StyleName("cf", "caps-full"),
            ],
        ),
        (
            DEFAULT,
            [StyleName("b", "bare"), StyleName("c", "caps"), StyleName("bc", "bare-caps")],
        ),
        (StyleName("n", "nocite"), []),
        (
            StyleName("l", "locators"),
            [StyleName("b", "bare"), StyleName("c", "caps"), StyleName("bc", "bare-caps")],
        ),
    ],
    "natbib": [
        (StyleName("a", "author"), [StyleName("c", "caps"), StyleName("f", "full")]),
        (StyleName("na", "noauthor"), [StyleName("b", "bare")]),
        (StyleName("t", "text"), [StyleName("b", "bare"), StyleName("c", "caps"), StyleName("f", "full")]),
        (StyleName("n", "nocite"), []),
        (
            DEFAULT,
            [StyleName("b", "bare"), StyleName("c", "caps"), StyleName("f", "full")],
        ),
    ],
    "biblatex": [
        (StyleName("a", "author"), [StyleName("c", "caps"), StyleName("f", "full")]),
        (StyleName("na", "noauthor"), []),
        (StyleName("l", "locators"), [StyleName("b", "bare")]),
        (StyleName("t", "text"), [StyleName("c", "caps")]),
        (StyleName("n", "nocite"), []),
        (
            DEFAULT,
            [StyleName("b", "bare"), StyleName("c", "caps"), StyleName("bc", "bare-caps")],
        ),
    ],
}

SUPPORTED_TARGETS = list(TARGET_STYLES)


def supported_styles(targets: Optional[Iterable[str]] = None) -> StyleTaxonomy:
    """Merge the styles of the given export targets.

    Args:
        targets: Export backend names; all supported backends when None

    Returns:
        Ordered mapping of base style to its variants

    Raises:
        UnknownTargetError: If a target is not a supported backend
    """
    names = list(targets) if targets else SUPPORTED_TARGETS
    unknown = [name for name in names if name not in TARGET_STYLES]
    if unknown:
        raise UnknownTargetError(unknown, SUPPORTED_TARGETS)

    taxonomy: StyleTaxonomy = {}
    for name in names:
        for base, variants in TARGET_STYLES[name]:
            merged = taxonomy.setdefault(base, [])
            for variant in variants:
                if variant not in merged:
                    merged.append(variant)

    logger.debug(f"Loaded {len(taxonomy)} base styles for targets: {', '.join(names)}")
    return taxonomy
