"""Context actions for citations and references.

Two target kinds are understood: a reference picked from a candidate list
(``citar-reference``) and the citation or reference under the cursor in a
document (``oc-citation``). Each kind has a keymap of actions.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from .document.model import Citation, CitationReference, DocumentPort
from .exceptions import TargetNotFoundError, UnknownActionError

logger = logging.getLogger(__name__)

REFERENCE_TARGET = "citar-reference"
CITATION_TARGET = "oc-citation"


@dataclass
class Target:
    """Thing an action acts on."""

    kind: str
    keys: List[str]
    document: Optional[DocumentPort] = None
    options: Dict[str, str] = field(default_factory=dict)

    def require_document(self) -> DocumentPort:
        if self.document is None:
            raise TargetNotFoundError(f"Action needs a document, {self.kind} has none")
        return self.document


@dataclass(frozen=True)
class Action:
    """A key binding in a target keymap."""

    key: str
    name: str
    description: str
    handler: Callable[[Target], object]


Keymap = Dict[str, Action]


def citation_target_at_point(document: DocumentPort) -> Optional[Target]:
    """Target finder for the citation or reference under the cursor."""
    datum = document.parse_context_at_cursor()
    if isinstance(datum, CitationReference):
        return Target(CITATION_TARGET, [datum.key], document)
    if isinstance(datum, Citation):
        keys = [ref.key for ref in document.get_references(datum)]
        return Target(CITATION_TARGET, keys, document)
    return None


def reference_target(candidate: str) -> Target:
    """Target for a key picked from a candidate list."""
    return Target(REFERENCE_TARGET, [candidate.strip().lstrip("@")])


class ActionRegistry:
    """Keymaps per target kind."""

    def __init__(self):
        self._keymaps: Dict[str, Keymap] = {}

    def register(self, kind: str, actions: List[Action]) -> Keymap:
        keymap = self._keymaps.setdefault(kind, {})
        for action in actions:
            if action.key in keymap:
                logger.debug(f"Rebinding '{action.key}' for {kind}")
            keymap[action.key] = action
        return keymap

    def keymap(self, kind: str) -> Keymap:
        return dict(self._keymaps.get(kind, {}))

    @property
    def kinds(self) -> List[str]:
        return list(self._keymaps)

    def lookup(self, kind: str, key: str) -> Action:
        try:
            return self._keymaps[kind][key]
        except KeyError:
            raise UnknownActionError(kind, key) from None

    def act(self, target: Target, key: str) -> object:
        action = self.lookup(target.kind, key)
        logger.debug(f"Running {action.name} on {', '.join(target.keys)}")
        return action.handler(target)
