"""Exceptions raised by citekit."""

from typing import List, Optional


class CitekitError(Exception):
    """Base class for all citekit errors."""


class CitationError(CitekitError):
    """Raised when a citation command cannot act on the document."""


class SingleReferenceError(CitationError):
    """Raised when shifting a reference in a citation with one reference."""

    def __init__(self, message: str = "Citation has only one reference"):
        super().__init__(message)


class TargetNotFoundError(CitationError):
    """Raised when there is no citation or reference to act on."""

    def __init__(self, message: str = "Not on a citation reference"):
        super().__init__(message)


class BoundaryError(CitationError):
    """Raised when shifting the first reference left or the last right."""

    def __init__(self, index: int, direction: str):
        self.index = index
        self.direction = direction
        edge = "first" if direction == "left" else "last"
        super().__init__(f"You cannot move the {edge} reference {direction}")


class UnknownTargetError(CitekitError):
    """Raised when style targets name an unsupported export backend."""

    def __init__(self, targets: List[str], supported: Optional[List[str]] = None):
        self.targets = targets
        message = "Unknown style targets: " + ", ".join(targets)
        if supported:
            message += f" (supported: {', '.join(supported)})"
        super().__init__(message)


class ConfigError(CitekitError):
    """Raised when citekit.yaml cannot be read or is invalid."""


class UnknownActionError(CitekitError):
    """Raised when no action is bound to a key for a target kind."""

    def __init__(self, kind: str, key: str):
        self.kind = kind
        self.key = key
        super().__init__(f"No action bound to '{key}' for {kind}")
