"""CLI commands for citekit."""

from .citations import act, actions, delete, follow, insert, keys, kill, shift, update_affixes
from .styles import select_style, styles

__all__ = [
    # Citation commands
    "act",
    "actions",
    "delete",
    "follow",
    "insert",
    "keys",
    "kill",
    "shift",
    "update_affixes",
    # Style commands
    "select_style",
    "styles",
]
