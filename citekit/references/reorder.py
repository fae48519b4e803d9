"""Reordering of references inside a citation."""

from enum import Enum
from typing import Any, List, Optional, Sequence, Tuple, Union

from ..exceptions import BoundaryError, SingleReferenceError, TargetNotFoundError


class Direction(str, Enum):
    """Direction in which a reference moves."""

    LEFT = "left"
    RIGHT = "right"


def reference_key(reference: Any) -> Any:
    """Return the identity of a reference: its key, or itself."""
    return getattr(reference, "key", reference)


def shift_reference(
    references: Sequence[Any],
    target: Optional[Any],
    direction: Union[Direction, str],
) -> Tuple[List[Any], int]:
    """Swap the target reference with its left or right neighbour.

    Args:
        references: References of one citation, in document order
        target: The reference to move, matched by key. ``None`` means the
            whole citation was targeted rather than one reference.
        direction: ``Direction.LEFT`` or ``Direction.RIGHT``

    Returns:
        Tuple of (new reference list, new index of the target)

    Raises:
        SingleReferenceError: The citation holds exactly one reference
        TargetNotFoundError: No target, or its key is not in the citation
        BoundaryError: The target would move past either end
    """
    direction = Direction(direction)

    if len(references) == 1:
        raise SingleReferenceError()

    if target is None or not references:
        raise TargetNotFoundError()

    keys = [reference_key(ref) for ref in references]
    target_key = reference_key(target)
    if target_key not in keys:
        raise TargetNotFoundError(
            f"Reference '{target_key}' is not part of this citation"
        )

    index = keys.index(target_key)
    new_index = index - 1 if direction is Direction.LEFT else index + 1
    if not 0 <= new_index < len(references):
        raise BoundaryError(index, direction.value)

    shifted = list(references)
    shifted[index], shifted[new_index] = shifted[new_index], shifted[index]
    return shifted, new_index
