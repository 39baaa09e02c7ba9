"""Pure state values for the drawing-session state machine.

A session is either `Idle` or `Active`. Both are frozen values: the
controller replaces its current state instead of mutating it, so no live
interaction handle is shared between calls.
"""

from __future__ import annotations

import operator
from dataclasses import dataclass
from typing import Union

from routesketch._types import (
    GeometryKind,
    InsertionSide,
    validate_geometry_kind,
    validate_side,
)


@dataclass(frozen=True)
class InsertionRequest:
    """Pending "insert before/after waypoint ``target_index``" choice.

    Consumed by exactly one drawing session.

    Examples
    --------
    >>> InsertionRequest(1, "before")
    InsertionRequest(target_index=1, side='before')

    """

    target_index: int
    side: InsertionSide

    def __post_init__(self) -> None:
        object.__setattr__(self, "target_index", operator.index(self.target_index))
        validate_side(self.side)


@dataclass(frozen=True)
class Idle:
    """No gesture is being drawn."""

    is_active = False


@dataclass(frozen=True)
class Active:
    """A gesture of ``geometry_kind`` is being drawn.

    Attributes
    ----------
    geometry_kind : GeometryKind
        Kind handed to the gesture backend.
    pending_insertion : InsertionRequest or None
        Where the finished gesture lands. None means append.
    session_id : int
        Monotonic id; completions tagged with another id are stale.

    """

    geometry_kind: GeometryKind
    pending_insertion: InsertionRequest | None = None
    session_id: int = 0

    is_active = True

    def __post_init__(self) -> None:
        validate_geometry_kind(self.geometry_kind)


SessionState = Union[Idle, Active]

IDLE = Idle()
