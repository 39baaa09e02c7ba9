"""Type definitions and configuration for route drawing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, get_args

# GeometryKind: shape drawn by one pointer gesture
# - "Line": open polyline, terminated by double-click or commit key
# - "Polygon": closed ring, terminated the same way
GeometryKind = Literal["Line", "Polygon"]

# InsertionSide: where a newly drawn block lands relative to the target waypoint
InsertionSide = Literal["before", "after"]

# InsertionKindPolicy: geometry used by insertion-triggered sessions
# - a GeometryKind: always draw that kind
# - "match": draw the kind that produced the target waypoint
InsertionKindPolicy = Literal["Line", "Polygon", "match"]

GEOMETRY_KINDS: tuple[str, ...] = get_args(GeometryKind)
INSERTION_SIDES: tuple[str, ...] = get_args(InsertionSide)


def validate_geometry_kind(geometry_kind: str) -> GeometryKind:
    """Return ``geometry_kind`` unchanged, or raise if it is unknown.

    Raises
    ------
    ValueError
        If ``geometry_kind`` is not one of ``GEOMETRY_KINDS``.

    """
    if geometry_kind not in GEOMETRY_KINDS:
        raise ValueError(
            f"Unknown geometry kind {geometry_kind!r}. "
            f"Expected one of {list(GEOMETRY_KINDS)}.",
        )
    return geometry_kind  # type: ignore[return-value]


def validate_side(side: str) -> InsertionSide:
    """Return ``side`` unchanged, or raise if it is not before/after."""
    if side not in INSERTION_SIDES:
        raise ValueError(
            f"Unknown insertion side {side!r}. Expected 'before' or 'after'.",
        )
    return side  # type: ignore[return-value]


@dataclass(frozen=True)
class DrawingConfig:
    """
    Configuration for drawing sessions and waypoint display.

    All fields have defaults matching the map tool's stock behavior, so the
    simplest usage is ``DrawingConfig()``.

    Parameters
    ----------
    insertion_kind : {"Line", "Polygon", "match"}
        Geometry kind used when the drawing tool is re-opened to insert
        before/after a waypoint. Default is "Polygon". With "match", the
        kind that produced the target waypoint is reused (Polygon if unknown).
    label_prefix : str
        Prefix of display labels. Default is "WP".
    label_width : int
        Zero-padding width of the label ordinal. Default is 2 ("WP(00)").
    commit_key : str
        Key that force-completes the active gesture. Default is "Enter".
    cancel_key : str
        Key that abandons the active gesture. Default is "Escape".
    include_closing_vertex : bool
        Deliver polygon gestures as closed rings, with the first vertex
        repeated at the end. Read by the backends' ``from_config``.
        Default is False.

    Examples
    --------
    >>> config = DrawingConfig(insertion_kind="match")
    >>> config.insertion_kind
    'match'
    >>> DrawingConfig(label_width=-1)
    Traceback (most recent call last):
        ...
    ValueError: label_width must be non-negative, got -1

    """

    insertion_kind: InsertionKindPolicy = "Polygon"
    label_prefix: str = "WP"
    label_width: int = 2
    commit_key: str = "Enter"
    cancel_key: str = "Escape"
    include_closing_vertex: bool = False

    def __post_init__(self) -> None:
        if self.insertion_kind != "match":
            validate_geometry_kind(self.insertion_kind)
        if self.label_width < 0:
            raise ValueError(
                f"label_width must be non-negative, got {self.label_width}"
            )
        if self.commit_key == self.cancel_key:
            raise ValueError(
                f"commit_key and cancel_key must differ, both are {self.commit_key!r}"
            )
