"""Gesture backend protocol and a headless implementation.

A gesture backend is the pointer-drawing capability the controller starts
for each session and tears down when the session ends. Backends deliver the
finished vertex list through the callback registered with
``on_gesture_complete``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from routesketch.capture import Position, close_ring, vertices_from_geometry

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from routesketch._types import DrawingConfig, GeometryKind

logger = logging.getLogger(__name__)


@runtime_checkable
class GestureBackend(Protocol):
    """Pointer-gesture capability consumed by `DrawingSessionController`."""

    def start(self, geometry_kind: GeometryKind) -> None:
        """Begin capturing a gesture of ``geometry_kind``."""
        ...

    def on_gesture_complete(
        self, callback: Callable[[Sequence[Sequence[float]]], None]
    ) -> None:
        """Register the callback receiving the finished vertex list."""
        ...

    def pending_vertices(self) -> list[Position]:
        """Vertices captured so far for the in-progress gesture."""
        ...

    def detach(self) -> None:
        """Stop capturing and drop the callback. Safe to call repeatedly."""
        ...


class InMemoryGestureBackend:
    """Headless gesture backend driven by explicit calls.

    Useful for scripting and tests: vertices are fed with `add_vertex` or
    `trace`, and `finish` plays the role of the natural "gesture finished"
    signal (double-click).

    Parameters
    ----------
    include_closing_vertex : bool, default=False
        Deliver polygon gestures as closed rings, with the first vertex
        repeated at the end. See `DrawingConfig.include_closing_vertex`.

    Examples
    --------
    >>> backend = InMemoryGestureBackend()
    >>> received = []
    >>> backend.start("Line")
    >>> backend.on_gesture_complete(received.append)
    >>> backend.trace([(0, 0), (1, 1)])
    >>> backend.finish()
    True
    >>> received
    [[(0.0, 0.0), (1.0, 1.0)]]

    """

    def __init__(self, *, include_closing_vertex: bool = False) -> None:
        self.include_closing_vertex = include_closing_vertex
        self.geometry_kind: GeometryKind | None = None
        self._vertices: list[Position] = []
        self._callback: Callable[[Sequence[Sequence[float]]], None] | None = None

    @classmethod
    def from_config(cls, config: DrawingConfig) -> InMemoryGestureBackend:
        """Backend following ``config.include_closing_vertex``."""
        return cls(include_closing_vertex=config.include_closing_vertex)

    @property
    def is_attached(self) -> bool:
        """Whether a session is currently using this backend."""
        return self.geometry_kind is not None

    def start(self, geometry_kind: GeometryKind) -> None:
        self.geometry_kind = geometry_kind
        self._vertices = []
        self._callback = None

    def on_gesture_complete(
        self, callback: Callable[[Sequence[Sequence[float]]], None]
    ) -> None:
        self._callback = callback

    def add_vertex(self, vertex: Sequence[float]) -> None:
        """Append one pointer click to the in-progress gesture."""
        if not self.is_attached:
            logger.debug("Vertex %s ignored: backend is detached", vertex)
            return
        self._vertices.append(tuple(float(c) for c in vertex))

    def trace(self, vertices: Sequence[Sequence[float]] | Any) -> None:
        """Append several vertices, or the vertices of a shapely geometry."""
        if hasattr(vertices, "geom_type"):
            vertices = vertices_from_geometry(
                vertices,
                include_closing_vertex=self.include_closing_vertex,
            )
        for vertex in vertices:
            self.add_vertex(vertex)

    def pending_vertices(self) -> list[Position]:
        return self._as_delivered(self._vertices)

    def _as_delivered(self, vertices: list[Position]) -> list[Position]:
        if self.include_closing_vertex and self.geometry_kind == "Polygon":
            return close_ring(vertices)
        return list(vertices)

    def finish(self) -> bool:
        """Signal natural completion of the gesture.

        Returns
        -------
        bool
            True if a callback received the vertices, False if the backend
            was detached (late completion) or had no callback.

        """
        callback = self._callback
        if callback is None:
            logger.debug("Gesture finish ignored: no completion callback attached")
            return False
        vertices = self._as_delivered(self._vertices)
        self._vertices = []
        callback(vertices)
        return True

    def detach(self) -> None:
        self.geometry_kind = None
        self._vertices = []
        self._callback = None
