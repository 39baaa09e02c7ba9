"""Gesture backend driving a napari Shapes layer.

Notes
-----
napari stores shape vertices as (row, col). This backend delivers (x, y)
vertices with ``x = col`` and ``y = row``, the same axis swap used by the
waypoint display layers.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import numpy as np

from routesketch.capture import Position, close_ring

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from napari.layers import Shapes
    from numpy.typing import NDArray

    from routesketch._types import DrawingConfig, GeometryKind

logger = logging.getLogger(__name__)

# Shapes layer mode for each geometry kind
NAPARI_DRAW_MODES: dict[str, str] = {
    "Line": "add_path",
    "Polygon": "add_polygon",
}


def napari_to_xy(data: NDArray[np.float64]) -> list[Position]:
    """Convert napari (row, col) vertices to (x, y) tuples."""
    arr = np.asarray(data, dtype=np.float64)
    if arr.size == 0:
        return []
    return [tuple(row) for row in arr[:, ::-1].tolist()]


def xy_to_napari(positions: Sequence[Sequence[float]]) -> NDArray[np.float64]:
    """Convert (x, y) positions to a napari (row, col) array."""
    arr = np.asarray(positions, dtype=np.float64)
    if arr.size == 0:
        return np.empty((0, 2), dtype=np.float64)
    return arr[:, ::-1].copy()


class NapariShapesBackend:
    """Capture gestures drawn on a napari Shapes layer.

    Each started session puts the layer in ``add_path`` (Line) or
    ``add_polygon`` (Polygon) mode. When napari finishes a shape, its
    vertices are handed to the completion callback and the shape is removed
    from the layer; the waypoint layers show the result instead.

    Parameters
    ----------
    shapes_layer : napari.layers.Shapes
        Layer the user draws on. It should contain no shapes of its own.
    include_closing_vertex : bool, default=False
        Deliver polygons as closed rings, with the first vertex repeated at
        the end. napari itself does not repeat it.

    """

    def __init__(
        self,
        shapes_layer: Shapes,
        *,
        include_closing_vertex: bool = False,
    ) -> None:
        self.shapes = shapes_layer
        self.include_closing_vertex = include_closing_vertex
        self.geometry_kind: GeometryKind | None = None
        self._callback: Callable[[Sequence[Sequence[float]]], None] | None = None
        self._baseline = len(shapes_layer.data)
        self._connected = False

    @classmethod
    def from_config(
        cls,
        shapes_layer: Shapes,
        config: DrawingConfig,
    ) -> NapariShapesBackend:
        """Backend on ``shapes_layer`` following ``config.include_closing_vertex``."""
        return cls(shapes_layer, include_closing_vertex=config.include_closing_vertex)

    @property
    def is_attached(self) -> bool:
        """Whether a session is currently using this backend."""
        return self.geometry_kind is not None

    def start(self, geometry_kind: GeometryKind) -> None:
        self.geometry_kind = geometry_kind
        self._callback = None
        self._baseline = len(self.shapes.data)
        if not self._connected:
            self.shapes.events.data.connect(self._on_data_changed)
            self._connected = True
        self.shapes.mode = NAPARI_DRAW_MODES[geometry_kind]

    def on_gesture_complete(
        self, callback: Callable[[Sequence[Sequence[float]]], None]
    ) -> None:
        self._callback = callback

    def pending_vertices(self) -> list[Position]:
        """Vertices clicked so far, excluding the one following the cursor."""
        if not getattr(self.shapes, "_is_creating", False):
            return []
        if len(self.shapes.data) <= self._baseline:
            return []
        in_progress = self.shapes.data[-1]
        return self._as_delivered(napari_to_xy(in_progress[:-1]))

    def detach(self) -> None:
        self.geometry_kind = None
        self._callback = None
        if self._connected:
            self.shapes.events.data.disconnect(self._on_data_changed)
            self._connected = False
        with self.shapes.events.data.blocker():
            if getattr(self.shapes, "_is_creating", False) and hasattr(
                self.shapes, "_finish_drawing"
            ):
                self.shapes._finish_drawing()
            self._discard_drawn_shapes()
        self.shapes.mode = "pan_zoom"

    def _as_delivered(self, vertices: list[Position]) -> list[Position]:
        if self.include_closing_vertex and self.geometry_kind == "Polygon":
            return close_ring(vertices)
        return vertices

    def _discard_drawn_shapes(self) -> None:
        if len(self.shapes.data) > self._baseline:
            self.shapes.data = list(self.shapes.data)[: self._baseline]

    def _on_data_changed(self, event: Any) -> None:
        # napari >= 0.4.19 tags data events with an action; only finished
        # additions matter here
        action = str(getattr(event, "action", "added"))
        if not action.endswith("added"):
            return
        if len(self.shapes.data) <= self._baseline:
            return

        # Defer: napari is still inside _finish_drawing when this fires
        from qtpy.QtCore import QTimer

        QTimer.singleShot(0, self._deliver_finished_shape)

    def _deliver_finished_shape(self) -> None:
        callback = self._callback
        if callback is None or len(self.shapes.data) <= self._baseline:
            logger.debug("Finished shape ignored: no session is attached")
            return
        vertices = self._as_delivered(napari_to_xy(self.shapes.data[-1]))
        with self.shapes.events.data.blocker():
            self._discard_drawn_shapes()
        callback(vertices)
