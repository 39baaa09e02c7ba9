"""Convert a finished pointer gesture into waypoint positions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import numpy as np

if TYPE_CHECKING:
    from collections.abc import Sequence

    from numpy.typing import ArrayLike

Position = tuple[float, ...]


def to_positions(raw_vertices: ArrayLike | Sequence[Sequence[float]]) -> tuple[Position, ...]:
    """Convert one gesture's raw vertex list into ordered positions.

    The mapping is the identity on order and length: vertex ``i`` of the
    gesture becomes position ``i``. Nothing is sorted, deduplicated or
    simplified. Labels are not assigned here.

    Parameters
    ----------
    raw_vertices : array-like, shape (n_vertices, n_dims)
        Vertices in drawing order. Any number of dimensions is accepted as
        long as every vertex has the same length.

    Returns
    -------
    tuple of tuple of float
        One immutable position per vertex. Empty when ``raw_vertices`` is
        empty.

    Raises
    ------
    ValueError
        If the vertices are ragged, not 2D, or contain NaN/inf.

    Examples
    --------
    >>> to_positions([(0, 0), (1, 1), (2, 2)])
    ((0.0, 0.0), (1.0, 1.0), (2.0, 2.0))
    >>> to_positions([])
    ()

    """
    if len(raw_vertices) == 0:
        return ()

    try:
        vertices = np.asarray(raw_vertices, dtype=np.float64)
    except ValueError as e:
        raise ValueError(
            "Gesture vertices must all have the same number of coordinates.",
        ) from e

    if vertices.ndim != 2 or vertices.shape[1] == 0:
        raise ValueError(
            f"Gesture vertices must have shape (n_vertices, n_dims), "
            f"got {vertices.shape}.",
        )
    if not np.all(np.isfinite(vertices)):
        raise ValueError("Gesture vertices must be finite (no NaN or inf).")

    return tuple(tuple(row) for row in vertices.tolist())


def vertices_from_geometry(
    geometry: Any,
    *,
    include_closing_vertex: bool = False,
) -> list[Position]:
    """Extract drawing-order vertices from a shapely geometry.

    Parameters
    ----------
    geometry : shapely.LineString or shapely.Polygon
        Finished gesture geometry. For polygons only the exterior ring is
        used; interior rings are ignored.
    include_closing_vertex : bool, default=False
        Keep the repeated first vertex that closes a polygon ring.

    Returns
    -------
    list of tuple of float
        Vertices in ring/line order.

    Raises
    ------
    TypeError
        If ``geometry`` is neither a LineString nor a Polygon.

    """
    from shapely import LineString, Polygon, get_coordinates

    if isinstance(geometry, Polygon):
        coords = get_coordinates(geometry.exterior, include_z=geometry.has_z)
        if not include_closing_vertex and len(coords) > 1:
            coords = coords[:-1]
    elif isinstance(geometry, LineString):
        coords = get_coordinates(geometry, include_z=geometry.has_z)
    else:
        raise TypeError(
            f"Expected a shapely LineString or Polygon, got {type(geometry).__name__}.",
        )
    return [tuple(row) for row in coords.tolist()]


def close_ring(vertices: Sequence[Position]) -> list[Position]:
    """Repeat the first vertex at the end unless the ring is already closed.

    Examples
    --------
    >>> close_ring([(0.0, 0.0), (1.0, 0.0), (1.0, 1.0)])
    [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 0.0)]
    >>> close_ring([(0.0, 0.0)])
    [(0.0, 0.0)]

    """
    vertices = list(vertices)
    if len(vertices) < 2 or vertices[0] == vertices[-1]:
        return vertices
    return [*vertices, vertices[0]]
