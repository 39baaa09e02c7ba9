"""Ordered waypoint container with append/splice operations.

The route order is the order of the container. Labels such as ``WP(03)`` are
never stored: they are derived from the current index every time they are
read, so callers must not hold on to a label across a mutation.
"""

from __future__ import annotations

import logging
import operator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np

from routesketch._types import GeometryKind, InsertionSide, validate_side
from routesketch.capture import Position

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    import pandas as pd
    from numpy.typing import NDArray
    from shapely import LineString

logger = logging.getLogger(__name__)

_AXIS_NAMES = ("x", "y", "z")


def _make_waypoints(
    positions: Iterable[Position],
    source_kind: GeometryKind | None,
) -> tuple[Waypoint, ...]:
    return tuple(Waypoint(tuple(float(c) for c in p), source_kind) for p in positions)


def format_label(index: int, prefix: str = "WP", width: int = 2) -> str:
    """Display label for the waypoint at ``index``.

    Examples
    --------
    >>> format_label(0)
    'WP(00)'
    >>> format_label(7, width=3)
    'WP(007)'
    >>> format_label(123)
    'WP(123)'

    """
    return f"{prefix}({index:0{width}d})"


@dataclass(frozen=True)
class Waypoint:
    """One vertex of the route.

    Attributes
    ----------
    position : tuple of float
        Coordinate in map units. Immutable.
    source_kind : GeometryKind or None
        Geometry kind of the gesture that created this waypoint, or None if
        it was loaded from elsewhere.

    """

    position: Position
    source_kind: GeometryKind | None = None

    @property
    def n_dims(self) -> int:
        """Number of coordinates in ``position``."""
        return len(self.position)


@dataclass(frozen=True)
class WaypointSequence:
    """Immutable ordered sequence of waypoints.

    Every mutating operation returns a new sequence and leaves the receiver
    untouched, so snapshots handed to observers stay consistent.

    Examples
    --------
    >>> seq = WaypointSequence().append([(0.0, 0.0), (2.0, 2.0)])
    >>> seq = seq.insert_at(1, "before", [(1.0, 1.0)])
    >>> [seq.label_of(i) for i in range(seq.size())]
    ['WP(00)', 'WP(01)', 'WP(02)']
    >>> seq.at(1).position
    (1.0, 1.0)

    """

    waypoints: tuple[Waypoint, ...] = field(default_factory=tuple)

    @classmethod
    def from_positions(
        cls,
        positions: Iterable[Position],
        source_kind: GeometryKind | None = None,
    ) -> WaypointSequence:
        """Build a sequence from positions, in order."""
        return cls().append(positions, source_kind=source_kind)

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    def size(self) -> int:
        """Number of waypoints."""
        return len(self.waypoints)

    def __len__(self) -> int:
        return len(self.waypoints)

    def __iter__(self) -> Iterator[Waypoint]:
        return iter(self.waypoints)

    def __getitem__(self, index: int) -> Waypoint:
        return self.at(index)

    def at(self, index: int) -> Waypoint:
        """Waypoint at ``index``.

        Raises
        ------
        IndexError
            If index is out of range. Negative indices are not accepted.

        """
        index = operator.index(index)
        if index < 0 or index >= len(self.waypoints):
            raise IndexError(
                f"Waypoint index {index} out of range for sequence of "
                f"length {len(self.waypoints)}"
            )
        return self.waypoints[index]

    def label_of(self, index: int, prefix: str = "WP", width: int = 2) -> str:
        """Label of the waypoint currently at ``index``, computed on read."""
        self.at(index)
        return format_label(index, prefix=prefix, width=width)

    def labels(self, prefix: str = "WP", width: int = 2) -> list[str]:
        """Labels for every waypoint in current order."""
        return [format_label(i, prefix, width) for i in range(len(self.waypoints))]

    def describe(self, index: int, prefix: str = "WP", width: int = 2) -> str:
        """One-line list entry, e.g. ``"WP(00): 0.0, 0.0"``."""
        coords = ", ".join(str(c) for c in self.at(index).position)
        return f"{self.label_of(index, prefix, width)}: {coords}"

    @property
    def positions(self) -> NDArray[np.float64]:
        """Positions as an array of shape (n_waypoints, n_dims).

        Returns shape (0, 0) when empty. Mixed dimensionality raises
        ValueError.
        """
        if not self.waypoints:
            return np.empty((0, 0), dtype=np.float64)
        return np.array([wp.position for wp in self.waypoints], dtype=np.float64)

    # ------------------------------------------------------------------
    # Mutations (copy-on-write)
    # ------------------------------------------------------------------

    def append(
        self,
        positions: Iterable[Position],
        source_kind: GeometryKind | None = None,
    ) -> WaypointSequence:
        """Return a new sequence with ``positions`` added to the tail, in order."""
        new = _make_waypoints(positions, source_kind)
        return WaypointSequence(self.waypoints + new)

    def insertion_offset(self, index: int, side: InsertionSide) -> int:
        """Absolute offset at which a before/after insertion lands.

        ``index`` is clamped to ``[0, len - 1]`` because it usually comes
        from an earlier snapshot of the sequence. On an empty sequence the
        offset is always 0.
        """
        side = validate_side(side)
        index = operator.index(index)
        n = len(self.waypoints)
        if n == 0:
            if index != 0:
                logger.info("Insertion index %d clamped: sequence is empty", index)
            return 0

        clamped = min(max(index, 0), n - 1)
        if clamped != index:
            logger.info(
                "Insertion index %d out of range for %d waypoints; clamped to %d",
                index,
                n,
                clamped,
            )
        return clamped if side == "before" else clamped + 1

    def insert_at(
        self,
        index: int,
        side: InsertionSide,
        positions: Iterable[Position],
        source_kind: GeometryKind | None = None,
    ) -> WaypointSequence:
        """Return a new sequence with ``positions`` spliced in as one block.

        Parameters
        ----------
        index : int
            Target waypoint. Clamped to the nearest valid index.
        side : {"before", "after"}
            Insert the block immediately before or after the target.
        positions : iterable of position
            New positions, kept in their given order.
        source_kind : GeometryKind, optional
            Geometry kind recorded on the new waypoints.

        Returns
        -------
        WaypointSequence
            The new sequence. Elements from the offset onward are shifted
            right by the block length.

        """
        offset = self.insertion_offset(index, side)
        return self.splice(offset, positions, source_kind=source_kind)

    def splice(
        self,
        offset: int,
        positions: Iterable[Position],
        source_kind: GeometryKind | None = None,
    ) -> WaypointSequence:
        """Return a new sequence with ``positions`` inserted at absolute ``offset``.

        Raises
        ------
        IndexError
            If ``offset`` is outside ``[0, len]``.

        """
        offset = operator.index(offset)
        if offset < 0 or offset > len(self.waypoints):
            raise IndexError(
                f"Splice offset {offset} out of range for sequence of "
                f"length {len(self.waypoints)}"
            )
        new = _make_waypoints(positions, source_kind)
        return WaypointSequence(
            self.waypoints[:offset] + new + self.waypoints[offset:],
        )

    def remove(self, index: int) -> WaypointSequence:
        """Return a new sequence without the waypoint at ``index``."""
        index = operator.index(index)
        self.at(index)
        return WaypointSequence(
            self.waypoints[:index] + self.waypoints[index + 1 :],
        )

    # ------------------------------------------------------------------
    # Snapshots for display and export
    # ------------------------------------------------------------------

    def to_dataframe(
        self,
        prefix: str = "WP",
        width: int = 2,
        *,
        lon_lat: bool = False,
    ) -> pd.DataFrame:
        """Table snapshot for list displays.

        Parameters
        ----------
        prefix, width : str, int
            Label format, see `format_label`.
        lon_lat : bool, default=False
            Add ``lon``/``lat`` columns by inverting the web mercator
            projection. Only valid for 2D positions.

        Returns
        -------
        pd.DataFrame
            One row per waypoint with columns ``label``, one column per axis
            (``x``, ``y``, ``z``, then ``dim_3``...), and ``source_kind``.

        """
        import pandas as pd

        positions = self.positions
        n_dims = positions.shape[1] if len(self) > 0 else 2
        columns: dict[str, object] = {
            "label": pd.Series(self.labels(prefix, width), dtype=str),
        }
        for axis in range(n_dims):
            name = _AXIS_NAMES[axis] if axis < len(_AXIS_NAMES) else f"dim_{axis}"
            values = positions[:, axis] if len(self) > 0 else np.empty(0)
            columns[name] = pd.Series(values, dtype=np.float64)

        if lon_lat:
            if n_dims != 2:
                raise ValueError(
                    f"lon/lat columns need 2D positions, got {n_dims}D.",
                )
            from routesketch.projection import to_lon_lat

            lonlat = to_lon_lat(positions) if len(self) > 0 else np.empty((0, 2))
            columns["lon"] = pd.Series(lonlat[:, 0], dtype=np.float64)
            columns["lat"] = pd.Series(lonlat[:, 1], dtype=np.float64)

        columns["source_kind"] = pd.Series(
            [wp.source_kind for wp in self.waypoints],
            dtype=object,
        )
        return pd.DataFrame(columns)

    def to_linestring(self) -> LineString:
        """Route as a shapely LineString through every waypoint in order.

        Raises
        ------
        ValueError
            If the sequence has fewer than 2 waypoints.

        """
        from shapely import LineString

        if len(self) < 2:
            raise ValueError(
                f"A route line needs at least 2 waypoints, got {len(self)}.",
            )
        return LineString(self.positions)
