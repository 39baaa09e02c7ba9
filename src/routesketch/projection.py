"""Spherical web mercator projection (EPSG:3857).

The map surface uses a single fixed projection. Waypoint positions are in
projected meters; these helpers convert to and from longitude/latitude in
degrees.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray

EARTH_RADIUS_M: float = 6378137.0
"""WGS84 semi-major axis used by web mercator."""

MAX_LATITUDE: float = 85.0511287798066
"""Latitude at which web mercator becomes square; inputs are clipped to it."""


def from_lon_lat(lon_lat: ArrayLike) -> NDArray[np.float64]:
    """Project longitude/latitude degrees to web mercator meters.

    Parameters
    ----------
    lon_lat : array-like, shape (2,) or (n_points, 2)
        Longitude and latitude in degrees. Latitude is clipped to
        ``±MAX_LATITUDE``.

    Returns
    -------
    np.ndarray
        Projected (x, y) with the same shape as the input.

    Examples
    --------
    >>> bool(np.allclose(from_lon_lat([0.0, 0.0]), 0.0))
    True
    >>> x, y = from_lon_lat([180.0, 0.0])
    >>> round(float(x))
    20037508

    """
    pts = np.asarray(lon_lat, dtype=np.float64)
    if pts.shape[-1] != 2:
        raise ValueError(
            f"lon_lat must have 2 columns (lon, lat), got shape {pts.shape}",
        )
    lon = pts[..., 0]
    lat = np.clip(pts[..., 1], -MAX_LATITUDE, MAX_LATITUDE)
    x = EARTH_RADIUS_M * np.radians(lon)
    y = EARTH_RADIUS_M * np.log(np.tan(np.pi / 4 + np.radians(lat) / 2))
    return np.stack([x, y], axis=-1)


def to_lon_lat(xy: ArrayLike) -> NDArray[np.float64]:
    """Inverse of `from_lon_lat`: web mercator meters to degrees."""
    pts = np.asarray(xy, dtype=np.float64)
    if pts.shape[-1] != 2:
        raise ValueError(f"xy must have 2 columns (x, y), got shape {pts.shape}")
    lon = np.degrees(pts[..., 0] / EARTH_RADIUS_M)
    lat = np.degrees(2 * np.arctan(np.exp(pts[..., 1] / EARTH_RADIUS_M)) - np.pi / 2)
    return np.stack([lon, lat], axis=-1)
