"""
Geographic utilities for the BDP checker.

Segment geometry is stored in spherical Web Mercator (EPSG:900913 / 3857)
meters, the projection used by the map editor. The live-map routing service
expects WGS84 (EPSG:4326) longitude/latitude, so segment centers are
converted before a request is built.
"""

from math import atan, degrees, exp, pi
from typing import Sequence, Tuple

import numpy as np

# Type aliases for clarity
ProjectedPoint = Tuple[float, float]  # (x, y) in Web Mercator meters
LonLat = Tuple[float, float]  # (longitude, latitude) in decimal degrees

# Radius of the sphere used by Web Mercator
EARTH_RADIUS_M = 6378137.0


def mercator_to_lonlat(x: float, y: float) -> LonLat:
    """
    Convert a Web Mercator point to WGS84 longitude/latitude.

    Args:
        x: Easting in meters
        y: Northing in meters

    Returns:
        (longitude, latitude) in decimal degrees

    Example:
        >>> mercator_to_lonlat(0.0, 0.0)
        (0.0, 0.0)
    """
    lon = degrees(x / EARTH_RADIUS_M)
    lat = degrees(2.0 * atan(exp(y / EARTH_RADIUS_M)) - pi / 2.0)
    return lon, lat


def geometry_center(points: Sequence[ProjectedPoint]) -> ProjectedPoint:
    """
    Center of a polyline's bounding box.

    Args:
        points: Ordered polyline vertices in projected meters

    Returns:
        (x, y) center of the bounding box

    Raises:
        ValueError: If the polyline has no vertices
    """
    if len(points) == 0:
        raise ValueError("Cannot compute the center of an empty geometry")

    coords = np.asarray(points, dtype=float)
    lower = coords.min(axis=0)
    upper = coords.max(axis=0)
    center = (lower + upper) / 2.0
    return float(center[0]), float(center[1])


def format_routing_point(lonlat: LonLat) -> str:
    """Format a point the way the live-map routing service expects: 'x:<lon> y:<lat>'."""
    lon, lat = lonlat
    return f"x:{lon} y:{lat}"
