"""
Geometry Calculator Module

Functions for calculating raw pixel-space magnitudes from drawn points.
All results are in pixels (or degrees for angles); calibration is applied
by the measurement engine.
"""

import logging
import math
from typing import List, Optional, Sequence

import numpy as np
from shapely.errors import GEOSException
from shapely.geometry import Polygon
from shapely.validation import explain_validity

from ..constants import MeasurementType, POINT_COUNT_RULES
from ..exceptions import ValidationError
from .point import Point

logger = logging.getLogger(__name__)


def distance(p1: Point, p2: Point) -> float:
    """
    Calculate Euclidean distance between two points.

    Args:
        p1: First point
        p2: Second point

    Returns:
        Distance in pixels
    """
    dx = p2.x - p1.x
    dy = p2.y - p1.y
    return math.sqrt(dx * dx + dy * dy)


def _coordinates(points: Sequence[Point]):
    xs = np.array([p.x for p in points], dtype=float)
    ys = np.array([p.y for p in points], dtype=float)
    return xs, ys


def _accumulate(values) -> float:
    # Running total in vertex order; stored values depend on this order
    total = 0.0
    for value in values:
        total += value
    return total


def perimeter(points: Sequence[Point]) -> float:
    """
    Calculate perimeter of a closed polygon.

    The last point connects back to the first.

    Args:
        points: Polygon vertices in pixel coordinates

    Returns:
        Perimeter in pixels, 0 for fewer than 2 points
    """
    if len(points) < 2:
        return 0.0

    xs, ys = _coordinates(points)

    with np.errstate(over="ignore", invalid="ignore"):
        dx = np.roll(xs, -1) - xs
        dy = np.roll(ys, -1) - ys
        edges = np.sqrt(dx * dx + dy * dy)

    return _accumulate(edges.tolist())


def polygon_area(points: Sequence[Point]) -> float:
    """
    Calculate polygon area using the Shoelace formula.

    Winding order does not matter; the absolute value is taken.

    Args:
        points: Polygon vertices in pixel coordinates

    Returns:
        Area in square pixels, 0 for fewer than 3 points
    """
    if len(points) < 3:
        return 0.0

    xs, ys = _coordinates(points)
    next_xs = np.roll(xs, -1).tolist()
    next_ys = np.roll(ys, -1).tolist()

    twice_area = 0.0
    for x, y, nx, ny in zip(xs.tolist(), ys.tolist(), next_xs, next_ys):
        twice_area += x * ny
        twice_area -= nx * y

    return abs(twice_area) / 2


def angle(p1: Point, vertex: Point, p2: Point) -> float:
    """
    Calculate the interior angle at vertex between rays to p1 and p2.

    Uses atan2(|cross|, dot), which stays accurate near 0 and 180 degrees.

    Args:
        p1: End of first ray
        vertex: Angle vertex
        p2: End of second ray

    Returns:
        Angle in degrees, in [0, 180]
    """
    v1x, v1y = p1.x - vertex.x, p1.y - vertex.y
    v2x, v2y = p2.x - vertex.x, p2.y - vertex.y

    dot = v1x * v2x + v1y * v2y
    cross = v1x * v2y - v1y * v2x

    return math.degrees(math.atan2(abs(cross), dot))


def _check_height(height) -> None:
    if isinstance(height, bool) or not isinstance(height, (int, float)):
        raise ValidationError(
            f"Volume height must be a number, got {height!r}",
            {"height": repr(height)},
        )
    if not math.isfinite(height) or height < 0:
        raise ValidationError(
            f"Volume height must be a non-negative number, got {height}",
            {"height": str(height)},
        )


def extrusion_height(points: Sequence[Point], height: Optional[float] = None) -> float:
    """
    Resolve the extrusion height of a volume.

    An explicit non-zero height wins, then the z of the first point, then 0.

    Raises:
        ValidationError: If a height used is not a finite number >= 0
    """
    first_z = points[0].z if points else None

    for candidate in (height, first_z):
        if candidate is None:
            continue
        _check_height(candidate)
        if candidate:
            return float(candidate)

    return 0.0


def volume(points: Sequence[Point], height: Optional[float] = None) -> float:
    """
    Calculate volume as an extruded prism.

    Note: This is a simplified approximation (footprint area * height),
    not true 3D volumetrics.

    Args:
        points: Footprint vertices in pixel coordinates
        height: Extrusion height in pixels; falls back to the z of the
            first point, then 0

    Returns:
        Volume in cubic pixels

    Raises:
        ValidationError: If the height is negative, non-finite or not a number
    """
    h = extrusion_height(points, height)
    base_area = polygon_area(points)

    if not h:
        logger.debug("Volume has no height, returning 0")

    return base_area * h


def validate_point_count(measurement_type: MeasurementType, points: Sequence[Point]) -> None:
    """
    Check that a point list has the right length for a measurement type.

    Raises:
        ValidationError: Naming the expected point count
    """
    minimum, maximum = POINT_COUNT_RULES[measurement_type]
    count = len(points)

    if minimum == maximum and count != minimum:
        raise ValidationError(
            f"{measurement_type.value.capitalize()} measurement requires exactly "
            f"{minimum} points, got {count}",
            {"type": measurement_type.value, "expected": str(minimum), "received": str(count)},
        )

    if count < minimum:
        raise ValidationError(
            f"{measurement_type.value.capitalize()} measurement requires at least "
            f"{minimum} points, got {count}",
            {"type": measurement_type.value, "expected": f">={minimum}", "received": str(count)},
        )


def pixel_magnitude(
    measurement_type: MeasurementType,
    points: Sequence[Point],
    height: Optional[float] = None
) -> float:
    """
    Compute the raw magnitude for a measurement type.

    Distance over more than two points is the closed-path length.

    Args:
        measurement_type: Kind of measurement
        points: Drawn points in pixel coordinates
        height: Optional extrusion height for volume

    Returns:
        Magnitude in pixel units (degrees for angle)
    """
    validate_point_count(measurement_type, points)

    if measurement_type == MeasurementType.DISTANCE:
        if len(points) == 2:
            return distance(points[0], points[1])
        return perimeter(points)
    elif measurement_type == MeasurementType.AREA:
        return polygon_area(points)
    elif measurement_type == MeasurementType.PERIMETER:
        return perimeter(points)
    elif measurement_type == MeasurementType.VOLUME:
        return volume(points, height)
    elif measurement_type == MeasurementType.ANGLE:
        return angle(points[0], points[1], points[2])

    raise ValidationError(f"Unknown measurement type: {measurement_type}")


def check_polygon(points: Sequence[Point]) -> List[str]:
    """
    Check a drawn outline and return warnings.

    A self-intersecting outline still gets a Shoelace area, but that area
    is the signed sum of its loops and is rarely what the user meant.

    Args:
        points: Polygon vertices in pixel coordinates

    Returns:
        List of warning messages
    """
    warnings = []

    if len(points) < 3:
        return warnings

    if polygon_area(points) == 0:
        warnings.append("Outline has zero area (points are collinear or repeated)")
        return warnings

    try:
        polygon = Polygon([p.as_tuple() for p in points])
        if not polygon.is_valid:
            warnings.append(f"Outline is not a simple polygon: {explain_validity(polygon)}")
    except (ValueError, GEOSException) as e:
        warnings.append(f"Outline could not be checked: {e}")

    return warnings
