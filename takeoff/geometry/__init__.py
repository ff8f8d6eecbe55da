# Geometry calculations module

from .point import (
    Point,
    coerce_points,
)

from .calculator import (
    distance,
    perimeter,
    polygon_area,
    angle,
    volume,
    extrusion_height,
    validate_point_count,
    pixel_magnitude,
    check_polygon,
)

__all__ = [
    # Point
    "Point",
    "coerce_points",
    # Calculator
    "distance",
    "perimeter",
    "polygon_area",
    "angle",
    "volume",
    "extrusion_height",
    "validate_point_count",
    "pixel_magnitude",
    "check_polygon",
]
