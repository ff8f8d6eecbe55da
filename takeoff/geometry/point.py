"""
Point Data Structure Module

Defines the Point class used for all pixel-space geometry.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from ..exceptions import ValidationError


@dataclass(frozen=True)
class Point:
    """
    A 2D (optionally 3D) coordinate in blueprint pixel space.

    Coordinates are relative to the blueprint image; z is only used as the
    extrusion height of volume measurements.
    """
    x: float
    y: float
    z: Optional[float] = None

    @classmethod
    def coerce(cls, value: Any) -> "Point":
        """
        Build a Point from a Point, a mapping or a 2/3-sequence.

        Examples:
            {"x": 1, "y": 2} -> Point(1.0, 2.0)
            (1, 2, 3) -> Point(1.0, 2.0, 3.0)

        Raises:
            ValidationError: If the value cannot be read as a point
        """
        if isinstance(value, cls):
            return value

        try:
            if isinstance(value, dict):
                x, y, z = value["x"], value["y"], value.get("z")
            elif isinstance(value, (str, bytes)):
                raise TypeError("string is not a point")
            else:
                coords = list(value)
                if len(coords) not in (2, 3):
                    raise ValueError(f"expected 2 or 3 coordinates, got {len(coords)}")
                x, y = coords[0], coords[1]
                z = coords[2] if len(coords) == 3 else None

            point = cls(float(x), float(y), None if z is None else float(z))
            coords = (point.x, point.y) if point.z is None else (point.x, point.y, point.z)
            if not all(math.isfinite(c) for c in coords):
                raise ValueError("coordinates must be finite")
            return point
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Invalid point {value!r}: {e}") from None

    def to_dict(self) -> Dict[str, float]:
        """Convert point to dictionary for JSON serialization."""
        d = {"x": self.x, "y": self.y}
        if self.z is not None:
            d["z"] = self.z
        return d

    def as_tuple(self):
        return (self.x, self.y)


def coerce_points(points: Iterable[Any]) -> List[Point]:
    """Convert a sequence of point-like values to a list of Points."""
    if points is None:
        raise ValidationError("Points are required")
    return [Point.coerce(p) for p in points]
