"""
Scale Calibration Module

Defines the pixel-to-real-world mapping established for a blueprint.
"""

import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..constants import ScaleUnit
from ..exceptions import ValidationError
from ..geometry.calculator import distance
from ..geometry.point import Point

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScaleCalibration:
    """
    Calibration of one blueprint ("map").

    The user measured pixel_distance pixels on the image and declared that
    they correspond to real_distance in unit. The ratio is real-world units
    per pixel.
    """
    pixel_distance: float
    real_distance: float
    unit: ScaleUnit = ScaleUnit.M

    def __post_init__(self):
        object.__setattr__(self, "unit", ScaleUnit.from_string(self.unit))

        for field_name in ("pixel_distance", "real_distance"):
            value = getattr(self, field_name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValidationError(
                    f"{field_name} must be a positive number",
                    {field_name: repr(value)},
                )
            if not math.isfinite(value) or value <= 0:
                raise ValidationError(
                    f"{field_name} must be a positive number",
                    {field_name: repr(value)},
                )

    @property
    def ratio(self) -> float:
        """Real-world units per pixel."""
        return self.real_distance / self.pixel_distance

    @classmethod
    def from_points(
        cls,
        point1: Any,
        point2: Any,
        real_distance: float,
        unit: Any = ScaleUnit.M
    ) -> "ScaleCalibration":
        """
        Create a calibration from two clicked points and their known length.

        Args:
            point1: First point in pixel coordinates
            point2: Second point in pixel coordinates
            real_distance: Real-world length between the points
            unit: Unit of real_distance

        Returns:
            ScaleCalibration with pixel_distance set to the point spacing
        """
        p1, p2 = Point.coerce(point1), Point.coerce(point2)
        pixel_distance = distance(p1, p2)

        calibration = cls(pixel_distance, real_distance, unit)
        logger.info(
            f"Calibration: {pixel_distance:.1f} px = {real_distance} {calibration.unit.value} "
            f"({calibration.ratio:.6f} {calibration.unit.value}/px)"
        )
        return calibration

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["ScaleCalibration"]:
        """
        Build a calibration from a stored record.

        Records written by older clients use camelCase keys. An empty or
        missing record means the map is not calibrated.
        """
        if not data:
            return None

        pixel_distance = data.get("pixel_distance", data.get("pixelDistance"))
        real_distance = data.get("real_distance", data.get("realDistance"))
        if pixel_distance is None or real_distance is None:
            raise ValidationError(
                "Calibration requires pixel_distance and real_distance",
                {key: str(value) for key, value in data.items()},
            )

        return cls(pixel_distance, real_distance, data.get("unit", ScaleUnit.M.value))

    def to_dict(self) -> Dict[str, Any]:
        """Convert calibration to dictionary for JSON serialization."""
        return {
            "pixel_distance": self.pixel_distance,
            "real_distance": self.real_distance,
            "unit": self.unit.value,
            "ratio": self.ratio,
        }


# Two-point form "x1,y1:x2,y2=LENGTH UNIT" or pixel form "PIXELS=LENGTH UNIT"
_NUMBER = r"(-?\d+(?:\.\d+)?)"
_TWO_POINT_PATTERN = re.compile(
    rf"^\s*{_NUMBER}\s*,\s*{_NUMBER}\s*:\s*{_NUMBER}\s*,\s*{_NUMBER}\s*=\s*{_NUMBER}\s*([a-z]+)?\s*$",
    re.IGNORECASE
)
_PIXEL_PATTERN = re.compile(
    rf"^\s*{_NUMBER}\s*(?:px)?\s*=\s*{_NUMBER}\s*([a-z]+)?\s*$",
    re.IGNORECASE
)

_UNIT_ALIASES = {
    "m": "m", "meter": "m", "meters": "m", "metre": "m", "metres": "m",
    "cm": "cm", "mm": "mm",
    "ft": "ft", "foot": "ft", "feet": "ft",
    "in": "in", "inch": "in", "inches": "in",
}


def parse_calibration_string(calib_string: str) -> ScaleCalibration:
    """
    Parse a calibration string.

    Examples:
        "100,200:300,200=10ft" -> 200 px = 10 ft
        "100=5m" -> 100 px = 5 m

    Args:
        calib_string: Calibration string; unit defaults to meters

    Returns:
        ScaleCalibration

    Raises:
        ValidationError: If string format is invalid
    """
    match = _TWO_POINT_PATTERN.match(calib_string)
    if match:
        x1, y1, x2, y2, length, unit = match.groups()
        return ScaleCalibration.from_points(
            (float(x1), float(y1)),
            (float(x2), float(y2)),
            float(length),
            _normalize_unit(unit),
        )

    match = _PIXEL_PATTERN.match(calib_string)
    if match:
        pixels, length, unit = match.groups()
        return ScaleCalibration(float(pixels), float(length), _normalize_unit(unit))

    raise ValidationError(f"Invalid calibration format: {calib_string}")


def _normalize_unit(unit: Optional[str]) -> str:
    if not unit:
        return ScaleUnit.M.value
    normalized = _UNIT_ALIASES.get(unit.lower())
    if normalized is None:
        raise ValidationError(f"Unknown calibration unit: {unit}", {"unit": unit})
    return normalized
