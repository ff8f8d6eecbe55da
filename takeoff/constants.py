"""
Blueprint Takeoff - Master Constants Reference

Conversion factors, unit symbols and default units used by the
measurement and cost engines. These tables are read-only.
"""

from enum import Enum
from types import MappingProxyType

from .exceptions import ValidationError


# =============================================================================
# ENUMS
# =============================================================================

class MeasurementType(Enum):
    """
    Kind of measurement drawn on a blueprint.

    Determines which geometry algorithm runs and which unit family
    applies to the result.
    """
    DISTANCE = "distance"
    AREA = "area"
    PERIMETER = "perimeter"
    VOLUME = "volume"
    ANGLE = "angle"

    @classmethod
    def from_string(cls, value) -> "MeasurementType":
        """
        Parse a measurement type from string (case-insensitive).

        Raises:
            ValidationError: If the value is not a known measurement type
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValidationError(
                f"Unknown measurement type: {value}",
                {"type": str(value)},
            ) from None


class ScaleUnit(Enum):
    """Linear units a blueprint can be calibrated in."""
    M = "m"
    CM = "cm"
    MM = "mm"
    FT = "ft"
    IN = "in"

    @classmethod
    def from_string(cls, value) -> "ScaleUnit":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValidationError(
                f"unit must be one of: {', '.join(u.value for u in cls)}",
                {"unit": str(value)},
            ) from None

    def is_imperial(self) -> bool:
        return self in (ScaleUnit.FT, ScaleUnit.IN)


class MeasurementUnit(Enum):
    """Units a measurement value can be labeled with."""
    M = "m"
    CM = "cm"
    MM = "mm"
    FT = "ft"
    IN = "in"
    SQM = "sqm"
    SQFT = "sqft"
    CBM = "cbm"
    CBFT = "cbft"
    DEG = "deg"

    @classmethod
    def from_string(cls, value) -> "MeasurementUnit":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValidationError(
                f"Unknown measurement unit: {value}",
                {"unit": str(value)},
            ) from None

    @property
    def symbol(self) -> str:
        return UNIT_SYMBOLS[self]


class CostCategory(Enum):
    """Category of a priced line item."""
    MATERIAL = "material"
    LABOR = "labor"
    EQUIPMENT = "equipment"
    OVERHEAD = "overhead"
    OTHER = "other"

    @classmethod
    def from_string(cls, value) -> "CostCategory":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValidationError(
                f"category must be one of: {', '.join(c.value for c in cls)}",
                {"category": str(value)},
            ) from None


# =============================================================================
# UNIT CONVERSION CONSTANTS
# =============================================================================

# Meters per unit
METERS_PER_UNIT = MappingProxyType({
    ScaleUnit.M: 1,
    ScaleUnit.CM: 0.01,
    ScaleUnit.MM: 0.001,
    ScaleUnit.FT: 0.3048,
    ScaleUnit.IN: 0.0254,
})

# Legacy fallback for maps without calibration: 100 px = 1 m
LEGACY_METERS_PER_PIXEL = 0.01

# Power of the length ratio applied to each measurement type
SCALE_EXPONENTS = MappingProxyType({
    MeasurementType.DISTANCE: 1,
    MeasurementType.PERIMETER: 1,
    MeasurementType.AREA: 2,
    MeasurementType.VOLUME: 3,
    MeasurementType.ANGLE: 0,
})


# =============================================================================
# DISPLAY CONSTANTS
# =============================================================================

UNIT_SYMBOLS = MappingProxyType({
    MeasurementUnit.M: "m",
    MeasurementUnit.CM: "cm",
    MeasurementUnit.MM: "mm",
    MeasurementUnit.FT: "ft",
    MeasurementUnit.IN: "in",
    MeasurementUnit.SQM: "m²",
    MeasurementUnit.SQFT: "ft²",
    MeasurementUnit.CBM: "m³",
    MeasurementUnit.CBFT: "ft³",
    MeasurementUnit.DEG: "°",
})

# Decimal places in display strings
ANGLE_DISPLAY_PRECISION = 1
DEFAULT_DISPLAY_PRECISION = 2

# Decimal places in CSV/JSON exports
EXPORT_PRECISION = 2


# =============================================================================
# DEFAULT UNITS
# =============================================================================

# Used when the map has no calibration
DEFAULT_UNITS = MappingProxyType({
    MeasurementType.DISTANCE: MeasurementUnit.M,
    MeasurementType.PERIMETER: MeasurementUnit.M,
    MeasurementType.AREA: MeasurementUnit.SQM,
    MeasurementType.VOLUME: MeasurementUnit.CBM,
    MeasurementType.ANGLE: MeasurementUnit.DEG,
})

# (metric, imperial) area and volume units keyed by type
DERIVED_UNITS = MappingProxyType({
    MeasurementType.AREA: (MeasurementUnit.SQM, MeasurementUnit.SQFT),
    MeasurementType.VOLUME: (MeasurementUnit.CBM, MeasurementUnit.CBFT),
})


# =============================================================================
# POINT COUNT RULES
# =============================================================================

# (minimum, maximum) points per type; None = unbounded
POINT_COUNT_RULES = MappingProxyType({
    MeasurementType.DISTANCE: (2, None),
    MeasurementType.AREA: (3, None),
    MeasurementType.PERIMETER: (2, None),
    MeasurementType.VOLUME: (3, None),
    MeasurementType.ANGLE: (3, 3),
})


# =============================================================================
# COST ESTIMATE CONSTANTS
# =============================================================================

DEFAULT_CURRENCY = "USD"

DEFAULT_TAX_RATE = 0.0

MIN_TAX_RATE = 0.0

MAX_TAX_RATE = 100.0

# Starting unit costs offered by the estimator per measurement type
DEFAULT_UNIT_COSTS = MappingProxyType({
    MeasurementType.AREA: (50.0, "m²"),
    MeasurementType.DISTANCE: (25.0, "m"),
    MeasurementType.VOLUME: (100.0, "m³"),
    MeasurementType.PERIMETER: (15.0, "m"),
    MeasurementType.ANGLE: (0.0, "°"),
})
