"""
Unit Converter Module

Functions for converting pixel magnitudes and linear units to real-world
quantities, and for labeling and formatting the results.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional

from ..constants import (
    METERS_PER_UNIT,
    LEGACY_METERS_PER_PIXEL,
    SCALE_EXPONENTS,
    DEFAULT_UNITS,
    DERIVED_UNITS,
    UNIT_SYMBOLS,
    ANGLE_DISPLAY_PRECISION,
    DEFAULT_DISPLAY_PRECISION,
    MeasurementType,
    MeasurementUnit,
    ScaleUnit,
)
from .scale import ScaleCalibration

logger = logging.getLogger(__name__)


def to_meters(value: float, unit: Any) -> float:
    """
    Convert a linear quantity to meters.

    Args:
        value: Length in unit
        unit: Source unit - "m", "cm", "mm", "ft", "in"

    Returns:
        Length in meters
    """
    return value * METERS_PER_UNIT[ScaleUnit.from_string(unit)]


def from_meters(value: float, unit: Any) -> float:
    """
    Convert a length in meters to another linear unit.

    Args:
        value: Length in meters
        unit: Target unit - "m", "cm", "mm", "ft", "in"

    Returns:
        Length in unit
    """
    return value / METERS_PER_UNIT[ScaleUnit.from_string(unit)]


def meters_per_pixel(calibration: Optional[ScaleCalibration]) -> float:
    """
    Get the meters-per-pixel ratio for a calibration.

    Maps without calibration use the legacy 100 px = 1 m ratio.
    """
    if calibration is None or not calibration.ratio:
        return LEGACY_METERS_PER_PIXEL
    return to_meters(calibration.ratio, calibration.unit)


def apply_scale(
    pixel_magnitude: float,
    calibration: Optional[ScaleCalibration],
    measurement_type: Any
) -> float:
    """
    Convert a pixel magnitude to a real-world value in meters.

    Note: Area uses the ratio squared and volume the ratio cubed. Angles
    are returned unchanged.

    Args:
        pixel_magnitude: Raw magnitude from the geometry calculator
        calibration: Map calibration, or None for an uncalibrated map
        measurement_type: Kind of measurement

    Returns:
        Value in m, m² or m³
    """
    measurement_type = MeasurementType.from_string(measurement_type)
    exponent = SCALE_EXPONENTS[measurement_type]

    if exponent == 0:
        return pixel_magnitude

    if calibration is None or not calibration.ratio:
        logger.warning(
            f"Map is not calibrated, using legacy scale "
            f"({LEGACY_METERS_PER_PIXEL} m/px) for {measurement_type.value}"
        )

    ratio = meters_per_pixel(calibration)

    # Multiply one power at a time; stored legacy values depend on this order
    value = pixel_magnitude
    for _ in range(exponent):
        value = value * ratio

    return value


def default_unit(
    measurement_type: Any,
    calibration: Optional[ScaleCalibration] = None
) -> MeasurementUnit:
    """
    Choose the output unit for a measurement.

    Examples:
        area, calibrated in ft -> sqft
        volume, calibrated in cm -> cbm
        distance, calibrated in in -> in
        angle -> deg

    Args:
        measurement_type: Kind of measurement
        calibration: Map calibration, if any

    Returns:
        MeasurementUnit
    """
    measurement_type = MeasurementType.from_string(measurement_type)

    if measurement_type == MeasurementType.ANGLE:
        return MeasurementUnit.DEG

    if calibration is None:
        return DEFAULT_UNITS[measurement_type]

    if measurement_type in DERIVED_UNITS:
        metric, imperial = DERIVED_UNITS[measurement_type]
        return imperial if calibration.unit.is_imperial() else metric

    return MeasurementUnit.from_string(calibration.unit.value)


def round_half_up(value: float, precision: int) -> Decimal:
    """Round to precision decimals, halves away from zero."""
    rounded = Decimal(value).quantize(Decimal(1).scaleb(-precision), rounding=ROUND_HALF_UP)
    if rounded == 0:
        rounded = abs(rounded)
    return rounded


def format_display(value: float, unit: Any) -> str:
    """
    Format a measurement value with its unit symbol.

    Examples:
        (5, "m") -> "5.00 m"
        (12.5, "sqft") -> "12.50 ft²"
        (60, "deg") -> "60.0 °"

    Args:
        value: Measurement value
        unit: MeasurementUnit or unit code

    Returns:
        Display string
    """
    unit = MeasurementUnit.from_string(unit)
    precision = ANGLE_DISPLAY_PRECISION if unit == MeasurementUnit.DEG else DEFAULT_DISPLAY_PRECISION

    return f"{round_half_up(value, precision):f} {UNIT_SYMBOLS[unit]}"
