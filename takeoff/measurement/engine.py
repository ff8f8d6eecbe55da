"""
Measurement Engine Module

Turns a measurement type and drawn points into a calibrated, labeled and
formatted value. Persistence and ownership checks are left to the caller.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Sequence

from ..calibration.scale import ScaleCalibration
from ..calibration.unit_converter import apply_scale, default_unit, format_display
from ..constants import MeasurementType, MeasurementUnit
from ..exceptions import PreconditionError, ValidationError
from ..geometry.calculator import check_polygon, pixel_magnitude
from ..geometry.point import coerce_points
from .measurement import Measurement, MeasurementResult

logger = logging.getLogger(__name__)

# Types whose points describe a closed outline
POLYGON_TYPES = (MeasurementType.AREA, MeasurementType.VOLUME)


def _coerce_calibration(calibration: Any) -> Optional[ScaleCalibration]:
    if calibration is None or isinstance(calibration, ScaleCalibration):
        return calibration
    if isinstance(calibration, dict):
        return ScaleCalibration.from_dict(calibration)
    raise ValidationError(f"Invalid calibration: {calibration!r}")


def ensure_calibrated(calibration: Optional[ScaleCalibration]) -> ScaleCalibration:
    """
    Enforce the "measurements require a calibrated map" rule.

    Raises:
        PreconditionError: If the map has no calibration
    """
    if calibration is None or not calibration.ratio:
        raise PreconditionError("Map must be calibrated before creating measurements")
    return calibration


def compute_measurement(
    calibration: Any,
    measurement_type: Any,
    points: Sequence[Any],
    unit: Any = None,
    *,
    require_calibration: bool = False,
    height: Optional[float] = None
) -> MeasurementResult:
    """
    Compute the calibrated value of a measurement.

    Maps without calibration use the legacy 100 px = 1 m scale unless
    require_calibration is set.

    Args:
        calibration: ScaleCalibration, calibration record, or None
        measurement_type: Kind of measurement
        points: Drawn points in pixel coordinates
        unit: Output unit; defaults to the unit implied by the calibration
        require_calibration: Reject uncalibrated maps
        height: Extrusion height in pixels for volume

    Returns:
        MeasurementResult

    Raises:
        ValidationError: On wrong point count, unknown type, unknown unit,
            invalid volume height, or a value too large to represent
        PreconditionError: If calibration is required and missing
    """
    measurement_type = MeasurementType.from_string(measurement_type)
    calibration = _coerce_calibration(calibration)

    if require_calibration:
        ensure_calibrated(calibration)

    points = coerce_points(points)

    raw = pixel_magnitude(measurement_type, points, height)

    if measurement_type == MeasurementType.ANGLE:
        value = raw
    else:
        value = apply_scale(raw, calibration, measurement_type)

    if not math.isfinite(value):
        raise ValidationError(
            "Measurement value is out of range",
            {"type": measurement_type.value, "value": str(value)},
        )

    measurement_unit = (
        MeasurementUnit.from_string(unit) if unit else default_unit(measurement_type, calibration)
    )
    display_value = format_display(value, measurement_unit)

    warnings = []
    if measurement_type in POLYGON_TYPES:
        warnings = check_polygon(points)
        for warning in warnings:
            logger.warning(f"{measurement_type.value}: {warning}")

    logger.debug(
        f"{measurement_type.value}: {len(points)} points, {raw:.2f} px -> {display_value}"
    )

    return MeasurementResult(
        value=value,
        unit=measurement_unit,
        display_value=display_value,
        warnings=tuple(warnings),
    )


def create_measurement(
    calibration: Any,
    measurement_type: Any,
    points: Sequence[Any],
    name: str = "",
    unit: Any = None,
    color: Optional[str] = None,
    notes: Optional[str] = None,
    measurement_id: Optional[str] = None,
    **policy
) -> Measurement:
    """
    Compute a measurement and wrap it in a Measurement record.

    Args:
        calibration: ScaleCalibration, calibration record, or None
        measurement_type: Kind of measurement
        points: Drawn points in pixel coordinates
        name: Measurement name
        unit: Output unit override
        color: Display color
        notes: Free-form notes
        measurement_id: Identifier assigned by the caller's store
        **policy: require_calibration / height, passed to compute_measurement

    Returns:
        Measurement
    """
    measurement_type = MeasurementType.from_string(measurement_type)
    points = coerce_points(points)

    result = compute_measurement(calibration, measurement_type, points, unit, **policy)

    return Measurement(
        measurement_type=measurement_type,
        points=tuple(points),
        value=result.value,
        unit=result.unit,
        display_value=result.display_value,
        name=name,
        color=color,
        notes=notes,
        measurement_id=measurement_id,
        warnings=result.warnings,
    )


@dataclass
class MeasurementTotals:
    """Per-type value sums and counts for a set of measurements."""
    totals: Dict[MeasurementType, float] = field(
        default_factory=lambda: {t: 0.0 for t in MeasurementType}
    )
    counts: Dict[MeasurementType, int] = field(
        default_factory=lambda: {t: 0 for t in MeasurementType}
    )

    def to_dict(self) -> Dict[str, Dict[str, float]]:
        return {
            "totals": {t.value: v for t, v in self.totals.items()},
            "counts": {t.value: c for t, c in self.counts.items()},
        }


def _type_and_value(measurement: Any):
    if isinstance(measurement, Measurement):
        return measurement.measurement_type, measurement.value
    if isinstance(measurement, dict):
        if "type" not in measurement or "value" not in measurement:
            raise ValidationError(f"Measurement requires type and value: {measurement!r}")
        return MeasurementType.from_string(measurement["type"]), float(measurement["value"])
    raise ValidationError(f"Invalid measurement: {measurement!r}")


def measurement_totals(measurements: Iterable[Any]) -> MeasurementTotals:
    """
    Sum measurement values and count measurements per type.

    Every type is present in the result, with zero when unused.

    Args:
        measurements: Measurement records or {type, value} mappings

    Returns:
        MeasurementTotals
    """
    result = MeasurementTotals()

    for measurement in measurements:
        measurement_type, value = _type_and_value(measurement)
        result.totals[measurement_type] += value
        result.counts[measurement_type] += 1

    return result
