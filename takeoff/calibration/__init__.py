# Scale calibration and unit conversion module

from .scale import (
    ScaleCalibration,
    parse_calibration_string,
)

from .unit_converter import (
    to_meters,
    from_meters,
    meters_per_pixel,
    apply_scale,
    default_unit,
    round_half_up,
    format_display,
)

__all__ = [
    # Scale
    "ScaleCalibration",
    "parse_calibration_string",
    # Unit Converter
    "to_meters",
    "from_meters",
    "meters_per_pixel",
    "apply_scale",
    "default_unit",
    "round_half_up",
    "format_display",
]
