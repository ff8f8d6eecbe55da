"""
Calibration Tests: Scale and Unit Conversion

Tests for scale calibration, calibration string parsing, unit conversion,
scaling, default units and display formatting.
"""

import dataclasses
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pytest

from takeoff.calibration import (
    ScaleCalibration,
    parse_calibration_string,
    to_meters,
    from_meters,
    meters_per_pixel,
    apply_scale,
    default_unit,
    round_half_up,
    format_display,
)
from takeoff.constants import (
    LEGACY_METERS_PER_PIXEL,
    MeasurementType,
    MeasurementUnit,
    ScaleUnit,
)
from takeoff.exceptions import ValidationError


def test_calibration_ratio():
    """Test ratio is real units per pixel."""
    calib = ScaleCalibration(100, 5, "m")

    assert calib.unit == ScaleUnit.M
    assert calib.ratio == 0.05

    print("  [PASS] Calibration ratio")


def test_calibration_invalid():
    """Test invalid calibration values are rejected."""
    with pytest.raises(ValidationError):
        ScaleCalibration(0, 5)
    with pytest.raises(ValidationError):
        ScaleCalibration(100, -1)
    with pytest.raises(ValidationError):
        ScaleCalibration(float("inf"), 5)
    with pytest.raises(ValidationError):
        ScaleCalibration("100", 5)
    with pytest.raises(ValidationError, match="unit must be one of"):
        ScaleCalibration(100, 5, "yd")

    print("  [PASS] Calibration invalid")


def test_calibration_immutable():
    """Test a calibration cannot be changed after validation."""
    calib = ScaleCalibration(100, 5, "m")

    with pytest.raises(dataclasses.FrozenInstanceError):
        calib.pixel_distance = -1
    with pytest.raises(dataclasses.FrozenInstanceError):
        calib.unit = "ft"

    assert calib.ratio == 0.05
    assert calib == ScaleCalibration(100, 5, ScaleUnit.M)

    print("  [PASS] Calibration immutable")


def test_calibration_from_points():
    """Test two-point calibration."""
    calib = ScaleCalibration.from_points((0, 0), {"x": 300, "y": 400}, 10, "ft")

    assert calib.pixel_distance == 500
    assert calib.unit == ScaleUnit.FT
    assert calib.ratio == pytest.approx(0.02)

    print("  [PASS] Calibration from points")


def test_calibration_from_dict():
    """Test stored calibration records."""
    assert ScaleCalibration.from_dict(None) is None
    assert ScaleCalibration.from_dict({}) is None

    calib = ScaleCalibration.from_dict({"pixelDistance": 200, "realDistance": 4, "unit": "cm"})
    assert calib.pixel_distance == 200
    assert calib.unit == ScaleUnit.CM

    # Unit defaults to meters
    assert ScaleCalibration.from_dict({"pixel_distance": 1, "real_distance": 1}).unit == ScaleUnit.M

    with pytest.raises(ValidationError):
        ScaleCalibration.from_dict({"pixel_distance": 100})

    d = ScaleCalibration(100, 5, "m").to_dict()
    assert d == {"pixel_distance": 100, "real_distance": 5, "unit": "m", "ratio": 0.05}

    print("  [PASS] Calibration from dict")


def test_parse_calibration_string():
    """Test calibration string formats."""
    calib = parse_calibration_string("100=5m")
    assert (calib.pixel_distance, calib.real_distance, calib.unit) == (100, 5, ScaleUnit.M)

    calib = parse_calibration_string("0,0:300,400=10ft")
    assert calib.pixel_distance == 500
    assert calib.unit == ScaleUnit.FT

    calib = parse_calibration_string("250 px = 12.5 inches")
    assert calib.unit == ScaleUnit.IN
    assert calib.real_distance == 12.5

    # Unit defaults to meters
    assert parse_calibration_string("100=2").unit == ScaleUnit.M

    with pytest.raises(ValidationError, match="Invalid calibration format"):
        parse_calibration_string("one hundred")
    with pytest.raises(ValidationError, match="Unknown calibration unit"):
        parse_calibration_string("100=5yards")

    print("  [PASS] Parse calibration string")


def test_to_meters():
    """Test linear unit conversion."""
    assert to_meters(5, "m") == 5
    assert to_meters(250, "cm") == pytest.approx(2.5)
    assert to_meters(1500, "mm") == pytest.approx(1.5)
    assert to_meters(10, "ft") == pytest.approx(3.048)
    assert to_meters(12, ScaleUnit.IN) == pytest.approx(0.3048)

    assert from_meters(3.048, "ft") == pytest.approx(10)
    assert from_meters(1, "cm") == pytest.approx(100)

    with pytest.raises(ValidationError):
        to_meters(1, "furlong")

    print("  [PASS] To meters")


def test_meters_per_pixel():
    """Test meters-per-pixel ratio with and without calibration."""
    assert meters_per_pixel(None) == LEGACY_METERS_PER_PIXEL == 0.01
    assert meters_per_pixel(ScaleCalibration(100, 5, "m")) == 0.05
    assert meters_per_pixel(ScaleCalibration(100, 10, "ft")) == pytest.approx(0.03048)

    print("  [PASS] Meters per pixel")


def test_apply_scale_powers():
    """Test linear, squared and cubed scaling."""
    calib = ScaleCalibration(100, 5, "m")
    r = 0.05

    assert apply_scale(100, calib, "distance") == 100 * r
    assert apply_scale(100, calib, MeasurementType.PERIMETER) == 100 * r
    assert apply_scale(100, calib, "area") == 100 * r * r
    assert apply_scale(100, calib, "volume") == 100 * r * r * r

    # Angles are not scaled
    assert apply_scale(45, calib, "angle") == 45

    print("  [PASS] Apply scale powers")


def test_apply_scale_exact():
    """Test scaling a converted ratio equals multiplying by its square."""
    calib = ScaleCalibration(1, 1, "ft")
    ratio = to_meters(calib.ratio, calib.unit)

    assert apply_scale(100, calib, "area") == 100 * ratio * ratio

    print("  [PASS] Apply scale exact")


def test_apply_scale_legacy():
    """Test uncalibrated maps use 100 px = 1 m."""
    value = apply_scale(10000, None, "area")

    assert value == 10000 * 0.01 * 0.01
    assert value == pytest.approx(1.0)
    assert apply_scale(250, None, "distance") == pytest.approx(2.5)

    print("  [PASS] Apply scale legacy")


def test_default_unit():
    """Test unit chosen from type and calibration."""
    ft = ScaleCalibration(100, 10, "ft")
    inch = ScaleCalibration(100, 10, "in")
    cm = ScaleCalibration(100, 10, "cm")

    assert default_unit("area", ft) == MeasurementUnit.SQFT
    assert default_unit("volume", inch) == MeasurementUnit.CBFT
    assert default_unit("area", cm) == MeasurementUnit.SQM
    assert default_unit("volume", cm) == MeasurementUnit.CBM
    assert default_unit("distance", inch) == MeasurementUnit.IN
    assert default_unit("perimeter", cm) == MeasurementUnit.CM
    assert default_unit("angle", ft) == MeasurementUnit.DEG

    assert default_unit("area") == MeasurementUnit.SQM
    assert default_unit("volume") == MeasurementUnit.CBM
    assert default_unit("distance") == MeasurementUnit.M
    assert default_unit("perimeter") == MeasurementUnit.M
    assert default_unit("angle") == MeasurementUnit.DEG

    print("  [PASS] Default unit")


def test_format_display():
    """Test display strings and precision."""
    assert format_display(5, "m") == "5.00 m"
    assert format_display(12.5, "sqft") == "12.50 ft²"
    assert format_display(3.14159, MeasurementUnit.CBM) == "3.14 m³"
    assert format_display(2, "cbft") == "2.00 ft³"
    assert format_display(60, "deg") == "60.0 °"
    assert format_display(89.96, "deg") == "90.0 °"
    assert format_display(1234.5, "in") == "1234.50 in"

    print("  [PASS] Format display")


def test_format_display_rounding():
    """Test halves round away from zero and negative zero is not shown."""
    assert str(round_half_up(0.125, 2)) == "0.13"
    assert str(round_half_up(0.25, 1)) == "0.3"
    assert format_display(0.125, "m") == "0.13 m"
    assert format_display(-0.001, "m") == "0.00 m"

    print("  [PASS] Format display rounding")


def _run(test) -> bool:
    try:
        test()
        return True
    except AssertionError as e:
        print(f"  [FAIL] {test.__name__}: {e}")
        return False


def run_all_tests():
    """Run all calibration tests."""
    print("\n" + "=" * 60)
    print("Calibration Tests: Scale and Unit Conversion")
    print("=" * 60)

    results = []

    print("\nScale Calibration Tests:")
    results.append(_run(test_calibration_ratio))
    results.append(_run(test_calibration_invalid))
    results.append(_run(test_calibration_immutable))
    results.append(_run(test_calibration_from_points))
    results.append(_run(test_calibration_from_dict))
    results.append(_run(test_parse_calibration_string))

    print("\nUnit Conversion Tests:")
    results.append(_run(test_to_meters))
    results.append(_run(test_meters_per_pixel))
    results.append(_run(test_apply_scale_powers))
    results.append(_run(test_apply_scale_exact))
    results.append(_run(test_apply_scale_legacy))
    results.append(_run(test_default_unit))

    print("\nDisplay Tests:")
    results.append(_run(test_format_display))
    results.append(_run(test_format_display_rounding))

    # Summary
    passed = sum(results)
    total = len(results)
    print("\n" + "=" * 60)
    print(f"Calibration Results: {passed}/{total} tests passed")
    print("=" * 60)

    return passed == total


if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)
