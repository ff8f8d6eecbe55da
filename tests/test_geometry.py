"""
Geometry Tests: Points and Pixel Calculations

Tests for point parsing, Shoelace area, perimeter, angle, volume and
point count validation.
"""

import math
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pytest

from takeoff.geometry import (
    Point,
    coerce_points,
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
from takeoff.constants import MeasurementType
from takeoff.exceptions import ValidationError


UNIT_SQUARE = [Point(0, 0), Point(1, 0), Point(1, 1), Point(0, 1)]
SQUARE_100 = [Point(0, 0), Point(100, 0), Point(100, 100), Point(0, 100)]


def test_point_coerce():
    """Test building points from mappings and sequences."""
    assert Point.coerce({"x": 1, "y": 2}) == Point(1.0, 2.0)
    assert Point.coerce((1, 2, 3)) == Point(1.0, 2.0, 3.0)
    assert Point.coerce([4.5, 6]).z is None

    p = Point(1, 2)
    assert Point.coerce(p) is p

    print("  [PASS] Point coerce")


def test_point_coerce_invalid():
    """Test invalid points are rejected."""
    for bad in ("1,2", {"x": 1}, (1,), (1, 2, 3, 4), (float("nan"), 0), ("a", 1), None):
        with pytest.raises(ValidationError):
            Point.coerce(bad)

    with pytest.raises(ValidationError):
        coerce_points(None)

    print("  [PASS] Point coerce invalid")


def test_point_to_dict():
    """Test point serialization omits a missing z."""
    assert Point(1, 2).to_dict() == {"x": 1, "y": 2}
    assert Point(1, 2, 3).to_dict() == {"x": 1, "y": 2, "z": 3}

    print("  [PASS] Point to_dict")


def test_distance():
    """Test Euclidean distance, symmetry and zero length."""
    p1, p2 = Point(0, 0), Point(3, 4)

    assert distance(p1, p2) == 5.0
    assert distance(p1, p2) == distance(p2, p1)
    assert distance(p2, p2) == 0

    print("  [PASS] Distance")


def test_perimeter():
    """Test closed-path perimeter."""
    assert perimeter(UNIT_SQUARE) == 4
    assert perimeter(SQUARE_100) == 400

    # Two points: there and back
    assert perimeter([Point(0, 0), Point(3, 4)]) == 10

    assert perimeter([Point(0, 0)]) == 0
    assert perimeter([]) == 0

    print("  [PASS] Perimeter")


def test_polygon_area():
    """Test Shoelace area."""
    assert polygon_area(UNIT_SQUARE) == 1
    assert polygon_area(SQUARE_100) == 10000

    triangle = [Point(0, 0), Point(4, 0), Point(0, 3)]
    assert polygon_area(triangle) == 6

    assert polygon_area(UNIT_SQUARE[:2]) == 0

    print("  [PASS] Polygon area")


def test_polygon_area_winding():
    """Test area does not depend on winding order."""
    l_shape = [
        Point(0, 0), Point(200, 0), Point(200, 100),
        Point(100, 100), Point(100, 300), Point(0, 300),
    ]

    assert polygon_area(l_shape) == polygon_area(list(reversed(l_shape)))
    assert polygon_area(l_shape) == 40000

    print("  [PASS] Polygon area winding")


def test_angle():
    """Test interior angle at the vertex."""
    assert angle(Point(100, 0), Point(0, 0), Point(0, 100)) == pytest.approx(90.0)
    assert angle(Point(-1, 0), Point(0, 0), Point(1, 0)) == pytest.approx(180.0)
    assert angle(Point(5, 0), Point(0, 0), Point(10, 0)) == pytest.approx(0.0)

    # Equilateral triangle
    a, b, c = Point(0, 0), Point(10, 0), Point(5, 5 * math.sqrt(3))
    for p1, vertex, p2 in ((b, a, c), (a, b, c), (a, c, b)):
        assert abs(angle(p1, vertex, p2) - 60) < 0.01

    print("  [PASS] Angle")


def test_volume():
    """Test extruded volume and height fallback."""
    square = [Point(0, 0), Point(10, 0), Point(10, 10), Point(0, 10)]
    assert volume(square, height=2) == 200

    # Height from the first point's z
    with_z = [Point(0, 0, 3), Point(10, 0), Point(10, 10), Point(0, 10)]
    assert volume(with_z) == 300

    # Zero height falls back to z, then to zero
    assert volume(with_z, height=0) == 300
    assert volume(square) == 0

    print("  [PASS] Volume")


def test_volume_invalid_height():
    """Test negative, non-finite and non-numeric heights are rejected."""
    square = [Point(0, 0), Point(10, 0), Point(10, 10), Point(0, 10)]

    for bad_height in (-1, -0.5, float("inf"), float("nan"), "3", True):
        with pytest.raises(ValidationError, match="Volume height"):
            volume(square, height=bad_height)

    below_ground = [Point(0, 0, -3), Point(10, 0), Point(10, 10), Point(0, 10)]
    with pytest.raises(ValidationError, match="non-negative"):
        volume(below_ground)

    # An explicit height means the z is not used
    assert volume(below_ground, height=2) == 200
    assert extrusion_height(square) == 0
    assert extrusion_height(square, height=4) == 4.0

    print("  [PASS] Volume invalid height")


def _running_shoelace(points):
    area = 0.0
    n = len(points)
    for i in range(n):
        j = (i + 1) % n
        area += points[i].x * points[j].y
        area -= points[j].x * points[i].y
    return abs(area) / 2


def _running_perimeter(points):
    total = 0.0
    n = len(points)
    for i in range(n):
        j = (i + 1) % n
        dx = points[j].x - points[i].x
        dy = points[j].y - points[i].y
        total += math.sqrt(dx * dx + dy * dy)
    return total


def test_vertex_order_summation():
    """Test area and perimeter match a running total taken in vertex order."""
    outlines = [
        [Point(0.1, 0.7), Point(123.456, 0.3), Point(130.01, 97.77), Point(3.3, 101.1)],
        [
            Point(12.7, 3.9), Point(88.123, 14.2), Point(240.5, 77.77), Point(201.03, 190.4),
            Point(97.1, 230.61), Point(14.4, 180.18), Point(1.01, 90.9),
        ],
        [Point(1e6 + 0.3, 2e6 + 0.1), Point(1e6 + 517.9, 2e6 + 3.3), Point(1e6 + 260.2, 2e6 + 411.7)],
        [Point(0.3 * k, (k * k) % 17 + 0.1 * k) for k in range(1, 21)],
    ]

    for outline in outlines:
        assert polygon_area(outline) == _running_shoelace(outline)
        assert perimeter(outline) == _running_perimeter(outline)

    print("  [PASS] Vertex order summation")


def test_huge_coordinates():
    """Test huge coordinates overflow to inf instead of raising."""
    huge = [Point(0, 0), Point(1e200, 0), Point(1e200, 1e200)]

    assert math.isinf(polygon_area(huge))
    assert math.isinf(distance(Point(0, 0), Point(1e200, 1e200)))
    assert math.isinf(perimeter(huge))

    print("  [PASS] Huge coordinates")


def test_validate_point_count():
    """Test point count rules per type."""
    three = [Point(0, 0), Point(1, 0), Point(1, 1)]

    validate_point_count(MeasurementType.ANGLE, three)
    validate_point_count(MeasurementType.AREA, three)
    validate_point_count(MeasurementType.DISTANCE, three[:2])

    with pytest.raises(ValidationError, match="exactly 3 points, got 2"):
        validate_point_count(MeasurementType.ANGLE, three[:2])

    with pytest.raises(ValidationError, match="exactly 3 points, got 4"):
        validate_point_count(MeasurementType.ANGLE, three + [Point(0, 1)])

    with pytest.raises(ValidationError, match="at least 2 points"):
        validate_point_count(MeasurementType.DISTANCE, three[:1])

    with pytest.raises(ValidationError) as exc_info:
        validate_point_count(MeasurementType.AREA, three[:2])
    assert exc_info.value.details == {"type": "area", "expected": ">=3", "received": "2"}

    print("  [PASS] Validate point count")


def test_pixel_magnitude():
    """Test dispatch by measurement type."""
    assert pixel_magnitude(MeasurementType.DISTANCE, [Point(0, 0), Point(3, 4)]) == 5
    assert pixel_magnitude(MeasurementType.AREA, SQUARE_100) == 10000
    assert pixel_magnitude(MeasurementType.PERIMETER, SQUARE_100) == 400
    assert pixel_magnitude(MeasurementType.VOLUME, SQUARE_100, height=10) == 100000

    # Distance over more than two points is the closed path
    assert pixel_magnitude(MeasurementType.DISTANCE, SQUARE_100) == 400

    print("  [PASS] Pixel magnitude")


def test_check_polygon():
    """Test outline warnings."""
    assert check_polygon(SQUARE_100) == []

    collinear = [Point(0, 0), Point(1, 1), Point(2, 2)]
    warnings = check_polygon(collinear)
    assert len(warnings) == 1
    assert "zero area" in warnings[0]

    bowtie = [Point(0, 0), Point(10, 10), Point(10, 0), Point(0, 5)]
    warnings = check_polygon(bowtie)
    assert len(warnings) == 1
    assert "not a simple polygon" in warnings[0]

    print("  [PASS] Check polygon")


def _run(test) -> bool:
    try:
        test()
        return True
    except AssertionError as e:
        print(f"  [FAIL] {test.__name__}: {e}")
        return False


def run_all_tests():
    """Run all geometry tests."""
    print("\n" + "=" * 60)
    print("Geometry Tests: Points and Pixel Calculations")
    print("=" * 60)

    results = []

    print("\nPoint Tests:")
    results.append(_run(test_point_coerce))
    results.append(_run(test_point_coerce_invalid))
    results.append(_run(test_point_to_dict))

    print("\nCalculation Tests:")
    results.append(_run(test_distance))
    results.append(_run(test_perimeter))
    results.append(_run(test_polygon_area))
    results.append(_run(test_polygon_area_winding))
    results.append(_run(test_angle))
    results.append(_run(test_volume))
    results.append(_run(test_volume_invalid_height))
    results.append(_run(test_vertex_order_summation))
    results.append(_run(test_huge_coordinates))

    print("\nValidation Tests:")
    results.append(_run(test_validate_point_count))
    results.append(_run(test_pixel_magnitude))
    results.append(_run(test_check_polygon))

    # Summary
    passed = sum(results)
    total = len(results)
    print("\n" + "=" * 60)
    print(f"Geometry Results: {passed}/{total} tests passed")
    print("=" * 60)

    return passed == total


if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)
