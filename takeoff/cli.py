"""
Command Line Interface Module

Parses command-line arguments for the takeoff engine.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from .constants import MeasurementType, MeasurementUnit, MAX_TAX_RATE, MIN_TAX_RATE
from .exceptions import TakeoffError, ValidationError
from .geometry.point import Point


def parse_points(points_str: str) -> List[Point]:
    """
    Parse a point list string.

    Examples:
        "0,0;100,0" -> [Point(0, 0), Point(100, 0)]
        "0,0,2;10,0,2" -> points with z

    Args:
        points_str: Semicolon separated "x,y" or "x,y,z" pairs

    Returns:
        List of Points

    Raises:
        ValidationError: If a coordinate is not a number
    """
    points = []

    for part in points_str.split(";"):
        part = part.strip()
        if not part:
            continue
        try:
            coords = [float(c) for c in part.split(",")]
        except ValueError:
            raise ValidationError(f"Invalid point: {part}") from None
        points.append(Point.coerce(coords))

    return points


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for the takeoff engine."""
    parser = argparse.ArgumentParser(
        prog="takeoff",
        description="Measure blueprint geometry and estimate costs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  takeoff measure --type distance --points "0,0;300,400" --calib "100=1m"
  takeoff measure --type area --points "0,0;100,0;100,100;0,100"
  takeoff estimate -i job.json -o ./output --tax-rate 15 --currency SAR
        """
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # measure
    measure = subparsers.add_parser("measure", help="Compute a single measurement")

    measure.add_argument(
        "--type",
        required=True,
        choices=[t.value for t in MeasurementType],
        help="Measurement type"
    )

    measure.add_argument(
        "--points",
        required=True,
        help="Points in pixels ('x,y;x,y;...')"
    )

    measure.add_argument(
        "--calib",
        help="Calibration ('PIXELS=LENGTH UNIT' or 'x1,y1:x2,y2=LENGTH UNIT')"
    )

    measure.add_argument(
        "--unit",
        choices=[u.value for u in MeasurementUnit],
        help="Output unit label (default: derived from calibration)"
    )

    measure.add_argument(
        "--height",
        type=float,
        help="Extrusion height for volume (default: z of the first point)"
    )

    measure.add_argument(
        "--require-calibration",
        action="store_true",
        help="Fail if no calibration is given"
    )

    # estimate
    estimate = subparsers.add_parser("estimate", help="Run a takeoff job file")

    estimate.add_argument(
        "-i", "--input",
        required=True,
        help="Input job file path (JSON)"
    )

    estimate.add_argument(
        "-o", "--output",
        required=True,
        help="Output directory path"
    )

    estimate.add_argument(
        "--tax-rate",
        type=float,
        help="Tax rate in percent (overrides the job file)"
    )

    estimate.add_argument(
        "--currency",
        help="Currency code (overrides the job file)"
    )

    estimate.add_argument(
        "--settings",
        help="Settings YAML file (default: packaged settings)"
    )

    estimate.add_argument(
        "--require-calibration",
        action="store_const",
        const=True,
        default=None,
        help="Reject the job if the map is not calibrated"
    )

    output_group = estimate.add_argument_group('output')

    output_group.add_argument(
        "--no-csv",
        action="store_true",
        help="Skip CSV output"
    )

    output_group.add_argument(
        "--no-json",
        action="store_true",
        help="Skip JSON output"
    )

    output_group.add_argument(
        "--no-geometry",
        action="store_true",
        help="Omit measurement points from JSON output"
    )

    estimate.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output"
    )

    return parser


def validate_args(args: argparse.Namespace) -> Tuple[bool, str]:
    """
    Validate parsed arguments.

    Args:
        args: Parsed arguments

    Returns:
        Tuple of (is_valid, error_message)
    """
    if args.command == "measure":
        try:
            args.points = parse_points(args.points)
        except ValidationError as e:
            return False, e.message

        if args.height is not None and args.height < 0:
            return False, f"Height must not be negative: {args.height}"

        return True, ""

    # Check input file exists
    input_path = Path(args.input)
    if not input_path.exists():
        return False, f"Input file not found: {args.input}"

    if not input_path.suffix.lower() == ".json":
        return False, f"Input file must be a JSON job file: {args.input}"

    if args.settings and not Path(args.settings).exists():
        return False, f"Settings file not found: {args.settings}"

    # Check/create output directory
    output_path = Path(args.output)
    try:
        output_path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        return False, f"Cannot create output directory: {e}"

    if args.tax_rate is not None and not MIN_TAX_RATE <= args.tax_rate <= MAX_TAX_RATE:
        return False, f"Tax rate must be between {MIN_TAX_RATE} and {MAX_TAX_RATE}: {args.tax_rate}"

    return True, ""


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse and validate command-line arguments.

    Args:
        args: Optional list of arguments (uses sys.argv if None)

    Returns:
        Parsed and validated arguments
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    is_valid, error_msg = validate_args(parsed)
    if not is_valid:
        parser.error(error_msg)

    return parsed


def run_measure(args: argparse.Namespace) -> str:
    """Compute the measurement described by `takeoff measure` arguments."""
    from .calibration.scale import parse_calibration_string
    from .measurement.engine import compute_measurement

    calibration = parse_calibration_string(args.calib) if args.calib else None

    result = compute_measurement(
        calibration,
        args.type,
        args.points,
        args.unit,
        require_calibration=args.require_calibration,
        height=args.height,
    )

    for warning in result.warnings:
        print(f"Warning: {warning}", file=sys.stderr)

    return result.display_value


def main(argv: Optional[List[str]] = None):
    """Main entry point for CLI."""
    args = parse_args(argv)
    verbose = getattr(args, "verbose", False)

    try:
        if args.command == "measure":
            print(run_measure(args))
        else:
            # Import pipeline and run
            from .pipeline import run_pipeline
            run_pipeline(args)
    except KeyboardInterrupt:
        print("\nProcessing cancelled by user")
        sys.exit(1)
    except TakeoffError as e:
        print(f"\nError: {e.message}")
        sys.exit(1)
    except Exception as e:
        print(f"\nError: {e}")
        if verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
