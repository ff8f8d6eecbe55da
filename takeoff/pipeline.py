"""
Pipeline Orchestration Module

Runs a takeoff job from a JSON job file to measurement and estimate
output files.
"""

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .calibration.scale import ScaleCalibration
from .config import Settings, get_settings, load_settings
from .costing.cost_item import CostEstimate, CostItem
from .costing.estimator import (
    build_estimate,
    price_measurement_totals,
    price_measurements,
)
from .exceptions import ValidationError
from .measurement.engine import create_measurement, ensure_calibrated
from .measurement.measurement import Measurement
from .output.csv_writer import (
    generate_csv_filename,
    write_estimate_to_csv,
    write_measurements_to_csv,
)
from .output.json_writer import generate_json_filename, write_takeoff_to_json

logger = logging.getLogger(__name__)

# How measurements become cost lines
PRICE_BY_MEASUREMENT = "measurement"
PRICE_BY_TYPE = "type"


@dataclass
class PipelineConfig:
    """Configuration for pipeline execution."""
    input_file: str
    output_dir: str
    tax_rate: Optional[float] = None
    currency: Optional[str] = None
    require_calibration: Optional[bool] = None
    settings_path: Optional[str] = None
    write_csv: bool = True
    write_json: bool = True
    include_geometry: bool = True
    verbose: bool = False


@dataclass
class PipelineResult:
    """Result from full pipeline execution."""
    input_file: str
    output_dir: str
    calibration: Optional[ScaleCalibration]
    measurements: List[Measurement]
    estimate: CostEstimate
    warnings: List[str] = field(default_factory=list)
    measurements_csv_path: Optional[str] = None
    estimate_csv_path: Optional[str] = None
    json_path: Optional[str] = None
    processing_time: float = 0.0


def load_job(input_file: str) -> Dict[str, Any]:
    """
    Read a takeoff job file.

    Args:
        input_file: Path to the JSON job file

    Returns:
        Job dictionary

    Raises:
        ValidationError: If the file is not a JSON object
    """
    with open(input_file, encoding="utf-8") as f:
        try:
            job = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Job file is not valid JSON: {e}", {"file": input_file}) from e

    if not isinstance(job, dict):
        raise ValidationError("Job file must contain a JSON object", {"file": input_file})

    return job


def compute_job_measurements(
    job: Dict[str, Any],
    calibration: Optional[ScaleCalibration],
    require_calibration: bool
) -> Tuple[List[Measurement], List[str]]:
    """
    Compute every measurement of a job.

    A measurement with invalid geometry is skipped with a warning; the rest
    of the job still runs.

    Args:
        job: Job dictionary
        calibration: Map calibration, or None
        require_calibration: Reject the job if the map is not calibrated

    Returns:
        Tuple of (measurements, warnings)
    """
    warnings = []
    measurements = []

    if require_calibration:
        ensure_calibrated(calibration)

    for i, record in enumerate(job.get("measurements") or []):
        if not isinstance(record, dict):
            warnings.append(f"Measurement {i + 1}: not an object, skipped")
            continue

        measurement_id = str(record.get("id") or f"m_{i + 1:03d}")
        name = record.get("name") or f"Measurement {i + 1}"

        try:
            measurement = create_measurement(
                calibration,
                record.get("type"),
                record.get("points") or [],
                name=name,
                unit=record.get("unit"),
                color=record.get("color"),
                notes=record.get("notes"),
                measurement_id=measurement_id,
                height=record.get("height"),
            )
        except ValidationError as e:
            warnings.append(f"{name}: {e.message}")
            logger.warning(f"Skipping {name}: {e.message}")
            continue

        warnings.extend(f"{name}: {w}" for w in measurement.warnings)
        measurements.append(measurement)

    return measurements, warnings


def price_job(
    job: Dict[str, Any],
    measurements: List[Measurement],
    settings: Settings
) -> List[CostItem]:
    """
    Build the cost lines of a job: priced measurements followed by manual items.

    Args:
        job: Job dictionary
        measurements: Computed measurements
        settings: Active settings (default unit costs)

    Returns:
        List of CostItems
    """
    unit_costs = job.get("unit_costs")
    if unit_costs is None:
        unit_costs = settings.unit_costs

    price_by = job.get("price_by", PRICE_BY_MEASUREMENT)
    if price_by == PRICE_BY_MEASUREMENT:
        items = price_measurements(measurements, unit_costs)
    elif price_by == PRICE_BY_TYPE:
        items = price_measurement_totals(measurements, unit_costs)
    else:
        raise ValidationError(
            f"price_by must be '{PRICE_BY_MEASUREMENT}' or '{PRICE_BY_TYPE}', got {price_by!r}"
        )

    items.extend(CostItem.coerce(item) for item in job.get("items") or [])

    return items


def config_from_args(args) -> PipelineConfig:
    """Create a PipelineConfig from parsed `takeoff estimate` arguments."""
    return PipelineConfig(
        input_file=args.input,
        output_dir=args.output,
        tax_rate=getattr(args, 'tax_rate', None),
        currency=getattr(args, 'currency', None),
        require_calibration=getattr(args, 'require_calibration', None),
        settings_path=getattr(args, 'settings', None),
        write_csv=not getattr(args, 'no_csv', False),
        write_json=not getattr(args, 'no_json', False),
        include_geometry=not getattr(args, 'no_geometry', False),
        verbose=getattr(args, 'verbose', False),
    )


def run_pipeline(config) -> PipelineResult:
    """
    Run the full takeoff pipeline.

    Args:
        config: PipelineConfig, or parsed command-line arguments

    Returns:
        PipelineResult with all outputs
    """
    start_time = time.time()

    if not isinstance(config, PipelineConfig):
        config = config_from_args(config)

    # Setup logging
    log_level = logging.DEBUG if config.verbose else logging.INFO
    logging.basicConfig(level=log_level, format='%(message)s')

    settings = load_settings(config.settings_path) if config.settings_path else get_settings()

    logger.info(f"Processing: {config.input_file}")

    job = load_job(config.input_file)
    calibration = ScaleCalibration.from_dict(job.get("calibration"))

    if calibration:
        logger.info(
            f"Calibration: {calibration.pixel_distance:g} px = "
            f"{calibration.real_distance:g} {calibration.unit.value}"
        )
    else:
        logger.warning("Map is not calibrated, using legacy scale (100 px = 1 m)")

    require_calibration = config.require_calibration
    if require_calibration is None:
        require_calibration = job.get("require_calibration")
        if require_calibration is None:
            require_calibration = settings.require_calibration
        if not isinstance(require_calibration, bool):
            raise ValidationError(
                f"require_calibration must be true or false, got {require_calibration!r}",
                {"require_calibration": repr(require_calibration)},
            )

    measurements, all_warnings = compute_job_measurements(job, calibration, require_calibration)

    items = price_job(job, measurements, settings)

    tax_rate = config.tax_rate if config.tax_rate is not None else job.get("tax_rate")
    currency = config.currency or job.get("currency")

    estimate = build_estimate(
        items,
        tax_rate=tax_rate if tax_rate is not None else settings.tax_rate,
        currency=currency or settings.currency,
        name=job.get("name") or Path(config.input_file).stem,
        description=job.get("description", ""),
        notes=job.get("notes", ""),
        map_id=job.get("map_id"),
        measurement_ids=[m.measurement_id for m in measurements],
    )

    # Generate outputs
    output_dir = Path(config.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    measurements_csv_path = None
    estimate_csv_path = None
    json_path = None

    if config.write_csv:
        measurements_csv_path = write_measurements_to_csv(
            measurements,
            generate_csv_filename(config.input_file, config.output_dir, "measurements")
        )
        estimate_csv_path = write_estimate_to_csv(
            estimate,
            generate_csv_filename(config.input_file, config.output_dir, "estimate")
        )
        logger.info(f"CSV written: {measurements_csv_path}, {estimate_csv_path}")

    if config.write_json:
        json_path = write_takeoff_to_json(
            measurements,
            generate_json_filename(config.input_file, config.output_dir),
            estimate=estimate,
            input_file=config.input_file,
            calibration=calibration,
            warnings=all_warnings,
            include_geometry=config.include_geometry,
        )
        logger.info(f"JSON written: {json_path}")

    processing_time = time.time() - start_time

    # Summary
    logger.info(f"\nSummary:")
    logger.info(f"  Measurements: {len(measurements)}")
    logger.info(f"  Cost items: {len(estimate.items)}")
    logger.info(f"  Subtotal: {estimate.subtotal:,.2f} {estimate.currency}")
    logger.info(f"  Tax ({estimate.tax_rate:g}%): {estimate.tax_amount:,.2f} {estimate.currency}")
    logger.info(f"  Total: {estimate.total:,.2f} {estimate.currency}")
    logger.info(f"  Processing time: {processing_time:.2f}s")

    if all_warnings and config.verbose:
        logger.info(f"\nWarnings ({len(all_warnings)}):")
        for w in all_warnings[:10]:
            logger.info(f"  - {w}")
        if len(all_warnings) > 10:
            logger.info(f"  ... and {len(all_warnings) - 10} more")

    return PipelineResult(
        input_file=config.input_file,
        output_dir=config.output_dir,
        calibration=calibration,
        measurements=measurements,
        estimate=estimate,
        warnings=all_warnings,
        measurements_csv_path=measurements_csv_path,
        estimate_csv_path=estimate_csv_path,
        json_path=json_path,
        processing_time=processing_time,
    )
