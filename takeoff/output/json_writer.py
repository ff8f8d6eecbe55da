"""
JSON Writer Module

Writes takeoff results (measurements, estimate, totals) to JSON.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..calibration.scale import ScaleCalibration
from ..costing.cost_item import CostEstimate
from ..measurement.engine import measurement_totals
from ..measurement.measurement import Measurement

logger = logging.getLogger(__name__)

ENGINE_VERSION = "1.0.0"


def generate_json_filename(input_file: str, output_dir: str, suffix: str = "takeoff") -> str:
    """
    Build an output JSON path from the input file name.

    Examples:
        ("jobs/site.json", "out") -> "out/site_takeoff.json"
    """
    stem = Path(input_file).stem
    return str(Path(output_dir) / f"{stem}_{suffix}.json")


def build_measurement_json(measurement: Measurement, include_geometry: bool = True) -> Dict[str, Any]:
    """
    Build the JSON record of one measurement.

    Args:
        measurement: Measurement to serialize
        include_geometry: Include the drawn points

    Returns:
        Dictionary ready for json.dump
    """
    record = measurement.to_dict()
    if not include_geometry:
        record.pop("points", None)
    return record


def build_output_json(
    measurements: List[Measurement],
    estimate: Optional[CostEstimate] = None,
    input_file: str = "",
    calibration: Optional[ScaleCalibration] = None,
    warnings: Optional[List[str]] = None,
    include_geometry: bool = True
) -> Dict[str, Any]:
    """
    Build the complete takeoff output document.

    Args:
        measurements: Computed measurements
        estimate: Cost estimate, if one was built
        input_file: Job file the results came from
        calibration: Calibration used, or None for the legacy scale
        warnings: Processing warnings
        include_geometry: Include the drawn points of each measurement

    Returns:
        Dictionary ready for json.dump
    """
    totals = measurement_totals(measurements)

    return {
        "engine_version": ENGINE_VERSION,
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "input_file": input_file,
        "calibration": calibration.to_dict() if calibration else None,
        "summary": {
            "total_measurements": len(measurements),
            **totals.to_dict(),
        },
        "measurements": [build_measurement_json(m, include_geometry) for m in measurements],
        "estimate": estimate.to_dict() if estimate else None,
        "warnings": list(warnings or []),
    }


def write_takeoff_to_json(
    measurements: List[Measurement],
    output_path: Union[str, Path],
    **kwargs
) -> str:
    """
    Write the takeoff output document to a JSON file.

    Args:
        measurements: Computed measurements
        output_path: Destination file
        **kwargs: Passed to build_output_json

    Returns:
        Path written
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    document = build_output_json(measurements, **kwargs)

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(document, f, indent=2, ensure_ascii=False)

    logger.debug(f"Wrote takeoff JSON to {output_path}")
    return str(output_path)
