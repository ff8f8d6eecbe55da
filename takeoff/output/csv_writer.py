"""
CSV Writer Module

Writes measurements and cost estimates to CSV files.
"""

import csv
import logging
from pathlib import Path
from typing import List, Union

from ..constants import EXPORT_PRECISION
from ..costing.cost_item import CostEstimate, CostItem
from ..measurement.measurement import Measurement

logger = logging.getLogger(__name__)


def generate_csv_filename(input_file: str, output_dir: str, suffix: str = "measurements") -> str:
    """
    Build an output CSV path from the input file name.

    Examples:
        ("jobs/site.json", "out") -> "out/site_measurements.csv"

    Args:
        input_file: Job file the results came from
        output_dir: Output directory
        suffix: Name suffix, e.g. "measurements" or "estimate"

    Returns:
        CSV file path
    """
    stem = Path(input_file).stem
    return str(Path(output_dir) / f"{stem}_{suffix}.csv")


def write_measurements_to_csv(measurements: List[Measurement], output_path: Union[str, Path]) -> str:
    """
    Write measurements to a CSV file, one row per measurement.

    Args:
        measurements: Measurements to write
        output_path: Destination file

    Returns:
        Path written
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(Measurement.csv_header())
        for measurement in measurements:
            writer.writerow(measurement.to_csv_row())

    logger.debug(f"Wrote {len(measurements)} measurements to {output_path}")
    return str(output_path)


def write_estimate_to_csv(estimate: CostEstimate, output_path: Union[str, Path]) -> str:
    """
    Write a cost estimate to a CSV file.

    Item rows are followed by subtotal, tax and total rows.

    Args:
        estimate: Estimate to write
        output_path: Destination file

    Returns:
        Path written
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    estimate.recalculate()
    blank = [""] * (len(CostItem.csv_header()) - 2)

    with open(output_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(CostItem.csv_header())
        for item in estimate.items:
            writer.writerow(item.to_csv_row())

        writer.writerow(["subtotal"] + blank + [round(estimate.subtotal, EXPORT_PRECISION)])
        writer.writerow([f"tax ({estimate.tax_rate:g}%)"] + blank + [round(estimate.tax_amount, EXPORT_PRECISION)])
        writer.writerow([f"total ({estimate.currency})"] + blank + [round(estimate.total, EXPORT_PRECISION)])

    logger.debug(f"Wrote estimate with {len(estimate.items)} items to {output_path}")
    return str(output_path)
