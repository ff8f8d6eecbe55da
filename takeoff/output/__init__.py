# Output generation module

from .csv_writer import (
    generate_csv_filename,
    write_measurements_to_csv,
    write_estimate_to_csv,
)

from .json_writer import (
    ENGINE_VERSION,
    generate_json_filename,
    build_measurement_json,
    build_output_json,
    write_takeoff_to_json,
)

__all__ = [
    # CSV
    "generate_csv_filename",
    "write_measurements_to_csv",
    "write_estimate_to_csv",
    # JSON
    "ENGINE_VERSION",
    "generate_json_filename",
    "build_measurement_json",
    "build_output_json",
    "write_takeoff_to_json",
]
