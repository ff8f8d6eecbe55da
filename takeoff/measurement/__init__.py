# Measurement engine module

from .measurement import (
    Measurement,
    MeasurementResult,
)

from .engine import (
    MeasurementTotals,
    ensure_calibrated,
    compute_measurement,
    create_measurement,
    measurement_totals,
)

__all__ = [
    # Measurement
    "Measurement",
    "MeasurementResult",
    # Engine
    "MeasurementTotals",
    "ensure_calibrated",
    "compute_measurement",
    "create_measurement",
    "measurement_totals",
]
