# Cost estimation module

from .cost_item import (
    UnitCost,
    CostItem,
    CostTotals,
    CostEstimate,
    CostSummary,
    validate_tax_rate,
)

from .estimator import (
    price_measurements,
    price_measurement_totals,
    aggregate_costs,
    summarize_costs_by_category,
    build_estimate,
)

__all__ = [
    # Cost Items
    "UnitCost",
    "CostItem",
    "CostTotals",
    "CostEstimate",
    "CostSummary",
    "validate_tax_rate",
    # Estimator
    "price_measurements",
    "price_measurement_totals",
    "aggregate_costs",
    "summarize_costs_by_category",
    "build_estimate",
]
