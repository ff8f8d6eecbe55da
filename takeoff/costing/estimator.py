"""
Cost Estimator Module

Functions for pricing measurements and aggregating cost line items into
estimate totals and per-category summaries.
"""

import logging
from typing import Any, Iterable, List, Optional

from ..constants import CostCategory, MeasurementType
from ..exceptions import ValidationError
from ..measurement.engine import measurement_totals
from ..measurement.measurement import Measurement
from .cost_item import (
    CostEstimate,
    CostItem,
    CostSummary,
    CostTotals,
    UnitCost,
    validate_tax_rate,
)

logger = logging.getLogger(__name__)


def _measurement_fields(measurement: Any):
    """Return (type, value, name) for a Measurement or a plain record."""
    if isinstance(measurement, Measurement):
        return measurement.measurement_type, measurement.value, measurement.name

    if not isinstance(measurement, dict):
        raise ValidationError(f"Invalid measurement: {measurement!r}")

    if "type" not in measurement or "value" not in measurement:
        raise ValidationError(
            f"Measurement requires type and value: {measurement!r}",
            {"name": str(measurement.get("name", ""))},
        )

    try:
        value = float(measurement["value"])
    except (TypeError, ValueError):
        raise ValidationError(f"Measurement value must be a number: {measurement['value']!r}") from None

    return MeasurementType.from_string(measurement["type"]), value, measurement.get("name", "")


def price_measurements(measurements: Iterable[Any], unit_costs: Iterable[Any]) -> List[CostItem]:
    """
    Price measurements with a unit-cost table.

    Each measurement is priced with the first table entry of its type and
    becomes a material line named "<name> (<type>)". Measurements without a
    matching entry are skipped and logged.

    Args:
        measurements: Measurement records or {type, value, name} mappings
        unit_costs: UnitCost entries or {type, cost_per_unit, unit} mappings

    Returns:
        List of CostItems, in measurement order

    Raises:
        ValidationError: If a unit-cost entry is malformed
    """
    table = {}
    for entry in unit_costs:
        unit_cost = UnitCost.coerce(entry)
        table.setdefault(unit_cost.measurement_type, unit_cost)

    items = []
    skipped = 0

    for measurement in measurements:
        measurement_type, value, name = _measurement_fields(measurement)

        unit_cost = table.get(measurement_type)
        if unit_cost is None:
            skipped += 1
            logger.warning(
                f"No unit cost for {measurement_type.value}, skipping measurement '{name}'"
            )
            continue

        items.append(CostItem(
            name=f"{name} ({measurement_type.value})",
            category=CostCategory.MATERIAL,
            unit_cost=unit_cost.cost_per_unit,
            quantity=value,
            unit=unit_cost.unit,
        ))

    logger.debug(f"Priced {len(items)} measurements, skipped {skipped}")

    return items


def price_measurement_totals(
    measurements: Iterable[Any],
    unit_costs: Optional[Iterable[Any]] = None
) -> List[CostItem]:
    """
    Price the summed quantity of each measurement type.

    Produces one "<Type> Cost" material line per type with a positive
    total. Types without a unit cost are skipped.

    Args:
        measurements: Measurement records or {type, value} mappings
        unit_costs: Unit-cost table; defaults to the configured table

    Returns:
        List of CostItems, one per priced type
    """
    if unit_costs is None:
        from ..config import get_settings
        unit_costs = get_settings().unit_costs

    table = {}
    for entry in unit_costs:
        unit_cost = UnitCost.coerce(entry)
        table.setdefault(unit_cost.measurement_type, unit_cost)

    totals = measurement_totals(measurements)

    items = []
    for measurement_type, quantity in totals.totals.items():
        if quantity <= 0:
            continue

        unit_cost = table.get(measurement_type)
        if unit_cost is None:
            logger.warning(f"No unit cost for {measurement_type.value} total, skipping")
            continue

        items.append(CostItem(
            name=f"{measurement_type.value.capitalize()} Cost",
            category=CostCategory.MATERIAL,
            unit_cost=unit_cost.cost_per_unit,
            quantity=quantity,
            unit=unit_cost.unit,
        ))

    return items


def aggregate_costs(items: Iterable[Any], tax_rate: float = 0) -> CostTotals:
    """
    Aggregate cost items into subtotal, tax and total.

    Item totals are recomputed from unit_cost * quantity; any total in the
    input is ignored.

    Args:
        items: CostItems or item mappings
        tax_rate: Tax percentage (0-100)

    Returns:
        CostTotals
    """
    tax_rate = validate_tax_rate(tax_rate)
    cost_items = [CostItem.coerce(item) for item in items]

    return CostTotals.from_items(cost_items, tax_rate)


def summarize_costs_by_category(estimates: Iterable[Any]) -> CostSummary:
    """
    Summarize several estimates by cost category.

    Every category is present in by_category (zero when unused). The grand
    total is the sum of estimate totals, tax included.

    Args:
        estimates: CostEstimates or estimate mappings

    Returns:
        CostSummary
    """
    summary = CostSummary()

    for estimate in estimates:
        estimate = CostEstimate.coerce(estimate)
        estimate.recalculate()

        summary.total_estimates += 1
        summary.grand_total += estimate.total
        for item in estimate.items:
            summary.by_category[item.category] += item.total_cost

    return summary


def build_estimate(
    items: Iterable[Any],
    tax_rate: Optional[float] = None,
    currency: Optional[str] = None,
    **metadata
) -> CostEstimate:
    """
    Create a cost estimate, filling tax rate and currency from settings.

    Args:
        items: CostItems or item mappings
        tax_rate: Tax percentage; defaults to the configured rate
        currency: Currency code; defaults to the configured currency
        **metadata: name, description, notes, map_id, measurement_ids

    Returns:
        Recalculated CostEstimate
    """
    if tax_rate is None or currency is None:
        from ..config import get_settings
        settings = get_settings()
        if tax_rate is None:
            tax_rate = settings.tax_rate
        if currency is None:
            currency = settings.currency

    estimate = CostEstimate(items=list(items), tax_rate=tax_rate, currency=currency, **metadata)
    logger.info(
        f"Estimate '{estimate.name}': {len(estimate.items)} items, "
        f"total {estimate.total:,.2f} {estimate.currency}"
    )

    return estimate
