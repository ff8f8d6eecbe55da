"""
Cost Data Structure Module

Defines cost line items, unit-cost table entries and cost estimates.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..constants import (
    DEFAULT_CURRENCY,
    DEFAULT_TAX_RATE,
    EXPORT_PRECISION,
    MIN_TAX_RATE,
    MAX_TAX_RATE,
    CostCategory,
    MeasurementType,
)
from ..exceptions import ValidationError

logger = logging.getLogger(__name__)


def _non_negative_number(value: Any, field_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(
            f"{field_name} must be a number, got {value!r}",
            {field_name: repr(value)},
        )
    if not math.isfinite(value) or value < 0:
        raise ValidationError(
            f"{field_name} must be a non-negative number, got {value!r}",
            {field_name: repr(value)},
        )
    return float(value)


def validate_tax_rate(tax_rate: Any) -> float:
    """Check a tax rate is a percentage between 0 and 100."""
    tax_rate = _non_negative_number(tax_rate, "tax_rate")
    if not MIN_TAX_RATE <= tax_rate <= MAX_TAX_RATE:
        raise ValidationError(
            f"tax_rate must be between {MIN_TAX_RATE:g} and {MAX_TAX_RATE:g}, got {tax_rate:g}",
            {"tax_rate": str(tax_rate)},
        )
    return tax_rate


def _pick(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


@dataclass(frozen=True)
class UnitCost:
    """One entry of a unit-cost table: price per unit for a measurement type."""
    measurement_type: MeasurementType
    cost_per_unit: float
    unit: str

    def __post_init__(self):
        object.__setattr__(self, "measurement_type", MeasurementType.from_string(self.measurement_type))
        object.__setattr__(self, "cost_per_unit", _non_negative_number(self.cost_per_unit, "cost_per_unit"))
        if not isinstance(self.unit, str) or not self.unit.strip():
            raise ValidationError(
                f"Unit cost for {self.measurement_type.value} requires a unit",
                {"type": self.measurement_type.value},
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UnitCost":
        """
        Build a unit-cost entry from a request record.

        Raises:
            ValidationError: If type, cost_per_unit or unit is missing or invalid
        """
        if not isinstance(data, dict):
            raise ValidationError(f"Unit cost entry must be a mapping, got {data!r}")

        missing = [
            name for name, keys in (
                ("type", ("type",)),
                ("cost_per_unit", ("cost_per_unit", "costPerUnit")),
                ("unit", ("unit",)),
            )
            if _pick(data, *keys) is None
        ]
        if missing:
            raise ValidationError(
                f"Unit cost entry is missing: {', '.join(missing)}",
                {"missing": ", ".join(missing)},
            )

        return cls(
            measurement_type=data["type"],
            cost_per_unit=_pick(data, "cost_per_unit", "costPerUnit"),
            unit=data["unit"],
        )

    @classmethod
    def coerce(cls, value: Any) -> "UnitCost":
        if isinstance(value, cls):
            return value
        return cls.from_dict(value)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.measurement_type.value,
            "cost_per_unit": self.cost_per_unit,
            "unit": self.unit,
        }


@dataclass
class CostItem:
    """
    A priced line of a cost estimate.

    total_cost is always unit_cost * quantity; it is derived on read and
    never taken from input.
    """
    name: str = ""
    category: CostCategory = CostCategory.OTHER
    unit_cost: float = 0.0
    quantity: float = 0.0
    unit: str = ""

    def __post_init__(self):
        self.name = str(self.name or "").strip()
        self.category = CostCategory.from_string(self.category)
        self.unit_cost = _non_negative_number(self.unit_cost, "unit_cost")
        self.quantity = _non_negative_number(self.quantity, "quantity")
        self.unit = str(self.unit).strip() if self.unit is not None else ""

    @property
    def total_cost(self) -> float:
        return self.unit_cost * self.quantity

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CostItem":
        """
        Build a cost item from a request record.

        Any totalCost/total_cost in the record is ignored.
        """
        if not isinstance(data, dict):
            raise ValidationError(f"Cost item must be a mapping, got {data!r}")

        return cls(
            name=data.get("name", ""),
            category=data.get("category", CostCategory.OTHER.value),
            unit_cost=_pick(data, "unit_cost", "unitCost", default=0),
            quantity=_pick(data, "quantity", default=0),
            unit=data.get("unit", ""),
        )

    @classmethod
    def coerce(cls, value: Any) -> "CostItem":
        if isinstance(value, cls):
            return value
        return cls.from_dict(value)

    def to_dict(self) -> Dict[str, Any]:
        """Convert item to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "category": self.category.value,
            "unit_cost": round(self.unit_cost, EXPORT_PRECISION),
            "quantity": round(self.quantity, EXPORT_PRECISION),
            "unit": self.unit,
            "total_cost": round(self.total_cost, EXPORT_PRECISION),
        }

    def to_csv_row(self) -> List[Any]:
        """Convert item to CSV row values."""
        return [
            self.name,
            self.category.value,
            round(self.unit_cost, EXPORT_PRECISION),
            round(self.quantity, EXPORT_PRECISION),
            self.unit,
            round(self.total_cost, EXPORT_PRECISION),
        ]

    @staticmethod
    def csv_header() -> List[str]:
        """Return CSV header row."""
        return [
            "name",
            "category",
            "unit_cost",
            "quantity",
            "unit",
            "total_cost",
        ]


@dataclass(frozen=True)
class CostTotals:
    """Subtotal, tax and total of a set of cost items."""
    subtotal: float = 0.0
    tax_amount: float = 0.0
    total: float = 0.0

    @classmethod
    def from_items(cls, items: List[CostItem], tax_rate: float) -> "CostTotals":
        subtotal = sum((item.total_cost for item in items), 0.0)
        tax_amount = subtotal * (tax_rate / 100)
        return cls(subtotal=subtotal, tax_amount=tax_amount, total=subtotal + tax_amount)

    def to_dict(self) -> Dict[str, float]:
        return {
            "subtotal": round(self.subtotal, EXPORT_PRECISION),
            "tax_amount": round(self.tax_amount, EXPORT_PRECISION),
            "total": round(self.total, EXPORT_PRECISION),
        }


@dataclass
class CostEstimate:
    """
    An ordered collection of cost items with tax.

    subtotal, tax_amount and total are recalculated whenever the items or
    the tax rate change.
    """
    items: List[CostItem] = field(default_factory=list)
    tax_rate: float = DEFAULT_TAX_RATE
    currency: str = DEFAULT_CURRENCY
    name: str = ""
    description: str = ""
    notes: str = ""

    # Optional links to the map and measurements the estimate came from
    map_id: Optional[str] = None
    measurement_ids: List[str] = field(default_factory=list)

    # Derived
    subtotal: float = field(default=0.0, init=False)
    tax_amount: float = field(default=0.0, init=False)
    total: float = field(default=0.0, init=False)

    def __post_init__(self):
        self.items = [CostItem.coerce(item) for item in self.items]
        self.tax_rate = validate_tax_rate(self.tax_rate)
        self.currency = (self.currency or DEFAULT_CURRENCY).strip().upper()
        self.recalculate()

    def recalculate(self) -> CostTotals:
        """Recompute subtotal, tax and total from the current items."""
        totals = CostTotals.from_items(self.items, self.tax_rate)
        self.subtotal = totals.subtotal
        self.tax_amount = totals.tax_amount
        self.total = totals.total
        return totals

    def add_item(self, item: Any) -> CostItem:
        item = CostItem.coerce(item)
        self.items.append(item)
        self.recalculate()
        return item

    def replace_items(self, items: List[Any]) -> None:
        self.items = [CostItem.coerce(item) for item in items]
        self.recalculate()

    def set_tax_rate(self, tax_rate: float) -> None:
        self.tax_rate = validate_tax_rate(tax_rate)
        self.recalculate()

    @property
    def totals(self) -> CostTotals:
        return CostTotals(self.subtotal, self.tax_amount, self.total)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CostEstimate":
        """Build an estimate from a stored record; stored totals are ignored."""
        return cls(
            items=list(data.get("items") or []),
            tax_rate=_pick(data, "tax_rate", "taxRate", default=DEFAULT_TAX_RATE),
            currency=data.get("currency") or DEFAULT_CURRENCY,
            name=data.get("name", ""),
            description=data.get("description", ""),
            notes=data.get("notes", ""),
            map_id=_pick(data, "map_id", "map"),
            measurement_ids=list(_pick(data, "measurement_ids", "measurements", default=[])),
        )

    @classmethod
    def coerce(cls, value: Any) -> "CostEstimate":
        if isinstance(value, cls):
            return value
        return cls.from_dict(value)

    def to_dict(self) -> Dict[str, Any]:
        """Convert estimate to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "description": self.description,
            "map_id": self.map_id,
            "measurement_ids": list(self.measurement_ids),
            "items": [item.to_dict() for item in self.items],
            "subtotal": round(self.subtotal, EXPORT_PRECISION),
            "tax_rate": self.tax_rate,
            "tax_amount": round(self.tax_amount, EXPORT_PRECISION),
            "total": round(self.total, EXPORT_PRECISION),
            "currency": self.currency,
            "notes": self.notes,
        }


@dataclass
class CostSummary:
    """Totals across several estimates, grouped by category."""
    grand_total: float = 0.0
    by_category: Dict[CostCategory, float] = field(
        default_factory=lambda: {category: 0.0 for category in CostCategory}
    )
    total_estimates: int = 0

    def nonzero_categories(self) -> Dict[CostCategory, float]:
        """Categories that contributed to the total, for display."""
        return {category: amount for category, amount in self.by_category.items() if amount}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_estimates": self.total_estimates,
            "grand_total": round(self.grand_total, EXPORT_PRECISION),
            "by_category": {
                category.value: round(amount, EXPORT_PRECISION)
                for category, amount in self.by_category.items()
            },
        }
