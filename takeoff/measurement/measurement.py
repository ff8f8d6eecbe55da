"""
Measurement Data Structure Module

Defines the Measurement record and the engine's result type.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

from ..constants import EXPORT_PRECISION, MeasurementType, MeasurementUnit
from ..geometry.point import Point, coerce_points

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MeasurementResult:
    """Calibrated value of a measurement, ready to store or display."""
    value: float
    unit: MeasurementUnit
    display_value: str
    warnings: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "value": self.value,
            "unit": self.unit.value,
            "display_value": self.display_value,
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class Measurement:
    """
    A finalized shape drawn on a calibrated blueprint.

    Geometry and value are fixed once computed. Only name, color and
    notes may change (see with_metadata); new points or a new type need a
    new Measurement.
    """
    # Geometry
    measurement_type: MeasurementType
    points: Tuple[Point, ...]

    # Calibrated result
    value: float
    unit: MeasurementUnit
    display_value: str

    # Metadata
    name: str = ""
    color: Optional[str] = None
    notes: Optional[str] = None
    measurement_id: Optional[str] = None

    # Geometry diagnostics
    warnings: Tuple[str, ...] = field(default_factory=tuple)

    def with_metadata(
        self,
        name: Optional[str] = None,
        color: Optional[str] = None,
        notes: Optional[str] = None
    ) -> "Measurement":
        """
        Return a copy with updated metadata.

        Empty name or color keeps the current value; notes may be cleared
        with an empty string.
        """
        changes = {}
        if name:
            changes["name"] = name
        if color:
            changes["color"] = color
        if notes is not None:
            changes["notes"] = notes
        return replace(self, **changes)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Measurement":
        """Rebuild a stored measurement without recomputing its value."""
        return cls(
            measurement_type=MeasurementType.from_string(data["type"]),
            points=tuple(coerce_points(data.get("points") or [])),
            value=float(data["value"]),
            unit=MeasurementUnit.from_string(data["unit"]),
            display_value=data.get("display_value") or data.get("displayValue", ""),
            name=data.get("name", ""),
            color=data.get("color"),
            notes=data.get("notes"),
            measurement_id=data.get("id") or data.get("measurement_id"),
            warnings=tuple(data.get("warnings") or ()),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert measurement to dictionary for JSON serialization."""
        return {
            "id": self.measurement_id,
            "name": self.name,
            "type": self.measurement_type.value,
            "points": [p.to_dict() for p in self.points],
            "value": round(self.value, EXPORT_PRECISION),
            "unit": self.unit.value,
            "display_value": self.display_value,
            "color": self.color,
            "notes": self.notes,
            "warnings": list(self.warnings),
        }

    def to_csv_row(self) -> List[Any]:
        """Convert measurement to CSV row values."""
        return [
            self.measurement_id or "",
            self.name,
            self.measurement_type.value,
            len(self.points),
            round(self.value, EXPORT_PRECISION),
            self.unit.value,
            self.display_value,
            self.notes or "",
        ]

    @staticmethod
    def csv_header() -> List[str]:
        """Return CSV header row."""
        return [
            "id",
            "name",
            "type",
            "point_count",
            "value",
            "unit",
            "display_value",
            "notes",
        ]
