"""
Settings Module

Loads user-tunable defaults from settings.yaml.
"""

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .constants import (
    DEFAULT_CURRENCY,
    DEFAULT_TAX_RATE,
    DEFAULT_UNIT_COSTS,
)
from .costing.cost_item import UnitCost
from .exceptions import ConfigurationError, TakeoffError

logger = logging.getLogger(__name__)

SETTINGS_ENV_VAR = "TAKEOFF_SETTINGS"

DEFAULT_SETTINGS_PATH = Path(__file__).parent / "settings.yaml"


def _builtin_unit_costs() -> List[UnitCost]:
    return [
        UnitCost(measurement_type, cost, unit)
        for measurement_type, (cost, unit) in DEFAULT_UNIT_COSTS.items()
    ]


@dataclass
class Settings:
    """Defaults applied by the measurement and cost engines."""
    require_calibration: bool = False
    currency: str = DEFAULT_CURRENCY
    tax_rate: float = DEFAULT_TAX_RATE
    unit_costs: List[UnitCost] = field(default_factory=_builtin_unit_costs)
    source: str = "builtin"


def _parse_settings(raw: Dict[str, Any], source: str) -> Settings:
    settings = Settings(source=source)

    measurement = raw.get("measurement") or {}
    estimate = raw.get("estimate") or {}
    unit_costs = raw.get("unit_costs")

    if not isinstance(measurement, dict) or not isinstance(estimate, dict):
        raise ConfigurationError(
            f"Settings sections must be mappings: {source}",
            {"source": source},
        )

    if "require_calibration" in measurement:
        if not isinstance(measurement["require_calibration"], bool):
            raise ConfigurationError(
                f"measurement.require_calibration must be true or false: "
                f"{measurement['require_calibration']!r}",
                {"source": source},
            )
        settings.require_calibration = measurement["require_calibration"]

    if "currency" in estimate:
        settings.currency = str(estimate["currency"]).strip().upper()

    if "tax_rate" in estimate:
        try:
            settings.tax_rate = float(estimate["tax_rate"])
        except (TypeError, ValueError):
            raise ConfigurationError(
                f"estimate.tax_rate must be a number: {estimate['tax_rate']!r}",
                {"source": source},
            ) from None

    if unit_costs:
        if not isinstance(unit_costs, dict):
            raise ConfigurationError(
                f"unit_costs must map measurement types to costs: {source}",
                {"source": source},
            )
        try:
            settings.unit_costs = [
                UnitCost.from_dict({"type": type_name, **(entry or {})})
                for type_name, entry in unit_costs.items()
            ]
        except TakeoffError as e:
            raise ConfigurationError(
                f"Invalid unit_costs in {source}: {e.message}",
                {"source": source, **e.details},
            ) from e

    return settings


def load_settings(path: Optional[Union[str, Path]] = None) -> Settings:
    """
    Load settings from a YAML file.

    Args:
        path: Settings file; defaults to $TAKEOFF_SETTINGS, then the
            packaged settings.yaml

    Returns:
        Settings with file values merged over built-in defaults

    Raises:
        ConfigurationError: If the file cannot be read or is malformed
    """
    if path is None:
        path = os.environ.get(SETTINGS_ENV_VAR) or DEFAULT_SETTINGS_PATH

    settings_path = Path(path)

    try:
        with open(settings_path, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(
            f"Cannot read settings file: {settings_path}",
            {"path": str(settings_path), "error": str(e)},
        ) from e
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Malformed settings file: {settings_path}",
            {"path": str(settings_path), "error": str(e)},
        ) from e

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Settings file must contain a mapping: {settings_path}")

    settings = _parse_settings(raw, str(settings_path))
    logger.debug(f"Loaded settings from {settings_path}")

    return settings


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the default settings, loaded once."""
    return load_settings()
