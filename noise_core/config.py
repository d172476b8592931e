"""Loading calculation settings from a YAML configuration file."""

from __future__ import annotations

import dataclasses
import logging
import math
import os
from typing import Any, Mapping

import yaml

from .conversions import ConversionError
from .models import CalculationSettings

logger = logging.getLogger(__name__)

SECTION = "noise_calculation"

# settings that divide or scale results must stay strictly positive
_POSITIVE = frozenset(
    {
        "reference_hours",
        "coverage_factor",
        "min_samples",
        "single_worker_spread_limit",
        "group_spread_limit",
        "protector_cap",
    }
)


def settings_from_mapping(raw: Mapping[str, Any]) -> CalculationSettings:
    """Return settings with the defaults overridden by ``raw``.

    ``raw`` may hold the keys directly or below a ``noise_calculation``
    section. Unknown keys are rejected so that typos do not silently fall
    back to a default.
    """

    section = raw.get(SECTION, raw)
    if not isinstance(section, Mapping):
        raise ConversionError(f"'{SECTION}' must be a mapping.")

    fields = {f.name: f for f in dataclasses.fields(CalculationSettings)}
    unknown = sorted(set(section) - set(fields))
    if unknown:
        raise ConversionError(f"Unknown calculation setting(s): {', '.join(unknown)}")

    values = {}
    for key, value in section.items():
        default = getattr(CalculationSettings, key)
        try:
            if isinstance(default, bool):
                if not isinstance(value, bool):
                    raise TypeError(value)
                values[key] = value
            elif isinstance(value, bool):
                raise TypeError(value)
            elif isinstance(default, int):
                number = float(value)
                if not number.is_integer():
                    raise ValueError(value)
                values[key] = int(number)
            else:
                values[key] = float(value)
        except (TypeError, ValueError, OverflowError):
            raise ConversionError(f"Invalid value for calculation setting '{key}': {value!r}")
        _check_range(key, values[key])
    return CalculationSettings(**values)


def _check_range(key: str, value: Any) -> None:
    if isinstance(value, bool):
        return
    if not math.isfinite(value):
        raise ConversionError(f"Calculation setting '{key}' must be finite.")
    if key in _POSITIVE and value <= 0:
        raise ConversionError(f"Calculation setting '{key}' must be positive.")
    if value < 0:
        raise ConversionError(f"Calculation setting '{key}' must be non-negative.")


def load_settings(path: str = "config.yaml") -> CalculationSettings:
    """Read settings from ``path``; a missing file gives the defaults."""

    if not os.path.exists(path):
        logger.debug("No configuration at %s, using default calculation settings", path)
        return CalculationSettings()
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConversionError(f"Could not load '{path}': {exc}") from exc
    if not isinstance(data, Mapping):
        raise ConversionError(f"'{path}': expected a mapping at the top level.")
    return settings_from_mapping(data)
