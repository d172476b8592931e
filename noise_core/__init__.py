"""Core math package for occupational noise exposure (NEN-EN-ISO 9612, EN 458)."""

from .models import (
    CalculationSettings,
    CombinedAttenuation,
    ExposureGroup,
    HearingProtector,
    HMLRating,
    Instrument,
    InvestigationSnapshot,
    Measurement,
    MeasurementSeries,
    OctaveBandRating,
    SingleNumberRating,
    StatisticsResult,
    StatisticsWarning,
    Task,
    TaskResult,
    UnknownAttenuation,
)
from .conversions import ConversionError, load_snapshot, snapshot_from_mapping, dump_statistics
from .config import load_settings
from .energy import energy_average
from .ppe import combine_attenuation
from .engine import (
    compute_statistics_for_group,
    compute_all_statistics,
)

__all__ = [
    "CalculationSettings",
    "CombinedAttenuation",
    "ExposureGroup",
    "HearingProtector",
    "HMLRating",
    "Instrument",
    "InvestigationSnapshot",
    "Measurement",
    "MeasurementSeries",
    "OctaveBandRating",
    "SingleNumberRating",
    "StatisticsResult",
    "StatisticsWarning",
    "Task",
    "TaskResult",
    "UnknownAttenuation",
    "ConversionError",
    "load_snapshot",
    "snapshot_from_mapping",
    "dump_statistics",
    "load_settings",
    "energy_average",
    "combine_attenuation",
    "compute_statistics_for_group",
    "compute_all_statistics",
]
