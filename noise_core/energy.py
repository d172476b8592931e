"""Level arithmetic in the energy domain (NEN-EN-ISO 9612 formulas 3–9).

Sound levels are averaged and summed as powers, 10^(0.1·L), never as dB
values. Functions that cannot produce a level return ``None`` instead of
raising so callers can report the group as having no result.
"""

from __future__ import annotations

import math
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np

from .models import Measurement

_REFERENCE_HOURS = 8.0
_N_BANDS = 8


def to_power(levels: Iterable[float]) -> np.ndarray:
    return np.power(10.0, 0.1 * np.asarray(list(levels), dtype=float))


def level_from_power(power: float) -> Optional[float]:
    """Return ``10·lg(power)`` or ``None`` for a non-positive power sum."""
    if not math.isfinite(power) or power <= 0.0:
        return None
    return 10.0 * math.log10(power)


def energy_average(levels: Iterable[float]) -> Optional[float]:
    """Formula (3)/(7): energy average of ``levels`` in dB."""
    powers = to_power(levels)
    if powers.size == 0:
        return None
    return level_from_power(float(powers.mean()))


def lex8h_task(level: float, duration_hours: float, reference_hours: float = _REFERENCE_HOURS) -> Optional[float]:
    """Formula (4): contribution of one task to the daily exposure level."""
    if duration_hours <= 0:
        return None
    return level + 10.0 * math.log10(duration_hours / reference_hours)


def lex8h_from_tasks(
    tasks: Iterable[Tuple[float, float]],
    reference_hours: float = _REFERENCE_HOURS,
) -> Optional[float]:
    """Formula (5): daily exposure level from ``(level, duration_hours)`` pairs.

    The task contributions are summed, each weighted by its share of the
    reference shift.
    """
    pairs = list(tasks)
    if not pairs:
        return None
    levels = [lvl for lvl, _ in pairs]
    weights = np.array([hours / reference_hours for _, hours in pairs], dtype=float)
    return level_from_power(float(np.sum(weights * to_power(levels))))


def lex8h_from_job(level: float, effective_day_hours: float, reference_hours: float = _REFERENCE_HOURS) -> Optional[float]:
    """Formula (8)/(9): daily exposure level for job-based and full-day sampling."""
    if effective_day_hours <= 0:
        return None
    return level + 10.0 * math.log10(effective_day_hours / reference_hours)


def task_sampling_uncertainty(levels: Sequence[float]) -> float:
    """Formula C.6: standard uncertainty u1a of the sampled task levels.

    Deviations are taken about the arithmetic mean of the dB values.
    """
    n = len(levels)
    if n < 2:
        return 0.0
    values = np.asarray(levels, dtype=float)
    return math.sqrt(float(np.sum((values - values.mean()) ** 2)) / (n * (n - 1)))


def sample_standard_deviation(levels: Sequence[float]) -> float:
    """Formula C.12: sample standard deviation u1 of the job/full-day samples."""
    if len(levels) < 2:
        return 0.0
    return float(np.std(np.asarray(levels, dtype=float), ddof=1))


def sensitivity_coefficient(
    duration_hours: float,
    task_level: float,
    group_level: float,
    reference_hours: float = _REFERENCE_HOURS,
) -> float:
    """Formula C.4: c1a = (Tm/T0)·10^(0.1·(L_task − L_EX,8h))."""
    return (duration_hours / reference_hours) * 10.0 ** (0.1 * (task_level - group_level))


def duration_uncertainty(
    duration_hours: float,
    duration_min: Optional[float],
    duration_max: Optional[float],
) -> float:
    """§C.5: effective u1b in dB from the task duration range."""
    if duration_min is None or duration_max is None or duration_hours <= 0:
        return 0.0
    return (10.0 / math.log(10.0)) * (duration_max - duration_min) / (2.0 * math.sqrt(3.0) * duration_hours)


def average_octave_bands(measurements: Iterable[Measurement]) -> Optional[Tuple[float, ...]]:
    """Band-wise energy average over measurements with a full spectrum.

    Excluded measurements and incomplete spectra are ignored. Levels are
    rounded to 0.1 dB.
    """
    spectra = [
        m.octave_bands
        for m in measurements
        if not m.excluded and m.octave_bands is not None and len(m.octave_bands) == _N_BANDS
    ]
    if not spectra:
        return None
    mean_power = np.power(10.0, 0.1 * np.asarray(spectra, dtype=float)).mean(axis=0)
    return tuple(round(10.0 * math.log10(p), 1) for p in mean_power)
