"""Measurement uncertainty per Annex C of NEN-EN-ISO 9612."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Dict, Iterable, Optional, Sequence

from .models import CalculationSettings, InvestigationSnapshot, Measurement, TaskResult
from .tables import INSTRUMENT_UNCERTAINTY, c1u1_lookup


@dataclass(frozen=True)
class UncertaintyBudget:
    u: float  # combined standard uncertainty
    expanded_u: float  # U = k·u
    lex8h_95: float  # L_EX,8h + U
    c1u1: Optional[float] = None  # job/full-day only
    c1u1_excessive: bool = False


class InstrumentIndex:
    """Resolves the instrument uncertainty u2 behind a set of measurements.

    A measurement's instrument is the one of its series, falling back to the
    instrument linked on the measurement itself. Measurements without a known
    instrument count with ``fallback``: the worst class among all instruments
    of the investigation, or the configured default when there are none.
    """

    def __init__(self, snapshot: InvestigationSnapshot, settings: CalculationSettings) -> None:
        self._u2_by_instrument: Dict[str, float] = {
            inst.id: INSTRUMENT_UNCERTAINTY[inst.type] for inst in snapshot.instruments
        }
        self._instrument_by_series: Dict[str, str] = {s.id: s.instrument_id for s in snapshot.series}
        if self._u2_by_instrument:
            self.fallback = max(self._u2_by_instrument.values())
        else:
            self.fallback = settings.default_instrument_uncertainty

    def for_measurement(self, measurement: Measurement) -> float:
        instrument_id = self._instrument_by_series.get(measurement.series_id or "", measurement.instrument_id)
        if instrument_id is None:
            return self.fallback
        return self._u2_by_instrument.get(instrument_id, self.fallback)

    def worst_case(self, measurements: Iterable[Measurement]) -> float:
        """Maximum u2 over the instruments actually used."""
        return max((self.for_measurement(m) for m in measurements), default=self.fallback)


def _expand(lex8h: float, u: float, settings: CalculationSettings) -> UncertaintyBudget:
    expanded = settings.coverage_factor * u
    return UncertaintyBudget(u=u, expanded_u=expanded, lex8h_95=lex8h + expanded)


def compose_task_based(
    lex8h: float,
    task_results: Sequence[TaskResult],
    settings: CalculationSettings,
) -> UncertaintyBudget:
    """Formula C.3: u² = Σ c1a² · (u1a² + u1b² + u2² + u3²)."""

    u3_sq = settings.microphone_uncertainty**2
    variance = math.fsum(
        tr.c1a**2 * (tr.u1a**2 + tr.u1b**2 + tr.u2**2 + u3_sq) for tr in task_results
    )
    return _expand(lex8h, math.sqrt(variance), settings)


def compose_job_based(
    lex8h: float,
    n_samples: int,
    u1: float,
    u2: float,
    settings: CalculationSettings,
) -> UncertaintyBudget:
    """Formula C.9: u² = (c1·u1)² + u2² + u3², c1·u1 from Table C.4."""

    c1u1 = c1u1_lookup(n_samples, u1)
    variance = c1u1**2 + u2**2 + settings.microphone_uncertainty**2
    return replace(
        _expand(lex8h, math.sqrt(variance), settings),
        c1u1=c1u1,
        c1u1_excessive=c1u1 > settings.sampling_revision_threshold,
    )
