"""Per-group noise exposure statistics.

Pure routines: the same snapshot always yields equal results, nothing is
cached between calls.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Optional, Sequence

from .calibration import drifted_series_ids
from .energy import average_octave_bands
from .models import (
    CalculationSettings,
    ExposureGroup,
    InvestigationSnapshot,
    Measurement,
    StatisticsResult,
    StatisticsWarning,
)
from .ppe import combine_attenuation
from .strategies import compute_job_based, compute_task_based
from .uncertainty import InstrumentIndex, compose_job_based, compose_task_based
from .verdicts import EXPOSURE_LIMIT, exposure_label, exposure_verdict, peak_label, peak_verdict, verdict_color

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS = CalculationSettings()


def valid_measurements(
    snapshot: InvestigationSnapshot,
    group_id: str,
    settings: CalculationSettings = DEFAULT_SETTINGS,
) -> List[Measurement]:
    """Measurements of ``group_id`` that may enter a calculation.

    Excluded measurements never count. With ``enforce_calibration_drift`` the
    measurements of a series that failed its field calibration are dropped
    as well; applying this on top of an upstream exclusion changes nothing.
    """

    drifted = (
        drifted_series_ids(snapshot.series, settings.calibration_drift_tolerance)
        if settings.enforce_calibration_drift
        else frozenset()
    )
    return [
        m
        for m in snapshot.measurements
        if m.group_id == group_id and not m.excluded and m.series_id not in drifted
    ]


def _peak(measurements: Sequence[Measurement]) -> Optional[float]:
    return max((m.l_cpeak for m in measurements if m.l_cpeak is not None), default=None)


def _compute_unprotected(
    snapshot: InvestigationSnapshot,
    group: ExposureGroup,
    measurements: Sequence[Measurement],
    settings: CalculationSettings,
) -> Optional[StatisticsResult]:
    instruments = InstrumentIndex(snapshot, settings)
    u3 = settings.microphone_uncertainty

    if group.strategy == "task-based":
        tasks = [t for t in snapshot.tasks if t.group_id == group.id]
        outcome = compute_task_based(group, tasks, measurements, instruments, settings)
        if outcome is None:
            return None
        budget = compose_task_based(outcome.lex8h, outcome.task_results, settings)
        verdict = exposure_verdict(budget.lex8h_95)
        return StatisticsResult(
            group_id=group.id,
            strategy=group.strategy,
            n=len(measurements),
            lex8h=outcome.lex8h,
            # representative values for the summary: the worst task
            u1=max(tr.u1a for tr in outcome.task_results),
            u2=max(tr.u2 for tr in outcome.task_results),
            u3=u3,
            u=budget.u,
            expanded_u=budget.expanded_u,
            lex8h_95=budget.lex8h_95,
            verdict=verdict,
            verdict_label=exposure_label(verdict),
            verdict_color=verdict_color(verdict),
            task_results=outcome.task_results,
            warnings=outcome.warnings,
        )

    job = compute_job_based(group, measurements, instruments, settings)
    if job is None:
        return None
    budget = compose_job_based(job.lex8h, job.n, job.u1, job.u2, settings)
    verdict = exposure_verdict(budget.lex8h_95)
    warnings = ()
    if budget.c1u1_excessive:
        warnings = (
            StatisticsWarning(
                code="measurement-plan-revision",
                message=(
                    f"c1·u1 = {budget.c1u1:.1f} dB exceeds {settings.sampling_revision_threshold:.1f} dB, "
                    "the measurement plan should be revised (§10.4 NEN-EN-ISO 9612)"
                ),
                value=budget.c1u1,
                limit=settings.sampling_revision_threshold,
            ),
        )
    return StatisticsResult(
        group_id=group.id,
        strategy=group.strategy,
        n=job.n,
        lex8h=job.lex8h,
        u1=job.u1,
        u2=job.u2,
        u3=u3,
        u=budget.u,
        expanded_u=budget.expanded_u,
        lex8h_95=budget.lex8h_95,
        verdict=verdict,
        verdict_label=exposure_label(verdict),
        verdict_color=verdict_color(verdict),
        lpa_eqte=job.lpa_eqte,
        c1u1=budget.c1u1,
        c1u1_excessive=budget.c1u1_excessive,
        warnings=warnings,
    )


def compute_statistics_for_group(
    snapshot: InvestigationSnapshot,
    group_id: str,
    settings: CalculationSettings = DEFAULT_SETTINGS,
) -> Optional[StatisticsResult]:
    """Return the statistics of one exposure group, or ``None`` without enough data."""

    group = next((g for g in snapshot.groups if g.id == group_id), None)
    if group is None:
        logger.debug("Unknown exposure group %s", group_id)
        return None

    measurements = valid_measurements(snapshot, group_id, settings)
    result = _compute_unprotected(snapshot, group, measurements, settings)
    if result is None:
        logger.debug("Group %s (%s): no result", group.id, group.strategy)
        return None

    updates = {}
    l_cpeak = _peak(measurements)
    if l_cpeak is not None:
        level = peak_verdict(l_cpeak)
        updates.update(l_cpeak=l_cpeak, peak_verdict=level, peak_verdict_label=peak_label(level))

    # The limit value may be assessed with the protection taken into account,
    # the action values may not (art. 6.6 lid 2 Arbobesluit).
    ppe = combine_attenuation(group.protectors, average_octave_bands(measurements), settings)
    if ppe is not None:
        updates["ppe"] = ppe
        if ppe.attenuation is None:
            updates["warnings"] = result.warnings + (
                StatisticsWarning(
                    code="ppe-attenuation-unknown",
                    message="Hearing protector attenuation unknown, protected exposure cannot be assessed",
                ),
            )
        elif ppe.attenuation > 0:
            protected = result.lex8h_95 - ppe.attenuation
            updates.update(lex8h_95_protected=protected, elv_ppe_compliant=protected < EXPOSURE_LIMIT)

    logger.debug("Group %s: L_EX,8h=%.2f dB(A), U=%.2f dB", group.id, result.lex8h, result.expanded_u)
    return replace(result, **updates) if updates else result


def compute_all_statistics(
    snapshot: InvestigationSnapshot,
    settings: CalculationSettings = DEFAULT_SETTINGS,
) -> List[StatisticsResult]:
    """Statistics for every group in group order, groups without a result omitted."""

    results = []
    for group in snapshot.groups:
        stat = compute_statistics_for_group(snapshot, group.id, settings)
        if stat is not None:
            results.append(stat)
    return results
