"""Task-based and job/full-day calculation of the daily exposure level."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence, Tuple

from .energy import (
    duration_uncertainty,
    energy_average,
    lex8h_from_job,
    lex8h_from_tasks,
    lex8h_task,
    sample_standard_deviation,
    sensitivity_coefficient,
    task_sampling_uncertainty,
)
from .models import (
    CalculationSettings,
    ExposureGroup,
    Measurement,
    StatisticsWarning,
    Task,
    TaskResult,
)
from .uncertainty import InstrumentIndex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaskBasedOutcome:
    lex8h: float
    task_results: Tuple[TaskResult, ...]
    warnings: Tuple[StatisticsWarning, ...]


@dataclass(frozen=True)
class JobBasedOutcome:
    n: int
    lpa_eqte: float
    lex8h: float
    u1: float  # sample standard deviation
    u2: float


def spread_limit(group: ExposureGroup, settings: CalculationSettings) -> float:
    """Annex E: allowed spread for one worker or for a group of workers."""
    if group.worker_count <= 1:
        return settings.single_worker_spread_limit
    return settings.group_spread_limit


def _task_warnings(
    task: Task,
    levels: Sequence[float],
    limit: float,
    settings: CalculationSettings,
) -> List[StatisticsWarning]:
    found = []
    n = len(levels)
    if n < settings.min_samples:
        found.append(
            StatisticsWarning(
                code="insufficient-samples",
                message=(
                    f"Task '{task.name}': {n} measurement{'s' if n != 1 else ''}, "
                    f"at least {settings.min_samples} required (§9.3.1 NEN-EN-ISO 9612)"
                ),
                task_id=task.id,
                value=float(n),
                limit=float(settings.min_samples),
            )
        )
    if n >= 2:
        spread = max(levels) - min(levels)
        if spread > limit:
            found.append(
                StatisticsWarning(
                    code="excessive-spread",
                    message=(
                        f"Task '{task.name}': spread {spread:.1f} dB exceeds {limit:.0f} dB "
                        "(Annex E NEN-EN-ISO 9612)"
                    ),
                    task_id=task.id,
                    value=spread,
                    limit=limit,
                )
            )
    return found


def compute_task_based(
    group: ExposureGroup,
    tasks: Sequence[Task],
    measurements: Sequence[Measurement],
    instruments: InstrumentIndex,
    settings: CalculationSettings,
) -> Optional[TaskBasedOutcome]:
    """Return the daily level of ``group`` assembled from its tasks.

    ``measurements`` must already be restricted to the valid measurements of
    the group. Tasks without any of them are skipped; ``None`` when no task
    yields a result.
    """

    limit = spread_limit(group, settings)
    partial: List[TaskResult] = []
    warnings: List[StatisticsWarning] = []

    for task in tasks:
        task_meas = [m for m in measurements if m.task_id == task.id]
        if not task_meas:
            continue
        if task.duration_hours <= 0:
            logger.debug("Skipping task %s of group %s: non-positive duration", task.id, group.id)
            warnings.append(
                StatisticsWarning(
                    code="invalid-duration",
                    message=f"Task '{task.name}': duration must be greater than zero, task skipped",
                    task_id=task.id,
                    value=task.duration_hours,
                )
            )
            continue

        levels = [m.lpa_eqt for m in task_meas]
        warnings.extend(_task_warnings(task, levels, limit, settings))

        level = energy_average(levels)
        contribution = lex8h_task(level, task.duration_hours, settings.reference_hours) if level is not None else None
        if level is None or contribution is None:
            continue
        partial.append(
            TaskResult(
                task_id=task.id,
                task_name=task.name,
                duration_hours=task.duration_hours,
                n_measurements=len(levels),
                lpa_eqtm=level,
                lex8h_m=contribution,
                u1a=task_sampling_uncertainty(levels),
                u1b=duration_uncertainty(task.duration_hours, task.duration_min, task.duration_max),
                u2=instruments.worst_case(task_meas),
                c1a=0.0,
                spread=max(levels) - min(levels) if len(levels) >= 2 else 0.0,
            )
        )

    if not partial:
        return None

    lex8h = lex8h_from_tasks(((tr.lpa_eqtm, tr.duration_hours) for tr in partial), settings.reference_hours)
    if lex8h is None:
        return None

    results = tuple(
        replace(
            tr,
            c1a=sensitivity_coefficient(tr.duration_hours, tr.lpa_eqtm, lex8h, settings.reference_hours),
        )
        for tr in partial
    )
    return TaskBasedOutcome(lex8h=lex8h, task_results=results, warnings=tuple(warnings))


def compute_job_based(
    group: ExposureGroup,
    measurements: Sequence[Measurement],
    instruments: InstrumentIndex,
    settings: CalculationSettings,
) -> Optional[JobBasedOutcome]:
    """Return the daily level of a job-based or full-day ``group``.

    At least ``settings.min_samples`` valid samples are required.
    """

    samples = [m.lpa_eqt for m in measurements]
    if len(samples) < settings.min_samples:
        logger.debug("Group %s: %d samples, no job-based result", group.id, len(samples))
        return None

    lpa_eqte = energy_average(samples)
    if lpa_eqte is None:
        return None
    lex8h = lex8h_from_job(lpa_eqte, group.effective_day_hours, settings.reference_hours)
    if lex8h is None:
        return None

    return JobBasedOutcome(
        n=len(samples),
        lpa_eqte=lpa_eqte,
        lex8h=lex8h,
        u1=sample_standard_deviation(samples),
        u2=instruments.worst_case(measurements),
    )
