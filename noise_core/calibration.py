"""Field calibration checks on measurement series (§12.2)."""

from __future__ import annotations

from typing import FrozenSet, Iterable, Optional

from .models import MeasurementSeries


def series_drift(series: MeasurementSeries) -> Optional[float]:
    """Drift between the pre and post calibration check, or ``None`` if one is missing."""

    pre = next((c.value for c in series.calibrations if c.type == "pre"), None)
    post = next((c.value for c in series.calibrations if c.type == "post"), None)
    if pre is None or post is None:
        return None
    return abs(post - pre)


def drifted_series_ids(series: Iterable[MeasurementSeries], tolerance: float = 0.5) -> FrozenSet[str]:
    """Ids of the series whose drift exceeds ``tolerance`` dB.

    Every measurement taken under such a series is disqualified.
    """

    drifted = set()
    for s in series:
        drift = series_drift(s)
        if drift is not None and drift > tolerance:
            drifted.add(s.id)
    return frozenset(drifted)
