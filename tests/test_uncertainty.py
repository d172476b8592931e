import math

import pytest

from noise_core.models import (
    CalculationSettings,
    Instrument,
    InvestigationSnapshot,
    Measurement,
    MeasurementSeries,
    TaskResult,
)
from noise_core.tables import c1u1_lookup
from noise_core.uncertainty import InstrumentIndex, compose_job_based, compose_task_based


def _task_result(c1a: float, u1a: float, u1b: float, u2: float) -> TaskResult:
    return TaskResult(
        task_id="t",
        task_name="t",
        duration_hours=4.0,
        n_measurements=3,
        lpa_eqtm=85.0,
        lex8h_m=82.0,
        u1a=u1a,
        u1b=u1b,
        u2=u2,
        c1a=c1a,
        spread=1.0,
    )


def test_compose_task_based(default_settings: CalculationSettings) -> None:
    tasks = [_task_result(0.6, 0.5, 0.2, 0.7), _task_result(0.4, 1.0, 0.0, 1.5)]
    budget = compose_task_based(80.0, tasks, default_settings)

    variance = 0.6**2 * (0.25 + 0.04 + 0.49 + 1.0) + 0.4**2 * (1.0 + 0.0 + 2.25 + 1.0)
    assert budget.u == pytest.approx(math.sqrt(variance))
    assert budget.expanded_u == pytest.approx(1.65 * math.sqrt(variance))
    assert budget.lex8h_95 == pytest.approx(80.0 + 1.65 * math.sqrt(variance))
    assert budget.c1u1 is None


def test_compose_job_based(default_settings: CalculationSettings) -> None:
    u1 = math.sqrt(2.5)
    budget = compose_job_based(84.23, 5, u1, 1.5, default_settings)

    c1u1 = c1u1_lookup(5, u1)
    u = math.sqrt(c1u1**2 + 1.5**2 + 1.0**2)
    assert budget.c1u1 == pytest.approx(c1u1)
    assert budget.u == pytest.approx(u)
    assert budget.lex8h_95 == pytest.approx(84.23 + 1.65 * u)
    assert budget.c1u1_excessive is False


def test_compose_job_based_flags_large_sampling_contribution(default_settings: CalculationSettings) -> None:
    budget = compose_job_based(85.0, 3, 5.0, 0.7, default_settings)

    assert budget.c1u1 == pytest.approx(32.2)
    assert budget.c1u1_excessive is True


def test_instrument_index_prefers_series_instrument(default_settings: CalculationSettings) -> None:
    snapshot = InvestigationSnapshot(
        instruments=(Instrument(id="i-1", type="slm-class1"), Instrument(id="i-2", type="dosimeter")),
        series=(MeasurementSeries(id="s-1", group_id="g", instrument_id="i-1"),),
    )
    index = InstrumentIndex(snapshot, default_settings)

    via_series = Measurement(id="a", group_id="g", lpa_eqt=85.0, series_id="s-1", instrument_id="i-2")
    direct = Measurement(id="b", group_id="g", lpa_eqt=85.0, instrument_id="i-1")
    unlinked = Measurement(id="c", group_id="g", lpa_eqt=85.0)

    assert index.for_measurement(via_series) == pytest.approx(0.7)
    assert index.for_measurement(direct) == pytest.approx(0.7)
    # unlinked measurements count with the worst instrument of the investigation
    assert index.for_measurement(unlinked) == pytest.approx(1.5)
    assert index.worst_case([via_series, direct]) == pytest.approx(0.7)
    assert index.worst_case([via_series, unlinked]) == pytest.approx(1.5)


def test_instrument_index_without_instruments_uses_default() -> None:
    settings = CalculationSettings(default_instrument_uncertainty=2.0)
    index = InstrumentIndex(InvestigationSnapshot(), settings)

    assert index.worst_case([]) == pytest.approx(2.0)
    assert index.for_measurement(Measurement(id="a", group_id="g", lpa_eqt=80.0)) == pytest.approx(2.0)
