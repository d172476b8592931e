import pytest

from noise_core.models import (
    CalculationSettings,
    ExposureGroup,
    InvestigationSnapshot,
    Measurement,
    Task,
)


@pytest.fixture
def default_settings() -> CalculationSettings:
    """Settings as prescribed by NEN-EN-ISO 9612."""
    return CalculationSettings()


@pytest.fixture
def task_snapshot() -> InvestigationSnapshot:
    """One task of 1 h in an 8 h day, measured three times."""
    group = ExposureGroup(id="heg-1", name="Assembly", strategy="task-based", effective_day_hours=8.0)
    task = Task(id="t-1", group_id="heg-1", name="Grinding", duration_hours=1.0)
    measurements = tuple(
        Measurement(id=f"m-{i}", group_id="heg-1", task_id="t-1", lpa_eqt=level)
        for i, level in enumerate((85.0, 86.0, 87.0))
    )
    return InvestigationSnapshot(groups=(group,), tasks=(task,), measurements=measurements)


@pytest.fixture
def job_snapshot() -> InvestigationSnapshot:
    """Job-based group with five full-shift samples."""
    group = ExposureGroup(id="heg-2", name="Warehouse", strategy="job-based", effective_day_hours=8.0)
    measurements = tuple(
        Measurement(id=f"j-{i}", group_id="heg-2", lpa_eqt=level)
        for i, level in enumerate((82.0, 83.0, 84.0, 85.0, 86.0))
    )
    return InvestigationSnapshot(groups=(group,), measurements=measurements)
