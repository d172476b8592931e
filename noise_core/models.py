"""Domain models for noise exposure computations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional, Tuple, Union

Strategy = Literal["task-based", "job-based", "full-day"]
InstrumentType = Literal["slm-class1", "slm-class2", "dosimeter"]
SpectralCharacter = Literal["low", "medium", "high"]
CalibrationType = Literal["pre", "mid", "post"]
ActionLevel = Literal["below-lav", "lav", "uav", "above-elv"]
AttenuationMethod = Literal["single", "double-octave", "double-hml", "double-snr", "unknown"]
WarningCode = Literal[
    "insufficient-samples",
    "excessive-spread",
    "invalid-duration",
    "measurement-plan-revision",
    "ppe-attenuation-unknown",
]


@dataclass(frozen=True)
class CalculationSettings:
    """Calculation assumptions shared by every step of the pipeline."""

    reference_hours: float = 8.0  # T0, reference shift length
    coverage_factor: float = 1.65  # k, one-sided 95 %
    microphone_uncertainty: float = 1.0  # u3, microphone position
    default_instrument_uncertainty: float = 1.5  # u2 when nothing is linked
    sampling_revision_threshold: float = 3.5  # c1u1 above this: revise plan
    min_samples: int = 3
    single_worker_spread_limit: float = 3.0
    group_spread_limit: float = 5.0
    protector_cap: float = 35.0  # bone conduction limit
    double_protector_bonus: float = 5.0
    calibration_drift_tolerance: float = 0.5
    enforce_calibration_drift: bool = True


# ---- hearing protector data sheet variants ----


@dataclass(frozen=True)
class SingleNumberRating:
    """EN 458 method 1: single number rating from the data sheet."""

    snr: float


@dataclass(frozen=True)
class HMLRating:
    """EN 458 method 2: H/M/L values plus the spectral character of the noise."""

    high: float
    medium: float
    low: float
    spectral_character: SpectralCharacter = "medium"

    def selected(self) -> float:
        if self.spectral_character == "high":
            return self.high
        if self.spectral_character == "low":
            return self.low
        return self.medium


@dataclass(frozen=True)
class BandAttenuation:
    mean: float
    sd: float
    lp: Optional[float] = None  # band level from the data sheet, used without a measured spectrum


@dataclass(frozen=True)
class OctaveBandRating:
    """EN 458 method 3: mean and standard deviation per octave band.

    ``bands`` holds eight entries (63 Hz – 8 kHz); ``None`` marks a band the
    data sheet does not cover.
    """

    bands: Tuple[Optional[BandAttenuation], ...]


@dataclass(frozen=True)
class UnknownAttenuation:
    """A protector is worn but its data sheet has not been looked up yet."""


ProtectorRating = Union[SingleNumberRating, HMLRating, OctaveBandRating, UnknownAttenuation]


@dataclass(frozen=True)
class HearingProtector:
    """A worn protector; ``rating`` is ``None`` when only a manual APF was entered."""

    rating: Optional[ProtectorRating] = None
    attenuation: Optional[float] = None  # manually entered APF in dB
    notes: str = ""


# ---- investigation snapshot ----


@dataclass(frozen=True)
class ExposureGroup:
    """Homogeneous noise exposure group (HEG)."""

    id: str
    name: str
    strategy: Strategy
    effective_day_hours: float  # T_e
    worker_count: int = 2
    protectors: Tuple[HearingProtector, ...] = ()


@dataclass(frozen=True)
class Task:
    id: str
    group_id: str
    name: str
    duration_hours: float  # T_m
    duration_min: Optional[float] = None
    duration_max: Optional[float] = None


@dataclass(frozen=True)
class Instrument:
    id: str
    type: InstrumentType


@dataclass(frozen=True)
class CalibrationCheck:
    type: CalibrationType
    value: float  # calibrator reading in dB


@dataclass(frozen=True)
class MeasurementSeries:
    id: str
    group_id: str
    instrument_id: str
    task_id: Optional[str] = None
    calibrations: Tuple[CalibrationCheck, ...] = ()


@dataclass(frozen=True)
class Measurement:
    id: str
    group_id: str
    lpa_eqt: float  # L_p,A,eqT in dB(A)
    task_id: Optional[str] = None
    series_id: Optional[str] = None
    instrument_id: Optional[str] = None
    l_cpeak: Optional[float] = None  # L_p,Cpeak in dB(C)
    octave_bands: Optional[Tuple[float, ...]] = None
    excluded: bool = False
    exclusion_reason: str = ""


@dataclass(frozen=True)
class InvestigationSnapshot:
    """Read-only view of everything the engine needs from an investigation."""

    groups: Tuple[ExposureGroup, ...] = ()
    tasks: Tuple[Task, ...] = ()
    measurements: Tuple[Measurement, ...] = ()
    instruments: Tuple[Instrument, ...] = ()
    series: Tuple[MeasurementSeries, ...] = ()


# ---- results ----


@dataclass(frozen=True)
class StatisticsWarning:
    code: WarningCode
    message: str
    task_id: Optional[str] = None
    value: Optional[float] = None
    limit: Optional[float] = None


@dataclass(frozen=True)
class TaskResult:
    """Per-task breakdown of a task-based group."""

    task_id: str
    task_name: str
    duration_hours: float
    n_measurements: int
    lpa_eqtm: float  # energy average of the task
    lex8h_m: float  # contribution to the daily level
    u1a: float  # sampling uncertainty
    u1b: float  # duration uncertainty
    u2: float  # instrument uncertainty
    c1a: float  # sensitivity coefficient
    spread: float


@dataclass(frozen=True)
class CombinedAttenuation:
    """Effective attenuation of the worn hearing protection.

    ``attenuation`` is ``None`` only for method ``"unknown"``.
    """

    attenuation: Optional[float]
    method: AttenuationMethod
    capped: bool = False


@dataclass(frozen=True)
class StatisticsResult:
    group_id: str
    strategy: Strategy
    n: int
    lex8h: float
    u1: float
    u2: float
    u3: float
    u: float
    expanded_u: float
    lex8h_95: float
    verdict: ActionLevel
    verdict_label: str
    verdict_color: str
    task_results: Tuple[TaskResult, ...] = ()
    lpa_eqte: Optional[float] = None
    c1u1: Optional[float] = None
    c1u1_excessive: bool = False
    l_cpeak: Optional[float] = None
    peak_verdict: Optional[ActionLevel] = None
    peak_verdict_label: Optional[str] = None
    lex8h_95_protected: Optional[float] = None
    elv_ppe_compliant: Optional[bool] = None
    ppe: Optional[CombinedAttenuation] = None
    warnings: Tuple[StatisticsWarning, ...] = ()

    @property
    def insufficient_task_data(self) -> bool:
        return any(w.code == "insufficient-samples" for w in self.warnings)
