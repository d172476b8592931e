"""Helpers that turn stored investigation records into engine-ready snapshots."""

from __future__ import annotations

import dataclasses
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import yaml

from .models import (
    BandAttenuation,
    CalibrationCheck,
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
    Task,
    UnknownAttenuation,
)
from .tables import INSTRUMENT_UNCERTAINTY, OCTAVE_BANDS

_STRATEGIES = ("task-based", "job-based", "full-day")
_SPECTRAL_CHARACTERS = ("low", "medium", "high")
_CALIBRATION_TYPES = ("pre", "mid", "post")


class ConversionError(ValueError):
    """Raised when a stored record cannot be translated into engine input."""


class NumpySafeDumper(yaml.SafeDumper):
    def represent_data(self, data):
        if isinstance(data, (np.integer, np.floating)):
            return super().represent_data(data.item())
        return super().represent_data(data)


def load_snapshot(path: str) -> InvestigationSnapshot:
    """Read an investigation record from a YAML (or JSON) file."""

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConversionError(f"Could not load '{path}': {exc}") from exc
    if not isinstance(data, Mapping):
        raise ConversionError(f"'{path}': expected a mapping at the top level.")
    return snapshot_from_mapping(data)


def snapshot_from_mapping(raw: Mapping[str, Any]) -> InvestigationSnapshot:
    """Build an :class:`InvestigationSnapshot` from a stored investigation record.

    Parameters
    ----------
    raw:
        Mapping in the layout of the stored sound investigation. Recognised
        lists are ``hegs``, ``tasks``, ``measurements``, ``instruments`` and
        ``measurementSeries``; anything else (scope, persons, report) is
        ignored.
    """

    return InvestigationSnapshot(
        groups=tuple(group_from_mapping(r) for r in _records(raw, "hegs")),
        tasks=tuple(_task(r) for r in _records(raw, "tasks")),
        measurements=tuple(_measurement(r) for r in _records(raw, "measurements")),
        instruments=tuple(_instrument(r) for r in _records(raw, "instruments")),
        series=tuple(_series(r) for r in _records(raw, "measurementSeries")),
    )


def group_from_mapping(raw: Mapping[str, Any]) -> ExposureGroup:
    context = _preferred_label(raw, "exposure group")
    strategy = raw.get("strategy")
    if strategy not in _STRATEGIES:
        raise ConversionError(f"{context}: unsupported strategy '{strategy}'.")
    hours = _required_float(raw, "effectiveDayHours", context)

    protectors = []
    first = protector_from_mapping(raw, "ppe", context)
    if first is not None:
        protectors.append(first)
    if raw.get("ppeDouble"):
        second = protector_from_mapping(raw, "ppe2", context)
        if second is not None:
            protectors.append(second)

    worker_count = raw.get("workerCount", 2)
    try:
        worker_count = int(worker_count)
    except (TypeError, ValueError):
        raise ConversionError(f"{context}: invalid numeric value for 'workerCount'.")

    return ExposureGroup(
        id=_required_str(raw, "id", context),
        name=str(raw.get("name") or ""),
        strategy=strategy,
        effective_day_hours=hours,
        worker_count=worker_count,
        protectors=tuple(protectors),
    )


def protector_from_mapping(
    raw: Mapping[str, Any],
    prefix: str,
    context: str = "exposure group",
) -> Optional[HearingProtector]:
    """Return the hearing protector stored under ``prefix`` (``ppe`` / ``ppe2``).

    The declared method selects the data sheet representation; without one
    the most detailed complete data wins (octave bands, H/M/L, SNR). A
    protector without any data yields ``None``.
    """

    ctx = f"{context} ({prefix})"
    attenuation = _optional_float(raw, f"{prefix}Attenuation", ctx)
    notes = str(raw.get(f"{prefix}Notes") or "")
    if raw.get(f"{prefix}SNRUnknown"):
        return HearingProtector(rating=UnknownAttenuation(), notes=notes)

    snr = _optional_float(raw, f"{prefix}SNR", ctx)
    h = _optional_float(raw, f"{prefix}H", ctx)
    m = _optional_float(raw, f"{prefix}M", ctx)
    low = _optional_float(raw, f"{prefix}L", ctx)
    character = raw.get(f"{prefix}SpectralChar") or "medium"
    if character not in _SPECTRAL_CHARACTERS:
        raise ConversionError(f"{ctx}: unsupported spectral character '{character}'.")
    bands = _octave_bands(raw.get(f"{prefix}OctaveBands"), ctx)

    candidates: Dict[str, Any] = {}
    if bands is not None:
        candidates["octave"] = OctaveBandRating(bands=bands)
    if h is not None and m is not None and low is not None:
        candidates["hml"] = HMLRating(high=h, medium=m, low=low, spectral_character=character)
    if snr is not None:
        candidates["snr"] = SingleNumberRating(snr=snr)

    method = raw.get(f"{prefix}Method")
    rating = candidates.get(method)
    if rating is None:
        rating = next((candidates[k] for k in ("octave", "hml", "snr") if k in candidates), None)
    if rating is None and attenuation is None:
        return None
    return HearingProtector(rating=rating, attenuation=attenuation, notes=notes)


def _octave_bands(raw: Any, context: str) -> Optional[Tuple[Optional[BandAttenuation], ...]]:
    if not raw:
        return None
    if not isinstance(raw, Sequence) or len(raw) > len(OCTAVE_BANDS):
        raise ConversionError(f"{context}: expected at most {len(OCTAVE_BANDS)} octave bands.")
    bands: List[Optional[BandAttenuation]] = []
    for i in range(len(OCTAVE_BANDS)):
        entry = raw[i] if i < len(raw) else None
        if not isinstance(entry, Mapping):
            bands.append(None)
            continue
        band_ctx = f"{context} band {OCTAVE_BANDS[i]} Hz"
        mean = _optional_float(entry, "m", band_ctx)
        sd = _optional_float(entry, "s", band_ctx)
        lp = _optional_float(entry, "lp", band_ctx)
        bands.append(BandAttenuation(mean=mean, sd=sd, lp=lp) if mean is not None and sd is not None else None)
    if all(b is None for b in bands):
        return None
    return tuple(bands)


def _task(raw: Mapping[str, Any]) -> Task:
    context = _preferred_label(raw, "task")
    return Task(
        id=_required_str(raw, "id", context),
        group_id=_required_str(raw, "hegId", context),
        name=str(raw.get("name") or ""),
        duration_hours=_required_float(raw, "durationHours", context),
        duration_min=_optional_float(raw, "durationMin", context),
        duration_max=_optional_float(raw, "durationMax", context),
    )


def _instrument(raw: Mapping[str, Any]) -> Instrument:
    context = _preferred_label(raw, "instrument")
    kind = raw.get("type")
    if kind not in INSTRUMENT_UNCERTAINTY:
        raise ConversionError(f"{context}: unsupported instrument type '{kind}'.")
    return Instrument(id=_required_str(raw, "id", context), type=kind)


def _series(raw: Mapping[str, Any]) -> MeasurementSeries:
    context = _preferred_label(raw, "measurement series")
    checks = []
    events = raw.get("calibrations") or []
    if not isinstance(events, list) or not all(isinstance(e, Mapping) for e in events):
        raise ConversionError(f"{context}: 'calibrations' must be a list of records.")
    for event in events:
        kind = event.get("type")
        if kind not in _CALIBRATION_TYPES:
            raise ConversionError(f"{context}: unsupported calibration type '{kind}'.")
        checks.append(CalibrationCheck(type=kind, value=_required_float(event, "value", context)))
    return MeasurementSeries(
        id=_required_str(raw, "id", context),
        group_id=_required_str(raw, "hegId", context),
        instrument_id=_required_str(raw, "instrumentId", context),
        task_id=raw.get("taskId"),
        calibrations=tuple(checks),
    )


def _measurement(raw: Mapping[str, Any]) -> Measurement:
    context = _preferred_label(raw, "measurement")
    spectrum = raw.get("octaveBands")
    if spectrum:
        try:
            spectrum = tuple(float(v) for v in spectrum)
        except (TypeError, ValueError):
            raise ConversionError(f"{context}: invalid octave band spectrum.")
    else:
        spectrum = None
    return Measurement(
        id=_required_str(raw, "id", context),
        group_id=_required_str(raw, "hegId", context),
        lpa_eqt=_required_float(raw, "lpa_eqT", context),
        task_id=raw.get("taskId"),
        series_id=raw.get("seriesId"),
        instrument_id=raw.get("instrumentId"),
        l_cpeak=_optional_float(raw, "lpCpeak", context),
        octave_bands=spectrum,
        excluded=bool(raw.get("excluded", False)),
        exclusion_reason=str(raw.get("exclusionReason") or ""),
    )


# ---- results ----


def _plain(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    return value


def statistics_to_mapping(result: StatisticsResult) -> Dict[str, Any]:
    """Plain mapping of ``result`` for the report and UI collaborators."""
    data = _plain(dataclasses.asdict(result))
    data["insufficient_task_data"] = result.insufficient_task_data
    return data


def dump_statistics(results: Iterable[StatisticsResult], path: str) -> None:
    payload = {"statistics": [statistics_to_mapping(r) for r in results]}
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(payload, f, sort_keys=False, allow_unicode=True, Dumper=NumpySafeDumper)


# ---- field helpers ----


def _records(raw: Mapping[str, Any], key: str) -> List[Mapping[str, Any]]:
    value = raw.get(key) or []
    if not isinstance(value, list) or not all(isinstance(r, Mapping) for r in value):
        raise ConversionError(f"'{key}' must be a list of records.")
    return value


def _preferred_label(raw: Mapping[str, Any], kind: str) -> str:
    for key in ("name", "id"):
        val = raw.get(key)
        if isinstance(val, str) and val.strip():
            return f"{kind} '{val}'"
    return kind


def _required_str(raw: Mapping[str, Any], key: str, context: str) -> str:
    value = raw.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ConversionError(f"{context}: missing '{key}'.")
    return value


def _required_float(raw: Mapping[str, Any], key: str, context: str) -> float:
    value = _optional_float(raw, key, context)
    if value is None:
        raise ConversionError(f"{context}: missing numeric value for '{key}'.")
    return value


def _optional_float(
    raw: Mapping[str, Any],
    key: str,
    context: str,
) -> Optional[float]:
    value = raw.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConversionError(f"{context}: invalid numeric value for '{key}'.")
