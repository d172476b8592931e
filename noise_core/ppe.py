"""Hearing protector attenuation per EN 458, for one or two worn protectors.

Double protection is combined with the most accurate method for which both
protectors carry complete data: octave bands, then H/M/L, then the single
number rating. The combined figure is capped because bone conduction limits
what any combination can achieve.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from .energy import level_from_power
from .models import (
    AttenuationMethod,
    CalculationSettings,
    CombinedAttenuation,
    HearingProtector,
    HMLRating,
    OctaveBandRating,
    SingleNumberRating,
    UnknownAttenuation,
)
from .tables import A_WEIGHTS

logger = logging.getLogger(__name__)

_MIN_OCTAVE_BANDS = 3
_DEFAULT_SETTINGS = CalculationSettings()


@dataclass(frozen=True)
class OctaveBandResult:
    apv: float  # assumed protection value m − s
    l_protected_a: float
    l_unprotected_a: float


@dataclass(frozen=True)
class OctaveAPF:
    l_a: float  # unprotected A-weighted level
    l_prime: float  # protected A-weighted level at the ear
    apf: float
    bands: Tuple[Optional[OctaveBandResult], ...]


def _band_results(
    spectrum: Optional[Sequence[float]],
    rating: OctaveBandRating,
) -> Tuple[Optional[OctaveBandResult], ...]:
    results = []
    for i, weight in enumerate(A_WEIGHTS):
        band = rating.bands[i] if i < len(rating.bands) else None
        if band is None:
            results.append(None)
            continue
        # the measured spectrum wins over the band levels on the data sheet
        level = spectrum[i] if spectrum is not None and i < len(spectrum) else band.lp
        if level is None:
            results.append(None)
            continue
        apv = band.mean - band.sd
        results.append(
            OctaveBandResult(
                apv=apv,
                l_protected_a=level - apv + weight,
                l_unprotected_a=level + weight,
            )
        )
    return tuple(results)


def _energy_sum(levels: Sequence[float]) -> Optional[float]:
    if not levels:
        return None
    return level_from_power(float(np.sum(np.power(10.0, 0.1 * np.asarray(levels, dtype=float)))))


def octave_apf(
    spectrum: Optional[Sequence[float]],
    rating: OctaveBandRating,
) -> Optional[OctaveAPF]:
    """EN 458 Annex A method 3 for one protector.

    Band levels come from ``spectrum`` when one was measured, otherwise from
    the ``lp`` values of the data sheet. Returns ``None`` when fewer than
    three bands are complete.
    """

    bands = _band_results(spectrum, rating)
    complete = [b for b in bands if b is not None]
    if len(complete) < _MIN_OCTAVE_BANDS:
        return None
    l_a = _energy_sum([b.l_unprotected_a for b in complete])
    l_prime = _energy_sum([b.l_protected_a for b in complete])
    if l_a is None or l_prime is None:
        return None
    l_a = round(l_a, 1)
    l_prime = round(l_prime, 1)
    return OctaveAPF(l_a=l_a, l_prime=l_prime, apf=round(l_a - l_prime, 1), bands=bands)


def protector_attenuation(
    protector: HearingProtector,
    spectrum: Optional[Sequence[float]] = None,
) -> Optional[float]:
    """Attenuation of a single protector in dB, ``None`` when it cannot be determined.

    A manually entered attenuation takes precedence over the data sheet.
    """

    rating = protector.rating
    if isinstance(rating, UnknownAttenuation):
        return None
    if protector.attenuation is not None:
        return protector.attenuation
    if isinstance(rating, SingleNumberRating):
        return round(rating.snr / 2.0, 1)
    if isinstance(rating, HMLRating):
        return round(rating.selected() / 2.0, 1)
    if isinstance(rating, OctaveBandRating):
        result = octave_apf(spectrum, rating)
        return result.apf if result is not None else None
    return None


def _limited(raw: float, method: AttenuationMethod, settings: CalculationSettings) -> CombinedAttenuation:
    capped = raw > settings.protector_cap
    if capped:
        logger.debug("Combined attenuation %.1f dB capped at %.1f dB", raw, settings.protector_cap)
    return CombinedAttenuation(
        attenuation=round(min(raw, settings.protector_cap), 1),
        method=method,
        capped=capped,
    )


def _double_octave(
    first: HearingProtector,
    second: HearingProtector,
    spectrum: Optional[Sequence[float]],
) -> Optional[float]:
    if not (isinstance(first.rating, OctaveBandRating) and isinstance(second.rating, OctaveBandRating)):
        return None
    res1 = octave_apf(spectrum, first.rating)
    res2 = octave_apf(spectrum, second.rating)
    if res1 is None or res2 is None:
        return None
    common = [(b1, b2) for b1, b2 in zip(res1.bands, res2.bands) if b1 is not None and b2 is not None]
    # the better protector dominates each band
    l_rest = _energy_sum([min(b1.l_protected_a, b2.l_protected_a) for b1, b2 in common])
    l_a = _energy_sum([b1.l_unprotected_a for b1, _ in common])
    if l_rest is None or l_a is None:
        return None
    return l_a - l_rest


def _double_hml(first: HearingProtector, second: HearingProtector) -> Optional[float]:
    if not (isinstance(first.rating, HMLRating) and isinstance(second.rating, HMLRating)):
        return None
    return max(first.rating.selected() / 2.0, second.rating.selected() / 2.0)


def combine_attenuation(
    protectors: Sequence[HearingProtector],
    spectrum: Optional[Sequence[float]] = None,
    settings: CalculationSettings = _DEFAULT_SETTINGS,
) -> Optional[CombinedAttenuation]:
    """Effective attenuation of the protectors worn by a group.

    ``spectrum`` is the group's energy-averaged octave spectrum for the
    octave band method; without it the data sheet band levels are used.
    At most two protectors are considered. Returns ``None`` when there is no
    usable protection data and method ``"unknown"`` when a worn protector has
    not been looked up yet.
    """

    worn = tuple(protectors)[:2]
    if not worn:
        return None
    if any(isinstance(p.rating, UnknownAttenuation) for p in worn):
        return CombinedAttenuation(attenuation=None, method="unknown")

    if len(worn) == 1:
        attenuation = protector_attenuation(worn[0], spectrum)
        if attenuation is None or attenuation <= 0:
            return None
        return CombinedAttenuation(attenuation=attenuation, method="single")

    first, second = worn
    raw = _double_octave(first, second, spectrum)
    if raw is not None:
        return _limited(raw, "double-octave", settings)

    raw = _double_hml(first, second)
    if raw is not None:
        return _limited(raw + settings.double_protector_bonus, "double-hml", settings)

    apf1 = protector_attenuation(first, spectrum) or 0.0
    apf2 = protector_attenuation(second, spectrum) or 0.0
    if apf1 > 0 or apf2 > 0:
        return _limited(max(apf1, apf2) + settings.double_protector_bonus, "double-snr", settings)
    return None
