"""Action and limit values of the Arbobesluit (art. 6.6 – 6.8)."""

from __future__ import annotations

from bisect import bisect_right
from types import MappingProxyType
from typing import Mapping, Tuple

from .models import ActionLevel

BANDS: Tuple[ActionLevel, ...] = ("below-lav", "lav", "uav", "above-elv")

#: Lower action, upper action and limit value for L_EX,8h in dB(A).
EXPOSURE_BREAKPOINTS: Tuple[float, ...] = (80.0, 85.0, 87.0)

#: Lower action, upper action and limit value for L_p,Cpeak in dB(C).
PEAK_BREAKPOINTS: Tuple[float, ...] = (135.0, 137.0, 140.0)

EXPOSURE_LIMIT = EXPOSURE_BREAKPOINTS[-1]

_EXPOSURE_LABELS: Mapping[ActionLevel, str] = MappingProxyType(
    {
        "below-lav": "Below lower action value (< 80 dB(A))",
        "lav": "Above lower action value (80–85 dB(A))",
        "uav": "Above upper action value (85–87 dB(A))",
        "above-elv": "Exposure limit value exceeded (≥ 87 dB(A))",
    }
)

_PEAK_LABELS: Mapping[ActionLevel, str] = MappingProxyType(
    {
        "below-lav": "Below lower action value (< 135 dB(C))",
        "lav": "Above lower action value (135–137 dB(C))",
        "uav": "Above upper action value (137–140 dB(C))",
        "above-elv": "Peak limit value exceeded (≥ 140 dB(C))",
    }
)

_COLORS: Mapping[ActionLevel, str] = MappingProxyType(
    {"below-lav": "emerald", "lav": "amber", "uav": "orange", "above-elv": "red"}
)


def _classify(value: float, breakpoints: Tuple[float, ...]) -> ActionLevel:
    # a value equal to a breakpoint belongs to the higher band
    return BANDS[bisect_right(breakpoints, value)]


def exposure_verdict(lex8h_95: float) -> ActionLevel:
    """Classify the upper-bound exposure figure L_EX,8h,95%."""
    return _classify(lex8h_95, EXPOSURE_BREAKPOINTS)


def peak_verdict(l_cpeak: float) -> ActionLevel:
    """Classify the highest measured L_p,Cpeak."""
    return _classify(l_cpeak, PEAK_BREAKPOINTS)


def exposure_label(level: ActionLevel) -> str:
    return _EXPOSURE_LABELS[level]


def peak_label(level: ActionLevel) -> str:
    return _PEAK_LABELS[level]


def verdict_color(level: ActionLevel) -> str:
    return _COLORS[level]
