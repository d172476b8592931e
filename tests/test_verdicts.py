import pytest

from noise_core.verdicts import (
    exposure_label,
    exposure_verdict,
    peak_label,
    peak_verdict,
    verdict_color,
)


@pytest.mark.parametrize(
    "level, expected",
    [
        (60.0, "below-lav"),
        (79.99, "below-lav"),
        (80.0, "lav"),
        (84.99, "lav"),
        (85.0, "uav"),
        (86.99, "uav"),
        (87.0, "above-elv"),
        (110.0, "above-elv"),
    ],
)
def test_exposure_bands(level: float, expected: str) -> None:
    assert exposure_verdict(level) == expected


@pytest.mark.parametrize(
    "level, expected",
    [
        (134.9, "below-lav"),
        (135.0, "lav"),
        (136.9, "lav"),
        (137.0, "uav"),
        (139.9, "uav"),
        (140.0, "above-elv"),
    ],
)
def test_peak_bands(level: float, expected: str) -> None:
    assert peak_verdict(level) == expected


def test_labels_and_colors() -> None:
    assert "80" in exposure_label("below-lav")
    assert "140 dB(C)" in peak_label("above-elv")
    assert [verdict_color(v) for v in ("below-lav", "lav", "uav", "above-elv")] == [
        "emerald",
        "amber",
        "orange",
        "red",
    ]
