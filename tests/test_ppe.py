import pytest

from noise_core.models import (
    BandAttenuation,
    CalculationSettings,
    HearingProtector,
    HMLRating,
    OctaveBandRating,
    SingleNumberRating,
    UnknownAttenuation,
)
from noise_core.ppe import combine_attenuation, octave_apf, protector_attenuation

FLAT_SPECTRUM = (90.0,) * 8


def _octave(apv: float, sd: float = 5.0) -> HearingProtector:
    return HearingProtector(rating=OctaveBandRating(bands=(BandAttenuation(mean=apv + sd, sd=sd),) * 8))


def _hml(m: float, character: str = "medium") -> HearingProtector:
    return HearingProtector(rating=HMLRating(high=m + 4, medium=m, low=m - 6, spectral_character=character))


def _snr(snr: float) -> HearingProtector:
    return HearingProtector(rating=SingleNumberRating(snr=snr))


def test_no_protectors_means_no_protection_data() -> None:
    assert combine_attenuation([]) is None


def test_single_protector_uses_its_own_figure() -> None:
    result = combine_attenuation([_snr(30.0)])

    assert result.method == "single"
    assert result.attenuation == pytest.approx(15.0)
    assert result.capped is False


def test_single_protector_with_manual_attenuation() -> None:
    protector = HearingProtector(rating=SingleNumberRating(snr=30.0), attenuation=12.0)
    assert combine_attenuation([protector]).attenuation == pytest.approx(12.0)
    assert combine_attenuation([HearingProtector(attenuation=9.0)]).attenuation == pytest.approx(9.0)


def test_single_protector_without_attenuation_is_no_data() -> None:
    assert combine_attenuation([HearingProtector(attenuation=0.0)]) is None


def test_unknown_attenuation_is_not_zero_attenuation() -> None:
    result = combine_attenuation([HearingProtector(rating=UnknownAttenuation())])

    assert result is not None
    assert result.method == "unknown"
    assert result.attenuation is None


def test_unknown_second_protector_blocks_assessment() -> None:
    result = combine_attenuation([_snr(30.0), HearingProtector(rating=UnknownAttenuation())])
    assert result.method == "unknown"


def test_double_hml_takes_best_plus_bonus() -> None:
    result = combine_attenuation([_hml(22.0), _hml(20.0)])

    assert result.method == "double-hml"
    assert result.attenuation == pytest.approx(16.0)
    assert result.capped is False


def test_hml_value_follows_spectral_character() -> None:
    high = HearingProtector(rating=HMLRating(high=30.0, medium=24.0, low=16.0, spectral_character="high"))
    low = HearingProtector(rating=HMLRating(high=30.0, medium=24.0, low=16.0, spectral_character="low"))

    assert protector_attenuation(high) == pytest.approx(15.0)
    assert protector_attenuation(low) == pytest.approx(8.0)


def test_double_snr_fallback() -> None:
    result = combine_attenuation([_snr(30.0), _snr(25.0)])

    assert result.method == "double-snr"
    assert result.attenuation == pytest.approx(20.0)


def test_mixed_methods_fall_back_to_single_numbers() -> None:
    result = combine_attenuation([_hml(22.0), _snr(30.0)])

    assert result.method == "double-snr"
    assert result.attenuation == pytest.approx(20.0)


@pytest.mark.parametrize(
    "protectors",
    [
        [_hml(80.0), _hml(70.0)],
        [_snr(70.0), _snr(20.0)],
        [HearingProtector(attenuation=33.0), HearingProtector(attenuation=32.0)],
    ],
)
def test_double_protection_is_capped(protectors: list) -> None:
    result = combine_attenuation(protectors)

    assert result.attenuation == 35.0
    assert result.capped is True


def test_cap_follows_settings() -> None:
    result = combine_attenuation([_snr(60.0), _snr(60.0)], settings=CalculationSettings(protector_cap=30.0))
    assert result.attenuation == 30.0
    assert result.capped is True


def test_double_octave_better_device_dominates_each_band() -> None:
    result = combine_attenuation([_octave(20.0), _octave(25.0)], FLAT_SPECTRUM)

    assert result.method == "double-octave"
    assert result.attenuation == pytest.approx(25.0)
    assert result.capped is False


def test_double_octave_mixes_bands() -> None:
    first = HearingProtector(
        rating=OctaveBandRating(bands=tuple(BandAttenuation(mean=m, sd=0.0) for m in (30, 30, 30, 30, 10, 10, 10, 10)))
    )
    second = HearingProtector(
        rating=OctaveBandRating(bands=tuple(BandAttenuation(mean=m, sd=0.0) for m in (10, 10, 10, 10, 30, 30, 30, 30)))
    )
    combined = combine_attenuation([first, second], FLAT_SPECTRUM)
    alone = octave_apf(FLAT_SPECTRUM, first.rating)

    # each device covers the bands the other one misses
    assert combined.attenuation == pytest.approx(30.0)
    assert combined.attenuation > alone.apf


def test_double_octave_is_capped() -> None:
    result = combine_attenuation([_octave(20.0), _octave(40.0)], FLAT_SPECTRUM)

    assert result.method == "double-octave"
    assert result.attenuation == 35.0
    assert result.capped is True


def test_octave_without_spectrum_has_no_data() -> None:
    assert combine_attenuation([_octave(20.0), _octave(25.0)], None) is None


def _sheet_octave(apv: float, lp: float = 90.0, sd: float = 5.0) -> HearingProtector:
    band = BandAttenuation(mean=apv + sd, sd=sd, lp=lp)
    return HearingProtector(rating=OctaveBandRating(bands=(band,) * 8))


def test_single_octave_protector_uses_data_sheet_levels() -> None:
    result = combine_attenuation([_sheet_octave(20.0)])

    assert result.method == "single"
    assert result.attenuation == pytest.approx(20.0)
    assert octave_apf(None, _sheet_octave(20.0).rating).bands[0].l_unprotected_a == pytest.approx(90.0 - 26.2)


def test_double_octave_uses_data_sheet_levels() -> None:
    result = combine_attenuation([_sheet_octave(20.0), _sheet_octave(25.0)])

    assert result.method == "double-octave"
    assert result.attenuation == pytest.approx(25.0)


def test_measured_spectrum_wins_over_data_sheet_levels() -> None:
    result = octave_apf((70.0,) * 8, _sheet_octave(20.0, lp=100.0).rating)

    assert result.bands[4].l_unprotected_a == pytest.approx(70.0)
    assert result.apf == pytest.approx(20.0)


def test_octave_apf_needs_three_bands() -> None:
    bands = (BandAttenuation(mean=25.0, sd=5.0),) * 2 + (None,) * 6
    assert octave_apf(FLAT_SPECTRUM, OctaveBandRating(bands=bands)) is None


def test_octave_apf_single_device() -> None:
    result = octave_apf(FLAT_SPECTRUM, _octave(20.0).rating)

    assert result.apf == pytest.approx(20.0)
    assert result.l_a - result.l_prime == pytest.approx(result.apf)
    assert result.bands[0].apv == pytest.approx(20.0)
    assert result.bands[0].l_unprotected_a == pytest.approx(90.0 - 26.2)
