"""Tests for the CKiD U25 creatinine, cystatin C and combined equations."""

import warnings

import numpy as np
import pandas as pd
import pytest

from pyegfr import (
    AgeRangeWarning,
    CKiD_U25_combined_US,
    CKiD_U25_creatinine_US,
    CKiD_U25_cystatin_US,
    EgfrAssertionError,
    UnrecognizedCategoryWarning,
    ckid_u25_combined_us,
    ckid_u25_creatinine_us,
    ckid_u25_cystatin_us,
    creatinine_coefficient,
    cystatin_coefficient,
)


# ============================================================================
# Creatinine based
# ============================================================================

def test_creatinine_age_12_uses_adolescent_band():
    """Age 12 falls in the 12-18 band: K = 36.1 * 1.023^0."""
    assert creatinine_coefficient(12, "F") == pytest.approx(36.1)
    assert CKiD_U25_creatinine_US(creat=1, age=12, sex="F", height=132) == pytest.approx(47.7)


@pytest.mark.parametrize(
    "creat, age, sex, height, expected",
    [
        (0.5, 10, "M", 140, round(39 * 1.008 ** -2 * 1.4 / 0.5, 1)),
        (0.8, 15, "F", 160, round(36.1 * 1.023 ** 3 * 1.6 / 0.8, 1)),
        (0.8, 15, "M", 160, round(39 * 1.045 ** 3 * 1.6 / 0.8, 1)),
        (1.0, 20, "M", 175, 88.9),
        (0.7, 18, "F", 132, 78.1),
    ],
)
def test_creatinine_bands(creat, age, sex, height, expected):
    assert ckid_u25_creatinine_us(creat, age, sex, height) == pytest.approx(expected)


def test_creatinine_vector_and_broadcast():
    result = ckid_u25_creatinine_us(creat=[1, 0.7], age=18, sex="F", height=132)

    assert isinstance(result, pd.Series)
    assert len(result) == 2
    np.testing.assert_allclose(result.to_numpy(), [54.6, 78.1])


def test_creatinine_keeps_series_index():
    creat = pd.Series([1.0, 0.5], index=["p1", "p2"])
    result = ckid_u25_creatinine_us(creat, age=pd.Series([12, 8], index=["p1", "p2"]),
                                    sex=["F", "M"], height=132)

    assert list(result.index) == ["p1", "p2"]
    assert result.name == "egfr_creatinine"


# ============================================================================
# Cystatin C based
# ============================================================================

def test_cystatin_adult_female_constant():
    assert CKiD_U25_cystatin_US(cystatin=1, age=18, sex="F") == pytest.approx(77.1)


@pytest.mark.parametrize(
    "cystatin, age, sex, expected",
    [
        (1.0, 18, "M", 68.3),
        (1.0, 10, "F", round(79.9 * 1.004 ** -2, 1)),
        (1.0, 10, "M", round(87.2 * 1.011 ** -5, 1)),
        (1.0, 13, "M", round(87.2 * 1.011 ** -2, 1)),
        (1.0, 16, "M", round(87.2 * 0.960 ** 1, 1)),
        (0.9, 14, "F", round(79.9 * 0.974 ** 2 / 0.9, 1)),
        (0.9, 16, "F", round(79.9 * 0.974 ** 4 / 0.9, 1)),
    ],
)
def test_cystatin_bands(cystatin, age, sex, expected):
    assert ckid_u25_cystatin_us(cystatin, age, sex) == pytest.approx(expected)


def test_cystatin_male_exponent_centred_on_15():
    """Below 15 the male coefficient uses age - 15, not age - 12."""
    assert cystatin_coefficient(11, "M") == pytest.approx(87.2 * 1.011 ** -4)
    assert cystatin_coefficient(14, "M") == pytest.approx(87.2 * 1.011 ** -1)


# ============================================================================
# Combined
# ============================================================================

def test_combined_average():
    result = CKiD_U25_combined_US(cystatin=1, creat=0.7, age=18, sex="F",
                                  height=132, verbose=False)
    assert result == pytest.approx(77.6)


def test_combined_verbose_columns():
    result = ckid_u25_combined_us(cystatin=1, creat=0.7, age=18, sex="F",
                                  height=132, verbose=True)

    assert isinstance(result, pd.DataFrame)
    assert list(result.columns) == ["egfr_creatinine", "egfr_cystatin", "egfr_average"]
    np.testing.assert_allclose(result.iloc[0].to_numpy(), [78.1, 77.1, 77.6])


def test_combined_average_of_rounded_components():
    ages = [2, 6.5, 11.9, 12, 13.4, 15, 16.7, 17.99, 18, 22]
    sexes = ["F", "M"] * 5
    creat = np.linspace(0.3, 2.1, 10)
    cystatin = np.linspace(0.6, 1.9, 10)
    height = np.linspace(85, 180, 10)

    table = ckid_u25_combined_us(cystatin, creat, ages, sexes, height, verbose=True)
    # sum of the components in tenths, halved with ties rounded up
    tenths = np.rint(table["egfr_creatinine"] * 10) + np.rint(table["egfr_cystatin"] * 10)
    expected = np.floor((tenths + 1) / 2) / 10

    np.testing.assert_allclose(table["egfr_average"], expected)
    np.testing.assert_allclose(
        table["egfr_creatinine"], ckid_u25_creatinine_us(creat, ages, sexes, height)
    )
    np.testing.assert_allclose(
        table["egfr_cystatin"], ckid_u25_cystatin_us(cystatin, ages, sexes)
    )
    np.testing.assert_allclose(
        ckid_u25_combined_us(cystatin, creat, ages, sexes, height), table["egfr_average"]
    )


def test_combined_half_way_average_rounds_up():
    # 78.1 and 77.2 average to exactly 77.65
    table = ckid_u25_combined_us(cystatin=77.1 / 77.2, creat=0.7, age=18, sex="F",
                                 height=132, verbose=True)

    np.testing.assert_allclose(table.iloc[0].to_numpy(), [78.1, 77.2, 77.7])


@pytest.mark.parametrize("verbose", [1, np.int64(1), "yes"])
def test_combined_truthy_verbose_returns_table(verbose):
    result = ckid_u25_combined_us(1, 0.7, 18, "F", 132, verbose=verbose)

    assert isinstance(result, pd.DataFrame)
    assert result.loc[0, "egfr_average"] == pytest.approx(77.6)


@pytest.mark.parametrize("verbose", [0, None])
def test_combined_falsy_verbose_returns_average(verbose):
    assert ckid_u25_combined_us(1, 0.7, 18, "F", 132, verbose=verbose) == pytest.approx(77.6)


# ============================================================================
# Properties
# ============================================================================

@pytest.mark.parametrize("boundary", [12])
@pytest.mark.parametrize("sex", ["F", "M"])
def test_creatinine_coefficient_continuous_at_band_edges(boundary, sex):
    below = creatinine_coefficient(boundary - 1e-9, sex)
    at = creatinine_coefficient(boundary, sex)
    assert below == pytest.approx(at, rel=1e-6)


@pytest.mark.parametrize("boundary", [12, 15])
@pytest.mark.parametrize("sex", ["F", "M"])
def test_cystatin_coefficient_continuous_at_band_edges(boundary, sex):
    below = cystatin_coefficient(boundary - 1e-9, sex)
    at = cystatin_coefficient(boundary, sex)
    assert below == pytest.approx(at, rel=1e-6)


def test_outputs_non_negative_and_repeatable():
    ages = np.arange(1, 25.5, 0.5)
    sexes = np.where(np.arange(len(ages)) % 2 == 0, "F", "M")

    first = ckid_u25_combined_us(1.1, 0.9, ages, sexes, 150, verbose=True)
    second = ckid_u25_combined_us(1.1, 0.9, ages, sexes, 150, verbose=True)

    assert len(first) == len(ages)
    assert (first.to_numpy() >= 0).all()
    pd.testing.assert_frame_equal(first, second)


def test_mismatched_lengths_fail_fast():
    with pytest.raises(EgfrAssertionError) as excinfo:
        ckid_u25_creatinine_us(creat=[1, 2], age=[10, 11, 12], sex="F", height=130)

    assert "creat=2" in str(excinfo.value)
    assert "age=3" in str(excinfo.value)
    assert isinstance(excinfo.value, ValueError)


# ============================================================================
# Warnings
# ============================================================================

@pytest.mark.parametrize("age", [0.5, 26])
def test_out_of_range_age_warns_but_computes(age):
    with pytest.warns(AgeRangeWarning):
        creat = ckid_u25_creatinine_us(creat=[0.6, 0.6], age=[10, age], sex="F", height=120)
    with pytest.warns(AgeRangeWarning):
        cys = ckid_u25_cystatin_us(cystatin=[1.0, 1.0], age=[10, age], sex="F")

    assert not creat.isna().any()
    assert not cys.isna().any()
    # in-range observation unaffected
    assert creat.iloc[0] == ckid_u25_creatinine_us(0.6, 10, "F", 120)


def test_combined_warns_once_for_batch():
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        ckid_u25_combined_us([1, 1], [0.7, 0.7], [0.5, 26], ["F", "M"], [60, 170])

    age_warnings = [w for w in caught if issubclass(w.category, AgeRangeWarning)]
    assert len(age_warnings) == 1


def test_in_range_ages_do_not_warn():
    with warnings.catch_warnings():
        warnings.simplefilter("error", AgeRangeWarning)
        ckid_u25_cystatin_us([1, 1], [1, 25], ["F", "M"])


def test_unrecognised_sex_uses_male_branch():
    with pytest.warns(UnrecognizedCategoryWarning):
        result = ckid_u25_cystatin_us(cystatin=1, age=18, sex="X")

    assert result == pytest.approx(68.3)


def test_lowercase_sex_is_recognised():
    with warnings.catch_warnings():
        warnings.simplefilter("error", UnrecognizedCategoryWarning)
        assert ckid_u25_cystatin_us(1, 18, "f") == pytest.approx(77.1)


def test_warnings_point_at_the_caller():
    with pytest.warns(UnrecognizedCategoryWarning) as sex_record:
        ckid_u25_creatinine_us(1, 12, "X", 132)
    with pytest.warns(AgeRangeWarning) as age_record:
        ckid_u25_cystatin_us(1, 30, "F")

    assert sex_record[0].filename == __file__
    assert age_record[0].filename == __file__
