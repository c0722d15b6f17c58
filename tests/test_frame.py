"""Tests for applying formulas to patient tables and KDIGO staging."""

import numpy as np
import pandas as pd
import pytest

from pyegfr import (
    EgfrAssertionError,
    FORMULAS,
    apply_formula,
    ckd_epi,
    gfr_category,
    list_formulas,
)
from pyegfr.frame import formula_inputs


@pytest.fixture
def cohort():
    return pd.DataFrame({
        'patient': ['a', 'b', 'c'],
        'scr': [1.0, 0.7, 0.45],
        'cysc': [1.0, 1.0, 0.8],
        'age': [12, 18, 9.5],
        'sex': ['F', 'F', 'M'],
        'height': [132, 132, 128],
    })


def test_registry_lists_every_formula():
    names = list_formulas()
    assert names == sorted(FORMULAS)
    assert {'ckd_epi', 'mdrd', 'schwartz', 'cockcroft', 'ibw',
            'ckid_u25_creatinine', 'ckid_u25_cystatin', 'ckid_u25_combined'} <= set(names)


def test_formula_inputs():
    assert formula_inputs('ckd_epi') == ['creat', 'age', 'sex', 'ethnicity']
    assert formula_inputs('ckid_u25_combined') == ['cystatin', 'creat', 'age', 'sex', 'height']


def test_apply_with_column_mapping(cohort):
    out = apply_formula(cohort, 'ckid_u25_creatinine', columns={'creat': 'scr'})

    assert 'ckid_u25_creatinine' in out.columns
    assert 'ckid_u25_creatinine' not in cohort.columns
    assert out['ckid_u25_creatinine'].iloc[0] == pytest.approx(47.7)
    assert out['ckid_u25_creatinine'].iloc[1] == pytest.approx(78.1)


def test_apply_combined_verbose(cohort):
    out = apply_formula(
        cohort, 'ckid_u25_combined',
        columns={'creat': 'scr', 'cystatin': 'cysc'},
        verbose=True,
    )

    assert {'egfr_creatinine', 'egfr_cystatin', 'egfr_average'} <= set(out.columns)
    assert out.loc[1, 'egfr_average'] == pytest.approx(77.6)


def test_apply_options_pass_through():
    df = pd.DataFrame({'creat': [1.2, 0.8], 'age': [50, 60],
                       'sex': ['M', 'F'], 'ethnicity': ['non-black', 'black']})
    out = apply_formula(df, 'ckd_epi', result_col='egfr', units='US', offset=1)

    np.testing.assert_allclose(
        out['egfr'], ckd_epi(df['creat'], df['age'], df['sex'], df['ethnicity'],
                             units='US', offset=1)
    )


def test_apply_keeps_duplicate_index():
    df = pd.DataFrame({'height': [160, 180], 'sex': ['F', 'M']}, index=[7, 7])
    out = apply_formula(df, 'ibw')
    np.testing.assert_allclose(out['ibw'], [1.6 ** 2 * 21.5, 1.8 ** 2 * 23])


def test_apply_missing_column(cohort):
    with pytest.raises(EgfrAssertionError, match='creat'):
        apply_formula(cohort, 'ckid_u25_creatinine')


def test_apply_unknown_argument(cohort):
    with pytest.raises(EgfrAssertionError, match='weight'):
        apply_formula(cohort, 'ckid_u25_cystatin', columns={'weight': 'height'})


def test_apply_unknown_formula(cohort):
    with pytest.raises(KeyError, match='Unknown formula'):
        apply_formula(cohort, 'cg')


def test_gfr_category_scalar():
    assert gfr_category(95) == 'G1'
    assert gfr_category(60) == 'G2'
    assert gfr_category(47.7) == 'G3a'
    assert gfr_category(44.9) == 'G3b'
    assert gfr_category(15) == 'G4'
    assert gfr_category(14.9) == 'G5'
    assert gfr_category(np.nan) is None


def test_gfr_category_series():
    egfr = pd.Series([120.0, 50.0, np.nan, 8.0], index=list('wxyz'))
    result = gfr_category(egfr)

    assert list(result.index) == list('wxyz')
    assert result.tolist()[:2] == ['G1', 'G3a']
    assert pd.isna(result['y'])
    assert result['z'] == 'G5'
    # ordered from worst to best
    assert result.cat.codes['z'] < result.cat.codes['w']
