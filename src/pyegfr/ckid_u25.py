"""
CKiD U25 eGFR equations for children and young adults.

The CKiD U25 equations replace the single bedside Schwartz constant with an
age- and sex-dependent coefficient:

**Creatinine based** (``eGFR = K * height[m] / Scr[mg/dl]``)

=============  ==========================  ==========================
Age band       Female K                    Male K
=============  ==========================  ==========================
< 12           36.1 * 1.008^(age - 12)     39.0 * 1.008^(age - 12)
12 to < 18     36.1 * 1.023^(age - 12)     39.0 * 1.045^(age - 12)
>= 18          41.4                        50.8
=============  ==========================  ==========================

**Cystatin C based** (``eGFR = K / CysC[mg/L]``)

=============  ==========================  ==========================
Age band       Female K                    Male K
=============  ==========================  ==========================
< 12           79.9 * 1.004^(age - 12)     87.2 * 1.011^(age - 15)
12 to < 15     79.9 * 0.974^(age - 12)     87.2 * 1.011^(age - 15)
15 to < 18     79.9 * 0.974^(age - 12)     87.2 * 0.960^(age - 15)
>= 18          77.1                        68.3
=============  ==========================  ==========================

The equations are validated for ages 1 to 25.  Observations outside that
range are still computed; a single :class:`AgeRangeWarning` is issued for the
batch.  All results are in ml/min/1.73m² and rounded to one decimal, ties
rounded up (77.65 -> 77.7).

References:
-----------
Pierce CB, Muñoz A, Ng DK, Warady BA, Furth SL, Schwartz GJ. Age- and
sex-dependent clinical equations to estimate glomerular filtration rates in
children and young adults with chronic kidney disease. Kidney International.
2021;99(4):948-956. doi:10.1016/j.kint.2020.10.047
"""

from typing import Any, List, Optional, Union
import warnings

import numpy as np
import pandas as pd

from .categories import Sex, parse_sex
from .parallel import map_observations
from .vectorize import AlignedInputs, align_inputs, round_half_up, shape_result

MIN_VALID_AGE = 1
MAX_VALID_AGE = 25

VERBOSE_COLUMNS = ["egfr_creatinine", "egfr_cystatin", "egfr_average"]


class AgeRangeWarning(UserWarning):
    """Some ages lie outside the range the equations were validated for."""


def creatinine_coefficient(age: float, sex: Any) -> float:
    """Coefficient K of the creatinine-based CKiD U25 equation for one observation."""
    if pd.isna(age):
        return np.nan
    female = Sex.parse(sex) is Sex.FEMALE

    if age < 12:
        return 36.1 * 1.008 ** (age - 12) if female else 39.0 * 1.008 ** (age - 12)
    elif age < 18:
        return 36.1 * 1.023 ** (age - 12) if female else 39.0 * 1.045 ** (age - 12)
    return 41.4 if female else 50.8


def cystatin_coefficient(age: float, sex: Any) -> float:
    """Coefficient K of the cystatin C-based CKiD U25 equation for one observation.

    Note the male exponents are centred on age 15 in every paediatric band,
    the female ones on age 12.
    """
    if pd.isna(age):
        return np.nan
    female = Sex.parse(sex) is Sex.FEMALE

    if age < 12:
        return 79.9 * 1.004 ** (age - 12) if female else 87.2 * 1.011 ** (age - 15)
    elif age < 15:
        return 79.9 * 0.974 ** (age - 12) if female else 87.2 * 1.011 ** (age - 15)
    elif age < 18:
        return 79.9 * 0.974 ** (age - 12) if female else 87.2 * 0.960 ** (age - 15)
    return 77.1 if female else 68.3


def check_age_range(age: Union[pd.Series, np.ndarray]) -> bool:
    """Warn once if any age of the batch is outside 1-25 years.

    Returns:
        True when every (non-missing) age is within range
    """
    ages = np.asarray(age, dtype=float)
    if ages.size == 0 or np.all(np.isnan(ages)):
        return True

    if np.nanmin(ages) < MIN_VALID_AGE or np.nanmax(ages) > MAX_VALID_AGE:
        n_out = int(np.sum((ages < MIN_VALID_AGE) | (ages > MAX_VALID_AGE)))
        msg = (
            f"there are age values <{MIN_VALID_AGE} or >{MAX_VALID_AGE} years "
            f"({n_out} observation(s)); for those children, eGFR values might be invalid"
        )
        warnings.warn(msg, AgeRangeWarning, stacklevel=3)
        return False
    return True


def _creatinine_egfr(aligned: AlignedInputs, sexes: List[Sex],
                     workers: Optional[int], chunk_size: Optional[int]) -> np.ndarray:
    coeff = map_observations(creatinine_coefficient, aligned.values('age'), sexes,
                             workers=workers, chunk_size=chunk_size)
    egfr = np.asarray(coeff, dtype=float) * (aligned.values('height') / 100) / aligned.values('creat')
    return round_half_up(egfr, 1)


def _cystatin_egfr(aligned: AlignedInputs, sexes: List[Sex],
                   workers: Optional[int], chunk_size: Optional[int]) -> np.ndarray:
    coeff = map_observations(cystatin_coefficient, aligned.values('age'), sexes,
                             workers=workers, chunk_size=chunk_size)
    egfr = np.asarray(coeff, dtype=float) / aligned.values('cystatin')
    return round_half_up(egfr, 1)


def ckid_u25_creatinine_us(
    creat,
    age,
    sex,
    height,
    *,
    workers: Optional[int] = None,
    chunk_size: Optional[int] = None,
) -> Union[float, pd.Series]:
    """Creatinine-based eGFR by the CKiD U25 equation (US units).

    Args:
        creat: Serum creatinine in mg/dl
        age: Age in years (integers or decimals)
        sex: ``"F"`` for female, ``"M"`` for male
        height: Height in cm
        workers: Threads used for coefficient selection on long batches
        chunk_size: Observations per thread task

    Returns:
        eGFR in ml/min/1.73m², rounded to one decimal

    Examples:
        >>> ckid_u25_creatinine_us(creat=1, age=12, sex="F", height=132)
        47.7
    """
    aligned = align_inputs({"creat": creat, "age": age, "height": height},
                           {"sex": sex})
    check_age_range(aligned.values('age'))
    sexes = parse_sex(aligned['sex'], stacklevel=2).tolist()

    egfr = _creatinine_egfr(aligned, sexes, workers, chunk_size)
    return shape_result(egfr, aligned, name="egfr_creatinine")


def ckid_u25_cystatin_us(
    cystatin,
    age,
    sex,
    *,
    workers: Optional[int] = None,
    chunk_size: Optional[int] = None,
) -> Union[float, pd.Series]:
    """Cystatin C-based eGFR by the CKiD U25 equation (US units).

    Args:
        cystatin: Serum cystatin C in mg/L
        age: Age in years
        sex: ``"F"`` for female, ``"M"`` for male

    Returns:
        eGFR in ml/min/1.73m², rounded to one decimal

    Examples:
        >>> ckid_u25_cystatin_us(cystatin=1, age=18, sex="F")
        77.1
    """
    aligned = align_inputs({"cystatin": cystatin, "age": age}, {"sex": sex})
    check_age_range(aligned.values('age'))
    sexes = parse_sex(aligned['sex'], stacklevel=2).tolist()

    egfr = _cystatin_egfr(aligned, sexes, workers, chunk_size)
    return shape_result(egfr, aligned, name="egfr_cystatin")


def ckid_u25_combined_us(
    cystatin,
    creat,
    age,
    sex,
    height,
    verbose=False,
    *,
    workers: Optional[int] = None,
    chunk_size: Optional[int] = None,
) -> Union[float, pd.Series, pd.DataFrame]:
    """Average of the creatinine- and cystatin C-based CKiD U25 eGFR (US units).

    Averaging both estimates approximates measured GFR better than either
    equation alone.  Both component estimates are rounded to one decimal
    before averaging and the average is rounded again.

    Args:
        cystatin: Serum cystatin C in mg/L
        creat: Serum creatinine in mg/dl
        age: Age in years
        sex: ``"F"`` for female, ``"M"`` for male
        height: Height in cm
        verbose: If truthy return all components instead of only the average

    Returns:
        The averaged eGFR, or with ``verbose=True`` a DataFrame with columns
        ``egfr_creatinine``, ``egfr_cystatin`` and ``egfr_average``

    Examples:
        >>> ckid_u25_combined_us(cystatin=1, creat=0.7, age=18, sex="F", height=132)
        77.6
    """
    aligned = align_inputs(
        {"cystatin": cystatin, "creat": creat, "age": age, "height": height},
        {"sex": sex},
    )
    check_age_range(aligned.values('age'))
    sexes = parse_sex(aligned['sex'], stacklevel=2).tolist()

    egfr_cr = _creatinine_egfr(aligned, sexes, workers, chunk_size)
    egfr_cys = _cystatin_egfr(aligned, sexes, workers, chunk_size)
    egfr_avg = round_half_up((egfr_cr + egfr_cys) / 2, 1)

    if verbose:
        return pd.DataFrame(
            {
                VERBOSE_COLUMNS[0]: egfr_cr,
                VERBOSE_COLUMNS[1]: egfr_cys,
                VERBOSE_COLUMNS[2]: egfr_avg,
            },
            index=aligned.index,
        )

    return shape_result(egfr_avg, aligned, name="egfr_average")


# Names used by the published R implementation
CKiD_U25_creatinine_US = ckid_u25_creatinine_us
CKiD_U25_cystatin_US = ckid_u25_cystatin_us
CKiD_U25_combined_US = ckid_u25_combined_us
