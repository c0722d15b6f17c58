"""Adult and paediatric kidney function formulas.

Vectorised implementations of the classic creatinine-based equations:

- CKD-EPI (2009) and abbreviated four-variable MDRD eGFR
- Bedside Schwartz eGFR for children
- Cockcroft-Gault creatinine clearance
- Ideal body weight

Creatinine is taken in µmol/l by default (``units="SI"``) and in mg/dl with
``units="US"``; every ``*_us`` function is a wrapper fixing ``units="US"``.
Any other unit tag is treated like ``"US"``, i.e. the value is used as given.
Results are not rounded.
"""

from __future__ import annotations

from typing import Union

import numpy as np
import pandas as pd

from .assertions import assert_number
from .categories import Ethnicity, Sex, UnitSystem, parse_sex
from .unit_conversion import CREATININE_FACTOR, CREATININE_FACTOR_CKD_EPI, normalize_creatinine
from .vectorize import align_inputs, shape_result

Result = Union[float, pd.Series]


def _is_male(sex: pd.Series) -> np.ndarray:
    # warnings point past _is_male and the formula to its caller
    return parse_sex(sex, stacklevel=3).eq(Sex.MALE).to_numpy()


def _is_black(ethnicity: pd.Series) -> np.ndarray:
    return ethnicity.map(Ethnicity.parse).eq(Ethnicity.BLACK).to_numpy()


def _apply_offset(age: np.ndarray, offset: float) -> np.ndarray:
    assert_number(offset, f"offset must be a single number, got {offset!r}")
    # serial measurements, e.g. transplant follow-up
    if offset > 0:
        return age + offset
    return age


def ckd_epi(creat, age, sex, ethnicity, units: str = "SI", offset: float = 0) -> Result:
    """eGFR by the CKD-EPI equation.

    eGFR = 141 * min(Scr/κ, 1)^α * max(Scr/κ, 1)^-1.209 * 0.993^age
           * 1.018 [if female] * 1.159 [if black]

    with κ = 0.7 (female) / 0.9 (male) and α = -0.329 (female) / -0.411 (male).

    Args:
        creat: Serum creatinine in µmol/l (or mg/dl if units="US")
        age: Age in years (integers or decimals)
        sex: "F" for female, "M" for male
        ethnicity: "black" or "non-black"
        units: "SI" for µmol/l (default), "US" for mg/dl
        offset: Years added to age, for serial measurements

    Returns:
        eGFR in ml/min/1.73m²

    References:
        Levey AS, Stevens LA, Schmid CH, et al. A new equation to estimate
        glomerular filtration rate. Ann Intern Med 2009; 150(9):604-612.

    Examples:
        >>> ckd_epi(creat=120, age=45.2, sex="M", ethnicity="non-black")
        >>> ckd_epi(creat=1.5, age=64.3, sex="F", ethnicity="black", units="US")
    """
    aligned = align_inputs({"creat": creat, "age": age}, {"sex": sex, "ethnicity": ethnicity})
    male = _is_male(aligned['sex'])

    sexvar = np.where(male, 1.0, 1.018)
    alpha = np.where(male, -0.411, -0.329)
    kappa = np.where(male, 0.9, 0.7)

    scr = normalize_creatinine(aligned.values('creat'), units, factor=CREATININE_FACTOR_CKD_EPI)
    age_vals = _apply_offset(aligned.values('age'), offset)

    ratio = scr / kappa
    gfr = (141 * np.minimum(ratio, 1) ** alpha
           * np.maximum(ratio, 1) ** -1.209
           * 0.993 ** age_vals * sexvar)

    gfr = np.where(_is_black(aligned['ethnicity']), gfr * 1.159, gfr)
    return shape_result(gfr, aligned, name="egfr_ckd_epi")


def mdrd(creat, age, sex, ethnicity, units: str = "SI", offset: float = 0) -> Result:
    """eGFR by the abbreviated (four variable) MDRD equation.

    eGFR = 186 * Scr^-1.154 * age^-0.203 * 0.742 [if female] * 1.21 [if black]

    Args:
        creat: Serum creatinine in µmol/l (or mg/dl if units="US")
        age: Age in years
        sex: "F" for female, "M" for male
        ethnicity: "black" or "non-black"
        units: "SI" for µmol/l (default), "US" for mg/dl
        offset: Years added to age, for serial measurements

    Returns:
        eGFR in ml/min/1.73m²

    References:
        Levey AS, Greene T, Kusek JW, et al. A simplified equation to predict
        glomerular filtration rate from serum creatinine. J Am Soc Nephrol
        2000; 11:A0828.
    """
    aligned = align_inputs({"creat": creat, "age": age}, {"sex": sex, "ethnicity": ethnicity})
    sexvar = np.where(_is_male(aligned['sex']), 1.0, 0.742)

    scr = normalize_creatinine(aligned.values('creat'), units, factor=CREATININE_FACTOR_CKD_EPI)
    age_vals = _apply_offset(aligned.values('age'), offset)

    gfr = 186 * scr ** -1.154 * age_vals ** -0.203 * sexvar
    gfr = np.where(_is_black(aligned['ethnicity']), gfr * 1.21, gfr)
    return shape_result(gfr, aligned, name="egfr_mdrd")


def schwartz(creat, height, units: str = "SI") -> Result:
    """eGFR in children by the bedside Schwartz formula.

    SI: 36.5 * height / Scr[µmol/l]; US: 0.413 * height / Scr[mg/dl].

    Args:
        creat: Serum creatinine in µmol/l (or mg/dl if units="US")
        height: Height in cm
        units: "SI" for µmol/l (default), "US" for mg/dl

    References:
        Schwartz GJ, Munoz A, Schneider MF et al. New equations to estimate
        GFR in children with CKD. J Am Soc Nephrol 2009; 20(3):629-637.
    """
    aligned = align_inputs({"creat": creat, "height": height})
    k = 36.5 if UnitSystem.is_si(units) else 0.413

    gfr = k * aligned.values('height') / aligned.values('creat')
    return shape_result(gfr, aligned, name="egfr_schwartz")


def cockcroft(creat, age, sex, weight, units: str = "SI") -> Result:
    """Creatinine clearance by the Cockcroft-Gault equation.

    CrCl = (140 - age) * weight / (72 * Scr[mg/dl]) * 0.85 [if female]

    SI creatinine is converted with the factor 88.4.

    Args:
        creat: Serum creatinine in µmol/l (or mg/dl if units="US")
        age: Age in years
        sex: "F" for female, "M" for male
        weight: Weight in kg
        units: "SI" for µmol/l (default), "US" for mg/dl

    Returns:
        Creatinine clearance in ml/min

    References:
        Cockcroft DW, Gault MH. Prediction of creatinine clearance from serum
        creatinine. Nephron 1976; 16(1):31-41.

    Examples:
        >>> cockcroft(creat=88.4, age=25, sex="F", weight=60)
        81.458...
    """
    aligned = align_inputs({"creat": creat, "age": age, "weight": weight}, {"sex": sex})
    scr = normalize_creatinine(aligned.values('creat'), units, factor=CREATININE_FACTOR)

    sexvar = np.where(_is_male(aligned['sex']), 1.0, 0.85)
    crcl = sexvar * (140 - aligned.values('age')) * aligned.values('weight') / scr / 72
    return shape_result(crcl, aligned, name="crcl_cockcroft")


def ibw(height, sex) -> Result:
    """Adult ideal body weight in kg, assuming a BMI of 23 (male) or 21.5 (female).

    Examples:
        >>> ibw(height=183, sex="M")
        77.02...
    """
    aligned = align_inputs({"height": height}, {"sex": sex})
    bmivar = np.where(_is_male(aligned['sex']), 23.0, 21.5)

    height_m = aligned.values('height') / 100
    return shape_result(height_m ** 2 * bmivar, aligned, name="ibw")


def ckd_epi_us(creat, age, sex, ethnicity, offset: float = 0) -> Result:
    """CKD-EPI eGFR with creatinine in mg/dl."""
    return ckd_epi(creat, age, sex, ethnicity, units="US", offset=offset)


def mdrd_us(creat, age, sex, ethnicity, offset: float = 0) -> Result:
    """Abbreviated MDRD eGFR with creatinine in mg/dl."""
    return mdrd(creat, age, sex, ethnicity, units="US", offset=offset)


def schwartz_us(creat, height) -> Result:
    """Bedside Schwartz eGFR with creatinine in mg/dl."""
    return schwartz(creat, height, units="US")


def cockcroft_us(creat, age, sex, weight) -> Result:
    """Cockcroft-Gault creatinine clearance with creatinine in mg/dl."""
    return cockcroft(creat, age, sex, weight, units="US")
