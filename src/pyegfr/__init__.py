"""pyegfr - kidney function formulas for tabular clinical data.

Vectorised, stateless implementations of the eGFR, creatinine clearance and
ideal body weight equations (CKD-EPI, MDRD, bedside Schwartz, Cockcroft-Gault,
CKiD U25).  Every formula accepts scalars, lists, numpy arrays or pandas
Series and returns values in the same shape, so it can be applied directly to
the columns of a patient table.
"""

from .categories import Ethnicity, Sex, UnitSystem, UnrecognizedCategoryWarning, parse_sex
from .assertions import EgfrAssertionError
from .unit_conversion import (
    UnitConverter,
    normalize_bilirubin,
    normalize_creatinine,
    normalize_cystatin,
)
from .formulas import (
    ckd_epi,
    ckd_epi_us,
    mdrd,
    mdrd_us,
    schwartz,
    schwartz_us,
    cockcroft,
    cockcroft_us,
    ibw,
)
from .ckid_u25 import (
    AgeRangeWarning,
    creatinine_coefficient,
    cystatin_coefficient,
    ckid_u25_creatinine_us,
    ckid_u25_cystatin_us,
    ckid_u25_combined_us,
    CKiD_U25_creatinine_US,
    CKiD_U25_cystatin_US,
    CKiD_U25_combined_US,
)
from .staging import GFR_CATEGORIES, gfr_category
from .frame import FORMULAS, apply_formula, list_formulas
from .config import EgfrDefaults, resolve_defaults
from .logging_utils import configure_logging

__version__ = "0.1.0"

__all__ = [
    # categorical inputs
    "Ethnicity",
    "Sex",
    "UnitSystem",
    "UnrecognizedCategoryWarning",
    "parse_sex",
    # errors
    "EgfrAssertionError",
    "AgeRangeWarning",
    # units
    "UnitConverter",
    "normalize_bilirubin",
    "normalize_creatinine",
    "normalize_cystatin",
    # formulas
    "ckd_epi",
    "ckd_epi_us",
    "mdrd",
    "mdrd_us",
    "schwartz",
    "schwartz_us",
    "cockcroft",
    "cockcroft_us",
    "ibw",
    "creatinine_coefficient",
    "cystatin_coefficient",
    "ckid_u25_creatinine_us",
    "ckid_u25_cystatin_us",
    "ckid_u25_combined_us",
    "CKiD_U25_creatinine_US",
    "CKiD_U25_cystatin_US",
    "CKiD_U25_combined_US",
    # staging and tables
    "GFR_CATEGORIES",
    "gfr_category",
    "FORMULAS",
    "apply_formula",
    "list_formulas",
    # configuration
    "EgfrDefaults",
    "resolve_defaults",
    "configure_logging",
]
