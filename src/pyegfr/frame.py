"""Apply kidney function formulas to patient tables.

Clinical datasets usually hold one row per patient or per measurement.  The
helpers here look up a formula by name, bind its measurement arguments to
DataFrame columns and append the result column(s) to a copy of the table.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

import numpy as np
import pandas as pd

from . import ckid_u25, formulas
from .assertions import assert_has_cols, assert_that, is_string

logger = logging.getLogger(__name__)

FORMULAS: Dict[str, Callable[..., Any]] = {
    "ckd_epi": formulas.ckd_epi,
    "ckd_epi_us": formulas.ckd_epi_us,
    "mdrd": formulas.mdrd,
    "mdrd_us": formulas.mdrd_us,
    "schwartz": formulas.schwartz,
    "schwartz_us": formulas.schwartz_us,
    "cockcroft": formulas.cockcroft,
    "cockcroft_us": formulas.cockcroft_us,
    "ibw": formulas.ibw,
    "ckid_u25_creatinine": ckid_u25.ckid_u25_creatinine_us,
    "ckid_u25_cystatin": ckid_u25.ckid_u25_cystatin_us,
    "ckid_u25_combined": ckid_u25.ckid_u25_combined_us,
}


def list_formulas() -> List[str]:
    """Names accepted by :func:`apply_formula`."""
    return sorted(FORMULAS)


def get_formula(name: str) -> Callable[..., Any]:
    try:
        return FORMULAS[name]
    except KeyError:
        raise KeyError(
            f"Unknown formula '{name}'. Available: {', '.join(list_formulas())}"
        ) from None


def formula_inputs(name: str) -> List[str]:
    """Measurement arguments of a formula, i.e. the ones without a default."""
    params = inspect.signature(get_formula(name)).parameters.values()
    return [
        p.name for p in params
        if p.default is inspect.Parameter.empty
        and p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    ]


def apply_formula(
    df: pd.DataFrame,
    formula: str,
    columns: Optional[Mapping[str, str]] = None,
    result_col: Optional[str] = None,
    **options: Any,
) -> pd.DataFrame:
    """Compute a formula for every row of ``df``.

    Args:
        df: Table with one observation per row
        formula: Formula name (see :data:`FORMULAS`)
        columns: Mapping of formula argument to column name; arguments not
            listed are looked up under their own name
        result_col: Name of the appended column (defaults to the formula
            name).  Ignored for multi-column results, whose columns are
            appended under their own names.
        **options: Non-vectorised options passed through, e.g. ``units``,
            ``offset`` or ``verbose``

    Returns:
        Copy of ``df`` with the result column(s) appended

    Raises:
        KeyError: Unknown formula name
        EgfrAssertionError: A required column is missing

    Examples:
        >>> df = pd.DataFrame({'creat': [1.0, 0.7], 'age': [12, 18],
        ...                    'sex': ['F', 'F'], 'height': [132, 132]})
        >>> apply_formula(df, 'ckid_u25_creatinine')['ckid_u25_creatinine'].tolist()
        [47.7, 78.1]
    """
    assert_that(is_string(formula), f"formula must be a name, got {formula!r}")
    func = get_formula(formula)
    columns = dict(columns or {})

    unknown = set(columns) - set(formula_inputs(formula))
    assert_that(not unknown, f"'{formula}' has no argument(s) {sorted(unknown)}")

    bound = {arg: columns.get(arg, arg) for arg in formula_inputs(formula)}
    assert_has_cols(
        df, list(bound.values()),
        f"Missing columns for '{formula}': "
        f"{[col for col in bound.values() if col not in df.columns]}",
    )

    logger.debug("Applying %s to %d rows (%s)", formula, len(df), bound)
    result = func(**{arg: df[col] for arg, col in bound.items()}, **options)

    out = df.copy()
    if isinstance(result, pd.DataFrame):
        for col in result.columns:
            out[col] = result[col].to_numpy()
    else:
        out[result_col or formula] = np.asarray(result, dtype=float)
    return out
