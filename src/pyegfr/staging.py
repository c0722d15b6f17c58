"""
KDIGO GFR categories.

Classifies eGFR results into the GFR categories of the KDIGO 2012 CKD
guideline:

- G1:  ≥ 90   normal or high
- G2:  60-89  mildly decreased
- G3a: 45-59  mildly to moderately decreased
- G3b: 30-44  moderately to severely decreased
- G4:  15-29  severely decreased
- G5:  < 15   kidney failure

References:
-----------
KDIGO 2012 Clinical Practice Guideline for the Evaluation and Management of
Chronic Kidney Disease. Kidney Int Suppl. 2013;3(1):1-150.
"""

from typing import Optional, Union

import numpy as np
import pandas as pd

GFR_CATEGORIES = ["G1", "G2", "G3a", "G3b", "G4", "G5"]


def _stage(egfr: pd.Series) -> pd.Series:
    stage = pd.Series(np.nan, index=egfr.index, dtype=object)

    # Lower bounds, applied from worst to best so later masks win
    stage[egfr < 15] = "G5"
    stage[egfr >= 15] = "G4"
    stage[egfr >= 30] = "G3b"
    stage[egfr >= 45] = "G3a"
    stage[egfr >= 60] = "G2"
    stage[egfr >= 90] = "G1"

    return pd.Series(
        pd.Categorical(stage, categories=GFR_CATEGORIES[::-1], ordered=True),
        index=egfr.index,
        name="gfr_category",
    )


def gfr_category(egfr: Union[float, list, np.ndarray, pd.Series]) -> Union[Optional[str], pd.Series]:
    """KDIGO GFR category of eGFR value(s) in ml/min/1.73m².

    Missing values stay missing.  The returned Series is an ordered
    categorical running from G5 (worst) to G1.

    Examples:
        >>> gfr_category(47.7)
        'G3a'
        >>> gfr_category(pd.Series([95, 12.5]))
        0    G1
        1    G5
    """
    if isinstance(egfr, pd.Series):
        return _stage(pd.to_numeric(egfr, errors='coerce'))

    if isinstance(egfr, (list, tuple, np.ndarray)):
        return _stage(pd.Series(np.asarray(egfr, dtype=float)))

    result = _stage(pd.Series([egfr], dtype=float)).iloc[0]
    return None if pd.isna(result) else str(result)
