"""Broadcasting helpers shared by all formulas.

Every formula accepts scalars, lists, numpy arrays or pandas Series for its
measurement inputs.  ``align_inputs`` turns them into positionally aligned
Series of a common length (length-1 inputs broadcast), and ``shape_result``
hands the result back in the caller's shape: a plain float when every input
was scalar, otherwise a Series carrying the index of the first Series input.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, Optional, Union

import numpy as np
import pandas as pd

from .assertions import broadcast_length, is_scalar

@dataclass
class AlignedInputs:
    """Positionally aligned inputs of one formula call."""

    columns: Dict[str, pd.Series]
    index: pd.Index
    scalar: bool

    def __getitem__(self, name: str) -> pd.Series:
        return self.columns[name]

    def __len__(self) -> int:
        return len(self.index)

    def values(self, name: str) -> np.ndarray:
        return self.columns[name].to_numpy()


def _result_index(inputs: Dict[str, Any], length: int) -> pd.Index:
    for value in inputs.values():
        if isinstance(value, pd.Series) and len(value) == length:
            return value.index
    return pd.RangeIndex(length)


def _to_array(value: Any, numeric: bool) -> np.ndarray:
    if isinstance(value, pd.Series):
        arr = value.to_numpy()
    elif is_scalar(value) or value is None:
        arr = np.array([value], dtype=object)
    elif isinstance(value, np.ndarray):
        arr = value.reshape(-1)
    else:
        arr = np.asarray(list(value), dtype=object)

    if numeric:
        return pd.to_numeric(pd.Series(arr), errors='coerce').to_numpy(dtype=float)
    return arr.astype(object)


def align_inputs(
    numeric: Dict[str, Any],
    categorical: Optional[Dict[str, Any]] = None,
) -> AlignedInputs:
    """Broadcast measurement and categorical inputs to one length.

    Args:
        numeric: Numeric inputs by argument name (coerced to float, invalid -> NaN)
        categorical: Per-observation string inputs such as ``sex``

    Returns:
        AlignedInputs with one Series per argument sharing a common index

    Raises:
        EgfrAssertionError: If the inputs cannot be broadcast together
    """
    categorical = categorical or {}
    everything = {**numeric, **categorical}
    length = broadcast_length(everything)
    index = _result_index(everything, length)

    columns = {}
    for name, value in everything.items():
        arr = _to_array(value, numeric=name in numeric)
        if len(arr) == 1 and length != 1:
            arr = np.repeat(arr, length)
        columns[name] = pd.Series(arr, index=index, name=name)

    scalar = all(is_scalar(v) for v in everything.values())
    return AlignedInputs(columns=columns, index=index, scalar=scalar)


def shape_result(values: Union[np.ndarray, pd.Series, Iterable[float]],
                 aligned: AlignedInputs,
                 name: Optional[str] = None) -> Union[float, pd.Series]:
    """Return ``values`` as a float for scalar calls, otherwise as a named Series."""
    if isinstance(values, pd.Series):
        values = values.to_numpy()
    values = np.asarray(values, dtype=float)
    if aligned.scalar:
        return float(values[0])
    return pd.Series(values, index=aligned.index, name=name)


def _half_up(value: float, quantum: Decimal) -> float:
    value = float(value)
    if not np.isfinite(value):
        return value
    # round(value, 10) drops float noise such as 77.64999999999999
    return float(Decimal(repr(round(value, 10))).quantize(quantum, rounding=ROUND_HALF_UP))


def round_half_up(values: Union[np.ndarray, Iterable[float]], digits: int = 1) -> np.ndarray:
    """Round to ``digits`` decimals, ties away from zero.

    ``np.round`` rounds ties to even (77.65 -> 77.6, 77.75 -> 77.8); reported
    eGFR values round ties up instead (77.65 -> 77.7).  Missing
    values stay missing.

    Examples:
        >>> round_half_up([50.15, 50.25, 77.65])
        array([50.2, 50.3, 77.7])
    """
    quantum = Decimal(1).scaleb(-digits)
    values = np.asarray(values, dtype=float)
    return np.array([_half_up(v, quantum) for v in values.ravel()],
                    dtype=float).reshape(values.shape)
