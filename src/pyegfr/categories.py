"""Categorical inputs shared by the kidney function formulas.

Sex, ethnicity and the unit system are plain strings in the clinical data the
formulas are applied to (``"F"``/``"M"``, ``"black"``/``"non-black"``,
``"SI"``/``"US"``).  The enums below give them explicit members while keeping
the permissive behaviour of the original equations: anything that is not
recognised as female is treated as male, and anything that is not ``"SI"`` is
treated as already being in US units.
"""

from __future__ import annotations

import logging
import warnings
from enum import Enum
from typing import Any, Iterable, List, Union

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


class UnrecognizedCategoryWarning(UserWarning):
    """Raised when a categorical value is outside its expected set."""


class Sex(str, Enum):
    FEMALE = "F"
    MALE = "M"

    @classmethod
    def parse(cls, value: Any) -> "Sex":
        """Map a raw value to a member; unknown values fall through to MALE."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().upper()
            if key in ("F", "FEMALE"):
                return cls.FEMALE
        return cls.MALE

    @classmethod
    def is_known(cls, value: Any) -> bool:
        if isinstance(value, cls):
            return True
        return isinstance(value, str) and value.strip().upper() in ("F", "M", "FEMALE", "MALE")


class Ethnicity(str, Enum):
    BLACK = "black"
    NON_BLACK = "non-black"

    @classmethod
    def parse(cls, value: Any) -> "Ethnicity":
        if isinstance(value, cls):
            return value
        if isinstance(value, str) and value.strip().lower() == cls.BLACK.value:
            return cls.BLACK
        return cls.NON_BLACK


class UnitSystem(str, Enum):
    SI = "SI"
    US = "US"

    @classmethod
    def is_si(cls, value: Any) -> bool:
        """True only for the SI tag; every other tag keeps values unconverted."""
        if isinstance(value, cls):
            return value is cls.SI
        if isinstance(value, str) and value == cls.SI.value:
            return True
        if not (isinstance(value, str) and value == cls.US.value):
            logger.debug("Unrecognised unit system %r, values are used unconverted", value)
        return False


def parse_sex(values: Union[pd.Series, Iterable, str], *, warn: bool = True,
              stacklevel: int = 1) -> Union[pd.Series, List[Sex], Sex]:
    """Parse sex indicator(s) into :class:`Sex` members.

    Unrecognised entries are mapped to :attr:`Sex.MALE`, matching the
    fall-through branch of the published equations.  When ``warn`` is set a
    single :class:`UnrecognizedCategoryWarning` lists the offending values.

    Args:
        values: Scalar, list/array or Series of raw sex values
        warn: Issue the warning for unrecognised values
        stacklevel: Frame the warning points at, counted from the caller of
            ``parse_sex`` as in :func:`warnings.warn`

    Returns:
        Members in the same container shape as the input
    """
    if isinstance(values, pd.Series):
        parsed = values.map(Sex.parse)
        raw = values.tolist()
    elif isinstance(values, (list, tuple, np.ndarray)):
        raw = list(values)
        parsed = [Sex.parse(v) for v in raw]
    else:
        raw = [values]
        parsed = Sex.parse(values)

    if warn:
        unknown = sorted({repr(v) for v in raw if not Sex.is_known(v)})
        if unknown:
            msg = (
                f"Unrecognised sex value(s) {', '.join(unknown)}; "
                "the male coefficients are used for those observations"
            )
            warnings.warn(msg, UnrecognizedCategoryWarning, stacklevel=stacklevel + 1)

    return parsed


__all__ = [
    "Ethnicity",
    "Sex",
    "UnitSystem",
    "UnrecognizedCategoryWarning",
    "parse_sex",
]
