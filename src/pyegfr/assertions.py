"""Input validation and assertion utilities.

Provides the small set of assertion helpers used by the formulas: checks on
option types, on DataFrame columns and on the lengths of the measurement
vectors passed into one call.
"""

from typing import Any, Dict, List, Optional, Union
import pandas as pd
import numpy as np


class EgfrAssertionError(ValueError):
    """Raised when a call violates a precondition (shape, type, columns)."""
    pass


def assert_that(condition: bool, msg: Optional[str] = None) -> bool:
    """Assert a condition is True.

    Args:
        condition: Boolean condition to check
        msg: Optional error message

    Returns:
        True if condition is met

    Raises:
        EgfrAssertionError: If condition is False

    Examples:
        >>> assert_that(1 + 1 == 2)
        True
        >>> assert_that(False, "This should fail")
        EgfrAssertionError: This should fail
    """
    if not condition:
        if msg is None:
            msg = "Assertion failed"
        raise EgfrAssertionError(msg)
    return True


def is_string(x: Any) -> bool:
    """Check if x is a string."""
    return isinstance(x, str)


def is_scalar(x: Any) -> bool:
    """Check if x is a scalar value (strings count as scalars)."""
    return isinstance(x, (int, float, str, bool, np.integer, np.floating, np.bool_))


def is_number(x: Any) -> bool:
    """Check if x is a numeric scalar."""
    return isinstance(x, (int, float, np.integer, np.floating)) and not isinstance(x, (bool, np.bool_))


def input_length(x: Any) -> int:
    """Number of observations carried by a measurement input (scalars count as 1)."""
    if is_scalar(x) or x is None:
        return 1
    if isinstance(x, np.ndarray) and x.ndim == 0:
        return 1
    return len(x)


def broadcast_length(inputs: Dict[str, Any]) -> int:
    """Return the common observation count of named inputs.

    Inputs of length 1 broadcast against longer ones; any other mismatch is a
    usage error.

    Args:
        inputs: Mapping of argument name to measurement input

    Returns:
        The broadcast length (1 when every input is scalar)

    Raises:
        EgfrAssertionError: Listing each input and its length on mismatch
    """
    lengths = {name: input_length(value) for name, value in inputs.items()}
    sizes = {n for n in lengths.values() if n != 1}

    if len(sizes) > 1:
        detail = ", ".join(f"{name}={n}" for name, n in lengths.items())
        raise EgfrAssertionError(
            f"Inputs cannot be broadcast to a common length: {detail}"
        )

    return sizes.pop() if sizes else 1


def assert_number(x: Any, msg: Optional[str] = None):
    return assert_that(is_number(x), msg or f"Expected a single number, got {x!r}")


def assert_has_cols(df: pd.DataFrame, cols: Union[str, List[str]],
                    msg: Optional[str] = None):
    if isinstance(cols, str):
        cols = [cols]
    missing = [c for c in cols if c not in df.columns]
    return assert_that(len(missing) == 0,
                       msg or f"Missing required columns: {missing}")
