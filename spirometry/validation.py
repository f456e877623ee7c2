"""
validation.py
=============
Input checks shared by both reference equations

Everything here either normalizes inputs or raises UsageError for the whole
call. Per-element problems (unparseable values, missing entries) are left
as NaN for the equations to propagate.
"""

import logging
import warnings
from enum import Enum
from typing import Any, Dict, Tuple, Type

import numpy as np
import pandas as pd

from .exceptions import ImplausibleHeightWarning, UsageError

logger = logging.getLogger(__name__)


def as_series(values: Any, name: str) -> pd.Series:
    """
    Wrap a scalar or 1-d array-like as a Series.

    Scalars (including strings and None) become length-1 vectors.
    """
    if isinstance(values, pd.Series):
        return values
    if isinstance(values, (str, bytes, Enum)) or np.ndim(values) == 0:
        return pd.Series([values])
    if np.ndim(values) != 1:
        raise UsageError(f"'{name}' must be a scalar or one-dimensional, got {np.ndim(values)} dimensions")
    return pd.Series(list(values))


def check_lengths(vectors: Dict[str, pd.Series]) -> int:
    """Common length of all vectors, or UsageError if they disagree"""
    lengths = {name: len(series) for name, series in vectors.items()}
    if len(set(lengths.values())) > 1:
        detail = ', '.join(f"{name}={length}" for name, length in lengths.items())
        raise UsageError(f"Input vectors must all have the same length ({detail})")
    return next(iter(lengths.values()), 0)


def resolve_measure(measure: Any, measure_type: Type[Enum], n: int) -> Enum:
    """
    Reduce a measure argument to a single enum member.

    Args:
        measure: a name or enum member, or a vector of them of length n
            whose elements are all identical
        measure_type: KnudsonMeasure or WangMeasure
        n: length of the other input vectors

    Raises:
        UsageError: unsupported name, mixed measures, or wrong length
    """
    supported = [m.value for m in measure_type]

    if measure is None:
        raise UsageError(f"measure is required (one of {', '.join(supported)})")

    if isinstance(measure, (str, Enum)):
        values = [measure]
    else:
        values = list(as_series(measure, 'measure'))

    names = [v.value if isinstance(v, Enum) else v for v in values]
    unsupported = [v for v in names if v not in supported]
    if unsupported or not names:
        raise UsageError(f"measure is only supported for {', '.join(supported)}; "
                         f"got {unsupported[:3] or 'nothing'}")

    if any(v != names[0] for v in names):
        raise UsageError(
            "measure of length > 1 is only supported if all are equal, "
            f"e.g. ({names[0]}, {names[0]}, ...) not ({', '.join(dict.fromkeys(names))})"
        )

    if len(names) not in (1, n):
        raise UsageError(f"measure must be length 1 or {n} (the length of the other inputs), "
                         f"got {len(names)}")

    return measure_type(names[0])


def to_float(values: Any) -> np.ndarray:
    """Float array with NaN wherever the input is missing or non-numeric"""
    series = values if isinstance(values, pd.Series) else pd.Series(values)
    numeric = pd.to_numeric(series, errors='coerce')
    return numeric.to_numpy(dtype=float, na_value=np.nan)


def to_nullable(values: np.ndarray, index: pd.Index, name: str) -> pd.Series:
    """Float array (NaN = missing) as a Float64 Series with <NA> markers"""
    return pd.Series(pd.array(values, dtype='Float64'), index=index, name=name)


def warn_implausible_height(height: np.ndarray, bounds: Tuple[float, float],
                            unit: str, equation: str) -> int:
    """
    Warn (never fail) when heights fall outside the plausible range.

    Returns:
        Number of out-of-range heights; missing heights are ignored
    """
    low, high = bounds
    with np.errstate(invalid='ignore'):
        outside = (height < low) | (height > high)
    n_outside = int(np.count_nonzero(outside))

    if n_outside:
        message = (
            f"{equation}: {n_outside} height value(s) above {high:g}{unit} and/or under "
            f"{low:g}{unit} were detected. This usually indicates the wrong unit "
            f"(correct: {unit}) or a data error which needs to be resolved."
        )
        logger.warning(message)
        warnings.warn(message, ImplausibleHeightWarning, stacklevel=4)

    return n_outside
