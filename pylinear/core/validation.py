"""
Argument checks shared by design construction, fitting and descriptive code.

Each check names the offending argument in its message and raises straight
away; nothing here silently repairs bad input. Numeric columns become
float64 arrays, categorical columns become string arrays.
"""

import numpy as np
from numpy.typing import ArrayLike, NDArray
from typing import Any

from pylinear.core.exceptions import ValidationError, DimensionError


def check_array(
    array: ArrayLike,
    name: str,
) -> NDArray[np.floating[Any]]:
    """
    Turn numeric input (a response, a covariate, a design) into float64.

    Booleans and integers are promoted. Strings and object arrays are
    rejected: categorical data goes through check_labels instead.

    Raises:
        ValidationError: If the input is not numeric
    """
    try:
        arr = np.asarray(array)
    except (ValueError, TypeError) as e:
        raise ValidationError(f"{name}: not convertible to a numeric array ({e})") from e

    if arr.dtype == object:
        raise ValidationError(
            f"{name}: got object dtype; mixed or non-numeric values cannot be a numeric column"
        )
    if arr.dtype.kind not in 'biuf':
        raise ValidationError(
            f"{name}: dtype {arr.dtype} is not numeric; use factor({name}) for labels"
        )
    if arr.dtype.kind != 'f':
        arr = arr.astype(np.float64)
    return arr


def check_labels(labels: ArrayLike, name: str) -> NDArray[np.str_]:
    """
    Convert categorical labels to a 1D string array.

    Numbers are accepted and turned into their string form, so that
    ``factor(dose)`` and a string column behave the same way.

    Raises:
        DimensionError: If labels are not 1D
        ValidationError: If labels contain missing values
    """
    arr = np.asarray(labels)
    if arr.ndim != 1:
        raise DimensionError(
            f"{name}: labels must be 1D, got shape {arr.shape}"
        )
    if arr.dtype.kind == 'f':
        if np.isnan(arr).any():
            raise ValidationError(f"{name}: contains missing labels (NaN)")
        # 1.0 -> "1" so integer-valued doses read naturally
        return np.array([_format_number(v) for v in arr])
    out = np.array([str(v) for v in arr], dtype=str)
    if np.isin(out, ('nan', 'None')).any():
        raise ValidationError(f"{name}: contains missing labels")
    return out


def format_label(value: Any) -> str:
    """
    String form of a single factor level, as check_labels writes it.

    Floats lose a trailing ".0", so 2.0 and 2 both name level "2".
    """
    if isinstance(value, (float, np.floating)):
        return _format_number(value)
    return str(value)


def _format_number(value: float) -> str:
    value = float(value)
    return str(int(value)) if value.is_integer() else repr(value)


def check_finite(array: NDArray[np.floating[Any]], name: str) -> None:
    """Raise ValidationError if ``array`` holds NaN or Inf, counting each."""
    bad = ~np.isfinite(array)
    if bad.any():
        n_nan = int(np.isnan(array).sum())
        n_inf = int(bad.sum()) - n_nan
        raise ValidationError(
            f"{name}: non-finite values ({n_nan} NaN, {n_inf} Inf)"
        )


def check_ndim(array: NDArray[np.floating[Any]], ndim: int, name: str) -> None:
    """Raise DimensionError unless ``array`` has exactly ``ndim`` axes."""
    if array.ndim != ndim:
        raise DimensionError(
            f"{name}: expected {ndim}D, got shape {array.shape}"
        )


def check_1d(array: NDArray[np.floating[Any]], name: str) -> None:
    check_ndim(array, 1, name)


def check_2d(array: NDArray[np.floating[Any]], name: str) -> None:
    check_ndim(array, 2, name)


def check_consistent_length(*arrays: NDArray, names: tuple[str, ...]) -> None:
    """
    Require every array to have the same number of rows.

    Raises:
        ValueError: If ``names`` does not label every array (caller bug)
        DimensionError: If row counts differ
    """
    if len(names) != len(arrays):
        raise ValueError(f"got {len(arrays)} arrays but {len(names)} names")
    rows = {name: arr.shape[0] for name, arr in zip(names, arrays)}
    if len(set(rows.values())) > 1:
        listing = ", ".join(f"{name}={n}" for name, n in rows.items())
        raise DimensionError(f"Row counts differ: {listing}")


def check_min_samples(array: NDArray, min_samples: int, name: str) -> None:
    """Raise ValidationError if ``array`` has fewer than ``min_samples`` rows."""
    n = array.shape[0]
    if n < min_samples:
        raise ValidationError(
            f"{name}: {n} observations, need at least {min_samples}"
        )


def check_conf_level(conf_level: float, name: str = 'conf_level') -> None:
    """Raise ValidationError unless 0 < conf_level < 1."""
    if not 0.0 < conf_level < 1.0:
        raise ValidationError(
            f"{name}: must be in (0, 1), got {conf_level!r}"
        )
