"""
Multiple testing correction for families of contrasts, matching R's p.adjust().

Implements holm, bonferroni, BH (alias fdr) and none.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray, ArrayLike

from pylinear.core.exceptions import ValidationError

VALID_METHODS = ("holm", "bonferroni", "BH", "fdr", "none")


def p_adjust(p: ArrayLike, method: str = "holm") -> NDArray[np.floating]:
    """
    Adjust p-values for multiple comparisons.

    NaN p-values stay NaN and do not count towards the number of tests.
    Results are clipped to [0, 1].
    """
    if method not in VALID_METHODS:
        raise ValidationError(
            f"adjust must be one of {VALID_METHODS}, got {method!r}"
        )

    p_arr = np.asarray(p, dtype=np.float64).ravel()
    result = p_arr.copy()
    valid_idx = np.where(~np.isnan(p_arr))[0]
    if method == "none" or len(valid_idx) == 0:
        return result

    pv = p_arr[valid_idx]
    n = len(pv)

    if method == "bonferroni":
        adjusted = pv * n
    elif method == "holm":
        order = np.argsort(pv)
        stepped = np.maximum.accumulate((n - np.arange(n)) * pv[order])
        adjusted = np.empty(n)
        adjusted[order] = stepped
    else:
        order = np.argsort(pv)[::-1]
        ranks = np.arange(n, 0, -1)
        stepped = np.minimum.accumulate(n / ranks * pv[order])
        adjusted = np.empty(n)
        adjusted[order] = stepped

    result[valid_idx] = np.clip(adjusted, 0.0, 1.0)
    return result
