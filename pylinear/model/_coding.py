"""
Contrast coding for categorical covariates.

Handles the translation from factor labels to numeric design columns.

Key concepts:
    - Treatment (reference-group) coding: k-1 indicator columns, the
      reference level is absorbed into the intercept
    - Cell-means coding: k indicator columns, one per level, used when
      there is no intercept to absorb a baseline
    - Deviation coding: k-1 columns summing to zero across levels
    - Interaction: column-wise products of the coded margins
"""

from __future__ import annotations

import re
from typing import Any, Literal

import numpy as np
from numpy.typing import NDArray

from pylinear.core.exceptions import ValidationError
from pylinear.core.validation import format_label


Coding = Literal['treatment', 'deviation']
VALID_CODINGS = ('treatment', 'deviation')


def resolve_levels(
    labels: NDArray[np.str_],
    name: str,
    *,
    declared: list[str] | None = None,
    reference: str | None = None,
) -> list[str]:
    """
    Decide the level order of a factor.

    Declared order wins (unobserved declared levels are dropped), otherwise
    levels are sorted. A reference level, if given, is moved to the front.

    Raises:
        ValidationError: If observed labels are missing from the declared
            levels, the reference is not a level, or there is only one level
    """
    observed = set(labels.tolist())
    if declared is not None:
        declared = [format_label(v) for v in declared]
        missing = sorted(observed - set(declared))
        if missing:
            raise ValidationError(
                f"{name}: labels {missing} are not among the declared levels {declared}"
            )
        levels = [lv for lv in declared if lv in observed]
    else:
        levels = sorted(observed, key=natural_key)

    if reference is not None:
        reference = format_label(reference)
        if reference not in levels:
            raise ValidationError(
                f"{name}: reference level {reference!r} not found; levels are {levels}"
            )
        levels = [reference] + [lv for lv in levels if lv != reference]

    if len(levels) < 2:
        raise ValidationError(
            f"{name}: need at least 2 levels for a factor, got {len(levels)} ({levels})"
        )
    return levels


_DIGITS = re.compile(r"(\d+)")


def natural_key(level: str) -> tuple[int, Any, str]:
    """
    Natural sort key for level labels.

    Numeric labels sort by value and come first. Other labels compare digit
    runs as integers, so 'T2' < 'T10' and 'dose5mg' < 'dose20mg'.
    """
    try:
        return (0, float(level), level)
    except ValueError:
        pass
    # split() alternates text and digit runs, so positions always compare like with like
    parts = [int(p) if i % 2 else p for i, p in enumerate(_DIGITS.split(level))]
    return (1, parts, level)


def encode_treatment(
    labels: NDArray[np.str_],
    levels: list[str],
) -> tuple[NDArray[np.floating[Any]], list[str]]:
    """
    Treatment (reference-group) coding.

    Drops the first level (the baseline) and creates k-1 indicator columns.

    Returns:
        (X_coded, column_levels): (n, k-1) indicator matrix and the level
        each column indicates
    """
    coded = levels[1:]
    X = np.zeros((len(labels), len(coded)), dtype=np.float64)
    for j, level in enumerate(coded):
        X[:, j] = (labels == level).astype(np.float64)
    return X, coded


def encode_cell_means(
    labels: NDArray[np.str_],
    levels: list[str],
) -> tuple[NDArray[np.floating[Any]], list[str]]:
    """
    Cell-means (full indicator) coding: one column per level.

    Returns:
        (X_coded, levels): (n, k) indicator matrix and the level order
    """
    X = np.zeros((len(labels), len(levels)), dtype=np.float64)
    for j, level in enumerate(levels):
        X[:, j] = (labels == level).astype(np.float64)
    return X, list(levels)


def encode_deviation(
    labels: NDArray[np.str_],
    levels: list[str],
) -> tuple[NDArray[np.floating[Any]], list[str]]:
    """
    Deviation (sum-to-zero) coding.

    Each column sums to zero across levels. The last level gets -1 in all
    columns, so the intercept estimates the unweighted mean of level means.

    Returns:
        (X_coded, column_levels): (n, k-1) matrix and the coded levels
    """
    reference = levels[-1]
    coded = levels[:-1]
    X = np.zeros((len(labels), len(coded)), dtype=np.float64)
    for j, level in enumerate(coded):
        X[labels == level, j] = 1.0
        X[labels == reference, j] = -1.0
    return X, coded


def encode_factor(
    labels: NDArray[np.str_],
    levels: list[str],
    *,
    full: bool,
    coding: Coding,
) -> tuple[NDArray[np.floating[Any]], list[str]]:
    """Dispatch to the right encoder for one factor margin."""
    if full:
        return encode_cell_means(labels, levels)
    if coding == 'treatment':
        return encode_treatment(labels, levels)
    if coding == 'deviation':
        return encode_deviation(labels, levels)
    raise ValueError(f"coding must be one of {VALID_CODINGS}, got {coding!r}")


def interaction_columns(
    X_a: NDArray[np.floating[Any]],
    names_a: list[str],
    X_b: NDArray[np.floating[Any]],
    names_b: list[str],
) -> tuple[NDArray[np.floating[Any]], list[str]]:
    """
    Element-wise products of every column pair of two coded margins.

    Columns of X_a vary fastest, matching R's model.matrix() order.

    Returns:
        (X_int, names): (n, p_a * p_b) columns named ``a:b``
    """
    n = X_a.shape[0]
    p_a = X_a.shape[1]
    p_b = X_b.shape[1]
    X_int = np.empty((n, p_a * p_b), dtype=np.float64)
    names: list[str] = []

    col = 0
    for j in range(p_b):
        for i in range(p_a):
            X_int[:, col] = X_a[:, i] * X_b[:, j]
            names.append(f"{names_a[i]}:{names_b[j]}")
            col += 1

    return X_int, names
