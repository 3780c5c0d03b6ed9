"""
Solver dispatch for regression.

This module provides the fit() and lm() functions (public API) and
backend selection.
"""

from __future__ import annotations

import warnings
from typing import Any, Literal, Mapping
from numpy.typing import ArrayLike

from pylinear.model._coding import Coding
from pylinear.model.design import ModelDesign
from pylinear.core.protocols import Backend
from pylinear.regression.solution import LinearParams, LinearSolution
from pylinear.regression.backends.cpu import CPUQRBackend


BackendChoice = Literal['auto', 'cpu', 'cpu_qr']


def fit(
    X: ArrayLike | ModelDesign,
    y: ArrayLike | None = None,
    *,
    backend: BackendChoice = 'auto',
    column_names: list[str] | tuple[str, ...] | None = None,
) -> LinearSolution:
    """
    Fit a linear model by ordinary least squares.

    Solves min_β ||y - Xβ||², i.e. β̂ = (X'X)⁻¹X'y, and reports standard
    errors, t-statistics and p-values on n - p degrees of freedom.

    Args:
        X: Design matrix (n x p) or a prebuilt ModelDesign
        y: Response vector (n,). Required unless X is a ModelDesign
        backend: 'auto', 'cpu' or 'cpu_qr' (all QR on the CPU)
        column_names: Names for the columns of an array X

    Returns:
        LinearSolution with coefficients, diagnostics, and summary methods

    Raises:
        ValidationError: If inputs are invalid
        DimensionError: If X and y have inconsistent dimensions
        SingularMatrixError: If X is rank-deficient

    Example:
        >>> X = np.column_stack([np.ones(100), rng.standard_normal(100)])
        >>> result = fit(X, X @ [1, 2] + rng.standard_normal(100),
        ...              column_names=['(Intercept)', 'x'])
        >>> result.coef['x']
    """
    if isinstance(X, ModelDesign):
        design = X
    else:
        if y is None:
            raise ValueError("y required when X is an array")
        design = ModelDesign.from_arrays(X, y, column_names=column_names)

    backend_impl = _get_backend(backend)
    result = backend_impl.solve(design)

    if result.has_warning("residual degrees of freedom is zero"):
        warnings.warn(
            f"Model has {design.p} coefficients for {design.n} observations; "
            f"no residual degrees of freedom remain for inference.",
            RuntimeWarning,
            stacklevel=2,
        )

    return LinearSolution(_result=result, _design=design)


def lm(
    formula: str,
    data: Any,
    *,
    coding: Coding = 'treatment',
    levels: Mapping[str, list[str]] | None = None,
    reference: Mapping[str, str] | str | None = None,
    backend: BackendChoice = 'auto',
) -> LinearSolution:
    """
    Fit a linear model described by a formula.

    Args:
        formula: e.g. ``"expression ~ treatment"``, ``"expression ~ 0 + treatment"``,
            ``"expression ~ treatment * time"``, ``"scale(y) ~ scale(x)"``
        data: DataSource, pandas DataFrame, dict of columns, or CSV path
        coding: 'treatment' (reference-group) or 'deviation' (sum-to-zero)
        levels: Level order per factor
        reference: Reference level per factor, or one level for a one-factor model
        backend: Computational backend

    Returns:
        LinearSolution whose coefficients are named after design columns
        (e.g. ``'treatmentB'``, ``'treatmentB:timeT2'``)

    Example:
        >>> result = lm("expression ~ treatment", "expression.csv")
        >>> result.coef['treatmentB']   # mean(B) - mean(A)
    """
    design = ModelDesign.from_formula(
        formula, data, coding=coding, levels=levels, reference=reference,
    )
    return fit(design, backend=backend)


def _get_backend(choice: BackendChoice) -> Backend[ModelDesign, LinearParams]:
    """
    Select and instantiate the appropriate backend.

    Raises:
        ValueError: If unknown backend specified
    """
    if choice in ('auto', 'cpu', 'cpu_qr'):
        return CPUQRBackend()
    raise ValueError(f"Unknown backend: {choice!r}")
