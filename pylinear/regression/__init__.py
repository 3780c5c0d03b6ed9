"""
Ordinary least-squares linear models.

Public API:
    lm(formula, data, ...) -> LinearSolution
    fit(X, y, ...) -> LinearSolution

Both entry points validate input, build a ModelDesign, select a backend,
and wrap the result.

Example:
    >>> from pylinear.regression import lm
    >>> result = lm("expression ~ treatment * time", data)
    >>> print(result.coef)
    >>> print(result.summary())
"""

from pylinear.regression.solution import LinearSolution, LinearParams, CoefficientRow
from pylinear.regression.solvers import fit, lm

__all__ = [
    "fit",
    "lm",
    "LinearSolution",
    "LinearParams",
    "CoefficientRow",
]
