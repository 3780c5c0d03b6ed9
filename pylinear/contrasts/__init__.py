"""
Linear contrasts: reading coefficients as group means, differences and
simple effects.

Public API:
    contrast(solution, weights, ...) -> ContrastSolution
    contrasts(solution, weights, ...) -> ContrastSolution
    cell_mean(solution, levels) -> ContrastSolution
    cell_means(solution, by) -> ContrastSolution
    simple_effect(solution, factor, level, at=...) -> ContrastSolution
    pairwise(solution, factor, ...) -> ContrastSolution
    p_adjust(p, method) -> ndarray
"""

from pylinear.contrasts.solvers import (
    cell_mean,
    cell_means,
    contrast,
    contrasts,
    pairwise,
    simple_effect,
)
from pylinear.contrasts.design import ContrastDesign
from pylinear.contrasts.solution import ContrastSolution
from pylinear.contrasts._common import ContrastParams, ContrastRow
from pylinear.contrasts._p_adjust import p_adjust

__all__ = [
    "cell_mean",
    "cell_means",
    "contrast",
    "contrasts",
    "pairwise",
    "simple_effect",
    "ContrastDesign",
    "ContrastSolution",
    "ContrastParams",
    "ContrastRow",
    "p_adjust",
]
