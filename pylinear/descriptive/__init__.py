"""
Descriptive statistics used to read linear models.

Public API:
    group_means(data, response, by) -> GroupMeansSolution
    cor(x, y) -> float
    cor_test(x, y, ...) -> CorTestSolution
    scale(x, ...) -> ScaledVariable
"""

from pylinear.descriptive.solvers import cor, cor_test, group_means, scale
from pylinear.descriptive.solution import CorTestSolution, GroupMeansSolution
from pylinear.descriptive._common import GroupCell, ScaledVariable

__all__ = [
    "cor",
    "cor_test",
    "group_means",
    "scale",
    "CorTestSolution",
    "GroupMeansSolution",
    "GroupCell",
    "ScaledVariable",
]
