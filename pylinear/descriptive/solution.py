"""
Descriptive statistics solution types.

User-facing wrappers around Result[GroupMeansParams] and Result[CorTestParams].
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
import numpy as np
from numpy.typing import NDArray

from pylinear.core.result import Result
from pylinear.descriptive._common import CorTestParams, GroupCell, GroupMeansParams


@dataclass
class GroupMeansSolution:
    """Per-cell means, counts and standard deviations of a response."""
    _result: Result[GroupMeansParams]

    @property
    def response(self) -> str:
        return self._result.params.response

    @property
    def factors(self) -> tuple[str, ...]:
        return self._result.params.factors

    @property
    def factor_levels(self) -> dict[str, tuple[str, ...]]:
        return self._result.params.factor_levels

    @property
    def cells(self) -> tuple[GroupCell, ...]:
        return self._result.params.cells

    @property
    def grand_mean(self) -> float:
        return self._result.params.grand_mean

    @property
    def means(self) -> dict[tuple[str, ...] | str, float]:
        """
        Means keyed by level (one factor) or by level tuple (several factors).
        """
        if len(self.factors) == 1:
            return {c.levels[0]: c.mean for c in self.cells}
        return {c.levels: c.mean for c in self.cells}

    def mean(self, *levels: str) -> float:
        """Mean of one cell, e.g. ``mean('B', 'T2')``."""
        key = tuple(str(lv) for lv in levels)
        for cell in self.cells:
            if cell.levels == key:
                return cell.mean
        raise KeyError(f"No cell {key}; cells are {[c.levels for c in self.cells]}")

    def as_table(self) -> NDArray[np.floating[Any]]:
        """
        Means as an array with one axis per factor, in level order.

        Empty cells are NaN.
        """
        shape = tuple(len(self.factor_levels[f]) for f in self.factors)
        table = np.full(shape, np.nan)
        index = {
            f: {lv: i for i, lv in enumerate(self.factor_levels[f])} for f in self.factors
        }
        for cell in self.cells:
            pos = tuple(index[f][lv] for f, lv in zip(self.factors, cell.levels))
            table[pos] = cell.mean
        return table

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def summary(self) -> str:
        width = max([len(f) for f in self.factors] + [6])
        header = " ".join(f"{f:<{width}}" for f in self.factors)
        lines = [
            f"Group means of {self.response}",
            f"{header} {'n':>5} {'mean':>12} {'sd':>12}",
        ]
        for cell in self.cells:
            labels = " ".join(f"{lv:<{width}}" for lv in cell.levels)
            lines.append(f"{labels} {cell.n:>5} {cell.mean:12.6g} {cell.sd:12.6g}")
        lines.append(f"Grand mean: {self.grand_mean:.6g}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"GroupMeansSolution(response={self.response!r}, cells={len(self.cells)})"


@dataclass
class CorTestSolution:
    """Pearson's product-moment correlation test."""
    _result: Result[CorTestParams]

    @property
    def estimate(self) -> float:
        """Sample correlation r."""
        return self._result.params.estimate

    @property
    def statistic(self) -> float:
        """t statistic."""
        return self._result.params.statistic

    @property
    def df(self) -> int:
        return self._result.params.df

    @property
    def p_value(self) -> float:
        return self._result.params.p_value

    @property
    def conf_int(self) -> NDArray[np.floating[Any]] | None:
        return self._result.params.conf_int

    @property
    def conf_level(self) -> float:
        return self._result.params.conf_level

    @property
    def alternative(self) -> str:
        return self._result.params.alternative

    @property
    def n(self) -> int:
        return self._result.params.n

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def summary(self) -> str:
        """R-style htest print."""
        params = self._result.params
        alt_text = {
            "two.sided": "not equal to",
            "less": "less than",
            "greater": "greater than",
        }[params.alternative]
        lines = [
            "",
            "\tPearson's product-moment correlation",
            "",
            f"data:  {params.data_name}",
            f"t = {params.statistic:.4g}, df = {params.df}, p-value = {params.p_value:.4g}",
            f"alternative hypothesis: true correlation is {alt_text} 0",
        ]
        if params.conf_int is not None:
            lines.append(f"{params.conf_level * 100:g} percent confidence interval:")
            lines.append(f" {params.conf_int[0]:.7g} {params.conf_int[1]:.7g}")
        lines.extend(["sample estimates:", "      cor ", f"{params.estimate:.7g}", ""])
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"CorTestSolution(r={self.estimate:.4f}, p={self.p_value:.4g})"
