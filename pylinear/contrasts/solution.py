"""
Contrast solution type.

User-facing wrapper around Result[ContrastParams].
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats

from pylinear.core.result import Result
from pylinear.core.exceptions import SingularMatrixError
from pylinear.contrasts._common import ContrastParams, ContrastRow


@dataclass
class ContrastSolution:
    """
    Estimates, standard errors and tests for linear combinations c'β.
    """
    _result: Result[ContrastParams]

    @property
    def rows(self) -> tuple[ContrastRow, ...]:
        return self._result.params.rows

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(r.name for r in self.rows)

    @property
    def estimates(self) -> NDArray[np.floating[Any]]:
        return np.array([r.estimate for r in self.rows])

    @property
    def estimate(self) -> float:
        """The estimate of a single contrast."""
        if len(self.rows) != 1:
            raise ValueError(
                f"estimate is only defined for one contrast, got {len(self.rows)}; use estimates"
            )
        return self.rows[0].estimate

    @property
    def standard_errors(self) -> NDArray[np.floating[Any]]:
        return np.array([r.std_error for r in self.rows])

    @property
    def t_statistics(self) -> NDArray[np.floating[Any]]:
        return np.array([r.t_value for r in self.rows])

    @property
    def p_values(self) -> NDArray[np.floating[Any]]:
        return np.array([r.p_value for r in self.rows])

    @property
    def conf_int(self) -> NDArray[np.floating[Any]]:
        """Array of shape (k, 2)."""
        return np.array([[r.ci_lower, r.ci_upper] for r in self.rows])

    @property
    def weights(self) -> NDArray[np.floating[Any]]:
        return self._result.params.weights

    @property
    def df(self) -> int:
        return self._result.params.df

    @property
    def conf_level(self) -> float:
        return self._result.params.conf_level

    @property
    def adjust(self) -> str:
        return self._result.params.adjust

    def as_dict(self) -> dict[str, float]:
        """Estimates keyed by contrast name."""
        return {r.name: r.estimate for r in self.rows}

    def f_test(self) -> tuple[float, int, int, float]:
        """
        Joint Wald F-test that all contrasts equal their null values.

        F = (Lβ - r)' [L V L']⁻¹ (Lβ - r) / k on (k, n - p) degrees of freedom.

        Returns:
            (F, df1, df2, p_value)

        Raises:
            SingularMatrixError: If the contrasts are linearly dependent
        """
        params = self._result.params
        k = len(self.rows)
        diff = self.estimates - params.rhs
        if np.linalg.matrix_rank(params.weights) < k:
            raise SingularMatrixError(
                f"Contrasts are linearly dependent (rank "
                f"{np.linalg.matrix_rank(params.weights)} < {k})",
                matrix_name='L',
                rank=int(np.linalg.matrix_rank(params.weights)),
                expected_rank=k,
            )
        if params.df <= 0:
            return float('nan'), k, params.df, float('nan')
        f = float(diff @ np.linalg.solve(params.covariance, diff) / k)
        return f, k, params.df, float(sp_stats.f.sf(f, k, params.df))

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def summary(self) -> str:
        """Table of contrast estimates."""
        width = max([len(n) for n in self.names] + [8])
        level = int(round(self.conf_level * 100))
        lines = [
            "Linear Contrasts",
            "=" * (width + 62),
            f"{'Contrast':<{width}} {'Estimate':>11} {'Std. Error':>11} "
            f"{'t value':>8} {'Pr(>|t|)':>9} {f'{level}% CI':>19}",
        ]
        for r in self.rows:
            lines.append(
                f"{r.name:<{width}} {r.estimate:11.5g} {r.std_error:11.5g} "
                f"{r.t_value:8.3f} {r.p_value:9.3g} "
                f"[{r.ci_lower:8.4g}, {r.ci_upper:8.4g}]"
            )
        lines.append("-" * (width + 62))
        lines.append(f"Residual df: {self.df}")
        if self.adjust != 'none':
            lines.append(f"P-value adjustment: {self.adjust}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"ContrastSolution(k={len(self.rows)}, df={self.df})"
