"""
Regression solution types.

Contains the parameter payload and user-facing solution wrapper.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING
import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats

from pylinear.core.result import Result
from pylinear.core.validation import check_array, check_conf_level, check_2d
from pylinear.core.exceptions import DimensionError

if TYPE_CHECKING:
    from pylinear.model.design import ModelDesign


SIGNIF_CODES = "Signif. codes:  0 '***' 0.001 '**' 0.01 '*' 0.05 '.' 0.1 ' ' 1"


@dataclass(frozen=True)
class LinearParams:
    """
    Parameter payload for linear regression.

    This is the immutable data computed by backends.
    """
    coefficients: NDArray[np.floating[Any]]
    residuals: NDArray[np.floating[Any]]
    fitted_values: NDArray[np.floating[Any]]
    rss: float
    tss: float
    rank: int
    df_residual: int
    unscaled_cov: NDArray[np.floating[Any]]   # (X'X)⁻¹


@dataclass(frozen=True)
class CoefficientRow:
    """One row of the coefficient table."""
    name: str
    estimate: float
    std_error: float
    t_value: float
    p_value: float


@dataclass
class LinearSolution:
    """
    User-facing regression results.

    Wraps the backend Result and provides accessors for coefficients by
    name, standard errors, t-statistics, p-values and confidence intervals.
    """
    _result: Result[LinearParams]
    _design: 'ModelDesign'

    # Cached computations
    _standard_errors: NDArray[np.floating[Any]] | None = None
    _t_statistics: NDArray[np.floating[Any]] | None = None

    @property
    def design(self) -> 'ModelDesign':
        return self._design

    @property
    def coefficients(self) -> NDArray[np.floating[Any]]:
        return self._result.params.coefficients

    @property
    def column_names(self) -> tuple[str, ...]:
        return self._design.column_names

    @property
    def coef(self) -> dict[str, float]:
        """Coefficients keyed by design column name."""
        return {
            name: float(b) for name, b in zip(self.column_names, self.coefficients)
        }

    @property
    def residuals(self) -> NDArray[np.floating[Any]]:
        return self._result.params.residuals

    @property
    def fitted_values(self) -> NDArray[np.floating[Any]]:
        return self._result.params.fitted_values

    @property
    def rss(self) -> float:
        return self._result.params.rss

    @property
    def tss(self) -> float:
        """Total sum of squares: about the mean with an intercept, about zero without."""
        return self._result.params.tss

    @property
    def rank(self) -> int:
        return self._result.params.rank

    @property
    def df_residual(self) -> int:
        return self._result.params.df_residual

    @property
    def n(self) -> int:
        return self._design.n

    @property
    def r_squared(self) -> float:
        if self.tss == 0:
            return 1.0 if self.rss == 0 else 0.0
        return 1.0 - (self.rss / self.tss)

    @property
    def adjusted_r_squared(self) -> float:
        df_int = 1 if self._design.has_intercept else 0
        if self.df_residual <= 0 or self.tss == 0:
            return self.r_squared
        return 1.0 - (1.0 - self.r_squared) * (self.n - df_int) / self.df_residual

    @property
    def sigma(self) -> float:
        """Residual standard error, sqrt(RSS / (n - p))."""
        df = self.df_residual
        if df <= 0:
            return float('nan')
        return float(np.sqrt(self.rss / df))

    # Alias
    residual_std_error = sigma

    @property
    def vcov(self) -> NDArray[np.floating[Any]]:
        """Covariance matrix of the coefficients, σ²(X'X)⁻¹."""
        return self.sigma ** 2 * self._result.params.unscaled_cov

    @property
    def standard_errors(self) -> NDArray[np.floating[Any]]:
        """
        Standard errors of coefficients.

        Computed as SE(β) = sqrt(diag(σ² (X'X)⁻¹)). NaN when there are no
        residual degrees of freedom.
        """
        if self._standard_errors is None:
            self._standard_errors = np.sqrt(np.diag(self.vcov))
        return self._standard_errors

    @property
    def t_statistics(self) -> NDArray[np.floating[Any]]:
        """t-statistics for coefficients."""
        if self._t_statistics is not None:
            return self._t_statistics

        se = self.standard_errors
        with np.errstate(divide='ignore', invalid='ignore'):
            t = self.coefficients / se
            t = np.where(np.isfinite(t), t, np.nan)
        self._t_statistics = t
        return self._t_statistics

    @property
    def p_values(self) -> NDArray[np.floating[Any]]:
        """Two-sided p-values against t with n - p degrees of freedom."""
        if self.df_residual <= 0:
            return np.full(len(self.coefficients), np.nan)
        return 2.0 * sp_stats.t.sf(np.abs(self.t_statistics), self.df_residual)

    def confint(self, level: float = 0.95) -> NDArray[np.floating[Any]]:
        """
        Confidence intervals for the coefficients.

        Args:
            level: Confidence level in (0, 1)

        Returns:
            Array of shape (p, 2) with lower and upper bounds
        """
        check_conf_level(level, 'level')
        if self.df_residual <= 0:
            return np.full((len(self.coefficients), 2), np.nan)
        q = sp_stats.t.ppf(0.5 + level / 2.0, self.df_residual)
        half = q * self.standard_errors
        return np.column_stack([self.coefficients - half, self.coefficients + half])

    @property
    def df_model(self) -> int:
        """Numerator degrees of freedom of the overall F-test."""
        return self.rank - (1 if self._design.has_intercept else 0)

    @property
    def f_statistic(self) -> float:
        """
        Overall F-statistic.

        Compares the model with the intercept-only model, or with the zero
        model when there is no intercept.
        """
        df1, df2 = self.df_model, self.df_residual
        if df1 <= 0 or df2 <= 0 or self.rss == 0:
            return float('nan')
        return float(((self.tss - self.rss) / df1) / (self.rss / df2))

    @property
    def f_p_value(self) -> float:
        f = self.f_statistic
        if np.isnan(f):
            return float('nan')
        return float(sp_stats.f.sf(f, self.df_model, self.df_residual))

    def predict(self, newdata: Any = None) -> NDArray[np.floating[Any]]:
        """
        Predicted values.

        Args:
            newdata: None for the fitted values; new data (DataFrame, dict,
                DataSource) for formula-built models; a matrix with the same
                columns for array-built models

        Returns:
            Predictions, shape (m,)
        """
        if newdata is None:
            return self.fitted_values
        if self._design.formula is None:
            X_new = check_array(newdata, 'newdata')
            if X_new.ndim == 1:
                X_new = X_new.reshape(1, -1)
            check_2d(X_new, 'newdata')
            if X_new.shape[1] != self._design.p:
                raise DimensionError(
                    f"newdata: expected {self._design.p} columns, got {X_new.shape[1]}"
                )
        else:
            X_new = self._design.encode(newdata)
        return X_new @ self.coefficients

    def coef_table(self) -> tuple[CoefficientRow, ...]:
        """Estimate, standard error, t value and p-value per coefficient."""
        return tuple(
            CoefficientRow(name, float(b), float(se), float(t), float(p))
            for name, b, se, t, p in zip(
                self.column_names, self.coefficients, self.standard_errors,
                self.t_statistics, self.p_values,
            )
        )

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def summary(self) -> str:
        """Generate R-style summary output."""
        design = self._design
        lines = ["Linear Regression Results", "=" * 72]
        if design.formula is not None:
            lines.append(f"Formula: {design.formula.text}")
        lines.extend([
            f"Observations: {design.n}",
            f"Coding: {design.coding}" + ("" if design.has_intercept else " (no intercept)"),
        ])
        for label, info in design.factors.items():
            lines.append(f"  {label}: levels {', '.join(info.levels)} (reference {info.reference})")

        q = np.quantile(self.residuals, [0.0, 0.25, 0.5, 0.75, 1.0])
        lines.extend([
            "",
            "Residuals:",
            "".join(f"{h:>12}" for h in ("Min", "1Q", "Median", "3Q", "Max")),
            "".join(f"{v:12.5g}" for v in q),
            "",
            "Coefficients:",
        ])

        width = max([len(name) for name in self.column_names] + [11])
        lines.append(
            f"{'':<{width}} {'Estimate':>12} {'Std. Error':>12} {'t value':>9} {'Pr(>|t|)':>10}"
        )
        for row in self.coef_table():
            lines.append(
                f"{row.name:<{width}} {row.estimate:12.6g} {_fmt(row.std_error, 12)} "
                f"{_fmt(row.t_value, 9, '.3f')} {_fmt_p(row.p_value):>10} {_stars(row.p_value)}"
            )
        lines.extend([
            "---",
            SIGNIF_CODES,
            "",
            f"Residual standard error: {self.sigma:.5g} on {self.df_residual} degrees of freedom",
            f"Multiple R-squared: {self.r_squared:.5g},  Adjusted R-squared: {self.adjusted_r_squared:.5g}",
        ])
        if not np.isnan(self.f_statistic):
            lines.append(
                f"F-statistic: {self.f_statistic:.5g} on {self.df_model} and "
                f"{self.df_residual} DF,  p-value: {_fmt_p(self.f_p_value)}"
            )
        lines.append("-" * 72)
        lines.append(f"Backend: {self.backend_name}")
        if self.timing:
            lines.append(f"Time: {self.timing.get('total_seconds', 0):.4f}s")
        for w in self.warnings:
            lines.append(f"Warning: {w}")

        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"LinearSolution(n={self._design.n}, p={self._design.p}, "
            f"rank={self.rank}, r_squared={self.r_squared:.4f})"
        )


def _fmt(value: float, width: int, spec: str = '.6g') -> str:
    if np.isnan(value):
        return f"{'NA':>{width}}"
    return f"{value:{width}{spec}}"


def _fmt_p(p: float) -> str:
    if np.isnan(p):
        return "NA"
    if p < 2e-16:
        return "<2e-16"
    return f"{p:.3g}"


def _stars(p: float) -> str:
    if np.isnan(p):
        return ""
    if p < 0.001:
        return "***"
    if p < 0.01:
        return "**"
    if p < 0.05:
        return "*"
    if p < 0.1:
        return "."
    return ""
