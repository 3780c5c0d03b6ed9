"""
Least-squares backend for fitted linear models.

Solves the normal equations X'X β = X'y through a QR decomposition of X
(LAPACK via NumPy/SciPy), reproducing the estimates of R's lm().
"""

from typing import Any
import numpy as np

from pylinear.core.result import Result
from pylinear.core.compute.timing import Timer
from pylinear.core.compute.tolerances import CONDITION_WARNING_THRESHOLD, select_tolerance
from pylinear.core.compute.linalg.qr import qr_cpu, qr_solve_cpu, qr_unscaled_covariance
from pylinear.model.design import ModelDesign
from pylinear.regression.solution import LinearParams


class CPUQRBackend:
    """
    Householder QR least squares on the CPU.

    Implements the Backend protocol for ModelDesign -> LinearParams.
    Full column rank is required; a rank-deficient design raises
    SingularMatrixError naming the rank found.
    """

    @property
    def name(self) -> str:
        return 'cpu_qr'

    def solve(self, design: ModelDesign) -> Result[LinearParams]:
        """
        Fit the design by least squares.

        Algorithm:
            1. Factor X = QR (reduced)
            2. Solve: β = R⁻¹ Q'y
            3. Compute (X'X)⁻¹ = R⁻¹R⁻ᵀ, residuals and fitted values

        Raises:
            SingularMatrixError: If X lacks full column rank
        """
        timer = Timer()
        timer.start()

        X = design.X
        y = design.y
        n, p = design.n, design.p
        warnings_list: list[str] = []

        with timer.section('qr_decomposition'):
            qr_result = qr_cpu(X, mode='reduced')

        with timer.section('solve'):
            coefficients = qr_solve_cpu(X, y, check_rank=True, qr_result=qr_result)
            unscaled_cov = qr_unscaled_covariance(qr_result)

        with timer.section('residuals'):
            fitted_values = X @ coefficients
            residuals = y - fitted_values

        with timer.section('statistics'):
            rss = float(residuals @ residuals)
            if design.has_intercept:
                tss = float(np.sum((y - np.mean(y)) ** 2))
            else:
                tss = float(y @ y)

        timer.stop()

        df_residual = n - qr_result.rank
        if df_residual == 0:
            warnings_list.append(
                "residual degrees of freedom is zero: standard errors, "
                "t-statistics and p-values are undefined"
            )
        elif rss <= np.finfo(np.float64).eps * max(tss, 1.0):
            warnings_list.append("essentially perfect fit: summary may be unreliable")
        ill_conditioned = qr_result.condition_number > CONDITION_WARNING_THRESHOLD
        tolerance = select_tolerance(ill_conditioned)
        if ill_conditioned:
            warnings_list.append(
                f"design matrix is ill-conditioned "
                f"(condition number {qr_result.condition_number:.3g}); "
                f"estimates are reliable to about rtol={tolerance.rtol:g}"
            )

        params = LinearParams(
            coefficients=coefficients,
            residuals=residuals,
            fitted_values=fitted_values,
            rss=rss,
            tss=tss,
            rank=qr_result.rank,
            df_residual=df_residual,
            unscaled_cov=unscaled_cov,
        )

        info: dict[str, Any] = {
            'method': 'qr',
            'rank': qr_result.rank,
            'condition_number': qr_result.condition_number,
            'tolerance': tolerance.name,
            'n': n,
            'p': p,
        }

        return Result(
            params=params,
            info=info,
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(warnings_list),
        )
