"""
QR decomposition kernels.

Least squares through X = QR avoids forming X'X explicitly: the normal
equations X'X β = X'y reduce to the triangular system R β = Q'y, and
(X'X)⁻¹ = R⁻¹ R⁻ᵀ.
"""

from dataclasses import dataclass
from typing import Literal, Any
import numpy as np
from numpy.typing import NDArray
from scipy.linalg import solve_triangular

from pylinear.core.exceptions import SingularMatrixError
from pylinear.core.compute.tolerances import RANK_TOLERANCE


@dataclass(frozen=True)
class QRResult:
    """
    Result of QR decomposition.

    Attributes:
        Q: Orthogonal matrix (n x k where k = min(n, p) for reduced mode)
        R: Upper triangular matrix (k x p)
        rank: Numerical rank: columns whose |R_jj| exceeds RANK_TOLERANCE
            times their own norm
        condition_number: Ratio of largest to smallest |R_ii|, a cheap
            estimate of cond(X); inf when rank-deficient
    """
    Q: NDArray[np.floating[Any]]
    R: NDArray[np.floating[Any]]
    rank: int
    condition_number: float


def qr_cpu(
    X: NDArray[np.floating[Any]],
    mode: Literal['reduced', 'complete'] = 'reduced'
) -> QRResult:
    """
    QR decomposition using LAPACK (via NumPy).

    Args:
        X: Matrix to decompose (n x p)
        mode: 'reduced' for economy QR, 'complete' for full QR

    Returns:
        QRResult with Q, R, numerical rank and condition estimate
    """
    Q, R = np.linalg.qr(X, mode=mode)

    diag_R = np.abs(np.diag(R))
    # |R_jj| is the part of column j not explained by the columns before it
    col_norms = np.linalg.norm(X[:, :len(diag_R)], axis=0)
    rank = int(np.sum(diag_R > RANK_TOLERANCE * col_norms))

    if rank == X.shape[1] and rank > 0:
        condition_number = float(diag_R.max() / diag_R.min())
    else:
        condition_number = float('inf')

    return QRResult(Q=Q, R=R, rank=rank, condition_number=condition_number)


def _raise_rank_deficient(qr_result: QRResult, p: int) -> None:
    raise SingularMatrixError(
        f"Design matrix is rank-deficient: rank={qr_result.rank}, expected={p}. "
        f"This indicates perfect multicollinearity among the covariates.",
        matrix_name='X',
        condition_number=qr_result.condition_number,
        rank=qr_result.rank,
        expected_rank=p
    )


def qr_solve_cpu(
    X: NDArray[np.floating[Any]],
    y: NDArray[np.floating[Any]],
    check_rank: bool,
    qr_result: QRResult | None = None,
) -> NDArray[np.floating[Any]]:
    """
    Solve least squares via QR decomposition.

    Solves min_β ||y - Xβ||² as β = R⁻¹ Q'y.

    Args:
        X: Design matrix (n x p), n >= p
        y: Response vector (n,)
        check_rank: If True, raise SingularMatrixError on rank-deficient X
        qr_result: Precomputed decomposition of X, if available

    Returns:
        Coefficient vector β (p,)

    Raises:
        SingularMatrixError: If X is rank-deficient and check_rank=True
    """
    n, p = X.shape
    if qr_result is None:
        qr_result = qr_cpu(X, mode='reduced')

    if check_rank and qr_result.rank < p:
        _raise_rank_deficient(qr_result, p)

    Qty = qr_result.Q.T @ y
    return solve_triangular(qr_result.R[:p, :p], Qty[:p], lower=False)


def qr_unscaled_covariance(qr_result: QRResult) -> NDArray[np.floating[Any]]:
    """
    Compute (X'X)⁻¹ from the R factor.

    Multiplied by the residual variance this is the covariance matrix of
    the OLS coefficients.

    Raises:
        SingularMatrixError: If R is rank-deficient
    """
    p = qr_result.R.shape[1]
    if qr_result.rank < p:
        _raise_rank_deficient(qr_result, p)
    R_inv = solve_triangular(qr_result.R[:p, :p], np.eye(p), lower=False)
    return R_inv @ R_inv.T
