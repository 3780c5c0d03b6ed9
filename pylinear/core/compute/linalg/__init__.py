"""
Linear algebra kernels for PyLinear.

CPU implementations built on NumPy/SciPy (LAPACK under the hood). Each
operation returns a structured result dataclass and raises immediately on
failure.
"""

from pylinear.core.compute.linalg.qr import (
    QRResult,
    qr_cpu,
    qr_solve_cpu,
    qr_unscaled_covariance,
)

__all__ = [
    "QRResult",
    "qr_cpu",
    "qr_solve_cpu",
    "qr_unscaled_covariance",
]
