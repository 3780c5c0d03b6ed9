"""
Shared compute infrastructure for PyLinear.

Domain-specific backends live in {domain}/backends/. This package holds the
numeric pieces they share.

Submodules:
    timing: Execution timing utilities
    tolerances: Numerical tolerance tiers and thresholds
    linalg: Linear algebra kernels (QR)
"""

from pylinear.core.compute.timing import Timer, timed

__all__ = [
    "Timer",
    "timed",
]
