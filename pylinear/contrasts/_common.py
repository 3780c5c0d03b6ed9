"""
Common data types for linear contrasts.

Frozen parameter payloads that go inside Result[P] envelopes.
"""

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class ContrastRow:
    """One estimated linear combination c'β."""
    name: str
    estimate: float
    std_error: float
    t_value: float
    p_value: float
    ci_lower: float
    ci_upper: float


@dataclass(frozen=True)
class ContrastParams:
    """
    Parameter payload for one or more contrasts of a fitted model.

    Attributes:
        rows: One ContrastRow per contrast
        weights: (k, p) contrast matrix L
        rhs: (k,) hypothesised values under H0
        covariance: (k, k) covariance of Lβ, σ² L(X'X)⁻¹L'
        df: Residual degrees of freedom of the model
        conf_level: Confidence level of the intervals
        adjust: Multiple-comparison adjustment applied to p-values
    """
    rows: tuple[ContrastRow, ...]
    weights: NDArray[np.floating[Any]]
    rhs: NDArray[np.floating[Any]]
    covariance: NDArray[np.floating[Any]]
    df: int
    conf_level: float
    adjust: str
