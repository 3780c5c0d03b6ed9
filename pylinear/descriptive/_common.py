"""
Common data types for descriptive statistics.

Frozen parameter payloads that go inside Result[P] envelopes.
"""

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray


VALID_ALTERNATIVES = ("two.sided", "less", "greater")


@dataclass(frozen=True)
class GroupCell:
    """Summary of the response within one cell of the grouping factors."""
    levels: tuple[str, ...]
    n: int
    mean: float
    sd: float


@dataclass(frozen=True)
class GroupMeansParams:
    """Parameter payload for per-group means."""
    response: str
    factors: tuple[str, ...]
    factor_levels: dict[str, tuple[str, ...]]
    cells: tuple[GroupCell, ...]
    grand_mean: float


@dataclass(frozen=True)
class CorTestParams:
    """
    Parameter payload for Pearson's product-moment correlation test.

    Mirrors R's cor.test(): t = r·sqrt(n-2)/sqrt(1-r²) on n - 2 df, with a
    Fisher-z confidence interval (None when n < 4).
    """
    estimate: float
    statistic: float
    df: int
    p_value: float
    conf_int: NDArray[np.floating[Any]] | None
    conf_level: float
    alternative: str
    n: int
    data_name: str


@dataclass(frozen=True)
class ScaledVariable:
    """A centered and/or scaled vector with the constants that produced it."""
    values: NDArray[np.floating[Any]]
    center: float
    scale: float
