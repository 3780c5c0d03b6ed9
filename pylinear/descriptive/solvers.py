"""
Descriptive statistics: group means, Pearson correlation and its test,
and centering/scaling.

Public API:
    group_means(data, response, by) -> GroupMeansSolution
    cor(x, y) -> float
    cor_test(x, y, ...) -> CorTestSolution
    scale(x, ...) -> ScaledVariable
"""

from __future__ import annotations

from itertools import product
from typing import Any, Literal, Sequence
import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy import stats as sp_stats

from pylinear.core.datasource import DataSource
from pylinear.core.result import Result
from pylinear.core.compute.timing import Timer
from pylinear.core.exceptions import ValidationError
from pylinear.core.validation import (
    check_array,
    check_finite,
    check_1d,
    check_labels,
    check_consistent_length,
    check_min_samples,
    check_conf_level,
)
from pylinear.model._coding import natural_key
from pylinear.descriptive._common import (
    VALID_ALTERNATIVES,
    CorTestParams,
    GroupCell,
    GroupMeansParams,
    ScaledVariable,
)
from pylinear.descriptive.solution import CorTestSolution, GroupMeansSolution


Alternative = Literal['two.sided', 'less', 'greater']


def group_means(
    data: Any,
    response: str,
    by: str | Sequence[str],
) -> GroupMeansSolution:
    """
    Mean, count and standard deviation of ``response`` in each cell of ``by``.

    Args:
        data: DataSource, pandas DataFrame, dict of columns, or CSV path
        response: Numeric column to summarise
        by: Grouping column(s)

    Returns:
        GroupMeansSolution, cells enumerated in level order with the first
        factor varying slowest. Cells without observations have n=0 and
        NaN mean/sd.
    """
    timer = Timer()
    timer.start()
    source = DataSource.build(data)
    by = [by] if isinstance(by, str) else list(by)
    if not by:
        raise ValidationError("by: at least one grouping column is required")

    for col in [response] + by:
        if col not in source:
            raise ValidationError(
                f"Unknown column {col!r}; available: {sorted(source.keys())}"
            )
    if not source.is_numeric(response):
        raise ValidationError(f"{response}: response must be numeric")

    y = check_array(source[response], response)
    check_finite(y, response)
    check_min_samples(y, 1, response)

    labels = {f: check_labels(source[f], f) for f in by}
    factor_levels: dict[str, tuple[str, ...]] = {}
    for f in by:
        observed = set(labels[f].tolist())
        declared = source.levels(f)
        if declared is not None:
            factor_levels[f] = tuple(lv for lv in declared if lv in observed)
        else:
            factor_levels[f] = tuple(sorted(observed, key=natural_key))

    warnings_list: list[str] = []
    cells: list[GroupCell] = []
    for combo in product(*(factor_levels[f] for f in by)):
        mask = np.ones(len(y), dtype=bool)
        for f, lv in zip(by, combo):
            mask &= labels[f] == lv
        n = int(mask.sum())
        if n == 0:
            warnings_list.append(f"empty cell {combo}")
            cells.append(GroupCell(combo, 0, float('nan'), float('nan')))
            continue
        sd = float(np.std(y[mask], ddof=1)) if n > 1 else float('nan')
        cells.append(GroupCell(combo, n, float(np.mean(y[mask])), sd))

    timer.stop()
    params = GroupMeansParams(
        response=response,
        factors=tuple(by),
        factor_levels=factor_levels,
        cells=tuple(cells),
        grand_mean=float(np.mean(y)),
    )
    return GroupMeansSolution(_result=Result(
        params=params,
        info={'n': len(y), 'n_cells': len(cells)},
        timing=timer.result(),
        backend_name='cpu',
        warnings=tuple(warnings_list),
    ))


def _paired(x: ArrayLike, y: ArrayLike) -> tuple[NDArray, NDArray]:
    x_arr = check_array(x, 'x')
    y_arr = check_array(y, 'y')
    check_1d(x_arr, 'x')
    check_1d(y_arr, 'y')
    check_finite(x_arr, 'x')
    check_finite(y_arr, 'y')
    check_consistent_length(x_arr, y_arr, names=('x', 'y'))
    check_min_samples(x_arr, 2, 'x')
    for arr, name in ((x_arr, 'x'), (y_arr, 'y')):
        if np.ptp(arr) == 0:
            raise ValidationError(f"{name}: is constant; the correlation is undefined")
    return x_arr, y_arr


def cor(x: ArrayLike, y: ArrayLike) -> float:
    """
    Pearson correlation between two variables.

    Equals the slope of the simple regression of scale(y) on scale(x).
    """
    x_arr, y_arr = _paired(x, y)
    xc = x_arr - x_arr.mean()
    yc = y_arr - y_arr.mean()
    r = float(xc @ yc / np.sqrt((xc @ xc) * (yc @ yc)))
    return min(1.0, max(-1.0, r))


def cor_test(
    x: ArrayLike,
    y: ArrayLike,
    *,
    alternative: Alternative = 'two.sided',
    conf_level: float = 0.95,
    data_name: str = "x and y",
) -> CorTestSolution:
    """
    Test for association using Pearson's r. Matches R cor.test().

    t = r·sqrt(n-2)/sqrt(1-r²) on n - 2 degrees of freedom. This is the
    same t-statistic as the slope's in the simple regression of y on x.

    Raises:
        ValidationError: If fewer than 3 observations, constant input, or
            an invalid alternative / confidence level
    """
    if alternative not in VALID_ALTERNATIVES:
        raise ValidationError(
            f"alternative must be one of {VALID_ALTERNATIVES}, got {alternative!r}"
        )
    check_conf_level(conf_level)
    x_arr, y_arr = _paired(x, y)
    n = len(x_arr)
    if n < 3:
        raise ValidationError(f"x: requires at least 3 observations, got {n}")

    timer = Timer()
    timer.start()
    warnings_list: list[str] = []
    r = cor(x_arr, y_arr)
    df = n - 2

    if abs(r) == 1.0:
        warnings_list.append("perfect correlation: t statistic is infinite")
        t_stat = float(np.copysign(np.inf, r))
    else:
        t_stat = float(np.sqrt(df) * r / np.sqrt(1.0 - r * r))

    if alternative == 'two.sided':
        p_value = float(2.0 * sp_stats.t.sf(abs(t_stat), df))
    elif alternative == 'less':
        p_value = float(sp_stats.t.cdf(t_stat, df))
    else:
        p_value = float(sp_stats.t.sf(t_stat, df))

    conf_int = None
    if n > 3:
        z = np.arctanh(r) if abs(r) < 1.0 else np.copysign(np.inf, r)
        sigma = 1.0 / np.sqrt(n - 3)
        if alternative == 'two.sided':
            half = sigma * sp_stats.norm.ppf((1.0 + conf_level) / 2.0)
            conf_int = np.tanh(np.array([z - half, z + half]))
        elif alternative == 'less':
            conf_int = np.array([-1.0, np.tanh(z + sigma * sp_stats.norm.ppf(conf_level))])
        else:
            conf_int = np.array([np.tanh(z - sigma * sp_stats.norm.ppf(conf_level)), 1.0])
    timer.stop()

    params = CorTestParams(
        estimate=r,
        statistic=t_stat,
        df=df,
        p_value=min(p_value, 1.0),
        conf_int=conf_int,
        conf_level=conf_level,
        alternative=alternative,
        n=n,
        data_name=data_name,
    )
    return CorTestSolution(_result=Result(
        params=params,
        info={'method': 'pearson'},
        timing=timer.result(),
        backend_name='cpu',
        warnings=tuple(warnings_list),
    ))


def scale(
    x: ArrayLike,
    *,
    center: bool = True,
    scale: bool = True,
) -> ScaledVariable:
    """
    Center and/or scale a vector. Matches R scale() for one column.

    Scaling divides by the sample standard deviation (n - 1) when centered,
    and by the root mean square sqrt(Σx²/(n-1)) when not.
    """
    x_arr = check_array(x, 'x')
    check_1d(x_arr, 'x')
    check_finite(x_arr, 'x')
    check_min_samples(x_arr, 2, 'x')

    shift = float(np.mean(x_arr)) if center else 0.0
    centered = x_arr - shift
    factor = 1.0
    if scale:
        factor = float(np.sqrt(centered @ centered / (len(x_arr) - 1)))
        if factor == 0.0:
            raise ValidationError("x: is constant, cannot scale")
    return ScaledVariable(values=centered / factor, center=shift, scale=factor)
