"""
Linear contrasts of a fitted model.

A contrast is a linear combination c'β of the coefficients. Its estimate
is c'β̂, its standard error sqrt(c' V c) with V = σ²(X'X)⁻¹, and its
t-statistic is tested on the model's n - p residual degrees of freedom.

Public API:
    contrast(solution, weights, ...)       one contrast
    contrasts(solution, {name: weights})   several at once
    cell_mean(solution, levels)            model-based mean of one cell
    cell_means(solution, by)               all cells of one or more factors
    simple_effect(solution, factor, level, at=...)
    pairwise(solution, factor, at=..., adjust=...)
"""

from __future__ import annotations

from itertools import product
from typing import Any, Literal, Mapping, Sequence
import numpy as np
from scipy import stats as sp_stats

from pylinear.core.result import Result
from pylinear.core.compute.timing import Timer
from pylinear.core.exceptions import ValidationError
from pylinear.core.validation import format_label
from pylinear.regression.solution import LinearSolution
from pylinear.contrasts._common import ContrastParams, ContrastRow
from pylinear.contrasts._p_adjust import p_adjust
from pylinear.contrasts.design import ContrastDesign, WeightSpec
from pylinear.contrasts.solution import ContrastSolution


Adjust = Literal['none', 'holm', 'bonferroni', 'BH', 'fdr']


def contrast(
    solution: LinearSolution,
    weights: WeightSpec,
    *,
    name: str | None = None,
    rhs: float = 0.0,
    conf_level: float = 0.95,
) -> ContrastSolution:
    """
    Estimate and test a single contrast c'β.

    Args:
        solution: Fitted model
        weights: Length-p vector, or {coefficient name: weight}
        name: Label for the contrast (default: built from the weights)
        rhs: Value of c'β under H0
        conf_level: Confidence level for the interval

    Example:
        >>> fit = lm("expression ~ treatment * time", data)
        >>> contrast(fit, {'treatmentB': 1, 'treatmentB:timeT2': 1}).estimate
    """
    spec: Mapping[str, WeightSpec] | Sequence[WeightSpec]
    spec = {name: weights} if name is not None else [weights]
    design = ContrastDesign.build(solution, spec, rhs=rhs, conf_level=conf_level)
    return _solve(solution, design, adjust='none')


def contrasts(
    solution: LinearSolution,
    weights: Mapping[str, WeightSpec] | Sequence[WeightSpec] | np.ndarray,
    *,
    rhs: float | Sequence[float] = 0.0,
    conf_level: float = 0.95,
    adjust: Adjust = 'none',
) -> ContrastSolution:
    """
    Estimate several contrasts at once.

    Args:
        weights: {name: weights}, a list of weights, or a (k, p) matrix
        adjust: p-value adjustment across the family ('none', 'holm',
            'bonferroni', 'BH'/'fdr')
    """
    if isinstance(weights, np.ndarray) and weights.ndim == 2:
        weights = list(weights)
    design = ContrastDesign.build(solution, weights, rhs=rhs, conf_level=conf_level)
    return _solve(solution, design, adjust=adjust)


def cell_mean(
    solution: LinearSolution,
    levels: Mapping[str, Any] | None = None,
    *,
    conf_level: float = 0.95,
) -> ContrastSolution:
    """
    Model-based mean of one cell.

    Factors not named sit at their reference level; continuous covariates
    not named sit at 0 on the model scale.

    Example:
        >>> cell_mean(fit, {'treatment': 'B', 'time': 'T2'}).estimate
    """
    levels = dict(levels or {})
    row = solution.design.design_row(levels)
    name = _cell_label(levels) or "reference cell"
    design = ContrastDesign.build(solution, {name: row}, conf_level=conf_level)
    return _solve(solution, design, adjust='none')


def cell_means(
    solution: LinearSolution,
    by: str | Sequence[str],
    *,
    at: Mapping[str, Any] | None = None,
    conf_level: float = 0.95,
) -> ContrastSolution:
    """
    Model-based means for every level combination of the ``by`` factors.

    Combinations are enumerated with the first factor varying slowest.
    Other covariates are held at ``at`` (default: reference / 0).
    """
    design_ = solution.design
    by = [by] if isinstance(by, str) else list(by)
    infos = [design_.factor(f) for f in by]
    at = dict(at or {})

    rows: dict[str, np.ndarray] = {}
    for combo in product(*(info.levels for info in infos)):
        values = dict(at)
        values.update({info.label: lv for info, lv in zip(infos, combo)})
        rows[_cell_label({info.label: lv for info, lv in zip(infos, combo)})] = (
            design_.design_row(values)
        )
    design = ContrastDesign.build(solution, rows, conf_level=conf_level)
    return _solve(solution, design, adjust='none')


def simple_effect(
    solution: LinearSolution,
    factor: str,
    level: str,
    *,
    at: Mapping[str, Any] | None = None,
    conf_level: float = 0.95,
) -> ContrastSolution:
    """
    Effect of moving ``factor`` from its reference level to ``level``.

    The other covariates are held at ``at`` (default: reference levels and
    0). With reference-group coding and an interaction, the simple effect
    at a non-reference level of the other factor is the main-effect
    coefficient plus the matching interaction coefficient.

    Example:
        >>> simple_effect(fit, 'treatment', 'B', at={'time': 'T2'}).estimate
        >>> # == coef['treatmentB'] + coef['treatmentB:timeT2']
    """
    design_ = solution.design
    info = design_.factor(factor)
    level = format_label(level)
    if level not in info.levels:
        raise ValidationError(
            f"{info.label}: unknown level {level!r}; levels are {list(info.levels)}"
        )
    at = dict(at or {})
    if info.label in at or info.column in at:
        raise ValidationError(f"at: cannot fix {info.label!r}, it is the factor being varied")

    base = dict(at)
    base[info.label] = info.reference
    moved = dict(at)
    moved[info.label] = level
    row = design_.design_row(moved) - design_.design_row(base)

    name = f"{info.label}{level} - {info.label}{info.reference}"
    if at:
        name += f" | {_cell_label(at)}"
    design = ContrastDesign.build(solution, {name: row}, conf_level=conf_level)
    return _solve(solution, design, adjust='none')


def pairwise(
    solution: LinearSolution,
    factor: str,
    *,
    at: Mapping[str, Any] | None = None,
    adjust: Adjust = 'none',
    conf_level: float = 0.95,
) -> ContrastSolution:
    """
    All pairwise level differences of a factor (later level minus earlier).

    Other covariates are held at ``at`` (default: reference levels and 0).
    """
    design_ = solution.design
    info = design_.factor(factor)
    at = dict(at or {})
    if info.label in at or info.column in at:
        raise ValidationError(f"at: cannot fix {info.label!r}, it is the factor being compared")

    means = {}
    for lv in info.levels:
        values = dict(at)
        values[info.label] = lv
        means[lv] = design_.design_row(values)

    rows: dict[str, np.ndarray] = {}
    levels = info.levels
    for i in range(len(levels)):
        for j in range(i + 1, len(levels)):
            g1, g2 = levels[i], levels[j]
            label = f"{g2} - {g1}"
            if at:
                label += f" | {_cell_label(at)}"
            rows[label] = means[g2] - means[g1]

    design = ContrastDesign.build(solution, rows, conf_level=conf_level)
    return _solve(solution, design, adjust=adjust)


def _solve(
    solution: LinearSolution,
    design: ContrastDesign,
    *,
    adjust: str,
) -> ContrastSolution:
    timer = Timer()
    timer.start()
    warnings_list: list[str] = []

    L = design.L
    df = solution.df_residual
    estimates = L @ solution.coefficients
    covariance = L @ solution.vcov @ L.T
    se = np.sqrt(np.diag(covariance))

    with np.errstate(divide='ignore', invalid='ignore'):
        t = (estimates - design.rhs) / se
        t = np.where(np.isfinite(t), t, np.nan)

    if df > 0:
        p = 2.0 * sp_stats.t.sf(np.abs(t), df)
        q = sp_stats.t.ppf(0.5 + design.conf_level / 2.0, df)
    else:
        warnings_list.append("no residual degrees of freedom: tests are undefined")
        p = np.full(design.k, np.nan)
        q = np.nan
    p = p_adjust(p, adjust)

    rows = tuple(
        ContrastRow(
            name=design.names[i],
            estimate=float(estimates[i]),
            std_error=float(se[i]),
            t_value=float(t[i]),
            p_value=float(p[i]),
            ci_lower=float(estimates[i] - q * se[i]),
            ci_upper=float(estimates[i] + q * se[i]),
        )
        for i in range(design.k)
    )
    timer.stop()

    params = ContrastParams(
        rows=rows,
        weights=L,
        rhs=design.rhs,
        covariance=covariance,
        df=df,
        conf_level=design.conf_level,
        adjust=adjust,
    )
    return ContrastSolution(_result=Result(
        params=params,
        info={'method': 'wald_t', 'k': design.k},
        timing=timer.result(),
        backend_name='cpu',
        warnings=tuple(warnings_list),
    ))


def _cell_label(values: Mapping[str, Any]) -> str:
    return ", ".join(f"{k}={format_label(v)}" for k, v in values.items())
