"""
Model design: from a formula and a dataset to a design matrix.

ModelDesign expands categorical covariates into indicator columns according
to the chosen coding scheme, evaluates continuous covariates (optionally
centered or scaled), builds interaction columns, and remembers how it did
all of this so the same recipe can be applied to new data.

Which margins get contrasts follows R's model.matrix():
    - a factor in a term gets k-1 contrast columns when the term without
      that factor is also in the model (the intercept counts as the empty
      term), otherwise it gets k full indicator columns
    - without an intercept, the first factor that would get contrasts gets
      full indicators instead, so ``y ~ 0 + treatment`` is cell-means coded
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping
import numpy as np
from numpy.typing import ArrayLike, NDArray

from pylinear.core.datasource import DataSource
from pylinear.core.capabilities import CAPABILITY_MATERIALIZED, CAPABILITY_REPEATABLE
from pylinear.core.exceptions import FormulaError, ValidationError
from pylinear.core.validation import (
    check_array,
    check_finite,
    check_labels,
    check_1d,
    check_2d,
    check_consistent_length,
    check_min_samples,
    format_label,
)
from pylinear.model._formula import Formula, Variable, parse_formula
from pylinear.model._coding import (
    Coding,
    VALID_CODINGS,
    encode_factor,
    interaction_columns,
    resolve_levels,
)


INTERCEPT = '(Intercept)'

# Coding mode of one variable inside one term
MODE_NUMERIC = 'numeric'
MODE_CONTRAST = 'contrast'
MODE_FULL = 'full'


@dataclass(frozen=True)
class FactorInfo:
    """A categorical covariate and its level order (reference first)."""
    label: str
    column: str
    levels: tuple[str, ...]

    @property
    def reference(self) -> str:
        return self.levels[0]


@dataclass(frozen=True)
class CovariateInfo:
    """A continuous variable and the centering/scaling applied to it."""
    label: str
    column: str
    transform: str | None = None
    center: float = 0.0
    scale: float = 1.0

    def apply(self, values: NDArray[np.floating[Any]]) -> NDArray[np.floating[Any]]:
        return (values - self.center) / self.scale


@dataclass(frozen=True)
class TermSpec:
    """
    One model term and the columns it produced.

    Attributes:
        label: Term label as written in summaries ('treatment:time')
        parts: (variable label, mode) for each variable of the term
        column_names: Names of the design columns belonging to the term
    """
    label: str
    parts: tuple[tuple[str, str], ...]
    column_names: tuple[str, ...]


@dataclass(frozen=True)
class ModelDesign:
    """
    Design matrix with the metadata needed to interpret coefficients.

    Immutable after construction. Build with from_formula() or from_arrays().
    """
    X: NDArray[np.floating[Any]]
    y: NDArray[np.floating[Any]]
    column_names: tuple[str, ...]
    terms: tuple[TermSpec, ...]
    term_slices: dict[str, slice]
    factors: dict[str, FactorInfo]
    covariates: dict[str, CovariateInfo]
    response: str
    has_intercept: bool
    coding: Coding
    formula: Formula | None = None
    response_info: CovariateInfo | None = None
    source: DataSource | None = field(default=None, repr=False, compare=False)

    # === Construction ===

    @classmethod
    def from_formula(
        cls,
        formula: str | Formula,
        data: Any,
        *,
        coding: Coding = 'treatment',
        levels: Mapping[str, list[str]] | None = None,
        reference: Mapping[str, str] | str | None = None,
    ) -> ModelDesign:
        """
        Build a design from a model formula.

        Args:
            formula: e.g. ``"expression ~ treatment * time"``
            data: DataSource, pandas DataFrame, dict of columns, or CSV path
            coding: 'treatment' (reference-group) or 'deviation' (sum-to-zero)
                for factor margins that get contrasts
            levels: Level order per factor, keyed by column name or label
            reference: Reference level per factor (dict), or a single level
                when the model has exactly one factor

        Returns:
            ModelDesign ready for fitting

        Raises:
            FormulaError: If the formula is malformed or names unknown columns
            ValidationError: On bad levels, non-finite values, or too few rows
        """
        if coding not in VALID_CODINGS:
            raise ValidationError(f"coding must be one of {VALID_CODINGS}, got {coding!r}")

        parsed = parse_formula(formula)
        source = DataSource.build(data)

        if parsed.response is None:
            raise FormulaError(
                f"Formula {parsed.text!r} has no response; write 'y ~ ...'",
                formula=parsed.text,
            )
        if not parsed.terms and not parsed.intercept:
            raise FormulaError(
                f"Formula {parsed.text!r} has no intercept and no terms",
                formula=parsed.text,
            )

        for var in (parsed.response,) + parsed.variables:
            if var.name not in source:
                raise FormulaError(
                    f"Formula {parsed.text!r} refers to unknown column {var.name!r}; "
                    f"available: {sorted(source.keys())}",
                    formula=parsed.text,
                )

        factor_vars = [v for v in parsed.variables if _is_factor(v, source)]
        reference_map = _reference_map(reference, factor_vars)
        levels = dict(levels or {})

        factors: dict[str, FactorInfo] = {}
        covariates: dict[str, CovariateInfo] = {}
        values: dict[str, NDArray] = {}

        for var in parsed.variables:
            if var in factor_vars:
                labels = check_labels(source[var.name], var.label)
                declared = levels.get(var.label, levels.get(var.name, source.levels(var.name)))
                ref = reference_map.get(var.label, reference_map.get(var.name))
                lv = resolve_levels(labels, var.label, declared=declared, reference=ref)
                factors[var.label] = FactorInfo(var.label, var.name, tuple(lv))
                values[var.label] = labels
            else:
                info, transformed = _covariate(var, source)
                covariates[var.label] = info
                values[var.label] = transformed

        unused = set(reference_map) - set(factors) - {f.column for f in factors.values()}
        if unused:
            raise ValidationError(
                f"reference: {sorted(unused)} are not factors in {parsed.text!r}"
            )

        if _is_factor(parsed.response, source):
            raise FormulaError(
                f"Response {parsed.response.label!r} must be numeric",
                formula=parsed.text,
            )
        response_info, y = _covariate(parsed.response, source)

        modes = _term_modes(parsed, factors)
        n = source.n_observations
        X, column_names, terms = _assemble(
            parsed, modes, factors, values, n, coding,
        )
        term_slices = _slices(terms, parsed.intercept)

        check_min_samples(X, X.shape[1], 'X')

        return cls(
            X=X,
            y=y,
            column_names=tuple(column_names),
            terms=tuple(terms),
            term_slices=term_slices,
            factors=factors,
            covariates=covariates,
            response=parsed.response.label,
            has_intercept=parsed.intercept,
            coding=coding,
            formula=parsed,
            response_info=response_info,
            source=source,
        )

    @classmethod
    def from_arrays(
        cls,
        X: ArrayLike,
        y: ArrayLike,
        *,
        column_names: list[str] | tuple[str, ...] | None = None,
    ) -> ModelDesign:
        """
        Wrap an already-built design matrix.

        A column of ones named '(Intercept)' marks the model as having an
        intercept; otherwise none is assumed.
        """
        X_arr = check_array(X, 'X')
        y_arr = check_array(y, 'y')
        if X_arr.ndim == 1:
            X_arr = X_arr.reshape(-1, 1)
        if y_arr.ndim == 2 and y_arr.shape[1] == 1:
            y_arr = y_arr.ravel()

        check_2d(X_arr, 'X')
        check_1d(y_arr, 'y')
        check_finite(X_arr, 'X')
        check_finite(y_arr, 'y')
        check_consistent_length(X_arr, y_arr, names=('X', 'y'))

        n, p = X_arr.shape
        check_min_samples(X_arr, p, 'X')

        if column_names is None:
            column_names = tuple(f"x{j + 1}" for j in range(p))
        column_names = tuple(str(c) for c in column_names)
        if len(column_names) != p:
            raise ValidationError(
                f"column_names: expected {p} names, got {len(column_names)}"
            )
        if len(set(column_names)) != p:
            raise ValidationError(f"column_names: duplicates in {list(column_names)}")

        has_intercept = INTERCEPT in column_names
        terms = tuple(
            TermSpec(name, ((name, MODE_NUMERIC),), (name,))
            for name in column_names if name != INTERCEPT
        )
        term_slices = {name: slice(j, j + 1) for j, name in enumerate(column_names)}

        return cls(
            X=X_arr,
            y=y_arr,
            column_names=column_names,
            terms=terms,
            term_slices=term_slices,
            factors={},
            covariates={},
            response='y',
            has_intercept=has_intercept,
            coding='treatment',
        )

    # === Properties ===

    @property
    def n(self) -> int:
        """Number of observations."""
        return self.X.shape[0]

    @property
    def p(self) -> int:
        """Number of design columns."""
        return self.X.shape[1]

    @property
    def term_names(self) -> tuple[str, ...]:
        names = tuple(t.label for t in self.terms)
        return ((INTERCEPT,) + names) if self.has_intercept else names

    @property
    def factor_levels(self) -> dict[str, list[str]]:
        return {label: list(f.levels) for label, f in self.factors.items()}

    @property
    def reference_levels(self) -> dict[str, str]:
        return {label: f.reference for label, f in self.factors.items()}

    def supports(self, capability: str) -> bool:
        """Check if underlying data supports a capability."""
        if self.source is not None:
            return self.source.supports(capability)
        return capability in (CAPABILITY_MATERIALIZED, CAPABILITY_REPEATABLE)

    def XtX(self) -> NDArray[np.floating[Any]]:
        """Compute X'X."""
        return self.X.T @ self.X

    def Xty(self) -> NDArray[np.floating[Any]]:
        """Compute X'y."""
        return self.X.T @ self.y

    def column_index(self, name: str) -> int:
        """Position of a named design column."""
        try:
            return self.column_names.index(name)
        except ValueError:
            raise ValidationError(
                f"Unknown coefficient {name!r}; available: {list(self.column_names)}"
            ) from None

    def factor(self, name: str) -> FactorInfo:
        """Look up a factor by label ('factor(dose)') or column name ('dose')."""
        if name in self.factors:
            return self.factors[name]
        for info in self.factors.values():
            if info.column == name:
                return info
        raise ValidationError(
            f"{name!r} is not a factor of this model; factors: {sorted(self.factors)}"
        )

    # === Re-encoding ===

    def encode(self, data: Any) -> NDArray[np.floating[Any]]:
        """
        Apply this design's recipe to new data.

        Factor levels, reference levels and centering/scaling constants are
        taken from the original fit, not recomputed from ``data``.

        Raises:
            ValidationError: On unseen factor levels or missing columns
        """
        if self.formula is None:
            raise ValidationError(
                "Design was built from arrays; pass a design matrix instead of data"
            )
        source = DataSource.build(data)
        values: dict[str, NDArray] = {}
        for label, info in self.factors.items():
            values[label] = self._new_labels(info, _column(source, info.column))
        for label, cov in self.covariates.items():
            raw = check_array(_column(source, cov.column), cov.column)
            check_finite(raw, cov.column)
            values[label] = cov.apply(raw)
        return self._rebuild(values, source.n_observations)

    def design_row(self, values: Mapping[str, Any] | None = None) -> NDArray[np.floating[Any]]:
        """
        Design-matrix row for one combination of covariate values.

        Factors not mentioned sit at their reference level; continuous
        covariates not mentioned sit at 0 on the model scale (their mean when
        centered or scaled). Keys may be labels or column names.

        Returns:
            Array of shape (p,)
        """
        if self.formula is None:
            raise ValidationError("Design was built from arrays; it has no covariate recipe")
        values = dict(values or {})
        known = set(self.factors) | set(self.covariates)
        known |= {f.column for f in self.factors.values()}
        known |= {c.column for c in self.covariates.values()}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValidationError(
                f"Unknown covariates {unknown}; model has {sorted(self.factors) + sorted(self.covariates)}"
            )

        row: dict[str, NDArray] = {}
        for label, info in self.factors.items():
            level = values.get(label, values.get(info.column, info.reference))
            row[label] = self._new_labels(info, np.array([level]))
        for label, cov in self.covariates.items():
            if label in values or cov.column in values:
                raw = float(values.get(label, values.get(cov.column)))
                row[label] = cov.apply(np.array([raw]))
            else:
                row[label] = np.zeros(1)
        return self._rebuild(row, 1)[0]

    def _new_labels(self, info: FactorInfo, raw: Any) -> NDArray[np.str_]:
        labels = check_labels(raw, info.label)
        unseen = sorted(set(labels.tolist()) - set(info.levels))
        if unseen:
            raise ValidationError(
                f"{info.label}: levels {unseen} were not present when the model was built "
                f"(known: {list(info.levels)})"
            )
        return labels

    def _rebuild(self, values: dict[str, NDArray], n: int) -> NDArray[np.floating[Any]]:
        modes = {t.label: t.parts for t in self.terms}
        X, _, _ = _assemble(self.formula, modes, self.factors, values, n, self.coding)
        return X


# =====================================================================
# Helpers
# =====================================================================


def _column(source: DataSource, name: str) -> NDArray:
    if name not in source:
        raise ValidationError(
            f"New data is missing column {name!r}; available: {sorted(source.keys())}"
        )
    return source[name]


def _is_factor(var: Variable, source: DataSource) -> bool:
    if var.transform == 'factor':
        return True
    return not source.is_numeric(var.name)


def _reference_map(
    reference: Mapping[str, str] | str | None,
    factor_vars: list[Variable],
) -> dict[str, str]:
    if reference is None:
        return {}
    if isinstance(reference, str):
        if len(factor_vars) != 1:
            raise ValidationError(
                f"reference: a single level is ambiguous with {len(factor_vars)} factors; "
                f"pass a dict of factor -> level"
            )
        return {factor_vars[0].label: reference}
    return {str(k): format_label(v) for k, v in reference.items()}


def _covariate(var: Variable, source: DataSource) -> tuple[CovariateInfo, NDArray]:
    if not source.is_numeric(var.name):
        raise FormulaError(
            f"{var.label}: column {var.name!r} is not numeric",
            formula=None,
        )
    raw = check_array(source[var.name], var.name)
    check_finite(raw, var.name)

    center, scale = 0.0, 1.0
    if var.transform in ('scale', 'center'):
        center = float(np.mean(raw))
    if var.transform == 'scale':
        if len(raw) < 2:
            raise ValidationError(f"{var.label}: need at least 2 values to scale")
        scale = float(np.std(raw, ddof=1))
        if scale == 0.0:
            raise ValidationError(f"{var.label}: column {var.name!r} is constant, cannot scale")

    info = CovariateInfo(var.label, var.name, var.transform, center, scale)
    return info, info.apply(raw)


def _term_modes(
    formula: Formula,
    factors: dict[str, FactorInfo],
) -> dict[str, tuple[tuple[str, str], ...]]:
    """Decide, per term and variable, numeric / contrast / full coding."""
    present = {frozenset(v.label for v in t.variables) for t in formula.terms}
    present.add(frozenset())
    adjusted = formula.intercept

    modes: dict[str, tuple[tuple[str, str], ...]] = {}
    for term in formula.terms:
        key = frozenset(v.label for v in term.variables)
        parts: list[tuple[str, str]] = []
        for var in term.variables:
            if var.label not in factors:
                parts.append((var.label, MODE_NUMERIC))
                continue
            mode = MODE_CONTRAST if (key - {var.label}) in present else MODE_FULL
            if mode == MODE_CONTRAST and not adjusted:
                mode = MODE_FULL
                adjusted = True
            parts.append((var.label, mode))
        modes[term.label] = tuple(parts)
    return modes


def _assemble(
    formula: Formula,
    modes: dict[str, tuple[tuple[str, str], ...]],
    factors: dict[str, FactorInfo],
    values: dict[str, NDArray],
    n: int,
    coding: Coding,
) -> tuple[NDArray[np.floating[Any]], list[str], list[TermSpec]]:
    columns: list[NDArray] = []
    names: list[str] = []
    terms: list[TermSpec] = []

    if formula.intercept:
        columns.append(np.ones((n, 1), dtype=np.float64))
        names.append(INTERCEPT)

    for term in formula.terms:
        parts = modes[term.label]
        X_term: NDArray | None = None
        term_names: list[str] = []
        for label, mode in parts:
            if mode == MODE_NUMERIC:
                X_var = np.asarray(values[label], dtype=np.float64).reshape(-1, 1)
                var_names = [label]
            else:
                info = factors[label]
                X_var, coded = encode_factor(
                    values[label], list(info.levels),
                    full=(mode == MODE_FULL), coding=coding,
                )
                var_names = [f"{label}{lv}" for lv in coded]
            if X_term is None:
                X_term, term_names = X_var, var_names
            else:
                X_term, term_names = interaction_columns(X_term, term_names, X_var, var_names)
        columns.append(X_term)
        names.extend(term_names)
        terms.append(TermSpec(term.label, parts, tuple(term_names)))

    X = np.hstack(columns) if columns else np.empty((n, 0), dtype=np.float64)
    return X, names, terms


def _slices(terms: list[TermSpec], intercept: bool) -> dict[str, slice]:
    out: dict[str, slice] = {}
    offset = 0
    if intercept:
        out[INTERCEPT] = slice(0, 1)
        offset = 1
    for term in terms:
        width = len(term.column_names)
        out[term.label] = slice(offset, offset + width)
        offset += width
    return out


def model_matrix(formula: str | Formula, data: Any, **kwargs: Any) -> ModelDesign:
    """Build the design for ``formula`` over ``data`` (see ModelDesign.from_formula)."""
    return ModelDesign.from_formula(formula, data, **kwargs)
