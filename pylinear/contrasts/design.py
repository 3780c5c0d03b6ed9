"""
Contrast design: named weight vectors over a model's coefficients.

Weights can be written as raw vectors (one entry per coefficient) or as
dicts keyed by coefficient name, e.g. ``{'treatmentB': 1, 'treatmentB:timeT2': 1}``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence, TYPE_CHECKING
import numpy as np
from numpy.typing import NDArray

from pylinear.core.exceptions import DimensionError, ValidationError
from pylinear.core.validation import check_array, check_finite, check_conf_level

if TYPE_CHECKING:
    from pylinear.regression.solution import LinearSolution


WeightSpec = Mapping[str, float] | Sequence[float] | NDArray


@dataclass(frozen=True)
class ContrastDesign:
    """
    Validated contrast matrix for a fitted model.

    Immutable after construction. Build with ContrastDesign.build().
    """
    L: NDArray[np.floating[Any]]
    names: tuple[str, ...]
    rhs: NDArray[np.floating[Any]]
    conf_level: float

    @property
    def k(self) -> int:
        """Number of contrasts."""
        return self.L.shape[0]

    @classmethod
    def build(
        cls,
        solution: 'LinearSolution',
        weights: Mapping[str, WeightSpec] | Sequence[WeightSpec],
        *,
        rhs: float | Sequence[float] = 0.0,
        conf_level: float = 0.95,
    ) -> ContrastDesign:
        """
        Build a contrast matrix.

        Args:
            solution: Fitted model the contrasts refer to
            weights: {contrast name: weights} or a list of weights. Each
                weights entry is a length-p vector or a {coefficient: weight} dict
            rhs: Value(s) of c'β under the null hypothesis
            conf_level: Confidence level for intervals

        Raises:
            ValidationError: On unknown coefficient names, wrong lengths,
                all-zero weights, or a bad confidence level
        """
        check_conf_level(conf_level)
        column_names = solution.column_names

        if isinstance(weights, Mapping):
            items = [(str(name), w) for name, w in weights.items()]
        else:
            items = [(None, w) for w in weights]
        if not items:
            raise ValidationError("weights: at least one contrast is required")

        rows: list[NDArray] = []
        names: list[str] = []
        for i, (name, spec) in enumerate(items):
            vec = weight_vector(spec, column_names, f"weights[{name or i}]")
            rows.append(vec)
            names.append(name if name is not None else describe(vec, column_names))

        L = np.vstack(rows)
        rhs_arr = check_array(np.atleast_1d(rhs), 'rhs')
        if rhs_arr.ndim != 1 or len(rhs_arr) not in (1, L.shape[0]):
            raise DimensionError(
                f"rhs: expected a scalar or {L.shape[0]} values (one per contrast), "
                f"got shape {rhs_arr.shape}"
            )
        rhs_arr = np.broadcast_to(rhs_arr, (L.shape[0],)).astype(np.float64)
        check_finite(rhs_arr, 'rhs')

        return cls(L=L, names=tuple(names), rhs=rhs_arr, conf_level=conf_level)


def weight_vector(
    spec: WeightSpec,
    column_names: tuple[str, ...],
    name: str,
) -> NDArray[np.floating[Any]]:
    """Turn a weights vector or {coefficient: weight} dict into a length-p array."""
    p = len(column_names)
    if isinstance(spec, Mapping):
        vec = np.zeros(p, dtype=np.float64)
        for coef, w in spec.items():
            if coef not in column_names:
                raise ValidationError(
                    f"{name}: unknown coefficient {coef!r}; available: {list(column_names)}"
                )
            vec[column_names.index(coef)] = float(w)
    else:
        vec = check_array(spec, name)
        if vec.shape != (p,):
            raise ValidationError(
                f"{name}: expected {p} weights (one per coefficient), got shape {vec.shape}"
            )
    check_finite(vec, name)
    if not np.any(vec):
        raise ValidationError(f"{name}: all weights are zero")
    return vec


def describe(vec: NDArray[np.floating[Any]], column_names: tuple[str, ...]) -> str:
    """Readable label for a weight vector, e.g. 'treatmentB + treatmentB:timeT2'."""
    parts: list[str] = []
    for w, col in zip(vec, column_names):
        if w == 0:
            continue
        sign = '-' if w < 0 else '+'
        mag = abs(w)
        term = col if mag == 1 else f"{mag:g}*{col}"
        parts.append(f"{sign} {term}")
    label = " ".join(parts)
    return label[2:] if label.startswith('+ ') else label
