"""
Design matrices for linear models.

Public API:
    parse_formula(text) -> Formula
    model_matrix(formula, data, ...) -> ModelDesign
    ModelDesign.from_formula(formula, data, ...)
    ModelDesign.from_arrays(X, y, ...)

Example:
    >>> from pylinear.model import model_matrix
    >>> design = model_matrix("expression ~ treatment * time", data)
    >>> design.column_names
    ('(Intercept)', 'treatmentB', 'timeT2', 'treatmentB:timeT2')
"""

from pylinear.model._formula import Formula, Term, Variable, parse_formula
from pylinear.model._coding import (
    encode_treatment,
    encode_cell_means,
    encode_deviation,
    interaction_columns,
)
from pylinear.model.design import (
    INTERCEPT,
    CovariateInfo,
    FactorInfo,
    ModelDesign,
    TermSpec,
    model_matrix,
)

__all__ = [
    "Formula",
    "Term",
    "Variable",
    "parse_formula",
    "encode_treatment",
    "encode_cell_means",
    "encode_deviation",
    "interaction_columns",
    "INTERCEPT",
    "CovariateInfo",
    "FactorInfo",
    "ModelDesign",
    "TermSpec",
    "model_matrix",
]
