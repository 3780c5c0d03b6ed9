"""
Errors raised by PyLinear.

Catch PyLinearError to handle anything the library raises. Input problems
(bad columns, malformed formulas, mismatched shapes) are ValidationErrors;
failures inside the least-squares computation are NumericalErrors.
Exceptions keep the values needed to diagnose them as attributes.
"""


class PyLinearError(Exception):
    """Root of every PyLinear exception."""
    pass


class ValidationError(PyLinearError):
    """User input rejected before any computation ran."""
    pass


class DimensionError(ValidationError):
    """Array shapes are wrong or disagree with each other (rows of X vs y, contrast width vs p)."""
    pass


class FormulaError(ValidationError):
    """
    A model formula is malformed or names a column the data lacks.

    Attributes:
        formula: Formula text as given
        position: Character offset where parsing failed, or None
    """

    def __init__(
        self,
        message: str,
        formula: str | None = None,
        position: int | None = None,
    ):
        super().__init__(message)
        self.formula = formula
        self.position = position


class NumericalError(PyLinearError):
    """The least-squares computation itself failed."""
    pass


class SingularMatrixError(NumericalError):
    """
    The design matrix does not have full column rank.

    Happens when columns are aliased, e.g. a factor level combination with
    no observations in an interaction model, or a covariate that is constant
    after centering.

    Attributes:
        matrix_name: Which matrix failed ('X' for the design)
        condition_number: Condition number estimate, if computed
        rank: Numerical rank found
        expected_rank: Rank required (number of design columns)
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        condition_number: float | None = None,
        rank: int | None = None,
        expected_rank: int | None = None,
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.condition_number = condition_number
        self.rank = rank
        self.expected_rank = expected_rank
