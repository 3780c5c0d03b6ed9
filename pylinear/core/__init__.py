"""
Core infrastructure for PyLinear.

Shared abstractions used by every domain submodule (model, regression,
contrasts, descriptive).

Key components:
    datasource: DataSource, the column-named rectangular dataset
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Input validators
    compute: Timing, tolerances, QR kernels
"""

from pylinear.core.datasource import DataSource
from pylinear.core.protocols import Backend
from pylinear.core.result import Result
from pylinear.core.exceptions import (
    PyLinearError,
    ValidationError,
    DimensionError,
    FormulaError,
    NumericalError,
    SingularMatrixError,
)

__all__ = [
    "DataSource",
    "Backend",
    "Result",
    # Exceptions
    "PyLinearError",
    "ValidationError",
    "DimensionError",
    "FormulaError",
    "NumericalError",
    "SingularMatrixError",
]
