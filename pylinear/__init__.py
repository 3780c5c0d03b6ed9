"""
PyLinear: ordinary least-squares linear models for categorical and
continuous covariates.

Fits models from formulas, builds design matrices under reference-group,
cell-means and deviation coding, and reads coefficients back as group
means, differences and simple effects.

Submodules:
    model: Formulas, factor coding, design matrices
    regression: OLS fitting (lm, fit)
    contrasts: Linear contrasts, cell means, simple effects, pairwise differences
    descriptive: Group means, Pearson correlation and its test, scaling
    datasets: Bundled example data
"""

__version__ = "0.1.0"

from pylinear.core.datasource import DataSource
from pylinear.model import model_matrix, parse_formula
from pylinear.regression import fit, lm
from pylinear.contrasts import (
    cell_mean,
    cell_means,
    contrast,
    contrasts,
    pairwise,
    simple_effect,
)
from pylinear.descriptive import cor, cor_test, group_means, scale

__all__ = [
    "__version__",
    "DataSource",
    "model_matrix",
    "parse_formula",
    "fit",
    "lm",
    "cell_mean",
    "cell_means",
    "contrast",
    "contrasts",
    "pairwise",
    "simple_effect",
    "cor",
    "cor_test",
    "group_means",
    "scale",
]
