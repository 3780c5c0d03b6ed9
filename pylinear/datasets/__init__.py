"""
Example datasets.

expression.csv: expression of one gene in 24 samples, under two treatments
(A, B) at two time points (T1, T2) in wild-type and knock-out animals, with
the animal's age as a continuous covariate. Treatment B raises expression,
more so at T2, and the knock-out lowers it.
"""

from pathlib import Path

from pylinear.core.datasource import DataSource
from pylinear.core.exceptions import ValidationError

_DATA_DIR = Path(__file__).parent

# Natural level order, reference first
EXPRESSION_LEVELS = {
    'treatment': ['A', 'B'],
    'time': ['T1', 'T2'],
    'genotype': ['WT', 'KO'],
}


def dataset_path(name: str) -> Path:
    """Path of a bundled dataset, e.g. ``dataset_path('expression')``."""
    path = _DATA_DIR / f"{name}.csv"
    if not path.exists():
        available = sorted(p.stem for p in _DATA_DIR.glob("*.csv"))
        raise ValidationError(f"Unknown dataset {name!r}; available: {available}")
    return path


def load_expression() -> DataSource:
    """Load expression.csv with declared level orders (WT before KO)."""
    import pandas as pd

    df = pd.read_csv(dataset_path('expression'))
    for column, levels in EXPRESSION_LEVELS.items():
        df[column] = pd.Categorical(df[column], categories=levels)
    return DataSource.from_dataframe(df, source_path=str(dataset_path('expression')))


__all__ = ["EXPRESSION_LEVELS", "dataset_path", "load_expression"]
