"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np

from pylinear.datasets import load_expression


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def simple_regression_data(rng):
    """Design with an intercept column and two continuous predictors."""
    n = 100
    X = np.column_stack([np.ones(n), rng.standard_normal((n, 2))])
    beta_true = np.array([1.0, -2.0, 0.5])
    y = X @ beta_true + rng.standard_normal(n) * 0.1
    return X, y, beta_true


@pytest.fixture
def collinear_data(rng):
    """Dataset with perfect collinearity (should fail)."""
    n = 100
    x1 = rng.standard_normal(n)
    x2 = rng.standard_normal(n)
    X = np.column_stack([np.ones(n), x1, x2, x1 + x2])
    y = rng.standard_normal(n)
    return X, y


@pytest.fixture
def oneway_data(rng):
    """Unbalanced one-way layout: three treatments with different means."""
    treatment = np.repeat(['A', 'B', 'C'], [6, 5, 7])
    means = {'A': 10.0, 'B': 12.5, 'C': 9.0}
    y = np.array([means[t] for t in treatment]) + rng.standard_normal(len(treatment))
    return {'expression': y, 'treatment': treatment}


@pytest.fixture
def twoway_data(rng):
    """Unbalanced 2x3 layout with an interaction between treatment and time."""
    cells = [
        ('A', 'T1', 4, 5.0), ('A', 'T2', 5, 5.5), ('A', 'T3', 4, 6.0),
        ('B', 'T1', 5, 6.5), ('B', 'T2', 4, 8.5), ('B', 'T3', 6, 7.0),
    ]
    treatment, time, mu = [], [], []
    for t, tm, n, m in cells:
        treatment += [t] * n
        time += [tm] * n
        mu += [m] * n
    y = np.array(mu) + rng.standard_normal(len(mu)) * 0.3
    return {
        'expression': y,
        'treatment': np.array(treatment),
        'time': np.array(time),
    }


@pytest.fixture
def expression():
    """Bundled expression dataset."""
    return load_expression()
