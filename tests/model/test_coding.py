"""
Tests for factor coding.

Checks each coding scheme against its defining matrix and the level
ordering rules.
"""

import numpy as np
import pytest

from pylinear.model import (
    encode_cell_means,
    encode_deviation,
    encode_treatment,
    interaction_columns,
)
from pylinear.model._coding import encode_factor, natural_key, resolve_levels
from pylinear.core.exceptions import ValidationError


LABELS = np.array(['A', 'B', 'C', 'A', 'C'])
LEVELS = ['A', 'B', 'C']


class TestResolveLevels:

    def test_sorted_by_default(self):
        assert resolve_levels(np.array(['b', 'a', 'b']), 'g') == ['a', 'b']

    def test_numeric_labels_sort_numerically(self):
        labels = np.array(['10', '2', '0', '2'])
        assert resolve_levels(labels, 'dose') == ['0', '2', '10']

    def test_declared_order_wins(self):
        labels = np.array(['WT', 'KO', 'WT'])
        assert resolve_levels(labels, 'g', declared=['WT', 'KO']) == ['WT', 'KO']

    def test_unobserved_declared_levels_dropped(self):
        labels = np.array(['WT', 'KO'])
        assert resolve_levels(labels, 'g', declared=['WT', 'HET', 'KO']) == ['WT', 'KO']

    def test_undeclared_label_rejected(self):
        with pytest.raises(ValidationError, match="declared"):
            resolve_levels(np.array(['WT', 'HET']), 'g', declared=['WT', 'KO'])

    def test_reference_moved_first(self):
        assert resolve_levels(LABELS, 'g', reference='C') == ['C', 'A', 'B']

    def test_unknown_reference(self):
        with pytest.raises(ValidationError, match="reference level 'Z'"):
            resolve_levels(LABELS, 'g', reference='Z')

    def test_single_level_rejected(self):
        with pytest.raises(ValidationError, match="at least 2 levels"):
            resolve_levels(np.array(['A', 'A']), 'g')

    def test_natural_key(self):
        assert sorted(['b', '10', 'a', '9'], key=natural_key) == ['9', '10', 'a', 'b']

    def test_digit_runs_sort_numerically(self):
        labels = np.array(['T1', 'T10', 'T2', 'T2'])
        assert resolve_levels(labels, 'time') == ['T1', 'T2', 'T10']

    def test_mixed_text_and_digits(self):
        labels = ['dose20mg', 'dose5mg', 'ctrl', 'dose5mg_b']
        assert sorted(labels, key=natural_key) == ['ctrl', 'dose5mg', 'dose5mg_b', 'dose20mg']

    def test_declared_float_levels_match_labels(self):
        labels = np.array(['0', '1', '2'])
        assert resolve_levels(labels, 'dose', declared=[2.0, 0.0, 1.0]) == ['2', '0', '1']


class TestEncoders:

    def test_treatment(self):
        X, coded = encode_treatment(LABELS, LEVELS)
        assert coded == ['B', 'C']
        expected = np.array([
            [0, 0], [1, 0], [0, 1], [0, 0], [0, 1],
        ], dtype=float)
        np.testing.assert_array_equal(X, expected)

    def test_cell_means(self):
        X, coded = encode_cell_means(LABELS, LEVELS)
        assert coded == LEVELS
        np.testing.assert_array_equal(X.sum(axis=1), np.ones(5))
        np.testing.assert_array_equal(X.sum(axis=0), [2, 1, 2])

    def test_deviation(self):
        X, coded = encode_deviation(LABELS, LEVELS)
        assert coded == ['A', 'B']
        expected = np.array([
            [1, 0], [0, 1], [-1, -1], [1, 0], [-1, -1],
        ], dtype=float)
        np.testing.assert_array_equal(X, expected)

    def test_deviation_columns_sum_to_zero_over_levels(self):
        X, _ = encode_deviation(np.array(LEVELS), LEVELS)
        np.testing.assert_array_equal(X.sum(axis=0), [0, 0])

    def test_encode_factor_full_overrides_coding(self):
        X, coded = encode_factor(LABELS, LEVELS, full=True, coding='deviation')
        assert coded == LEVELS
        assert X.shape == (5, 3)

    def test_encode_factor_unknown_coding(self):
        with pytest.raises(ValueError, match="coding"):
            encode_factor(LABELS, LEVELS, full=False, coding='helmert')


class TestInteraction:

    def test_first_margin_varies_fastest(self):
        X_a = np.array([[1.0, 0.0], [0.0, 1.0]])
        X_b = np.array([[1.0, 0.0], [1.0, 1.0]])
        X, names = interaction_columns(X_a, ['aB', 'aC'], X_b, ['bY', 'bZ'])
        assert names == ['aB:bY', 'aC:bY', 'aB:bZ', 'aC:bZ']
        np.testing.assert_array_equal(X, [[1, 0, 0, 0], [0, 1, 0, 1]])

    def test_numeric_by_factor(self):
        x = np.array([[2.0], [3.0], [4.0]])
        g = np.array([[0.0], [1.0], [1.0]])
        X, names = interaction_columns(g, ['gB'], x, ['age'])
        assert names == ['gB:age']
        np.testing.assert_array_equal(X.ravel(), [0.0, 3.0, 4.0])
