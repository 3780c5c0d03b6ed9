"""
Tests for cor() and cor_test().

cor_test() follows R's cor.test(method = "pearson").
"""

import numpy as np
import pytest
from scipy import stats

from pylinear.descriptive import cor, cor_test
from pylinear.core.exceptions import ValidationError, DimensionError


class TestCor:

    def test_matches_numpy(self, rng):
        x = rng.standard_normal(50)
        y = 0.5 * x + rng.standard_normal(50)
        assert cor(x, y) == pytest.approx(np.corrcoef(x, y)[0, 1], rel=1e-12)

    def test_symmetric(self, rng):
        x, y = rng.standard_normal((2, 30))
        assert cor(x, y) == pytest.approx(cor(y, x))

    def test_perfect(self):
        x = np.array([1.0, 2.0, 3.0, 4.0, 5.0])
        assert cor(x, 2 * x + 1) == pytest.approx(1.0)
        assert cor(x, -3 * x + 10) == pytest.approx(-1.0)

    def test_invariant_to_affine_maps(self, rng):
        x, y = rng.standard_normal((2, 40))
        assert cor(3 * x + 2, 0.1 * y - 7) == pytest.approx(cor(x, y))

    def test_constant_input(self):
        with pytest.raises(ValidationError, match="constant"):
            cor([1.0, 1.0, 1.0], [1.0, 2.0, 3.0])

    def test_length_mismatch(self):
        with pytest.raises(DimensionError):
            cor([1.0, 2.0, 3.0], [1.0, 2.0])

    def test_nan_rejected(self):
        with pytest.raises(ValidationError, match="non-finite"):
            cor([1.0, np.nan, 3.0], [1.0, 2.0, 3.0])


class TestCorTest:

    def test_matches_scipy(self, rng):
        x = rng.standard_normal(25)
        y = 0.4 * x + rng.standard_normal(25)
        result = cor_test(x, y)
        ref = stats.pearsonr(x, y)
        assert result.estimate == pytest.approx(ref.statistic, rel=1e-12)
        assert result.p_value == pytest.approx(ref.pvalue, rel=1e-8)
        assert result.df == 23
        assert result.n == 25

    def test_t_statistic(self, rng):
        x, y = rng.standard_normal((2, 20))
        result = cor_test(x, y)
        r = result.estimate
        assert result.statistic == pytest.approx(r * np.sqrt(18) / np.sqrt(1 - r * r))

    def test_fisher_z_interval(self, rng):
        x = rng.standard_normal(30)
        y = x + rng.standard_normal(30)
        result = cor_test(x, y, conf_level=0.9)
        z = np.arctanh(result.estimate)
        half = stats.norm.ppf(0.95) / np.sqrt(27)
        np.testing.assert_allclose(result.conf_int, np.tanh([z - half, z + half]))
        assert result.conf_int[0] < result.estimate < result.conf_int[1]

    def test_one_sided(self, rng):
        x = rng.standard_normal(30)
        y = x + rng.standard_normal(30)
        two = cor_test(x, y)
        greater = cor_test(x, y, alternative='greater')
        less = cor_test(x, y, alternative='less')
        assert greater.p_value == pytest.approx(two.p_value / 2)
        assert less.p_value == pytest.approx(1 - greater.p_value)
        assert greater.conf_int[1] == 1.0
        assert less.conf_int[0] == -1.0

    def test_no_interval_with_three_points(self):
        result = cor_test([1.0, 2.0, 3.0], [1.0, 3.0, 2.0])
        assert result.conf_int is None
        assert result.df == 1

    def test_perfect_correlation(self):
        x = np.arange(6, dtype=float)
        result = cor_test(x, 2 * x)
        assert result.statistic == np.inf
        assert result.p_value == 0.0
        assert result.warnings

    def test_too_few_points(self):
        with pytest.raises(ValidationError, match="at least 3"):
            cor_test([1.0, 2.0], [2.0, 1.0])

    def test_invalid_alternative(self):
        with pytest.raises(ValidationError, match="alternative"):
            cor_test([1.0, 2.0, 3.0], [1.0, 3.0, 2.0], alternative='two-sided')

    def test_summary(self, rng):
        x, y = rng.standard_normal((2, 10))
        s = cor_test(x, y, data_name="age and expression").summary()
        assert "Pearson's product-moment correlation" in s
        assert "data:  age and expression" in s
        assert "df = 8" in s
        assert "95 percent confidence interval" in s
        assert "true correlation is not equal to 0" in s
