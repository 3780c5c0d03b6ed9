"""Tests for scale(), following R's scale() on one column."""

import numpy as np
import pytest

from pylinear.descriptive import scale
from pylinear.core.exceptions import ValidationError


class TestScale:

    def test_standardize(self, rng):
        x = rng.normal(10.0, 3.0, size=40)
        result = scale(x)
        assert result.center == pytest.approx(x.mean())
        assert result.scale == pytest.approx(x.std(ddof=1))
        assert result.values.mean() == pytest.approx(0.0, abs=1e-12)
        assert result.values.std(ddof=1) == pytest.approx(1.0)

    def test_center_only(self):
        result = scale([1.0, 2.0, 6.0], scale=False)
        np.testing.assert_allclose(result.values, [-2.0, -1.0, 3.0])
        assert result.scale == 1.0

    def test_scale_without_centering_uses_root_mean_square(self):
        x = np.array([1.0, 2.0, 2.0])
        result = scale(x, center=False)
        rms = np.sqrt((x @ x) / 2)
        assert result.center == 0.0
        assert result.scale == pytest.approx(rms)
        np.testing.assert_allclose(result.values, x / rms)

    def test_neither(self):
        result = scale([1.0, 2.0], center=False, scale=False)
        np.testing.assert_array_equal(result.values, [1.0, 2.0])

    def test_constant(self):
        with pytest.raises(ValidationError, match="constant"):
            scale([3.0, 3.0, 3.0])

    def test_too_short(self):
        with pytest.raises(ValidationError, match="at least 2"):
            scale([1.0])
