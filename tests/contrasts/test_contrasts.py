"""Tests for contrast(), contrasts(), pairwise() and the contrast solution."""

import numpy as np
import pytest
from scipy import stats

from pylinear import lm, cell_mean, contrast, contrasts, pairwise, cell_means, simple_effect
from pylinear.contrasts import p_adjust
from pylinear.core.exceptions import DimensionError, SingularMatrixError, ValidationError


@pytest.fixture
def oneway_fit(oneway_data):
    return lm("expression ~ treatment", oneway_data)


@pytest.fixture
def twoway_fit(twoway_data):
    return lm("expression ~ treatment * time", twoway_data)


class TestContrast:

    def test_estimate_and_se(self, oneway_fit):
        c = np.array([0.0, 1.0, -1.0])
        result = contrast(oneway_fit, c)
        assert result.estimate == pytest.approx(c @ oneway_fit.coefficients)
        se = np.sqrt(c @ oneway_fit.vcov @ c)
        assert result.standard_errors[0] == pytest.approx(se)
        t = (c @ oneway_fit.coefficients) / se
        assert result.t_statistics[0] == pytest.approx(t)
        p = 2 * stats.t.sf(abs(t), oneway_fit.df_residual)
        assert result.p_values[0] == pytest.approx(p)
        assert result.df == oneway_fit.df_residual

    def test_dict_weights_equal_vector(self, oneway_fit):
        by_name = contrast(oneway_fit, {'treatmentB': 1, 'treatmentC': -1})
        by_vec = contrast(oneway_fit, [0, 1, -1])
        assert by_name.estimate == pytest.approx(by_vec.estimate)
        np.testing.assert_array_equal(by_name.weights, by_vec.weights)

    def test_default_name(self, oneway_fit):
        result = contrast(oneway_fit, {'treatmentB': 1, 'treatmentC': -1})
        assert result.names == ('treatmentB - treatmentC',)
        half = contrast(oneway_fit, {'treatmentB': 0.5, 'treatmentC': 0.5})
        assert half.names == ('0.5*treatmentB + 0.5*treatmentC',)

    def test_explicit_name(self, oneway_fit):
        result = contrast(oneway_fit, {'treatmentB': 1}, name='B vs A')
        assert result.names == ('B vs A',)
        assert result.as_dict() == {'B vs A': pytest.approx(oneway_fit.coef['treatmentB'])}

    def test_rhs_shifts_t(self, oneway_fit):
        result = contrast(oneway_fit, {'treatmentB': 1}, rhs=1.0)
        expected = (oneway_fit.coef['treatmentB'] - 1.0) / oneway_fit.standard_errors[1]
        assert result.t_statistics[0] == pytest.approx(expected)

    def test_conf_int(self, oneway_fit):
        result = contrast(oneway_fit, {'treatmentB': 1}, conf_level=0.9)
        np.testing.assert_allclose(result.conf_int[0], oneway_fit.confint(0.9)[1])
        assert result.conf_level == 0.9

    def test_unknown_coefficient(self, oneway_fit):
        with pytest.raises(ValidationError, match="unknown coefficient 'treatmentZ'"):
            contrast(oneway_fit, {'treatmentZ': 1})

    def test_wrong_length(self, oneway_fit):
        with pytest.raises(ValidationError, match="expected 3 weights"):
            contrast(oneway_fit, [1, -1])

    def test_all_zero(self, oneway_fit):
        with pytest.raises(ValidationError, match="all weights are zero"):
            contrast(oneway_fit, [0, 0, 0])

    def test_bad_conf_level(self, oneway_fit):
        with pytest.raises(ValidationError, match="conf_level"):
            contrast(oneway_fit, [0, 1, 0], conf_level=1.5)

    def test_info(self, oneway_fit):
        result = contrast(oneway_fit, [0, 1, 0])
        assert result.info['method'] == 'wald_t'
        assert result.warnings == ()


class TestContrasts:

    def test_named_family(self, oneway_fit):
        result = contrasts(oneway_fit, {
            'B-A': {'treatmentB': 1},
            'C-A': {'treatmentC': 1},
        })
        assert result.names == ('B-A', 'C-A')
        np.testing.assert_allclose(result.estimates, oneway_fit.coefficients[1:])
        np.testing.assert_allclose(result.standard_errors, oneway_fit.standard_errors[1:])

    def test_matrix_weights(self, oneway_fit):
        L = np.array([[0, 1, 0], [0, 0, 1]], dtype=float)
        result = contrasts(oneway_fit, L)
        np.testing.assert_allclose(result.estimates, L @ oneway_fit.coefficients)

    def test_estimate_requires_single(self, oneway_fit):
        result = contrasts(oneway_fit, [[0, 1, 0], [0, 0, 1]])
        with pytest.raises(ValueError, match="one contrast"):
            result.estimate

    def test_adjusted_p_values(self, oneway_fit):
        raw = contrasts(oneway_fit, [[0, 1, 0], [0, 0, 1], [0, 1, -1]])
        holm = contrasts(oneway_fit, [[0, 1, 0], [0, 0, 1], [0, 1, -1]], adjust='holm')
        np.testing.assert_allclose(holm.p_values, p_adjust(raw.p_values, 'holm'))
        assert holm.adjust == 'holm'
        assert "P-value adjustment: holm" in holm.summary()

    def test_per_contrast_rhs(self, oneway_fit):
        result = contrasts(oneway_fit, [[0, 1, 0], [0, 0, 1]], rhs=[1.0, -1.0])
        expected = (oneway_fit.coefficients[1:] - [1.0, -1.0]) / oneway_fit.standard_errors[1:]
        np.testing.assert_allclose(result.t_statistics, expected)

    def test_rhs_length_must_match_family(self, oneway_fit):
        with pytest.raises(DimensionError, match="one per contrast"):
            contrasts(oneway_fit, [[0, 1, 0], [0, 0, 1]], rhs=[0.0, 1.0, 2.0])

    def test_empty_family(self, oneway_fit):
        with pytest.raises(ValidationError, match="at least one"):
            contrasts(oneway_fit, {})


class TestFTest:

    def test_joint_test_equals_overall_f(self, oneway_fit):
        result = contrasts(oneway_fit, {'B': {'treatmentB': 1}, 'C': {'treatmentC': 1}})
        f, df1, df2, p = result.f_test()
        assert f == pytest.approx(oneway_fit.f_statistic, rel=1e-10)
        assert (df1, df2) == (2, oneway_fit.df_residual)
        assert p == pytest.approx(oneway_fit.f_p_value, rel=1e-8)

    def test_single_contrast_f_is_t_squared(self, oneway_fit):
        result = contrast(oneway_fit, [0, 1, -1])
        f, _, _, p = result.f_test()
        assert f == pytest.approx(result.t_statistics[0] ** 2)
        assert p == pytest.approx(result.p_values[0])

    def test_dependent_contrasts(self, oneway_fit):
        result = contrasts(oneway_fit, [[0, 1, 0], [0, 2, 0]])
        with pytest.raises(SingularMatrixError, match="linearly dependent"):
            result.f_test()


class TestPairwise:

    def test_all_pairs(self, oneway_fit, oneway_data):
        result = pairwise(oneway_fit, 'treatment')
        assert result.names == ('B - A', 'C - A', 'C - B')
        coef = oneway_fit.coef
        np.testing.assert_allclose(
            result.estimates,
            [coef['treatmentB'], coef['treatmentC'], coef['treatmentC'] - coef['treatmentB']],
        )

    def test_adjustment(self, oneway_fit):
        raw = pairwise(oneway_fit, 'treatment')
        bonf = pairwise(oneway_fit, 'treatment', adjust='bonferroni')
        np.testing.assert_allclose(bonf.p_values, np.minimum(raw.p_values * 3, 1.0))

    def test_at_other_factor(self, twoway_fit):
        result = pairwise(twoway_fit, 'time', at={'treatment': 'B'})
        assert result.names[0] == 'T2 - T1 | treatment=B'
        expected = twoway_fit.coef['timeT2'] + twoway_fit.coef['treatmentB:timeT2']
        assert result.estimates[0] == pytest.approx(expected)

    def test_cannot_fix_compared_factor(self, twoway_fit):
        with pytest.raises(ValidationError, match="cannot fix"):
            pairwise(twoway_fit, 'time', at={'time': 'T1'})

    def test_unknown_factor(self, oneway_fit):
        with pytest.raises(ValidationError, match="not a factor"):
            pairwise(oneway_fit, 'dose')


class TestSimpleEffectValidation:

    def test_unknown_level(self, twoway_fit):
        with pytest.raises(ValidationError, match="unknown level 'C'"):
            simple_effect(twoway_fit, 'treatment', 'C')

    def test_cannot_fix_varied_factor(self, twoway_fit):
        with pytest.raises(ValidationError, match="cannot fix"):
            simple_effect(twoway_fit, 'treatment', 'B', at={'treatment': 'A'})


class TestCellMeans:

    def test_one_factor_over_additive_model(self, twoway_data):
        fit = lm("expression ~ treatment + time", twoway_data)
        result = cell_means(fit, 'time', at={'treatment': 'B'})
        assert result.names == ('time=T1', 'time=T2', 'time=T3')
        coef = fit.coef
        base = coef['(Intercept)'] + coef['treatmentB']
        np.testing.assert_allclose(
            result.estimates, [base, base + coef['timeT2'], base + coef['timeT3']],
        )

    def test_covariate_held_at_value(self, expression):
        fit = lm("expression ~ treatment + age", expression)
        result = cell_means(fit, 'treatment', at={'age': 40})
        coef = fit.coef
        expected = [
            coef['(Intercept)'] + 40 * coef['age'],
            coef['(Intercept)'] + coef['treatmentB'] + 40 * coef['age'],
        ]
        np.testing.assert_allclose(result.estimates, expected)


class TestNumericFactorLevels:

    @pytest.fixture
    def dose_fit(self, rng):
        dose = np.tile([0.0, 1.0, 2.0], 4)
        y = 3.0 + 0.5 * dose + rng.standard_normal(len(dose)) * 0.2
        return lm("y ~ factor(dose)", {'y': y, 'dose': dose})

    def test_simple_effect_accepts_float_level(self, dose_fit):
        result = simple_effect(dose_fit, 'dose', 2.0)
        assert result.estimate == pytest.approx(dose_fit.coef['factor(dose)2'])
        assert result.names == ('factor(dose)2 - factor(dose)0',)

    def test_cell_mean_accepts_float_level(self, dose_fit):
        result = cell_mean(dose_fit, {'dose': 1.0})
        coef = dose_fit.coef
        assert result.estimate == pytest.approx(coef['(Intercept)'] + coef['factor(dose)1'])

    def test_declared_float_reference(self, rng):
        dose = np.tile([0.0, 1.0, 2.0], 4)
        y = rng.standard_normal(len(dose))
        fit = lm("y ~ factor(dose)", {'y': y, 'dose': dose}, reference={'dose': 2.0})
        assert fit.column_names == ('(Intercept)', 'factor(dose)0', 'factor(dose)1')


class TestSummary:

    def test_summary_table(self, oneway_fit):
        s = pairwise(oneway_fit, 'treatment').summary()
        assert "Linear Contrasts" in s
        assert "C - B" in s
        assert "95% CI" in s
        assert f"Residual df: {oneway_fit.df_residual}" in s

    def test_repr(self, oneway_fit):
        assert repr(pairwise(oneway_fit, 'treatment')) == (
            f"ContrastSolution(k=3, df={oneway_fit.df_residual})"
        )
