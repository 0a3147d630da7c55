"""
EVAL: Division by zero and near-zero vulnerabilities.

The bias correction divides by the estimated share of attentive
respondents and the importance weights divide by the observed PMF. Both
denominators reach zero on realistic inputs.
"""

import warnings

import numpy as np
import pytest

from pyrankcorrect import (
    NumericalInstabilityWarning,
    correct_ranking_bias,
    simulate_pattern_probability,
)


class TestAttentiveShareDivision:
    """EVAL: p_non_random = 0 or negative."""

    def test_chance_level_anchor(self, chance_level_survey):
        """EVAL: accuracy exactly 1/J! gives p_non_random = 0.

        The mixture inversion divides by zero. Every corrected value is
        non-finite, so everything clamps to zero and the result is all-zero
        rather than NaN.
        """
        with pytest.warns(NumericalInstabilityWarning):
            result = correct_ranking_bias(chance_level_survey)

        assert result.p_non_random == 0.0
        assert result.est_p_random == 1.0
        assert result.is_degenerate
        np.testing.assert_array_equal(result.prop_adj, 0.0)
        np.testing.assert_array_equal(result.prop_renormalized, 0.0)
        np.testing.assert_array_equal(result.weights, 0.0)
        assert np.sum(result.raw_pmf) == pytest.approx(1.0)

    def test_chance_level_summary(self, chance_level_survey):
        """EVAL: reporting must not crash on a degenerate result."""
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", NumericalInstabilityWarning)
            result = correct_ranking_bias(chance_level_survey)
        text = result.summary()
        assert "DEGENERATE" in text
        assert result.score() == 0.0

    def test_below_chance_anchor(self, all_random_survey):
        """EVAL: accuracy 0 < 1/J! gives a negative share and flips the sign.

        With a uniform observed PMF the flipped inversion still lands on the
        uniform PMF.
        """
        with pytest.warns(NumericalInstabilityWarning):
            result = correct_ranking_bias(all_random_survey)

        assert result.p_non_random == pytest.approx(-0.2)
        np.testing.assert_allclose(result.prop_renormalized, 1 / 6)
        np.testing.assert_allclose(result.weights, 1.0)

    def test_below_chance_skewed(self, small_survey):
        """EVAL: below-chance accuracy on a skewed sample stays finite."""
        with pytest.warns(NumericalInstabilityWarning):
            result = correct_ranking_bias(small_survey, anchor_accuracy=0.1)

        assert np.all(np.isfinite(result.prop_renormalized))
        assert np.all(np.isfinite(result.weights))
        assert np.all(result.weights >= 0)
        assert np.sum(result.prop_renormalized) == pytest.approx(1.0)

    def test_tiny_positive_share(self, small_survey):
        """EVAL: p_non_random just above zero amplifies noise but stays finite."""
        result = correct_ranking_bias(small_survey, anchor_accuracy=1 / 6 + 1e-12)
        assert result.p_non_random > 0
        assert np.all(np.isfinite(result.prop_renormalized))
        assert np.sum(result.prop_renormalized) == pytest.approx(1.0)


class TestObservedPmfDivision:
    """EVAL: weights = corrected / observed with observed = 0."""

    def test_unobserved_rankings_get_zero_weight(self, single_respondent_survey):
        """EVAL: five of six rankings are unobserved (0/0)."""
        result = correct_ranking_bias(single_respondent_survey)
        assert np.count_nonzero(result.raw_pmf) == 1
        assert result.importance_weights["231"] == pytest.approx(1.0)
        assert all(
            w == 0.0 for k, w in result.importance_weights.items() if k != "231"
        )


class TestStagewiseOverflow:
    """EVAL: exp(utility) at the edge of float64."""

    def test_extreme_utilities_finite(self, extreme_utility_model):
        """EVAL: utilities of +/-750 overflow exp() and underflow to zero."""
        result = simulate_pattern_probability(
            extreme_utility_model, ["a", "b", "c"], "x",
            moderator_values=[0.0, 50.0], n_draws=2, random_state=0,
        )
        assert np.all(np.isfinite(result.mean))
        assert np.all((result.mean >= 0) & (result.mean <= 1))
        assert np.all(np.isfinite(result.low))
        assert np.all(np.isfinite(result.high))

    def test_dominant_alternative_first(self, extreme_utility_model):
        """EVAL: 'a' dominates, then 'c' beats 'b': pattern a, b, c is near 0."""
        coefs = [700.0, -700.0, 1.0, -1.0]
        result = simulate_pattern_probability(
            extreme_utility_model, ["a", "b", "c"], "x",
            moderator_values=[50.0], n_draws=2, coefs=coefs, vcov=np.zeros((4, 4)),
        )
        assert result.mean[0] == pytest.approx(0.0, abs=1e-300)
        assert np.isfinite(result.mean[0])
