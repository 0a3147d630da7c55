"""Tests for Plackett-Luce sampling and ranking probabilities."""

import numpy as np
import pytest

from pyrankcorrect import (
    DimensionError,
    PlackettLuceSampleResult,
    ValueRangeError,
    compute_pmf_plackett_luce,
    compute_ranking_probability,
    get_permutation_space,
    sample_plackett_luce,
)


class TestSamplePlackettLuce:
    """Tests for drawing rankings."""

    def test_seeded_sample(self):
        """Ten draws over three items: every row is a permutation of 1..3."""
        result = sample_plackett_luce(10, [0.5, 0.3, 0.2], random_state=42)

        assert isinstance(result, PlackettLuceSampleResult)
        assert result.orderings.shape == (10, 3)
        assert result.num_draws == 10
        assert result.num_items == 3
        for row in result.orderings:
            assert sorted(row.tolist()) == [1, 2, 3]

        rerun = sample_plackett_luce(10, [0.5, 0.3, 0.2], random_state=42)
        np.testing.assert_array_equal(result.orderings, rerun.orderings)

    def test_same_seed_reproduces(self):
        a = sample_plackett_luce(50, [0.5, 0.3, 0.2], random_state=42)
        b = sample_plackett_luce(50, [0.5, 0.3, 0.2], random_state=42)
        np.testing.assert_array_equal(a.orderings, b.orderings)

    def test_generator_stream_continues(self):
        """Two calls on one Generator equal one call of the combined size."""
        rng = np.random.default_rng(7)
        first = sample_plackett_luce(5, [1.0, 2.0, 3.0, 4.0], random_state=rng)
        second = sample_plackett_luce(5, [1.0, 2.0, 3.0, 4.0], random_state=rng)

        combined = sample_plackett_luce(10, [1.0, 2.0, 3.0, 4.0], random_state=7)

        np.testing.assert_array_equal(
            np.vstack([first.orderings, second.orderings]), combined.orderings
        )

    def test_frequencies_match_analytic_pmf(self):
        """Empirical ranking shares converge to the exact PMF."""
        gamma = [0.5, 0.3, 0.2]
        result = sample_plackett_luce(20000, gamma, random_state=0)

        freq = result.ranking_frequencies()
        pmf = compute_pmf_plackett_luce(gamma)
        expected = np.array([pmf[k] for k in get_permutation_space(3).keys])

        np.testing.assert_allclose(freq, expected, atol=0.015)

    def test_top_choice_share(self):
        """The first-place item is chosen proportionally to its weight."""
        result = sample_plackett_luce(20000, [6.0, 3.0, 1.0], random_state=1)
        first = np.bincount(result.orderings[:, 0] - 1, minlength=3) / 20000
        np.testing.assert_allclose(first, [0.6, 0.3, 0.1], atol=0.015)

    def test_dominant_item_first(self):
        result = sample_plackett_luce(100, [1e6, 1.0, 1.0], random_state=3)
        assert np.all(result.orderings[:, 0] == 1)

    def test_single_item(self):
        result = sample_plackett_luce(4, [2.0])
        np.testing.assert_array_equal(result.orderings, [[1], [1], [1], [1]])

    def test_zero_draws(self):
        result = sample_plackett_luce(0, [0.5, 0.5], random_state=0)
        assert result.orderings.shape == (0, 2)

    def test_labels(self):
        result = sample_plackett_luce(
            3, [0.5, 0.3, 0.2], labels=["party", "race", "gender"], random_state=42
        )
        rows = result.labelled_orderings()
        assert all(sorted(r) == ["gender", "party", "race"] for r in rows)

        df = result.to_dataframe()
        assert list(df.columns) == ["position_1", "position_2", "position_3"]
        assert df.shape == (3, 3)

    def test_ranking_keys_are_positions(self):
        """Item orders convert to position-in-item-order keys."""
        result = sample_plackett_luce(200, [0.5, 0.3, 0.2], random_state=5)
        keys = result.to_ranking_keys()
        for order, key in zip(result.orderings, keys):
            # item order[0] sits in position 1
            assert key[order[0] - 1] == "1"

    def test_summary_and_dict(self):
        result = sample_plackett_luce(10, [0.5, 0.3, 0.2], random_state=42)
        assert "PLACKETT-LUCE SAMPLE REPORT" in result.summary()
        d = result.to_dict()
        assert d["num_draws"] == 10
        assert len(d["orderings"]) == 10


class TestInvalidInputs:
    """Tests for parameter validation."""

    @pytest.mark.parametrize("gamma", [[0.5, 0.0, 0.5], [1.0, -1.0], [1.0, np.nan], [np.inf, 1.0]])
    def test_bad_weights_raise(self, gamma):
        with pytest.raises(ValueRangeError):
            sample_plackett_luce(5, gamma)

    def test_empty_gamma_raises(self):
        with pytest.raises(DimensionError):
            sample_plackett_luce(5, [])

    def test_two_dimensional_gamma_raises(self):
        with pytest.raises(DimensionError):
            sample_plackett_luce(5, [[0.5, 0.5]])

    def test_negative_draws_raise(self):
        with pytest.raises(ValueRangeError):
            sample_plackett_luce(-1, [0.5, 0.5])

    def test_label_count_mismatch(self):
        with pytest.raises(DimensionError):
            sample_plackett_luce(5, [0.5, 0.5], labels=["a"])

    def test_duplicate_labels(self):
        with pytest.raises(ValueRangeError):
            sample_plackett_luce(5, [0.5, 0.5], labels=["a", "a"])


class TestRankingProbability:
    """Tests for the analytic Plackett-Luce probability."""

    def test_stagewise_product(self):
        # 0.5/1.0 * 0.3/0.5 * 1
        assert compute_ranking_probability([1, 2, 3], [0.5, 0.3, 0.2]) == pytest.approx(0.3)
        # 0.2/1.0 * 0.3/0.8 * 1
        assert compute_ranking_probability([3, 2, 1], [0.5, 0.3, 0.2]) == pytest.approx(0.075)

    def test_scale_invariant(self):
        a = compute_ranking_probability([2, 1, 3], [0.5, 0.3, 0.2])
        b = compute_ranking_probability([2, 1, 3], [5.0, 3.0, 2.0])
        assert a == pytest.approx(b)

    def test_pmf_sums_to_one(self):
        pmf = compute_pmf_plackett_luce([1.0, 2.0, 3.0, 4.0])
        assert len(pmf) == 24
        assert sum(pmf.values()) == pytest.approx(1.0)

    def test_pmf_keys_are_positions(self):
        """Key "213" is the order item 2, item 1, item 3."""
        pmf = compute_pmf_plackett_luce([0.5, 0.3, 0.2])
        assert pmf["213"] == pytest.approx(compute_ranking_probability([2, 1, 3], [0.5, 0.3, 0.2]))
        assert pmf["231"] == pytest.approx(compute_ranking_probability([3, 1, 2], [0.5, 0.3, 0.2]))

    def test_equal_weights_uniform(self):
        pmf = compute_pmf_plackett_luce([1.0, 1.0, 1.0])
        np.testing.assert_allclose(list(pmf.values()), 1 / 6)

    def test_invalid_order_raises(self):
        with pytest.raises(ValueRangeError):
            compute_ranking_probability([1, 1, 3], [0.5, 0.3, 0.2])
