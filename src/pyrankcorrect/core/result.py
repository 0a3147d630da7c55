"""Result dataclasses for ranking bias correction and choice simulation.

Result types:
    - BiasCorrectionResult: Observed and bias-corrected PMFs over rankings,
      plus inverse-probability weights
    - PlackettLuceSampleResult: Rankings drawn from a Plackett-Luce model
    - PatternSimulationResult: Simulated probability of a ranking pattern
      over a grid of moderator values
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

import numpy as np
from numpy.typing import NDArray

from pyrankcorrect import config
from pyrankcorrect.core.mixins import ResultSummaryMixin
from pyrankcorrect.core.permutations import (
    encode_ranking,
    get_permutation_space,
    rankings_from_order,
)


@dataclass(frozen=True)
class BiasCorrectionResult:
    """
    Result of the anchor-based bias correction of a ranking distribution.

    Observed answers are modelled as a mixture of attentive answers drawn
    from the true PMF and random answers drawn uniformly from all J!
    rankings. The anchor question identifies the mixing share, and the
    mixture is inverted ranking by ranking.

    All arrays are aligned with ``rankings`` (the lexicographically sorted
    permutation space).

    Attributes:
        rankings: The J! ranking keys
        counts: Weighted count of respondents giving each ranking
        raw_pmf: Observed proportion of each ranking (sums to 1)
        prop: Bias-corrected mass before clamping (may be negative, or
            non-finite when the correction is degenerate)
        prop_adj: prop clamped at 0, non-finite values set to 0
        prop_renormalized: prop_adj rescaled to sum to 1
        weights: Importance weights prop_renormalized / raw_pmf
            (0 where raw_pmf is 0)
        est_p_random: Estimated share of random respondents
        p_non_random: Estimated share of attentive respondents
        anchor_accuracy: Anchor-question accuracy used for the estimate
        num_items: Number of ranked items J
        num_respondents: Number of respondents N
        total_weight: Sum of survey weights
        computation_time_ms: Time taken in milliseconds
    """

    rankings: tuple[str, ...]
    counts: NDArray[np.float64]
    raw_pmf: NDArray[np.float64]
    prop: NDArray[np.float64]
    prop_adj: NDArray[np.float64]
    prop_renormalized: NDArray[np.float64]
    weights: NDArray[np.float64]
    est_p_random: float
    p_non_random: float
    anchor_accuracy: float
    num_items: int
    num_respondents: int
    total_weight: float
    computation_time_ms: float

    @property
    def num_rankings(self) -> int:
        """Size of the permutation space, J!."""
        return len(self.rankings)

    @property
    def is_degenerate(self) -> bool:
        """True if the attentive share is not positive (correction undefined)."""
        return not self.p_non_random > 0

    @property
    def obs_pmf(self) -> dict[str, float]:
        """Observed PMF keyed by ranking."""
        return dict(zip(self.rankings, self.raw_pmf.tolist()))

    @property
    def corrected_pmf(self) -> dict[str, float]:
        """Bias-corrected, renormalized PMF keyed by ranking."""
        return dict(zip(self.rankings, self.prop_renormalized.tolist()))

    @property
    def importance_weights(self) -> dict[str, float]:
        """Inverse-probability weight keyed by ranking."""
        return dict(zip(self.rankings, self.weights.tolist()))

    @property
    def clamped_mass(self) -> float:
        """Total negative corrected mass removed by clamping at zero."""
        finite = self.prop[np.isfinite(self.prop)]
        return float(-np.sum(finite[finite < 0]))

    def weights_for(self, rankings: Sequence[str] | Sequence[Sequence[int]]) -> NDArray[np.float64]:
        """
        Join the per-ranking weights back onto respondent rows.

        Args:
            rankings: One ranking key (or position sequence) per respondent

        Returns:
            Array of importance weights, one per respondent

        Example:
            >>> result = correct_ranking_bias(survey)
            >>> survey_weights = result.weights_for(survey.keys)
        """
        space = get_permutation_space(self.num_items)
        keys = [r if isinstance(r, str) else encode_ranking(r) for r in rankings]
        return self.weights[space.indices_of(keys)]

    def score(self) -> float:
        """Return score in [0, 1]: the estimated share of attentive respondents."""
        return float(min(max(self.p_non_random, 0.0), 1.0))

    def top_rankings(self, n: int = 5, corrected: bool = True) -> list[tuple[str, float]]:
        """The ``n`` most probable rankings under the corrected (or raw) PMF."""
        probs = self.prop_renormalized if corrected else self.raw_pmf
        order = np.argsort(-probs, kind="stable")[:n]
        return [(self.rankings[i], float(probs[i])) for i in order]

    def summary(self) -> str:
        """Return human-readable summary report."""
        m = ResultSummaryMixin
        lines = [m._format_header("RANKING BIAS CORRECTION REPORT")]

        status = "DEGENERATE" if self.is_degenerate else "CORRECTED"
        lines.append(f"\nStatus: {status}")

        lines.append(m._format_section("Metrics"))
        lines.append(m._format_metric("Items (J)", self.num_items))
        lines.append(m._format_metric("Rankings (J!)", self.num_rankings))
        lines.append(m._format_metric("Respondents", self.num_respondents))
        lines.append(m._format_metric("Anchor Accuracy", self.anchor_accuracy))
        lines.append(m._format_metric("Est. Share Random", self.est_p_random))
        lines.append(m._format_metric("Clamped Mass", self.clamped_mass))

        lines.append(m._format_section("Top Corrected Rankings"))
        top = [f"{k}: {p:.4f}" for k, p in self.top_rankings()]
        lines.append(m._format_list(top, item_name="ranking"))

        lines.append(m._format_section("Interpretation"))
        lines.append(f"  {m._format_interpretation(self.est_p_random)}")

        lines.append(m._format_footer(self.computation_time_ms))
        return "\n".join(lines)

    def to_dataframe(self) -> Any:
        """
        Return a pandas DataFrame with one row per ranking.

        Columns: ranking, n, prop_obs, prop, prop_adj, prop_renormalized, w.
        """
        import pandas as pd

        return pd.DataFrame(
            {
                "ranking": list(self.rankings),
                "n": self.counts,
                "prop_obs": self.raw_pmf,
                "prop": self.prop,
                "prop_adj": self.prop_adj,
                "prop_renormalized": self.prop_renormalized,
                "w": self.weights,
            }
        )

    def to_dict(self) -> dict[str, Any]:
        """Return dictionary representation for serialization."""
        return {
            "est_p_random": self.est_p_random,
            "p_non_random": self.p_non_random,
            "anchor_accuracy": self.anchor_accuracy,
            "num_items": self.num_items,
            "num_respondents": self.num_respondents,
            "obs_pmf": self.obs_pmf,
            "corrected_pmf": self.corrected_pmf,
            "weights": self.importance_weights,
            "computation_time_ms": self.computation_time_ms,
        }

    def __repr__(self) -> str:
        """Compact string representation."""
        return (
            f"BiasCorrectionResult(J={self.num_items}, "
            f"p_random={self.est_p_random:.4f}, {self.computation_time_ms:.2f}ms)"
        )


@dataclass(frozen=True)
class PlackettLuceSampleResult:
    """
    Rankings drawn from a Plackett-Luce model.

    Attributes:
        orderings: n x t array; row d lists 1-based item indices from first
            to last place in draw d
        item_weights: The t Plackett-Luce weights (gamma) used
        labels: Optional item labels aligned with item_weights
        computation_time_ms: Time taken in milliseconds
    """

    orderings: NDArray[np.int64]
    item_weights: NDArray[np.float64]
    labels: tuple[Any, ...] | None
    computation_time_ms: float

    @property
    def num_draws(self) -> int:
        return int(self.orderings.shape[0])

    @property
    def num_items(self) -> int:
        return int(self.orderings.shape[1])

    def labelled_orderings(self) -> list[list[Any]]:
        """Orderings with item labels (or 1-based indices if no labels)."""
        if self.labels is None:
            return self.orderings.tolist()
        return [[self.labels[i - 1] for i in row] for row in self.orderings]

    def to_ranking_keys(self) -> list[str]:
        """Encode each draw as a position-in-item-order ranking key.

        The keys can be passed straight to ``correct_ranking_bias``.
        """
        return [encode_ranking(rankings_from_order(row)) for row in self.orderings]

    def ranking_frequencies(self) -> NDArray[np.float64]:
        """Share of draws per ranking, aligned with PermutationSpace(t).keys."""
        space = get_permutation_space(self.num_items)
        idx = space.indices_of(self.to_ranking_keys())
        return np.bincount(idx, minlength=space.size) / self.num_draws

    def to_dataframe(self) -> Any:
        """Return draws as a DataFrame with columns position_1..position_t."""
        import pandas as pd

        rows = self.labelled_orderings()
        columns = [f"position_{k}" for k in range(1, self.num_items + 1)]
        return pd.DataFrame(rows, columns=columns)

    def summary(self) -> str:
        """Return human-readable summary report."""
        m = ResultSummaryMixin
        lines = [m._format_header("PLACKETT-LUCE SAMPLE REPORT")]

        lines.append(m._format_section("Metrics"))
        lines.append(m._format_metric("Draws", self.num_draws))
        lines.append(m._format_metric("Items", self.num_items))

        lines.append(m._format_section("Top-Choice Shares"))
        names = self.labels or tuple(range(1, self.num_items + 1))
        first = np.bincount(self.orderings[:, 0] - 1, minlength=self.num_items) / max(
            self.num_draws, 1
        )
        expected = self.item_weights / self.item_weights.sum()
        for i, name in enumerate(names):
            lines.append(
                m._format_metric(f"{name} (expected {expected[i]:.3f})", float(first[i]))
            )

        lines.append(m._format_footer(self.computation_time_ms))
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Return dictionary representation for serialization."""
        return {
            "orderings": self.labelled_orderings(),
            "item_weights": self.item_weights.tolist(),
            "num_draws": self.num_draws,
            "num_items": self.num_items,
            "computation_time_ms": self.computation_time_ms,
        }

    def __repr__(self) -> str:
        return (
            f"PlackettLuceSampleResult(n={self.num_draws}, t={self.num_items}, "
            f"{self.computation_time_ms:.2f}ms)"
        )


@dataclass(frozen=True)
class PatternSimulationResult:
    """
    Simulated probability that a ranking pattern is chosen, over a moderator.

    Each row corresponds to one moderator value, in the order the values
    were supplied.

    Attributes:
        random_var: Name of the moderator variable
        pattern: Alternatives in ranked order (last = reference alternative)
        moderator_values: Grid of moderator values (numbers or categories)
        mean: Mean simulated pattern probability per grid value
        low: Lower confidence bound per grid value
        high: Upper confidence bound per grid value
        sd: Standard deviation of the simulated probabilities per grid value
        n_draws: Monte Carlo draws per grid value
        confidence_level: Confidence level of the t-interval
        continuous: True if the moderator was treated as continuous
        computation_time_ms: Time taken in milliseconds
    """

    random_var: str
    pattern: tuple[str, ...]
    moderator_values: tuple[Any, ...]
    mean: NDArray[np.float64]
    low: NDArray[np.float64]
    high: NDArray[np.float64]
    sd: NDArray[np.float64]
    n_draws: int
    confidence_level: float
    continuous: bool
    computation_time_ms: float

    @property
    def label(self) -> str:
        """Pattern label, alternatives joined by the pattern separator."""
        return config.PATTERN_SEPARATOR.join(self.pattern)

    @property
    def num_values(self) -> int:
        return len(self.moderator_values)

    @property
    def interval_width(self) -> NDArray[np.float64]:
        """high - low per grid value."""
        return self.high - self.low

    def to_dataframe(self) -> Any:
        """Return one row per moderator value: <random_var>, mean, low, high, ranking."""
        import pandas as pd

        return pd.DataFrame(
            {
                self.random_var: list(self.moderator_values),
                "mean": self.mean,
                "low": self.low,
                "high": self.high,
                "ranking": [self.label] * self.num_values,
            }
        )

    def summary(self) -> str:
        """Return human-readable summary report."""
        m = ResultSummaryMixin
        lines = [m._format_header("RANKING PATTERN SIMULATION REPORT")]

        lines.append(f"\nPattern: {self.label}")
        lines.append(f"Moderator: {self.random_var} "
                     f"({'continuous' if self.continuous else 'discrete'})")

        lines.append(m._format_section("Settings"))
        lines.append(m._format_metric("Draws", self.n_draws))
        lines.append(m._format_metric("Confidence Level", self.confidence_level))

        lines.append(m._format_section("Pattern Probability"))
        for v, mu, lo, hi in zip(self.moderator_values, self.mean, self.low, self.high):
            lines.append(f"  {self.random_var}={v}: {mu:.4f} [{lo:.4f}, {hi:.4f}]")

        lines.append(m._format_footer(self.computation_time_ms))
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Return dictionary representation for serialization."""
        return {
            "random_var": self.random_var,
            "ranking": self.label,
            "moderator_values": list(self.moderator_values),
            "mean": self.mean.tolist(),
            "low": self.low.tolist(),
            "high": self.high.tolist(),
            "n_draws": self.n_draws,
            "confidence_level": self.confidence_level,
            "computation_time_ms": self.computation_time_ms,
        }

    def __repr__(self) -> str:
        return (
            f"PatternSimulationResult({self.label}, {self.random_var}: "
            f"{self.num_values} values, n={self.n_draws}, "
            f"{self.computation_time_ms:.2f}ms)"
        )
