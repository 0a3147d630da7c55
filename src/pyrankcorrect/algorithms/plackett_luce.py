"""Plackett-Luce model for full rankings.

The Plackett-Luce model builds a ranking from the top down: at each stage
one of the remaining items is chosen with probability proportional to its
weight gamma_i, then removed from the pool. The probability of an item
order o_1, ..., o_t is therefore the stage-wise product

    P(o) = prod_k gamma_{o_k} / sum_{j >= k} gamma_{o_j}

which is the same quantity the choice simulator evaluates for a fitted
logit model with gamma = exp(utility).

Functions:
    - sample_plackett_luce(): Draw random rankings
    - compute_ranking_probability(): Analytic probability of one item order
    - compute_pmf_plackett_luce(): Exact PMF over all t! rankings

References:
    Luce, R. D. (1959). Individual Choice Behavior. Wiley.
    Plackett, R. L. (1975). The analysis of permutations. Applied
    Statistics, 24(2), 193-202.
"""

from __future__ import annotations

import time
from typing import Any, Sequence

import numpy as np
from numpy.typing import NDArray

from pyrankcorrect._kernels import plackett_luce_draws_numba, stagewise_probability_numba
from pyrankcorrect.core.exceptions import DimensionError, ValueRangeError
from pyrankcorrect.core.permutations import get_permutation_space, order_from_ranking
from pyrankcorrect.core.result import PlackettLuceSampleResult
from pyrankcorrect.core.types import RandomState


def sample_plackett_luce(
    n_draws: int,
    gamma: Sequence[float] | NDArray[np.float64],
    labels: Sequence[Any] | None = None,
    random_state: RandomState = None,
) -> PlackettLuceSampleResult:
    """
    Draw full rankings from a Plackett-Luce model.

    For each draw, items are picked one at a time without replacement,
    each remaining item with probability proportional to its weight.
    All draws consume the same random stream, so a fixed seed reproduces
    the whole sample.

    Args:
        n_draws: Number of rankings to draw
        gamma: t strictly positive item weights
        labels: Optional t item labels used in the output instead of
            1-based indices
        random_state: Seed or numpy Generator. A Generator is advanced in
            place, never re-seeded.

    Returns:
        PlackettLuceSampleResult with an (n_draws, t) array of item orders

    Raises:
        ValueRangeError: If n_draws is negative or gamma has non-positive
            or non-finite entries
        DimensionError: If labels do not match gamma

    Example:
        >>> result = sample_plackett_luce(10, [0.5, 0.3, 0.2], random_state=42)
        >>> result.orderings.shape
        (10, 3)
        >>> result.to_dataframe().columns.tolist()
        ['position_1', 'position_2', 'position_3']
    """
    start_time = time.perf_counter()

    weights = _validate_gamma(gamma)
    t = weights.shape[0]
    n_draws = int(n_draws)
    if n_draws < 0:
        raise ValueRangeError(f"n_draws must be non-negative, got {n_draws}.")

    if labels is not None:
        labels = tuple(labels)
        if len(labels) != t:
            raise DimensionError(f"Got {len(labels)} labels for {t} item weights.")
        if len(set(labels)) != t:
            raise ValueRangeError("Item labels must be distinct.")

    rng = np.random.default_rng(random_state)
    uniforms = rng.random((n_draws, t))

    orderings = plackett_luce_draws_numba(weights, uniforms) + 1

    computation_time = (time.perf_counter() - start_time) * 1000

    return PlackettLuceSampleResult(
        orderings=orderings,
        item_weights=weights,
        labels=labels,
        computation_time_ms=computation_time,
    )


def compute_ranking_probability(
    order: Sequence[int],
    gamma: Sequence[float] | NDArray[np.float64],
) -> float:
    """
    Plackett-Luce probability of an item order.

    Args:
        order: 1-based item indices from first place to last
        gamma: t strictly positive item weights

    Returns:
        Probability in [0, 1]

    Example:
        >>> round(compute_ranking_probability([1, 2, 3], [0.5, 0.3, 0.2]), 4)
        0.3
    """
    weights = _validate_gamma(gamma)
    t = weights.shape[0]
    order = np.asarray(order, dtype=np.int64)
    if order.shape != (t,) or sorted(order.tolist()) != list(range(1, t + 1)):
        raise ValueRangeError(f"Order {order.tolist()} is not a permutation of 1..{t}.")
    ordered = np.log(weights[order - 1]).reshape(1, t)
    return float(stagewise_probability_numba(ordered)[0])


def compute_pmf_plackett_luce(
    gamma: Sequence[float] | NDArray[np.float64],
) -> dict[str, float]:
    """
    Exact Plackett-Luce PMF over all t! rankings.

    Keys are position-in-item-order ranking keys, matching the PMFs of
    correct_ranking_bias, so a model PMF can be compared directly with an
    observed or corrected one.

    Args:
        gamma: t strictly positive item weights (t <= config.MAX_EXACT_ITEMS)

    Returns:
        Dict mapping ranking key to probability (sums to 1)
    """
    weights = _validate_gamma(gamma)
    space = get_permutation_space(weights.shape[0])
    orders = np.array([order_from_ranking(row) for row in space.positions], dtype=np.int64)
    probs = stagewise_probability_numba(np.log(weights)[orders - 1])
    return dict(zip(space.keys, probs.tolist()))


def _validate_gamma(gamma: Sequence[float] | NDArray[np.float64]) -> NDArray[np.float64]:
    weights = np.asarray(gamma, dtype=np.float64)
    if weights.ndim != 1 or weights.shape[0] == 0:
        raise DimensionError(
            f"gamma must be a non-empty 1-D sequence of item weights, got shape {weights.shape}."
        )
    if not np.all(np.isfinite(weights)) or np.any(weights <= 0):
        raise ValueRangeError(
            f"Plackett-Luce weights must be finite and strictly positive, got {weights.tolist()}."
        )
    return weights
