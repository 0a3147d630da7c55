"""Bias correction of ranking distributions using a paired anchor question.

Survey respondents who answer at random pick each of the J! rankings with
probability 1/J!. With a share ``p_non_random`` of attentive respondents,
the observed PMF is the mixture

    observed = p_non_random * true + (1 - p_non_random) * uniform

An anchor question with a known correct answer identifies p_non_random from
its accuracy rate (random respondents are correct with probability 1/J!),
and the mixture is inverted ranking by ranking. The corrected PMF yields
inverse-probability weights that reweight respondents in downstream
analyses.

Functions:
    - correct_ranking_bias(): Corrected PMF and importance weights
    - estimate_attentive_share(): Share of attentive respondents from anchor accuracy
"""

from __future__ import annotations

import time
import warnings
from math import factorial
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from pyrankcorrect.core.exceptions import (
    DataQualityWarning,
    DimensionError,
    NaNInfError,
    NumericalInstabilityWarning,
    ValueRangeError,
)
from pyrankcorrect.core.permutations import encode_ranking, get_permutation_space
from pyrankcorrect.core.result import BiasCorrectionResult
from pyrankcorrect.core.survey import RankingSurvey


def estimate_attentive_share(anchor_accuracy: float, num_items: int) -> float:
    """
    Estimate the share of non-random respondents from anchor accuracy.

    A random respondent matches the anchor's correct ranking with
    probability 1/J!, so

        p_non_random = (accuracy - 1/J!) / (1 - 1/J!)

    The value is not clamped: accuracy below chance gives a negative share.

    Args:
        anchor_accuracy: Share of respondents passing the anchor question
        num_items: Number of items J in the anchor question

    Returns:
        Estimated share of non-random (attentive) respondents

    Example:
        >>> estimate_attentive_share(1.0, 3)
        1.0
        >>> estimate_attentive_share(1 / 6, 3)
        0.0
    """
    chance = 1.0 / factorial(num_items)
    if chance == 1.0:
        # J = 1: every respondent is trivially correct
        return 1.0
    return (anchor_accuracy - chance) / (1.0 - chance)


def correct_ranking_bias(
    data: RankingSurvey | Sequence[str] | Sequence[Sequence[int]],
    anchor_accuracy: float | None = None,
    weights: Sequence[float] | NDArray[np.float64] | None = None,
    num_items: int | None = None,
) -> BiasCorrectionResult:
    """
    Bias-correct the distribution of ranking permutations (IPW estimator).

    Steps:
    1. Weighted count of each observed ranking, joined to all J! rankings
       (unobserved rankings get 0)
    2. Observed PMF: count / total weight
    3. p_non_random from the anchor accuracy
    4. Invert the mixture: (observed - uniform * (1 - p)) / p
    5. Clamp negatives (and non-finite values) to 0 and renormalize
    6. Weights: corrected / observed, with x/0 -> 0

    Degenerate inputs (anchor accuracy at or below chance) do not raise:
    the result is computed with the coercions above and a
    NumericalInstabilityWarning is emitted. Callers should check that
    anchor_accuracy > 1/J!.

    Args:
        data: RankingSurvey, or one ranking per respondent as keys ("213")
            or position sequences
        anchor_accuracy: Anchor-question accuracy. Defaults to the survey's
            anchor accuracy when data is a RankingSurvey.
        weights: Survey weights, one per respondent. Defaults to the
            survey's weights, else 1 per respondent.
        num_items: Number of items J. Inferred from the ranking length.

    Returns:
        BiasCorrectionResult with raw and corrected PMFs and weights

    Raises:
        ValueError: If anchor_accuracy is missing for plain ranking input
        DimensionError: If weights do not match the number of rankings
        ValueRangeError: If rankings are malformed or weights are negative

    Example:
        >>> survey = RankingSurvey(
        ...     rankings=["123", "123", "213", "321", "132"],
        ...     anchor_correct=[1, 1, 1, 0, 1],
        ... )
        >>> result = correct_ranking_bias(survey)
        >>> print(f"Random share: {result.est_p_random:.3f}")
        >>> result.corrected_pmf["123"]
    """
    start_time = time.perf_counter()

    if isinstance(data, RankingSurvey):
        survey = data
        if anchor_accuracy is None:
            anchor_accuracy = survey.anchor_accuracy
        if weights is None:
            weights = survey.weights
        if num_items is not None and num_items != survey.num_items:
            raise DimensionError(
                f"num_items={num_items} does not match the survey's J={survey.num_items}."
            )
        positions = survey.positions
        J = survey.num_items
    else:
        if anchor_accuracy is None:
            raise ValueError(
                "anchor_accuracy is required when rankings are passed directly. "
                "Pass a RankingSurvey to compute it from the anchor column."
            )
        # anchor column is irrelevant here; reuse the survey validation path
        survey = RankingSurvey(
            rankings=data,
            anchor_correct=np.ones(len(data)),
            weights=weights,
            num_items=num_items,
        )
        positions = survey.positions
        weights = survey.weights
        J = survey.num_items

    anchor_accuracy = float(anchor_accuracy)
    if not np.isfinite(anchor_accuracy):
        raise NaNInfError("anchor_accuracy must be finite.")
    if not 0.0 <= anchor_accuracy <= 1.0:
        warnings.warn(
            f"anchor_accuracy={anchor_accuracy} is outside [0, 1]; the "
            "corrected PMF is not meaningful.",
            DataQualityWarning,
            stacklevel=2,
        )

    weights = np.asarray(weights, dtype=np.float64).reshape(-1)
    N = positions.shape[0]
    if weights.shape[0] != N:
        raise DimensionError(f"weights has {weights.shape[0]} entries but there are {N} rankings.")
    if np.any(weights < 0) or not np.all(np.isfinite(weights)):
        raise ValueRangeError("Survey weights must be finite and non-negative.")
    total_weight = float(np.sum(weights))
    if not total_weight > 0:
        raise ValueRangeError("Survey weights must have a positive total.")

    # Step 1: Observed PMF over the full permutation space
    space = get_permutation_space(J)
    keys = [encode_ranking(row) for row in positions]
    idx = space.indices_of(keys)
    counts = np.bincount(idx, weights=weights, minlength=space.size).astype(np.float64)
    raw_pmf = counts / total_weight

    # Step 2: Share of attentive respondents
    p_non_random = estimate_attentive_share(anchor_accuracy, J)
    uniform = np.full(space.size, space.uniform_probability)

    # Step 3: Invert the mixture
    with np.errstate(divide="ignore", invalid="ignore"):
        prop = (raw_pmf - uniform * (1.0 - p_non_random)) / p_non_random

    if not p_non_random > 0:
        warnings.warn(
            f"Estimated share of attentive respondents is {p_non_random:.4g} "
            f"(anchor accuracy {anchor_accuracy:.4g} is at or below chance "
            f"1/{space.size}). Corrected probabilities are degenerate.",
            NumericalInstabilityWarning,
            stacklevel=2,
        )

    # Step 4: Clamp and renormalize
    prop_adj = np.where(np.isfinite(prop) & (prop > 0), prop, 0.0)
    adj_total = float(np.sum(prop_adj))
    if adj_total > 0:
        prop_renormalized = prop_adj / adj_total
    else:
        warnings.warn(
            "Every corrected probability was clamped to zero; the corrected "
            "PMF and all weights are zero.",
            NumericalInstabilityWarning,
            stacklevel=2,
        )
        prop_renormalized = np.zeros_like(prop_adj)

    # Step 5: Importance weights, x/0 -> 0
    weights_out = _safe_ratio(prop_renormalized, raw_pmf)

    computation_time = (time.perf_counter() - start_time) * 1000

    return BiasCorrectionResult(
        rankings=space.keys,
        counts=counts,
        raw_pmf=raw_pmf,
        prop=prop,
        prop_adj=prop_adj,
        prop_renormalized=prop_renormalized,
        weights=weights_out,
        est_p_random=1.0 - p_non_random,
        p_non_random=p_non_random,
        anchor_accuracy=anchor_accuracy,
        num_items=J,
        num_respondents=N,
        total_weight=total_weight,
        computation_time_ms=computation_time,
    )


def _safe_ratio(
    numerator: NDArray[np.float64],
    denominator: NDArray[np.float64],
) -> NDArray[np.float64]:
    """Elementwise numerator / denominator with 0/0 and x/0 mapped to 0."""
    out = np.zeros_like(numerator, dtype=np.float64)
    np.divide(numerator, denominator, out=out, where=denominator > 0)
    out[~np.isfinite(out)] = 0.0
    return out

