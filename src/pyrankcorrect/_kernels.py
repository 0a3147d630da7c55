"""Numba JIT-compiled kernels for pyrankcorrect algorithms.

Per-draw inner loops of the Plackett-Luce sampler and the stage-wise
pattern probability. All functions use `@njit(cache=True)` to cache
compiled code to disk. Random numbers are drawn by the caller from a
numpy Generator and passed in, so parallel kernels stay deterministic.
"""

from __future__ import annotations

import numpy as np
from numba import njit, prange


# =============================================================================
# PLACKETT-LUCE SEQUENTIAL SAMPLING (PARALLEL)
# =============================================================================


@njit(cache=True, parallel=True)
def plackett_luce_draws_numba(
    weights: np.ndarray,
    uniforms: np.ndarray,
) -> np.ndarray:
    """
    Draw rankings by sequential weighted sampling without replacement.

    At stage k of draw d the remaining items are scanned in index order and
    the first item whose cumulative weight exceeds ``uniforms[d, k]`` times
    the remaining total is chosen.

    Args:
        weights: t positive item weights
        uniforms: (n, t) uniform [0, 1) variates, one per draw and stage

    Returns:
        (n, t) array of 0-based item indices, first place first
    """
    n, t = uniforms.shape
    result = np.empty((n, t), dtype=np.int64)

    for d in prange(n):
        remaining = np.ones(t, dtype=np.bool_)
        total = 0.0
        for i in range(t):
            total += weights[i]

        for k in range(t):
            threshold = uniforms[d, k] * total
            chosen = -1
            cumulative = 0.0
            for i in range(t):
                if remaining[i]:
                    chosen = i
                    cumulative += weights[i]
                    if cumulative > threshold:
                        break
            # rounding can leave chosen at the last remaining item
            result[d, k] = chosen
            remaining[chosen] = False
            total -= weights[chosen]

    return result


# =============================================================================
# STAGE-WISE PATTERN PROBABILITY (PARALLEL)
# =============================================================================


@njit(cache=True, parallel=True)
def stagewise_probability_numba(utilities: np.ndarray) -> np.ndarray:
    """
    Probability of choosing alternatives in column order, per draw.

    p = prod_k exp(u[d, k]) / sum_{j >= k} exp(u[d, j])

    Evaluated in log space with a running log-sum-exp over the suffix, so
    large or very unequal utilities do not overflow or underflow to 0/0.
    The last stage always contributes a factor of 1.

    Args:
        utilities: (n, J) utilities (log-weights), columns in pattern order

    Returns:
        (n,) pattern probabilities
    """
    n, J = utilities.shape
    result = np.empty(n, dtype=np.float64)

    for d in prange(n):
        # suffix log-sum-exp: denominator of stage k covers columns k..J-1
        lse = -np.inf
        log_p = 0.0
        for k in range(J - 1, -1, -1):
            u = utilities[d, k]
            if lse == -np.inf:
                lse = u
            else:
                m = max(lse, u)
                lse = m + np.log(np.exp(lse - m) + np.exp(u - m))
            log_p += u - lse
        result[d] = np.exp(log_p)

    return result
