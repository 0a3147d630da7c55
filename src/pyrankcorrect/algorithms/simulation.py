"""Monte Carlo simulation of ranking-pattern probabilities from a fitted logit.

Given a fitted multinomial logit whose alternatives are the items of a
ranking question, the probability that a respondent produces a full
ranking pattern (a_1, ..., a_J) is the stage-wise product

    P = prod_k exp(V_{a_k}) / sum_{j >= k} exp(V_{a_j})

with V_a = intercept_a + slope_a * x for a moderator x and V = 0 for the
reference alternative. Coefficient uncertainty is propagated by drawing
coefficient vectors from their sampling distribution and summarising the
implied pattern probabilities with a t-interval.

Functions:
    - simulate_pattern_probability(): Pattern probability over a moderator grid
    - draw_coefficients(): Draws from the coefficient sampling distribution
"""

from __future__ import annotations

import re
import time
from typing import Any, Callable, Mapping, Sequence

import numpy as np
from numpy.typing import NDArray
from scipy import stats

from pyrankcorrect import config
from pyrankcorrect._kernels import stagewise_probability_numba
from pyrankcorrect.core.exceptions import (
    DataValidationError,
    DimensionError,
    InsufficientDataError,
    ModelSpecificationError,
    NaNInfError,
    ValueRangeError,
)
from pyrankcorrect.core.model import ChoiceModel
from pyrankcorrect.core.result import PatternSimulationResult
from pyrankcorrect.core.types import RandomState

CoefficientDistribution = Callable[
    [np.random.Generator, NDArray[np.float64], NDArray[np.float64], int],
    NDArray[np.float64],
]


def simulate_pattern_probability(
    model: ChoiceModel,
    pattern: Sequence[str],
    random_var: str,
    moderator_values: Sequence[Any] | None = None,
    continuous: bool = True,
    n_draws: int = config.DEFAULT_N_DRAWS,
    confidence_level: float = config.DEFAULT_CONFIDENCE_LEVEL,
    random_state: RandomState = None,
    vcov: Any = None,
    coefs: Mapping[str, float] | Sequence[float] | None = None,
    dist: str | CoefficientDistribution | None = None,
    reference_level: Any = None,
) -> PatternSimulationResult:
    """
    Simulate the probability that a ranking pattern is chosen over a moderator.

    For every moderator value, ``n_draws`` coefficient vectors are drawn,
    each alternative's utility is evaluated at that value, and the
    stage-wise probability of the pattern is averaged over draws. Results
    are stored by grid position, so any numeric grid (non-integer,
    non-contiguous, unsorted) or list of categories is supported.

    Args:
        model: Fitted ChoiceModel
        pattern: Alternatives in ranked order. Must list every alternative
            once, and its last element must be the model's reference
            alternative.
        random_var: Moderator variable; must appear in the model formula
        moderator_values: Grid of moderator values. Defaults to
            config.DEFAULT_CONTINUOUS_GRID (continuous) or the variable's
            levels stored on the model (discrete).
        continuous: Treat the moderator as continuous (slope times value)
            or discrete (level-specific coefficients)
        n_draws: Monte Carlo draws per grid value (>= 2)
        confidence_level: Level of the t-interval, in (0, 1)
        random_state: Seed or numpy Generator for the coefficient draws
        vcov: Override for the coefficient variance-covariance matrix
        coefs: Override for the coefficient point estimates (array in model
            order, or mapping by coefficient name)
        dist: "normal" (default), "t(<df>)" for a multivariate t, or a
            callable ``dist(rng, mean, cov, n) -> (n, K) array``
        reference_level: Base level of a discrete moderator, whose
            level-specific coefficients are absent (utility shift 0).
            Defaults to the first of the variable's levels on the model. A
            value without coefficients that is not the base level raises.

    Returns:
        PatternSimulationResult with mean, low and high per grid value

    Raises:
        ModelSpecificationError: If the model, variable or pattern do not
            match (see ChoiceModel)
        InsufficientDataError: If n_draws < 2
        ValueRangeError: If confidence_level is outside (0, 1)

    Example:
        >>> result = simulate_pattern_probability(
        ...     model,
        ...     pattern=["party", "race", "religion", "gender"],
        ...     random_var="age",
        ...     moderator_values=[20, 40, 60],
        ...     random_state=123,
        ... )
        >>> result.to_dataframe()
    """
    start_time = time.perf_counter()

    _validate_model_inputs(model, pattern, random_var)
    pattern = tuple(pattern)

    n_draws = int(n_draws)
    if n_draws < 2:
        raise InsufficientDataError(
            f"Need at least 2 draws for a t-interval, got n_draws={n_draws}."
        )
    if not 0.0 < confidence_level < 1.0:
        raise ValueRangeError(f"confidence_level must be in (0, 1), got {confidence_level}.")

    grid = _resolve_grid(model, random_var, moderator_values, continuous)

    rng = np.random.default_rng(random_state)
    t_crit = float(stats.t.ppf((1.0 + confidence_level) / 2.0, df=n_draws - 1))

    intercepts, slopes = _coefficient_layout(
        model, pattern, random_var, grid, continuous, reference_level
    )

    means = np.empty(len(grid))
    lows = np.empty(len(grid))
    highs = np.empty(len(grid))
    sds = np.empty(len(grid))

    for i, value in enumerate(grid):
        draws = draw_coefficients(model, n_draws, rng, vcov=vcov, coefs=coefs, dist=dist)
        utilities = _utilities(draws, intercepts, slopes[i], value, continuous)
        p = stagewise_probability_numba(utilities)

        mean = float(np.mean(p))
        sd = float(np.std(p, ddof=1))
        half_width = t_crit * sd / np.sqrt(n_draws)

        means[i] = mean
        sds[i] = sd
        lows[i] = mean - half_width
        highs[i] = mean + half_width

    computation_time = (time.perf_counter() - start_time) * 1000

    return PatternSimulationResult(
        random_var=random_var,
        pattern=pattern,
        moderator_values=tuple(grid),
        mean=means,
        low=lows,
        high=highs,
        sd=sds,
        n_draws=n_draws,
        confidence_level=float(confidence_level),
        continuous=bool(continuous),
        computation_time_ms=computation_time,
    )


def draw_coefficients(
    model: ChoiceModel,
    n_draws: int,
    random_state: RandomState = None,
    vcov: Any = None,
    coefs: Mapping[str, float] | Sequence[float] | None = None,
    dist: str | CoefficientDistribution | None = None,
) -> NDArray[np.float64]:
    """
    Draw coefficient vectors from their estimated sampling distribution.

    Args:
        model: Fitted ChoiceModel
        n_draws: Number of draws
        random_state: Seed or numpy Generator
        vcov: Override for the model's variance-covariance matrix
        coefs: Override for the point estimates
        dist: "normal", "t(<df>)" or a callable (see
            simulate_pattern_probability)

    Returns:
        (n_draws, K) array, columns in model.coef_names order
    """
    K = model.num_coefficients
    mean = _resolve_coefs(model, coefs)

    cov = vcov if vcov is not None else model.vcov
    if cov is None:
        raise ModelSpecificationError(
            "The model has no variance-covariance matrix; pass vcov to simulate."
        )
    if hasattr(cov, "loc"):
        cov = cov.loc[model.coef_names, model.coef_names]
    cov = np.asarray(cov, dtype=np.float64)
    if cov.shape != (K, K):
        raise DimensionError(f"vcov has shape {cov.shape}, expected ({K}, {K}).")
    if not np.all(np.isfinite(cov)):
        raise NaNInfError("vcov contains NaN/Inf values.")

    rng = np.random.default_rng(random_state)

    if callable(dist):
        draws = np.asarray(dist(rng, mean, cov, n_draws), dtype=np.float64)
    elif dist is None or dist == "normal":
        draws = rng.multivariate_normal(mean, cov, size=n_draws)
    else:
        df = _parse_t_df(dist)
        mvt = stats.multivariate_t(loc=mean, shape=cov, df=df, allow_singular=True)
        draws = np.asarray(mvt.rvs(size=n_draws, random_state=rng), dtype=np.float64)

    draws = draws.reshape(n_draws, K)
    if not np.all(np.isfinite(draws)):
        raise NaNInfError("Coefficient draws contain NaN/Inf values.")
    return draws


# =============================================================================
# VALIDATION
# =============================================================================


def _validate_model_inputs(model: Any, pattern: Sequence[str], random_var: Any) -> None:
    """Check model type, moderator membership and pattern shape."""
    if not isinstance(model, ChoiceModel):
        raise ModelSpecificationError(
            f"The model must be a ChoiceModel, got {type(model).__name__}."
        )
    if not isinstance(random_var, str):
        raise TypeError("The moderator variable must be given by name (a string).")
    if not model.formula_contains(random_var):
        raise ModelSpecificationError(
            f"The moderator variable '{random_var}' must be included in the "
            f"model formula '{model.formula}'."
        )

    pattern = list(pattern)
    if len(pattern) != len(set(pattern)) or set(pattern) != set(model.alternatives):
        raise ModelSpecificationError(
            f"The pattern {pattern} must list every alternative "
            f"{model.alternatives} exactly once."
        )
    if pattern[-1] != model.reference:
        raise ModelSpecificationError(
            f"The last element of the pattern ('{pattern[-1]}') must be the "
            f"model's reference alternative ('{model.reference}')."
        )


def _resolve_grid(
    model: ChoiceModel,
    random_var: str,
    moderator_values: Sequence[Any] | None,
    continuous: bool,
) -> list[Any]:
    if continuous:
        values = config.DEFAULT_CONTINUOUS_GRID if moderator_values is None else moderator_values
        grid = np.asarray(values, dtype=np.float64).reshape(-1)
        if grid.shape[0] == 0:
            raise DataValidationError("The moderator grid is empty.")
        if not np.all(np.isfinite(grid)):
            raise NaNInfError("The moderator grid contains NaN/Inf values.")
        return grid.tolist()

    if moderator_values is None:
        if random_var not in model.levels:
            raise DataValidationError(
                f"No levels known for discrete variable '{random_var}'. Pass "
                "moderator_values or set ChoiceModel.levels."
            )
        moderator_values = model.levels[random_var]
    grid = list(moderator_values)
    if not grid:
        raise DataValidationError("The moderator grid is empty.")
    return grid


def _resolve_coefs(
    model: ChoiceModel,
    coefs: Mapping[str, float] | Sequence[float] | None,
) -> NDArray[np.float64]:
    if coefs is None:
        return model.coefficients
    if isinstance(coefs, Mapping):
        missing = [n for n in model.coef_names if n not in coefs]
        if missing:
            raise ModelSpecificationError(f"coefs is missing coefficients {missing}.")
        mean = np.array([coefs[n] for n in model.coef_names], dtype=np.float64)
    else:
        mean = np.asarray(coefs, dtype=np.float64).reshape(-1)
    if mean.shape[0] != model.num_coefficients:
        raise DimensionError(
            f"coefs has {mean.shape[0]} entries, expected {model.num_coefficients}."
        )
    return mean


def _parse_t_df(dist: str) -> float:
    m = re.fullmatch(r"\s*t\s*\(\s*([0-9.]+)\s*\)\s*", str(dist))
    if not m:
        raise ValueError(f"Unknown dist: {dist!r}. Use 'normal', 't(<df>)' or a callable.")
    df = float(m.group(1))
    if not df > 0:
        raise ValueRangeError(f"Degrees of freedom must be positive, got {df}.")
    return df


# =============================================================================
# UTILITIES
# =============================================================================


def _coefficient_layout(
    model: ChoiceModel,
    pattern: tuple[str, ...],
    random_var: str,
    grid: list[Any],
    continuous: bool,
    reference_level: Any = None,
) -> tuple[list[int | None], list[list[int | None]]]:
    """
    Coefficient indices per pattern column.

    Returns intercept indices (None for the reference alternative) and, per
    grid value, the slope index of each column (None contributes 0).
    """
    intercepts: list[int | None] = []
    for alt in pattern:
        intercepts.append(None if alt == model.reference else model.intercept_index(alt))

    if continuous:
        row: list[int | None] = []
        for alt in pattern:
            if alt == model.reference:
                row.append(None)
                continue
            idx = model.slope_index(alt, random_var)
            if idx is None:
                raise ModelSpecificationError(
                    f"No '{random_var}' coefficient found for alternative '{alt}'."
                )
            row.append(idx)
        return intercepts, [row] * len(grid)

    levels = model.levels.get(random_var)
    if reference_level is None and levels:
        reference_level = levels[0]

    slopes = []
    for value in grid:
        term = f"{random_var}{value}"
        row = [
            None if alt == model.reference else model.slope_index(alt, term)
            for alt in pattern
        ]
        non_ref = [r for alt, r in zip(pattern, row) if alt != model.reference]
        is_reference_level = all(r is None for r in non_ref)
        if levels is not None and value not in levels:
            raise ModelSpecificationError(
                f"'{value}' is not a level of '{random_var}' ({levels})."
            )
        if is_reference_level and (reference_level is None or value != reference_level):
            hint = (
                ""
                if reference_level is not None
                else " Pass reference_level or set ChoiceModel.levels to mark the base level."
            )
            raise ModelSpecificationError(
                f"No '{term}' coefficients found for level '{value}' of "
                f"'{random_var}'.{hint}"
            )
        if not is_reference_level and any(r is None for r in non_ref):
            raise ModelSpecificationError(
                f"'{term}' coefficients exist for some alternatives but not all."
            )
        slopes.append(row)
    return intercepts, slopes


def _utilities(
    draws: NDArray[np.float64],
    intercepts: list[int | None],
    slopes: list[int | None],
    value: Any,
    continuous: bool,
) -> NDArray[np.float64]:
    """Linear utilities per draw, columns in pattern order."""
    n = draws.shape[0]
    utilities = np.zeros((n, len(intercepts)), dtype=np.float64)
    for col, (ic, sc) in enumerate(zip(intercepts, slopes)):
        if ic is None:
            continue  # reference alternative: utility 0, exp(0) = 1
        utilities[:, col] = draws[:, ic]
        if sc is not None:
            utilities[:, col] += draws[:, sc] * (float(value) if continuous else 1.0)
    return utilities
