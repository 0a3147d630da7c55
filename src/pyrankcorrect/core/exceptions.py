"""Custom exceptions and warnings for pyrankcorrect.

All exceptions inherit from ValueError so that callers catching ValueError
around the numerical entry points keep working.

Exception Hierarchy:
    RankCorrectError (ValueError)
    ├── DataValidationError
    │   ├── DimensionError
    │   ├── ValueRangeError
    │   └── NaNInfError
    ├── ModelSpecificationError
    ├── ComputationalLimitError
    └── InsufficientDataError

Warning Classes:
    DataQualityWarning (UserWarning)
    NumericalInstabilityWarning (UserWarning)
"""

from __future__ import annotations


# =============================================================================
# BASE EXCEPTION
# =============================================================================


class RankCorrectError(ValueError):
    """Base exception for all pyrankcorrect errors.

    Example:
        >>> try:
        ...     survey = RankingSurvey(rankings, anchor_correct)
        ... except RankCorrectError as e:
        ...     print(f"pyrankcorrect error: {e}")
    """

    pass


# =============================================================================
# DATA VALIDATION EXCEPTIONS
# =============================================================================


class DataValidationError(RankCorrectError):
    """Raised when input data fails validation checks.

    Common causes:
        - Missing ranking or anchor columns
        - Rankings that are not permutations of 1..J
        - Weights that sum to zero
    """

    pass


class DimensionError(DataValidationError):
    """Raised when array lengths or shapes are incompatible.

    Common causes:
        - rankings and anchor_correct have different lengths
        - A weight vector of the wrong length
        - Rankings of mixed length J

    Example:
        >>> RankingSurvey(["123", "213"], anchor_correct=[1])
        DimensionError: anchor_correct has 1 entries but there are 2 rankings...
    """

    pass


class ValueRangeError(DataValidationError):
    """Raised when values are outside expected ranges.

    Common causes:
        - Negative survey weights
        - Non-positive Plackett-Luce item weights
        - A ranking string containing a digit outside 1..J
        - Confidence levels outside (0, 1)
    """

    pass


class NaNInfError(DataValidationError):
    """Raised when NaN or Inf values are detected in input data.

    Use nan_policy='drop' or nan_policy='warn' on RankingSurvey to remove
    the affected respondents automatically.
    """

    pass


# =============================================================================
# COMPUTATION EXCEPTIONS
# =============================================================================


class ModelSpecificationError(RankCorrectError):
    """Raised when a fitted choice model does not match the requested simulation.

    Common causes:
        - The model is not a ChoiceModel
        - The moderator variable does not appear in the model formula
        - The permutation pattern is not a full ordering of the alternatives
        - The last element of the pattern is not the reference alternative
        - A coefficient needed for an alternative is missing
    """

    pass


class ComputationalLimitError(RankCorrectError):
    """Raised when a problem exceeds computational feasibility.

    Exact enumeration of the permutation space grows as J!, and the
    single-digit ranking encoding cannot represent more than 9 items.
    """

    pass


class InsufficientDataError(RankCorrectError):
    """Raised when there is not enough data for the requested operation.

    Example:
        >>> simulate_pattern_probability(model, pattern, "age", n_draws=1)
        InsufficientDataError: Need at least 2 draws for a t-interval...
    """

    pass


# =============================================================================
# WARNINGS
# =============================================================================


class DataQualityWarning(UserWarning):
    """Warning for data quality issues that don't prevent computation.

    Emitted when:
        - Respondents with malformed rankings or missing anchors are dropped
          (nan_policy='warn')
        - An anchor accuracy outside [0, 1] is supplied
    """

    pass


class NumericalInstabilityWarning(UserWarning):
    """Warning for degenerate numerical results.

    Emitted when:
        - The estimated share of non-random respondents is not positive,
          so the bias correction divides by zero or flips sign
        - Every corrected probability is clamped to zero
    """

    pass
