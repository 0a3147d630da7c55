"""Core data structures for pyrankcorrect."""

from pyrankcorrect.core.permutations import (
    PermutationSpace,
    get_permutation_space,
    encode_ranking,
    decode_ranking,
)
from pyrankcorrect.core.survey import RankingSurvey
from pyrankcorrect.core.model import ChoiceModel
from pyrankcorrect.core.result import (
    BiasCorrectionResult,
    PlackettLuceSampleResult,
    PatternSimulationResult,
)
from pyrankcorrect.core.exceptions import (
    RankCorrectError,
    DataValidationError,
    DimensionError,
    ValueRangeError,
    NaNInfError,
    ModelSpecificationError,
    ComputationalLimitError,
    InsufficientDataError,
    DataQualityWarning,
    NumericalInstabilityWarning,
)

__all__ = [
    "PermutationSpace",
    "get_permutation_space",
    "encode_ranking",
    "decode_ranking",
    "RankingSurvey",
    "ChoiceModel",
    "BiasCorrectionResult",
    "PlackettLuceSampleResult",
    "PatternSimulationResult",
    # Exceptions
    "RankCorrectError",
    "DataValidationError",
    "DimensionError",
    "ValueRangeError",
    "NaNInfError",
    "ModelSpecificationError",
    "ComputationalLimitError",
    "InsufficientDataError",
    # Warnings
    "DataQualityWarning",
    "NumericalInstabilityWarning",
]
