"""
pyrankcorrect: Bias-corrected ranking distributions and choice simulation.

Corrects survey ranking distributions for random responding with an anchor
question, samples Plackett-Luce rankings, and simulates ranking-pattern
probabilities from fitted multinomial logit models.
"""

from pyrankcorrect.core.permutations import (
    PermutationSpace,
    get_permutation_space,
    enumerate_permutations,
    encode_ranking,
    decode_ranking,
    rankings_from_order,
    order_from_ranking,
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
from pyrankcorrect.algorithms.bias_correction import (
    correct_ranking_bias,
    estimate_attentive_share,
)
from pyrankcorrect.algorithms.plackett_luce import (
    sample_plackett_luce,
    compute_ranking_probability,
    compute_pmf_plackett_luce,
)
from pyrankcorrect.algorithms.simulation import (
    simulate_pattern_probability,
    draw_coefficients,
)

__version__ = "0.1.0"

__all__ = [
    # Data structures
    "PermutationSpace",
    "RankingSurvey",
    "ChoiceModel",
    # Result types
    "BiasCorrectionResult",
    "PlackettLuceSampleResult",
    "PatternSimulationResult",
    # Permutation space and ranking adapters
    "get_permutation_space",
    "enumerate_permutations",
    "encode_ranking",
    "decode_ranking",
    "rankings_from_order",
    "order_from_ranking",
    # Bias correction
    "correct_ranking_bias",
    "estimate_attentive_share",
    # Plackett-Luce
    "sample_plackett_luce",
    "compute_ranking_probability",
    "compute_pmf_plackett_luce",
    # Choice simulation
    "simulate_pattern_probability",
    "draw_coefficients",
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
