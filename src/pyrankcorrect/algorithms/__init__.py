"""Core algorithms for ranking bias correction and simulation."""

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

__all__ = [
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
]
