"""
Pathological fixtures for EVALs - designed to break algorithms.

Each fixture creates data that targets specific numerical or algorithmic weaknesses.
"""

import numpy as np
import pytest

from pyrankcorrect import ChoiceModel, RankingSurvey


# =============================================================================
# MINIMAL DATA FIXTURES (N=1, J=1)
# =============================================================================


@pytest.fixture
def single_respondent_survey():
    """N=1 - one observed ranking out of J! = 6."""
    return RankingSurvey(rankings=["231"], anchor_correct=[1])


@pytest.fixture
def single_item_survey():
    """J=1 - the permutation space has a single ranking."""
    return RankingSurvey(rankings=["1", "1", "1"], anchor_correct=[1, 0, 1])


# =============================================================================
# DEGENERATE ANCHOR FIXTURES
# =============================================================================


@pytest.fixture
def all_random_survey():
    """Nobody passes the anchor question: accuracy 0, below chance 1/6."""
    return RankingSurvey(
        rankings=["123", "132", "213", "231", "312", "321"],
        anchor_correct=[0, 0, 0, 0, 0, 0],
    )


@pytest.fixture
def chance_level_survey():
    """Exactly 1 of 6 respondents passes: accuracy equals 1/J! for J=3."""
    return RankingSurvey(
        rankings=["123", "123", "213", "321", "132", "123"],
        anchor_correct=[1, 0, 0, 0, 0, 0],
    )


# =============================================================================
# EXTREME MODEL FIXTURES
# =============================================================================


@pytest.fixture
def extreme_utility_model():
    """Intercepts of +/-700 push exp() to the edge of float64."""
    return ChoiceModel.from_dict(
        coefficients={
            "a:(Intercept)": 700.0,
            "b:(Intercept)": -700.0,
            "a:x": 1.0,
            "b:x": -1.0,
        },
        vcov=np.eye(4) * 1e-4,
        reference="c",
        formula="choice ~ 0 | x",
        alternatives=["a", "b", "c"],
    )


@pytest.fixture
def two_alternative_model():
    """Smallest model: one non-reference alternative."""
    return ChoiceModel.from_dict(
        coefficients={"yes:(Intercept)": 0.0, "yes:x": 0.5},
        vcov=np.eye(2) * 0.01,
        reference="no",
        formula="choice ~ 0 | x",
        alternatives=["yes", "no"],
    )
