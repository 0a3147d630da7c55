"""Pytest fixtures for pyrankcorrect tests."""

import numpy as np
import pytest

from pyrankcorrect import ChoiceModel, RankingSurvey


@pytest.fixture
def small_survey() -> RankingSurvey:
    """
    Survey of 8 respondents ranking 3 items.

    Six of eight respondents pass the anchor question. Rankings "231" and
    "312" are never observed.
    """
    return RankingSurvey(
        rankings=["123", "123", "123", "132", "213", "213", "321", "123"],
        anchor_correct=[1, 1, 1, 1, 0, 1, 0, 1],
    )


@pytest.fixture
def weighted_survey() -> RankingSurvey:
    """Survey with unequal survey weights (total weight 6)."""
    return RankingSurvey(
        rankings=["12", "12", "21", "21"],
        anchor_correct=[1, 1, 1, 0],
        weights=[2.0, 1.0, 2.0, 1.0],
    )


@pytest.fixture
def identity_model() -> ChoiceModel:
    """
    Four-alternative logit with an 'age' moderator, reference 'gender'.

    Utilities: party 0.8 + 0.02 age, race 0.3 - 0.01 age,
    religion -0.2 + 0.005 age, gender 0.
    """
    coefficients = {
        "party:(Intercept)": 0.8,
        "race:(Intercept)": 0.3,
        "religion:(Intercept)": -0.2,
        "party:age": 0.02,
        "race:age": -0.01,
        "religion:age": 0.005,
    }
    vcov = np.diag([0.04, 0.03, 0.05, 0.0001, 0.0001, 0.0001])
    return ChoiceModel.from_dict(
        coefficients=coefficients,
        vcov=vcov,
        reference="gender",
        formula="ch ~ 0 | age",
        alternatives=["party", "race", "religion", "gender"],
    )


@pytest.fixture
def identity_pattern() -> list[str]:
    """Pattern ending with the reference alternative."""
    return ["party", "race", "religion", "gender"]


@pytest.fixture
def discrete_model() -> ChoiceModel:
    """
    Three-alternative logit with a factor moderator 'educ' (levels low/mid/high).

    Coefficient names put the variable first, as some fitting packages do.
    """
    coefficients = {
        "(Intercept):a": 0.5,
        "(Intercept):b": -0.5,
        "educmid:a": 0.4,
        "educmid:b": 0.1,
        "educhigh:a": 1.0,
        "educhigh:b": -0.3,
    }
    return ChoiceModel.from_dict(
        coefficients=coefficients,
        vcov=np.eye(6) * 0.01,
        reference="c",
        formula="choice ~ 0 | educ",
        frequencies={"a": 0.5, "b": 0.2, "c": 0.3},
        levels={"educ": ["low", "mid", "high"]},
    )
