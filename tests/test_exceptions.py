"""Tests for custom exceptions and warnings in pyrankcorrect."""

import warnings

import numpy as np
import pytest

from pyrankcorrect import (
    ChoiceModel,
    ComputationalLimitError,
    DataQualityWarning,
    DataValidationError,
    DimensionError,
    InsufficientDataError,
    ModelSpecificationError,
    NaNInfError,
    NumericalInstabilityWarning,
    RankCorrectError,
    RankingSurvey,
    ValueRangeError,
    correct_ranking_bias,
    get_permutation_space,
)


class TestExceptionHierarchy:
    """Test that exception hierarchy is correct."""

    def test_base_error_is_value_error(self):
        """RankCorrectError inherits from ValueError so callers can catch either."""
        assert issubclass(RankCorrectError, ValueError)

    def test_data_validation_error_hierarchy(self):
        assert issubclass(DataValidationError, RankCorrectError)
        assert issubclass(DimensionError, DataValidationError)
        assert issubclass(ValueRangeError, DataValidationError)
        assert issubclass(NaNInfError, DataValidationError)

    def test_computation_exceptions_hierarchy(self):
        assert issubclass(ModelSpecificationError, RankCorrectError)
        assert issubclass(ComputationalLimitError, RankCorrectError)
        assert issubclass(InsufficientDataError, RankCorrectError)

    def test_warnings_hierarchy(self):
        assert issubclass(DataQualityWarning, UserWarning)
        assert issubclass(NumericalInstabilityWarning, UserWarning)

    def test_catch_all_library_errors(self):
        """All library errors are catchable with RankCorrectError."""
        with pytest.raises(RankCorrectError):
            RankingSurvey(rankings=["12", "21"], anchor_correct=[1])
        with pytest.raises(RankCorrectError):
            get_permutation_space(12)

    def test_catch_as_value_error(self):
        with pytest.raises(ValueError):
            RankingSurvey(rankings=["12", "22"], anchor_correct=[1, 1])


class TestErrorMessages:
    """Error messages name the offending input."""

    def test_dimension_error_message(self):
        with pytest.raises(DimensionError) as exc_info:
            RankingSurvey(rankings=["12", "21", "12"], anchor_correct=[1, 0])
        assert "2 entries" in str(exc_info.value)
        assert "3 rankings" in str(exc_info.value)

    def test_malformed_ranking_message_suggests_policy(self):
        with pytest.raises(ValueRangeError) as exc_info:
            RankingSurvey(rankings=["123", "124"], anchor_correct=[1, 1])
        assert "nan_policy='drop'" in str(exc_info.value)

    def test_model_reference_error(self):
        with pytest.raises(ModelSpecificationError, match="Reference alternative"):
            ChoiceModel.from_dict(
                coefficients={"a:(Intercept)": 0.1},
                reference="z",
                formula="ch ~ 0 | x",
                alternatives=["a", "b"],
            )

    def test_model_vcov_shape(self):
        with pytest.raises(DimensionError, match="vcov"):
            ChoiceModel.from_dict(
                coefficients={"a:(Intercept)": 0.1, "a:x": 0.2},
                vcov=np.eye(3),
                reference="b",
                formula="ch ~ 0 | x",
                alternatives=["a", "b"],
            )

    def test_model_nan_coefficient(self):
        with pytest.raises(NaNInfError):
            ChoiceModel.from_dict(
                coefficients={"a:(Intercept)": np.nan},
                reference="b",
                formula="ch ~ 0 | x",
                alternatives=["a", "b"],
            )


class TestWarnings:
    """Warnings for inputs that do not prevent computation."""

    def test_anchor_outside_unit_interval_warns(self, small_survey):
        with pytest.warns(DataQualityWarning, match="outside"):
            correct_ranking_bias(small_survey, anchor_accuracy=1.2)

    def test_degenerate_anchor_warns(self, small_survey):
        with pytest.warns(NumericalInstabilityWarning):
            result = correct_ranking_bias(small_survey, anchor_accuracy=1 / 6)
        assert result.is_degenerate

    def test_no_warning_for_clean_data(self, small_survey):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            correct_ranking_bias(small_survey)
