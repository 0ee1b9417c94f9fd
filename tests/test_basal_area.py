"""
Tests for stand basal area prediction and projection.
"""
import math

import pytest

from pylongleaf.basal_area import BasalAreaModel, BasalAreaResult, predict_or_project_ba
from pylongleaf.exceptions import DomainError, InsufficientInputError


class TestBasalAreaPrediction:
    """Tests for predict_or_project_ba without projection."""

    def test_documented_prediction(self):
        result = predict_or_project_ba(n0=1200, hdom0=17.7)
        assert isinstance(result, BasalAreaResult)
        assert result.ba0 == pytest.approx(25.981481, abs=1e-5)
        assert result.ba1 is None

    def test_prediction_matches_log_linear_equation(self):
        expected = math.exp(-4.6484039 + 0.4452486 * math.log(1200) + 1.6526307 * math.log(14))
        assert predict_or_project_ba(n0=1200, hdom0=14).ba0 == pytest.approx(expected)
        assert expected == pytest.approx(17.63402, abs=1e-5)

    def test_more_trees_more_basal_area(self):
        assert predict_or_project_ba(n0=1500, hdom0=14).ba0 > predict_or_project_ba(n0=1000, hdom0=14).ba0

    @pytest.mark.parametrize("kwargs", [
        pytest.param({'n0': 1200}, id="missing_hdom"),
        pytest.param({'hdom0': 14}, id="missing_n"),
        pytest.param({}, id="nothing_given"),
    ])
    def test_missing_input(self, kwargs):
        with pytest.raises(InsufficientInputError):
            predict_or_project_ba(**kwargs)

    def test_non_positive_input(self):
        with pytest.raises(DomainError):
            predict_or_project_ba(n0=0, hdom0=14)


class TestBasalAreaProjection:
    """Tests for predict_or_project_ba with projection=True."""

    def test_documented_projection(self):
        result = predict_or_project_ba(n0=1200, hdom0=17.7, projection=True,
                                       ba0=24, n1=1182, hdom1=18.9)
        assert result.ba0 == 24
        assert result.ba1 == pytest.approx(26.528737, abs=1e-5)

    def test_no_change_keeps_basal_area(self):
        result = predict_or_project_ba(n0=1200, hdom0=17.7, projection=True,
                                       ba0=24, n1=1200, hdom1=17.7)
        assert result.ba1 == pytest.approx(24)

    def test_projection_approximates_prediction_for_small_steps(self):
        predicted_0 = predict_or_project_ba(n0=1200, hdom0=17.7).ba0
        predicted_1 = predict_or_project_ba(n0=1199, hdom0=17.72).ba0
        projected = predict_or_project_ba(n0=1200, hdom0=17.7, projection=True,
                                          ba0=predicted_0, n1=1199, hdom1=17.72).ba1
        assert projected == pytest.approx(predicted_1, rel=1e-5)

    @pytest.mark.parametrize("kwargs", [
        pytest.param({'n1': 1182, 'hdom1': 18.9}, id="missing_ba0"),
        pytest.param({'ba0': 24, 'hdom1': 18.9}, id="missing_n1"),
        pytest.param({'ba0': 24, 'n1': 1182}, id="missing_hdom1"),
    ])
    def test_projection_requires_next_state(self, kwargs):
        with pytest.raises(InsufficientInputError):
            predict_or_project_ba(n0=1200, hdom0=17.7, projection=True, **kwargs)

    def test_model_repr(self):
        assert repr(BasalAreaModel()) == "BasalAreaModel(equation='basal_area')"
