"""
Tests for the basal area / tree density / QD relations and stand density index.
"""
import math
import warnings

import pytest

from pylongleaf.exceptions import DomainError, InsufficientInputError, NothingToSolveWarning
from pylongleaf.stand_metrics import (
    StandDensityModel,
    StandTriple,
    quadratic_mean_diameter,
    relative_density_index,
    solve_stand_triple,
    stand_density_index,
)


STAND_CASES = [
    pytest.param(42.0, 1660.0, id="documented_stand"),
    pytest.param(17.63402, 1200.0, id="young_plantation"),
    pytest.param(30.0, 2500.0, id="dense_stand"),
    pytest.param(5.0, 150.0, id="heavily_thinned"),
]


class TestSolveStandTriple:
    """Tests for solve_stand_triple."""

    def test_qd_from_ba_and_n(self):
        result = solve_stand_triple(ba=42, n=1660)
        assert isinstance(result, StandTriple)
        assert result.qd == pytest.approx(math.sqrt(4 / math.pi * 42 / 1660) * 100)
        assert result.qd == pytest.approx(17.948, abs=1e-3)
        assert result.ba == 42
        assert result.n == 1660

    def test_ba_from_n_and_qd(self):
        result = solve_stand_triple(n=10000, qd=20)
        assert result.ba == pytest.approx(math.pi / 4 * 0.2 ** 2 * 10000)

    @pytest.mark.parametrize("ba,n", STAND_CASES)
    def test_round_trip(self, ba, n):
        qd = solve_stand_triple(ba=ba, n=n).qd
        assert solve_stand_triple(n=n, qd=qd).ba == pytest.approx(ba)
        assert solve_stand_triple(ba=ba, qd=qd).n == pytest.approx(n)

    def test_nan_counts_as_missing(self):
        result = solve_stand_triple(ba=42, n=1660, qd=float('nan'))
        assert result.qd == pytest.approx(17.948, abs=1e-3)

    @pytest.mark.parametrize("kwargs", [
        pytest.param({}, id="nothing_given"),
        pytest.param({'ba': 42}, id="only_ba"),
        pytest.param({'qd': 18, 'n': None}, id="only_qd"),
    ])
    def test_insufficient_input(self, kwargs):
        with pytest.raises(InsufficientInputError) as exc_info:
            solve_stand_triple(**kwargs)
        assert exc_info.value.operation == 'solve_stand_triple'
        assert len(exc_info.value.missing) >= 2

    def test_all_given_warns_and_returns_inputs(self):
        with pytest.warns(NothingToSolveWarning):
            result = solve_stand_triple(ba=42, n=1660, qd=18)
        assert result == StandTriple(ba=42, n=1660, qd=18)

    def test_warning_is_a_user_warning(self):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            solve_stand_triple(ba=1, n=1, qd=1)
        assert issubclass(caught[0].category, UserWarning)

    @pytest.mark.parametrize("kwargs", [
        pytest.param({'ba': 0, 'n': 1000}, id="zero_ba"),
        pytest.param({'ba': 20, 'n': -5}, id="negative_n"),
        pytest.param({'ba': 20, 'qd': 0}, id="zero_qd"),
    ])
    def test_non_positive_values_rejected(self, kwargs):
        with pytest.raises(DomainError):
            solve_stand_triple(**kwargs)

    def test_quadratic_mean_diameter_helper(self):
        assert quadratic_mean_diameter(42, 1660) == pytest.approx(solve_stand_triple(ba=42, n=1660).qd)


class TestStandDensityIndex:
    """Tests for Reineke SDI and the relative density index."""

    def test_sdi_at_reference_diameter_equals_density(self):
        assert stand_density_index(n=800, qd=25.4) == pytest.approx(800)

    def test_relative_density_index_formula(self):
        n, qd = 2500, 12.360774
        expected = 100 * n * (qd / 25.4) ** 1.605 / 1200
        assert relative_density_index(n=n, qd=qd) == pytest.approx(expected)
        assert relative_density_index(n=n, qd=qd) == pytest.approx(65.5743, abs=1e-3)

    def test_relative_density_is_a_percentage(self):
        # A stand at SDImax has 100 percent relative density
        assert relative_density_index(n=1200, qd=25.4) == pytest.approx(100.0)

    @pytest.mark.parametrize("kwargs", [
        pytest.param({'n': 1200}, id="missing_qd"),
        pytest.param({'qd': 15}, id="missing_n"),
        pytest.param({'n': float('nan'), 'qd': 15}, id="nan_n"),
    ])
    def test_missing_input(self, kwargs):
        with pytest.raises(InsufficientInputError):
            relative_density_index(**kwargs)

    def test_non_positive_input(self):
        with pytest.raises(DomainError):
            relative_density_index(n=1200, qd=0)

    def test_model_loads_packaged_coefficients(self):
        model = StandDensityModel()
        assert model.sdi_max == 1200
        assert model.get_coefficient('exponent') == pytest.approx(1.605)
