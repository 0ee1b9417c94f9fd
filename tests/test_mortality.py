"""
Tests for the stand-level survival model.
"""
import math

import pytest

from pylongleaf.exceptions import DomainError, InsufficientInputError
from pylongleaf.mortality import SurvivalModel, get_survival_model, project_n


# (n0, hdom0, sdir0, age0, age1)
SURVIVAL_CASES = [
    pytest.param(2500, 14, 45, 24, 25, id="documented_stand"),
    pytest.param(1200, 14, 37.03, 17, 18, id="young_plantation"),
    pytest.param(800, 25, 60, 40, 45, id="five_year_step"),
    pytest.param(1500, 10, 0, 10, 11, id="zero_density"),
]


def closed_form(n0, hdom0, sdir0, age0, age1):
    c1, c2, c3 = 0.0087247, -0.0117265, 1.2543404
    return n0 * math.exp((c1 * hdom0 / 100 + c2 * sdir0 / 100) * (age1 ** c3 - age0 ** c3))


class TestProjectN:
    """Tests for project_n."""

    def test_documented_example(self):
        assert project_n(n0=2500, hdom0=14, sdir0=45, age0=24, age1=25) == pytest.approx(2471.475231, abs=1e-5)

    @pytest.mark.parametrize("n0,hdom0,sdir0,age0,age1", SURVIVAL_CASES)
    def test_closed_form(self, n0, hdom0, sdir0, age0, age1):
        expected = closed_form(n0, hdom0, sdir0, age0, age1)
        assert project_n(n0=n0, hdom0=hdom0, sdir0=sdir0, age0=age0, age1=age1) == pytest.approx(expected)

    def test_same_age_keeps_density(self):
        assert project_n(n0=1000, hdom0=15, sdir0=40, age0=20, age1=20) == pytest.approx(1000)

    def test_denser_stands_lose_more_trees(self):
        sparse = project_n(n0=1000, hdom0=15, sdir0=20, age0=20, age1=21)
        dense = project_n(n0=1000, hdom0=15, sdir0=80, age0=20, age1=21)
        assert dense < sparse < 1000

    def test_returns_float(self):
        assert isinstance(project_n(n0=2500, hdom0=14, sdir0=45, age0=24, age1=25), float)

    @pytest.mark.parametrize("missing", ['n0', 'hdom0', 'sdir0', 'age0', 'age1'])
    def test_missing_input(self, missing):
        kwargs = dict(n0=2500, hdom0=14, sdir0=45, age0=24, age1=25)
        kwargs[missing] = None
        with pytest.raises(InsufficientInputError) as exc_info:
            project_n(**kwargs)
        assert exc_info.value.missing == (missing,)

    @pytest.mark.parametrize("kwargs", [
        pytest.param({'n0': 0}, id="zero_n"),
        pytest.param({'sdir0': -1}, id="negative_sdir"),
        pytest.param({'age1': 23}, id="backwards_in_time"),
    ])
    def test_invalid_values(self, kwargs):
        values = dict(n0=2500, hdom0=14, sdir0=45, age0=24, age1=25)
        values.update(kwargs)
        with pytest.raises(DomainError):
            project_n(**values)

    def test_shared_model(self):
        assert get_survival_model() is get_survival_model()
        assert isinstance(get_survival_model(), SurvivalModel)
