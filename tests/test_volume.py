"""
Tests for total and merchantable stand volume.
"""
import warnings

import pytest

from pylongleaf.exceptions import (
    DomainError,
    InsufficientInputError,
    PartialVolumeWarning,
)
from pylongleaf.stand_metrics import solve_stand_triple
from pylongleaf.volume import (
    MerchantableVolumeResult,
    VolumeResult,
    merchantable_volume,
    total_volume,
)


@pytest.fixture
def documented_volumes():
    """Total volumes for N=2500, BA=30, AGE=25, SI=15."""
    return total_volume(n=2500, ba=30, age=25, si=15)


class TestTotalVolume:
    """Tests for total_volume."""

    def test_documented_example(self, documented_volumes):
        assert isinstance(documented_volumes, VolumeResult)
        assert documented_volumes.vol_ob == pytest.approx(241.990118, abs=1e-4)
        assert documented_volumes.vol_ib == pytest.approx(173.336292, abs=1e-4)

    def test_inside_bark_is_smaller(self, documented_volumes):
        assert documented_volumes.vol_ib < documented_volumes.vol_ob

    @pytest.mark.parametrize("missing", ['n', 'ba', 'age', 'si'])
    def test_missing_input(self, missing):
        kwargs = dict(n=2500, ba=30, age=25, si=15)
        kwargs[missing] = None
        with pytest.raises(InsufficientInputError):
            total_volume(**kwargs)

    def test_non_positive_basal_area(self):
        with pytest.raises(DomainError):
            total_volume(n=2500, ba=0, age=25, si=15)


class TestMerchantableVolume:
    """Tests for merchantable_volume."""

    @pytest.fixture
    def qd(self):
        return solve_stand_triple(ba=30, n=2500).qd

    def test_documented_example(self, documented_volumes, qd):
        result = merchantable_volume(n=2500, qd=qd, t=3, d=5,
                                     vol_ob=documented_volumes.vol_ob,
                                     vol_ib=documented_volumes.vol_ib)
        assert isinstance(result, MerchantableVolumeResult)
        assert result.volm_ob == pytest.approx(241.366823, abs=1e-4)
        assert result.volm_ib == pytest.approx(172.885239, abs=1e-4)

    def test_both_volumes_do_not_warn(self, documented_volumes, qd):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            merchantable_volume(n=2500, qd=qd, t=3, d=5,
                                vol_ob=documented_volumes.vol_ob, vol_ib=documented_volumes.vol_ib)

    def test_merchantable_never_exceeds_total(self, documented_volumes, qd):
        result = merchantable_volume(n=2500, qd=qd, t=10, d=15,
                                     vol_ob=documented_volumes.vol_ob,
                                     vol_ib=documented_volumes.vol_ib)
        assert 0 <= result.volm_ob <= documented_volumes.vol_ob
        assert 0 <= result.volm_ib <= documented_volumes.vol_ib

    def test_only_outside_bark(self, documented_volumes, qd):
        with pytest.warns(PartialVolumeWarning, match="outside bark"):
            result = merchantable_volume(n=2500, qd=qd, t=3, d=5, vol_ob=documented_volumes.vol_ob)
        assert result.volm_ob == pytest.approx(241.366823, abs=1e-4)
        assert result.volm_ib is None

    def test_only_inside_bark(self, documented_volumes, qd):
        with pytest.warns(PartialVolumeWarning, match="inside bark"):
            result = merchantable_volume(n=2500, qd=qd, t=3, d=5, vol_ib=documented_volumes.vol_ib)
        assert result.volm_ob is None
        assert result.volm_ib == pytest.approx(172.885239, abs=1e-4)

    def test_no_volume(self, qd):
        with pytest.raises(InsufficientInputError):
            merchantable_volume(n=2500, qd=qd, t=3, d=5)

    @pytest.mark.parametrize("missing", ['n', 'qd', 't', 'd'])
    def test_missing_stand_input(self, missing, qd):
        kwargs = dict(n=2500, qd=qd, t=3, d=5, vol_ob=240.0, vol_ib=170.0)
        kwargs[missing] = None
        with pytest.raises(InsufficientInputError):
            merchantable_volume(**kwargs)

    @pytest.mark.parametrize("kwargs", [
        pytest.param({'t': -1}, id="negative_top_diameter"),
        pytest.param({'d': -5}, id="negative_dbh_threshold"),
        pytest.param({'vol_ob': -10.0}, id="negative_volume"),
    ])
    def test_negative_values(self, kwargs, qd):
        values = dict(n=2500, qd=qd, t=3, d=5, vol_ob=240.0, vol_ib=170.0)
        values.update(kwargs)
        with pytest.raises(DomainError):
            merchantable_volume(**values)
