"""
Stand-level total and merchantable volume for longleaf pine plantations.

Total volume (outside and inside bark):
    ln(VOL) = d1 + d2 * ln(N) + d3 * ln(BA) + d4 * ln(BA) / AGE + d5 * ln(SI)

Merchantable volume for a top diameter t (cm) and DBH threshold d (cm):
    VOLm = VOL * exp(m1 * (t / QD)^m2 + m3 * N^m4 * (d / QD)^m5)

Reference: Gonzalez-Benecke et al. (2012) Forests 3(4), 1104-1132.
"""
import math
import warnings
from dataclasses import dataclass, asdict
from typing import Dict, Optional

from .exceptions import (
    InsufficientInputError,
    PartialVolumeWarning,
    validate_non_negative,
    validate_positive,
)
from .model_base import ParameterizedModel
from .validation import is_missing, require_inputs

__all__ = [
    'BARK_TYPES',
    'VolumeResult',
    'MerchantableVolumeResult',
    'VolumeModel',
    'MerchantableVolumeModel',
    'total_volume',
    'merchantable_volume',
]

BARK_TYPES = ('outside_bark', 'inside_bark')


@dataclass(frozen=True)
class VolumeResult:
    """Total stand volume (m3/ha) outside and inside bark."""
    vol_ob: float
    vol_ib: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class MerchantableVolumeResult:
    """Merchantable stand volume (m3/ha); a side is None when its total was not given."""
    volm_ob: Optional[float]
    volm_ib: Optional[float]

    def to_dict(self) -> Dict[str, Optional[float]]:
        return asdict(self)


class VolumeModel(ParameterizedModel):
    """Total stand volume model with separate outside/inside bark coefficients."""

    COEFFICIENT_KEY = 'volume'
    FALLBACK_PARAMETERS = {
        'outside_bark': {
            'd1': 3.1110579, 'd2': -0.1406022, 'd3': 1.1826310,
            'd4': -2.4435259, 'd5': -0.0782880,
        },
        'inside_bark': {
            'd1': 3.0888853, 'd2': -0.1943861, 'd3': 1.2580580,
            'd4': -3.1281571, 'd5': -0.098259,
        },
    }
    REQUIRED_COEFFICIENTS = BARK_TYPES

    def volume(self, bark: str, n: float, ba: float, age: float, si: float) -> float:
        """Total volume (m3/ha) for one bark type."""
        d = self.coefficients[bark]
        log_ba = math.log(ba)
        return math.exp(d['d1'] + d['d2'] * math.log(n) + d['d3'] * log_ba
                        + d['d4'] * log_ba / age + d['d5'] * math.log(si))


class MerchantableVolumeModel(ParameterizedModel):
    """Ratio of merchantable to total volume."""

    COEFFICIENT_KEY = 'merchantable_volume'
    FALLBACK_PARAMETERS = {
        'outside_bark': {
            'm1': -1.0385828, 'm2': 4.2526170, 'm3': -0.6266850,
            'm4': -0.1246646, 'm5': 9.1649608,
        },
        'inside_bark': {
            'm1': -1.0537628, 'm2': 4.2527499, 'm3': -0.6545719,
            'm4': -0.1365633, 'm5': 9.3108306,
        },
    }
    REQUIRED_COEFFICIENTS = BARK_TYPES

    def merchantable_ratio(self, bark: str, n: float, qd: float,
                           top_diameter: float, dbh_threshold: float) -> float:
        m = self.coefficients[bark]
        return math.exp(m['m1'] * (top_diameter / qd) ** m['m2']
                        + m['m3'] * n ** m['m4'] * (dbh_threshold / qd) ** m['m5'])


_volume_model: Optional[VolumeModel] = None
_merch_model: Optional[MerchantableVolumeModel] = None


def get_volume_model() -> VolumeModel:
    """Get or create the shared VolumeModel instance."""
    global _volume_model
    if _volume_model is None:
        _volume_model = VolumeModel()
    return _volume_model


def get_merchantable_volume_model() -> MerchantableVolumeModel:
    """Get or create the shared MerchantableVolumeModel instance."""
    global _merch_model
    if _merch_model is None:
        _merch_model = MerchantableVolumeModel()
    return _merch_model


def total_volume(n: Optional[float] = None, ba: Optional[float] = None,
                 age: Optional[float] = None, si: Optional[float] = None) -> VolumeResult:
    """Total stand volume outside and inside bark.

    Args:
        n: Trees per hectare
        ba: Basal area (m2/ha)
        age: Stand age (years)
        si: Site index (m)

    Returns:
        VolumeResult in m3/ha

    Raises:
        InsufficientInputError: If any input is missing
        DomainError: If any input is not positive
    """
    require_inputs('total_volume', n=n, ba=ba, age=age, si=si)
    for name, value in (('n', n), ('ba', ba), ('age', age), ('si', si)):
        validate_positive(value, name)

    model = get_volume_model()
    return VolumeResult(
        vol_ob=model.volume('outside_bark', n, ba, age, si),
        vol_ib=model.volume('inside_bark', n, ba, age, si),
    )


def merchantable_volume(n: Optional[float] = None, qd: Optional[float] = None,
                        t: Optional[float] = None, d: Optional[float] = None,
                        vol_ob: Optional[float] = None,
                        vol_ib: Optional[float] = None) -> MerchantableVolumeResult:
    """Merchantable stand volume from total volume.

    Args:
        n: Trees per hectare
        qd: Quadratic mean diameter (cm)
        t: Top stem diameter outside bark for the merchantability limit (cm)
        d: DBH threshold for merchantable trees (cm)
        vol_ob: Total volume outside bark (m3/ha)
        vol_ib: Total volume inside bark (m3/ha)

    Returns:
        MerchantableVolumeResult; the side whose total volume is missing is None

    Raises:
        InsufficientInputError: If N, QD, t, d or both volumes are missing
        DomainError: If N or QD is not positive, or t, d or a volume is negative

    Warns:
        PartialVolumeWarning: If only one of the two total volumes is given
    """
    require_inputs('merchantable_volume', n=n, qd=qd, t=t, d=d)
    validate_positive(n, 'n')
    validate_positive(qd, 'qd')
    validate_non_negative(t, 't')
    validate_non_negative(d, 'd')

    totals = {'outside_bark': vol_ob, 'inside_bark': vol_ib}
    given = {bark: vol for bark, vol in totals.items() if not is_missing(vol)}
    if not given:
        raise InsufficientInputError('merchantable_volume', ('vol_ob', 'vol_ib'),
                                     "at least one total volume is required")
    if len(given) == 1:
        bark = next(iter(given)).replace('_', ' ')
        warnings.warn(f"Only total volume {bark} provided; the other merchantable volume is None.",
                      PartialVolumeWarning, stacklevel=2)

    model = get_merchantable_volume_model()
    merch = {}
    for bark in BARK_TYPES:
        if bark in given:
            volume = validate_non_negative(given[bark], 'vol_ob' if bark == 'outside_bark' else 'vol_ib')
            merch[bark] = volume * model.merchantable_ratio(bark, n, qd, t, d)
        else:
            merch[bark] = None

    return MerchantableVolumeResult(volm_ob=merch['outside_bark'], volm_ib=merch['inside_bark'])
