"""
Stand-level metric relations for pylongleaf.

Metrics include:
- Basal area (BA, m2/ha), tree density (N, trees/ha) and quadratic mean
  diameter (QD, cm), any two of which determine the third:
  QD = sqrt((4/pi) * (BA/N)) * 100
- Stand Density Index (SDI) using Reineke's equation with a 25.4 cm reference
  diameter
- Relative SDI (SDIR, %) against the longleaf pine maximum of 1200 trees/ha
"""
import math
import warnings
from dataclasses import dataclass, asdict
from typing import Dict, Optional

from .exceptions import InsufficientInputError, NothingToSolveWarning, validate_positive
from .model_base import ParameterizedModel
from .validation import missing_names, require_inputs

__all__ = [
    'StandTriple',
    'StandDensityModel',
    'solve_stand_triple',
    'quadratic_mean_diameter',
    'stand_density_index',
    'relative_density_index',
]


@dataclass(frozen=True)
class StandTriple:
    """Basal area, tree density and quadratic mean diameter of a stand.

    Attributes:
        ba: Basal area (m2/ha)
        n: Number of trees per hectare
        qd: Quadratic mean diameter (cm)
    """
    ba: float
    n: float
    qd: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def quadratic_mean_diameter(ba: float, n: float) -> float:
    """QD (cm) from basal area (m2/ha) and trees per hectare."""
    return math.sqrt((4.0 / math.pi) * (ba / n)) * 100.0


def _basal_area(n: float, qd: float) -> float:
    return (math.pi / 4.0) * (qd / 100.0) ** 2 * n


def _tree_density(ba: float, qd: float) -> float:
    return ba / ((math.pi / 4.0) * (qd / 100.0) ** 2)


def solve_stand_triple(ba: Optional[float] = None, n: Optional[float] = None,
                       qd: Optional[float] = None) -> StandTriple:
    """Complete the missing one of basal area, tree density and QD.

    Args:
        ba: Basal area (m2/ha)
        n: Number of trees per hectare
        qd: Quadratic mean diameter (cm)

    Returns:
        StandTriple with all three values

    Raises:
        InsufficientInputError: If fewer than two values are given
        DomainError: If a given value is not positive

    Warns:
        NothingToSolveWarning: If all three values are given; they are
        returned unchanged.

    Example:
        >>> solve_stand_triple(ba=42, n=1660).qd
        17.948...
    """
    values = {'ba': ba, 'n': n, 'qd': qd}
    missing = missing_names(values)

    if len(missing) > 1:
        raise InsufficientInputError('solve_stand_triple', missing,
                                     "two of BA, N and QD are required")

    for name, value in values.items():
        if name not in missing:
            validate_positive(value, name)

    if not missing:
        warnings.warn("BA, N and QD were all given; nothing to estimate.",
                      NothingToSolveWarning, stacklevel=2)
        return StandTriple(ba=ba, n=n, qd=qd)

    unknown = missing[0]
    if unknown == 'qd':
        qd = quadratic_mean_diameter(ba, n)
    elif unknown == 'ba':
        ba = _basal_area(n, qd)
    else:
        n = _tree_density(ba, qd)

    return StandTriple(ba=ba, n=n, qd=qd)


class StandDensityModel(ParameterizedModel):
    """Reineke stand density index for longleaf pine.

    SDI = N * (QD / 25.4)^1.605
    SDIR (%) = 100 * SDI / SDImax, SDImax = 1200 trees/ha
    """

    COEFFICIENT_KEY = 'stand_density_index'
    FALLBACK_PARAMETERS = {
        'sdi_max': 1200,
        'reference_diameter': 25.4,
        'exponent': 1.605,
    }
    REQUIRED_COEFFICIENTS = ('sdi_max', 'reference_diameter', 'exponent')

    @property
    def sdi_max(self) -> float:
        return float(self.coefficients['sdi_max'])

    def sdi(self, n: float, qd: float) -> float:
        """Absolute stand density index (trees/ha at the reference diameter)."""
        validate_positive(n, 'n')
        validate_positive(qd, 'qd')
        c = self.coefficients
        return n * (qd / c['reference_diameter']) ** c['exponent']

    def relative_sdi(self, n: float, qd: float) -> float:
        """Relative stand density index as a percentage of SDImax."""
        return 100.0 * self.sdi(n, qd) / self.sdi_max


_density_model: Optional[StandDensityModel] = None


def get_density_model() -> StandDensityModel:
    """Get or create the shared StandDensityModel instance."""
    global _density_model
    if _density_model is None:
        _density_model = StandDensityModel()
    return _density_model


def stand_density_index(n: Optional[float] = None, qd: Optional[float] = None) -> float:
    """Reineke stand density index for a stand.

    Raises:
        InsufficientInputError: If either input is missing
        DomainError: If either input is not positive
    """
    require_inputs('stand_density_index', n=n, qd=qd)
    return get_density_model().sdi(n, qd)


def relative_density_index(n: Optional[float] = None, qd: Optional[float] = None) -> float:
    """Relative stand density index (%) for longleaf pine.

    RSDI = 100 * N * (QD/25.4)^1.605 / 1200

    Args:
        n: Number of trees per hectare
        qd: Quadratic mean diameter (cm)

    Returns:
        Relative stand density index in percent

    Raises:
        InsufficientInputError: If either input is missing
        DomainError: If either input is not positive
    """
    require_inputs('relative_density_index', n=n, qd=qd)
    return get_density_model().relative_sdi(n, qd)
