"""
Stand-level survival model for longleaf pine plantations.

    N1 = N0 * exp((c1 * HDOM0 / 100 + c2 * SDIR0 / 100) * (AGE1^c3 - AGE0^c3))

SDIR0 is the relative stand density index in percent, so denser stands lose
trees faster while taller (better site) stands lose them more slowly.

Reference: Gonzalez-Benecke et al. (2012) Forests 3(4), 1104-1132.
"""
import math
from typing import Optional

from .exceptions import DomainError, validate_non_negative, validate_positive
from .model_base import ParameterizedModel
from .validation import require_inputs

__all__ = [
    'SurvivalModel',
    'get_survival_model',
    'project_n',
]


class SurvivalModel(ParameterizedModel):
    """Projects trees per hectare between two ages."""

    COEFFICIENT_KEY = 'survival'
    FALLBACK_PARAMETERS = {
        'c1': 0.0087247,
        'c2': -0.0117265,
        'c3': 1.2543404,
    }
    REQUIRED_COEFFICIENTS = ('c1', 'c2', 'c3')

    def survival_rate(self, hdom0: float, sdir0: float) -> float:
        """Exponent multiplier applied to the change in transformed age."""
        c = self.coefficients
        return c['c1'] * hdom0 / 100.0 + c['c2'] * sdir0 / 100.0

    def project(self, n0: float, hdom0: float, sdir0: float, age0: float, age1: float) -> float:
        validate_positive(n0, 'n0')
        validate_positive(hdom0, 'hdom0')
        validate_non_negative(sdir0, 'sdir0')
        validate_positive(age0, 'age0')
        validate_positive(age1, 'age1')

        c3 = self.coefficients['c3']
        return n0 * math.exp(self.survival_rate(hdom0, sdir0) * (age1 ** c3 - age0 ** c3))


_survival_model: Optional[SurvivalModel] = None


def get_survival_model() -> SurvivalModel:
    """Get or create the shared SurvivalModel instance."""
    global _survival_model
    if _survival_model is None:
        _survival_model = SurvivalModel()
    return _survival_model


def project_n(n0: Optional[float] = None, hdom0: Optional[float] = None,
              sdir0: Optional[float] = None, age0: Optional[float] = None,
              age1: Optional[float] = None) -> float:
    """Trees per hectare at ``age1`` for a stand observed at ``age0``.

    Args:
        n0: Trees per hectare at age0
        hdom0: Dominant height at age0 (m)
        sdir0: Relative stand density index at age0 (%)
        age0: Initial age (years)
        age1: Projection age (years)

    Returns:
        Trees per hectare at age1

    Raises:
        InsufficientInputError: If any input is missing
        DomainError: If N0, HDOM0 or an age is not positive, SDIR0 is
            negative, or age1 precedes age0

    Example:
        >>> project_n(n0=2500, hdom0=14, sdir0=45, age0=24, age1=25)
        2471.47...
    """
    require_inputs('project_n', n0=n0, hdom0=hdom0, sdir0=sdir0, age0=age0, age1=age1)
    if age1 < age0:
        raise DomainError('age1', age1, f"must not precede age0={age0}")
    return get_survival_model().project(n0, hdom0, sdir0, age0, age1)
