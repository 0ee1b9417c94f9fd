"""
Site index relations for longleaf pine plantations.

Dominant height (HDOM), site index (SI, dominant height at base age 50) and
stand age are linked by a Chapman-Richards type equation:

    HDOM = SI * ((1 - exp(a1 * AGE)) / (1 - exp(a1 * 50)))^a2

HDOM and SI have closed forms. AGE is recovered by a bounded grid search over
[1, 100] years at 0.01 year resolution, keeping the first (smallest) age with
the minimum absolute height error.

Reference: Gonzalez-Benecke et al. (2012) Forests 3(4), 1104-1132.
"""
import math
import warnings
from dataclasses import dataclass, asdict
from typing import Dict, Optional

import numpy as np

from .config_loader import get_simulation_default
from .exceptions import InsufficientInputError, NothingToSolveWarning, validate_positive
from .logging_config import get_logger
from .model_base import ParameterizedModel
from .validation import missing_names

logger = get_logger(__name__)

__all__ = [
    'SiteTriple',
    'SiteIndexModel',
    'get_site_index_model',
    'solve_site_triple',
]


@dataclass(frozen=True)
class SiteTriple:
    """Dominant height (m), site index (m) and stand age (years)."""
    hdom: float
    si: float
    age: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


class SiteIndexModel(ParameterizedModel):
    """Dominant height / site index / age model.

    Attributes:
        min_age: Lower bound of the age search grid (years)
        max_age: Upper bound of the age search grid (years)
        step: Resolution of the age search grid (years)
    """

    COEFFICIENT_KEY = 'site_index'
    FALLBACK_PARAMETERS = {
        'a1': -0.0369815,
        'a2': 1.2928702,
        'base_age': 50,
    }
    REQUIRED_COEFFICIENTS = ('a1', 'a2', 'base_age')

    def __init__(self, min_age: Optional[float] = None, max_age: Optional[float] = None,
                 step: Optional[float] = None):
        super().__init__()
        self.min_age = float(min_age if min_age is not None
                             else get_simulation_default('site_age_search.min_age', 1.0))
        self.max_age = float(max_age if max_age is not None
                             else get_simulation_default('site_age_search.max_age', 100.0))
        self.step = float(step if step is not None
                          else get_simulation_default('site_age_search.step', 0.01))
        self._age_grid = None

    @property
    def base_age(self) -> float:
        return float(self.coefficients['base_age'])

    def height_ratio(self, age):
        """Ratio HDOM/SI at ``age`` (scalar or numpy array)."""
        a1 = self.coefficients['a1']
        a2 = self.coefficients['a2']
        return ((1.0 - np.exp(a1 * age)) / (1.0 - math.exp(a1 * self.base_age))) ** a2

    def dominant_height(self, si: float, age: float) -> float:
        """Dominant height (m) of a stand with site index ``si`` at ``age``."""
        validate_positive(si, 'si')
        validate_positive(age, 'age')
        return float(si * self.height_ratio(age))

    def site_index(self, hdom: float, age: float) -> float:
        """Site index (m) of a stand with dominant height ``hdom`` at ``age``."""
        validate_positive(hdom, 'hdom')
        validate_positive(age, 'age')
        return float(hdom / self.height_ratio(age))

    @property
    def age_grid(self) -> np.ndarray:
        """Candidate ages searched by ``age``; built once per model."""
        if self._age_grid is None:
            n_points = int(round((self.max_age - self.min_age) / self.step)) + 1
            self._age_grid = np.round(self.min_age + self.step * np.arange(n_points), 6)
        return self._age_grid

    def age(self, hdom: float, si: float) -> float:
        """Stand age (years) at which a stand of site index ``si`` reaches ``hdom``.

        Scans the age grid and returns the first age with the smallest
        absolute difference between ``hdom`` and the predicted height.
        """
        validate_positive(hdom, 'hdom')
        validate_positive(si, 'si')

        grid = self.age_grid
        errors = np.abs(hdom - si * self.height_ratio(grid))
        # argmin returns the first occurrence, so ties resolve to the smallest age
        best = int(np.argmin(errors))
        age = float(grid[best])

        if best == 0 or best == len(grid) - 1:
            logger.warning(
                "Age for HDOM=%.2f m and SI=%.2f m lies at the search limit (%.2f years); "
                "the true age may be outside [%.0f, %.0f]",
                hdom, si, age, self.min_age, self.max_age,
            )
        return age


_site_model: Optional[SiteIndexModel] = None


def get_site_index_model() -> SiteIndexModel:
    """Get or create the shared SiteIndexModel instance."""
    global _site_model
    if _site_model is None:
        _site_model = SiteIndexModel()
    return _site_model


def solve_site_triple(hdom: Optional[float] = None, si: Optional[float] = None,
                      age: Optional[float] = None) -> SiteTriple:
    """Complete the missing one of dominant height, site index and age.

    Args:
        hdom: Dominant height (m)
        si: Site index (m, dominant height at base age 50)
        age: Stand age (years)

    Returns:
        SiteTriple with all three values

    Raises:
        InsufficientInputError: If fewer than two values are given
        DomainError: If a given value is not positive

    Warns:
        NothingToSolveWarning: If all three values are given; they are
        returned unchanged.

    Example:
        >>> solve_site_triple(si=30, age=40).hdom
        26.79...
        >>> solve_site_triple(hdom=27.5, age=40).si
        30.78...
        >>> solve_site_triple(hdom=27.5, si=33.3).age
        35.08
    """
    values = {'hdom': hdom, 'si': si, 'age': age}
    missing = missing_names(values)

    if len(missing) > 1:
        raise InsufficientInputError('solve_site_triple', missing,
                                     "two of HDOM, SI and AGE are required")

    if not missing:
        for name, value in values.items():
            validate_positive(value, name)
        warnings.warn("HDOM, SI and AGE were all given; nothing to estimate.",
                      NothingToSolveWarning, stacklevel=2)
        return SiteTriple(hdom=hdom, si=si, age=age)

    model = get_site_index_model()
    unknown = missing[0]
    if unknown == 'hdom':
        hdom = model.dominant_height(si, age)
    elif unknown == 'si':
        si = model.site_index(hdom, age)
    else:
        age = model.age(hdom, si)

    return SiteTriple(hdom=hdom, si=si, age=age)
