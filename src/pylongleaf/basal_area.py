"""
Stand basal area prediction and projection.

Prediction:  ln(BA) = c1 + c2 * ln(N) + c3 * ln(HDOM)
Projection:  BA1 = BA0 * (1 + c2 * (N1 - N0) / N0 + c3 * (HDOM1 - HDOM0) / HDOM0)

The projection is a first-order approximation of the prediction equation
around the current stand, so a measured BA0 carries forward its deviation
from the prediction.

Reference: Gonzalez-Benecke et al. (2012) Forests 3(4), 1104-1132.
"""
import math
from dataclasses import dataclass, asdict
from typing import Dict, Optional

from .exceptions import validate_positive
from .model_base import ParameterizedModel
from .validation import require_inputs

__all__ = [
    'BasalAreaResult',
    'BasalAreaModel',
    'predict_or_project_ba',
]


@dataclass(frozen=True)
class BasalAreaResult:
    """Basal area now and, for projections, one step ahead (m2/ha)."""
    ba0: float
    ba1: Optional[float] = None

    def to_dict(self) -> Dict[str, Optional[float]]:
        return asdict(self)


class BasalAreaModel(ParameterizedModel):
    """Longleaf pine stand basal area model."""

    COEFFICIENT_KEY = 'basal_area'
    FALLBACK_PARAMETERS = {
        'c1': -4.6484039,
        'c2': 0.4452486,
        'c3': 1.6526307,
    }
    REQUIRED_COEFFICIENTS = ('c1', 'c2', 'c3')

    def predict(self, n: float, hdom: float) -> float:
        """Predicted basal area (m2/ha) from trees/ha and dominant height (m)."""
        validate_positive(n, 'n0')
        validate_positive(hdom, 'hdom0')
        c = self.coefficients
        return math.exp(c['c1'] + c['c2'] * math.log(n) + c['c3'] * math.log(hdom))

    def project(self, ba0: float, n0: float, hdom0: float, n1: float, hdom1: float) -> float:
        """Basal area (m2/ha) after the stand moves from (N0, HDOM0) to (N1, HDOM1)."""
        validate_positive(ba0, 'ba0')
        validate_positive(n0, 'n0')
        validate_positive(hdom0, 'hdom0')
        validate_positive(n1, 'n1')
        validate_positive(hdom1, 'hdom1')
        c = self.coefficients
        return ba0 * (1.0 + c['c2'] * (n1 - n0) / n0 + c['c3'] * (hdom1 - hdom0) / hdom0)


_ba_model: Optional[BasalAreaModel] = None


def get_basal_area_model() -> BasalAreaModel:
    """Get or create the shared BasalAreaModel instance."""
    global _ba_model
    if _ba_model is None:
        _ba_model = BasalAreaModel()
    return _ba_model


def predict_or_project_ba(n0: Optional[float] = None, hdom0: Optional[float] = None,
                          projection: bool = False, ba0: Optional[float] = None,
                          n1: Optional[float] = None,
                          hdom1: Optional[float] = None) -> BasalAreaResult:
    """Predict current basal area, or project a known basal area one step.

    Args:
        n0: Trees per hectare now
        hdom0: Dominant height now (m)
        projection: Project ``ba0`` to (n1, hdom1) instead of predicting
        ba0: Current basal area (m2/ha); required for projection
        n1: Trees per hectare at the next age; required for projection
        hdom1: Dominant height at the next age (m); required for projection

    Returns:
        BasalAreaResult. For a prediction ``ba1`` is None; for a projection
        ``ba0`` echoes the input.

    Raises:
        InsufficientInputError: If a required input is missing
        DomainError: If an input is not positive

    Example:
        >>> predict_or_project_ba(n0=1200, hdom0=17.7).ba0
        25.98...
    """
    require_inputs('predict_or_project_ba', n0=n0, hdom0=hdom0)
    model = get_basal_area_model()

    if not projection:
        return BasalAreaResult(ba0=model.predict(n0, hdom0))

    require_inputs('predict_or_project_ba (projection)', ba0=ba0, n1=n1, hdom1=hdom1)
    return BasalAreaResult(ba0=ba0, ba1=model.project(ba0, n0, hdom0, n1, hdom1))
