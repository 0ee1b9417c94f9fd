"""
Height-diameter relationships for filling missing tree heights.

Two methods are available:
1. Parametric longleaf pine model (Gonzalez-Benecke et al. 2013):
   HT = exp(a1 + a2 * DBH^a3 + AGE^a4 + BA^a5)
2. Local fit of ln(HT) = b0 + b1 / DBH to the measured trees of the plot

Measured heights are always kept; only missing entries are replaced.
"""
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, Optional, Sequence

import numpy as np

from .config_loader import get_simulation_default
from .exceptions import (
    DomainError,
    InsufficientDataError,
    InsufficientInputError,
    MalformedInputError,
    ValidationError,
    validate_positive,
)
from .logging_config import get_logger
from .model_base import ParameterizedModel
from .plot_metrics import aggregate_stand
from .validation import as_float_array, is_missing

logger = get_logger(__name__)

__all__ = [
    'HeightMethod',
    'parse_height_method',
    'ParametricHeightModel',
    'LogInverseFit',
    'HeightImputationResult',
    'fit_log_inverse_model',
    'impute_heights',
]


class HeightMethod(IntEnum):
    """Selector for the height imputation method."""
    PARAMETRIC = 1
    EMPIRICAL = 2


def parse_height_method(method) -> HeightMethod:
    """Return the HeightMethod for 1 or 2; anything else is a ValidationError."""
    try:
        return HeightMethod(method)
    except (TypeError, ValueError):
        raise ValidationError(
            f"Unknown height imputation method: {method!r}. Use 1 (parametric) or 2 (empirical)"
        ) from None


class ParametricHeightModel(ParameterizedModel):
    """Fixed DBH-height model for longleaf pine using stand age and basal area."""

    COEFFICIENT_KEY = 'height_diameter'
    FALLBACK_PARAMETERS = {
        'a1': 0.059425,
        'a2': -10.803775,
        'a3': -1.127503,
        'a4': 0.150532,
        'a5': 0.121239,
    }
    REQUIRED_COEFFICIENTS = ('a1', 'a2', 'a3', 'a4', 'a5')

    def predict_height(self, dbh, age: float, basal_area: float):
        """Predict total height (m).

        Args:
            dbh: Diameter at breast height (cm), scalar or numpy array
            age: Stand age (years)
            basal_area: Stand basal area (m2/ha)

        Returns:
            Predicted height(s) in meters
        """
        validate_positive(age, 'age')
        validate_positive(basal_area, 'basal_area')
        dbh = np.asarray(dbh, dtype=float)
        if np.any(dbh <= 0):
            raise MalformedInputError("DBH values must be positive for the height model")

        c = self.coefficients
        return np.exp(c['a1'] + c['a2'] * dbh ** c['a3'] + age ** c['a4'] + basal_area ** c['a5'])


@dataclass(frozen=True)
class LogInverseFit:
    """Least-squares fit of ln(HT) = b0 + b1 / DBH.

    Attributes:
        b0: Intercept
        b1: Slope on 1/DBH
        r2: Coefficient of determination on the log scale
        n_obs: Number of trees used in the fit
    """
    b0: float
    b1: float
    r2: float
    n_obs: int

    def predict(self, dbh):
        """Predicted height (m) for DBH (cm)."""
        return np.exp(self.b0 + self.b1 / np.asarray(dbh, dtype=float))


def _require_positive(values: np.ndarray, name: str) -> None:
    bad = values[values <= 0]
    if bad.size:
        raise DomainError(name, float(bad[0]), "values must be positive")


def fit_log_inverse_model(dbh: Sequence[float], heights: Sequence[float],
                          min_observations: Optional[int] = None) -> LogInverseFit:
    """Fit ln(HT) = b0 + b1 / DBH to the trees with measured heights.

    Args:
        dbh: Diameters at breast height (cm)
        heights: Heights (m); missing entries are ignored
        min_observations: Minimum number of measured heights (default 10)

    Returns:
        LogInverseFit with coefficients and r^2

    Raises:
        InsufficientDataError: If there are too few measured trees or their
            diameters do not vary
        DomainError: If a measured tree has a DBH or height of zero or less
    """
    if min_observations is None:
        min_observations = get_simulation_default('height_imputation.min_measured_heights', 10)

    dbh = as_float_array(dbh, 'DBH')
    heights = as_float_array(heights, 'HT')
    measured = ~np.isnan(heights)
    n_obs = int(measured.sum())

    if n_obs < min_observations:
        raise InsufficientDataError(
            f"Not enough tree height measurements to fit model: {n_obs} measured, "
            f"{min_observations} required"
        )

    _require_positive(dbh[measured], 'DBH')
    _require_positive(heights[measured], 'HT')

    x = 1.0 / dbh[measured]
    y = np.log(heights[measured])
    if np.ptp(x) == 0:
        raise InsufficientDataError("Measured trees all have the same DBH; cannot fit model")

    b1, b0 = np.polyfit(x, y, 1)
    residuals = y - (b0 + b1 * x)
    ss_res = float(np.sum(residuals ** 2))
    ss_tot = float(np.sum((y - y.mean()) ** 2))
    r2 = 1.0 - ss_res / ss_tot if ss_tot > 0 else 1.0

    return LogInverseFit(b0=float(b0), b1=float(b1), r2=float(np.clip(r2, 0.0, 1.0)), n_obs=n_obs)


@dataclass(frozen=True)
class HeightImputationResult:
    """Completed heights and fit statistics.

    Attributes:
        heights: Final heights (m); measured values kept, missing ones estimated
        imputed: Boolean mask of the entries that were estimated
        method: Method used
        r2: Coefficient of determination (method 2 only, None otherwise)
        coefficients: Coefficients used to estimate heights
    """
    heights: np.ndarray
    imputed: np.ndarray
    method: HeightMethod
    r2: Optional[float] = None
    coefficients: Dict[str, Any] = field(default_factory=dict)

    @property
    def n_imputed(self) -> int:
        return int(self.imputed.sum())


def impute_heights(dbh: Sequence[float], heights: Sequence[float], method=HeightMethod.EMPIRICAL,
                   area: Optional[float] = None, age: Optional[float] = None,
                   basal_area: Optional[float] = None) -> HeightImputationResult:
    """Estimate missing tree heights of a single plot.

    Args:
        dbh: Diameters at breast height (cm); must be complete
        heights: Heights (m) with missing values as None or NaN
        method: 1 for the parametric model, 2 for the fitted model
        area: Plot area (m2); used to derive basal area for method 1
        age: Stand age (years); required for method 1
        basal_area: Stand basal area (m2/ha); alternative to ``area`` for method 1

    Returns:
        HeightImputationResult

    Raises:
        MalformedInputError: If DBH is incomplete or the vectors differ in length
        DomainError: If a DBH, or a measured height used in the fit, is not positive
        InsufficientInputError: If method 1 lacks age or both area and basal area
        InsufficientDataError: If method 2 has fewer than 10 measured heights
    """
    dbh = as_float_array(dbh, 'DBH')
    heights = as_float_array(heights, 'HT')
    if dbh.size != heights.size:
        raise MalformedInputError(
            f"DBH and HT must have the same length ({dbh.size} != {heights.size})"
        )
    if np.isnan(dbh).any():
        raise MalformedInputError("DBH vector has missing values")
    _require_positive(dbh, 'DBH')

    method = parse_height_method(method)
    missing = np.isnan(heights)

    if method == HeightMethod.PARAMETRIC:
        if is_missing(age) or (is_missing(area) and is_missing(basal_area)):
            missing_inputs = ['age'] if is_missing(age) else []
            if is_missing(area) and is_missing(basal_area):
                missing_inputs.append('area or basal_area')
            raise InsufficientInputError('impute_heights', missing_inputs,
                                         "method 1 needs stand age and plot area or basal area")
        if is_missing(basal_area):
            basal_area = aggregate_stand(dbh, area).ba

        model = ParametricHeightModel()
        estimated = model.predict_height(dbh, age, basal_area)
        r2 = None
        coefficients = dict(model.get_coefficients(), age=age, basal_area=basal_area)
    else:
        fit = fit_log_inverse_model(dbh, heights)
        estimated = fit.predict(dbh)
        r2 = fit.r2
        coefficients = {'b0': fit.b0, 'b1': fit.b1, 'n_obs': fit.n_obs}

    completed = np.where(missing, estimated, heights)
    logger.debug("Imputed %d of %d tree heights with method %d",
                 int(missing.sum()), heights.size, int(method))

    return HeightImputationResult(
        heights=completed,
        imputed=missing,
        method=method,
        r2=r2,
        coefficients=coefficients,
    )
