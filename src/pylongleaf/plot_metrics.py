"""
Plot-level aggregation of tree measurements.

Reduces per-tree measurements from a fixed-area plot to per-hectare stand
values:
- Basal area, tree density and quadratic mean diameter
- Dominant height as the mean of the top quartile of heights
- Dominant height as the mean height of the 100 largest trees per hectare
"""
from typing import Optional, Sequence

import numpy as np

from .config_loader import get_simulation_default
from .exceptions import (
    DomainError,
    IncompleteDataError,
    InsufficientDataError,
    MalformedInputError,
    validate_positive,
)
from .stand_metrics import StandTriple, quadratic_mean_diameter
from .tree_utils import calculate_tree_basal_area, expansion_factor
from .validation import as_float_array, require_inputs

__all__ = [
    'aggregate_stand',
    'dominant_height',
    'weighted_dominant_height',
]


def aggregate_stand(dbh: Sequence[float], plot_area: float) -> StandTriple:
    """Calculate basal area, trees per hectare and QD from plot DBH values.

    EF = 10000 / plot_area
    BA = sum(pi/4 * DBH^2 * 0.0001) * EF
    N = count(DBH) * EF

    Args:
        dbh: Diameters at breast height (cm); must be complete
        plot_area: Plot area (m2)

    Returns:
        StandTriple with BA (m2/ha), N (trees/ha) and QD (cm)

    Raises:
        InsufficientInputError: If the plot area is missing
        DegenerateInputError: If the plot area is 0
        MalformedInputError: If DBH has missing values or no trees
        DomainError: If a DBH is zero or negative
    """
    require_inputs('aggregate_stand', plot_area=plot_area)
    ef = expansion_factor(plot_area)

    dbh = as_float_array(dbh, 'DBH')
    if dbh.size == 0:
        raise MalformedInputError("DBH vector is empty; at least one tree is required")
    if np.isnan(dbh).any():
        raise MalformedInputError("DBH vector has missing values")
    if (dbh <= 0).any():
        raise DomainError('DBH', float(dbh[dbh <= 0][0]), "diameters must be positive")

    ba = float(np.sum(calculate_tree_basal_area(dbh))) * ef
    n = dbh.size * ef
    return StandTriple(ba=ba, n=n, qd=quadratic_mean_diameter(ba, n))


def dominant_height(heights: Sequence[float], quantile: Optional[float] = None) -> float:
    """Dominant height as the mean of the tallest quarter of the trees.

    Heights at or above the 75th percentile (linear interpolation between
    order statistics) are averaged.

    Args:
        heights: Tree heights (m); must be complete
        quantile: Lower quantile of the dominant group (default 0.75)

    Returns:
        Dominant height (m)

    Raises:
        IncompleteDataError: If any height is missing
        InsufficientDataError: If no heights are given
    """
    if quantile is None:
        quantile = get_simulation_default('dominant_height.quantile', 0.75)

    heights = as_float_array(heights, 'HT')
    if heights.size == 0:
        raise InsufficientDataError("No tree heights given; cannot compute dominant height")
    n_missing = int(np.isnan(heights).sum())
    if n_missing:
        raise IncompleteDataError("Height vector", n_missing)

    heights = np.sort(heights)[::-1]
    threshold = np.quantile(heights, quantile)
    return float(np.mean(heights[heights >= threshold]))


def weighted_dominant_height(heights: Sequence[float], dbh: Sequence[float],
                             plot_area: float,
                             target_density: Optional[float] = None) -> float:
    """Dominant height as the mean height of the largest 100 trees per hectare.

    Trees are ranked by descending DBH; each represents EF stems per hectare.
    Stems are accumulated until ``target_density`` is reached, the last tree
    contributing only the shortfall, so the weighted mean is taken over
    exactly ``target_density`` stems. Plots holding fewer stems per hectare
    than the target use every tree at full weight.

    Args:
        heights: Tree heights (m); must be complete
        dbh: Diameters at breast height (cm), same order as ``heights``
        plot_area: Plot area (m2)
        target_density: Dominant stems per hectare (default 100)

    Returns:
        Dominant height (m)

    Raises:
        IncompleteDataError: If a height or DBH is missing
        MalformedInputError: If the vectors differ in length or are empty
        DegenerateInputError: If the plot area is 0
    """
    if target_density is None:
        target_density = get_simulation_default('dominant_height.target_density', 100)
    validate_positive(target_density, 'target_density')
    require_inputs('weighted_dominant_height', plot_area=plot_area)
    ef = expansion_factor(plot_area)

    heights = as_float_array(heights, 'HT')
    dbh = as_float_array(dbh, 'DBH')
    if heights.size != dbh.size:
        raise MalformedInputError(
            f"HT and DBH must have the same length ({heights.size} != {dbh.size})"
        )
    if heights.size == 0:
        raise MalformedInputError("No trees given; cannot compute dominant height")
    for name, values in (('Height vector', heights), ('DBH vector', dbh)):
        n_missing = int(np.isnan(values).sum())
        if n_missing:
            raise IncompleteDataError(name, n_missing)

    # stable sort keeps plot order among equal diameters
    order = np.argsort(-dbh, kind='stable')
    ranked_heights = heights[order]

    stems_before = ef * np.arange(ranked_heights.size)
    weights = np.clip(target_density - stems_before, 0.0, ef)
    return float(np.average(ranked_heights, weights=weights))
