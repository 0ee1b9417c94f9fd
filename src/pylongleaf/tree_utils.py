"""
Tree utility functions for pylongleaf.

Provides common calculations used across multiple modules to avoid duplication
and ensure consistency. All units are metric.
"""
import math

import numpy as np

from .exceptions import DegenerateInputError, DomainError

__all__ = [
    'BASAL_AREA_FACTOR',
    'SQUARE_METERS_PER_HECTARE',
    'calculate_tree_basal_area',
    'expansion_factor',
]


# Basal area constant: pi / 40000 (converts DBH in cm to BA in square meters)
# Formula: BA = (pi/4) * (DBH/100)^2 = pi * DBH^2 / 40000
BASAL_AREA_FACTOR = math.pi / 40000.0

SQUARE_METERS_PER_HECTARE = 10000.0


def calculate_tree_basal_area(dbh):
    """Calculate basal area for a single tree or an array of trees.

    Formula: BA = pi * DBH^2 / 40000

    Args:
        dbh: Diameter at breast height in cm (scalar or numpy array)

    Returns:
        Basal area in square meters
    """
    return BASAL_AREA_FACTOR * np.square(dbh)


def expansion_factor(plot_area: float) -> float:
    """Per-hectare expansion factor for a fixed-area plot.

    Args:
        plot_area: Plot area in square meters

    Returns:
        Number of hectare-equivalents represented by one tree on the plot

    Raises:
        DegenerateInputError: If the plot area is zero
        DomainError: If the plot area is negative
    """
    if plot_area == 0:
        raise DegenerateInputError("Plot area is 0; cannot expand plot values to a hectare")
    if plot_area < 0:
        raise DomainError('plot_area', plot_area, "must be positive")
    return SQUARE_METERS_PER_HECTARE / plot_area
