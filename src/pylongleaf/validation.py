"""
Input checks shared by the solvers and growth models.

Missing values may arrive as ``None`` (keyword defaults) or ``NaN`` (pandas
columns); both are treated as unknown.
"""
import math
from typing import Dict, List, Optional

import numpy as np

from .exceptions import InsufficientInputError, MalformedInputError

__all__ = [
    'is_missing',
    'missing_names',
    'require_inputs',
    'as_float_array',
]


def is_missing(value) -> bool:
    """Return True for ``None`` and float NaN."""
    if value is None:
        return True
    try:
        return math.isnan(value)
    except TypeError:
        return False


def missing_names(values: Dict[str, Optional[float]]) -> List[str]:
    """Names of the entries in ``values`` that are missing, in order."""
    return [name for name, value in values.items() if is_missing(value)]


def require_inputs(operation: str, **values) -> None:
    """Raise InsufficientInputError if any keyword value is missing.

    Args:
        operation: Name of the calling operation, used in the message
        **values: Required inputs keyed by name

    Raises:
        InsufficientInputError: If one or more values are missing
    """
    missing = missing_names(values)
    if missing:
        raise InsufficientInputError(operation, missing)


def as_float_array(values, name: str) -> np.ndarray:
    """Convert a sequence with ``None``/NaN entries to a 1-D float array.

    Raises:
        MalformedInputError: If the values cannot be read as numbers
    """
    try:
        array = np.asarray(
            [np.nan if is_missing(v) else v for v in values], dtype=float
        )
    except (TypeError, ValueError) as e:
        raise MalformedInputError(f"{name} must contain numbers: {e}") from e
    if array.ndim != 1:
        raise MalformedInputError(f"{name} must be one-dimensional")
    return array
