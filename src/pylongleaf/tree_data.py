"""
Tree-level plot data preparation.

Turns a plot's tree list (ids, DBH, partially measured heights) into the
stand values the growth models start from: basal area, trees per hectare,
quadratic mean diameter and dominant height. Missing heights are filled
through the height-diameter models before dominant height is computed.
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Union

import numpy as np
import pandas as pd

from .config_loader import get_simulation_default
from .exceptions import InsufficientDataError, InvalidDataError, MalformedInputError, ValidationError
from .height_diameter import impute_heights
from .logging_config import get_logger
from .plot_metrics import aggregate_stand, dominant_height
from .validation import as_float_array, is_missing

logger = get_logger(__name__)

__all__ = [
    'TREE_COLUMNS',
    'TreePlot',
    'prepare_tree_plot',
    'prepare_tree_table',
    'read_tree_table',
]

TREE_COLUMNS = ('TREEID', 'DBH', 'HT')
REQUIRED_FILE_COLUMNS = ('PLOTID',) + TREE_COLUMNS


@dataclass(frozen=True)
class TreePlot:
    """Stand values derived from one measured plot.

    Attributes:
        ba: Basal area (m2/ha)
        n: Trees per hectare
        qd: Quadratic mean diameter (cm)
        hdom: Dominant height (m)
        tree_table: Trees with completed heights (TREEID, DBH, HT, HT_IMPUTED)
        r2: r^2 of the fitted height model, None when no fit was needed
    """
    ba: float
    n: float
    qd: float
    hdom: float
    tree_table: pd.DataFrame = field(repr=False, compare=False)
    r2: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        """Stand values without the tree table."""
        return {'ba': self.ba, 'n': self.n, 'qd': self.qd, 'hdom': self.hdom, 'r2': self.r2}


def prepare_tree_plot(tree_ids: Sequence, dbh: Sequence[float], heights: Sequence[float],
                      area: float, age: Optional[float] = None, method: int = 2) -> TreePlot:
    """Compute plot-level stand values from tree measurements.

    Args:
        tree_ids: Tree identifiers; no missing values
        dbh: Diameters at breast height (cm); no missing values
        heights: Heights (m); missing values are estimated
        area: Plot area (m2)
        age: Stand age (years); needed when method 1 fills heights
        method: Height imputation method (1 parametric, 2 fitted)

    Returns:
        TreePlot

    Raises:
        MalformedInputError: If vectors differ in length or ids/DBH are incomplete
        InsufficientDataError: If heights are missing and fewer than 10 were measured
    """
    tree_ids = list(tree_ids)
    dbh = as_float_array(dbh, 'DBH')
    heights = as_float_array(heights, 'HT')

    if not len(tree_ids) == dbh.size == heights.size:
        raise MalformedInputError(
            f"TREEID, DBH and HT must have the same length "
            f"({len(tree_ids)}, {dbh.size}, {heights.size})"
        )
    if any(is_missing(tree_id) for tree_id in tree_ids):
        raise MalformedInputError("TREEID vector has missing values")
    if np.isnan(dbh).any():
        raise MalformedInputError("DBH vector has missing values")

    stand = aggregate_stand(dbh, area)

    imputed = np.isnan(heights)
    r2 = None
    if imputed.any():
        min_measured = get_simulation_default('height_imputation.min_measured_heights', 10)
        n_measured = int((~imputed).sum())
        if n_measured < min_measured:
            raise InsufficientDataError(
                f"Not enough tree height measurements: {n_measured} measured, "
                f"at least {min_measured} required to estimate missing heights"
            )
        result = impute_heights(dbh, heights, method=method, area=area, age=age,
                                basal_area=stand.ba)
        heights = result.heights
        r2 = result.r2
        logger.info("Estimated %d missing heights (method %d)", result.n_imputed, int(result.method))

    tree_table = pd.DataFrame({
        'TREEID': tree_ids,
        'DBH': dbh,
        'HT': heights,
        'HT_IMPUTED': imputed,
    })

    return TreePlot(
        ba=stand.ba,
        n=stand.n,
        qd=stand.qd,
        hdom=dominant_height(heights),
        tree_table=tree_table,
        r2=r2,
    )


def _normalize_columns(frame: pd.DataFrame, required: Sequence[str], description: str) -> pd.DataFrame:
    renamed = frame.rename(columns=lambda c: str(c).strip().upper())
    missing = [c for c in required if c not in renamed.columns]
    if missing:
        raise InvalidDataError(description, f"missing required column(s): {', '.join(missing)}")
    return renamed


def read_tree_table(path: Union[str, Path]) -> pd.DataFrame:
    """Read a tree list CSV with columns PLOTID, TREEID, DBH, HT and optional OBS.

    Column names are matched case-insensitively and returned upper-case.
    Empty HT cells become NaN.

    Raises:
        FileNotFoundError: If the file does not exist
        InvalidDataError: If a required column is missing
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Tree table not found: {path}")

    frame = pd.read_csv(path)
    frame = _normalize_columns(frame, REQUIRED_FILE_COLUMNS, f"tree table {path.name}")
    frame['HT'] = pd.to_numeric(frame['HT'], errors='coerce')
    logger.debug("Read %d trees from %s", len(frame), path)
    return frame


def prepare_tree_table(frame: Union[pd.DataFrame, Dict[str, Sequence]], area: float,
                       age: Optional[float] = None, method: int = 2) -> TreePlot:
    """Run ``prepare_tree_plot`` on a single-plot tree table.

    Args:
        frame: DataFrame (or mapping of columns) with TREEID, DBH and HT
        area: Plot area (m2)
        age: Stand age (years)
        method: Height imputation method

    Raises:
        InvalidDataError: If TREEID, DBH or HT is missing
        ValidationError: If the table holds more than one PLOTID
    """
    if not isinstance(frame, pd.DataFrame):
        frame = pd.DataFrame(frame)
    frame = _normalize_columns(frame, TREE_COLUMNS, "tree table")

    if 'PLOTID' in frame.columns:
        plots = frame['PLOTID'].dropna().unique()
        if len(plots) > 1:
            raise ValidationError(
                f"Tree table holds {len(plots)} plots; prepare one plot at a time"
            )

    return prepare_tree_plot(
        frame['TREEID'].tolist(),
        frame['DBH'].tolist(),
        frame['HT'].tolist(),
        area=area,
        age=age,
        method=method,
    )
