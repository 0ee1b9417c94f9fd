"""
Initial stand state for simulations.

Builds a complete starting state from either stand-level values (``PLOT``)
or a single plot's tree list (``TREE``), filling missing site values from the
site equation and missing basal area from the basal area model, and bundles
it with the simulation settings (final age, thinning, merchantability limits,
height method).
"""
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Mapping, Optional, Sequence, Union

import numpy as np
import pandas as pd

from .basal_area import predict_or_project_ba
from .config_loader import get_simulation_default
from .exceptions import ValidationError, validate_proportion
from .height_diameter import HeightMethod, parse_height_method
from .logging_config import get_logger
from .site_index import solve_site_triple
from .stand_metrics import relative_density_index, solve_stand_triple
from .tree_data import TreePlot, prepare_tree_table
from .validation import is_missing, missing_names, require_inputs
from .volume import merchantable_volume, total_volume

logger = get_logger(__name__)

__all__ = [
    'INPUT_TYPES',
    'StandState',
    'SimulationParameters',
    'build_stand_state',
    'normalize_initial_state',
]

INPUT_TYPES = ('PLOT', 'TREE')


@dataclass(frozen=True)
class StandState:
    """Stand attributes at one age.

    Attributes:
        age: Stand age (years)
        n: Trees per hectare
        ba: Basal area (m2/ha)
        qd: Quadratic mean diameter (cm)
        hdom: Dominant height (m)
        si: Site index (m, base age 50)
        sdir: Relative stand density index (%)
        vol_ob: Total volume outside bark (m3/ha)
        vol_ib: Total volume inside bark (m3/ha)
        volm_ob: Merchantable volume outside bark (m3/ha)
        volm_ib: Merchantable volume inside bark (m3/ha)
        thinned: Whether a thinning was applied at this age
        ba_removed: Basal area removed by the thinning (m2/ha)
    """
    age: float
    n: float
    ba: float
    qd: float
    hdom: float
    si: float
    sdir: float
    vol_ob: float
    vol_ib: float
    volm_ob: float
    volm_ib: float
    thinned: bool = False
    ba_removed: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SimulationParameters:
    """Initial state and settings for one simulation run.

    Attributes:
        initial_state: Stand at the starting age
        final_age: Last simulated age (years)
        thinning: Whether a thinning is scheduled
        thinning_age: Age of the thinning (years)
        thinning_intensity: Fraction (0-1) of basal area removed
        top_diameter: Top diameter for merchantable volume (cm)
        dbh_threshold: Minimum DBH of merchantable trees (cm)
        height_method: Method used to fill missing tree heights
        tree_plot: Prepared plot data when the input was a tree list
    """
    initial_state: StandState
    final_age: float
    thinning: bool = False
    thinning_age: Optional[float] = None
    thinning_intensity: Optional[float] = None
    top_diameter: float = 5.0
    dbh_threshold: float = 15.0
    height_method: HeightMethod = HeightMethod.EMPIRICAL
    tree_plot: Optional[TreePlot] = field(default=None, repr=False, compare=False)

    def __post_init__(self):
        age0 = self.initial_state.age
        if not self.final_age > age0:
            raise ValidationError(
                f"Final age ({self.final_age}) must be greater than the initial age ({age0})"
            )
        if not isinstance(self.thinning, (bool, np.bool_)):
            raise ValidationError(
                f"thinning must be True or False, got {self.thinning!r}"
            )
        if self.thinning:
            require_inputs('thinning', thinning_age=self.thinning_age,
                           thinning_intensity=self.thinning_intensity)
            if not age0 < self.thinning_age <= self.final_age:
                raise ValidationError(
                    f"Thinning age ({self.thinning_age}) must be after the initial age ({age0}) "
                    f"and no later than the final age ({self.final_age})"
                )
            validate_proportion(self.thinning_intensity, 'thinning_intensity')
            if self.thinning_intensity >= 1:
                raise ValidationError(
                    "Invalid value for parameter 'thinning_intensity': 1 "
                    "(removing all basal area leaves no stand to project)"
                )

    def to_dict(self) -> Dict[str, Any]:
        """Settings as a flat dictionary, with the initial state nested."""
        return {
            'initial_state': self.initial_state.to_dict(),
            'final_age': self.final_age,
            'thinning': self.thinning,
            'thinning_age': self.thinning_age,
            'thinning_intensity': self.thinning_intensity,
            'top_diameter': self.top_diameter,
            'dbh_threshold': self.dbh_threshold,
            'height_method': int(self.height_method),
        }


def build_stand_state(age: float, n: float, ba: float, hdom: float, si: float,
                      top_diameter: float, dbh_threshold: float,
                      thinned: bool = False, ba_removed: float = 0.0) -> StandState:
    """Complete a stand state with QD, relative density and volumes."""
    qd = solve_stand_triple(ba=ba, n=n).qd
    volumes = total_volume(n=n, ba=ba, age=age, si=si)
    merch = merchantable_volume(n=n, qd=qd, t=top_diameter, d=dbh_threshold,
                                vol_ob=volumes.vol_ob, vol_ib=volumes.vol_ib)
    return StandState(
        age=age,
        n=n,
        ba=ba,
        qd=qd,
        hdom=hdom,
        si=si,
        sdir=relative_density_index(n=n, qd=qd),
        vol_ob=volumes.vol_ob,
        vol_ib=volumes.vol_ib,
        volm_ob=merch.volm_ob,
        volm_ib=merch.volm_ib,
        thinned=thinned,
        ba_removed=ba_removed,
    )


def _setting(value, key: str, fallback):
    return get_simulation_default(key, fallback) if value is None else value


def normalize_initial_state(input_type: str = 'PLOT',
                            tree_data: Optional[Union[pd.DataFrame, Mapping[str, Sequence]]] = None,
                            area: Optional[float] = None, si: Optional[float] = None,
                            hdom0: Optional[float] = None, age0: Optional[float] = None,
                            ba0: Optional[float] = None, n0: Optional[float] = None,
                            final_age: Optional[float] = None, thinning: bool = False,
                            thinning_age: Optional[float] = None,
                            thinning_intensity: Optional[float] = None,
                            top_diameter: Optional[float] = None,
                            dbh_threshold: Optional[float] = None,
                            height_method: Optional[int] = None) -> SimulationParameters:
    """Prepare the initial stand and simulation settings.

    With ``input_type='PLOT'`` two of SI, HDOM0 and AGE0 and the tree density
    N0 are needed; BA0 is predicted when missing. With ``input_type='TREE'``
    the stand values come from ``tree_data`` (columns TREEID, DBH, HT) and
    ``area``; SI or AGE0 is completed from the plot's dominant height.

    Args:
        input_type: 'PLOT' for stand-level values, 'TREE' for a tree list
        tree_data: Tree list of one plot (TREE input)
        area: Plot area in m2 (TREE input)
        si: Site index (m)
        hdom0: Dominant height at age0 (m), PLOT input
        age0: Initial stand age (years)
        ba0: Basal area at age0 (m2/ha), PLOT input
        n0: Trees per hectare at age0, PLOT input
        final_age: Final simulation age (default 50)
        thinning: Schedule a thinning (must be a bool)
        thinning_age: Age of the thinning
        thinning_intensity: Fraction (0-1) of basal area removed
        top_diameter: Merchantable top diameter in cm (default 5)
        dbh_threshold: Merchantable DBH threshold in cm (default 15)
        height_method: Height imputation method for TREE input (default 2)

    Returns:
        SimulationParameters

    Raises:
        ValidationError: For an unknown input type or inconsistent settings
        InsufficientInputError: If required values are missing

    Example:
        >>> params = normalize_initial_state('PLOT', hdom0=14, age0=17, n0=1200, final_age=28)
        >>> round(params.initial_state.ba, 3)
        17.634
    """
    kind = str(input_type).upper()
    if kind not in INPUT_TYPES:
        raise ValidationError(f"Unknown input type: {input_type!r}. Use 'PLOT' or 'TREE'")

    final_age = _setting(final_age, 'simulation.final_age', 50)
    top_diameter = _setting(top_diameter, 'merchantability.top_diameter', 5.0)
    dbh_threshold = _setting(dbh_threshold, 'merchantability.dbh_threshold', 15.0)
    method = parse_height_method(_setting(height_method, 'height_imputation.method', 2))

    tree_plot = None
    if kind == 'TREE':
        if tree_data is None:
            raise ValidationError("TREE input requires tree_data")
        require_inputs('normalize_initial_state (TREE)', area=area)

        tree_plot = prepare_tree_table(tree_data, area=area, age=age0, method=method)
        ba0, n0, hdom0 = tree_plot.ba, tree_plot.n, tree_plot.hdom
        if is_missing(si) or is_missing(age0):
            site = solve_site_triple(hdom=hdom0, si=si, age=age0)
            si, age0 = site.si, site.age
    else:
        if missing_names({'si': si, 'hdom0': hdom0, 'age0': age0}):
            site = solve_site_triple(hdom=hdom0, si=si, age=age0)
            si, hdom0, age0 = site.si, site.hdom, site.age
        require_inputs('normalize_initial_state (PLOT)', n0=n0)
        if is_missing(ba0):
            ba0 = predict_or_project_ba(n0=n0, hdom0=hdom0).ba0
            logger.debug("Predicted initial basal area %.3f m2/ha", ba0)

    initial_state = build_stand_state(
        age=age0, n=n0, ba=ba0, hdom=hdom0, si=si,
        top_diameter=top_diameter, dbh_threshold=dbh_threshold,
    )

    return SimulationParameters(
        initial_state=initial_state,
        final_age=final_age,
        thinning=thinning,
        thinning_age=thinning_age,
        thinning_intensity=thinning_intensity,
        top_diameter=top_diameter,
        dbh_threshold=dbh_threshold,
        height_method=method,
        tree_plot=tree_plot,
    )
