"""
PyLongleaf: stand-level growth and yield for longleaf pine plantations

Estimates and projects basal area, tree density, dominant height, relative
density and total/merchantable volume of even-aged longleaf pine stands from
tree-level or stand-level inventory data, using the equations of
Gonzalez-Benecke et al. (2012, 2013).

Quick Start:
    >>> from pylongleaf import normalize_initial_state, simulate
    >>> params = normalize_initial_state('PLOT', hdom0=14, age0=17, n0=1200, final_age=28)
    >>> trajectory = simulate(params)
    >>> trajectory.to_dataframe()[['age', 'n', 'ba', 'hdom']]
"""

# =============================================================================
# Package Metadata
# =============================================================================
__version__ = "0.1.0"
__author__ = "PyLongleaf Development Team"

# =============================================================================
# Simulation - Primary API
# =============================================================================
from .stand_input import (
    StandState,
    SimulationParameters,
    build_stand_state,
    normalize_initial_state,
)
from .simulation import Trajectory, simulate, grow_one_step

# =============================================================================
# Stand Algebra
# =============================================================================
from .stand_metrics import (
    StandTriple,
    StandDensityModel,
    solve_stand_triple,
    quadratic_mean_diameter,
    stand_density_index,
    relative_density_index,
)
from .site_index import SiteTriple, SiteIndexModel, get_site_index_model, solve_site_triple

# =============================================================================
# Tree Data
# =============================================================================
from .plot_metrics import aggregate_stand, dominant_height, weighted_dominant_height
from .height_diameter import (
    HeightMethod,
    ParametricHeightModel,
    LogInverseFit,
    HeightImputationResult,
    fit_log_inverse_model,
    impute_heights,
)
from .tree_data import TreePlot, prepare_tree_plot, prepare_tree_table, read_tree_table

# =============================================================================
# Growth and Yield Models
# =============================================================================
from .basal_area import BasalAreaModel, BasalAreaResult, predict_or_project_ba
from .mortality import SurvivalModel, project_n
from .volume import (
    VolumeModel,
    MerchantableVolumeModel,
    VolumeResult,
    MerchantableVolumeResult,
    total_volume,
    merchantable_volume,
)

# =============================================================================
# Configuration Loading
# =============================================================================
from .config_loader import get_config_loader, load_coefficient_file, load_simulation_defaults
from .model_base import ParameterizedModel

# =============================================================================
# Logging
# =============================================================================
from .logging_config import get_logger, setup_logging

# =============================================================================
# Exceptions
# =============================================================================
from .exceptions import (
    LongleafError,
    ConfigurationError,
    DataError,
    InvalidDataError,
    ValidationError,
    MalformedInputError,
    InsufficientInputError,
    InsufficientDataError,
    IncompleteDataError,
    DegenerateInputError,
    DomainError,
    LongleafWarning,
    NothingToSolveWarning,
    PartialVolumeWarning,
)

__all__ = [
    # Package Metadata
    "__version__",
    "__author__",
    # Simulation
    "StandState",
    "SimulationParameters",
    "build_stand_state",
    "normalize_initial_state",
    "Trajectory",
    "simulate",
    "grow_one_step",
    # Stand Algebra
    "StandTriple",
    "StandDensityModel",
    "solve_stand_triple",
    "quadratic_mean_diameter",
    "stand_density_index",
    "relative_density_index",
    "SiteTriple",
    "SiteIndexModel",
    "get_site_index_model",
    "solve_site_triple",
    # Tree Data
    "aggregate_stand",
    "dominant_height",
    "weighted_dominant_height",
    "HeightMethod",
    "ParametricHeightModel",
    "LogInverseFit",
    "HeightImputationResult",
    "fit_log_inverse_model",
    "impute_heights",
    "TreePlot",
    "prepare_tree_plot",
    "prepare_tree_table",
    "read_tree_table",
    # Growth and Yield Models
    "BasalAreaModel",
    "BasalAreaResult",
    "predict_or_project_ba",
    "SurvivalModel",
    "project_n",
    "VolumeModel",
    "MerchantableVolumeModel",
    "VolumeResult",
    "MerchantableVolumeResult",
    "total_volume",
    "merchantable_volume",
    # Configuration
    "get_config_loader",
    "load_coefficient_file",
    "load_simulation_defaults",
    "ParameterizedModel",
    # Logging
    "get_logger",
    "setup_logging",
    # Exceptions
    "LongleafError",
    "ConfigurationError",
    "DataError",
    "InvalidDataError",
    "ValidationError",
    "MalformedInputError",
    "InsufficientInputError",
    "InsufficientDataError",
    "IncompleteDataError",
    "DegenerateInputError",
    "DomainError",
    "LongleafWarning",
    "NothingToSolveWarning",
    "PartialVolumeWarning",
]
