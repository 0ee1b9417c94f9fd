"""
Shared pytest fixtures for pylongleaf tests.

Provides tree lists with known height-diameter relationships and the
documented stand-level starting point used across the growth model tests.
"""
import math

import numpy as np
import pandas as pd
import pytest

from pylongleaf.stand_input import normalize_initial_state


# =============================================================================
# Tree Fixtures
# =============================================================================

# Coefficients of ln(HT) = B0 + B1 / DBH used to generate synthetic heights
TRUE_B0 = 3.4
TRUE_B1 = -8.0


def true_height(dbh):
    """Height (m) lying exactly on the synthetic ln(HT) ~ 1/DBH curve."""
    return math.exp(TRUE_B0 + TRUE_B1 / dbh)


@pytest.fixture
def plot_trees():
    """Thirty trees on one 500 m2 plot with every third height missing.

    Returns a dict with:
    - PLOTID, TREEID, DBH, HT columns (HT uses None for missing heights)
    - true_heights: the exact curve heights for all trees
    - n_missing: number of missing heights (10)

    Measured heights lie exactly on ln(HT) = 3.4 - 8 / DBH, so a fitted
    model recovers the curve with r^2 = 1.
    """
    dbh = [10.0 + 0.5 * i for i in range(30)]
    true_heights = [true_height(d) for d in dbh]
    heights = [None if i % 3 == 0 else h for i, h in enumerate(true_heights)]
    return {
        'PLOTID': [1] * 30,
        'TREEID': list(range(1, 31)),
        'DBH': dbh,
        'HT': heights,
        'true_heights': true_heights,
        'n_missing': 10,
    }


@pytest.fixture
def plot_tree_frame(plot_trees):
    """The plot_trees fixture as a pandas DataFrame with NaN for missing heights."""
    return pd.DataFrame({
        'PLOTID': plot_trees['PLOTID'],
        'TREEID': plot_trees['TREEID'],
        'DBH': plot_trees['DBH'],
        'HT': [np.nan if h is None else h for h in plot_trees['HT']],
    })


@pytest.fixture
def sparse_height_trees():
    """Twenty trees with only nine measured heights (below the fitting minimum)."""
    dbh = [12.0 + i for i in range(20)]
    heights = [true_height(d) if i < 9 else None for i, d in enumerate(dbh)]
    return {'TREEID': list(range(1, 21)), 'DBH': dbh, 'HT': heights}


@pytest.fixture
def tree_csv(tmp_path, plot_tree_frame):
    """Write plot_tree_frame to a CSV with lower-case headers and an OBS column."""
    frame = plot_tree_frame.rename(columns=str.lower)
    frame['obs'] = ''
    path = tmp_path / 'plot.csv'
    frame.to_csv(path, index=False)
    return path


# =============================================================================
# Stand Fixtures
# =============================================================================

# Documented stand-level example: 17-year-old stand, 1200 trees/ha, HDOM 14 m
PLOT_EXAMPLE = dict(ba0=17.63402, hdom0=14, age0=17, n0=1200, final_age=28)


@pytest.fixture
def plot_example_parameters():
    """Simulation parameters for the documented PLOT example (age 17 to 28)."""
    return normalize_initial_state('PLOT', **PLOT_EXAMPLE)


@pytest.fixture
def thinned_example_parameters():
    """PLOT example with 30% of basal area removed at age 20."""
    return normalize_initial_state('PLOT', thinning=True, thinning_age=20,
                                   thinning_intensity=0.3, **PLOT_EXAMPLE)


@pytest.fixture
def height_curve():
    """Coefficients (b0, b1) of the curve the synthetic tree heights lie on."""
    return TRUE_B0, TRUE_B1
