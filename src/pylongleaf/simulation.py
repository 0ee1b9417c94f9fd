"""
Year-by-year stand simulation.

Starting from a normalized initial state, each step advances the stand from
age a to a' = min(a + step, final_age):

1. Dominant height from the site equation at a' (site index is constant)
2. Trees per hectare from the survival model
3. Basal area projected from the previous state
4. An optional single thinning removes a fraction of the basal area at the
   first step reaching the thinning age; tree density is not changed
5. QD, relative density and volumes recomputed for the new state
"""
import json
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

import pandas as pd

from .basal_area import predict_or_project_ba
from .config_loader import get_simulation_default
from .exceptions import ValidationError
from .logging_config import get_logger, log_growth_summary
from .mortality import project_n
from .site_index import get_site_index_model
from .stand_input import SimulationParameters, StandState, build_stand_state

logger = get_logger(__name__)

__all__ = [
    'Trajectory',
    'simulate',
    'grow_one_step',
]


@dataclass(frozen=True)
class Trajectory:
    """Stand states from the initial age to the final age, one per step."""
    states: Tuple[StandState, ...]
    parameters: Optional[SimulationParameters] = None

    def __len__(self) -> int:
        return len(self.states)

    def __iter__(self) -> Iterator[StandState]:
        return iter(self.states)

    def __getitem__(self, index):
        return self.states[index]

    @property
    def initial_state(self) -> StandState:
        return self.states[0]

    @property
    def final_state(self) -> StandState:
        return self.states[-1]

    @property
    def ages(self) -> List[float]:
        return [state.age for state in self.states]

    def at_age(self, age: float) -> StandState:
        """Return the state simulated at ``age``.

        Raises:
            KeyError: If no step ended at that age
        """
        for state in self.states:
            if abs(state.age - age) < 1e-9:
                return state
        raise KeyError(f"No simulated state at age {age}")

    def to_dataframe(self) -> pd.DataFrame:
        """Trajectory as a table with one row per age."""
        return pd.DataFrame([state.to_dict() for state in self.states])

    def export(self, filepath: Union[str, Path], format: str = 'csv') -> str:
        """Export the trajectory to a file.

        Args:
            filepath: Output file path; its extension is set to match ``format``
            format: Export format ('csv' or 'json')

        Returns:
            Path to exported file

        Example:
            >>> trajectory.export('output/stand', format='csv')
            'output/stand.csv'
        """
        extensions = {'csv': '.csv', 'json': '.json'}
        if format not in extensions:
            raise ValidationError(f"Unsupported format: {format}. Use 'csv' or 'json'")

        path = Path(filepath)
        if path.suffix.lower() != extensions[format]:
            path = path.with_suffix(extensions[format])
        path.parent.mkdir(parents=True, exist_ok=True)

        if format == 'csv':
            self.to_dataframe().to_csv(path, index=False)
        else:
            metadata = {'initial_age': self.initial_state.age, 'final_age': self.final_state.age}
            if self.parameters is not None:
                metadata.update(self.parameters.to_dict())
                del metadata['initial_state']
            with open(path, 'w') as f:
                json.dump({
                    'metadata': metadata,
                    'trajectory': [state.to_dict() for state in self.states],
                }, f, indent=2)

        return str(path)


def grow_one_step(state: StandState, next_age: float, parameters: SimulationParameters) -> StandState:
    """Project ``state`` to ``next_age``, applying the thinning if it falls in this step."""
    hdom1 = get_site_index_model().dominant_height(state.si, next_age)
    n1 = project_n(n0=state.n, hdom0=state.hdom, sdir0=state.sdir,
                   age0=state.age, age1=next_age)
    ba1 = predict_or_project_ba(n0=state.n, hdom0=state.hdom, projection=True,
                                ba0=state.ba, n1=n1, hdom1=hdom1).ba1

    thinned = False
    ba_removed = 0.0
    if parameters.thinning and state.age < parameters.thinning_age <= next_age:
        ba_removed = ba1 * parameters.thinning_intensity
        ba1 -= ba_removed
        thinned = True
        logger.info("Thinning at age %.2f: removed %.2f of %.2f m2/ha basal area",
                    next_age, ba_removed, ba1 + ba_removed)

    return build_stand_state(
        age=next_age, n=n1, ba=ba1, hdom=hdom1, si=state.si,
        top_diameter=parameters.top_diameter, dbh_threshold=parameters.dbh_threshold,
        thinned=thinned, ba_removed=ba_removed,
    )


def simulate(parameters: Union[SimulationParameters, StandState], **settings) -> Trajectory:
    """Simulate stand development up to the final age.

    Args:
        parameters: Output of ``normalize_initial_state``, or an initial
            ``StandState`` to be combined with ``settings``
        **settings: SimulationParameters fields (final_age, thinning,
            thinning_age, thinning_intensity, top_diameter, dbh_threshold)
            overriding those in ``parameters``

    Returns:
        Trajectory holding the initial state and one state per step

    Raises:
        ValidationError: If the settings are inconsistent

    Example:
        >>> params = normalize_initial_state('PLOT', ba0=17.63402, hdom0=14,
        ...                                  age0=17, n0=1200, final_age=28)
        >>> round(simulate(params).at_age(18).n, 1)
        1190.3
    """
    if isinstance(parameters, StandState):
        settings.setdefault('final_age', get_simulation_default('simulation.final_age', 50))
        settings.setdefault('top_diameter', get_simulation_default('merchantability.top_diameter', 5.0))
        settings.setdefault('dbh_threshold', get_simulation_default('merchantability.dbh_threshold', 15.0))
        parameters = SimulationParameters(initial_state=parameters, **settings)
    elif settings:
        parameters = replace(parameters, **settings)

    step = float(get_simulation_default('simulation.time_step', 1))
    state = parameters.initial_state
    states = [state]
    logger.debug("Simulating from age %.2f to %.2f", state.age, parameters.final_age)

    while state.age < parameters.final_age:
        next_age = min(state.age + step, parameters.final_age)
        state = grow_one_step(state, next_age, parameters)
        log_growth_summary(logger, state)
        states.append(state)

    return Trajectory(states=tuple(states), parameters=parameters)
