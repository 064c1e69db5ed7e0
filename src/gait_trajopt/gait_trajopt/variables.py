"""Define decision variable sets and the registry holding their current values."""

from dataclasses import dataclass

import numpy as np

from gait_util.logconfig import create_logger

LOG = create_logger(__name__)


class DuplicateVariableSetError(ValueError):
    """Raise when a variable set identifier is registered twice."""


@dataclass(frozen=True)
class Bound:
    """Define a lower and upper bound pair, equality when both coincide."""

    lower: float
    upper: float

    def __post_init__(self):
        """Validate the bound ordering."""
        if self.lower > self.upper:
            raise ValueError(f"Lower bound {self.lower} exceeds upper bound {self.upper}.")

    @property
    def is_equality(self) -> bool:
        """Check if the bound pins the value."""
        return self.lower == self.upper

    def widened(self, deviation: float) -> "Bound":
        """Get the bound with both ends moved apart by the given deviation."""
        return Bound(self.lower - deviation, self.upper + deviation)

    def __add__(self, offset: float) -> "Bound":
        return Bound(self.lower + offset, self.upper + offset)

    def __sub__(self, offset: float) -> "Bound":
        return Bound(self.lower - offset, self.upper - offset)


# Commonly used bounds
NO_BOUND = Bound(-np.inf, np.inf)
EQUALITY_BOUND = Bound(0.0, 0.0)


class VariableSet:
    """Define a named block of decision variables with a bound per scalar."""

    def __init__(self, values, set_id: str, bounds: Bound | list[Bound] = NO_BOUND):
        """Construct from initial values, an identifier and either one shared or per scalar bounds."""
        self.id = set_id
        self.values = np.array(values, dtype=float).reshape(-1)

        # A single bound is applied to every scalar of the set
        self.bounds = [bounds] * self.values.size if isinstance(bounds, Bound) else list(bounds)

        if len(self.bounds) != self.values.size:
            raise ValueError(
                f"Variable set '{set_id}' has {self.values.size} values but {len(self.bounds)} bounds."
            )

    def __len__(self):
        return self.values.size

    def __repr__(self):
        return f"VariableSet(id={self.id!r}, size={self.values.size})"


class OptimizationVariables:
    """Own all variable sets of the problem and expose their current values by identifier.

    The registry is the single source of truth for the current iterate, every
    constraint pulls its values from here in update_variables.
    """

    def __init__(self, variable_sets: list[VariableSet] = ()):
        """Register the given variable sets in order."""
        self._variable_sets: dict[str, VariableSet] = {}
        for variable_set in variable_sets:
            self.add_variable_set(variable_set)

    def add_variable_set(self, variable_set: VariableSet):
        """Register a new variable set."""
        if variable_set.id in self._variable_sets:
            raise DuplicateVariableSetError(f"Variable set '{variable_set.id}' already registered.")
        self._variable_sets[variable_set.id] = variable_set
        LOG.debug(f"Registered variable set '{variable_set.id}' with {len(variable_set)} variables.")

    def get_variables(self, set_id: str) -> np.ndarray:
        """Get a read-only view of the current values of a variable set."""
        values = self._get_set(set_id).values.view()
        values.flags.writeable = False
        return values

    def set_variables(self, set_id: str, values):
        """Overwrite the values of a variable set, keeping its size."""
        variable_set = self._get_set(set_id)
        values = np.asarray(values, dtype=float).reshape(-1)
        if values.size != len(variable_set):
            raise ValueError(f"Expected {len(variable_set)} values for '{set_id}', got {values.size}.")
        variable_set.values = values.copy()

    def get_bounds(self, set_id: str) -> list[Bound]:
        """Get the per scalar bounds of a variable set."""
        return self._get_set(set_id).bounds

    @property
    def set_ids(self) -> list[str]:
        """Get the registered identifiers in registration order."""
        return list(self._variable_sets)

    def get_optimization_variables(self) -> np.ndarray:
        """Get all values stacked in registration order."""
        return np.concatenate([variable_set.values for variable_set in self._variable_sets.values()])

    def set_optimization_variables(self, stacked_values):
        """Distribute a stacked vector of values back to the variable sets in registration order."""
        stacked_values = np.asarray(stacked_values, dtype=float)
        expected_length = sum(len(variable_set) for variable_set in self._variable_sets.values())
        if stacked_values.size != expected_length:
            raise ValueError(f"Expected {expected_length} stacked values, got {stacked_values.size}.")

        start_index = 0
        for variable_set in self._variable_sets.values():
            end_index = start_index + len(variable_set)
            variable_set.values = stacked_values[start_index:end_index].copy()
            start_index = end_index

    def _get_set(self, set_id: str) -> VariableSet:
        """Look up a variable set by identifier."""
        if set_id not in self._variable_sets:
            raise KeyError(f"Variable set '{set_id}' is not registered, known sets {self.set_ids}.")
        return self._variable_sets[set_id]
