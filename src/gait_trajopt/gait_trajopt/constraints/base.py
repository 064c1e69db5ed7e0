"""Define the uniform contract shared by all constraints and costs of the problem."""

import abc
from typing import NamedTuple

import numpy as np
from scipy import sparse

from gait_trajopt.geometry import DIM_2D, Contact
from gait_trajopt.variables import Bound, OptimizationVariables
from gait_util.logconfig import create_logger

LOG = create_logger(__name__)


class JacobianNotCachedError(RuntimeError):
    """Raise when a cached jacobian block is read before it was computed."""


def empty_jacobian() -> sparse.csr_matrix:
    """Get the zero sized block signaling that a constraint does not depend on a variable set."""
    return sparse.csr_matrix((0, 0))


def build_jacobian(row_ids: list, col_ids: list, values: list, shape: tuple) -> sparse.csr_matrix:
    """Assemble a sparse jacobian block from triplets, duplicated entries are summed."""
    return sparse.coo_matrix((values, (row_ids, col_ids)), shape=shape).tocsr()


def dense_rows_to_jacobian(dense_rows: list[np.ndarray], n_cols: int) -> sparse.csr_matrix:
    """Assemble a sparse jacobian block from a list of dense rows."""
    if not dense_rows:
        return sparse.csr_matrix((0, n_cols))
    return sparse.csr_matrix(np.vstack(dense_rows))


class RowKey(NamedTuple):
    """Identifies the rows of one (sample time, contact) pair of a constraint."""

    time_index: int
    t: float
    contact: Contact | None


class RowLayout:
    """Map every (sample time, contact) pair of a constraint to its first row index.

    Each key owns DIM_2D consecutive rows, one per horizontal axis. The same
    layout is used by the residual, the bounds and every jacobian block so the
    three stay index-aligned.
    """

    def __init__(self, keys: list[RowKey], rows_per_key: int = DIM_2D):
        """Assign consecutive rows to the keys in the given order."""
        self.keys = list(keys)
        self.rows_per_key = rows_per_key
        self._row_of = {
            self._lookup(key.time_index, key.contact): idx * rows_per_key for idx, key in enumerate(self.keys)
        }

    @classmethod
    def for_contacts(cls, sample_times: list[float], contacts_at) -> "RowLayout":
        """Create a layout with one key per contact active at every sample time."""
        return cls(
            [RowKey(time_index, t, contact) for time_index, t in enumerate(sample_times) for contact in contacts_at(t)]
        )

    @classmethod
    def for_samples(cls, sample_times: list[float]) -> "RowLayout":
        """Create a layout with one key per sample time."""
        return cls([RowKey(time_index, t, None) for time_index, t in enumerate(sample_times)])

    @staticmethod
    def _lookup(time_index: int, contact: Contact | None) -> tuple:
        """Get the hashable lookup of a key, contacts are identified by endeffector and id."""
        return (time_index, None) if contact is None else (time_index, contact.ee, contact.id)

    def row_index(self, time_index: int, contact: Contact | None = None) -> int:
        """Get the first row of a (sample time, contact) pair."""
        return self._row_of[self._lookup(time_index, contact)]

    @property
    def num_rows(self) -> int:
        """Get the total number of rows."""
        return len(self.keys) * self.rows_per_key

    @property
    def signature(self) -> tuple:
        """Get the structure of the layout, independent of any contact position value."""
        return tuple(self._lookup(key.time_index, key.contact) for key in self.keys)

    def __iter__(self):
        """Iterate over (first row, key) pairs in row order."""
        return ((idx * self.rows_per_key, key) for idx, key in enumerate(self.keys))

    def __len__(self):
        return len(self.keys)


class CachedJacobian:
    """Hold a structurally constant jacobian block.

    The block is either uninitialized or cached together with the layout
    signature it was computed for. A different signature means the structure
    changed and the block is rebuilt.
    """

    def __init__(self, name: str):
        """Start uninitialized."""
        self.name = name
        self._value: sparse.csr_matrix | None = None
        self._signature: tuple | None = None

    @property
    def is_cached(self) -> bool:
        """Check if a block has been computed."""
        return self._value is not None

    def update(self, signature: tuple, compute) -> sparse.csr_matrix:
        """Compute the block unless it is already cached for the given signature."""
        if self._value is None or self._signature != signature:
            LOG.debug(f"{'Rebuilding' if self.is_cached else 'Building'} cached jacobian '{self.name}'.")
            self._value = compute()
            self._signature = signature
        return self._value

    @property
    def value(self) -> sparse.csr_matrix:
        """Get the cached block."""
        if self._value is None:
            raise JacobianNotCachedError(f"Jacobian '{self.name}' read before it was computed.")
        return self._value


class Constraint(abc.ABC):
    """Base constraint contract evaluated by the solver every iteration.

    The solver calls update_variables with the current registry, then reads
    evaluate_constraint, get_bounds and get_jacobian_with_respect_to for every
    variable set. Construction wires the subsystems once, update_variables is
    the only point where the current iterate enters the constraint.
    """

    name: str = "Constraint"

    @abc.abstractmethod
    def update_variables(self, opt_var: OptimizationVariables):
        """Pull the current values of every variable set the constraint depends on."""

    @abc.abstractmethod
    def evaluate_constraint(self) -> np.ndarray:
        """Compute the residual from the current snapshot."""

    @abc.abstractmethod
    def get_bounds(self) -> list[Bound]:
        """Get one bound per residual row."""

    @abc.abstractmethod
    def get_jacobian_with_respect_to(self, var_set: str) -> sparse.csr_matrix:
        """Get the partials of the residual with respect to a variable set, empty when uncoupled."""

    def get_number_of_constraints(self) -> int:
        """Get the number of residual rows."""
        return len(self.get_bounds())

    def __repr__(self):
        return f"{self.__class__.__name__}(name={self.name!r})"


class Cost(abc.ABC):
    """Base cost contract evaluated by the solver every iteration."""

    name: str = "Cost"

    @abc.abstractmethod
    def update_variables(self, opt_var: OptimizationVariables):
        """Pull the current values of every variable set the cost depends on."""

    @abc.abstractmethod
    def evaluate_cost(self) -> float:
        """Compute the scalar cost from the current snapshot."""

    @abc.abstractmethod
    def get_gradient_with_respect_to(self, var_set: str) -> np.ndarray:
        """Get the gradient with respect to a variable set, empty when uncoupled."""

    def __repr__(self):
        return f"{self.__class__.__name__}(name={self.name!r})"
