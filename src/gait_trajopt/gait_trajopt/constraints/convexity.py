"""Define the constraint keeping the load fractions a convex combination."""

import copy

import numpy as np
from scipy import sparse

from gait_trajopt.constraints.base import Constraint, build_jacobian, empty_jacobian
from gait_trajopt.motion.endeffector_load import EndeffectorLoad
from gait_trajopt.variables import Bound, OptimizationVariables


class ConvexityConstraint(Constraint):
    """Enforce that the load fractions of the contacts active in a phase sum to one.

    The relation is linear, its jacobian is a 0/1 selection matrix with one row
    per phase and is built once at construction.
    """

    name = "Convexity"

    def __init__(self, ee_load: EndeffectorLoad):
        """Snapshot the load and build the constant selection jacobian."""
        self.ee_load = copy.deepcopy(ee_load)

        row_ids, col_ids = [], []
        for segment in range(self.ee_load.get_number_of_segments()):
            for ee in self.ee_load.get_active_endeffectors(segment):
                row_ids.append(segment)
                col_ids.append(self.ee_load.index_discrete(segment, ee))

        self._jac = build_jacobian(
            row_ids,
            col_ids,
            np.ones(len(row_ids)),
            shape=(self.ee_load.get_number_of_segments(), self.ee_load.get_opt_var_count()),
        )

    def update_variables(self, opt_var: OptimizationVariables):
        """Pull the current load fractions."""
        self.ee_load.set_optimization_parameters(opt_var.get_variables(self.ee_load.get_id()))

    def evaluate_constraint(self) -> np.ndarray:
        """Sum the load fractions of the active contacts per phase."""
        return np.array(
            [
                sum(self.ee_load.get_load_values_idx(segment).values(), 0.0)
                for segment in range(self.ee_load.get_number_of_segments())
            ]
        )

    def get_bounds(self) -> list[Bound]:
        """Require every sum to be exactly one."""
        return [Bound(1.0, 1.0)] * self.ee_load.get_number_of_segments()

    def get_jacobian_with_respect_to(self, var_set: str) -> sparse.csr_matrix:
        """Return the cached selection matrix for the load fractions."""
        if var_set == self.ee_load.get_id():
            return self._jac
        return empty_jacobian()
