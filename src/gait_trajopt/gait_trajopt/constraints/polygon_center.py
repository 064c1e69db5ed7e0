"""Define the constraint pulling the pressure point towards the center of the support polygon."""

import copy

import numpy as np
from scipy import sparse

from gait_trajopt.constraints.base import Constraint, build_jacobian, empty_jacobian
from gait_trajopt.motion.endeffector_load import EndeffectorLoad
from gait_trajopt.variables import EQUALITY_BOUND, Bound, OptimizationVariables


class PolygonCenterConstraint(Constraint):
    """Penalize uneven load distribution between the contacts of a phase.

    For a phase with m active contacts, the row

        g_k = sum_c lambda_c^2 - 1 / m

    is zero for an equal split, which places the pressure point at the center
    of the support polygon. Only meaningful as a soft constraint.
    """

    name = "Polygon Center"

    def __init__(self, ee_load: EndeffectorLoad):
        """Snapshot the load."""
        self.ee_load = copy.deepcopy(ee_load)

    def update_variables(self, opt_var: OptimizationVariables):
        """Pull the current load fractions."""
        self.ee_load.set_optimization_parameters(opt_var.get_variables(self.ee_load.get_id()))

    def evaluate_constraint(self) -> np.ndarray:
        """Compute the squared load sum offset by the equal split value per phase."""
        g = np.zeros(self.ee_load.get_number_of_segments())
        for segment in range(g.size):
            lambdas = np.fromiter(self.ee_load.get_load_values_idx(segment).values(), dtype=float)
            if lambdas.size:
                g[segment] = np.sum(lambdas**2) - 1.0 / lambdas.size
        return g

    def get_bounds(self) -> list[Bound]:
        """Require equality on every row."""
        return [EQUALITY_BOUND] * self.ee_load.get_number_of_segments()

    def get_jacobian_with_respect_to(self, var_set: str) -> sparse.csr_matrix:
        """Set twice the current load fraction of every active contact."""
        if var_set != self.ee_load.get_id():
            return empty_jacobian()

        row_ids, col_ids, values = [], [], []
        for segment in range(self.ee_load.get_number_of_segments()):
            for ee, lambda_value in self.ee_load.get_load_values_idx(segment).items():
                row_ids.append(segment)
                col_ids.append(self.ee_load.index_discrete(segment, ee))
                values.append(2.0 * lambda_value)

        return build_jacobian(
            row_ids, col_ids, values, shape=(self.ee_load.get_number_of_segments(), self.ee_load.get_opt_var_count())
        )
