"""Define the constraint allowing load only on endeffectors in contact."""

import copy

import numpy as np
from scipy import sparse

from gait_trajopt.constraints.base import Constraint, empty_jacobian
from gait_trajopt.motion.endeffector_load import EndeffectorLoad
from gait_trajopt.variables import Bound, OptimizationVariables


class ContactLoadConstraint(Constraint):
    """Bound every load fraction to [0, 1] in contact and to zero in swing.

    One row per (phase, endeffector) in the order of the load parameters, so
    the jacobian is the identity.
    """

    name = "Contact Load"

    def __init__(self, ee_load: EndeffectorLoad):
        """Snapshot the load and build the constant identity jacobian."""
        self.ee_load = copy.deepcopy(ee_load)
        self._jac = sparse.identity(self.ee_load.get_opt_var_count(), format="csr")

    def update_variables(self, opt_var: OptimizationVariables):
        """Pull the current load fractions."""
        self.ee_load.set_optimization_parameters(opt_var.get_variables(self.ee_load.get_id()))

    def evaluate_constraint(self) -> np.ndarray:
        """Return the load fractions themselves."""
        return self.ee_load.get_optimization_parameters()

    def get_bounds(self) -> list[Bound]:
        """Allow load only where the endeffector touches the ground."""
        bounds = []
        for segment in range(self.ee_load.get_number_of_segments()):
            active_endeffectors = self.ee_load.get_active_endeffectors(segment)
            for ee in self.ee_load.endeffectors:
                bounds.append(Bound(0.0, 1.0) if ee in active_endeffectors else Bound(0.0, 0.0))
        return bounds

    def get_jacobian_with_respect_to(self, var_set: str) -> sparse.csr_matrix:
        """Return the identity for the load fractions."""
        if var_set == self.ee_load.get_id():
            return self._jac
        return empty_jacobian()
