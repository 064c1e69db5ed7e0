"""Define the constraint linking stance geometry, load distribution and pressure point."""

import copy

import numpy as np
from scipy import sparse

from gait_trajopt.constraints.base import (
    CachedJacobian,
    Constraint,
    RowLayout,
    build_jacobian,
    dense_rows_to_jacobian,
    empty_jacobian,
)
from gait_trajopt.geometry import DIM_2D, Coords
from gait_trajopt.motion.center_of_pressure import CenterOfPressure
from gait_trajopt.motion.endeffector_load import EndeffectorLoad
from gait_trajopt.motion.endeffectors_motion import EndeffectorsMotion
from gait_trajopt.sampling import support_area_sample_times
from gait_trajopt.variables import EQUALITY_BOUND, Bound, OptimizationVariables


class SupportAreaConstraint(Constraint):
    """Enforce the pressure point to be the load weighted centroid of the active contacts.

    For every sampled time t the two rows are

        g(t) = sum_c lambda_c(t) * p_c - cop(t) = 0

    The final time is not sampled. The residual is bilinear in load fractions
    and contact positions, so the jacobian blocks of both depend on the current
    values of the other and are recomputed on request.
    """

    name = "Support Area"

    def __init__(
        self,
        ee_motion: EndeffectorsMotion,
        ee_load: EndeffectorLoad,
        cop: CenterOfPressure,
        total_time: float,
        dt: float,
    ):
        """Snapshot the subsystems and lay out one row pair per sampled time."""
        self.ee_motion = copy.deepcopy(ee_motion)
        self.ee_load = copy.deepcopy(ee_load)
        self.cop = copy.deepcopy(cop)

        self.dts = support_area_sample_times(total_time, dt)
        self.layout = RowLayout.for_samples(self.dts)

        # The pressure point enters linearly, its block is a constant selection
        self._jac_wrt_cop = CachedJacobian(f"{self.name} wrt cop")
        self._jac_wrt_cop.update(self.layout.signature, self._compute_jacobian_wrt_cop)

    def update_variables(self, opt_var: OptimizationVariables):
        """Pull the current load fractions, footholds and pressure point nodes."""
        self.ee_load.set_optimization_parameters(opt_var.get_variables(self.ee_load.get_id()))
        self.ee_motion.set_optimization_parameters(opt_var.get_variables(self.ee_motion.get_id()))
        self.cop.set_optimization_parameters(opt_var.get_variables(self.cop.get_id()))

    def evaluate_constraint(self) -> np.ndarray:
        """Compute the difference between the weighted contact centroid and the pressure point."""
        g = np.zeros(self.layout.num_rows)
        for row, (_, t, _) in self.layout:
            lambda_k = self.ee_load.get_load_values(t)
            convex_contacts = np.zeros(DIM_2D)
            for contact in self.ee_motion.get_contacts(t):
                convex_contacts += lambda_k[contact.ee] * contact.p
            g[row : row + DIM_2D] = convex_contacts - self.cop.get_cop(t)
        return g

    def get_bounds(self) -> list[Bound]:
        """Require equality on every row."""
        return [EQUALITY_BOUND] * self.layout.num_rows

    def get_jacobian_with_respect_to(self, var_set: str) -> sparse.csr_matrix:
        """Dispatch to the block matching the variable set."""
        if var_set == self.cop.get_id():
            return self.get_jacobian_wrt_cop()
        if var_set == self.ee_motion.get_id():
            return self.get_jacobian_wrt_contacts()
        if var_set == self.ee_load.get_id():
            return self.get_jacobian_wrt_lambdas()
        return empty_jacobian()

    def get_jacobian_wrt_lambdas(self) -> sparse.csr_matrix:
        """Set each active contact's current position at its load fraction column."""
        row_ids, col_ids, values = [], [], []
        for row, (_, t, _) in self.layout:
            for contact in self.ee_motion.get_contacts(t):
                for dim in Coords:
                    row_ids.append(row + dim)
                    col_ids.append(self.ee_load.index(t, contact.ee))
                    values.append(contact.p[dim])

        return build_jacobian(row_ids, col_ids, values, shape=(self.layout.num_rows, self.ee_load.get_opt_var_count()))

    def get_jacobian_wrt_contacts(self) -> sparse.csr_matrix:
        """Set each free contact's current load fraction at its foothold columns."""
        row_ids, col_ids, values = [], [], []
        for row, (_, t, _) in self.layout:
            lambda_k = self.ee_load.get_load_values(t)
            for contact in self.ee_motion.get_contacts(t):
                if contact.is_pinned:
                    continue
                for dim in Coords:
                    row_ids.append(row + dim)
                    col_ids.append(self.ee_motion.index(contact, dim))
                    values.append(lambda_k[contact.ee])

        return build_jacobian(
            row_ids, col_ids, values, shape=(self.layout.num_rows, self.ee_motion.get_opt_var_count())
        )

    def get_jacobian_wrt_cop(self) -> sparse.csr_matrix:
        """Get the cached partials with respect to the pressure point nodes."""
        return self._jac_wrt_cop.value

    def _compute_jacobian_wrt_cop(self) -> sparse.csr_matrix:
        """Set the negated parametrization derivative of the pressure point."""
        dense_rows = [None] * self.layout.num_rows
        for row, (_, t, _) in self.layout:
            for dim in Coords:
                dense_rows[row + dim] = -self.cop.get_jacobian_wrt_cop(t, dim)
        return dense_rows_to_jacobian(dense_rows, self.cop.get_opt_var_count())
