"""Define the linear inverted pendulum constraint between center of mass and pressure point."""

import copy

import numpy as np
from scipy import sparse

from gait_trajopt.constraints.base import (
    CachedJacobian,
    Constraint,
    RowLayout,
    dense_rows_to_jacobian,
    empty_jacobian,
)
from gait_trajopt.geometry import DIM_2D, Coords, MotionDerivative
from gait_trajopt.motion.center_of_pressure import CenterOfPressure
from gait_trajopt.motion.com_spline import ComSpline
from gait_trajopt.sampling import support_area_sample_times
from gait_trajopt.variables import EQUALITY_BOUND, Bound, OptimizationVariables
from gait_util.constant import G0


class DynamicConstraint(Constraint):
    """Enforce the linear inverted pendulum relation at every sampled time.

        g(t) = p_com(t) - h / g0 * a_com(t) - cop(t) = 0

    Both the center of mass and the pressure point enter linearly, so both
    jacobian blocks are constant and computed at construction.
    """

    name = "Dynamic"

    def __init__(self, com_motion: ComSpline, cop: CenterOfPressure, total_time: float, dt: float, com_height: float):
        """Snapshot the motions and compute the constant jacobian blocks."""
        self.com_motion = com_motion.clone()
        self.cop = copy.deepcopy(cop)
        self.height_over_gravity = com_height / G0.m_as("m/s^2")

        self.dts = support_area_sample_times(total_time, dt)
        self.layout = RowLayout.for_samples(self.dts)

        self._jac_wrt_motion = CachedJacobian(f"{self.name} wrt motion")
        self._jac_wrt_motion.update(self.layout.signature, self._compute_jacobian_wrt_motion)
        self._jac_wrt_cop = CachedJacobian(f"{self.name} wrt cop")
        self._jac_wrt_cop.update(self.layout.signature, self._compute_jacobian_wrt_cop)

    def update_variables(self, opt_var: OptimizationVariables):
        """Pull the current spline coefficients and pressure point nodes."""
        self.com_motion.set_optimization_parameters(opt_var.get_variables(self.com_motion.get_id()))
        self.cop.set_optimization_parameters(opt_var.get_variables(self.cop.get_id()))

    def evaluate_constraint(self) -> np.ndarray:
        """Compute the deviation of the pressure point from the pendulum's zero moment point."""
        g = np.zeros(self.layout.num_rows)
        for row, (_, t, _) in self.layout:
            com_state = self.com_motion.get_com_state(t)
            zmp = com_state.p - self.height_over_gravity * com_state.a
            g[row : row + DIM_2D] = zmp - self.cop.get_cop(t)
        return g

    def get_bounds(self) -> list[Bound]:
        """Require equality on every row."""
        return [EQUALITY_BOUND] * self.layout.num_rows

    def get_jacobian_with_respect_to(self, var_set: str) -> sparse.csr_matrix:
        """Dispatch to the cached block matching the variable set."""
        if var_set == self.com_motion.get_id():
            return self._jac_wrt_motion.value
        if var_set == self.cop.get_id():
            return self._jac_wrt_cop.value
        return empty_jacobian()

    def _compute_jacobian_wrt_motion(self) -> sparse.csr_matrix:
        """Combine the position and acceleration basis of the spline."""
        dense_rows = [None] * self.layout.num_rows
        for row, (_, t, _) in self.layout:
            for dim in Coords:
                position_basis = self.com_motion.get_jacobian(t, MotionDerivative.POS, dim)
                acceleration_basis = self.com_motion.get_jacobian(t, MotionDerivative.ACC, dim)
                dense_rows[row + dim] = position_basis - self.height_over_gravity * acceleration_basis
        return dense_rows_to_jacobian(dense_rows, self.com_motion.get_total_free_coeff())

    def _compute_jacobian_wrt_cop(self) -> sparse.csr_matrix:
        """Set the negated parametrization derivative of the pressure point."""
        dense_rows = [None] * self.layout.num_rows
        for row, (_, t, _) in self.layout:
            for dim in Coords:
                dense_rows[row + dim] = -self.cop.get_jacobian_wrt_cop(t, dim)
        return dense_rows_to_jacobian(dense_rows, self.cop.get_opt_var_count())
