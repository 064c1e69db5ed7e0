"""Define the kinematic range of motion constraints of the endeffectors."""

import abc
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
from gait_trajopt.geometry import Coords, MotionDerivative
from gait_trajopt.motion.com_spline import ComSpline
from gait_trajopt.motion.endeffectors_motion import EndeffectorsMotion
from gait_trajopt.sampling import range_of_motion_sample_times
from gait_trajopt.variables import Bound, OptimizationVariables


class RangeOfMotionConstraint(Constraint):
    """Constrain the contact positions relative to the center of mass at sampled times.

    Samples every dt from the start and additionally the final time, so the
    final stance is constrained as well. Both jacobian blocks only depend on
    which contacts are active when, they are computed at construction and
    rebuilt only if that structure changes.
    """

    name = "Range of Motion"

    def __init__(self, com_motion: ComSpline, ee_motion: EndeffectorsMotion, dt: float):
        """Snapshot the motions and compute the constant jacobian blocks."""
        self.com_motion = com_motion.clone()
        self.ee_motion = copy.deepcopy(ee_motion)
        self.dts = range_of_motion_sample_times(self.ee_motion.get_total_time(), dt)

        self._jac_wrt_contacts = CachedJacobian(f"{self.name} wrt contacts")
        self._jac_wrt_motion = CachedJacobian(f"{self.name} wrt motion")
        self._update_layout()

    def _update_layout(self):
        """Lay out the rows for the active contacts and refresh the structure dependent jacobians."""
        self.layout = RowLayout.for_contacts(self.dts, self.ee_motion.get_contacts)
        self._jac_wrt_contacts.update(self.layout.signature, self.get_jacobian_wrt_contacts)
        self._jac_wrt_motion.update(self.layout.signature, self.get_jacobian_wrt_motion)

    def update_variables(self, opt_var: OptimizationVariables):
        """Pull the current spline coefficients and footholds."""
        self.com_motion.set_optimization_parameters(opt_var.get_variables(self.com_motion.get_id()))
        self.ee_motion.set_optimization_parameters(opt_var.get_variables(self.ee_motion.get_id()))
        self._update_layout()

    def get_jacobian_with_respect_to(self, var_set: str) -> sparse.csr_matrix:
        """Dispatch to the cached block matching the variable set."""
        if var_set == self.ee_motion.get_id():
            return self._jac_wrt_contacts.value
        if var_set == self.com_motion.get_id():
            return self._jac_wrt_motion.value
        return empty_jacobian()

    @abc.abstractmethod
    def get_jacobian_wrt_contacts(self) -> sparse.csr_matrix:
        """Compute the partials with respect to the footholds."""

    @abc.abstractmethod
    def get_jacobian_wrt_motion(self) -> sparse.csr_matrix:
        """Compute the partials with respect to the spline coefficients."""


class RangeOfMotionBox(RangeOfMotionConstraint):
    """Approximate the reachable workspace of each leg as a box around its nominal stance.

    For every sampled time t and contact c active at t, the two rows are

        g = p_c - p_com(t)    for a free contact
        g = -p_com(t)         for a pinned contact

    bounded by nominal(c.ee) +- max_deviation. The position of a pinned contact
    is known, it is subtracted from the bounds instead of appearing in g.
    """

    def __init__(
        self,
        com_motion: ComSpline,
        ee_motion: EndeffectorsMotion,
        dt: float,
        max_deviation_from_nominal,
        nominal_stance: dict,
    ):
        """Store the box dimensions before the base class computes the jacobians."""
        self.max_deviation_from_nominal = np.asarray(max_deviation_from_nominal, dtype=float)
        self.nominal_stance = {ee: np.asarray(p, dtype=float) for ee, p in nominal_stance.items()}
        super().__init__(com_motion, ee_motion, dt)

        missing_nominal = {key.contact.ee for key in self.layout.keys} - set(self.nominal_stance)
        if missing_nominal:
            raise KeyError(f"No nominal stance defined for endeffectors {sorted(missing_nominal)}.")

    def evaluate_constraint(self) -> np.ndarray:
        """Compute the contact positions relative to the center of mass."""
        g = np.zeros(self.layout.num_rows)
        for row, (_, t, contact) in self.layout:
            com_position = self.com_motion.get_com_position(t)
            relative_position = -com_position if contact.is_pinned else contact.p - com_position
            for dim in Coords:
                g[row + dim] = relative_position[dim]
        return g

    def get_bounds(self) -> list[Bound]:
        """Get the box around the nominal stance, shifted by pinned contact positions."""
        bounds = [None] * self.layout.num_rows
        for row, (_, _, contact) in self.layout:
            nominal_position = self.nominal_stance[contact.ee]
            for dim in Coords:
                bound = Bound(nominal_position[dim], nominal_position[dim])
                bound = bound.widened(self.max_deviation_from_nominal[dim])
                if contact.is_pinned:
                    bound -= contact.p[dim]
                bounds[row + dim] = bound
        return bounds

    def get_jacobian_wrt_contacts(self) -> sparse.csr_matrix:
        """Set a one at each free contact's own coordinate, pinned contacts do not contribute."""
        row_ids, col_ids = [], []
        for row, (_, _, contact) in self.layout:
            if contact.is_pinned:
                continue
            for dim in Coords:
                row_ids.append(row + dim)
                col_ids.append(self.ee_motion.index(contact, dim))

        return build_jacobian(
            row_ids, col_ids, np.ones(len(row_ids)), shape=(self.layout.num_rows, self.ee_motion.get_opt_var_count())
        )

    def get_jacobian_wrt_motion(self) -> sparse.csr_matrix:
        """Set the negated position basis of the spline at each row's time and axis."""
        dense_rows = [None] * self.layout.num_rows
        for row, (_, t, _) in self.layout:
            for dim in Coords:
                dense_rows[row + dim] = -self.com_motion.get_jacobian(t, MotionDerivative.POS, dim)
        return dense_rows_to_jacobian(dense_rows, self.com_motion.get_total_free_coeff())
