"""Define the conversion of a hard constraint into a quadratic penalty cost."""

import numpy as np

from gait_trajopt.constraints.base import Constraint, Cost
from gait_trajopt.variables import OptimizationVariables


class SoftConstraint(Cost):
    """Penalize the violation of a constraint's bounds quadratically.

    With the residual g and bounds [l, u], the violation of each row is its
    distance to the bound interval and the cost is

        c = 0.5 * sum_i w_i * viol_i^2,    dc/dx = (w * viol)^T @ dg/dx

    which is zero and flat wherever the constraint holds.
    """

    def __init__(self, constraint: Constraint, weight: float | np.ndarray = 1.0):
        """Wrap a constraint with a scalar or per row weight."""
        self.constraint = constraint
        self.weight = weight
        self.name = f"Soft {constraint.name}"

    def update_variables(self, opt_var: OptimizationVariables):
        """Forward the current iterate to the wrapped constraint."""
        self.constraint.update_variables(opt_var)

    def _weighted_violation(self) -> tuple[np.ndarray, np.ndarray]:
        """Compute the bound violation of every row and its weighted version."""
        g = self.constraint.evaluate_constraint()
        bounds = self.constraint.get_bounds()
        lower = np.array([bound.lower for bound in bounds], dtype=float)
        upper = np.array([bound.upper for bound in bounds], dtype=float)

        violation = g - np.clip(g, lower, upper)
        return violation, np.broadcast_to(self.weight, violation.shape) * violation

    def evaluate_cost(self) -> float:
        """Sum the weighted squared violations."""
        violation, weighted_violation = self._weighted_violation()
        return float(0.5 * violation @ weighted_violation)

    def get_gradient_with_respect_to(self, var_set: str) -> np.ndarray:
        """Chain the weighted violation through the constraint jacobian."""
        jacobian = self.constraint.get_jacobian_with_respect_to(var_set)
        if jacobian.shape[0] == 0:
            return np.zeros(0)
        _, weighted_violation = self._weighted_violation()
        return np.asarray(jacobian.T @ weighted_violation).reshape(-1)
