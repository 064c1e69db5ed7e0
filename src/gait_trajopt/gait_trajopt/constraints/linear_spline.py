"""Define adapters turning affine spline equations into constraints and costs."""

import numpy as np
from scipy import sparse

from gait_trajopt.constraints.base import Constraint, Cost, empty_jacobian
from gait_trajopt.linear_equations import MatVec, StructuralMismatchError
from gait_trajopt.motion.com_spline import ComSpline
from gait_trajopt.variables import EQUALITY_BOUND, Bound, OptimizationVariables


def _check_columns(linear_equation: MatVec, com_motion: ComSpline):
    """Ensure an affine block spans exactly the spline coefficients."""
    if linear_equation.cols != com_motion.get_total_free_coeff():
        raise StructuralMismatchError(
            f"Affine block has {linear_equation.cols} columns, "
            f"spline has {com_motion.get_total_free_coeff()} coefficients."
        )


class LinearSplineEqualityConstraint(Constraint):
    """Enforce M @ x + v = 0 on the spline coefficients x."""

    def __init__(self, com_motion: ComSpline, linear_equation: MatVec, name: str):
        """Snapshot the spline and store the equation with its constant jacobian."""
        _check_columns(linear_equation, com_motion)
        self.com_motion = com_motion.clone()
        self.linear_equation = linear_equation
        self.name = name
        self._jac = sparse.csr_matrix(linear_equation.matrix)

    def update_variables(self, opt_var: OptimizationVariables):
        """Pull the current spline coefficients."""
        self.com_motion.set_optimization_parameters(opt_var.get_variables(self.com_motion.get_id()))

    def evaluate_constraint(self) -> np.ndarray:
        """Evaluate the affine map at the current coefficients."""
        return self.linear_equation.evaluate_with(self.com_motion.get_optimization_parameters())

    def get_bounds(self) -> list[Bound]:
        """Require equality on every row."""
        return [EQUALITY_BOUND] * self.linear_equation.rows

    def get_jacobian_with_respect_to(self, var_set: str) -> sparse.csr_matrix:
        """Return the equation matrix for the spline coefficients."""
        if var_set == self.com_motion.get_id():
            return self._jac
        return empty_jacobian()


class QuadraticSplineCost(Cost):
    """Define the cost x^T M x + v^T x on the spline coefficients x, M symmetric."""

    name = "Quadratic Spline"

    def __init__(self, com_motion: ComSpline, quadratic_term: MatVec):
        """Snapshot the spline and store the quadratic and linear term."""
        if quadratic_term.rows != quadratic_term.cols:
            raise StructuralMismatchError(f"Quadratic cost matrix must be square, got {quadratic_term.matrix.shape}.")
        _check_columns(quadratic_term, com_motion)
        self.com_motion = com_motion.clone()
        self.quadratic_term = quadratic_term

    def update_variables(self, opt_var: OptimizationVariables):
        """Pull the current spline coefficients."""
        self.com_motion.set_optimization_parameters(opt_var.get_variables(self.com_motion.get_id()))

    def evaluate_cost(self) -> float:
        """Evaluate the quadratic form at the current coefficients."""
        x = self.com_motion.get_optimization_parameters()
        return float(x @ self.quadratic_term.matrix @ x + self.quadratic_term.vector @ x)

    def get_gradient_with_respect_to(self, var_set: str) -> np.ndarray:
        """Get 2 M x + v for the spline coefficients."""
        if var_set != self.com_motion.get_id():
            return np.zeros(0)
        x = self.com_motion.get_optimization_parameters()
        return 2.0 * self.quadratic_term.matrix @ x + self.quadratic_term.vector
