"""Test the affine spline constraint and quadratic spline cost adapters."""

import numpy as np
import pytest

from gait_trajopt.constraints.derivative_check import get_cost_gradient_by_perturbation
from gait_trajopt.constraints.linear_spline import LinearSplineEqualityConstraint, QuadraticSplineCost
from gait_trajopt.linear_equations import LinearSplineEquations, MatVec, StructuralMismatchError
from gait_trajopt.variables import EQUALITY_BOUND


def test_equality_constraint(com_motion, opt_var, randomize):
    """Test that the residual is the affine map of the current coefficients."""
    junction = LinearSplineEquations(com_motion).make_junction()
    constraint = LinearSplineEqualityConstraint(com_motion, junction, "Junction")
    constraint.update_variables(randomize(opt_var, seed=1))

    x = opt_var.get_variables(com_motion.get_id())
    assert np.allclose(constraint.evaluate_constraint(), junction.matrix @ x + junction.vector)
    assert constraint.get_bounds() == [EQUALITY_BOUND] * junction.rows
    assert np.array_equal(constraint.get_jacobian_with_respect_to(com_motion.get_id()).toarray(), junction.matrix)
    assert constraint.get_jacobian_with_respect_to("cop").shape == (0, 0)


def test_column_mismatch(com_motion):
    """Test that an equation over a different coefficient count is rejected."""
    with pytest.raises(StructuralMismatchError):
        LinearSplineEqualityConstraint(com_motion, MatVec.zeros(2, 3), "Bad")


def test_quadratic_cost(com_motion, opt_var, randomize, params):
    """Test the cost value and its gradient."""
    cost_matrix = LinearSplineEquations(com_motion).make_acceleration(params.weight_com_motion_xy)
    linear_term = np.linspace(-1.0, 1.0, cost_matrix.shape[0])
    cost = QuadraticSplineCost(com_motion, MatVec(cost_matrix, linear_term))
    cost.update_variables(randomize(opt_var, seed=7))

    x = np.array(opt_var.get_variables(com_motion.get_id()))
    assert np.isclose(cost.evaluate_cost(), x @ cost_matrix @ x + linear_term @ x)
    assert np.allclose(
        cost.get_gradient_with_respect_to(com_motion.get_id()),
        get_cost_gradient_by_perturbation(cost, opt_var, com_motion.get_id()),
        atol=1e-5,
    )
    assert cost.get_gradient_with_respect_to("contacts").size == 0


def test_quadratic_cost_requires_square_matrix(com_motion):
    """Test that a non square quadratic term is rejected."""
    n_coeff = com_motion.get_total_free_coeff()
    with pytest.raises(StructuralMismatchError):
        QuadraticSplineCost(com_motion, MatVec(np.zeros((2, n_coeff)), np.zeros(2)))
