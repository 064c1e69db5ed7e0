"""Test every analytical jacobian block against finite difference perturbation."""

import numpy as np
import pytest

from gait_trajopt.constraints.derivative_check import get_constraint_jacobian_by_perturbation
from gait_trajopt.constraints.polygon_center import PolygonCenterConstraint
from gait_trajopt.factory import ConstraintName

RECIPES = [
    ConstraintName.INIT_COM,
    ConstraintName.FINAL_COM,
    ConstraintName.JUNCTION_COM,
    ConstraintName.CONVEXITY,
    ConstraintName.DYNAMIC,
    ConstraintName.ROM_BOX,
]


def _assert_jacobians_match(constraint, opt_var):
    """Compare the analytical and numerical jacobian of every variable set."""
    constraint.update_variables(opt_var)
    for set_id in opt_var.set_ids:
        jacobian = constraint.get_jacobian_with_respect_to(set_id)
        jacobian_by_perturbation = get_constraint_jacobian_by_perturbation(constraint, opt_var, set_id)

        if jacobian.shape[0] == 0:
            # An uncoupled set must not influence the residual either
            assert np.allclose(jacobian_by_perturbation, 0.0), f"{constraint.name} depends on {set_id}"
        else:
            assert jacobian.shape == jacobian_by_perturbation.shape
            assert np.allclose(jacobian.toarray(), jacobian_by_perturbation, atol=1e-6), (
                f"{constraint.name} jacobian wrt {set_id} mismatch"
            )


@pytest.mark.parametrize("seed", [0, 1, 2])
@pytest.mark.parametrize("recipe", RECIPES)
def test_recipe_jacobians(factory, opt_var, randomize, recipe, seed):
    """Test the jacobian blocks of every recipe on randomized iterates."""
    randomize(opt_var, seed)
    for constraint in factory.get_constraint(recipe):
        _assert_jacobians_match(constraint, opt_var)


@pytest.mark.parametrize("seed", [0, 1, 2])
def test_polygon_center_jacobian(ee_load, opt_var, randomize, seed):
    """Test the quadratic polygon center jacobian on randomized iterates."""
    _assert_jacobians_match(PolygonCenterConstraint(ee_load), randomize(opt_var, seed))


def test_registry_restored(factory, opt_var, randomize):
    """Test that the perturbation leaves the registry at the nominal iterate."""
    randomize(opt_var, seed=9)
    nominal_values = opt_var.get_optimization_variables()
    constraint = factory.get_constraint(ConstraintName.ROM_BOX)[0]
    constraint.update_variables(opt_var)
    nominal_residual = constraint.evaluate_constraint()

    get_constraint_jacobian_by_perturbation(constraint, opt_var, "contacts")
    assert np.array_equal(opt_var.get_optimization_variables(), nominal_values)
    assert np.array_equal(constraint.evaluate_constraint(), nominal_residual)
