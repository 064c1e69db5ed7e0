"""Define numerical derivatives used to verify the analytical jacobian blocks."""

import numpy as np

from gait_trajopt.constraints.base import Constraint, Cost
from gait_trajopt.variables import OptimizationVariables


def _perturbation_size(value: float, perturbation_percentage: float, min_perturbation: float) -> float:
    """Scale the perturbation with the variable magnitude, floored for values near zero."""
    return max(abs(value) * perturbation_percentage, min_perturbation)


def _central_difference(
    function,
    opt_var: OptimizationVariables,
    var_set: str,
    perturbation_percentage: float,
    min_perturbation: float,
) -> list[np.ndarray]:
    """Perturb every scalar of a variable set both ways and difference the function outputs."""
    nominal_values = np.array(opt_var.get_variables(var_set), dtype=float)

    partials = []
    try:
        for var_index, value in enumerate(nominal_values):
            perturbation = _perturbation_size(value, perturbation_percentage, min_perturbation)

            # Perturb positively
            perturbed_values = nominal_values.copy()
            perturbed_values[var_index] += perturbation
            opt_var.set_variables(var_set, perturbed_values)
            output_pos = np.atleast_1d(function(opt_var))

            # Perturb negatively
            perturbed_values[var_index] = value - perturbation
            opt_var.set_variables(var_set, perturbed_values)
            output_neg = np.atleast_1d(function(opt_var))

            partials.append((output_pos - output_neg) / (2 * perturbation))
    finally:
        # Leave the registry and every snapshot at the nominal iterate
        opt_var.set_variables(var_set, nominal_values)
        function(opt_var)

    return partials


def get_constraint_jacobian_by_perturbation(
    constraint: Constraint,
    opt_var: OptimizationVariables,
    var_set: str,
    perturbation_percentage: float = 1e-3,
    min_perturbation: float = 1e-5,
) -> np.ndarray:
    """Numerically compute the dense jacobian of a constraint with respect to one variable set."""

    def evaluate(current_opt_var):
        constraint.update_variables(current_opt_var)
        return constraint.evaluate_constraint()

    partials = _central_difference(evaluate, opt_var, var_set, perturbation_percentage, min_perturbation)
    if not partials:
        return np.zeros((constraint.get_number_of_constraints(), 0))
    return np.stack(partials, axis=1)


def get_cost_gradient_by_perturbation(
    cost: Cost,
    opt_var: OptimizationVariables,
    var_set: str,
    perturbation_percentage: float = 1e-3,
    min_perturbation: float = 1e-5,
) -> np.ndarray:
    """Numerically compute the gradient of a cost with respect to one variable set."""

    def evaluate(current_opt_var):
        cost.update_variables(current_opt_var)
        return cost.evaluate_cost()

    partials = _central_difference(evaluate, opt_var, var_set, perturbation_percentage, min_perturbation)
    return np.concatenate(partials) if partials else np.zeros(0)
