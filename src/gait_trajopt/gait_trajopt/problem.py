"""Define the assembly of many constraints and costs into the global nonlinear program."""

import numpy as np
from scipy import sparse

from gait_trajopt.constraints.base import Constraint, Cost
from gait_trajopt.linear_equations import StructuralMismatchError
from gait_trajopt.variables import Bound, OptimizationVariables
from gait_util.logconfig import create_logger

LOG = create_logger(__name__)


class ConstraintSet:
    """Stack the residuals, bounds and jacobian blocks of several constraints.

    Rows follow the order the constraints were added in, columns follow the
    registration order of the variable sets in the registry.
    """

    def __init__(self, constraints: list[Constraint] = ()):
        """Collect the given constraints in order."""
        self.constraints: list[Constraint] = []
        self.add_constraints(constraints)

    def add_constraints(self, constraints: list[Constraint]):
        """Append constraints, e.g. the list returned by one factory recipe."""
        for constraint in constraints:
            self.constraints.append(constraint)
            LOG.debug(f"Added constraint '{constraint.name}' with {constraint.get_number_of_constraints()} rows.")

    def update_variables(self, opt_var: OptimizationVariables):
        """Forward the current iterate to every constraint."""
        for constraint in self.constraints:
            constraint.update_variables(opt_var)

    def evaluate_constraints(self) -> np.ndarray:
        """Get the stacked residual of all constraints."""
        if not self.constraints:
            return np.zeros(0)
        return np.concatenate([constraint.evaluate_constraint() for constraint in self.constraints])

    def get_bounds(self) -> list[Bound]:
        """Get the bounds of all rows in stacking order."""
        return [bound for constraint in self.constraints for bound in constraint.get_bounds()]

    def get_number_of_constraints(self) -> int:
        """Get the total number of rows."""
        return sum(constraint.get_number_of_constraints() for constraint in self.constraints)

    def get_jacobian(self, opt_var: OptimizationVariables) -> sparse.csr_matrix:
        """Assemble the global sparse jacobian, uncoupled blocks are filled with zeros."""
        set_sizes = {set_id: len(opt_var.get_variables(set_id)) for set_id in opt_var.set_ids}
        total_cols = sum(set_sizes.values())

        block_rows = []
        for constraint in self.constraints:
            n_rows = constraint.get_number_of_constraints()
            if n_rows == 0 or total_cols == 0:
                continue

            row_blocks = []
            for set_id, n_cols in set_sizes.items():
                if n_cols == 0:
                    continue
                block = constraint.get_jacobian_with_respect_to(set_id)
                if block.shape[0] == 0:
                    block = sparse.csr_matrix((n_rows, n_cols))
                elif block.shape != (n_rows, n_cols):
                    raise StructuralMismatchError(
                        f"Constraint '{constraint.name}' returned a {block.shape} block for '{set_id}', "
                        f"expected {(n_rows, n_cols)}."
                    )
                row_blocks.append(block)
            block_rows.append(sparse.hstack(row_blocks, format="csr"))

        if not block_rows:
            return sparse.csr_matrix((self.get_number_of_constraints(), total_cols))
        return sparse.vstack(block_rows, format="csr")


class CostSet:
    """Sum several costs and stack their gradients in registry order."""

    def __init__(self, costs: list[Cost] = ()):
        """Collect the given costs in order."""
        self.costs: list[Cost] = list(costs)

    def add_cost(self, cost: Cost):
        """Append a cost."""
        self.costs.append(cost)
        LOG.debug(f"Added cost '{cost.name}'.")

    def update_variables(self, opt_var: OptimizationVariables):
        """Forward the current iterate to every cost."""
        for cost in self.costs:
            cost.update_variables(opt_var)

    def evaluate_cost(self) -> float:
        """Get the total cost."""
        return float(sum(cost.evaluate_cost() for cost in self.costs))

    def get_gradient(self, opt_var: OptimizationVariables) -> np.ndarray:
        """Get the gradient of the total cost with respect to all variables in registry order."""
        gradients = []
        for set_id in opt_var.set_ids:
            gradient = np.zeros(len(opt_var.get_variables(set_id)))
            for cost in self.costs:
                cost_gradient = cost.get_gradient_with_respect_to(set_id)
                if cost_gradient.size:
                    gradient += cost_gradient
            gradients.append(gradient)
        return np.concatenate(gradients) if gradients else np.zeros(0)
