"""Define the factory building costs, constraints and variable sets of a locomotion problem."""

import copy
from enum import Enum

import numpy as np

from gait_trajopt.constraints.base import Constraint, Cost
from gait_trajopt.constraints.contact_load import ContactLoadConstraint
from gait_trajopt.constraints.convexity import ConvexityConstraint
from gait_trajopt.constraints.dynamic import DynamicConstraint
from gait_trajopt.constraints.linear_spline import LinearSplineEqualityConstraint, QuadraticSplineCost
from gait_trajopt.constraints.polygon_center import PolygonCenterConstraint
from gait_trajopt.constraints.range_of_motion import RangeOfMotionBox
from gait_trajopt.constraints.soft_constraint import SoftConstraint
from gait_trajopt.constraints.support_area import SupportAreaConstraint
from gait_trajopt.geometry import MotionDerivative, StateLin2d
from gait_trajopt.linear_equations import LinearSplineEquations, MatVec
from gait_trajopt.motion.center_of_pressure import CenterOfPressure
from gait_trajopt.motion.com_spline import ComSpline
from gait_trajopt.motion.endeffector_load import EndeffectorLoad
from gait_trajopt.motion.endeffectors_motion import EndeffectorsMotion
from gait_trajopt.motion.initial_guess import guess_from_linear_interpolation
from gait_trajopt.parameters import MotionParameters
from gait_trajopt.variables import Bound, VariableSet
from gait_util.common_decorators import unimplemented
from gait_util.logconfig import create_logger

LOG = create_logger(__name__)


class ConfigurationError(KeyError):
    """Raise when a cost or constraint recipe is unknown or not available."""


class ConstraintName(Enum):
    """Constraint recipes the factory can be asked for."""

    INIT_COM = "init_com"
    FINAL_COM = "final_com"
    JUNCTION_COM = "junction_com"
    CONVEXITY = "convexity"
    DYNAMIC = "dynamic"
    ROM_BOX = "rom_box"
    FINAL_STANCE = "final_stance"
    OBSTACLE = "obstacle"


class CostName(Enum):
    """Cost recipes the factory can be asked for."""

    COM_COST = "com_cost"
    RANGE_OF_MOTION_COST = "range_of_motion_cost"
    POLYGON_CENTER_COST = "polygon_center_cost"
    FINAL_COM_COST = "final_com_cost"
    FINAL_STANCE_COST = "final_stance_cost"


def _to_recipe_name(enum_type: type[Enum], name):
    """Resolve an enum member, its value or its member name, anything else is a configuration error."""
    if isinstance(name, enum_type):
        return name

    if not isinstance(name, str):
        raise ConfigurationError(f"{enum_type.__name__} must be given as a member or a string, got {name!r}.")

    members_by_value = {member.value: member for member in enum_type}
    if name in members_by_value:
        return members_by_value[name]
    if name in enum_type.__members__:
        return enum_type[name]
    raise ConfigurationError(
        f"Unknown {enum_type.__name__} '{name}', expected one of {list(members_by_value)}."
    )


class CostConstraintFactory:
    """Build the constraints, costs and variable sets of a locomotion cycle from its subsystems.

    The factory only wires existing subsystems into constraint instances. Each
    built instance takes its own snapshot of the subsystems, so the factory can
    be asked for the same recipe repeatedly.
    """

    def __init__(
        self,
        com_motion: ComSpline,
        ee_motion: EndeffectorsMotion,
        ee_load: EndeffectorLoad,
        cop: CenterOfPressure,
        params: MotionParameters,
        initial_state: StateLin2d,
        final_state: StateLin2d,
    ):
        """Store the subsystems, the configuration and the geometric boundary states."""
        self.com_motion = com_motion
        self.ee_motion = ee_motion
        self.ee_load = ee_load
        self.cop = cop
        self.params = params

        self.initial_geom_state = initial_state
        self.final_geom_state = final_state

        # The spline describes the center of mass, the boundary states the geometric center
        self.initial_com_state = self._offset_to_com(initial_state)
        self.final_com_state = self._offset_to_com(final_state)

        self._constraint_recipes = {
            ConstraintName.INIT_COM: self._make_initial_constraint,
            ConstraintName.FINAL_COM: self._make_final_constraint,
            ConstraintName.JUNCTION_COM: self._make_junction_constraint,
            ConstraintName.CONVEXITY: self._make_convexity_constraint,
            ConstraintName.DYNAMIC: self._make_dynamic_constraint,
            ConstraintName.ROM_BOX: self._make_range_of_motion_box_constraint,
            ConstraintName.FINAL_STANCE: self._make_final_stance_constraint,
            ConstraintName.OBSTACLE: self._make_obstacle_constraint,
        }
        self._cost_recipes = {
            CostName.COM_COST: self._make_motion_cost,
            CostName.RANGE_OF_MOTION_COST: lambda: self.to_cost(self._make_range_of_motion_box_constraint()[0]),
            CostName.POLYGON_CENTER_COST: lambda: self.to_cost(self._make_polygon_center_constraint()[0]),
            CostName.FINAL_COM_COST: lambda: self.to_cost(self._make_final_constraint()[0]),
            CostName.FINAL_STANCE_COST: lambda: self.to_cost(self._make_final_stance_constraint()[0]),
        }

    def _offset_to_com(self, geom_state: StateLin2d) -> StateLin2d:
        """Shift a geometric state by the offset from the geometric center to the center of mass."""
        com_state = copy.deepcopy(geom_state)
        com_state.p = com_state.p + self.params.offset_geom_to_com
        return com_state

    def get_constraint(self, name: ConstraintName | str) -> list[Constraint]:
        """Build the constraints of a recipe, some recipes consist of several constraints."""
        recipe_name = _to_recipe_name(ConstraintName, name)
        constraints = self._constraint_recipes[recipe_name]()
        LOG.debug(f"Built constraint recipe {recipe_name.name}: {[constraint.name for constraint in constraints]}.")
        return constraints

    def get_cost(self, name: CostName | str) -> Cost:
        """Build the cost of a recipe."""
        recipe_name = _to_recipe_name(CostName, name)
        cost = self._cost_recipes[recipe_name]()
        LOG.debug(f"Built cost recipe {recipe_name.name}: {cost.name}.")
        return cost

    def to_cost(self, constraint: Constraint, weight: float | np.ndarray = 1.0) -> Cost:
        """Soften a constraint into a quadratic penalty on its bound violation."""
        return SoftConstraint(constraint, weight)

    def spline_coeff_variables(self) -> VariableSet:
        """Get the spline coefficients, initialized on a straight line between the boundary states."""
        initial_guess = guess_from_linear_interpolation(self.com_motion, self.initial_com_state, self.final_com_state)
        return VariableSet(initial_guess, self.com_motion.get_id())

    def contact_variables(self) -> VariableSet:
        """Get the free footholds at their current positions."""
        return VariableSet(self.ee_motion.get_optimization_parameters(), self.ee_motion.get_id())

    def convexity_variables(self) -> VariableSet:
        """Get the load fractions, split equally between the contacts of each phase."""
        lambdas = np.zeros(self.ee_load.get_opt_var_count())
        for segment in range(self.ee_load.get_number_of_segments()):
            active_endeffectors = self.ee_load.get_active_endeffectors(segment)
            for ee in active_endeffectors:
                lambdas[self.ee_load.index_discrete(segment, ee)] = 1.0 / len(active_endeffectors)
        return VariableSet(lambdas, self.ee_load.get_id(), Bound(0.0, 1.0))

    def cop_variables(self) -> VariableSet:
        """Get the pressure point nodes at their current values."""
        return VariableSet(self.cop.get_optimization_parameters(), self.cop.get_id())

    def _make_initial_constraint(self) -> list[Constraint]:
        """Match position, velocity and acceleration of the spline start to the initial state."""
        equations = LinearSplineEquations(self.com_motion)
        initial_equation = equations.make_initial(self.initial_com_state)
        return [LinearSplineEqualityConstraint(self.com_motion, initial_equation, "Initial XY")]

    def _make_final_constraint(self) -> list[Constraint]:
        """Match position, velocity and acceleration of the spline end to the final state."""
        equations = LinearSplineEquations(self.com_motion)
        return [LinearSplineEqualityConstraint(self.com_motion, equations.make_final(self.final_com_state), "Final XY")]

    def _make_junction_constraint(self) -> list[Constraint]:
        """Make adjacent spline segments meet with equal position, velocity and acceleration."""
        equations = LinearSplineEquations(self.com_motion)
        return [LinearSplineEqualityConstraint(self.com_motion, equations.make_junction(), "Junction")]

    def _make_convexity_constraint(self) -> list[Constraint]:
        """Tie the pressure point to a convex combination of the active contacts."""
        return [
            SupportAreaConstraint(
                self.ee_motion, self.ee_load, self.cop, self.ee_motion.get_total_time(), self.params.dt_nodes
            ),
            ConvexityConstraint(self.ee_load),
            ContactLoadConstraint(self.ee_load),
        ]

    def _make_dynamic_constraint(self) -> list[Constraint]:
        """Relate the center of mass motion to the pressure point through the inverted pendulum."""
        return [
            DynamicConstraint(
                self.com_motion,
                self.cop,
                self.ee_motion.get_total_time(),
                self.params.dt_nodes,
                self.params.com_height,
            )
        ]

    def _make_range_of_motion_box_constraint(self) -> list[Constraint]:
        """Keep every contact inside a box around its nominal stance relative to the center of mass."""
        return [
            RangeOfMotionBox(
                self.com_motion,
                self.ee_motion,
                self.params.dt_nodes,
                self.params.get_maximum_deviation_from_nominal(),
                self.params.get_nominal_stance_in_base(),
            )
        ]

    def _make_polygon_center_constraint(self) -> list[Constraint]:
        """Favor an equal load split between the contacts of each phase."""
        return [PolygonCenterConstraint(self.ee_load)]

    @unimplemented(message="no final stance formulation is available.", error=ConfigurationError)
    def _make_final_stance_constraint(self) -> list[Constraint]:
        """Place the final footholds at the nominal stance around the final state."""

    @unimplemented(message="no obstacle formulation is available.", error=ConfigurationError)
    def _make_obstacle_constraint(self) -> list[Constraint]:
        """Keep the footholds away from obstacles."""

    def _make_motion_cost(self) -> Cost:
        """Penalize the integrated squared acceleration or jerk of the center of mass."""
        equations = LinearSplineEquations(self.com_motion)
        derivative = self.params.motion_cost_derivative
        if derivative == MotionDerivative.ACC:
            term = equations.make_acceleration(self.params.weight_com_motion_xy)
        elif derivative == MotionDerivative.JERK:
            term = equations.make_jerk(self.params.weight_com_motion_xy)
        else:
            raise ConfigurationError(f"Motion cost on {derivative.name} is not available, use ACC or JERK.")

        return QuadraticSplineCost(self.com_motion, MatVec(matrix=term, vector=np.zeros(term.shape[0])))
