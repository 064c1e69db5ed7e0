"""Define common fixtures for gait trajectory optimization tests."""

import numpy as np
import pytest

from gait_trajopt.factory import CostConstraintFactory
from gait_trajopt.geometry import StateLin2d
from gait_trajopt.motion.center_of_pressure import CenterOfPressure
from gait_trajopt.motion.com_spline import ComSpline
from gait_trajopt.motion.endeffector_load import EndeffectorLoad
from gait_trajopt.motion.endeffectors_motion import EndeffectorsMotion, GaitPhase
from gait_trajopt.parameters import LF, LH, RF, RH, MotionParameters
from gait_trajopt.variables import OptimizationVariables


"""
Below defines a standard quadruped walking cycle for testing.
Five phases of 0.3 s alternating four leg stance and diagonal pair stance,
so every leg is pinned in its start stance and touches down once more at a
free foothold.
"""

PHASE_DURATION = 0.3
START_STANCE = {
    LF: np.array([0.34, 0.34]),
    RF: np.array([0.34, -0.34]),
    LH: np.array([-0.34, 0.34]),
    RH: np.array([-0.34, -0.34]),
}
WALK_PHASES = [
    GaitPhase(PHASE_DURATION, (LF, RF, LH, RH)),
    GaitPhase(PHASE_DURATION, (RF, LH)),
    GaitPhase(PHASE_DURATION, (LF, RF, LH, RH)),
    GaitPhase(PHASE_DURATION, (LF, RH)),
    GaitPhase(PHASE_DURATION, (LF, RF, LH, RH)),
]


@pytest.fixture
def params():
    """Create the default quadruped walking parameters."""
    yield MotionParameters.quadruped_walk()


@pytest.fixture
def ee_motion():
    """Create the footholds of the walking cycle."""
    yield EndeffectorsMotion(START_STANCE, WALK_PHASES)


@pytest.fixture
def com_motion(ee_motion, params):
    """Create a center of mass spline with one segment per gait phase."""
    yield ComSpline([phase.duration for phase in ee_motion.phases], params.polynomial_order)


@pytest.fixture
def ee_load(ee_motion):
    """Create the load fractions of the walking cycle."""
    yield EndeffectorLoad(ee_motion)


@pytest.fixture
def cop(ee_motion, params):
    """Create the pressure point nodes of the walking cycle."""
    yield CenterOfPressure(ee_motion.get_total_time(), params.dt_nodes)


@pytest.fixture
def factory(com_motion, ee_motion, ee_load, cop, params):
    """Create a factory walking the robot 0.3 m forward."""
    yield CostConstraintFactory(
        com_motion,
        ee_motion,
        ee_load,
        cop,
        params,
        initial_state=StateLin2d(p=[0.0, 0.0]),
        final_state=StateLin2d(p=[0.3, 0.0]),
    )


@pytest.fixture
def opt_var(factory):
    """Create the registry with every variable set at its initial value."""
    yield OptimizationVariables(
        [
            factory.spline_coeff_variables(),
            factory.contact_variables(),
            factory.convexity_variables(),
            factory.cop_variables(),
        ]
    )


@pytest.fixture
def randomize():
    """Provide a function overwriting every variable set with a random iterate around its current values."""

    def _randomize(opt_var: OptimizationVariables, seed: int) -> OptimizationVariables:
        rng = np.random.default_rng(seed)
        for set_id in opt_var.set_ids:
            values = np.array(opt_var.get_variables(set_id))
            opt_var.set_variables(set_id, values + rng.uniform(-0.5, 0.5, size=values.size))
        return opt_var

    yield _randomize
