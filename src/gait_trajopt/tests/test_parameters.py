"""Test the motion parameters configuration."""

import numpy as np
import pint
import pytest

from gait_trajopt.geometry import MotionDerivative
from gait_trajopt.parameters import LF, QUADRUPED_ENDEFFECTORS, MotionParameters
from gait_util.units import Q_


def test_quantities_converted_to_si():
    """Test that pint quantities are stored as SI magnitudes."""
    params = MotionParameters(
        dt_nodes=Q_(100, "ms"),
        max_dev_xy=Q_(np.array([15.0, 10.0]), "cm"),
        com_height=Q_(580, "mm"),
        nominal_stance={LF: Q_(np.array([34.0, 34.0]), "cm")},
    )
    assert np.isclose(params.dt_nodes, 0.1)
    assert np.isclose(params.com_height, 0.58)
    assert np.allclose(params.get_maximum_deviation_from_nominal(), [0.15, 0.1])
    assert np.allclose(params.get_nominal_stance_in_base()[LF], [0.34, 0.34])


def test_plain_values_are_si():
    """Test that plain floats are taken as SI values."""
    params = MotionParameters(dt_nodes=0.05, offset_geom_to_com=(0.01, 0.0))
    assert params.dt_nodes == 0.05
    assert np.array_equal(params.offset_geom_to_com, [0.01, 0.0])


def test_wrong_dimension():
    """Test that a quantity of the wrong dimension is rejected."""
    with pytest.raises(pint.DimensionalityError):
        MotionParameters(dt_nodes=Q_(0.1, "m"))


@pytest.mark.parametrize(
    "overrides",
    [
        {"dt_nodes": 0.0},
        {"max_dev_xy": (-0.1, 0.1)},
        {"polynomial_order": 2},
    ],
)
def test_invalid_parameters(overrides):
    """Test that invalid parameters raise ValueError."""
    with pytest.raises(ValueError):
        MotionParameters(**overrides)


def test_quadruped_walk_preset():
    """Test the default quadruped parameters and overrides."""
    params = MotionParameters.quadruped_walk(motion_cost_derivative=MotionDerivative.JERK)
    assert set(params.get_nominal_stance_in_base()) == set(QUADRUPED_ENDEFFECTORS)
    assert params.motion_cost_derivative == MotionDerivative.JERK
    assert np.isclose(params.dt_nodes, 0.1)
