"""Define the motion configuration consumed by the cost and constraint factory."""

from dataclasses import dataclass, field

import numpy as np

from gait_trajopt.geometry import DIM_2D, MotionDerivative
from gait_util.units import Q_

# Endeffector identifiers of a quadruped, left/right front/hind
LF, RF, LH, RH = "LF", "RF", "LH", "RH"
QUADRUPED_ENDEFFECTORS = (LF, RF, LH, RH)


def _get_magnitude(value, unit: str):
    """Strip units from a quantity if given, assuming plain values are already in SI units."""
    if isinstance(value, Q_):
        return np.asarray(value.m_as(unit), dtype=float)
    return np.asarray(value, dtype=float)


@dataclass
class MotionParameters:
    """Define the discretization, kinematic and weighting parameters of a locomotion cycle.

    Lengths may be given as pint quantities or plain floats in meters, times in
    seconds. Quantities are converted to SI magnitudes at construction.
    """

    # Time step between discretization nodes of all sampled constraints
    dt_nodes: float | Q_ = 0.1
    # Maximum deviation of each contact from its nominal stance, per axis
    max_dev_xy: tuple | Q_ = (0.15, 0.1)
    # Nominal contact position per endeffector expressed in the base frame
    nominal_stance: dict = field(default_factory=dict)
    # Weights of the center of mass motion cost, per axis
    weight_com_motion_xy: tuple = (1.0, 1.0)
    # Horizontal offset from the geometric center to the center of mass
    offset_geom_to_com: tuple | Q_ = (0.0, 0.0)
    # Center of mass height for the linear inverted pendulum model
    com_height: float | Q_ = 0.58
    # Derivative penalized by the center of mass motion cost
    motion_cost_derivative: MotionDerivative = MotionDerivative.ACC
    # Order of each center of mass spline polynomial
    polynomial_order: int = 5

    def __post_init__(self):
        """Convert quantities to SI magnitudes and validate dimensions."""
        self.dt_nodes = float(_get_magnitude(self.dt_nodes, "s"))
        self.com_height = float(_get_magnitude(self.com_height, "m"))
        self.max_dev_xy = _get_magnitude(self.max_dev_xy, "m").reshape(DIM_2D)
        self.offset_geom_to_com = _get_magnitude(self.offset_geom_to_com, "m").reshape(DIM_2D)
        self.weight_com_motion_xy = np.asarray(self.weight_com_motion_xy, dtype=float).reshape(DIM_2D)
        self.nominal_stance = {
            ee: _get_magnitude(position, "m").reshape(DIM_2D) for ee, position in self.nominal_stance.items()
        }
        self.motion_cost_derivative = MotionDerivative(self.motion_cost_derivative)

        if self.dt_nodes <= 0:
            raise ValueError(f"Node time step must be positive, got {self.dt_nodes}.")
        if np.any(self.max_dev_xy < 0):
            raise ValueError(f"Maximum deviation must be non-negative, got {self.max_dev_xy}.")
        if self.polynomial_order < 3:
            raise ValueError(f"Spline polynomials need at least order 3 for jerk, got {self.polynomial_order}.")

    def get_maximum_deviation_from_nominal(self) -> np.ndarray:
        """Get the allowed deviation of a contact from its nominal position, per axis."""
        return self.max_dev_xy

    def get_nominal_stance_in_base(self) -> dict:
        """Get the nominal contact position of every endeffector in the base frame."""
        return self.nominal_stance

    @classmethod
    def quadruped_walk(cls, **overrides) -> "MotionParameters":
        """Create the default quadruped walking parameters."""
        x_nominal_b = 0.34
        y_nominal_b = 0.34
        defaults = dict(
            dt_nodes=Q_(0.1, "s"),
            max_dev_xy=Q_(np.array([0.15, 0.1]), "m"),
            nominal_stance={
                LF: Q_(np.array([x_nominal_b, y_nominal_b]), "m"),
                RF: Q_(np.array([x_nominal_b, -y_nominal_b]), "m"),
                LH: Q_(np.array([-x_nominal_b, y_nominal_b]), "m"),
                RH: Q_(np.array([-x_nominal_b, -y_nominal_b]), "m"),
            },
            weight_com_motion_xy=(1.0, 1.0),
            com_height=Q_(0.58, "m"),
        )
        defaults.update(overrides)
        return cls(**defaults)
