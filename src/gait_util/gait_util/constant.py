"""Physical constants used in locomotion models."""

from gait_util.units import Q_

# Standard gravitational acceleration (m/s^2)
G0 = Q_(1, "g0")
