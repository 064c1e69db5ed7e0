"""Define the piecewise polynomial center of mass motion."""

import copy

import numpy as np

from gait_trajopt.geometry import DIM_2D, Coords, MotionDerivative, StateLin2d
from gait_trajopt.sampling import TIME_DECIMALS


def polynomial_basis(t_local: float, num_coeff: int, derivative: MotionDerivative) -> np.ndarray:
    """Get the derivative of the monomial basis 1, t, t^2, ... evaluated at a local time.

    The n-th derivative of t^i is i! / (i - n)! * t^(i - n) for i >= n and zero otherwise.
    """
    order = int(derivative)
    basis = np.zeros(num_coeff)
    for power in range(order, num_coeff):
        falling_factorial = np.prod(np.arange(power - order + 1, power + 1))
        basis[power] = falling_factorial * t_local ** (power - order)
    return basis


class ComSpline:
    """Center of mass motion as a sequence of polynomial segments in the horizontal plane.

    Each segment holds, per axis, the coefficients of a polynomial in the local
    segment time. The optimization parameters are ordered

        x = [seg_0 X coeff, seg_0 Y coeff, seg_1 X coeff, seg_1 Y coeff, ...]

    so the motion is linear in x and every derivative query has a constant
    jacobian with respect to the coefficients.
    """

    ID = "spline_coeff"

    def __init__(self, segment_durations, polynomial_order: int = 5):
        """Set up zero polynomials for the given segment durations."""
        self.segment_durations = np.asarray(segment_durations, dtype=float).reshape(-1)
        if self.segment_durations.size == 0 or np.any(self.segment_durations <= 0):
            raise ValueError(f"Segment durations must be positive, got {self.segment_durations}.")

        self.num_coeff = polynomial_order + 1
        segment_end_times = np.cumsum(self.segment_durations)
        self.segment_start_times = np.round(np.concatenate(([0.0], segment_end_times[:-1])), TIME_DECIMALS)
        self._coefficients = np.zeros((self.num_segments, DIM_2D, self.num_coeff))

    def get_id(self) -> str:
        """Get the variable set identifier of the coefficients."""
        return self.ID

    @property
    def num_segments(self) -> int:
        """Get the number of polynomial segments."""
        return self.segment_durations.size

    def get_total_time(self) -> float:
        """Get the duration of the whole motion."""
        return float(np.sum(self.segment_durations))

    def get_total_free_coeff(self) -> int:
        """Get the number of optimized coefficients."""
        return self._coefficients.size

    def get_optimization_parameters(self) -> np.ndarray:
        """Get the stacked coefficients."""
        return self._coefficients.reshape(-1).copy()

    def set_optimization_parameters(self, x_coeff):
        """Set the stacked coefficients."""
        x_coeff = np.asarray(x_coeff, dtype=float)
        if x_coeff.size != self.get_total_free_coeff():
            raise ValueError(f"Expected {self.get_total_free_coeff()} spline coefficients, got {x_coeff.size}.")
        self._coefficients = x_coeff.reshape(self._coefficients.shape).copy()

    def index(self, segment: int, dim: Coords, coeff: int) -> int:
        """Get the index of a coefficient in the optimization parameters."""
        return (segment * DIM_2D + dim) * self.num_coeff + coeff

    def get_segment_id(self, t_global: float) -> int:
        """Get the segment active at a global time, the final time belongs to the last segment."""
        segment = int(np.searchsorted(self.segment_start_times, t_global, side="right")) - 1
        return min(max(segment, 0), self.num_segments - 1)

    def get_local_time(self, t_global: float) -> float:
        """Get the time elapsed since the start of the active segment."""
        return t_global - self.segment_start_times[self.get_segment_id(t_global)]

    def get_derivative(self, t_global: float, derivative: MotionDerivative) -> np.ndarray:
        """Get a derivative of the center of mass position in both axes."""
        segment = self.get_segment_id(t_global)
        basis = polynomial_basis(self.get_local_time(t_global), self.num_coeff, derivative)
        return self._coefficients[segment] @ basis

    def get_com_position(self, t_global: float) -> np.ndarray:
        """Get the horizontal center of mass position."""
        return self.get_derivative(t_global, MotionDerivative.POS)

    def get_com_state(self, t_global: float) -> StateLin2d:
        """Get the position, velocity and acceleration of the center of mass."""
        return StateLin2d(
            p=self.get_derivative(t_global, MotionDerivative.POS),
            v=self.get_derivative(t_global, MotionDerivative.VEL),
            a=self.get_derivative(t_global, MotionDerivative.ACC),
        )

    def get_segment_jacobian(
        self, segment: int, t_local: float, derivative: MotionDerivative, dim: Coords
    ) -> np.ndarray:
        """Get the partials of a derivative at a local segment time with respect to all coefficients."""
        jacobian = np.zeros(self.get_total_free_coeff())
        start_index = self.index(segment, dim, 0)
        jacobian[start_index : start_index + self.num_coeff] = polynomial_basis(t_local, self.num_coeff, derivative)
        return jacobian

    def get_jacobian(self, t_global: float, derivative: MotionDerivative, dim: Coords) -> np.ndarray:
        """Get the partials of a derivative at a global time with respect to all coefficients."""
        return self.get_segment_jacobian(
            self.get_segment_id(t_global), self.get_local_time(t_global), derivative, dim
        )

    def clone(self) -> "ComSpline":
        """Get an independent copy of the motion."""
        return copy.deepcopy(self)
