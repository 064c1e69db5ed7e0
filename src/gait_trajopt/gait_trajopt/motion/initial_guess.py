"""Initial guess generator module for the center of mass spline."""

import numpy as np

from gait_trajopt.geometry import Coords, StateLin2d
from gait_trajopt.motion.com_spline import ComSpline


def guess_from_linear_interpolation(
    com_spline: ComSpline, initial_state: StateLin2d, final_state: StateLin2d
) -> np.ndarray:
    """Generate spline coefficients moving the center of mass on a straight line at constant speed."""
    total_time = com_spline.get_total_time()
    average_velocity = (final_state.p - initial_state.p) / total_time

    # Only the constant and linear coefficient of each segment are populated
    coefficients = np.zeros(com_spline.get_total_free_coeff())
    for segment, start_time in enumerate(com_spline.segment_start_times):
        segment_start_position = initial_state.p + average_velocity * start_time
        for dim in Coords:
            coefficients[com_spline.index(segment, dim, 0)] = segment_start_position[dim]
            coefficients[com_spline.index(segment, dim, 1)] = average_velocity[dim]
    return coefficients
