"""Define the discretization of continuous time requirements into sample times."""

import numpy as np

# Sample times are rounded so that multiples of dt reproduce their decimal values
TIME_DECIMALS = 9


def sample_times(total_time: float, dt: float, include_final: bool) -> list[float]:
    """Get the sample times k * dt for k = 0 .. floor(total_time / dt).

    With include_final the total time itself is appended as well, unless the
    last multiple of dt already coincides with it.
    """
    if dt <= 0:
        raise ValueError(f"Sample time step must be positive, got {dt}.")
    if total_time < 0:
        raise ValueError(f"Total time must be non-negative, got {total_time}.")

    # The tolerance keeps T=0.9, dt=0.3 from losing its last node to round-off
    num_steps = int(np.floor(total_time / dt + 10**-TIME_DECIMALS))
    times = [round(k * dt, TIME_DECIMALS) for k in range(num_steps + 1)]

    if include_final and not np.isclose(times[-1], total_time, rtol=0, atol=10**-TIME_DECIMALS):
        times.append(total_time)
    return times


def range_of_motion_sample_times(total_time: float, dt: float) -> list[float]:
    """Get sample times that also constrain the final configuration."""
    return sample_times(total_time, dt, include_final=True)


def support_area_sample_times(total_time: float, dt: float) -> list[float]:
    """Get sample times without the appended final time."""
    return sample_times(total_time, dt, include_final=False)
