"""Test the sample time generation."""

import pytest

from gait_trajopt.sampling import range_of_motion_sample_times, sample_times, support_area_sample_times


def test_range_of_motion_appends_final_time():
    """Test that the final time is appended when it is not a multiple of dt."""
    assert range_of_motion_sample_times(1.0, 0.3) == [0.0, 0.3, 0.6, 0.9, 1.0]


def test_support_area_omits_final_time():
    """Test that the support area samples stop at the last multiple of dt."""
    assert support_area_sample_times(1.0, 0.3) == [0.0, 0.3, 0.6, 0.9]


def test_final_time_not_duplicated():
    """Test that a final time coinciding with a multiple of dt is sampled once."""
    times = range_of_motion_sample_times(1.5, 0.1)
    assert len(times) == 16
    assert times[-1] == 1.5
    assert support_area_sample_times(1.5, 0.1) == times


@pytest.mark.parametrize("total_time, dt, expected_length", [(0.9, 0.3, 4), (0.0, 0.1, 1), (0.25, 0.1, 3)])
def test_sample_count(total_time, dt, expected_length):
    """Test the number of multiples of dt within the total time."""
    assert len(sample_times(total_time, dt, include_final=False)) == expected_length


def test_sample_times_are_rounded():
    """Test that accumulated multiples reproduce their decimal values."""
    assert support_area_sample_times(0.9, 0.1)[-1] == 0.9
    assert support_area_sample_times(0.7, 0.1) == [0.0, 0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7]


def test_invalid_sampling():
    """Test that invalid steps or durations raise ValueError."""
    with pytest.raises(ValueError):  # Zero step
        sample_times(1.0, 0.0, include_final=True)

    with pytest.raises(ValueError):  # Negative duration
        sample_times(-1.0, 0.1, include_final=True)
