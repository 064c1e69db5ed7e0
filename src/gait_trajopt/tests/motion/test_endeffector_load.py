"""Test the endeffector load distribution."""

import numpy as np
import pytest

from gait_trajopt.parameters import LF, LH, RF, RH


def test_layout(ee_load):
    """Test one load fraction per phase and endeffector."""
    assert ee_load.get_number_of_segments() == 5
    assert ee_load.get_opt_var_count() == 20
    assert ee_load.index_discrete(1, RF) == 5
    assert ee_load.index(0.45, LH) == 6


def test_active_endeffectors(ee_load):
    """Test that only contacts of a phase are reported as loaded."""
    assert ee_load.get_active_endeffectors(0) == (LF, RF, LH, RH)
    assert ee_load.get_active_endeffectors(3) == (LF, RH)


def test_load_values(ee_load):
    """Test reading load fractions by phase and by time."""
    ee_load.set_optimization_parameters(np.arange(20.0))
    assert ee_load.get_load_values_idx(1) == {RF: 5.0, LH: 6.0}
    assert ee_load.get_load_values(1.5) == {LF: 16.0, RF: 17.0, LH: 18.0, RH: 19.0}


def test_segment_lookup(ee_load):
    """Test that the final time belongs to the last phase."""
    assert ee_load.get_segment(0.0) == 0
    assert ee_load.get_segment(0.6) == 2
    assert ee_load.get_segment(1.5) == 4


def test_parameter_size_mismatch(ee_load):
    """Test that a wrong load count raises ValueError."""
    with pytest.raises(ValueError):
        ee_load.set_optimization_parameters(np.zeros(4))
