"""Test the range of motion box constraint."""

import numpy as np
import pytest

from gait_trajopt.constraints.range_of_motion import RangeOfMotionBox, RangeOfMotionConstraint
from gait_trajopt.parameters import LF, RF
from gait_trajopt.variables import Bound


def _assert_bound(bound: Bound, lower: float, upper: float):
    assert np.isclose(bound.lower, lower) and np.isclose(bound.upper, upper)


@pytest.fixture
def rom_box(com_motion, ee_motion, params):
    """Create the box constraint sampled every 0.2 s."""
    yield RangeOfMotionBox(
        com_motion,
        ee_motion,
        0.2,
        params.get_maximum_deviation_from_nominal(),
        params.get_nominal_stance_in_base(),
    )


def test_final_time_sampled(rom_box):
    """Test that the final stance is constrained as well."""
    assert rom_box.dts == [0.0, 0.2, 0.4, 0.6, 0.8, 1.0, 1.2, 1.4, 1.5]


def test_bounds(rom_box):
    """Test the box around the nominal stance, shifted by pinned foothold positions."""
    bounds = rom_box.get_bounds()
    assert len(bounds) == rom_box.get_number_of_constraints() == rom_box.layout.num_rows

    # At t=0 LF is pinned at its start stance (0.34, 0.34) with nominal (0.34, 0.34)
    lf_pinned_row = rom_box.layout.row_index(0, rom_box.ee_motion.get_contacts(0.0)[0])
    _assert_bound(bounds[lf_pinned_row], 0.34 - 0.15 - 0.34, 0.34 + 0.15 - 0.34)
    _assert_bound(bounds[lf_pinned_row + 1], 0.34 - 0.1 - 0.34, 0.34 + 0.1 - 0.34)

    # At the final time every contact is free, the bound is the plain box
    final_contacts = rom_box.ee_motion.get_contacts(1.5)
    rf_free_row = rom_box.layout.row_index(len(rom_box.dts) - 1, final_contacts[1])
    assert final_contacts[1].ee == RF
    _assert_bound(bounds[rf_free_row], 0.34 - 0.15, 0.34 + 0.15)
    _assert_bound(bounds[rf_free_row + 1], -0.34 - 0.1, -0.34 + 0.1)


def test_residual(rom_box, opt_var, randomize):
    """Test the contact positions relative to the center of mass."""
    rom_box.update_variables(randomize(opt_var, seed=5))
    g = rom_box.evaluate_constraint()

    com_final = rom_box.com_motion.get_com_position(1.5)
    lf_free = rom_box.ee_motion.get_contacts(1.5)[0]
    row = rom_box.layout.row_index(len(rom_box.dts) - 1, lf_free)
    assert lf_free.ee == LF and not lf_free.is_pinned
    assert np.allclose(g[row : row + 2], lf_free.p - com_final)

    lf_pinned = rom_box.ee_motion.get_contacts(0.2)[0]
    row = rom_box.layout.row_index(1, lf_pinned)
    assert lf_pinned.is_pinned
    assert np.allclose(g[row : row + 2], -rom_box.com_motion.get_com_position(0.2))


def test_start_stance_feasible(rom_box, opt_var):
    """Test that the nominal start stance around the initial center of mass is within the box."""
    rom_box.update_variables(opt_var)
    g = rom_box.evaluate_constraint()
    bounds = rom_box.get_bounds()
    first_rows = rom_box.layout.row_index(1, rom_box.ee_motion.get_contacts(0.2)[0])
    assert all(bound.lower <= value <= bound.upper for value, bound in zip(g[:first_rows], bounds))


def test_jacobian_structure_cached(rom_box, opt_var, randomize):
    """Test that moving footholds keeps the cached jacobian blocks."""
    contacts_jacobian = rom_box.get_jacobian_with_respect_to("contacts")
    rom_box.update_variables(randomize(opt_var, seed=6))
    assert rom_box.get_jacobian_with_respect_to("contacts") is contacts_jacobian
    # Pinned rows do not depend on any foothold
    assert contacts_jacobian.sum() == 2 * sum(
        1 for _, key in rom_box.layout if not key.contact.is_pinned
    )


def test_missing_nominal_stance(com_motion, ee_motion):
    """Test that a leg without nominal stance is rejected."""
    with pytest.raises(KeyError):
        RangeOfMotionBox(com_motion, ee_motion, 0.2, [0.1, 0.1], {LF: [0.34, 0.34]})


def test_jacobian_hooks_are_abstract(com_motion, ee_motion):
    """Test that a range of motion without a workspace model cannot be built."""
    with pytest.raises(TypeError):
        RangeOfMotionConstraint(com_motion, ee_motion, 0.1)
