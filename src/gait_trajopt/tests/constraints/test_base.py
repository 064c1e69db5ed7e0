"""Test the row layout and jacobian cache shared by the constraints."""

import numpy as np
import pytest
from scipy import sparse

from gait_trajopt.constraints.base import CachedJacobian, JacobianNotCachedError, RowLayout, build_jacobian
from gait_trajopt.geometry import Contact


class TestRowLayout:
    """Test the RowLayout class."""

    @pytest.fixture
    def layout(self):
        """Fixture to provide a layout with two contacts at the first and one at the second time."""
        contacts = {0.0: [Contact("LF", -1, [0, 0]), Contact("RF", 0, [1, 1])], 0.5: [Contact("RF", 0, [1, 1])]}
        yield RowLayout.for_contacts([0.0, 0.5], contacts.get)

    def test_row_index(self, layout):
        """Test that each (time, contact) pair owns two consecutive rows."""
        assert layout.num_rows == 6
        assert layout.row_index(0, Contact("LF", -1, [5, 5])) == 0
        assert layout.row_index(0, Contact("RF", 0, [0, 0])) == 2
        assert layout.row_index(1, Contact("RF", 0, [0, 0])) == 4
        assert [row for row, _ in layout] == [0, 2, 4]

    def test_unknown_key(self, layout):
        """Test that a contact not active at a time has no rows."""
        with pytest.raises(KeyError):
            layout.row_index(1, Contact("LF", -1, [0, 0]))

    def test_signature_ignores_positions(self):
        """Test that moving contacts keeps the layout signature."""
        first = RowLayout.for_contacts([0.0], lambda t: [Contact("LF", 0, [0, 0])])
        moved = RowLayout.for_contacts([0.0], lambda t: [Contact("LF", 0, [3, 1])])
        other = RowLayout.for_contacts([0.0], lambda t: [Contact("LF", 1, [0, 0])])
        assert first.signature == moved.signature
        assert first.signature != other.signature

    def test_for_samples(self):
        """Test the layout with one row pair per sample."""
        layout = RowLayout.for_samples([0.0, 0.1, 0.2])
        assert layout.num_rows == 6
        assert layout.row_index(2) == 4


class TestCachedJacobian:
    """Test the CachedJacobian class."""

    def test_uninitialized(self):
        """Test that reading an uncomputed block fails."""
        cache = CachedJacobian("test")
        assert not cache.is_cached
        with pytest.raises(JacobianNotCachedError):
            cache.value

    def test_rebuild_on_new_signature(self):
        """Test that the block is computed once per signature."""
        calls = []

        def compute():
            calls.append(1)
            return sparse.identity(2, format="csr")

        cache = CachedJacobian("test")
        first = cache.update(("a",), compute)
        assert cache.update(("a",), compute) is first
        assert len(calls) == 1

        cache.update(("b",), compute)
        assert len(calls) == 2
        assert cache.is_cached


def test_build_jacobian_sums_duplicates():
    """Test that repeated triplets are accumulated."""
    jacobian = build_jacobian([0, 0, 1], [1, 1, 0], [1.0, 2.0, 4.0], shape=(2, 2))
    assert np.array_equal(jacobian.toarray(), [[0.0, 3.0], [4.0, 0.0]])
