"""Define planar geometric structures shared by motion models and constraints."""

from dataclasses import dataclass, field
from enum import IntEnum

import numpy as np

# Number of horizontal dimensions (X, Y)
DIM_2D = 2


class Coords(IntEnum):
    """Horizontal coordinate indices."""

    X = 0
    Y = 1


class MotionDerivative(IntEnum):
    """Order of the time derivative of a motion."""

    POS = 0
    VEL = 1
    ACC = 2
    JERK = 3


@dataclass
class StateLin2d:
    """Define a planar linear state with position, velocity and acceleration."""

    p: np.ndarray = field(default_factory=lambda: np.zeros(DIM_2D))
    v: np.ndarray = field(default_factory=lambda: np.zeros(DIM_2D))
    a: np.ndarray = field(default_factory=lambda: np.zeros(DIM_2D))

    def __post_init__(self):
        """Cast all entries to float arrays."""
        self.p = np.asarray(self.p, dtype=float).reshape(DIM_2D)
        self.v = np.asarray(self.v, dtype=float).reshape(DIM_2D)
        self.a = np.asarray(self.a, dtype=float).reshape(DIM_2D)

    def get_by_index(self, derivative: MotionDerivative) -> np.ndarray:
        """Get the entry for a motion derivative."""
        if derivative == MotionDerivative.POS:
            return self.p
        if derivative == MotionDerivative.VEL:
            return self.v
        if derivative == MotionDerivative.ACC:
            return self.a
        raise ValueError(f"StateLin2d does not store derivative {derivative!r}.")


@dataclass
class Contact:
    """Define a ground contact of an endeffector.

    A contact with id FIXED_BY_START_STANCE is pinned: its position is known
    from the start stance and is not a decision variable.
    """

    FIXED_BY_START_STANCE = -1

    ee: str
    id: int
    p: np.ndarray

    def __post_init__(self):
        """Cast the position to a planar float array."""
        self.p = np.array(self.p, dtype=float).reshape(DIM_2D)

    @property
    def is_pinned(self) -> bool:
        """Check if the contact position is fixed by the start stance."""
        return self.id == self.FIXED_BY_START_STANCE
