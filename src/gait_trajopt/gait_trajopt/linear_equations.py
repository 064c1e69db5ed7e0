"""Define affine equations over the center of mass spline coefficients."""

from dataclasses import dataclass

import numpy as np

from gait_trajopt.geometry import Coords, MotionDerivative, StateLin2d
from gait_trajopt.motion.com_spline import ComSpline
from gait_util.logconfig import create_logger

LOG = create_logger(__name__)

# Derivatives matched at spline boundaries and junctions unless specified otherwise
DEFAULT_MATCHED_DERIVATIVES = (MotionDerivative.POS, MotionDerivative.VEL, MotionDerivative.ACC)


class StructuralMismatchError(ValueError):
    """Raise when affine blocks with incompatible shapes are combined."""


@dataclass
class VecScalar:
    """Define a single affine row x -> v @ x + s."""

    v: np.ndarray
    s: float


@dataclass
class MatVec:
    """Define an affine map in the form of x -> M @ x + v.

    The stored M matrix is in size of m x n where m is the number of rows and
    n the number of spline coefficients the map applies to.
    """

    matrix: np.ndarray
    vector: np.ndarray

    def __post_init__(self):
        """Ensure the matrix is 2D and the vector has one entry per row."""
        self.matrix = np.atleast_2d(np.asarray(self.matrix, dtype=float))
        self.vector = np.asarray(self.vector, dtype=float).reshape(-1)
        if self.matrix.shape[0] != self.vector.size:
            raise StructuralMismatchError(
                f"Affine block matrix has {self.matrix.shape[0]} rows but vector has {self.vector.size} entries."
            )

    @classmethod
    def zeros(cls, rows: int, cols: int) -> "MatVec":
        """Create an all zero affine block."""
        return cls(matrix=np.zeros((rows, cols)), vector=np.zeros(rows))

    @property
    def rows(self) -> int:
        """Get the number of rows."""
        return self.matrix.shape[0]

    @property
    def cols(self) -> int:
        """Get the number of columns."""
        return self.matrix.shape[1]

    def evaluate_with(self, x: np.ndarray) -> np.ndarray:
        """Evaluate the affine map at the given coefficients."""
        return self.matrix @ np.asarray(x, dtype=float) + self.vector

    def stack(self, other: "MatVec") -> "MatVec":
        """Row-stack another block below this one."""
        if self.cols != other.cols:
            raise StructuralMismatchError(
                f"Cannot stack affine blocks with {self.cols} and {other.cols} columns."
            )
        return MatVec(matrix=np.vstack((self.matrix, other.matrix)), vector=np.concatenate((self.vector, other.vector)))

    def extract_row(self, row: int) -> VecScalar:
        """Get a single row as a row vector and scalar pair."""
        return VecScalar(v=self.matrix[row].copy(), s=float(self.vector[row]))


class LinearSplineEquations:
    """Formulate linear relations over the coefficients of a center of mass spline.

    Boundary and junction equations are returned as MatVec blocks whose rows
    evaluate to zero when the relation holds. Motion costs are returned as
    quadratic matrices Q such that x^T Q x integrates the squared derivative.
    """

    def __init__(self, com_spline: ComSpline):
        """Store the spline the equations are formulated for."""
        self.com_spline = com_spline

    def make_initial(self, initial_state: StateLin2d, derivatives=DEFAULT_MATCHED_DERIVATIVES) -> MatVec:
        """Formulate rows matching the spline derivatives at the start time to the given state."""
        return self._make_state_match(0.0, initial_state, derivatives)

    def make_final(self, final_state: StateLin2d, derivatives=DEFAULT_MATCHED_DERIVATIVES) -> MatVec:
        """Formulate rows matching the spline derivatives at the final time to the given state."""
        return self._make_state_match(self.com_spline.get_total_time(), final_state, derivatives)

    def _make_state_match(self, t_global: float, state: StateLin2d, derivatives) -> MatVec:
        """Formulate rows J_d(t) x - state_d for every derivative and axis."""
        rows, values = [], []
        for derivative in derivatives:
            for dim in Coords:
                rows.append(self.com_spline.get_jacobian(t_global, derivative, dim))
                values.append(-state.get_by_index(derivative)[dim])
        return MatVec(matrix=np.asarray(rows), vector=np.asarray(values))

    def make_junction(self, derivatives=DEFAULT_MATCHED_DERIVATIVES) -> MatVec:
        """Formulate rows enforcing equal derivatives at the end and start of adjacent segments."""
        n_coeff = self.com_spline.get_total_free_coeff()
        junction = MatVec.zeros(0, n_coeff)

        for segment in range(self.com_spline.num_segments - 1):
            segment_duration = self.com_spline.segment_durations[segment]
            rows = [
                self.com_spline.get_segment_jacobian(segment, segment_duration, derivative, dim)
                - self.com_spline.get_segment_jacobian(segment + 1, 0.0, derivative, dim)
                for derivative in derivatives
                for dim in Coords
            ]
            junction = junction.stack(MatVec(matrix=np.asarray(rows), vector=np.zeros(len(rows))))

        LOG.debug(f"Formulated {junction.rows} junction rows for {self.com_spline.num_segments} segments.")
        return junction

    def make_acceleration(self, weight_xy) -> np.ndarray:
        """Formulate the weighted integral of the squared acceleration."""
        return self.make_derivative_cost(MotionDerivative.ACC, weight_xy)

    def make_jerk(self, weight_xy) -> np.ndarray:
        """Formulate the weighted integral of the squared jerk."""
        return self.make_derivative_cost(MotionDerivative.JERK, weight_xy)

    def make_derivative_cost(self, derivative: MotionDerivative, weight_xy) -> np.ndarray:
        """Formulate the quadratic matrix of the weighted squared derivative integrated over all segments.

        For a segment of duration T, the n-th derivative of the monomial t^i is
        f_i t^(i - n) with f_i = i! / (i - n)!, hence

            int_0^T (sum_i c_i f_i t^(i - n))^2 dt = sum_ij c_i c_j f_i f_j T^(i + j - 2n + 1) / (i + j - 2n + 1)
        """
        order = int(derivative)
        num_coeff = self.com_spline.num_coeff
        weight_xy = np.asarray(weight_xy, dtype=float).reshape(len(Coords))

        powers = np.arange(num_coeff)
        falling_factorials = np.array(
            [np.prod(np.arange(power - order + 1, power + 1)) if power >= order else 0.0 for power in powers]
        )
        # Exponent of the integrated product term, clipped where the factorials already vanish
        exponents = np.maximum(powers[:, None] + powers[None, :] - 2 * order + 1, 1)

        n_coeff = self.com_spline.get_total_free_coeff()
        cost_matrix = np.zeros((n_coeff, n_coeff))
        for segment, duration in enumerate(self.com_spline.segment_durations):
            segment_block = np.outer(falling_factorials, falling_factorials) * duration**exponents / exponents
            for dim in Coords:
                start_index = self.com_spline.index(segment, dim, 0)
                block_slice = slice(start_index, start_index + num_coeff)
                cost_matrix[block_slice, block_slice] += weight_xy[dim] * segment_block

        return cost_matrix
