"""Define the discretized center of pressure reference point."""

import numpy as np

from gait_trajopt.geometry import DIM_2D, Coords
from gait_trajopt.sampling import TIME_DECIMALS, support_area_sample_times


class CenterOfPressure:
    """Planar pressure reference point held constant between nodes spaced by dt.

    Nodes sit at the support area sample times, the parameters are ordered

        x = [node_0 X, node_0 Y, node_1 X, node_1 Y, ...]
    """

    ID = "cop"

    def __init__(self, total_time: float, dt: float):
        """Place one node at every multiple of dt within the total time."""
        self.dt = dt
        self.node_times = support_area_sample_times(total_time, dt)
        self._cop = np.zeros((len(self.node_times), DIM_2D))

    def get_id(self) -> str:
        """Get the variable set identifier of the pressure point nodes."""
        return self.ID

    def get_opt_var_count(self) -> int:
        """Get the number of node coordinates."""
        return self._cop.size

    def get_optimization_parameters(self) -> np.ndarray:
        """Get the stacked node coordinates."""
        return self._cop.reshape(-1).copy()

    def set_optimization_parameters(self, cop):
        """Set the stacked node coordinates."""
        cop = np.asarray(cop, dtype=float)
        if cop.size != self.get_opt_var_count():
            raise ValueError(f"Expected {self.get_opt_var_count()} center of pressure values, got {cop.size}.")
        self._cop = cop.reshape(self._cop.shape).copy()

    def get_node_id(self, t_global: float) -> int:
        """Get the node holding the pressure point at a global time."""
        node = int(np.floor(t_global / self.dt + 10**-TIME_DECIMALS))
        return min(max(node, 0), len(self.node_times) - 1)

    def get_cop(self, t_global: float) -> np.ndarray:
        """Get the pressure point at a global time."""
        return self._cop[self.get_node_id(t_global)].copy()

    def get_jacobian_wrt_cop(self, t_global: float, dim: Coords) -> np.ndarray:
        """Get the partials of one pressure point coordinate with respect to all node coordinates."""
        jacobian = np.zeros(self.get_opt_var_count())
        jacobian[self.get_node_id(t_global) * DIM_2D + dim] = 1.0
        return jacobian
