"""Define the load distribution between endeffectors over the gait phases."""

import numpy as np

from gait_trajopt.motion.endeffectors_motion import EndeffectorsMotion


class EndeffectorLoad:
    """Load fraction of the total weight carried by each endeffector, constant per gait phase.

    A lambda is stored for every endeffector in every phase, ordered

        x = [phase_0 ee_0, phase_0 ee_1, ..., phase_1 ee_0, ...]

    Endeffectors that are not in contact during a phase keep their variable,
    the contact load constraint forces it to zero.
    """

    ID = "convexity"

    def __init__(self, ee_motion: EndeffectorsMotion):
        """Discretize the load by the gait phases of the endeffectors motion."""
        self.endeffectors = ee_motion.endeffectors
        self.phase_start_times = ee_motion.phase_start_times.copy()
        self._phase_contacts = ee_motion.get_phase_contacts()
        self._lambdas = np.zeros((len(self._phase_contacts), len(self.endeffectors)))

    def get_id(self) -> str:
        """Get the variable set identifier of the load fractions."""
        return self.ID

    def get_number_of_segments(self) -> int:
        """Get the number of phases with distinct load values."""
        return len(self._phase_contacts)

    def get_opt_var_count(self) -> int:
        """Get the number of load fractions."""
        return self._lambdas.size

    def get_optimization_parameters(self) -> np.ndarray:
        """Get the stacked load fractions."""
        return self._lambdas.reshape(-1).copy()

    def set_optimization_parameters(self, lambdas):
        """Set the stacked load fractions."""
        lambdas = np.asarray(lambdas, dtype=float)
        if lambdas.size != self.get_opt_var_count():
            raise ValueError(f"Expected {self.get_opt_var_count()} load values, got {lambdas.size}.")
        self._lambdas = lambdas.reshape(self._lambdas.shape).copy()

    def get_segment(self, t_global: float) -> int:
        """Get the load phase active at a global time."""
        segment = int(np.searchsorted(self.phase_start_times, t_global, side="right")) - 1
        return min(max(segment, 0), self.get_number_of_segments() - 1)

    def get_active_endeffectors(self, segment: int) -> tuple:
        """Get the endeffectors in contact during a load phase."""
        return self._phase_contacts[segment]

    def get_load_values_idx(self, segment: int) -> dict:
        """Get the load fraction of every endeffector in contact during a phase."""
        return {ee: self._lambdas[segment, self.endeffectors.index(ee)] for ee in self._phase_contacts[segment]}

    def get_load_values(self, t_global: float) -> dict:
        """Get the load fraction of every endeffector in contact at a global time."""
        return self.get_load_values_idx(self.get_segment(t_global))

    def index_discrete(self, segment: int, ee: str) -> int:
        """Get the index of a load fraction by phase in the optimization parameters."""
        return segment * len(self.endeffectors) + self.endeffectors.index(ee)

    def index(self, t_global: float, ee: str) -> int:
        """Get the index of a load fraction by global time in the optimization parameters."""
        return self.index_discrete(self.get_segment(t_global), ee)
