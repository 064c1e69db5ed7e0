"""Define the contact sequence of all endeffectors over a locomotion cycle."""

from typing import NamedTuple

import numpy as np

from gait_trajopt.geometry import DIM_2D, Contact, Coords
from gait_trajopt.sampling import TIME_DECIMALS


class GaitPhase(NamedTuple):
    """Defines a phase of the gait.

    Attributes:
        duration: Duration of the phase in seconds.
        contacts: Endeffectors in ground contact during the phase.
    """

    duration: float
    contacts: tuple


class _Stance(NamedTuple):
    """A contiguous stance interval of one endeffector."""

    start_time: float
    end_time: float
    contact: Contact


class EndeffectorsMotion:
    """Manages the footholds of all endeffectors for a sequence of gait phases.

    An endeffector that is in contact at the start of the cycle keeps its start
    stance foothold until it lifts off, that contact is pinned. Every later
    touchdown creates a free contact whose planar position is a decision
    variable, the optimization parameters are ordered by contact id

        x = [c_0 X, c_0 Y, c_1 X, c_1 Y, ...]
    """

    ID = "contacts"

    def __init__(self, start_stance: dict, phases: list[GaitPhase]):
        """Build the stance intervals of every endeffector from the gait phases."""
        if not phases:
            raise ValueError("At least one gait phase is required.")

        self.phases = [GaitPhase(float(duration), tuple(contacts)) for duration, contacts in phases]
        self.start_stance = {ee: np.asarray(p, dtype=float).reshape(DIM_2D) for ee, p in start_stance.items()}

        # Endeffector order follows the start stance, then first appearance in the phases
        endeffectors = list(self.start_stance)
        for phase in self.phases:
            endeffectors.extend(ee for ee in phase.contacts if ee not in endeffectors)
        self.endeffectors = tuple(endeffectors)

        durations = np.asarray([phase.duration for phase in self.phases])
        if np.any(durations <= 0):
            raise ValueError(f"Gait phase durations must be positive, got {durations}.")
        self.phase_start_times = np.round(np.concatenate(([0.0], np.cumsum(durations)[:-1])), TIME_DECIMALS)
        self._total_time = round(float(np.sum(durations)), TIME_DECIMALS)

        self._stances: list[_Stance] = []
        self._free_contacts: list[Contact] = []
        self._build_stances()

    def _build_stances(self):
        """Merge consecutive phases with the same endeffector in contact into stance intervals."""
        for ee in self.endeffectors:
            last_position = self.start_stance.get(ee)
            stance_start = None

            for phase_index, phase in enumerate(self.phases):
                phase_start = self.phase_start_times[phase_index]
                if ee in phase.contacts and stance_start is None:
                    stance_start = phase_start
                elif ee not in phase.contacts and stance_start is not None:
                    last_position = self._add_stance(ee, stance_start, phase_start, last_position)
                    stance_start = None

            if stance_start is not None:
                self._add_stance(ee, stance_start, self._total_time, last_position)

        # Keep the stances ordered by endeffector, then by time for deterministic rows
        self._stances.sort(key=lambda stance: (self.endeffectors.index(stance.contact.ee), stance.start_time))

    def _add_stance(self, ee: str, start_time: float, end_time: float, last_position) -> np.ndarray:
        """Register a stance interval and return the foothold position it leaves the endeffector at."""
        if last_position is None:
            raise ValueError(f"Endeffector {ee} needs a start stance position to initialize its footholds.")

        if start_time == 0.0:
            contact = Contact(ee=ee, id=Contact.FIXED_BY_START_STANCE, p=last_position)
        else:
            contact = Contact(ee=ee, id=len(self._free_contacts), p=last_position)
            self._free_contacts.append(contact)

        self._stances.append(_Stance(start_time, end_time, contact))
        return contact.p

    def get_id(self) -> str:
        """Get the variable set identifier of the free footholds."""
        return self.ID

    def get_total_time(self) -> float:
        """Get the duration of the gait."""
        return self._total_time

    def get_all_free_contacts(self) -> list[Contact]:
        """Get the contacts whose positions are optimized, ordered by id."""
        return list(self._free_contacts)

    def get_opt_var_count(self) -> int:
        """Get the number of optimized foothold coordinates."""
        return len(self._free_contacts) * DIM_2D

    def get_optimization_parameters(self) -> np.ndarray:
        """Get the stacked free foothold positions."""
        if not self._free_contacts:
            return np.zeros(0)
        return np.concatenate([contact.p for contact in self._free_contacts])

    def set_optimization_parameters(self, footholds):
        """Set the free foothold positions from a stacked vector."""
        footholds = np.asarray(footholds, dtype=float)
        if footholds.size != self.get_opt_var_count():
            raise ValueError(f"Expected {self.get_opt_var_count()} foothold coordinates, got {footholds.size}.")
        for contact, position in zip(self._free_contacts, footholds.reshape(-1, DIM_2D)):
            contact.p = position.copy()

    def index(self, contact: Contact, dim: Coords) -> int:
        """Get the index of a free contact coordinate in the optimization parameters."""
        if contact.is_pinned:
            raise ValueError(f"Pinned contact of {contact.ee} is not an optimization variable.")
        return contact.id * DIM_2D + dim

    def get_contacts(self, t_global: float) -> list[Contact]:
        """Get the contacts active at a global time, the final time belongs to the last phase."""
        return [
            stance.contact
            for stance in self._stances
            if stance.start_time <= t_global < stance.end_time
            or (t_global >= self._total_time and stance.end_time == self._total_time)
        ]

    def get_phase_id(self, t_global: float) -> int:
        """Get the gait phase active at a global time."""
        phase = int(np.searchsorted(self.phase_start_times, t_global, side="right")) - 1
        return min(max(phase, 0), len(self.phases) - 1)

    def get_phase_contacts(self) -> list[tuple]:
        """Get the endeffectors in contact for every phase, ordered like the endeffectors."""
        return [tuple(ee for ee in self.endeffectors if ee in phase.contacts) for phase in self.phases]
