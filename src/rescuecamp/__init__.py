"""
Rescue camp flow simulation.

A three-phase discrete-event model of survivors moving through the
service stations of a rescue camp.
"""

__version__ = "0.1.0"

from rescuecamp.core.scenario import Scenario
from rescuecamp.model.camp import run_simulation

__all__ = ["Scenario", "run_simulation", "__version__"]
