"""
Simulation layer: request orchestration and the immutable result record.
"""

from .orchestrator import FeasibilityOrchestrator, SimulationRequest
from .simulation_results import SimulationResult

__all__ = [
    'FeasibilityOrchestrator',
    'SimulationRequest',
    'SimulationResult',
]
