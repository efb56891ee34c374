"""
Exceptions raised by the neuroevolution engine.
"""
from typing import Any, Dict, List, Optional


class NeuroevolutionError(Exception):
    """Base class for engine errors."""


class EnvironmentUnavailable(NeuroevolutionError):
    """
    The game object could not be reached on a poll.

    Treated as a transient miss: the poll is skipped and no state
    transition happens.
    """


class CrossoverShapeError(NeuroevolutionError, ValueError):
    """
    Two parent tensors disagree in shape.

    This is a configuration error, not a recoverable one. The parent
    topologies are attached so the cause can be identified.
    """

    def __init__(
        self,
        message: str,
        topology_a: Optional[List[Dict[str, Any]]] = None,
        topology_b: Optional[List[Dict[str, Any]]] = None,
        tensor_name: Optional[str] = None,
    ):
        super().__init__(message)
        self.topology_a = topology_a or []
        self.topology_b = topology_b or []
        self.tensor_name = tensor_name

    def __str__(self) -> str:
        base = super().__str__()
        return f"{base} (netA: {self.topology_a}, netB: {self.topology_b})"


class GenomeLoadError(NeuroevolutionError, ValueError):
    """A persisted genome record is malformed."""
