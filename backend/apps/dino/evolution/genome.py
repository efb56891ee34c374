"""
Genome: one candidate controller.

A genome wraps a dense network with the bookkeeping the generation
loop needs: fitness, lineage and an identity that does not depend on
the weights.
"""
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import torch

from ..networks import DenseNetwork, NetworkBuilder, dino_controller_architecture


@dataclass
class Genome:
    """Wrapper for an evolved network with fitness."""
    network: DenseNetwork
    fitness: Optional[float] = None
    generation: int = 0
    parent_ids: List[str] = field(default_factory=list)
    mutation_history: List[str] = field(default_factory=list)
    id: str = ''

    def __post_init__(self):
        if not self.id:
            self.id = str(uuid.uuid4())[:8]
        self.network.eval()

    @classmethod
    def build(
        cls,
        architecture: Optional[Dict[str, Any]] = None,
        generation: int = 0,
    ) -> 'Genome':
        """Create a genome with freshly initialised weights."""
        network = NetworkBuilder().from_json(architecture or dino_controller_architecture())
        return cls(network=network, generation=generation)

    def predict(self, features: Sequence[float]) -> List[float]:
        """Run a forward pass over a single feature vector."""
        with torch.no_grad():
            inputs = torch.tensor([list(features)], dtype=torch.float32)
            return self.network(inputs)[0].tolist()

    def clone(self, **overrides: Any) -> 'Genome':
        """
        Copy this genome.

        The clone gets a new id and its own weight storage; fitness is
        unset unless passed in overrides.
        """
        values = {
            'network': NetworkBuilder().clone_network(self.network),
            'fitness': None,
            'generation': self.generation,
            'parent_ids': [self.id],
            'mutation_history': [],
        }
        values.update(overrides)
        return Genome(**values)

    def reset_fitness(self) -> None:
        self.fitness = None

    def topology(self) -> List[Dict[str, Any]]:
        return self.network.topology()

    def named_tensors(self) -> Dict[str, torch.Tensor]:
        return self.network.state_dict()
