"""
Single-point crossover for genomes with identical topology.

For every weight tensor the child takes a prefix from parent A and
the remaining suffix from parent B, with an independent cut point per
tensor. Parents with mismatched tensors cannot be recombined; that is
a configuration error and is reported with both topologies attached.
"""
import logging
import random
from typing import Optional

import torch

from ..exceptions import CrossoverShapeError
from ..networks import NetworkBuilder
from .genome import Genome

logger = logging.getLogger(__name__)


class SinglePointCrossover:
    """
    Weight-level single-point crossover.

    Example:
        crossover = SinglePointCrossover()
        child = crossover.crossover(parent_a, parent_b)
    """

    def __init__(
        self,
        swap_probability: float = 0.5,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize the crossover operator.

        Args:
            swap_probability: Chance of swapping the A/B parent roles.
            rng: Random source for role swaps and cut points.
        """
        self.swap_probability = swap_probability
        self.rng = rng or random.Random()

    def crossover_point(self, length: int) -> int:
        """Cut index, uniform in [0, length)."""
        return self.rng.randrange(length)

    def crossover(self, parent_a: Genome, parent_b: Genome) -> Genome:
        """
        Create one child from two parents.

        Args:
            parent_a: First parent.
            parent_b: Second parent.

        Returns:
            Child genome shaped like parent A (after any role swap),
            with fitness unset.

        Raises:
            CrossoverShapeError: If any tensor pair differs in shape.
        """
        if self.rng.random() < self.swap_probability:
            parent_a, parent_b = parent_b, parent_a

        state_a = parent_a.named_tensors()
        state_b = parent_b.named_tensors()

        if state_a.keys() != state_b.keys():
            raise CrossoverShapeError(
                "Parents have different tensor layouts",
                topology_a=parent_a.topology(),
                topology_b=parent_b.topology(),
            )

        child_state = {}
        with torch.no_grad():
            for name, tensor_a in state_a.items():
                tensor_b = state_b[name]
                if tensor_a.shape != tensor_b.shape:
                    raise CrossoverShapeError(
                        f"The tensors are not the same shape: {name} "
                        f"{list(tensor_a.shape)} vs {list(tensor_b.shape)}",
                        topology_a=parent_a.topology(),
                        topology_b=parent_b.topology(),
                        tensor_name=name,
                    )

                flat_a = tensor_a.reshape(-1)
                flat_b = tensor_b.reshape(-1)
                point = self.crossover_point(flat_a.numel())
                child_state[name] = torch.cat(
                    [flat_a[:point], flat_b[point:]]
                ).reshape(tensor_a.shape).clone()

        network = NetworkBuilder().from_layers(
            parent_a.network.input_size,
            parent_a.network.layer_specs,
        )
        network.load_state_dict(child_state)

        return Genome(
            network=network,
            fitness=None,
            generation=max(parent_a.generation, parent_b.generation),
            parent_ids=[parent_a.id, parent_b.id],
            mutation_history=['crossover'],
        )
