"""
Weight mutation operator.

Every weight scalar is perturbed independently with probability
`mutation_prob` by a uniform offset in [-perturbation, perturbation).
Weights that are not picked keep their exact bit pattern.
"""
from typing import Optional

import torch

from .genome import Genome


class WeightMutator:
    """
    Uniform weight perturbation.

    Attributes:
        mutation_prob: Probability of mutating each weight.
        perturbation: Half-width of the uniform noise.

    Example:
        mutator = WeightMutator(mutation_prob=0.25)
        child = mutator.mutate(parent, in_place=False)
    """

    def __init__(
        self,
        mutation_prob: float,
        perturbation: float = 0.05,
        generator: Optional[torch.Generator] = None,
    ):
        """
        Initialize the weight mutator.

        Args:
            mutation_prob: Probability of mutating each weight (0-1).
            perturbation: Noise is drawn from U(-perturbation, perturbation).
            generator: Optional torch generator for reproducible runs.
        """
        if not 0.0 <= mutation_prob <= 1.0:
            raise ValueError(f"mutation_prob must be within [0, 1], got {mutation_prob}")
        self.mutation_prob = mutation_prob
        self.perturbation = perturbation
        self.generator = generator

    def mutate(self, genome: Genome, in_place: bool = True) -> Genome:
        """
        Apply weight perturbation to a genome.

        Args:
            genome: The genome to mutate.
            in_place: If True, modify genome in place.
                     If False, mutate and return a fresh clone.

        Returns:
            Mutated genome (same object if in_place=True).
        """
        if not in_place:
            genome = genome.clone()

        with torch.no_grad():
            for param in genome.network.parameters():
                mask = self._uniform(param) < self.mutation_prob
                noise = (self._uniform(param) * 2.0 - 1.0) * self.perturbation
                param.copy_(torch.where(mask, param + noise, param))

        genome.mutation_history.append('weight_perturbation')
        return genome

    def _uniform(self, like: torch.Tensor) -> torch.Tensor:
        return torch.rand(
            like.shape,
            generator=self.generator,
            dtype=like.dtype,
            device=like.device,
        )
