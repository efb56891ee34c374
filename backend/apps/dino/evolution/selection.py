"""
Truncation selection.

Only the top performers survive a generation boundary. The sort is
stable, so genomes with equal fitness keep their evaluation order.
"""
import logging
import random
from typing import List, Optional, Sequence, TypeVar

from .genome import Genome

logger = logging.getLogger(__name__)

T = TypeVar('T')


def fitness_key(genome: Genome) -> float:
    """Sort key; unevaluated genomes rank below every scored one."""
    if genome.fitness is None:
        return float('-inf')
    return genome.fitness


class TruncationSelection:
    """
    Keep the `selection_count` fittest genomes.

    Example:
        selection = TruncationSelection(selection_count=4)
        elite = selection.select(population)
    """

    def __init__(self, selection_count: int):
        """
        Initialize truncation selection.

        Args:
            selection_count: Number of genomes that survive.
        """
        if selection_count <= 0:
            raise ValueError(f"selection_count must be positive, got {selection_count}")
        self.selection_count = selection_count

    def select(self, population: Sequence[Genome]) -> List[Genome]:
        """
        Select the top genomes.

        Args:
            population: Evaluated genomes, in evaluation order.

        Returns:
            Up to `selection_count` genomes, best first.
        """
        if not population:
            return []

        # sorted() is stable, and reverse=True keeps equal keys in input order
        ranked = sorted(population, key=fitness_key, reverse=True)
        return ranked[:self.selection_count]


def random_element(
    items: Sequence[T],
    rng: Optional[random.Random] = None,
    label: str = '',
) -> T:
    """
    Pick one element uniformly at random.

    Raises:
        ValueError: If items is empty.
    """
    if not items:
        logger.error("random_element failed: no element available for %s", label)
        raise ValueError(f"No element available for {label or 'selection'}")
    rng = rng or random
    return items[rng.randrange(len(items))]
