"""
Population management for the generation loop.

Handles the lifecycle of a population of genomes:
- Seeding to the configured size with fresh networks
- Loading saved genomes
- Recording evaluation statistics
- Reproduction: elitism, crossover and mutation
"""
import logging
import random
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from ..conf import EvolutionConfig
from ..networks import dino_controller_architecture
from .crossover import SinglePointCrossover
from .genome import Genome
from .mutations import WeightMutator
from .selection import TruncationSelection, random_element

logger = logging.getLogger(__name__)


@dataclass
class GenerationStats:
    """Statistics for a generation."""
    generation: int = 0
    best_fitness: float = 0.0
    avg_fitness: float = 0.0
    min_fitness: float = 0.0
    fitness_std: float = 0.0
    num_elites: int = 0
    num_crossovers: int = 0
    num_mutations: int = 0
    num_new_individuals: int = 0


class Population:
    """
    Owns the genomes of the current generation.

    Reproduction keeps the elite verbatim, fills up to
    `genome_units - crossover_reserve` with mutated crossover children
    of random elite pairs, and fills the rest with mutated clones of
    random elites.

    Example:
        pop = Population(EvolutionConfig(genome_units=12, selection=4))
        pop.seed()
        ...  # evaluate every genome
        pop.record_evaluation()
        pop.evolve_generation()
    """

    def __init__(
        self,
        config: EvolutionConfig,
        architecture: Optional[Dict[str, Any]] = None,
        rng: Optional[random.Random] = None,
        mutator: Optional[WeightMutator] = None,
        crossover: Optional[SinglePointCrossover] = None,
    ):
        """
        Initialize the population manager.

        Args:
            config: Evolution configuration.
            architecture: Topology for seeded genomes.
            rng: Random source for parent picks and crossover.
            mutator: Mutation operator (built from config if omitted).
            crossover: Crossover operator (built from rng if omitted).
        """
        self.config = config
        self.architecture = architecture or dino_controller_architecture()
        self.rng = rng or random.Random()

        self.individuals: List[Genome] = []
        self.generation = 0

        self.selection = TruncationSelection(config.selection)
        self.crossover = crossover or SinglePointCrossover(rng=self.rng)
        self.mutator = mutator or WeightMutator(
            mutation_prob=config.mutation_prob,
            perturbation=config.perturbation,
        )

        self.stats_history: List[GenerationStats] = []

    def __len__(self) -> int:
        return len(self.individuals)

    def __iter__(self):
        return iter(self.individuals)

    @property
    def is_full(self) -> bool:
        return len(self.individuals) >= self.config.genome_units

    def seed(self) -> int:
        """
        Top up the population with fresh genomes.

        Returns:
            Number of genomes built.
        """
        built = 0
        while len(self.individuals) < self.config.genome_units:
            logger.info("Building new genome %d", len(self.individuals))
            self.individuals.append(
                Genome.build(self.architecture, generation=self.generation)
            )
            built += 1
        return built

    def load(self, genomes: Iterable[Genome], replace: bool = False) -> int:
        """
        Add loaded genomes to the population.

        Args:
            genomes: Genomes to add.
            replace: If True, drop the current genomes first.

        Returns:
            Number of genomes added.
        """
        if replace:
            self.individuals = []
        added = 0
        for genome in genomes:
            genome.generation = self.generation
            self.individuals.append(genome)
            added += 1
        return added

    def record_evaluation(self) -> GenerationStats:
        """Compute and store statistics for the evaluated generation."""
        fitnesses = [g.fitness for g in self.individuals if g.fitness is not None]
        stats = GenerationStats(generation=self.generation)
        if fitnesses:
            stats.best_fitness = max(fitnesses)
            stats.avg_fitness = sum(fitnesses) / len(fitnesses)
            stats.min_fitness = min(fitnesses)
            stats.fitness_std = self._std(fitnesses)
        self.stats_history.append(stats)
        return stats

    def select_elite(self) -> List[Genome]:
        """Truncation selection over the current population."""
        return self.selection.select(self.individuals)

    def evolve_generation(self) -> GenerationStats:
        """
        Replace the population with the next generation.

        Returns:
            Reproduction statistics for the new generation.

        Raises:
            CrossoverShapeError: If two elites cannot be recombined.
            RuntimeError: If the refilled population has the wrong size.
        """
        target = self.config.genome_units
        crossover_target = target - self.config.crossover_reserve
        next_generation = self.generation + 1

        elite = self.select_elite()
        logger.info(
            "Best genomes: %s",
            ','.join(str(g.fitness) for g in elite),
        )
        stats = GenerationStats(generation=next_generation, num_elites=len(elite))

        new_individuals = [
            genome.clone(
                generation=next_generation,
                mutation_history=['elite'],
            )
            for genome in elite
        ]

        while len(new_individuals) < crossover_target:
            parent_a = random_element(elite, self.rng, 'genA')
            parent_b = random_element(elite, self.rng, 'genB')
            child = self.crossover.crossover(parent_a, parent_b)
            self.mutator.mutate(child, in_place=True)
            child.generation = next_generation
            new_individuals.append(child)
            stats.num_crossovers += 1
            stats.num_mutations += 1

        while len(new_individuals) < target:
            parent = random_element(elite, self.rng, 'gen')
            child = self.mutator.mutate(parent, in_place=False)
            child.generation = next_generation
            new_individuals.append(child)
            stats.num_mutations += 1

        if len(new_individuals) != target:
            raise RuntimeError(
                f"Population refill produced {len(new_individuals)} genomes, "
                f"expected {target}"
            )

        stats.num_new_individuals = len(new_individuals) - len(elite)
        self._merge_reproduction(stats)
        self.individuals = new_individuals
        self.generation = next_generation
        return stats

    def _merge_reproduction(self, stats: GenerationStats) -> None:
        """Copy reproduction counts onto the evaluated generation's entry."""
        if not self.stats_history or self.stats_history[-1].generation != self.generation:
            return
        recorded = self.stats_history[-1]
        recorded.num_elites = stats.num_elites
        recorded.num_crossovers = stats.num_crossovers
        recorded.num_mutations = stats.num_mutations
        recorded.num_new_individuals = stats.num_new_individuals

    def get_best(self) -> Optional[Genome]:
        """Get the best genome in the current population."""
        elite = self.selection.select(self.individuals)
        return elite[0] if elite else None

    @property
    def best_fitness(self) -> float:
        fitnesses = [g.fitness for g in self.individuals if g.fitness is not None]
        return max(fitnesses) if fitnesses else 0.0

    def _std(self, values: List[float]) -> float:
        """Calculate standard deviation."""
        if len(values) < 2:
            return 0.0
        mean = sum(values) / len(values)
        variance = sum((x - mean) ** 2 for x in values) / len(values)
        return variance ** 0.5
