"""
Tests for population management and reproduction.
"""
import random

import pytest
import torch

from apps.dino.conf import EvolutionConfig
from apps.dino.evolution import Genome, Population, WeightMutator

from .conftest import filled_genome


def tensor_values(genome):
    return set(
        value
        for param in genome.network.parameters()
        for value in param.reshape(-1).tolist()
    )


class TestPopulationSeeding:
    """Tests for seeding and loading."""

    def test_seed_fills_population(self):
        population = Population(EvolutionConfig(genome_units=6, selection=2))
        assert population.seed() == 6
        assert len(population) == 6
        assert population.is_full

    def test_seed_tops_up(self):
        population = Population(EvolutionConfig(genome_units=6, selection=2))
        population.load([Genome.build(), Genome.build()])
        assert population.seed() == 4
        assert len(population) == 6

    def test_seed_full_population_is_noop(self):
        population = Population(EvolutionConfig(genome_units=3, selection=1))
        population.seed()
        assert population.seed() == 0

    def test_load_replace(self):
        population = Population(EvolutionConfig(genome_units=4, selection=2))
        population.seed()
        loaded = [Genome.build()]
        population.load(loaded, replace=True)
        assert population.individuals == loaded

    def test_load_appends(self):
        population = Population(EvolutionConfig(genome_units=4, selection=2))
        population.seed()
        population.load([Genome.build()])
        assert len(population) == 5


class TestRecordEvaluation:
    """Tests for generation statistics."""

    def test_stats(self):
        population = Population(EvolutionConfig(genome_units=4, selection=2))
        population.load([filled_genome(0.1) for _ in range(4)])
        for genome, fitness in zip(population, (0.0, 2.0, 4.0, 6.0)):
            genome.fitness = fitness

        stats = population.record_evaluation()

        assert stats.best_fitness == 6.0
        assert stats.avg_fitness == 3.0
        assert stats.min_fitness == 0.0
        assert stats.fitness_std == pytest.approx(5 ** 0.5)
        assert population.stats_history == [stats]
        assert population.best_fitness == 6.0

    def test_unevaluated_are_ignored(self):
        population = Population(EvolutionConfig(genome_units=2, selection=1))
        population.load([Genome.build(), Genome.build()])
        population.individuals[0].fitness = 1.0
        stats = population.record_evaluation()
        assert stats.avg_fitness == 1.0


class TestEvolveGeneration:
    """Tests for reproduction."""

    @pytest.fixture
    def evaluated(self):
        """12 genomes; the fittest four hold constant weights 1 to 4."""
        config = EvolutionConfig(genome_units=12, selection=4, mutation_prob=0.0)
        population = Population(
            config,
            rng=random.Random(11),
            mutator=WeightMutator(mutation_prob=0.0),
        )
        genomes = []
        for index in range(12):
            genome = filled_genome(float(index + 1) if index < 4 else -1.0)
            genome.fitness = float(10 - index) if index < 4 else 0.0
            genomes.append(genome)
        population.load(genomes)
        return population

    def test_population_size_is_restored(self, evaluated):
        evaluated.evolve_generation()
        assert len(evaluated) == 12
        assert evaluated.generation == 1

    def test_elites_first_in_rank_order(self, evaluated):
        """Test that the elite is carried over unchanged, best first."""
        elite_ids = [g.id for g in evaluated.individuals[:4]]

        evaluated.evolve_generation()

        for rank, genome in enumerate(evaluated.individuals[:4]):
            assert genome.parent_ids == [elite_ids[rank]]
            assert genome.mutation_history == ['elite']
            assert tensor_values(genome) == {float(rank + 1)}

    def test_offspring_layout(self, evaluated):
        """Test 6 crossover children followed by 2 mutated elite clones."""
        stats = evaluated.evolve_generation()

        crossover_children = evaluated.individuals[4:10]
        mutated_clones = evaluated.individuals[10:]

        assert all(g.mutation_history == ['crossover', 'weight_perturbation']
                   for g in crossover_children)
        assert all(g.mutation_history == ['weight_perturbation'] for g in mutated_clones)
        assert stats.num_elites == 4
        assert stats.num_crossovers == 6
        assert stats.num_mutations == 8
        assert stats.num_new_individuals == 8

    def test_offspring_only_inherit_from_elite(self, evaluated):
        """Test that no weight of a culled genome survives."""
        evaluated.evolve_generation()

        elite_values = {1.0, 2.0, 3.0, 4.0}
        for genome in evaluated.individuals:
            assert tensor_values(genome) <= elite_values
            assert genome.fitness is None
            assert genome.generation == 1

    def test_elite_not_mutated_by_mutate_only_phase(self):
        """Test that mutating clones leaves the carried-over elite intact."""
        config = EvolutionConfig(genome_units=6, selection=2, mutation_prob=1.0)
        population = Population(config, rng=random.Random(5))
        population.load([filled_genome(float(i)) for i in range(6)])
        for index, genome in enumerate(population):
            genome.fitness = float(index)

        population.evolve_generation()

        assert tensor_values(population.individuals[0]) == {5.0}
        assert tensor_values(population.individuals[1]) == {4.0}

    def test_unevaluated_population_still_breeds(self):
        population = Population(EvolutionConfig(genome_units=5, selection=2))
        population.seed()
        population.evolve_generation()
        assert len(population) == 5

    def test_get_best(self, evaluated):
        best = evaluated.get_best()
        assert best.fitness == 10.0
        assert torch.all(next(best.network.parameters()) == 1.0)

    def test_reproduction_counts_recorded_on_evaluated_generation(self, evaluated):
        """Test that the stored stats carry the counts of the breeding that followed."""
        recorded = evaluated.record_evaluation()

        evaluated.evolve_generation()

        assert evaluated.stats_history == [recorded]
        assert recorded.generation == 0
        assert recorded.best_fitness == 10.0
        assert recorded.num_elites == 4
        assert recorded.num_crossovers == 6
        assert recorded.num_mutations == 8
        assert recorded.num_new_individuals == 8
