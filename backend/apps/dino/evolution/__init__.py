"""
Genetic search over genome weights.

This module provides:
- Genome: a network plus fitness and lineage
- Truncation selection
- Single-point per-tensor crossover
- Uniform per-weight mutation
- Population management and reproduction
- JSON persistence of populations

Example usage:
    from apps.dino.conf import EvolutionConfig
    from apps.dino.evolution import Population

    pop = Population(EvolutionConfig(genome_units=12, selection=4))
    pop.seed()
    for genome in pop:
        genome.fitness = play(genome)
    pop.record_evaluation()
    pop.evolve_generation()
"""
from .genome import Genome
from .selection import TruncationSelection, fitness_key, random_element
from .crossover import SinglePointCrossover
from .mutations import WeightMutator
from .population import Population, GenerationStats
from .storage import GenomeStore

__all__ = [
    'Genome',

    # Operators
    'TruncationSelection',
    'SinglePointCrossover',
    'WeightMutator',
    'fitness_key',
    'random_element',

    # Population management
    'Population',
    'GenerationStats',
    'GenomeStore',
]
