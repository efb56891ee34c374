"""
Fitness evaluation of genomes against a live game session.
"""
from .evaluator import FitnessEvaluator

__all__ = [
    'FitnessEvaluator',
]
