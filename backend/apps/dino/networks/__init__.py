"""
Neural network infrastructure for genomes.

This module provides:
- NetworkBuilder: Convert between JSON architecture and PyTorch models
- Typed dense layer specifications
- Weight export/import as flat value records
- The preset controller architecture
"""
from .builder import Activation, DenseLayer, DenseNetwork, NetworkBuilder
from .architectures import (
    ACTION_COUNT,
    FEATURE_COUNT,
    create_dense_architecture,
    dino_controller_architecture,
)

__all__ = [
    # Builder
    'Activation',
    'DenseLayer',
    'DenseNetwork',
    'NetworkBuilder',

    # Architectures
    'ACTION_COUNT',
    'FEATURE_COUNT',
    'create_dense_architecture',
    'dino_controller_architecture',
]
