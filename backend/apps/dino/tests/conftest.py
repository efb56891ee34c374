"""
Pytest fixtures for the neuroevolution app tests.

Provides fixtures for:
- Network architectures
- Genomes with known weights
- Evolution configurations
- Scripted game environments and controllers
"""
from typing import Any, Dict

import pytest
import torch

from apps.dino.conf import EvolutionConfig
from apps.dino.evolution import Genome
from apps.dino.game import GameController
from apps.dino.networks import NetworkBuilder, dino_controller_architecture

from .fakes import ScriptedEnvironment


@pytest.fixture
def controller_architecture() -> Dict[str, Any]:
    """The default 4 -> 4 (relu) -> 3 (softmax) topology."""
    return dino_controller_architecture()


@pytest.fixture
def wide_architecture() -> Dict[str, Any]:
    """Same inputs/outputs as the controller, wider hidden layer."""
    return dino_controller_architecture(hidden_size=8)


@pytest.fixture
def builder():
    return NetworkBuilder()


def filled_genome(value: float, architecture=None) -> Genome:
    """A genome whose every weight equals `value`."""
    genome = Genome.build(architecture)
    with torch.no_grad():
        for param in genome.network.parameters():
            param.fill_(value)
    return genome


@pytest.fixture
def small_config() -> EvolutionConfig:
    """A small population for fast loop tests."""
    return EvolutionConfig(
        genome_units=4,
        selection=2,
        mutation_prob=0.25,
        sensor_interval=0.001,
        state_interval=0.001,
        start_press_interval=0.001,
        jump_duration=0.001,
    )


@pytest.fixture
def scripted_environment() -> ScriptedEnvironment:
    return ScriptedEnvironment()


@pytest.fixture
def fast_controller(scripted_environment) -> GameController:
    """Controller with millisecond cadences over the scripted environment."""
    return GameController(
        scripted_environment,
        sensor_interval=0.001,
        state_interval=0.001,
        start_press_interval=0.001,
        jump_duration=0.001,
    )
