"""
Engine configuration.

EvolutionConfig collects the process-wide knobs (population size, elite
count, mutation probability, environment cadences). Values come from
the NEUROEVOLUTION settings dict and can be overridden per run.
"""
from dataclasses import dataclass, fields
from typing import Any, Optional

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured


@dataclass
class EvolutionConfig:
    """Configuration for an evolution run."""

    # Population
    genome_units: int = 12
    selection: int = 4
    crossover_reserve: int = 2

    # Mutation
    mutation_prob: float = 0.25
    perturbation: float = 0.05

    # Environment cadences (seconds)
    sensor_interval: float = 0.04
    state_interval: float = 0.2
    start_press_interval: float = 0.3
    jump_duration: float = 0.2

    # Sensor calibration
    max_speed: float = 6.0
    initial_speed: Optional[float] = None

    # Persistence
    genomes_dir: str = 'genomes'

    # Dotted path to the GameEnvironment implementation
    environment: str = 'apps.dino.game.simulator.SimulatedRunner'

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Raise ImproperlyConfigured if any value is out of range."""
        if self.genome_units <= 0:
            raise ImproperlyConfigured(
                f"genome_units must be positive, got {self.genome_units}"
            )
        if not 0 < self.selection < self.genome_units:
            raise ImproperlyConfigured(
                f"selection must satisfy 0 < selection < genome_units "
                f"({self.genome_units}), got {self.selection}"
            )
        if not 0.0 <= self.mutation_prob <= 1.0:
            raise ImproperlyConfigured(
                f"mutation_prob must be within [0, 1], got {self.mutation_prob}"
            )
        if self.crossover_reserve < 0:
            raise ImproperlyConfigured("crossover_reserve cannot be negative")
        if self.max_speed <= 0:
            raise ImproperlyConfigured("max_speed must be positive")
        for name in ('sensor_interval', 'state_interval',
                     'start_press_interval', 'jump_duration'):
            if getattr(self, name) <= 0:
                raise ImproperlyConfigured(f"{name} must be positive")

    @classmethod
    def from_settings(cls, **overrides: Any) -> 'EvolutionConfig':
        """
        Build a config from settings.NEUROEVOLUTION.

        Args:
            **overrides: Field values that win over settings. None values
                         are ignored so unset CLI options fall through.

        Returns:
            A validated EvolutionConfig.
        """
        raw = getattr(settings, 'NEUROEVOLUTION', {})
        values = {}
        for f in fields(cls):
            key = f.name.upper()
            if key in raw:
                values[f.name] = raw[key]

        for name, value in overrides.items():
            if value is not None:
                values[name] = value

        return cls(**values)
