"""
Management command to evolve runner controllers.

Usage:
    python manage.py evolve [--genome-units 12] [--selection 4]
                            [--mutation-prob 0.25] [--generations 50]
                            [--load genomes/gen_3_....json] [--replace]

Plays every genome of the population against the configured game
environment, one session at a time, and breeds a new generation after
each full pass.
"""
import asyncio
import random

import torch
from django.core.exceptions import ImproperlyConfigured
from django.core.management.base import BaseCommand, CommandError

from apps.dino.conf import EvolutionConfig
from apps.dino.evaluation import FitnessEvaluator
from apps.dino.evolution import GenomeStore, Population
from apps.dino.exceptions import CrossoverShapeError, GenomeLoadError
from apps.dino.game import GameController, load_environment
from apps.dino.training import GenerationLoop


class Command(BaseCommand):
    help = 'Evolve neural controllers for the runner game'

    def add_arguments(self, parser):
        parser.add_argument(
            '--genome-units',
            type=int,
            help='Population size (default: settings)',
        )
        parser.add_argument(
            '--selection',
            type=int,
            help='Number of elite genomes kept each generation (default: settings)',
        )
        parser.add_argument(
            '--mutation-prob',
            type=float,
            help='Per-weight mutation probability (default: settings)',
        )
        parser.add_argument(
            '--generations',
            type=int,
            default=None,
            help='Stop after this many generations (default: run until interrupted)',
        )
        parser.add_argument(
            '--load',
            type=str,
            help='JSON file of saved genomes to seed the population with',
        )
        parser.add_argument(
            '--replace',
            action='store_true',
            help='Drop the current population before loading',
        )
        parser.add_argument(
            '--save-every',
            type=int,
            default=0,
            help='Save the population every N generations (default: never)',
        )
        parser.add_argument(
            '--seed',
            type=int,
            help='Seed for genome initialisation and genetic operators',
        )
        parser.add_argument(
            '--initial-speed',
            type=float,
            help='Game speed forced at the start of every session',
        )
        parser.add_argument(
            '--environment',
            type=str,
            help='Dotted path of the GameEnvironment class (default: settings)',
        )

    def handle(self, *args, **options):
        try:
            config = EvolutionConfig.from_settings(
                genome_units=options['genome_units'],
                selection=options['selection'],
                mutation_prob=options['mutation_prob'],
                initial_speed=options['initial_speed'],
                environment=options['environment'],
            )
        except ImproperlyConfigured as e:
            raise CommandError(str(e))

        seed = options['seed']
        rng = random.Random(seed)
        if seed is not None:
            torch.manual_seed(seed)

        population = Population(config, rng=rng)
        store = GenomeStore(config.genomes_dir)

        if options['load']:
            try:
                genomes = store.load(options['load'])
            except (OSError, ValueError, GenomeLoadError) as e:
                raise CommandError(f"Could not load genomes: {e}")
            population.load(genomes, replace=options['replace'])
            self.stdout.write(f"Loaded {len(genomes)} genomes from {options['load']}")

        self.stdout.write(
            f"Evolving {config.genome_units} genomes "
            f"(selection={config.selection}, mutation_prob={config.mutation_prob})"
        )

        try:
            asyncio.run(self._run(config, population, store, options))
        except KeyboardInterrupt:
            self.stdout.write(self.style.WARNING("Interrupted"))
        except CrossoverShapeError as e:
            raise CommandError(f"Evolution halted: {e}")
        finally:
            if options['save_every']:
                path = store.save(population.individuals, population.generation)
                self.stdout.write(f"Saved population to {path}")

    async def _run(self, config, population, store, options):
        environment = load_environment(config.environment)
        controller = GameController.from_config(environment, config)
        evaluator = FitnessEvaluator(controller, initial_speed=config.initial_speed)
        loop = GenerationLoop(
            population,
            evaluator,
            store=store,
            save_every=options['save_every'],
            progress_callback=self._report,
        )

        await controller.calibrate()
        controller.start()
        try:
            await loop.run(max_generations=options['generations'])
        finally:
            loop.stop()
            await controller.stop()
            await environment.close()

        self.stdout.write(self.style.SUCCESS(
            f"\nEvolution finished after {population.generation} generations"
            f"\n  Best fitness seen: "
            f"{max((s.best_fitness for s in population.stats_history), default=0.0)}"
        ))

    def _report(self, stats):
        self.stdout.write(
            f"Generation {stats.generation + 1}: "
            f"best={stats.best_fitness:.1f} "
            f"avg={stats.avg_fitness:.2f} "
            f"min={stats.min_fitness:.1f}"
        )
