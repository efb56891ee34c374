"""
The generation loop.

While RUNNING, each iteration seeds the population, evaluates every
genome sequentially, then breeds the next generation. Stopping lets
the in-flight evaluation finish and halts before the next genome.
"""
import asyncio
import logging
from enum import Enum
from typing import Callable, List, Optional

from ..evaluation import FitnessEvaluator
from ..evolution import GenerationStats, GenomeStore, Population
from ..exceptions import CrossoverShapeError

logger = logging.getLogger(__name__)


class LoopState(str, Enum):
    STOPPED = 'STOPPED'
    RUNNING = 'RUNNING'


class GenerationLoop:
    """
    Drives evaluation and reproduction generation after generation.

    Attributes:
        population: The population being evolved.
        evaluator: Plays one genome at a time.
        state: STOPPED or RUNNING.
        genome_index: 1-based index of the genome under evaluation.

    Example:
        loop = GenerationLoop(population, evaluator)
        await loop.run(max_generations=10)
    """

    def __init__(
        self,
        population: Population,
        evaluator: FitnessEvaluator,
        store: Optional[GenomeStore] = None,
        save_every: int = 0,
        retry_delay: float = 1.0,
        progress_callback: Optional[Callable[[GenerationStats], None]] = None,
    ):
        """
        Args:
            population: Population to evolve.
            evaluator: Fitness evaluator bound to a running controller.
            store: Where to save populations.
            save_every: Save every N generations (0 disables).
            retry_delay: Pause after a failed generation.
            progress_callback: Called with each evaluated generation's stats.
        """
        self.population = population
        self.evaluator = evaluator
        self.store = store
        self.save_every = save_every
        self.retry_delay = retry_delay
        self.progress_callback = progress_callback

        self.state = LoopState.STOPPED
        self.genome_index = 0

    @property
    def generation(self) -> int:
        return self.population.generation

    @property
    def running(self) -> bool:
        return self.state is LoopState.RUNNING

    def stop(self) -> None:
        """Halt after the current evaluation."""
        if self.running:
            logger.info("Stopping after the current evaluation")
        self.state = LoopState.STOPPED

    async def run(self, max_generations: Optional[int] = None) -> List[GenerationStats]:
        """
        Run generations until stopped.

        Args:
            max_generations: Stop after this many completed generations
                             (None runs until stop()).

        Returns:
            Evaluation statistics of every completed generation.

        Raises:
            CrossoverShapeError: Reproduction hit incompatible parents.
        """
        self.state = LoopState.RUNNING
        history = []

        while self.running:
            if max_generations is not None and len(history) >= max_generations:
                break

            try:
                stats = await self.run_generation()
            except CrossoverShapeError as e:
                logger.critical("Error, evolution paused. %s", e)
                self.state = LoopState.STOPPED
                raise
            except Exception:
                logger.exception("Generation %d failed", self.generation + 1)
                await asyncio.sleep(self.retry_delay)
                continue

            if stats is not None:
                history.append(stats)

        self.state = LoopState.STOPPED
        return history

    async def run_generation(self) -> Optional[GenerationStats]:
        """
        Evaluate the whole population and breed the next generation.

        Returns:
            Evaluation statistics, or None if stopped part way.
        """
        population = self.population
        population.seed()

        logger.info("Executing generation %d", self.generation + 1)

        for index, genome in enumerate(list(population.individuals), start=1):
            if not self.running:
                return None
            self.genome_index = index
            try:
                await self.evaluator.evaluate(genome, label=str(index))
            except Exception:
                logger.exception("Genome %d failed", index)

        stats = population.record_evaluation()

        completed = self.generation + 1
        if self.store and self.save_every and completed % self.save_every == 0:
            # Evaluated genomes, before breeding
            self.store.save(population.individuals, completed)

        population.evolve_generation()
        if self.progress_callback:
            self.progress_callback(stats)
        logger.info("Completed generation %d", self.generation)

        return stats
