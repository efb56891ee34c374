"""
Fitness evaluation against a live session.

One genome plays one session end to end: the game is restarted,
every sensor frame is fed through the genome and the arg-max action
is sent to the environment, and the points frozen at game over become
the genome's fitness.
"""
import asyncio
import logging
from typing import Optional

from ..evolution import Genome
from ..game import GameController, SensorFrame, select_action

logger = logging.getLogger(__name__)


class FitnessEvaluator:
    """
    Runs genomes against a controller's session, one at a time.

    Attributes:
        controller: The polled game.
        initial_speed: If set, forced on the environment at every start.

    Example:
        evaluator = FitnessEvaluator(controller)
        fitness = await evaluator.evaluate(genome)
    """

    def __init__(
        self,
        controller: GameController,
        initial_speed: Optional[float] = None,
    ):
        self.controller = controller
        self.initial_speed = initial_speed
        self.current: Optional[Genome] = None
        self.last_outputs: Optional[list] = None
        self._lock = asyncio.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    async def evaluate(self, genome: Genome, label: str = '') -> float:
        """
        Play one session with a genome.

        Waits for any evaluation already in progress on this
        controller; there is no mid-session cancellation.

        Args:
            genome: The genome to score. Its fitness is overwritten.
            label: Identifier used in log messages.

        Returns:
            Points scored in the session.
        """
        async with self._lock:
            label = label or genome.id
            genome.reset_fitness()
            self.current = genome
            logger.info("Executing genome %s", label)
            try:
                points = await self._play(genome)
            finally:
                self.current = None

            genome.fitness = float(points)
            logger.info("Genome %s ended. Fitness: %s", label, points)
            return genome.fitness

    async def _play(self, genome: Genome) -> int:
        controller = self.controller
        session = controller.session

        # Subscribed before the start so no frame of the session is missed
        updates = controller.subscribe()
        try:
            await controller.start_new_game()
            ended = session.expect_end()
            if not session.is_playing:
                # The game ended before we could register for it
                ended.set_result(session.points)

            if self.initial_speed:
                await controller.environment.set_speed(self.initial_speed)

            while True:
                getter = asyncio.ensure_future(updates.get())
                done, _ = await asyncio.wait(
                    {getter, ended},
                    return_when=asyncio.FIRST_COMPLETED,
                )
                if getter in done:
                    await self.handle_frame(genome, getter.result())
                    continue

                getter.cancel()
                await asyncio.gather(getter, return_exceptions=True)
                # Frames of this session still queued behind the end signal
                while not updates.empty():
                    await self.handle_frame(genome, updates.get_nowait())
                return ended.result()
        finally:
            controller.unsubscribe(updates)

    async def handle_frame(self, genome: Genome, frame: SensorFrame) -> None:
        """Run inference on one frame and issue the chosen action."""
        outputs = await asyncio.to_thread(genome.predict, frame.features())
        self.last_outputs = outputs
        await self.controller.issuer.issue(select_action(outputs))
