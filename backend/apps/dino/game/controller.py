"""
Game controller.

Bridges one live environment to the engine. Two independent pollers
run against the environment:
- a sensor poll (~40 ms) that normalizes observations, applies the
  scoring rule and fans frames out to subscribers in arrival order;
- a state poll (~200 ms) that drives the PLAYING/OVER state machine.

The controller also owns the action issuer and the session-restart
protocol.
"""
import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

from ..exceptions import EnvironmentUnavailable
from .actions import Action, ActionIssuer
from .environment import GameEnvironment
from .sensors import SensorFrame, SensorNormalizer
from .session import GameSession, GameState

logger = logging.getLogger(__name__)


class GameController:
    """
    Polls an environment and exposes its session to evaluators.

    Attributes:
        environment: The game being played.
        normalizer: Raw observation -> SensorFrame.
        session: PLAYING/OVER state machine.
        issuer: Action command issuer.

    Example:
        controller = GameController(environment)
        await controller.calibrate()
        controller.start()
        ...
        await controller.stop()
    """

    def __init__(
        self,
        environment: GameEnvironment,
        max_speed: float = 6.0,
        sensor_interval: float = 0.04,
        state_interval: float = 0.2,
        start_press_interval: float = 0.3,
        jump_duration: float = 0.2,
    ):
        self.environment = environment
        self.normalizer = SensorNormalizer(max_speed=max_speed)
        self.session = GameSession(self.normalizer)
        self.issuer = ActionIssuer(environment, jump_duration=jump_duration)

        self.sensor_interval = sensor_interval
        self.state_interval = state_interval
        self.start_press_interval = start_press_interval

        self._subscribers: List[asyncio.Queue] = []
        self._tasks: List[asyncio.Task] = []

    @classmethod
    def from_config(cls, environment: GameEnvironment, config) -> 'GameController':
        return cls(
            environment,
            max_speed=config.max_speed,
            sensor_interval=config.sensor_interval,
            state_interval=config.state_interval,
            start_press_interval=config.start_press_interval,
            jump_duration=config.jump_duration,
        )

    @property
    def frame(self) -> SensorFrame:
        return self.normalizer.frame

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    async def calibrate(self) -> Optional[float]:
        """Capture the ground level from one observation."""
        try:
            observation = await self.environment.observe()
        except EnvironmentUnavailable as e:
            logger.warning("Could not read dino info: %s", e)
            return None
        return self.normalizer.calibrate(observation)

    def subscribe(self) -> asyncio.Queue:
        """Queue receiving every processed sensor frame, in order."""
        queue: asyncio.Queue = asyncio.Queue()
        self._subscribers.append(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        if queue in self._subscribers:
            self._subscribers.remove(queue)

    async def read_sensors(self) -> Optional[SensorFrame]:
        """
        One sensor poll.

        Returns:
            The processed frame, or None if the poll was skipped.
        """
        if not self.session.is_playing:
            return None

        try:
            observation = await self.environment.observe()
        except EnvironmentUnavailable as e:
            logger.warning("Runner instance not found: %s", e)
            return None

        frame = self.normalizer.update(observation)
        if frame is None:
            return None

        self.session.score(frame)
        for queue in list(self._subscribers):
            queue.put_nowait(frame)
        return frame

    async def read_game_state(self) -> Optional[GameState]:
        """
        One state poll.

        Returns:
            The new state if a transition happened.
        """
        try:
            crashed = await self.environment.is_crashed()
        except EnvironmentUnavailable as e:
            logger.warning("Runner instance not found: %s", e)
            return None

        transition = self.session.observe(crashed)
        if transition is GameState.PLAYING:
            self._discard_pending()
        if transition is not None:
            # Release every control on a session boundary
            self.issuer.reset()
            await self.issuer.issue(Action.NORM)
        return transition

    def _discard_pending(self) -> None:
        """Drop frames still queued from an earlier session."""
        for queue in self._subscribers:
            while not queue.empty():
                queue.get_nowait()

    async def start_new_game(self) -> None:
        """
        Restart the game and wait until it is PLAYING.

        If a game is still running, waits for it to end first. The
        start control is pressed on a fixed interval until the state
        machine confirms, since a single press can be dropped.
        """
        await self.read_game_state()

        if self.session.is_playing:
            logger.info("Waiting for the running game to end")
            await self.session.expect_end()

        started = self.session.expect_start()
        presser = asyncio.ensure_future(self._press_start_until(started))
        try:
            await self.read_game_state()
            await started
        finally:
            presser.cancel()
            await asyncio.gather(presser, return_exceptions=True)

    async def _press_start_until(self, started: asyncio.Future) -> None:
        while not started.done():
            try:
                await self.environment.press_start()
            except EnvironmentUnavailable as e:
                logger.warning("Could not press start: %s", e)
            await asyncio.sleep(self.start_press_interval)

    def start(self) -> None:
        """Launch both pollers as background tasks."""
        if self.running:
            return
        self._tasks = [
            asyncio.ensure_future(self._poll(self.read_sensors, self.sensor_interval)),
            asyncio.ensure_future(self._poll(self.read_game_state, self.state_interval)),
        ]

    async def stop(self) -> None:
        """Cancel the pollers and any pending jump release."""
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        await self.issuer.close()

    async def _poll(
        self,
        reader: Callable[[], Awaitable[object]],
        interval: float,
    ) -> None:
        while True:
            try:
                await reader()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Error in %s", reader.__name__)
            await asyncio.sleep(interval)
