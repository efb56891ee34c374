"""
Game session state machine.

Tracks PLAYING/OVER for one environment instance. Session boundaries
are published through one-shot futures: a waiter asks for the next
start or end, and the future is resolved exactly once on that
transition and then dropped.
"""
import asyncio
import logging
from enum import Enum
from typing import Optional

from .sensors import SensorFrame, SensorNormalizer

logger = logging.getLogger(__name__)


class GameState(str, Enum):
    OVER = 'OVER'
    PLAYING = 'PLAYING'


class GameSession:
    """
    PLAYING/OVER tracking, points and session-boundary signals.

    Attributes:
        state: Current state; OVER until the environment reports a
               running game.
        points: Obstacles passed since the session started.
    """

    def __init__(self, normalizer: SensorNormalizer):
        self.normalizer = normalizer
        self.state = GameState.OVER
        self.points = 0
        self._started: Optional[asyncio.Future] = None
        self._ended: Optional[asyncio.Future] = None

    @property
    def is_playing(self) -> bool:
        return self.state is GameState.PLAYING

    def expect_start(self) -> asyncio.Future:
        """Future resolved (with None) on the next OVER -> PLAYING transition."""
        if self._started is None or self._started.done():
            self._started = asyncio.get_running_loop().create_future()
        return self._started

    def expect_end(self) -> asyncio.Future:
        """Future resolved with final points on the next PLAYING -> OVER transition."""
        if self._ended is None or self._ended.done():
            self._ended = asyncio.get_running_loop().create_future()
        return self._ended

    def observe(self, crashed: bool) -> Optional[GameState]:
        """
        Apply one crashed/not-crashed poll.

        Returns:
            The new state if a transition happened, else None.
        """
        if crashed and self.state is GameState.PLAYING:
            self.state = GameState.OVER
            logger.debug("Session over with %d points", self.points)
            self._ended = self._fire(self._ended, self.points)
            return GameState.OVER

        if not crashed and self.state is GameState.OVER:
            self.state = GameState.PLAYING
            self.points = 0
            self.normalizer.reset()
            logger.debug("Session started")
            self._started = self._fire(self._started, None)
            return GameState.PLAYING

        return None

    def score(self, frame: SensorFrame) -> bool:
        """
        Apply the obstacle-passed rule to one sensor frame.

        Returns:
            True if a point was added.
        """
        if self.state is GameState.PLAYING and frame.passed_obstacle:
            self.points += 1
            return True
        return False

    @staticmethod
    def _fire(future: Optional[asyncio.Future], value) -> None:
        if future is not None and not future.done():
            future.set_result(value)
        return None
