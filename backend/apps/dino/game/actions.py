"""
Discrete controller actions and the command issuer.

JUMP is edge-triggered: it is ignored inside a refractory window after
the previous jump, and released automatically once the window closes.
DOWN and NORM are level-triggered and only sent when they differ from
the last issued action.
"""
import asyncio
import logging
import time
from enum import Enum
from typing import TYPE_CHECKING, Callable, Optional, Sequence, Set, Union

if TYPE_CHECKING:
    from .environment import GameEnvironment

logger = logging.getLogger(__name__)


class Action(str, Enum):
    DOWN = 'DOWN'
    NORM = 'NORM'
    JUMP = 'JUMP'


# Output index -> action
ACTION_ORDER = (Action.DOWN, Action.NORM, Action.JUMP)


def select_action(outputs: Sequence[float]) -> Action:
    """
    Arg-max over the three output logits.

    Ties resolve to the lowest index.

    Raises:
        ValueError: If outputs does not hold exactly three values.
    """
    if len(outputs) != len(ACTION_ORDER):
        raise ValueError(
            f"Expected {len(ACTION_ORDER)} outputs, got {len(outputs)}"
        )
    best = max(range(len(outputs)), key=lambda i: (outputs[i], -i))
    return ACTION_ORDER[best]


def parse_action(action: Union[Action, str]) -> Action:
    """
    Coerce an action name.

    Raises:
        TypeError: If action is not a string.
        ValueError: If action is not a known name.
    """
    if isinstance(action, Action):
        return action
    if not isinstance(action, str):
        raise TypeError("Invalid action: must be a string.")
    try:
        return Action(action)
    except ValueError:
        raise ValueError(f"Invalid action: {action!r}")


class ActionIssuer:
    """
    Send actions to the environment without redundant control signals.

    Attributes:
        last_issued: The last action requested (None after reset).
    """

    def __init__(
        self,
        environment: 'GameEnvironment',
        jump_duration: float = 0.2,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.environment = environment
        self.jump_duration = jump_duration
        self.clock = clock
        self.last_issued: Optional[Action] = None
        self._last_jump_at = float('-inf')
        self._release_tasks: Set[asyncio.Task] = set()

    def reset(self) -> None:
        """Forget the last issued action so the next one is always sent."""
        self.last_issued = None

    async def issue(self, action: Union[Action, str]) -> bool:
        """
        Request an action.

        Returns:
            True if a command reached the environment.
        """
        action = parse_action(action)
        sent = False

        if action is Action.JUMP:
            now = self.clock()
            if now - self._last_jump_at > self.jump_duration:
                self._last_jump_at = now
                await self.environment.apply_action(Action.JUMP)
                self._schedule_release()
                sent = True
        elif action != self.last_issued:
            await self.environment.apply_action(action)
            sent = True

        self.last_issued = action
        return sent

    def _schedule_release(self) -> None:
        task = asyncio.ensure_future(self._release_after(self.jump_duration))
        self._release_tasks.add(task)
        task.add_done_callback(self._release_tasks.discard)

    async def _release_after(self, delay: float) -> None:
        await asyncio.sleep(delay)
        try:
            await self.environment.release_jump()
        except Exception:
            logger.exception("Failed to release jump")

    async def close(self) -> None:
        """Cancel pending jump releases."""
        for task in list(self._release_tasks):
            task.cancel()
        if self._release_tasks:
            await asyncio.gather(*self._release_tasks, return_exceptions=True)
