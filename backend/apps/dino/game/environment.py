"""
Game environment interface.

An environment is the live game the controller polls and drives: a
browser page, a headless simulator, or a scripted fake in tests.
Concrete drivers are plugged in by dotted path (settings
NEUROEVOLUTION['ENVIRONMENT']).
"""
from abc import ABC, abstractmethod
from typing import Any, Type

from django.utils.module_loading import import_string

from .actions import Action
from .sensors import Observation


class GameEnvironment(ABC):
    """
    Abstract base class for game environments.

    All methods are coroutines. Implementations raise
    EnvironmentUnavailable when the game object cannot be reached.

    Example:
        class MyEnvironment(GameEnvironment):
            async def observe(self):
                ...
    """

    @abstractmethod
    async def observe(self) -> Observation:
        """Read dino geometry, obstacles, speed and the crashed flag."""

    @abstractmethod
    async def is_crashed(self) -> bool:
        """Read only the crashed flag (state-machine poll)."""

    @abstractmethod
    async def press_start(self) -> None:
        """Send the session-restart control once."""

    @abstractmethod
    async def apply_action(self, action: Action) -> None:
        """
        Set the control level.

        DOWN holds duck, NORM releases everything, JUMP holds jump.
        """

    @abstractmethod
    async def release_jump(self) -> None:
        """Release a held jump."""

    async def set_speed(self, speed: float) -> None:
        """Force the current game speed. Optional."""
        return None

    async def close(self) -> None:
        """Release driver resources. Optional."""
        return None


def load_environment(path: str, **kwargs: Any) -> GameEnvironment:
    """
    Instantiate an environment class from its dotted path.

    Raises:
        ImportError: If the path cannot be imported.
        TypeError: If the class is not a GameEnvironment.
    """
    environment_class: Type[GameEnvironment] = import_string(path)
    if not (isinstance(environment_class, type)
            and issubclass(environment_class, GameEnvironment)):
        raise TypeError(f"{path} is not a GameEnvironment subclass")
    return environment_class(**kwargs)
