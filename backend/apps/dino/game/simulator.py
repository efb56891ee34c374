"""
Headless runner simulator.

A small, seedable re-creation of the T-rex runner: cacti and birds
scroll towards the dino at a slowly increasing speed, the dino can
jump or duck, and an axis-aligned overlap ends the session. The world
advances one tick per observe() call, so a run is reproducible for a
given seed regardless of wall-clock timing.

Coordinates follow the canvas convention: y grows downwards.
"""
import logging
import random
from dataclasses import dataclass
from typing import List, Optional

from .actions import Action
from .environment import GameEnvironment
from .sensors import Obstacle, Observation

logger = logging.getLogger(__name__)


@dataclass
class _Body:
    x: float
    y: float
    width: float
    height: float

    def overlaps(self, other: '_Body', inset: float = 2.0) -> bool:
        return (
            self.x + inset < other.x + other.width - inset
            and other.x + inset < self.x + self.width - inset
            and self.y + inset < other.y + other.height - inset
            and other.y + inset < self.y + self.height - inset
        )


class SimulatedRunner(GameEnvironment):
    """
    Deterministic runner game.

    Attributes:
        crashed: True before the first start and after a collision.
        ticks: Ticks since the session started.
    """

    GAME_WIDTH = 600.0
    GROUND = 140.0

    DINO_X = 50.0
    DINO_WIDTH = 44.0
    DINO_HEIGHT = 47.0
    DUCK_WIDTH = 59.0
    DUCK_HEIGHT = 25.0

    JUMP_VELOCITY = -10.0
    GRAVITY = 0.6

    START_SPEED = 6.0
    ACCELERATION = 0.001
    MAX_SPEED = 13.0
    BIRD_MIN_SPEED = 8.5

    MIN_GAP = 120.0
    GAP_COEFFICIENT = 0.6

    CACTI = ((17.0, 35.0), (25.0, 50.0), (51.0, 35.0))
    BIRD_SIZE = (46.0, 40.0)
    BIRD_BOTTOMS = (140.0, 115.0, 90.0)

    def __init__(self, seed: Optional[int] = None, max_ticks: Optional[int] = 20000):
        """
        Args:
            seed: Seed for obstacle generation.
            max_ticks: Ends a session after this many ticks (None for no limit).
        """
        self.rng = random.Random(seed)
        self.max_ticks = max_ticks
        self.crashed = True
        self.ticks = 0
        self.speed = self.START_SPEED
        self.obstacles: List[_Body] = []
        self.dino_y = self.GROUND - self.DINO_HEIGHT
        self.velocity = 0.0
        self.jumping = False
        self.ducking = False
        self._next_gap = 0.0

    def _reset_world(self) -> None:
        self.ticks = 0
        self.speed = self.START_SPEED
        self.obstacles = []
        self.dino_y = self.GROUND - self.DINO_HEIGHT
        self.velocity = 0.0
        self.jumping = False
        self.ducking = False
        self._next_gap = self.GAME_WIDTH * 0.5

    @property
    def on_ground(self) -> bool:
        return not self.jumping

    def _dino_body(self) -> _Body:
        if self.ducking and self.on_ground:
            return _Body(
                self.DINO_X, self.GROUND - self.DUCK_HEIGHT,
                self.DUCK_WIDTH, self.DUCK_HEIGHT,
            )
        return _Body(self.DINO_X, self.dino_y, self.DINO_WIDTH, self.DINO_HEIGHT)

    def _spawn(self) -> None:
        if self.speed >= self.BIRD_MIN_SPEED and self.rng.random() < 0.25:
            width, height = self.BIRD_SIZE
            bottom = self.rng.choice(self.BIRD_BOTTOMS)
        else:
            width, height = self.rng.choice(self.CACTI)
            bottom = self.GROUND
        self.obstacles.append(_Body(self.GAME_WIDTH, bottom - height, width, height))

        gap = width * self.speed + self.MIN_GAP * self.GAP_COEFFICIENT
        self._next_gap = self.rng.uniform(gap, gap * 1.5)

    def step(self) -> None:
        """Advance the world by one tick."""
        self.ticks += 1
        self.speed = min(self.MAX_SPEED, self.speed + self.ACCELERATION)

        if self.jumping:
            self.dino_y += self.velocity
            self.velocity += self.GRAVITY
            if self.dino_y >= self.GROUND - self.DINO_HEIGHT:
                self.dino_y = self.GROUND - self.DINO_HEIGHT
                self.velocity = 0.0
                self.jumping = False

        for body in self.obstacles:
            body.x -= self.speed
        self.obstacles = [b for b in self.obstacles if b.x + b.width > 0]

        last = self.obstacles[-1] if self.obstacles else None
        if last is None or self.GAME_WIDTH - (last.x + last.width) >= self._next_gap:
            self._spawn()

        dino = self._dino_body()
        if any(dino.overlaps(body) for body in self.obstacles):
            logger.debug("Simulated crash at tick %d", self.ticks)
            self.crashed = True
        elif self.max_ticks is not None and self.ticks >= self.max_ticks:
            logger.info("Session reached the %d tick limit", self.max_ticks)
            self.crashed = True

    async def observe(self) -> Observation:
        if not self.crashed:
            self.step()
        dino = self._dino_body()
        return Observation(
            dino_x=dino.x,
            dino_y=dino.y,
            dino_width=dino.width,
            dino_height=dino.height,
            speed=self.speed,
            crashed=self.crashed,
            obstacles=tuple(
                Obstacle(x=b.x, y=b.y, width=b.width, height=b.height)
                for b in self.obstacles
            ),
            game_width=self.GAME_WIDTH,
        )

    async def is_crashed(self) -> bool:
        return self.crashed

    async def press_start(self) -> None:
        if self.crashed:
            self._reset_world()
            self.crashed = False

    async def apply_action(self, action: Action) -> None:
        if action is Action.JUMP:
            self.ducking = False
            if self.on_ground:
                self.jumping = True
                self.velocity = self.JUMP_VELOCITY
        elif action is Action.DOWN:
            self.ducking = True
        else:
            self.ducking = False

    async def release_jump(self) -> None:
        # Jumps are ballistic once started
        return None

    async def set_speed(self, speed: float) -> None:
        self.speed = min(self.MAX_SPEED, max(0.0, speed))
