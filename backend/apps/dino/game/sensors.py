"""
Sensor normalization.

Raw runner measurements (dino geometry, obstacle list, speed) are
turned into a SensorFrame: a bounded feature vector plus the
bookkeeping the scoring rule needs.
"""
import logging
from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Obstacle:
    x: float
    y: float
    width: float
    height: float = 0.0


@dataclass(frozen=True)
class Observation:
    """One raw poll of the environment."""
    dino_x: float
    dino_y: float
    dino_width: float
    dino_height: float
    speed: float
    crashed: bool = False
    obstacles: Tuple[Obstacle, ...] = field(default_factory=tuple)
    game_width: float = 600.0


@dataclass
class SensorFrame:
    """
    Normalized sensor state.

    `last_value` holds the previous frame's distance. Snapshots handed
    to listeners keep the value from before the update so the
    obstacle-passed transition can be detected on them.
    """
    distance: float = 1.0
    obstacle_width: float = 0.0
    obstacle_height: float = 0.0
    speed: float = 0.0
    dino_height: float = 0.0
    is_bird: bool = False
    last_value: float = 1.0

    def features(self) -> List[float]:
        """Network input vector."""
        return [self.distance, self.obstacle_width, self.obstacle_height, self.speed]

    @property
    def passed_obstacle(self) -> bool:
        """True on the frame the tracked obstacle moves from near to clear."""
        return self.distance > 0.5 and self.last_value < 0.3

    def snapshot(self) -> 'SensorFrame':
        return replace(self)


class SensorNormalizer:
    """
    Converts raw observations into a SensorFrame.

    Attributes:
        frame: The live frame, updated on every accepted observation.
        ground_level: Dino y + dino height, captured at calibration.
        max_speed: Fixed speed calibration constant.
    """

    MARGIN_FACTOR = 0.3
    DISTANCE_RANGE = 0.7
    WIDTH_FACTOR = 1.2
    AIRBORNE_THRESHOLD = 0.2
    ENTRY_THRESHOLD = 0.98

    def __init__(self, max_speed: float = 6.0, ground_level: Optional[float] = None):
        self.max_speed = max_speed
        self.ground_level = ground_level
        self.frame = SensorFrame()
        self._crash_latched = False

    def calibrate(self, observation: Observation) -> float:
        """Capture the ground level from the dino's resting position."""
        self.ground_level = observation.dino_y + observation.dino_height
        logger.info("groundLevel is %s", self.ground_level)
        return self.ground_level

    def reset(self) -> None:
        """Restore the initial frame (new session)."""
        self.frame = SensorFrame()
        self._crash_latched = False

    def nearest_obstacle(
        self,
        observation: Observation,
    ) -> Tuple[Optional[Obstacle], float]:
        """
        Closest obstacle strictly ahead of the dino.

        Returns:
            (obstacle, gap) or (None, 0.0) if nothing qualifies.
        """
        origin = observation.dino_x + observation.dino_width * self.MARGIN_FACTOR
        nearest = None
        nearest_gap = 0.0
        for obstacle in observation.obstacles:
            gap = obstacle.x - origin
            if gap > 0 and (nearest is None or gap < nearest_gap):
                nearest = obstacle
                nearest_gap = gap
        return nearest, nearest_gap

    def update(self, observation: Observation) -> Optional[SensorFrame]:
        """
        Fold one observation into the frame.

        Returns:
            A snapshot whose last_value is the previous distance, or
            None for a crash frame (nothing else is recomputed).
        """
        frame = self.frame

        if observation.crashed:
            if not self._crash_latched:
                frame.distance = 0.0
                self._crash_latched = True
            return None

        if self.ground_level is None:
            self.calibrate(observation)

        previous = frame.last_value
        speed = max(0.0, observation.speed) / self.max_speed
        obstacle, gap = self.nearest_obstacle(observation)

        if obstacle is None:
            frame.distance = 1.0
            frame.obstacle_width = 0.0
            frame.obstacle_height = 0.0
            frame.speed = speed
            frame.dino_height = 0.0
            frame.is_bird = False
        else:
            max_distance = observation.game_width * self.DISTANCE_RANGE
            frame.distance = min(max(gap, 0.0), max_distance) / max_distance

            max_width = observation.dino_width * self.WIDTH_FACTOR
            frame.obstacle_width = min(1.0, max(0.0, obstacle.width / max_width))
            frame.obstacle_height = (
                self.ground_level - (obstacle.y + obstacle.height)
            ) / observation.dino_height
            frame.speed = speed
            frame.dino_height = max(0.0, (
                self.ground_level - observation.dino_y - observation.dino_height
            ) / observation.dino_height)

            # A new obstacle has just entered tracking range
            if previous > self.ENTRY_THRESHOLD and frame.distance < self.ENTRY_THRESHOLD:
                frame.is_bird = frame.obstacle_height > self.AIRBORNE_THRESHOLD

        snapshot = frame.snapshot()
        frame.last_value = frame.distance
        return snapshot
