"""
Live game plumbing.

This module provides:
- Action enum, arg-max action selection and the command issuer
- Observation/SensorFrame types and the sensor normalizer
- The PLAYING/OVER session state machine
- The GameEnvironment interface and a headless simulator
- GameController: sensor and state pollers over one environment
"""
from .actions import ACTION_ORDER, Action, ActionIssuer, parse_action, select_action
from .sensors import Obstacle, Observation, SensorFrame, SensorNormalizer
from .session import GameSession, GameState
from .environment import GameEnvironment, load_environment
from .controller import GameController
from .simulator import SimulatedRunner

__all__ = [
    # Actions
    'ACTION_ORDER',
    'Action',
    'ActionIssuer',
    'parse_action',
    'select_action',

    # Sensors
    'Obstacle',
    'Observation',
    'SensorFrame',
    'SensorNormalizer',

    # Session
    'GameSession',
    'GameState',

    # Environments
    'GameEnvironment',
    'load_environment',
    'SimulatedRunner',

    # Controller
    'GameController',
]
