"""
Test settings for the Dino neuroevolution project.
"""
from .base import *

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

NEUROEVOLUTION = {
    **NEUROEVOLUTION,
    'GENOME_UNITS': 12,
    'SELECTION': 4,
    'MUTATION_PROB': 0.25,
    'SENSOR_INTERVAL': 0.001,
    'STATE_INTERVAL': 0.001,
    'START_PRESS_INTERVAL': 0.001,
    'JUMP_DURATION': 0.001,
    'INITIAL_SPEED': None,
}

LOGGING['loggers']['apps.dino']['level'] = 'WARNING'
