"""
Base settings for the Dino neuroevolution project.

Everything the evolution engine reads at startup lives in the
NEUROEVOLUTION dict. Each key can be overridden from the environment
with a DINO_<KEY> variable.
"""
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent.parent

SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'dino-neuroevolution-insecure-key')

DEBUG = False

ALLOWED_HOSTS = []

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'apps.dino',
]

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': BASE_DIR / 'db.sqlite3',
    }
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

USE_TZ = True
TIME_ZONE = 'UTC'


def _env(name, default, cast=str):
    value = os.environ.get(f'DINO_{name}')
    if value is None or value == '':
        return default
    return cast(value)


def _optional_float(value):
    if value.lower() in ('none', 'null'):
        return None
    return float(value)


NEUROEVOLUTION = {
    # Population
    'GENOME_UNITS': _env('GENOME_UNITS', 12, int),
    'SELECTION': _env('SELECTION', 4, int),
    'CROSSOVER_RESERVE': _env('CROSSOVER_RESERVE', 2, int),

    # Mutation
    'MUTATION_PROB': _env('MUTATION_PROB', 0.25, float),
    'PERTURBATION': _env('PERTURBATION', 0.05, float),

    # Environment cadences (seconds)
    'SENSOR_INTERVAL': _env('SENSOR_INTERVAL', 0.04, float),
    'STATE_INTERVAL': _env('STATE_INTERVAL', 0.2, float),
    'START_PRESS_INTERVAL': _env('START_PRESS_INTERVAL', 0.3, float),
    'JUMP_DURATION': _env('JUMP_DURATION', 0.2, float),

    # Sensor calibration
    'MAX_SPEED': _env('MAX_SPEED', 6.0, float),
    'INITIAL_SPEED': _env('INITIAL_SPEED', None, _optional_float),

    # Persistence
    'GENOMES_DIR': _env('GENOMES_DIR', str(BASE_DIR / 'genomes')),

    # Game environment implementation
    'ENVIRONMENT': _env('ENVIRONMENT', 'apps.dino.game.simulator.SimulatedRunner'),
}

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {
            'format': '{asctime} {levelname} {name}: {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
    'loggers': {
        'apps.dino': {
            'handlers': ['console'],
            'level': os.environ.get('DINO_LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
    },
}
