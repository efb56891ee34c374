"""
Development settings for the Dino neuroevolution project.
"""
import os

from .base import *

DEBUG = True

LOGGING['loggers']['apps.dino']['level'] = os.environ.get('DINO_LOG_LEVEL', 'DEBUG')
