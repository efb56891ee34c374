"""Dino neuroevolution app configuration."""
from django.apps import AppConfig


class DinoConfig(AppConfig):
    """Configuration for the neuroevolution app."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.dino'
    verbose_name = 'Dino Neuroevolution'
