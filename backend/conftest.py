"""
Pytest configuration and shared fixtures for the Dino project.

This module provides fixtures for:
- Per-test genome directories
- Settings overrides for the evolution engine
"""
import pytest


@pytest.fixture
def genomes_dir(tmp_path):
    """Return an empty directory for saved populations."""
    directory = tmp_path / 'genomes'
    directory.mkdir()
    return directory


@pytest.fixture
def neuroevolution_settings(settings, genomes_dir):
    """Point the engine settings at a temporary genome directory."""
    settings.NEUROEVOLUTION = {
        **settings.NEUROEVOLUTION,
        'GENOMES_DIR': str(genomes_dir),
    }
    return settings.NEUROEVOLUTION
