"""Shared fixtures for the biome world tests."""
import logging

import pytest

from biome_world.biomes import BiomeClassifier
from biome_world.generator import FieldGenerator


@pytest.fixture
def logger():
    """A quiet logger shared by every component under test."""
    return logging.getLogger("biome_world.tests")


@pytest.fixture
def generator(logger):
    return FieldGenerator({'seed': 1337}, logger)


@pytest.fixture
def classifier(logger):
    return BiomeClassifier(logger)
