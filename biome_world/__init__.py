# biome_world/__init__.py

# This file makes the 'biome_world' directory a Python package.
# We can also use it to define the public API of the package.

from .biomes import BiomeClassifier, BiomePrototype, ClassificationResult, ClassificationWeights
from .exceptions import BiomeWorldError, ConfigurationError, InvalidModeError
from .generator import AxesVector, FieldGenerator
from .regions import RegionCache
from .search import NearestBiomeSearch, NotFound, SearchResult
from .seeds import derive_seed
from .world import World

__all__ = [
    "World",
    "FieldGenerator",
    "AxesVector",
    "BiomeClassifier",
    "BiomePrototype",
    "ClassificationResult",
    "ClassificationWeights",
    "RegionCache",
    "NearestBiomeSearch",
    "SearchResult",
    "NotFound",
    "derive_seed",
    "BiomeWorldError",
    "ConfigurationError",
    "InvalidModeError",
]
