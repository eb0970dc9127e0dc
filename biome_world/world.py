# biome_world/world.py

"""
================================================================================
WORLD FACADE
================================================================================
This module provides the user-facing `World` class, which is the primary
interface for interacting with an infinite biome world. It composes the
field generator, the biome classifier, the region cache and the nearest-biome
search into a single, easy-to-use object.

Renderers, consoles and other front-ends are expected to talk to this class
only; none of them are part of this package.
================================================================================
"""
import logging

import numpy as np

from . import config as DEFAULTS
from .biomes import BiomeClassifier, ClassificationResult
from .generator import AxesVector, FieldGenerator
from .regions import RegionCache
from .search import NearestBiomeSearch


class World:
    """
    The main runtime class for a generated world. Handles sampling,
    classification, region rasters and biome search.
    """
    def __init__(self, config: dict = None, logger: logging.Logger = None):
        """
        Initializes the World from a configuration dictionary.

        Args:
            config (dict): User-defined parameters to override defaults. Besides
                the FieldGenerator keys, accepts 'classify_weights',
                'region_size', 'view_mode' and 'prototypes_path'.
            logger (logging.Logger): The logger instance for all output.
        """
        self.config = config or {}
        self.logger = logger or logging.getLogger(__name__)
        self.logger.info("Initializing world...")

        # --- 1. Initialize Core Components (Composition) ---
        self.generator = FieldGenerator(self.config, self.logger)
        self.classifier = BiomeClassifier(self.logger, weights=self.config.get('classify_weights'))
        self.regions = RegionCache(
            self.generator, self.classifier, self.logger,
            region_size=self.config.get('region_size', DEFAULTS.REGION_SIZE_TILES),
            mode=self.config.get('view_mode', DEFAULTS.DEFAULT_VIEW_MODE),
        )
        self.search = NearestBiomeSearch(self.classify_id_at, self.logger, region_size=self.regions.region_size)

        # --- 2. Optional External Prototype Table ---
        prototypes_path = self.config.get('prototypes_path')
        if prototypes_path:
            self.load_prototypes(prototypes_path)

        self.logger.info(f"World with seed {self.generator.seed} ready.")

    # --- Queries ---
    def sample_axes(self, tx: int, ty: int) -> AxesVector:
        return self.generator.sample_axes(tx, ty)

    def classify(self, axes, weights=None) -> ClassificationResult:
        return self.classifier.classify(axes, weights)

    def classify_at(self, tx: int, ty: int) -> ClassificationResult:
        """Samples and classifies a single tile."""
        return self.classifier.classify(self.generator.sample_axes(tx, ty))

    def classify_id_at(self, tx: int, ty: int) -> int:
        return self.classify_at(tx, ty).id

    def describe_tile(self, tx: int, ty: int) -> dict:
        """Everything known about one tile: its axes and its biome."""
        axes = self.generator.sample_axes(tx, ty)
        result = self.classifier.classify(axes)
        return {
            'tile': (int(tx), int(ty)),
            'region': self.regions.region_of_tile(tx, ty),
            'axes': axes._asdict(),
            'biome': {
                'id': result.id,
                'label': result.label,
                'anchor': result.anchor,
                'color': result.color,
                'distance_sq': result.distance_sq,
            },
        }

    # --- Region Rasters ---
    def get_region_raster(self, region_x: int, region_y: int) -> np.ndarray:
        return self.regions.get(region_x, region_y)

    @property
    def mode(self) -> str:
        return self.regions.mode

    def set_mode(self, mode) -> bool:
        """Switches the view mode. Raises InvalidModeError for unknown modes."""
        return self.regions.set_mode(mode)

    # --- Search ---
    def find_nearest(self, target_id: int, start: tuple,
                     max_radius: int = DEFAULTS.DEFAULT_SEARCH_RADIUS_TILES):
        return self.search.find_nearest(target_id, start, max_radius)

    # --- Prototypes ---
    def load_prototypes(self, path) -> bool:
        """
        Best-effort replacement of the biome prototypes from a table file.
        On success the cached rasters are dropped so no region keeps showing
        the old set, and the search hints are forgotten.
        """
        if not self.classifier.load_prototypes(path):
            return False
        self._prototypes_replaced()
        return True

    def replace_prototypes(self, prototypes) -> None:
        """Replaces the prototype set. Raises ConfigurationError on an invalid set."""
        self.classifier.replace_prototypes(prototypes)
        self._prototypes_replaced()

    def reset_prototypes(self) -> None:
        self.classifier.reset_prototypes()
        self._prototypes_replaced()

    def _prototypes_replaced(self) -> None:
        # The region cache also notices a swap made on the classifier directly;
        # stale hints are only ever used after re-validation.
        self.regions.clear()
        self.search.reset_hints()
