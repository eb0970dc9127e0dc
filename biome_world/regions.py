# biome_world/regions.py

"""
================================================================================
REGION RASTER CACHE
================================================================================
This module provides the RegionCache, which rasterizes fixed-size square
regions of tiles into RGB color grids once and reuses them, so a renderer
never has to re-run the classifier for every tile on every frame.

Data Contract:
---------------
- Inputs (on initialization):
    - generator (FieldGenerator): Source of the axes grid for a region.
    - classifier (BiomeClassifier): Maps axes to biome colors.
    - logger: A configured Python logging object for runtime messages.
- Public Methods:
    - get(region_x, region_y): The (R, R, 3) uint8 raster of a region,
      indexed [local_y, local_x].
    - set_mode(mode): Switches between biome colors and a raw-axis view.
    - clear(): Drops every cached raster.
- Invariants:
    - Entries are keyed by (region_x, region_y, mode).
    - A mode change drops all entries at once; nothing is partially
      invalidated and nothing is evicted.
    - A prototype swap in the classifier also drops all entries, on the
      next access.
================================================================================
"""
import logging
from typing import TYPE_CHECKING

import numpy as np

from . import color_maps
from . import config as DEFAULTS
from .exceptions import ConfigurationError, InvalidModeError

# Use a forward reference for the type hints to avoid circular imports.
if TYPE_CHECKING:
    from .biomes import BiomeClassifier
    from .generator import FieldGenerator


def canonical_view_mode(mode) -> str:
    """
    Normalizes a view mode name (case, short names, aliases).
    Raises InvalidModeError for anything that is not a known mode.
    """
    if not isinstance(mode, str):
        raise InvalidModeError(mode, DEFAULTS.VIEW_MODES)
    name = mode.strip().lower()
    name = DEFAULTS.VIEW_MODE_ALIASES.get(name, name)
    if name not in DEFAULTS.VIEW_MODES:
        raise InvalidModeError(mode, DEFAULTS.VIEW_MODES)
    return name


class RegionCache:
    """Memoizes the rasterized classification of square tile regions."""

    def __init__(self, generator: 'FieldGenerator', classifier: 'BiomeClassifier',
                 logger: logging.Logger, region_size: int = DEFAULTS.REGION_SIZE_TILES,
                 mode: str = DEFAULTS.DEFAULT_VIEW_MODE):
        if int(region_size) < 1:
            raise ConfigurationError(f"Region size must be >= 1 tile, got {region_size}.")
        self.generator = generator
        self.classifier = classifier
        self.logger = logger
        self.region_size = int(region_size)
        self._mode = canonical_view_mode(mode)
        self._rasters = {}
        self._generation = classifier.generation

    @property
    def mode(self) -> str:
        return self._mode

    def __len__(self) -> int:
        return len(self._rasters)

    def __contains__(self, region) -> bool:
        region_x, region_y = region
        return (region_x, region_y, self._mode) in self._rasters

    # --- Coordinates ---
    def region_of_tile(self, tx: int, ty: int) -> tuple[int, int]:
        """The region containing a tile (floor division, so negatives work)."""
        return int(tx) // self.region_size, int(ty) // self.region_size

    def region_origin(self, region_x: int, region_y: int) -> tuple[int, int]:
        """The top-left tile of a region."""
        return region_x * self.region_size, region_y * self.region_size

    # --- Cache Access ---
    def get(self, region_x: int, region_y: int) -> np.ndarray:
        """Returns a region's raster, rasterizing and caching it on a miss."""
        self._drop_if_prototypes_changed()
        key = (int(region_x), int(region_y), self._mode)
        raster = self._rasters.get(key)
        if raster is None:
            raster = self._rasterize(key[0], key[1], self._mode)
            self._rasters[key] = raster
        return raster

    def set_mode(self, mode) -> bool:
        """
        Switches the view mode. Returns True if the mode changed (and the
        cache was dropped), False if it was already active.
        """
        new_mode = canonical_view_mode(mode)
        if new_mode == self._mode:
            return False
        # Rebind instead of clearing in place so the swap is all-or-nothing.
        self._rasters = {}
        self._mode = new_mode
        self.logger.info(f"View mode switched to '{new_mode}'.")
        return True

    def clear(self) -> None:
        """Clears all cached rasters (forces regeneration on next access)."""
        self._rasters = {}

    def _drop_if_prototypes_changed(self) -> None:
        """Drops every raster if the classifier swapped its prototype set since they were built."""
        generation = self.classifier.generation
        if generation != self._generation:
            self.logger.debug("Biome prototypes changed; dropping all cached rasters.")
            self._rasters = {}
            self._generation = generation

    def _rasterize(self, region_x: int, region_y: int, mode: str) -> np.ndarray:
        """Samples and colors every tile of one region."""
        x0, y0 = self.region_origin(region_x, region_y)
        size = self.region_size
        self.logger.debug(f"Rasterizing region ({region_x}, {region_y}) in '{mode}' mode.")

        axes_grid = self.generator.sample_axes_grid(x0, y0, size, size)
        if mode == "biomes":
            raster = self.classifier.color_grid(axes_grid)
        else:
            axis_index = DEFAULTS.AXIS_NAMES.index(mode)
            raster = color_maps.get_axis_color_array(axes_grid[:, :, axis_index])

        raster = np.ascontiguousarray(raster, dtype=np.uint8)
        raster.flags.writeable = False
        return raster
