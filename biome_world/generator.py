# biome_world/generator.py

"""
================================================================================
ENVIRONMENTAL FIELD GENERATOR
================================================================================
This module contains the FieldGenerator class, responsible for producing the
7-axis environmental vector (temperature, moisture, elevation, roughness,
salinity, fertility, fire) at any integer tile of an infinite world.

Data Contract:
---------------
- Inputs (on initialization):
    - config (dict): A dictionary of parameters which can override the
      internal defaults. Expected keys include 'seed', 'elevation_seed',
      'moisture_seed', 'noise_params' and 'gradients'.
    - logger: A configured Python logging object for runtime messages.
- Outputs (from methods):
    - AxesVector tuples, or NumPy arrays of axes, each value in [0, 1].
- Side Effects: Logs messages using the provided logger.
- Invariants: Given the same seeds and parameters, the output is
  bit-identical across calls and across processes.
================================================================================
"""

import logging
import math
from dataclasses import dataclass
from typing import NamedTuple

import numpy as np

from . import config as DEFAULTS
from . import noise
from .exceptions import ConfigurationError
from .seeds import derive_axis_seed, derive_seed, split_world_seed, to_uint32


class AxesVector(NamedTuple):
    """The normalized environmental feature vector of one tile."""
    temperature: float
    moisture: float
    elevation: float
    roughness: float
    salinity: float
    fertility: float
    fire: float


@dataclass(frozen=True)
class NoiseParameters:
    """fBM settings for one axis. Immutable once the generator is built."""
    octaves: int = 4
    frequency: float = 0.01
    lacunarity: float = 2.0
    gain: float = 0.5

    def __post_init__(self):
        if isinstance(self.octaves, bool) or int(self.octaves) != self.octaves or self.octaves < 1:
            raise ConfigurationError(f"octaves must be an integer >= 1, got {self.octaves!r}")
        if not (math.isfinite(self.frequency) and self.frequency > 0):
            raise ConfigurationError(f"frequency must be > 0, got {self.frequency!r}")
        if not (math.isfinite(self.lacunarity) and self.lacunarity > 1):
            raise ConfigurationError(f"lacunarity must be > 1, got {self.lacunarity!r}")
        if not (0 < self.gain < 1):
            raise ConfigurationError(f"gain must be in (0, 1), got {self.gain!r}")
        object.__setattr__(self, "octaves", int(self.octaves))

    @classmethod
    def from_dict(cls, values: dict) -> "NoiseParameters":
        unknown = set(values) - {"octaves", "frequency", "lacunarity", "gain"}
        if unknown:
            raise ConfigurationError(f"Unknown noise parameter(s): {', '.join(sorted(unknown))}")
        return cls(**values)


@dataclass(frozen=True)
class GradientParameters:
    """Large-scale modifiers applied on top of the per-axis noise."""
    temp_lat_grad_tiles: float = DEFAULTS.GRADIENTS["temp_lat_grad_tiles"]
    sal_lat_grad_tiles: float = DEFAULTS.GRADIENTS["sal_lat_grad_tiles"]
    temp_elev_cooling: float = DEFAULTS.GRADIENTS["temp_elev_cooling"]
    sal_elev_reduction: float = DEFAULTS.GRADIENTS["sal_elev_reduction"]
    rough_slope_scale: float = DEFAULTS.GRADIENTS["rough_slope_scale"]

    def as_array(self) -> np.ndarray:
        # Order must match the GRADIENT_* indices in noise.py.
        return np.array([
            self.temp_lat_grad_tiles,
            self.sal_lat_grad_tiles,
            self.temp_elev_cooling,
            self.sal_elev_reduction,
            self.rough_slope_scale,
        ], dtype=np.float64)


class FieldGenerator:
    """
    Generates the environmental axes of a procedurally generated world.
    This class is backend-only and does not handle any visualization.
    """
    def __init__(self, config: dict, logger: logging.Logger):
        """
        Initializes the field generator.

        Args:
            config (dict): User-defined parameters to override defaults.
            logger (logging.Logger): The logger instance for all output.
        """
        self.logger = logger
        self.user_config = config or {}
        self.logger.info("FieldGenerator initializing...")

        # --- Consolidate Configuration ---
        world_seed = derive_seed(self.user_config.get('seed', DEFAULTS.DEFAULT_SEED))
        default_elev_seed, default_moist_seed = split_world_seed(world_seed)

        user_noise = self.user_config.get('noise_params', {})
        user_gradients = self.user_config.get('gradients', {})

        self.settings = {
            'seed': world_seed,
            'elevation_seed': derive_seed(self.user_config.get('elevation_seed', default_elev_seed)),
            'moisture_seed': derive_seed(self.user_config.get('moisture_seed', default_moist_seed)),
            'noise_params': {
                axis: NoiseParameters.from_dict({**DEFAULTS.NOISE_PARAMS[axis], **user_noise.get(axis, {})})
                for axis in DEFAULTS.AXIS_NAMES
            },
            'gradients': self._build_gradients(user_gradients),
        }

        # --- Public Properties for easy access ---
        self.seed = self.settings['seed']
        self.elevation_seed = self.settings['elevation_seed']
        self.moisture_seed = self.settings['moisture_seed']
        self.noise_params = self.settings['noise_params']
        self.gradients = self.settings['gradients']

        # --- Derive Per-Axis Seeds (once) ---
        elev, moist = self.elevation_seed, self.moisture_seed
        self.axis_seeds = {
            'temperature': derive_axis_seed(elev ^ moist, DEFAULTS.TEMPERATURE_SEED_TAG),
            'moisture': moist,
            'elevation': elev,
            'roughness': derive_axis_seed(elev, DEFAULTS.ROUGHNESS_SEED_TAG),
            'salinity': derive_axis_seed(moist, DEFAULTS.SALINITY_SEED_TAG),
            'fertility': derive_axis_seed(elev ^ to_uint32(moist << 1), DEFAULTS.FERTILITY_SEED_TAG),
            'fire': derive_axis_seed(moist ^ to_uint32(elev << 1), DEFAULTS.FIRE_SEED_TAG),
        }

        # --- Pack everything the compiled kernels need ---
        self._seeds = np.array([self.axis_seeds[a] for a in DEFAULTS.AXIS_NAMES], dtype=np.int64)
        self._params = np.array([
            [p.octaves, p.frequency, p.lacunarity, p.gain]
            for p in (self.noise_params[a] for a in DEFAULTS.AXIS_NAMES)
        ], dtype=np.float64)
        self._gradients = self.gradients.as_array()

        self.logger.info(
            f"FieldGenerator initialized with seed: {self.seed} "
            f"(elevation seed {self.elevation_seed}, moisture seed {self.moisture_seed})"
        )

    def elevation(self, tx: int, ty: int) -> float:
        """Normalized elevation [0, 1] at a tile."""
        return noise.elevation_kernel(int(tx), int(ty), self._seeds, self._params)

    def moisture(self, tx: int, ty: int) -> float:
        """Normalized moisture [0, 1] at a tile."""
        return noise.moisture_kernel(int(tx), int(ty), self._seeds, self._params)

    def sample_axes(self, tx: int, ty: int) -> AxesVector:
        """Returns the full environmental axes vector at a tile."""
        return AxesVector(*noise.sample_axes_kernel(int(tx), int(ty), self._seeds, self._params, self._gradients))

    def sample_axes_grid(self, x0: int, y0: int, width: int, height: int) -> np.ndarray:
        """
        Samples a width x height block of tiles starting at tile (x0, y0).
        Returns a float64 array of shape (height, width, 7) in axis order.
        """
        return noise.sample_axes_grid(
            int(x0), int(y0), int(width), int(height),
            self._seeds, self._params, self._gradients
        )

    @staticmethod
    def _build_gradients(user_gradients: dict) -> GradientParameters:
        unknown = set(user_gradients) - set(DEFAULTS.GRADIENTS)
        if unknown:
            raise ConfigurationError(f"Unknown gradient parameter(s): {', '.join(sorted(unknown))}")
        return GradientParameters(**{**DEFAULTS.GRADIENTS, **user_gradients})
