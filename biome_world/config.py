# biome_world/config.py

"""
================================================================================
INTERNAL DEFAULT CONFIGURATION
================================================================================
This module contains the default, fallback internal constants for the biome
world. These values are used if they are not explicitly provided by the
user's configuration.

DO NOT MODIFY THIS FILE FOR A SPECIFIC SIMULATION.
Instead, pass a configuration dictionary to the World or FieldGenerator.
================================================================================
"""

# --- Seeds ---
DEFAULT_SEED = 1337
# XOR masks that split one world seed into the two base seeds.
ELEVATION_SEED_MASK = 0xA5A5A5A5
MOISTURE_SEED_MASK = 0x3C6EF372

# Small integer tags used to derive a decorrelated seed for every other axis.
TEMPERATURE_SEED_TAG = 0xA1
ROUGHNESS_SEED_TAG = 0xB2
SALINITY_SEED_TAG = 0xC3
FERTILITY_SEED_TAG = 0xD4
FIRE_SEED_TAG = 0xE5

# --- Environmental Axes ---
# The order here is the order of every axes vector, prototype matrix and
# weight vector in the package.
AXIS_NAMES = (
    "temperature",
    "moisture",
    "elevation",
    "roughness",
    "salinity",
    "fertility",
    "fire",
)

# --- Noise Parameters (per axis) ---
# frequency is in cycles per tile, so 1/96 means features ~96 tiles across.
NOISE_PARAMS = {
    "elevation":   {"octaves": 5, "frequency": 1 / 96,  "lacunarity": 2.0, "gain": 0.5},
    "moisture":    {"octaves": 4, "frequency": 1 / 64,  "lacunarity": 2.0, "gain": 0.5},
    "temperature": {"octaves": 4, "frequency": 1 / 256, "lacunarity": 2.0, "gain": 0.55},
    "roughness":   {"octaves": 3, "frequency": 1 / 32,  "lacunarity": 2.5, "gain": 0.6},
    "salinity":    {"octaves": 3, "frequency": 1 / 384, "lacunarity": 2.0, "gain": 0.5},
    "fertility":   {"octaves": 4, "frequency": 1 / 192, "lacunarity": 2.0, "gain": 0.5},
    "fire":        {"octaves": 3, "frequency": 1 / 128, "lacunarity": 2.0, "gain": 0.55},
}

# --- Large-Scale Gradients ---
# Positive Y is "south": warmer and more saline.
GRADIENTS = {
    "temp_lat_grad_tiles": 8192.0,
    "sal_lat_grad_tiles": 8192.0,
    "temp_elev_cooling": 0.25,   # temperature reduced by elevation
    "sal_elev_reduction": 0.50,  # salinity reduced by elevation
    "rough_slope_scale": 10.0,   # scales slope magnitude to roughly [0, 1]
}

# Latitude half-scale used when a gradient scale of 0 is supplied.
FALLBACK_LAT_SCALE_TILES = 4096.0

# --- Classification ---
CLASSIFY_WEIGHTS = {
    "temperature": 1.0,
    "moisture": 1.0,
    "elevation": 1.1,
    "roughness": 1.0,
    "salinity": 1.1,
    "fertility": 1.0,
    "fire": 1.0,
}

# --- Regions & Rendering Modes ---
REGION_SIZE_TILES = 64  # The number of tiles on one side of a cached region
DEFAULT_VIEW_MODE = "biomes"
VIEW_MODES = ("biomes",) + AXIS_NAMES

# Short names and aliases accepted when switching view modes.
VIEW_MODE_ALIASES = {
    "biome": "biomes",
    "bio": "biomes",
    "temp": "temperature",
    "t": "temperature",
    "moist": "moisture",
    "m": "moisture",
    "elev": "elevation",
    "height": "elevation",
    "h": "elevation",
    "rough": "roughness",
    "r": "roughness",
    "sal": "salinity",
    "salt": "salinity",
    "sa": "salinity",
    "fert": "fertility",
    "f": "fertility",
    "fi": "fire",
    "burn": "fire",
}

# --- Nearest-Biome Search ---
# Maximum Chebyshev radius, in tiles, explored when the caller gives none.
DEFAULT_SEARCH_RADIUS_TILES = 8192
# Small strides that are always tried after the halvings of the region size.
COARSE_EXTRA_STRIDES = (16, 8, 4, 2)
