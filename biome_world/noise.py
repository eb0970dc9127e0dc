# biome_world/noise.py

"""
================================================================================
NOISE GENERATION UTILITIES
================================================================================
This module provides 2D value noise, fractal Brownian motion (fBM) and the
per-tile environmental axes kernel. It is designed to be a pure, stateless
utility; every function is JIT-compiled with Numba.

Data Contract:
---------------
- Inputs:
    - x, y: tile coordinates (the axes kernels take integer tiles).
    - seeds: int64 array of 7 per-axis seeds, ordered as config.AXIS_NAMES.
    - params: float64 array of shape (7, 4) holding
      [octaves, frequency, lacunarity, gain] per axis, same order.
    - gradients: float64 array of the 5 large-scale gradient parameters,
      ordered as the GRADIENT_* indices below.
- Outputs:
    - value_noise_2d / fbm: floats in [0, 1).
    - sample_axes_kernel: a 7-tuple of floats in [0, 1].
    - sample_axes_grid: a float64 array of shape (height, width, 7).
- Side Effects: None.
- Invariants: Outputs are a pure function of the inputs. The grid kernel
  calls the scalar kernel per tile, so both paths are bit-identical.
================================================================================
"""

import math

import numpy as np
from numba import njit

from . import config as DEFAULTS
from .seeds import _hash_lattice_unit

# --- Axis Indices (must match config.AXIS_NAMES) ---
TEMPERATURE = 0
MOISTURE = 1
ELEVATION = 2
ROUGHNESS = 3
SALINITY = 4
FERTILITY = 5
FIRE = 6
NUM_AXES = 7

# --- Gradient Parameter Indices ---
GRADIENT_TEMP_LAT = 0
GRADIENT_SAL_LAT = 1
GRADIENT_TEMP_COOLING = 2
GRADIENT_SAL_REDUCTION = 3
GRADIENT_ROUGH_SCALE = 4

# Decorrelation offsets (in tiles) so axes sharing a seed family never
# sample the same point of the lattice.
MOISTURE_OFFSET_X, MOISTURE_OFFSET_Y = 157.31, -89.97
SALINITY_OFFSET_X, SALINITY_OFFSET_Y = -233.7, 411.9
FERTILITY_OFFSET_X, FERTILITY_OFFSET_Y = 991.1, -72.3
FIRE_OFFSET_X, FIRE_OFFSET_Y = -55.2, 23.7

FALLBACK_LAT_SCALE = DEFAULTS.FALLBACK_LAT_SCALE_TILES


@njit
def _lerp(a, b, t):
    "Linear interpolation."
    return a + (b - a) * t


@njit
def _fade(t):
    "6t^5 - 15t^4 + 10t^3"
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


@njit
def clamp01(v):
    if v < 0.0:
        return 0.0
    if v > 1.0:
        return 1.0
    return v


@njit
def value_noise_2d(x, y, seed):
    """
    Bilinearly blends the hashed values of the 4 lattice corners around
    (x, y), eased with the quintic fade curve.
    """
    ix = math.floor(x)
    iy = math.floor(y)
    fx = x - ix
    fy = y - iy

    v00 = _hash_lattice_unit(ix, iy, seed)
    v10 = _hash_lattice_unit(ix + 1, iy, seed)
    v01 = _hash_lattice_unit(ix, iy + 1, seed)
    v11 = _hash_lattice_unit(ix + 1, iy + 1, seed)

    u = _fade(fx)
    v = _fade(fy)

    x0 = _lerp(v00, v10, u)
    x1 = _lerp(v01, v11, u)
    return _lerp(x0, x1, v)


@njit
def fbm(x, y, seed, octaves=4, frequency=0.01, lacunarity=2.0, gain=0.5):
    """
    Fractal Brownian motion over value noise. The result is the
    amplitude-weighted average of the octaves, so it stays in the range of a
    single octave no matter how many octaves are summed.
    """
    amplitude = 1.0
    total = 0.0
    amplitude_sum = 0.0

    nx = x * frequency
    ny = y * frequency

    for _ in range(octaves):
        total += value_noise_2d(nx, ny, seed) * amplitude
        amplitude_sum += amplitude
        nx *= lacunarity
        ny *= lacunarity
        amplitude *= gain

    if amplitude_sum > 0.0:
        return total / amplitude_sum
    return 0.0


@njit
def _axis_fbm(x, y, seeds, params, axis):
    return fbm(
        x, y, seeds[axis],
        int(params[axis, 0]), params[axis, 1], params[axis, 2], params[axis, 3]
    )


@njit
def lat_south(y, scale):
    """Maps y monotonically from (-inf, +inf) to (0, 1), centered at y = 0."""
    if scale == 0.0:
        scale = FALLBACK_LAT_SCALE
    return 0.5 * (1.0 + math.tanh(y / scale))


@njit
def elevation_kernel(tx, ty, seeds, params):
    return clamp01(_axis_fbm(tx, ty, seeds, params, ELEVATION))


@njit
def moisture_kernel(tx, ty, seeds, params):
    return clamp01(_axis_fbm(tx + MOISTURE_OFFSET_X, ty + MOISTURE_OFFSET_Y, seeds, params, MOISTURE))


@njit
def sample_axes_kernel(tx, ty, seeds, params, gradients):
    """
    Computes the 7 environmental axes at one tile, returned in axis order:
    (temperature, moisture, elevation, roughness, salinity, fertility, fire).
    """
    # 1. Base elevation and moisture.
    elev_raw = _axis_fbm(tx, ty, seeds, params, ELEVATION)
    elev = clamp01(elev_raw)
    moist = moisture_kernel(tx, ty, seeds, params)

    # 2. Temperature: noise + southern warmth - elevation cooling.
    lat_t = lat_south(ty, gradients[GRADIENT_TEMP_LAT])
    t_noise = _axis_fbm(tx, ty, seeds, params, TEMPERATURE)
    temp = clamp01(0.55 * t_noise + 0.35 * lat_t - gradients[GRADIENT_TEMP_COOLING] * elev + 0.10)

    # 3. Roughness: forward-difference slope of the elevation field + detail noise.
    ex = _axis_fbm(tx + 1, ty, seeds, params, ELEVATION) - elev_raw
    ey = _axis_fbm(tx, ty + 1, seeds, params, ELEVATION) - elev_raw
    slope = math.hypot(ex, ey)
    r_noise = _axis_fbm(tx, ty, seeds, params, ROUGHNESS)
    rough = clamp01(min(1.0, slope * gradients[GRADIENT_ROUGH_SCALE]) * 0.7 + r_noise * 0.3)

    # 4. Salinity: noise + southern salinity - elevation reduction.
    lat_s = lat_south(ty, gradients[GRADIENT_SAL_LAT])
    s_noise = _axis_fbm(tx + SALINITY_OFFSET_X, ty + SALINITY_OFFSET_Y, seeds, params, SALINITY)
    sal = clamp01(0.5 * s_noise + 0.4 * lat_s - gradients[GRADIENT_SAL_REDUCTION] * elev * 0.5)

    # 5. Fertility: favors moist ground near elevation 0.35.
    f_noise = _axis_fbm(tx + FERTILITY_OFFSET_X, ty + FERTILITY_OFFSET_Y, seeds, params, FERTILITY)
    elev_band = 1.0 - abs(elev - 0.35) * 2.0
    fert_base = 0.6 * moist + 0.3 * elev_band
    fert = clamp01(0.75 * fert_base + 0.25 * f_noise)

    # 6. Fire: dry, warm, low ground burns most.
    fire_noise = _axis_fbm(tx + FIRE_OFFSET_X, ty + FIRE_OFFSET_Y, seeds, params, FIRE)
    fire = clamp01(0.6 * (1.0 - moist) + 0.2 * temp + 0.15 * (1.0 - elev) + 0.05 * fire_noise)

    return (temp, moist, elev, rough, sal, fert, fire)


@njit
def sample_axes_grid(x0, y0, width, height, seeds, params, gradients):
    """
    Samples the axes kernel over a width x height block of tiles whose
    top-left tile is (x0, y0). Row j, column i holds tile (x0 + i, y0 + j).
    """
    out = np.empty((height, width, NUM_AXES))
    for j in range(height):
        for i in range(width):
            axes = sample_axes_kernel(x0 + i, y0 + j, seeds, params, gradients)
            for k in range(NUM_AXES):
                out[j, i, k] = axes[k]
    return out
