# biome_world/seeds.py

"""
================================================================================
SEED AND LATTICE HASH UTILITIES
================================================================================
This module turns user-facing seeds (integers or strings) into 32-bit seeds
and provides the integer-lattice hash that every noise layer is built on.
It is designed to be a pure, stateless utility.

Data Contract:
---------------
- Inputs:
    - Seeds: int, str, or None. Coordinates: any Python or NumPy integer.
- Outputs:
    - Unsigned 32-bit integers, or floats in [0, 1) for the unit hash.
- Side Effects: None (random_seed reads the OS entropy pool).
- Invariants: Every integer input is wrapped modulo 2^32. No function in
  this module raises for integer or string input.
================================================================================
"""

import math
import numbers
import os
import random

from numba import njit

from . import config as DEFAULTS

MASK32 = 0xFFFFFFFF
UINT32_RANGE = 4294967296.0


@njit
def _imul32(a, b):
    "Low 32 bits of the product of two non-negative 32-bit values."
    return (a * b) & 0xFFFFFFFF


@njit
def _fmix32(h):
    """Murmur3 finalizer: every input bit affects every output bit."""
    h ^= h >> 16
    h = _imul32(h, 0x85EBCA6B)
    h ^= h >> 13
    h = _imul32(h, 0xC2B2AE35)
    h ^= h >> 16
    return h


@njit
def _hash_lattice(ix, iy, seed):
    """
    Hashes an integer lattice point and a seed to an unsigned 32-bit value.
    Compiled with Numba so the noise kernels can call it without leaving
    machine code. Products wrap on overflow and only the low 32 bits are
    kept, so negative coordinates hash the same as their 2^32 residues.
    """
    h = 2166136261 ^ (seed & 0xFFFFFFFF)
    h = _imul32(h ^ ((ix * 0x27D4EB2D) & 0xFFFFFFFF), 16777619)
    h = _imul32(h ^ ((iy * 0x165667B1) & 0xFFFFFFFF), 16777619)
    return _fmix32(h)


@njit
def _hash_lattice_unit(ix, iy, seed):
    return _hash_lattice(ix, iy, seed) / 4294967296.0


def to_uint32(value: int) -> int:
    """Wraps any integer into the unsigned 32-bit range."""
    return int(value) & MASK32


def hash_lattice(ix: int, iy: int, seed: int) -> int:
    """Deterministic avalanche hash of (ix, iy, seed) as an unsigned 32-bit int."""
    return int(_hash_lattice(to_uint32(ix), to_uint32(iy), to_uint32(seed)))


def hash_lattice_unit(ix: int, iy: int, seed: int) -> float:
    """The lattice hash scaled into [0, 1)."""
    return hash_lattice(ix, iy, seed) / UINT32_RANGE


def derive_axis_seed(base_seed: int, tag: int) -> int:
    """
    Derives a distinct 32-bit seed from a base seed and a small integer tag,
    so each environmental axis gets its own stream without new entropy.
    """
    h = to_uint32(base_seed) ^ ((int(tag) * 0x9E3779B1) & MASK32)
    return int(_fmix32(h))


def random_seed() -> int:
    """A fresh 32-bit seed from the OS entropy pool, or the PRNG without one."""
    try:
        return int.from_bytes(os.urandom(4), "little")
    except NotImplementedError:
        return random.getrandbits(32)


def seed_from_string(text: str) -> int:
    """
    Folds a string into a 32-bit seed (xmur3 mixing) over its UTF-16 code
    units, so characters outside the BMP count as two surrogate units. The
    result depends only on the text, so it is stable across runs and platforms.
    """
    data = text.encode("utf-16-le", "surrogatepass")
    units = [int.from_bytes(data[i:i + 2], "little") for i in range(0, len(data), 2)]
    h = (1779033703 ^ len(units)) & MASK32
    for unit in units:
        h = ((h ^ unit) * 3432918353) & MASK32
        h = ((h << 13) | (h >> 19)) & MASK32
    h = ((h ^ (h >> 16)) * 2246822507) & MASK32
    h = ((h ^ (h >> 13)) * 3266489909) & MASK32
    h ^= h >> 16
    return h


def derive_seed(value=None) -> int:
    """
    Converts a user-facing seed into an unsigned 32-bit seed.

    Args:
        value: An integer (wrapped modulo 2^32), a finite float (truncated,
            then wrapped), a string (hashed), or None for a random seed.
    """
    if isinstance(value, bool):
        return random_seed()
    if isinstance(value, numbers.Integral):
        return to_uint32(value)
    if isinstance(value, numbers.Real) and math.isfinite(value):
        return to_uint32(int(value))
    if isinstance(value, str):
        return seed_from_string(value)
    return random_seed()


def split_world_seed(world_seed: int) -> tuple[int, int]:
    """Splits one world seed into the (elevation, moisture) base seeds."""
    seed = to_uint32(world_seed)
    return (
        seed ^ DEFAULTS.ELEVATION_SEED_MASK,
        seed ^ DEFAULTS.MOISTURE_SEED_MASK,
    )
