# biome_world/color_maps.py

"""
================================================================================
SHARED COLOR MAPPING UTILITIES
================================================================================
This module contains the biome palette and the functions for converting
classification results and raw axis values into RGB color arrays.

It is designed to be a pure, stateless utility with no dependencies on any
rendering library, so any renderer can blit the arrays it produces.
================================================================================
"""
import numpy as np

# --- Default Biome Palette (by prototype id) ---
BIOME_PALETTE_HEX = {
    1:  "#2e6b3f",  # Appalachian Highlands Forest - deep green
    2:  "#4e7f9e",  # Sandstone Canyon & Falls - cool slate/blue-green
    3:  "#6a7d6f",  # Karst Plateau & Caves - muted green-gray
    4:  "#3f6a54",  # Ridge-and-Valley Mixed Woods - green
    5:  "#caa247",  # Longleaf Pine Savanna - warm golden
    6:  "#4f7f64",  # Pine Flatwoods - medium green
    7:  "#9ed46f",  # Pitcher-Plant Seepage Bogs - bright spring green
    8:  "#cdbb76",  # Black Belt Prairie - khaki
    9:  "#2f5130",  # Bottomland Hardwood & Swamp - dark swamp green
    10: "#5aa7c7",  # Shoal Rivers & Rocky Riffles - clear blue
    11: "#3b7f6b",  # Mobile-Tensaw Delta - teal green
    12: "#8db36a",  # Tidal Salt Marsh & Estuary - olive
    13: "#e8d6a0",  # Coastal Dune & Beach - pale sand
    14: "#6e8b5e",  # Maritime Forest & Scrub - dull green
}

# Neutral gray for ids without a palette entry.
FALLBACK_COLOR_HEX = "#888888"


def hex_to_rgb(value: str) -> tuple:
    """Converts '#rrggbb' into an (R, G, B) tuple of ints."""
    value = value.lstrip("#")
    return tuple(int(value[i:i + 2], 16) for i in (0, 2, 4))


COLOR_MAP_BIOMES = {biome_id: hex_to_rgb(color) for biome_id, color in BIOME_PALETTE_HEX.items()}
FALLBACK_COLOR = hex_to_rgb(FALLBACK_COLOR_HEX)


def color_for_id(biome_id: int) -> tuple:
    """The display color of a prototype id; unknown ids are neutral gray."""
    return COLOR_MAP_BIOMES.get(biome_id, FALLBACK_COLOR)


# --- Color Lookup Table (LUT) Generation ---
def create_biome_color_lut(colors) -> np.ndarray:
    """
    Creates a LUT where the index is a prototype's position in the active
    prototype set and the value is its RGB color.
    """
    return np.array(list(colors), dtype=np.uint8).reshape(-1, 3)


# --- Color Array Generation Functions ---
def get_biome_color_array(index_map: np.ndarray, biome_lut: np.ndarray) -> np.ndarray:
    """
    Converts an integer map of prototype indices into an RGB color array
    using a pre-computed lookup table. This is a very fast operation.
    """
    return biome_lut[index_map]


def get_axis_color_array(axis_values: np.ndarray) -> np.ndarray:
    """Converts normalized axis data [0, 1] into a grayscale RGB color array."""
    # Scale the normalized [0, 1] float values to [0, 255] gray levels, halves rounding up.
    gray_values = np.clip(np.floor(np.clip(axis_values, 0.0, 1.0) * 255.0 + 0.5), 0, 255).astype(np.uint8)

    # Create a 3-channel RGB array by stacking the grayscale values.
    return np.stack([gray_values] * 3, axis=-1)
