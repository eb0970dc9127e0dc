# biome_world/exceptions.py

"""Error types raised by the biome world."""


class BiomeWorldError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(BiomeWorldError, ValueError):
    """
    Raised when the world is asked to run with an unusable configuration:
    an empty prototype set at classification time, invalid noise parameters
    or weights, or an invalid prototype replacement.
    """


class InvalidModeError(ConfigurationError):
    """Raised when the region cache is switched to an unknown view mode."""

    def __init__(self, mode, valid_modes):
        self.mode = mode
        self.valid_modes = tuple(valid_modes)
        super().__init__(
            f"Invalid view mode: {mode!r}. Valid: {', '.join(self.valid_modes)}"
        )
