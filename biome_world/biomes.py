# biome_world/biomes.py

"""
================================================================================
BIOME PROTOTYPES AND CLASSIFICATION
================================================================================
This module classifies environmental axes vectors into biomes. Each biome is
a labeled prototype point in the 7-dimensional axes space, and a tile belongs
to the prototype nearest to it under a weighted squared-Euclidean metric:

    dist^2 = sum(weight[axis] * (query[axis] - prototype[axis])^2)

Data Contract:
---------------
- Inputs:
    - AxesVector tuples (or NumPy arrays whose last dimension is 7).
    - An optional comma-separated prototype table with the columns
      id,label,anchor,temp,moist,elev,rough,sal,fert,fire.
- Outputs:
    - ClassificationResult tuples, or arrays of prototype ids / colors.
- Side Effects: Logs messages using the provided logger.
- Invariants:
    - The active prototype set is an immutable snapshot, replaced whole.
    - Exact distance ties resolve to the first prototype in set order.
================================================================================
"""

import csv
import logging
import math
from dataclasses import dataclass, field
from typing import NamedTuple

import numpy as np

from . import color_maps
from . import config as DEFAULTS
from .exceptions import ConfigurationError
from .generator import AxesVector

NUM_AXES = len(DEFAULTS.AXIS_NAMES)

# A prototype table row needs the id, label, anchor and all 7 axis values.
MIN_TABLE_FIELDS = 3 + NUM_AXES


class ClassificationWeights(NamedTuple):
    """Per-axis multipliers used inside the distance metric."""
    temperature: float = DEFAULTS.CLASSIFY_WEIGHTS["temperature"]
    moisture: float = DEFAULTS.CLASSIFY_WEIGHTS["moisture"]
    elevation: float = DEFAULTS.CLASSIFY_WEIGHTS["elevation"]
    roughness: float = DEFAULTS.CLASSIFY_WEIGHTS["roughness"]
    salinity: float = DEFAULTS.CLASSIFY_WEIGHTS["salinity"]
    fertility: float = DEFAULTS.CLASSIFY_WEIGHTS["fertility"]
    fire: float = DEFAULTS.CLASSIFY_WEIGHTS["fire"]


@dataclass(frozen=True)
class BiomePrototype:
    """A labeled reference point in axes space representing one biome."""
    id: int
    label: str
    anchor: str
    axes: AxesVector
    color: tuple = field(default=None)

    def __post_init__(self):
        if self.color is None:
            object.__setattr__(self, "color", color_maps.color_for_id(self.id))


class ClassificationResult(NamedTuple):
    id: int
    label: str
    anchor: str
    color: tuple
    distance_sq: float


def _prototype(biome_id, label, anchor, temp, moist, elev, rough, sal, fert, fire):
    return BiomePrototype(biome_id, label, anchor, AxesVector(temp, moist, elev, rough, sal, fert, fire))


# --- Default Prototypes (Alabama-inspired) ---
DEFAULT_PROTOTYPES = (
    _prototype(1,  "Appalachian Highlands Forest", "Talladega/Cheaha uplands",           0.45, 0.55, 0.85, 0.75, 0.00, 0.50, 0.20),
    _prototype(2,  "Sandstone Canyon & Falls",     "Sipsey-style gorges & waterfalls",   0.50, 0.70, 0.60, 0.80, 0.00, 0.60, 0.10),
    _prototype(3,  "Karst Plateau & Caves",        "Interior/Cumberland Plateau karst",  0.50, 0.55, 0.55, 0.55, 0.00, 0.60, 0.00),
    _prototype(4,  "Ridge-and-Valley Mixed Woods", "Appalachian ridge/valley belts",     0.50, 0.55, 0.65, 0.70, 0.00, 0.50, 0.10),
    _prototype(5,  "Longleaf Pine Savanna",        "Fire-maintained longleaf/wiregrass", 0.70, 0.55, 0.35, 0.30, 0.00, 0.45, 0.90),
    _prototype(6,  "Pine Flatwoods",               "Coastal Plain flatwoods",            0.75, 0.60, 0.25, 0.20, 0.00, 0.40, 0.50),
    _prototype(7,  "Pitcher-Plant Seepage Bogs",   "Gulf Coastal Plain seepage bogs",    0.80, 0.95, 0.20, 0.15, 0.00, 0.10, 0.60),
    _prototype(8,  "Black Belt Prairie",           "Chalk/limestone prairie arc",        0.65, 0.50, 0.30, 0.25, 0.00, 0.85, 0.20),
    _prototype(9,  "Bottomland Hardwood & Swamp",  "Major-river floodplains & sloughs",  0.70, 0.90, 0.20, 0.20, 0.00, 0.70, 0.05),
    _prototype(10, "Shoal Rivers & Rocky Riffles", "Fall-line bedrock shoals",           0.60, 0.80, 0.35, 0.50, 0.00, 0.60, 0.05),
    _prototype(11, "Mobile-Tensaw Delta",          "Large deltaic swamp/bayous",         0.85, 1.00, 0.05, 0.15, 0.10, 0.60, 0.05),
    _prototype(12, "Tidal Salt Marsh & Estuary",   "Brackish marsh margins",             0.90, 1.00, 0.05, 0.10, 0.60, 0.50, 0.00),
    _prototype(13, "Coastal Dune & Beach",         "Barrier-island dune/beach systems",  0.95, 0.60, 0.05, 0.25, 1.00, 0.15, 0.00),
    _prototype(14, "Maritime Forest & Scrub",      "Back-dune oak/pine thickets",        0.90, 0.70, 0.08, 0.20, 0.40, 0.40, 0.00),
)


def _clamp01(value: float) -> float:
    return 0.0 if value < 0.0 else 1.0 if value > 1.0 else value


def parse_prototype_table(text: str, logger: logging.Logger = None) -> list:
    """
    Parses a comma-separated prototype table into BiomePrototypes.

    Malformed rows (too few fields, non-numeric or non-finite values, a
    non-positive or duplicate id) are skipped; axis values are clamped to
    [0, 1]. A header row whose first field is 'id' and lines starting with
    '#' are ignored.
    """
    logger = logger or logging.getLogger(__name__)
    prototypes = []
    seen_ids = set()

    for line_no, row in enumerate(csv.reader(text.splitlines()), start=1):
        if not row or not "".join(row).strip():
            continue
        first = row[0].strip()
        if first.startswith("#") or first.lower() == "id":
            continue
        if len(row) < MIN_TABLE_FIELDS:
            logger.debug(f"Prototype table line {line_no}: {len(row)} fields, need {MIN_TABLE_FIELDS}. Skipped.")
            continue

        try:
            raw_id = float(first)
            values = [float(v) for v in row[3:MIN_TABLE_FIELDS]]
        except ValueError:
            logger.debug(f"Prototype table line {line_no}: non-numeric value. Skipped.")
            continue

        if not (math.isfinite(raw_id) and raw_id == int(raw_id) and raw_id > 0):
            logger.debug(f"Prototype table line {line_no}: invalid id {first!r}. Skipped.")
            continue
        if not all(math.isfinite(v) for v in values):
            logger.debug(f"Prototype table line {line_no}: non-finite axis value. Skipped.")
            continue

        biome_id = int(raw_id)
        if biome_id in seen_ids:
            logger.debug(f"Prototype table line {line_no}: duplicate id {biome_id}. Skipped.")
            continue
        seen_ids.add(biome_id)

        axes = AxesVector(*(_clamp01(v) for v in values))
        prototypes.append(BiomePrototype(biome_id, row[1].strip(), row[2].strip(), axes))

    return prototypes


def _weighted_distances(rows: np.ndarray, matrix: np.ndarray, weights: np.ndarray) -> np.ndarray:
    """Squared weighted distances, shape (N, P), from N query rows to P prototypes."""
    diff = rows[:, np.newaxis, :] - matrix[np.newaxis, :, :]
    return np.sum(weights * diff * diff, axis=-1)


class _PrototypeSet(NamedTuple):
    """An immutable snapshot of the active prototypes and derived tables."""
    prototypes: tuple
    matrix: np.ndarray
    ids: np.ndarray
    color_lut: np.ndarray


def _build_snapshot(prototypes) -> _PrototypeSet:
    prototypes = tuple(prototypes)
    matrix = np.array([p.axes for p in prototypes], dtype=np.float64).reshape(-1, NUM_AXES)
    ids = np.array([p.id for p in prototypes], dtype=np.int64)
    color_lut = color_maps.create_biome_color_lut(p.color for p in prototypes)
    for array in (matrix, ids, color_lut):
        array.flags.writeable = False
    return _PrototypeSet(prototypes, matrix, ids, color_lut)


class BiomeClassifier:
    """
    Maps axes vectors to their nearest biome prototype.
    The prototype set can be replaced at runtime, always as a whole.
    """
    def __init__(self, logger: logging.Logger, prototypes=None, weights=None):
        """
        Args:
            logger (logging.Logger): The logger instance for all output.
            prototypes: Initial prototypes. Defaults to the built-in set.
                An empty sequence is allowed, but classifying with it fails.
            weights: Default ClassificationWeights (or a mapping of axis
                name to weight) used when a call gives none.
        """
        self.logger = logger
        self.weights = self._resolve_weights(weights, ClassificationWeights())
        self._weight_array = np.array(self.weights, dtype=np.float64)
        if prototypes is None:
            self._active = _build_snapshot(DEFAULT_PROTOTYPES)
        else:
            prototypes = tuple(prototypes)
            if prototypes:
                self._validate(prototypes)
            self._active = _build_snapshot(prototypes)
        # Bumped on every swap so caches built from an older set can tell.
        self.generation = 0
        self.logger.info(f"BiomeClassifier initialized with {len(self._active.prototypes)} prototypes.")

    @property
    def prototypes(self) -> tuple:
        return self._active.prototypes

    # --- Classification ---
    def classify(self, axes, weights=None) -> ClassificationResult:
        """Returns the prototype nearest to an axes vector."""
        snapshot = self._require_prototypes()
        w = self._weight_vector(weights)
        query = np.asarray(axes, dtype=np.float64).reshape(1, NUM_AXES)
        distances = _weighted_distances(query, snapshot.matrix, w)[0]
        # argmin returns the first minimum, which is the tie-break rule.
        best = int(np.argmin(distances))
        proto = snapshot.prototypes[best]
        return ClassificationResult(proto.id, proto.label, proto.anchor, proto.color, float(distances[best]))

    def classify_grid(self, axes_array: np.ndarray, weights=None) -> np.ndarray:
        """Classifies every axes vector in an array of shape (..., 7) into prototype ids."""
        snapshot = self._require_prototypes()
        return snapshot.ids[self._nearest_indices(snapshot, axes_array, weights)]

    def color_grid(self, axes_array: np.ndarray, weights=None) -> np.ndarray:
        """Classifies an array of shape (..., 7) straight into uint8 RGB colors."""
        snapshot = self._require_prototypes()
        index_map = self._nearest_indices(snapshot, axes_array, weights)
        return color_maps.get_biome_color_array(index_map, snapshot.color_lut)

    def _nearest_indices(self, snapshot: _PrototypeSet, axes_array: np.ndarray, weights) -> np.ndarray:
        axes_array = np.asarray(axes_array, dtype=np.float64)
        rows = axes_array.reshape(-1, NUM_AXES)
        distances = _weighted_distances(rows, snapshot.matrix, self._weight_vector(weights))
        return np.argmin(distances, axis=1).reshape(axes_array.shape[:-1])

    def _require_prototypes(self) -> _PrototypeSet:
        # Read the reference once so a concurrent swap is seen whole or not at all.
        snapshot = self._active
        if not snapshot.prototypes:
            raise ConfigurationError("Cannot classify: the biome prototype set is empty.")
        return snapshot

    # --- Weights ---
    def _weight_vector(self, weights) -> np.ndarray:
        if weights is None:
            return self._weight_array
        return np.array(self._resolve_weights(weights, self.weights), dtype=np.float64)

    @staticmethod
    def _resolve_weights(weights, base: ClassificationWeights) -> ClassificationWeights:
        if weights is None:
            resolved = base
        elif isinstance(weights, dict):
            unknown = set(weights) - set(ClassificationWeights._fields)
            if unknown:
                raise ConfigurationError(f"Unknown weight axis name(s): {', '.join(sorted(unknown))}")
            resolved = base._replace(**weights)
        else:
            values = tuple(weights)
            if len(values) != NUM_AXES:
                raise ConfigurationError(f"Expected {NUM_AXES} weights, got {len(values)}.")
            resolved = ClassificationWeights(*values)

        resolved = ClassificationWeights(*(float(w) for w in resolved))
        if not all(math.isfinite(w) and w >= 0.0 for w in resolved):
            raise ConfigurationError(f"Classification weights must be finite and >= 0, got {tuple(resolved)}.")
        return resolved

    # --- Prototype Set Replacement ---
    def replace_prototypes(self, prototypes) -> None:
        """
        Atomically replaces the active prototype set.
        Raises ConfigurationError (and keeps the old set) if the new set is
        empty, has duplicate ids, or has axis values outside [0, 1].
        """
        prototypes = tuple(prototypes)
        self._validate(prototypes)
        self._active = _build_snapshot(prototypes)
        self.generation += 1
        self.logger.info(f"Biome prototype set replaced ({len(prototypes)} prototypes).")

    def reset_prototypes(self) -> None:
        """Restores the built-in default prototype set."""
        self.replace_prototypes(DEFAULT_PROTOTYPES)

    def load_prototypes_from_text(self, text: str) -> bool:
        """
        Replaces the active set with the prototypes parsed from a table.
        Returns False, keeping the current set, if no row could be parsed.
        """
        parsed = parse_prototype_table(text, self.logger)
        if not parsed:
            self.logger.warning("Prototype table contained no valid rows. Keeping the current prototype set.")
            return False
        self.replace_prototypes(parsed)
        return True

    def load_prototypes(self, path) -> bool:
        """
        Best-effort load of a prototype table from a file. An unreadable or
        empty source is logged and leaves the current set untouched.
        """
        try:
            with open(path, 'r', encoding='utf-8', newline='') as f:
                text = f.read()
        except (OSError, UnicodeDecodeError) as e:
            self.logger.warning(f"Prototype table '{path}' is unavailable ({e}). Keeping the current prototype set.")
            return False
        return self.load_prototypes_from_text(text)

    @staticmethod
    def _validate(prototypes: tuple) -> None:
        if not prototypes:
            raise ConfigurationError("A biome prototype set must contain at least one prototype.")
        ids = [p.id for p in prototypes]
        if len(set(ids)) != len(ids):
            raise ConfigurationError(f"Biome prototype ids must be unique, got {ids}.")
        for p in prototypes:
            if p.id <= 0:
                raise ConfigurationError(f"Biome prototype ids must be positive, got {p.id}.")
            if len(p.axes) != NUM_AXES or not all(0.0 <= v <= 1.0 for v in p.axes):
                raise ConfigurationError(f"Biome prototype {p.id} has axis values outside [0, 1].")
