# biome_world/search.py

"""
================================================================================
NEAREST-BIOME SPATIAL SEARCH
================================================================================
This module finds the tile of a given biome closest to a start tile, using a
multi-resolution coarse scan to bound the search followed by an exact
ring-by-ring refinement.

Data Contract:
---------------
- Inputs (on initialization):
    - classify_id_at: a callable (tx, ty) -> biome id.
    - logger: A configured Python logging object for runtime messages.
    - region_size: tiles per region side; the largest coarse stride.
- Public Methods:
    - find_nearest(target_id, start, max_radius) -> SearchResult | NotFound
    - reset_hints(): forgets the last hit of every biome id.
- Side Effects: Updates the per-id last-hit hints on success.
- Invariants:
    - The result is the nearest match by Euclidean distance among all tiles
      within Chebyshev distance max_radius of the start.
    - No tile is classified more than once per call.
================================================================================
"""
import logging
import math
import time
from dataclasses import dataclass, field
from typing import Callable, Iterator, Optional

from . import config as DEFAULTS


@dataclass(frozen=True)
class StrideStats:
    stride: int
    tiles_checked: int
    elapsed_ms: float


@dataclass(frozen=True)
class SearchResult:
    """A successful search. `exact` is False only for the coarse fallback."""
    target_id: int
    tile: tuple
    distance: float
    tiles_examined: int
    bounded: int
    exact: bool
    stride_stats: tuple = field(default=())

    @property
    def found(self) -> bool:
        return True


@dataclass(frozen=True)
class NotFound:
    """A search that exhausted its bound; `bounded` is the radius searched."""
    target_id: int
    start: tuple
    bounded: int
    tiles_examined: int
    stride_stats: tuple = field(default=())

    @property
    def found(self) -> bool:
        return False


def iter_ring(tx0: int, ty0: int, r: int, step: int = 1) -> Iterator[tuple[int, int]]:
    """
    Yields the perimeter of the square of half-width r * step centered on
    (tx0, ty0), at spacing step. Ring 0 is the center tile alone.
    """
    if r == 0:
        yield tx0, ty0
        return
    x1, x2 = tx0 - r * step, tx0 + r * step
    y1, y2 = ty0 - r * step, ty0 + r * step

    # Top and bottom edges, corners included.
    for x in range(x1, x2 + 1, step):
        yield x, y1
        yield x, y2
    # Left and right edges, corners excluded.
    for y in range(y1 + step, y2, step):
        yield x1, y
        yield x2, y


def coarse_strides(region_size: int) -> list[int]:
    """Region size halved down to 2, plus the fixed small strides, descending."""
    base = max(2, int(region_size))
    strides = []
    s = base
    while s > 1:
        strides.append(s)
        s //= 2
    for extra in DEFAULTS.COARSE_EXTRA_STRIDES:
        if extra <= base and extra not in strides:
            strides.append(extra)
    return sorted(set(strides), reverse=True)


def _dist2(tx0: int, ty0: int, tx: int, ty: int) -> int:
    dx = tx - tx0
    dy = ty - ty0
    return dx * dx + dy * dy


class _SearchState:
    """Per-call memo of classified tiles. Discarded when the call returns."""

    def __init__(self, classify_id_at: Callable[[int, int], int]):
        self._classify_id_at = classify_id_at
        self.memo = {}
        self.coarse_visited = set()

    def id_at(self, tx: int, ty: int) -> int:
        key = (tx, ty)
        biome_id = self.memo.get(key)
        if biome_id is None:
            biome_id = int(self._classify_id_at(tx, ty))
            self.memo[key] = biome_id
        return biome_id


class NearestBiomeSearch:
    """
    Multi-resolution nearest-biome search. Owns the last-hit hint of every
    biome id, which tightens the bound of later searches for the same id.
    """
    def __init__(self, classify_id_at: Callable[[int, int], int], logger: logging.Logger,
                 region_size: int = DEFAULTS.REGION_SIZE_TILES, hints: Optional[dict] = None):
        self.classify_id_at = classify_id_at
        self.logger = logger
        self.strides = coarse_strides(region_size)
        self.hints = hints if hints is not None else {}

    def reset_hints(self) -> None:
        self.hints.clear()

    def find_nearest(self, target_id: int, start: tuple,
                     max_radius: int = DEFAULTS.DEFAULT_SEARCH_RADIUS_TILES):
        """
        Finds the tile classified as target_id nearest to start.

        Args:
            target_id (int): The biome id to look for.
            start (tuple): The (tx, ty) start tile.
            max_radius (int): Maximum Chebyshev distance from start to explore.

        Returns:
            SearchResult on success, NotFound when nothing matches within the bound.
        """
        target_id = int(target_id)
        tx0, ty0 = int(start[0]), int(start[1])
        max_radius = max(0, int(max_radius))
        state = _SearchState(self.classify_id_at)
        upper_bound = self._hinted_bound(state, target_id, tx0, ty0, max_radius)

        # --- 1. Coarse Phase ---
        stride_stats = []
        coarse_hit = None
        for stride in self.strides:
            t0 = time.perf_counter()
            hit, checked = self._coarse_first_hit(state, target_id, tx0, ty0, stride, upper_bound)
            stride_stats.append(StrideStats(stride, checked, (time.perf_counter() - t0) * 1000.0))
            if hit is not None:
                coarse_hit = hit
                break

        if coarse_hit is not None:
            # A closer tile can sit no further out than the hit's Euclidean
            # distance, which is never less than its Chebyshev radius.
            reach = math.isqrt(_dist2(tx0, ty0, *coarse_hit))
            upper_bound = min(upper_bound, reach)

        # --- 2. Exact Phase ---
        best = self._exact_nearest(state, target_id, tx0, ty0, upper_bound)
        stride_stats = tuple(stride_stats)

        if best is None and coarse_hit is None:
            self.logger.debug(f"Biome {target_id} not found within {upper_bound} tiles of ({tx0}, {ty0}).")
            return NotFound(target_id, (tx0, ty0), upper_bound, len(state.memo), stride_stats)

        exact = True
        if best is None:
            # The exact scan covers the coarse hit, so this cannot happen.
            self.logger.error(
                f"Exact refinement for biome {target_id} found nothing inside the coarse bound; "
                f"returning the coarse hit {coarse_hit} as an inexact result."
            )
            best = coarse_hit
            exact = False

        self.hints[target_id] = best
        distance = math.sqrt(_dist2(tx0, ty0, *best))
        self.logger.debug(
            f"Biome {target_id} found at {best}, {distance:.2f} tiles from ({tx0}, {ty0}); "
            f"{len(state.memo)} tiles examined, bound {upper_bound}."
        )
        return SearchResult(target_id, best, distance, len(state.memo), upper_bound, exact, stride_stats)

    def _hinted_bound(self, state: _SearchState, target_id: int, tx0: int, ty0: int, max_radius: int) -> int:
        """Tightens the bound with the last hit for this id, if it still matches."""
        hint = self.hints.get(target_id)
        if hint is None:
            return max_radius
        if max(abs(hint[0] - tx0), abs(hint[1] - ty0)) > max_radius:
            return max_radius
        if state.id_at(*hint) != target_id:
            return max_radius
        return min(max_radius, math.isqrt(_dist2(tx0, ty0, *hint)))

    @staticmethod
    def _coarse_first_hit(state: _SearchState, target_id: int, tx0: int, ty0: int,
                          stride: int, upper_bound: int):
        """
        Scans rings at the given stride out to upper_bound and returns the
        first matching tile (or None) and the number of tiles checked.
        Tiles already visited by a larger stride are skipped.
        """
        checked = 0
        for r in range(upper_bound // stride + 1):
            for tile in iter_ring(tx0, ty0, r, stride):
                if tile in state.coarse_visited:
                    continue
                state.coarse_visited.add(tile)
                checked += 1
                if state.id_at(*tile) == target_id:
                    return tile, checked
        return None, checked

    @staticmethod
    def _exact_nearest(state: _SearchState, target_id: int, tx0: int, ty0: int, upper_bound: int):
        """
        Scans every ring at stride 1 out to upper_bound and returns the
        nearest matching tile by Euclidean distance, or None.
        """
        best = None
        best_d2 = None
        for r in range(upper_bound + 1):
            for tile in iter_ring(tx0, ty0, r, 1):
                if state.id_at(*tile) != target_id:
                    continue
                d2 = _dist2(tx0, ty0, *tile)
                if best_d2 is None or d2 < best_d2:
                    best, best_d2 = tile, d2

            # No tile in a later ring can be closer than one at distance <= r.
            if best is not None and math.sqrt(best_d2) <= r:
                break
        return best
