"""Tests for the nearest-biome search."""

import logging
import math
from collections import Counter

import pytest

from biome_world.search import NearestBiomeSearch, NotFound, SearchResult, coarse_strides, iter_ring

TARGET = 7


class CountingField:
    """A synthetic classifier: listed tiles have the target id, all others 0."""

    def __init__(self, matches):
        self.matches = set(matches)
        self.calls = Counter()

    def __call__(self, tx, ty):
        self.calls[(tx, ty)] += 1
        return TARGET if (tx, ty) in self.matches else 0


def make_search(matches, logger, **kwargs):
    field = CountingField(matches)
    return NearestBiomeSearch(field, logger, **kwargs), field


class TestRings:
    def test_ring_zero_is_the_start(self):
        assert list(iter_ring(3, -2, 0)) == [(3, -2)]

    @pytest.mark.parametrize("r", [1, 2, 5])
    def test_ring_is_the_chebyshev_perimeter(self, r):
        tiles = list(iter_ring(0, 0, r))
        assert len(tiles) == len(set(tiles)) == 8 * r
        assert all(max(abs(x), abs(y)) == r for x, y in tiles)

    def test_strided_ring(self):
        tiles = set(iter_ring(10, 10, 1, 4))
        assert tiles == {(6, 6), (10, 6), (14, 6), (6, 10), (14, 10), (6, 14), (10, 14), (14, 14)}

    def test_strides(self):
        assert coarse_strides(64) == [64, 32, 16, 8, 4, 2]
        assert coarse_strides(10) == [10, 8, 5, 4, 2]


class TestNearestBiomeSearch:
    """Test correctness, bounds and memoization of the search."""

    def test_single_match_on_axis(self, logger):
        search, _ = make_search({(50, 0)}, logger)
        result = search.find_nearest(TARGET, (0, 0), 100)
        assert isinstance(result, SearchResult)
        assert result.found
        assert result.tile == (50, 0)
        assert result.distance == 50.0
        assert result.exact is True

    def test_bound_is_respected(self, logger):
        search, _ = make_search({(20, 0)}, logger)
        result = search.find_nearest(TARGET, (0, 0), 10)
        assert isinstance(result, NotFound)
        assert not result.found
        assert result.bounded == 10

    def test_no_tile_is_classified_twice(self, logger):
        search, field = make_search({(37, -23), (-41, 12)}, logger)
        result = search.find_nearest(TARGET, (0, 0), 100)
        assert max(field.calls.values()) == 1
        assert result.tiles_examined == len(field.calls)

    def test_not_found_is_memoized_too(self, logger):
        search, field = make_search(set(), logger)
        result = search.find_nearest(TARGET, (0, 0), 12)
        assert max(field.calls.values()) == 1
        assert result.tiles_examined == len(field.calls) == 25 * 25

    def test_returns_euclidean_nearest_not_first_ring_hit(self, logger):
        # (10, 10) is on a nearer Chebyshev ring but farther away.
        search, _ = make_search({(10, 10), (13, 0)}, logger)
        result = search.find_nearest(TARGET, (0, 0), 100)
        assert result.tile == (13, 0)
        assert result.distance == 13.0

    def test_equal_distance_keeps_first_found(self, logger):
        search, _ = make_search({(3, 4), (5, 0)}, logger)
        result = search.find_nearest(TARGET, (0, 0), 100)
        assert result.tile == (3, 4)
        assert result.distance == 5.0

    def test_start_tile_match(self, logger):
        search, field = make_search({(4, 4)}, logger)
        result = search.find_nearest(TARGET, (4, 4), 100)
        assert result.tile == (4, 4)
        assert result.distance == 0.0
        assert result.tiles_examined == 1

    def test_negative_radius_is_clamped(self, logger):
        search, _ = make_search({(1, 0)}, logger)
        result = search.find_nearest(TARGET, (0, 0), -5)
        assert isinstance(result, NotFound)
        assert result.bounded == 0

    def test_stride_stats_are_recorded(self, logger):
        search, _ = make_search({(50, 0)}, logger)
        result = search.find_nearest(TARGET, (0, 0), 100)
        assert [s.stride for s in result.stride_stats] == [64, 32, 16, 8, 4, 2]
        assert all(s.tiles_checked > 0 and s.elapsed_ms >= 0.0 for s in result.stride_stats)


class TestHints:
    """Test that the last-hit hint only ever tightens the bound."""

    MATCHES = {(30, 0), (-5, 5), (60, 61)}

    def test_hint_is_recorded(self, logger):
        search, _ = make_search(self.MATCHES, logger)
        result = search.find_nearest(TARGET, (0, 0), 100)
        assert search.hints[TARGET] == result.tile == (-5, 5)

    @pytest.mark.parametrize("start", [(25, 0), (58, 58), (-20, 0), (100, -100)])
    def test_hint_never_changes_the_answer(self, logger, start):
        hinted, _ = make_search(self.MATCHES, logger)
        hinted.find_nearest(TARGET, (0, 0), 100)
        fresh, _ = make_search(self.MATCHES, logger)

        with_hint = hinted.find_nearest(TARGET, start, 120)
        without_hint = fresh.find_nearest(TARGET, start, 120)
        assert with_hint.tile == without_hint.tile
        assert with_hint.distance == without_hint.distance

    def test_hint_tightens_the_bound(self, logger):
        search, _ = make_search(self.MATCHES, logger)
        search.find_nearest(TARGET, (0, 0), 100)
        result = search.find_nearest(TARGET, (1, 0), 100)
        assert result.bounded <= math.isqrt(6 * 6 + 5 * 5)

    def test_stale_hint_is_ignored(self, logger):
        search, _ = make_search({(50, 0)}, logger, hints={TARGET: (1, 1)})
        result = search.find_nearest(TARGET, (0, 0), 100)
        assert result.tile == (50, 0)

    def test_reset_hints(self, logger):
        search, _ = make_search(self.MATCHES, logger)
        search.find_nearest(TARGET, (0, 0), 100)
        search.reset_hints()
        assert search.hints == {}


class TestUnreachableFallback:
    def test_fallback_returns_inexact_coarse_hit(self, logger, monkeypatch, caplog):
        search, _ = make_search({(50, 0)}, logger)
        monkeypatch.setattr(NearestBiomeSearch, "_exact_nearest", staticmethod(lambda *args: None))
        with caplog.at_level(logging.ERROR, logger=logger.name):
            result = search.find_nearest(TARGET, (0, 0), 100)
        assert result.found
        assert result.tile == (50, 0)
        assert result.exact is False
        assert "inexact" in caplog.text
