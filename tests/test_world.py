"""Integration tests for the World facade."""

import numpy as np
import pytest

from biome_world import World
from biome_world.biomes import DEFAULT_PROTOTYPES
from biome_world.color_maps import FALLBACK_COLOR
from biome_world.exceptions import InvalidModeError

TABLE = """id,label,anchor,temp,moist,elev,rough,sal,fert,fire
31,Everything,Here,0.5,0.5,0.5,0.5,0.5,0.5,0.5
"""


@pytest.fixture
def world(logger):
    return World({'seed': "facade-test", 'region_size': 16}, logger)


class TestWorld:
    """Test the public World interface end to end."""

    def test_default_construction(self):
        world = World()
        assert world.mode == "biomes"
        assert world.regions.region_size == 64

    def test_classify_at_matches_pipeline(self, world):
        axes = world.sample_axes(10, 20)
        assert world.classify_at(10, 20) == world.classify(axes)
        assert world.classify_id_at(10, 20) == world.classify(axes).id

    def test_describe_tile(self, world):
        info = world.describe_tile(-17, 5)
        assert info['tile'] == (-17, 5)
        assert info['region'] == (-2, 0)
        assert set(info['axes']) == {
            'temperature', 'moisture', 'elevation', 'roughness', 'salinity', 'fertility', 'fire'
        }
        assert info['biome']['id'] in {p.id for p in DEFAULT_PROTOTYPES}

    def test_region_raster(self, world):
        raster = world.get_region_raster(0, 0)
        assert raster.shape == (16, 16, 3)
        assert world.get_region_raster(0, 0) is raster

    def test_set_mode(self, world):
        assert world.set_mode("temp") is True
        assert world.mode == "temperature"
        with pytest.raises(InvalidModeError):
            world.set_mode("nope")
        assert world.mode == "temperature"

    def test_find_nearest_biome_of_start(self, world):
        start_id = world.classify_id_at(0, 0)
        result = world.find_nearest(start_id, (0, 0), 32)
        assert result.found
        assert result.tile == (0, 0)
        assert result.distance == 0.0

    def test_find_nearest_result_really_matches(self, world):
        target = world.classify_id_at(40, -12)
        result = world.find_nearest(target, (0, 0), 64)
        assert result.found
        assert world.classify_id_at(*result.tile) == target
        assert result.distance <= np.hypot(40, -12)

    def test_load_prototypes_clears_rasters(self, world, tmp_path):
        world.get_region_raster(0, 0)
        path = tmp_path / "biomes.csv"
        path.write_text(TABLE, encoding="utf-8")

        assert world.load_prototypes(path) is True
        assert len(world.regions) == 0
        new = world.get_region_raster(0, 0)
        # Id 31 has no palette entry, so every tile is the fallback gray.
        assert np.all(new == np.array(FALLBACK_COLOR, dtype=np.uint8))
        assert world.classify_at(3, 3).id == 31

    def test_failed_load_keeps_rasters(self, world, tmp_path):
        raster = world.get_region_raster(0, 0)
        assert world.load_prototypes(tmp_path / "missing.csv") is False
        assert world.get_region_raster(0, 0) is raster

    def test_prototypes_path_in_config(self, logger, tmp_path):
        path = tmp_path / "biomes.csv"
        path.write_text(TABLE, encoding="utf-8")
        world = World({'seed': 1, 'prototypes_path': str(path)}, logger)
        assert [p.id for p in world.classifier.prototypes] == [31]

    def test_replace_prototypes_drops_rasters_and_hints(self, world):
        world.get_region_raster(0, 0)
        target = world.classify_id_at(0, 0)
        world.find_nearest(target, (0, 0), 8)
        assert world.search.hints

        only = DEFAULT_PROTOTYPES[2]
        world.replace_prototypes([only])
        assert len(world.regions) == 0
        assert world.search.hints == {}
        assert np.all(world.get_region_raster(0, 0) == np.array(only.color, dtype=np.uint8))

        world.reset_prototypes()
        assert world.classifier.prototypes == DEFAULT_PROTOTYPES
