# ABOUTME: Tests for eraser configuration validation and parsing
# ABOUTME: Channel checks, range normalization and JSON-style construction

import pytest
import dataclasses
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from uv_tile_eraser.pipeline.config import (
    EraserConfig,
    InvalidChannelSelector,
    TileRange,
    channel_from_name,
    parse_tile,
)
from uv_tile_eraser.tile_predicate import BoundedGrid, SparseSet
from uv_tile_eraser.tile_filter import MaterialFilterMode, VertexMode


class TestEraserConfig:

    def test_defaults(self):
        config = EraserConfig()

        assert config.uv_channel == 0
        assert config.uv_channel_name == 'UV0'
        assert not config.advanced_mode
        assert config.vertex_mode == VertexMode.ANY
        assert not config.material_filter.active
        assert config.enabled
        assert config.predicate is config.tiles

    @pytest.mark.parametrize('channel', [-1, 8, 100])
    def test_channel_out_of_range(self, channel):
        with pytest.raises(InvalidChannelSelector):
            EraserConfig(uv_channel=channel)

    def test_invalid_channel_is_value_error(self):
        with pytest.raises(ValueError):
            EraserConfig(uv_channel=8)

    def test_advanced_mode_uses_sparse_tiles(self):
        config = EraserConfig(advanced_mode=True, custom_tiles=SparseSet.of([(-5, 2)]))

        assert config.predicate.is_marked(-5, 2)
        assert config.visible_range == config.tile_range

    def test_standard_grid_must_be_4x4(self):
        with pytest.raises(ValueError, match="4x4"):
            EraserConfig(tiles=BoundedGrid(2, 2))

    def test_frozen(self):
        config = EraserConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.uv_channel = 3

    def test_vertex_mode_from_string(self):
        assert EraserConfig(vertex_mode='all').vertex_mode == VertexMode.ALL

    def test_valid_target_count(self):
        config = EraserConfig(targets=[object(), None, object()])
        assert config.valid_target_count == 2
        assert isinstance(config.targets, tuple)

    def test_hashable(self):
        config = EraserConfig(tiles=BoundedGrid.standard([(0, 0)]))

        assert hash(config) == hash(config)
        assert config in {config}
        assert EraserConfig() != EraserConfig()


class TestTileRange:

    def test_max_below_min_collapses(self):
        tile_range = TileRange(min_u=2, max_u=-3, min_v=1, max_v=0)

        assert (tile_range.min_u, tile_range.max_u) == (2, 2)
        assert (tile_range.min_v, tile_range.max_v) == (1, 1)
        assert tile_range.size == 1

    def test_clamped_to_limits(self):
        tile_range = TileRange(min_u=-100, max_u=100, min_v=0, max_v=0)
        assert (tile_range.min_u, tile_range.max_u) == (-64, 64)

    def test_large_grid(self):
        assert TileRange(-8, 8, -8, 8).is_large
        assert not TileRange().is_large

    def test_tiles_iterates_rows(self):
        assert list(TileRange(0, 1, 0, 1).tiles()) == [(0, 0), (1, 0), (0, 1), (1, 1)]


class TestFromDict:

    def test_full_mapping(self):
        config = EraserConfig.from_dict({
            'uv_channel': 'UV2',
            'tiles': [[0, 0], '3,3'],
            'vertex_mode': 'all',
            'materials': ['Skin'],
            'material_mode': 'exclude',
            'name': 'Hide feet',
        })

        assert config.uv_channel == 2
        assert config.tiles.selected_tiles() == [(0, 0), (3, 3)]
        assert config.vertex_mode == VertexMode.ALL
        assert config.material_filter.materials == frozenset({'Skin'})
        assert config.material_filter.mode == MaterialFilterMode.EXCLUDE
        assert config.name == 'Hide feet'

    def test_boolean_flags(self):
        flags = [False] * 16
        flags[5] = True
        config = EraserConfig.from_dict({'tiles': flags})

        assert config.tiles.selected_tiles() == [(1, 1)]

    def test_advanced(self):
        config = EraserConfig.from_dict({
            'advanced_mode': True,
            'range': {'min_u': -2, 'max_u': 2, 'min_v': -2, 'max_v': 2},
            'custom_tiles': [[-2, -2]],
        })

        assert config.predicate.is_marked(-2, -2)
        assert config.tile_range.size == 25

    def test_unknown_key(self):
        with pytest.raises(ValueError, match="Unknown configuration keys"):
            EraserConfig.from_dict({'tile': [[0, 0]]})

    def test_bad_channel(self):
        with pytest.raises(InvalidChannelSelector):
            EraserConfig.from_dict({'uv_channel': 9})

    @pytest.mark.parametrize('tile', [[5, 5], [-1, 0], '4,0'])
    def test_standard_tile_outside_grid(self, tile):
        with pytest.raises(ValueError, match="outside the 4x4 standard grid"):
            EraserConfig.from_dict({'tiles': [tile]})

    def test_outside_tiles_allowed_in_advanced_mode(self):
        config = EraserConfig.from_dict({'advanced_mode': True, 'custom_tiles': [[5, 5], [-1, 0]]})
        assert config.predicate.selected_tiles() == [(-1, 0), (5, 5)]

    def test_unknown_range_key(self):
        with pytest.raises(ValueError, match="Unknown range keys"):
            EraserConfig.from_dict({'range': {'min_x': 1}})


def test_channel_from_name():
    assert channel_from_name('uv7') == 7
    assert channel_from_name('3') == 3
    assert channel_from_name(None) == 0
    with pytest.raises(InvalidChannelSelector):
        channel_from_name('UV8')
    with pytest.raises(InvalidChannelSelector):
        channel_from_name('abc')


def test_parse_tile():
    assert parse_tile('-1,4') == (-1, 4)
    with pytest.raises(ValueError):
        parse_tile('1,2,3')
