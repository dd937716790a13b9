# ABOUTME: Tests for tile lookup and the bounded/sparse tile predicates
# ABOUTME: Covers floor semantics, bounds handling and editing operations

import pytest
import numpy as np
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from uv_tile_eraser.tile_predicate import BoundedGrid, SparseSet, tile_of, tiles_of
from uv_tile_eraser.pipeline.config import TileRange


class TestTileLookup:
    """Tile coordinates are the floor of the UV."""

    def test_integer_boundary_belongs_to_upper_tile(self):
        assert tile_of((1.0, 2.0)) == (1, 2)

    def test_just_below_boundary(self):
        assert tile_of((0.999, 1.999)) == (0, 1)

    def test_negative_uvs(self):
        assert tile_of((-0.5, -1.0)) == (-1, -1)

    def test_vectorized_matches_scalar(self):
        uvs = np.array([[1.0, 2.0], [0.999, 1.999], [-0.25, 3.5], [7.0, -2.5]])
        expected = [tile_of(uv) for uv in uvs]
        np.testing.assert_array_equal(tiles_of(uvs), expected)


class TestBoundedGrid:
    """Tests for the fixed 4x4 grid."""

    def test_flags_indexed_v_major(self):
        flags = [False] * 16
        flags[2 * 4 + 1] = True
        grid = BoundedGrid(flags=flags)

        assert grid.is_marked(1, 2)
        assert not grid.is_marked(2, 1)

    def test_out_of_bounds_is_never_marked(self):
        grid = BoundedGrid.standard()
        grid.select_all()

        assert not grid.is_marked(-1, 0)
        assert not grid.is_marked(4, 0)
        assert not grid.is_marked(0, 4)
        assert grid.is_marked(3, 3)

    def test_wrong_flag_count(self):
        with pytest.raises(ValueError, match="Expected 16 flags"):
            BoundedGrid(flags=[True] * 15)

    def test_toggle_and_clear(self):
        grid = BoundedGrid.standard()

        assert grid.toggle(0, 3) is True
        assert grid.selected_tiles() == [(0, 3)]
        assert grid.toggle(0, 3) is False

        grid.select_all()
        assert grid.selected_count == 16
        grid.clear()
        assert grid.selected_count == 0

    def test_set_outside_grid_raises(self):
        grid = BoundedGrid.standard()
        with pytest.raises(IndexError):
            grid.set(4, 0)

    def test_vectorized_marked(self):
        grid = BoundedGrid.standard([(0, 0), (3, 2)])
        tiles = np.array([[0, 0], [3, 2], [2, 3], [-1, 0], [0, 7]])

        np.testing.assert_array_equal(grid.marked(tiles), [True, True, False, False, False])


class TestSparseSet:
    """Tests for the unbounded sparse predicate."""

    def test_absent_tiles_default_to_false(self):
        sparse = SparseSet.of([(-3, 5)])

        assert sparse.is_marked(-3, 5)
        assert not sparse.is_marked(0, 0)
        assert not sparse.is_marked(1000, -1000)

    def test_explicit_false_entry(self):
        sparse = SparseSet({(1, 1): False})
        assert not sparse.is_marked(1, 1)
        assert sparse.selected_count == 0

    def test_toggle_absent_tile_marks_it(self):
        sparse = SparseSet()

        assert sparse.toggle(-2, 0) is True
        assert sparse.toggle(-2, 0) is False
        assert sparse.mapping == {(-2, 0): False}

    def test_select_range(self):
        sparse = SparseSet()
        sparse.select_range(TileRange(-1, 0, 2, 3))

        assert sparse.selected_tiles() == [(-1, 2), (-1, 3), (0, 2), (0, 3)]

    def test_vectorized_marked_with_repeats(self):
        sparse = SparseSet.of([(5, 5), (-1, -1)])
        tiles = np.array([[5, 5], [0, 0], [5, 5], [-1, -1], [-1, 0]])

        np.testing.assert_array_equal(sparse.marked(tiles), [True, False, True, True, False])

    def test_empty_mapping(self):
        np.testing.assert_array_equal(SparseSet().marked(np.array([[0, 0], [1, 2]])), [False, False])
