# ABOUTME: Tile predicates deciding which UV tiles are marked for erasure
# ABOUTME: Bounded fixed-size grid and unbounded sparse set behind one interface

import numpy as np
from typing import Dict, Iterable, Tuple, Sequence, Optional


STANDARD_GRID_SIZE = 4

Tile = Tuple[int, int]


def tile_of(uv) -> Tile:
    """Tile containing a UV coordinate; tiles are unit squares keyed by floor."""
    return int(np.floor(uv[0])), int(np.floor(uv[1]))


def tiles_of(uvs: np.ndarray) -> np.ndarray:
    """Vectorized tile_of: (K, 2) float UVs -> (K, 2) int tiles."""
    return np.floor(np.asarray(uvs, dtype=np.float64)).astype(np.int64).reshape(-1, 2)


class TilePredicate:
    """
    Total function from integer tile (u, v) to "erase".

    Subclasses implement is_marked(); marked() is the vectorized form used by
    the filter and can be overridden for speed.
    """

    def is_marked(self, u: int, v: int) -> bool:
        raise NotImplementedError

    def marked(self, tiles: np.ndarray) -> np.ndarray:
        """Evaluate the predicate for a (K, 2) int array of tiles."""
        tiles = np.asarray(tiles, dtype=np.int64).reshape(-1, 2)
        return np.array([self.is_marked(int(u), int(v)) for u, v in tiles], dtype=bool)

    def selected_tiles(self) -> Sequence[Tile]:
        raise NotImplementedError

    @property
    def selected_count(self) -> int:
        return len(self.selected_tiles())


class BoundedGrid(TilePredicate):
    """
    Fixed-size grid of flags indexed v * width + u.

    Tiles outside 0..width-1 / 0..height-1 are never marked.
    """

    def __init__(self, width: int = STANDARD_GRID_SIZE, height: int = STANDARD_GRID_SIZE,
                 flags: Optional[Iterable[bool]] = None):
        if width <= 0 or height <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {width}x{height}")
        self.width = width
        self.height = height

        if flags is None:
            self.flags = np.zeros(width * height, dtype=bool)
        else:
            self.flags = np.array(list(flags), dtype=bool)
            if self.flags.shape != (width * height,):
                raise ValueError(
                    f"Expected {width * height} flags for a {width}x{height} grid, got {len(self.flags)}"
                )

    @classmethod
    def standard(cls, marked: Iterable[Tile] = ()) -> 'BoundedGrid':
        """4x4 grid with the given tiles marked."""
        grid = cls(STANDARD_GRID_SIZE, STANDARD_GRID_SIZE)
        for u, v in marked:
            grid.set(u, v, True)
        return grid

    def contains(self, u: int, v: int) -> bool:
        return 0 <= u < self.width and 0 <= v < self.height

    def index(self, u: int, v: int) -> int:
        if not self.contains(u, v):
            raise IndexError(f"Tile ({u}, {v}) outside {self.width}x{self.height} grid")
        return v * self.width + u

    def is_marked(self, u: int, v: int) -> bool:
        if not self.contains(u, v):
            return False
        return bool(self.flags[v * self.width + u])

    def marked(self, tiles: np.ndarray) -> np.ndarray:
        tiles = np.asarray(tiles, dtype=np.int64).reshape(-1, 2)
        u, v = tiles[:, 0], tiles[:, 1]
        inside = (u >= 0) & (u < self.width) & (v >= 0) & (v < self.height)
        result = np.zeros(len(tiles), dtype=bool)
        result[inside] = self.flags[v[inside] * self.width + u[inside]]
        return result

    def set(self, u: int, v: int, value: bool = True):
        self.flags[self.index(u, v)] = bool(value)

    def toggle(self, u: int, v: int) -> bool:
        """Flip one tile and return its new state."""
        i = self.index(u, v)
        self.flags[i] = not self.flags[i]
        return bool(self.flags[i])

    def clear(self):
        self.flags[:] = False

    def select_all(self):
        self.flags[:] = True

    def selected_tiles(self) -> Sequence[Tile]:
        idx = np.flatnonzero(self.flags)
        return [(int(i % self.width), int(i // self.width)) for i in idx]

    def __eq__(self, other):
        if not isinstance(other, BoundedGrid):
            return NotImplemented
        return (self.width, self.height) == (other.width, other.height) and np.array_equal(self.flags, other.flags)

    def __repr__(self):
        return f"BoundedGrid({self.width}x{self.height}, marked={self.selected_tiles()})"


class SparseSet(TilePredicate):
    """Unbounded mapping of tiles to flags; absent tiles are not marked."""

    def __init__(self, mapping: Optional[Dict[Tile, bool]] = None):
        self.mapping: Dict[Tile, bool] = {}
        for (u, v), value in (mapping or {}).items():
            self.mapping[(int(u), int(v))] = bool(value)

    @classmethod
    def of(cls, marked: Iterable[Tile]) -> 'SparseSet':
        return cls({(u, v): True for u, v in marked})

    def is_marked(self, u: int, v: int) -> bool:
        return self.mapping.get((u, v), False)

    def marked(self, tiles: np.ndarray) -> np.ndarray:
        tiles = np.asarray(tiles, dtype=np.int64).reshape(-1, 2)
        if len(tiles) == 0 or not self.mapping:
            return np.zeros(len(tiles), dtype=bool)
        # Dictionary lookups only once per distinct tile
        unique, inverse = np.unique(tiles, axis=0, return_inverse=True)
        lookup = np.array([self.mapping.get((int(u), int(v)), False) for u, v in unique], dtype=bool)
        return lookup[inverse.reshape(-1)]

    def set(self, u: int, v: int, value: bool = True):
        self.mapping[(u, v)] = bool(value)

    def toggle(self, u: int, v: int) -> bool:
        """Flip one tile (absent counts as unmarked) and return its new state."""
        value = not self.mapping.get((u, v), False)
        self.mapping[(u, v)] = value
        return value

    def clear(self):
        self.mapping.clear()

    def select_range(self, tile_range):
        """Mark every tile inside a TileRange."""
        for u, v in tile_range.tiles():
            self.mapping[(u, v)] = True

    def selected_tiles(self) -> Sequence[Tile]:
        return sorted(key for key, value in self.mapping.items() if value)

    def __eq__(self, other):
        if not isinstance(other, SparseSet):
            return NotImplemented
        return set(self.selected_tiles()) == set(other.selected_tiles())

    def __repr__(self):
        return f"SparseSet(marked={self.selected_tiles()})"
