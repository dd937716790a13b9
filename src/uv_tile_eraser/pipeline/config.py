# ABOUTME: Configuration dataclasses for tile erasure settings
# ABOUTME: Validates user inputs and provides defaults

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional, Tuple

from ..mesh_data import UV_CHANNEL_COUNT
from ..tile_filter import MaterialFilter, MaterialFilterMode, VertexMode, NO_MATERIAL_FILTER
from ..tile_predicate import BoundedGrid, SparseSet, TilePredicate, STANDARD_GRID_SIZE, Tile


UV_CHANNEL_NAMES = [f'UV{i}' for i in range(UV_CHANNEL_COUNT)]

# Advanced grid range limits
RANGE_LIMIT = 64
LARGE_GRID_TILES = 256
RANGE_KEYS = {'min_u', 'max_u', 'min_v', 'max_v'}


class InvalidChannelSelector(ValueError):
    """UV channel selector outside 0..7."""


def _clamp(value: int) -> int:
    return max(-RANGE_LIMIT, min(RANGE_LIMIT, int(value)))


@dataclass(frozen=True)
class TileRange:
    """
    Visible tile range of the advanced (sparse) grid, inclusive on both ends.

    Bounds are clamped to -64..64. A max below its min collapses to the min,
    giving a single row or column.
    """
    min_u: int = -4
    max_u: int = 4
    min_v: int = -4
    max_v: int = 4

    def __post_init__(self):
        min_u, min_v = _clamp(self.min_u), _clamp(self.min_v)
        object.__setattr__(self, 'min_u', min_u)
        object.__setattr__(self, 'min_v', min_v)
        object.__setattr__(self, 'max_u', max(min_u, _clamp(self.max_u)))
        object.__setattr__(self, 'max_v', max(min_v, _clamp(self.max_v)))

    @property
    def width(self) -> int:
        return self.max_u - self.min_u + 1

    @property
    def height(self) -> int:
        return self.max_v - self.min_v + 1

    @property
    def size(self) -> int:
        return self.width * self.height

    @property
    def is_large(self) -> bool:
        return self.size > LARGE_GRID_TILES

    def contains(self, u: int, v: int) -> bool:
        return self.min_u <= u <= self.max_u and self.min_v <= v <= self.max_v

    def tiles(self) -> Iterator[Tile]:
        """Every tile in the range, row by row from min_v."""
        for v in range(self.min_v, self.max_v + 1):
            for u in range(self.min_u, self.max_u + 1):
                yield (u, v)


STANDARD_RANGE = TileRange(0, STANDARD_GRID_SIZE - 1, 0, STANDARD_GRID_SIZE - 1)


@dataclass(frozen=True, eq=False)
class EraserConfig:
    """
    Settings for one eraser: which meshes, which tiles, and how.

    Compared and hashed by identity; the tile grids it holds stay editable.
    """

    targets: Tuple[Any, ...] = ()
    uv_channel: int = 0
    advanced_mode: bool = False
    tile_range: TileRange = field(default_factory=TileRange)
    tiles: BoundedGrid = field(default_factory=BoundedGrid.standard)
    custom_tiles: SparseSet = field(default_factory=SparseSet)
    vertex_mode: VertexMode = VertexMode.ANY
    material_filter: MaterialFilter = NO_MATERIAL_FILTER
    enabled: bool = True
    name: str = 'UV Tile Eraser'

    def __post_init__(self):
        """Validate configuration after initialization."""
        if isinstance(self.uv_channel, bool) or not isinstance(self.uv_channel, int) \
                or not 0 <= self.uv_channel < UV_CHANNEL_COUNT:
            raise InvalidChannelSelector(
                f"Invalid UV channel: {self.uv_channel} (must be 0..{UV_CHANNEL_COUNT - 1})"
            )

        if (self.tiles.width, self.tiles.height) != (STANDARD_GRID_SIZE, STANDARD_GRID_SIZE):
            raise ValueError(
                f"Standard grid must be {STANDARD_GRID_SIZE}x{STANDARD_GRID_SIZE}, "
                f"got {self.tiles.width}x{self.tiles.height}"
            )

        object.__setattr__(self, 'targets', tuple(self.targets))
        object.__setattr__(self, 'vertex_mode', VertexMode(self.vertex_mode))

        if self.advanced_mode and self.tile_range.is_large:
            logging.getLogger('uv_tile_eraser').warning(
                "Large tile grid on %s: %d tiles", self.name, self.tile_range.size
            )

    @property
    def predicate(self) -> TilePredicate:
        """Active tile predicate for the selected grid mode."""
        return self.custom_tiles if self.advanced_mode else self.tiles

    @property
    def visible_range(self) -> TileRange:
        return self.tile_range if self.advanced_mode else STANDARD_RANGE

    @property
    def uv_channel_name(self) -> str:
        return UV_CHANNEL_NAMES[self.uv_channel]

    @property
    def valid_target_count(self) -> int:
        """Number of configured targets that are not None."""
        return sum(1 for target in self.targets if target is not None)

    def describe_material_filter(self) -> str:
        return self.material_filter.describe()

    @classmethod
    def from_dict(cls, data: Dict[str, Any], targets: Tuple[Any, ...] = ()) -> 'EraserConfig':
        """
        Build a configuration from a JSON-compatible mapping.

        Recognized keys: uv_channel, advanced_mode, range ({min_u, max_u,
        min_v, max_v}), tiles (list of [u, v] or 16 booleans), custom_tiles
        (list of [u, v]), vertex_mode ('any'/'all'), materials (list),
        material_mode ('include'/'exclude'), enabled, name.

        Raises:
            ValueError: If a value is invalid or an unknown key is present
        """
        known = {'uv_channel', 'advanced_mode', 'range', 'tiles', 'custom_tiles', 'vertex_mode',
                 'materials', 'material_mode', 'enabled', 'name'}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")

        tiles = data.get('tiles', [])
        if len(tiles) == STANDARD_GRID_SIZE * STANDARD_GRID_SIZE and all(isinstance(t, bool) for t in tiles):
            grid = BoundedGrid(flags=tiles)
        else:
            marked = _parse_tiles(tiles)
            outside = [tile for tile in marked if not BoundedGrid().contains(*tile)]
            if outside:
                raise ValueError(
                    f"Tiles {outside} are outside the {STANDARD_GRID_SIZE}x{STANDARD_GRID_SIZE} "
                    f"standard grid; use advanced mode for other tiles"
                )
            grid = BoundedGrid.standard(marked)

        range_data = data.get('range', {})
        bad_range_keys = set(range_data) - RANGE_KEYS
        if bad_range_keys:
            raise ValueError(f"Unknown range keys: {sorted(bad_range_keys)}")

        material_filter = MaterialFilter(
            materials=frozenset(data.get('materials', [])),
            mode=MaterialFilterMode(data.get('material_mode', 'include')),
        )

        kwargs = {}
        if 'name' in data:
            kwargs['name'] = str(data['name'])

        return cls(
            targets=targets,
            uv_channel=channel_from_name(data.get('uv_channel', 0)),
            advanced_mode=bool(data.get('advanced_mode', False)),
            tile_range=TileRange(**range_data),
            tiles=grid,
            custom_tiles=SparseSet.of(_parse_tiles(data.get('custom_tiles', []))),
            vertex_mode=VertexMode(data.get('vertex_mode', 'any')),
            material_filter=material_filter,
            enabled=bool(data.get('enabled', True)),
            **kwargs
        )


def _parse_tiles(items) -> Tuple[Tile, ...]:
    parsed = []
    for item in items:
        if isinstance(item, str):
            item = item.split(',')
        if len(item) != 2:
            raise ValueError(f"Tile must be a (u, v) pair, got {item!r}")
        parsed.append((int(item[0]), int(item[1])))
    return tuple(parsed)


def parse_tile(text: str) -> Tile:
    """Parse a 'U,V' string into a tile."""
    return _parse_tiles([text])[0]


def channel_from_name(name: Optional[str]) -> int:
    """Accept 'UV3' or '3' and return the channel index."""
    if name is None:
        return 0
    text = str(name).upper()
    if text in UV_CHANNEL_NAMES:
        return UV_CHANNEL_NAMES.index(text)
    try:
        channel = int(text)
    except ValueError:
        raise InvalidChannelSelector(f"Invalid UV channel: {name}") from None
    if not 0 <= channel < UV_CHANNEL_COUNT:
        raise InvalidChannelSelector(f"Invalid UV channel: {name} (must be 0..{UV_CHANNEL_COUNT - 1})")
    return channel
