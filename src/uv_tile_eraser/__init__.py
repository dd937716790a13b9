# ABOUTME: Package initialization for the UV tile eraser
# ABOUTME: Exports the filter, predicates and geometry type for easy importing

from .mesh_data import MeshGeometry, UV_CHANNEL_COUNT
from .tile_predicate import TilePredicate, BoundedGrid, SparseSet, tile_of, tiles_of
from .tile_filter import (
    erase_tiles,
    erase_mask,
    FilterResult,
    MaterialFilter,
    MaterialFilterMode,
    VertexMode,
)

__version__ = "0.1.0"

__all__ = [
    "MeshGeometry",
    "UV_CHANNEL_COUNT",
    "TilePredicate",
    "BoundedGrid",
    "SparseSet",
    "tile_of",
    "tiles_of",
    "erase_tiles",
    "erase_mask",
    "FilterResult",
    "MaterialFilter",
    "MaterialFilterMode",
    "VertexMode",
]
