# ABOUTME: Removes triangles whose UVs fall in marked tiles
# ABOUTME: Stable per-submesh filter with vertex-mode and material filtering

import logging
import numpy as np
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Hashable, Optional, Sequence

from .mesh_data import MeshGeometry, UV_CHANNEL_COUNT
from .tile_predicate import TilePredicate, tiles_of


ERASED_SUFFIX = '_UVErased'


class VertexMode(str, Enum):
    """How per-vertex tile membership combines into a per-triangle decision."""
    ANY = 'any'
    ALL = 'all'


class MaterialFilterMode(str, Enum):
    INCLUDE = 'include'
    EXCLUDE = 'exclude'


@dataclass(frozen=True)
class MaterialFilter:
    """
    Restricts which submeshes are processed, by their material.

    INCLUDE processes only submeshes whose material is in the set, EXCLUDE
    processes all others. An empty set disables filtering.
    """
    materials: FrozenSet[Hashable] = field(default_factory=frozenset)
    mode: MaterialFilterMode = MaterialFilterMode.INCLUDE

    def __post_init__(self):
        object.__setattr__(self, 'materials', frozenset(self.materials))
        object.__setattr__(self, 'mode', MaterialFilterMode(self.mode))

    @property
    def active(self) -> bool:
        return len(self.materials) > 0

    def should_process(self, submesh: int, materials: Optional[Sequence[Hashable]]) -> bool:
        """
        Whether a submesh is subject to erasure.

        Submeshes without a material slot (no material array, or an index
        past its end) are always processed.
        """
        if not self.active or materials is None or submesh >= len(materials):
            return True
        in_filter = materials[submesh] in self.materials
        if self.mode == MaterialFilterMode.INCLUDE:
            return in_filter
        return not in_filter

    def describe(self) -> str:
        """Human-readable summary of what will be erased."""
        if not self.active:
            return "Will erase faces from all materials"
        if self.mode == MaterialFilterMode.INCLUDE:
            return f"Will only erase faces using the {len(self.materials)} specified material(s)"
        return f"Will erase all faces EXCEPT those using the {len(self.materials)} specified material(s)"


NO_MATERIAL_FILTER = MaterialFilter()


@dataclass
class FilterResult:
    """Outcome of one erase_tiles call."""
    mesh: MeshGeometry
    erased_count: int
    missing_uvs: bool = False

    def __iter__(self):
        # Allows `mesh, erased = erase_tiles(...)`
        yield self.mesh
        yield self.erased_count


def erase_mask(triangles: np.ndarray, uvs: np.ndarray, predicate: TilePredicate,
               vertex_mode: VertexMode = VertexMode.ANY) -> np.ndarray:
    """
    Per-triangle erase decision.

    Args:
        triangles: (M, 3) vertex indices
        uvs: (N, 2) UVs of the selected channel
        predicate: Tile predicate
        vertex_mode: ANY or ALL

    Returns:
        (M,) bool array, True where the triangle is erased
    """
    triangles = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
    if len(triangles) == 0:
        return np.zeros(0, dtype=bool)

    corner_tiles = tiles_of(uvs[triangles.reshape(-1)])
    corner_marked = predicate.marked(corner_tiles).reshape(-1, 3)

    if VertexMode(vertex_mode) == VertexMode.ANY:
        return corner_marked.any(axis=1)
    return corner_marked.all(axis=1)


def erase_tiles(mesh: MeshGeometry,
                uv_channel: int,
                predicate: TilePredicate,
                vertex_mode: VertexMode = VertexMode.ANY,
                materials: Optional[Sequence[Hashable]] = None,
                material_filter: MaterialFilter = NO_MATERIAL_FILTER,
                name: Optional[str] = None) -> FilterResult:
    """
    Remove triangles lying in marked UV tiles.

    The input mesh is never modified. Triangles are kept in their original
    order and winding; only submesh membership changes, after which bounds,
    normals and tangents are recomputed.

    Args:
        mesh: Source geometry
        uv_channel: UV channel used for tile lookup (0..7)
        predicate: Which tiles to erase
        vertex_mode: ANY erases a triangle when one corner is in a marked
                     tile, ALL only when all three are
        materials: Material per submesh slot (index-aligned with submeshes)
        material_filter: Restricts which submeshes are processed
        name: Name for the new mesh (default: source name + '_UVErased')

    Returns:
        FilterResult with the new mesh and the number of erased triangles.
        When the channel has no UVs the source mesh is returned as-is with
        missing_uvs set.
    """
    logger = logging.getLogger('uv_tile_eraser')

    if not 0 <= uv_channel < UV_CHANNEL_COUNT:
        raise ValueError(f"UV channel must be in 0..{UV_CHANNEL_COUNT - 1}, got {uv_channel}")

    uvs = mesh.get_uvs(uv_channel)
    if len(uvs) == 0:
        return FilterResult(mesh=mesh, erased_count=0, missing_uvs=True)

    result = mesh.copy(name=name if name is not None else mesh.name + ERASED_SUFFIX)
    erased = 0

    for i, triangles in enumerate(mesh.submeshes):
        if not material_filter.should_process(i, materials):
            logger.debug("Submesh %d skipped by material filter", i)
            continue

        mask = erase_mask(triangles, uvs, predicate, vertex_mode)
        result.submeshes[i] = triangles[~mask].copy()
        erased += int(mask.sum())

    result.recalculate_bounds()
    result.recalculate_normals()
    result.recalculate_tangents()

    return FilterResult(mesh=result, erased_count=erased)
