# ABOUTME: Mesh geometry value type with submeshes and up to 8 UV channels
# ABOUTME: Recomputes bounds, normals and tangents after topology changes

import numpy as np
from dataclasses import dataclass, field
from typing import List, Optional
from scipy import sparse


UV_CHANNEL_COUNT = 8


def _as_triangles(indices) -> np.ndarray:
    """Coerce a flat or (M, 3) index sequence into an (M, 3) int array."""
    arr = np.asarray(indices, dtype=np.int64)
    if arr.size % 3 != 0:
        raise ValueError(f"Triangle index count must be a multiple of 3, got {arr.size}")
    return arr.reshape(-1, 3)


@dataclass
class MeshGeometry:
    """
    Triangle mesh split into submeshes, one per material slot.

    Attributes:
        vertices: (N, 3) array of vertex positions
        submeshes: list of (M, 3) int arrays of vertex indices, in slot order
        uv_channels: list of UV_CHANNEL_COUNT arrays, each (N, 2) or empty (0, 2)
        normals: Optional (N, 3) per-vertex normals
        tangents: Optional (N, 4) per-vertex tangents (xyz + handedness sign)
        bounds: Optional (2, 3) axis-aligned bounding box [min, max]
        name: Mesh name
    """
    vertices: np.ndarray
    submeshes: List[np.ndarray]
    uv_channels: List[np.ndarray] = field(default_factory=list)
    normals: Optional[np.ndarray] = None
    tangents: Optional[np.ndarray] = None
    bounds: Optional[np.ndarray] = None
    name: str = ''

    def __post_init__(self):
        """Validate and normalize geometry arrays."""
        self.vertices = np.asarray(self.vertices, dtype=np.float64).reshape(-1, 3)
        n = len(self.vertices)

        self.submeshes = [_as_triangles(tris) for tris in self.submeshes]
        for i, tris in enumerate(self.submeshes):
            if len(tris) and (tris.min() < 0 or tris.max() >= n):
                raise ValueError(f"Submesh {i} references vertices outside 0..{n - 1}")

        if len(self.uv_channels) > UV_CHANNEL_COUNT:
            raise ValueError(f"At most {UV_CHANNEL_COUNT} UV channels supported, got {len(self.uv_channels)}")

        channels = []
        for i in range(UV_CHANNEL_COUNT):
            uv = self.uv_channels[i] if i < len(self.uv_channels) and self.uv_channels[i] is not None else ()
            uv = np.asarray(uv, dtype=np.float64).reshape(-1, 2)
            if len(uv) not in (0, n):
                raise ValueError(f"UV channel {i} has {len(uv)} entries for {n} vertices")
            channels.append(uv)
        self.uv_channels = channels

        if self.normals is not None:
            self.normals = np.asarray(self.normals, dtype=np.float64).reshape(-1, 3)
            assert self.normals.shape == (n, 3), "Normals must be (N, 3)"
        if self.tangents is not None:
            self.tangents = np.asarray(self.tangents, dtype=np.float64).reshape(-1, 4)
            assert self.tangents.shape == (n, 4), "Tangents must be (N, 4)"

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def submesh_count(self) -> int:
        return len(self.submeshes)

    @property
    def triangle_count(self) -> int:
        """Total number of triangles across all submeshes."""
        return sum(len(tris) for tris in self.submeshes)

    def get_uvs(self, channel: int) -> np.ndarray:
        """Return the (N, 2) UVs of a channel, or an empty (0, 2) array."""
        return self.uv_channels[channel]

    def copy(self, name: Optional[str] = None) -> 'MeshGeometry':
        """Create an independent duplicate, optionally renamed."""
        return MeshGeometry(
            vertices=self.vertices.copy(),
            submeshes=[tris.copy() for tris in self.submeshes],
            uv_channels=[uv.copy() for uv in self.uv_channels],
            normals=self.normals.copy() if self.normals is not None else None,
            tangents=self.tangents.copy() if self.tangents is not None else None,
            bounds=self.bounds.copy() if self.bounds is not None else None,
            name=self.name if name is None else name,
        )

    def all_triangles(self) -> np.ndarray:
        """Stack every submesh into one (M, 3) array."""
        if not self.submeshes:
            return np.zeros((0, 3), dtype=np.int64)
        return np.vstack(self.submeshes)

    def recalculate_bounds(self):
        """Axis-aligned bounds over all vertex positions."""
        if self.vertex_count == 0:
            self.bounds = np.zeros((2, 3))
        else:
            self.bounds = np.array([self.vertices.min(axis=0), self.vertices.max(axis=0)])

    def recalculate_normals(self):
        """
        Area-weighted vertex normals from the current triangles.

        Vertices no longer referenced by any triangle keep their previous
        normal (or zero when none existed).
        """
        faces = self.all_triangles()
        n = self.vertex_count
        previous = self.normals if self.normals is not None else np.zeros((n, 3))

        if len(faces) == 0:
            self.normals = previous.copy()
            return

        # Cross product length is twice the area, so this is area weighting
        tri = self.vertices[faces]
        face_normals = np.cross(tri[:, 1] - tri[:, 0], tri[:, 2] - tri[:, 0])

        accum = self._scatter_to_vertices(faces, face_normals)
        lengths = np.linalg.norm(accum, axis=1)
        valid = lengths > 1e-12
        normals = np.zeros((n, 3))
        normals[valid] = accum[valid] / lengths[valid, None]

        referenced = np.zeros(n, dtype=bool)
        referenced[faces.reshape(-1)] = True
        normals[~referenced] = previous[~referenced]
        self.normals = normals

    def recalculate_tangents(self, uv_channel: int = 0):
        """
        Per-vertex tangents from positions, normals and UV channel 0.

        Left untouched when the channel has no UVs.
        """
        uvs = self.get_uvs(uv_channel)
        if len(uvs) == 0:
            return
        if self.normals is None:
            self.recalculate_normals()

        faces = self.all_triangles()
        n = self.vertex_count
        tangents = np.zeros((n, 4))
        tangents[:, 0] = 1.0
        tangents[:, 3] = 1.0
        if len(faces) == 0:
            self.tangents = tangents
            return

        p = self.vertices[faces]
        t = uvs[faces]
        e1 = p[:, 1] - p[:, 0]
        e2 = p[:, 2] - p[:, 0]
        d1 = t[:, 1] - t[:, 0]
        d2 = t[:, 2] - t[:, 0]

        det = d1[:, 0] * d2[:, 1] - d2[:, 0] * d1[:, 1]
        r = np.zeros_like(det)
        ok = np.abs(det) > 1e-12
        r[ok] = 1.0 / det[ok]

        sdir = (e1 * d2[:, 1:2] - e2 * d1[:, 1:2]) * r[:, None]
        tdir = (e2 * d1[:, 0:1] - e1 * d2[:, 0:1]) * r[:, None]

        tan1 = self._scatter_to_vertices(faces, sdir)
        tan2 = self._scatter_to_vertices(faces, tdir)

        # Gram-Schmidt orthogonalize against the normal
        nrm = self.normals
        ortho = tan1 - nrm * np.sum(nrm * tan1, axis=1, keepdims=True)
        lengths = np.linalg.norm(ortho, axis=1)
        valid = lengths > 1e-12

        tangents[valid, :3] = ortho[valid] / lengths[valid, None]
        handed = np.sum(np.cross(nrm, tan1) * tan2, axis=1)
        tangents[valid, 3] = np.where(handed[valid] < 0.0, -1.0, 1.0)

        if self.tangents is not None:
            tangents[~valid] = self.tangents[~valid]
        self.tangents = tangents

    def _scatter_to_vertices(self, faces: np.ndarray, values: np.ndarray) -> np.ndarray:
        """Sum a per-face (M, K) value onto each of the face's three vertices."""
        m = len(faces)
        rows = faces.reshape(-1)
        cols = np.repeat(np.arange(m), 3)
        incidence = sparse.coo_matrix(
            (np.ones(len(rows)), (rows, cols)),
            shape=(self.vertex_count, m),
        ).tocsr()
        return np.asarray(incidence @ values)

