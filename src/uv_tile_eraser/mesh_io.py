# ABOUTME: Mesh file loading and saving through trimesh
# ABOUTME: Maps each scene geometry to one submesh with its material slot

import logging
import numpy as np
import trimesh
from pathlib import Path
from typing import Hashable, List, Optional, Sequence, Tuple, Union

from .mesh_data import MeshGeometry


SUPPORTED_EXTENSIONS = {'.obj', '.glb', '.gltf', '.ply', '.off', '.stl'}


def _material_name(geometry: trimesh.Trimesh, fallback: str) -> str:
    material = getattr(geometry.visual, 'material', None)
    name = getattr(material, 'name', None)
    return name if name else fallback


def _uv_of(geometry: trimesh.Trimesh) -> Optional[np.ndarray]:
    uv = getattr(geometry.visual, 'uv', None)
    if uv is None or len(uv) != len(geometry.vertices):
        return None
    return np.asarray(uv, dtype=np.float64)


def load_mesh(path: Union[str, Path]) -> Tuple[MeshGeometry, List[str]]:
    """
    Load a mesh file as a multi-submesh geometry.

    Every triangle geometry in the file becomes one submesh. Vertex buffers
    are concatenated in file order; UVs (when present) go to channel 0.

    Args:
        path: Path to mesh file (.obj, .glb, .ply, ...)

    Returns:
        Tuple of (geometry, material name per submesh)

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file has an unsupported extension or no triangles
    """
    logger = logging.getLogger('uv_tile_eraser')
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Mesh not found: {path}")
    if path.suffix.lower() not in SUPPORTED_EXTENSIONS:
        raise ValueError(
            f"Unsupported file type: {path.suffix}\n"
            f"Supported: {sorted(SUPPORTED_EXTENSIONS)}"
        )

    scene = trimesh.load(str(path), force='scene', process=False)

    vertices, submeshes, uvs, materials = [], [], [], []
    offset = 0
    for key, geometry in scene.geometry.items():
        if not isinstance(geometry, trimesh.Trimesh):
            logger.debug("Skipping non-triangle geometry %s", key)
            continue

        vertices.append(np.asarray(geometry.vertices, dtype=np.float64))
        submeshes.append(np.asarray(geometry.faces, dtype=np.int64) + offset)
        uvs.append(_uv_of(geometry))
        materials.append(_material_name(geometry, key))
        offset += len(geometry.vertices)

    if not submeshes:
        raise ValueError(f"No triangle geometry found in {path}")

    with_uv = [uv is not None for uv in uvs]
    if all(with_uv):
        channels = [np.vstack(uvs)]
    elif any(with_uv):
        logger.warning("Some submeshes of %s have no UVs; filling with (0, 0)", path.name)
        channels = [np.vstack([
            uv if uv is not None else np.zeros((len(v), 2))
            for uv, v in zip(uvs, vertices)
        ])]
    else:
        channels = []

    mesh = MeshGeometry(
        vertices=np.vstack(vertices),
        submeshes=submeshes,
        uv_channels=channels,
        name=path.stem,
    )
    mesh.recalculate_bounds()
    mesh.recalculate_normals()
    mesh.recalculate_tangents()

    logger.debug("Loaded %s: %d vertices, %d triangles in %d submeshes",
                 path.name, mesh.vertex_count, mesh.triangle_count, mesh.submesh_count)
    return mesh, materials


def to_scene(mesh: MeshGeometry, materials: Optional[Sequence[Hashable]] = None) -> trimesh.Scene:
    """
    Build a trimesh scene with one geometry per non-empty submesh.

    Each geometry keeps only the vertices its triangles reference.
    """
    scene = trimesh.Scene()
    uv = mesh.get_uvs(0)

    for i, triangles in enumerate(mesh.submeshes):
        if len(triangles) == 0:
            continue

        used, remapped = np.unique(triangles.reshape(-1), return_inverse=True)
        name = str(materials[i]) if materials is not None and i < len(materials) else f'submesh_{i}'

        visual = None
        if len(uv):
            visual = trimesh.visual.TextureVisuals(
                uv=uv[used],
                material=trimesh.visual.material.SimpleMaterial(name=name),
            )

        geometry = trimesh.Trimesh(
            vertices=mesh.vertices[used],
            faces=remapped.reshape(-1, 3),
            vertex_normals=mesh.normals[used] if mesh.normals is not None else None,
            visual=visual,
            process=False,
        )
        scene.add_geometry(geometry, geom_name=name)

    return scene


def _vertex_only_scene(mesh: MeshGeometry) -> trimesh.Scene:
    """Scene holding the vertex buffer with no faces, for fully erased meshes."""
    scene = trimesh.Scene()
    geometry = trimesh.Trimesh(
        vertices=mesh.vertices,
        faces=np.zeros((0, 3), dtype=np.int64),
        process=False,
    )
    scene.add_geometry(geometry, geom_name=mesh.name or "mesh")
    return scene


def save_mesh(mesh: MeshGeometry, path: Union[str, Path],
              materials: Optional[Sequence[Hashable]] = None) -> Path:
    """
    Export a geometry, one scene geometry per submesh.

    Args:
        mesh: Geometry to save
        path: Output path; format follows the extension
        materials: Material name per submesh slot

    Returns:
        The output path
    """
    logger = logging.getLogger('uv_tile_eraser')
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    scene = to_scene(mesh, materials)
    if len(scene.geometry) == 0:
        logger.warning("Every triangle of %s was erased; saving vertices only", mesh.name)
        scene = _vertex_only_scene(mesh)

    scene.export(str(path))
    logger.info("Saved %s (%d triangles)", path, mesh.triangle_count)
    return path
