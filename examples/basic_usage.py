#!/usr/bin/env python3
# ABOUTME: Basic usage examples for the UV tile eraser
# ABOUTME: Demonstrates the filter on its own and through the pipeline

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from uv_tile_eraser import BoundedGrid, SparseSet, VertexMode, MaterialFilter, erase_tiles
from uv_tile_eraser.mesh_io import load_mesh, save_mesh
from uv_tile_eraser.pipeline import EraserConfig, ErasePipeline, MeshRenderer, SceneNode


def example_direct_filter():
    """Erase tile (0,0) from a mesh file."""
    print("Example 1: Direct Filter")
    print("-" * 50)

    mesh, materials = load_mesh('input.glb')

    result = erase_tiles(mesh, uv_channel=0, predicate=BoundedGrid.standard([(0, 0)]),
                         vertex_mode=VertexMode.ANY, materials=materials)
    save_mesh(result.mesh, 'output.glb', materials)

    print(f"Erased {result.erased_count} faces")
    print()


def example_sparse_tiles():
    """Erase tiles outside the 0-3 range, only where all corners are inside."""
    print("Example 2: Advanced Tiles")
    print("-" * 50)

    mesh, materials = load_mesh('input.glb')

    result = erase_tiles(mesh, 1, SparseSet.of([(-1, 0), (5, 2)]), VertexMode.ALL)
    if result.missing_uvs:
        print("Mesh has no UV1")
    else:
        print(f"Erased {result.erased_count} faces")
    print()


def example_pipeline():
    """Run erasers attached to an object hierarchy."""
    print("Example 3: Pipeline")
    print("-" * 50)

    mesh, materials = load_mesh('avatar_body.glb')
    body = MeshRenderer(name='Body', mesh=mesh, materials=materials)

    hide_feet = EraserConfig(
        targets=[body],
        tiles=BoundedGrid.standard([(0, 0), (1, 0)]),
        material_filter=MaterialFilter({'Skin'}, 'include'),
        name='Hide feet',
    )
    root = SceneNode('Avatar')
    root.add_child(SceneNode('Body', components=[hide_feet]))

    reports = ErasePipeline().run(root)
    save_mesh(body.mesh, 'avatar_body_erased.glb', materials)

    for report in reports:
        print(f"{report.name}: {report.erased} faces from {report.processed} mesh(es)")
    print()


if __name__ == '__main__':
    example_direct_filter()
    example_sparse_tiles()
    example_pipeline()
