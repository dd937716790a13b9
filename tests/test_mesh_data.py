# ABOUTME: Tests for the MeshGeometry value type
# ABOUTME: Validation, copying, and bounds/normal/tangent recomputation

import pytest
import numpy as np
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from uv_tile_eraser.mesh_data import MeshGeometry, UV_CHANNEL_COUNT
import trimesh


@pytest.fixture
def quad():
    """Unit quad in the XY plane with UVs matching positions."""
    vertices = [(0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0)]
    uvs = [(0, 0), (1, 0), (1, 1), (0, 1)]
    return MeshGeometry(vertices=vertices, submeshes=[[0, 1, 2, 0, 2, 3]], uv_channels=[uvs], name='quad')


class TestValidation:

    def test_flat_indices_reshaped(self, quad):
        assert quad.submeshes[0].shape == (2, 3)
        assert quad.triangle_count == 2
        np.testing.assert_array_equal(quad.submeshes[0].reshape(-1), [0, 1, 2, 0, 2, 3])

    def test_index_count_not_multiple_of_three(self):
        with pytest.raises(ValueError, match="multiple of 3"):
            MeshGeometry(vertices=np.zeros((3, 3)), submeshes=[[0, 1]])

    def test_index_out_of_range(self):
        with pytest.raises(ValueError, match="outside"):
            MeshGeometry(vertices=np.zeros((3, 3)), submeshes=[[0, 1, 3]])

    def test_uv_count_mismatch(self):
        with pytest.raises(ValueError, match="UV channel 0"):
            MeshGeometry(vertices=np.zeros((3, 3)), submeshes=[[0, 1, 2]], uv_channels=[[(0, 0)]])

    def test_too_many_channels(self):
        with pytest.raises(ValueError, match="At most"):
            MeshGeometry(vertices=np.zeros((1, 3)), submeshes=[],
                         uv_channels=[[(0, 0)]] * (UV_CHANNEL_COUNT + 1))

    def test_missing_channels_are_empty(self, quad):
        assert len(quad.uv_channels) == UV_CHANNEL_COUNT
        assert quad.get_uvs(0).shape == (4, 2)
        for channel in range(1, UV_CHANNEL_COUNT):
            assert quad.get_uvs(channel).shape == (0, 2)


class TestCopy:

    def test_copy_is_independent(self, quad):
        duplicate = quad.copy(name='other')
        duplicate.submeshes[0][0, 0] = 3
        duplicate.vertices[0] = (9, 9, 9)

        assert duplicate.name == 'other'
        assert quad.name == 'quad'
        assert quad.submeshes[0][0, 0] == 0
        np.testing.assert_array_equal(quad.vertices[0], (0, 0, 0))


class TestShading:

    def test_bounds(self, quad):
        quad.recalculate_bounds()
        np.testing.assert_allclose(quad.bounds, [[0, 0, 0], [1, 1, 0]])

    def test_normals_face_up(self, quad):
        quad.recalculate_normals()
        np.testing.assert_allclose(quad.normals, [[0, 0, 1]] * 4)

    def test_unreferenced_vertex_keeps_previous_normal(self, quad):
        quad.recalculate_normals()
        quad.normals[1] = (1, 0, 0)
        quad.submeshes[0] = quad.submeshes[0][1:]  # drop the triangle using vertex 1

        quad.recalculate_normals()

        np.testing.assert_allclose(quad.normals[1], (1, 0, 0))
        np.testing.assert_allclose(quad.normals[0], (0, 0, 1))

    def test_tangents_follow_u_direction(self, quad):
        quad.recalculate_normals()
        quad.recalculate_tangents()

        np.testing.assert_allclose(quad.tangents, [[1, 0, 0, 1]] * 4, atol=1e-9)

    def test_mirrored_uvs_flip_handedness(self):
        mesh = MeshGeometry(
            vertices=[(0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0)],
            submeshes=[[0, 1, 2, 0, 2, 3]],
            uv_channels=[[(1, 0), (0, 0), (0, 1), (1, 1)]],
        )
        mesh.recalculate_normals()
        mesh.recalculate_tangents()

        np.testing.assert_allclose(mesh.tangents[:, :3], [[-1, 0, 0]] * 4, atol=1e-9)
        np.testing.assert_allclose(mesh.tangents[:, 3], [-1] * 4)

    def test_tangents_skipped_without_uvs(self):
        mesh = MeshGeometry(vertices=np.eye(3), submeshes=[[0, 1, 2]])
        mesh.recalculate_tangents()
        assert mesh.tangents is None


def test_closed_box_shading():
    box = trimesh.creation.box(extents=[2, 2, 2])
    mesh = MeshGeometry(vertices=np.array(box.vertices), submeshes=[np.array(box.faces)], name='box')
    mesh.recalculate_bounds()
    mesh.recalculate_normals()

    assert mesh.submesh_count == 1
    assert mesh.triangle_count == len(box.faces)
    np.testing.assert_allclose(mesh.bounds, [[-1, -1, -1], [1, 1, 1]])
    np.testing.assert_allclose(np.linalg.norm(mesh.normals, axis=1), 1.0)
