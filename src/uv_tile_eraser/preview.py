# ABOUTME: Renders the tile grid and a mesh's UV layout to an image
# ABOUTME: Marked tiles are red; tile (0,0) sits at the bottom-left

import numpy as np
from PIL import Image, ImageDraw
from typing import Optional

from .mesh_data import MeshGeometry
from .tile_predicate import TilePredicate


BACKGROUND = (48, 48, 48)
GRID_LINE = (110, 110, 110)
MARKED_FILL = (200, 40, 40)
WIRE = (230, 230, 230)


def render_tile_preview(predicate: TilePredicate,
                        tile_range,
                        mesh: Optional[MeshGeometry] = None,
                        uv_channel: int = 0,
                        tile_size: int = 64) -> Image.Image:
    """
    Draw the visible tile range with marked tiles filled.

    Args:
        predicate: Tile predicate to visualize
        tile_range: Visible range (anything with min_u/max_u/min_v/max_v)
        mesh: Optional mesh whose UV triangles are drawn on top
        uv_channel: UV channel of the mesh to draw
        tile_size: Pixel size of one tile

    Returns:
        RGB PIL image
    """
    width = (tile_range.max_u - tile_range.min_u + 1) * tile_size
    height = (tile_range.max_v - tile_range.min_v + 1) * tile_size
    image = Image.new('RGB', (width, height), BACKGROUND)
    draw = ImageDraw.Draw(image)

    def to_pixel(u, v):
        # V grows upward in UV space, downward in the image
        x = (u - tile_range.min_u) * tile_size
        y = (tile_range.max_v + 1 - v) * tile_size
        return x, y

    for v in range(tile_range.min_v, tile_range.max_v + 1):
        for u in range(tile_range.min_u, tile_range.max_u + 1):
            x0, y1 = to_pixel(u, v)
            x1, y0 = to_pixel(u + 1, v + 1)
            fill = MARKED_FILL if predicate.is_marked(u, v) else None
            draw.rectangle([x0, y0, x1 - 1, y1 - 1], fill=fill, outline=GRID_LINE)

    if mesh is not None:
        uvs = mesh.get_uvs(uv_channel)
        if len(uvs):
            corners = uvs[mesh.all_triangles()]
            pixels = np.stack(to_pixel(corners[..., 0], corners[..., 1]), axis=-1)
            for tri in pixels:
                points = [tuple(p) for p in tri.tolist()]
                draw.polygon(points, outline=WIRE)

    return image
