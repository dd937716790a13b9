# ABOUTME: Command-line interface for erasing UV tiles from mesh files
# ABOUTME: Loads a mesh, runs the eraser pipeline, saves the result

import argparse
import json
import sys
from pathlib import Path

from .mesh_io import load_mesh, save_mesh
from .pipeline import EraserConfig, ErasePipeline, MeshRenderer, SceneNode
from .pipeline.config import channel_from_name, parse_tile, UV_CHANNEL_NAMES
from .preview import render_tile_preview
from .utils.logging_utils import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='UV Tile Eraser - remove mesh faces that lie in selected UV tiles',
        epilog="""
Examples:
  # Erase everything in tile (0,0) and (1,0) of UV0
  uv-tile-eraser body.glb body_erased.glb --tile 0,0 --tile 1,0

  # Only erase faces whose three corners are in the tile, on UV1
  uv-tile-eraser body.obj out.obj --tile 2,3 --all-vertices --uv-channel 1

  # Advanced grid (tiles outside 0-3), restricted to one material
  uv-tile-eraser body.glb out.glb --advanced --tile=-1,0 --material Skin

  # Settings from a JSON file, plus a preview of the grid
  uv-tile-eraser body.glb out.glb --config eraser.json --preview grid.png
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument('input', type=str, help='Input mesh file (.obj, .glb, .ply, ...)')
    parser.add_argument('output', type=str, help='Output mesh file')

    parser.add_argument('--config', type=str, default=None,
                        help='JSON file with eraser settings; other options override it')
    parser.add_argument('--uv-channel', type=str, default=None,
                        help=f'UV channel ({", ".join(UV_CHANNEL_NAMES)} or 0-7). Default: UV0')
    parser.add_argument('--tile', type=str, action='append', default=None, metavar='U,V',
                        help='Tile to erase; repeat for several tiles')
    parser.add_argument('--advanced', action='store_true', default=None,
                        help='Advanced grid: allow tiles outside the standard 0-3 range')
    parser.add_argument('--range', type=int, nargs=4, default=None,
                        metavar=('MIN_U', 'MAX_U', 'MIN_V', 'MAX_V'),
                        help='Visible tile range in advanced mode (used by --preview)')
    parser.add_argument('--all-vertices', action='store_true', default=None,
                        help='Erase a face only if ALL its vertices are in a marked tile')
    parser.add_argument('--material', type=str, action='append', default=None,
                        help='Only erase faces using this material; repeat for several')
    parser.add_argument('--exclude-materials', action='store_true', default=None,
                        help='Invert --material: erase all faces EXCEPT those materials')
    parser.add_argument('--preview', type=str, default=None,
                        help='Write a PNG of the tile grid and UV layout')
    parser.add_argument('--verbose', action='store_true',
                        help='Enable verbose logging (DEBUG level)')
    parser.add_argument('--quiet', action='store_true',
                        help='Quiet mode - only show warnings and errors')
    return parser


def settings_from_args(args) -> dict:
    """Merge the --config file with explicit command-line options."""
    settings = {}
    if args.config:
        with open(args.config, 'r') as f:
            settings = json.load(f)
        if not isinstance(settings, dict):
            raise ValueError(f"Configuration file must hold a JSON object: {args.config}")

    if args.uv_channel is not None:
        settings['uv_channel'] = channel_from_name(args.uv_channel)
    if args.advanced is not None:
        settings['advanced_mode'] = True
    if args.range is not None:
        min_u, max_u, min_v, max_v = args.range
        settings['range'] = {'min_u': min_u, 'max_u': max_u, 'min_v': min_v, 'max_v': max_v}
    if args.tile is not None:
        tiles = [list(parse_tile(text)) for text in args.tile]
        if settings.get('advanced_mode'):
            settings['custom_tiles'] = tiles
        else:
            settings['tiles'] = tiles
    if args.all_vertices is not None:
        settings['vertex_mode'] = 'all'
    if args.material is not None:
        settings['materials'] = args.material
    if args.exclude_materials is not None:
        settings['material_mode'] = 'exclude'
    return settings


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logger = setup_logging(verbose=args.verbose, quiet=args.quiet)

    try:
        mesh, materials = load_mesh(args.input)
        renderer = MeshRenderer(name=Path(args.input).name, mesh=mesh, materials=materials)

        config = EraserConfig.from_dict(settings_from_args(args), targets=(renderer,))
        logger.debug("Channel %s, %d tile(s) marked, mode %s",
                     config.uv_channel_name, config.predicate.selected_count, config.vertex_mode.value)
        if config.material_filter.active:
            logger.info(config.describe_material_filter())

        root = SceneNode(name=renderer.name, components=[config])
        reports = ErasePipeline().run(root)

        if args.preview:
            image = render_tile_preview(config.predicate, config.visible_range,
                                        mesh=mesh, uv_channel=config.uv_channel)
            image.save(args.preview)
            logger.info("Preview written to %s", args.preview)

        if reports and reports[0].missing_uvs:
            logger.warning("Input has no UVs in %s; writing it unchanged", config.uv_channel_name)

        save_mesh(renderer.mesh, args.output, materials)
        return 0

    except FileNotFoundError as e:
        logger.error("File not found: %s", e)
        return 1
    except ValueError as e:
        logger.error("Invalid input: %s", e)
        return 1


if __name__ == '__main__':
    sys.exit(main())
