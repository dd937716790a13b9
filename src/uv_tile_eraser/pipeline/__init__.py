"""Eraser pipeline - discovers eraser configurations and filters their target meshes."""

from .config import EraserConfig, TileRange, InvalidChannelSelector, UV_CHANNEL_NAMES
from .scene import MeshRenderer, SceneNode, iter_components
from .orchestrator import ErasePipeline, EraserReport

__all__ = [
    'EraserConfig',
    'TileRange',
    'InvalidChannelSelector',
    'UV_CHANNEL_NAMES',
    'MeshRenderer',
    'SceneNode',
    'iter_components',
    'ErasePipeline',
    'EraserReport',
]
