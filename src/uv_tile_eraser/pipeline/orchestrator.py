# ABOUTME: Pipeline orchestrator running every eraser under a root object
# ABOUTME: Replaces renderer meshes with filtered copies before downstream stages

import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Sequence

from .config import EraserConfig
from .scene import MeshRenderer, SceneNode, iter_components
from ..tile_filter import erase_tiles
from ..utils.logging_utils import Timer, TimingStats


@dataclass
class EraserReport:
    """Aggregate outcome of one eraser configuration."""
    name: str
    processed: int = 0
    skipped: int = 0
    missing_uvs: int = 0
    erased: int = 0


class ErasePipeline:
    """
    Runs tile erasure for every enabled eraser found under a root object.

    All erasers complete before any downstream callable runs, so later
    optimization stages only ever see the filtered meshes.
    """

    def __init__(self, downstream: Sequence[Callable[[SceneNode], None]] = ()):
        """
        Initialize pipeline.

        Args:
            downstream: Callables invoked with the root after erasure
        """
        self.downstream = list(downstream)
        self.logger = logging.getLogger('uv_tile_eraser')
        self.timing_stats: List[TimingStats] = []

    def run(self, root: SceneNode) -> List[EraserReport]:
        """Process every enabled eraser under root, then the downstream stages."""
        start_time = time.perf_counter()
        self.timing_stats = []
        reports = []

        with Timer("UV tile erasure", self.logger) as timer:
            for config in iter_components(root, EraserConfig):
                if not config.enabled:
                    self.logger.debug("Skipping disabled eraser %s", config.name)
                    continue
                reports.append(self.process_eraser(config))
        self.timing_stats.append(TimingStats("UV tile erasure", timer.elapsed))

        for stage in self.downstream:
            stage_name = getattr(stage, '__name__', type(stage).__name__)
            with Timer(stage_name, self.logger) as stage_timer:
                stage(root)
            self.timing_stats.append(TimingStats(stage_name, stage_timer.elapsed))

        self._log_summary(time.perf_counter() - start_time, reports)
        return reports

    def process_eraser(self, config: EraserConfig) -> EraserReport:
        """Filter every target of one eraser configuration."""
        report = EraserReport(name=config.name)

        if not config.targets:
            self.logger.warning("No target meshes on %s", config.name)
            return report

        for renderer in config.targets:
            if renderer is None or renderer.mesh is None:
                report.skipped += 1
                continue

            erased = self.process_renderer(renderer, config)
            if erased is None:
                report.missing_uvs += 1
                continue

            report.processed += 1
            report.erased += erased

        self.logger.info("Erased %d faces total", report.erased)
        return report

    def process_renderer(self, renderer: MeshRenderer, config: EraserConfig):
        """
        Filter one renderer's mesh and swap in the result.

        Returns:
            Number of erased faces, or None when the UV channel is empty
        """
        result = erase_tiles(
            renderer.mesh,
            config.uv_channel,
            config.predicate,
            vertex_mode=config.vertex_mode,
            materials=renderer.materials,
            material_filter=config.material_filter,
        )

        if result.missing_uvs:
            self.logger.warning("No UVs in channel %d for %s", config.uv_channel, renderer.name)
            return None

        renderer.mesh = result.mesh

        if config.material_filter.active:
            self.logger.info("Erased %d faces from %s (material filter active)",
                             result.erased_count, renderer.name)
        else:
            self.logger.info("Erased %d faces from %s", result.erased_count, renderer.name)
        return result.erased_count

    def _log_summary(self, total_time: float, reports: List[EraserReport]):
        self.logger.debug("TIMING BREAKDOWN:")
        for stat in self.timing_stats:
            self.logger.debug(stat.format_tree(total_time))
        self.logger.debug("Erasers run: %d, meshes processed: %d, faces erased: %d",
                          len(reports),
                          sum(r.processed for r in reports),
                          sum(r.erased for r in reports))
