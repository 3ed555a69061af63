"""AnalysisEngine — walks containers and series through the counting pipeline."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from bbcount.core.config import AnalysisConfig
from bbcount.core.exceptions import BBCountError, FormatError
from bbcount.core.models import FailureRecord, ResultTable, Roi, RunSummary
from bbcount.io.models import ContainerFile, Projection, Series, SeriesInfo
from bbcount.io.readers import ContainerReader, open_container
from bbcount.io.scanner import ContainerScanner
from bbcount.io.transforms import project_series
from bbcount.measure.aggregator import CellAggregator
from bbcount.measure.spots import SpotDetector
from bbcount.report.writer import (
    RESULTS_FILENAME,
    SeriesReportWriter,
    write_results_table,
)
from bbcount.roi.provider import RoiProvider, acquire_rois

logger = logging.getLogger(__name__)


@dataclass
class PipelineContext:
    """State threaded through one run.

    ``results`` and ``summary`` live for the whole run; ``series``,
    ``projection`` and ``rois`` describe the series being processed and are
    cleared once it is done.
    """

    config: AnalysisConfig
    output_dir: Path
    results: ResultTable = field(default_factory=ResultTable)
    summary: RunSummary = field(default_factory=RunSummary)
    series: Series | None = None
    projection: Projection | None = None
    rois: list[Roi] = field(default_factory=list)

    def reset_series(self) -> None:
        self.series = None
        self.projection = None
        self.rois = []


@dataclass(frozen=True)
class RunResult:
    """Outcome of AnalysisEngine.run()."""

    results: ResultTable
    summary: RunSummary
    results_path: Path


class AnalysisEngine:
    """Counts basal bodies in every series under an input directory.

    Args:
        config: Analysis parameters.
        roi_provider: Source of cell outlines for each projected series.
        output_dir: Root of the output tree.
    """

    def __init__(
        self,
        config: AnalysisConfig,
        roi_provider: RoiProvider,
        output_dir: Path,
    ) -> None:
        self.config = config
        self.roi_provider = roi_provider
        self.output_dir = Path(output_dir)
        self._detector = SpotDetector(
            top_hat_radius=config.top_hat_radius,
            median_radius=config.median_radius,
            threshold_method=config.threshold_method,
        )
        self._aggregator = CellAggregator(self._detector, config.maxima_tolerance)

    def run(
        self,
        input_root: Path,
        progress_callback: Callable[[int, int, str], None] | None = None,
    ) -> RunResult:
        """Process every container found under ``input_root``.

        Per-container and per-series failures are logged, recorded in the
        summary and skipped. ``Full_Results.csv`` is written at the end of
        the run, and after each series when checkpointing is enabled.

        Args:
            input_root: Directory to scan recursively.
            progress_callback: Optional callback(current, total, container_name).

        Returns:
            RunResult with the consolidated table and the run summary.

        Raises:
            InputPathError: If input_root cannot be read.
            OutputPathError: If the output directory cannot be written.
            KeyboardInterrupt: On cancel, after completed results are saved.
        """
        start = time.monotonic()
        containers = ContainerScanner(self.config.extensions).discover(input_root)
        writer = SeriesReportWriter(self.output_dir)
        results_path = self.output_dir / RESULTS_FILENAME

        ctx = PipelineContext(config=self.config, output_dir=self.output_dir)
        ctx.summary.containers_found = len(containers)
        total = len(containers)

        try:
            for idx, container in enumerate(containers):
                if progress_callback:
                    progress_callback(idx + 1, total, container.path.name)
                self._process_container(ctx, writer, container, results_path)
        except KeyboardInterrupt:
            logger.warning(
                "Run cancelled; keeping %d row(s) from completed series",
                len(ctx.results),
            )
            write_results_table(ctx.results, results_path)
            raise
        finally:
            ctx.summary.elapsed_seconds = round(time.monotonic() - start, 3)

        write_results_table(ctx.results, results_path)
        logger.info(
            "Processed %d series (%d skipped, %d filtered, %d failed) in %.1fs",
            ctx.summary.series_processed,
            ctx.summary.series_skipped,
            ctx.summary.series_filtered,
            ctx.summary.series_failed,
            ctx.summary.elapsed_seconds,
        )
        return RunResult(results=ctx.results, summary=ctx.summary, results_path=results_path)

    def _process_container(
        self,
        ctx: PipelineContext,
        writer: SeriesReportWriter,
        container: ContainerFile,
        results_path: Path,
    ) -> None:
        try:
            reader = open_container(container)
        except FormatError as exc:
            self._container_failed(ctx, container, exc)
            return

        with reader:
            try:
                count = reader.series_count()
            except Exception as exc:
                self._container_failed(ctx, container, exc)
                return
            logger.info("%s: %d series", container.path.name, count)
            for index in range(count):
                name = f"#{index + 1}"
                try:
                    info = reader.series_info(index)
                    name = info.name
                    self._process_series(ctx, writer, reader, info, results_path)
                except Exception as exc:
                    self._series_failed(ctx, str(container.path), index, name, exc)
                finally:
                    ctx.reset_series()

    def _process_series(
        self,
        ctx: PipelineContext,
        writer: SeriesReportWriter,
        reader: ContainerReader,
        info: SeriesInfo,
        results_path: Path,
    ) -> None:
        """Run one series through the pipeline.

        Any exception fails only this series; the caller records it.
        """
        config = ctx.config
        index = info.index

        if not config.matches_series(info.raw_name):
            logger.info(
                "Series %d (%s) does not match %r, skipping",
                index, info.raw_name, config.series_pattern,
            )
            ctx.summary.series_filtered += 1
            return

        ctx.series = reader.read_series(index)
        ctx.projection = project_series(ctx.series)
        plane = ctx.projection.channel(config.quant_channel)
        ctx.projection.channel(config.display_channel)
        ctx.rois = acquire_rois(self.roi_provider, ctx.projection, config.display_channel)

        if not ctx.rois:
            ctx.summary.series_skipped += 1
            return

        path = str(reader.container.path)
        aggregation = self._aggregator.aggregate(info.name, plane, ctx.rois)
        writer.write_series(
            ctx.projection, config.quant_channel, aggregation.cells, ctx.rois,
            pixel_size_um=ctx.series.pixel_size_um,
        )

        for label, reason in aggregation.rejected:
            ctx.summary.rois_failed += 1
            ctx.summary.failures.append(
                FailureRecord(path=path, series=info.name, error=f"{label}: {reason}")
            )
        ctx.results.extend(aggregation.to_rows())
        ctx.summary.series_processed += 1
        if config.checkpoint_results:
            write_results_table(ctx.results, results_path)

    @staticmethod
    def _container_failed(
        ctx: PipelineContext, container: ContainerFile, exc: Exception,
    ) -> None:
        logger.error("Skipping container %s: %s", container.path, exc)
        ctx.summary.containers_failed += 1
        ctx.summary.failures.append(
            FailureRecord(path=str(container.path), series=None, error=str(exc))
        )

    @staticmethod
    def _series_failed(
        ctx: PipelineContext, path: str, index: int, name: str, exc: Exception,
    ) -> None:
        if isinstance(exc, BBCountError):
            logger.error("Series %d (%s) in %s failed: %s", index, name, path, exc)
        else:
            logger.exception("Series %d (%s) in %s failed: %s", index, name, path, exc)
        ctx.summary.series_failed += 1
        ctx.summary.failures.append(FailureRecord(path=path, series=name, error=str(exc)))
