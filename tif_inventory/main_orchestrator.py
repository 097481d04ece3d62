"""
Main Orchestrator Module for the TIFF inventory tool.
Coordinates the modules for each run:
scan → stats report → tags report → consolidation
"""
import asyncio
import logging
from pathlib import Path
from typing import Optional, List, Dict, Any, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .config import Config
from .logger_module import InventoryLogger
from .file_scanner import ScanResult, scan_for_images
from .report_builder import build_stats_report, build_tags_report
from .tag_extractor import resolve_timezone
from .consolidation import consolidate, ConsolidationSummary


logger = logging.getLogger(__name__)


class PipelineStage(Enum):
    """Stages of the processing pipeline."""
    INIT = "init"
    SCANNING = "scanning"
    STATS_REPORT = "stats_report"
    TAGS_REPORT = "tags_report"
    CONSOLIDATION = "consolidation"
    COMPLETED = "completed"
    FAILED = "failed"


# Stage groups selectable from the command line
RUNNABLE_STAGES = (PipelineStage.STATS_REPORT, PipelineStage.TAGS_REPORT, PipelineStage.CONSOLIDATION)


@dataclass
class PipelineState:
    """State of a pipeline run."""
    stage: PipelineStage = PipelineStage.INIT
    files_matched: int = 0
    stats_rows: int = 0
    tags_rows: int = 0
    groups: int = 0
    files_copied: int = 0
    outputs: List[str] = field(default_factory=list)
    errors: List[Dict[str, str]] = field(default_factory=list)
    started_at: Optional[str] = None
    completed_at: Optional[str] = None


class InventoryOrchestrator:
    """
    Orchestrator for the inventory runs.

    Pipeline stages:
    1. SCANNING: Match the image files under the origin (fails fast)
    2. STATS_REPORT: Filesystem statistics → <destination>/stats.csv
    3. TAGS_REPORT: Embedded metadata → <destination>/tags.csv
    4. CONSOLIDATION: Rebuild the deduplicated tree under files_root

    Each stage works on a scan result consumed before any file is touched.
    """

    def __init__(self, config: Config, action_logger: Optional[InventoryLogger] = None):
        """
        Initialize the orchestrator.

        Args:
            config: Resolved configuration
            action_logger: Optional session logger (created from config.log_dir if None)
        """
        self.config = config
        self.owns_logger = action_logger is None
        self.action_logger = action_logger or InventoryLogger(config.log_dir)
        self.tz = resolve_timezone(config.timezone)
        self.state = PipelineState()

    def scan(self) -> ScanResult:
        """Stage 1: Match the input files."""
        self.state.stage = PipelineStage.SCANNING
        result = scan_for_images(self.config.origin, self.config.pattern)
        if result.ok:
            self.state.files_matched = len(result.paths)
            self.action_logger.files_matched(self.config.origin, self.config.pattern, len(result.paths))
            if not result.paths:
                self.action_logger.warning(f"No files match {self.config.pattern} under {self.config.origin}")
        else:
            self.action_logger.error(f"Scan failed: {result.error}")
        return result

    def _paths(self, scan: Optional[ScanResult]) -> List[Path]:
        """Unwrap a scan (scanning now if none was given); raises before any work."""
        if scan is None:
            scan = self.scan()
        return scan.unwrap()

    async def run_stats_report(self, scan: Optional[ScanResult] = None) -> Path:
        """Stage 2: Write the filesystem statistics report."""
        paths = self._paths(scan)
        destination = self.config.stats_path

        self.state.stage = PipelineStage.STATS_REPORT
        self.action_logger.stage_start("STATS_REPORT", f"{len(paths)} files")
        records = await build_stats_report(paths, destination)
        for record in records:
            self.action_logger.stats_extracted(record['File Path'], record['Size'])

        self.state.stats_rows = len(records)
        self.state.outputs.append(str(destination))
        self.action_logger.report_written(destination, len(records))
        self.action_logger.stage_end("STATS_REPORT")
        return destination

    async def run_tags_report(self, scan: Optional[ScanResult] = None) -> Path:
        """Stage 3: Write the embedded metadata report."""
        paths = self._paths(scan)
        destination = self.config.tags_path

        self.state.stage = PipelineStage.TAGS_REPORT
        self.action_logger.stage_start("TAGS_REPORT", f"{len(paths)} files")
        records = await build_tags_report(paths, destination, self.tz)
        for record in records:
            self.action_logger.tags_extracted(record['File Path'], record['Date Time'])

        self.state.tags_rows = len(records)
        self.state.outputs.append(str(destination))
        self.action_logger.report_written(destination, len(records))
        self.action_logger.stage_end("TAGS_REPORT")
        return destination

    async def run_reports(self, scan: Optional[ScanResult] = None) -> List[Path]:
        """Stats then tags report over the same scan."""
        scan = scan if scan is not None else self.scan()
        return [
            await self.run_stats_report(scan),
            await self.run_tags_report(scan),
        ]

    async def run_consolidation(self, scan: Optional[ScanResult] = None) -> ConsolidationSummary:
        """Stage 4: Rebuild the deduplicated tree."""
        paths = self._paths(scan)

        self.state.stage = PipelineStage.CONSOLIDATION
        self.action_logger.stage_start("CONSOLIDATION", f"{len(paths)} files -> {self.config.files_root}")
        summary = await consolidate(paths, self.config.files_root, self.config.extension,
                                    action_logger=self.action_logger)

        self.state.groups = summary.groups
        self.state.files_copied = summary.files_copied
        self.state.outputs.append(str(summary.root))
        self.action_logger.stage_end(
            "CONSOLIDATION", f"{summary.files_copied} files in {summary.groups} groups"
        )
        return summary

    async def run(self, stages: Iterable[PipelineStage] = RUNNABLE_STAGES) -> PipelineState:
        """
        Run the selected stages over a single scan.

        Args:
            stages: Stages to run, in pipeline order

        Returns:
            Final PipelineState

        Raises:
            Whatever the failing stage raised; the state records the failure
        """
        selected = set(stages)
        stages = [s for s in RUNNABLE_STAGES if s in selected]
        logger.debug(f"Running stages: {[s.value for s in stages]}")
        self.state.started_at = datetime.now().isoformat()

        try:
            self.config.validate(consolidating=PipelineStage.CONSOLIDATION in stages)
            if PipelineStage.STATS_REPORT in stages or PipelineStage.TAGS_REPORT in stages:
                self.config.ensure_directories_exist()

            scan = self.scan()
            scan.unwrap()

            if PipelineStage.STATS_REPORT in stages:
                await self.run_stats_report(scan)
            if PipelineStage.TAGS_REPORT in stages:
                await self.run_tags_report(scan)
            if PipelineStage.CONSOLIDATION in stages:
                await self.run_consolidation(scan)

            self.state.stage = PipelineStage.COMPLETED
            self.state.completed_at = datetime.now().isoformat()
            self.action_logger.info("Pipeline completed successfully")

        except Exception as e:
            self.state.errors.append({
                'stage': self.state.stage.value,
                'error': f"{type(e).__name__}: {e}",
                'timestamp': datetime.now().isoformat(),
            })
            self.state.stage = PipelineStage.FAILED
            self.action_logger.error("Pipeline failed", e)
            raise

        return self.state

    def get_summary(self) -> Dict[str, Any]:
        """Get a summary of the pipeline results."""
        return {
            'stage': self.state.stage.value,
            'files_matched': self.state.files_matched,
            'stats_rows': self.state.stats_rows,
            'tags_rows': self.state.tags_rows,
            'groups': self.state.groups,
            'files_copied': self.state.files_copied,
            'outputs': list(self.state.outputs),
            'errors': list(self.state.errors),
            'started_at': self.state.started_at,
            'completed_at': self.state.completed_at,
        }


def run_pipeline(
    config: Config,
    stages: Iterable[PipelineStage] = RUNNABLE_STAGES,
    action_logger: Optional[InventoryLogger] = None,
) -> InventoryOrchestrator:
    """
    Convenience function to run the pipeline to completion.

    Args:
        config: Resolved configuration
        stages: Stages to run
        action_logger: Optional session logger

    Returns:
        The orchestrator, for its state and summary
    """
    orchestrator = InventoryOrchestrator(config, action_logger)
    try:
        asyncio.run(orchestrator.run(stages))
    finally:
        if orchestrator.owns_logger:
            orchestrator.action_logger.close()
    return orchestrator
