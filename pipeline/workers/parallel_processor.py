"""
Batch Orchestrator
==================

Discovers export files in a directory and compresses each one as an
independent task, joining every task before reporting the batch.
"""

import asyncio
import dataclasses
import logging
import os
from concurrent.futures import Executor, ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional, Tuple, Union

from base_classes import (
    BatchSummary, CompressionFailure, CompressionOutcome, CompressionTask, SourceFile
)
from pipeline.stages.compression import StreamCompressor
from pipeline.stages.retention import RetentionPolicy
from pipeline.stages.sizing import SizeClassifier
from pipeline_configs import CompressionConfig
from pipeline_monitoring import BatchMetrics, ProgressReporter
from resilience_patterns import StructuralError, describe_error

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


class BatchOrchestrator:
    """
    Runs one compression task per discovered file.

    Tasks share nothing but the read-only retention policy and the
    thread-safe reporter. Each task returns exactly one outcome and never
    raises, so the join always sees every result.
    """

    def __init__(self,
                 config: Optional[CompressionConfig] = None,
                 reporter: Optional[ProgressReporter] = None,
                 executor: Optional[Executor] = None,
                 compressor: Optional[StreamCompressor] = None,
                 classifier: Optional[SizeClassifier] = None):
        """
        Args:
            config: Compression settings
            reporter: Narration sink; stderr when omitted
            executor: Host thread pool. It is used as-is and never shut
                down here. When omitted a pool is created per batch.
            compressor: Per-file compressor
            classifier: Buffer size ladder
        """
        self.config = config or CompressionConfig()
        self.reporter = reporter or ProgressReporter(
            show_progress=self.config.show_progress,
            file_label=self.config.file_label
        )
        self.executor = executor
        self.compressor = compressor or StreamCompressor(self.config)
        self.classifier = classifier or SizeClassifier(self.config)

    def run(self, directory: PathLike, delete_originals: bool = False) -> BatchSummary:
        """
        Compress every candidate in directory and wait for all of them.

        Raises:
            StructuralError: directory is missing, not a directory or
                cannot be listed. Nothing is dispatched in that case.
        """
        summary, candidates = self._prepare(directory)
        if not candidates:
            return summary

        policy = RetentionPolicy(delete_originals)
        executor, owned = self._acquire_executor()
        try:
            futures = [
                executor.submit(self._process_candidate, candidate, policy)
                for candidate in candidates
            ]
            logger.debug(f"Dispatched {len(futures)} compression tasks")
            outcomes = [future.result() for future in futures]
        finally:
            if owned:
                executor.shutdown(wait=True)

        return self._finish(summary, outcomes)

    async def run_async(self, directory: PathLike, delete_originals: bool = False) -> BatchSummary:
        """Same as run() for callers already inside an event loop"""
        summary, candidates = self._prepare(directory)
        if not candidates:
            return summary

        policy = RetentionPolicy(delete_originals)
        loop = asyncio.get_running_loop()
        executor, owned = self._acquire_executor()
        try:
            outcomes = await asyncio.gather(*(
                loop.run_in_executor(executor, self._process_candidate, candidate, policy)
                for candidate in candidates
            ))
        finally:
            if owned:
                executor.shutdown(wait=True)

        return self._finish(summary, list(outcomes))

    def discover(self, directory: Path) -> List[SourceFile]:
        """
        Snapshot the candidates directly inside directory.

        Any entry whose name ends with the source extension, in any
        casing, is a candidate. Sorted by name for a stable dispatch order.
        """
        extension = self.config.source_extension.lower()
        try:
            with os.scandir(directory) as entries:
                names = sorted(entry.name for entry in entries
                               if entry.name.lower().endswith(extension))
        except OSError as e:
            raise StructuralError(str(directory),
                                  reason=f"Directory is not readable: {directory}",
                                  cause=e) from e
        return [SourceFile.observe(Path(directory) / name) for name in names]

    def _prepare(self, directory: PathLike) -> Tuple[BatchSummary, List[SourceFile]]:
        self.reporter.batch_started(self.config.source_extension)

        path = self._validate_directory(directory)
        candidates = self.discover(path)
        summary = BatchSummary(directory=path, metrics=BatchMetrics.start(len(candidates)))
        logger.info(f"Found {len(candidates)} candidate(s) in {path}")

        if not candidates:
            self.reporter.no_candidates(str(directory))
            summary.metrics.finish(summary)
        else:
            self.reporter.sweep_started(len(candidates))
        return summary, candidates

    def _finish(self, summary: BatchSummary, outcomes: List[CompressionOutcome]) -> BatchSummary:
        summary.outcomes.extend(outcomes)
        summary.metrics.finish(summary)
        self.reporter.batch_finished(summary)
        logger.info(f"Batch finished in {summary.metrics.duration:.2f}s: "
                    f"{summary.succeeded} succeeded, {summary.failed} failed")
        return summary

    @staticmethod
    def _validate_directory(directory: PathLike) -> Path:
        path = Path(directory)
        if not path.is_dir():
            raise StructuralError(str(directory))
        return path.absolute()

    def _acquire_executor(self) -> Tuple[Executor, bool]:
        if self.executor is not None:
            return self.executor, False
        pool = ThreadPoolExecutor(max_workers=self.config.num_workers,
                                  thread_name_prefix='compress')
        return pool, True

    def _process_candidate(self, candidate: SourceFile, policy: RetentionPolicy) -> CompressionOutcome:
        """Compress one candidate and apply retention; always returns an outcome"""
        try:
            task = CompressionTask(
                source=candidate,
                buffer_size=self.classifier.buffer_size_for(candidate.size)
            )
            self.reporter.file_started(candidate.name, candidate.size)
            outcome = self.compressor.compress(candidate.path, task.buffer_size)

            if not outcome.ok:
                self.reporter.file_failed(outcome)
                return outcome

            self.reporter.file_succeeded(outcome)
            decision, reason = policy.apply(outcome)
            self.reporter.retention_applied(candidate.name, decision, reason)
            return dataclasses.replace(outcome, retention=decision)
        except Exception as e:
            logger.error(f"Unexpected error compressing {candidate.path}: {e}", exc_info=True)
            failure = CompressionFailure(
                source_path=candidate.path,
                error_message=describe_error(e),
                error_type=type(e).__name__
            )
            self.reporter.file_failed(failure)
            return failure
