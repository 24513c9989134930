"""
Pipeline Monitoring and Progress Reporting
==========================================

Human-readable narration of a compression batch, batch-level metrics
and export of a finished summary.
"""

import json
import sys
import threading
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, TextIO
import logging

import psutil
from tqdm import tqdm

from base_classes import (
    BatchSummary, CompressionFailure, CompressionSuccess, RetentionDecision
)

logger = logging.getLogger(__name__)

_SIZE_UNITS = ['KB', 'MB', 'GB', 'TB']


def format_file_size(size: int) -> str:
    """Format a byte count as B/KB/MB/GB/TB using powers of 1024"""
    if size < 1024:
        return f"{size} B"
    value = float(size)
    for unit in _SIZE_UNITS:
        value /= 1024
        if value < 1024 or unit == _SIZE_UNITS[-1]:
            return f"{value:.1f} {unit}"
    return f"{value:.1f} {_SIZE_UNITS[-1]}"


def _current_rss() -> int:
    try:
        return psutil.Process().memory_info().rss
    except psutil.Error as e:
        logger.debug(f"Could not read process memory: {e}")
        return 0


@dataclass
class BatchMetrics:
    """Metrics for one compression batch"""
    start_time: float
    end_time: Optional[float] = None
    files_discovered: int = 0
    bytes_read: int = 0
    bytes_written: int = 0
    errors: int = 0
    memory_start: int = 0
    memory_end: int = 0

    @classmethod
    def start(cls, files_discovered: int = 0) -> 'BatchMetrics':
        return cls(
            start_time=time.time(),
            files_discovered=files_discovered,
            memory_start=_current_rss()
        )

    def finish(self, summary: BatchSummary) -> None:
        """Fold the batch outcomes into the metrics"""
        self.end_time = time.time()
        self.memory_end = _current_rss()
        self.bytes_read = sum(o.source_size for o in summary.successes)
        self.bytes_written = sum(o.output_size for o in summary.successes)
        self.errors = summary.failed

    @property
    def duration(self) -> float:
        if self.end_time:
            return self.end_time - self.start_time
        return time.time() - self.start_time

    @property
    def throughput_mb_per_sec(self) -> float:
        if self.duration > 0:
            return (self.bytes_read / 1024 / 1024) / self.duration
        return 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'duration_seconds': round(self.duration, 3),
            'files_discovered': self.files_discovered,
            'bytes_read': self.bytes_read,
            'bytes_written': self.bytes_written,
            'errors': self.errors,
            'throughput_mb_per_sec': round(self.throughput_mb_per_sec, 3),
            'memory_start': self.memory_start,
            'memory_end': self.memory_end,
        }


class ProgressReporter:
    """
    Write-only narration sink shared by every task of a batch.

    Each line is written whole under a lock so concurrent tasks never
    interleave partial lines. Write errors are logged, never raised.
    """

    def __init__(self,
                 stream: Optional[TextIO] = None,
                 show_progress: bool = False,
                 file_label: str = 'CSV'):
        self.stream = stream if stream is not None else sys.stderr
        self.show_progress = show_progress
        self.file_label = file_label
        self._lock = threading.Lock()
        self._progress_bar: Optional[tqdm] = None

    def _emit(self, line: str) -> None:
        logger.debug(line)
        with self._lock:
            try:
                if self._progress_bar is not None:
                    tqdm.write(line, file=self.stream)
                else:
                    self.stream.write(line + '\n')
                    self.stream.flush()
            except (OSError, ValueError) as e:
                logger.warning(f"Progress sink write failed: {e}")

    def _advance(self) -> None:
        with self._lock:
            if self._progress_bar is not None:
                self._progress_bar.update(1)

    def batch_started(self, source_extension: str) -> None:
        self._emit(f"Compressing {source_extension} to .gzip...")

    def no_candidates(self, directory: str) -> None:
        self._emit(f"No {self.file_label} files found in directory: {directory}")

    def sweep_started(self, count: int) -> None:
        self._emit(f"Starting concurrent compression of {count} {self.file_label} files...")
        if self.show_progress and count > 0:
            with self._lock:
                self._progress_bar = tqdm(total=count, desc="Compressing",
                                          unit="files", file=self.stream)

    def file_started(self, name: str, size: int) -> None:
        self._emit(f"Compressing: {name} ({format_file_size(size)})")

    def file_succeeded(self, outcome: CompressionSuccess) -> None:
        ratio = outcome.ratio
        percent = f"{ratio * 100:.1f}%" if ratio is not None else "n/a"
        self._emit(
            f"✓ Compressed: {outcome.source_path.name} -> {outcome.output_path.name} "
            f"({format_file_size(outcome.output_size)}, {percent} of original, "
            f"{outcome.elapsed_ms / 1000:.1f}s)"
        )

    def file_failed(self, outcome: CompressionFailure) -> None:
        self._emit(f"Failed to compress {outcome.source_path.name}: {outcome.error_message}")
        self._advance()

    def retention_applied(self, name: str, decision: RetentionDecision,
                          reason: Optional[str] = None) -> None:
        if decision is RetentionDecision.DELETED:
            self._emit(f"Removed original file: {name}")
        elif decision is RetentionDecision.RETENTION_FAILED:
            line = f"Warning: Could not remove original file: {name}"
            if reason:
                line += f" ({reason})"
            self._emit(line)
        else:
            self._emit(f"Original file retained: {name}")
        self._advance()

    def batch_finished(self, summary: BatchSummary) -> None:
        with self._lock:
            if self._progress_bar is not None:
                self._progress_bar.close()
                self._progress_bar = None
        if summary.failed > 0:
            self._emit(f"Warning: {summary.failed} file(s) failed to compress")
        self._emit(
            f"Compression completed: {summary.tally} files successfully compressed"
        )


class MetricsExporter:
    """Export batch summaries in machine-readable formats"""

    @staticmethod
    def to_json(summary: BatchSummary) -> str:
        """Export a batch summary as JSON"""
        data = {
            'timestamp': datetime.now().isoformat(),
            'summary': summary.to_dict(),
            'metrics': summary.metrics.to_dict() if summary.metrics else {},
        }
        return json.dumps(data, indent=2)
