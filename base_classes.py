"""
Base Classes for the Export Compression Pipeline
================================================

Contains the core data structures passed between pipeline stages: the
observed source file, the per-file task, its outcome and the batch summary.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, List, Dict, Optional, Union

if TYPE_CHECKING:
    from pipeline_monitoring import BatchMetrics


@dataclass(frozen=True)
class SourceFile:
    """A candidate file as observed at discovery time"""
    path: Path
    size: int
    exists: bool = True

    @classmethod
    def observe(cls, path: Path) -> 'SourceFile':
        """Stat the file without following it into failure"""
        path = Path(path).absolute()
        try:
            return cls(path=path, size=path.stat().st_size, exists=True)
        except OSError:
            return cls(path=path, size=0, exists=False)

    @property
    def name(self) -> str:
        return self.path.name


@dataclass
class CompressionTask:
    """Ephemeral unit of work bound to exactly one source file"""
    source: SourceFile
    buffer_size: int
    started_at: float = field(default_factory=time.time)


class RetentionDecision(Enum):
    """What happened to a source file after it was compressed"""
    DELETED = "deleted"
    RETENTION_FAILED = "retention_failed"
    RETAINED = "retained"


@dataclass(frozen=True)
class CompressionSuccess:
    """Terminal outcome of a task that produced a complete .gz file"""
    source_path: Path
    output_path: Path
    source_size: int
    output_size: int
    elapsed_ms: float
    retention: Optional[RetentionDecision] = None

    ok = True

    @property
    def ratio(self) -> Optional[float]:
        """Output size relative to the source, None for an empty source"""
        if self.source_size <= 0:
            return None
        return self.output_size / self.source_size


@dataclass(frozen=True)
class CompressionFailure:
    """Terminal outcome of a task that could not produce its output"""
    source_path: Path
    error_message: str
    error_type: str = "OSError"

    ok = False


CompressionOutcome = Union[CompressionSuccess, CompressionFailure]


@dataclass
class BatchSummary:
    """Aggregate over every outcome of one batch; never persisted"""
    directory: Path
    outcomes: List[CompressionOutcome] = field(default_factory=list)
    metrics: Optional['BatchMetrics'] = None

    @property
    def attempted(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.ok)

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if not o.ok)

    @property
    def successes(self) -> List[CompressionSuccess]:
        return [o for o in self.outcomes if o.ok]

    @property
    def failures(self) -> List[CompressionFailure]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def tally(self) -> str:
        return f"{self.succeeded}/{self.attempted}"

    def retention_counts(self) -> Dict[str, int]:
        """Count retention decisions across successful outcomes"""
        counts = {decision.value: 0 for decision in RetentionDecision}
        for outcome in self.successes:
            if outcome.retention is not None:
                counts[outcome.retention.value] += 1
        return counts

    def to_dict(self) -> Dict[str, object]:
        """Plain-data view used by the JSON exporter"""
        return {
            'directory': str(self.directory),
            'attempted': self.attempted,
            'succeeded': self.succeeded,
            'failed': self.failed,
            'retention': self.retention_counts(),
            'files': [
                {
                    'source': str(o.source_path),
                    'output': str(o.output_path),
                    'source_size': o.source_size,
                    'output_size': o.output_size,
                    'elapsed_ms': round(o.elapsed_ms, 3),
                    'retention': o.retention.value if o.retention else None,
                } if o.ok else {
                    'source': str(o.source_path),
                    'error': o.error_message,
                    'error_type': o.error_type,
                }
                for o in self.outcomes
            ],
        }
