"""
Export Compression Pipeline
===========================

Tail stage of a data export: gzip every intermediate CSV file in a
directory concurrently and optionally remove the originals.
"""

import logging
import os
from concurrent.futures import Executor
from typing import Optional, TextIO, Union

from base_classes import BatchSummary
from pipeline.workers.parallel_processor import BatchOrchestrator
from pipeline_configs import CompressionConfig
from pipeline_monitoring import ProgressReporter

logger = logging.getLogger(__name__)


class ExportCompressionPipeline:
    """Entry point used by export tooling after intermediate files are written"""

    def __init__(self,
                 config: Optional[CompressionConfig] = None,
                 stream: Optional[TextIO] = None,
                 executor: Optional[Executor] = None):
        self.config = config or CompressionConfig()
        self.reporter = ProgressReporter(
            stream=stream,
            show_progress=self.config.show_progress,
            file_label=self.config.file_label
        )
        self.orchestrator = BatchOrchestrator(
            config=self.config,
            reporter=self.reporter,
            executor=executor
        )

    def compress_directory(self,
                           directory: Union[str, os.PathLike],
                           delete_originals: bool = False) -> BatchSummary:
        """Compress every candidate file in directory"""
        logger.debug(f"Compressing directory {directory} (delete_originals={delete_originals})")
        return self.orchestrator.run(directory, delete_originals)

    async def compress_directory_async(self,
                                       directory: Union[str, os.PathLike],
                                       delete_originals: bool = False) -> BatchSummary:
        return await self.orchestrator.run_async(directory, delete_originals)


def compress_csv_files(directory: Union[str, os.PathLike],
                       delete_originals: bool = False,
                       stream: Optional[TextIO] = None) -> BatchSummary:
    """Compress the CSV files of an export directory with default settings"""
    return ExportCompressionPipeline(stream=stream).compress_directory(directory, delete_originals)


async def compress_csv_files_async(directory: Union[str, os.PathLike],
                                   delete_originals: bool = False,
                                   stream: Optional[TextIO] = None) -> BatchSummary:
    pipeline = ExportCompressionPipeline(stream=stream)
    return await pipeline.compress_directory_async(directory, delete_originals)
