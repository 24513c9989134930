"""
Streaming gzip compression of a single export file.
"""

import gzip
import logging
import os
import time
import zlib
from pathlib import Path
from typing import BinaryIO, Optional

from base_classes import CompressionFailure, CompressionOutcome, CompressionSuccess
from pipeline_configs import CompressionConfig
from resilience_patterns import OutputConflictError, describe_error
from secure_utils import SecureFileHandler

logger = logging.getLogger(__name__)


class StreamCompressor:
    """
    Compresses one file end-to-end into a sibling ``.gz`` file.

    The source is read in buffer-sized chunks and streamed through a gzip
    encoder into a temporary file that replaces ``source + ".gz"`` once the
    container is complete. Any I/O error is returned as a
    CompressionFailure; no partial output is left on disk.
    """

    def __init__(self,
                 config: Optional[CompressionConfig] = None,
                 file_handler: Optional[SecureFileHandler] = None):
        """
        Initialize the stream compressor.

        Args:
            config: Compression settings (level, output suffix)
            file_handler: Handler used for guarded atomic writes
        """
        self.config = config or CompressionConfig()
        self.compression_level = self.config.compression_level
        self.output_suffix = self.config.output_suffix
        self.file_handler = file_handler or SecureFileHandler()

        logger.debug(f"Initialized StreamCompressor with level={self.compression_level}, "
                     f"suffix={self.output_suffix}")

    def output_path_for(self, source_path: Path) -> Path:
        """Deterministic destination: the source path with the suffix appended"""
        return Path(str(source_path) + self.output_suffix)

    def compress(self, source_path: Path, buffer_size: int) -> CompressionOutcome:
        """
        Compress source_path into its sibling gzip file.

        Args:
            source_path: File to compress; it is only ever read
            buffer_size: Chunk size for reads and for the output buffer

        Returns:
            CompressionSuccess with output size and elapsed time, or
            CompressionFailure carrying the error message
        """
        if buffer_size <= 0:
            raise ValueError("buffer_size must be positive")

        source_path = Path(source_path)
        output_path = self.output_path_for(source_path)
        start_time = time.perf_counter()

        try:
            self.file_handler.check_output_target(output_path)
            with open(source_path, 'rb', buffering=buffer_size) as source:
                mtime = self._header_mtime(os.fstat(source.fileno()).st_mtime)
                with self.file_handler.atomic_output(output_path, buffer_size) as raw:
                    with gzip.GzipFile(filename=source_path.name,
                                       mode='wb',
                                       compresslevel=self.compression_level,
                                       fileobj=raw,
                                       mtime=mtime) as encoder:
                        bytes_read = self._copy(source, encoder, buffer_size)
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            output_size = output_path.stat().st_size
        except (OSError, zlib.error, OutputConflictError) as e:
            logger.warning(f"Compression of {source_path} failed: {e!r}")
            return CompressionFailure(
                source_path=source_path,
                error_message=describe_error(e),
                error_type=type(e).__name__
            )

        logger.debug(f"Compressed {source_path}: {bytes_read} -> {output_size} bytes "
                     f"in {elapsed_ms:.1f}ms (buffer={buffer_size})")
        return CompressionSuccess(
            source_path=source_path,
            output_path=output_path,
            source_size=bytes_read,
            output_size=output_size,
            elapsed_ms=elapsed_ms
        )

    @staticmethod
    def _header_mtime(st_mtime: float) -> int:
        """gzip stores an unsigned 32-bit timestamp; 0 means none"""
        mtime = int(st_mtime)
        if 0 <= mtime < 2 ** 32:
            return mtime
        return 0

    @staticmethod
    def _copy(source: BinaryIO, sink: BinaryIO, buffer_size: int) -> int:
        """Copy every byte from source to sink; returns the byte count"""
        total = 0
        while True:
            chunk = source.read(buffer_size)
            if not chunk:
                break
            sink.write(chunk)
            total += len(chunk)
        return total
