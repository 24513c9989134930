"""
Buffer sizing for per-file I/O.
"""

from typing import Optional

from pipeline_configs import CompressionConfig, GIB, KIB

SMALL_BUFFER_SIZE = 64 * KIB
LARGE_BUFFER_SIZE = 256 * KIB
LARGE_FILE_THRESHOLD = GIB


def select_buffer_size(file_size: int,
                       threshold: int = LARGE_FILE_THRESHOLD,
                       small: int = SMALL_BUFFER_SIZE,
                       large: int = LARGE_BUFFER_SIZE) -> int:
    """Return the buffer tier for a file of file_size bytes."""
    if max(file_size, 0) >= threshold:
        return large
    return small


class SizeClassifier:
    """Maps a file's byte length onto the configured buffer ladder"""

    def __init__(self, config: Optional[CompressionConfig] = None):
        config = config or CompressionConfig()
        self.threshold = config.large_file_threshold
        self.small_buffer_size = config.small_buffer_size
        self.large_buffer_size = config.large_buffer_size

    def buffer_size_for(self, file_size: int) -> int:
        return select_buffer_size(
            file_size,
            threshold=self.threshold,
            small=self.small_buffer_size,
            large=self.large_buffer_size
        )

    def is_large(self, file_size: int) -> bool:
        return file_size >= self.threshold
