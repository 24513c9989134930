"""
Pipeline Configurations for Export Compression
==============================================

Settings for the batch gzip stage and pre-configured presets for
common export sizes.
"""

from dataclasses import dataclass
from typing import Optional
import logging

logger = logging.getLogger(__name__)

KIB = 1024
GIB = 1024 * 1024 * 1024


@dataclass
class CompressionConfig:
    """Configuration settings for the compression stage"""

    # Discovery settings
    source_extension: str = '.csv'
    output_suffix: str = '.gz'

    # Compression settings
    compression_level: int = 6

    # Buffer ladder
    small_buffer_size: int = 64 * KIB
    large_buffer_size: int = 256 * KIB
    large_file_threshold: int = GIB

    # Processing settings
    num_workers: Optional[int] = None  # executor default when None

    # Output settings
    show_progress: bool = False

    def __post_init__(self) -> None:
        """Validate configuration parameters"""
        if not self.source_extension:
            raise ValueError("source_extension must not be empty")
        if not self.source_extension.startswith('.'):
            self.source_extension = '.' + self.source_extension
        if not self.output_suffix or not self.output_suffix.startswith('.'):
            raise ValueError("output_suffix must start with '.'")
        if self.source_extension.lower() == self.output_suffix.lower():
            raise ValueError("source_extension and output_suffix must differ")

        if self.compression_level < 1 or self.compression_level > 9:
            raise ValueError("compression_level must be between 1 and 9")
        if self.small_buffer_size <= 0 or self.large_buffer_size <= 0:
            raise ValueError("buffer sizes must be positive")
        if self.small_buffer_size > self.large_buffer_size:
            raise ValueError("small_buffer_size cannot exceed large_buffer_size")
        if self.large_file_threshold <= 0:
            raise ValueError("large_file_threshold must be positive")
        if self.num_workers is not None and self.num_workers <= 0:
            raise ValueError("num_workers must be positive")

    @property
    def file_label(self) -> str:
        """Display label for the source format, e.g. 'CSV'"""
        return self.source_extension.lstrip('.').upper()


class ConfigPresets:
    """Pre-configured settings for common use cases"""

    @staticmethod
    def default() -> CompressionConfig:
        """Balanced settings used by the export tooling"""
        return CompressionConfig()

    @staticmethod
    def large_exports() -> CompressionConfig:
        """
        Optimized for multi-gigabyte exports
        - Fastest deflate level
        - Larger buffers on both ladder rungs
        """
        return CompressionConfig(
            compression_level=1,
            small_buffer_size=256 * KIB,
            large_buffer_size=1024 * KIB,
        )

    @staticmethod
    def maximum_compression() -> CompressionConfig:
        """Smallest output, slowest compression"""
        return CompressionConfig(compression_level=9)


def get_preset(name: str) -> CompressionConfig:
    """Look up a preset by name"""
    presets = {
        'default': ConfigPresets.default,
        'large': ConfigPresets.large_exports,
        'max': ConfigPresets.maximum_compression,
    }
    if name not in presets:
        raise ValueError(f"Unknown preset: {name}. Choose from {sorted(presets)}")
    logger.debug(f"Using configuration preset '{name}'")
    return presets[name]()
