"""
Export compression pipeline modules.
"""

# Import pipeline stages
from .stages.compression import StreamCompressor
from .stages.retention import RetentionPolicy
from .stages.sizing import SizeClassifier, select_buffer_size
from .workers.parallel_processor import BatchOrchestrator

__all__ = [
    'StreamCompressor',
    'RetentionPolicy',
    'SizeClassifier',
    'select_buffer_size',
    'BatchOrchestrator',
]
