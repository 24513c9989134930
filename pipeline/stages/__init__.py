"""
Pipeline stages for the export compression system.
"""

from .compression import StreamCompressor
from .retention import RetentionPolicy
from .sizing import SizeClassifier, select_buffer_size

__all__ = [
    'StreamCompressor',
    'RetentionPolicy',
    'SizeClassifier',
    'select_buffer_size',
]
