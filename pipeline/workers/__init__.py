"""
Pipeline worker components for concurrent batch processing.
"""

from .parallel_processor import BatchOrchestrator

__all__ = [
    'BatchOrchestrator',
]
