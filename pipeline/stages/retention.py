"""
Post-compression handling of source files.
"""

import logging
from pathlib import Path
from typing import Optional, Tuple

from base_classes import CompressionSuccess, RetentionDecision
from resilience_patterns import describe_error

logger = logging.getLogger(__name__)


class RetentionPolicy:
    """
    Decides whether a compressed source is deleted.

    The flag is fixed for the lifetime of the policy so it can be shared
    read-only by every task in a batch.
    """

    def __init__(self, delete_originals: bool = False):
        self._delete_originals = bool(delete_originals)

    @property
    def delete_originals(self) -> bool:
        return self._delete_originals

    def apply(self, outcome: CompressionSuccess) -> Tuple[RetentionDecision, Optional[str]]:
        """
        Apply the policy to the source of a successful compression.

        Returns:
            The decision and, for RETENTION_FAILED, the reason
        """
        if not isinstance(outcome, CompressionSuccess):
            raise TypeError("retention applies only to successful compressions")

        source_path = Path(outcome.source_path)
        if source_path == Path(outcome.output_path):
            raise ValueError(f"Source and output are the same path: {source_path}")

        if not self._delete_originals:
            return RetentionDecision.RETAINED, None

        try:
            source_path.unlink()
        except OSError as e:
            logger.warning(f"Could not remove {source_path}: {e!r}")
            return RetentionDecision.RETENTION_FAILED, describe_error(e)

        logger.debug(f"Removed {source_path}")
        return RetentionDecision.DELETED, None
