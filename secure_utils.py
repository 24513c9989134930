"""
Secure Utilities Module
=======================

Safe file operations for compressed outputs: atomic writes through a
temporary sibling and a guard against clobbering unrelated files.
"""

import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator
import logging

from resilience_patterns import OutputConflictError

logger = logging.getLogger(__name__)

GZIP_MAGIC = b'\x1f\x8b'


def is_gzip_file(path: Path) -> bool:
    """Check the two-byte gzip magic number"""
    try:
        with open(path, 'rb') as f:
            return f.read(2) == GZIP_MAGIC
    except OSError:
        return False


class SecureFileHandler:
    """Secure file operations with atomic writes"""

    def __init__(self, file_mode: int = 0o644):
        self.file_mode = file_mode

    def check_output_target(self, target_path: Path) -> None:
        """
        Make sure writing to target_path cannot destroy an unrelated file.

        A missing target or an existing gzip file is fine; anything else
        raises OutputConflictError.
        """
        target_path = Path(target_path)
        if not os.path.lexists(target_path):
            return
        if target_path.is_file() and not target_path.is_symlink() and is_gzip_file(target_path):
            logger.debug(f"Replacing existing gzip output {target_path}")
            return
        raise OutputConflictError(str(target_path))

    @contextmanager
    def atomic_output(self, target_path: Path, buffer_size: int = -1) -> Iterator[BinaryIO]:
        """
        Open a temporary sibling of target_path for buffered binary writing.

        The temporary file is renamed onto target_path when the block exits
        cleanly and removed when it raises, so a failed write never leaves
        partial output behind. The target is checked again right before the
        rename and an unrelated file that appeared meanwhile is kept.
        """
        target_path = Path(target_path)
        fd, temp_path_str = tempfile.mkstemp(
            dir=str(target_path.parent),
            prefix=f'.{target_path.name}.',
            suffix='.tmp'
        )
        temp_path = Path(temp_path_str)

        try:
            with os.fdopen(fd, 'wb', buffering=buffer_size) as f:
                yield f
            if hasattr(os, 'chmod'):
                os.chmod(temp_path, self.file_mode)

            # Something may have appeared at the target while we were writing
            self.check_output_target(target_path)
            temp_path.replace(target_path)
        except BaseException:
            try:
                temp_path.unlink()
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.warning(f"Failed to remove temp file {temp_path}: {e}")
            raise
