"""
Shared fixtures for the export compression tests.
"""

import gzip
import io
import shutil
import tempfile
from pathlib import Path

import pytest

SAMPLE_CSV_SIMPLE = "id,name\n1,test\n2,example\n"
SAMPLE_CSV_NAMES = "name,age,city\nJohn,25,NYC\nJane,30,LA\n"
SAMPLE_CSV_SINGLE_COL = "col1\nvalue1\n"
SAMPLE_CSV_HEADER_ONLY = "header\n"
SAMPLE_CSV_ID = "id\n1\n"


def repetitive_csv(rows: int) -> str:
    lines = ["id,status,category,description"]
    for i in range(rows):
        lines.append(f"{i},ACTIVE,DEFAULT,This is a repeated description for compression")
    return "\n".join(lines) + "\n"


def write_file(directory: Path, name: str, content) -> Path:
    path = directory / name
    if isinstance(content, str):
        path.write_text(content, encoding="utf-8")
    else:
        path.write_bytes(content)
    return path


def read_gzip(path: Path) -> bytes:
    with gzip.open(path, 'rb') as f:
        return f.read()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    tmp_dir = Path(tempfile.mkdtemp())
    yield tmp_dir
    shutil.rmtree(tmp_dir, ignore_errors=True)


@pytest.fixture
def sink():
    """In-memory narration stream."""
    return io.StringIO()
