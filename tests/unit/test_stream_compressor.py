"""
Unit tests for the stream compressor
====================================

Covers gzip container validity, round trips of edge-size inputs,
failure capture and the no-partial-output policy.
"""

import gzip
import os
import zlib

import pytest

from base_classes import CompressionFailure, CompressionSuccess
from pipeline.stages.compression import StreamCompressor
from pipeline_configs import CompressionConfig

from conftest import SAMPLE_CSV_SIMPLE, read_gzip, repetitive_csv, write_file


def leftover_temp_files(directory):
    return [p for p in directory.iterdir() if p.name.endswith('.tmp')]


class TestStreamCompressor:
    """Test StreamCompressor.compress"""

    def test_compress_round_trip(self, temp_dir):
        source = write_file(temp_dir, "data.csv", SAMPLE_CSV_SIMPLE)
        compressor = StreamCompressor()

        outcome = compressor.compress(source, 64 * 1024)

        assert isinstance(outcome, CompressionSuccess)
        assert outcome.ok
        assert outcome.output_path == temp_dir / "data.csv.gz"
        assert outcome.output_size == outcome.output_path.stat().st_size
        assert outcome.source_size == len(SAMPLE_CSV_SIMPLE)
        assert outcome.elapsed_ms >= 0
        assert read_gzip(outcome.output_path) == SAMPLE_CSV_SIMPLE.encode()

    def test_source_is_untouched(self, temp_dir):
        source = write_file(temp_dir, "data.csv", SAMPLE_CSV_SIMPLE)

        StreamCompressor().compress(source, 64 * 1024)

        assert source.read_text() == SAMPLE_CSV_SIMPLE

    def test_empty_file_produces_valid_container(self, temp_dir):
        source = write_file(temp_dir, "empty.csv", b"")

        outcome = StreamCompressor().compress(source, 64 * 1024)

        assert outcome.ok
        assert outcome.output_size > 0
        assert outcome.ratio is None
        assert read_gzip(outcome.output_path) == b""

    def test_single_byte_round_trip(self, temp_dir):
        source = write_file(temp_dir, "single.csv", b"a")

        outcome = StreamCompressor().compress(source, 64 * 1024)

        assert read_gzip(outcome.output_path) == b"a"

    def test_chunks_smaller_than_file(self, temp_dir):
        """A tiny buffer forces many read/write iterations"""
        payload = os.urandom(10_000)
        source = write_file(temp_dir, "random.csv", payload)

        outcome = StreamCompressor().compress(source, 7)

        assert outcome.source_size == len(payload)
        assert read_gzip(outcome.output_path) == payload

    def test_gzip_header(self, temp_dir):
        """Standard 10-byte header: magic, deflate method, original name"""
        source = write_file(temp_dir, "named.csv", SAMPLE_CSV_SIMPLE)

        outcome = StreamCompressor().compress(source, 64 * 1024)
        raw = outcome.output_path.read_bytes()

        assert raw[:2] == b'\x1f\x8b'
        assert raw[2] == 8  # deflate
        assert b"named.csv\x00" in raw[10:30]
        assert zlib.decompress(raw, 16 + zlib.MAX_WBITS) == SAMPLE_CSV_SIMPLE.encode()

    def test_repetitive_content_compresses(self, temp_dir):
        content = repetitive_csv(100)
        source = write_file(temp_dir, "repetitive.csv", content)

        outcome = StreamCompressor().compress(source, 64 * 1024)

        assert outcome.ratio < 0.5

    def test_compression_level_is_applied(self, temp_dir, mocker):
        source = write_file(temp_dir, "data.csv", SAMPLE_CSV_SIMPLE)
        gzip_file = mocker.patch('pipeline.stages.compression.gzip.GzipFile', wraps=gzip.GzipFile)

        StreamCompressor(CompressionConfig(compression_level=9)).compress(source, 1024)

        assert gzip_file.call_args.kwargs['compresslevel'] == 9

    def test_pre_epoch_mtime_round_trip(self, temp_dir):
        """A timestamp the gzip header cannot hold is written as 0"""
        source = write_file(temp_dir, "old.csv", SAMPLE_CSV_SIMPLE)
        os.utime(source, (0, -86400))

        outcome = StreamCompressor().compress(source, 64 * 1024)

        assert outcome.ok
        assert read_gzip(outcome.output_path) == SAMPLE_CSV_SIMPLE.encode()
        assert outcome.output_path.read_bytes()[4:8] == b'\x00\x00\x00\x00'

    @pytest.mark.parametrize("st_mtime,expected", [
        (123.9, 123),
        (0, 0),
        (-1, 0),
        (2 ** 32 - 1, 2 ** 32 - 1),
        (2 ** 32, 0),
    ])
    def test_header_mtime_range(self, st_mtime, expected):
        assert StreamCompressor._header_mtime(st_mtime) == expected

    def test_invalid_buffer_size(self, temp_dir):
        source = write_file(temp_dir, "data.csv", SAMPLE_CSV_SIMPLE)

        with pytest.raises(ValueError, match="buffer_size must be positive"):
            StreamCompressor().compress(source, 0)


class TestStreamCompressorFailures:
    """Failures are returned as outcomes, never raised"""

    def test_directory_source_fails(self, temp_dir):
        source = temp_dir / "invalid.csv"
        source.mkdir()

        outcome = StreamCompressor().compress(source, 64 * 1024)

        assert isinstance(outcome, CompressionFailure)
        assert not outcome.ok
        assert outcome.source_path == source
        assert outcome.error_message
        assert not (temp_dir / "invalid.csv.gz").exists()
        assert leftover_temp_files(temp_dir) == []

    def test_missing_source_fails(self, temp_dir):
        outcome = StreamCompressor().compress(temp_dir / "gone.csv", 64 * 1024)

        assert not outcome.ok
        assert outcome.error_type == 'FileNotFoundError'
        assert not (temp_dir / "gone.csv.gz").exists()

    def test_write_failure_leaves_no_partial_output(self, temp_dir, mocker):
        source = write_file(temp_dir, "data.csv", repetitive_csv(1000))
        mocker.patch.object(
            StreamCompressor, '_copy',
            side_effect=OSError(28, 'No space left on device')
        )

        outcome = StreamCompressor().compress(source, 1024)

        assert not outcome.ok
        assert 'No space left on device' in outcome.error_message
        assert not (temp_dir / "data.csv.gz").exists()
        assert leftover_temp_files(temp_dir) == []
        assert source.exists()

    def test_refuses_to_overwrite_non_gzip_file(self, temp_dir):
        source = write_file(temp_dir, "data.csv", SAMPLE_CSV_SIMPLE)
        unrelated = write_file(temp_dir, "data.csv.gz", "not a gzip file")

        outcome = StreamCompressor().compress(source, 64 * 1024)

        assert not outcome.ok
        assert outcome.error_type == 'OutputConflictError'
        assert unrelated.read_text() == "not a gzip file"

    def test_keeps_file_created_during_compression(self, temp_dir, mocker):
        """A non-gzip file that shows up at the target mid-write is not clobbered"""
        source = write_file(temp_dir, "data.csv", SAMPLE_CSV_SIMPLE)
        real_copy = StreamCompressor._copy

        def copy_then_collide(src, sink, buffer_size):
            total = real_copy(src, sink, buffer_size)
            write_file(temp_dir, "data.csv.gz", "written by someone else")
            return total

        mocker.patch.object(StreamCompressor, '_copy', side_effect=copy_then_collide)

        outcome = StreamCompressor().compress(source, 64 * 1024)

        assert not outcome.ok
        assert outcome.error_type == 'OutputConflictError'
        assert (temp_dir / "data.csv.gz").read_text() == "written by someone else"
        assert leftover_temp_files(temp_dir) == []

    def test_replaces_stale_gzip_output(self, temp_dir):
        source = write_file(temp_dir, "data.csv", SAMPLE_CSV_SIMPLE)
        stale = temp_dir / "data.csv.gz"
        with gzip.open(stale, 'wb') as f:
            f.write(b"old contents")

        outcome = StreamCompressor().compress(source, 64 * 1024)

        assert outcome.ok
        assert read_gzip(stale) == SAMPLE_CSV_SIMPLE.encode()

    def test_output_path_is_suffix_append(self, temp_dir):
        compressor = StreamCompressor()

        assert compressor.output_path_for(temp_dir / "A.CsV") == temp_dir / "A.CsV.gz"
