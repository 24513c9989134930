#!/usr/bin/env python3
"""
Command line wrapper for the export compression pipeline.
"""

import argparse
import dataclasses
import logging
import sys
from typing import List, Optional

from export_compression_pipeline import ExportCompressionPipeline
from pipeline_configs import get_preset
from pipeline_monitoring import MetricsExporter
from resilience_patterns import StructuralError

EXIT_OK = 0
EXIT_PARTIAL_FAILURE = 1
EXIT_STRUCTURAL_ERROR = 2


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Gzip the intermediate CSV files of an export directory",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  compress.py ./export                      # Compress, keep originals
  compress.py --delete-originals ./export   # Compress and remove CSVs
  compress.py --extension .tsv ./export     # Compress TSV files instead
  compress.py --json ./export               # Print a JSON summary on stdout
        """
    )

    parser.add_argument('directory',
                        help='Directory containing the files to compress')
    parser.add_argument('--delete-originals', action='store_true',
                        help='Remove each source file after it is compressed')
    parser.add_argument('--extension', default=None,
                        help='Source file extension to match (default: .csv)')
    parser.add_argument('--preset', choices=['default', 'large', 'max'], default='default',
                        help='Configuration preset (default: default)')
    parser.add_argument('--level', type=int, default=None,
                        help='Deflate compression level 1-9')
    parser.add_argument('--workers', type=int, default=None,
                        help='Thread pool size (default: executor default)')
    parser.add_argument('--progress', action='store_true',
                        help='Show a progress bar')
    parser.add_argument('--json', action='store_true',
                        help='Print the batch summary as JSON on stdout')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable debug logging')

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_arguments(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        overrides = {'show_progress': args.progress}
        if args.extension:
            overrides['source_extension'] = args.extension
        if args.level is not None:
            overrides['compression_level'] = args.level
        if args.workers is not None:
            overrides['num_workers'] = args.workers
        config = dataclasses.replace(get_preset(args.preset), **overrides)
    except ValueError as e:
        print(f"❌ Invalid configuration: {e}", file=sys.stderr)
        return EXIT_STRUCTURAL_ERROR

    pipeline = ExportCompressionPipeline(config=config)

    try:
        summary = pipeline.compress_directory(args.directory, args.delete_originals)
    except StructuralError as e:
        logging.getLogger(__name__).debug(f"Structural error: {e.log_context()}")
        print(f"❌ Error: {e}", file=sys.stderr)
        return EXIT_STRUCTURAL_ERROR
    except KeyboardInterrupt:
        print("\n\nInterrupted by user", file=sys.stderr)
        return EXIT_PARTIAL_FAILURE

    if args.json:
        print(MetricsExporter.to_json(summary))

    return EXIT_OK if summary.failed == 0 else EXIT_PARTIAL_FAILURE


if __name__ == "__main__":
    sys.exit(main())
