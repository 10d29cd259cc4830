#!/usr/bin/env python3

import argparse
import logging
import sys
from typing import BinaryIO, Optional

from tqdm import tqdm

from fastqcheck.config import CheckConfig, DEFAULT_MAX_LENGTH
from fastqcheck.reader import FastqCheckError, RecordReader, StreamOpenError
from fastqcheck.report import render_report
from fastqcheck.stats import FastqStats, Report

try:
    from fastqcheck import __version__
except ImportError:
    # Fallback for when running as a script directly
    __version__ = "dev"


def check_fastq(stream: BinaryIO, config: Optional[CheckConfig] = None) -> Report:
    """Read every record from stream and return the finalized Report.

    Raises MalformedRecordError or LengthExceededError on the first bad
    record; nothing is reported for a run that fails part way.
    """
    if config is None:
        config = CheckConfig()
    config.validate()

    stats = FastqStats(config.max_length)
    reader = RecordReader(stream, quality_offset=config.quality_offset)
    for record in tqdm(reader, desc="Reading records", unit="read",
                       disable=not config.show_progress):
        stats.accumulate(record)

    logging.info(f"Read {stats.record_count} records, {stats.total_length} bases")
    return stats.finalize()


def open_input(path: str) -> BinaryIO:
    try:
        return open(path, 'rb')
    except OSError as e:
        raise StreamOpenError(path, e.strerror or str(e)) from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fastqcheck",
        description="fastqcheck is a program that reads FASTQ files, generates statistics, "
                    "and can be used as a validator. Reads standard input when no file is given."
    )
    parser.add_argument("input_file", nargs="?", default=None,
                        help="Input FASTQ file (default: standard input)")
    parser.add_argument("--max-length", type=int, default=DEFAULT_MAX_LENGTH,
                        help=f"Longest read accepted; longer reads are a fatal error (default: {DEFAULT_MAX_LENGTH})")
    parser.add_argument("--phred64", action="store_true",
                        help="Quality characters use offset 64 (Illumina 1.3-1.7) instead of 33")
    parser.add_argument("--progress", action="store_true",
                        help="Show a progress bar on stderr")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        help="Logging level (default: WARNING)")
    parser.add_argument("--version", action="version",
                        version=f"fastqcheck {__version__}",
                        help="Show program's version number and exit")
    return parser


def parse_arguments(argv=None):
    """Parse command line arguments."""
    return build_parser().parse_args(argv)


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    config = CheckConfig.from_args(args)
    try:
        config.validate()
    except ValueError as e:
        parser.error(str(e))
    logging.debug(f"Configuration: {config}")

    if args.input_file is None:
        logging.info("Reading FASTQ from standard input")
        stream = sys.stdin.buffer
    else:
        try:
            stream = open_input(args.input_file)
        except StreamOpenError as e:
            logging.error(str(e))
            parser.print_usage(sys.stderr)
            sys.exit(1)
        logging.info(f"Reading FASTQ from {args.input_file}")

    try:
        report = check_fastq(stream, config)
    except FastqCheckError as e:
        logging.error(str(e))
        sys.exit(1)
    finally:
        if args.input_file is not None:
            stream.close()

    sys.stdout.write(render_report(report))


if __name__ == "__main__":
    main()
