#!/usr/bin/env python3
"""
Command line entry point for splitting FASTQ reads at a fixed position.
"""

import argparse
import logging
import sys

from .components.errors import ConfigError, FastqSplitError
from .components.pipeline import (
    DEFAULT_BASENAME,
    DEFAULT_PROGRESS_INTERVAL,
    SplitConfig,
    output_paths,
    run_split,
)

logger = logging.getLogger("fastq_splitter")

EXAMPLE = "Example: fq-split -r1 example/test_r1.fq.gz -r2 example/test_r2.fq.gz -n 10"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fq-split",
        description="Split every FASTQ read at the nth base into begin and end files.",
        epilog=EXAMPLE,
    )
    parser.add_argument("-r1", "--r1", help="Path for your R1 FASTQ file")
    parser.add_argument("-r2", "--r2", help="Path for your R2 FASTQ file")
    parser.add_argument("-se", "--se", help="Path for your single end FASTQ file")
    parser.add_argument(
        "-n",
        type=int,
        required=True,
        help="Position to split your reads. Ex: n=3, seq=AAATTTTT would give AAA and TTTTT.",
    )
    parser.add_argument(
        "-out",
        "--out",
        default=DEFAULT_BASENAME,
        help="Output basename for the begin and end files (default: %(default)s)",
    )
    parser.add_argument(
        "--strict-pairing",
        action="store_true",
        help="Fail when R1 and R2 read ids or record counts do not match",
    )
    parser.add_argument(
        "--progress-interval",
        type=int,
        default=DEFAULT_PROGRESS_INTERVAL,
        help="Log progress every this many records, 0 to disable (default: %(default)s)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    try:
        config = SplitConfig(
            n=args.n,
            r1=args.r1,
            r2=args.r2,
            se=args.se,
            out=args.out,
            strict_pairing=args.strict_pairing,
            progress_interval=args.progress_interval,
        )
    except ConfigError as e:
        parser.error(str(e))

    try:
        stats = run_split(config)
    except FastqSplitError as e:
        logger.error(f"❌ Error: {e}")
        return 1

    for path in output_paths(config.out, config.paired).values():
        logger.info(f"Wrote {path}")
    logger.debug(f"Run statistics: {stats.as_dict()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
