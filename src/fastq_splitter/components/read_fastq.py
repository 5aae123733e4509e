"""
Memory-efficient FASTQ record streaming.

This module decodes gzip-compressed FASTQ files into Read records one at a
time, so inputs of any size are processed with constant memory.
"""

import gzip
import logging
import time
import zlib
from typing import Iterator, Optional

from .errors import InputError
from .types import Read

logger = logging.getLogger(__name__)

LINES_PER_RECORD = 4


def format_progress(records: int, rate: float = None) -> str:
    """Format progress message for consistent logging."""
    base = f"Records: {records:12,d}"
    if rate is not None:
        base += f" | Rate: {rate:8.0f} records/sec"
    return base


def read_fastq(path: str, progress_interval: Optional[int] = None) -> Iterator[Read]:
    """
    Stream Read records from a gzip-compressed FASTQ file.

    Every group of four lines is one record: id, sequence, separator and
    quality. The separator line is not checked. Lines left over at the end of
    the stream that do not complete a record are dropped.

    Raises InputError when the file cannot be opened or decompressed.
    """
    start_time = time.time()
    records = 0
    lines = []

    try:
        with gzip.open(path, "rb") as handle:
            for raw in handle:
                lines.append(raw.rstrip(b"\r\n").decode("latin-1"))
                if len(lines) < LINES_PER_RECORD:
                    continue

                yield Read(id=lines[0], sequence=lines[1], quality=lines[3])
                lines = []
                records += 1

                if progress_interval and records % progress_interval == 0:
                    elapsed_time = time.time() - start_time
                    rate = records / elapsed_time if elapsed_time > 0 else 0
                    logger.info(f"{path} | {format_progress(records, rate)}")
    except (OSError, EOFError, zlib.error) as e:
        raise InputError(path, str(e)) from e

    if lines:
        logger.debug(
            f"Dropped {len(lines)} trailing line(s) of an incomplete record in {path}"
        )
    logger.debug(f"Finished reading {records} records from {path}")
