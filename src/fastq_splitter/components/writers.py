"""
FASTQ output sinks and the split writer.

Sinks are append-created BGZF files, which any gzip reader can decompress.
"""

from concurrent.futures import ThreadPoolExecutor, wait
from typing import Iterable, Sequence, Union

import pysam

from .errors import OutputError
from .types import PairedSplit, Read, SingleSplit

SplitUnit = Union[PairedSplit, SingleSplit]


def format_read(read: Read) -> bytes:
    """Serialize a read as one FASTQ record."""
    return f"{read.id}\n{read.sequence}\n+\n{read.quality}\n".encode("latin-1")


class FastqSink:
    """Append-only, BGZF-compressed FASTQ output file."""

    def __init__(self, path: str):
        self.path = path
        try:
            # htslib does not report why an open failed, so create the file here
            open(path, "ab").close()
            self._handle = pysam.BGZFile(path, "ab")
        except OSError as e:
            raise OutputError(path, str(e)) from e

    def write_read(self, read: Read) -> None:
        try:
            self._handle.write(format_read(read))
        except (OSError, ValueError) as e:
            raise OutputError(self.path, str(e)) from e

    def close(self) -> None:
        """Flush buffered blocks and write the BGZF end-of-file marker."""
        try:
            self._handle.close()
        except OSError as e:
            raise OutputError(self.path, str(e)) from e

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class SplitWriter:
    """
    Writes split units to their head or tail sinks.

    The i-th read of a unit goes to the i-th sink of the matching side. When a
    unit holds more than one read the writes run concurrently, and write()
    only returns once all of them finished.
    """

    def __init__(self, head_sinks: Sequence[FastqSink], tail_sinks: Sequence[FastqSink]):
        if len(head_sinks) != len(tail_sinks):
            raise ValueError("head and tail sides need the same number of sinks")
        self.head_sinks = tuple(head_sinks)
        self.tail_sinks = tuple(tail_sinks)
        self._pool = (
            ThreadPoolExecutor(
                max_workers=len(self.head_sinks), thread_name_prefix="sink-writer"
            )
            if len(self.head_sinks) > 1
            else None
        )

    def write(self, unit: SplitUnit) -> None:
        sinks = self.head_sinks if unit.is_head else self.tail_sinks

        if self._pool is None:
            for sink, read in zip(sinks, unit.reads):
                sink.write_read(read)
            return

        futures = [
            self._pool.submit(sink.write_read, read)
            for sink, read in zip(sinks, unit.reads)
        ]
        wait(futures)
        for future in futures:
            future.result()

    def consume(self, units: Iterable[SplitUnit]) -> int:
        """Write every unit in order; returns the number of units written."""
        written = 0
        for unit in units:
            self.write(unit)
            written += 1
        return written

    def close(self) -> None:
        if self._pool is not None:
            self._pool.shutdown(wait=True)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
