"""
Split reads at a fixed base position.

Both splitters are generators: for every read (or read pair) longer than n
they yield the head unit, bases [0, n), followed by the tail unit, bases
[n, end). Shorter reads are discarded with a warning and the run continues.
"""

import itertools
import logging
from typing import Iterable, Iterator, Optional, Tuple

from .errors import PairingError
from .types import PairedSplit, Read, SingleSplit, SplitStats

logger = logging.getLogger(__name__)


def normalize_read_id(read_id: str) -> str:
    """
    Reduce a FASTQ id line to the name shared by both mates.

    Drops the leading '@', any comment after the first whitespace, and a
    trailing /1 or /2 mate suffix.
    """
    name = read_id[1:] if read_id.startswith("@") else read_id
    parts = name.split(None, 1)
    name = parts[0] if parts else ""
    if name.endswith(("/1", "/2")):
        name = name[:-2]
    return name


def _strict_pairs(
    first: Iterable[Read], second: Iterable[Read]
) -> Iterator[Tuple[Read, Read]]:
    for read1, read2 in itertools.zip_longest(first, second):
        if read1 is None:
            raise PairingError(f"R2 has more records than R1, starting at {read2.id}")
        if read2 is None:
            raise PairingError(f"R1 has more records than R2, starting at {read1.id}")
        if normalize_read_id(read1.id) != normalize_read_id(read2.id):
            raise PairingError(f"Read ids do not match: {read1.id} and {read2.id}")
        yield read1, read2


def split_pairs(
    first: Iterable[Read],
    second: Iterable[Read],
    n: int,
    stats: Optional[SplitStats] = None,
    strict: bool = False,
) -> Iterator[PairedSplit]:
    """
    Split paired-end reads at position n.

    Pairing is positional: the k-th R1 read goes with the k-th R2 read and the
    run ends as soon as either input is exhausted. Each step pulls R1 before R2,
    so when R2 runs out first one further R1 read has already been taken from
    `first`; it is neither split nor written. With strict=True the mates'
    ids must match and both inputs must end together, otherwise PairingError
    is raised.
    """
    stats = stats if stats is not None else SplitStats()
    pairs = _strict_pairs(first, second) if strict else zip(first, second)

    for read1, read2 in pairs:
        stats.records_read += 1
        if len(read1.sequence) <= n or len(read2.sequence) <= n:
            stats.records_discarded += 1
            logger.warning(f"Discarded: {read1.id} and {read2.id}")
            continue

        yield PairedSplit(True, read1.head(n), read2.head(n))
        yield PairedSplit(False, read1.tail(n), read2.tail(n))


def split_single(
    reads: Iterable[Read], n: int, stats: Optional[SplitStats] = None
) -> Iterator[SingleSplit]:
    """Split single-end reads at position n."""
    stats = stats if stats is not None else SplitStats()

    for read in reads:
        stats.records_read += 1
        if len(read.sequence) <= n:
            stats.records_discarded += 1
            logger.warning(f"Discarded: {read.id}")
            continue

        yield SingleSplit(True, read.head(n))
        yield SingleSplit(False, read.tail(n))
