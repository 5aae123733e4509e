"""
Shared types for FASTQ splitting components.
"""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Read:
    """A single sequencing read as stored in a FASTQ record."""

    id: str  # Identifier line, including the leading '@'
    sequence: str
    quality: str

    def head(self, n: int) -> "Read":
        """Bases [0, n) with the id unchanged."""
        return Read(self.id, self.sequence[:n], self.quality[:n])

    def tail(self, n: int) -> "Read":
        """Bases [n, end) with the id unchanged."""
        return Read(self.id, self.sequence[n:], self.quality[n:])


@dataclass(frozen=True)
class PairedSplit:
    """One side (head or tail) of a split read pair."""

    is_head: bool
    first: Read  # R1
    second: Read  # R2

    @property
    def reads(self) -> Tuple[Read, Read]:
        return (self.first, self.second)


@dataclass(frozen=True)
class SingleSplit:
    """One side (head or tail) of a split single-end read."""

    is_head: bool
    read: Read

    @property
    def reads(self) -> Tuple[Read]:
        return (self.read,)


@dataclass
class SplitStats:
    """Counters for one split run."""

    records_read: int = 0  # Reads, or read pairs in paired mode
    records_discarded: int = 0
    units_written: int = 0
    elapsed_seconds: float = 0.0

    @property
    def records_kept(self) -> int:
        return self.records_read - self.records_discarded

    def as_dict(self) -> dict:
        return {
            "records_read": self.records_read,
            "records_discarded": self.records_discarded,
            "records_kept": self.records_kept,
            "units_written": self.units_written,
            "elapsed_seconds": round(self.elapsed_seconds, 3),
        }
