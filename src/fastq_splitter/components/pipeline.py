"""
Pipeline driver for splitting FASTQ reads at a fixed position.

One run wires record sources, a splitter and the split writer together over
capacity-one channels:

    read_fastq (thread per input) -> splitter (thread) -> SplitWriter (caller)

The driver opens the output files, streams every record through, then closes
the outputs in a fixed order: begin before end, R1 before R2. Fatal errors are
raised to the caller once every output has been closed.
"""

import enum
import logging
import time
from contextlib import closing
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional, Sequence

from .errors import ConfigError, FastqSplitError
from .handoff import Channel, StageGroup
from .read_fastq import read_fastq
from .splitters import split_pairs
from .splitters import split_single as split_single_reads
from .types import SplitStats
from .writers import FastqSink, SplitUnit, SplitWriter

logger = logging.getLogger(__name__)

PAIRED_SUFFIXES = ("begin_R1", "begin_R2", "end_R1", "end_R2")
SINGLE_SUFFIXES = ("begin_SE", "end_SE")
DEFAULT_BASENAME = "test-1"
DEFAULT_PROGRESS_INTERVAL = 1_000_000


class RunState(enum.Enum):
    IDLE = "idle"
    SINKS_OPEN = "sinks open"
    STREAMING = "streaming"
    DRAINING = "draining"
    CLOSED = "closed"


def output_paths(basename: str, paired: bool) -> Dict[str, str]:
    """Output file per sink name, in open and close order."""
    suffixes = PAIRED_SUFFIXES if paired else SINGLE_SUFFIXES
    return {suffix: f"{basename}_{suffix}.fq.gz" for suffix in suffixes}


@dataclass
class SplitConfig:
    """Validated settings for one split run."""

    n: int
    r1: Optional[str] = None
    r2: Optional[str] = None
    se: Optional[str] = None
    out: str = DEFAULT_BASENAME
    strict_pairing: bool = False
    progress_interval: Optional[int] = DEFAULT_PROGRESS_INTERVAL

    def __post_init__(self):
        if isinstance(self.n, bool) or not isinstance(self.n, int) or self.n <= 0:
            raise ConfigError("Need to provide n greater than 0. Ex: 35")
        paired = bool(self.r1 or self.r2)
        if not paired and not self.se:
            raise ConfigError(
                "Need to provide a path for your FASTQ file. It can be paired-end "
                "experiment (-r1 and -r2) or single-end (-se)"
            )
        if paired and self.se:
            raise ConfigError(
                "You can only use paired-end (by providing -r1 and -r2) or "
                "single-end (-se). Not both."
            )
        if paired and not (self.r1 and self.r2):
            raise ConfigError("Paired-end mode needs both -r1 and -r2")
        if self.strict_pairing and not paired:
            raise ConfigError("Strict pairing only applies to paired-end input")
        if not self.out:
            raise ConfigError("Need to provide an output basename")

    @property
    def paired(self) -> bool:
        return bool(self.r1)


def run_split(config: SplitConfig) -> SplitStats:
    """Run the split selected by config."""
    if config.paired:
        return split_paired(
            config.r1,
            config.r2,
            config.n,
            config.out,
            strict=config.strict_pairing,
            progress_interval=config.progress_interval,
        )
    return split_single(
        config.se, config.n, config.out, progress_interval=config.progress_interval
    )


def split_paired(
    r1_path: str,
    r2_path: str,
    n: int,
    basename: str,
    strict: bool = False,
    progress_interval: Optional[int] = DEFAULT_PROGRESS_INTERVAL,
) -> SplitStats:
    """Split paired-end reads into the four begin/end R1/R2 outputs."""
    logger.info(f"Splitting paired-end reads {r1_path} and {r2_path} at n={n}")

    def splitter(channels: List[Channel], stats: SplitStats) -> Iterator[SplitUnit]:
        return split_pairs(channels[0], channels[1], n, stats, strict=strict)

    return _run_pipeline(
        [r1_path, r2_path], splitter, output_paths(basename, True), progress_interval
    )


def split_single(
    path: str,
    n: int,
    basename: str,
    progress_interval: Optional[int] = DEFAULT_PROGRESS_INTERVAL,
) -> SplitStats:
    """Split single-end reads into the begin/end SE outputs."""
    logger.info(f"Splitting single-end reads {path} at n={n}")

    def splitter(channels: List[Channel], stats: SplitStats) -> Iterator[SplitUnit]:
        return split_single_reads(channels[0], n, stats)

    return _run_pipeline(
        [path], splitter, output_paths(basename, False), progress_interval
    )



def _source_stage(path: str, channel: Channel, progress_interval: Optional[int]) -> None:
    with closing(read_fastq(path, progress_interval)) as reads:
        for read in reads:
            channel.send(read)
    channel.close()


def _split_stage(
    splitter: Callable[[List[Channel], SplitStats], Iterator[SplitUnit]],
    channels: List[Channel],
    units: Channel,
    stats: SplitStats,
) -> None:
    for unit in splitter(channels, stats):
        units.send(unit)
    units.close()


def _write_stage(writer: SplitWriter, units: Channel, stats: SplitStats) -> None:
    stats.units_written = writer.consume(units)


def _open_sinks(paths: Dict[str, str]) -> List[FastqSink]:
    sinks = []
    try:
        for path in paths.values():
            sinks.append(FastqSink(path))
    except FastqSplitError:
        _close_sinks(sinks, raise_errors=False)
        raise
    return sinks


def _close_sinks(sinks: Sequence[FastqSink], raise_errors: bool = True) -> None:
    """Close every sink in order, even if an earlier one fails."""
    first_error = None
    for sink in sinks:
        try:
            sink.close()
        except FastqSplitError as e:
            logger.error(f"Failed to close {sink.path}: {e}")
            first_error = first_error or e
    if first_error is not None and raise_errors:
        raise first_error


def _enter(state: RunState) -> None:
    logger.debug(f"Run state: {state.value}")


def _run_pipeline(
    input_paths: List[str],
    splitter: Callable[[List[Channel], SplitStats], Iterator[SplitUnit]],
    sink_paths: Dict[str, str],
    progress_interval: Optional[int],
) -> SplitStats:
    stats = SplitStats()
    start_time = time.time()
    _enter(RunState.IDLE)

    sinks = _open_sinks(sink_paths)
    _enter(RunState.SINKS_OPEN)

    try:
        group = StageGroup()
        channels = []
        for index, path in enumerate(input_paths, start=1):
            channel = group.channel()
            group.start(f"source-{index}", _source_stage, path, channel, progress_interval)
            channels.append(channel)

        units = group.channel()
        group.start("splitter", _split_stage, splitter, channels, units, stats)
        _enter(RunState.STREAMING)

        half = len(sinks) // 2
        with SplitWriter(sinks[:half], sinks[half:]) as writer:
            group.run(_write_stage, writer, units, stats)
        group.join()
    except Exception:
        _close_sinks(sinks, raise_errors=False)
        _enter(RunState.CLOSED)
        raise

    _enter(RunState.DRAINING)
    _close_sinks(sinks)
    _enter(RunState.CLOSED)

    stats.elapsed_seconds = time.time() - start_time
    rate = (
        stats.records_read / stats.elapsed_seconds if stats.elapsed_seconds > 0 else 0
    )
    logger.info(
        f"Split complete: {stats.records_read:,} records read, "
        f"{stats.records_discarded:,} discarded, {stats.units_written:,} units "
        f"written in {stats.elapsed_seconds:.2f}s ({rate:.0f} records/sec)"
    )
    return stats
