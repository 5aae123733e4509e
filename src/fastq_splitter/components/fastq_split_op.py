"""
FASTQ Splitter Component

An op component that splits the reads of one FASTQ sample at a fixed position,
streaming records without buffering the input in memory.
"""

import logging
from pathlib import Path
from typing import Optional

import dagster
from dagster import Config, OpExecutionContext, Out, op

from .errors import FastqSplitError
from .pipeline import (
    DEFAULT_BASENAME,
    DEFAULT_PROGRESS_INTERVAL,
    SplitConfig,
    output_paths,
    run_split,
)

PACKAGE_LOGGER = "fastq_splitter"


class OpLogHandler(logging.Handler):
    """Forwards pipeline log records, such as discarded reads, to an op's log."""

    def __init__(self, log: logging.Logger):
        super().__init__()
        self.log = log

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.log.log(record.levelno, self.format(record))
        except Exception:
            self.handleError(record)


class SplitRunConfig(Config):
    """Per-run settings for the split op."""

    n: int
    r1: Optional[str] = None
    r2: Optional[str] = None
    se: Optional[str] = None
    out: str = DEFAULT_BASENAME
    strict_pairing: bool = False


class FastqSplitter(dagster.Model, dagster.Resolvable):
    """
    Component for splitting FASTQ reads into begin and end files.

    The op runs the whole streaming pipeline for one sample: paired-end
    samples produce four outputs, single-end samples two.
    """

    name: str = "split_fastq"
    progress_interval: int = DEFAULT_PROGRESS_INTERVAL

    def build_defs(self, context):
        @op(
            name=self.name,
            out=Out(dict),
            description="Splits FASTQ reads at a fixed position into begin and end files",
        )
        def split_fastq_op(context: OpExecutionContext, config: SplitRunConfig) -> dict:
            """
            Op that streams one FASTQ sample through the split pipeline.

            Returns the run statistics together with the output file paths.
            """
            try:
                split_config = SplitConfig(
                    n=config.n,
                    r1=config.r1,
                    r2=config.r2,
                    se=config.se,
                    out=config.out,
                    strict_pairing=config.strict_pairing,
                    progress_interval=self.progress_interval,
                )
                layout = "paired-end" if split_config.paired else "single-end"
                context.log.info(
                    f"✂️ Splitting {layout} reads at position {config.n} into {config.out}_*"
                )

                # Outputs land next to the basename, e.g. split/<sample>_begin_R1.fq.gz
                Path(config.out).parent.mkdir(parents=True, exist_ok=True)

                handler = OpLogHandler(context.log)
                package_logger = logging.getLogger(PACKAGE_LOGGER)
                package_logger.addHandler(handler)
                try:
                    stats = run_split(split_config)
                finally:
                    package_logger.removeHandler(handler)

            except (FastqSplitError, OSError) as e:
                context.log.error(f"❌ Error during split: {e}")
                raise

            context.log.info(
                f"✅ Split complete: {stats.records_kept:,} of {stats.records_read:,} "
                f"records kept, {stats.records_discarded:,} discarded"
            )

            return {
                **stats.as_dict(),
                "outputs": list(output_paths(config.out, split_config.paired).values()),
            }

        return split_fastq_op
