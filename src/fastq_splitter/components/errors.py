"""
Errors raised by the FASTQ splitting pipeline.

Record-level problems (reads too short to split) are never raised; they are
logged by the splitters and the run continues. Everything here is fatal.
"""


class FastqSplitError(Exception):
    """Base class for fatal split errors."""


class ConfigError(FastqSplitError):
    """Missing or contradictory run configuration."""


class InputError(FastqSplitError):
    """An input FASTQ file could not be opened or decompressed."""

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"Cannot read FASTQ input {path}: {reason}")


class OutputError(FastqSplitError):
    """An output FASTQ file could not be opened, written or closed."""

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"Cannot write FASTQ output {path}: {reason}")


class PairingError(FastqSplitError):
    """R1 and R2 inputs are not record-aligned (strict pairing only)."""
