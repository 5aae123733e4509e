import gzip
from typing import Iterable, List, Tuple

import pytest


def fastq_text(records: Iterable[Tuple[str, str, str]]) -> str:
    return "".join(f"{rid}\n{seq}\n+\n{qual}\n" for rid, seq, qual in records)


def read_records(path) -> List[Tuple[str, str, str]]:
    with gzip.open(path, "rt") as handle:
        lines = handle.read().splitlines()
    return [(lines[i], lines[i + 1], lines[i + 3]) for i in range(0, len(lines), 4)]


@pytest.fixture
def write_fastq(tmp_path):
    """Write (id, sequence, quality) records to a gzip FASTQ file."""

    def _write(name: str, records, trailing: str = "") -> str:
        path = tmp_path / name
        with gzip.open(path, "wt") as handle:
            handle.write(fastq_text(records) + trailing)
        return str(path)

    return _write


@pytest.fixture
def out_base(tmp_path) -> str:
    out_dir = tmp_path / "out"
    out_dir.mkdir()
    return str(out_dir / "sample")


def make_reads(prefix: str, count: int, length: int = 12):
    bases = "ACGT"
    return [
        (
            f"@{prefix}{i}",
            "".join(bases[(i + j) % 4] for j in range(length)),
            "".join(chr(33 + (i + j) % 40) for j in range(length)),
        )
        for i in range(count)
    ]


@pytest.fixture
def reads_factory():
    return make_reads


@pytest.fixture
def records_of():
    return read_records


@pytest.fixture
def as_text():
    return fastq_text

