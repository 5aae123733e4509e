import gzip
import logging
import os

import pytest

from fastq_splitter.components.errors import (
    ConfigError,
    InputError,
    OutputError,
    PairingError,
)
from fastq_splitter.components.pipeline import (
    SplitConfig,
    output_paths,
    run_split,
    split_paired,
    split_single,
)


def test_output_paths():
    assert list(output_paths("run", paired=True).values()) == [
        "run_begin_R1.fq.gz",
        "run_begin_R2.fq.gz",
        "run_end_R1.fq.gz",
        "run_end_R2.fq.gz",
    ]
    assert output_paths("run", paired=False) == {
        "begin_SE": "run_begin_SE.fq.gz",
        "end_SE": "run_end_SE.fq.gz",
    }


def test_single_end_split(write_fastq, out_base, records_of):
    path = write_fastq(
        "se.fq.gz",
        [
            ("@r1", "AAATTTTT", "IIIIIIII"),
            ("@r2", "CCCGGGGGG", "ABCDEFGHI"),
            ("@r3", "ACGTACGTAC", "0123456789"),
        ],
    )

    stats = split_single(path, 5, out_base)

    paths = output_paths(out_base, paired=False)
    assert records_of(paths["begin_SE"]) == [
        ("@r1", "AAATT", "IIIII"),
        ("@r2", "CCCGG", "ABCDE"),
        ("@r3", "ACGTA", "01234"),
    ]
    assert records_of(paths["end_SE"]) == [
        ("@r1", "TTT", "III"),
        ("@r2", "GGGG", "FGHI"),
        ("@r3", "CGTAC", "56789"),
    ]
    assert stats.records_read == 3
    assert stats.records_discarded == 0
    assert stats.units_written == 6


def test_paired_end_split(write_fastq, out_base, records_of):
    r1 = write_fastq("r1.fq.gz", [("@a/1", "AAATTTTT", "IIIIIIII")])
    r2 = write_fastq("r2.fq.gz", [("@a/2", "GGGCC", "JJJKK")])

    split_paired(r1, r2, 3, out_base)

    paths = output_paths(out_base, paired=True)
    assert records_of(paths["begin_R1"]) == [("@a/1", "AAA", "III")]
    assert records_of(paths["begin_R2"]) == [("@a/2", "GGG", "JJJ")]
    assert records_of(paths["end_R1"]) == [("@a/1", "TTTTT", "IIIII")]
    assert records_of(paths["end_R2"]) == [("@a/2", "CC", "KK")]


def test_short_pair_writes_nothing(write_fastq, out_base, records_of, caplog):
    r1 = write_fastq("r1.fq.gz", [("@a/1", "ACGTACGT", "IIIIIIII")])
    r2 = write_fastq("r2.fq.gz", [("@a/2", "ACGTACGT", "IIIIIIII")])

    with caplog.at_level(logging.WARNING):
        stats = split_paired(r1, r2, 10, out_base)

    for path in output_paths(out_base, paired=True).values():
        assert records_of(path) == []
    assert stats.records_discarded == 1
    discards = [r.getMessage() for r in caplog.records if "Discarded" in r.getMessage()]
    assert discards == ["Discarded: @a/1 and @a/2"]


def test_unbalanced_pair_stops_at_shorter_input(
    write_fastq, out_base, records_of, reads_factory
):
    r1 = write_fastq("r1.fq.gz", reads_factory("a", 5))
    r2 = write_fastq("r2.fq.gz", reads_factory("b", 3))

    stats = split_paired(r1, r2, 4, out_base)

    assert stats.records_read == 3
    for path in output_paths(out_base, paired=True).values():
        assert len(records_of(path)) == 3
    begin_r1 = records_of(output_paths(out_base, paired=True)["begin_R1"])
    assert [rid for rid, _, _ in begin_r1] == ["@a0", "@a1", "@a2"]


def test_outputs_rebuild_the_input(write_fastq, out_base, records_of, reads_factory):
    records = reads_factory("r", 50, length=30)
    path = write_fastq("se.fq.gz", records)

    split_single(path, 11, out_base)

    paths = output_paths(out_base, paired=False)
    rebuilt = [
        (head_id, head_seq + tail_seq, head_qual + tail_qual)
        for (head_id, head_seq, head_qual), (_, tail_seq, tail_qual) in zip(
            records_of(paths["begin_SE"]), records_of(paths["end_SE"])
        )
    ]
    assert rebuilt == records


def test_rerun_with_fresh_basename_is_byte_identical(
    write_fastq, tmp_path, reads_factory
):
    r1 = write_fastq("r1.fq.gz", reads_factory("a", 20))
    r2 = write_fastq("r2.fq.gz", reads_factory("b", 20))

    split_paired(r1, r2, 5, str(tmp_path / "first"))
    split_paired(r1, r2, 5, str(tmp_path / "second"))

    first = output_paths(str(tmp_path / "first"), paired=True)
    second = output_paths(str(tmp_path / "second"), paired=True)
    for name in first:
        with open(first[name], "rb") as a, open(second[name], "rb") as b:
            assert a.read() == b.read()


def test_missing_input_is_fatal_and_outputs_are_closed(write_fastq, out_base):
    r1 = write_fastq("r1.fq.gz", [("@a", "ACGTACGT", "IIIIIIII")])

    with pytest.raises(InputError):
        split_paired(r1, r1 + ".missing", 3, out_base)

    for path in output_paths(out_base, paired=True).values():
        with gzip.open(path, "rb") as handle:
            handle.read()


def test_unwritable_output_is_fatal(write_fastq, tmp_path):
    path = write_fastq("se.fq.gz", [("@a", "ACGTACGT", "IIIIIIII")])
    out_base = str(tmp_path / "no-such-dir" / "sample")

    with pytest.raises(OutputError):
        split_single(path, 3, out_base)
    assert not os.path.exists(tmp_path / "no-such-dir")


def test_strict_pairing_failure_is_fatal(write_fastq, out_base):
    r1 = write_fastq("r1.fq.gz", [("@a/1", "ACGTACGT", "IIIIIIII")])
    r2 = write_fastq("r2.fq.gz", [("@b/2", "ACGTACGT", "IIIIIIII")])

    with pytest.raises(PairingError):
        split_paired(r1, r2, 3, out_base, strict=True)


def test_run_split_dispatches_on_layout(write_fastq, out_base, records_of):
    path = write_fastq("se.fq.gz", [("@a", "ACGTACGT", "IIIIIIII")])

    stats = run_split(SplitConfig(n=4, se=path, out=out_base))

    assert stats.records_kept == 1
    assert records_of(output_paths(out_base, paired=False)["end_SE"]) == [
        ("@a", "ACGT", "IIII")
    ]


@pytest.mark.parametrize(
    "kwargs",
    [
        {"n": 0, "se": "x.fq.gz"},
        {"n": -3, "se": "x.fq.gz"},
        {"n": 5},
        {"n": 5, "r1": "a.fq.gz", "r2": "b.fq.gz", "se": "x.fq.gz"},
        {"n": 5, "r1": "a.fq.gz"},
        {"n": 5, "r2": "b.fq.gz"},
        {"n": 5, "se": "x.fq.gz", "strict_pairing": True},
        {"n": 5, "se": "x.fq.gz", "out": ""},
    ],
)
def test_invalid_configuration(kwargs):
    with pytest.raises(ConfigError):
        SplitConfig(**kwargs)


def test_paired_configuration():
    config = SplitConfig(n=5, r1="a.fq.gz", r2="b.fq.gz")

    assert config.paired
    assert config.out == "test-1"
