import gzip
import json

from dagster import build_sensor_context

from fastq_splitter.components.fastq_file_sensor import (
    FastqFileSensor,
    find_samples,
    sample_inputs,
)


def touch_fastq(directory, name):
    path = directory / name
    with gzip.open(path, "wt") as handle:
        handle.write("@r\nACGT\n+\nIIII\n")
    return str(path)


def test_find_samples_groups_mates(tmp_path):
    r1 = touch_fastq(tmp_path, "lib1_R1.fq.gz")
    r2 = touch_fastq(tmp_path, "lib1_R2.fq.gz")
    se = touch_fastq(tmp_path, "lib2.fastq.gz")
    touch_fastq(tmp_path, "lib3_begin_SE.fq.gz")
    (tmp_path / "notes.txt").write_text("not a fastq")

    assert find_samples(str(tmp_path)) == {
        "lib1": {"r1": r1, "r2": r2},
        "lib2": {"se": se},
    }


def test_sample_inputs():
    assert sample_inputs({"r1": "a", "r2": "b"}) == {"r1": "a", "r2": "b"}
    assert sample_inputs({"se": "x"}) == {"se": "x"}
    assert sample_inputs({"r1": "a"}) is None
    assert sample_inputs({"se": "x", "r2": "b"}) is None


def test_sensor_requests_one_run_per_new_sample(tmp_path):
    incoming = tmp_path / "incoming"
    incoming.mkdir()
    r1 = touch_fastq(incoming, "lib1_R1.fq.gz")
    r2 = touch_fastq(incoming, "lib1_R2.fq.gz")
    touch_fastq(incoming, "lib2_R1.fq.gz")
    touch_fastq(incoming, "lib3.fq.gz")

    sensor_def = FastqFileSensor(
        watch_directory=str(incoming), output_directory=str(tmp_path / "split"), n=35
    ).build_defs(None)
    context = build_sensor_context(cursor=json.dumps(["lib3"]))

    requests = list(sensor_def(context))

    assert [request.run_key for request in requests] == ["lib1"]
    config = requests[0].run_config["ops"]["split_fastq"]["config"]
    assert config == {
        "n": 35,
        "out": str(tmp_path / "split" / "lib1"),
        "r1": r1,
        "r2": r2,
    }
    assert requests[0].tags["layout"] == "paired-end"
    assert json.loads(context.cursor) == ["lib1", "lib3"]


def test_sensor_without_watch_directory_requests_nothing(tmp_path):
    sensor_def = FastqFileSensor(
        watch_directory=str(tmp_path / "missing"), n=10
    ).build_defs(None)

    assert list(sensor_def(build_sensor_context())) == []
