"""
FASTQ File Sensor Component

A sensor component that detects new FASTQ samples in a directory and triggers
split jobs for them.
"""

import json
import re
from pathlib import Path
from typing import Dict, Optional

import dagster
from dagster import RunRequest, sensor

from .pipeline import PAIRED_SUFFIXES, SINGLE_SUFFIXES

FASTQ_SUFFIXES = (".fastq.gz", ".fq.gz")
MATE_PATTERN = re.compile(r"^(?P<sample>.+?)[._]R(?P<mate>[12])(?:_001)?$")


def find_samples(directory: str) -> Dict[str, Dict[str, str]]:
    """
    Group the gzip FASTQ files of a directory into samples.

    Files named like `<sample>_R1` / `<sample>_R2` are mates of a paired-end
    sample and map to the keys "r1" and "r2"; any other FASTQ file is a
    single-end sample under "se". Outputs of earlier split runs are ignored.
    """
    samples: Dict[str, Dict[str, str]] = {}
    for path in sorted(Path(directory).iterdir()):
        suffix = next((s for s in FASTQ_SUFFIXES if path.name.endswith(s)), None)
        if suffix is None or not path.is_file():
            continue

        stem = path.name[: -len(suffix)]
        if stem.endswith(PAIRED_SUFFIXES + SINGLE_SUFFIXES):
            continue

        match = MATE_PATTERN.match(stem)
        if match:
            samples.setdefault(match["sample"], {})[f"r{match['mate']}"] = str(path)
        else:
            samples.setdefault(stem, {})["se"] = str(path)
    return samples


def sample_inputs(files: Dict[str, str]) -> Optional[Dict[str, str]]:
    """Split op inputs for a sample, or None while it is incomplete."""
    if "se" in files:
        return None if ("r1" in files or "r2" in files) else {"se": files["se"]}
    if "r1" in files and "r2" in files:
        return {"r1": files["r1"], "r2": files["r2"]}
    return None


class FastqFileSensor(dagster.Model, dagster.Resolvable):
    """
    Sensor component for triggering FASTQ split jobs.

    This component watches a directory for FASTQ samples and requests one split
    run per sample that has not been split yet.
    """

    name: str = "fastq_file_sensor"
    watch_directory: str
    output_directory: str = "split"
    n: int
    op_name: str = "split_fastq"
    job_name: str = "fastq_split_job"
    minimum_interval_seconds: int = 30

    def build_defs(self, context):
        @sensor(
            name=self.name,
            job_name=self.job_name,
            minimum_interval_seconds=self.minimum_interval_seconds,
        )
        def fastq_file_sensor_fn(context):
            """
            Sensor that triggers split jobs for new FASTQ samples.

            This sensor:
            1. Scans the watch directory and groups files into samples
            2. Skips samples already recorded in the cursor
            3. Waits for the mate of a paired-end sample to appear
            4. Triggers one split job per new sample
            """
            if not Path(self.watch_directory).is_dir():
                context.log.info(f"Watch directory {self.watch_directory} does not exist")
                return

            processed = set(json.loads(context.cursor)) if context.cursor else set()
            samples = find_samples(self.watch_directory)
            new_samples = [name for name in samples if name not in processed]

            if not new_samples:
                context.log.info("No new FASTQ samples to split")
                return

            context.log.info(f"Found {len(new_samples)} new FASTQ samples")

            for sample in new_samples:
                inputs = sample_inputs(samples[sample])
                if inputs is None:
                    context.log.info(f"⏳ Skipping incomplete sample {sample}: {samples[sample]}")
                    continue

                out = str(Path(self.output_directory) / sample)
                context.log.info(f"🎯 Triggering split job for: {sample} → {out}_*")

                yield RunRequest(
                    run_key=sample,
                    run_config={
                        "ops": {
                            self.op_name: {
                                "config": {"n": self.n, "out": out, **inputs},
                            }
                        }
                    },
                    tags={
                        "sample": sample,
                        "layout": "single-end" if "se" in inputs else "paired-end",
                    },
                )
                processed.add(sample)

            context.update_cursor(json.dumps(sorted(processed)))

        return fastq_file_sensor_fn
