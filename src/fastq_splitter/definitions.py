import logging

# Keep dagster's own framework logging quiet; split diagnostics still show
logging.getLogger("dagster").setLevel(logging.ERROR)
logging.getLogger("dagster._core").setLevel(logging.ERROR)
logging.getLogger("dagster._core.executor").setLevel(logging.ERROR)
logging.getLogger("dagster._core.execution").setLevel(logging.ERROR)

from dagster import definitions, Definitions, job

from .components.fastq_split_op import FastqSplitter
from .components.fastq_file_sensor import FastqFileSensor

WATCH_DIRECTORY = "incoming"
OUTPUT_DIRECTORY = "split"
SPLIT_POSITION = 35


@definitions
def defs():
    splitter = FastqSplitter()

    file_sensor = FastqFileSensor(
        watch_directory=WATCH_DIRECTORY,
        output_directory=OUTPUT_DIRECTORY,
        n=SPLIT_POSITION,
        op_name=splitter.name,
        job_name="fastq_split_job",
    )

    # Get the op and sensor from the components
    split_op = splitter.build_defs(None)
    sensor_def = file_sensor.build_defs(None)

    @job(name="fastq_split_job")
    def fastq_split_job():
        """Job that splits one FASTQ sample into begin and end files."""
        split_op()

    return Definitions(sensors=[sensor_def], jobs=[fastq_split_job])
