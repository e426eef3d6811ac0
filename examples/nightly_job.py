"""Run a job on at most one host at a time.

    python examples/nightly_job.py --config examples/mutex.example.yml
"""

from __future__ import annotations

import argparse
import socket
import time
from pathlib import Path

from mongomutex import DistributedMutex, MutexSettings
from mongomutex.utils.logging import get_logger


logger = get_logger("NightlyJob")


def job() -> str:
    logger.info("Doing the nightly work")
    time.sleep(2)
    return "done"


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the nightly job under a distributed lock.")
    parser.add_argument("--config", type=Path, default=Path("examples/mutex.example.yml"), help="Path to mutex YAML")
    args = parser.parse_args()

    settings = MutexSettings.from_file(args.config)
    mutex = DistributedMutex("nightly-job", socket.gethostname(), settings.collection(), **settings.mutex_options())
    result = mutex.synchronize(job)
    logger.info("Job finished: %s", result)


if __name__ == "__main__":
    main()
