"""CLI entrypoint: run a command while holding a named lock."""

from __future__ import annotations

import argparse
import os
import socket
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence

from mongomutex.core.errors import LockTimeoutError
from mongomutex.core.locks import LockOperations
from mongomutex.core.mutex import DistributedMutex
from mongomutex.core.settings import MutexSettings
from mongomutex.utils.logging import PACKAGE_LOGGER, get_logger, library_logger


EX_TEMPFAIL = 75

logger = library_logger(__name__)


def _default_locker_id() -> str:
    return f"{socket.gethostname()}:{os.getpid()}"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mongomutex-run",
        description="Run a command while holding a distributed lock.",
    )
    parser.add_argument("--lock-id", required=True, help="Name of the lock to hold")
    parser.add_argument("--locker-id", default=None, help="Holder identity (default: <hostname>:<pid>)")
    parser.add_argument("--config", type=Path, default=None, help="Path to mutex settings YAML")
    parser.add_argument("--timeout", type=float, default=None, help="Give up after this many seconds")
    parser.add_argument("--check-period", type=float, default=None, help="Seconds between lock attempts")
    parser.add_argument("--retention", type=float, default=None, help="Lease length in seconds")
    parser.add_argument("command", nargs=argparse.REMAINDER, help="Command to run (after --)")
    return parser


def main(argv: Optional[Sequence[str]] = None, *, lock_operations: Optional[LockOperations] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    get_logger(PACKAGE_LOGGER)
    command: List[str] = list(args.command)
    if command and command[0] == "--":
        command = command[1:]
    if not command:
        parser.error("a command to run is required")

    settings = MutexSettings.from_file(args.config) if args.config else MutexSettings.from_env()
    options = settings.mutex_options()
    if args.check_period is not None:
        options["lock_check_period"] = args.check_period
    if args.retention is not None:
        options["lock_retention_timeout"] = args.retention

    if lock_operations is not None:
        mutex = DistributedMutex(
            args.lock_id, args.locker_id or _default_locker_id(), lock_operations=lock_operations, **options
        )
    else:
        mutex = DistributedMutex(args.lock_id, args.locker_id or _default_locker_id(), settings.collection(), **options)

    logger.info("Waiting for lock %s as %s", mutex.lock_id, mutex.locker_id)
    try:
        completed = mutex.synchronize(lambda: subprocess.run(command, check=False), timeout=args.timeout)
    except LockTimeoutError:
        logger.warning("Could not acquire lock %s within %s seconds", mutex.lock_id, args.timeout)
        return EX_TEMPFAIL
    logger.info("Released lock %s; command exited with %d", mutex.lock_id, completed.returncode)
    return completed.returncode


def run() -> None:
    raise SystemExit(main())


if __name__ == "__main__":
    run()
