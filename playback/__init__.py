"""
Playback — real-time replay of .modraw captures

Provides:
- FileReplay: per-file state machine (header -> start packet -> paced packets)
- run_batch / replay_file: ordered multi-file replay with split-packet hand-off
- resolve_jobs: turns -i/-o arguments into validated file jobs
- FileSink: append-only output file
- A small CLI in service.py.

Usage examples:
    from playback import resolve_jobs, run_batch
    run_batch(resolve_jobs("data/mission/", "out/"), speed=4.0)
"""
from __future__ import annotations

from .batch import replay_file, run_batch
from .jobs import JobValidationError, resolve_jobs
from .scheduler import FileReplay, ReplayState, ReplayStats
from .sink import FileSink

__all__ = [
    "FileReplay",
    "FileSink",
    "JobValidationError",
    "ReplayState",
    "ReplayStats",
    "replay_file",
    "resolve_jobs",
    "run_batch",
]
