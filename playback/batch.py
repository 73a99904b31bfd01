from __future__ import annotations

import time
from typing import Callable, List, Optional, Sequence

from common.logging_setup import get_logger
from common.types import BatchState, FileJob
from modraw.parser import Parser
from playback.scheduler import FileReplay, ReplayStats
from playback.sink import FileSink, read_input


log = get_logger("playback.batch")


def replay_file(
    job: FileJob,
    batch: BatchState,
    *,
    absolute_dates: bool = True,
    verbose: bool = False,
    carry_partial: bool = True,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> ReplayStats:
    """
    Replay one file job inside a batch.

    The file's own truncated tail packet (if any) is detached before framing
    starts and left in `batch.partial` for the next job; the packet carried in
    from the previous job is spliced in right after this file's start packet,
    where the remainder of the split packet sits. The last job of a batch
    passes carry_partial=False so its tail is replayed in place.
    """
    data = read_input(job.input_path)
    parser = Parser(data, anchor=batch.anchor, absolute_dates=absolute_dates, source=str(job.input_path))

    with FileSink(job.output_path) as sink:
        sink.reset()
        replay = FileReplay(parser, sink, batch, verbose=verbose, clock=clock, sleep=sleep)
        replay.write_header()
        outgoing = parser.extract_partial() if carry_partial else None
        replay.write_start_packet()
        incoming = batch.take_partial()
        if incoming is not None:
            log.info(
                "Inserting partial packet from previous file",
                extra={"extra": {"from": incoming.source, "into": str(job.input_path), "bytes": len(incoming)}},
            )
            parser.insert_partial(incoming)
        stats = replay.replay()

    batch.partial = outgoing
    return stats


def run_batch(
    jobs: Sequence[FileJob],
    speed: float = 1.0,
    *,
    absolute_dates: bool = True,
    verbose: bool = False,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
    batch: Optional[BatchState] = None,
) -> List[ReplayStats]:
    """
    Replay every job in order. The first ReplayError stops the batch; files
    already written stay on disk and the current one may be partial.
    """
    if batch is None:
        batch = BatchState(jobs=list(jobs), speed=speed)
    results: List[ReplayStats] = []
    for n, job in enumerate(batch.jobs, start=1):
        log.info(
            "Replaying file",
            extra={"extra": {"n": n, "of": len(batch.jobs), "input": str(job.input_path), "output": str(job.output_path), "speed": batch.speed}},
        )
        results.append(
            replay_file(
                job,
                batch,
                absolute_dates=absolute_dates,
                verbose=verbose,
                carry_partial=n < len(batch.jobs),
                clock=clock,
                sleep=sleep,
            )
        )
    return results
