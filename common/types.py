from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional, List


@dataclass(frozen=True, slots=True)
class Packet:
    """
    One framed unit of capture bytes.

    Attributes:
        data: raw bytes, including the trailing *HH<CR><LF> footer.
        offset_ms: milliseconds since the batch anchor; None if unsequenced.
        date: absolute UTC instant; None if unsequenced or relative-only mode.
        signature: "$" + uppercase token following the timestamp ("" if none).
    """
    data: bytes
    offset_ms: Optional[int] = None
    date: Optional[datetime] = None
    signature: str = ""

    @property
    def is_timestamped(self) -> bool:
        return self.offset_ms is not None or self.date is not None

    def __len__(self) -> int:
        return len(self.data)


@dataclass(frozen=True, slots=True)
class HeaderBlock:
    """
    Preamble of a capture file, passed through verbatim to the output.

    Attributes:
        raw: header bytes up to and including the end marker line.
        year_offset: seconds since the Unix epoch from OFFSET_TIME, if present.
        line_count: number of lines read.
    """
    raw: bytes
    year_offset: Optional[int]
    line_count: int


@dataclass(frozen=True, slots=True)
class PartialPacket:
    """Truncated tail packet detached from one file for the next one."""
    data: bytes
    source: str = ""

    def __len__(self) -> int:
        return len(self.data)


@dataclass(frozen=True, slots=True)
class FileJob:
    """One validated (input, output) pair."""
    input_path: Path
    output_path: Path


@dataclass(slots=True)
class TimeAnchor:
    """
    Tick value of the first timestamped packet in a batch.
    Set once; later calls to `offset_ms` never move it.
    """
    tick: Optional[int] = None

    def offset_ms(self, tick: int) -> int:
        if self.tick is None:
            self.tick = tick
        # hundredths of a second -> milliseconds
        return 10 * (tick - self.tick)


@dataclass(slots=True)
class BatchState:
    """
    Cross-file state threaded through a batch run by the orchestrator.

    Attributes:
        jobs: ordered file jobs.
        speed: playback multiplier (> 0).
        anchor: shared relative-time anchor.
        replay_start: monotonic seconds when the first file began replaying.
        partial: detached tail packet waiting for the next job, if any.
    """
    jobs: List[FileJob]
    speed: float = 1.0
    anchor: TimeAnchor = field(default_factory=TimeAnchor)
    replay_start: Optional[float] = None
    partial: Optional[PartialPacket] = None

    def __post_init__(self) -> None:
        if self.speed <= 0:
            raise ValueError("speed must be > 0")

    def take_partial(self) -> Optional[PartialPacket]:
        """Hand the in-flight partial packet to its consumer and clear it."""
        p, self.partial = self.partial, None
        return p
