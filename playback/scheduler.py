"""
Per-file replay: header, start-of-mission packet, then every timestamped
packet written at the wall-clock offset it had in the recording (scaled by
the batch speed).

States: AWAITING_HEADER -> AWAITING_START_PACKET -> REPLAYING -> DONE
"""
from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Deque, Dict, Optional

import numpy as np

from common.errors import MissingStartPacket, UnsequencedPacket
from common.logging_setup import get_logger
from common.types import BatchState, HeaderBlock, Packet
from common.utils import RateTimer, format_packet_date
from modraw.framer import SOM_SIGNATURE
from modraw.parser import Parser
from playback.sink import FileSink


log = get_logger("playback.scheduler")

START_SIGNATURE = SOM_SIGNATURE.decode("ascii")


class ReplayState(Enum):
    AWAITING_HEADER = "awaiting_header"
    AWAITING_START_PACKET = "awaiting_start_packet"
    REPLAYING = "replaying"
    DONE = "done"


LATENESS_WINDOW = 4096


@dataclass
class ReplayStats:
    """
    Counters for one file; lateness is how far behind schedule a write was.
    Percentiles cover the last LATENESS_WINDOW packets, the maximum covers all.
    """
    source: str = ""
    packets: int = 0
    bytes_written: int = 0
    late: int = 0
    slept_s: float = 0.0
    max_lateness_ms: float = 0.0
    lateness_ms: Deque[float] = field(default_factory=lambda: deque(maxlen=LATENESS_WINDOW), repr=False)

    def record(self, packet: Packet, lateness_ms: float, slept_s: float) -> None:
        self.packets += 1
        self.bytes_written += len(packet.data)
        self.lateness_ms.append(lateness_ms)
        self.max_lateness_ms = max(self.max_lateness_ms, lateness_ms)
        self.slept_s += slept_s
        if lateness_ms > 0:
            self.late += 1

    def summary(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "source": self.source,
            "packets": self.packets,
            "bytes": self.bytes_written,
            "late": self.late,
            "slept_s": round(self.slept_s, 3),
        }
        if self.lateness_ms:
            arr = np.asarray(self.lateness_ms, dtype=float)
            out["lateness_p50_ms"] = float(np.percentile(arr, 50))
            out["lateness_p95_ms"] = float(np.percentile(arr, 95))
            out["lateness_max_ms"] = self.max_lateness_ms
        return out


@dataclass
class FileReplay:
    """
    Drives one file's packets into its sink.

    Args:
        parser: parser over the input file
        sink: output file (already reset by the caller)
        batch: shared batch state; supplies speed and the replay start instant
        verbose: log every packet instead of a one-line progress display
        clock: monotonic seconds
        sleep: blocking sleep in seconds
    """
    parser: Parser
    sink: FileSink
    batch: BatchState
    verbose: bool = False
    clock: Callable[[], float] = time.monotonic
    sleep: Callable[[float], None] = time.sleep
    state: ReplayState = ReplayState.AWAITING_HEADER
    header: Optional[HeaderBlock] = None
    stats: ReplayStats = field(default_factory=ReplayStats)

    def __post_init__(self) -> None:
        self.stats.source = self.parser.source
        self._rate = RateTimer()

    def _expect_state(self, state: ReplayState) -> None:
        if self.state is not state:
            raise RuntimeError(f"replay is {self.state.value}, expected {state.value}")

    def write_header(self) -> HeaderBlock:
        self._expect_state(ReplayState.AWAITING_HEADER)
        header = self.parser.read_header()
        self.sink.write(header.raw)
        self.header = header
        self.state = ReplayState.AWAITING_START_PACKET
        return header

    def write_start_packet(self) -> Packet:
        self._expect_state(ReplayState.AWAITING_START_PACKET)
        som = self.parser.next_packet()
        if som is None:
            raise MissingStartPacket(f"no start-of-mission packet after header in {self.parser.source}")
        if som.is_timestamped:
            raise MissingStartPacket(f"start-of-mission packet carries a timestamp in {self.parser.source}")
        if som.signature != START_SIGNATURE:
            raise MissingStartPacket(
                f"expected {START_SIGNATURE} first packet, got {som.signature or 'no signature'!r} in {self.parser.source}"
            )
        self.sink.write(som.data)
        self.state = ReplayState.REPLAYING
        # first file of the batch to get here fixes the start instant
        if self.batch.replay_start is None:
            self.batch.replay_start = self.clock()
        return som

    def _pace(self, packet: Packet) -> tuple[float, float]:
        """Block until the packet is due. Returns (lateness_ms, slept_s)."""
        elapsed_ms = (self.clock() - self.batch.replay_start) * 1000.0
        if packet.offset_ms > elapsed_ms:
            delay_s = (packet.offset_ms - elapsed_ms) / self.batch.speed / 1000.0
            self.sleep(delay_s)
            return 0.0, delay_s
        return elapsed_ms - packet.offset_ms, 0.0

    def _report(self, packet: Packet) -> None:
        progress = self.parser.progress()
        if self.verbose:
            log.info(
                f"{progress}% - T{format_packet_date(packet.date)} {packet.signature}",
                extra={"extra": {"offset_ms": packet.offset_ms, "rate_hz": round(self._rate.tick(), 1)}},
            )
        else:
            print(f" Progress: {progress}% ", end="\r", flush=True)

    def replay(self) -> ReplayStats:
        self._expect_state(ReplayState.REPLAYING)
        packet = self.parser.next_packet()
        while packet is not None:
            if packet.offset_ms is None or (self.parser.absolute_dates and packet.date is None):
                raise UnsequencedPacket(
                    f"packet without timestamp at byte {self.parser.cursor.position - len(packet.data)} "
                    f"of {self.parser.source}: {packet.data[:32]!r}"
                )
            self._report(packet)
            lateness_ms, slept_s = self._pace(packet)
            self.sink.write(packet.data)
            self.stats.record(packet, lateness_ms, slept_s)
            packet = self.parser.next_packet()
        self.state = ReplayState.DONE
        log.info("File replay finished", extra={"extra": self.stats.summary()})
        return self.stats

    def run(self) -> ReplayStats:
        """Header, start packet and replay loop in one go (single-file use)."""
        self.write_header()
        self.write_start_packet()
        return self.replay()
