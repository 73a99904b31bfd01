"""
Builders for small synthetic .modraw captures used across the test suite.
"""
from __future__ import annotations

from typing import Iterable, Optional

YEAR_OFFSET = 1672531200  # 2023-01-01T00:00:00Z


def make_header(year_offset: Optional[int] = YEAR_OFFSET, end_marker: bool = True, extra_lines: Iterable[bytes] = ()) -> bytes:
    lines = [
        b"header_file_size_inbytes = 512\n",
        b"TOTAL_HEADER_LINES = 71\n",
        b"*****START_FCTD_HEADER_START_RUN*****\n",
        b"%FCTD instrument demo capture\n",
    ]
    if year_offset is not None:
        lines.append(b"OFFSET_TIME = %d\n" % year_offset)
    lines.extend(extra_lines)
    if end_marker:
        lines.append(b"%*****END_FCTD_HEADER_START_RUN*****\n")
    return b"".join(lines)


def make_som(abrupt: bool = False) -> bytes:
    body = b"$SOM3,0102,EPSI,demo"
    if abrupt:
        body += b",END_OF_SOM"
    return body + b"*2A\r\n"


def make_packet(tick: int, signature: bytes = b"EFE", payload: bytes = b"0001,ABCD", double_lf: bool = False) -> bytes:
    pkt = b"T%010d$%s%s*4C\r\n" % (tick, signature, payload)
    return pkt + (b"\n" if double_lf else b"")


TRAILER = b"%*****START_FCTD_TAILER_START_RUN*****\nstop_time = 100\n"


def make_capture(ticks: Iterable[int], year_offset: Optional[int] = YEAR_OFFSET, trailer: bool = False) -> bytes:
    out = make_header(year_offset) + make_som() + b"".join(make_packet(t) for t in ticks)
    return out + (TRAILER if trailer else b"")


class FakeClock:
    """Monotonic clock that only moves when sleep() is called (or advance())."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start
        self.sleeps: list = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

    def advance(self, seconds: float) -> None:
        self.now += seconds
