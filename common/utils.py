from __future__ import annotations

from typing import Deque, Optional
from dataclasses import dataclass, field
from datetime import datetime, timezone
from collections import deque
import time


def utc_from_seconds(seconds: float) -> datetime:
    """Seconds since the Unix epoch -> aware UTC datetime."""
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def format_packet_date(dt: Optional[datetime]) -> str:
    """
    Render a packet date as YYYY/MM/DD HH:MM:SS.ss (UTC, hundredths),
    the resolution of the capture tick counter.
    """
    if dt is None:
        return "-"
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y/%m/%d %H:%M:%S") + f".{dt.microsecond // 10000:02d}"


@dataclass(slots=True)
class RateTimer:
    """
    Simple rate tracker for loop diagnostics.

    Usage:
        rt = RateTimer(window=50)
        for packet in packets:
            # work...
            hz = rt.tick()
    """
    window: int = 50
    _times: Deque[float] = field(default_factory=deque)

    def __post_init__(self) -> None:
        self._times = deque(maxlen=self.window)

    def tick(self) -> float:
        t = time.perf_counter()
        self._times.append(t)
        if len(self._times) < 2:
            return 0.0
        dt = (self._times[-1] - self._times[0]) / (len(self._times) - 1)
        return 0.0 if dt <= 0 else 1.0 / dt
