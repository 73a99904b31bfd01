from __future__ import annotations

from datetime import timedelta
from typing import Optional, Tuple

from common.types import Packet, TimeAnchor
from common.utils import utc_from_seconds


ASCII_T = 0x54
ASCII_DOLLAR = 0x24
ASCII_0 = 0x30
ASCII_9 = 0x39
ASCII_A = 0x41
ASCII_Z = 0x5A


def _read_tick(data: bytes) -> Tuple[Optional[int], int]:
    """
    Parse `T<digits>$`. Returns (tick, index of the byte after the digits);
    tick is None when the run is not closed by `$`.
    """
    if len(data) < 2 or data[0] != ASCII_T:
        return None, 0
    i = 1
    tick = 0
    while i < len(data) and ASCII_0 <= data[i] <= ASCII_9:
        tick = tick * 10 + (data[i] - ASCII_0)
        i += 1
    if i >= len(data) or data[i] != ASCII_DOLLAR:
        return None, i
    return tick, i


def _read_signature(data: bytes, i: int) -> str:
    if i >= len(data) - 1 or data[i] != ASCII_DOLLAR:
        return ""
    j = i + 1
    while j < len(data) and ASCII_A <= data[j] <= ASCII_Z:
        j += 1
    return "$" + data[i + 1:j].decode("ascii")


def decode_packet(
    data: bytes,
    anchor: TimeAnchor,
    year_offset: Optional[int] = None,
    *,
    absolute_dates: bool = True,
) -> Packet:
    """
    Build a Packet from framed bytes.

    Ticks are hundredths of a second. The first valid tick of the batch sets
    `anchor`; offsets are measured from it. The absolute date is
    year_offset + tick / 100 seconds since the epoch, and is only filled in
    when a year offset is known and absolute dates are enabled.
    """
    tick, i = _read_tick(data)
    offset_ms = None
    date = None
    if tick is not None:
        offset_ms = anchor.offset_ms(tick)
        if absolute_dates and year_offset is not None:
            date = utc_from_seconds(year_offset) + timedelta(milliseconds=10 * tick)
    return Packet(data=data, offset_ms=offset_ms, date=date, signature=_read_signature(data, i))
