"""
Packet framing for .modraw captures.

A packet ends with a checksum footer `*<hex><hex><CR><LF>`, but those bytes
can also show up inside a payload, so a footer only closes the frame when the
next byte starts a new packet (`T`) or the buffer is over. Two capture format
quirks are special-cased below and must stay as they are:

- some writers emit `<CR><LF><LF>`; the extra LF belongs to the packet.
- a start-of-mission packet written at the top of a continuation file ends
  with END_OF_SOM and is followed by the rest of a split packet rather than
  by `T`, so it closes unconditionally.
"""
from __future__ import annotations

from typing import Optional

from common.logging_setup import get_logger
from common.types import PartialPacket
from modraw.cursor import ByteCursor


log = get_logger("modraw.framer")

ASCII_LF = 0x0A
ASCII_CR = 0x0D
ASCII_STAR = 0x2A
ASCII_T = 0x54

MIN_FRAME_BYTES = 5  # *HH<CR><LF>
SOM_SIGNATURE = b"$SOM"
SOM_ABRUPT_FOOTER = b"END_OF_SOM"
TRAILER_MARKER = b"%*****START_FCTD_TAILER_START_RUN*****"
TRAILER_SEARCH_WINDOW = 4096

_HEX = frozenset(b"0123456789abcdefABCDEF")


def has_checksum_footer(buf: bytearray, lf: int, start: int = 0) -> bool:
    """True if buf[lf] is an LF closing `*<hex><hex><CR>`, all after `start`."""
    if lf - start < MIN_FRAME_BYTES - 1:
        return False
    return (
        buf[lf] == ASCII_LF
        and buf[lf - 1] == ASCII_CR
        and buf[lf - 2] in _HEX
        and buf[lf - 3] in _HEX
        and buf[lf - 4] == ASCII_STAR
    )


def _is_abrupt_som(buf: bytearray, start: int, lf: int) -> bool:
    # format quirk: see module docstring
    star = lf - 4
    return (
        buf[start:start + len(SOM_SIGNATURE)] == SOM_SIGNATURE
        and buf[start:star].endswith(SOM_ABRUPT_FOOTER)
    )


def next_frame(cursor: ByteCursor) -> Optional[bytes]:
    """
    Cut the next packet out of the cursor.

    Returns the raw packet bytes, or None when fewer than MIN_FRAME_BYTES
    remained (a trailing stub; end of usable stream).
    """
    buf = cursor.buffer
    start = cursor.position
    scan = start

    while True:
        lf = buf.find(b"\n", scan)
        if lf < 0:
            cursor.reset(len(buf))
            break
        cursor.reset(lf + 1)
        if has_checksum_footer(buf, lf, start):
            # format quirk: <CR><LF><LF>
            if cursor.peek() == ASCII_LF:
                cursor.read_byte()
            if _is_abrupt_som(buf, start, lf):
                break
            nxt = cursor.peek()
            if nxt is None or nxt == ASCII_T:
                break
        scan = cursor.position

    frame = bytes(buf[start:cursor.position])
    if len(frame) < MIN_FRAME_BYTES:
        return None
    return frame


def _ends_cleanly(buf: bytearray, marker: int, floor: int) -> bool:
    if marker - 2 >= floor and buf[marker - 2:marker] == b"\r\n":
        return True
    # format quirk: <CR><LF><LF>
    return marker - 3 >= floor and buf[marker - 3:marker] == b"\r\n\n"


def _follows_footer(buf: bytearray, lf: int, floor: int) -> bool:
    if has_checksum_footer(buf, lf, floor):
        return True
    # format quirk: <CR><LF><LF>
    return lf > floor and buf[lf - 1] == ASCII_LF and has_checksum_footer(buf, lf - 1, floor)


def _last_packet_start(buf: bytearray, floor: int, end: int) -> int:
    """Index of the last `T` in [floor, end) that directly follows a packet footer, or -1."""
    hi = end
    while True:
        lf = buf.rfind(b"\nT", floor, hi)
        if lf < 0:
            return -1
        if _follows_footer(buf, lf, floor):
            return lf + 1
        # `\nT` inside a payload
        hi = lf + 1


def extract_partial_end_packet(cursor: ByteCursor, source: str = "") -> Optional[PartialPacket]:
    """
    Detach the truncated last packet in front of the file trailer.

    Looks for TRAILER_MARKER in the last TRAILER_SEARCH_WINDOW bytes. When the
    bytes before it are not a packet terminator, the file was cut mid-packet:
    the span from that packet's `T` (the last `T` right after a complete
    `*HH<CR><LF>` footer) up to the marker is removed from the arena and
    returned. Only bytes ahead of the cursor are touched.
    """
    buf = cursor.buffer
    floor = cursor.position
    window_start = max(floor, len(buf) - TRAILER_SEARCH_WINDOW)
    marker = buf.rfind(TRAILER_MARKER, window_start)
    if marker < 0:
        return None
    if _ends_cleanly(buf, marker, floor):
        return None

    packet_start = _last_packet_start(buf, floor, marker)
    if packet_start < 0:
        log.warning(
            "Trailer not preceded by a terminator and no packet start found",
            extra={"extra": {"source": source, "marker_at": marker}},
        )
        return None

    data = cursor.remove(packet_start, marker)
    log.info(
        "Detached partial end packet",
        extra={"extra": {"source": source, "bytes": len(data)}},
    )
    return PartialPacket(data=data, source=source)


def insert_partial_end_packet(cursor: ByteCursor, partial: PartialPacket) -> None:
    """Splice a detached partial packet in at the cursor, ahead of its remainder."""
    cursor.splice(partial.data)
