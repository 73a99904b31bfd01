from __future__ import annotations

import re
from typing import Optional

from common.errors import MalformedHeader
from common.logging_setup import get_logger
from common.types import HeaderBlock
from modraw.cursor import ByteCursor


log = get_logger("modraw.header")

SIZE_PREFIX = b"header_file_size_inbytes ="
LINES_PREFIX = b"TOTAL_HEADER_LINES ="
START_MARKER = b"*****START_FCTD_HEADER_START_RUN*****"
END_MARKER = b"%*****END_FCTD_HEADER_START_RUN*****"
OFFSET_TIME_PREFIX = b"OFFSET_TIME ="

_NON_DIGITS = re.compile(rb"\D")


def parse_offset_time(line: bytes) -> int:
    """
    Year offset in seconds from an `OFFSET_TIME = <digits>` line.
    Every non-digit byte is dropped before parsing.
    """
    digits = _NON_DIGITS.sub(b"", line)
    if not digits:
        raise MalformedHeader(f"OFFSET_TIME line has no digits: {line!r}")
    return int(digits)


def _expect(cursor: ByteCursor, prefix: bytes) -> bytes:
    line = cursor.read_line()
    if line is None:
        raise MalformedHeader(f"header truncated, expected {prefix.decode()!r}")
    if not line.startswith(prefix):
        raise MalformedHeader(
            f"expected header line starting with {prefix.decode()!r} "
            f"at byte {cursor.position - len(line)}, got {line[:48]!r}"
        )
    return line


def read_header(cursor: ByteCursor, *, require_offset_time: bool = True) -> HeaderBlock:
    """
    Read the preamble block from a fresh cursor.

    Expects the size line, the header line count, the start marker, then any
    number of lines up to and including the end marker. Leaves the cursor on
    the first byte after the end marker line.

    Raises:
        MalformedHeader: a literal prefix does not match, the input ends
            before the end marker, or (when `require_offset_time`) no
            OFFSET_TIME line was seen.
    """
    lines = [
        _expect(cursor, SIZE_PREFIX),
        _expect(cursor, LINES_PREFIX),
        _expect(cursor, START_MARKER),
    ]
    year_offset: Optional[int] = None

    while True:
        line = cursor.read_line()
        if line is None:
            raise MalformedHeader(f"header end marker {END_MARKER.decode()!r} not found")
        lines.append(line)
        if line.startswith(OFFSET_TIME_PREFIX):
            year_offset = parse_offset_time(line)
        if line.startswith(END_MARKER):
            break

    if require_offset_time and year_offset is None:
        raise MalformedHeader("header has no OFFSET_TIME line")

    raw = b"".join(lines)
    log.debug("Header parsed", extra={"extra": {"lines": len(lines), "bytes": len(raw), "year_offset": year_offset}})
    return HeaderBlock(raw=raw, year_offset=year_offset, line_count=len(lines))
