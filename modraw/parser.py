from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from common.types import HeaderBlock, Packet, PartialPacket, TimeAnchor
from modraw.cursor import ByteCursor
from modraw.decoder import decode_packet
from modraw.framer import extract_partial_end_packet, insert_partial_end_packet, next_frame
from modraw.header import read_header


@dataclass
class Parser:
    """
    Parser state for one capture file.

    Args:
        data: whole file contents
        anchor: batch-wide time anchor (shared between files, never reset)
        absolute_dates: reconstruct absolute dates from OFFSET_TIME; when False
            the header may omit OFFSET_TIME and packets carry offsets only
        source: label used in log records (usually the input path)
    """
    data: Union[bytes, bytearray] = field(repr=False)
    anchor: TimeAnchor = field(default_factory=TimeAnchor)
    absolute_dates: bool = True
    source: str = ""
    year_offset: Optional[int] = None
    cursor: ByteCursor = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.cursor = ByteCursor(self.data)

    def read_header(self) -> HeaderBlock:
        header = read_header(self.cursor, require_offset_time=self.absolute_dates)
        self.year_offset = header.year_offset
        return header

    def next_packet(self) -> Optional[Packet]:
        raw = next_frame(self.cursor)
        if raw is None:
            return None
        return decode_packet(raw, self.anchor, self.year_offset, absolute_dates=self.absolute_dates)

    def extract_partial(self) -> Optional[PartialPacket]:
        return extract_partial_end_packet(self.cursor, source=self.source)

    def insert_partial(self, partial: PartialPacket) -> None:
        insert_partial_end_packet(self.cursor, partial)

    def progress(self) -> float:
        return self.cursor.progress()
