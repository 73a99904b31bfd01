"""
modraw — capture file parsing

Provides:
- ByteCursor: restorable read index over an in-memory capture
- read_header: preamble validation and OFFSET_TIME extraction
- next_frame / extract_partial_end_packet / insert_partial_end_packet:
  packet framing and the cross-file split-packet hand-off
- decode_packet: tick, absolute date and signature of one packet
- Parser: the per-file combination of the above

Usage examples:
    from modraw import Parser
    p = Parser(Path("run.modraw").read_bytes())
    header = p.read_header()
    som = p.next_packet()
"""
from .cursor import ByteCursor
from .decoder import decode_packet
from .framer import extract_partial_end_packet, insert_partial_end_packet, next_frame
from .header import read_header
from .parser import Parser

__all__ = [
    "ByteCursor",
    "Parser",
    "decode_packet",
    "extract_partial_end_packet",
    "insert_partial_end_packet",
    "next_frame",
    "read_header",
]
