"""
SCN header bookkeeping.

Layout (little endian)::

    0x00: u32 total_size      bytes from size_offset to end of file
    0x04: ...                 8 bytes we never touch
    0x0C: choice table        (size_offset - 12) / 36 records of 36 bytes
          +0x20: u32 offset   file tag position, relative to size_offset,
                              pointing at the f0 1a f1 marker
    size_offset: script body

``size_offset`` is not stored anywhere; it falls out of the file length
minus ``total_size``.
"""

from __future__ import annotations

import logging
import struct
from typing import List, Sequence

from .entities import Segment
from .errors import HeaderError
from .markers import FILE_TAG, FILE_TAG_MARKER
from .scanner import segment_offsets

log = logging.getLogger(__name__)

SIZE_FIELD = struct.Struct("<I")
CHOICE_TABLE_START = 12
CHOICE_RECORD_SIZE = 36
CHOICE_OFFSET_FIELD = 32


def read_size_header(data: bytes) -> int:
    if len(data) < SIZE_FIELD.size:
        raise HeaderError(f"buffer of {len(data)} bytes is too short for a size header")
    return SIZE_FIELD.unpack_from(data, 0)[0]


def size_offset_of(data: bytes) -> int:
    total_size = read_size_header(data)
    if total_size > len(data):
        raise HeaderError(f"size header declares {total_size} bytes but the file holds {len(data)}")
    return len(data) - total_size


def choice_table_count(size_offset: int) -> int | None:
    """Number of choice records the header holds, or None when the layout is unexpected."""

    if size_offset <= CHOICE_TABLE_START:
        return 0
    span = size_offset - CHOICE_TABLE_START
    if span % CHOICE_RECORD_SIZE:
        return None
    return span // CHOICE_RECORD_SIZE


def file_tag_positions(segments: Sequence[Segment]) -> List[int]:
    return [offset for offset, segment in segment_offsets(segments) if segment.kind == FILE_TAG]


def fix_size_header(filename: str, data: bytes, size_offset: int, segments: Sequence[Segment]) -> bytes:
    """
    Rewrite ``total_size`` and the choice offset table of a reassembled script.

    ``segments`` must be the list ``data`` was combined from. When the number
    of file tags does not match the table we leave the table alone: the text
    still patches fine, only the choice jumps are at risk.
    """

    out = bytearray(data)
    if len(out) < max(size_offset, SIZE_FIELD.size):
        raise HeaderError(f"{filename}: {len(out)} bytes cannot hold a header of {size_offset} bytes")
    SIZE_FIELD.pack_into(out, 0, (len(out) - size_offset) & 0xFFFFFFFF)

    count = choice_table_count(size_offset)
    if count == 0:
        return bytes(out)
    if count is None:
        log.warning(
            "%s: size offset %d does not leave room for whole %d-byte choice records; table left as is",
            filename,
            size_offset,
            CHOICE_RECORD_SIZE,
        )
        return bytes(out)

    positions = file_tag_positions(segments)
    if len(positions) != count:
        log.warning(
            "%s: header suggests there should be %d choices, but found %d in file",
            filename,
            count,
            len(positions),
        )
        return bytes(out)

    for idx, position in enumerate(positions):
        field_at = CHOICE_TABLE_START + CHOICE_RECORD_SIZE * idx + CHOICE_OFFSET_FIELD
        value = position - size_offset - len(FILE_TAG_MARKER)
        SIZE_FIELD.pack_into(out, field_at, value & 0xFFFFFFFF)
    return bytes(out)
