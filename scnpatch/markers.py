from __future__ import annotations

import struct

TEXT = "text"
CHOICE = "choice"
FILE_TAG = "filetag"
STRUCTURAL = ""
SEMANTIC_KINDS = (TEXT, CHOICE, FILE_TAG)

TEXT_MARKER_TAG = 0xF3
CHOICE_MARKER = bytes.fromhex("F0 1C F1")
FILE_TAG_MARKER = bytes.fromhex("F0 1A F1")
TERMINATOR = 0x00
PAD_BYTE = 0x20


def text_marker(index: int) -> bytes:
    """Bytes that open the ``index``-th dialog line: 0xF3 then a u32 counter."""

    return bytes([TEXT_MARKER_TAG]) + struct.pack("<I", index & 0xFFFFFFFF)

