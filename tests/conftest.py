from __future__ import annotations

import struct

import pytest

from scnpatch.header import CHOICE_RECORD_SIZE, CHOICE_TABLE_START


def build_script(body: bytes, *, choices: int = 0) -> bytes:
    """Header with a zeroed choice table of ``choices`` records, followed by ``body``."""

    size_offset = CHOICE_TABLE_START + CHOICE_RECORD_SIZE * choices
    header = bytearray(size_offset)
    struct.pack_into("<I", header, 0, len(body))
    return bytes(header) + body


@pytest.fixture
def make_script():
    return build_script
