"""
Split an SCN script into typed segments and join them back together.

A script is a flat byte stream. Dialog lines, choice captions and the file
tags naming a choice's destination are each introduced by a marker and
terminated by a zero byte; everything else is opaque bytecode we carry
through untouched::

    ... f3 <u32 line index> <text> 00 ... f0 1c f1 <choice> 00 ... f0 1a f1 <file> 00 ...

Dialog markers embed the running line index, so the scanner searches for
the marker of the *next expected* line rather than for the 0xF3 tag alone.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Sequence, Tuple

from .entities import Segment
from .errors import MalformedScriptError, RoundTripError
from .markers import CHOICE, CHOICE_MARKER, FILE_TAG, FILE_TAG_MARKER, SEMANTIC_KINDS, STRUCTURAL, TERMINATOR, TEXT, text_marker

log = logging.getLogger(__name__)


def _nearest_marker(data: bytes, pos: int, candidates: Sequence[Tuple[str, bytes]]) -> Tuple[int, str, bytes] | None:
    """Earliest candidate at or after ``pos``; ties go to the earlier candidate."""

    best: Tuple[int, str, bytes] | None = None
    for kind, marker in candidates:
        found = data.find(marker, pos)
        if found == -1:
            continue
        if best is None or found < best[0]:
            best = (found, kind, marker)
    return best


def split_segments(data: bytes) -> List[Segment]:
    """
    Tokenise ``data`` into structural and semantic segments.

    Structural segments keep their marker bytes, semantic segments hold only
    the bytes between marker and terminator. The zero terminator opens the
    following structural segment.

    A dialog line whose marker shows up again further down the stream is a
    continuation: an earlier translation split one logical line over several
    slots while reusing the same index. The line counter is held back so that
    every slot sharing the marker gets the same index.
    """

    data = bytes(data)
    segments: List[Segment] = []
    counters: Dict[str, int] = {kind: 0 for kind in SEMANTIC_KINDS}
    pos = 0
    while True:
        candidates = (
            (TEXT, text_marker(counters[TEXT])),
            (CHOICE, CHOICE_MARKER),
            (FILE_TAG, FILE_TAG_MARKER),
        )
        hit = _nearest_marker(data, pos, candidates)
        if hit is None:
            segments.append(Segment(STRUCTURAL, 0, data[pos:]))
            break
        found, kind, marker = hit
        begin = found + len(marker)
        end = data.find(TERMINATOR, begin)
        if end == -1:
            raise MalformedScriptError(
                f"{kind} segment #{counters[kind]} opened at 0x{found:X} has no terminator"
            )
        segments.append(Segment(STRUCTURAL, 0, data[pos:begin]))
        segments.append(Segment(kind, counters[kind], data[begin:end]))
        pos = end

        if kind == TEXT and data.find(marker, pos) != -1:
            log.debug("text line %d continues at a later slot", counters[TEXT])
            continue
        counters[kind] += 1

    if combine_segments(segments) != data:
        raise RoundTripError("segments do not reproduce the scanned buffer")
    return segments


def combine_segments(segments: Iterable[Segment]) -> bytes:
    return b"".join(segment.data for segment in segments)


def iter_semantic(segments: Iterable[Segment]) -> Iterable[Segment]:
    return (segment for segment in segments if segment.is_semantic)


def segment_offsets(segments: Iterable[Segment]) -> List[Tuple[int, Segment]]:
    """Pair each segment with the byte offset it starts at in the combined buffer."""

    out: List[Tuple[int, Segment]] = []
    offset = 0
    for segment in segments:
        out.append((offset, segment))
        offset += len(segment.data)
    return out
