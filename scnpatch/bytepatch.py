"""
Byte-level cosmetic and route patches.

Patterns are written the way they appear in a hex dump, with ``??`` standing
in for a byte we do not care about::

    f0 46 f2 ?? ?? ?? ?? f0 20

Matching is leftmost-first and non-overlapping, so a substitution behaves
like ``re.sub`` over the buffer.
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from typing import Callable, Iterator, List, Sequence, Tuple

from .markers import FILE_TAG_MARKER

log = logging.getLogger(__name__)

WILDCARD = "??"


@dataclass(frozen=True)
class BytePattern:
    tokens: Tuple[int | None, ...]

    def __post_init__(self) -> None:
        if not self.tokens:
            raise ValueError("byte pattern must not be empty")
        if all(token is None for token in self.tokens):
            raise ValueError("byte pattern needs at least one literal byte")

    @classmethod
    def from_hex(cls, text: str) -> "BytePattern":
        tokens: List[int | None] = []
        for part in text.split():
            if part == WILDCARD:
                tokens.append(None)
            elif len(part) == 2:
                tokens.append(int(part, 16))
            else:
                raise ValueError(f"bad byte pattern token {part!r} in {text!r}")
        return cls(tuple(tokens))

    def __len__(self) -> int:
        return len(self.tokens)

    def _anchor(self) -> Tuple[int, bytes]:
        """Longest run of literal bytes, used to drive bytes.find."""

        best_start, best_len = 0, 0
        idx = 0
        while idx < len(self.tokens):
            if self.tokens[idx] is None:
                idx += 1
                continue
            start = idx
            while idx < len(self.tokens) and self.tokens[idx] is not None:
                idx += 1
            if idx - start > best_len:
                best_start, best_len = start, idx - start
        return best_start, bytes(self.tokens[best_start : best_start + best_len])

    def matches_at(self, data: bytes, pos: int) -> bool:
        if pos < 0 or pos + len(self.tokens) > len(data):
            return False
        for offset, token in enumerate(self.tokens):
            if token is not None and data[pos + offset] != token:
                return False
        return True

    def find_all(self, data: bytes) -> Iterator[int]:
        anchor_at, anchor = self._anchor()
        search = anchor_at
        while True:
            hit = data.find(anchor, search)
            if hit == -1:
                return
            start = hit - anchor_at
            if self.matches_at(data, start):
                yield start
                search = start + len(self.tokens) + anchor_at
            else:
                search = hit + 1

    def sub(self, data: bytes, repl: bytes | Callable[[int, bytes], bytes]) -> bytes:
        out = bytearray()
        last = 0
        for start in self.find_all(data):
            end = start + len(self.tokens)
            out += data[last:start]
            out += repl(start, data[start:end]) if callable(repl) else repl
            last = end
        out += data[last:]
        return bytes(out)


# Speech bubble directives the translated UI does without.
BUBBLE_PATTERNS: Sequence[BytePattern] = (
    BytePattern.from_hex("f0 45 f2 ?? ?? ?? ?? f2 ?? ?? ?? ?? f2 ?? ?? ?? ?? f2 ?? ?? ?? ??"),
    BytePattern.from_hex("f0 46 f2 ?? ?? ?? ?? f0 20"),
    BytePattern.from_hex("f0 46 f2 07 00 00 00"),
)

# A jump target stored as f2 <u32> right before a file tag marker.
ROUTE_CHANGE_PATTERN = BytePattern((0xF2, None, None, None, None) + tuple(FILE_TAG_MARKER))
ROUTE_OFFSET = struct.Struct("<I")


def remove_bubbles(data: bytes) -> bytes:
    for pattern in BUBBLE_PATTERNS:
        data = pattern.sub(data, b"")
    return data


def fix_route_change(filename: str, data: bytes, size_delta: int) -> Tuple[bytes, List[Tuple[int, int, int]]]:
    """
    Shift every ``f2 <u32> f0 1a f1`` offset by ``size_delta``.

    These offsets are measured like the total-size header, so they move by
    exactly as much as the file grew or shrank. Returns the patched buffer and
    ``(position, old, new)`` for each rewrite.
    """

    changes: List[Tuple[int, int, int]] = []

    def _shift(start: int, match: bytes) -> bytes:
        old = ROUTE_OFFSET.unpack_from(match, 1)[0]
        new = (old + size_delta) & 0xFFFFFFFF
        changes.append((start, old, new))
        log.debug("%s: route change offset at 0x%X: 0x%X -> 0x%X", filename, start, old, new)
        return match[:1] + ROUTE_OFFSET.pack(new) + match[5:]

    patched = ROUTE_CHANGE_PATTERN.sub(data, _shift)
    return patched, changes
