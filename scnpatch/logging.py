from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence

from .entities import Segment
from .markers import TEXT
from .textcodec import decode_text

HEXDUMP_WIDTH = 16


def hexdump(data: bytes, *, base: int = 0) -> str:
    lines: List[str] = []
    for row in range(0, len(data), HEXDUMP_WIDTH):
        chunk = data[row : row + HEXDUMP_WIDTH]
        hex_part = " ".join(f"{b:02x}" for b in chunk)
        ascii_part = "".join(chr(b) if 32 <= b < 127 else "." for b in chunk)
        lines.append(f"{base + row:08x}  {hex_part:<{HEXDUMP_WIDTH * 3 - 1}}  |{ascii_part}|")
    return "\n".join(lines)


def format_segments(segments: Sequence[Segment]) -> str:
    lines: List[str] = []
    offset = 0
    for segment in segments:
        kind = segment.kind or "structural"
        lines.append(f"offset: {offset} (0x{offset:X}) kind={kind} index={segment.index} len={len(segment.data)}")
        if segment.kind == TEXT:
            lines.append(f"  text: {decode_text(segment.data)!r}")
        elif segment.data:
            lines.append(hexdump(segment.data, base=offset))
        offset += len(segment.data)
    return "\n".join(lines)


@dataclass
class SegmentDumpLogger:
    destination: Path

    def __post_init__(self) -> None:
        self._lines: List[str] = []

    def record(self, filename: str, segments: Sequence[Segment], *, note: str | None = None) -> None:
        header = f"== {filename}: {len(segments)} segments"
        if note:
            header += f" | {note}"
        self._lines.append(header)
        self._lines.append(format_segments(segments))
        self._lines.append("")

    def flush(self) -> None:
        if not self._lines:
            return
        self.destination.parent.mkdir(parents=True, exist_ok=True)
        self.destination.write_text("\n".join(self._lines) + "\n", encoding="utf-8")
