from __future__ import annotations

import re
from typing import List

DEFAULT_WRAP_WIDTH = 50

# Inline directives that take no room on screen. A voice cue closes with a
# doubled quote: \V"ayu_001"".
COLOR_RE = re.compile(r"\\c[0-9]+")
VOICE_RE = re.compile(r'\\V"[^"]*""')


def visible_length(line: str) -> int:
    line = COLOR_RE.sub("", line)
    line = VOICE_RE.sub("", line)
    # Widths are UTF-8 byte counts, so a full-width character counts as 3.
    return len(line.encode("utf-8"))


def wrap_line(line: str, width: int = DEFAULT_WRAP_WIDTH) -> List[str]:
    """Greedy word wrap on single spaces; overlong words get a line of their own."""

    if line.endswith(" "):
        line = line[:-1]
    wrapped: List[str] = []
    current: List[str] = []
    for word in line.split(" "):
        current.append(word)
        if len(current) > 1 and visible_length(" ".join(current)) > width:
            wrapped.append(" ".join(current[:-1]))
            current = [word]
    if current:
        wrapped.append(" ".join(current))
    return wrapped


def wrap_text(text: str, width: int = DEFAULT_WRAP_WIDTH) -> str:
    lines: List[str] = []
    for line in text.split("\n"):
        lines.extend(wrap_line(line, width))
    return "\n".join(lines)
