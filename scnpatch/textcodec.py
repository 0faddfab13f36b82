from __future__ import annotations

import unicodedata
from typing import List, Sequence

from .errors import TextEncodeError

SCRIPT_ENCODING = "cp932"
SCRIPT_NEWLINE = "\\N"
LEGACY_NEWLINES = ("\\N", "\\n")
CONTINUATION_SENTINEL = "\n~~~~\n"
NAME_BRACKETS = {"【": "「", "】": "」"}


def decode_text(data: bytes) -> str:
    """
    Decode a script slot to ``str``; returns "" when the bytes are not text.

    An empty result is ambiguous on purpose: callers that need to tell a
    failed decode from an empty slot must look at ``len(data)``.
    """

    try:
        text = bytes(data).decode(SCRIPT_ENCODING)
    except UnicodeDecodeError:
        return ""
    if _unprintable_count(text) * 2 > len(text):
        return ""
    return text


def _unprintable_count(text: str) -> int:
    """Controls, replacement marks and the private-use code points cp932 maps stray bytes to."""

    count = 0
    for ch in text:
        if ch in "\t\n\r":
            continue
        if ch == "\ufffd" or unicodedata.category(ch) in ("Cc", "Co"):
            count += 1
    return count


def encode_text(text: str) -> bytes:
    try:
        return text.encode(SCRIPT_ENCODING)
    except UnicodeEncodeError as exc:
        bad = exc.object[exc.start : exc.end]
        raise TextEncodeError(
            f"cannot encode {bad!r} at position {exc.start} as {SCRIPT_ENCODING}: {text!r}"
        ) from exc


def from_script_newlines(text: str) -> str:
    for escape in LEGACY_NEWLINES:
        text = text.replace(escape, "\n")
    return text


def to_script_newlines(text: str) -> str:
    return text.replace("\n", SCRIPT_NEWLINE)


def normalize_name_brackets(text: str) -> str:
    for old, new in NAME_BRACKETS.items():
        text = text.replace(old, new)
    return text


def join_continuations(parts: Sequence[str]) -> str:
    return CONTINUATION_SENTINEL.join(parts)


def split_continuations(text: str) -> List[str]:
    return text.split(CONTINUATION_SENTINEL)
