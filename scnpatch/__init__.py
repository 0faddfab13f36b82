"""
Pure Pure SCN script codec: split scripts into segments, swap in translated
text, and put the bytes back together with the header bookkeeping fixed up.
"""

from .bytepatch import BUBBLE_PATTERNS, ROUTE_CHANGE_PATTERN, BytePattern, fix_route_change, remove_bubbles
from .entities import RECORD_COLUMNS, Segment, TranslationRecord, segment_key
from .errors import HeaderError, MalformedScriptError, RoundTripError, ScnError, TextEncodeError
from .header import choice_table_count, fix_size_header, read_size_header, size_offset_of
from .logging import SegmentDumpLogger, format_segments, hexdump
from .markers import CHOICE, CHOICE_MARKER, FILE_TAG, FILE_TAG_MARKER, STRUCTURAL, TEXT, text_marker
from .pipeline import (
    PatchResult,
    apply_translations,
    build_translation_map,
    compare_reference,
    extract_records,
    patch_script,
)
from .policy import FilePolicy, PatchConfig, PolicyTable, fit_strict_slot
from .records import read_records, write_records
from .scanner import combine_segments, split_segments
from .textcodec import (
    CONTINUATION_SENTINEL,
    decode_text,
    encode_text,
    from_script_newlines,
    join_continuations,
    split_continuations,
    to_script_newlines,
)
from .wrap import DEFAULT_WRAP_WIDTH, visible_length, wrap_text

__all__ = [
    "BUBBLE_PATTERNS",
    "ROUTE_CHANGE_PATTERN",
    "BytePattern",
    "fix_route_change",
    "remove_bubbles",
    "RECORD_COLUMNS",
    "Segment",
    "TranslationRecord",
    "segment_key",
    "HeaderError",
    "MalformedScriptError",
    "RoundTripError",
    "ScnError",
    "TextEncodeError",
    "choice_table_count",
    "fix_size_header",
    "read_size_header",
    "size_offset_of",
    "SegmentDumpLogger",
    "format_segments",
    "hexdump",
    "CHOICE",
    "CHOICE_MARKER",
    "FILE_TAG",
    "FILE_TAG_MARKER",
    "STRUCTURAL",
    "TEXT",
    "text_marker",
    "PatchResult",
    "apply_translations",
    "build_translation_map",
    "compare_reference",
    "extract_records",
    "patch_script",
    "FilePolicy",
    "PatchConfig",
    "PolicyTable",
    "fit_strict_slot",
    "read_records",
    "write_records",
    "combine_segments",
    "split_segments",
    "CONTINUATION_SENTINEL",
    "decode_text",
    "encode_text",
    "from_script_newlines",
    "join_continuations",
    "split_continuations",
    "to_script_newlines",
    "DEFAULT_WRAP_WIDTH",
    "visible_length",
    "wrap_text",
]
