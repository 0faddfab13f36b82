"""
Extraction and patching passes over whole SCN scripts.

Extraction turns scripts into translation records, one per segment key.
Patching feeds the records back in::

    original bytes -> bubble removal -> split_segments -> substitute text
        -> combine_segments -> fix_size_header -> fix_route_change
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

from .bytepatch import fix_route_change, remove_bubbles
from .entities import Segment, TranslationRecord
from .errors import TextEncodeError
from .header import fix_size_header, size_offset_of
from .markers import SEMANTIC_KINDS, TERMINATOR, TEXT, text_marker
from .policy import FilePolicy, PatchConfig, fit_strict_slot
from .scanner import combine_segments, iter_semantic, split_segments
from .textcodec import (
    decode_text,
    encode_text,
    from_script_newlines,
    join_continuations,
    normalize_name_brackets,
    split_continuations,
    to_script_newlines,
)
from .wrap import wrap_text

log = logging.getLogger(__name__)


@dataclass
class PatchResult:
    filename: str
    data: bytes
    segments: List[Segment]
    size_offset: int
    substituted: int = 0
    rejected: int = 0
    route_changes: List[Tuple[int, int, int]] = field(default_factory=list)


def group_by_key(filename: str, segments: Iterable[Segment]) -> Dict[str, List[Segment]]:
    """Semantic segments keyed by segment key, continuations kept in encounter order."""

    grouped: Dict[str, List[Segment]] = {}
    for segment in iter_semantic(segments):
        grouped.setdefault(segment.key(filename), []).append(segment)
    return grouped


def merged_text(parts: Sequence[Segment]) -> str:
    return join_continuations([decode_text(part.data) for part in parts])


def extract_records(
    originals: Iterable[Tuple[str, bytes]],
    translated: Mapping[str, bytes] | None = None,
) -> List[TranslationRecord]:
    """
    Build one record per segment key of every original script.

    ``translated`` maps a filename to an already translated version of that
    script; where its text for a key differs from the original it becomes the
    record's translated text. Such scripts were padded with spaces to keep
    slot lengths, hence the strip.
    """

    translated_text: Dict[str, str] = {}
    for filename, data in (translated or {}).items():
        for key, parts in group_by_key(filename, split_segments(data)).items():
            translated_text[key] = merged_text(parts)

    records: List[TranslationRecord] = []
    for filename, data in originals:
        for key, parts in group_by_key(filename, split_segments(data)).items():
            first = parts[0]
            record = TranslationRecord(
                filename=filename,
                key=key,
                index=first.index,
                length=sum(len(part.data) for part in parts),
                original_text=from_script_newlines(merged_text(parts)),
            )
            candidate = from_script_newlines(translated_text.get(key, "")).strip()
            if candidate and candidate != record.original_text:
                record.translated_text = candidate
            records.append(record)
    return records


def kind_from_key(key: str) -> str | None:
    parts = key.rsplit("-", 2)
    if len(parts) != 3 or parts[1] not in SEMANTIC_KINDS:
        return None
    return parts[1]


def encode_replacement(text: str, kind: str, config: PatchConfig) -> List[bytes]:
    """
    Shape translated text into the byte chunks that go into a key's slots.

    Dialog lines may carry the continuation sentinel; each side of it becomes
    its own chunk so it can land in its own slot.
    """

    text = from_script_newlines(text)
    if config.normalize_brackets:
        text = normalize_name_brackets(text)
    parts = split_continuations(text) if kind == TEXT else [text]
    return [encode_text(to_script_newlines(wrap_text(part, config.wrap_width))) for part in parts]


def build_translation_map(records: Iterable[TranslationRecord], config: PatchConfig) -> Dict[str, List[bytes]]:
    translations: Dict[str, List[bytes]] = {}
    for record in records:
        text = record.replacement_text
        if not record.key or text is None:
            continue
        kind = kind_from_key(record.key)
        if kind is None:
            log.warning("skipping record with unrecognised key %r", record.key)
            continue
        try:
            translations[record.key] = encode_replacement(text, kind, config)
        except TextEncodeError as exc:
            raise TextEncodeError(f"{record.key}: {exc}") from exc
    return translations


def _chain(chunks: Sequence[bytes], index: int) -> bytes:
    """Join chunks into one slot, opening a fresh line slot with the same index between them."""

    return (bytes([TERMINATOR]) + text_marker(index)).join(chunks)


def apply_translations(
    filename: str,
    segments: Sequence[Segment],
    translations: Mapping[str, Sequence[bytes]],
    policy: FilePolicy,
) -> Tuple[List[Segment], int, int]:
    """
    Return a new segment list with translated payloads, plus substituted/rejected counts.

    A key's chunks are handed to its slots in order. Extra chunks are chained
    onto the last slot; slots left over are emptied.
    """

    slot_counts: Dict[str, int] = defaultdict(int)
    for segment in iter_semantic(segments):
        slot_counts[segment.key(filename)] += 1

    seen: Dict[str, int] = defaultdict(int)
    out: List[Segment] = []
    substituted = rejected = 0
    for segment in segments:
        if not segment.is_semantic:
            out.append(segment)
            continue
        key = segment.key(filename)
        chunks = translations.get(key)
        occurrence = seen[key]
        seen[key] += 1
        if chunks is None:
            out.append(segment)
            continue
        if occurrence < slot_counts[key] - 1:
            payload = chunks[occurrence] if occurrence < len(chunks) else b""
        else:
            payload = _chain(chunks[occurrence:], segment.index)
        if policy.strict_size:
            fitted = fit_strict_slot(filename, key, segment.data, payload)
            if fitted is None:
                rejected += 1
                out.append(segment)
                continue
            payload = fitted
        out.append(segment.with_data(payload))
        substituted += 1
    return out, substituted, rejected


def patch_script(
    filename: str,
    data: bytes,
    translations: Mapping[str, Sequence[bytes]],
    config: PatchConfig,
) -> PatchResult:
    policy = config.policies.for_file(filename)
    original_length = len(data)
    size_offset = size_offset_of(data)
    if not policy.strict_size:
        data = remove_bubbles(data)

    segments, substituted, rejected = apply_translations(filename, split_segments(data), translations, policy)
    out = fix_size_header(filename, combine_segments(segments), size_offset, segments)

    result = PatchResult(
        filename=filename,
        data=out,
        segments=segments,
        size_offset=size_offset,
        substituted=substituted,
        rejected=rejected,
    )
    if policy.route_fix:
        result.data, result.route_changes = fix_route_change(filename, out, len(out) - original_length)
    return result


def compare_reference(filename: str, output: bytes, reference: bytes) -> bool:
    if output == reference:
        return True
    first_diff = next(
        (idx for idx, (a, b) in enumerate(zip(output, reference)) if a != b),
        min(len(output), len(reference)),
    )
    log.warning(
        "%s: output differs from reference (len %d vs %d, first difference at 0x%X)",
        filename,
        len(output),
        len(reference),
        first_diff,
    )
    return False
