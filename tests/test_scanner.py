from __future__ import annotations

import pytest

from scnpatch import (
    CHOICE,
    CHOICE_MARKER,
    FILE_TAG,
    FILE_TAG_MARKER,
    STRUCTURAL,
    TEXT,
    MalformedScriptError,
    combine_segments,
    split_segments,
    text_marker,
)
from scnpatch.scanner import segment_offsets


def _semantic(segments):
    return [(s.kind, s.index, s.data) for s in segments if s.is_semantic]


def test_text_marker_embeds_little_endian_index():
    assert text_marker(0) == b"\xf3\x00\x00\x00\x00"
    assert text_marker(0x0102) == b"\xf3\x02\x01\x00\x00"


def test_split_finds_every_kind_in_order():
    data = (
        b"\x01\x02"
        + text_marker(0) + "こんにちは".encode("cp932") + b"\x00"
        + CHOICE_MARKER + b"Yes\x00"
        + FILE_TAG_MARKER + b"1_2_1.scn\x00"
        + text_marker(1) + b"Bye\x00\x09"
    )
    segments = split_segments(data)
    assert _semantic(segments) == [
        (TEXT, 0, "こんにちは".encode("cp932")),
        (CHOICE, 0, b"Yes"),
        (FILE_TAG, 0, b"1_2_1.scn"),
        (TEXT, 1, b"Bye"),
    ]
    assert combine_segments(segments) == data


def test_structural_segments_keep_markers_and_terminators():
    data = b"\x07" + CHOICE_MARKER + b"A\x00\x08"
    segments = split_segments(data)
    assert [(s.kind, s.data) for s in segments] == [
        (STRUCTURAL, b"\x07" + CHOICE_MARKER),
        (CHOICE, b"A"),
        (STRUCTURAL, b"\x00\x08"),
    ]


@pytest.mark.parametrize("data", [b"", b"\x00\x01\x02 no markers here", b"\xf3\x05\x00\x00\x00stray\x00"])
def test_buffers_without_expected_markers_are_one_structural_segment(data):
    segments = split_segments(data)
    assert len(segments) == 1
    assert segments[0].kind == STRUCTURAL
    assert segments[0].data == data


def test_repeated_text_marker_is_a_continuation():
    data = (
        text_marker(0) + b"one\x00"
        + b"\x05" + text_marker(0) + b"two\x00"
        + text_marker(1) + b"three\x00"
    )
    assert _semantic(split_segments(data)) == [
        (TEXT, 0, b"one"),
        (TEXT, 0, b"two"),
        (TEXT, 1, b"three"),
    ]


def test_choice_counter_always_advances():
    data = CHOICE_MARKER + b"a\x00" + CHOICE_MARKER + b"b\x00"
    assert _semantic(split_segments(data)) == [(CHOICE, 0, b"a"), (CHOICE, 1, b"b")]


def test_earliest_marker_wins():
    data = FILE_TAG_MARKER + b"x.scn\x00" + text_marker(0) + b"line\x00" + CHOICE_MARKER + b"c\x00"
    assert [kind for kind, _, _ in _semantic(split_segments(data))] == [FILE_TAG, TEXT, CHOICE]


def test_empty_payload_is_kept():
    data = text_marker(0) + b"\x00" + text_marker(1) + b"x\x00"
    assert _semantic(split_segments(data)) == [(TEXT, 0, b""), (TEXT, 1, b"x")]


def test_unterminated_segment_is_fatal():
    with pytest.raises(MalformedScriptError):
        split_segments(b"\x01" + text_marker(0) + b"never ends")


def test_scanning_twice_gives_identical_keys():
    data = text_marker(0) + b"a\x00" + text_marker(0) + b"b\x00" + CHOICE_MARKER + b"c\x00"
    first = [s.key("f.scn") for s in split_segments(data) if s.is_semantic]
    second = [s.key("f.scn") for s in split_segments(data) if s.is_semantic]
    assert first == second == ["f.scn-text-0", "f.scn-text-0", "f.scn-choice-0"]


def test_segment_offsets_track_positions():
    data = b"\x01\x02" + CHOICE_MARKER + b"ab\x00"
    offsets = [(offset, s.kind) for offset, s in segment_offsets(split_segments(data))]
    assert offsets == [(0, STRUCTURAL), (5, CHOICE), (7, STRUCTURAL)]


def test_with_data_leaves_original_untouched():
    segments = split_segments(CHOICE_MARKER + b"old\x00")
    choice = segments[1]
    replaced = choice.with_data(b"new")
    assert choice.data == b"old"
    assert replaced.data == b"new"
    assert (replaced.kind, replaced.index) == (choice.kind, choice.index)
