from __future__ import annotations

from scnpatch import visible_length, wrap_text


def test_wrap_boundary():
    assert wrap_text("aa bb cc", 5) == "aa bb\ncc"


def test_control_codes_take_no_width():
    assert visible_length('\\c12Hi \\V"ayu_001.ogg""there') == len("Hi there")
    assert wrap_text("\\c3aa bb cc", 5) == "\\c3aa bb\ncc"


def test_existing_lines_wrap_independently():
    assert wrap_text("aa bb cc\ndd", 5) == "aa bb\ncc\ndd"


def test_no_line_exceeds_width():
    text = "the quick brown fox jumps over the lazy dog again and again"
    for line in wrap_text(text, 12).split("\n"):
        assert visible_length(line) <= 12
    assert wrap_text(text, 12).replace("\n", " ") == text


def test_long_word_gets_its_own_line():
    assert wrap_text("supercalifragilistic is long", 6) == "supercalifragilistic\nis\nlong"


def test_trailing_space_is_dropped():
    assert wrap_text("aa bb ", 10) == "aa bb"


def test_empty_text():
    assert wrap_text("", 10) == ""


def test_voice_cue_needs_doubled_quote():
    assert visible_length('\\V"ayu"x') == len('\\V"ayu"x')


def test_width_counts_utf8_bytes():
    assert visible_length("「a」") == 7
    assert wrap_text("「a」 bb", 8) == "「a」\nbb"
