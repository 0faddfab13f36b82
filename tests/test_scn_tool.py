from __future__ import annotations

import struct

import scn_tool
from scnpatch import CHOICE_MARKER, FILE_TAG_MARKER, read_records, split_segments, text_marker, write_records


def _write_script(make_script, directory, name, body, *, choices=0):
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_bytes(make_script(body, choices=choices))
    return path


def _body():
    return (
        text_marker(0) + "こんにちは".encode("cp932") + b"\x00"
        + CHOICE_MARKER + "はい".encode("cp932") + b"\x00"
        + FILE_TAG_MARKER + b"1_1_2.scn\x00" + b"\x01"
    )


def test_extract_then_patch(tmp_path, capsys, make_script):
    scripts = tmp_path / "script"
    _write_script(make_script, scripts, "1_1_1.scn", _body(), choices=1)
    csv_path = tmp_path / "tllines.csv"

    assert scn_tool.main(["extract", "--scripts", str(scripts / "*.scn"), "-o", str(csv_path)]) == 0
    records = read_records(csv_path)
    assert [r.key for r in records] == ["1_1_1.scn-text-0", "1_1_1.scn-choice-0", "1_1_1.scn-filetag-0"]

    records[0].translated_text = "Hello and welcome"
    records[1].editted_text = "Yes"
    write_records(csv_path, records)

    out_dir = tmp_path / "engspt"
    dump = tmp_path / "dump.txt"
    assert scn_tool.main(
        ["patch", str(csv_path), "--scripts", str(scripts / "*.scn"), "-o", str(out_dir), "--dump", str(dump)]
    ) == 0

    out = (out_dir / "1_1_1.scn").read_bytes()
    texts = [s.data for s in split_segments(out) if s.is_semantic]
    assert texts == [b"Hello and welcome", b"Yes", b"1_1_2.scn"]
    assert struct.unpack_from("<I", out, 0)[0] == len(out) - 48
    assert struct.unpack_from("<I", out, 44)[0] == out.index(FILE_TAG_MARKER) - 48
    assert "Hello and welcome" in dump.read_text(encoding="utf-8")
    assert "1_1_1.scn" in capsys.readouterr().out


def test_patch_reports_reference_mismatches(tmp_path, capsys, make_script):
    scripts = tmp_path / "script"
    _write_script(make_script, scripts, "1_1_1.scn", _body(), choices=1)
    reference = tmp_path / "reference"
    reference.mkdir()
    (reference / "1_1_1.scn").write_bytes(b"not the same")
    csv_path = tmp_path / "tllines.csv"
    write_records(csv_path, [])

    assert scn_tool.main(
        [
            "patch",
            str(csv_path),
            "--scripts",
            str(scripts / "*.scn"),
            "-o",
            str(tmp_path / "out"),
            "--reference-dir",
            str(reference),
        ]
    ) == 0
    assert "1 of 1 scripts differ" in capsys.readouterr().out


def test_dump_lists_segments(tmp_path, capsys, make_script):
    path = _write_script(make_script, tmp_path, "1_1_1.scn", _body())
    assert scn_tool.main(["dump", str(path)]) == 0
    out = capsys.readouterr().out
    assert "== 1_1_1.scn: 7 segments" in out
    assert "text: 'こんにちは'" in out
