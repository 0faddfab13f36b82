#!/usr/bin/env python3
"""
Extract dialog from Pure Pure `.scn` scripts and patch translations back in.

    extract  scripts -> tllines.csv (one row per dialog line, choice and file tag)
    patch    tllines.csv + scripts -> patched scripts with headers fixed up
    dump     print the segment layout of a script for inspection
"""

from __future__ import annotations

import argparse
import glob
import logging
import sys
from pathlib import Path
from typing import Dict, List, Tuple

from scnpatch import (
    PatchConfig,
    PolicyTable,
    SegmentDumpLogger,
    build_translation_map,
    compare_reference,
    extract_records,
    format_segments,
    patch_script,
    read_records,
    split_segments,
    write_records,
)
from scnpatch.wrap import DEFAULT_WRAP_WIDTH

DEFAULT_SCRIPTS = "script/*.scn"
DEFAULT_OUTPUT_NAME = "tllines.csv"


def _expand(pattern: str) -> List[Path]:
    return [Path(p) for p in sorted(glob.glob(pattern))]


def _load_scripts(pattern: str) -> List[Tuple[str, bytes]]:
    return [(path.name, path.read_bytes()) for path in _expand(pattern)]


def extract_command(args: argparse.Namespace) -> int:
    originals = _load_scripts(args.scripts)
    translated: Dict[str, bytes] = {}
    if args.translated_scripts:
        translated = dict(_load_scripts(args.translated_scripts))
    records = extract_records(originals, translated)
    output = args.output or Path(DEFAULT_OUTPUT_NAME)
    count = write_records(output, records)
    print(f"[+] Extracted {count} lines from {len(originals)} scripts -> {output}")
    return 0


def patch_command(args: argparse.Namespace) -> int:
    policies = PolicyTable.from_json(args.policy) if args.policy else PolicyTable.default()
    config = PatchConfig(wrap_width=args.wordwrap, policies=policies)
    records = read_records(args.translations)
    translations = build_translation_map(records, config)
    print(f"[+] Loaded {len(translations)} translated lines from {args.translations}")

    dump = SegmentDumpLogger(args.dump) if args.dump else None
    args.output_dir.mkdir(parents=True, exist_ok=True)
    mismatches = 0
    scripts = _expand(args.scripts)
    for path in scripts:
        result = patch_script(path.name, path.read_bytes(), translations, config)
        destination = args.output_dir / path.name
        destination.write_bytes(result.data)
        note = f"size_offset={result.size_offset} substituted={result.substituted} rejected={result.rejected}"
        print(f"[+] {path.name}: {note} -> {destination}")
        if dump is not None:
            dump.record(path.name, split_segments(result.data), note=note)
        if args.reference_dir:
            reference = args.reference_dir / path.name
            if not reference.exists():
                print(f"[!] {path.name}: no reference file at {reference}")
                mismatches += 1
            elif not compare_reference(path.name, result.data, reference.read_bytes()):
                mismatches += 1
    if dump is not None:
        dump.flush()
        print(f"[+] Segment dump written to {args.dump}")
    if args.reference_dir:
        print(f"[i] Reference check: {mismatches} of {len(scripts)} scripts differ")
    return 0


def dump_command(args: argparse.Namespace) -> int:
    for path in args.scripts:
        segments = split_segments(path.read_bytes())
        print(f"== {path.name}: {len(segments)} segments")
        print(format_segments(segments))
    return 0


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Extract and patch Pure Pure SCN scripts.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every route change and continuation line")
    subparsers = parser.add_subparsers(dest="command", required=True)

    extract_p = subparsers.add_parser("extract", help="Write the text of every script into a translation CSV.")
    extract_p.add_argument("--scripts", default=DEFAULT_SCRIPTS, help=f"Glob of original scripts (default {DEFAULT_SCRIPTS})")
    extract_p.add_argument("--translated-scripts", help="Glob of previously translated scripts used to seed TRANSLATED_TEXT")
    extract_p.add_argument("-o", "--output", type=Path, help=f"Destination CSV (default ./{DEFAULT_OUTPUT_NAME})")
    extract_p.set_defaults(func=extract_command)

    patch_p = subparsers.add_parser("patch", help="Write translated scripts from a translation CSV.")
    patch_p.add_argument("translations", help="Translation CSV path or http(s) export URL")
    patch_p.add_argument("--scripts", default=DEFAULT_SCRIPTS, help=f"Glob of original scripts (default {DEFAULT_SCRIPTS})")
    patch_p.add_argument("-o", "--output-dir", type=Path, default=Path("engspt"), help="Directory for patched scripts (default ./engspt)")
    patch_p.add_argument("--wordwrap", type=int, default=DEFAULT_WRAP_WIDTH, help=f"Word wrap width in characters (default {DEFAULT_WRAP_WIDTH})")
    patch_p.add_argument("--policy", type=Path, help="JSON file overriding the strict-size / route-fix file lists")
    patch_p.add_argument("--reference-dir", type=Path, help="Compare every output against the same-named file here")
    patch_p.add_argument("--dump", type=Path, help="Write a segment dump of every patched script to this file")
    patch_p.set_defaults(func=patch_command)

    dump_p = subparsers.add_parser("dump", help="Print the segment layout of scripts.")
    dump_p.add_argument("scripts", nargs="+", type=Path, help="Scripts to dump")
    dump_p.set_defaults(func=dump_command)

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
