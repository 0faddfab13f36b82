from __future__ import annotations

import csv
import io
import logging
import urllib.request
from pathlib import Path
from typing import Iterable, List

from .entities import RECORD_COLUMNS, TranslationRecord

log = logging.getLogger(__name__)

DOWNLOAD_TIMEOUT = 60


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def download(url: str, *, timeout: float = DOWNLOAD_TIMEOUT) -> bytes:
    log.info("downloading translation from %s", url)
    with urllib.request.urlopen(url, timeout=timeout) as resp:
        return resp.read()


def parse_records(text: str) -> List[TranslationRecord]:
    reader = csv.DictReader(io.StringIO(text))
    return [TranslationRecord.from_row(row) for row in reader]


def read_records(source: str | Path) -> List[TranslationRecord]:
    """Load translation records from a CSV file or an http(s) export link."""

    if isinstance(source, str) and is_url(source):
        raw = download(source)
    else:
        raw = Path(source).read_bytes()
    return parse_records(raw.decode("utf-8-sig"))


def write_records(destination: Path, records: Iterable[TranslationRecord]) -> int:
    destination.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with destination.open("w", encoding="utf-8", newline="") as fh:
        writer = csv.DictWriter(fh, fieldnames=RECORD_COLUMNS)
        writer.writeheader()
        for record in records:
            writer.writerow(record.to_row())
            count += 1
    return count
