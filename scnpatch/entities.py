from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Dict

from .markers import SEMANTIC_KINDS, STRUCTURAL


def segment_key(filename: str, kind: str, index: int) -> str:
    return f"{filename}-{kind}-{index}"


@dataclass(frozen=True)
class Segment:
    kind: str = STRUCTURAL
    index: int = 0
    data: bytes = b""

    @property
    def is_semantic(self) -> bool:
        return self.kind in SEMANTIC_KINDS

    def key(self, filename: str) -> str:
        return segment_key(filename, self.kind, self.index)

    def with_data(self, data: bytes) -> "Segment":
        return replace(self, data=bytes(data))


@dataclass
class TranslationRecord:
    filename: str = ""
    key: str = ""
    index: int = 0
    length: int = 0
    original_text: str = ""
    translated_text: str = ""
    editted_text: str = ""
    notes: str = ""
    status: str = ""
    line_status: str = ""

    @property
    def replacement_text(self) -> str | None:
        if self.editted_text:
            return self.editted_text
        if self.translated_text:
            return self.translated_text
        return None

    def to_row(self) -> Dict[str, str]:
        return {f.name.upper(): str(getattr(self, f.name)) for f in fields(self)}

    @classmethod
    def from_row(cls, row: Dict[str, str]) -> "TranslationRecord":
        values: Dict[str, object] = {}
        for f in fields(cls):
            raw = row.get(f.name.upper())
            if raw is None:
                continue
            if f.name in ("index", "length"):
                values[f.name] = int(raw) if raw.strip() else 0
            else:
                values[f.name] = raw
        return cls(**values)


RECORD_COLUMNS = tuple(f.name.upper() for f in fields(TranslationRecord))
