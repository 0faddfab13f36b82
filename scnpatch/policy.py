from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Iterable

from .markers import PAD_BYTE
from .wrap import DEFAULT_WRAP_WIDTH

log = logging.getLogger(__name__)

# Scripts whose jump targets we cannot repair, so every slot keeps its size.
STRICT_SIZE_FILES = frozenset({"2_6_6.scn", "4_12_1.scn"})
# Scripts that jump to another route through an absolute f2 offset.
ROUTE_FIX_FILES = frozenset({"4_9_7.scn", "4_10_2.scn", "4_13_9.scn", "5_10_1.scn"})


@dataclass(frozen=True)
class FilePolicy:
    strict_size: bool = False
    route_fix: bool = False


@dataclass(frozen=True)
class PolicyTable:
    strict_size: FrozenSet[str] = frozenset()
    route_fix: FrozenSet[str] = frozenset()

    @classmethod
    def default(cls) -> "PolicyTable":
        return cls(strict_size=STRICT_SIZE_FILES, route_fix=ROUTE_FIX_FILES)

    @classmethod
    def from_names(cls, *, strict_size: Iterable[str] = (), route_fix: Iterable[str] = ()) -> "PolicyTable":
        return cls(strict_size=frozenset(strict_size), route_fix=frozenset(route_fix))

    @classmethod
    def from_json(cls, source: Path) -> "PolicyTable":
        """
        Load a policy file of the form::

            {"strict_size": ["2_6_6.scn"], "route_fix": ["4_9_7.scn"]}

        A missing key keeps the built-in table for that policy.
        """

        data = json.loads(source.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"{source}: policy file must hold a JSON object")
        unknown = set(data) - {"strict_size", "route_fix"}
        if unknown:
            raise ValueError(f"{source}: unknown policy keys {sorted(unknown)}")
        default = cls.default()
        return cls(
            strict_size=frozenset(data.get("strict_size", default.strict_size)),
            route_fix=frozenset(data.get("route_fix", default.route_fix)),
        )

    def for_file(self, filename: str) -> FilePolicy:
        return FilePolicy(strict_size=filename in self.strict_size, route_fix=filename in self.route_fix)


@dataclass
class PatchConfig:
    wrap_width: int = DEFAULT_WRAP_WIDTH
    policies: PolicyTable = field(default_factory=PolicyTable.default)
    normalize_brackets: bool = True

    def __post_init__(self) -> None:
        if self.wrap_width <= 0:
            raise ValueError(f"wrap width must be positive, got {self.wrap_width}")


def fit_strict_slot(filename: str, key: str, original: bytes, replacement: bytes) -> bytes | None:
    """
    Fit ``replacement`` into the slot ``original`` occupies without moving anything.

    Shorter text is padded with spaces; longer text is rejected (None) since
    nothing downstream would be repositioned to make room for it.
    """

    if len(replacement) > len(original):
        log.warning(
            "%s: translation for %s (len %d) is too long for its slot (len %d) in strict size mode: %r",
            filename,
            key,
            len(replacement),
            len(original),
            replacement,
        )
        return None
    return bytes(replacement) + bytes([PAD_BYTE]) * (len(original) - len(replacement))
