"""Core data structures for the i18nize pipeline."""

from __future__ import annotations

import pathlib
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Tuple


Catalog = Dict[str, Any]
NamespacePath = Tuple[str, ...]


class LiteralContext(Enum):
    """Syntactic position of a literal, which decides how it is rewritten."""

    QUOTED_ATTRIBUTE = "quoted_attribute"
    MARKUP_TEXT = "markup_text"
    PLAIN_STRING = "plain_string"


class ExtractionMode(Enum):
    """Which scanner and dedup combination a run uses."""

    STRICT = "strict"
    LOOSE = "loose"


@dataclass(frozen=True)
class SourceUnit:
    """A source file read once at the start of a run."""

    path: pathlib.Path
    raw_text: str

    @classmethod
    def read(cls, path: pathlib.Path) -> "SourceUnit":
        return cls(path=path, raw_text=path.read_text(encoding="utf-8"))


@dataclass(frozen=True)
class ExtractedLiteral:
    """A literal occurrence located in the original source text.

    ``position`` and ``original_text`` always refer to the original,
    uncommented text. For quoted contexts ``original_text`` includes the
    quote delimiters.
    """

    text: str
    original_text: str
    position: int
    context: LiteralContext

    @property
    def end(self) -> int:
        return self.position + len(self.original_text)


@dataclass(frozen=True)
class VersionSnapshot:
    """An archived pair of catalog states and their structural diff."""

    index: int
    directory: pathlib.Path
    old_catalogs: Dict[str, Catalog] = field(default_factory=dict)
    new_catalogs: Dict[str, Catalog] = field(default_factory=dict)
    diff: Dict[str, Catalog] = field(default_factory=dict)
