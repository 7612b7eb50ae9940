"""Order-preserving deduplication of scanned literals."""

from __future__ import annotations

from typing import List, Sequence, Set

from .structures import ExtractedLiteral, ExtractionMode


def dedupe_literals(literals: Sequence[ExtractedLiteral]) -> List[ExtractedLiteral]:
    """Drop repeated texts, keeping the first occurrence and its position."""

    seen: Set[str] = set()
    unique: List[ExtractedLiteral] = []
    for literal in literals:
        if literal.text in seen:
            continue
        seen.add(literal.text)
        unique.append(literal)
    return unique


def collapse_contained(literals: Sequence[ExtractedLiteral]) -> List[ExtractedLiteral]:
    """Greedy containment filter over literals in scan order.

    A newer text that contains accepted texts evicts them; a newer text
    contained in an accepted text is discarded. The surviving set depends on
    the input order when several containment relations overlap.
    """

    seen: Set[str] = set()
    accepted: List[ExtractedLiteral] = []
    for literal in literals:
        text = literal.text
        if text in seen:
            continue
        seen.add(text)

        accepted = [item for item in accepted if item.text not in text]
        if any(text in item.text for item in accepted):
            continue
        accepted.append(literal)
    return accepted


def reduce_literals(
    literals: Sequence[ExtractedLiteral],
    mode: ExtractionMode = ExtractionMode.STRICT,
) -> List[ExtractedLiteral]:
    """Apply the dedup strategy that belongs to ``mode``."""

    if mode is ExtractionMode.LOOSE:
        return collapse_contained(literals)
    return dedupe_literals(literals)
