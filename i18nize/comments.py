"""Comment stripping with an explicit offset projection.

Scanning runs on a copy of the source with comments removed, while
rewriting edits the original text. ``OffsetMap`` is the single place where
positions found in the stripped copy are projected back onto the original.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass, field
from typing import List, Tuple


@dataclass
class OffsetMap:
    """Projects stripped-text positions onto original-text positions."""

    removed: List[Tuple[int, int]] = field(default_factory=list)
    _stripped_starts: List[int] = field(init=False, default_factory=list)
    _cumulative: List[int] = field(init=False, default_factory=list)

    def __post_init__(self) -> None:
        total = 0
        self._cumulative = [0]
        for original_start, length in self.removed:
            self._stripped_starts.append(original_start - total)
            total += length
            self._cumulative.append(total)

    def to_original(self, position: int) -> int:
        """Return the original offset of the character at ``position``."""

        count = bisect.bisect_right(self._stripped_starts, position)
        return position + self._cumulative[count]

    def to_original_span(self, start: int, end: int) -> Tuple[int, int]:
        if end <= start:
            origin = self.to_original(start)
            return origin, origin
        return self.to_original(start), self.to_original(end - 1) + 1

    def crosses_removed(self, start: int, end: int) -> bool:
        """True when a removed comment sat strictly inside ``[start, end)``."""

        index = bisect.bisect_right(self._stripped_starts, start)
        return index < len(self._stripped_starts) and self._stripped_starts[index] < end


@dataclass
class StrippedSource:
    text: str
    offsets: OffsetMap


def strip_comments(text: str) -> StrippedSource:
    """Remove ``//`` line comments and ``/* */`` block comments.

    Quoted strings are skipped so comment markers inside them survive.
    Line comments stop before the newline, so line structure is kept.
    """

    normal, line_comment, block_comment, quoted = range(4)

    state = normal
    quote = ""
    out: List[str] = []
    removed: List[Tuple[int, int]] = []
    comment_start = 0
    i = 0
    n = len(text)

    while i < n:
        ch = text[i]
        nxt = text[i + 1] if i + 1 < n else ""

        if state == normal:
            if ch == "/" and nxt and nxt in "/*":
                comment_start = i
                state = line_comment if nxt == "/" else block_comment
                i += 2
                continue
            if ch in "'\"`":
                quote = ch
                state = quoted
            out.append(ch)
            i += 1
            continue

        if state == line_comment:
            if ch in "\r\n":
                removed.append((comment_start, i - comment_start))
                state = normal
                continue
            i += 1
            continue

        if state == block_comment:
            if ch == "*" and nxt == "/":
                i += 2
                removed.append((comment_start, i - comment_start))
                state = normal
                continue
            i += 1
            continue

        # quoted
        if ch == "\\" and i + 1 < n:
            out.append(ch)
            out.append(text[i + 1])
            i += 2
            continue
        out.append(ch)
        i += 1
        if ch == quote or (ch == "\n" and quote != "`"):
            state = normal

    if state in (line_comment, block_comment):
        # Unterminated comment runs to end of input.
        removed.append((comment_start, n - comment_start))

    return StrippedSource(text="".join(out), offsets=OffsetMap(removed))
