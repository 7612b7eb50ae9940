"""Literal scanning over comment-stripped source text."""

from __future__ import annotations

import logging
import re
from typing import Iterator, List, Tuple

from .comments import StrippedSource, strip_comments
from .structures import ExtractedLiteral, ExtractionMode, LiteralContext

logger = logging.getLogger(__name__)

HAN_CHARS = "\u3400-\u4dbf\u4e00-\u9fff"
LITERAL_PUNCTUATION = "，。！？；：、“”‘’（）《》…,.!?:;"

QUOTED_PATTERN = re.compile(
    rf"(?P<quote>['\"`])(?P<body>[{HAN_CHARS}][{HAN_CHARS}{LITERAL_PUNCTUATION}\s]*)(?P=quote)"
)
MARKUP_TEXT_PATTERN = re.compile(
    rf"(?<!=)>(?P<body>[^<>{{}}]*[{HAN_CHARS}][^<>{{}}]*)</"
)
LOOSE_PATTERN = re.compile(
    rf"[{HAN_CHARS}][{HAN_CHARS}{LITERAL_PUNCTUATION}\s]*"
)
ATTRIBUTE_NAME_PATTERN = re.compile(r"(?:^|\s)[A-Za-z_][\w:-]*\s*=\s*$")

ATTRIBUTE_LOOKBEHIND = 256


def normalize_text(text: str) -> str:
    """Collapse whitespace runs to single spaces and trim."""

    return " ".join(text.split())


def _inside_tag(text: str, position: int) -> bool:
    """Whether ``position`` sits between a tag opener and its closing ``>``."""

    opener = text.rfind("<", 0, position)
    if opener == -1 or opener + 1 >= len(text):
        return False
    closer = text.rfind(">", 0, position)
    # Arrow functions inside attribute expressions do not close the tag.
    while closer > opener and text[closer - 1] == "=":
        closer = text.rfind(">", 0, closer - 1)
    return opener > closer and (text[opener + 1].isalpha() or text[opener + 1] == "_")


def is_attribute_position(text: str, position: int) -> bool:
    """Detect ``name="..."`` inside a markup tag, just before a quote."""

    window = text[max(0, position - ATTRIBUTE_LOOKBEHIND) : position]
    if not ATTRIBUTE_NAME_PATTERN.search(window):
        return False
    return _inside_tag(text, position)


def _project(
    source: StrippedSource,
    original: str,
    start: int,
    end: int,
    body: str,
    context: LiteralContext,
) -> ExtractedLiteral | None:
    text = normalize_text(body)
    if not text:
        return None
    origin_start, origin_end = source.offsets.to_original_span(start, end)
    return ExtractedLiteral(
        text=text,
        original_text=original[origin_start:origin_end],
        position=origin_start,
        context=context,
    )


def _iter_markup(source: StrippedSource) -> Iterator[Tuple[int, int, str, LiteralContext]]:
    for match in MARKUP_TEXT_PATTERN.finditer(source.text):
        yield match.start("body"), match.end("body"), match.group("body"), LiteralContext.MARKUP_TEXT


def _iter_quoted(source: StrippedSource) -> Iterator[Tuple[int, int, str, LiteralContext]]:
    for match in QUOTED_PATTERN.finditer(source.text):
        context = LiteralContext.PLAIN_STRING
        if match.group("quote") != "`" and is_attribute_position(source.text, match.start()):
            context = LiteralContext.QUOTED_ATTRIBUTE
        yield match.start(), match.end(), match.group("body"), context


def scan_strict(source: StrippedSource, original: str) -> List[ExtractedLiteral]:
    """Find literals in quoted strings and markup text nodes.

    Quoted literals keep their delimiters in ``original_text``; markup text
    keeps its surrounding whitespace. Spans that overlap an earlier span are
    dropped, as are spans that straddle a removed comment.
    """

    found: List[ExtractedLiteral] = []
    for start, end, body, context in [*_iter_markup(source), *_iter_quoted(source)]:
        if source.offsets.crosses_removed(start, end):
            logger.warning(
                "Skipping literal %r: it spans a comment and cannot be rewritten safely.",
                normalize_text(body),
            )
            continue
        literal = _project(source, original, start, end, body, context)
        if literal is not None:
            found.append(literal)

    found.sort(key=lambda item: (item.position, -len(item.original_text)))

    kept: List[ExtractedLiteral] = []
    boundary = -1
    for literal in found:
        if literal.position < boundary:
            logger.debug("Dropping nested literal %r at %d.", literal.text, literal.position)
            continue
        kept.append(literal)
        boundary = literal.end
    return kept


def scan_loose(source: StrippedSource, original: str) -> List[ExtractedLiteral]:
    """Find every run of Han text regardless of the surrounding syntax."""

    found: List[ExtractedLiteral] = []
    for match in LOOSE_PATTERN.finditer(source.text):
        literal = _project(
            source,
            original,
            match.start(),
            match.end(),
            match.group(0),
            LiteralContext.PLAIN_STRING,
        )
        if literal is not None:
            found.append(literal)
    found.sort(key=lambda item: item.position)
    return found


def scan_text(original: str, mode: ExtractionMode = ExtractionMode.STRICT) -> List[ExtractedLiteral]:
    """Strip comments from ``original`` and scan it in the requested mode."""

    stripped = strip_comments(original)
    if mode is ExtractionMode.LOOSE:
        return scan_loose(stripped, original)
    return scan_strict(stripped, original)
