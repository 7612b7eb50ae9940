"""Rewrite literals in the original source into catalog lookups."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .structures import ExtractedLiteral, LiteralContext

logger = logging.getLogger(__name__)

IMPORT_STATEMENT_PATTERN = re.compile(
    r"^import\s+(?:[^;'\"]*?\sfrom\s*)?['\"][^'\"\n]+['\"][ \t]*;?",
    re.MULTILINE,
)
COMPONENT_PATTERNS = (
    re.compile(
        r"\bconst\s+[A-Z]\w*\s*(?::\s*[\w.]+(?:<[^>]*>)?\s*)?=\s*"
        r"(?:async\s+)?(?:\([^)]*\)|\w+)\s*(?::\s*[^=]+?)?=>\s*\{"
    ),
    re.compile(r"\bfunction\s+[A-Z]\w*\s*\([^)]*\)\s*(?::\s*[^{]+)?\{"),
)
FALLBACK_FUNCTION_PATTERN = re.compile(r"\bfunction\s+\w+\s*\(\)\s*\{")


@dataclass(frozen=True)
class RewriteStyle:
    """Names used in the rewritten source."""

    function_name: str = "t"
    hook_name: str = "useTranslation"
    module: str = "react-i18next"
    indent: str = "  "

    @property
    def import_statement(self) -> str:
        return f"import {{ {self.hook_name} }} from '{self.module}';"

    @property
    def accessor_declaration(self) -> str:
        return f"const {{ {self.function_name} }} = {self.hook_name}();"

    def lookup_call(self, key: str) -> str:
        escaped = key.replace("\\", "\\\\").replace("'", "\\'")
        return f"{self.function_name}('{escaped}')"

    def has_import(self, code: str) -> bool:
        pattern = (
            rf"^import[^;]*?\b{re.escape(self.hook_name)}\b[^;]*?"
            rf"from\s*['\"]{re.escape(self.module)}['\"]"
        )
        return re.search(pattern, code, re.MULTILINE) is not None

    def has_accessor(self, code: str) -> bool:
        pattern = (
            rf"\b(?:const|let|var)\s*\{{[^}}]*\b{re.escape(self.function_name)}\b[^}}]*\}}"
            rf"\s*=\s*{re.escape(self.hook_name)}\s*\("
        )
        return re.search(pattern, code) is not None


@dataclass
class RewriteResult:
    text: str
    replacements: int = 0
    import_added: bool = False
    accessor_added: bool = False
    warnings: List[str] = field(default_factory=list)


def _replacement_for(literal: ExtractedLiteral, call: str) -> str:
    if literal.context is LiteralContext.QUOTED_ATTRIBUTE:
        return f"{{{call}}}"
    if literal.context is LiteralContext.MARKUP_TEXT:
        raw = literal.original_text
        lead = raw[: len(raw) - len(raw.lstrip())]
        trail = raw[len(raw.rstrip()) :]
        return f"{lead}{{{call}}}{trail}"
    return call


def replace_literals(
    text: str,
    keyed_literals: Sequence[Tuple[str, ExtractedLiteral]],
    style: RewriteStyle,
) -> Tuple[str, int, List[str]]:
    """Replace each literal span, last position first.

    Returns the new text, the number of replacements and any warnings for
    literals whose span no longer matches the text.
    """

    result = text
    count = 0
    warnings: List[str] = []
    ordered = sorted(keyed_literals, key=lambda pair: pair[1].position, reverse=True)
    for key, literal in ordered:
        start, end = literal.position, literal.end
        if result[start:end] != literal.original_text:
            message = f"Literal {literal.text!r} not found at offset {start}; left unchanged."
            logger.warning(message)
            warnings.append(message)
            continue
        result = result[:start] + _replacement_for(literal, style.lookup_call(key)) + result[end:]
        count += 1
    return result, count, warnings


def ensure_import(code: str, style: RewriteStyle) -> Tuple[str, bool]:
    """Add the hook import after the last import statement, or at the top."""

    if style.has_import(code):
        return code, False
    matches = list(IMPORT_STATEMENT_PATTERN.finditer(code))
    if matches:
        insert_at = matches[-1].end()
        return code[:insert_at] + "\n" + style.import_statement + code[insert_at:], True
    return style.import_statement + "\n\n" + code, True


def _find_component_body(code: str) -> Optional[re.Match[str]]:
    found = (pattern.search(code) for pattern in COMPONENT_PATTERNS)
    candidates = [match for match in found if match is not None]
    if candidates:
        return min(candidates, key=lambda match: match.start())
    return FALLBACK_FUNCTION_PATTERN.search(code)


def ensure_accessor(code: str, style: RewriteStyle) -> Tuple[str, bool, Optional[str]]:
    """Declare the lookup function at the top of the first component body.

    Returns the code, whether it changed and a warning when no component
    body could be located.
    """

    if style.has_accessor(code):
        return code, False, None
    match = _find_component_body(code)
    if match is None:
        message = (
            "No component declaration found; "
            f"add `{style.accessor_declaration}` manually."
        )
        logger.warning(message)
        return code, False, message
    insert_at = match.end()
    declaration = "\n" + style.indent + style.accessor_declaration
    return code[:insert_at] + declaration + code[insert_at:], True, None


def rewrite_source(
    text: str,
    keyed_literals: Sequence[Tuple[str, ExtractedLiteral]],
    style: RewriteStyle | None = None,
) -> RewriteResult:
    """Replace literals and make sure the lookup function is available."""

    style = style or RewriteStyle()
    rewritten, count, warnings = replace_literals(text, keyed_literals, style)
    result = RewriteResult(text=rewritten, replacements=count, warnings=warnings)
    if not count:
        return result

    result.text, result.import_added = ensure_import(result.text, style)
    result.text, result.accessor_added, warning = ensure_accessor(result.text, style)
    if warning:
        result.warnings.append(warning)
    return result
