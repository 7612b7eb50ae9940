"""Catalog keys, persistence and first-write-wins merging."""

from __future__ import annotations

import json
import logging
import pathlib
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Literal, Sequence, Tuple

from .errors import CatalogCorruptedError
from .structures import Catalog, ExtractedLiteral, NamespacePath

logger = logging.getLogger(__name__)

DEFAULT_ROOT_MARKER = "pages"
KEY_PREFIX = "index_"


def derive_namespace(
    path: pathlib.PurePath | str,
    root_marker: str = DEFAULT_ROOT_MARKER,
) -> NamespacePath:
    """Namespace segments for a source file, rooted at ``root_marker``.

    ``src/pages/foo/index.tsx`` gives ``("pages", "foo")``. Files outside a
    marker directory all share the single segment ``(root_marker,)``.
    """

    parts = pathlib.PurePath(path).parent.parts
    if root_marker in parts:
        return tuple(parts[parts.index(root_marker) :])
    return (root_marker,)


def build_key(namespace: NamespacePath, index: int) -> str:
    return ".".join([*namespace, f"{KEY_PREFIX}{index}"])


def assign_keys(
    namespace: NamespacePath,
    literals: Sequence[ExtractedLiteral],
) -> List[Tuple[str, ExtractedLiteral]]:
    """Pair each literal with its positional key, in list order."""

    return [(build_key(namespace, index), literal) for index, literal in enumerate(literals)]


def load_catalog(path: pathlib.Path) -> Catalog:
    """Read a catalog file; a missing or blank file is an empty catalog."""

    if not path.is_file():
        return {}
    try:
        raw = path.read_text(encoding="utf-8").strip()
    except UnicodeDecodeError as exc:
        raise CatalogCorruptedError(f"Catalog {path} is not UTF-8 encoded ({exc}).") from exc
    except OSError as exc:
        raise CatalogCorruptedError(f"Catalog {path} could not be read: {exc}") from exc
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise CatalogCorruptedError(
            f"Catalog {path} is not valid JSON ({exc}). Fix or remove it before rerunning."
        ) from exc
    if not isinstance(data, dict):
        raise CatalogCorruptedError(f"Catalog {path} must contain a JSON object at the root.")
    return data


def dump_catalog(catalog: Catalog) -> str:
    return json.dumps(catalog, ensure_ascii=False, indent=2) + "\n"


def save_catalog(path: pathlib.Path, catalog: Catalog) -> None:
    """Replace ``path`` wholesale with the pretty-printed catalog."""

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dump_catalog(catalog), encoding="utf-8")


def get_nested_value(catalog: Catalog, key: str) -> Any:
    node: Any = catalog
    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            return None
        node = node[part]
    return node


def set_nested_value(
    catalog: Catalog,
    key: str,
    value: str,
) -> Tuple[Literal["added", "kept"], str | None]:
    """Write ``value`` at ``key`` unless a non-empty value is already there."""

    parts = [part for part in key.split(".") if part]
    if not parts:
        return "kept", "Empty key"

    node = catalog
    for part in parts[:-1]:
        current = node.get(part)
        if current is None:
            node[part] = {}
            current = node[part]
        if not isinstance(current, dict):
            return "kept", f"Cannot set nested key under non-object segment: {part}"
        node = current

    leaf = parts[-1]
    existing = node.get(leaf)
    if isinstance(existing, dict):
        return "kept", f"Key is already a namespace: {key}"
    if existing:
        return "kept", None
    node[leaf] = value
    return "added", None


@dataclass
class MergeReport:
    """Outcome of merging scanned literals into a catalog."""

    added: List[str] = field(default_factory=list)
    kept: List[str] = field(default_factory=list)
    conflicts: List[str] = field(default_factory=list)
    rejected: List[str] = field(default_factory=list)


def merge_literals(
    catalog: Catalog,
    keyed_literals: Iterable[Tuple[str, ExtractedLiteral]],
) -> MergeReport:
    """Add missing keys to ``catalog`` in place; existing leaves are kept."""

    report = MergeReport()
    for key, literal in keyed_literals:
        action, error = set_nested_value(catalog, key, literal.text)
        if error:
            logger.warning("Catalog key %s left untouched: %s", key, error)
            report.conflicts.append(f"{key}: {error}")
            report.rejected.append(key)
        elif action == "added":
            report.added.append(key)
        else:
            report.kept.append(key)
    return report


def flatten_catalog(catalog: Catalog, prefix: str = "") -> List[Tuple[str, Any]]:
    """Dotted-key leaf pairs in catalog order."""

    rows: List[Tuple[str, Any]] = []
    for key, value in catalog.items():
        dotted = f"{prefix}.{key}" if prefix else key
        if isinstance(value, dict):
            rows.extend(flatten_catalog(value, dotted))
        else:
            rows.append((dotted, value))
    return rows
