"""Pipe-delimited translation sheet for reviewers."""

from __future__ import annotations

import csv
import io
import pathlib
from typing import List, Tuple

from .catalog import flatten_catalog, get_nested_value
from .structures import Catalog

SHEET_NAME = "translation.csv"
DELIMITER = "|"


def build_rows(source: Catalog, target: Catalog) -> List[Tuple[str, str, str]]:
    """One row per source leaf: key, source text, target text or blank."""

    rows: List[Tuple[str, str, str]] = []
    for key, value in flatten_catalog(source):
        translated = get_nested_value(target, key)
        rows.append(
            (
                key,
                "" if value is None else str(value),
                translated if isinstance(translated, str) else "",
            )
        )
    return rows


def render_sheet(
    source: Catalog,
    target: Catalog,
    *,
    source_locale: str,
    target_locale: str,
) -> str:
    buffer = io.StringIO()
    writer = csv.writer(
        buffer,
        delimiter=DELIMITER,
        quotechar='"',
        quoting=csv.QUOTE_MINIMAL,
        lineterminator="\n",
    )
    writer.writerow(["key", source_locale, target_locale])
    writer.writerows(build_rows(source, target))
    return buffer.getvalue()


def export_sheet(
    directory: pathlib.Path,
    source: Catalog,
    target: Catalog,
    *,
    source_locale: str,
    target_locale: str,
) -> pathlib.Path:
    path = directory / SHEET_NAME
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        render_sheet(source, target, source_locale=source_locale, target_locale=target_locale),
        encoding="utf-8",
    )
    return path
