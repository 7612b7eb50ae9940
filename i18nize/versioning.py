"""Append-only version snapshots of the catalogs and their diffs."""

from __future__ import annotations

import copy
import logging
import pathlib
from typing import Dict, Mapping

from .catalog import save_catalog
from .structures import Catalog, VersionSnapshot

logger = logging.getLogger(__name__)

_MISSING = object()


def diff_catalogs(old: Catalog, new: Catalog) -> Catalog:
    """Nested tree of every leaf whose value differs between ``old`` and ``new``.

    Changed and added leaves carry the new value, removed leaves carry
    ``None``. Subtrees without differences are omitted.
    """

    result: Catalog = {}
    keys = list(new) + [key for key in old if key not in new]
    for key in keys:
        before = old.get(key, _MISSING)
        after = new.get(key, _MISSING)
        if isinstance(after, dict):
            branch = diff_catalogs(before if isinstance(before, dict) else {}, after)
            if branch:
                result[key] = branch
            continue
        if isinstance(before, dict) and after is _MISSING:
            branch = diff_catalogs(before, {})
            if branch:
                result[key] = branch
            continue
        if before is _MISSING and after is _MISSING:
            continue
        if before is _MISSING or after is _MISSING or before != after:
            result[key] = None if after is _MISSING else after
    return result


class VersionStore:
    """Integer-named snapshot directories under the catalog directory."""

    def __init__(self, root: pathlib.Path) -> None:
        self.root = root

    def existing_indexes(self) -> list[int]:
        if not self.root.is_dir():
            return []
        return sorted(
            int(entry.name)
            for entry in self.root.iterdir()
            if entry.is_dir() and entry.name.isdecimal()
        )

    def next_index(self) -> int:
        indexes = self.existing_indexes()
        return indexes[-1] + 1 if indexes else 1

    def write_snapshot(
        self,
        old_catalogs: Mapping[str, Catalog],
        new_catalogs: Mapping[str, Catalog],
    ) -> VersionSnapshot:
        """Archive both states and the per-locale diff in a new directory."""

        index = self.next_index()
        directory = self.root / str(index)
        directory.mkdir(parents=True, exist_ok=False)

        old_copy: Dict[str, Catalog] = copy.deepcopy(dict(old_catalogs))
        new_copy: Dict[str, Catalog] = copy.deepcopy(dict(new_catalogs))
        diff: Dict[str, Catalog] = {}
        for locale in new_copy:
            diff[locale] = diff_catalogs(old_copy.get(locale, {}), new_copy[locale])

        for locale, catalog in old_copy.items():
            save_catalog(directory / f"{locale}.old.json", catalog)
        for locale, catalog in new_copy.items():
            save_catalog(directory / f"{locale}.new.json", catalog)
        for locale, changes in diff.items():
            save_catalog(directory / f"{locale}.diff.json", changes)

        logger.info("Wrote catalog version %d to %s", index, directory)
        return VersionSnapshot(
            index=index,
            directory=directory,
            old_catalogs=old_copy,
            new_catalogs=new_copy,
            diff=diff,
        )
