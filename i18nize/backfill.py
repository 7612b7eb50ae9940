"""Fill missing target-locale entries from the source-locale catalog."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

from .providers import TranslationSession
from .structures import Catalog

logger = logging.getLogger(__name__)


@dataclass
class BackfillReport:
    translated: List[str] = field(default_factory=list)
    existing: List[str] = field(default_factory=list)
    conflicts: List[str] = field(default_factory=list)
    translation_calls: int = 0


def backfill_catalog(
    source: Catalog,
    target: Catalog,
    session: TranslationSession,
) -> BackfillReport:
    """Translate every source leaf that has no target value yet.

    ``target`` is updated in place; leaves are visited one at a time in
    catalog order.
    """

    report = BackfillReport()
    calls_before = session.calls
    _walk(source, target, session, report, prefix="")
    report.translation_calls = session.calls - calls_before
    return report


def _walk(
    source: Catalog,
    target: Catalog,
    session: TranslationSession,
    report: BackfillReport,
    *,
    prefix: str,
) -> None:
    for key, value in source.items():
        dotted = f"{prefix}.{key}" if prefix else key
        if isinstance(value, dict):
            branch = target.get(key)
            if branch is None:
                branch = target[key] = {}
            if not isinstance(branch, dict):
                logger.warning("Target key %s holds a value, expected a namespace; skipped.", dotted)
                report.conflicts.append(dotted)
                continue
            _walk(value, branch, session, report, prefix=dotted)
            continue

        if not isinstance(value, str) or not value:
            continue
        existing = target.get(key)
        if isinstance(existing, dict):
            logger.warning("Target key %s is a namespace, expected a value; skipped.", dotted)
            report.conflicts.append(dotted)
            continue
        if existing:
            logger.debug("Skipping translated key %s", dotted)
            report.existing.append(dotted)
            continue

        translated = session.translate(value)
        target[key] = translated
        report.translated.append(dotted)
        logger.info("Translated %s: %s -> %s", dotted, value, translated)
