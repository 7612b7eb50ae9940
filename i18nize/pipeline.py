"""High-level orchestration of one localization run."""

from __future__ import annotations

import copy
import logging
import pathlib
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from .backfill import backfill_catalog
from .catalog import assign_keys, derive_namespace, load_catalog, merge_literals, save_catalog
from .dedup import reduce_literals
from .errors import ErrorCategory, ErrorRecord, SourceUnitNotFoundError, SourceUnitReadError
from .exporter import export_sheet
from .providers import EchoTranslationProvider, TranslationProvider, TranslationSession
from .rewriter import RewriteStyle, rewrite_source
from .scanner import scan_text
from .structures import ExtractedLiteral, ExtractionMode, SourceUnit
from .versioning import VersionStore, diff_catalogs

logger = logging.getLogger(__name__)


@dataclass
class RunSummary:
    """Report returned after processing a source file."""

    source_path: pathlib.Path
    mode: ExtractionMode
    namespace: str
    literals_found: int
    literals_unique: int
    keys_added: int
    keys_kept: int
    replacements: int
    import_added: bool
    accessor_added: bool
    translated_keys: int
    existing_translations: int
    translation_calls: int
    version_index: Optional[int]
    elapsed_seconds: float
    source_catalog_path: pathlib.Path
    target_catalog_path: pathlib.Path
    sheet_path: Optional[pathlib.Path] = None
    notes: List[str] = field(default_factory=list)


def validate_source_path(path: pathlib.Path) -> None:
    """Fail before any side effect when the input is unusable."""

    if not path.exists():
        raise SourceUnitNotFoundError(f"Source file not found: {path}")
    if not path.is_file():
        raise SourceUnitNotFoundError(f"Source path must be a file: {path}")


def occurrences_to_rewrite(
    literals: Sequence[ExtractedLiteral],
    keyed: Sequence[Tuple[str, ExtractedLiteral]],
    rejected: Iterable[str] = (),
) -> List[Tuple[str, ExtractedLiteral]]:
    """Pair every scanned occurrence with the key assigned to its text.

    Keys are assigned per unique text, but each repeated occurrence in the
    source still needs its own replacement. Keys the catalog refused are
    left out so their literals stay in the source.
    """

    skipped = set(rejected)
    key_by_text = {literal.text: key for key, literal in keyed if key not in skipped}
    return [
        (key_by_text[literal.text], literal)
        for literal in literals
        if literal.text in key_by_text
    ]


class LocalizationRunner:
    """Coordinates scanning, catalog merging, rewriting, backfill and snapshots."""

    def __init__(
        self,
        *,
        source_path: pathlib.Path,
        catalog_dir: pathlib.Path,
        source_locale: str = "zh-CN",
        target_locale: str = "en-US",
        provider: TranslationProvider | None = None,
        mode: ExtractionMode = ExtractionMode.STRICT,
        root_marker: str = "pages",
        rewrite: bool = True,
        translate: bool = True,
        export: bool = False,
        style: RewriteStyle | None = None,
        max_retries: int = 2,
        retry_backoff: Sequence[float] = (1, 4, 9),
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.source_path = source_path
        self.catalog_dir = catalog_dir
        self.source_locale = source_locale
        self.target_locale = target_locale
        self.provider = provider or EchoTranslationProvider()
        self.mode = mode
        self.root_marker = root_marker
        self.rewrite = rewrite and mode is ExtractionMode.STRICT
        self.translate = translate and mode is ExtractionMode.STRICT
        self.export = export
        self.style = style or RewriteStyle()
        self.max_retries = max_retries
        self.retry_backoff = retry_backoff
        self.sleep = sleep
        self.records: List[ErrorRecord] = []

    @property
    def source_catalog_path(self) -> pathlib.Path:
        return self.catalog_dir / f"{self.source_locale}.json"

    @property
    def target_catalog_path(self) -> pathlib.Path:
        return self.catalog_dir / f"{self.target_locale}.json"

    def _read_source(self) -> SourceUnit:
        try:
            return SourceUnit.read(self.source_path)
        except UnicodeDecodeError as exc:
            raise SourceUnitReadError(
                f"Source file {self.source_path} is not UTF-8 encoded ({exc})."
            ) from exc
        except OSError as exc:
            raise SourceUnitReadError(
                f"Source file {self.source_path} could not be read: {exc}"
            ) from exc

    def run(self) -> RunSummary:
        start_time = time.time()

        validate_source_path(self.source_path)
        unit = self._read_source()
        source_catalog = load_catalog(self.source_catalog_path)
        target_catalog = load_catalog(self.target_catalog_path)
        old_catalogs = copy.deepcopy(
            {self.source_locale: source_catalog, self.target_locale: target_catalog}
        )

        literals = scan_text(unit.raw_text, self.mode)
        unique = reduce_literals(literals, self.mode)
        namespace = derive_namespace(unit.path, self.root_marker)
        keyed = assign_keys(namespace, unique)
        logger.info(
            "Found %d literals (%d unique) in %s", len(literals), len(unique), unit.path
        )

        merge = merge_literals(source_catalog, keyed)
        for conflict in merge.conflicts:
            self.records.append(ErrorRecord(ErrorCategory.CATALOG, conflict))

        rewritten_text = unit.raw_text
        replacements = 0
        import_added = accessor_added = False
        if self.rewrite:
            result = rewrite_source(
                unit.raw_text,
                occurrences_to_rewrite(literals, keyed, merge.rejected),
                self.style,
            )
            rewritten_text = result.text
            replacements = result.replacements
            import_added = result.import_added
            accessor_added = result.accessor_added
            for warning in result.warnings:
                self.records.append(ErrorRecord(ErrorCategory.REWRITE, warning))

        translated_keys = existing_translations = translation_calls = 0
        if self.translate:
            session = TranslationSession(
                self.provider,
                source_language=self.source_locale,
                target_language=self.target_locale,
                max_retries=self.max_retries,
                retry_backoff=self.retry_backoff,
                sleep=self.sleep,
            )
            report = backfill_catalog(source_catalog, target_catalog, session)
            translated_keys = len(report.translated)
            existing_translations = len(report.existing)
            translation_calls = report.translation_calls
            self.records.extend(session.records)
            for conflict in report.conflicts:
                self.records.append(
                    ErrorRecord(ErrorCategory.CATALOG, f"{conflict}: target shape differs")
                )

        new_catalogs = {self.source_locale: source_catalog, self.target_locale: target_catalog}
        changed = any(
            diff_catalogs(old_catalogs[locale], catalog) for locale, catalog in new_catalogs.items()
        )
        version_index: Optional[int] = None
        if changed:
            snapshot = VersionStore(self.catalog_dir).write_snapshot(old_catalogs, new_catalogs)
            version_index = snapshot.index
            save_catalog(self.source_catalog_path, source_catalog)
            if self.translate:
                save_catalog(self.target_catalog_path, target_catalog)
        else:
            logger.info("Catalogs unchanged; no version written.")

        if rewritten_text != unit.raw_text:
            unit.path.write_text(rewritten_text, encoding="utf-8")

        sheet_path = None
        if self.export:
            try:
                sheet_path = export_sheet(
                    self.catalog_dir,
                    source_catalog,
                    target_catalog,
                    source_locale=self.source_locale,
                    target_locale=self.target_locale,
                )
            except OSError as exc:
                message = f"Translation sheet not written: {exc}"
                logger.warning(message)
                self.records.append(ErrorRecord(ErrorCategory.FILE_IO, message, details=str(exc)))

        return RunSummary(
            source_path=unit.path,
            mode=self.mode,
            namespace=".".join(namespace),
            literals_found=len(literals),
            literals_unique=len(unique),
            keys_added=len(merge.added),
            keys_kept=len(merge.kept),
            replacements=replacements,
            import_added=import_added,
            accessor_added=accessor_added,
            translated_keys=translated_keys,
            existing_translations=existing_translations,
            translation_calls=translation_calls,
            version_index=version_index,
            elapsed_seconds=time.time() - start_time,
            source_catalog_path=self.source_catalog_path,
            target_catalog_path=self.target_catalog_path,
            sheet_path=sheet_path,
            notes=[record.message for record in self.records],
        )
