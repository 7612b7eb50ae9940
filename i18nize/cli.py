"""Command line interface for i18nize."""

from __future__ import annotations

import argparse
import logging
import pathlib
import sys
from typing import Any, Iterable, Optional

from .configuration import get_settings
from .errors import (
    CatalogCorruptedError,
    I18nizeError,
    SourceUnitNotFoundError,
    SourceUnitReadError,
    TranslationProviderConfigurationError,
)
from .pipeline import LocalizationRunner, RunSummary, validate_source_path
from .providers import build_provider
from .structures import ExtractionMode


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="i18nize",
        description=(
            "Extract Chinese literals from a source file into locale catalogs, "
            "rewrite them as t('key') lookups and backfill the target locale."
        ),
    )
    parser.add_argument(
        "input_file",
        nargs="?",
        help="Path to the source file to localize.",
    )
    parser.add_argument(
        "--catalog-dir",
        help="Directory holding the locale catalogs and versions (default: files).",
    )
    parser.add_argument(
        "--source-locale",
        help="Locale of the extracted literals (default: zh-CN).",
    )
    parser.add_argument(
        "--target-locale",
        help="Locale to backfill through the translation provider (default: en-US).",
    )
    parser.add_argument(
        "--root-marker",
        help="Directory name where catalog namespaces start (default: pages).",
    )
    parser.add_argument(
        "-p",
        "--provider",
        help="Translation provider identifier: baidu, openai or echo (default: baidu).",
    )
    parser.add_argument(
        "--app-id",
        help="Baidu translation APP ID (overrides BAIDU_TRANSLATE_APP_ID).",
    )
    parser.add_argument(
        "--secret-key",
        help="Baidu translation secret key (overrides BAIDU_TRANSLATE_SECRET_KEY).",
    )
    parser.add_argument(
        "-m",
        "--model",
        help="Model identifier for the openai provider.",
    )
    parser.add_argument(
        "--extract-only",
        action="store_true",
        help="Seed the source catalog with every Chinese run; no rewrite, no translation.",
    )
    parser.add_argument(
        "--skip-translation",
        action="store_true",
        help="Do not backfill the target-locale catalog.",
    )
    parser.add_argument(
        "--no-rewrite",
        action="store_true",
        help="Leave the source file untouched.",
    )
    parser.add_argument(
        "--export-sheet",
        action="store_true",
        help="Write translation.csv (key|source|target) next to the catalogs.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show detailed progress information.",
    )
    parser.add_argument(
        "--debug-provider",
        action="store_true",
        help="Log complete provider requests and responses for troubleshooting.",
    )
    return parser


def configure_logging(*, verbose: bool, provider_debug: bool) -> None:
    level = logging.WARNING
    if verbose:
        level = logging.INFO
    if provider_debug:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="[i18nize] %(levelname)s %(name)s: %(message)s",
    )


def execute_run(
    *,
    input_file: str,
    catalog_dir: str,
    source_locale: str,
    target_locale: str,
    root_marker: str,
    provider: str | None,
    app_id: str | None,
    secret_key: str | None,
    endpoint: str | None,
    api_key: str | None,
    model: str | None,
    extract_only: bool,
    skip_translation: bool,
    no_rewrite: bool,
    export_sheet: bool,
    provider_debug: bool,
) -> tuple[int, RunSummary | None, str | None]:
    """Execute a localization run and return the exit code, summary, and message."""

    input_path = pathlib.Path(input_file).expanduser().resolve()
    try:
        validate_source_path(input_path)
    except SourceUnitNotFoundError as exc:
        return 1, None, str(exc)

    try:
        translation_provider = build_provider(
            provider,
            app_id=app_id,
            secret_key=secret_key,
            endpoint=endpoint,
            api_key=api_key,
            model=model,
            debug=provider_debug,
        )
    except TranslationProviderConfigurationError as exc:
        return 1, None, str(exc)

    runner = LocalizationRunner(
        source_path=input_path,
        catalog_dir=pathlib.Path(catalog_dir).expanduser().resolve(),
        source_locale=source_locale,
        target_locale=target_locale,
        provider=translation_provider,
        mode=ExtractionMode.LOOSE if extract_only else ExtractionMode.STRICT,
        root_marker=root_marker,
        rewrite=not no_rewrite,
        translate=not skip_translation,
        export=export_sheet,
    )

    try:
        summary = runner.run()
    except CatalogCorruptedError as exc:
        return 1, None, str(exc)
    except (SourceUnitNotFoundError, SourceUnitReadError) as exc:
        return 1, None, str(exc)
    except I18nizeError as exc:
        return 1, None, str(exc)
    except KeyboardInterrupt:
        return 2, None, "Run interrupted by user."
    except Exception as exc:  # pragma: no cover - defensive catch
        error_message = (
            f"{exc}\n"
            "An unexpected error occurred. Please rerun with --verbose for more details."
        )
        return 1, None, error_message

    return 0, summary, None


def print_summary(summary: RunSummary) -> None:
    """Output a friendly report once processing completes."""

    print("\nLocalization complete.")
    print(f"  Source file:     {summary.source_path}")
    print(f"  Mode:            {summary.mode.value}")
    print(f"  Namespace:       {summary.namespace}")
    print(
        "  Literals:        "
        f"{summary.literals_unique} unique / {summary.literals_found} found"
    )
    print(
        f"  Catalog keys:    {summary.keys_added} added, {summary.keys_kept} kept "
        f"({summary.source_catalog_path})"
    )
    print(
        f"  Replacements:    {summary.replacements}"
        + (" (+import)" if summary.import_added else "")
        + (" (+accessor)" if summary.accessor_added else "")
    )
    print(
        f"  Translations:    {summary.translated_keys} new, "
        f"{summary.existing_translations} existing ({summary.target_catalog_path})"
    )
    print(f"  API calls:       {summary.translation_calls}")
    print(
        "  Version:         "
        + (str(summary.version_index) if summary.version_index else "unchanged")
    )
    if summary.sheet_path:
        print(f"  Sheet:           {summary.sheet_path}")
    print(f"  Elapsed time:    {summary.elapsed_seconds:.2f} seconds")
    if summary.notes:
        print("  Notes:")
        for message in summary.notes:
            print(f"    - {message}")


def _pick(flag: Any, setting: Any) -> Any:
    return flag if flag not in (None, "") else setting


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.input_file is None:
        parser.error("the following arguments are required: input_file")

    try:
        settings = get_settings()
    except TranslationProviderConfigurationError as exc:
        print(exc)
        return 1

    provider_debug = bool(args.debug_provider or settings.I18NIZE_PROVIDER_DEBUG)
    configure_logging(verbose=args.verbose, provider_debug=provider_debug)

    exit_code, summary, message = execute_run(
        input_file=args.input_file,
        catalog_dir=_pick(args.catalog_dir, settings.I18NIZE_CATALOG_DIR),
        source_locale=_pick(args.source_locale, settings.I18NIZE_SOURCE_LOCALE),
        target_locale=_pick(args.target_locale, settings.I18NIZE_TARGET_LOCALE),
        root_marker=_pick(args.root_marker, settings.I18NIZE_ROOT_MARKER),
        provider=_pick(args.provider, settings.I18NIZE_PROVIDER),
        app_id=_pick(args.app_id, settings.BAIDU_TRANSLATE_APP_ID),
        secret_key=_pick(args.secret_key, settings.BAIDU_TRANSLATE_SECRET_KEY),
        endpoint=settings.BAIDU_TRANSLATE_ENDPOINT,
        api_key=settings.OPENAI_API_KEY,
        model=_pick(args.model, settings.I18NIZE_OPENAI_MODEL),
        extract_only=args.extract_only,
        skip_translation=args.skip_translation,
        no_rewrite=args.no_rewrite,
        export_sheet=args.export_sheet,
        provider_debug=provider_debug,
    )

    if message:
        print(message)
    if summary:
        print_summary(summary)
    return exit_code


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
