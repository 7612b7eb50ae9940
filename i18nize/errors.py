"""Error definitions for the i18nize pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class ErrorCategory(Enum):
    """Categorises non-fatal problems reported in the run summary."""

    FILE_IO = auto()
    CATALOG = auto()
    REWRITE = auto()
    TRANSLATION = auto()
    NETWORK = auto()


class I18nizeError(Exception):
    """Base exception for all custom errors."""


class SourceUnitNotFoundError(I18nizeError):
    """Raised when the input source file does not exist or is not a file."""


class SourceUnitReadError(I18nizeError):
    """Raised when the input source file cannot be read as UTF-8 text."""


class CatalogCorruptedError(I18nizeError):
    """Raised when an existing catalog cannot be parsed as a JSON object."""


class TranslationProviderConfigurationError(I18nizeError):
    """Raised when the translation provider is misconfigured."""


class TranslationProviderError(I18nizeError):
    """Raised when a translation request fails or returns an unusable payload."""


@dataclass
class ErrorRecord:
    """Stores context for a handled error."""

    category: ErrorCategory
    message: str
    details: Optional[str] = None
