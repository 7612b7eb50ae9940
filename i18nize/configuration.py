"""Prepper-backed configuration loader for i18nize."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal, Mapping, Sequence

from dotenv import dotenv_values
from prepper import (
    Field,
    IoError,
    SchemaError,
    SchemaModel,
    ValidationError,
    model_validator,
)
from prepper.config import ConfigInstance
from prepper.loaders import _parse_file, _path_to_source, discover_file_paths
from prepper.merge import merge_layer
from prepper.provenance import ProvenanceRecorder

from .errors import TranslationProviderConfigurationError

APP_NAME = "i18nize"

PROVIDER_SYNONYMS = {
    "fanyi": "baidu",
    "baidu_fanyi": "baidu",
    "gpt": "openai",
    "open_ai": "openai",
    "noop": "echo",
    "mock": "echo",
}


class I18nizeConfig(SchemaModel):
    """Schema describing all supported configuration options."""

    I18NIZE_PROVIDER: Literal["baidu", "openai", "echo"] = Field(
        default="baidu",
        description="Translation provider used to backfill the target catalog.",
    )
    BAIDU_TRANSLATE_APP_ID: str | None = Field(default=None)
    BAIDU_TRANSLATE_SECRET_KEY: str | None = Field(default=None, secret=True)
    BAIDU_TRANSLATE_ENDPOINT: str | None = Field(default=None)
    OPENAI_API_KEY: str | None = Field(default=None, secret=True)
    I18NIZE_OPENAI_MODEL: str | None = Field(default=None)
    I18NIZE_SOURCE_LOCALE: str = Field(default="zh-CN")
    I18NIZE_TARGET_LOCALE: str = Field(default="en-US")
    I18NIZE_CATALOG_DIR: str = Field(
        default="files",
        description="Directory holding the locale catalogs and version snapshots.",
    )
    I18NIZE_ROOT_MARKER: str = Field(
        default="pages",
        description="Directory name where catalog namespaces start.",
    )
    I18NIZE_PROVIDER_DEBUG: bool = Field(default=False)

    @model_validator(mode="before")
    def _normalise_provider(data: Any) -> Any:
        if isinstance(data, dict):
            raw_value = data.get("I18NIZE_PROVIDER")
            if isinstance(raw_value, str):
                normalized = raw_value.strip().lower().replace("-", "_")
                normalized = PROVIDER_SYNONYMS.get(normalized, normalized)
                if normalized not in {"baidu", "openai", "echo"}:
                    normalized = "baidu"
                data["I18NIZE_PROVIDER"] = normalized
        return data


@lru_cache(maxsize=1)
def _load_config_instance(app_dir: Path | None = None) -> ConfigInstance:
    """Load configuration layers once and cache the immutable instance.

    Having no configuration source at all is fine: every field has a default
    and missing credentials only disable translation.
    """

    base_dir = app_dir or Path.cwd()
    provenance = ProvenanceRecorder()
    try:
        layers: dict[str, Any] = {}
        _apply_yaml_files(layers, base_dir, provenance)
        _apply_environment(layers, base_dir, provenance)
        model = I18nizeConfig.validate(layers, provenance=provenance)
    except IoError as exc:
        raise TranslationProviderConfigurationError(
            f"Configuration files could not be read: {exc}"
        ) from exc
    except SchemaError as exc:
        raise TranslationProviderConfigurationError(
            f"Configuration schema error: {exc}"
        ) from exc
    except ValidationError as exc:
        raise TranslationProviderConfigurationError(
            _describe_validation_errors(exc.to_dict())
        ) from exc

    return ConfigInstance(
        model=model,
        provenance=provenance,
        env_prefix=None,
        schema_cls=I18nizeConfig,
    )


def _apply_yaml_files(
    layers: dict[str, Any],
    app_dir: Path,
    provenance: ProvenanceRecorder,
) -> None:
    """Merge every discovered ``i18nize`` YAML file, lowest priority first."""

    for path, label in discover_file_paths(APP_NAME, "yaml", app_dir=app_dir, extra_paths=None):
        parsed = _parse_file(path, "yaml")
        if not isinstance(parsed, Mapping):
            raise IoError(f"{path} must hold a mapping of setting names to values.")
        merge_layer(
            layers,
            parsed,
            provenance=provenance,
            source=_path_to_source(label, "yaml", path),
            layer="file",
        )


def _apply_environment(
    layers: dict[str, Any],
    app_dir: Path,
    provenance: ProvenanceRecorder,
) -> None:
    """Overlay ``.env`` in the project directory, then the process environment.

    Only names declared on ``I18nizeConfig`` are picked up.
    """

    known = set(I18nizeConfig.__field_infos__)
    sources: list[tuple[str, Mapping[str, str | None]]] = []
    dotenv_path = app_dir / ".env"
    if dotenv_path.is_file():
        sources.append((".env", dotenv_values(dotenv_path)))
    sources.append(("process", os.environ))

    for origin, values in sources:
        for name in sorted(known.intersection(values)):
            value = values[name]
            if value is None:
                continue
            merge_layer(
                layers,
                {name: value},
                provenance=provenance,
                source=f"env:{origin}:{name}",
                layer="env",
            )


def _describe_validation_errors(entries: Sequence[dict[str, Any]]) -> str:
    lines = ["Invalid i18nize configuration:"]
    for entry in entries:
        path = entry.get("path") or []
        if isinstance(path, (list, tuple)):
            setting = ".".join(str(part) for part in path if part)
        else:
            setting = str(path)
        problem = entry.get("message") or entry.get("msg") or "invalid value"
        where = f" (from {entry['source']})" if entry.get("source") else ""
        lines.append(f"- {setting or 'configuration'}: {problem}{where}")
    return "\n".join(lines)


def get_config(app_dir: Path | None = None) -> ConfigInstance:
    """Return the immutable configuration instance."""

    return _load_config_instance(app_dir=app_dir)


def get_settings(app_dir: Path | None = None) -> I18nizeConfig:
    """Return the validated schema model for typed access."""

    return get_config(app_dir=app_dir).model()


def clear_settings_cache() -> None:
    _load_config_instance.cache_clear()
