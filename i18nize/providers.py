"""Translation provider abstractions."""

from __future__ import annotations

import hashlib
import json
import logging
import random
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Mapping, Optional, Sequence

import requests

from .errors import (
    ErrorCategory,
    ErrorRecord,
    TranslationProviderConfigurationError,
    TranslationProviderError,
)

logger = logging.getLogger(__name__)


class TranslationProvider(ABC):
    """Abstract adapter for translation providers."""

    name = "abstract"
    remote = True

    def __init__(self, *, debug: bool = False) -> None:
        self.debug = debug

    def check_configuration(self) -> None:
        """Raise ``TranslationProviderConfigurationError`` when unusable."""

    @abstractmethod
    def translate(
        self,
        text: str,
        *,
        source_language: str,
        target_language: str,
    ) -> str:
        """Translate a single text."""

    def _log_debug(self, label: str, payload: Any) -> None:
        """Emit structured debug information when enabled."""

        if not self.debug:
            return
        try:
            if isinstance(payload, (dict, list)):
                message = json.dumps(payload, ensure_ascii=False, indent=2)
            else:
                message = str(payload)
        except (TypeError, ValueError):
            message = repr(payload)
        logger.debug("[%s] %s:\n%s", self.name, label, message)


class EchoTranslationProvider(TranslationProvider):
    """A provider that returns the original text (useful for testing)."""

    name = "echo"
    remote = False

    def translate(
        self,
        text: str,
        *,
        source_language: str,
        target_language: str,
    ) -> str:
        return text


BAIDU_LANGUAGE_CODES = {
    "zh-tw": "cht",
    "zh-hk": "cht",
    "zh-hant": "cht",
    "ja": "jp",
    "ko": "kor",
    "fr": "fra",
    "es": "spa",
    "ar": "ara",
    "bg": "bul",
    "et": "est",
    "da": "dan",
    "fi": "fin",
    "ro": "rom",
    "sl": "slo",
    "sv": "swe",
    "vi": "vie",
}


def to_baidu_language(locale: str) -> str:
    """Map a locale such as ``en-US`` or ``ja_JP`` to the vendor's code."""

    normalized = locale.strip().lower().replace("_", "-")
    if normalized in BAIDU_LANGUAGE_CODES:
        return BAIDU_LANGUAGE_CODES[normalized]
    base = normalized.split("-", 1)[0]
    return BAIDU_LANGUAGE_CODES.get(base, base)


class BaiduTranslationProvider(TranslationProvider):
    """Signed HTTP GET against the Baidu general translation endpoint."""

    name = "baidu"
    DEFAULT_ENDPOINT = "https://fanyi-api.baidu.com/api/trans/vip/translate"

    def __init__(
        self,
        *,
        app_id: str | None,
        secret_key: str | None,
        endpoint: str | None = None,
        timeout: float = 10.0,
        debug: bool = False,
    ) -> None:
        super().__init__(debug=debug)
        self.app_id = app_id or ""
        self.secret_key = secret_key or ""
        self.endpoint = endpoint or self.DEFAULT_ENDPOINT
        self.timeout = timeout

    def check_configuration(self) -> None:
        missing = [
            name
            for name, value in {
                "BAIDU_TRANSLATE_APP_ID": self.app_id,
                "BAIDU_TRANSLATE_SECRET_KEY": self.secret_key,
            }.items()
            if not value
        ]
        if missing:
            raise TranslationProviderConfigurationError(
                "Baidu translation credentials missing. Please set: "
                + ", ".join(missing)
                + "."
            )

    def sign(self, text: str, salt: str) -> str:
        digest = hashlib.md5(f"{self.app_id}{text}{salt}{self.secret_key}".encode("utf-8"))
        return digest.hexdigest()

    def build_params(
        self,
        text: str,
        *,
        source_language: str,
        target_language: str,
        salt: str | None = None,
    ) -> dict[str, str]:
        salt = salt or str(random.randint(32768, 65536))
        return {
            "q": text,
            "from": to_baidu_language(source_language),
            "to": to_baidu_language(target_language),
            "appid": self.app_id,
            "salt": salt,
            "sign": self.sign(text, salt),
        }

    def translate(
        self,
        text: str,
        *,
        source_language: str,
        target_language: str,
    ) -> str:
        self.check_configuration()
        params = self.build_params(
            text,
            source_language=source_language,
            target_language=target_language,
        )
        self._log_debug("provider.request.params", {**params, "sign": "***"})
        try:
            response = requests.get(self.endpoint, params=params, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as exc:
            raise TranslationProviderError(
                f"Translation service temporarily unavailable: {exc}"
            ) from exc
        except ValueError as exc:
            raise TranslationProviderError(
                f"Translation provider returned invalid JSON: {exc}"
            ) from exc
        self._log_debug("provider.response.raw", payload)
        return self._extract_translation(payload)

    def _extract_translation(self, payload: Any) -> str:
        if not isinstance(payload, Mapping):
            raise TranslationProviderError(
                "Translation provider response malformed: expected an object."
            )
        if payload.get("error_code") not in (None, "52000", 52000):
            raise TranslationProviderError(
                "Translation provider rejected the request: "
                f"{payload.get('error_code')} {payload.get('error_msg') or 'unknown error'}"
            )
        results = payload.get("trans_result")
        if not isinstance(results, list) or not results:
            raise TranslationProviderError(
                "Translation provider response malformed: missing trans_result."
            )
        parts: List[str] = []
        for item in results:
            translated = item.get("dst") if isinstance(item, Mapping) else None
            if not isinstance(translated, str):
                raise TranslationProviderError(
                    "Translation provider response malformed: missing fields."
                )
            parts.append(translated)
        return "\n".join(parts)


class OpenAITranslationProvider(TranslationProvider):
    """Translation provider that uses OpenAI chat models."""

    name = "openai"
    DEFAULT_MODEL = "gpt-5-mini"

    def __init__(
        self,
        *,
        api_key: str | None,
        model: str | None = None,
        debug: bool = False,
    ) -> None:
        super().__init__(debug=debug)
        self.api_key = api_key
        self.model = model or self.DEFAULT_MODEL
        self._client: Any = None

    def check_configuration(self) -> None:
        if self._client is not None:
            return
        if not self.api_key:
            raise TranslationProviderConfigurationError(
                "OpenAI configuration missing. Set OPENAI_API_KEY or choose a "
                "different provider."
            )
        try:
            from openai import OpenAI  # type: ignore
        except ImportError as exc:  # pragma: no cover - import guard
            raise TranslationProviderConfigurationError(
                "OpenAI Python SDK not installed. Install with `pip install openai`."
            ) from exc
        self._client = OpenAI(api_key=self.api_key)

    def translate(
        self,
        text: str,
        *,
        source_language: str,
        target_language: str,
    ) -> str:
        self.check_configuration()
        system_prompt = (
            "You are a professional software localizer. Return only JSON. "
            "Translate the user interface string into the requested language. "
            "Preserve placeholders, numbers, and punctuation style. "
            'Respond strictly with an object shaped as {"translation": "..."}. '
            "Do not add commentary. Do not wrap the JSON in markdown code fences."
        )
        user_payload = {
            "source_language": source_language,
            "target_language": target_language,
            "text": text,
        }
        self._log_debug("provider.request.payload", user_payload)
        try:
            response = self._client.chat.completions.create(
                model=self.model,
                temperature=0,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {
                        "role": "user",
                        "content": json.dumps(user_payload, ensure_ascii=False),
                    },
                ],
            )
        except Exception as exc:  # pragma: no cover - network call
            raise TranslationProviderError(
                f"Translation service temporarily unavailable: {exc}"
            ) from exc

        content: str | None = None
        for choice in getattr(response, "choices", None) or []:
            message = getattr(choice, "message", None)
            message_content = getattr(message, "content", None)
            if message_content:
                content = str(message_content)
                break
        if content is None:
            raise TranslationProviderError(
                "Translation provider response empty or unrecognised."
            )
        self._log_debug("provider.response.content", content)
        return self._extract_translation(content)

    def _strip_code_fence(self, text: str) -> str:
        """Remove leading/trailing markdown code fences if present."""

        stripped = text.strip()
        if not stripped.startswith("```"):
            return stripped

        # Drop opening fence and optional language hint.
        first_newline = stripped.find("\n")
        if first_newline == -1:
            return stripped
        body = stripped[first_newline + 1 :]
        closing_index = body.rfind("```")
        if closing_index != -1:
            body = body[:closing_index]
        return body.strip()

    def _extract_translation(self, content: str) -> str:
        try:
            payload = json.loads(self._strip_code_fence(content))
        except json.JSONDecodeError as exc:
            raise TranslationProviderError(
                f"Translation provider returned invalid JSON: {exc}"
            ) from exc
        translated = payload.get("translation") if isinstance(payload, dict) else None
        if not isinstance(translated, str) or not translated:
            raise TranslationProviderError(
                "Translation provider response malformed: missing translation."
            )
        return translated


def build_provider(
    name: str | None,
    *,
    app_id: str | None = None,
    secret_key: str | None = None,
    endpoint: str | None = None,
    api_key: str | None = None,
    model: str | None = None,
    debug: bool = False,
) -> TranslationProvider:
    """Factory to create providers by name."""

    normalized = (name or "baidu").strip().lower()
    if normalized in {"baidu", "fanyi", "default"}:
        return BaiduTranslationProvider(
            app_id=app_id,
            secret_key=secret_key,
            endpoint=endpoint,
            debug=debug,
        )
    if normalized in {"openai", "gpt"}:
        return OpenAITranslationProvider(api_key=api_key, model=model, debug=debug)
    if normalized in {"echo", "noop", "mock"}:
        return EchoTranslationProvider(debug=debug)
    raise TranslationProviderConfigurationError(
        f"Unknown translation provider '{name}'."
    )


class TranslationSession:
    """Per-run wrapper that never lets a provider failure escape.

    Every outbound attempt increments ``calls``. Failures fall back to the
    source text and are recorded in ``records``.
    """

    def __init__(
        self,
        provider: TranslationProvider,
        *,
        source_language: str,
        target_language: str,
        max_retries: int = 2,
        retry_backoff: Sequence[float] = (1, 4, 9),
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.provider = provider
        self.source_language = source_language
        self.target_language = target_language
        self.max_retries = max_retries
        self.retry_backoff = list(retry_backoff) or [0]
        self._sleep = sleep
        self.calls = 0
        self.records: List[ErrorRecord] = []
        self._configuration_error: Optional[str] = None
        self._configuration_checked = False

    def _usable(self) -> bool:
        if not self._configuration_checked:
            self._configuration_checked = True
            try:
                self.provider.check_configuration()
            except TranslationProviderConfigurationError as exc:
                self._configuration_error = str(exc)
                message = f"{exc} Keeping source text for untranslated keys."
                logger.warning(message)
                self.records.append(ErrorRecord(ErrorCategory.TRANSLATION, message))
        return self._configuration_error is None

    def translate(self, text: str) -> str:
        if not self._usable():
            logger.debug("Fallback without translation call: %r", text)
            return text

        attempt = 0
        while True:
            if self.provider.remote:
                self.calls += 1
            try:
                return self.provider.translate(
                    text,
                    source_language=self.source_language,
                    target_language=self.target_language,
                )
            except TranslationProviderError as exc:
                attempt += 1
                if attempt <= self.max_retries:
                    wait_time = self.retry_backoff[min(attempt - 1, len(self.retry_backoff) - 1)]
                    logger.info(
                        "Could not translate %r (attempt %d of %d: %s). Retrying...",
                        text,
                        attempt,
                        self.max_retries,
                        exc,
                    )
                    self._sleep(wait_time)
                    continue
                message = f"Translation failed for {text!r}; keeping source text. {exc}"
                logger.warning(message)
                self.records.append(
                    ErrorRecord(ErrorCategory.NETWORK, message, details=str(exc))
                )
                return text
