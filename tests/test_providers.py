import hashlib
from types import SimpleNamespace

import pytest
import requests

from i18nize import providers
from i18nize.errors import (
    ErrorCategory,
    TranslationProviderConfigurationError,
    TranslationProviderError,
)
from i18nize.providers import (
    BaiduTranslationProvider,
    EchoTranslationProvider,
    OpenAITranslationProvider,
    TranslationProvider,
    TranslationSession,
    build_provider,
    to_baidu_language,
)


class FakeResponse:
    def __init__(self, payload, status_error=None):
        self.payload = payload
        self.status_error = status_error

    def raise_for_status(self):
        if self.status_error:
            raise self.status_error

    def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class FlakyProvider(TranslationProvider):
    name = "flaky"

    def __init__(self, failures):
        super().__init__()
        self.failures = failures
        self.seen = []

    def translate(self, text, *, source_language, target_language):
        self.seen.append(text)
        if self.failures:
            self.failures -= 1
            raise TranslationProviderError("boom")
        return f"{target_language}:{text}"


def _baidu():
    return BaiduTranslationProvider(app_id="2015063000000001", secret_key="12345678")


def test_sign_matches_vendor_recipe():
    provider = _baidu()
    expected = hashlib.md5("2015063000000001apple143566028812345678".encode("utf-8")).hexdigest()
    assert provider.sign("apple", "1435660288") == expected


def test_build_params_maps_locales():
    params = _baidu().build_params(
        "你好", source_language="zh-CN", target_language="en-US", salt="42"
    )
    assert params["q"] == "你好"
    assert params["from"] == "zh"
    assert params["to"] == "en"
    assert params["appid"] == "2015063000000001"
    assert params["salt"] == "42"
    assert params["sign"] == _baidu().sign("你好", "42")


@pytest.mark.parametrize(
    "locale, code",
    [("zh-CN", "zh"), ("zh_TW", "cht"), ("ja-JP", "jp"), ("ko", "kor"), ("fr-FR", "fra"), ("de", "de")],
)
def test_to_baidu_language(locale, code):
    assert to_baidu_language(locale) == code


def test_baidu_translate_joins_results(monkeypatch):
    captured = {}

    def fake_get(url, params, timeout):
        captured.update(url=url, params=params, timeout=timeout)
        return FakeResponse(
            {"from": "zh", "to": "en", "trans_result": [{"src": "你好", "dst": "Hello"}]}
        )

    monkeypatch.setattr(providers.requests, "get", fake_get)
    result = _baidu().translate("你好", source_language="zh-CN", target_language="en-US")
    assert result == "Hello"
    assert captured["url"] == BaiduTranslationProvider.DEFAULT_ENDPOINT
    assert captured["params"]["to"] == "en"


def test_baidu_error_payload_raises(monkeypatch):
    monkeypatch.setattr(
        providers.requests,
        "get",
        lambda url, params, timeout: FakeResponse({"error_code": "54001", "error_msg": "Invalid Sign"}),
    )
    with pytest.raises(TranslationProviderError, match="54001"):
        _baidu().translate("你好", source_language="zh-CN", target_language="en-US")


def test_baidu_http_and_json_failures_raise(monkeypatch):
    def broken_get(url, params, timeout):
        raise requests.ConnectionError("offline")

    monkeypatch.setattr(providers.requests, "get", broken_get)
    with pytest.raises(TranslationProviderError, match="unavailable"):
        _baidu().translate("你好", source_language="zh-CN", target_language="en-US")

    monkeypatch.setattr(
        providers.requests,
        "get",
        lambda url, params, timeout: FakeResponse(ValueError("not json")),
    )
    with pytest.raises(TranslationProviderError, match="invalid JSON"):
        _baidu().translate("你好", source_language="zh-CN", target_language="en-US")


def test_baidu_requires_credentials():
    provider = BaiduTranslationProvider(app_id=None, secret_key="")
    with pytest.raises(TranslationProviderConfigurationError, match="BAIDU_TRANSLATE_APP_ID"):
        provider.check_configuration()


def test_openai_strips_code_fences():
    provider = OpenAITranslationProvider(api_key="sk-test")
    assert provider._extract_translation('```json\n{"translation": "Hello"}\n```') == "Hello"
    with pytest.raises(TranslationProviderError):
        provider._extract_translation('{"text": "Hello"}')


def test_openai_translate_uses_chat_completions():
    provider = OpenAITranslationProvider(api_key="sk-test", model="gpt-test")
    calls = []

    def create(**kwargs):
        calls.append(kwargs)
        message = SimpleNamespace(content='{"translation": "Goodbye"}')
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])

    provider._client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))
    assert provider.translate("再见", source_language="zh-CN", target_language="en-US") == "Goodbye"
    assert calls[0]["model"] == "gpt-test"


def test_build_provider_by_name():
    assert isinstance(build_provider(None), BaiduTranslationProvider)
    assert isinstance(build_provider("fanyi"), BaiduTranslationProvider)
    assert isinstance(build_provider("GPT", api_key="sk"), OpenAITranslationProvider)
    assert isinstance(build_provider("mock"), EchoTranslationProvider)
    with pytest.raises(TranslationProviderConfigurationError):
        build_provider("babelfish")


def test_session_retries_then_succeeds():
    sleeps = []
    provider = FlakyProvider(failures=2)
    session = TranslationSession(
        provider, source_language="zh-CN", target_language="en-US", sleep=sleeps.append
    )
    assert session.translate("你好") == "en-US:你好"
    assert session.calls == 3
    assert sleeps == [1, 4]
    assert session.records == []


def test_session_falls_back_after_retries():
    sleeps = []
    session = TranslationSession(
        FlakyProvider(failures=5),
        source_language="zh-CN",
        target_language="en-US",
        max_retries=1,
        sleep=sleeps.append,
    )
    assert session.translate("你好") == "你好"
    assert session.calls == 2
    assert sleeps == [1]
    [record] = session.records
    assert record.category is ErrorCategory.NETWORK


def test_session_without_credentials_makes_no_calls(monkeypatch):
    def unexpected_get(*args, **kwargs):
        raise AssertionError("no request expected")

    monkeypatch.setattr(providers.requests, "get", unexpected_get)
    session = TranslationSession(
        BaiduTranslationProvider(app_id=None, secret_key=None),
        source_language="zh-CN",
        target_language="en-US",
    )
    assert session.translate("你好") == "你好"
    assert session.translate("再见") == "再见"
    assert session.calls == 0
    assert len(session.records) == 1
    assert session.records[0].category is ErrorCategory.TRANSLATION


def test_local_provider_is_not_counted():
    session = TranslationSession(
        EchoTranslationProvider(), source_language="zh-CN", target_language="en-US"
    )
    assert session.translate("你好") == "你好"
    assert session.calls == 0
