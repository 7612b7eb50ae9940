from i18nize.backfill import backfill_catalog
from i18nize.providers import TranslationProvider, TranslationSession


class UpperProvider(TranslationProvider):
    name = "upper"

    def __init__(self):
        super().__init__()
        self.seen = []

    def translate(self, text, *, source_language, target_language):
        self.seen.append(text)
        return f"EN[{text}]"


def _session(provider):
    return TranslationSession(
        provider, source_language="zh-CN", target_language="en-US", sleep=lambda _: None
    )


def test_missing_leaves_are_translated_and_nested():
    provider = UpperProvider()
    source = {"pages": {"foo": {"index_0": "你好世界", "index_1": "再见"}}}
    target = {}
    report = backfill_catalog(source, target, _session(provider))
    assert target == {"pages": {"foo": {"index_0": "EN[你好世界]", "index_1": "EN[再见]"}}}
    assert report.translated == ["pages.foo.index_0", "pages.foo.index_1"]
    assert report.translation_calls == 2
    assert provider.seen == ["你好世界", "再见"]


def test_existing_translations_are_kept_and_empty_ones_refilled():
    provider = UpperProvider()
    source = {"pages": {"index_0": "你好", "index_1": "再见", "index_2": "谢谢"}}
    target = {"pages": {"index_0": "Hi", "index_1": ""}}
    report = backfill_catalog(source, target, _session(provider))
    assert target == {"pages": {"index_0": "Hi", "index_1": "EN[再见]", "index_2": "EN[谢谢]"}}
    assert report.existing == ["pages.index_0"]
    assert report.translation_calls == 2


def test_shape_conflicts_are_skipped():
    provider = UpperProvider()
    source = {"pages": {"index_0": "你好"}, "shared": "共享"}
    target = {"pages": "oops", "shared": {"nested": "x"}}
    report = backfill_catalog(source, target, _session(provider))
    assert target == {"pages": "oops", "shared": {"nested": "x"}}
    assert sorted(report.conflicts) == ["pages", "shared"]
    assert provider.seen == []


def test_empty_source_values_are_ignored():
    provider = UpperProvider()
    target = {}
    backfill_catalog({"index_0": "", "index_1": 3}, target, _session(provider))
    assert target == {}
    assert provider.seen == []
