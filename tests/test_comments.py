from i18nize.comments import OffsetMap, strip_comments


def test_strip_line_and_block_comments():
    source = "const a = 1; // 注释\n/* 块注释 */const b = '你好';\n"
    stripped = strip_comments(source)
    assert stripped.text == "const a = 1; \nconst b = '你好';\n"


def test_doc_comments_are_removed():
    source = "/**\n * 文档注释\n */\nexport const x = 1;\n"
    assert strip_comments(source).text == "\nexport const x = 1;\n"


def test_comment_markers_inside_strings_survive():
    source = "const url = 'http://example.com/*x*/'; // 链接\n"
    stripped = strip_comments(source)
    assert stripped.text == "const url = 'http://example.com/*x*/'; \n"


def test_unterminated_block_comment_runs_to_end():
    stripped = strip_comments("a /* 未结束")
    assert stripped.text == "a "
    assert stripped.offsets.removed == [(2, len("/* 未结束"))]


def test_projection_back_to_original_offsets():
    source = "// 旧文本\nconst a = 1; /* x */ const b = '你好';"
    stripped = strip_comments(source)
    position = stripped.text.index("你好")
    assert stripped.offsets.to_original(position) == source.index("你好")


def test_offset_map_projection_across_several_removals():
    offsets = OffsetMap([(2, 3), (10, 2)])
    assert offsets.to_original(0) == 0
    assert offsets.to_original(1) == 1
    assert offsets.to_original(2) == 5
    assert offsets.to_original(6) == 9
    assert offsets.to_original(7) == 12
    assert offsets.to_original_span(1, 3) == (1, 6)


def test_crosses_removed_detects_comment_inside_span():
    stripped = strip_comments("'你/*x*/好'")
    assert stripped.text == "'你好'"
    assert stripped.offsets.crosses_removed(0, 4)
    assert not stripped.offsets.crosses_removed(0, 2)
    assert not stripped.offsets.crosses_removed(2, 4)
