from i18nize.structures import ExtractedLiteral, LiteralContext


def make_literal(text, position=0, context=LiteralContext.PLAIN_STRING, original_text=None):
    if original_text is None:
        original_text = text if context is LiteralContext.MARKUP_TEXT else f"'{text}'"
    return ExtractedLiteral(
        text=text,
        original_text=original_text,
        position=position,
        context=context,
    )
