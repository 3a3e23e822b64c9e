import re

# Characters reserved by Telegram MarkdownV2 outside of entities
MARKDOWN_V2_SPECIAL_CHARS = "_*[]()~`>#+-=|{}.!"

_SPECIAL_RE = re.compile("([" + re.escape(MARKDOWN_V2_SPECIAL_CHARS) + "])")


def escape_markdown_v2(text: str) -> str:
    """Escape text so Telegram renders it literally in MarkdownV2 mode.

    Every reserved character gets exactly one backslash in front of it. The
    substitution runs in a single pass, so inserted backslashes are never
    escaped again.

    Args:
        text: Plain message text.

    Returns:
        str: Escaped text.
    """
    return _SPECIAL_RE.sub(r"\\\1", text)


def bold_markdown_v2(text: str) -> str:
    """Wrap already-escaped text in MarkdownV2 bold markers."""
    return f"*{text}*"
