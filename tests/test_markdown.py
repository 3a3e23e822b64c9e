"""Tests for MarkdownV2 escaping."""

import pytest

from app.utils.markdown import (
    MARKDOWN_V2_SPECIAL_CHARS,
    bold_markdown_v2,
    escape_markdown_v2,
)


@pytest.mark.parametrize(
    "text",
    [
        "hello world",
        "",
        "Olá, tudo bem? 123",
        "line one\nline two\ttabbed",
        "emoji 🎉 and ümlauts",
    ],
)
def test_text_without_special_chars_is_unchanged(text: str) -> None:
    assert escape_markdown_v2(text) == text


@pytest.mark.parametrize("char", list(MARKDOWN_V2_SPECIAL_CHARS))
def test_each_special_char_gets_one_backslash(char: str) -> None:
    assert escape_markdown_v2(f"a{char}b") == f"a\\{char}b"


def test_special_char_set_matches_telegram_reserved_chars() -> None:
    assert set(MARKDOWN_V2_SPECIAL_CHARS) == set("_*[]()~`>#+-=|{}.!")
    assert len(MARKDOWN_V2_SPECIAL_CHARS) == 18


def test_escaped_length_is_input_plus_special_count() -> None:
    text = "Hi! (v1.2) costs $5 - *bold* _it_ [x] {y} #tag a|b c=d ~e~ `f` >g"
    special_count = sum(1 for c in text if c in MARKDOWN_V2_SPECIAL_CHARS)

    escaped = escape_markdown_v2(text)

    assert len(escaped) == len(text) + special_count


def test_inserted_backslashes_are_not_escaped_again() -> None:
    assert escape_markdown_v2("...") == "\\.\\.\\."
    assert escape_markdown_v2("a\\b") == "a\\b"


def test_repeated_and_adjacent_chars() -> None:
    assert escape_markdown_v2("**__") == "\\*\\*\\_\\_"
    assert escape_markdown_v2("[]()") == "\\[\\]\\(\\)"


def test_bold_wraps_text() -> None:
    assert bold_markdown_v2("Anonymous message:") == "*Anonymous message:*"
