from __future__ import annotations

import pytest

import novel_formatter.formatting.fixer as fixer
from novel_formatter.errors import InvalidUtf8Error
from novel_formatter.formatting.config import FormatConfig
from novel_formatter.states import IssueKind

SAMPLE = (
    "序章\n"
    "\n"
    "　　“你好，”他说，\n"
    "继续说 hello\n"
    "world。\n"
    "\n"
    "第1章:开始\n"
    "　　她说：“我在想‘什么’。”\n"
    "------\n"
    "　　最后一句\n"
)

SAMPLE_OUT = (
    "序章\n"
    "\n"
    "　　「你好，」他说，继续说hello world.\n"
    "\n"
    "\n"
    "第1章 开始\n"
    "\n"
    "　　她说：「我在想『什么』。」\n"
    "　　------\n"
    "　　最后一句"
)


def test_format_txt_runs_every_stage() -> None:
    out = fixer.format_txt(SAMPLE)
    assert out.text == SAMPLE_OUT
    assert out.quote_issues == []
    assert [(i.kind, i.line_no) for i in out.paragraph_issues] == [(IssueKind.INVALID_ENDING, 10)]
    assert out.has_issues
    assert out.stats == {
        "chapters": 2,
        "paragraphs": 4,
        "chapters_quote_normalized": 2,
        "paragraph_issues": 1,
    }


def test_format_txt_is_idempotent() -> None:
    once = fixer.format_txt(SAMPLE).text
    twice = fixer.format_txt(once).text
    assert twice == once


def test_format_txt_keeps_first_title_apart_from_preface() -> None:
    once = fixer.format_txt("序言。\n\n第一章 开始\n\n正文。").text
    assert once == "　　序言。\n\n\n第一章 开始\n\n　　正文。"
    assert fixer.format_txt(once).text == once


def test_format_txt_reports_quote_issue_and_still_moves_quotes() -> None:
    text = "第一章\n\n　　他说：「\n\n　　走吧。」\n\n　　」多余。\n"
    out = fixer.format_txt(text)

    assert out.text == "第一章\n\n　　他说：\n　　「走吧。」\n　　」多余。"
    assert len(out.quote_issues) == 1
    item = out.quote_issues[0]
    assert (item.title, item.title_line_no) == ("第一章", 1)
    assert (item.issue.kind, item.issue.line_no) == (IssueKind.EXTRA_CLOSE, 5)
    assert [(i.kind, i.line_no) for i in out.paragraph_issues] == [(IssueKind.INVALID_START, 5)]
    assert out.stats["chapters_quote_skipped"] == 1
    assert out.stats["quotes_moved"] == 1
    assert out.stats["quote_issues"] == 1


def test_format_txt_empty_input() -> None:
    out = fixer.format_txt("")
    assert out.text == ""
    assert out.stats == {}
    assert not out.has_issues


@pytest.mark.parametrize(
    ("cfg", "expected"),
    [
        (FormatConfig(format_chapter_titles=False), "第一章：开始\n　　「正文。」"),
        (FormatConfig(replace_curly_quotes=False), "第一章 开始\n\n　　“正文。”"),
        (FormatConfig(blank_lines_after_title=0), "第一章 开始\n　　「正文。」"),
        (FormatConfig(paragraph_indent=""), "第一章 开始\n\n「正文。」"),
    ],
)
def test_format_txt_config_toggles(cfg: FormatConfig, expected: str) -> None:
    assert fixer.format_txt("第一章：开始\n\n“正文。”", cfg).text == expected


def test_format_txt_checks_can_be_disabled() -> None:
    cfg = FormatConfig(check_quote_pairing=False, check_paragraph_punctuation=False)
    out = fixer.format_txt("第一章\n\n　　」没有结尾", cfg)
    assert not out.has_issues
    assert "quote_issues" not in out.stats


def test_format_bytes_strips_bom_and_normalizes_newlines() -> None:
    data = "\ufeff第一章\r\n\r\n正文。\r".encode()
    assert fixer.format_bytes(data).text == "第一章\n\n　　正文。"


def test_format_bytes_invalid_utf8_inside_chapter_is_fatal() -> None:
    data = "第一章\n\n".encode() + b"ab\xffcd\n"
    with pytest.raises(InvalidUtf8Error) as ei:
        fixer.format_bytes(data)
    assert ei.value.chapter_title == "第一章"
    assert ei.value.line_index == 3
    # Two U+3000 indent characters (6 bytes) precede "ab".
    assert ei.value.byte_pos == 9


def test_format_bytes_keeps_invalid_bytes_before_first_chapter() -> None:
    data = b"\xff\xfe\n\n" + "第一章\n\n正文。".encode()
    out = fixer.format_bytes(data)
    raw = fixer.encode_output(out.text)
    assert raw == "　　".encode() + b"\xff\xfe\n\n\n" + "第一章\n\n　　正文。".encode()
