from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from novel_formatter.codepoints import (
    CLOSING_QUOTES,
    OPENING_QUOTES,
    QUOTE_CLOSE,
    QUOTE_CLOSE_NESTED,
    QUOTE_OPEN,
    QUOTE_OPEN_NESTED,
    split_lines,
)
from novel_formatter.errors import InvalidUtf8Error, find_invalid_utf8
from novel_formatter.formatting.chapters import iter_chapter_blocks
from novel_formatter.formatting.issues import ChapterQuoteIssue, Issue
from novel_formatter.states import IssueKind, LineKind

logger = logging.getLogger(__name__)

# Curly quotes collapse onto the outer corner-quote pair; nesting is fixed later.
_CURLY_TO_CORNER = str.maketrans(
    {
        "\u2018": QUOTE_OPEN,  # ‘
        "\u2019": QUOTE_CLOSE,  # ’
        "\u201c": QUOTE_OPEN,  # “
        "\u201d": QUOTE_CLOSE,  # ”
    }
)

# The opener each closing mark must pop.
_EXPECTED_OPENER = {
    QUOTE_CLOSE: QUOTE_OPEN,
    QUOTE_CLOSE_NESTED: QUOTE_OPEN_NESTED,
}

_MISMATCH_NOTES = {
    QUOTE_CLOSE: "expected 』 but found 」",
    QUOTE_CLOSE_NESTED: "expected 」 but found 』",
}


def replace_curly_quotes(text: str) -> str:
    return text.translate(_CURLY_TO_CORNER)


def ensure_valid_utf8(chapter_lines: Sequence[str]) -> None:
    """Raise InvalidUtf8Error for the first chapter line holding malformed bytes."""

    for index, line in enumerate(chapter_lines, start=1):
        pos = find_invalid_utf8(line)
        if pos is None:
            continue
        raise InvalidUtf8Error(
            chapter_title=chapter_lines[0] if chapter_lines else "<unknown chapter>",
            line_kind=LineKind.TITLE if index == 1 else LineKind.BODY,
            line_index=index,
            line=line,
            byte_pos=pos,
        )


@dataclass(frozen=True)
class _OpenQuote:
    mark: str
    line_no: int


def find_first_quote_issue(lines: Sequence[str], *, first_line_no: int = 1) -> Issue | None:
    """Replay the quote stack over ``lines`` and describe the first anomaly.

    ``first_line_no`` is the 1-based line number of ``lines[0]``.
    """

    stack: list[_OpenQuote] = []
    for offset, line in enumerate(lines):
        line_no = first_line_no + offset
        for ch in line:
            if ch in OPENING_QUOTES:
                stack.append(_OpenQuote(ch, line_no))
            elif ch in CLOSING_QUOTES:
                if not stack:
                    return Issue(IssueKind.EXTRA_CLOSE, line_no, "closing quote without opener")
                opened = stack.pop()
                if opened.mark != _EXPECTED_OPENER[ch]:
                    return Issue(IssueKind.MISMATCH, line_no, _MISMATCH_NOTES[ch])

    if stack:
        return Issue(IssueKind.UNCLOSED, stack[0].line_no, "unclosed opening quote(s) by end of chapter")
    return None


def has_pairing_issue(chapter_lines: Sequence[str]) -> bool:
    """Validate both quote levels of a chapter.

    Raises InvalidUtf8Error before scanning if any line holds malformed bytes.
    """

    ensure_valid_utf8(chapter_lines)
    return find_first_quote_issue(chapter_lines) is not None


def normalize_quote_levels_in_lines(lines: Sequence[str]) -> list[str]:
    """Rewrite quote marks by nesting depth: depth 0 uses 「」, deeper levels use 『』.

    Only call this for chapters without a pairing issue.
    """

    depth = 0
    out: list[str] = []
    for line in lines:
        buf: list[str] = []
        for ch in line:
            if ch in OPENING_QUOTES:
                buf.append(QUOTE_OPEN if depth == 0 else QUOTE_OPEN_NESTED)
                depth += 1
            elif ch in CLOSING_QUOTES:
                buf.append(QUOTE_CLOSE if depth == 1 else QUOTE_CLOSE_NESTED)
                depth -= 1
            else:
                buf.append(ch)
        out.append("".join(buf))
    return out


def normalize_quote_levels(text: str, stats: dict[str, int] | None = None) -> str:
    """Canonicalize quote nesting chapter by chapter.

    Lines before the first chapter title are left alone. Chapters with a
    pairing issue keep their quote marks unchanged.
    """

    out_lines: list[str] = []
    for block in iter_chapter_blocks(split_lines(text)):
        if not block.is_chapter:
            out_lines.extend(block.lines)
            continue
        if has_pairing_issue(block.lines):
            logger.debug("quote pairing issue; leaving chapter as is: %s", block.title)
            if stats is not None:
                stats["chapters_quote_skipped"] = stats.get("chapters_quote_skipped", 0) + 1
            out_lines.extend(block.lines)
            continue
        out_lines.extend(normalize_quote_levels_in_lines(block.lines))
        if stats is not None:
            stats["chapters_quote_normalized"] = stats.get("chapters_quote_normalized", 0) + 1
    return "\n".join(out_lines)


def collect_quote_issues(text: str) -> list[ChapterQuoteIssue]:
    """First quote anomaly of every chapter, with line numbers in ``text``.

    Raises InvalidUtf8Error like the pairing check does.
    """

    issues: list[ChapterQuoteIssue] = []
    for block in iter_chapter_blocks(split_lines(text)):
        if not block.is_chapter:
            continue
        ensure_valid_utf8(block.lines)
        title_line_no = block.start + 1
        issue = find_first_quote_issue(block.lines, first_line_no=title_line_no)
        if issue is not None:
            issues.append(ChapterQuoteIssue(title=block.lines[0], title_line_no=title_line_no, issue=issue))
    return issues
