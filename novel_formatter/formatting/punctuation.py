from __future__ import annotations

from novel_formatter.codepoints import QUOTE_CLOSE, QUOTE_CLOSE_NESTED, split_lines, trim
from novel_formatter.formatting.chapters import is_chapter_title
from novel_formatter.formatting.issues import Issue
from novel_formatter.formatting.paragraphs import is_separator_line
from novel_formatter.states import IssueKind

VALID_ENDING_PUNCT = frozenset(
    {
        ",",
        ".",
        "?",
        "!",
        ":",
        ";",
        "~",
        "—",  # em dash
        "…",  # ellipsis
        "，",
        "。",
        "？",
        "！",
        "：",
        "；",
        "～",
        "》",
    }
)

# Stripped from the end of a paragraph before its last real character is checked.
CLOSING_MARKS = frozenset({QUOTE_CLOSE, QUOTE_CLOSE_NESTED, "】", "）"})

INVALID_START_PUNCT = VALID_ENDING_PUNCT | CLOSING_MARKS


def check_paragraph(line: str, line_no: int) -> list[Issue]:
    body = trim(line)
    if not body:
        return []

    issues: list[Issue] = []

    end = len(body)
    while end > 0 and body[end - 1] in CLOSING_MARKS:
        end -= 1
    if end > 0 and body[end - 1] not in VALID_ENDING_PUNCT:
        issues.append(Issue(IssueKind.INVALID_ENDING, line_no, "paragraph ends with invalid punctuation"))

    if body[0] in INVALID_START_PUNCT:
        issues.append(Issue(IssueKind.INVALID_START, line_no, "paragraph starts with invalid punctuation"))

    return issues


def check_paragraph_punctuation(text: str) -> list[Issue]:
    """Flag paragraphs that end without terminal punctuation or start with punctuation.

    Blank lines, chapter titles and ``------`` separators are skipped.
    """

    issues: list[Issue] = []
    for line_no, line in enumerate(split_lines(text), start=1):
        if not line.strip() or is_chapter_title(line) or is_separator_line(line):
            continue
        issues.extend(check_paragraph(line, line_no))
    return issues
