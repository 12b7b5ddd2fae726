from __future__ import annotations

from collections.abc import Sequence

from novel_formatter.errors import printable
from novel_formatter.formatting.issues import ChapterQuoteIssue, Issue

QUOTE_ISSUES_HEADER = "Unpaired/mismatched quotes detected (line numbers are in the output file):"
PARAGRAPH_ISSUES_HEADER = "Paragraph punctuation issues detected (line numbers are in the output file):"


def quote_issue_lines(issues: Sequence[ChapterQuoteIssue]) -> list[str]:
    if not issues:
        return []
    lines = [QUOTE_ISSUES_HEADER]
    for item in issues:
        lines.append(f"- Chapter at line {item.title_line_no}: {printable(item.title)}")
        lines.append(f"  First issue at line {item.issue.line_no} ({item.issue.kind}): {item.issue.note}")
    return lines


def paragraph_issue_lines(issues: Sequence[Issue]) -> list[str]:
    if not issues:
        return []
    lines = [PARAGRAPH_ISSUES_HEADER]
    for issue in issues:
        lines.append(f"- Line {issue.line_no} ({issue.kind}): {issue.note}")
    return lines


def render_issue_log(quote_issues: Sequence[ChapterQuoteIssue], paragraph_issues: Sequence[Issue]) -> str:
    """Render the issue log: quote section, then paragraph section after a blank line."""

    lines = quote_issue_lines(quote_issues)
    paragraph_lines = paragraph_issue_lines(paragraph_issues)
    if lines and paragraph_lines:
        lines.append("")
    lines.extend(paragraph_lines)
    return "\n".join(lines)
