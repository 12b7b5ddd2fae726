from __future__ import annotations

from dataclasses import dataclass

from novel_formatter.states import IssueKind


@dataclass(frozen=True)
class Issue:
    kind: IssueKind
    line_no: int  # 1-based, in the output text
    note: str


@dataclass(frozen=True)
class ChapterQuoteIssue:
    """The first quote anomaly found in one chapter."""

    title: str
    title_line_no: int
    issue: Issue
