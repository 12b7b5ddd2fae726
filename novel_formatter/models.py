from __future__ import annotations

from pydantic import BaseModel, Field


class ErrorEnvelope(BaseModel):
    code: str
    message: str


class FormatOptions(BaseModel):
    blank_lines_before_title: int = Field(default=2, ge=0, le=10)
    blank_lines_after_title: int = Field(default=1, ge=0, le=10)
    format_chapter_titles: bool = True
    replace_curly_quotes: bool = True
    normalize_quote_levels: bool = True
    move_trailing_open_quotes: bool = True
    check_quote_pairing: bool = True
    check_paragraph_punctuation: bool = True


class FormatRequest(BaseModel):
    text: str
    options: FormatOptions = Field(default_factory=FormatOptions)


class IssueOut(BaseModel):
    kind: str
    line_no: int
    note: str


class QuoteIssueOut(BaseModel):
    title: str
    title_line_no: int
    issue: IssueOut


class FormatResponse(BaseModel):
    text: str
    quote_issues: list[QuoteIssueOut] = Field(default_factory=list)
    paragraph_issues: list[IssueOut] = Field(default_factory=list)
    stats: dict[str, int] = Field(default_factory=dict)
    log: str = ""
