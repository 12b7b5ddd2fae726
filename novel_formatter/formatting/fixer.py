from __future__ import annotations

import logging
from dataclasses import dataclass, field

from novel_formatter.codepoints import split_lines, strip_bom
from novel_formatter.formatting.chapters import format_chapter_titles, is_chapter_title
from novel_formatter.formatting.config import FormatConfig
from novel_formatter.formatting.issues import ChapterQuoteIssue, Issue
from novel_formatter.formatting.migrate import move_trailing_open_quotes
from novel_formatter.formatting.paragraphs import join_paragraphs
from novel_formatter.formatting.punctuation import check_paragraph_punctuation
from novel_formatter.formatting.quotes import collect_quote_issues, normalize_quote_levels, replace_curly_quotes

logger = logging.getLogger(__name__)


@dataclass
class FormatResult:
    text: str
    quote_issues: list[ChapterQuoteIssue] = field(default_factory=list)
    paragraph_issues: list[Issue] = field(default_factory=list)
    stats: dict[str, int] = field(default_factory=dict)

    @property
    def has_issues(self) -> bool:
        return bool(self.quote_issues or self.paragraph_issues)


def decode_source(data: bytes) -> str:
    """Decode UTF-8 input, keeping malformed bytes as lone surrogates.

    Malformed bytes only become fatal when they sit inside a chapter.
    """

    return strip_bom(data.decode("utf-8", errors="surrogateescape"))


def encode_output(text: str) -> bytes:
    return text.encode("utf-8", errors="surrogateescape")


def _count(stats: dict[str, int], key: str, n: int) -> None:
    if n:
        stats[key] = stats.get(key, 0) + n


def format_txt(text: str, config: FormatConfig | None = None) -> FormatResult:
    """Run the whole pipeline on an in-memory document.

    Raises InvalidUtf8Error when a chapter holds malformed bytes; nothing is
    returned in that case, so callers never persist a partial result.
    """

    cfg = config or FormatConfig()
    stats: dict[str, int] = {}

    out = join_paragraphs(text, cfg)
    if cfg.format_chapter_titles:
        out = format_chapter_titles(out, cfg)
    if cfg.replace_curly_quotes:
        out = replace_curly_quotes(out)
    if cfg.normalize_quote_levels:
        out = normalize_quote_levels(out, stats)
    if cfg.move_trailing_open_quotes:
        out = move_trailing_open_quotes(out, stats)

    lines = split_lines(out)
    _count(stats, "chapters", sum(1 for line in lines if is_chapter_title(line)))
    _count(stats, "paragraphs", sum(1 for line in lines if line and not is_chapter_title(line)))

    quote_issues = collect_quote_issues(out) if cfg.check_quote_pairing else []
    paragraph_issues = check_paragraph_punctuation(out) if cfg.check_paragraph_punctuation else []
    _count(stats, "quote_issues", len(quote_issues))
    _count(stats, "paragraph_issues", len(paragraph_issues))

    logger.info("formatted document: %s", ", ".join(f"{k}={v}" for k, v in sorted(stats.items())) or "empty")
    return FormatResult(text=out, quote_issues=quote_issues, paragraph_issues=paragraph_issues, stats=stats)


def format_bytes(data: bytes, config: FormatConfig | None = None) -> FormatResult:
    return format_txt(decode_source(data), config)
