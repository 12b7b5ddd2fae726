from __future__ import annotations

import logging

from novel_formatter.codepoints import OPENING_QUOTES, is_only_indent, split_indent, split_lines, trim
from novel_formatter.formatting.chapters import is_chapter_title

logger = logging.getLogger(__name__)


def _next_nonblank(lines: list[str], start: int) -> int | None:
    for j in range(start, len(lines)):
        if trim(lines[j]):
            return j
    return None


def move_trailing_open_quotes(text: str, stats: dict[str, int] | None = None) -> str:
    """Move a line-final opening quote to the start of the next non-blank line.

    The quote lands right after the target line's leading indentation. A
    source line left holding only indentation is deleted. When no non-blank
    line follows, or the next one is a chapter title, the quote stays where
    it is.
    """

    lines = split_lines(text)
    moved = 0
    i = 0
    while i < len(lines) - 1:
        line = lines[i]
        if not line or line[-1] not in OPENING_QUOTES:
            i += 1
            continue

        j = _next_nonblank(lines, i + 1)
        # A quote never crosses into the next chapter.
        if j is None or is_chapter_title(lines[j]):
            i += 1
            continue

        quote = line[-1]
        lead, rest = split_indent(lines[j])
        lines[j] = lead + quote + rest
        lines[i] = line[:-1]
        moved += 1
        logger.debug("moved trailing %s from line %s to line %s", quote, i + 1, j + 1)

        if is_only_indent(lines[i]):
            del lines[i]
        else:
            i += 1

    if stats is not None and moved:
        stats["quotes_moved"] = stats.get("quotes_moved", 0) + moved
    return "\n".join(lines)
