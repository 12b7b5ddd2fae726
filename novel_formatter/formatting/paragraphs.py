from __future__ import annotations

import logging
from types import MappingProxyType

from novel_formatter.codepoints import (
    consume_indent,
    ends_with_ascii_word,
    is_ascii_word,
    is_indent_char,
    normalize_newlines,
    split_lines,
    starts_with_ascii_word,
    strip_bom,
    trim,
)
from novel_formatter.formatting.chapters import is_chapter_title
from novel_formatter.formatting.config import FormatConfig

logger = logging.getLogger(__name__)

SEPARATOR = "------"

# ASCII form -> full-width form. Either form maps to the same pair.
_PUNCT_PAIRS_ASCII_TO_FULL = {
    ",": "，",
    ".": "。",
    "?": "？",
    "!": "！",
    ":": "：",
    ";": "；",
    "~": "～",
    "(": "（",
    ")": "）",
    "[": "［",
    "]": "］",
    "{": "｛",
    "}": "｝",
}

PUNCT_PAIRS: MappingProxyType[str, tuple[str, str]] = MappingProxyType(
    {
        **{a: (a, f) for a, f in _PUNCT_PAIRS_ASCII_TO_FULL.items()},
        **{f: (a, f) for a, f in _PUNCT_PAIRS_ASCII_TO_FULL.items()},
    }
)

# Full-width digits and Latin letters fold to ASCII; full-width punctuation does not.
_FULLWIDTH_ALNUM_TABLE = {
    **{cp: cp - 0xFEE0 for cp in range(0xFF10, 0xFF1A)},  # ０-９
    **{cp: cp - 0xFEE0 for cp in range(0xFF21, 0xFF3B)},  # Ａ-Ｚ
    **{cp: cp - 0xFEE0 for cp in range(0xFF41, 0xFF5B)},  # ａ-ｚ
}


def is_separator_line(line: str) -> bool:
    return trim(line) == SEPARATOR


def collapse_whitespace(line: str) -> str:
    """Drop spaces, tabs and U+3000 unless they sit between two ASCII word characters.

    A kept run becomes exactly one ASCII space.
    """

    out: list[str] = []
    n = len(line)
    i = 0
    while i < n:
        ch = line[i]
        if not is_indent_char(ch):
            out.append(ch)
            i += 1
            continue

        end = consume_indent(line, i)
        left = line[i - 1] if i > 0 else ""
        right = line[end] if end < n else ""
        if left and right and is_ascii_word(left) and is_ascii_word(right):
            out.append(" ")
        i = end
    return "".join(out)


def fold_fullwidth_alnum(line: str) -> str:
    return line.translate(_FULLWIDTH_ALNUM_TABLE)


def normalize_punctuation(line: str) -> str:
    """Pick the ASCII or full-width form of each paired punctuation mark.

    ASCII when the previous non-space character is an ASCII word character,
    full-width otherwise. Works in both directions, so a full-width comma
    after "abc" becomes "," and an ASCII comma after "你好" becomes "，".
    """

    out: list[str] = []
    prev_is_word = False
    for ch in line:
        if ch in (" ", "\t"):
            out.append(ch)
            continue
        pair = PUNCT_PAIRS.get(ch)
        if pair is None:
            out.append(ch)
            prev_is_word = is_ascii_word(ch)
            continue
        out.append(pair[0] if prev_is_word else pair[1])
        prev_is_word = False
    return "".join(out)


def normalize_line(line: str) -> str:
    """Per-line cleanup applied before a line joins a paragraph."""

    return normalize_punctuation(fold_fullwidth_alnum(collapse_whitespace(trim(line))))


def starts_with_indent(raw_line: str) -> bool:
    end = consume_indent(raw_line)
    return 0 < end < len(raw_line)


class _ParagraphBuilder:
    def __init__(self, indent: str) -> None:
        self._indent = indent
        self._parts: list[str] = []
        self._tail_is_word = False
        self.paragraphs: list[str] = []

    @property
    def is_open(self) -> bool:
        return bool(self._parts)

    def append(self, chunk: str) -> None:
        # Keep wrapped English words apart: "hello" + "world" -> "hello world".
        if self._parts and self._tail_is_word and starts_with_ascii_word(chunk):
            self._parts.append(" ")
        self._parts.append(chunk)
        self._tail_is_word = ends_with_ascii_word(chunk)

    def emit_separator(self) -> None:
        self.flush()
        self.paragraphs.append(self._indent + SEPARATOR)

    def flush(self) -> None:
        if self._parts:
            paragraph = "".join(self._parts)
            if is_chapter_title(paragraph):
                self.paragraphs.append(paragraph)
            else:
                self.paragraphs.append(self._indent + paragraph)
        self._parts = []
        self._tail_is_word = False


def join_paragraphs(text: str, config: FormatConfig | None = None) -> str:
    """Merge wrapped source lines so that every paragraph is exactly one line.

    A paragraph ends at a blank line, at a ``------`` separator line, or when a
    line starts with indentation while a paragraph is open. Paragraphs are
    written without blank lines between them.
    """

    cfg = config or FormatConfig()
    text = normalize_newlines(strip_bom(text))
    builder = _ParagraphBuilder(cfg.paragraph_indent)

    for raw_line in split_lines(text):
        trimmed = trim(raw_line)
        if not trimmed:
            builder.flush()
            continue

        if trimmed == SEPARATOR:
            builder.emit_separator()
            continue

        if builder.is_open and starts_with_indent(raw_line):
            builder.flush()

        cleaned = normalize_line(trimmed)
        if cleaned:
            builder.append(cleaned)

    builder.flush()
    logger.debug("joined %s paragraphs", len(builder.paragraphs))
    return "\n".join(builder.paragraphs)
