from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from novel_formatter.codepoints import split_lines
from novel_formatter.formatting.config import FormatConfig

# Chapter title grammars, tried in this order:
#   序章...            prologue
#   番外...            extra chapter
#   第<numerals>章...  numbered chapter
# Matching is done on str codepoints, never on encoded bytes.
PROLOGUE_PREFIX = "序章"
EXTRA_PREFIX = "番外"
CHAPTER_START = "第"
CHAPTER_END = "章"

CHAPTER_NUMERALS = frozenset("0123456789" "零一二三四五六七八九十百千万")

_TITLE_SPACE_CHARS = " \t\n\r\x0b\x0c\u3000"
_TITLE_COLONS = (":", "\uff1a")


def split_chapter_title_prefix(line: str) -> tuple[str, str] | None:
    """Return ``(prefix, rest)`` when ``line`` starts with a chapter marker, else None."""

    for marker in (PROLOGUE_PREFIX, EXTRA_PREFIX):
        if line.startswith(marker):
            return marker, line[len(marker) :]

    if not line.startswith(CHAPTER_START):
        return None

    i = len(CHAPTER_START)
    while i < len(line) and line[i] in CHAPTER_NUMERALS:
        i += 1
    if i == len(CHAPTER_START):
        return None
    if i >= len(line) or line[i] != CHAPTER_END:
        return None
    end = i + 1
    return line[:end], line[end:]


def is_chapter_title(line: str) -> bool:
    return split_chapter_title_prefix(line) is not None


def _strip_title_separator(rest: str) -> str:
    # "章  ：  标题" -> "标题"; keep going until nothing changes.
    while True:
        stripped = rest.lstrip(_TITLE_SPACE_CHARS)
        if stripped.startswith(_TITLE_COLONS):
            stripped = stripped[1:]
        if stripped == rest:
            return rest
        rest = stripped


def normalize_chapter_title_spacing(line: str) -> str:
    """Put exactly one ASCII space between the chapter marker and the title text.

    "第三章  标题" -> "第三章 标题"
    "第三章：标题" -> "第三章 标题"
    "第三章"       -> "第三章"
    """

    parts = split_chapter_title_prefix(line)
    if parts is None:
        return line
    prefix, rest = parts
    rest = _strip_title_separator(rest)
    if not rest:
        return prefix
    return f"{prefix} {rest}"


def _ensure_trailing_blank_lines(out_lines: list[str], wanted: int) -> None:
    count = 0
    for line in reversed(out_lines):
        if line != "":
            break
        count += 1

    if count > wanted:
        del out_lines[len(out_lines) - (count - wanted) :]
    elif count < wanted:
        out_lines.extend([""] * (wanted - count))


def format_chapter_titles(text: str, config: FormatConfig | None = None) -> str:
    """Normalize title spacing and the blank lines around every chapter title.

    A title that opens the document gets no blank lines before it; any other
    title, including one that follows preface text, gets
    ``blank_lines_before_title``. Each title is followed by
    ``blank_lines_after_title`` blank lines. Trailing blank lines are dropped.
    """

    cfg = config or FormatConfig()
    out_lines: list[str] = []
    seen_content = False

    for line in split_lines(text):
        if not is_chapter_title(line):
            out_lines.append(line)
            seen_content = seen_content or line != ""
            continue

        _ensure_trailing_blank_lines(out_lines, cfg.blank_lines_before_title if seen_content else 0)
        out_lines.append(normalize_chapter_title_spacing(line))
        _ensure_trailing_blank_lines(out_lines, cfg.blank_lines_after_title)
        seen_content = True

    while out_lines and out_lines[-1] == "":
        out_lines.pop()

    return "\n".join(out_lines)


@dataclass
class ChapterBlock:
    """A run of consecutive lines: a chapter (title first) or the text before the first title."""

    start: int
    lines: list[str]
    is_chapter: bool

    @property
    def title(self) -> str | None:
        return self.lines[0] if self.is_chapter and self.lines else None


def iter_chapter_blocks(lines: Iterable[str]) -> Iterator[ChapterBlock]:
    """Group lines into chapters without building a document tree.

    ``start`` is the 0-based index of the block's first line.
    """

    current: ChapterBlock | None = None
    for i, line in enumerate(lines):
        if is_chapter_title(line):
            if current is not None:
                yield current
            current = ChapterBlock(start=i, lines=[line], is_chapter=True)
        elif current is None:
            current = ChapterBlock(start=i, lines=[line], is_chapter=False)
        else:
            current.lines.append(line)

    if current is not None:
        yield current
