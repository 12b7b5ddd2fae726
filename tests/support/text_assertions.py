from __future__ import annotations

from novel_formatter.codepoints import UTF8_BOM
from novel_formatter.formatting.chapters import is_chapter_title
from novel_formatter.formatting.config import FormatConfig


def assert_common_text_invariants(text: str) -> None:
    # Newlines normalized
    assert "\r" not in text
    assert UTF8_BOM not in text
    assert not text.endswith("\n"), "output must not end with a newline"
    # Curly quotes are always folded onto corner quotes
    for ch in "‘’“”":
        assert ch not in text


def assert_no_trailing_spaces(text: str) -> None:
    for i, line in enumerate(text.split("\n"), start=1):
        if line.endswith((" ", "\t", "　")):
            raise AssertionError(f"line {i} has trailing whitespace")


def assert_title_spacing(text: str, fmt: FormatConfig) -> None:
    lines = text.split("\n")
    for i, line in enumerate(lines):
        if not is_chapter_title(line):
            continue

        before = 0
        j = i - 1
        while j >= 0 and lines[j] == "":
            before += 1
            j -= 1
        # A title that opens the document has nothing above it.
        wanted = fmt.blank_lines_before_title if j >= 0 else 0
        if before != wanted:
            raise AssertionError(f"line {i + 1} title has {before} blank lines before it, want {wanted}: {line!r}")


def assert_paragraph_indent_rules(text: str, fmt: FormatConfig) -> None:
    if not fmt.paragraph_indent:
        return

    for i, line in enumerate(text.split("\n"), start=1):
        if line == "" or is_chapter_title(line):
            continue
        if not line.startswith(fmt.paragraph_indent):
            raise AssertionError(f"line {i} must start with paragraph indent: {line!r}")
