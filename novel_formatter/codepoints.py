from __future__ import annotations

FULLWIDTH_SPACE = "\u3000"
UTF8_BOM = "\ufeff"

# Dialogue quotes.
QUOTE_OPEN = "\u300c"  # 「
QUOTE_CLOSE = "\u300d"  # 」
QUOTE_OPEN_NESTED = "\u300e"  # 『
QUOTE_CLOSE_NESTED = "\u300f"  # 』

OPENING_QUOTES = frozenset({QUOTE_OPEN, QUOTE_OPEN_NESTED})
CLOSING_QUOTES = frozenset({QUOTE_CLOSE, QUOTE_CLOSE_NESTED})

_INDENT_CHARS = frozenset({" ", "\t", FULLWIDTH_SPACE})
_TRIM_CHARS = " \t\n\r\x0b\x0c" + FULLWIDTH_SPACE


def is_indent_char(ch: str) -> bool:
    return ch in _INDENT_CHARS


def consume_indent(line: str, pos: int = 0) -> int:
    """Return the index just past the run of spaces/tabs/U+3000 starting at ``pos``."""

    i = pos
    n = len(line)
    while i < n and line[i] in _INDENT_CHARS:
        i += 1
    return i


def split_indent(line: str) -> tuple[str, str]:
    end = consume_indent(line)
    return line[:end], line[end:]


def is_only_indent(line: str) -> bool:
    return consume_indent(line) == len(line)


def is_ascii_word(ch: str) -> bool:
    return ch == "_" or ("0" <= ch <= "9") or ("A" <= ch <= "Z") or ("a" <= ch <= "z")


def starts_with_ascii_word(text: str) -> bool:
    return bool(text) and is_ascii_word(text[0])


def ends_with_ascii_word(text: str) -> bool:
    return bool(text) and is_ascii_word(text[-1])


def trim(line: str) -> str:
    return line.strip(_TRIM_CHARS)


def strip_bom(text: str) -> str:
    if text.startswith(UTF8_BOM):
        return text[1:]
    return text


def normalize_newlines(text: str) -> str:
    if "\r" not in text:
        return text
    return text.replace("\r\n", "\n").replace("\r", "\n")


def split_lines(text: str) -> list[str]:
    """Split on LF; a trailing newline does not produce an extra empty line."""

    if not text:
        return []
    lines = text.split("\n")
    if text.endswith("\n"):
        lines.pop()
    return lines
