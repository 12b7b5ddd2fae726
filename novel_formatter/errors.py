from __future__ import annotations

from novel_formatter.states import LineKind

PREVIEW_LIMIT = 160
HEX_DUMP_RADIUS = 16


def line_to_bytes(line: str) -> bytes:
    """Recover the raw bytes of a line decoded with ``errors="surrogateescape"``."""

    try:
        return line.encode("utf-8", errors="surrogateescape")
    except UnicodeEncodeError:
        # Lone surrogates that did not come from surrogateescape (e.g. JSON "\ud800").
        return line.encode("utf-8", errors="surrogatepass")


def find_invalid_utf8(line: str) -> int | None:
    """Return the 1-based byte position of the first malformed sequence, or None."""

    try:
        line.encode("utf-8")
        return None
    except UnicodeEncodeError:
        pass
    raw = line_to_bytes(line)
    try:
        raw.decode("utf-8")
    except UnicodeDecodeError as e:
        return e.start + 1
    return None


def printable(text: str) -> str:
    return line_to_bytes(text).decode("utf-8", errors="replace")


def ascii_preview(raw: bytes, limit: int = PREVIEW_LIMIT) -> str:
    out = "".join(chr(b) if 0x20 <= b <= 0x7E else "." for b in raw[:limit])
    if len(raw) > limit:
        out += "..."
    return out


def hex_dump_around(raw: bytes, pos: int, radius: int = HEX_DUMP_RADIUS) -> str:
    start = max(1, pos - radius)
    end = min(len(raw), pos + radius)
    dump = " ".join(f"{b:02X}" for b in raw[start - 1 : end])
    return f"bytes {start}..{end}: {dump}"


class InvalidUtf8Error(ValueError):
    """Malformed UTF-8 inside a chapter. Aborts the whole run."""

    def __init__(self, *, chapter_title: str, line_kind: LineKind, line_index: int, line: str, byte_pos: int) -> None:
        self.chapter_title = chapter_title
        self.line_kind = line_kind
        self.line_index = line_index
        self.byte_pos = byte_pos
        self.raw_line = line_to_bytes(line)
        super().__init__(
            f"invalid UTF-8 in chapter {chapter_title!r} ({line_kind} line {line_index}, byte {byte_pos})"
        )

    @property
    def preview(self) -> str:
        return ascii_preview(self.raw_line)

    @property
    def hex_dump(self) -> str:
        return hex_dump_around(self.raw_line, self.byte_pos)

    def diagnostic_lines(self) -> list[str]:
        return [
            "Invalid UTF-8 detected.",
            f"Chapter title: {printable(self.chapter_title)}",
            f"Offending line: {self.line_kind} (chapter-local index {self.line_index})",
            f"Invalid byte position in that line: {self.byte_pos}",
            f"Line preview (ASCII; non-ASCII shown as '.'): {self.preview}",
            f"Hex dump around invalid byte: {self.hex_dump}",
            "Aborting due to invalid UTF-8.",
        ]
