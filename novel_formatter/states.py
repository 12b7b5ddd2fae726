from __future__ import annotations

from enum import StrEnum


class IssueKind(StrEnum):
    INVALID_ENDING = "invalid_ending"
    INVALID_START = "invalid_start"
    EXTRA_CLOSE = "extra_close"
    MISMATCH = "mismatch"
    UNCLOSED = "unclosed"


class LineKind(StrEnum):
    TITLE = "title"
    BODY = "body"
