from __future__ import annotations

from dataclasses import dataclass

from novel_formatter.codepoints import FULLWIDTH_SPACE
from novel_formatter.env import env_bool, env_int

_ENV_PREFIX = "NOVEL_FORMATTER_"


@dataclass(frozen=True)
class FormatConfig:
    # Prefixed to every paragraph that is not a chapter title.
    paragraph_indent: str = FULLWIDTH_SPACE * 2

    # Chapter title spacing
    format_chapter_titles: bool = True
    blank_lines_before_title: int = 2
    blank_lines_after_title: int = 1

    # Quote rules
    replace_curly_quotes: bool = True
    normalize_quote_levels: bool = True
    move_trailing_open_quotes: bool = True

    # Checks (reported, never fatal except invalid UTF-8 inside a chapter).
    check_quote_pairing: bool = True
    check_paragraph_punctuation: bool = True


def format_config_from_env() -> FormatConfig:
    d = FormatConfig()
    return FormatConfig(
        format_chapter_titles=env_bool(_ENV_PREFIX + "FORMAT_CHAPTER_TITLES", d.format_chapter_titles),
        blank_lines_before_title=max(0, env_int(_ENV_PREFIX + "BLANK_LINES_BEFORE_TITLE", d.blank_lines_before_title)),
        blank_lines_after_title=max(0, env_int(_ENV_PREFIX + "BLANK_LINES_AFTER_TITLE", d.blank_lines_after_title)),
        replace_curly_quotes=env_bool(_ENV_PREFIX + "REPLACE_CURLY_QUOTES", d.replace_curly_quotes),
        normalize_quote_levels=env_bool(_ENV_PREFIX + "NORMALIZE_QUOTE_LEVELS", d.normalize_quote_levels),
        move_trailing_open_quotes=env_bool(_ENV_PREFIX + "MOVE_TRAILING_OPEN_QUOTES", d.move_trailing_open_quotes),
        check_quote_pairing=env_bool(_ENV_PREFIX + "CHECK_QUOTE_PAIRING", d.check_quote_pairing),
        check_paragraph_punctuation=env_bool(
            _ENV_PREFIX + "CHECK_PARAGRAPH_PUNCTUATION", d.check_paragraph_punctuation
        ),
    )
