from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from novel_formatter.errors import InvalidUtf8Error
from novel_formatter.formatting.config import FormatConfig, format_config_from_env
from novel_formatter.formatting.fixer import FormatResult, encode_output, format_bytes
from novel_formatter.logging_setup import configure_console_logging, ensure_file_logging, log_dir_from_env
from novel_formatter.paths import backup_if_absent, log_path_for_output, write_bytes_atomic
from novel_formatter.report import render_issue_log

logger = logging.getLogger(__name__)

_DESCRIPTION = """\
Rewrite a plain-text novel in place: one paragraph per line, normalized
punctuation and whitespace, spaced chapter titles and nested dialogue quotes.
"""

_EPILOG = """\
Output:
  - Writes a backup of the original input as original_<input>.txt (only if not exists)
  - Writes formatted output to <input> (overwritten)
  - Writes a log next to the output (overwritten each run)
"""


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="novel-formatter",
        description=_DESCRIPTION,
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("input", nargs="?", help="UTF-8 text file to format in place")
    return parser


def _report(result: FormatResult, log_path: Path) -> None:
    write_bytes_atomic(log_path, render_issue_log(result.quote_issues, result.paragraph_issues).encode("utf-8"))
    if result.quote_issues:
        print(f"Quote issues detected; see log at: {log_path}", file=sys.stderr)
    if result.paragraph_issues:
        print(f"Paragraph issues detected; see log at: {log_path}", file=sys.stderr)


def format_file(input_path: Path, config: FormatConfig | None = None) -> int:
    """Format ``input_path`` in place. Returns the process exit code."""

    try:
        data = input_path.read_bytes()
    except OSError as e:
        print(f"Cannot read {input_path}: {e}", file=sys.stderr)
        return 1

    try:
        result = format_bytes(data, config)
    except InvalidUtf8Error as e:
        logger.error("aborting %s: %s", input_path, e)
        for line in e.diagnostic_lines():
            print(line, file=sys.stderr)
        return 2

    backup_if_absent(input_path, data)
    write_bytes_atomic(input_path, encode_output(result.text))
    logger.info("wrote formatted output: %s", input_path)

    log_path = log_path_for_output(input_path)
    _report(result, log_path)
    logger.info("wrote issue log: %s", log_path)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)

    if not args.input:
        parser.print_help()
        return 0

    configure_console_logging()
    log_dir = log_dir_from_env()
    if log_dir is not None:
        ensure_file_logging(log_dir=log_dir)

    return format_file(Path(args.input), format_config_from_env())


if __name__ == "__main__":
    raise SystemExit(main())
