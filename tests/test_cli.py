from __future__ import annotations

from pathlib import Path

import pytest

import novel_formatter.cli as cli


@pytest.fixture(autouse=True)
def _quiet_env(monkeypatch: pytest.MonkeyPatch) -> None:
    # Keep the root logger free of stderr/file handlers bound to captured streams.
    monkeypatch.setattr(cli, "configure_console_logging", lambda: None)
    monkeypatch.delenv("NOVEL_FORMATTER_LOG_DIR", raising=False)
    monkeypatch.delenv("NOVEL_FORMATTER_CHECK_PARAGRAPH_PUNCTUATION", raising=False)


def _write(path: Path, text: str) -> bytes:
    data = text.encode("utf-8")
    path.write_bytes(data)
    return data


def test_format_file_writes_output_backup_and_empty_log(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    book = tmp_path / "book.txt"
    original = _write(book, "第一章：开始\n\n　　正文。\n")

    assert cli.format_file(book) == 0

    assert book.read_bytes() == "第一章 开始\n\n　　正文。".encode()
    assert (tmp_path / "original_book.txt").read_bytes() == original
    assert (tmp_path / "log").read_bytes() == b""
    assert capsys.readouterr().err == ""


def test_backup_is_written_only_once(tmp_path: Path) -> None:
    book = tmp_path / "book.txt"
    first = _write(book, "第一章\n\n正文。")
    assert cli.format_file(book) == 0

    _write(book, "第一章\n\n改过的正文。")
    assert cli.format_file(book) == 0

    assert (tmp_path / "original_book.txt").read_bytes() == first
    assert book.read_text(encoding="utf-8") == "第一章\n\n　　改过的正文。"


def test_issues_are_logged_and_announced(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    book = tmp_path / "book.txt"
    _write(book, "第一章\n\n　　「没有结尾\n")

    assert cli.format_file(book) == 0

    log_path = tmp_path / "log"
    assert log_path.read_text(encoding="utf-8").split("\n") == [
        "Unpaired/mismatched quotes detected (line numbers are in the output file):",
        "- Chapter at line 1: 第一章",
        "  First issue at line 3 (unclosed): unclosed opening quote(s) by end of chapter",
        "",
        "Paragraph punctuation issues detected (line numbers are in the output file):",
        "- Line 3 (invalid_ending): paragraph ends with invalid punctuation",
    ]
    err = capsys.readouterr().err
    assert f"Quote issues detected; see log at: {log_path}" in err
    assert f"Paragraph issues detected; see log at: {log_path}" in err


def test_invalid_utf8_aborts_without_writing(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    book = tmp_path / "book.txt"
    data = "第一章\n\n".encode() + b"ab\xffcd\n"
    book.write_bytes(data)

    assert cli.format_file(book) == 2

    assert book.read_bytes() == data
    assert not (tmp_path / "original_book.txt").exists()
    assert not (tmp_path / "log").exists()
    err = capsys.readouterr().err.splitlines()
    assert err[0] == "Invalid UTF-8 detected."
    assert "Chapter title: 第一章" in err
    assert "Offending line: body (chapter-local index 3)" in err
    assert "Invalid byte position in that line: 9" in err
    assert err[-1] == "Aborting due to invalid UTF-8."


def test_missing_input_returns_1(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.format_file(tmp_path / "nope.txt") == 1
    assert "Cannot read" in capsys.readouterr().err


def test_main_without_argument_prints_usage(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main([]) == 0
    assert "usage: novel-formatter" in capsys.readouterr().out


def test_main_rejects_extra_arguments() -> None:
    with pytest.raises(SystemExit) as ei:
        cli.main(["a.txt", "b.txt"])
    assert ei.value.code == 2


def test_main_reads_config_from_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NOVEL_FORMATTER_CHECK_PARAGRAPH_PUNCTUATION", "0")
    book = tmp_path / "novel.txt"
    _write(book, "第一章\n\n没有结尾")

    assert cli.main([str(book)]) == 0

    assert book.read_text(encoding="utf-8") == "第一章\n\n　　没有结尾"
    assert (tmp_path / "original_novel.txt").exists()
    assert (tmp_path / "log").read_text(encoding="utf-8") == ""
