from __future__ import annotations

from pathlib import Path

from novel_formatter.paths import backup_if_absent, backup_original_path, log_path_for_output, write_bytes_atomic


def test_backup_original_path() -> None:
    assert backup_original_path(Path("dir/novel.txt")) == Path("dir/original_novel.txt")
    assert backup_original_path(Path("dir/novel.md")) == Path("dir/original_novel.txt")
    assert backup_original_path(Path("novel")) == Path("original_novel.txt")


def test_log_path_sits_next_to_output() -> None:
    assert log_path_for_output(Path("dir/sub/novel.txt")) == Path("dir/sub/log")
    assert log_path_for_output(Path("novel.txt")) == Path("log")


def test_write_bytes_atomic_leaves_no_temp_files(tmp_path: Path) -> None:
    target = tmp_path / "out" / "a.txt"
    write_bytes_atomic(target, b"one")
    write_bytes_atomic(target, b"two")
    assert target.read_bytes() == b"two"
    assert [p.name for p in target.parent.iterdir()] == ["a.txt"]


def test_backup_if_absent_keeps_first_copy(tmp_path: Path) -> None:
    src = tmp_path / "book.txt"
    assert backup_if_absent(src, b"first") == tmp_path / "original_book.txt"
    assert backup_if_absent(src, b"second") is None
    assert (tmp_path / "original_book.txt").read_bytes() == b"first"
