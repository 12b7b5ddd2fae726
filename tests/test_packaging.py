from __future__ import annotations

import tomllib
from pathlib import Path

PYPROJECT = Path(__file__).resolve().parents[1] / "pyproject.toml"


def test_project_metadata() -> None:
    project = tomllib.loads(PYPROJECT.read_text(encoding="utf-8"))["project"]
    assert project["name"] == "novel-formatter"
    # No long description file is shipped with the package.
    assert "readme" not in project
    assert project["scripts"]["novel-formatter"] == "novel_formatter.cli:main"
