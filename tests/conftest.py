from __future__ import annotations

import sys
from pathlib import Path

# Ensure the repo root (containing `novel_formatter/`) is importable when pytest
# picks `tests/` as the rootdir (e.g., single-file runs).
REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))


def pytest_addoption(parser):  # noqa: ANN001
    parser.addoption(
        "--update-golden",
        action="store_true",
        default=False,
        help="Update golden output files instead of asserting.",
    )


def should_update_golden(pytestconfig) -> bool:  # noqa: ANN001
    return bool(pytestconfig.getoption("--update-golden"))
