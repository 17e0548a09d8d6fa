from __future__ import annotations

import sys
from pathlib import Path

import pytest


def pytest_configure() -> None:
    root = Path(__file__).resolve().parents[1]
    src = root / "src"
    if src.exists():
        sys.path.insert(0, str(src))


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run in an empty directory so no stray default config file is picked up."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def config_file(workdir: Path) -> Path:
    path = workdir / "app.ini"
    path.write_text(
        f"oneInstanceOnly = true\nlockDir = {workdir}\nlogDir = {workdir}\n",
        encoding="utf-8",
    )
    return path
