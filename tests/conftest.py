"""Shared pytest fixtures for all tests."""

from pathlib import Path

import pytest

from colhist.core.config import get_settings
from colhist.core.logging import configure_logging

# Values whose 3-bin histogram is [5, 3, 2] with labels [0.5, 1.5, 2.5]
SAMPLE_VALUES = [2.0, 1.0, 2.0, 3.0, 3.0, 2.0, 0.0, 1.0, 1.0, 1.0]


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """Run every test with default settings and freshly configured logging.

    COLHIST_* variables from the developer's environment (or a .env file in
    the working directory) must not leak into tests, and loggers must not keep
    writing to a stream captured by an earlier CLI invocation.
    """
    import os

    for key in list(os.environ):
        if key.startswith("COLHIST_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    configure_logging(log_level="WARNING", show_timestamps=False, color=False)
    yield
    get_settings.cache_clear()


@pytest.fixture
def sample_values() -> list[float]:
    return list(SAMPLE_VALUES)


@pytest.fixture
def sample_csv(tmp_path: Path) -> Path:
    """CSV with an id column and the sample values in column 1."""
    path = tmp_path / "sample.csv"
    lines = ["id,value"] + [f"{i},{v}" for i, v in enumerate(SAMPLE_VALUES)]
    path.write_text("\n".join(lines) + "\n")
    return path


@pytest.fixture
def write_csv(tmp_path: Path):
    """Factory writing the given text to a file under tmp_path."""

    def _write(text: str | bytes, name: str = "data.csv") -> Path:
        path = tmp_path / name
        if isinstance(text, bytes):
            path.write_bytes(text)
        else:
            path.write_text(text)
        return path

    return _write
