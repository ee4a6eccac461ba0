"""Shared pytest fixtures for subjectalias tests."""

from __future__ import annotations

from pathlib import Path
import sys

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from subjectalias.environment import HostEnvironment  # noqa: E402
from subjectalias.registry import AliasRegistry  # noqa: E402


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "unit: fast isolated unit tests")


@pytest.fixture
def host() -> HostEnvironment:
    """A small host namespace with a few text and counter primitives."""
    env = HostEnvironment()
    calls: list[tuple[str, tuple]] = []

    def split_text(text: str, separator: str = " ") -> list[str]:
        calls.append(("split-text", (text, separator)))
        return text.split(separator)

    def kill_buffer(name: str) -> bool:
        calls.append(("kill-buffer", (name,)))
        if not name:
            raise ValueError("No buffer named ''")
        return True

    env.define_operation("split-text", split_text)
    env.define_operation("kill-buffer", kill_buffer)
    env.define_operation("expand-file-name", lambda name, directory="/home": f"{directory}/{name}")
    env.define_value("counter", 0)
    env.define_value("case-fold-search", True)
    env.define_value("reserved-internal", "do-not-touch", aliasable=False)
    env.calls = calls  # type: ignore[attr-defined]
    return env


@pytest.fixture
def registry(host: HostEnvironment) -> AliasRegistry:
    return AliasRegistry(host)


@pytest.fixture
def table_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "tables"
    directory.mkdir()
    (directory / "buffers.aliases").write_text(
        "\n".join(
            [
                "# Buffers",
                "operation  buffer-kill   kill-buffer",
                "value      buffer-count  counter  \"Number of live buffers.\"",
            ]
        ),
        encoding="utf-8",
    )
    (directory / "strings.aliases").write_text(
        "operation  string-split  split-text\n",
        encoding="utf-8",
    )
    return directory
