"""Shared fixtures for the code runner tests."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pytest

from coderunner.config import Config
from coderunner.errors import ToolchainUnavailableError
from coderunner.executor import ProcessOutcome


def requires(*tools: str):
    """Skip a test unless every executable in ``tools`` is on PATH."""
    missing = [tool for tool in tools if shutil.which(tool) is None]
    return pytest.mark.skipif(bool(missing), reason=f"not installed: {', '.join(missing)}")


def job_files(config: Config) -> List[Path]:
    found: List[Path] = []
    for directory in (config.source_dir, config.output_dir):
        if directory.exists():
            found.extend(directory.iterdir())
    return found


@pytest.fixture
def config(tmp_path) -> Config:
    return Config(
        source_dir=tmp_path / "codes",
        output_dir=tmp_path / "outputs",
        max_execution_seconds=10,
        version_timeout_seconds=5,
    )


class FakeRunner:
    """Stand‑in for ProcessRunner returning canned outcomes by executable name.

    A value in ``outcomes`` may be a :class:`ProcessOutcome` or an exception
    instance to raise.  Executables without an entry behave as missing.
    Compiled artifacts are matched by their ``.out`` suffix under the key
    ``"artifact"``.
    """

    def __init__(self, outcomes: Dict[str, object]) -> None:
        self.outcomes = outcomes
        self.calls: List[tuple] = []

    def run(
        self,
        command: str,
        args: Sequence[str] = (),
        stdin: Optional[str] = None,
        timeout: float = 30,
    ) -> ProcessOutcome:
        self.calls.append((command, tuple(args), stdin, timeout))
        key = "artifact" if command.endswith(".out") else command
        outcome = self.outcomes.get(key)
        if outcome is None:
            raise ToolchainUnavailableError(command, "No such file or directory")
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def commands(self) -> List[str]:
        return [call[0] for call in self.calls]
