"""Exceptions raised by the execution engine.

Only rejections and infrastructure faults are exceptions.  Compile failures
and timeouts are ordinary outcomes and are reported through
:class:`coderunner.pipeline.ExecutionStatus` instead.
"""

from __future__ import annotations

from typing import Sequence


class CodeRunnerError(Exception):
    """Base class for all engine errors."""


class InvalidInputError(CodeRunnerError):
    """The submission has no code, or text that cannot be encoded as UTF-8."""


class UnsupportedLanguageError(CodeRunnerError):
    def __init__(self, language: str, supported: Sequence[str] = ()) -> None:
        message = f"Language not supported: {language}"
        if supported:
            message = f"{message} (supported: {', '.join(supported)})"
        super().__init__(message)
        self.language = language
        self.supported = list(supported)


class ToolchainUnavailableError(CodeRunnerError):
    """The compiler or interpreter executable could not be launched."""

    def __init__(self, command: str, reason: str = "") -> None:
        message = f"Toolchain unavailable: {command}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.command = command


class FileSystemError(CodeRunnerError):
    """Writing a job's source file failed."""
