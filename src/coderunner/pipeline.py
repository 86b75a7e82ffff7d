"""
Compile‑and‑run pipeline.

One call to :meth:`ExecutionPipeline.execute` takes a submission through

    Created -> [Compiling -> Compiled] -> Running -> Completed | TimedOut | RuntimeError

and always ends with the job's files removed.  Compile failures, timeouts
and missing toolchains are returned as results with an
:class:`ExecutionStatus`; only rejected submissions, file system faults and
genuinely unexpected errors are raised.

Any output on the compiler's stderr counts as a failed build, so code that
only produces warnings is rejected as well.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .config import Config
from .errors import InvalidInputError, ToolchainUnavailableError
from .executor import ProcessOutcome, ProcessRunner
from .languages import CommandSet, LanguageRegistry
from .models import SubmissionRequest
from .storage import JobFileManager

logger = logging.getLogger(__name__)

VERSION_PLACEHOLDER = "Could not retrieve version info."


class ExecutionStatus(str, Enum):
    COMPLETED = "completed"
    RUNTIME_ERROR = "runtime_error"
    COMPILE_ERROR = "compile_error"
    TIMEOUT = "timeout"
    TOOLCHAIN_UNAVAILABLE = "toolchain_unavailable"


@dataclass(frozen=True)
class ExecutionResult:
    output: str
    error: str
    language: str
    info: str
    status: ExecutionStatus

    @property
    def timed_out(self) -> bool:
        return self.status is ExecutionStatus.TIMEOUT


def timeout_notice(seconds: float) -> str:
    return f"Execution timed out after {seconds} seconds."


class ExecutionPipeline:
    """Validate, write, compile, run, look up the version and clean up one submission."""

    def __init__(
        self,
        config: Config,
        registry: Optional[LanguageRegistry] = None,
        files: Optional[JobFileManager] = None,
        runner: Optional[ProcessRunner] = None,
    ) -> None:
        self.config = config
        self.registry = registry or LanguageRegistry(config)
        self.files = files or JobFileManager(config)
        self.runner = runner or ProcessRunner()

    def execute(self, request: SubmissionRequest) -> ExecutionResult:
        """Run one submission end to end.

        Raises
        ------
        InvalidInputError
            If the code is empty or only whitespace, or the code or input
            is not encodable as UTF-8.
        UnsupportedLanguageError
            If the language is not registered.
        FileSystemError
            If the source file cannot be written.
        """
        language = request.language
        if not request.code or not request.code.strip():
            raise InvalidInputError("No code found to execute.")
        _require_utf8(request.code, "Code")
        _require_utf8(request.input, "Input")
        variant = self.registry.variant(language)

        with self.files.job(language, request.code, variant.artifact_extension) as job:
            commands = self.registry.resolve(language, job.job_id)
            logger.info("Job %s: %s created", job.job_id, language)

            if commands.compile_command is not None:
                logger.debug("Job %s: compiling", job.job_id)
                failed = self._compile(job.job_id, language, commands)
                if failed is not None:
                    logger.info("Job %s: %s", job.job_id, failed.status.value)
                    return failed

            logger.debug("Job %s: running", job.job_id)
            result = self._run(job.job_id, language, commands, request.input)
            logger.info("Job %s: %s", job.job_id, result.status.value)
            return result

    def probe_version(self, commands: CommandSet) -> str:
        """Return the toolchain's version banner, or a placeholder on any failure."""
        command, *args = commands.version_command
        try:
            outcome = self.runner.run(command, args, timeout=self.config.version_timeout_seconds)
        except ToolchainUnavailableError:
            return VERSION_PLACEHOLDER
        if outcome.timed_out:
            return VERSION_PLACEHOLDER
        return outcome.stdout or outcome.stderr

    def _compile(self, job_id: str, language: str, commands: CommandSet) -> Optional[ExecutionResult]:
        """Build the artifact; return a result only if the build did not succeed."""
        timeout = self.config.max_execution_seconds
        try:
            outcome = self.runner.run(commands.compile_command, commands.compile_args, timeout=timeout)
        except ToolchainUnavailableError as exc:
            return self._unavailable(language, commands, exc)
        logger.info("Job %s: compile finished, duration_ms=%s", job_id, outcome.duration_ms)

        if outcome.timed_out:
            return ExecutionResult(
                output="",
                error=_append(outcome.stderr, timeout_notice(timeout)),
                language=language,
                info=self.probe_version(commands),
                status=ExecutionStatus.TIMEOUT,
            )
        if outcome.stderr:
            return ExecutionResult(
                output="",
                error=outcome.stderr,
                language=language,
                info=self.probe_version(commands),
                status=ExecutionStatus.COMPILE_ERROR,
            )
        return None

    def _run(
        self, job_id: str, language: str, commands: CommandSet, stdin: Optional[str]
    ) -> ExecutionResult:
        timeout = self.config.max_execution_seconds
        try:
            outcome = self.runner.run(
                commands.execute_command, commands.execute_args, stdin=stdin, timeout=timeout
            )
        except ToolchainUnavailableError as exc:
            return self._unavailable(language, commands, exc)
        logger.info(
            "Job %s: execution finished, timed_out=%s, duration_ms=%s",
            job_id,
            outcome.timed_out,
            outcome.duration_ms,
        )

        return ExecutionResult(
            output=outcome.stdout,
            error=_append(outcome.stderr, timeout_notice(timeout)) if outcome.timed_out else outcome.stderr,
            language=language,
            info=self.probe_version(commands),
            status=_status_for(outcome),
        )

    def _unavailable(
        self, language: str, commands: CommandSet, exc: ToolchainUnavailableError
    ) -> ExecutionResult:
        return ExecutionResult(
            output="",
            error=str(exc),
            language=language,
            info=self.probe_version(commands),
            status=ExecutionStatus.TOOLCHAIN_UNAVAILABLE,
        )


def _status_for(outcome: ProcessOutcome) -> ExecutionStatus:
    if outcome.timed_out:
        return ExecutionStatus.TIMEOUT
    if outcome.stderr:
        return ExecutionStatus.RUNTIME_ERROR
    return ExecutionStatus.COMPLETED


def _append(stderr: str, notice: str) -> str:
    if not stderr:
        return notice
    return stderr.rstrip("\n") + "\n" + notice


def _require_utf8(value: Optional[str], field: str) -> None:
    if not value:
        return
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise InvalidInputError(f"{field} is not valid UTF-8 text: {exc.reason}") from exc
