"""
Spawn one external process and capture its output under a wall‑clock bound.

Both output pipes are drained by their own thread, and both threads are
started before the runner blocks on the process.  Reading the streams one
after the other deadlocks as soon as the child fills the pipe buffer of the
stream that is not being read.

On timeout the child's whole process group is killed.  Drain threads that
are still blocked afterwards (a grandchild may hold the pipe open) are
abandoned; they are daemon threads and never delay interpreter exit.
"""

from __future__ import annotations

import logging
import os
import signal
import subprocess
import threading
import time
from dataclasses import dataclass
from typing import IO, List, Optional, Sequence

from ..errors import InvalidInputError, ToolchainUnavailableError

logger = logging.getLogger(__name__)

# Time given to the drains to collect what a killed process left in its pipes.
KILL_GRACE_SECONDS = 0.5

_READ_CHUNK = 65536


@dataclass(frozen=True)
class ProcessOutcome:
    """Captured result of one process.

    Attributes
    ----------
    stdout: str
        Everything read from standard output.  Partial if timed out.
    stderr: str
        Everything read from standard error.  Partial if timed out.
    timed_out: bool
        ``True`` if the process was killed for exceeding the timeout.
    duration_ms: int
        Wall‑clock time from spawn to completion or kill.
    """

    stdout: str
    stderr: str
    timed_out: bool = False
    duration_ms: int = 0


class StreamDrain(threading.Thread):
    """Read a binary stream to EOF into memory on a background thread."""

    def __init__(self, stream: IO[bytes], name: str) -> None:
        super().__init__(name=name, daemon=True)
        self._stream = stream
        self._chunks: List[bytes] = []

    def run(self) -> None:
        try:
            while True:
                chunk = self._stream.read1(_READ_CHUNK)
                if not chunk:
                    break
                self._chunks.append(chunk)
        except (OSError, ValueError):
            # The pipe was closed underneath us after a kill.
            logger.debug("%s stopped early", self.name, exc_info=True)
        finally:
            try:
                self._stream.close()
            except OSError:
                pass

    def content(self) -> str:
        return b"".join(list(self._chunks)).decode("utf-8", errors="replace")


def _feed_stdin(stream: IO[bytes], data: bytes) -> None:
    try:
        stream.write(data)
        stream.flush()
    except BrokenPipeError:
        logger.debug("Child exited before reading all of stdin")
    except (OSError, ValueError):
        logger.debug("Writing stdin failed", exc_info=True)
    finally:
        try:
            stream.close()
        except OSError:
            pass


class ProcessRunner:
    """Run external commands with concurrent stream draining and a hard timeout."""

    def __init__(self, kill_grace: float = KILL_GRACE_SECONDS) -> None:
        self.kill_grace = kill_grace

    def run(
        self,
        command: str,
        args: Sequence[str] = (),
        stdin: Optional[str] = None,
        timeout: float = 30,
    ) -> ProcessOutcome:
        """Run ``command`` with ``args`` and return what it printed.

        Parameters
        ----------
        command: str
            Executable, resolved through ``PATH`` unless it is a path.
        args: sequence of str
            Arguments after the executable.  May be empty.
        stdin: str, optional
            Data for standard input.  ``None`` and ``""`` both mean the
            child gets no input at all.
        timeout: float
            Wall‑clock bound in seconds.

        Raises
        ------
        InvalidInputError
            If ``stdin`` cannot be encoded as UTF-8.  Nothing is spawned.
        ToolchainUnavailableError
            If the executable cannot be launched.
        """
        argv = [command, *args]
        payload = b""
        if stdin:
            try:
                payload = stdin.encode("utf-8")
            except UnicodeEncodeError as exc:
                raise InvalidInputError(f"Input is not valid UTF-8 text: {exc.reason}") from exc
        start_time = time.perf_counter()
        deadline = start_time + timeout

        try:
            process = subprocess.Popen(
                argv,
                stdin=subprocess.PIPE if payload else subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                start_new_session=(os.name == "posix"),
            )
        except OSError as exc:
            logger.warning("Unable to launch %s: %s", command, exc)
            raise ToolchainUnavailableError(command, exc.strerror or str(exc)) from exc

        logger.debug("Spawned pid=%s: %s", process.pid, argv)

        try:
            return self._supervise(process, payload, timeout, start_time, deadline)
        except BaseException:
            logger.exception("Supervising pid=%s failed; killing", process.pid)
            self._kill(process)
            raise

    def _supervise(
        self,
        process: subprocess.Popen,
        payload: bytes,
        timeout: float,
        start_time: float,
        deadline: float,
    ) -> ProcessOutcome:
        stdout_drain = StreamDrain(process.stdout, name=f"drain-stdout-{process.pid}")
        stderr_drain = StreamDrain(process.stderr, name=f"drain-stderr-{process.pid}")
        stdout_drain.start()
        stderr_drain.start()

        if payload:
            writer = threading.Thread(
                target=_feed_stdin,
                args=(process.stdin, payload),
                name=f"feed-stdin-{process.pid}",
                daemon=True,
            )
            writer.start()

        timed_out = False
        try:
            process.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            timed_out = True

        if not timed_out:
            for drain in (stdout_drain, stderr_drain):
                # Never less than the grace period, even right at the deadline.
                drain.join(max(deadline - time.perf_counter(), self.kill_grace))
            if stdout_drain.is_alive() or stderr_drain.is_alive():
                # Exited, but something it spawned still holds a pipe open.
                timed_out = True

        if timed_out:
            logger.warning("pid=%s exceeded %ss; killing", process.pid, timeout)
            self._kill(process)
            for drain in (stdout_drain, stderr_drain):
                drain.join(self.kill_grace)

        duration = int((time.perf_counter() - start_time) * 1000)
        return ProcessOutcome(
            stdout=stdout_drain.content(),
            stderr=stderr_drain.content(),
            timed_out=timed_out,
            duration_ms=duration,
        )

    @staticmethod
    def _kill(process: subprocess.Popen) -> None:
        if os.name == "posix":
            try:
                # start_new_session makes the child its own group leader.
                os.killpg(process.pid, signal.SIGKILL)
            except ProcessLookupError:
                pass
            except PermissionError:
                process.kill()
        else:
            process.kill()
        process.wait()
