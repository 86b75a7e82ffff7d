"""Per‑job file lifecycle.

Every submission gets one source file named after a fresh job id, and
compiled languages get one artifact next to it in the output directory.
Both are ephemeral working storage: :meth:`JobFileManager.job` wraps the
whole pipeline so the files are removed on every exit path.

Removal is best effort.  A file that is already gone is fine, and any other
failure is logged rather than raised so that cleanup can never replace the
result of the job it belongs to.
"""

from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

from .config import Config
from .errors import FileSystemError, InvalidInputError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JobDescriptor:
    job_id: str
    language: str
    source_path: Path
    artifact_path: Optional[Path] = None


class JobFileManager:
    """Create and remove the files belonging to a job on the local filesystem."""

    def __init__(self, config: Config) -> None:
        self.config = config
        self.source_dir = Path(config.source_dir)
        self.output_dir = Path(config.output_dir)

    def _source_path(self, job_id: str, language: str) -> Path:
        return self.config.source_path(job_id, language)

    def _artifact_path(self, job_id: str, artifact_extension: str) -> Path:
        return self.config.artifact_path(job_id, artifact_extension)

    def create(
        self,
        language: str,
        code: str,
        artifact_extension: Optional[str] = None,
    ) -> JobDescriptor:
        """Write ``code`` to a new source file and describe the job.

        Raises
        ------
        InvalidInputError
            If ``code`` cannot be encoded as UTF-8 (lone surrogates).
        FileSystemError
            If the directories cannot be created or the file cannot be
            written.
        """
        try:
            data = code.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise InvalidInputError(f"Code is not valid UTF-8 text: {exc.reason}") from exc

        job_id = str(uuid.uuid4())
        source_path = self._source_path(job_id, language)
        try:
            self.source_dir.mkdir(parents=True, exist_ok=True)
            self.output_dir.mkdir(parents=True, exist_ok=True)
            source_path.write_bytes(data)
        except OSError as exc:
            self._remove(source_path)
            raise FileSystemError(f"Could not write source file {source_path}: {exc}") from exc

        artifact_path = None
        if artifact_extension:
            artifact_path = self._artifact_path(job_id, artifact_extension)

        logger.debug("Created job %s at %s", job_id, source_path)
        return JobDescriptor(
            job_id=job_id,
            language=language,
            source_path=source_path,
            artifact_path=artifact_path,
        )

    def cleanup(
        self,
        job_id: str,
        language: str,
        artifact_extension: Optional[str] = None,
    ) -> None:
        """Remove the job's source file and, if any, its artifact. Never raises."""
        self._remove(self._source_path(job_id, language))
        if artifact_extension and artifact_extension.strip():
            self._remove(self._artifact_path(job_id, artifact_extension))

    @contextmanager
    def job(
        self,
        language: str,
        code: str,
        artifact_extension: Optional[str] = None,
    ) -> Iterator[JobDescriptor]:
        """Create a job and guarantee its files are gone when the block exits."""
        descriptor = self.create(language, code, artifact_extension)
        try:
            yield descriptor
        finally:
            self.cleanup(descriptor.job_id, language, artifact_extension)

    @staticmethod
    def _remove(path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError:
            logger.warning("Failed to delete job file %s", path, exc_info=True)
