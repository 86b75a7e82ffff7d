"""Configuration loader.

The code runner reads its configuration from environment variables so the
same image can run under docker‑compose, a plain VM or a developer laptop.
Reasonable defaults are provided so that local development works out of the
box.

Environment variables:

``CODERUNNER_API_KEY``
    Shared secret expected in the ``x‑api‑key`` header.  When empty, the
    HTTP layer skips authentication.

``CODERUNNER_SOURCE_DIR``
    Directory receiving one source file per job.  Defaults to ``codes``
    under the system temporary directory.

``CODERUNNER_OUTPUT_DIR``
    Directory receiving compiled artifacts.  Defaults to ``outputs`` under
    the system temporary directory.

``CODERUNNER_ALLOWED_LANGS``
    Comma‑separated subset of the supported language tags.  Defaults to
    ``java,cpp,py,c``.

``CODERUNNER_MAX_EXECUTION_SECONDS``
    Wall‑clock timeout (in seconds) applied to each compile and each
    execute step.  Default is 30.

``CODERUNNER_VERSION_TIMEOUT_SECONDS``
    Wall‑clock timeout (in seconds) for the toolchain version lookup.
    Default is 5.

``CODERUNNER_HOST`` / ``PORT``
    Address the API server binds to.  Defaults to ``0.0.0.0:8080``.
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

DEFAULT_LANGS = ("java", "cpp", "py", "c")


def _int_var(name: str, default: int) -> int:
    val = os.getenv(name)
    if val is None:
        return default
    try:
        return int(val)
    except ValueError:
        raise ValueError(f"Invalid integer for {name}: {val}")


@dataclass(frozen=True)
class Config:
    """Centralised configuration object.

    Constructed once at start‑up and handed to the registry, the file
    manager and the pipeline.  Nothing in the engine reads the environment
    directly.
    """

    source_dir: Path
    output_dir: Path
    allowed_langs: List[str] = field(default_factory=lambda: list(DEFAULT_LANGS))
    max_execution_seconds: int = 30
    version_timeout_seconds: int = 5
    api_key: str = ""
    host: str = "0.0.0.0"
    port: int = 8080

    def __post_init__(self) -> None:
        unknown = [lang for lang in self.allowed_langs if lang not in DEFAULT_LANGS]
        if unknown:
            raise ValueError(
                f"Unknown language(s) in allowed_langs: {', '.join(unknown)}. "
                f"Supported: {', '.join(DEFAULT_LANGS)}."
            )
        if self.max_execution_seconds <= 0:
            raise ValueError("max_execution_seconds must be positive")
        if self.version_timeout_seconds <= 0:
            raise ValueError("version_timeout_seconds must be positive")

    def source_path(self, job_id: str, extension: str) -> Path:
        return self.source_dir / f"{job_id}.{extension}"

    def artifact_path(self, job_id: str, extension: str) -> Path:
        return self.output_dir / f"{job_id}.{extension}"

    @classmethod
    def load(cls) -> "Config":
        tmp = Path(tempfile.gettempdir())
        source_dir = Path(os.getenv("CODERUNNER_SOURCE_DIR", str(tmp / "codes")))
        output_dir = Path(os.getenv("CODERUNNER_OUTPUT_DIR", str(tmp / "outputs")))

        allowed_langs_env = os.getenv("CODERUNNER_ALLOWED_LANGS", ",".join(DEFAULT_LANGS))
        allowed_langs = [lang.strip().lower() for lang in allowed_langs_env.split(",") if lang.strip()]

        return cls(
            source_dir=source_dir,
            output_dir=output_dir,
            allowed_langs=allowed_langs,
            max_execution_seconds=_int_var("CODERUNNER_MAX_EXECUTION_SECONDS", 30),
            version_timeout_seconds=_int_var("CODERUNNER_VERSION_TIMEOUT_SECONDS", 5),
            # May be empty in local development but should be set in production.
            api_key=os.getenv("CODERUNNER_API_KEY", ""),
            host=os.getenv("CODERUNNER_HOST", "0.0.0.0"),
            port=_int_var("PORT", 8080),
        )

    @classmethod
    def from_env(cls) -> "Config":
        """
        Alternate constructor used by the API to load configuration.

        This wrapper calls :meth:`load` to construct the configuration.
        It exists to provide a more intuitive name when consumed in
        application code.
        """
        return cls.load()
