"""Code runner package.

This package compiles and runs short source snippets with the toolchains
installed on the host and returns their captured output.  It supports
Java, C++, Python and C, and is meant to sit behind a small HTTP API.

The top‑level modules include:

* ``config`` – configuration handling for environment variables.
* ``errors`` – exceptions raised by the engine.
* ``languages`` – the language registry and per‑job command sets.
* ``storage`` – creation and guaranteed removal of per‑job files.
* ``executor`` – the process runner with concurrent stream draining.
* ``pipeline`` – the compile‑and‑run pipeline tying the above together.
* ``models`` – Pydantic models defining request and response schemas.
* ``api`` – FastAPI application exposing HTTP endpoints.

The engine modules are importable without the API; ``api`` reads the
environment at import time and is therefore not imported here.
"""

from .config import Config
from .errors import (
    CodeRunnerError,
    FileSystemError,
    InvalidInputError,
    ToolchainUnavailableError,
    UnsupportedLanguageError,
)
from .pipeline import ExecutionPipeline, ExecutionResult, ExecutionStatus

__all__ = [
    "Config",
    "CodeRunnerError",
    "FileSystemError",
    "InvalidInputError",
    "ToolchainUnavailableError",
    "UnsupportedLanguageError",
    "ExecutionPipeline",
    "ExecutionResult",
    "ExecutionStatus",
]
