"""Language registry.

Each supported language is described once, as data, by a
:class:`LanguageVariant`.  The registry turns a variant and a job id into a
concrete :class:`CommandSet` of argument vectors.  Compiled languages put
their artifact in the output directory under a name derived only from the
job id, so concurrent jobs never share a path.

Adding a language means adding an enum member and a row to ``VARIANTS``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .config import Config
from .errors import UnsupportedLanguageError


class Language(str, Enum):
    JAVA = "java"
    CPP = "cpp"
    PY = "py"
    C = "c"


@dataclass(frozen=True)
class LanguageVariant:
    """Static description of how one language is built and run.

    The job's source file is always named ``<job_id>.<tag>``.

    Attributes
    ----------
    interpreter: str, optional
        Executable that runs the source file directly.  ``None`` for
        compiled languages, whose artifact is executed instead.
    compiler: str, optional
        Executable that turns the source into an artifact.
    artifact_extension: str, optional
        Extension of the compiled artifact.  Set if and only if
        ``compiler`` is set.
    version_command: tuple of str
        Argument vector printing the toolchain version.
    """

    interpreter: Optional[str] = None
    compiler: Optional[str] = None
    artifact_extension: Optional[str] = None
    version_command: Tuple[str, ...] = ()

    @property
    def compiled(self) -> bool:
        return self.compiler is not None


@dataclass(frozen=True)
class CommandSet:
    """Resolved commands for one language and one job."""

    compile_command: Optional[str]
    compile_args: Tuple[str, ...]
    execute_command: str
    execute_args: Tuple[str, ...]
    artifact_extension: Optional[str]
    version_command: Tuple[str, ...]


VARIANTS: Dict[Language, LanguageVariant] = {
    # Single-file source launcher; no separate javac step.
    Language.JAVA: LanguageVariant(
        interpreter="java",
        version_command=("java", "--version"),
    ),
    Language.CPP: LanguageVariant(
        compiler="g++",
        artifact_extension="out",
        version_command=("g++", "--version"),
    ),
    Language.PY: LanguageVariant(
        interpreter="python3",
        version_command=("python3", "--version"),
    ),
    Language.C: LanguageVariant(
        compiler="gcc",
        artifact_extension="out",
        version_command=("gcc", "--version"),
    ),
}


class LanguageRegistry:
    """Look up command templates by language tag.

    The registry keeps no per‑request state; a single instance is shared by
    every in‑flight job.
    """

    def __init__(self, config: Config) -> None:
        self.config = config
        self._enabled = frozenset(config.allowed_langs)

    def supported(self) -> List[str]:
        return [lang.value for lang in Language if lang.value in self._enabled]

    def _tag(self, language: str) -> Language:
        try:
            tag = Language(language)
        except ValueError:
            raise UnsupportedLanguageError(language, self.supported()) from None
        if tag.value not in self._enabled:
            raise UnsupportedLanguageError(language, self.supported())
        return tag

    def variant(self, language: str) -> LanguageVariant:
        return VARIANTS[self._tag(language)]

    def resolve(self, language: str, job_id: str) -> CommandSet:
        tag = self._tag(language)
        variant = VARIANTS[tag]
        source = str(self.config.source_path(job_id, tag.value))

        if variant.compiled:
            artifact = str(self.config.artifact_path(job_id, variant.artifact_extension))
            return CommandSet(
                compile_command=variant.compiler,
                compile_args=(source, "-o", artifact),
                execute_command=artifact,
                execute_args=(),
                artifact_extension=variant.artifact_extension,
                version_command=variant.version_command,
            )

        return CommandSet(
            compile_command=None,
            compile_args=(),
            execute_command=variant.interpreter,
            execute_args=(source,),
            artifact_extension=None,
            version_command=variant.version_command,
        )
