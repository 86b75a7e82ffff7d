"""Tests for environment-driven configuration."""

from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

from coderunner.config import Config

ENV_VARS = [
    "CODERUNNER_API_KEY",
    "CODERUNNER_SOURCE_DIR",
    "CODERUNNER_OUTPUT_DIR",
    "CODERUNNER_ALLOWED_LANGS",
    "CODERUNNER_MAX_EXECUTION_SECONDS",
    "CODERUNNER_VERSION_TIMEOUT_SECONDS",
    "CODERUNNER_HOST",
    "PORT",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    config = Config.from_env()
    tmp = Path(tempfile.gettempdir())
    assert config.source_dir == tmp / "codes"
    assert config.output_dir == tmp / "outputs"
    assert config.allowed_langs == ["java", "cpp", "py", "c"]
    assert config.max_execution_seconds == 30
    assert config.version_timeout_seconds == 5
    assert config.api_key == ""
    assert config.port == 8080


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("CODERUNNER_SOURCE_DIR", str(tmp_path / "src"))
    monkeypatch.setenv("CODERUNNER_OUTPUT_DIR", str(tmp_path / "out"))
    monkeypatch.setenv("CODERUNNER_ALLOWED_LANGS", " PY , c ,")
    monkeypatch.setenv("CODERUNNER_MAX_EXECUTION_SECONDS", "7")
    monkeypatch.setenv("CODERUNNER_API_KEY", "secret")
    monkeypatch.setenv("PORT", "9000")

    config = Config.load()

    assert config.source_dir == tmp_path / "src"
    assert config.output_dir == tmp_path / "out"
    assert config.allowed_langs == ["py", "c"]
    assert config.max_execution_seconds == 7
    assert config.api_key == "secret"
    assert config.port == 9000


def test_invalid_integer_names_the_variable(monkeypatch):
    monkeypatch.setenv("CODERUNNER_MAX_EXECUTION_SECONDS", "soon")
    with pytest.raises(ValueError, match="CODERUNNER_MAX_EXECUTION_SECONDS"):
        Config.load()


def test_unknown_language_is_a_config_error(monkeypatch):
    monkeypatch.setenv("CODERUNNER_ALLOWED_LANGS", "py,rb")
    with pytest.raises(ValueError, match="rb"):
        Config.load()


def test_non_positive_timeout_is_rejected(tmp_path):
    with pytest.raises(ValueError):
        Config(source_dir=tmp_path, output_dir=tmp_path, max_execution_seconds=0)


def test_path_helpers(tmp_path):
    config = Config(source_dir=tmp_path / "s", output_dir=tmp_path / "o")
    assert config.source_path("abc", "py") == tmp_path / "s" / "abc.py"
    assert config.artifact_path("abc", "out") == tmp_path / "o" / "abc.out"
