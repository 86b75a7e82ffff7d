"""Tests for the job file manager."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from conftest import job_files
from coderunner.errors import FileSystemError, InvalidInputError
from coderunner.storage import JobFileManager


def test_create_writes_code_verbatim(config):
    files = JobFileManager(config)
    code = "line one\r\nline two\n\tindented é\n"
    job = files.create("py", code)

    assert job.source_path == config.source_dir / f"{job.job_id}.py"
    assert job.source_path.read_bytes() == code.encode("utf-8")
    assert job.artifact_path is None
    assert job.language == "py"


def test_create_makes_directories_on_first_use(config):
    assert not config.source_dir.exists()
    assert not config.output_dir.exists()
    JobFileManager(config).create("c", "int main(){}", "out")
    assert config.source_dir.is_dir()
    assert config.output_dir.is_dir()


def test_artifact_path_derives_from_job_id(config):
    job = JobFileManager(config).create("cpp", "int main(){}", "out")
    assert job.artifact_path == config.output_dir / f"{job.job_id}.out"


def test_job_ids_are_unique(config):
    files = JobFileManager(config)
    jobs = [files.create("py", "pass") for _ in range(500)]
    assert len({job.job_id for job in jobs}) == 500
    assert len({job.source_path for job in jobs}) == 500


def test_cleanup_removes_source_and_artifact(config):
    files = JobFileManager(config)
    job = files.create("c", "int main(){}", "out")
    job.artifact_path.write_bytes(b"\x7fELF")

    files.cleanup(job.job_id, "c", "out")

    assert not job.source_path.exists()
    assert not job.artifact_path.exists()


def test_cleanup_is_idempotent_and_tolerates_missing_files(config):
    files = JobFileManager(config)
    job = files.create("py", "pass")
    files.cleanup(job.job_id, "py", "out")
    files.cleanup(job.job_id, "py", "out")
    files.cleanup("never-created", "py")
    assert not job.source_path.exists()


def test_cleanup_logs_but_never_raises(config, monkeypatch, caplog):
    files = JobFileManager(config)
    job = files.create("py", "pass")

    def refuse(self, *args, **kwargs):
        raise PermissionError(13, "Permission denied", str(self))

    monkeypatch.setattr(Path, "unlink", refuse)
    with caplog.at_level(logging.WARNING, logger="coderunner"):
        files.cleanup(job.job_id, "py")

    assert "Failed to delete job file" in caplog.text


def test_job_context_cleans_up_on_exception(config):
    files = JobFileManager(config)
    with pytest.raises(RuntimeError):
        with files.job("cpp", "int main(){}", "out") as job:
            job.artifact_path.write_bytes(b"binary")
            raise RuntimeError("boom")

    assert not job.source_path.exists()
    assert not job.artifact_path.exists()


def test_unwritable_source_dir_raises_file_system_error(config):
    config.source_dir.parent.mkdir(parents=True, exist_ok=True)
    # A regular file where the directory should be.
    config.source_dir.write_text("in the way")

    with pytest.raises(FileSystemError):
        JobFileManager(config).create("py", "print(1)")


def test_unencodable_code_leaves_no_file_behind(config):
    files = JobFileManager(config)
    with pytest.raises(InvalidInputError):
        files.create("py", "print('\ud800')")
    with pytest.raises(InvalidInputError):
        with files.job("c", "int main(){ /* \udcff */ }", "out"):
            pass
    assert job_files(config) == []
