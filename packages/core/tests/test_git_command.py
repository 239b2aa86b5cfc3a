"""Tests for the git subprocess wrapper (subprocess mocked)."""

import subprocess
import sys
from unittest.mock import MagicMock, patch

import pytest

from prowners_core.errors import GitCommandError
from prowners_core.git.command import GitRepository


def _completed(returncode=0, stdout="", stderr=""):
    return MagicMock(returncode=returncode, stdout=stdout, stderr=stderr)


class TestRun:
    def test_returns_stdout(self, tmp_path):
        repo = GitRepository(tmp_path)
        with patch("subprocess.run", return_value=_completed(stdout="abc\n")) as mock_run:
            assert repo.run("rev-parse", "HEAD") == "abc\n"
        command = mock_run.call_args.args[0]
        assert command == ["git", "rev-parse", "HEAD"]
        assert mock_run.call_args.kwargs["cwd"] == tmp_path

    def test_env_merged_over_process_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PROWNERS_TEST_MARKER", "1")
        repo = GitRepository(tmp_path)
        with patch("subprocess.run", return_value=_completed()) as mock_run:
            repo.run("status", env={"GIT_INDEX_FILE": "/tmp/idx"})
        env = mock_run.call_args.kwargs["env"]
        assert env["GIT_INDEX_FILE"] == "/tmp/idx"
        assert env["PROWNERS_TEST_MARKER"] == "1"

    def test_no_env_inherits_process_environment(self, tmp_path):
        repo = GitRepository(tmp_path)
        with patch("subprocess.run", return_value=_completed()) as mock_run:
            repo.run("status")
        assert mock_run.call_args.kwargs["env"] is None

    def test_nonzero_exit_raises(self, tmp_path):
        repo = GitRepository(tmp_path)
        with patch("subprocess.run", return_value=_completed(returncode=128, stderr="fatal: bad object\n")):
            with pytest.raises(GitCommandError) as exc_info:
                repo.run("read-tree", "nope")
        assert exc_info.value.returncode == 128
        assert "bad object" in str(exc_info.value)

    def test_missing_binary_raises(self, tmp_path):
        repo = GitRepository(tmp_path, git_binary="no-such-git")
        with patch("subprocess.run", side_effect=FileNotFoundError("no-such-git")):
            with pytest.raises(GitCommandError) as exc_info:
                repo.run("status")
        assert exc_info.value.returncode is None

    def test_timeout_raises(self, tmp_path):
        repo = GitRepository(tmp_path, timeout=1)
        with patch("subprocess.run", side_effect=subprocess.TimeoutExpired(cmd="git", timeout=1)):
            with pytest.raises(GitCommandError):
                repo.run("status")

    def test_output_decoded_with_surrogateescape(self, tmp_path):
        repo = GitRepository(tmp_path)
        with patch("subprocess.run", return_value=_completed()) as mock_run:
            repo.run("status")
        assert mock_run.call_args.kwargs["encoding"] == "utf-8"
        assert mock_run.call_args.kwargs["errors"] == "surrogateescape"

    def test_undecodable_bytes_survive(self, tmp_path):
        repo = GitRepository(tmp_path, git_binary=sys.executable)
        output = repo.run("-c", "import sys; sys.stdout.buffer.write(b'j\\xe9r\\xf4me')")
        assert output == "j\udce9r\udcf4me"
        assert output.encode("utf-8", "surrogateescape") == b"j\xe9r\xf4me"

    def test_timeout_passed_through(self, tmp_path):
        repo = GitRepository(tmp_path, timeout=7)
        with patch("subprocess.run", return_value=_completed()) as mock_run:
            repo.run("status")
        assert mock_run.call_args.kwargs["timeout"] == 7


class TestSingleLine:
    def test_first_line(self, tmp_path):
        repo = GitRepository(tmp_path)
        with patch("subprocess.run", return_value=_completed(stdout="one\ntwo\n")):
            assert repo.single_line("log") == "one"

    def test_empty_output_is_none(self, tmp_path):
        repo = GitRepository(tmp_path)
        with patch("subprocess.run", return_value=_completed(stdout="")):
            assert repo.single_line("log") is None


class TestStream:
    """Drives ``stream`` with the Python interpreter standing in for git."""

    def _repo(self, tmp_path, timeout=None):
        return GitRepository(tmp_path, git_binary=sys.executable, timeout=timeout)

    def test_yields_records(self, tmp_path):
        records = self._repo(tmp_path).stream("-c", "import sys; sys.stdout.write('one\\0two\\0')")
        assert list(records) == ["one", "two"]

    def test_undecodable_record_kept(self, tmp_path):
        script = "import sys; sys.stdout.buffer.write(b'a\\xe9.txt\\0z.txt\\0')"
        records = list(self._repo(tmp_path).stream("-c", script))
        assert records == ["a\udce9.txt", "z.txt"]

    def test_large_stderr_does_not_block(self, tmp_path):
        script = "import sys; sys.stderr.write('w' * 500000); sys.stderr.flush(); sys.stdout.write('one\\0')"
        records = list(self._repo(tmp_path).stream("-c", script))
        assert records == ["one"]

    def test_nonzero_exit_reports_stderr(self, tmp_path):
        script = "import sys; sys.stdout.write('one\\0'); sys.stderr.write('fatal: bad revision'); sys.exit(3)"
        with pytest.raises(GitCommandError) as exc_info:
            list(self._repo(tmp_path).stream("-c", script))
        assert exc_info.value.returncode == 3
        assert "bad revision" in str(exc_info.value)

    def test_exit_timeout_raises(self, tmp_path):
        script = "import os, time; os.close(1); time.sleep(30)"
        with pytest.raises(GitCommandError) as exc_info:
            list(self._repo(tmp_path, timeout=0.5).stream("-c", script))
        assert exc_info.value.returncode is None

    def test_missing_binary_raises(self, tmp_path):
        repo = GitRepository(tmp_path, git_binary=str(tmp_path / "no-such-git"))
        with pytest.raises(GitCommandError):
            list(repo.stream("diff"))
