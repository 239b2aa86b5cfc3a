"""Thin wrapper around the git binary.

Every core query (read-tree, check-attr, diff) goes through GitRepository so
alternate-index environment variables and error translation live in one place.

git output is bytes, not text: paths and attribute values may be in any
encoding. It is decoded as UTF-8 with ``surrogateescape`` so undecodable bytes
survive as lone surrogates and encode back to the same bytes when a decoded
path is passed to the next git command.
"""

from __future__ import annotations

import logging
import os
import subprocess
import tempfile
from collections.abc import Iterator
from pathlib import Path

from prowners_core.errors import GitCommandError

logger = logging.getLogger(__name__)

_READ_CHUNK = 8192
_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


class GitRepository:
    """A local clone that git commands are run against.

    ``env`` entries passed to a call are merged over the current process
    environment, so callers only supply what they override (GIT_INDEX_FILE).
    """

    def __init__(self, path: str | Path = ".", git_binary: str = "git", timeout: float | None = None):
        self.path = Path(path)
        self.git_binary = git_binary
        self.timeout = timeout

    def __repr__(self) -> str:
        return f"GitRepository({str(self.path)!r})"

    def _command(self, args: tuple[str, ...]) -> list[str]:
        return [self.git_binary, *args]

    @staticmethod
    def _environment(env: dict[str, str] | None) -> dict[str, str] | None:
        if not env:
            return None
        return {**os.environ, **env}

    def run(self, *args: str, env: dict[str, str] | None = None) -> str:
        """Run ``git <args>`` and return its stdout."""
        command = self._command(args)
        logger.debug("Running %s in %s", " ".join(command), self.path)
        try:
            result = subprocess.run(
                command,
                cwd=self.path,
                env=self._environment(env),
                capture_output=True,
                encoding=_ENCODING,
                errors=_ERRORS,
                timeout=self.timeout,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            raise GitCommandError(command, None, str(e)) from e
        if result.returncode != 0:
            raise GitCommandError(command, result.returncode, result.stderr.strip())
        return result.stdout

    def single_line(self, *args: str, env: dict[str, str] | None = None) -> str | None:
        """Run ``git <args>`` and return the first line of output, or None if there was none."""
        lines = self.run(*args, env=env).splitlines()
        return lines[0] if lines else None

    def stream(self, *args: str, env: dict[str, str] | None = None, separator: str = "\0") -> Iterator[str]:
        """Lazily yield separator-delimited records from ``git <args>``.

        Output is read in chunks while git is still running. Closing the
        generator early (or abandoning it) kills the subprocess. A non-zero
        exit is only detectable after EOF and raises GitCommandError then.
        stderr goes to a temporary file so a chatty git never blocks on a
        full pipe while stdout is being consumed.
        """
        command = self._command(args)
        logger.debug("Streaming %s in %s", " ".join(command), self.path)
        errors_file = tempfile.TemporaryFile()
        try:
            proc = subprocess.Popen(
                command,
                cwd=self.path,
                env=self._environment(env),
                stdout=subprocess.PIPE,
                stderr=errors_file,
                encoding=_ENCODING,
                errors=_ERRORS,
            )
        except OSError as e:
            errors_file.close()
            raise GitCommandError(command, None, str(e)) from e

        try:
            buffer = ""
            for chunk in iter(lambda: proc.stdout.read(_READ_CHUNK), ""):
                buffer += chunk
                *records, buffer = buffer.split(separator)
                for record in records:
                    if record:
                        yield record
            if buffer:
                yield buffer
            try:
                returncode = proc.wait(timeout=self.timeout)
            except subprocess.TimeoutExpired as e:
                raise GitCommandError(command, None, str(e)) from e
            if returncode != 0:
                errors_file.seek(0)
                stderr = errors_file.read().decode(_ENCODING, "replace")
                raise GitCommandError(command, returncode, stderr.strip())
        finally:
            if proc.poll() is None:
                proc.kill()
                proc.wait()
            proc.stdout.close()
            errors_file.close()
