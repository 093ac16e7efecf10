"""Exception types raised while assembling a starter project.

Every failure that aborts a run derives from ``StarterError`` so the CLI can
report it uniformly and exit non-zero.
"""

from __future__ import annotations

from pathlib import Path


class StarterError(Exception):
    """Base class for all fatal starter assembly errors."""


class ParseError(StarterError):
    """Raised when a starter URL or a ``starter.json`` cannot be parsed."""


class DownloadError(StarterError):
    """Raised when the starter archive cannot be fetched or extracted."""

    def __init__(self, message: str, repo: str = ""):
        self.repo = repo
        super().__init__(message)


class FilesystemError(StarterError):
    """Raised when copying or removing project files fails."""

    def __init__(self, message: str, path: str | Path = ""):
        self.path = str(path)
        super().__init__(message)


class ProcessError(StarterError):
    """Raised when a package-manager or git subprocess exits non-zero."""

    def __init__(
        self,
        message: str,
        command: str = "",
        returncode: int | None = None,
        stderr: str = "",
    ):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)
