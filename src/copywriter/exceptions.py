from __future__ import annotations

from pathlib import Path


class CopywriterError(Exception):
    """Base class for errors that abort a run."""


class ProjectFileError(CopywriterError):
    """A build descriptor could not be parsed."""

    def __init__(self, path: Path, line: int, reason: str) -> None:
        super().__init__(f"{path}:{line}: {reason}")
        self.path = path
        self.line = line
        self.reason = reason
