"""Confine every filesystem access to the configured root directory.

Request paths are untrusted. They are joined onto the root *before*
canonicalization, so ``..`` segments and symlinks are resolved to their
real target, and containment is then checked component by component.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


class SandboxError(Exception):
    """Base class for rejected request paths."""


class PathEscapedError(SandboxError):
    def __init__(self, relative: str):
        super().__init__("Path outside base directory")
        self.relative = relative


class PathNotFoundError(SandboxError):
    def __init__(self, relative: str):
        super().__init__("Path does not exist")
        self.relative = relative


class NotAFileError(SandboxError):
    def __init__(self, relative: str):
        super().__init__("Path is not a file")
        self.relative = relative


class NotADirectoryPathError(SandboxError):
    def __init__(self, relative: str):
        super().__init__("Path is not a directory")
        self.relative = relative


@dataclass
class DirectoryEntry:
    name: str
    is_directory: bool
    path: str


class PathSandbox:
    """Resolves request paths against a fixed, canonical root."""

    def __init__(self, root: Path | str):
        self.root = Path(root).resolve(strict=True)
        if not self.root.is_dir():
            raise NotADirectoryError(f"Sandbox root is not a directory: {self.root}")

    def _resolve(self, relative: str) -> Path:
        joined = self.root / relative if relative else self.root
        try:
            canonical = joined.resolve()
        except (OSError, RuntimeError, ValueError):
            # symlink loops, embedded NUL bytes and the like
            raise PathNotFoundError(relative)

        if not canonical.is_relative_to(self.root):
            logger.warning("Directory traversal attempt detected: %r", relative)
            raise PathEscapedError(relative)

        if not canonical.exists():
            raise PathNotFoundError(relative)
        return canonical

    def validate_file(self, relative: str) -> Path:
        canonical = self._resolve(relative)
        if not canonical.is_file():
            raise NotAFileError(relative)
        return canonical

    def validate_directory(self, relative: str) -> Path:
        canonical = self._resolve(relative)
        if not canonical.is_dir():
            raise NotADirectoryPathError(relative)
        return canonical

    def list_directory(self, relative: str) -> list[DirectoryEntry]:
        """List a directory, directories first, skipping dot-prefixed entries.

        Hiding dot entries here is cosmetic; a direct request for a hidden
        file goes through validate_file like any other path.
        """
        directory = self.validate_directory(relative)
        prefix = relative.strip("/")
        entries = []
        with os.scandir(directory) as it:
            for entry in it:
                if entry.name.startswith("."):
                    continue
                entries.append(
                    DirectoryEntry(
                        name=entry.name,
                        is_directory=entry.is_dir(),
                        path=f"{prefix}/{entry.name}" if prefix else entry.name,
                    )
                )
        entries.sort(key=lambda e: (not e.is_directory, e.name.lower()))
        return entries
