"""Filesystem operations on already-validated paths."""

from dataclasses import dataclass
from pathlib import Path

SIZE_UNITS = ["B", "KB", "MB", "GB", "TB"]


@dataclass
class FileInfo:
    modified_time: str
    size: int


def read_text(path: Path) -> str:
    # newline="" keeps CRLF intact so comparisons against submitted text are exact
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.read()


def write_text(path: Path, content: str) -> None:
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(content)


def save_if_changed(path: Path, content: str) -> bool:
    """Write ``content`` unless the file already holds exactly that text.

    Returns True when a write happened.
    """
    if read_text(path) == content:
        return False
    write_text(path, content)
    return True


def create_empty(path: Path) -> None:
    """Create an empty file, raising FileExistsError if anything is already there."""
    with open(path, "x", encoding="utf-8"):
        pass


def delete(path: Path) -> None:
    path.unlink()


def modification_time(path: Path) -> str:
    return str(int(path.stat().st_mtime))


def file_info(path: Path) -> FileInfo:
    stat = path.stat()
    return FileInfo(modified_time=str(int(stat.st_mtime)), size=stat.st_size)


def format_file_size(size_bytes: int) -> str:
    size = float(size_bytes)
    unit_index = 0
    while size >= 1024 and unit_index < len(SIZE_UNITS) - 1:
        size /= 1024
        unit_index += 1

    if unit_index == 0:
        return f"{size_bytes} B"
    return f"{size:.1f} {SIZE_UNITS[unit_index]}"
