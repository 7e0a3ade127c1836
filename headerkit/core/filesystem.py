"""
File system utilities for HeaderKit.

Safe file operations shared by modules that persist state next to a header
tree (currently the fingerprint cache).
"""

import tempfile
from pathlib import Path
from typing import Union

from headerkit.core.exceptions import HeaderKitError


class FilesystemError(HeaderKitError):
    """Base exception for filesystem operations."""

    pass


def to_posix_relative(path: Path, root: Path) -> str:
    """
    Express path relative to root with forward slashes.

    Header paths are compared as include names (``sys/types.h``), so the
    separator must not depend on the host platform.

    Args:
        path: Path inside root
        root: Directory the result is relative to

    Returns:
        POSIX-style relative path string

    Raises:
        FilesystemError: If path is not inside root
    """
    try:
        return path.relative_to(root).as_posix()
    except ValueError as e:
        raise FilesystemError(f"{path} is not inside {root}") from e


def atomic_write(
    file_path: Union[str, Path], content: Union[str, bytes], encoding: str = "utf-8"
) -> None:
    """
    Write file atomically using temp file + rename.

    If the write fails, the original file (if any) remains unchanged.

    Args:
        file_path: Path to write to
        content: Content to write (string or bytes)
        encoding: Text encoding (used only for string content)

    Example:
        >>> atomic_write('fingerprints.json', '{"entries": {}}')
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    # Temp file in the same directory keeps the rename on one filesystem
    temp_fd, temp_path_str = tempfile.mkstemp(
        dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp"
    )
    temp_path = Path(temp_path_str)

    try:
        if isinstance(content, str):
            with open(temp_fd, "w", encoding=encoding) as f:
                f.write(content)
        else:
            with open(temp_fd, "wb") as f:
                f.write(content)

        temp_path.replace(file_path)

    except Exception:
        try:
            temp_path.unlink(missing_ok=True)
        except OSError:
            pass
        raise
