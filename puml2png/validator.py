"""Validation of user-supplied source files and watch directories."""

from __future__ import annotations

import os
from pathlib import Path

from puml2png.watch import SOURCE_EXTENSION


class InvalidSourceError(ValueError):
    """A path given on the command line can't be processed."""


def validate_source_path(file_path: str | None, extension: str = SOURCE_EXTENSION) -> Path:
    """Return ``file_path`` as a Path if it names a readable source file.

    Checks, in order: non-empty, exists, regular file, readable, extension
    (case-insensitive).
    """
    if file_path is None or not file_path.strip():
        raise InvalidSourceError("File path cannot be empty")

    path = Path(file_path)
    if not path.exists():
        raise InvalidSourceError(f"File does not exist: {file_path}")
    if not path.is_file():
        raise InvalidSourceError(f"Path is not a regular file: {file_path}")
    if not os.access(path, os.R_OK):
        raise InvalidSourceError(f"File is not readable: {file_path}")
    if not path.name.lower().endswith(extension.lower()):
        raise InvalidSourceError(f"File must have {extension} extension: {file_path}")

    return path


def resolve_watch_directory(directory: str | None, default: Path) -> Path:
    """Pick the directory to watch: ``directory`` if given, else ``default``."""
    if directory is None or not directory.strip():
        return default

    path = Path(directory)
    if not path.exists():
        raise InvalidSourceError(f"Directory does not exist: {directory}")
    if not path.is_dir():
        raise InvalidSourceError(f"Path is not a directory: {directory}")
    return path
