"""Local state file helpers shared by the cache and the commit queue."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from core.exceptions import StorageError


def atomic_write_text(path: Path, content: str, encoding: str = "utf-8") -> None:
    """Write content to a file atomically using temp file + rename.

    If the process crashes mid-write, the original file is preserved.
    Raises StorageError on any OS failure.
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    except OSError as e:
        raise StorageError(str(path), str(e)) from e
    try:
        with os.fdopen(fd, "w", encoding=encoding) as f:
            f.write(content)
        os.replace(tmp_path, path)
    except OSError as e:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise StorageError(str(path), str(e)) from e


def read_text(path: Path, encoding: str = "utf-8") -> str | None:
    """Return the file body, or None if the file does not exist."""
    try:
        return Path(path).read_text(encoding=encoding)
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as e:
        raise StorageError(str(path), str(e)) from e
