"""
Atomic file-write utilities.

Exported networks and summaries are written to a temporary file in the
destination directory and moved into place with ``os.replace()``, so an
interrupted export never leaves a half-written file behind.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

__all__ = ['atomic_write_text', 'atomic_write_json']


def _atomic_write(path: str | os.PathLike, write, encoding: str) -> Path:
    path = Path(path)
    dir_path = path.parent
    tmp_path: str | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w", dir=dir_path, prefix=f".{path.name}.", suffix=".tmp",
            encoding=encoding, delete=False,
        ) as tmp:
            tmp_path = tmp.name
            write(tmp)
        os.replace(tmp_path, path)
    except BaseException:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise
    return path


def atomic_write_text(path: str | os.PathLike, content: str, *, encoding: str = "utf-8") -> Path:
    """Write *content* to *path* via temp-file + rename.

    Parameters
    ----------
    path:
        Destination file path. Its directory must exist.
    content:
        Text content to write.
    encoding:
        Text encoding (default UTF-8).

    Returns
    -------
    The destination path.
    """
    return _atomic_write(path, lambda f: f.write(content), encoding)


def atomic_write_json(path: str | os.PathLike, data: Any, *, indent: int = 2) -> Path:
    """Write *data* as JSON to *path* via temp-file + rename."""
    return _atomic_write(path, lambda f: json.dump(data, f, indent=indent), "utf-8")
