"""Writing manifests to disk."""

from __future__ import annotations

import hashlib
import os
import tempfile
from pathlib import Path


def _hash_content(content: str) -> str:
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def write_if_changed(path: str | Path, content: str) -> bool:
    """Replace ``path`` with ``content`` unless it already holds exactly that.

    The new content goes to a temporary file in the same directory first,
    which then replaces the destination, so readers never see a partial
    manifest.

    Returns:
        True if the file was written.
    """
    path = Path(path)
    try:
        if _hash_content(path.read_text(encoding="utf-8")) == _hash_content(content):
            return False
    except (FileNotFoundError, UnicodeDecodeError):
        pass

    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        "w",
        encoding="utf-8",
        newline="\n",
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
    ) as tmp:
        tmp.write(content)
        tmp_path = Path(tmp.name)
    try:
        os.replace(tmp_path, path)
    finally:
        tmp_path.unlink(missing_ok=True)
    return True
