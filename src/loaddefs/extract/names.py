"""Load names: the module name a source file is registered under."""

from __future__ import annotations

import os
import re
from pathlib import Path

from loaddefs.config.constants import SUBDIRS_MARKER

_LISP_SUFFIX_RE = re.compile(r"\.elc?(?:\.|\Z)")


def file_load_name(path: str | Path, outfile: str | Path) -> str:
    """Module name of ``path`` as seen from the manifest ``outfile``.

    Leading directory components are dropped while walking down from the
    manifest's directory, until a directory carrying a ``subdirs.el``
    marker is reached; from there on the components are kept.
    """
    path = Path(path)
    directory = Path(outfile).parent
    try:
        relative = os.path.relpath(path, directory)
    except ValueError:
        # Different drives on Windows.
        relative = path.name

    parts = list(Path(relative).parts)
    while len(parts) > 1:
        candidate = directory / parts[0]
        if (candidate / SUBDIRS_MARKER).exists():
            break
        directory = candidate
        parts.pop(0)

    name = "/".join(parts) if parts else path.name
    m = _LISP_SUFFIX_RE.search(name)
    return name[: m.start()] if m else name
