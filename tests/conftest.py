"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages.
"""

import os
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest
import structlog

# Insert local src directory at the beginning of sys.path
# This ensures that the local loaddefs package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of loaddefs modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("loaddefs"):
        del sys.modules[module_name]


@pytest.fixture(autouse=True)
def _isolate_config(
    tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch
) -> Iterator[None]:
    """Keep the user's global config and LOADDEFS__ env vars out of tests."""
    from loaddefs.config import loader

    monkeypatch.setattr(
        loader, "GLOBAL_CONFIG_PATH", tmp_path_factory.mktemp("home") / "config.yaml"
    )
    for key in [k for k in os.environ if k.startswith("LOADDEFS__")]:
        monkeypatch.delenv(key)
    yield
    structlog.reset_defaults()
