import logging
import os

import pytest

from utils.config_loader import load_config, ENV_PREFIX


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in list(os.environ):
        if name.startswith(ENV_PREFIX):
            monkeypatch.delenv(name)


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def make_file(tmp_path):
    """Create a file below tmp_path, with parent folders, and return its path."""
    def _make(relative, content=b"audio"):
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return path
    return _make
