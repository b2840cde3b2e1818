import pytest

from safebackup.backup.file_guard import FileGuard
from safebackup.utils.settings import CONFIG_ENV_VAR


@pytest.fixture(autouse=True)
def _no_user_settings(monkeypatch):
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


@pytest.fixture
def root(tmp_path):
    workdir = tmp_path / "work"
    workdir.mkdir()
    return workdir


@pytest.fixture
def guard(root):
    return FileGuard(root=root)
