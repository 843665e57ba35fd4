import pytest
from fastapi.testclient import TestClient

from gamekit.core import db as core_db
from gamekit.modules.builder import router as builder_router
from gamekit.modules.sheets import router as sheets_router


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{(tmp_path / 'app.db').as_posix()}")
    monkeypatch.setenv("STORAGE_ROOT", str(tmp_path / "storage"))
    monkeypatch.delenv("CLIPBOARD_ENABLED", raising=False)
    core_db.reset_engine()
    yield
    builder_router.sessions.clear()
    sheets_router.basic_sheets.clear()
    core_db.reset_engine()


@pytest.fixture
def storage_root(tmp_path):
    return tmp_path / "storage"


@pytest.fixture
def client():
    from gamekit.main import app

    with TestClient(app) as c:
        yield c


class SequenceRandom:
    """Stand-in for random.Random that replays fixed draws."""

    def __init__(self, draws):
        self._draws = list(draws)

    def random(self):
        return self._draws.pop(0)


@pytest.fixture
def seq_random():
    return SequenceRandom
