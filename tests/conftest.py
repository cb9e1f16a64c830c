from __future__ import annotations

import pytest

NOTELY_ENV = (
    "NOTELY_DATA_DIR",
    "NOTELY_DB_NAME",
    "NOTELY_BACKEND",
    "NOTELY_LOG_LEVEL",
    "NOTELY_LOG_FILE",
    "NOTELY_DEFAULT_SORT",
)


@pytest.fixture
def notely_env(tmp_path, monkeypatch):
    """Point every setting at a throwaway data dir."""
    for name in NOTELY_ENV:
        # setenv records the original value, so teardown undoes load_dotenv writes
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    data_dir = tmp_path / "data"
    monkeypatch.setenv("NOTELY_DATA_DIR", str(data_dir))
    return data_dir
