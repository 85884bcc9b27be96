import os

import pytest

from kioku.infrastructure.adapters.json_store import JsonFileMasteryStore


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keeps KIOKU_* variables from the developer's shell out of tests."""
    for key in list(os.environ):
        if key.startswith("KIOKU_"):
            monkeypatch.delenv(key)


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Mocking HOME to a temp directory to isolate config/store
    monkeypatch.setenv("HOME", str(home))
    return home


@pytest.fixture
def store_file(tmp_path):
    return tmp_path / "mastery.json"


@pytest.fixture
def json_store(store_file):
    return JsonFileMasteryStore(store_file)
