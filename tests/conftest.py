import pytest

from kansen.store import GameStore


@pytest.fixture
def store(tmp_path):
    return GameStore(f"sqlite:///{tmp_path / 'kansen.db'}")
