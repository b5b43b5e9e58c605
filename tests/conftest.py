import pytest
from fastapi.testclient import TestClient

from database import ReservationStore, get_store
from main import app


@pytest.fixture
def store(tmp_path):
    # Keep tests away from the real data/ folder
    s = ReservationStore(str(tmp_path / "data" / "reservations.json"))
    s.ensure_file()
    return s


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()
