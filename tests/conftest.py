import os

# rate limiting uit tijdens tests (100 req / 15 min is snel op)
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient

from wilaya_api.main import app


@pytest.fixture(scope="session")
def client():
    return TestClient(app)


@pytest.fixture
def estimate_body():
    return {"wilaya": "Alger", "weight": 1.5}
