import os
import sys
import pytest
from fastapi.testclient import TestClient

# Ensure backend modules are importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'backend'))

from main import app


@pytest.fixture(scope="function")
def client():
    """
    TestClient with an empty app config and a clean result cache.
    """
    app.state.app_config = {}
    app.state.latest_results = {}

    with TestClient(app) as c:
        # Lifespan reloads config.json, keep tests independent of it
        app.state.app_config = {}
        yield c

    app.state.latest_results = {}
