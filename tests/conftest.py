"""
Shared fixtures for the generator, API and remote-client tests.

Generators are pure functions of (seed, params), so most tests simply render
twice and compare. The API fixtures pin the bearer key through the
environment; the remote fixtures never touch the network.
"""

import os
import sys

import pytest

# Ensure repo root is on sys.path
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from spritegen.core import load_config
from spritegen.raster.prng import Mulberry32

API_KEY = "test-key-123456"


@pytest.fixture(scope="session")
def test_config():
    """Load test configuration"""
    return load_config()


@pytest.fixture
def prng():
    return Mulberry32(1234)


@pytest.fixture
def api_env(monkeypatch):
    """Set the API key the dispatch layer checks against"""
    monkeypatch.setenv("SPRITEGEN_API_KEY", API_KEY)
    return {"SPRITEGEN_API_KEY": API_KEY}


@pytest.fixture
def auth_headers(api_env):
    return {"Authorization": f"Bearer {API_KEY}"}


@pytest.fixture
def client(api_env):
    """FastAPI TestClient with the lifespan running"""
    from fastapi.testclient import TestClient

    from fastapi_app import app

    with TestClient(app) as c:
        yield c


@pytest.fixture
def no_sleep(monkeypatch):
    """Make remote polling loops spin without waiting"""
    import spritegen.remote.flux as flux

    monkeypatch.setattr(flux.time, "sleep", lambda s: None)
