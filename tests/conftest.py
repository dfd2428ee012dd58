"""Shared test fixtures and utilities for pytest."""

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def client(monkeypatch):
    """TestClient for the FastAPI app with API key checks disabled."""
    # pylint: disable=import-outside-toplevel
    from recurrence_engine.main import app

    monkeypatch.delenv("API_KEY", raising=False)
    return TestClient(app)


def post_json(client, path, payload, headers=None):
    """POST ``payload`` and return (status_code, decoded JSON body)."""
    resp = client.post(path, json=payload, headers=headers or {})
    return resp.status_code, resp.json()
