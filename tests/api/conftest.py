"""
Shared fixtures for API tests.

Every app gets explicit Settings pointing at a fresh storage root, so
tests never read the developer's environment or .env for anything that
matters.
"""

from pathlib import Path
from typing import Callable

import pytest
from fastapi.testclient import TestClient

from buckets.config.settings import Settings
from buckets.main import create_app


@pytest.fixture
def storage_root(tmp_path) -> Path:
    return tmp_path / "buckets"


@pytest.fixture
def make_client(storage_root) -> Callable[..., TestClient]:
    """Build a TestClient for an app with the given setting overrides."""

    def _make(**overrides) -> TestClient:
        settings = Settings(bucket_path=str(storage_root), **overrides)
        return TestClient(create_app(settings))

    return _make


@pytest.fixture
def client(make_client) -> TestClient:
    """An app that requires no tokens."""
    return make_client()
